"""Conversion execution: command building and orchestration.

This package turns conversion preferences into engine argument lists and
runs them through an Engine:

- filters: filter-graph clause composition
- hardware: hardware acceleration arguments and quality derivation
- command / audio: base argument sequence assembly
- engine: the Engine protocol and the ffmpeg subprocess engine
- handler: ConversionHandler, the multi-step orchestrator
"""

from transmux.executor.audio import build_audio_args
from transmux.executor.command import build_command, build_video_args
from transmux.executor.engine import Engine, EngineResult, FFmpegEngine
from transmux.executor.filters import (
    FilterSpec,
    compose_filters,
    elaborate_filter,
    normalize_filter,
)
from transmux.executor.handler import ConversionHandler
from transmux.executor.hardware import (
    HardwareArgs,
    derive_quality,
    resolve_hardware_args,
    resolve_video_codec,
)
from transmux.executor.types import (
    ArtifactChain,
    InputFile,
    OperationFlags,
    OutputDescriptor,
    Revision,
    artifact_name,
    placeholder_output,
)

__all__ = [
    # Commands
    "build_audio_args",
    "build_command",
    "build_video_args",
    # Engine
    "Engine",
    "EngineResult",
    "FFmpegEngine",
    # Filters
    "FilterSpec",
    "compose_filters",
    "elaborate_filter",
    "normalize_filter",
    # Orchestration
    "ConversionHandler",
    # Hardware
    "HardwareArgs",
    "derive_quality",
    "resolve_hardware_args",
    "resolve_video_codec",
    # Types
    "ArtifactChain",
    "InputFile",
    "OperationFlags",
    "OutputDescriptor",
    "Revision",
    "artifact_name",
    "placeholder_output",
]
