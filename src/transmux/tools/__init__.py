"""Engine tooling: encoder capability tables and progress parsing."""

from transmux.tools.capabilities import (
    COPY_EXTENSION,
    COPY_MARKER,
    DEFAULT_CAPABILITIES,
    CodecCapability,
    EncoderCapabilities,
    MediaKind,
    is_stream_copy,
)
from transmux.tools.ffmpeg_progress import FFmpegProgress, parse_stderr_progress

__all__ = [
    "COPY_EXTENSION",
    "COPY_MARKER",
    "DEFAULT_CAPABILITIES",
    "CodecCapability",
    "EncoderCapabilities",
    "FFmpegProgress",
    "MediaKind",
    "is_stream_copy",
    "parse_stderr_progress",
]
