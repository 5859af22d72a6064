"""Configuration data models for transmux.

These dataclasses hold application settings: where the engine lives, which
hardware acceleration profile is active, and how logging is set up. They
are distinct from ConversionPreferences, which describe one conversion.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path


class HardwareProfile(Enum):
    """Hardware acceleration backend for video encoding."""

    NONE = "none"  # Software encoding only
    NVIDIA = "nvidia"  # NVENC
    INTEL = "intel"  # Quick Sync Video
    AMD = "amd"  # AMF
    APPLE = "apple"  # VideoToolbox
    VAAPI = "vaapi"  # VA-API (Linux AMD/Intel)


@dataclass(frozen=True)
class HardwareSettings:
    """Hardware acceleration settings."""

    profile: HardwareProfile = HardwareProfile.NONE
    """Active hardware profile."""

    init_args: tuple[str, ...] = ()
    """Engine initialization arguments placed before any input, e.g.
    ("-vaapi_device", "/dev/dri/renderD128")."""

    audio_toolbox: bool = False
    """Prefer the OS-native (AudioToolbox) AAC/ALAC encoders when available."""

    def __post_init__(self) -> None:
        """Validate hardware settings."""
        if not isinstance(self.profile, HardwareProfile):
            raise ValueError(
                f"profile must be a HardwareProfile enum value, "
                f"got {type(self.profile).__name__}: {self.profile}"
            )


@dataclass
class EngineConfig:
    """Configuration for the ffmpeg engine."""

    # Path to ffmpeg (None = search PATH)
    ffmpeg_path: Path | None = None

    # Working directory for staged inputs and artifacts (None = temp dir)
    work_directory: Path | None = None

    # Per-invocation timeout in seconds (None = no limit)
    timeout: float | None = None

    # Restart the engine between segments of a multi-segment job
    exit_after_segment: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )

    def with_overrides(
        self,
        *,
        level: str | None = None,
        file: Path | None = None,
        format: str | None = None,
    ) -> LoggingConfig:
        """Return a copy with every non-None argument replacing its field."""
        changes = {
            name: value
            for name, value in (
                ("level", level),
                ("file", file),
                ("format", format),
            )
            if value is not None
        }
        return replace(self, **changes)


@dataclass
class AppConfig:
    """Main configuration container for transmux."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    hardware: HardwareSettings = field(default_factory=HardwareSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
