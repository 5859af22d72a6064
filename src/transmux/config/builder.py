"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building AppConfig by composing
multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from transmux.config.env import EnvReader
from transmux.config.models import (
    AppConfig,
    EngineConfig,
    HardwareProfile,
    HardwareSettings,
    LoggingConfig,
)

logger = logging.getLogger(__name__)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Engine config
    ffmpeg_path: Path | None = None
    work_directory: Path | None = None
    timeout: float | None = None
    exit_after_segment: bool | None = None

    # Hardware config
    hardware_profile: HardwareProfile | None = None
    hardware_init_args: tuple[str, ...] | None = None
    audio_toolbox: bool | None = None

    # Logging config
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds AppConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        config = builder.build()
    """

    def __init__(self) -> None:
        """Initialize the builder with no values set."""
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply configuration source, overriding existing values.

        Args:
            source: Configuration source to apply.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, name: str, default: Any) -> Any:
        return self._values.get(name, default)

    def build(self) -> AppConfig:
        """Build the final AppConfig from accumulated values.

        Returns:
            AppConfig with all layered values applied.

        Raises:
            ValueError: If a resulting section fails validation.
        """
        engine_defaults = EngineConfig()
        hardware_defaults = HardwareSettings()
        logging_defaults = LoggingConfig()

        return AppConfig(
            engine=EngineConfig(
                ffmpeg_path=self._get("ffmpeg_path", engine_defaults.ffmpeg_path),
                work_directory=self._get(
                    "work_directory", engine_defaults.work_directory
                ),
                timeout=self._get("timeout", engine_defaults.timeout),
                exit_after_segment=self._get(
                    "exit_after_segment", engine_defaults.exit_after_segment
                ),
            ),
            hardware=HardwareSettings(
                profile=self._get("hardware_profile", hardware_defaults.profile),
                init_args=self._get(
                    "hardware_init_args", hardware_defaults.init_args
                ),
                audio_toolbox=self._get(
                    "audio_toolbox", hardware_defaults.audio_toolbox
                ),
            ),
            logging=LoggingConfig(
                level=self._get("logging_level", logging_defaults.level),
                file=self._get("logging_file", logging_defaults.file),
                format=self._get("logging_format", logging_defaults.format),
                include_stderr=self._get(
                    "logging_include_stderr", logging_defaults.include_stderr
                ),
                max_bytes=self._get("logging_max_bytes", logging_defaults.max_bytes),
                backup_count=self._get(
                    "logging_backup_count", logging_defaults.backup_count
                ),
            ),
        )


def _parse_profile(value: str | None, origin: str) -> HardwareProfile | None:
    """Parse a hardware profile name, logging and ignoring unknown names."""
    if value is None:
        return None
    try:
        return HardwareProfile(value.strip().casefold())
    except ValueError:
        valid = ", ".join(p.value for p in HardwareProfile)
        logger.warning(
            "Unknown hardware profile %r from %s (expected one of: %s)",
            value,
            origin,
            valid,
        )
        return None


def _optional_path(value: Any) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value)).expanduser()


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create a ConfigSource from a parsed config file.

    Expected layout:

        [engine]
        ffmpeg_path = "/usr/bin/ffmpeg"
        work_directory = "/dev/shm/transmux"
        timeout = 3600
        exit_after_segment = false

        [hardware]
        profile = "vaapi"
        init_args = ["-vaapi_device", "/dev/dri/renderD128"]
        audio_toolbox = false

        [logging]
        level = "info"
        format = "text"

    Args:
        file_config: Parsed TOML dict.

    Returns:
        ConfigSource with values from the file.
    """
    engine = file_config.get("engine", {})
    hardware = file_config.get("hardware", {})
    logging_section = file_config.get("logging", {})

    init_args = hardware.get("init_args")
    timeout = engine.get("timeout")

    return ConfigSource(
        ffmpeg_path=_optional_path(engine.get("ffmpeg_path")),
        work_directory=_optional_path(engine.get("work_directory")),
        timeout=float(timeout) if timeout is not None else None,
        exit_after_segment=engine.get("exit_after_segment"),
        hardware_profile=_parse_profile(hardware.get("profile"), "config file"),
        hardware_init_args=(
            tuple(str(arg) for arg in init_args) if init_args is not None else None
        ),
        audio_toolbox=hardware.get("audio_toolbox"),
        logging_level=logging_section.get("level"),
        logging_file=_optional_path(logging_section.get("file")),
        logging_format=logging_section.get("format"),
        logging_include_stderr=logging_section.get("include_stderr"),
        logging_max_bytes=logging_section.get("max_bytes"),
        logging_backup_count=logging_section.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create a ConfigSource from TRANSMUX_* environment variables.

    Args:
        reader: EnvReader to read values from.

    Returns:
        ConfigSource with values from the environment.
    """
    return ConfigSource(
        ffmpeg_path=reader.get_path("TRANSMUX_FFMPEG_PATH"),
        work_directory=reader.get_path("TRANSMUX_WORK_DIR", must_exist=False),
        timeout=reader.get_float("TRANSMUX_TIMEOUT"),
        exit_after_segment=reader.get_bool("TRANSMUX_EXIT_AFTER_SEGMENT"),
        hardware_profile=_parse_profile(
            reader.get_str("TRANSMUX_HW_PROFILE"), "TRANSMUX_HW_PROFILE"
        ),
        hardware_init_args=reader.get_args("TRANSMUX_HW_INIT_ARGS"),
        audio_toolbox=reader.get_bool("TRANSMUX_HW_AUDIO_TOOLBOX"),
        logging_level=reader.get_str("TRANSMUX_LOG_LEVEL"),
        logging_file=reader.get_path("TRANSMUX_LOG_FILE", must_exist=False),
        logging_format=reader.get_str("TRANSMUX_LOG_FORMAT"),
    )
