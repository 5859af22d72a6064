"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. Environment variables (TRANSMUX_*)
2. Config file (~/.transmux/config.toml)
3. Default values

Environment variables:
- TRANSMUX_CONFIG_PATH: Path to config file (overrides default location)
- TRANSMUX_FFMPEG_PATH: Path to ffmpeg executable
- TRANSMUX_WORK_DIR: Working directory for staged inputs and artifacts
- TRANSMUX_TIMEOUT: Per-invocation timeout in seconds
- TRANSMUX_EXIT_AFTER_SEGMENT: Restart the engine between segments
- TRANSMUX_HW_PROFILE: Hardware profile (none, nvidia, intel, amd, apple, vaapi)
- TRANSMUX_HW_INIT_ARGS: Engine initialization arguments (shell-quoted)
- TRANSMUX_HW_AUDIO_TOOLBOX: Prefer AudioToolbox audio encoders
- TRANSMUX_LOG_LEVEL / TRANSMUX_LOG_FILE / TRANSMUX_LOG_FORMAT: Logging
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from transmux.config.builder import ConfigBuilder, source_from_env, source_from_file
from transmux.config.env import EnvReader
from transmux.config.models import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".transmux"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


class ConfigParseError(Exception):
    """Raised when a config file cannot be parsed in strict mode."""


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by TRANSMUX_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("TRANSMUX_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise ConfigParseError on parse failures.
                If False (default), return empty dict on errors.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigParseError: When strict=True and the file cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with open(path, "rb") as f:
            config: dict[str, Any] = tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        if strict:
            raise ConfigParseError(f"Failed to parse {path}: {e}") from e
        logger.warning("Failed to parse config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config file: %s", path)
    return config


def get_config(
    config_path: Path | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> AppConfig:
    """Get transmux configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides TRANSMUX_CONFIG_PATH).
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise ConfigParseError on config file parse failures.

    Returns:
        AppConfig with merged configuration.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(config_path, strict=strict)

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config))
    builder.apply(source_from_env(reader))
    return builder.build()
