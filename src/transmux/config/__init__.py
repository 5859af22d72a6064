"""Configuration management for transmux.

Two kinds of configuration live here:

- Application settings (AppConfig): engine location, hardware profile and
  logging, loaded from ~/.transmux/config.toml and TRANSMUX_* environment
  variables (environment wins).
- Conversion preferences (ConversionPreferences): what one conversion should
  do, loaded from YAML files and validated with Pydantic.
"""

from transmux.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from transmux.config.env import EnvReader
from transmux.config.loader import (
    ConfigParseError,
    get_config,
    get_default_config_path,
    load_config_file,
)
from transmux.config.models import (
    AppConfig,
    EngineConfig,
    HardwareProfile,
    HardwareSettings,
    LoggingConfig,
)
from transmux.config.preferences import ConversionPreferences, TrimMode
from transmux.config.preferences_loader import (
    PreferencesValidationError,
    load_preferences,
    parse_preferences,
)

__all__ = [
    # Models
    "AppConfig",
    "EngineConfig",
    "HardwareProfile",
    "HardwareSettings",
    "LoggingConfig",
    # Loader
    "ConfigParseError",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    # Layering
    "EnvReader",
    "ConfigBuilder",
    "ConfigSource",
    "source_from_env",
    "source_from_file",
    # Preferences
    "ConversionPreferences",
    "TrimMode",
    "PreferencesValidationError",
    "load_preferences",
    "parse_preferences",
]
