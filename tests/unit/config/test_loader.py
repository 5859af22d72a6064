"""Tests for application config loading and layering."""

from pathlib import Path

import pytest

from transmux.config.builder import ConfigBuilder, ConfigSource, source_from_file
from transmux.config.env import EnvReader
from transmux.config.loader import ConfigParseError, get_config, load_config_file
from transmux.config.models import HardwareProfile

CONFIG_TOML = """
[engine]
ffmpeg_path = "/opt/ffmpeg/bin/ffmpeg"
timeout = 600
exit_after_segment = true

[hardware]
profile = "vaapi"
init_args = ["-vaapi_device", "/dev/dri/renderD128"]

[logging]
level = "debug"
format = "json"
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """A config file with every section set."""
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)
    return path


class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file yields an empty mapping."""
        assert load_config_file(tmp_path / "none.toml") == {}

    def test_parses_toml(self, config_file: Path) -> None:
        """Sections are returned as nested dicts."""
        data = load_config_file(config_file)
        assert data["engine"]["timeout"] == 600
        assert data["hardware"]["profile"] == "vaapi"

    def test_invalid_toml_lenient(self, tmp_path: Path) -> None:
        """Parse errors are logged and ignored by default."""
        path = tmp_path / "bad.toml"
        path.write_text("[engine\n")
        assert load_config_file(path) == {}

    def test_invalid_toml_strict(self, tmp_path: Path) -> None:
        """Parse errors raise in strict mode."""
        path = tmp_path / "bad.toml"
        path.write_text("[engine\n")
        with pytest.raises(ConfigParseError):
            load_config_file(path, strict=True)


class TestGetConfig:
    """Tests for get_config precedence."""

    def test_defaults(self, tmp_path: Path) -> None:
        """No file and no environment yields defaults."""
        config = get_config(tmp_path / "none.toml", env_reader=EnvReader(env={}))
        assert config.engine.ffmpeg_path is None
        assert config.engine.timeout is None
        assert config.hardware.profile is HardwareProfile.NONE
        assert config.logging.level == "info"

    def test_file_values(self, config_file: Path) -> None:
        """File values populate every section."""
        config = get_config(config_file, env_reader=EnvReader(env={}))
        assert config.engine.ffmpeg_path == Path("/opt/ffmpeg/bin/ffmpeg")
        assert config.engine.timeout == 600.0
        assert config.engine.exit_after_segment is True
        assert config.hardware.profile is HardwareProfile.VAAPI
        assert config.hardware.init_args == ("-vaapi_device", "/dev/dri/renderD128")
        assert config.logging.format == "json"

    def test_environment_wins(self, config_file: Path) -> None:
        """Environment variables override the file."""
        env = EnvReader(
            env={
                "TRANSMUX_TIMEOUT": "30",
                "TRANSMUX_HW_PROFILE": "NVIDIA",
                "TRANSMUX_LOG_LEVEL": "warning",
            }
        )
        config = get_config(config_file, env_reader=env)
        assert config.engine.timeout == 30.0
        assert config.hardware.profile is HardwareProfile.NVIDIA
        assert config.logging.level == "warning"
        # untouched by the environment
        assert config.engine.exit_after_segment is True

    def test_unknown_profile_is_ignored(self, tmp_path: Path) -> None:
        """An unknown profile name keeps the lower-precedence value."""
        env = EnvReader(env={"TRANSMUX_HW_PROFILE": "quantum"})
        config = get_config(tmp_path / "none.toml", env_reader=env)
        assert config.hardware.profile is HardwareProfile.NONE


class TestConfigBuilder:
    """Tests for ConfigBuilder layering."""

    def test_none_does_not_override(self) -> None:
        """None values in a later source leave earlier values alone."""
        builder = ConfigBuilder()
        builder.apply(ConfigSource(timeout=10.0, audio_toolbox=True))
        builder.apply(ConfigSource(timeout=None, audio_toolbox=False))
        config = builder.build()
        assert config.engine.timeout == 10.0
        assert config.hardware.audio_toolbox is False

    def test_invalid_timeout(self) -> None:
        """Validation errors surface from build()."""
        builder = ConfigBuilder()
        builder.apply(ConfigSource(timeout=-1.0))
        with pytest.raises(ValueError, match="timeout"):
            builder.build()

    def test_empty_paths_are_unset(self) -> None:
        """Empty strings in the file mean "not configured"."""
        source = source_from_file({"engine": {"ffmpeg_path": "", "work_directory": ""}})
        assert source.ffmpeg_path is None
        assert source.work_directory is None
