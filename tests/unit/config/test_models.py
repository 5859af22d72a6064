"""Tests for application config models."""

from pathlib import Path

import pytest

from transmux.config.models import EngineConfig, LoggingConfig


class TestLoggingConfig:
    """Tests for LoggingConfig."""

    def test_rejects_unknown_level(self) -> None:
        """Only the four supported levels are accepted."""
        with pytest.raises(ValueError, match="level"):
            LoggingConfig(level="verbose")

    def test_rejects_unknown_format(self) -> None:
        """Only text and json are accepted."""
        with pytest.raises(ValueError, match="format"):
            LoggingConfig(format="xml")

    def test_overrides_replace_set_values(self, tmp_path: Path) -> None:
        """Given values replace their fields."""
        base = LoggingConfig(level="warning", max_bytes=1024)
        result = base.with_overrides(
            level="debug", file=tmp_path / "t.log", format="json"
        )
        assert result.level == "debug"
        assert result.file == tmp_path / "t.log"
        assert result.format == "json"
        assert result.max_bytes == 1024

    def test_none_keeps_base_values(self, tmp_path: Path) -> None:
        """None leaves the config file's value in place."""
        base = LoggingConfig(level="error", file=tmp_path / "t.log", format="json")
        assert base.with_overrides() == base
        assert base.with_overrides(level=None, file=None, format=None) == base

    def test_overrides_are_validated(self) -> None:
        """An invalid override is rejected like an invalid config value."""
        with pytest.raises(ValueError, match="level"):
            LoggingConfig().with_overrides(level="loud")

    def test_base_is_unchanged(self) -> None:
        """with_overrides returns a copy."""
        base = LoggingConfig()
        base.with_overrides(level="debug")
        assert base.level == "info"


class TestEngineConfig:
    """Tests for EngineConfig."""

    @pytest.mark.parametrize("timeout", [0, -5])
    def test_rejects_non_positive_timeout(self, timeout: float) -> None:
        """Timeouts must be positive."""
        with pytest.raises(ValueError, match="timeout"):
            EngineConfig(timeout=timeout)
