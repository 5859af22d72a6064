"""Tests for YAML preference loading."""

from pathlib import Path

import pytest

from transmux.config.preferences import ConversionPreferences, TrimMode
from transmux.config.preferences_loader import (
    PreferencesValidationError,
    load_preferences,
    parse_preferences,
)

FULL_PREFERENCES = """
video_codec: libx265
audio_codec: libopus
output_container: .MKV
video:
  use_slider: true
  value: 26
  aspect_ratio:
    is_being_edited: true
    width: 16
    height: 9
    rotation: 0.5
  fps:
    keep_fps: false
    input_fps: 24
    output_fps: 30
  filters:
    deinterlace: true
    crop:
      width: 1280
      height: 720
      position_x: center
audio:
  use_slider: true
  value: 5
  channels: 2
  filters:
    volume_db: -3
    noise_removal:
      noise: 12
      floor: -50
trim:
  mode: multiple
  multiple:
    text: |
      0:00 Intro
      1:30 Verse
    smart_metadata: true
    start_from: 3
"""


class TestParsePreferences:
    """Tests for parse_preferences."""

    def test_empty_is_default(self) -> None:
        """None and {} both produce default preferences."""
        assert parse_preferences(None) == ConversionPreferences()
        assert parse_preferences({}) == ConversionPreferences()

    def test_not_a_mapping(self) -> None:
        """A top-level list is rejected."""
        with pytest.raises(PreferencesValidationError, match="mapping"):
            parse_preferences(["libx264"])  # type: ignore[arg-type]

    def test_unknown_field(self) -> None:
        """Unknown keys are rejected with their location."""
        with pytest.raises(PreferencesValidationError) as exc_info:
            parse_preferences({"video": {"bitrate": "5M"}})
        assert exc_info.value.field == "video.bitrate"

    def test_invalid_trim_mode(self) -> None:
        """Trim mode must be a known name."""
        with pytest.raises(PreferencesValidationError, match="trim.mode"):
            parse_preferences({"trim": {"mode": "some"}})

    def test_numbers_become_strings(self) -> None:
        """Bare numbers are accepted where strings are expected."""
        prefs = parse_preferences(
            {"video": {"value": 23}, "trim": {"start": 90, "end": 120.5}}
        )
        assert prefs.video.value == "23"
        assert prefs.trim.start == "90"
        assert prefs.trim.end == "120.5"

    def test_container_normalized(self) -> None:
        """The output container loses dots and case."""
        assert parse_preferences({"output_container": ".MP4"}).output_container == (
            "mp4"
        )
        assert parse_preferences({"output_container": "  "}).output_container is None

    def test_invalid_container(self) -> None:
        """Containers must be a bare extension."""
        with pytest.raises(PreferencesValidationError):
            parse_preferences({"output_container": "mp4/../x"})

    def test_non_positive_fps(self) -> None:
        """Frame rates must be positive."""
        with pytest.raises(PreferencesValidationError):
            parse_preferences({"video": {"fps": {"input_fps": 0}}})


class TestLoadPreferences:
    """Tests for load_preferences."""

    def test_full_file(self, preferences_file) -> None:
        """Every section maps onto the preference dataclasses."""
        prefs = load_preferences(preferences_file(FULL_PREFERENCES))

        assert prefs.video_codec == "libx265"
        assert prefs.output_container == "mkv"
        assert prefs.video.value == "26"
        assert prefs.video.aspect_ratio.rotation == 0.5
        assert prefs.video.fps.keep_fps is False
        assert prefs.video.filters.deinterlace is True
        assert prefs.video.filters.crop.position_x == "center"
        assert prefs.audio.value == "5"
        assert prefs.audio.channels == 2
        assert prefs.audio.filters.noise_removal.floor == -50
        assert prefs.trim.mode is TrimMode.MULTIPLE
        assert prefs.trim.multiple.text == "0:00 Intro\n1:30 Verse\n"
        assert prefs.trim.multiple.start_from == 3

    def test_empty_file(self, preferences_file) -> None:
        """An empty file means all defaults."""
        assert load_preferences(preferences_file("")) == ConversionPreferences()

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_preferences(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, preferences_file) -> None:
        """Malformed YAML raises PreferencesValidationError."""
        with pytest.raises(PreferencesValidationError, match="YAML"):
            load_preferences(preferences_file("video: [unclosed\n"))
