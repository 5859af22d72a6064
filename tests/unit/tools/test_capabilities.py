"""Tests for encoder capability lookup."""

from __future__ import annotations

from transmux.config.models import HardwareProfile
from transmux.tools.capabilities import (
    COPY_EXTENSION,
    DEFAULT_CAPABILITIES,
    CodecCapability,
    EncoderCapabilities,
    MediaKind,
    is_stream_copy,
)


class TestDefaultCapabilities:
    """Tests for the default capability tables."""

    def test_video_extension(self) -> None:
        """x265 should produce mp4."""
        capability = DEFAULT_CAPABILITIES.get(MediaKind.VIDEO, "libx265")
        assert capability is not None
        assert capability.extension == "mp4"

    def test_hardware_codec_per_profile(self) -> None:
        """x264 should map to each vendor's H.264 encoder."""
        capability = DEFAULT_CAPABILITIES.get(MediaKind.VIDEO, "libx264")
        assert capability is not None
        assert capability.hardware_codec(HardwareProfile.NVIDIA) == "h264_nvenc"
        assert capability.hardware_codec(HardwareProfile.INTEL) == "h264_qsv"
        assert capability.hardware_codec(HardwareProfile.AMD) == "h264_amf"
        assert capability.hardware_codec(HardwareProfile.APPLE) == "h264_videotoolbox"
        assert capability.hardware_codec(HardwareProfile.VAAPI) == "h264_vaapi"
        assert capability.hardware_codec(HardwareProfile.NONE) is None

    def test_software_only_codec_has_no_hardware(self) -> None:
        """Codecs without a hardware encoder return None."""
        capability = DEFAULT_CAPABILITIES.get(MediaKind.VIDEO, "libxvid")
        assert capability is not None
        assert capability.hardware_codec(HardwareProfile.NVIDIA) is None

    def test_lossless_audio(self) -> None:
        """FLAC is lossless, AAC is not."""
        flac = DEFAULT_CAPABILITIES.get(MediaKind.AUDIO, "flac")
        aac = DEFAULT_CAPABILITIES.get(MediaKind.AUDIO, "aac")
        assert flac is not None and flac.is_lossless
        assert aac is not None and not aac.is_lossless

    def test_native_audio_encoders(self) -> None:
        """AAC and ALAC have AudioToolbox encoders."""
        aac = DEFAULT_CAPABILITIES.get(MediaKind.AUDIO, "aac")
        alac = DEFAULT_CAPABILITIES.get(MediaKind.AUDIO, "alac")
        assert aac.native_audio == "aac_at"
        assert alac.native_audio == "alac_at"

    def test_copy_entries_use_sentinel_extension(self) -> None:
        """Stream-copy selections keep the input's extension."""
        video = DEFAULT_CAPABILITIES.get(MediaKind.VIDEO, "!copy")
        audio = DEFAULT_CAPABILITIES.get(MediaKind.AUDIO, "!copy")
        assert video.extension == COPY_EXTENSION
        assert audio.extension == COPY_EXTENSION

    def test_unknown_codec_returns_none(self) -> None:
        """Unknown selections should return None."""
        assert DEFAULT_CAPABILITIES.get(MediaKind.IMAGE, "nonexistent") is None

    def test_codecs_lists_sorted_selections(self) -> None:
        """codecs() should list known selections in order."""
        codecs = DEFAULT_CAPABILITIES.codecs(MediaKind.IMAGE)
        assert codecs == sorted(codecs)
        assert "mjpeg" in codecs


class TestCustomCapabilities:
    """Tests for injected tables."""

    def test_custom_table_replaces_default(self) -> None:
        """A custom video table should replace only the video lookups."""
        caps = EncoderCapabilities(video={"foo": CodecCapability("bar")})
        assert caps.get(MediaKind.VIDEO, "foo").extension == "bar"
        assert caps.get(MediaKind.VIDEO, "libx264") is None
        assert caps.get(MediaKind.AUDIO, "aac") is not None


class TestIsStreamCopy:
    """Tests for is_stream_copy."""

    def test_marker_prefix(self) -> None:
        """Selections starting with the marker mean stream copy."""
        assert is_stream_copy("!copy")
        assert not is_stream_copy("libx264")
