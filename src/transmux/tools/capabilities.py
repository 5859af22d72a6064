"""Encoder capability lookup.

Maps a media kind and a codec selection (as stored in conversion
preferences) to the output extension it implies, the hardware encoder names
that replace it for each hardware profile, and a few encoder traits the
command builder needs.

Codec selections starting with COPY_MARKER mean "stream copy". Their
extension is COPY_EXTENSION, which tells the handler to keep the first
input's extension.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from transmux.config.models import HardwareProfile

COPY_MARKER = "!"
"""Prefix of a codec selection that means stream copy."""

COPY_EXTENSION = "!"
"""Extension sentinel: use the first input's extension."""


class MediaKind(Enum):
    """Kind of output a conversion produces."""

    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"


def is_stream_copy(codec: str) -> bool:
    """True if a codec selection means stream copy."""
    return codec.startswith(COPY_MARKER)


@dataclass(frozen=True)
class CodecCapability:
    """What the engine needs to know about one codec selection."""

    extension: str
    """Default output extension for this codec."""

    hardware: Mapping[HardwareProfile, str] = field(default_factory=dict)
    """Hardware encoder replacing the codec, per profile."""

    is_lossless: bool = False
    """Lossless codecs take no quality/bitrate argument."""

    native_audio: str | None = None
    """OS-native (AudioToolbox) encoder for this codec, if any."""

    def hardware_codec(self, profile: HardwareProfile) -> str | None:
        """Get the hardware encoder for a profile, or None if unsupported."""
        return self.hardware.get(profile)


def _hw(
    nvidia: str | None = None,
    intel: str | None = None,
    amd: str | None = None,
    apple: str | None = None,
    vaapi: str | None = None,
) -> dict[HardwareProfile, str]:
    names = {
        HardwareProfile.NVIDIA: nvidia,
        HardwareProfile.INTEL: intel,
        HardwareProfile.AMD: amd,
        HardwareProfile.APPLE: apple,
        HardwareProfile.VAAPI: vaapi,
    }
    return {profile: name for profile, name in names.items() if name}


VIDEO_CAPABILITIES: dict[str, CodecCapability] = {
    "libx264": CodecCapability(
        "mp4",
        _hw("h264_nvenc", "h264_qsv", "h264_amf", "h264_videotoolbox", "h264_vaapi"),
    ),
    "libx265": CodecCapability(
        "mp4",
        _hw("hevc_nvenc", "hevc_qsv", "hevc_amf", "hevc_videotoolbox", "hevc_vaapi"),
    ),
    "libvpx": CodecCapability("webm", _hw(vaapi="vp8_vaapi")),
    "libvpx-vp9": CodecCapability("webm", _hw(intel="vp9_qsv", vaapi="vp9_vaapi")),
    "libaom-av1": CodecCapability(
        "mkv", _hw("av1_nvenc", "av1_qsv", "av1_amf", vaapi="av1_vaapi")
    ),
    "libsvtav1": CodecCapability(
        "mkv", _hw("av1_nvenc", "av1_qsv", "av1_amf", vaapi="av1_vaapi")
    ),
    "mpeg4": CodecCapability("mp4"),
    "libxvid": CodecCapability("avi"),
    "prores_ks": CodecCapability("mov", _hw(apple="prores_videotoolbox")),
    "libtheora": CodecCapability("ogv"),
    "!copy": CodecCapability(COPY_EXTENSION),
}

AUDIO_CAPABILITIES: dict[str, CodecCapability] = {
    "libmp3lame": CodecCapability("mp3"),
    "aac": CodecCapability("m4a", native_audio="aac_at"),
    "libopus": CodecCapability("opus"),
    "libvorbis": CodecCapability("ogg"),
    "ac3": CodecCapability("ac3"),
    "flac": CodecCapability("flac", is_lossless=True),
    "alac": CodecCapability("m4a", is_lossless=True, native_audio="alac_at"),
    "pcm_s16le": CodecCapability("wav", is_lossless=True),
    "!copy": CodecCapability(COPY_EXTENSION),
}

IMAGE_CAPABILITIES: dict[str, CodecCapability] = {
    "mjpeg": CodecCapability("jpg"),
    "png": CodecCapability("png", is_lossless=True),
    "libwebp": CodecCapability("webp"),
    "bmp": CodecCapability("bmp", is_lossless=True),
    "tiff": CodecCapability("tiff", is_lossless=True),
    "gif": CodecCapability("gif"),
}


class EncoderCapabilities:
    """Capability tables keyed by media kind and codec selection.

    Example:
        caps = EncoderCapabilities()
        caps.get(MediaKind.VIDEO, "libx265").extension  # "mp4"
    """

    def __init__(
        self,
        video: Mapping[str, CodecCapability] | None = None,
        audio: Mapping[str, CodecCapability] | None = None,
        image: Mapping[str, CodecCapability] | None = None,
    ) -> None:
        self._tables: dict[MediaKind, Mapping[str, CodecCapability]] = {
            MediaKind.VIDEO: video if video is not None else VIDEO_CAPABILITIES,
            MediaKind.AUDIO: audio if audio is not None else AUDIO_CAPABILITIES,
            MediaKind.IMAGE: image if image is not None else IMAGE_CAPABILITIES,
        }

    def get(self, kind: MediaKind, codec: str) -> CodecCapability | None:
        """Look up a codec selection, or None if the table has no entry."""
        return self._tables[kind].get(codec)

    def codecs(self, kind: MediaKind) -> list[str]:
        """List the codec selections known for a media kind."""
        return sorted(self._tables[kind])


DEFAULT_CAPABILITIES = EncoderCapabilities()
