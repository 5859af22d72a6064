"""Conversion preference types.

ConversionPreferences is the user-editable description of one conversion:
which codecs to use, quality sliders or explicit bitrates, filters, and
trimming. ConversionHandler takes a private copy of it at construction, so
an operation in flight never sees later edits.

Options that can be "unset" are Optional and default to None.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TrimMode(Enum):
    """How the input is cut before encoding."""

    NONE = "none"
    SINGLE = "single"  # One start/end pair
    MULTIPLE = "multiple"  # One output per line of a segment description


@dataclass(frozen=True)
class AspectRatioOptions:
    """Aspect ratio and rotation editing."""

    is_being_edited: bool = False
    width: int | None = None
    height: int | None = None
    rotation: float | None = None
    """Rotation as a multiple of PI radians (0.5 = 90 degrees)."""


@dataclass(frozen=True)
class FpsOptions:
    """Frame rate change."""

    keep_fps: bool = True
    input_fps: float = 30
    output_fps: float = 30

    def __post_init__(self) -> None:
        """Validate frame rates."""
        if self.input_fps <= 0 or self.output_fps <= 0:
            raise ValueError(
                f"fps values must be positive, got "
                f"input={self.input_fps} output={self.output_fps}"
            )


@dataclass(frozen=True)
class PixelFormatOptions:
    """Pixel format change."""

    change: bool = False
    pixel_format: str | None = None


@dataclass(frozen=True)
class CropOptions:
    """Crop rectangle. Positions accept "center" or any ffmpeg expression."""

    width: int | None = None
    height: int | None = None
    position_x: str | None = None
    position_y: str | None = None


@dataclass(frozen=True)
class VideoFilterOptions:
    """Optional video filters."""

    crop: CropOptions = field(default_factory=CropOptions)
    deinterlace: bool = False
    curves_preset: str | None = None
    """ffmpeg "curves" preset name (e.g. "vintage"), None for no curves."""
    custom: str = ""
    """Raw filter-graph text appended as-is."""


@dataclass(frozen=True)
class VideoOptions:
    """Video quality and editing options."""

    use_slider: bool = True
    """True: value is a quality number (or a bitrate to derive one from).
    False: value is an explicit bitrate string."""
    value: str = "23"
    max_rate: str = ""
    """Max bitrate used by hardware profiles; falls back to value."""
    aspect_ratio: AspectRatioOptions = field(default_factory=AspectRatioOptions)
    fps: FpsOptions = field(default_factory=FpsOptions)
    pixel_format: PixelFormatOptions = field(default_factory=PixelFormatOptions)
    filters: VideoFilterOptions = field(default_factory=VideoFilterOptions)


@dataclass(frozen=True)
class NoiseRemovalOptions:
    """afftdn noise reduction."""

    noise: float | None = None
    floor: float | None = None


@dataclass(frozen=True)
class AudioFilterOptions:
    """Optional audio filters."""

    volume_db: float | None = None
    noise_removal: NoiseRemovalOptions = field(default_factory=NoiseRemovalOptions)
    custom: str = ""


@dataclass(frozen=True)
class AudioOptions:
    """Audio quality options."""

    use_slider: bool = False
    """True: value is a VBR quality level (clamped to 1..9)."""
    value: str = "192k"
    channels: int | None = None
    keep_album_art: bool = False
    filters: AudioFilterOptions = field(default_factory=AudioFilterOptions)


@dataclass(frozen=True)
class ImageOptions:
    """Image quality options."""

    value: str = "2"


@dataclass(frozen=True)
class MultipleTimestampsOptions:
    """Segment description for TrimMode.MULTIPLE."""

    text: str = ""
    divider: str = " "
    timestamp_at_left: bool = True
    smart_metadata: bool = False
    """Write title/track metadata for each segment."""
    start_from: int = 1
    """Track number of the first segment."""


@dataclass(frozen=True)
class TrimOptions:
    """Trimming configuration."""

    mode: TrimMode = TrimMode.NONE
    start: str = ""
    end: str = ""
    multiple: MultipleTimestampsOptions = field(
        default_factory=MultipleTimestampsOptions
    )


@dataclass(frozen=True)
class ConversionPreferences:
    """Everything the user configured for a conversion."""

    video_codec: str = "libx264"
    audio_codec: str = "aac"
    image_codec: str = "mjpeg"
    video_selected: bool = True
    audio_selected: bool = True
    video: VideoOptions = field(default_factory=VideoOptions)
    audio: AudioOptions = field(default_factory=AudioOptions)
    image: ImageOptions = field(default_factory=ImageOptions)
    trim: TrimOptions = field(default_factory=TrimOptions)
    force_copy_metadata: bool = False
    output_container: str | None = None
    """Container requested for the main encode, None to use the codec's."""
