"""Preference file loading and validation.

This module provides functions to load YAML conversion preference files and
validate them using Pydantic models before converting them into the frozen
ConversionPreferences dataclasses used by the handler.

Example preferences file:

    video_codec: libx265
    audio_codec: libopus
    video:
      use_slider: true
      value: "26"
      filters:
        deinterlace: true
    trim:
      mode: multiple
      multiple:
        text: |
          0:00 Intro
          1:30 Verse
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from transmux.config.preferences import (
    AspectRatioOptions,
    AudioFilterOptions,
    AudioOptions,
    ConversionPreferences,
    CropOptions,
    FpsOptions,
    ImageOptions,
    MultipleTimestampsOptions,
    NoiseRemovalOptions,
    PixelFormatOptions,
    TrimMode,
    TrimOptions,
    VideoFilterOptions,
    VideoOptions,
)


class PreferencesValidationError(Exception):
    """Error during preference validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class AspectRatioModel(BaseModel):
    """Pydantic model for aspect ratio editing."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    is_being_edited: bool = False
    width: int | None = Field(default=None, ge=1)
    height: int | None = Field(default=None, ge=1)
    rotation: float | None = None


class FpsModel(BaseModel):
    """Pydantic model for frame rate change."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    keep_fps: bool = True
    input_fps: float = Field(default=30, gt=0)
    output_fps: float = Field(default=30, gt=0)


class PixelFormatModel(BaseModel):
    """Pydantic model for pixel format change."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    change: bool = False
    pixel_format: str | None = None


class CropModel(BaseModel):
    """Pydantic model for the crop rectangle."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int | None = Field(default=None, ge=1)
    height: int | None = Field(default=None, ge=1)
    position_x: str | None = None
    position_y: str | None = None


class VideoFiltersModel(BaseModel):
    """Pydantic model for video filters."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    crop: CropModel = Field(default_factory=CropModel)
    deinterlace: bool = False
    curves_preset: str | None = None
    custom: str = ""


class VideoModel(BaseModel):
    """Pydantic model for video options."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    use_slider: bool = True
    value: str = "23"
    max_rate: str = ""
    aspect_ratio: AspectRatioModel = Field(default_factory=AspectRatioModel)
    fps: FpsModel = Field(default_factory=FpsModel)
    pixel_format: PixelFormatModel = Field(default_factory=PixelFormatModel)
    filters: VideoFiltersModel = Field(default_factory=VideoFiltersModel)

    @field_validator("value", "max_rate", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Any:
        """Accept bare numbers in YAML (value: 23)."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class NoiseRemovalModel(BaseModel):
    """Pydantic model for noise removal."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    noise: float | None = None
    floor: float | None = None


class AudioFiltersModel(BaseModel):
    """Pydantic model for audio filters."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    volume_db: float | None = None
    noise_removal: NoiseRemovalModel = Field(default_factory=NoiseRemovalModel)
    custom: str = ""


class AudioModel(BaseModel):
    """Pydantic model for audio options."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    use_slider: bool = False
    value: str = "192k"
    channels: int | None = Field(default=None, ge=1)
    keep_album_art: bool = False
    filters: AudioFiltersModel = Field(default_factory=AudioFiltersModel)

    @field_validator("value", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Any:
        """Accept bare numbers in YAML (value: 5)."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class ImageModel(BaseModel):
    """Pydantic model for image options."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    value: str = "2"

    @field_validator("value", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Any:
        """Accept bare numbers in YAML (value: 2)."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class MultipleTimestampsModel(BaseModel):
    """Pydantic model for the segment description."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str = ""
    divider: str = Field(default=" ", min_length=1)
    timestamp_at_left: bool = True
    smart_metadata: bool = False
    start_from: int = Field(default=1, ge=0)


class TrimModel(BaseModel):
    """Pydantic model for trimming."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: Literal["none", "single", "multiple"] = "none"
    start: str = ""
    end: str = ""
    multiple: MultipleTimestampsModel = Field(default_factory=MultipleTimestampsModel)

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> Any:
        """Accept bare numbers (YAML reads an unquoted 1:30 as 90 seconds)."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class PreferencesModel(BaseModel):
    """Pydantic model for a full preferences file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    video_codec: str = Field(default="libx264", min_length=1)
    audio_codec: str = Field(default="aac", min_length=1)
    image_codec: str = Field(default="mjpeg", min_length=1)
    video_selected: bool = True
    audio_selected: bool = True
    video: VideoModel = Field(default_factory=VideoModel)
    audio: AudioModel = Field(default_factory=AudioModel)
    image: ImageModel = Field(default_factory=ImageModel)
    trim: TrimModel = Field(default_factory=TrimModel)
    force_copy_metadata: bool = False
    output_container: str | None = None

    @field_validator("output_container")
    @classmethod
    def validate_container(cls, v: str | None) -> str | None:
        """Normalize the container to a bare extension."""
        if v is None:
            return None
        v = v.strip().lstrip(".").casefold()
        if not v:
            return None
        if not v.isalnum():
            raise ValueError(f"Invalid output_container '{v}'")
        return v


def _convert_video(model: VideoModel) -> VideoOptions:
    crop = model.filters.crop
    return VideoOptions(
        use_slider=model.use_slider,
        value=model.value,
        max_rate=model.max_rate,
        aspect_ratio=AspectRatioOptions(
            is_being_edited=model.aspect_ratio.is_being_edited,
            width=model.aspect_ratio.width,
            height=model.aspect_ratio.height,
            rotation=model.aspect_ratio.rotation,
        ),
        fps=FpsOptions(
            keep_fps=model.fps.keep_fps,
            input_fps=model.fps.input_fps,
            output_fps=model.fps.output_fps,
        ),
        pixel_format=PixelFormatOptions(
            change=model.pixel_format.change,
            pixel_format=model.pixel_format.pixel_format,
        ),
        filters=VideoFilterOptions(
            crop=CropOptions(
                width=crop.width,
                height=crop.height,
                position_x=crop.position_x,
                position_y=crop.position_y,
            ),
            deinterlace=model.filters.deinterlace,
            curves_preset=model.filters.curves_preset,
            custom=model.filters.custom,
        ),
    )


def _convert_audio(model: AudioModel) -> AudioOptions:
    return AudioOptions(
        use_slider=model.use_slider,
        value=model.value,
        channels=model.channels,
        keep_album_art=model.keep_album_art,
        filters=AudioFilterOptions(
            volume_db=model.filters.volume_db,
            noise_removal=NoiseRemovalOptions(
                noise=model.filters.noise_removal.noise,
                floor=model.filters.noise_removal.floor,
            ),
            custom=model.filters.custom,
        ),
    )


def _convert_trim(model: TrimModel) -> TrimOptions:
    multiple = model.multiple
    return TrimOptions(
        mode=TrimMode(model.mode),
        start=model.start,
        end=model.end,
        multiple=MultipleTimestampsOptions(
            text=multiple.text,
            divider=multiple.divider,
            timestamp_at_left=multiple.timestamp_at_left,
            smart_metadata=multiple.smart_metadata,
            start_from=multiple.start_from,
        ),
    )


def _convert_to_preferences(model: PreferencesModel) -> ConversionPreferences:
    """Convert validated Pydantic model to ConversionPreferences dataclass."""
    return ConversionPreferences(
        video_codec=model.video_codec,
        audio_codec=model.audio_codec,
        image_codec=model.image_codec,
        video_selected=model.video_selected,
        audio_selected=model.audio_selected,
        video=_convert_video(model.video),
        audio=_convert_audio(model.audio),
        image=ImageOptions(value=model.image.value),
        trim=_convert_trim(model.trim),
        force_copy_metadata=model.force_copy_metadata,
        output_container=model.output_container,
    )


def _format_validation_error(error: ValidationError) -> tuple[str, str | None]:
    """Render the first Pydantic error as a message and a dotted field path."""
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", str(error))
    if loc:
        return f"Invalid preferences at '{loc}': {message}", loc
    return f"Invalid preferences: {message}", None


def parse_preferences(data: dict[str, Any] | None) -> ConversionPreferences:
    """Validate a preferences mapping and convert it to ConversionPreferences.

    Args:
        data: Parsed preferences mapping. None is treated as empty.

    Returns:
        Validated ConversionPreferences.

    Raises:
        PreferencesValidationError: If validation fails.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PreferencesValidationError(
            f"Preferences must be a mapping, got {type(data).__name__}"
        )
    try:
        model = PreferencesModel.model_validate(data)
    except ValidationError as e:
        message, field = _format_validation_error(e)
        raise PreferencesValidationError(message, field=field) from e
    return _convert_to_preferences(model)


def load_preferences(path: Path) -> ConversionPreferences:
    """Load and validate a YAML preferences file.

    Args:
        path: Path to the YAML file.

    Returns:
        Validated ConversionPreferences.

    Raises:
        FileNotFoundError: If the file does not exist.
        PreferencesValidationError: If the YAML is invalid or fails validation.
    """
    if not path.exists():
        raise FileNotFoundError(f"Preferences file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PreferencesValidationError(f"Invalid YAML syntax: {e}") from e

    return parse_preferences(data)
