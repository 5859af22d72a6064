"""Engine command building for conversions.

This module assembles the base argument sequence for one conversion:
hardware initialization, input declarations, the video (or image) half with
its filter chain, and the audio half from .audio. Output paths and trimming
are added later by the handler.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from transmux.config.models import HardwareProfile, HardwareSettings
from transmux.config.preferences import ConversionPreferences
from transmux.core.formatting import format_number
from transmux.tools.capabilities import EncoderCapabilities, is_stream_copy

from .audio import build_audio_args
from .filters import FilterSpec, compose_filters, normalize_filter
from .hardware import HardwareArgs
from .types import InputFile

logger = logging.getLogger(__name__)

# Crop position keyword that centers the rectangle on an axis
CROP_CENTER = "center"

# Clauses the VAAPI encoders need in every video filter chain
VAAPI_REQUIRED_CLAUSES = (("format=", "format=nv12"), ("hwupload", "hwupload"))


def _crop_position(value: str | None, size: int | None, axis: str) -> str | None:
    if value == CROP_CENTER and size is not None:
        return f"({axis}-{size})/2"
    return value


def video_filter_specs(preferences: ConversionPreferences) -> list[FilterSpec]:
    """Filter clauses available in the video filters dialog."""
    filters = preferences.video.filters
    crop = filters.crop
    specs = [
        FilterSpec(
            name="crop",
            params=(
                crop.width,
                crop.height,
                _crop_position(crop.position_x, crop.width, "iw"),
                _crop_position(crop.position_y, crop.height, "ih"),
            ),
            disable_values=((None,), (None,), (None, ""), (None, "")),
            template=",crop={0}:{1}:{2}:{3}",
        ),
        FilterSpec(
            name="deinterlace",
            params=(filters.deinterlace,),
            disable_values=((False,),),
            template=",yadif=0:0:0",
        ),
        FilterSpec(
            name="curves",
            params=(filters.curves_preset,),
            disable_values=((None, ""),),
            template=",curves={0}",
        ),
    ]
    if filters.custom:
        specs.append(
            FilterSpec(name="custom", template=f",{filters.custom}", verbatim=True)
        )
    return specs


def build_video_args(
    preferences: ConversionPreferences,
    hardware_args: HardwareArgs,
    hardware: HardwareSettings,
    *,
    native: bool,
    is_image: bool,
) -> list[str]:
    """Build the video (or image) half of a conversion command.

    Args:
        preferences: Conversion preferences snapshot.
        hardware_args: Resolved hardware acceleration arguments.
        hardware: Active hardware settings.
        native: True if the engine runs natively.
        is_image: True if the target is a still image.

    Returns:
        List of engine arguments for the video stream.
    """
    video = preferences.video
    args = list(hardware_args.after)
    filter_prefix = ""

    aspect = video.aspect_ratio
    if aspect.is_being_edited:
        if aspect.width is not None and aspect.height is not None:
            args.extend(["-aspect", f"{aspect.width}/{aspect.height}"])
        if aspect.rotation is not None:
            rotation = format_number(aspect.rotation)
            filter_prefix += f",rotate=PI*{rotation}:oh=iw:ow=ih"

    fps = video.fps
    if not fps.keep_fps:
        if is_stream_copy(preferences.video_codec):
            scale = format_number(fps.input_fps / fps.output_fps)
            args.extend(["-itsscale", scale])
        else:
            filter_prefix += f",fps={format_number(fps.output_fps)}"

    pixel_format = video.pixel_format
    if pixel_format.change and pixel_format.pixel_format:
        args.extend(["-pix_fmt", pixel_format.pixel_format])

    video_filter = compose_filters(video_filter_specs(preferences), filter_prefix)

    if native and not is_image and hardware.profile is HardwareProfile.VAAPI:
        for marker, clause in VAAPI_REQUIRED_CLAUSES:
            if marker not in video_filter:
                video_filter += f",{clause}"

    video_filter = normalize_filter(video_filter)
    if video_filter:
        args.extend(["-filter:v", video_filter])

    return args


def build_command(
    preferences: ConversionPreferences,
    inputs: Sequence[InputFile],
    hardware_args: HardwareArgs,
    hardware: HardwareSettings,
    capabilities: EncoderCapabilities,
    *,
    native: bool,
    is_image: bool = False,
) -> list[str]:
    """Build the complete base argument sequence for a conversion.

    The output path is not included; the handler appends it together with
    any trimming arguments.

    Args:
        preferences: Conversion preferences snapshot.
        inputs: Registered inputs, in declaration order.
        hardware_args: Resolved hardware acceleration arguments.
        hardware: Active hardware settings.
        capabilities: Encoder capability tables.
        native: True if the engine runs natively.
        is_image: True if the target is a still image.

    Returns:
        List of engine arguments.
    """
    args = list(hardware_args.beginning)
    for input_file in inputs:
        args.extend(["-i", input_file.name])

    if preferences.video_selected or is_image:
        args.extend(
            build_video_args(
                preferences, hardware_args, hardware, native=native, is_image=is_image
            )
        )
    else:
        args.append("-vn")

    if preferences.audio_selected and not is_image:
        args.extend(build_audio_args(preferences, hardware, capabilities))
    else:
        args.append("-an")

    logger.debug("Built command: %s", " ".join(args))
    return args
