"""Hardware acceleration argument resolution.

Resolves the video encoder for the active hardware profile and builds the
quality/bitrate arguments each profile expects. Also hosts the heuristic
that maps a bitrate onto the 0-51 quality scale, used whenever a profile
needs a quality number but the user entered a bitrate.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field

from transmux.config.models import HardwareProfile, HardwareSettings
from transmux.config.preferences import ConversionPreferences
from transmux.tools.capabilities import (
    EncoderCapabilities,
    MediaKind,
    is_stream_copy,
)

logger = logging.getLogger(__name__)

# Quality scale shared by x264/x265 CRF and most hardware encoders
MIN_QUALITY = 0
MAX_QUALITY = 51

# Source bitrate assumed when a value holds no digits at all
DEFAULT_SOURCE_BITRATE = 2_800_000

# Fixed quality used by secondary (remux) invocations that pass a bitrate
OVERRIDE_QUALITY = "24"

# Apple fallback quality when neither a slider value nor an override is given
APPLE_DEFAULT_QUALITY = "28"

_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class HardwareArgs:
    """Arguments contributed by hardware acceleration."""

    beginning: list[str] = field(default_factory=list)
    """Engine initialization arguments, placed before any input."""

    after: list[str] = field(default_factory=list)
    """Codec and quality arguments, placed after the inputs."""


def _is_quality_number(value: str) -> bool:
    try:
        number = float(value)
    except ValueError:
        return False
    return MIN_QUALITY <= number <= MAX_QUALITY


def derive_quality(value: str) -> str:
    """Turn a slider value into a quality number.

    A plain number within 0-51 is already a quality number and is returned
    unchanged. Anything else is read as a bitrate ("2500k", "4M", "128000")
    and mapped onto the 0-51 scale with ``floor(51 - bitrate / 100000)``.

    Examples:
        derive_quality("23") -> "23"
        derive_quality("128k") -> "49"
        derive_quality("128000") -> "49"
        derive_quality("4M") -> "11"
        derive_quality("fast") -> "23"  (no digits: assumes 2.8 Mb/s)
    """
    if _is_quality_number(value):
        return value

    expanded = re.sub("k", "000", value, flags=re.IGNORECASE)
    expanded = re.sub("m", "000000", expanded, flags=re.IGNORECASE)
    match = _DIGITS.search(expanded)
    bitrate = int(match.group(0)) if match else DEFAULT_SOURCE_BITRATE

    quality = math.floor(MAX_QUALITY - bitrate / 100_000)
    return str(max(MIN_QUALITY, min(MAX_QUALITY, quality)))


def resolve_video_codec(
    preferences: ConversionPreferences,
    hardware: HardwareSettings,
    capabilities: EncoderCapabilities,
    *,
    native: bool,
    is_image: bool,
) -> str:
    """Resolve the encoder name to pass to the engine.

    Returns:
        The image codec for image targets; otherwise the hardware encoder
        for the active profile when the engine is native and the codec has
        one; otherwise the plain video codec. Stream-copy selections become
        "copy".
    """
    if is_image:
        codec = preferences.image_codec
    else:
        codec = preferences.video_codec
        if native and hardware.profile is not HardwareProfile.NONE:
            capability = capabilities.get(MediaKind.VIDEO, codec)
            hardware_codec = (
                capability.hardware_codec(hardware.profile) if capability else None
            )
            if hardware_codec:
                codec = hardware_codec
    return "copy" if is_stream_copy(codec) else codec


def _has_hardware_codec(
    preferences: ConversionPreferences,
    hardware: HardwareSettings,
    capabilities: EncoderCapabilities,
) -> bool:
    capability = capabilities.get(MediaKind.VIDEO, preferences.video_codec)
    if capability is None:
        return False
    return capability.hardware_codec(hardware.profile) is not None


def _profile_args(
    preferences: ConversionPreferences,
    profile: HardwareProfile,
    bitrate: str | None,
) -> list[str]:
    """Quality/rate-control arguments specific to a hardware profile."""
    video = preferences.video
    quality_mode = bitrate is None and video.use_slider
    rate = bitrate if bitrate is not None else video.value
    max_rate = bitrate if bitrate is not None else (video.max_rate or video.value)

    if profile is HardwareProfile.APPLE:
        if quality_mode:
            quality = derive_quality(video.value)
        elif bitrate is not None:
            quality = OVERRIDE_QUALITY
        else:
            quality = APPLE_DEFAULT_QUALITY
        return ["-qmin", quality, "-qmax", quality]

    if profile is HardwareProfile.INTEL:
        if quality_mode:
            return ["-global_quality", derive_quality(video.value)]
        return ["-b:v", rate, "-maxrate", rate]

    if profile is HardwareProfile.NVIDIA:
        if quality_mode:
            return ["-crf", derive_quality(video.value)]
        return ["-maxrate", rate, "-bufsize", max_rate]

    if profile is HardwareProfile.VAAPI:
        if bitrate is not None:
            quality = OVERRIDE_QUALITY
        else:
            quality = derive_quality(video.value)
        return [
            "-maxrate", max_rate,
            "-bufsize", max_rate,
            "-global_quality", quality,
            "-qp", quality,
        ]  # fmt: skip

    if profile is HardwareProfile.AMD:
        if quality_mode:
            quality = derive_quality(video.value)
            return [
                "-rc", "qvbr",
                "-qvbr_quality_level", quality,
                "-qmin", quality,
                "-qmax", quality,
            ]  # fmt: skip
        return ["-rc", "cbr", "-bufsize", max_rate]

    return []


def resolve_hardware_args(
    preferences: ConversionPreferences,
    hardware: HardwareSettings,
    capabilities: EncoderCapabilities,
    *,
    native: bool,
    is_image: bool = False,
    bitrate: str | None = None,
) -> HardwareArgs:
    """Build the hardware acceleration argument groups.

    Args:
        preferences: Conversion preferences snapshot.
        hardware: Active hardware settings.
        capabilities: Encoder capability tables.
        native: True if the engine runs natively (hardware is reachable).
        is_image: True if the target is a still image.
        bitrate: Bitrate override for secondary invocations. When given,
            no codec/quality arguments are emitted and the profile
            arguments use the override instead of the slider value.

    Returns:
        HardwareArgs with the "beginning" and "after" argument groups.
    """
    after: list[str] = []

    if bitrate is None:
        codec = resolve_video_codec(
            preferences, hardware, capabilities, native=native, is_image=is_image
        )
        after.extend(["-vcodec", codec])
        if is_image:
            after.extend(["-q:v", preferences.image.value])
        elif preferences.video.use_slider:
            after.extend(["-crf", derive_quality(preferences.video.value)])
        else:
            after.extend(["-b:v", preferences.video.value])

    # Keyed on the video codec selection, so image targets get them too
    profile = hardware.profile
    if (
        native
        and profile is not HardwareProfile.NONE
        and (
            bitrate is not None
            or _has_hardware_codec(preferences, hardware, capabilities)
        )
    ):
        profile_args = _profile_args(preferences, profile, bitrate)
        logger.debug(
            "Hardware profile %s adds %s", profile.value, " ".join(profile_args)
        )
        after.extend(profile_args)

    return HardwareArgs(beginning=list(hardware.init_args), after=after)
