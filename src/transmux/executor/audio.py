"""Audio argument building for the engine.

Builds the audio half of a conversion command: encoder selection,
quality or bitrate, channel count, and the optional audio filter chain.
"""

from __future__ import annotations

import re

from transmux.config.models import HardwareSettings
from transmux.config.preferences import ConversionPreferences
from transmux.tools.capabilities import (
    EncoderCapabilities,
    MediaKind,
    is_stream_copy,
)

from .filters import FilterSpec, compose_filters, normalize_filter

# VBR quality range accepted by -qscale:a
MIN_AUDIO_QUALITY = 1
MAX_AUDIO_QUALITY = 9

# Values that switch an audio filter off
_UNSET_LEVEL = (0, None, "")


def get_audio_encoder(
    codec: str,
    hardware: HardwareSettings,
    capabilities: EncoderCapabilities,
) -> str:
    """Get the encoder for an audio codec selection.

    Stream-copy selections become "copy". When AudioToolbox is enabled and
    the codec has a native encoder (aac_at, alac_at), that encoder is used.
    """
    if is_stream_copy(codec):
        return "copy"
    capability = capabilities.get(MediaKind.AUDIO, codec)
    if hardware.audio_toolbox and capability and capability.native_audio:
        return capability.native_audio
    return codec


def audio_slider_quality(value: str) -> str:
    """Sanitize a slider value into a -qscale:a level between 1 and 9."""
    digits = re.sub(r"\D", "", value)
    level = int(digits) if digits else 0
    return str(max(MIN_AUDIO_QUALITY, min(level, MAX_AUDIO_QUALITY)))


def audio_filter_specs(preferences: ConversionPreferences) -> list[FilterSpec]:
    """Filter clauses available in the audio filters dialog."""
    filters = preferences.audio.filters
    specs = [
        FilterSpec(
            name="volume",
            params=(filters.volume_db,),
            disable_values=(_UNSET_LEVEL,),
            template=",volume={0}dB",
        ),
        FilterSpec(
            name="noise_removal",
            params=(filters.noise_removal.noise, filters.noise_removal.floor),
            disable_values=(_UNSET_LEVEL, _UNSET_LEVEL),
            template=",afftdn=nr={0}:nf={1}",
        ),
    ]
    if filters.custom:
        specs.append(
            FilterSpec(name="custom", template=f",{filters.custom}", verbatim=True)
        )
    return specs


def build_audio_args(
    preferences: ConversionPreferences,
    hardware: HardwareSettings,
    capabilities: EncoderCapabilities,
) -> list[str]:
    """Build audio encoding arguments.

    Args:
        preferences: Conversion preferences snapshot.
        hardware: Active hardware settings (for AudioToolbox encoders).
        capabilities: Encoder capability tables.

    Returns:
        List of engine arguments for the audio stream.
    """
    audio = preferences.audio
    codec = preferences.audio_codec
    args = ["-acodec", get_audio_encoder(codec, hardware, capabilities)]

    capability = capabilities.get(MediaKind.AUDIO, codec)
    lossless = capability is not None and capability.is_lossless
    if not lossless and not is_stream_copy(codec):
        if audio.use_slider:
            args.extend(["-qscale:a", audio_slider_quality(audio.value)])
        else:
            args.extend(["-b:a", audio.value])

    if audio.channels is not None:
        args.extend(["-ac", str(audio.channels)])

    audio_filter = normalize_filter(compose_filters(audio_filter_specs(preferences)))
    if audio_filter:
        args.extend(["-filter:a", audio_filter])

    return args
