"""FFmpeg progress parsing utilities.

ffmpeg prints a status line to stderr while it encodes:

    frame= 1234 fps= 30 size= 2048kB time=00:01:23.45 bitrate=5000kbits/s speed=2x

The engine feeds every stderr line through parse_stderr_progress() and hands
the parsed values to an optional progress callback.
"""

import re
from dataclasses import dataclass


@dataclass
class FFmpegProgress:
    """Parsed ffmpeg progress output."""

    frame: int | None = None
    fps: float | None = None
    bitrate: str | None = None
    size_kb: int | None = None
    out_time_us: int | None = None  # Output time in microseconds
    speed: str | None = None

    @property
    def out_time_seconds(self) -> float | None:
        """Get output time in seconds."""
        if self.out_time_us is not None:
            return self.out_time_us / 1_000_000
        return None

    def get_percent(self, duration_seconds: float | None) -> float:
        """Calculate progress percentage based on duration.

        Args:
            duration_seconds: Total duration of the output in seconds.

        Returns:
            Progress percentage (0.0 to 100.0), or 0.0 if unknown.
        """
        if duration_seconds is None or duration_seconds <= 0:
            return 0.0
        out_time = self.out_time_seconds
        if out_time is None:
            return 0.0
        return min(100.0, (out_time / duration_seconds) * 100)


_FRAME = re.compile(r"frame=\s*(\d+)")
_FPS = re.compile(r"fps=\s*([\d.]+)")
_SIZE = re.compile(r"size=\s*(\d+)\s*[kK]i?B")
_BITRATE = re.compile(r"bitrate=\s*(\S+)")
_SPEED = re.compile(r"speed=\s*(\S+)")
_TIME = re.compile(r"time=\s*(-?)(\d+):(\d+):(\d+)(?:\.(\d+))?")


def _text_or_none(value: str) -> str | None:
    return None if value == "N/A" else value


def parse_stderr_progress(line: str) -> FFmpegProgress | None:
    """Parse an ffmpeg stderr progress line.

    Audio-only and image encodes print "size=" without "frame=", so either
    marker qualifies a line as progress output.

    Args:
        line: A line from ffmpeg stderr.

    Returns:
        Parsed FFmpegProgress or None if not a progress line.
    """
    if "frame=" not in line and "size=" not in line:
        return None
    if "time=" not in line:
        return None

    result = FFmpegProgress()

    if match := _FRAME.search(line):
        result.frame = int(match.group(1))
    if match := _FPS.search(line):
        try:
            result.fps = float(match.group(1))
        except ValueError:
            result.fps = None
    if match := _SIZE.search(line):
        result.size_kb = int(match.group(1))
    if match := _BITRATE.search(line):
        result.bitrate = _text_or_none(match.group(1))
    if match := _SPEED.search(line):
        result.speed = _text_or_none(match.group(1))

    time_match = _TIME.search(line)
    if time_match and not time_match.group(1):
        hours = int(time_match.group(2))
        minutes = int(time_match.group(3))
        seconds = int(time_match.group(4))
        fraction = time_match.group(5) or "0"
        # Normalise the fractional part to microseconds
        micros = int(fraction.ljust(6, "0")[:6])
        result.out_time_us = (
            hours * 3600 + minutes * 60 + seconds
        ) * 1_000_000 + micros

    return result
