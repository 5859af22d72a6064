"""Timestamp segment parsing for multi-segment trimming.

A segment description is a block of text with one segment per line. Each
line holds two fields separated by a divider: a timestamp and a label, in
an order chosen by the user ("timestamp first" or "label first").

Example (timestamp first, divider " "):

    0:00 Intro
    1:30 Verse
    3:05 Outro

Segment 0 starts at 0:00 and ends where segment 1 begins. The last segment
has no end and runs to the end of the media.
"""

from __future__ import annotations

from dataclasses import dataclass

from transmux.exceptions import SegmentOutOfRangeError


@dataclass(frozen=True)
class TimestampSegment:
    """One timestamped sub-range of the input media."""

    label: str
    start: str
    end: str = ""
    """Empty when the segment runs to the end and nothing follows it."""

    @property
    def is_last(self) -> bool:
        """True if no further segment follows this one."""
        return self.end == ""


def _split_fields(line: str, divider: str) -> tuple[str, str]:
    parts = line.split(divider) if divider else [line]
    first = parts[0] if parts else ""
    second = parts[1] if len(parts) > 1 else ""
    return first, second


def count_segments(text: str) -> int:
    """Return the number of segment lines in a description."""
    return len(text.splitlines())


def segment_at(
    text: str,
    cursor: int,
    divider: str,
    timestamp_at_left: bool = True,
) -> TimestampSegment:
    """Get the segment at ``cursor`` from a segment description.

    Args:
        text: Segment description, one segment per line.
        cursor: Index of the segment to return.
        divider: Separator between the two fields of a line.
        timestamp_at_left: True if each line is "timestamp<divider>label",
            False if it is "label<divider>timestamp".

    Returns:
        TimestampSegment whose end is the first field of the following
        line, or empty if this is the last line.

    Raises:
        SegmentOutOfRangeError: If cursor is outside the segment list.
    """
    lines = text.splitlines()
    if cursor < 0 or cursor >= len(lines):
        raise SegmentOutOfRangeError(cursor, len(lines))

    first, second = _split_fields(lines[cursor], divider)
    end = ""
    if cursor + 1 < len(lines):
        end, _ = _split_fields(lines[cursor + 1], divider)

    if timestamp_at_left:
        return TimestampSegment(label=second, start=first, end=end)
    return TimestampSegment(label=first, start=second, end=end)
