"""Tests for timestamp segment parsing."""

from __future__ import annotations

import pytest

from transmux.core.timestamps import TimestampSegment, count_segments, segment_at
from transmux.exceptions import SegmentOutOfRangeError, UsageError

TIMESTAMP_FIRST = "0:00 Intro\n1:30 Verse\n3:05 Outro"
LABEL_FIRST = "Intro|0:00\nVerse|1:30\nOutro|3:05"


class TestSegmentAtTimestampFirst:
    """Tests for segment_at with "timestamp<divider>label" lines."""

    def test_first_segment_ends_at_second_start(self) -> None:
        """First segment should end where the next one starts."""
        segment = segment_at(TIMESTAMP_FIRST, 0, " ")
        assert segment == TimestampSegment(label="Intro", start="0:00", end="1:30")

    def test_middle_segment(self) -> None:
        """Middle segment should end at the following line's timestamp."""
        segment = segment_at(TIMESTAMP_FIRST, 1, " ")
        assert segment.label == "Verse"
        assert segment.start == "1:30"
        assert segment.end == "3:05"

    def test_last_segment_has_no_end(self) -> None:
        """Last segment should run to the end of the media."""
        segment = segment_at(TIMESTAMP_FIRST, 2, " ")
        assert segment.end == ""
        assert segment.is_last

    def test_only_first_two_fields_are_used(self) -> None:
        """Extra fields after the label should be ignored."""
        segment = segment_at("0:00 Intro part one", 0, " ")
        assert segment.label == "Intro"

    def test_missing_label_is_empty(self) -> None:
        """A line without a divider should yield an empty label."""
        segment = segment_at("0:00", 0, " ")
        assert segment == TimestampSegment(label="", start="0:00", end="")


class TestSegmentAtLabelFirst:
    """Tests for segment_at with "label<divider>timestamp" lines."""

    def test_fields_are_swapped(self) -> None:
        """Label should come from field one and start from field two."""
        segment = segment_at(LABEL_FIRST, 0, "|", timestamp_at_left=False)
        assert segment.label == "Intro"
        assert segment.start == "0:00"

    def test_end_is_next_line_first_field(self) -> None:
        """End is always the next line's first field, in both orders."""
        segment = segment_at(LABEL_FIRST, 0, "|", timestamp_at_left=False)
        assert segment.end == "Verse"

    def test_last_segment_has_no_end(self) -> None:
        """Last line should produce an empty end."""
        segment = segment_at(LABEL_FIRST, 2, "|", timestamp_at_left=False)
        assert segment.end == ""


class TestSegmentAtErrors:
    """Tests for out-of-range cursors."""

    @pytest.mark.parametrize("cursor", [-1, 3, 10])
    def test_out_of_range_raises(self, cursor: int) -> None:
        """Cursor outside the segment list should raise."""
        with pytest.raises(SegmentOutOfRangeError) as exc_info:
            segment_at(TIMESTAMP_FIRST, cursor, " ")
        assert exc_info.value.cursor == cursor
        assert exc_info.value.count == 3

    def test_error_is_usage_and_index_error(self) -> None:
        """The error should be catchable as UsageError and IndexError."""
        with pytest.raises(UsageError):
            segment_at("", 0, " ")
        with pytest.raises(IndexError):
            segment_at("", 0, " ")

    def test_input_text_is_unchanged(self) -> None:
        """Parsing should not alter the description."""
        text = TIMESTAMP_FIRST
        segment_at(text, 1, " ")
        assert text == "0:00 Intro\n1:30 Verse\n3:05 Outro"


class TestCountSegments:
    """Tests for count_segments."""

    def test_counts_lines(self) -> None:
        """Should count one segment per line."""
        assert count_segments(TIMESTAMP_FIRST) == 3

    def test_empty_text(self) -> None:
        """Empty description has no segments."""
        assert count_segments("") == 0

    def test_trailing_newline_is_not_a_segment(self) -> None:
        """A trailing newline should not add an empty segment."""
        assert count_segments("0:00 A\n1:00 B\n") == 2
