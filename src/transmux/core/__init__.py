"""Core utilities for transmux.

Pure helpers shared across the codebase: timestamp segment parsing,
file-name handling, and number formatting for engine arguments.
"""

from transmux.core.file_utils import (
    file_extension,
    output_file_name,
    sanitize_file_name,
)
from transmux.core.formatting import format_number
from transmux.core.timestamps import (
    TimestampSegment,
    count_segments,
    segment_at,
)

__all__ = [
    # File names
    "file_extension",
    "output_file_name",
    "sanitize_file_name",
    # Formatting
    "format_number",
    # Timestamps
    "TimestampSegment",
    "count_segments",
    "segment_at",
]
