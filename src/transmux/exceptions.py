"""Custom exceptions for conversion operations.

Only the primary engine invocation and input staging are allowed to abort a
conversion request. Optional post-processing failures are represented by
OptionalStepError and are always contained by the handler.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from transmux.executor.engine import EngineResult


class ConversionError(Exception):
    """Base exception for conversion errors.

    All conversion-related exceptions inherit from this class, allowing
    callers to catch every conversion failure with a single except clause.
    """


class UsageError(ConversionError):
    """Raised when the handler is used out of order (e.g. no inputs added)."""


class SegmentOutOfRangeError(UsageError, IndexError):
    """Raised when a segment cursor points past the segment list.

    Attributes:
        cursor: The requested segment index.
        count: Number of segments available.
    """

    def __init__(self, cursor: int, count: int) -> None:
        self.cursor = cursor
        self.count = count
        super().__init__(
            f"Segment {cursor} requested but only {count} segment(s) defined"
        )


class EngineUnavailableError(ConversionError):
    """Raised when the engine executable cannot be found or started."""


class EngineInvocationError(ConversionError):
    """Raised when an engine invocation reports failure.

    Attributes:
        result: The engine result describing the failure.
    """

    def __init__(self, message: str, result: EngineResult | None = None) -> None:
        self.result = result
        super().__init__(message)

    @property
    def stderr_tail(self) -> str:
        """Last few stderr lines of the failed invocation, for logging."""
        if self.result is None or not self.result.stderr:
            return ""
        return "".join(self.result.stderr[-5:]).strip()


class OptionalStepError(ConversionError):
    """Raised inside an optional post-processing step (artwork, metadata).

    Never propagates out of ConversionHandler.start().
    """
