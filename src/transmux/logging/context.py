"""Operation context for structured logging.

Provides context propagation using contextvars, enabling automatic
injection of the current operation id and segment index into log records.
Concurrent conversions in different threads each see their own context.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_operation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation_id", default=None
)
_segment: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "segment", default=None
)


def set_operation_context(operation_id: str, segment: int | None = None) -> None:
    """Set the current operation context.

    Args:
        operation_id: Unique id of the running operation.
        segment: Index of the segment being encoded, if segmenting.
    """
    _operation_id.set(operation_id)
    _segment.set(segment)


def clear_operation_context() -> None:
    """Clear the current operation context."""
    _operation_id.set(None)
    _segment.set(None)


def get_operation_context() -> tuple[str | None, int | None]:
    """Get current operation context.

    Returns:
        Tuple of (operation_id, segment), either may be None.
    """
    return _operation_id.get(), _segment.get()


@contextmanager
def operation_context(
    operation_id: str,
    segment: int | None = None,
) -> Generator[None, None, None]:
    """Context manager for one engine invocation chain.

    Sets the context on entry and restores the previous one on exit.

    Example:
        with operation_context(operation_id, segment=0):
            logger.info("Encoding")  # Record carries the operation id
    """
    old_operation_id = _operation_id.get()
    old_segment = _segment.get()
    try:
        set_operation_context(operation_id, segment)
        yield
    finally:
        _operation_id.set(old_operation_id)
        _segment.set(old_segment)


class OperationContextFilter(logging.Filter):
    """Logging filter that injects operation context into log records.

    Adds operation_id and segment attributes for JSON output, and a compact
    operation_tag like "[op:1a2b3c4d#1] " for text output.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject operation context into log record.

        Returns:
            Always True (does not filter, only enriches).
        """
        operation_id, segment = get_operation_context()

        record.operation_id = operation_id
        record.segment = segment

        if operation_id:
            short_id = operation_id[:8]
            if segment is not None:
                record.operation_tag = f"[op:{short_id}#{segment}] "
            else:
                record.operation_tag = f"[op:{short_id}] "
        else:
            record.operation_tag = ""

        return True
