"""Structured logging module for transmux.

Provides configurable logging with JSON format support and file rotation.
Includes operation context support so every record emitted during a
conversion carries its operation id.
"""

from transmux.logging.config import JSONFormatter, configure_logging
from transmux.logging.context import (
    OperationContextFilter,
    clear_operation_context,
    get_operation_context,
    operation_context,
    set_operation_context,
)

__all__ = [
    "JSONFormatter",
    "OperationContextFilter",
    "clear_operation_context",
    "configure_logging",
    "get_operation_context",
    "operation_context",
    "set_operation_context",
]
