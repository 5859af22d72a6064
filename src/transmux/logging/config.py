"""Log output setup for transmux.

configure_logging() points the root logger at stderr and/or a rotating log
file. Both outputs carry the operation context: text lines get the
"[op:1a2b3c4d#1] " tag, JSON lines an "operation" object.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

from transmux.logging.context import OperationContextFilter

if TYPE_CHECKING:
    from transmux.config.models import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(operation_tag)s%(name)s: %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Attributes every record has; anything else arrived through extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "operation_id",
    "segment",
    "operation_tag",
}


def _operation_fields(record: logging.LogRecord) -> dict[str, Any]:
    operation_id = getattr(record, "operation_id", None)
    if not operation_id:
        return {}
    fields: dict[str, Any] = {
        "id": operation_id,
        "tag": getattr(record, "operation_tag", "").strip(),
    }
    segment = getattr(record, "segment", None)
    if segment is not None:
        fields["segment"] = segment
    return fields


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object.

    Keys are ``time``, ``level``, ``logger`` and ``message``, plus when
    present ``operation`` (``id``, ``tag`` and ``segment``), ``extra`` (values
    passed with ``extra=``) and ``exception``.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "time": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        operation = _operation_fields(record)
        if operation:
            entry["operation"] = operation

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _make_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.format.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)


def _open_log_file(config: LoggingConfig) -> logging.Handler:
    assert config.file is not None
    path = Path(config.file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )


def configure_logging(config: LoggingConfig, stream: IO[str] | None = None) -> None:
    """Route log records according to config.

    A log file that cannot be opened falls back to the console; the failure
    is logged once the fallback handler is in place.

    Args:
        config: Logging configuration.
        stream: Console stream, sys.stderr when None.
    """
    level = _LEVELS.get(config.level.casefold(), logging.INFO)

    handlers: list[logging.Handler] = []
    file_error: OSError | None = None
    if config.file is not None:
        try:
            handlers.append(_open_log_file(config))
        except OSError as e:
            file_error = e
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(stream or sys.stderr))

    formatter = _make_formatter(config)
    context_filter = OperationContextFilter()

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)

    if file_error is not None:
        logging.getLogger(__name__).warning(
            "Could not open log file %s, logging to stderr: %s",
            config.file,
            file_error,
        )
