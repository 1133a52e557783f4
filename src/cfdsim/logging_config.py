"""
Structured logging configuration for the position simulator.

Provides JSON-formatted structured logging with:
- Bounded log lines (long lists summarised, nested dicts depth-capped)
- Decimal values rendered as plain strings
- One handler on the root logger, installed once

Usage:
    import logging

    from cfdsim.logging_config import setup_logging

    setup_logging()  # Call once at startup
    logger = logging.getLogger(__name__)
    logger.info("message", extra={"key": "value"})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

# Attributes every LogRecord carries; anything else came in via `extra`.
_RESERVED_ATTRS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "message",
        "taskName",
    }
)

# Fields that would dump a whole sweep into one log line
BULK_FIELDS: frozenset[str] = frozenset({"rows", "rules", "results", "prices"})

MAX_LIST_ITEMS = 10
MAX_DEPTH = 3


def _filter_log_record(record: dict[str, Any], *, _depth: int = 0) -> dict[str, Any]:
    """Make extra fields safe to serialise on a single line.

    Recursively filters nested dicts up to MAX_DEPTH.
    """
    if _depth > MAX_DEPTH:
        return {"_truncated": "max depth exceeded"}

    filtered: dict[str, Any] = {}

    for key, value in record.items():
        if key.lower() in BULK_FIELDS and isinstance(value, (list, tuple)):
            filtered[key] = f"[list:{len(value)} items]"
        elif isinstance(value, (int, float, bool, str, type(None))):
            filtered[key] = value
        elif isinstance(value, Decimal):
            filtered[key] = str(value)
        elif isinstance(value, (list, tuple)):
            if len(value) <= MAX_LIST_ITEMS:
                filtered[key] = [str(v) if isinstance(v, Decimal) else v for v in value]
            else:
                filtered[key] = f"[list:{len(value)} items]"
        elif isinstance(value, dict):
            filtered[key] = _filter_log_record(value, _depth=_depth + 1)
        else:
            filtered[key] = str(value)

    return filtered


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
    return _filter_log_record(extra) if extra else {}


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Output format (one object per line):
    {"ts":"2024-01-01T00:00:00.000+00:00","level":"INFO","logger":"module","msg":"...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_dict: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        # Add location for warnings and errors
        if record.levelno >= logging.WARNING:
            log_dict["file"] = record.filename
            log_dict["line"] = record.lineno

        if record.exc_info:
            log_dict["exc"] = self.formatException(record.exc_info)

        log_dict.update(_extra_fields(record))

        return json.dumps(log_dict, default=str, ensure_ascii=False)


class SimpleFormatter(logging.Formatter):
    """Simple formatter for development/testing.

    Human-readable output with extra fields appended as key=value.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable string."""
        base = f"{record.levelname:8s} {record.name}: {record.getMessage()}"

        extra = _extra_fields(record)
        if extra:
            extra_str = " ".join(f"{k}={v}" for k, v in extra.items())
            base = f"{base} | {extra_str}"

        return base


def setup_logging(
    *,
    level: int | str = logging.INFO,
    json_format: bool = True,
    stream: Any = None,
) -> None:
    """Configure structured logging for the application.

    Call once at application startup.

    Args:
        level: Log level (default INFO).
        json_format: Use JSON formatter (default True).
        stream: Output stream (default stderr).
    """
    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter() if json_format else SimpleFormatter())

    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()
    root.addHandler(handler)

    # matplotlib is chatty at DEBUG (font cache, backend selection)
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
