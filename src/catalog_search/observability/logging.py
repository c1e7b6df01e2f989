"""Structured JSON logging for indexing runs and searches.

Each line is one orjson-encoded object. Records emitted inside
``operation_scope`` carry its task, run id and operation; records emitted
inside a recorded span also carry the trace and span ids.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import IO, Any

import orjson

from catalog_search.observability.context import get_operation_context
from catalog_search.observability.tracing import current_trace_ids


PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Attributes every LogRecord has; anything else on a record came from ``extra=``.
_STANDARD_ATTRIBUTES = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class JsonFormatter(logging.Formatter):
    """One JSON object per record, correlated with the active operation and span."""

    REDACT_KEYS = frozenset({"password", "token", "api_key", "secret", "authorization"})
    MAX_MESSAGE_LEN = 2000
    MAX_EXTRA_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
            "logger": record.name,
        }
        # catalog_search.search.index_store -> index_store
        if "." in record.name:
            entry["component"] = record.name.rsplit(".", 1)[-1]

        entry.update(get_operation_context())
        entry.update(current_trace_ids())

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRIBUTES or key.startswith("_"):
                continue
            entry[key] = self._extra_value(key, value)

        return orjson.dumps(entry, default=self._encode_fallback).decode("utf-8")

    def _extra_value(self, key: str, value: Any) -> Any:
        if key.lower() in self.REDACT_KEYS:
            return "[REDACTED]"
        if isinstance(value, str):
            return _clip(value, self.MAX_EXTRA_LEN)
        return value

    @staticmethod
    def _encode_fallback(value: Any) -> Any:
        if isinstance(value, (set, frozenset)):
            try:
                return sorted(value)
            except TypeError:
                return list(value)
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, (bytes, bytearray)):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, BaseException):
            return f"{type(value).__name__}: {value}"
        return repr(value)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Replace the root handlers with a single stream handler.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines when True, plain text otherwise
        logger_levels: Per-logger level overrides (logger name -> level name)
        stream: Destination stream (default: stdout)

    Returns:
        The installed handler.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)

    for logger_name, logger_level in (logger_levels or {}).items():
        logging.getLogger(logger_name).setLevel(getattr(logging, logger_level.upper(), logging.INFO))
    return handler
