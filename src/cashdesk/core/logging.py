"""Logging configuration: text or JSON output with redaction of customer data.

Ticket records may carry a customer phone number and operators type PINs at
the terminal; neither may end up in log files.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import UTC, datetime
from typing import Any

# Keys whose values are always redacted in structured output
SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"phone", re.IGNORECASE),
    re.compile(r"\bpin\b|_pin$|^pin_", re.IGNORECASE),
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
    re.compile(r"authorization", re.IGNORECASE),
]

REDACTED = "***REDACTED***"

# +55 11 91234-5678, (11) 91234 5678, 11912345678 ...
_PHONE_RE = re.compile(r"(?<![\w-])\+?\(?\d{2,3}\)?[\s.-]?\d{4,5}[\s.-]?\d{4}(?![\w-])")
_PIN_RE = re.compile(r"(pin[\s=:]+)\d+", re.IGNORECASE)

_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "correlation_id",
}


def is_sensitive_key(key: str) -> bool:
    return any(p.search(key) for p in SENSITIVE_PATTERNS)


def redact_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively redact sensitive fields from a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if is_sensitive_key(key):
            result[key] = REDACTED
        elif isinstance(value, dict):
            result[key] = redact_dict(value)
        elif isinstance(value, list):
            result[key] = [redact_dict(item) if isinstance(item, dict) else item for item in value]
        else:
            result[key] = value
    return result


def redact_string(text: str) -> str:
    """Mask phone numbers and PINs in freeform log text.

    Ticket codes (``OCT-...``) and draw numbers (``0289-...``) are hyphen
    delimited and are left intact so incidents can be traced.
    """
    text = _PIN_RE.sub(r"\1" + REDACTED, text)
    return _PHONE_RE.sub(REDACTED, text)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, redacted."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_string(record.getMessage()),
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": redact_string(str(record.exc_info[1])),
            }

        extras = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extras:
            log_entry["extra"] = redact_dict(extras)

        return json.dumps(log_entry, default=str)


class RedactingFormatter(logging.Formatter):
    """Human-readable formatter for the terminal console."""

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(
            fmt=fmt or "%(asctime)s [%(levelname)s] %(name)s [%(correlation_id)s]: %(message)s",
            datefmt=datefmt or "%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return redact_string(super().format(record))


class CorrelationFilter(logging.Filter):
    """Stamp each record with the current request's correlation ID."""

    def filter(self, record: logging.LogRecord) -> bool:
        from cashdesk.core.context import get_correlation_id

        record.correlation_id = get_correlation_id() or "-"
        return True


def setup_logging(level: str = "INFO", log_format: str = "text") -> None:
    """Configure root logging for the service.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: "json" for structured output, anything else for text.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(RedactingFormatter())
    handler.addFilter(CorrelationFilter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
