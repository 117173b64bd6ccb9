"""
Structured logging configuration for stickerpacks.

Provides JSON-formatted logging with:
- Publisher contact details redacted (emails never reach the logs)
- Content URIs collapsed to their route shape, so pack identifiers and
  filenames requested by the consumer do not leak into log labels
- Raw asset bytes and manifest bodies dropped

Usage:
    from stickerpacks.logging_config import setup_logging, get_logger

    setup_logging()  # Call once at startup
    logger = get_logger(__name__)
    logger.info("message", extra={"uri": uri})
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

# content://authority/route[/...] -> route shape
_CONTENT_URI_PATTERN = re.compile(r"content://[^\s/\"'<>]+(/[^\s\"'<>]*)?")
_EMAIL_PATTERN = re.compile(r"\b[\w.+%-]+@[\w-]+(\.[\w-]+)+\b")

# Fields that should never appear in logs
BLOCKED_FIELDS: frozenset[str] = frozenset(
    {
        "email",
        "publisher_email",
        "password",
        "secret",
        "token",
    }
)

# Fields whose values are replaced outright
REDACTED_FIELDS: dict[str, str] = {
    "data": "[BYTES]",
    "asset_bytes": "[BYTES]",
    "payload": "[BYTES]",
    "manifest": "[MANIFEST]",
    "emojis": "[EMOJIS]",
}

# LogRecord attributes that are not user-supplied extras
_RECORD_ATTRS: frozenset[str] = frozenset(
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


def _normalize_uri(uri: str) -> str:
    """Collapse a content URI to its route shape.

    content://auth/stickers_asset/cats/01.webp -> stickers_asset/*/*
    content://auth/metadata/cats               -> metadata/*
    """
    match = _CONTENT_URI_PATTERN.match(uri)
    if match is None:
        return "[URI]"
    segments = [s for s in (match.group(1) or "").split("/") if s]
    if not segments:
        return "/"
    return "/".join([segments[0], *("*" for _ in segments[1:])])


def _sanitize_text(text: str) -> str:
    """Remove emails and collapse content URIs in free-form text."""
    if not text:
        return text
    result = _CONTENT_URI_PATTERN.sub(lambda m: _normalize_uri(m.group(0)), text)
    return _EMAIL_PATTERN.sub("[EMAIL]", result)


def _filter_log_record(record: dict[str, Any], *, _depth: int = 0) -> dict[str, Any]:
    """Filter sensitive and payload fields from extra log fields.

    Recursively filters nested dicts up to depth 3.
    """
    if _depth > 3:
        return {"_truncated": "max depth exceeded"}

    filtered: dict[str, Any] = {}
    for key, value in record.items():
        key_lower = key.lower()

        if any(blocked in key_lower for blocked in BLOCKED_FIELDS):
            continue

        if key_lower in REDACTED_FIELDS:
            filtered[key] = REDACTED_FIELDS[key_lower]
            continue

        if key_lower == "uri" and isinstance(value, str):
            filtered["route"] = _normalize_uri(value)
            continue

        if isinstance(value, (bytes, bytearray, memoryview)):
            filtered[key] = f"[bytes:{len(value)}]"
        elif isinstance(value, (int, float, bool, type(None))):
            filtered[key] = value
        elif isinstance(value, str):
            filtered[key] = _sanitize_text(value)
        elif isinstance(value, (list, tuple)):
            filtered[key] = list(value) if len(value) <= 10 else f"[list:{len(value)} items]"
        elif isinstance(value, dict):
            filtered[key] = _filter_log_record(value, _depth=_depth + 1)
        else:
            filtered[key] = _sanitize_text(str(value))

    return filtered


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
    return _filter_log_record(extra) if extra else {}


class JsonFormatter(logging.Formatter):
    """JSON log formatter, one object per line.

    Output format:
    {"ts":"2026-01-01T00:00:00.000+00:00","level":"INFO","logger":"module","msg":"...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_dict: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": _sanitize_text(record.getMessage()),
        }

        if record.levelno >= logging.WARNING:
            log_dict["file"] = record.filename
            log_dict["line"] = record.lineno

        if record.exc_info:
            log_dict["exc"] = _sanitize_text(self.formatException(record.exc_info))

        log_dict.update(_extra_fields(record))
        return json.dumps(log_dict, default=str, ensure_ascii=False)


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for development and tests."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single line."""
        base = f"{record.levelname:8s} {record.name}: {_sanitize_text(record.getMessage())}"
        extra = _extra_fields(record)
        if extra:
            base = f"{base} | " + " ".join(f"{k}={v}" for k, v in extra.items())
        if record.exc_info:
            base = f"{base}\n{_sanitize_text(self.formatException(record.exc_info))}"
        return base


def setup_logging(
    *,
    level: int | str = logging.INFO,
    json_format: bool = True,
    stream: Any = None,
) -> None:
    """Configure logging for the application.

    Call once at startup.

    Args:
        level: Log level (default INFO).
        json_format: Use JSON formatter (default True for production).
        stream: Output stream (default stderr).
    """
    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter() if json_format else SimpleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # Pillow logs every plugin probe at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__).
    """
    return logging.getLogger(name)
