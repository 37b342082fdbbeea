"""
Structured logging configuration for the scalper bot.

Provides JSON-formatted (or simple, human readable) logging with:
- Exchange credential filtering (API keys, secrets, request signatures)
- Decimal-safe rendering of extra fields
- No runtime state that affects backtest determinism

Usage:
    from scalper.logging_config import setup_logging, get_logger

    setup_logging()  # Call once at startup
    logger = get_logger(__name__)
    logger.info("message", extra={"order_id": "42"})
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

# Credential patterns that might leak into free text (exception messages, URLs)
_SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(api[_-]?key|apikey|key)[=:]\s*['\"]?[\w\-]+['\"]?", re.I), "[API_KEY]"),
    (re.compile(r"\b(api[_-]?secret|secret)[=:]\s*['\"]?[\w\-/+=]+['\"]?", re.I), "[SECRET]"),
    (re.compile(r"\b(signature|sign)[=:]\s*['\"]?[0-9a-fA-F]{32,}['\"]?", re.I), "[SIGNATURE]"),
    (re.compile(r"\b(client[_-]?id)[=:]\s*['\"]?[\w\-]+['\"]?", re.I), "[CLIENT_ID]"),
]

# Extra fields that must never appear in logs
BLOCKED_FIELDS: frozenset[str] = frozenset(
    {
        "key",
        "api_key",
        "secret",
        "api_secret",
        "client-id",
        "client_id",
        "passphrase",
        "signature",
        "nonce",
        "password",
        "authorization",
    }
)

# Standard LogRecord attributes, never treated as extra fields
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


def _sanitize_text(text: str) -> str:
    """Redact exchange credentials from free-form text."""
    if not text:
        return text
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def _is_blocked(key: str) -> bool:
    key_lower = key.lower()
    if key_lower in BLOCKED_FIELDS:
        return True
    # Partial match on the multi-letter credential names only; plain "key"
    # would otherwise block fields like "dedupe_key"
    return any(b in key_lower for b in BLOCKED_FIELDS if b not in {"key", "sign"})


def _filter_extra(record: dict[str, Any], *, _depth: int = 0) -> dict[str, Any]:
    """Drop credential fields and render values as JSON-safe scalars.

    Recursively filters nested dicts up to depth 3.
    """
    if _depth > 3:
        return {"_truncated": "max depth exceeded"}

    filtered: dict[str, Any] = {}
    for key, value in record.items():
        if _is_blocked(key):
            continue
        if isinstance(value, (int, float, bool, type(None))):
            filtered[key] = value
        elif isinstance(value, Decimal):
            filtered[key] = str(value)
        elif isinstance(value, str):
            filtered[key] = _sanitize_text(value)
        elif isinstance(value, dict):
            filtered[key] = _filter_extra(value, _depth=_depth + 1)
        elif isinstance(value, (list, tuple)):
            if len(value) <= 10:
                filtered[key] = [str(v) if isinstance(v, Decimal) else v for v in value]
            else:
                filtered[key] = f"[list:{len(value)} items]"
        else:
            filtered[key] = _sanitize_text(str(value))
    return filtered


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class JsonFormatter(logging.Formatter):
    """JSON log formatter, one object per line.

    Output format:
    {"ts":"2024-01-01T00:00:00.000+00:00","level":"INFO","logger":"module","msg":"...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
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

        extra = _extra_fields(record)
        if extra:
            log_dict.update(_filter_extra(extra))

        return json.dumps(log_dict, default=str, ensure_ascii=False)


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for development and backtests."""

    def format(self, record: logging.LogRecord) -> str:
        base = f"{record.levelname:8s} {record.name}: {_sanitize_text(record.getMessage())}"

        extra = _filter_extra(_extra_fields(record))
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

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__).
    """
    return logging.getLogger(name)
