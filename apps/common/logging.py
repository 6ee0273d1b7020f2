"""
Logging utilities for the Dispatch Dashboard.

- Request context held in thread-local storage (request id, session email, client IP)
- RequestIDFilter / ServiceNameFilter to enrich every record
- SensitiveDataFilter to keep bearer tokens and API keys out of logs
- DashboardJSONFormatter for structured logs in production
"""

from __future__ import annotations

import json
import logging
import re
import threading
from datetime import UTC, datetime
from typing import Any, ClassVar

# Thread-local storage for request context
_request_context = threading.local()

_CONTEXT_FIELDS = ("request_id", "user_email", "ip_address")


def set_request_context(**kwargs: Any) -> None:
    """Set request context for the current thread"""
    for key, value in kwargs.items():
        setattr(_request_context, key, value)


def get_request_id() -> str | None:
    """Get the current request ID from thread-local storage."""
    return getattr(_request_context, "request_id", None)


def get_request_context() -> dict[str, Any]:
    return {
        "request_id": getattr(_request_context, "request_id", "-"),
        "user_email": getattr(_request_context, "user_email", None),
        "ip_address": getattr(_request_context, "ip_address", None),
    }


def clear_request_context() -> None:
    """Clear request context for the current thread"""
    for attr in _CONTEXT_FIELDS:
        if hasattr(_request_context, attr):
            delattr(_request_context, attr)


class RequestIDFilter(logging.Filter):
    """
    Add request ID and context to log records.

    Injects the request ID from thread-local storage into every log record,
    enabling request tracing across the dashboard and the Dispatch API.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = getattr(_request_context, "request_id", "-")
        if not hasattr(record, "user_email"):
            record.user_email = getattr(_request_context, "user_email", None)
        if not hasattr(record, "ip_address"):
            record.ip_address = getattr(_request_context, "ip_address", None)
        return True


class ServiceNameFilter(logging.Filter):
    """Inject a fixed service tag into every log record."""

    def __init__(self, service_name: str = "DASH") -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, "service_name", self.service_name)  # noqa: B010
        return True


class SensitiveDataFilter(logging.Filter):
    """
    Redact credentials from log messages.

    Session tokens are JWTs and API keys carry a recognizable prefix, so both
    are matched by shape rather than by the word that precedes them.
    """

    SENSITIVE_PATTERNS: ClassVar[list[re.Pattern[str]]] = [
        re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.=]+", re.IGNORECASE),
        re.compile(r"eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+"),
        re.compile(r"\b(?:sk|dk|pk)_(?:live|test)_[A-Za-z0-9]+"),
        re.compile(r"((?:api_?key|password|secret)[\"']?\s*[:=]\s*[\"']?)[^\s,\"'}]+", re.IGNORECASE),
    ]

    REDACTION_TEXT = "[REDACTED]"

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(self.redact(a) if isinstance(a, str) else a for a in record.args)
        return True

    def redact(self, text: str) -> str:
        for pattern in self.SENSITIVE_PATTERNS:
            if pattern.groups:
                text = pattern.sub(lambda m: (m.group(1) or "") + self.REDACTION_TEXT, text)
            else:
                text = pattern.sub(self.REDACTION_TEXT, text)
        return text


class DashboardJSONFormatter(logging.Formatter):
    """
    One JSON object per line for production log shipping.

    Carries the request context (request id, signed-in email, client IP) so a
    line can be traced back to the agent and request that produced it. Context
    fields that were never set are left out.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": getattr(record, "service_name", "DASH"),
            "msg": record.getMessage(),
        }
        context = get_request_context()
        for name in _CONTEXT_FIELDS:
            value = getattr(record, name, None) or context[name]
            if value and value != "-":
                entry[name] = value

        if record.levelno >= logging.WARNING:
            entry["where"] = f"{record.module}:{record.funcName}:{record.lineno}"
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)
