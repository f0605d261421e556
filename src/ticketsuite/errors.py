"""Error taxonomy & redaction helpers.

Every failure raised by ticketsuite derives from :class:`TicketSuiteError`.
Decode failures are additionally ``ValueError`` subclasses so callers that
only care about "bad payload" can catch the builtin.

Public API:
- classify_error(exc) -> ErrorInfo
- redact(text) -> str

Negative lookups (missing custom field, wrong shape) are not errors and never
surface here; typed getters report them through their ``found`` flag.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

# Credential shapes that may leak into request/response text.
_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?i)(authorization:\s*(?:basic|bearer)\s+)[A-Za-z0-9+/=._-]+"),
    re.compile(r"(?i)(\b(?:basic|bearer)\s+)[A-Za-z0-9+/=._-]{16,}"),
    re.compile(r"ATATT[A-Za-z0-9_\-=]{20,}"),  # cloud API tokens; no capture group
    re.compile(r"(?i)(api[_-]?token[\"']?\s*[:=]\s*[\"']?)[^\s\"',}]+"),
]

_REDACTION_PLACEHOLDER = "<redacted>"

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500


class TicketSuiteError(Exception):
    """Base class for all ticketsuite failures."""


class DecodeError(TicketSuiteError, ValueError):
    """A payload could not be decoded into the typed model."""


class FieldDecodeError(DecodeError):
    """Issue fields payload is malformed or violates the fixed schema."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class DocumentDecodeError(DecodeError):
    """A rich-text document payload has an invalid structure."""


class CustomFieldError(DecodeError):
    def __init__(self, field_id: str, message: str) -> None:
        super().__init__(f"custom field {field_id}: {message}")
        self.field_id = field_id
        self.message = message


class ConfigError(TicketSuiteError, RuntimeError):
    pass


class TrackerAPIError(TicketSuiteError, RuntimeError):
    """Raised when the tracker REST API answers with an error status."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        error_messages: list[str] | None = None,
        errors: dict[str, str] | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.error_messages = error_messages or []
        self.errors = errors or {}
        self.response_text = response_text


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    """Mask credentials (API tokens, basic/bearer auth values) in ``text``."""
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        if pat.groups:
            redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
        else:
            redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def _classify_api_error(exc: TrackerAPIError, msg: str) -> ErrorInfo:
    name = exc.__class__.__name__
    details = {"status": exc.status}
    status = exc.status or 0
    if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
        return ErrorInfo("api.auth", msg, name, details=details)
    if status == HTTP_NOT_FOUND:
        return ErrorInfo("api.not_found", msg, name, details=details)
    if status == HTTP_TOO_MANY_REQUESTS:
        return ErrorInfo("api.rate_limit", msg, name, transient=True, details=details)
    if status >= HTTP_SERVER_ERROR:
        return ErrorInfo("api.server", msg, name, transient=True, details=details)
    return ErrorInfo("api", msg, name, details=details)


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    - decode failures -> 'decode'
    - tracker API errors -> 'api.*' by HTTP status (429/5xx transient)
    - configuration problems -> 'config'
    - network-y keywords -> 'network', transient
    - fallback -> 'generic'
    """
    msg = redact(str(exc) if exc else "")
    low = msg.lower()
    name = exc.__class__.__name__

    if isinstance(exc, DecodeError):
        details = {"path": exc.path} if isinstance(exc, FieldDecodeError) and exc.path else None
        return ErrorInfo("decode", msg, name, details=details)
    if isinstance(exc, TrackerAPIError):
        return _classify_api_error(exc, msg)
    if isinstance(exc, ConfigError):
        return ErrorInfo("config", msg, name)
    if any(k in low for k in ("timeout", "timed out", "connection reset", "temporarily unavailable")):
        return ErrorInfo("network", msg, name, transient=True)
    return ErrorInfo("generic", msg, name)


__all__ = [
    "ConfigError",
    "CustomFieldError",
    "DecodeError",
    "DocumentDecodeError",
    "ErrorInfo",
    "FieldDecodeError",
    "TicketSuiteError",
    "TrackerAPIError",
    "classify_error",
    "redact",
]
