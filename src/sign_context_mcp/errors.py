"""Structured error handling: exception taxonomy, classification, and tool error model."""

from __future__ import annotations

from enum import Enum

import httpx
from pydantic import BaseModel

_QUOTA_PATTERNS: tuple[str, ...] = ("429", "quota", "resource_exhausted", "rate limit")
_TRANSIENT_PATTERNS: tuple[str, ...] = _QUOTA_PATTERNS + (
    "timeout",
    "timed out",
    "503",
    "service unavailable",
)


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    MALFORMED_RESULT = "MALFORMED_RESULT"
    REQUEST_FAILED = "REQUEST_FAILED"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_UNSUPPORTED = "FILE_UNSUPPORTED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNKNOWN = "UNKNOWN"


class SignContextError(Exception):
    """Base class for failures of an analysis or chat request."""

    category = ErrorCategory.UNKNOWN


class MissingCredentialError(SignContextError):
    category = ErrorCategory.MISSING_CREDENTIAL


class QuotaExceededError(SignContextError):
    category = ErrorCategory.QUOTA_EXCEEDED


class EmptyResponseError(SignContextError):
    category = ErrorCategory.EMPTY_RESPONSE


class MalformedResultError(SignContextError):
    """The model answered, but the answer could not be parsed into a result."""

    category = ErrorCategory.MALFORMED_RESULT


class RequestFailedError(SignContextError):
    """Catch-all transport or model failure."""

    category = ErrorCategory.REQUEST_FAILED


class UnsupportedMediaError(ValueError):
    """File has no video/* or audio/* type."""


class SessionNotFoundError(KeyError):
    def __str__(self) -> str:
        return f"Session {self.args[0]} not found or expired" if self.args else "Session not found"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False
    retry_after_seconds: int | None = None


def is_quota_error(error: BaseException) -> bool:
    """Best-effort rate-limit detection.

    Checks the HTTP status carried by ``google.genai.errors.APIError`` when
    present, then falls back to matching the failure text.
    """
    if getattr(error, "code", None) == 429:
        return True
    s = str(error).lower()
    return any(p in s for p in _QUOTA_PATTERNS)


def is_transient(error: BaseException) -> bool:
    """True for failures worth retrying (rate limits, timeouts, 503s)."""
    if isinstance(error, (TimeoutError, httpx.TimeoutException, httpx.NetworkError)):
        return True
    if getattr(error, "code", None) in (429, 503):
        return True
    s = str(error).lower()
    return any(p in s for p in _TRANSIENT_PATTERNS)


def classify_failure(error: BaseException) -> SignContextError:
    """Map an arbitrary transport/model exception onto the request taxonomy.

    ``SignContextError`` instances pass through unchanged.
    """
    if isinstance(error, SignContextError):
        return error
    if is_quota_error(error):
        return QuotaExceededError(f"Quota exceeded (429): {error}")
    if isinstance(error, (TimeoutError, httpx.TimeoutException)):
        detail = str(error)
        return RequestFailedError(f"Request timed out: {detail}" if detail else "Request timed out")
    return RequestFailedError(str(error) or type(error).__name__)


def categorize_error(error: BaseException) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, SignContextError):
        cat = error.category
    elif isinstance(error, SessionNotFoundError):
        cat = ErrorCategory.SESSION_NOT_FOUND
    elif isinstance(error, FileNotFoundError):
        cat = ErrorCategory.FILE_NOT_FOUND
    elif isinstance(error, UnsupportedMediaError):
        cat = ErrorCategory.FILE_UNSUPPORTED
    elif isinstance(error, (ValueError, PermissionError)):
        cat = ErrorCategory.INVALID_ARGUMENT
    elif isinstance(error, (TimeoutError, httpx.TimeoutException, httpx.NetworkError)):
        cat = ErrorCategory.REQUEST_FAILED
    elif is_quota_error(error):
        cat = ErrorCategory.QUOTA_EXCEEDED
    else:
        return (ErrorCategory.UNKNOWN, str(error))
    return (cat, _HINTS[cat])


_HINTS: dict[ErrorCategory, str] = {
    ErrorCategory.MISSING_CREDENTIAL: (
        "Missing API key: set GEMINI_API_KEY or call infra_credential(action='set')"
    ),
    ErrorCategory.QUOTA_EXCEEDED: (
        "Quota exceeded (429): switch to the fast variant with "
        "infra_configure(variant='fast') or set your own key with infra_credential"
    ),
    ErrorCategory.EMPTY_RESPONSE: "The model returned no text; try again",
    ErrorCategory.MALFORMED_RESULT: (
        "Analysis result was incomplete or not valid JSON; please try again"
    ),
    ErrorCategory.REQUEST_FAILED: "Request to the model failed; check connectivity and retry",
    ErrorCategory.FILE_NOT_FOUND: "File not found: check the path",
    ErrorCategory.FILE_UNSUPPORTED: "Only video/* and audio/* files are accepted",
    ErrorCategory.SESSION_NOT_FOUND: "Open the media again with media_open",
    ErrorCategory.INVALID_ARGUMENT: "Invalid input parameter",
}


def make_tool_error(error: BaseException) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    retryable = cat in {
        ErrorCategory.QUOTA_EXCEEDED,
        ErrorCategory.REQUEST_FAILED,
        ErrorCategory.EMPTY_RESPONSE,
        ErrorCategory.MALFORMED_RESULT,
    }
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
        retryable=retryable,
        retry_after_seconds=60 if cat == ErrorCategory.QUOTA_EXCEEDED else None,
    ).model_dump(mode="json")
