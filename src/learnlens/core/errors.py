"""
Structured error types for learnlens.

Every failure that crosses a component boundary is a ``LearnLensError``
subclass carrying a category, an explicit retry flag and structured context.
The retry policy never inspects error messages when a typed error is
available; it asks the error whether it is retryable.

Manifesto:
    - **Typed Error Hierarchy:** Transient vs permanent is decided by type
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry specialist/session metadata for logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                     LearnLensError                              │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  TransientError          ValidationError       ConfigError      │
        │  (retryable=True)        (VALIDATION)          (CONFIG)         │
        │       │                        │                                 │
        │  NetworkError            PayloadValidationError                 │
        │  DeadlineExceeded                                                │
        │  RateLimitError          IngestError           SessionError     │
        │  UpstreamUnavailableError (PARSE)              (ORCHESTRATION)  │
        │                                                                  │
        │  SpecialistHTTPError  (SPECIALIST, retryable iff 429/502/503)   │
        └─────────────────────────────────────────────────────────────────┘

Tags:
    error-handling, exception-hierarchy, retry-logic, learnlens

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import errno
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

import httpx

#: HTTP status codes that signal a condition expected to clear on its own.
TRANSIENT_STATUS_CODES = frozenset({429, 502, 503})

_TRANSIENT_ERRNOS = frozenset(
    {
        errno.ECONNRESET,
        errno.ECONNREFUSED,
        errno.ECONNABORTED,
        errno.ETIMEDOUT,
        errno.EHOSTUNREACH,
        errno.ENETUNREACH,
        errno.EPIPE,
    }
)

_TRANSIENT_MESSAGE_MARKERS = ("timeout", "timed out", "rate limit")


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    NETWORK = "NETWORK"           # Connection, timeout, DNS
    SPECIALIST = "SPECIALIST"     # A specialist answered with an error
    PARSE = "PARSE"               # CSV/JSON parsing
    VALIDATION = "VALIDATION"     # Schema, bounds, guardrails
    CONFIG = "CONFIG"             # Missing or invalid settings
    ORCHESTRATION = "ORCHESTRATION"  # Run-level failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """Where a failure happened.

    Attributes:
        specialist: Name of the specialist that failed
        session_id: Session the failing run belonged to
        attempt: One-based attempt number
        url: Endpoint of a remote specialist
        http_status: Status a remote specialist answered with
        metadata: Anything else (file paths, field names, ...)
    """

    specialist: str | None = None
    session_id: str | None = None
    attempt: int | None = None
    url: str | None = None
    http_status: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def set(self, key: str, value: Any) -> None:
        if key in _CONTEXT_FIELDS:
            setattr(self, key, value)
        else:
            self.metadata[key] = value

    def to_dict(self) -> dict[str, Any]:
        """Flat view of every populated key, metadata included."""
        populated = {key: getattr(self, key) for key in _CONTEXT_FIELDS if getattr(self, key) is not None}
        return {**populated, **self.metadata}


_CONTEXT_FIELDS = tuple(f.name for f in fields(ErrorContext) if f.name != "metadata")


class LearnLensError(Exception):
    """
    Base exception for all learnlens errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override either per instance. ``cause`` is chained as ``__cause__``.

    Examples:
        >>> TransientError("Connection reset").retryable
        True
        >>> PayloadValidationError("engagementRate out of bounds").retryable
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = self.default_retryable if retryable is None else retryable
        self.context = context or ErrorContext()
        self.cause = cause
        self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> LearnLensError:
        """
        Attach where the failure happened and return ``self``.

        Usage:
            raise PayloadValidationError("bad payload").with_context(
                specialist="rating", attempt=2
            )
        """
        for key, value in kwargs.items():
            self.context.set(key, value)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Log-friendly view: type, message, category, retry flag, context, cause."""
        info: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if context := self.context.to_dict():
            info["context"] = context
        if self.cause is not None:
            info["cause"] = str(self.cause)
        return info

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS (Retryable)
# =============================================================================


class TransientError(LearnLensError):
    """Temporary error that may succeed on retry."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class NetworkError(TransientError):
    """Connection reset, refused or unreachable."""


class DeadlineExceeded(TransientError):
    """An attempt did not finish before its deadline."""

    def __init__(self, message: str, *, timeout: float | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.timeout = timeout


class RateLimitError(TransientError):
    """Upstream asked us to slow down (HTTP 429)."""


class UpstreamUnavailableError(TransientError):
    """Upstream temporarily unavailable (HTTP 502/503)."""


# =============================================================================
# PERMANENT ERRORS
# =============================================================================


class ValidationError(LearnLensError):
    """Input failed validation. Never retryable."""

    default_category = ErrorCategory.VALIDATION


class PayloadValidationError(ValidationError):
    """A specialist returned a payload outside its declared contract."""


class ConfigError(LearnLensError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG


class IngestError(LearnLensError):
    """Learner records could not be read from their source."""

    default_category = ErrorCategory.PARSE


class SessionError(LearnLensError):
    """The orchestrator could not allocate or update a session.

    The only failure that aborts a whole run.
    """

    default_category = ErrorCategory.ORCHESTRATION


class SpecialistHTTPError(LearnLensError):
    """A remote specialist answered with a non-2xx status."""

    default_category = ErrorCategory.SPECIALIST

    def __init__(self, status_code: int, message: str = "", **kwargs: Any):
        kwargs.setdefault("retryable", status_code in TRANSIENT_STATUS_CODES)
        super().__init__(message or f"specialist returned HTTP {status_code}", **kwargs)
        self.status_code = status_code
        self.context.http_status = status_code


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def _status_of(error: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def is_transient(error: BaseException) -> bool:
    """Decide whether ``error`` is worth retrying.

    Timeouts, connection resets, unreachable hosts, rate limiting (429) and
    upstream unavailability (502/503) are transient; everything else is
    permanent.
    """
    if isinstance(error, LearnLensError):
        return error.retryable
    if isinstance(error, (TimeoutError, ConnectionError, httpx.TransportError)):
        return True
    if isinstance(error, OSError) and error.errno in _TRANSIENT_ERRNOS:
        return True
    if _status_of(error) in TRANSIENT_STATUS_CODES:
        return True
    message = str(error).lower()
    return any(marker in message for marker in _TRANSIENT_MESSAGE_MARKERS)


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, LearnLensError):
        return error.category
    if isinstance(error, (TimeoutError, ConnectionError, httpx.TransportError)):
        return ErrorCategory.NETWORK
    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "TRANSIENT_STATUS_CODES",
    "ErrorCategory",
    "ErrorContext",
    "LearnLensError",
    "TransientError",
    "NetworkError",
    "DeadlineExceeded",
    "RateLimitError",
    "UpstreamUnavailableError",
    "ValidationError",
    "PayloadValidationError",
    "ConfigError",
    "IngestError",
    "SessionError",
    "SpecialistHTTPError",
    "is_transient",
    "categorize_error",
]
