"""Exception hierarchy for the Monime client.

Every error raised by the library derives from :class:`MonimeError`, so
callers can catch the whole family with a single ``except`` clause and
branch on the concrete subclass (or its attributes) without matching on
message text.

:func:`classify` turns any exception raised by an attempt into a
:class:`RetryDecision` which the request executor's retry loop consumes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

# HTTP status codes the platform documents as transient.
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class MonimeError(Exception):
    """Base exception for all Monime client errors."""


class MonimeApiError(MonimeError):
    """Raised when the API answers with a non-2xx status or an unparseable body.

    Attributes:
        code: HTTP status code (or the ``error.code`` of the error envelope).
        reason: Machine-readable reason, e.g. ``"not_found"``,
            ``"http_error"`` or ``"invalid_json"``.
        details: Structured details from the error envelope.
        retry_after: Delay in seconds parsed from the ``Retry-After``
            response header, or ``None``.
    """

    def __init__(
        self,
        message: str,
        code: int,
        reason: str,
        details: Optional[list] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.reason = reason
        self.details = list(details) if details else []
        self.retry_after = retry_after

    @property
    def is_retryable(self) -> bool:
        return self.code in RETRYABLE_STATUS_CODES

    def __repr__(self) -> str:
        return (
            f"MonimeApiError(code={self.code!r}, reason={self.reason!r}, "
            f"message={self.message!r})"
        )


class MonimeTimeoutError(MonimeError):
    """Raised when the configured timeout elapses before a response arrives."""

    def __init__(self, timeout: float, url: str) -> None:
        super().__init__(f"Request to {url} timed out after {timeout}s")
        self.timeout = timeout
        self.url = url


class MonimeNetworkError(MonimeError):
    """Raised for transport failures (DNS, refused or reset connections)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause

    @property
    def is_retryable(self) -> bool:
        return True


class MonimeValidationError(MonimeError):
    """Raised when caller input fails validation before any request is sent."""

    def __init__(self, message: str, field: str, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class RequestCancelledError(MonimeError):
    """Raised when the caller's own :class:`~monime.cancellation.CancelToken` fires."""

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(reason or "Request was cancelled")
        self.reason = reason


# ---------------------------------------------------------------------------
# Retry classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of :func:`classify` for a failed attempt."""

    retryable: bool
    delay_hint: Optional[float] = None


def classify(error: BaseException) -> RetryDecision:
    """Decide whether *error* may be retried and with what delay hint.

    Network errors are always retryable.  API errors are retryable only
    for 429 and the 5xx gateway codes, and carry their ``Retry-After``
    value as the delay hint.  Everything else, including timeouts,
    cancellations and validation failures, is terminal.
    """
    if isinstance(error, MonimeNetworkError):
        return RetryDecision(retryable=True)
    if isinstance(error, MonimeApiError):
        return RetryDecision(
            retryable=error.is_retryable,
            delay_hint=error.retry_after,
        )
    return RetryDecision(retryable=False)


__all__ = [
    "MonimeApiError",
    "MonimeError",
    "MonimeNetworkError",
    "MonimeTimeoutError",
    "MonimeValidationError",
    "RETRYABLE_STATUS_CODES",
    "RequestCancelledError",
    "RetryDecision",
    "classify",
]
