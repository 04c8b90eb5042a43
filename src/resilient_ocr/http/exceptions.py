"""
Typed failures raised by the resilient request executor.

Callers pattern-match on the failure kind to decide domain-specific handling:

- TimeoutFailure: the attempt's own deadline elapsed
- TransportFailure: connection-level failure (reset, DNS, refused, ...)
- HTTPFailure: terminal non-success response
- CancelledFailure: caller-driven abort, never retried

All of them carry the number of attempts made so the caller can log or map
them into a domain error.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from resilient_ocr.http.models import ResponseBody


class RequestFailure(Exception):
    """
    Base exception for all executor failures.

    Raised directly only when the attempt loop ends without a recorded
    failure.
    """

    def __init__(self, message: str, attempts: int = 0, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.attempts = attempts
        self.details = details or {}


class TimeoutFailure(RequestFailure):
    """Raised when an attempt exceeds its per-attempt deadline."""

    def __init__(self, timeout: float, attempts: int):
        super().__init__(
            f"Request aborted after {timeout}s",
            attempts=attempts,
            details={"timeout": timeout},
        )
        self.timeout = timeout


class TransportFailure(RequestFailure):
    """
    Raised when the underlying send fails below the HTTP layer.

    The original exception is available as ``original`` and is chained as
    ``__cause__`` when raised by the executor.
    """

    def __init__(self, original: BaseException, attempts: int):
        super().__init__(
            f"Transport error: {original}",
            attempts=attempts,
            details={"error_type": type(original).__name__},
        )
        self.original = original


class HTTPFailure(RequestFailure):
    """Raised for a terminal non-success HTTP response."""

    def __init__(
        self,
        status: int,
        status_text: str,
        body: Optional["ResponseBody"] = None,
        attempts: int = 0,
    ):
        super().__init__(
            f"HTTP Error {status}: {status_text}",
            attempts=attempts,
            details={"status": status, "status_text": status_text},
        )
        self.status = status
        self.status_text = status_text
        self.body = body


class CancelledFailure(RequestFailure):
    """Raised when the caller's cancellation token fires."""

    def __init__(self, attempts: int, reason: Optional[str] = None):
        super().__init__(
            "Request cancelled by caller",
            attempts=attempts,
            details={"reason": reason},
        )
        self.reason = reason


class RequestCancelled(Exception):
    """
    Raised by a send primitive when its cancellation token fires.

    This is the cancellation-class signal at the transport boundary; the
    executor turns it into TimeoutFailure or CancelledFailure depending on
    which source fired.
    """

    def __init__(self, reason: Optional[str] = None):
        super().__init__(f"Request aborted ({reason or 'cancelled'})")
        self.reason = reason
