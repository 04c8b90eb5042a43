"""
Resilient HTTP request execution.

Components:
- CancellationToken / derive: composable cooperative cancellation
- RetryPolicy / RequestSpec: per-call configuration and request descriptor
- ResilientExecutor: attempt loop with deadlines, backoff and classification
- HttpxSender: default send primitive backed by httpx.AsyncClient
- exceptions: typed failures (timeout, transport, HTTP, cancellation)
"""

from resilient_ocr.http.cancellation import CancellationToken, derive
from resilient_ocr.http.exceptions import (
    CancelledFailure,
    HTTPFailure,
    RequestCancelled,
    RequestFailure,
    TimeoutFailure,
    TransportFailure,
)
from resilient_ocr.http.executor import ResilientExecutor
from resilient_ocr.http.models import (
    EmptyBody,
    JsonBody,
    RequestSpec,
    ResponseBody,
    RetryPolicy,
    TextBody,
    default_retryable_status,
    read_response_body,
)
from resilient_ocr.http.transport import HttpxSender, Sender

__all__ = [
    "CancellationToken",
    "derive",
    "RequestFailure",
    "TimeoutFailure",
    "TransportFailure",
    "HTTPFailure",
    "CancelledFailure",
    "RequestCancelled",
    "ResilientExecutor",
    "RequestSpec",
    "RetryPolicy",
    "ResponseBody",
    "JsonBody",
    "TextBody",
    "EmptyBody",
    "default_retryable_status",
    "read_response_body",
    "HttpxSender",
    "Sender",
]
