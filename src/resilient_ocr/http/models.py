"""
Data models for the resilient request executor.

- RetryPolicy: immutable per-call configuration (deadline, retry budget, backoff)
- RequestSpec: transport-agnostic request descriptor
- ResponseBody: tagged union of what an error response body turned out to be
- Outcome: tagged union classifying a single attempt
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field

from resilient_ocr.http.cancellation import CancellationToken
from resilient_ocr.http.exceptions import RequestFailure


def default_retryable_status(status_code: int) -> bool:
    """Rate limiting and server errors are worth another attempt."""
    return status_code == 429 or status_code >= 500


class RetryPolicy(BaseModel):
    """
    Per-call retry configuration.

    Total attempts are bounded at ``max_retries + 1``. The delay before
    attempt ``k + 1`` is ``base_backoff * 2 ** (k - 1)``.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    timeout: float = Field(default=15.0, gt=0, description="Per-attempt deadline in seconds")
    max_retries: int = Field(default=2, ge=0, description="Attempts beyond the first")
    base_backoff: float = Field(default=0.5, ge=0, description="Base backoff unit in seconds")
    retryable_predicate: Callable[[int], bool] = Field(
        default=default_retryable_status,
        description="Which non-success status codes trigger a retry",
    )
    extra_headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Headers merged over the request's own headers",
    )
    external_cancellation: Optional[CancellationToken] = Field(
        default=None,
        description="Caller-owned token; firing it aborts the whole call",
    )

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def backoff_for(self, attempt: int) -> float:
        """Delay to sleep after failed attempt ``attempt`` (1-indexed)."""
        return self.base_backoff * 2 ** (attempt - 1)


class RequestSpec(BaseModel):
    """
    Request descriptor handed to the send primitive.

    At most one of ``content``, ``data`` or ``json_body`` should be set.
    """
    model_config = ConfigDict(frozen=True)

    method: str = Field(default="GET")
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    content: Optional[bytes] = Field(default=None, description="Raw request body")
    data: Optional[Dict[str, str]] = Field(default=None, description="Form fields")
    json_body: Optional[Any] = Field(default=None, description="JSON-serializable body")


# === Response body union ===

@dataclass(frozen=True)
class JsonBody:
    value: Any


@dataclass(frozen=True)
class TextBody:
    text: str


@dataclass(frozen=True)
class EmptyBody:
    pass


ResponseBody = Union[JsonBody, TextBody, EmptyBody]


async def read_response_body(response: httpx.Response) -> ResponseBody:
    """
    Read an error response body without ever raising.

    JSON first, raw text second, EmptyBody when the body is empty or cannot
    be read at all.
    """
    try:
        content = await response.aread()
    except (httpx.HTTPError, httpx.StreamError):
        return EmptyBody()

    if not content:
        return EmptyBody()

    try:
        return JsonBody(response.json())
    except (ValueError, RecursionError):
        pass

    # Undecodable or pathologically nested JSON still ends up classified
    try:
        return TextBody(response.text)
    except (ValueError, LookupError):
        return EmptyBody()


# === Attempt outcomes ===

@dataclass(frozen=True)
class Success:
    response: httpx.Response


@dataclass(frozen=True)
class RetryableFailure:
    error: RequestFailure


@dataclass(frozen=True)
class TerminalFailure:
    error: RequestFailure


Outcome = Union[Success, RetryableFailure, TerminalFailure]
