"""Unit test fixtures (fakes and stubs).

Provides scripted send primitives and a recording sleep so the executor can
be tested without network access or real backoff delays.
"""

from dataclasses import dataclass
from typing import Any

import httpx
import pytest

from resilient_ocr.http.cancellation import CancellationToken
from resilient_ocr.http.exceptions import RequestCancelled
from resilient_ocr.http.models import RequestSpec


TEST_URL = "https://api.test/resource"

# Scripted step: block until the attempt's token fires
HANG = object()


def make_response(status_code: int, **kwargs: Any) -> httpx.Response:
    """httpx.Response bound to a request, as a real transport would return it."""
    return httpx.Response(status_code, request=httpx.Request("GET", TEST_URL), **kwargs)


@dataclass
class SentCall:
    request: RequestSpec
    headers: httpx.Headers
    token: CancellationToken


class ScriptedSender:
    """
    Fake send primitive replaying a script of steps.

    Steps: int (status code), httpx.Response, exception instance, or HANG.
    The last step repeats once the script runs out.
    """

    def __init__(self, *steps: Any):
        self.steps = list(steps)
        self.calls: list[SentCall] = []

    async def __call__(
        self,
        request: RequestSpec,
        headers: httpx.Headers,
        cancellation: CancellationToken,
    ) -> httpx.Response:
        self.calls.append(SentCall(request, headers, cancellation))
        step = self.steps.pop(0) if len(self.steps) > 1 else self.steps[0]

        if step is HANG:
            await cancellation.wait()
            raise RequestCancelled(cancellation.reason)
        if isinstance(step, BaseException):
            raise step
        if isinstance(step, int):
            return make_response(step)
        return step


class RecordingSleep:
    """Backoff sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def request_spec() -> RequestSpec:
    return RequestSpec(method="GET", url=TEST_URL)


@pytest.fixture
def hang() -> object:
    """Scripted step that blocks until the attempt is cancelled."""
    return HANG


@pytest.fixture
def scripted_sender():
    """Factory fixture to create a ScriptedSender.
    
    Usage:
        def test_something(scripted_sender, hang):
            sender = scripted_sender(503, hang, 200)
    """
    return ScriptedSender


@pytest.fixture
def create_response():
    """Factory fixture to create httpx.Response objects bound to TEST_URL."""
    return make_response
