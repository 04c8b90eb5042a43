"""
Resilient request executor.

Executes one logical request as a bounded sequence of physical attempts:

1. Start a per-attempt deadline timer
2. Derive the attempt's cancellation token from (caller token, deadline token)
3. Send with merged headers (policy headers win)
4. Clear the timer on every exit path
5. Classify the attempt into an Outcome (Success / RetryableFailure / TerminalFailure)
6. Back off exponentially and retry, or return / raise

Caller cancellation always ends the call with CancelledFailure, including
while waiting out a backoff delay.

Usage:
    executor = ResilientExecutor()
    response = await executor.execute(RequestSpec(url=...), RetryPolicy(max_retries=3))
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog

from resilient_ocr.http.cancellation import CancellationToken, derive
from resilient_ocr.http.exceptions import (
    CancelledFailure,
    HTTPFailure,
    RequestCancelled,
    RequestFailure,
    TimeoutFailure,
    TransportFailure,
)
from resilient_ocr.http.models import (
    Outcome,
    RequestSpec,
    RetryableFailure,
    RetryPolicy,
    Success,
    TerminalFailure,
    read_response_body,
)
from resilient_ocr.http.transport import HttpxSender, Sender
from resilient_ocr.monitoring.metrics import (
    http_attempts_total,
    http_request_duration_seconds,
    http_retries_total,
)


_OUTCOME_LABELS = {
    TimeoutFailure: "timeout",
    TransportFailure: "transport_error",
    HTTPFailure: "http_error",
    CancelledFailure: "cancelled",
}


def _label(error: RequestFailure) -> str:
    return _OUTCOME_LABELS.get(type(error), "error")


class ResilientExecutor:
    """
    Executes requests under a RetryPolicy.

    Attempts of one logical call run strictly sequentially. Independent calls
    share nothing but the sender, so one executor can serve concurrent calls.

    Attributes:
        sender: Underlying send primitive
        logger: Injected structlog logger (see logging_config.build_logger)
    """

    def __init__(
        self,
        sender: Optional[Sender] = None,
        logger: Optional[Any] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize executor.

        Args:
            sender: Send primitive (default: HttpxSender with its own client)
            logger: Logger instance; defaults to the module logger
            sleep: Backoff sleep coroutine, replaceable for deterministic tests
        """
        self.sender = sender if sender is not None else HttpxSender()
        self.logger = logger if logger is not None else structlog.get_logger(__name__)
        self._sleep = sleep

    async def execute(
        self, request: RequestSpec, policy: Optional[RetryPolicy] = None
    ) -> httpx.Response:
        """
        Execute ``request`` until success or a terminal failure.

        Returns:
            The first response with a 2xx status

        Raises:
            TimeoutFailure: Last attempt exceeded its deadline
            TransportFailure: Last attempt failed below HTTP
            HTTPFailure: Non-retryable status, or retry budget exhausted
            CancelledFailure: Caller's token fired
        """
        policy = policy or RetryPolicy()
        start_time = time.monotonic()
        last_error: Optional[RequestFailure] = None
        attempt = 0

        self.logger.debug(
            "Executing request",
            method=request.method,
            url=request.url,
            timeout=policy.timeout,
            max_retries=policy.max_retries,
        )

        try:
            while attempt <= policy.max_retries:
                attempt += 1
                outcome = await self._attempt(request, policy, attempt)

                if isinstance(outcome, Success):
                    http_attempts_total.labels(outcome="success").inc()
                    http_request_duration_seconds.labels(result="success").observe(
                        time.monotonic() - start_time
                    )
                    self.logger.debug(
                        "Request succeeded",
                        url=request.url,
                        status_code=outcome.response.status_code,
                        attempt=attempt,
                    )
                    return outcome.response

                http_attempts_total.labels(outcome=_label(outcome.error)).inc()

                if isinstance(outcome, TerminalFailure):
                    raise outcome.error

                last_error = outcome.error
                backoff = policy.backoff_for(attempt)
                http_retries_total.labels(reason=_label(outcome.error)).inc()
                self.logger.warning(
                    "Attempt failed, retrying",
                    url=request.url,
                    attempt=attempt,
                    max_retries=policy.max_retries,
                    error=outcome.error.message,
                    backoff=backoff,
                )
                await self._backoff(backoff, policy.external_cancellation, attempt)

            raise last_error or RequestFailure(
                f"Request failed after {attempt} attempts", attempts=attempt
            )

        except RequestFailure as e:
            http_request_duration_seconds.labels(result=type(e).__name__).observe(
                time.monotonic() - start_time
            )
            self.logger.error(
                "Request failed",
                url=request.url,
                attempts=e.attempts,
                error_type=type(e).__name__,
                error=e.message,
            )
            raise

    async def _attempt(
        self, request: RequestSpec, policy: RetryPolicy, attempt: int
    ) -> Outcome:
        """Run one physical attempt and classify it."""
        external = policy.external_cancellation
        if external is not None and external.cancelled:
            return TerminalFailure(CancelledFailure(attempts=attempt - 1, reason=external.reason))

        headers = httpx.Headers(request.headers)
        headers.update(policy.extra_headers)

        deadline = CancellationToken()
        timer = asyncio.get_running_loop().call_later(
            policy.timeout, deadline.cancel, "timeout"
        )
        try:
            with derive(external, deadline) as token:
                response = await self.sender(request, headers, token)
        except RequestCancelled:
            if external is not None and external.cancelled:
                return TerminalFailure(CancelledFailure(attempts=attempt, reason=external.reason))
            return self._retry_or_stop(
                TimeoutFailure(policy.timeout, attempts=attempt), policy, attempt
            )
        except httpx.TimeoutException:
            return self._retry_or_stop(
                TimeoutFailure(policy.timeout, attempts=attempt), policy, attempt
            )
        except (httpx.TransportError, OSError) as e:
            failure = TransportFailure(e, attempts=attempt)
            failure.__cause__ = e
            return self._retry_or_stop(failure, policy, attempt)
        finally:
            timer.cancel()

        if response.is_success:
            return Success(response)

        if attempt <= policy.max_retries and policy.retryable_predicate(response.status_code):
            await response.aclose()
            return RetryableFailure(
                HTTPFailure(response.status_code, response.reason_phrase, attempts=attempt)
            )

        body = await read_response_body(response)
        await response.aclose()
        return TerminalFailure(
            HTTPFailure(response.status_code, response.reason_phrase, body=body, attempts=attempt)
        )

    @staticmethod
    def _retry_or_stop(
        failure: RequestFailure, policy: RetryPolicy, attempt: int
    ) -> Outcome:
        if attempt <= policy.max_retries:
            return RetryableFailure(failure)
        return TerminalFailure(failure)

    async def _backoff(
        self, delay: float, external: Optional[CancellationToken], attempt: int
    ) -> None:
        """Sleep before the next attempt; the caller's token cuts it short."""
        if external is None:
            await self._sleep(delay)
            return

        sleep_task = asyncio.ensure_future(self._sleep(delay))
        cancel_task = asyncio.ensure_future(external.wait())
        try:
            await asyncio.wait(
                {sleep_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (sleep_task, cancel_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(sleep_task, cancel_task, return_exceptions=True)

        if external.cancelled:
            raise CancelledFailure(attempts=attempt, reason=external.reason)
