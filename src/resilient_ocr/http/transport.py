"""
Underlying send primitive for the resilient executor.

The executor only needs "send this request, get a response or raise". Any
callable matching the Sender protocol works; HttpxSender is the default
implementation backed by a pooled httpx.AsyncClient.

Contract for implementations:
- Return the httpx.Response, whatever its status code
- Raise RequestCancelled as soon as the cancellation token fires
- Let transport errors (httpx.TransportError, OSError) propagate
"""

import asyncio
from typing import Optional, Protocol

import httpx
import structlog

from resilient_ocr.http.cancellation import CancellationToken
from resilient_ocr.http.exceptions import RequestCancelled
from resilient_ocr.http.models import RequestSpec


logger = structlog.get_logger(__name__)


class Sender(Protocol):
    """Protocol for the send primitive consumed by ResilientExecutor."""

    async def __call__(
        self,
        request: RequestSpec,
        headers: httpx.Headers,
        cancellation: CancellationToken,
    ) -> httpx.Response:
        ...


class HttpxSender:
    """
    Send primitive using httpx for async HTTP communication.

    Deadlines are owned by the executor, so the lazily created client has no
    timeout of its own. An injected client is used as is and is not closed
    by close().
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        connection_limits: Optional[httpx.Limits] = None,
    ):
        """
        Initialize sender.

        Args:
            client: Pre-configured client (ownership stays with the caller)
            connection_limits: httpx connection pool limits for the lazily
                created client (default: 10 max connections)
        """
        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0
            )

        self._client = client
        self._owns_client = client is None
        self._connection_limits = connection_limits

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(None),
                limits=self._connection_limits,
                follow_redirects=True
            )
            self._owns_client = True
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def __call__(
        self,
        request: RequestSpec,
        headers: httpx.Headers,
        cancellation: CancellationToken,
    ) -> httpx.Response:
        if cancellation.cancelled:
            raise RequestCancelled(cancellation.reason)

        client = await self._get_client()
        http_request = client.build_request(
            request.method,
            request.url,
            headers=headers,
            content=request.content,
            data=request.data,
            json=request.json_body,
        )

        send_task = asyncio.ensure_future(client.send(http_request))
        cancel_task = asyncio.ensure_future(cancellation.wait())
        try:
            await asyncio.wait(
                {send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            # Outer cancellation lands here too; never leave either task running
            for task in (send_task, cancel_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(send_task, cancel_task, return_exceptions=True)

        if send_task.cancelled():
            raise RequestCancelled(cancellation.reason)
        return send_task.result()

    async def close(self) -> None:
        """Close the HTTP client connection if this sender created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed httpx AsyncClient")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
