"""
Composable cooperative cancellation.

A CancellationToken is a one-shot signal: once cancelled it stays cancelled
and notifies each registered callback exactly once. Tokens can be derived
from several parents so that a caller-owned token and an internal deadline
token govern the same in-flight request without knowing about each other.

Usage:
    >>> with derive(caller_token, deadline_token) as token:
    ...     await sender(request, headers, token)
"""

import asyncio
from contextlib import contextmanager
from functools import partial
from typing import Callable, Iterator, Optional

import structlog


logger = structlog.get_logger(__name__)


class CancellationToken:
    """
    One-shot cancellation signal with callback subscription.

    Attributes:
        cancelled: True once cancel() has been called (directly or via a parent)
        reason: Reason passed to the first cancel() call
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None
        self._callbacks: list[Callable[[], None]] = []
        # (parent, callback registered on parent) pairs for derived tokens
        self._links: list[tuple["CancellationToken", Callable[[], None]]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    @property
    def listener_count(self) -> int:
        """Number of callbacks currently subscribed to this token."""
        return len(self._callbacks)

    def cancel(self, reason: str = "cancelled") -> bool:
        """
        Fire the token.

        Returns:
            True if this call fired the token, False if it was already fired
        """
        if self._cancelled:
            return False
        self._cancelled = True
        self._reason = reason

        callbacks, self._callbacks = self._callbacks, []
        self.release()
        for callback in callbacks:
            self._notify(callback)
        return True

    def _notify(self, callback: Callable[[], None]) -> None:
        # A failing subscriber must not keep the others from being notified
        try:
            callback()
        except Exception as e:
            logger.error(
                "Cancellation callback failed",
                callback=repr(callback),
                error_type=type(e).__name__,
                error=str(e),
            )

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Subscribe to the fire event. Runs immediately if already fired."""
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[], None]) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass

    async def wait(self) -> None:
        """Suspend until the token fires."""
        if self._cancelled:
            return
        future = asyncio.get_running_loop().create_future()

        def _wake() -> None:
            if not future.done():
                future.set_result(None)

        self.add_callback(_wake)
        try:
            await future
        finally:
            self.remove_callback(_wake)

    def release(self) -> None:
        """Detach a derived token from its parents. No-op for root tokens."""
        links, self._links = self._links, []
        for parent, callback in links:
            parent.remove_callback(callback)

    def _propagate(self, parent: "CancellationToken") -> None:
        self.cancel(parent.reason or "cancelled")

    @classmethod
    def any_of(cls, *tokens: Optional["CancellationToken"]) -> "CancellationToken":
        """
        Token that fires when any of ``tokens`` fires.

        None entries are ignored. An already fired source is returned as is,
        and so is a single remaining source; only two or more live sources
        allocate a new derived token.
        """
        sources = [token for token in tokens if token is not None]
        for token in sources:
            if token.cancelled:
                return token
        if not sources:
            return cls()
        if len(sources) == 1:
            return sources[0]

        derived = cls()
        for parent in sources:
            callback = partial(derived._propagate, parent)
            parent.add_callback(callback)
            derived._links.append((parent, callback))
        return derived

    def __repr__(self) -> str:
        state = f"cancelled, reason={self._reason!r}" if self._cancelled else "active"
        return f"{self.__class__.__name__}({state})"


@contextmanager
def derive(*tokens: Optional[CancellationToken]) -> Iterator[CancellationToken]:
    """
    Scope a derived token to a block.

    On exit the derived token is detached from its parents, unless any_of()
    handed back one of the sources, which stay untouched.
    """
    token = CancellationToken.any_of(*tokens)
    try:
        yield token
    finally:
        if all(token is not source for source in tokens):
            token.release()
