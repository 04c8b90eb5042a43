"""
Unit tests for CancellationToken and derive().
"""

import asyncio
from unittest.mock import Mock

import pytest

from resilient_ocr.http.cancellation import CancellationToken, derive


# ============================================================================
# Root token behaviour
# ============================================================================


def test_new_token_is_active():
    token = CancellationToken()
    
    assert token.cancelled is False
    assert token.reason is None
    assert token.listener_count == 0


def test_cancel_fires_callbacks_once():
    """Cancelling twice must not notify twice or raise."""
    token = CancellationToken()
    callback = Mock()
    token.add_callback(callback)
    
    assert token.cancel("timeout") is True
    assert token.cancel("again") is False
    
    callback.assert_called_once_with()
    assert token.cancelled is True
    assert token.reason == "timeout"
    assert token.listener_count == 0


def test_add_callback_on_fired_token_runs_immediately():
    token = CancellationToken()
    token.cancel()
    callback = Mock()
    
    token.add_callback(callback)
    
    callback.assert_called_once_with()
    assert token.listener_count == 0


def test_remove_unknown_callback_is_noop():
    token = CancellationToken()
    token.remove_callback(Mock())
    assert token.listener_count == 0


@pytest.mark.asyncio
async def test_wait_returns_when_cancelled():
    token = CancellationToken()
    asyncio.get_running_loop().call_later(0.01, token.cancel)
    
    await asyncio.wait_for(token.wait(), timeout=1.0)
    
    assert token.cancelled
    assert token.listener_count == 0


@pytest.mark.asyncio
async def test_wait_removes_listener_when_waiter_is_cancelled():
    token = CancellationToken()
    waiter = asyncio.ensure_future(token.wait())
    await asyncio.sleep(0)
    assert token.listener_count == 1
    
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter
    
    assert token.listener_count == 0
    assert token.cancelled is False


# ============================================================================
# any_of composition
# ============================================================================


def test_any_of_returns_already_fired_source():
    """No new token is built when a source has already fired."""
    a = CancellationToken()
    b = CancellationToken()
    b.cancel("caller")
    
    assert CancellationToken.any_of(a, b) is b
    assert a.listener_count == 0


def test_any_of_single_source_returned_as_is():
    a = CancellationToken()
    
    assert CancellationToken.any_of(None, a) is a
    assert a.listener_count == 0


def test_any_of_without_sources_never_fires():
    token = CancellationToken.any_of(None, None)
    assert token.cancelled is False


@pytest.mark.parametrize("fire_first", ["a", "b"])
def test_derived_token_fires_exactly_once(fire_first):
    a = CancellationToken()
    b = CancellationToken()
    derived = CancellationToken.any_of(a, b)
    callback = Mock()
    derived.add_callback(callback)
    
    assert derived is not a and derived is not b
    assert derived.cancelled is False
    
    sources = {"a": a, "b": b}
    sources[fire_first].cancel(f"from-{fire_first}")
    (b if fire_first == "a" else a).cancel("second")
    
    assert derived.cancelled is True
    assert derived.reason == f"from-{fire_first}"
    callback.assert_called_once_with()


def test_derived_token_detaches_from_parents_when_fired():
    a = CancellationToken()
    b = CancellationToken()
    CancellationToken.any_of(a, b)
    assert a.listener_count == 1
    assert b.listener_count == 1
    
    a.cancel()
    
    assert b.listener_count == 0


def test_release_detaches_without_firing():
    a = CancellationToken()
    b = CancellationToken()
    derived = CancellationToken.any_of(a, b)
    
    derived.release()
    a.cancel()
    
    assert a.listener_count == 0
    assert b.listener_count == 0
    assert derived.cancelled is False


# ============================================================================
# derive() scope
# ============================================================================


def test_derive_releases_new_token_on_exit():
    caller = CancellationToken()
    deadline = CancellationToken()
    
    with derive(caller, deadline) as token:
        assert caller.listener_count == 1
        assert deadline.listener_count == 1
    
    assert caller.listener_count == 0
    assert deadline.listener_count == 0
    assert token.cancelled is False


def test_derive_leaves_returned_source_untouched():
    """A caller-owned derived token handed back as is keeps its own links."""
    upstream_a = CancellationToken()
    upstream_b = CancellationToken()
    caller = CancellationToken.any_of(upstream_a, upstream_b)
    
    with derive(caller, None) as token:
        assert token is caller
    
    assert upstream_a.listener_count == 1
    upstream_b.cancel()
    assert caller.cancelled is True


def test_no_listener_leak_across_many_scopes():
    caller = CancellationToken()
    
    for _ in range(100):
        with derive(caller, CancellationToken()):
            pass
    
    assert caller.listener_count == 0


def test_failing_callback_does_not_block_other_subscribers():
    a = CancellationToken()
    b = CancellationToken()
    failing = Mock(side_effect=RuntimeError("subscriber bug"))
    later = Mock()
    a.add_callback(failing)
    derived = CancellationToken.any_of(a, b)
    a.add_callback(later)
    
    assert a.cancel() is True
    
    failing.assert_called_once_with()
    later.assert_called_once_with()
    assert derived.cancelled is True
    assert b.listener_count == 0
