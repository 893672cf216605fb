"""Tests for LifecycleController and PendingRequest."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from publication_collector.instrumentation import HookRegistry
from publication_collector.lifecycle import (
    LifecycleController,
    PendingRequest,
    SessionState,
)
from publication_collector.primitives.exceptions import LifecycleError


class Counter:
    def __init__(self) -> None:
        self.value = 0

    def snapshot(self) -> dict[str, list[dict[str, Any]]]:
        return {"counter": [{"id": "c", "value": self.value}]}


def test_ready_invokes_listener_once_with_snapshot() -> None:
    counter = Counter()
    lifecycle = LifecycleController(counter.snapshot)
    seen: list[Any] = []
    lifecycle.once_ready(seen.append)

    lifecycle.ready()
    counter.value = 1
    lifecycle.ready()

    assert seen == [{"counter": [{"id": "c", "value": 0}]}]
    assert lifecycle.state is SessionState.READY


def test_second_ready_listener_is_rejected() -> None:
    lifecycle = LifecycleController(dict)
    lifecycle.once_ready(lambda _: None)

    with pytest.raises(LifecycleError, match="already registered"):
        lifecycle.once_ready(lambda _: None)


def test_stop_runs_listeners_once() -> None:
    lifecycle = LifecycleController(dict)
    calls: list[str] = []
    lifecycle.on_stop(lambda: calls.append("a"))
    lifecycle.on_stop(lambda: calls.append("b"))

    lifecycle.stop()
    lifecycle.stop()

    assert calls == ["a", "b"]
    assert lifecycle.state is SessionState.STOPPED


def test_on_stop_after_stop_runs_immediately() -> None:
    lifecycle = LifecycleController(dict)
    lifecycle.stop()
    calls: list[str] = []

    lifecycle.on_stop(lambda: calls.append("late"))

    assert calls == ["late"]


@pytest.mark.asyncio
async def test_ready_after_stop_still_settles_request() -> None:
    counter = Counter()
    lifecycle = LifecycleController(counter.snapshot)
    request = PendingRequest()
    stops: list[int] = []
    lifecycle.on_stop(lambda: stops.append(1))
    lifecycle.expect_ready(request)

    lifecycle.stop()
    lifecycle.ready()
    lifecycle.ready()

    assert request.settled
    assert await request.wait() == counter.snapshot()
    assert lifecycle.state is SessionState.STOPPED
    assert stops == [1]


@pytest.mark.asyncio
async def test_phases_are_reported_to_observers() -> None:
    hooks = HookRegistry()
    seen: list[tuple[str, dict[str, Any]]] = []
    hooks.observe(lambda operation, attributes: seen.append((operation, attributes)))
    lifecycle = LifecycleController(Counter().snapshot, name="counter", hooks=hooks)
    request = PendingRequest()

    lifecycle.expect_ready(request)
    lifecycle.ready()

    assert [operation for operation, _ in seen] == [
        "publication.ready.counter",
        "publication.settle.counter",
        "publication.stop.counter",
    ]
    ready_attributes = seen[0][1]
    assert ready_attributes["publication.name"] == "counter"
    assert ready_attributes["snapshot.collections"] == ["counter"]
    assert ready_attributes["snapshot.documents"] == 1
    assert seen[2][1]["session.state"] == "stopped"


@pytest.mark.asyncio
async def test_expect_ready_settles_then_stops() -> None:
    counter = Counter()
    lifecycle = LifecycleController(counter.snapshot)
    request = PendingRequest()
    order: list[str] = []
    lifecycle.on_stop(lambda: order.append("stop"))

    lifecycle.expect_ready(request, lambda snap: order.append("callback"))
    lifecycle.ready()

    assert request.settled
    assert order == ["callback", "stop"]
    assert await request.wait() == counter.snapshot()
    assert lifecycle.state is SessionState.STOPPED


@pytest.mark.asyncio
async def test_delay_recomputes_snapshot_at_expiry() -> None:
    counter = Counter()
    lifecycle = LifecycleController(counter.snapshot, delay_in_ms=20)
    request = PendingRequest()
    lifecycle.expect_ready(request)

    lifecycle.ready()
    assert lifecycle.state is SessionState.DELAYING
    assert not request.settled

    counter.value = 5
    result = await asyncio.wait_for(request.wait(), timeout=2)

    assert result == {"counter": [{"id": "c", "value": 5}]}
    assert lifecycle.state is SessionState.STOPPED


@pytest.mark.asyncio
async def test_zero_delay_settles_immediately() -> None:
    lifecycle = LifecycleController(dict, delay_in_ms=0)
    request = PendingRequest()
    lifecycle.expect_ready(request)

    lifecycle.ready()

    assert request.settled
    assert await request.wait() == {}


@pytest.mark.asyncio
async def test_callback_error_fails_request_and_still_stops() -> None:
    lifecycle = LifecycleController(dict)
    request = PendingRequest()
    stopped: list[bool] = []
    lifecycle.on_stop(lambda: stopped.append(True))

    def boom(_: Any) -> None:
        raise RuntimeError("callback failed")

    lifecycle.expect_ready(request, boom)
    with pytest.raises(RuntimeError, match="callback failed"):
        lifecycle.ready()

    assert stopped == [True]
    with pytest.raises(RuntimeError, match="callback failed"):
        await request.wait()


@pytest.mark.asyncio
async def test_fail_keeps_state_and_does_not_stop() -> None:
    lifecycle = LifecycleController(dict)
    request = PendingRequest()
    stopped: list[bool] = []
    lifecycle.on_stop(lambda: stopped.append(True))
    lifecycle.expect_ready(request)

    lifecycle.fail(ValueError("broken"))

    assert lifecycle.state is SessionState.PENDING
    assert stopped == []
    with pytest.raises(ValueError, match="broken"):
        await request.wait()


@pytest.mark.asyncio
async def test_pending_request_settles_once() -> None:
    request = PendingRequest()
    request.resolve({})

    with pytest.raises(LifecycleError):
        request.resolve({})
    request.fail(RuntimeError("ignored"))

    assert await request.wait() == {}


@pytest.mark.asyncio
async def test_abandon_cancels_open_request() -> None:
    request = PendingRequest()
    request.abandon()

    with pytest.raises(asyncio.CancelledError):
        await request.wait()
