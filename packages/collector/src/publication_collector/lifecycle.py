"""Session lifecycle — one-shot ready/stop listeners and delayed settling."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from .instrumentation import SessionPhase
from .primitives.exceptions import LifecycleError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .accumulator import Snapshot
    from .instrumentation import HookRegistry

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    DELAYING = "delaying"
    SETTLED = "settled"
    STOPPED = "stopped"


class PendingRequest:
    """The eventual result of one ``collect`` call.

    Settled exactly once, with a snapshot or with the error that ended the
    session.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._future: asyncio.Future[Snapshot] = (
            loop or asyncio.get_running_loop()
        ).create_future()

    @property
    def settled(self) -> bool:
        return self._future.done()

    def resolve(self, snapshot: Snapshot) -> None:
        if self._future.done():
            raise LifecycleError("PublicationCollector: request already settled")
        self._future.set_result(snapshot)

    def fail(self, error: BaseException) -> None:
        if not self._future.done():
            self._future.set_exception(error)

    def abandon(self) -> None:
        """Drop the request after its ``collect`` call raised."""
        if not self._future.done():
            self._future.cancel()
        elif not self._future.cancelled():
            # Mark the stored exception as retrieved.
            self._future.exception()

    async def wait(self) -> Snapshot:
        return await self._future


class LifecycleController:
    """Finite-state machine behind a publication session.

    ``PENDING -> READY -> (DELAYING) -> SETTLED -> STOPPED``

    There is a single ready slot and a list of stop listeners; each listener
    is cleared before it is invoked so it can never fire twice. ``ready``
    fires once even when ``stop`` came first, so an open request still
    settles.
    """

    def __init__(
        self,
        snapshot: Callable[[], Snapshot],
        *,
        name: str = "",
        delay_in_ms: int | None = None,
        hooks: HookRegistry | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._snapshot = snapshot
        self._name = name
        self._delay_in_ms = delay_in_ms or 0
        self._hooks = hooks
        self._loop = loop
        self._state = SessionState.PENDING
        self._ready_fired = False
        self._ready_listener: Callable[[Snapshot], Any] | None = None
        self._stop_listeners: list[Callable[[], Any]] = []
        self._request: PendingRequest | None = None
        self._callback: Callable[[Snapshot], Any] | None = None
        self._timer: asyncio.TimerHandle | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    def _emit(
        self, phase: SessionPhase, attributes: dict[str, Any] | None = None
    ) -> None:
        if self._hooks is None:
            return
        self._hooks.emit(
            phase,
            self._name,
            {
                "publication.name": self._name,
                "session.state": self._state.value,
                **(attributes or {}),
            },
        )

    # ── Ready ────────────────────────────────────────────────────

    def once_ready(self, listener: Callable[[Snapshot], Any]) -> None:
        if self._ready_listener is not None:
            raise LifecycleError(
                "PublicationCollector: a ready listener is already registered"
            )
        self._ready_listener = listener

    def ready(self) -> None:
        if self._ready_fired:
            logger.debug("Ignoring repeated ready() in state %s", self._state.value)
            return
        self._ready_fired = True
        if self._state is SessionState.PENDING:
            self._state = SessionState.READY
        snapshot = self._snapshot()
        self._emit(SessionPhase.READY, _describe(snapshot))
        listener, self._ready_listener = self._ready_listener, None
        if listener is not None:
            listener(snapshot)

    def expect_ready(
        self,
        request: PendingRequest,
        callback: Callable[[Snapshot], Any] | None = None,
    ) -> None:
        """Settle ``request`` once the session becomes ready."""
        self._request = request
        self._callback = callback
        self.once_ready(self._on_ready)

    def _on_ready(self, snapshot: Snapshot) -> None:
        if not self._delay_in_ms:
            self._settle(snapshot)
            return

        if self._state is not SessionState.STOPPED:
            self._state = SessionState.DELAYING
        loop = self._loop or asyncio.get_running_loop()
        logger.debug("Delaying final snapshot by %sms", self._delay_in_ms)
        self._emit(SessionPhase.DELAY, {"session.delay_in_ms": self._delay_in_ms})
        self._timer = loop.call_later(
            self._delay_in_ms / 1000, self._on_delay_expired
        )

    def _on_delay_expired(self) -> None:
        self._timer = None
        # The ready-time snapshot is stale by now.
        self._settle(self._snapshot())

    def _settle(self, snapshot: Snapshot) -> None:
        request = self._request
        if request is None:
            raise LifecycleError("PublicationCollector: no pending request to settle")

        if self._state is not SessionState.STOPPED:
            self._state = SessionState.SETTLED
        try:
            if request.settled:
                logger.debug("Request already failed, not resolving")
                return
            try:
                if self._callback is not None:
                    self._callback(snapshot)
            except Exception as exc:
                request.fail(exc)
                raise
            request.resolve(snapshot)
            self._emit(SessionPhase.SETTLE, _describe(snapshot))
        finally:
            self.stop()

    def fail(self, error: BaseException) -> None:
        """Fail the pending request without changing state."""
        if self._request is not None:
            self._request.fail(error)

    # ── Stop ─────────────────────────────────────────────────────

    def on_stop(self, listener: Callable[[], Any]) -> None:
        if self._state is SessionState.STOPPED:
            listener()
            return
        self._stop_listeners.append(listener)

    def stop(self) -> None:
        if self._state is SessionState.STOPPED:
            return
        self._state = SessionState.STOPPED
        logger.debug(
            "Stopping session, %d stop listener(s)", len(self._stop_listeners)
        )
        self._emit(
            SessionPhase.STOP, {"session.stop_listeners": len(self._stop_listeners)}
        )
        while self._stop_listeners:
            listener = self._stop_listeners.pop(0)
            listener()


def _describe(snapshot: Snapshot) -> dict[str, Any]:
    return {
        "snapshot.collections": sorted(snapshot),
        "snapshot.documents": sum(len(docs) for docs in snapshot.values()),
    }
