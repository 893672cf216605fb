"""PublicationSession — the receiver a publication handler runs against."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NoReturn

from .accumulator import MutationAccumulator
from .lifecycle import LifecycleController

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .accumulator import Snapshot
    from .instrumentation import HookRegistry
    from .lifecycle import PendingRequest, SessionState
    from .primitives.identifiers import DocumentId

logger = logging.getLogger(__name__)


class PublicationSession:
    """Collects what one publication run publishes instead of sending it.

    Handlers receive the session as their first argument and data sources
    receive it as their sink. Each ``collect`` call builds its own session.
    """

    def __init__(
        self,
        name: str,
        request: PendingRequest,
        *,
        caller_identity: str | None = None,
        delay_in_ms: int | None = None,
        hooks: HookRegistry | None = None,
    ) -> None:
        self.name = name
        self.caller_identity = caller_identity
        self.request = request
        self._accumulator = MutationAccumulator()
        self._lifecycle = LifecycleController(
            self._accumulator.snapshot,
            name=name,
            delay_in_ms=delay_in_ms,
            hooks=hooks,
        )

    @property
    def state(self) -> SessionState:
        return self._lifecycle.state

    def snapshot(self) -> Snapshot:
        return self._accumulator.snapshot()

    # ── Mutation sink ────────────────────────────────────────────

    def added(
        self,
        collection_name: str,
        id: DocumentId,  # noqa: A002
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        self._accumulator.added(collection_name, id, fields)

    def changed(
        self,
        collection_name: str,
        id: DocumentId,  # noqa: A002
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        self._accumulator.changed(collection_name, id, fields)

    def removed(self, collection_name: str, id: DocumentId) -> None:  # noqa: A002
        self._accumulator.removed(collection_name, id)

    # ── Session control ──────────────────────────────────────────

    def ready(self) -> None:
        logger.debug("Publication %r ready", self.name)
        self._lifecycle.ready()

    def on_stop(self, listener: Callable[[], Any]) -> None:
        self._lifecycle.on_stop(listener)

    def stop(self) -> None:
        self._lifecycle.stop()

    def error(self, error: BaseException) -> NoReturn:
        """Fail the pending ``collect`` and raise ``error`` to the caller."""
        self._lifecycle.fail(error)
        raise error

    def unblock(self) -> None:
        """No-op; a collector never blocks other subscriptions."""

    def expect_ready(self, callback: Callable[[Snapshot], Any] | None = None) -> None:
        """Settle this session's request (after any delay) once it is ready."""
        self._lifecycle.expect_ready(self.request, callback)
