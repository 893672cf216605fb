"""PublicationCollector — runs a publication and returns what it published."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .instrumentation import get_hook_registry
from .lifecycle import PendingRequest
from .options import CollectorOptions
from .primitives.exceptions import UnknownPublicationError
from .registry import get_default_registry
from .session import PublicationSession
from .validator import PublishResultValidator

if TYPE_CHECKING:
    from collections.abc import Callable

    from .accumulator import Snapshot
    from .instrumentation import HookRegistry
    from .ports import IPublicationRegistry

logger = logging.getLogger(__name__)


class PublicationCollector:
    """Simulates a subscription to a named publication without a transport.

    The handler runs against a fresh :class:`PublicationSession`; once the
    session is ready (and ``delay_in_ms`` has passed, if set) ``collect``
    returns the published documents grouped by collection.

    Parameters
    ----------
    registry:
        Where publication names are resolved. Defaults to
        :func:`~publication_collector.registry.get_default_registry`.
    caller_identity:
        Opaque identity exposed to handlers as ``session.caller_identity``.
    delay_in_ms:
        Wait this long after ready before taking the final snapshot, so
        changes published right after ready are included.
    """

    def __init__(
        self,
        registry: IPublicationRegistry | None = None,
        *,
        caller_identity: str | None = None,
        delay_in_ms: int | None = None,
        validator: PublishResultValidator | None = None,
    ) -> None:
        self.options = CollectorOptions.parse(
            caller_identity=caller_identity, delay_in_ms=delay_in_ms
        )
        self._registry = registry if registry is not None else get_default_registry()
        self._validator = validator or PublishResultValidator()

    @property
    def caller_identity(self) -> str | None:
        return self.options.caller_identity

    @property
    def delay_in_ms(self) -> int | None:
        return self.options.delay_in_ms

    async def collect(
        self,
        name: str,
        *args: Any,
        callback: Callable[[Snapshot], Any] | None = None,
    ) -> Snapshot:
        """Run publication ``name`` with ``args`` and return its snapshot.

        ``callback`` receives the snapshot before ``collect`` returns.
        """
        handler = self._registry.get(name)
        if handler is None:
            raise UnknownPublicationError(name)

        hooks = get_hook_registry()

        async def _collect() -> Snapshot:
            return await self._collect_internal(name, handler, args, callback, hooks)

        result: Snapshot = await hooks.around_collect(
            name,
            {
                "publication.name": name,
                "publication.args": args,
                "session.caller_identity": self.options.caller_identity,
                "session.delay_in_ms": self.options.delay_in_ms,
            },
            _collect,
        )
        return result

    async def _collect_internal(
        self,
        name: str,
        handler: Callable[..., Any],
        args: tuple[Any, ...],
        callback: Callable[[Snapshot], Any] | None,
        hooks: HookRegistry,
    ) -> Snapshot:
        request = PendingRequest()
        session = PublicationSession(
            name,
            request,
            caller_identity=self.options.caller_identity,
            delay_in_ms=self.options.delay_in_ms,
            hooks=hooks,
        )
        session.expect_ready(callback)
        logger.debug("Collecting publication %r", name)

        try:
            result = handler(session, *args)
            if hasattr(result, "__await__"):
                result = await result
            await self._validator.publish(result, session)
        except BaseException:
            request.abandon()
            raise

        return await request.wait()
