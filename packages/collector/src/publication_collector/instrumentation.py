"""Instrumentation for publication runs (tracing, metrics, test spies).

Two kinds of subscriber share one registry:

* **collect hooks** are async middleware around a whole ``collect`` call,
  reported as operation ``publication.collect.<name>``;
* **phase observers** are plain callables told synchronously when a
  session enters the ``ready``, ``delay``, ``settle`` or ``stop`` phase
  (``publication.<phase>.<name>``).

Both can be narrowed to publication names with glob patterns.
"""

from __future__ import annotations

import fnmatch
import logging
from contextvars import ContextVar
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

logger = logging.getLogger("publication_collector.instrumentation")


class SessionPhase(str, Enum):
    COLLECT = "collect"
    READY = "ready"
    DELAY = "delay"
    SETTLE = "settle"
    STOP = "stop"

    def operation(self, publication: str) -> str:
        return f"publication.{self.value}.{publication}"


@runtime_checkable
class CollectorHook(Protocol):
    """Async middleware around ``collect``.

    Must await ``next_handler()`` exactly once and return its snapshot.
    """

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any: ...


@runtime_checkable
class PhaseObserver(Protocol):
    """Synchronous listener for session phase changes."""

    def __call__(self, operation: str, attributes: dict[str, Any]) -> None: ...


class Subscription:
    """A hook or observer plus the phases and publications it cares about."""

    def __init__(
        self,
        target: Any,
        *,
        phases: Iterable[SessionPhase],
        publications: list[str] | None = None,
        priority: int = 0,
    ) -> None:
        self.target = target
        self.phases = frozenset(phases)
        self.publications = publications or []
        self.priority = priority
        self.enabled = True

    def matches(self, phase: SessionPhase, publication: str) -> bool:
        if not self.enabled or phase not in self.phases:
            return False
        return not self.publications or any(
            fnmatch.fnmatchcase(publication, pattern) for pattern in self.publications
        )


_SESSION_PHASES = (
    SessionPhase.READY,
    SessionPhase.DELAY,
    SessionPhase.SETTLE,
    SessionPhase.STOP,
)


class HookRegistry:
    """Collect hooks and phase observers; lower ``priority`` runs first."""

    def __init__(self) -> None:
        self._hooks: list[Subscription] = []
        self._observers: list[Subscription] = []

    def register_hook(
        self,
        hook: CollectorHook,
        *,
        publications: list[str] | None = None,
        priority: int = 0,
    ) -> Subscription:
        """Wrap every matching ``collect`` call in ``hook``."""
        subscription = Subscription(
            hook,
            phases=(SessionPhase.COLLECT,),
            publications=publications,
            priority=priority,
        )
        self._hooks.append(subscription)
        self._hooks.sort(key=lambda s: s.priority)
        logger.debug("Registered collect hook %r", hook)
        return subscription

    def observe(
        self,
        observer: PhaseObserver,
        *,
        phases: Iterable[SessionPhase] = _SESSION_PHASES,
        publications: list[str] | None = None,
        priority: int = 0,
    ) -> Subscription:
        """Call ``observer`` whenever a matching session enters ``phases``."""
        subscription = Subscription(
            observer, phases=phases, publications=publications, priority=priority
        )
        self._observers.append(subscription)
        self._observers.sort(key=lambda s: s.priority)
        logger.debug(
            "Registered phase observer %r for %s",
            observer,
            sorted(p.value for p in subscription.phases),
        )
        return subscription

    async def around_collect(
        self,
        publication: str,
        attributes: dict[str, Any],
        collect: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run ``collect`` inside every hook registered for ``publication``."""
        operation = SessionPhase.COLLECT.operation(publication)
        hooks = [
            s.target
            for s in self._hooks
            if s.matches(SessionPhase.COLLECT, publication)
        ]

        async def call(index: int) -> Any:
            if index == len(hooks):
                return await collect()
            return await hooks[index](operation, attributes, lambda: call(index + 1))

        return await call(0)

    def emit(
        self, phase: SessionPhase, publication: str, attributes: dict[str, Any]
    ) -> None:
        """Notify observers of ``phase``; observer errors propagate."""
        operation = phase.operation(publication)
        for subscription in self._observers:
            if subscription.matches(phase, publication):
                subscription.target(operation, attributes)

    def clear(self) -> None:
        self._hooks.clear()
        self._observers.clear()

    def __len__(self) -> int:
        return len(self._hooks) + len(self._observers)


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "publication_collector_hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Return the hook registry of the current context, creating it lazily.

    Each context gets a fresh registry, so hooks never leak between tests
    or unrelated tasks.
    """
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    _hook_registry_var.set(registry)
