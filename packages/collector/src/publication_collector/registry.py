"""PublicationRegistry — publication names mapped to handler callables."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .primitives.exceptions import PublicationRegistrationError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class PublicationRegistry:
    """Name -> handler store consulted by :class:`PublicationCollector`.

    **Conflict detection:** registering a different handler under a name
    that is already taken raises ``PublicationRegistrationError``.
    Re-registering the same handler is allowed.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[..., Any]] = {}

    # ── Registration ─────────────────────────────────────────────

    def register(self, name: str, handler: Callable[..., Any]) -> None:
        existing = self._handlers.get(name)
        if existing is not None and existing is not handler:
            msg = (
                f"Duplicate publication {name!r}: "
                f"{getattr(existing, '__qualname__', existing)!s} already "
                f"registered, cannot register "
                f"{getattr(handler, '__qualname__', handler)!s}"
            )
            raise PublicationRegistrationError(msg)
        self._handlers[name] = handler
        logger.debug("Registered publication %r", name)

    def publish(
        self, name: str
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of :meth:`register`."""

        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            self.register(name, handler)
            return handler

        return decorator

    def unregister(self, name: str) -> None:
        self._handlers.pop(name, None)

    # ── Lookup ───────────────────────────────────────────────────

    def get(self, name: str) -> Callable[..., Any] | None:
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    # ── Cleanup ──────────────────────────────────────────────────

    def clear(self) -> None:
        """Clear all registered publications (testing utility)."""
        self._handlers.clear()


_default_registry = PublicationRegistry()


def get_default_registry() -> PublicationRegistry:
    """Return the process-wide registry used when a collector is given none."""
    return _default_registry


__all__ = ["PublicationRegistry", "get_default_registry"]
