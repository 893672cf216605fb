"""Protocols for the collector's collaborators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from .primitives.identifiers import DocumentId


@runtime_checkable
class IMutationSink(Protocol):
    """Receiver of a data source's mutations (a publication session)."""

    def added(
        self,
        collection_name: str,
        id: DocumentId,  # noqa: A002
        fields: Mapping[str, Any],
    ) -> None:
        """Store a new document, replacing any previous one at ``id``."""
        ...

    def changed(
        self,
        collection_name: str,
        id: DocumentId,  # noqa: A002
        fields: Mapping[str, Any],
    ) -> None:
        """Merge ``fields`` into an existing document."""
        ...

    def removed(self, collection_name: str, id: DocumentId) -> None:  # noqa: A002
        """Delete the document at ``id``."""
        ...

    def ready(self) -> None:
        """Signal that the initial result set is complete."""
        ...

    def on_stop(self, listener: Callable[[], Any]) -> None:
        """Run ``listener`` once when the session stops."""
        ...


@runtime_checkable
class IDataSource(Protocol):
    """Something a publication can return: a named, streamable result set.

    ``begin_streaming`` pushes the source's documents into ``sink`` and may
    keep pushing until the sink stops. It may return an awaitable.
    """

    collection_name: str

    def begin_streaming(self, sink: IMutationSink) -> Any:
        """Start publishing into ``sink``."""
        ...


@runtime_checkable
class IPublicationRegistry(Protocol):
    """Resolves publication names to handlers."""

    def get(self, name: str) -> Callable[..., Any] | None:
        """Return the handler registered under ``name``; ``None`` if absent."""
        ...
