"""InMemoryDataSource — a dict-backed live data source for tests."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from ..ports import IDataSource
from ..primitives.exceptions import InvalidArgumentError
from ..primitives.identifiers import (
    ID_FIELD,
    check_collection_name,
    check_document_id,
)
from ..primitives.sentinel import ABSENT

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..ports import IMutationSink
    from ..primitives.identifiers import DocumentId


class InMemoryDataSource(IDataSource):
    """In-memory implementation of ``IDataSource``.

    Publishes its documents as ``added`` when streaming begins, then keeps
    forwarding :meth:`insert`, :meth:`update` and :meth:`delete` to every
    sink until that sink stops.
    """

    def __init__(
        self,
        collection_name: str,
        documents: Iterable[Mapping[str, Any]] = (),
    ) -> None:
        self.collection_name = check_collection_name(collection_name)
        self._store: dict[DocumentId, dict[str, Any]] = {}
        self._sinks: list[IMutationSink] = []
        for document in documents:
            self._store[self._document_id(document)] = dict(document)

    def begin_streaming(self, sink: IMutationSink) -> None:
        for document_id, document in self._store.items():
            sink.added(self.collection_name, document_id, copy.deepcopy(document))
        self._sinks.append(sink)
        sink.on_stop(lambda: self._detach(sink))

    def _detach(self, sink: IMutationSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    @staticmethod
    def _document_id(document: Mapping[str, Any]) -> DocumentId:
        if ID_FIELD not in document:
            message = f"document has no {ID_FIELD!r} field: {dict(document)!r}"
            raise InvalidArgumentError({ID_FIELD: [message]})
        return check_document_id(document[ID_FIELD])

    @property
    def attached(self) -> int:
        return len(self._sinks)

    # ── Store mutations ──────────────────────────────────────────

    def insert(self, document: Mapping[str, Any]) -> DocumentId:
        document_id = self._document_id(document)
        self._store[document_id] = dict(document)
        for sink in list(self._sinks):
            sink.added(self.collection_name, document_id, copy.deepcopy(document))
        return document_id

    def update(self, document_id: DocumentId, fields: Mapping[str, Any]) -> None:
        """Apply ``fields`` (``ABSENT`` unsets) and publish the change."""
        existing = self._store.get(document_id)
        if existing is None:
            return
        for key, value in fields.items():
            if value is ABSENT:
                existing.pop(key, None)
            else:
                existing[key] = value
        for sink in list(self._sinks):
            sink.changed(self.collection_name, document_id, dict(fields))

    def delete(self, document_id: DocumentId) -> None:
        if self._store.pop(document_id, None) is None:
            return
        for sink in list(self._sinks):
            sink.removed(self.collection_name, document_id)

    def __len__(self) -> int:
        return len(self._store)
