"""MutationAccumulator — folds added/changed/removed into collections."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, TypeAlias

from .primitives.identifiers import (
    ID_FIELD,
    DocumentId,
    check_collection_name,
    check_document_id,
)
from .primitives.sentinel import ABSENT

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

Document: TypeAlias = dict[str, Any]
Snapshot: TypeAlias = dict[str, list[Document]]


class MutationAccumulator:
    """In-memory document sets keyed by collection name, then document id.

    A collection exists only while it holds at least one document.
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict[DocumentId, Document]] = {}

    # ── Mutations ────────────────────────────────────────────────

    def added(
        self,
        collection_name: str,
        id: DocumentId,  # noqa: A002
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        check_collection_name(collection_name)
        check_document_id(id)

        document: Document = {
            key: value
            for key, value in (fields or {}).items()
            if key != ID_FIELD and value is not ABSENT
        }
        document[ID_FIELD] = id
        self._documents.setdefault(collection_name, {})[id] = document

    def changed(
        self,
        collection_name: str,
        id: DocumentId,  # noqa: A002
        fields: Mapping[str, Any] | None = None,
    ) -> None:
        check_collection_name(collection_name)
        check_document_id(id)

        existing = self._documents.get(collection_name, {}).get(id)
        if existing is None:
            logger.debug(
                "Ignoring change for missing document %s:%r", collection_name, id
            )
            return

        for key, value in (fields or {}).items():
            if key == ID_FIELD:
                continue
            if value is ABSENT:
                existing.pop(key, None)
            else:
                existing[key] = value

    def removed(self, collection_name: str, id: DocumentId) -> None:  # noqa: A002
        check_collection_name(collection_name)
        check_document_id(id)

        documents = self._documents.get(collection_name)
        if documents is None:
            return
        documents.pop(id, None)
        if not documents:
            del self._documents[collection_name]

    # ── Reads ────────────────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        """Return a detached copy of every collection's documents."""
        return {
            name: [copy.deepcopy(doc) for doc in documents.values()]
            for name, documents in self._documents.items()
        }

    def get(
        self,
        collection_name: str,
        id: DocumentId,  # noqa: A002
    ) -> Document | None:
        document = self._documents.get(collection_name, {}).get(id)
        return copy.deepcopy(document) if document is not None else None

    def collection_names(self) -> list[str]:
        return list(self._documents)

    # ── Test helpers ─────────────────────────────────────────────

    def clear(self) -> None:
        self._documents.clear()

    def __len__(self) -> int:
        return sum(len(documents) for documents in self._documents.values())
