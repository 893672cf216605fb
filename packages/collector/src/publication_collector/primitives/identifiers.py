"""Document identifier and collection name checks."""

from __future__ import annotations

import uuid
from typing import TypeAlias

from .exceptions import InvalidArgumentError

DocumentId: TypeAlias = str | uuid.UUID

#: Field that always mirrors a stored document's key.
ID_FIELD = "id"


def is_document_id(value: object) -> bool:
    """Return ``True`` for the accepted identifier types (``str``, ``UUID``)."""
    return isinstance(value, (str, uuid.UUID))


def check_collection_name(collection_name: object) -> str:
    if not isinstance(collection_name, str) or not collection_name:
        raise InvalidArgumentError(
            {
                "collection_name": [
                    f"expected a non-empty string, got {collection_name!r}"
                ]
            }
        )
    return collection_name


def check_document_id(document_id: object) -> DocumentId:
    if not is_document_id(document_id):
        raise InvalidArgumentError(
            {"id": [f"expected a str or UUID document id, got {document_id!r}"]}
        )
    return document_id  # type: ignore[return-value]
