"""Primitives: exceptions, the absent sentinel, document identifiers."""

from __future__ import annotations

from .exceptions import (
    DuplicatePublishError,
    InvalidArgumentError,
    InvalidPublishResultError,
    LifecycleError,
    PublicationCollectorError,
    PublicationError,
    PublicationRegistrationError,
    UnknownPublicationError,
)
from .identifiers import (
    ID_FIELD,
    DocumentId,
    check_collection_name,
    check_document_id,
    is_document_id,
)
from .sentinel import ABSENT

__all__ = [
    "ABSENT",
    "ID_FIELD",
    "DocumentId",
    "DuplicatePublishError",
    "InvalidArgumentError",
    "InvalidPublishResultError",
    "LifecycleError",
    "PublicationCollectorError",
    "PublicationError",
    "PublicationRegistrationError",
    "UnknownPublicationError",
    "check_collection_name",
    "check_document_id",
    "is_document_id",
]
