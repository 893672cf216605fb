"""publication-collector — capture what a publication would send a subscriber.

Runs a publish/subscribe handler against an in-memory session and returns
the merged documents once the handler is ready. No transport, no storage.
"""

from __future__ import annotations

from .accumulator import Document, MutationAccumulator, Snapshot
from .adapters.memory import InMemoryDataSource
from .collector import PublicationCollector
from .instrumentation import (
    CollectorHook,
    HookRegistry,
    PhaseObserver,
    SessionPhase,
    get_hook_registry,
    set_hook_registry,
)
from .lifecycle import LifecycleController, PendingRequest, SessionState
from .options import CollectorOptions
from .ports import IDataSource, IMutationSink, IPublicationRegistry
from .primitives import (
    ABSENT,
    ID_FIELD,
    DocumentId,
    DuplicatePublishError,
    InvalidArgumentError,
    InvalidPublishResultError,
    LifecycleError,
    PublicationCollectorError,
    PublicationError,
    PublicationRegistrationError,
    UnknownPublicationError,
)
from .registry import PublicationRegistry, get_default_registry
from .session import PublicationSession
from .validator import PublishResultValidator

__all__ = [
    "ABSENT",
    "ID_FIELD",
    "CollectorHook",
    "CollectorOptions",
    "Document",
    "DocumentId",
    "DuplicatePublishError",
    "HookRegistry",
    "IDataSource",
    "IMutationSink",
    "IPublicationRegistry",
    "InMemoryDataSource",
    "InvalidArgumentError",
    "InvalidPublishResultError",
    "LifecycleController",
    "LifecycleError",
    "MutationAccumulator",
    "PendingRequest",
    "PhaseObserver",
    "PublicationCollector",
    "PublicationCollectorError",
    "PublicationError",
    "PublicationRegistrationError",
    "PublicationRegistry",
    "PublicationSession",
    "PublishResultValidator",
    "SessionPhase",
    "SessionState",
    "Snapshot",
    "get_default_registry",
    "get_hook_registry",
    "set_hook_registry",
]
