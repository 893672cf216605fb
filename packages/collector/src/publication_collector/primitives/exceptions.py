"""Exceptions raised by the publication collector."""

from __future__ import annotations


class PublicationCollectorError(Exception):
    """Root exception for the publication collector."""


class InvalidArgumentError(PublicationCollectorError):
    """Raised when a mutation or option receives a malformed argument.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(self._format())

    def _format(self) -> str:
        parts = [
            msg if field == "__root__" else f"{field}: {msg}"
            for field, messages in self.errors.items()
            for msg in messages
        ]
        return "; ".join(parts)


class PublicationError(PublicationCollectorError):
    """Base class for publication handler errors (lookup, registration, result)."""


class UnknownPublicationError(PublicationError):
    """Raised when ``collect`` is asked for a name with no registered handler."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"PublicationCollector: Couldn't find publication {name!r}! "
            "Did you misspell it?"
        )


class PublicationRegistrationError(PublicationError):
    """Raised when a second handler is registered under a taken name."""


class InvalidPublishResultError(PublicationError):
    """Raised when a handler returns something other than data sources."""


class DuplicatePublishError(PublicationError):
    """Raised when two returned data sources target the same collection."""

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name
        super().__init__(
            "PublicationCollector: Publish function returned multiple "
            f"data sources for collection {collection_name!r}"
        )


class LifecycleError(PublicationCollectorError):
    """Raised when the session lifecycle is driven out of order."""
