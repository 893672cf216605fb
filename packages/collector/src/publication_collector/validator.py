"""PublishResultValidator — checks and starts what a publication returns.

A publication handler may return nothing, a single data source, or a list
or tuple of data sources with distinct collection names. Anything else is a
handler bug (typically returning a document instead of a queryable source).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .ports import IDataSource
from .primitives.exceptions import DuplicatePublishError, InvalidPublishResultError

if TYPE_CHECKING:
    from .session import PublicationSession

logger = logging.getLogger(__name__)


class PublishResultValidator:
    """Validates a handler's return value and attaches its data sources."""

    def validate(self, result: Any) -> list[IDataSource] | None:
        """Return the sources to attach, or ``None`` when there are none.

        An explicitly empty list or tuple returns ``[]``, which still marks
        the session ready on :meth:`publish`.
        """
        if isinstance(result, IDataSource):
            return [result]

        if isinstance(result, (list, tuple)):
            if not all(isinstance(item, IDataSource) for item in result):
                raise InvalidPublishResultError(
                    "PublicationCollector: Publish function returned "
                    "a sequence of non-DataSources"
                )
            self._check_unique_collections(result)
            return list(result)

        if result:
            raise InvalidPublishResultError(
                "PublicationCollector: Publish function can only return "
                "a DataSource or a sequence of DataSources"
            )
        return None

    def _check_unique_collections(
        self, sources: list[Any] | tuple[Any, ...]
    ) -> None:
        seen: set[str] = set()
        for source in sources:
            if source.collection_name in seen:
                raise DuplicatePublishError(source.collection_name)
            seen.add(source.collection_name)

    async def publish(self, result: Any, session: PublicationSession) -> None:
        """Validate ``result``, start every source, then mark ``session`` ready.

        Validation and streaming failures are routed through
        ``session.error`` and therefore raise.
        """
        try:
            sources = self.validate(result)
        except (InvalidPublishResultError, DuplicatePublishError) as exc:
            session.error(exc)

        if sources is None:
            return

        try:
            for source in sources:
                logger.debug(
                    "Publication %r streaming collection %r",
                    session.name,
                    source.collection_name,
                )
                res = source.begin_streaming(session)
                if hasattr(res, "__await__"):
                    await res
        except Exception as exc:  # noqa: BLE001
            session.error(exc)

        session.ready()
