"""CollectorOptions — validated construction options for a collector."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .primitives.exceptions import InvalidArgumentError


class CollectorOptions(BaseModel):
    """Options shared by every session a collector creates.

    ``caller_identity`` is forwarded to handlers untouched.
    ``delay_in_ms`` of ``None`` or ``0`` settles as soon as the session is ready.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    caller_identity: str | None = None
    delay_in_ms: int | None = Field(default=None, ge=0, strict=True)

    @classmethod
    def parse(cls, **options: Any) -> CollectorOptions:
        """Validate ``options``, raising :class:`InvalidArgumentError` on failure."""
        try:
            return cls.model_validate(options)
        except PydanticValidationError as exc:
            errors: dict[str, list[str]] = {}
            for error in exc.errors():
                loc = ".".join(str(p) for p in error.get("loc", ("__root__",)))
                msg = error.get("msg", "validation error")
                errors.setdefault(loc or "__root__", []).append(msg)
            raise InvalidArgumentError(errors) from exc
