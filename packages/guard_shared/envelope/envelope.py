"""Typed envelope response model for in-process and HTTP service calls."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from packages.guard_shared.errors import ErrorCategory, ErrorDetail

from .meta import EnvelopeMeta
from .payload import Payload


T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Canonical typed envelope with metadata, payload, and errors."""

    model_config = ConfigDict(frozen=True)

    metadata: EnvelopeMeta
    payload: Payload[T] | None
    errors: list[ErrorDetail] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return ``True`` when no errors are present."""
        return len(self.errors) == 0

    @property
    def has_payload(self) -> bool:
        """Return ``True`` when payload is present."""
        return self.payload is not None

    @property
    def value(self) -> T | None:
        """Return the unwrapped payload value, or ``None`` when absent."""
        if self.payload is None:
            return None
        return self.payload.value

    def has_category(self, category: ErrorCategory) -> bool:
        """Return ``True`` when any error carries ``category``."""
        return any(error.category == category for error in self.errors)
