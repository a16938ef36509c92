"""Domain contracts for Audit Trail Service payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, JsonValue

AuditAction = Literal["create", "edit", "rollback", "delete", "sync"]


class AuditEntry(BaseModel):
    """One immutable recorded action against a workflow or one of its versions.

    ``user_id`` is ``None`` for automated/system actions. Canonical order is
    ``(timestamp, sequence)``; ``sequence`` is assigned at append time and is
    strictly increasing across the whole trail.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    sequence: int
    workflow_id: str
    version_id: str | None
    action: AuditAction
    user_id: str | None
    user_name: str
    timestamp: datetime
    old_value: JsonValue = None
    new_value: JsonValue = None

    @property
    def is_system(self) -> bool:
        return self.user_id is None


class HealthStatus(BaseModel):
    """Audit Trail Service and owned dependency readiness status payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    detail: str


def audit_order_key(entry: AuditEntry) -> tuple[datetime, int]:
    """Return the canonical sort key for audit entries."""
    return entry.timestamp, entry.sequence
