"""Transport-neutral protocol interfaces used by Audit Trail Service."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from pydantic import JsonValue

from services.state.audit_trail.domain import AuditAction, AuditEntry


class AuditRepository(Protocol):
    """Protocol for append-only audit entry persistence."""

    def append_entry(
        self,
        *,
        workflow_id: str,
        version_id: str | None,
        action: AuditAction,
        user_id: str | None,
        user_name: str,
        timestamp: datetime,
        old_value: JsonValue,
        new_value: JsonValue,
    ) -> AuditEntry:
        """Persist one entry, assigning its id and next sequence number."""

    def list_entries(
        self,
        *,
        workflow_id: str,
        start: datetime | None,
        end: datetime | None,
        limit: int,
    ) -> list[AuditEntry]:
        """Return up to ``limit`` entries for one workflow, bounds inclusive.

        Entries come back in canonical order.
        """

    def count_entries(
        self,
        *,
        workflow_ids: tuple[str, ...],
        since: datetime | None,
    ) -> int:
        """Count entries for the given workflows at or after ``since``."""

    def ping(self) -> bool:
        """Return ``True`` when backing storage is reachable."""
