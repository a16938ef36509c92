"""Audit entry repositories: in-memory and authoritative Postgres."""

from __future__ import annotations

from datetime import UTC, datetime
from threading import Lock
from typing import Any

from pydantic import JsonValue
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert

from packages.guard_shared.ids import (
    generate_ulid_bytes,
    generate_ulid_str,
    ulid_bytes_to_str,
)
from resources.substrates.postgres.schema_session import ServiceSchemaSessionProvider
from services.state.audit_trail.domain import AuditAction, AuditEntry, audit_order_key
from services.state.audit_trail.interfaces import AuditRepository

from .schema import audit_entries


class InMemoryAuditRepository(AuditRepository):
    """Process-local append-only audit store guarded by one lock."""

    def __init__(self) -> None:
        self._entries: list[AuditEntry] = []
        self._next_sequence = 1
        self._lock = Lock()

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
        with self._lock:
            entry = AuditEntry(
                id=generate_ulid_str(),
                sequence=self._next_sequence,
                workflow_id=workflow_id,
                version_id=version_id,
                action=action,
                user_id=user_id,
                user_name=user_name,
                timestamp=timestamp,
                old_value=old_value,
                new_value=new_value,
            )
            self._next_sequence += 1
            self._entries.append(entry)
            return entry

    def list_entries(
        self,
        *,
        workflow_id: str,
        start: datetime | None,
        end: datetime | None,
        limit: int,
    ) -> list[AuditEntry]:
        with self._lock:
            selected = [
                entry
                for entry in self._entries
                if entry.workflow_id == workflow_id
                and (start is None or entry.timestamp >= start)
                and (end is None or entry.timestamp <= end)
            ]
        return sorted(selected, key=audit_order_key)[:limit]

    def count_entries(
        self,
        *,
        workflow_ids: tuple[str, ...],
        since: datetime | None,
    ) -> int:
        wanted = set(workflow_ids)
        with self._lock:
            return sum(
                1
                for entry in self._entries
                if entry.workflow_id in wanted
                and (since is None or entry.timestamp >= since)
            )

    def ping(self) -> bool:
        return True


class PostgresAuditRepository(AuditRepository):
    """SQL repository over the audit-owned schema."""

    def __init__(self, sessions: ServiceSchemaSessionProvider) -> None:
        self._sessions = sessions

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
        with self._sessions.session() as session:
            row = (
                session.execute(
                    insert(audit_entries)
                    .values(
                        id=generate_ulid_bytes(),
                        workflow_id=workflow_id,
                        version_id=version_id,
                        action=action,
                        user_id=user_id,
                        user_name=user_name,
                        timestamp=timestamp,
                        old_value=old_value,
                        new_value=new_value,
                    )
                    .returning(audit_entries)
                )
                .mappings()
                .one()
            )
            return _to_entry(row)

    def list_entries(
        self,
        *,
        workflow_id: str,
        start: datetime | None,
        end: datetime | None,
        limit: int,
    ) -> list[AuditEntry]:
        stmt = select(audit_entries).where(audit_entries.c.workflow_id == workflow_id)
        if start is not None:
            stmt = stmt.where(audit_entries.c.timestamp >= start)
        if end is not None:
            stmt = stmt.where(audit_entries.c.timestamp <= end)
        stmt = stmt.order_by(
            audit_entries.c.timestamp.asc(),
            audit_entries.c.sequence.asc(),
        ).limit(limit)
        with self._sessions.session() as session:
            rows = session.execute(stmt).mappings().all()
            return [_to_entry(row) for row in rows]

    def count_entries(
        self,
        *,
        workflow_ids: tuple[str, ...],
        since: datetime | None,
    ) -> int:
        if len(workflow_ids) == 0:
            return 0
        stmt = select(func.count()).select_from(audit_entries).where(
            audit_entries.c.workflow_id.in_(workflow_ids)
        )
        if since is not None:
            stmt = stmt.where(audit_entries.c.timestamp >= since)
        with self._sessions.session() as session:
            return int(session.execute(stmt).scalar_one())

    def ping(self) -> bool:
        with self._sessions.session() as session:
            session.execute(select(1))
        return True


def _to_entry(row: Any) -> AuditEntry:
    """Map one SQL row to a strict domain audit entry."""
    return AuditEntry(
        id=ulid_bytes_to_str(bytes(row["id"])),
        sequence=int(row["sequence"]),
        workflow_id=str(row["workflow_id"]),
        version_id=None if row["version_id"] is None else str(row["version_id"]),
        action=row["action"],
        user_id=None if row["user_id"] is None else str(row["user_id"]),
        user_name=str(row["user_name"]),
        timestamp=_row_dt(row["timestamp"]),
        old_value=row["old_value"],
        new_value=row["new_value"],
    )


def _row_dt(value: object) -> datetime:
    if not isinstance(value, datetime):
        raise ValueError("expected datetime column for timestamp")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
