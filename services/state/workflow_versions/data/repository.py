"""Workflow and version repositories: in-memory and authoritative Postgres."""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime
from threading import Lock
from typing import Any

from pydantic import JsonValue
from sqlalchemy import func, literal_column, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError

from packages.guard_shared.ids import (
    generate_ulid_bytes,
    generate_ulid_str,
    ulid_bytes_to_str,
    ulid_str_to_bytes,
)
from resources.substrates.postgres.errors import is_unique_violation
from resources.substrates.postgres.schema_session import ServiceSchemaSessionProvider
from services.state.workflow_versions.domain import (
    SnapshotType,
    VersionNumberConflict,
    Workflow,
    WorkflowStatus,
    WorkflowVersion,
)
from services.state.workflow_versions.interfaces import WorkflowVersionRepository

from .schema import workflow_versions, workflows


class InMemoryWorkflowVersionRepository(WorkflowVersionRepository):
    """Process-local registry and version store guarded by one lock."""

    def __init__(self) -> None:
        self._workflows: dict[str, Workflow] = {}
        self._versions: dict[str, list[WorkflowVersion]] = {}
        self._lock = Lock()

    def upsert_workflow(
        self,
        *,
        owner_id: str,
        hubspot_id: str,
        name: str,
        status: WorkflowStatus,
        now: datetime,
    ) -> tuple[Workflow, bool]:
        with self._lock:
            for existing in self._workflows.values():
                if existing.owner_id == owner_id and existing.hubspot_id == hubspot_id:
                    updated = existing.model_copy(
                        update={"name": name, "status": status, "updated_at": now}
                    )
                    self._workflows[existing.id] = updated
                    return updated, False
            created = Workflow(
                id=generate_ulid_str(),
                owner_id=owner_id,
                hubspot_id=hubspot_id,
                name=name,
                status=status,
                created_at=now,
                updated_at=now,
            )
            self._workflows[created.id] = created
            self._versions[created.id] = []
            return created, True

    def get_workflow(self, *, workflow_id: str) -> Workflow | None:
        with self._lock:
            return self._workflows.get(workflow_id)

    def list_workflows(self, *, owner_id: str) -> list[Workflow]:
        with self._lock:
            owned = [wf for wf in self._workflows.values() if wf.owner_id == owner_id]
        return sorted(owned, key=lambda wf: (wf.created_at, wf.id))

    def find_workflows_by_hubspot_id(
        self, *, hubspot_id: str, owner_id: str | None
    ) -> list[Workflow]:
        with self._lock:
            matches = [
                wf
                for wf in self._workflows.values()
                if wf.hubspot_id == hubspot_id
                and (owner_id is None or wf.owner_id == owner_id)
            ]
        return sorted(matches, key=lambda wf: (wf.created_at, wf.id))

    def set_workflow_status(
        self, *, workflow_id: str, status: WorkflowStatus, now: datetime
    ) -> Workflow | None:
        with self._lock:
            existing = self._workflows.get(workflow_id)
            if existing is None:
                return None
            updated = existing.model_copy(update={"status": status, "updated_at": now})
            self._workflows[workflow_id] = updated
            return updated

    def append_next_version(
        self,
        *,
        workflow_id: str,
        snapshot_type: SnapshotType,
        created_by: str,
        created_by_name: str,
        description: str,
        data: JsonValue,
        created_at: datetime,
    ) -> WorkflowVersion:
        with self._lock:
            versions = self._versions.setdefault(workflow_id, [])
            version = WorkflowVersion(
                id=generate_ulid_str(),
                workflow_id=workflow_id,
                version_number=len(versions) + 1,
                snapshot_type=snapshot_type,
                created_by=created_by,
                created_by_name=created_by_name,
                description=description,
                data=data,
                created_at=created_at,
            )
            versions.append(version)
            return version

    def get_version(self, *, version_id: str) -> WorkflowVersion | None:
        with self._lock:
            for versions in self._versions.values():
                for version in versions:
                    if version.id == version_id:
                        return version
        return None

    def list_versions(self, *, workflow_id: str) -> list[WorkflowVersion]:
        with self._lock:
            return list(self._versions.get(workflow_id, ()))

    def get_latest_version(self, *, workflow_id: str) -> WorkflowVersion | None:
        with self._lock:
            versions = self._versions.get(workflow_id)
            return versions[-1] if versions else None

    def ping(self) -> bool:
        return True


class PostgresWorkflowVersionRepository(WorkflowVersionRepository):
    """SQL repository over the workflow-versions-owned schema.

    Version numbers are allocated under a per-workflow transaction-scoped
    advisory lock; the ``(workflow_id, version_number)`` unique constraint
    backs it for writers that bypass the lock.
    """

    def __init__(self, sessions: ServiceSchemaSessionProvider) -> None:
        self._sessions = sessions

    def upsert_workflow(
        self,
        *,
        owner_id: str,
        hubspot_id: str,
        name: str,
        status: WorkflowStatus,
        now: datetime,
    ) -> tuple[Workflow, bool]:
        stmt = insert(workflows).values(
            id=generate_ulid_bytes(),
            owner_id=owner_id,
            hubspot_id=hubspot_id,
            name=name,
            status=status,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[workflows.c.owner_id, workflows.c.hubspot_id],
            set_={"name": name, "status": status, "updated_at": now},
        ).returning(workflows, literal_column("(xmax = 0)").label("inserted"))
        with self._sessions.session() as session:
            row = session.execute(stmt).mappings().one()
            return _to_workflow(row), bool(row["inserted"])

    def get_workflow(self, *, workflow_id: str) -> Workflow | None:
        with self._sessions.session() as session:
            row = (
                session.execute(
                    select(workflows).where(
                        workflows.c.id == ulid_str_to_bytes(workflow_id)
                    )
                )
                .mappings()
                .one_or_none()
            )
            return None if row is None else _to_workflow(row)

    def list_workflows(self, *, owner_id: str) -> list[Workflow]:
        stmt = (
            select(workflows)
            .where(workflows.c.owner_id == owner_id)
            .order_by(workflows.c.created_at.asc(), workflows.c.id.asc())
        )
        with self._sessions.session() as session:
            return [_to_workflow(row) for row in session.execute(stmt).mappings().all()]

    def find_workflows_by_hubspot_id(
        self, *, hubspot_id: str, owner_id: str | None
    ) -> list[Workflow]:
        stmt = select(workflows).where(workflows.c.hubspot_id == hubspot_id)
        if owner_id is not None:
            stmt = stmt.where(workflows.c.owner_id == owner_id)
        stmt = stmt.order_by(workflows.c.created_at.asc(), workflows.c.id.asc())
        with self._sessions.session() as session:
            return [_to_workflow(row) for row in session.execute(stmt).mappings().all()]

    def set_workflow_status(
        self, *, workflow_id: str, status: WorkflowStatus, now: datetime
    ) -> Workflow | None:
        stmt = (
            update(workflows)
            .where(workflows.c.id == ulid_str_to_bytes(workflow_id))
            .values(status=status, updated_at=now)
            .returning(workflows)
        )
        with self._sessions.session() as session:
            row = session.execute(stmt).mappings().one_or_none()
            return None if row is None else _to_workflow(row)

    def append_next_version(
        self,
        *,
        workflow_id: str,
        snapshot_type: SnapshotType,
        created_by: str,
        created_by_name: str,
        description: str,
        data: JsonValue,
        created_at: datetime,
    ) -> WorkflowVersion:
        workflow_key = ulid_str_to_bytes(workflow_id)
        with self._sessions.session() as session:
            session.execute(select(func.pg_advisory_xact_lock(_advisory_lock_key(workflow_key))))
            current = session.execute(
                select(func.coalesce(func.max(workflow_versions.c.version_number), 0)).where(
                    workflow_versions.c.workflow_id == workflow_key
                )
            ).scalar_one()
            next_number = int(current) + 1
            try:
                row = (
                    session.execute(
                        insert(workflow_versions)
                        .values(
                            id=generate_ulid_bytes(),
                            workflow_id=workflow_key,
                            version_number=next_number,
                            snapshot_type=snapshot_type,
                            created_by=created_by,
                            created_by_name=created_by_name,
                            description=description,
                            data=data,
                            created_at=created_at,
                        )
                        .returning(workflow_versions)
                    )
                    .mappings()
                    .one()
                )
            except IntegrityError as exc:
                if is_unique_violation(exc):
                    raise VersionNumberConflict(workflow_id, next_number) from exc
                raise
            return _to_version(row)

    def get_version(self, *, version_id: str) -> WorkflowVersion | None:
        stmt = select(workflow_versions).where(
            workflow_versions.c.id == ulid_str_to_bytes(version_id)
        )
        with self._sessions.session() as session:
            row = session.execute(stmt).mappings().one_or_none()
            return None if row is None else _to_version(row)

    def list_versions(self, *, workflow_id: str) -> list[WorkflowVersion]:
        stmt = (
            select(workflow_versions)
            .where(workflow_versions.c.workflow_id == ulid_str_to_bytes(workflow_id))
            .order_by(workflow_versions.c.version_number.asc())
        )
        with self._sessions.session() as session:
            return [_to_version(row) for row in session.execute(stmt).mappings().all()]

    def get_latest_version(self, *, workflow_id: str) -> WorkflowVersion | None:
        stmt = (
            select(workflow_versions)
            .where(workflow_versions.c.workflow_id == ulid_str_to_bytes(workflow_id))
            .order_by(workflow_versions.c.version_number.desc())
            .limit(1)
        )
        with self._sessions.session() as session:
            row = session.execute(stmt).mappings().one_or_none()
            return None if row is None else _to_version(row)

    def ping(self) -> bool:
        with self._sessions.session() as session:
            session.execute(select(1))
        return True


def _advisory_lock_key(workflow_key: bytes) -> int:
    """Derive a signed 64-bit advisory lock key from one workflow id."""
    digest = hashlib.blake2b(workflow_key, digest_size=8).digest()
    return int.from_bytes(digest, byteorder="big", signed=True)


def _to_workflow(row: Any) -> Workflow:
    """Map one SQL row to a strict domain workflow."""
    return Workflow(
        id=ulid_bytes_to_str(bytes(row["id"])),
        owner_id=str(row["owner_id"]),
        hubspot_id=str(row["hubspot_id"]),
        name=str(row["name"]),
        status=row["status"],
        created_at=_row_dt(row["created_at"], field_name="created_at"),
        updated_at=_row_dt(row["updated_at"], field_name="updated_at"),
    )


def _to_version(row: Any) -> WorkflowVersion:
    """Map one SQL row to a strict domain workflow version."""
    return WorkflowVersion(
        id=ulid_bytes_to_str(bytes(row["id"])),
        workflow_id=ulid_bytes_to_str(bytes(row["workflow_id"])),
        version_number=int(row["version_number"]),
        snapshot_type=row["snapshot_type"],
        created_by=str(row["created_by"]),
        created_by_name=str(row["created_by_name"]),
        description=str(row["description"]),
        data=row["data"],
        created_at=_row_dt(row["created_at"], field_name="created_at"),
    )


def _row_dt(value: object, *, field_name: str) -> datetime:
    if not isinstance(value, datetime):
        raise ValueError(f"expected datetime column for {field_name}")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
