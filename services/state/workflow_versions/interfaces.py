"""Transport-neutral protocol interfaces used by Workflow Version Service."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from pydantic import JsonValue

from services.state.workflow_versions.domain import (
    SnapshotType,
    Workflow,
    WorkflowStatus,
    WorkflowVersion,
)


class WorkflowVersionRepository(Protocol):
    """Protocol for workflow registry and append-only version persistence."""

    def upsert_workflow(
        self,
        *,
        owner_id: str,
        hubspot_id: str,
        name: str,
        status: WorkflowStatus,
        now: datetime,
    ) -> tuple[Workflow, bool]:
        """Insert or refresh one workflow; return it and whether it was created."""

    def get_workflow(self, *, workflow_id: str) -> Workflow | None:
        """Return one workflow by id."""

    def list_workflows(self, *, owner_id: str) -> list[Workflow]:
        """Return one account's workflows ordered by creation time."""

    def find_workflows_by_hubspot_id(
        self, *, hubspot_id: str, owner_id: str | None
    ) -> list[Workflow]:
        """Return workflows tracking ``hubspot_id``, optionally for one owner."""

    def set_workflow_status(
        self, *, workflow_id: str, status: WorkflowStatus, now: datetime
    ) -> Workflow | None:
        """Update one workflow's monitoring status."""

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
        """Persist a version numbered one past the current head.

        Raises ``VersionNumberConflict`` when a concurrent writer took the
        number first.
        """

    def get_version(self, *, version_id: str) -> WorkflowVersion | None:
        """Return one version by id."""

    def list_versions(self, *, workflow_id: str) -> list[WorkflowVersion]:
        """Return one workflow's versions ordered by version number."""

    def get_latest_version(self, *, workflow_id: str) -> WorkflowVersion | None:
        """Return the head version of one workflow."""

    def ping(self) -> bool:
        """Return ``True`` when backing storage is reachable."""
