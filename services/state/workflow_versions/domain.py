"""Domain contracts for Workflow Version Service payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, JsonValue

from services.state.workflow_versions.changes import ChangeSummary, FieldChange

WorkflowStatus = Literal["active", "inactive"]
SnapshotType = Literal["manual", "on-publish", "daily-backup", "system", "rollback"]

SNAPSHOT_TYPES: Final[tuple[str, ...]] = (
    "manual",
    "on-publish",
    "daily-backup",
    "system",
    "rollback",
)
AUTOMATED_SNAPSHOT_TYPES: Final[frozenset[str]] = frozenset({"daily-backup", "on-publish"})
MANUAL_SNAPSHOT_TYPES: Final[frozenset[str]] = frozenset({"manual"})
SYSTEM_SNAPSHOT_TYPES: Final[frozenset[str]] = frozenset({"system", "rollback"})


class Workflow(BaseModel):
    """One monitored HubSpot workflow owned by an account."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    owner_id: str
    hubspot_id: str
    name: str
    status: WorkflowStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class WorkflowVersion(BaseModel):
    """Immutable snapshot of a workflow definition.

    ``version_number`` is unique and strictly increasing per workflow; the
    highest number is the current head. ``created_by`` is a user id or the
    configured system actor.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    workflow_id: str
    version_number: int
    snapshot_type: SnapshotType
    created_by: str
    created_by_name: str
    description: str
    data: JsonValue
    created_at: datetime


class VersionHistoryEntry(BaseModel):
    """One version paired with its changes relative to the previous version."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: WorkflowVersion
    changes: ChangeSummary


class VersionComparison(BaseModel):
    """Element-level comparison of two versions of the same workflow."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    workflow_id: str
    left: WorkflowVersion
    right: WorkflowVersion
    summary: ChangeSummary
    changes: tuple[FieldChange, ...]


class HealthStatus(BaseModel):
    """Workflow Version Service and owned dependency readiness status payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    substrate_ready: bool
    detail: str


class VersionNumberConflict(Exception):
    """Raised by repositories when a version number was taken concurrently."""

    def __init__(self, workflow_id: str, version_number: int) -> None:
        super().__init__(
            f"version number {version_number} already exists for workflow {workflow_id}"
        )
        self.workflow_id = workflow_id
        self.version_number = version_number
