"""Domain contracts for Dashboard Stats Service payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from services.state.workflow_versions.domain import WorkflowStatus

ProtectionStatus = Literal["protected", "unprotected"]


class AccountPlan(BaseModel):
    """Plan assignment reported by the billing collaborator."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    plan_id: str
    status: str


class WorkflowStats(BaseModel):
    """Display rollup for one monitored workflow."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    hubspot_id: str
    status: WorkflowStatus
    protection_status: ProtectionStatus
    versions: int
    last_snapshot: datetime | None
    last_modified_by: str | None
    last_modified: datetime
    steps: int


class DashboardStats(BaseModel):
    """Account-wide rollup across every workflow an owner monitors.

    ``plan_capacity`` is ``None`` for unlimited plans; ``plan_used`` never
    exceeds a bounded capacity and the excess is reported as
    ``plan_overage``. ``plan_history_days`` is how far back the plan keeps
    version history (``None`` for unlimited).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    total_workflows: int
    active_workflows: int
    protected_workflows: int
    total_versions: int
    uptime: float | None
    last_snapshot: datetime | None
    plan_id: str
    plan_status: str
    plan_capacity: int | None
    plan_used: int
    plan_overage: int
    plan_history_days: int | None
    recent_activity: int


class HealthStatus(BaseModel):
    """Dashboard Stats Service and dependency readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    workflow_versions_ready: bool
    audit_trail_ready: bool
    detail: str
