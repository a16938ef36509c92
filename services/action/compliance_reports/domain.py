"""Domain contracts for Compliance Report Service payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from services.state.audit_trail.domain import AuditEntry
from services.state.workflow_versions.changes import ChangeSummary
from services.state.workflow_versions.domain import SnapshotType


class ReportPeriod(BaseModel):
    """Inclusive reporting window."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: datetime
    end: datetime


class ReportSummary(BaseModel):
    """Aggregate counts derived from the report's own detail lists."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    total_versions: int
    total_changes: int
    automated_backups: int
    manual_saves: int
    system_backups: int
    unique_users: int
    compliance_score: int


class ReportVersion(BaseModel):
    """One in-period version with changes against its predecessor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    version_number: int
    snapshot_type: SnapshotType
    created_by: str
    created_at: datetime
    changes: ChangeSummary


class ComplianceReport(BaseModel):
    """Request-scoped compliance report for one workflow and period."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    workflow_id: str
    workflow_name: str
    report_period: ReportPeriod
    summary: ReportSummary
    versions: tuple[ReportVersion, ...]
    audit_trail: tuple[AuditEntry, ...]
    recommendations: tuple[str, ...]


class HealthStatus(BaseModel):
    """Compliance Report Service and dependency readiness payload."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_ready: bool
    workflow_versions_ready: bool
    audit_trail_ready: bool
    detail: str
