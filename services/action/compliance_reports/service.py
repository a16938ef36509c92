"""Authoritative in-process Python API for Compliance Report Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.envelope import Envelope, EnvelopeMeta
from services.action.compliance_reports.domain import ComplianceReport, HealthStatus
from services.state.audit_trail.service import AuditTrailService
from services.state.workflow_versions.service import WorkflowVersionService


class ComplianceReportService(ABC):
    """Public API for per-workflow backup compliance reports."""

    @abstractmethod
    def generate(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        start: datetime,
        end: datetime,
    ) -> Envelope[ComplianceReport]:
        """Build one report for ``workflow_id`` over ``[start, end]``."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and upstream service readiness."""


def build_compliance_report_service(
    *,
    settings: GuardSettings,
    workflow_versions: WorkflowVersionService,
    audit_trail: AuditTrailService,
) -> ComplianceReportService:
    """Build default Compliance Report implementation from typed settings."""
    from services.action.compliance_reports.config import (
        resolve_compliance_report_settings,
    )
    from services.action.compliance_reports.implementation import (
        DefaultComplianceReportService,
    )

    return DefaultComplianceReportService(
        settings=resolve_compliance_report_settings(settings),
        workflow_versions=workflow_versions,
        audit_trail=audit_trail,
    )
