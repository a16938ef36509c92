"""Authoritative in-process Python API for Dashboard Stats Service."""

from __future__ import annotations

from abc import ABC, abstractmethod

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.envelope import Envelope, EnvelopeMeta
from services.action.dashboard_stats.domain import (
    DashboardStats,
    HealthStatus,
    WorkflowStats,
)
from services.action.dashboard_stats.interfaces import BillingProvider
from services.state.audit_trail.service import AuditTrailService
from services.state.workflow_versions.service import WorkflowVersionService


class DashboardStatsService(ABC):
    """Public API for account and per-workflow display rollups."""

    @abstractmethod
    def get_dashboard_stats(
        self, *, meta: EnvelopeMeta, owner_id: str
    ) -> Envelope[DashboardStats]:
        """Aggregate every workflow owned by ``owner_id``."""

    @abstractmethod
    def list_workflow_stats(
        self, *, meta: EnvelopeMeta, owner_id: str
    ) -> Envelope[list[WorkflowStats]]:
        """Return one rollup per workflow owned by ``owner_id``."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and upstream service readiness."""


def build_dashboard_stats_service(
    *,
    settings: GuardSettings,
    workflow_versions: WorkflowVersionService,
    audit_trail: AuditTrailService,
    billing: BillingProvider | None = None,
) -> DashboardStatsService:
    """Build default Dashboard Stats implementation from typed settings."""
    from services.action.dashboard_stats.billing import SettingsBillingProvider
    from services.action.dashboard_stats.config import (
        resolve_dashboard_stats_settings,
    )
    from services.action.dashboard_stats.implementation import (
        DefaultDashboardStatsService,
    )

    service_settings = resolve_dashboard_stats_settings(settings)
    return DefaultDashboardStatsService(
        settings=service_settings,
        workflow_versions=workflow_versions,
        audit_trail=audit_trail,
        billing=billing or SettingsBillingProvider(service_settings),
    )
