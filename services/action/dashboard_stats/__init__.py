"""Dashboard Stats Service native package exports."""

from services.action.dashboard_stats.billing import SettingsBillingProvider
from services.action.dashboard_stats.component import MANIFEST
from services.action.dashboard_stats.config import DashboardStatsSettings
from services.action.dashboard_stats.domain import (
    AccountPlan,
    DashboardStats,
    HealthStatus,
    WorkflowStats,
)
from services.action.dashboard_stats.implementation import (
    DefaultDashboardStatsService,
)
from services.action.dashboard_stats.interfaces import BillingProvider
from services.action.dashboard_stats.plans import PLANS, PlanDefinition
from services.action.dashboard_stats.service import DashboardStatsService

__all__ = [
    "MANIFEST",
    "PLANS",
    "AccountPlan",
    "BillingProvider",
    "DashboardStats",
    "DashboardStatsService",
    "DashboardStatsSettings",
    "DefaultDashboardStatsService",
    "HealthStatus",
    "PlanDefinition",
    "SettingsBillingProvider",
    "WorkflowStats",
]
