"""Pydantic settings for Dashboard Stats Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.guard_shared.config import GuardSettings, resolve_component_settings
from services.action.dashboard_stats.component import SERVICE_COMPONENT_ID
from services.action.dashboard_stats.plans import PlanId


class DashboardStatsSettings(BaseModel):
    """Activity windows and the settings-backed plan assignments."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    recent_activity_window_hours: int = Field(default=24, gt=0)
    freshness_window_hours: int = Field(default=24, gt=0)
    default_plan_id: PlanId = "starter"
    default_plan_status: str = Field(default="active", min_length=1)
    account_plans: dict[str, PlanId] = Field(default_factory=dict)
    account_plan_status: dict[str, str] = Field(default_factory=dict)


def resolve_dashboard_stats_settings(settings: GuardSettings) -> DashboardStatsSettings:
    """Resolve settings from ``components.service.dashboard_stats``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=DashboardStatsSettings,
    )
