"""Settings-backed billing collaborator."""

from __future__ import annotations

from services.action.dashboard_stats.config import DashboardStatsSettings
from services.action.dashboard_stats.domain import AccountPlan
from services.action.dashboard_stats.interfaces import BillingProvider


class SettingsBillingProvider(BillingProvider):
    """Resolve plans from static per-account overrides with a default."""

    def __init__(self, settings: DashboardStatsSettings) -> None:
        self._settings = settings

    def get_account_plan(self, *, account_id: str) -> AccountPlan:
        return AccountPlan(
            plan_id=self._settings.account_plans.get(
                account_id, self._settings.default_plan_id
            ),
            status=self._settings.account_plan_status.get(
                account_id, self._settings.default_plan_status
            ),
        )
