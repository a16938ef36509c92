"""Transport-neutral protocol interfaces used by Dashboard Stats Service."""

from __future__ import annotations

from typing import Protocol

from services.action.dashboard_stats.domain import AccountPlan


class BillingProvider(Protocol):
    """Read-only access to an account's subscription plan."""

    def get_account_plan(self, *, account_id: str) -> AccountPlan:
        """Return the plan currently assigned to ``account_id``."""
