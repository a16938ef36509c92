"""Subscription plan catalog."""

from __future__ import annotations

from typing import Final, Literal

from pydantic import BaseModel, ConfigDict

PlanId = Literal["trial", "starter", "professional", "enterprise"]


class PlanDefinition(BaseModel):
    """Limits of one subscription plan; ``None`` means unlimited."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: PlanId
    name: str
    max_workflows: int | None
    history_days: int | None
    is_paid: bool


PLANS: Final[dict[str, PlanDefinition]] = {
    plan.id: plan
    for plan in (
        PlanDefinition(
            id="trial",
            name="Professional Trial",
            max_workflows=500,
            history_days=90,
            is_paid=False,
        ),
        PlanDefinition(
            id="starter",
            name="Starter",
            max_workflows=50,
            history_days=30,
            is_paid=True,
        ),
        PlanDefinition(
            id="professional",
            name="Professional",
            max_workflows=500,
            history_days=90,
            is_paid=True,
        ),
        PlanDefinition(
            id="enterprise",
            name="Enterprise",
            max_workflows=None,
            history_days=None,
            is_paid=True,
        ),
    )
}
