"""Concrete Dashboard Stats Service implementation."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from pydantic import ValidationError

from packages.guard_shared.clock import Clock, utc_now
from packages.guard_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    validate_meta,
)
from packages.guard_shared.errors import codes, dependency_error, validation_error
from packages.guard_shared.logging import get_logger, public_api_instrumented
from services.action.dashboard_stats.component import SERVICE_COMPONENT_ID
from services.action.dashboard_stats.config import DashboardStatsSettings
from services.action.dashboard_stats.domain import (
    AccountPlan,
    DashboardStats,
    HealthStatus,
    WorkflowStats,
)
from services.action.dashboard_stats.interfaces import BillingProvider
from services.action.dashboard_stats.plans import PLANS
from services.action.dashboard_stats.service import DashboardStatsService
from services.action.dashboard_stats.validation import OwnerStatsRequest
from services.state.audit_trail.service import AuditTrailService
from services.state.workflow_versions.domain import Workflow, WorkflowVersion
from services.state.workflow_versions.service import WorkflowVersionService

_LOGGER = get_logger(__name__)
_STEP_KEYS = ("actions", "steps")


def count_steps(data: dict[str, Any]) -> int:
    """Return the step count of one snapshot, or ``0`` when it has none."""
    for key in _STEP_KEYS:
        value = data.get(key)
        if isinstance(value, list):
            return len(value)
    return 0


def workflow_stats(workflow: Workflow, versions: Sequence[WorkflowVersion]) -> WorkflowStats:
    """Build one workflow rollup from its ascending version list."""
    latest = versions[-1] if versions else None
    last_modified = workflow.updated_at
    if latest is not None and latest.created_at > last_modified:
        last_modified = latest.created_at
    return WorkflowStats(
        id=workflow.id,
        name=workflow.name,
        hubspot_id=workflow.hubspot_id,
        status=workflow.status,
        protection_status="protected" if latest is not None else "unprotected",
        versions=len(versions),
        last_snapshot=None if latest is None else latest.created_at,
        last_modified_by=None if latest is None else latest.created_by_name,
        last_modified=last_modified,
        steps=0 if latest is None else count_steps(latest.data),
    )


class DefaultDashboardStatsService(DashboardStatsService):
    """Read-only aggregator over workflow versions, audit trail and billing."""

    def __init__(
        self,
        *,
        settings: DashboardStatsSettings,
        workflow_versions: WorkflowVersionService,
        audit_trail: AuditTrailService,
        billing: BillingProvider,
        clock: Clock = utc_now,
    ) -> None:
        self._settings = settings
        self._workflow_versions = workflow_versions
        self._audit_trail = audit_trail
        self._billing = billing
        self._clock = clock

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("owner_id",),
    )
    def get_dashboard_stats(
        self, *, meta: EnvelopeMeta, owner_id: str
    ) -> Envelope[DashboardStats]:
        """Aggregate counts, protection, plan usage and recent activity.

        A workflow counts as protected once it has at least one version.
        ``plan_used`` is clamped to the plan capacity and any excess is
        reported as ``plan_overage``.
        """
        request, errors = self._validate(meta=meta, owner_id=owner_id)
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, OwnerStatsRequest)

        rollups = self._collect(meta=meta, owner_id=request.owner_id)
        if not rollups.ok or rollups.payload is None:
            return failure(meta=meta, errors=rollups.errors)
        stats: list[WorkflowStats] = rollups.payload.value

        plan = self._account_plan(meta=meta, owner_id=request.owner_id)
        if not plan.ok or plan.payload is None:
            return failure(meta=meta, errors=plan.errors)
        account_plan: AccountPlan = plan.payload.value
        definition = PLANS.get(account_plan.plan_id)
        if definition is None:
            return failure(
                meta=meta,
                errors=[
                    dependency_error(
                        f"billing returned unknown plan '{account_plan.plan_id}'",
                        code=codes.DEPENDENCY_FAILURE,
                        retryable=False,
                        metadata={"plan_id": account_plan.plan_id},
                    )
                ],
            )

        now = self._clock()
        activity = self._audit_trail.count_entries(
            meta=meta,
            workflow_ids=tuple(item.id for item in stats),
            since=now - timedelta(hours=self._settings.recent_activity_window_hours),
        )
        if not activity.ok or activity.payload is None:
            return failure(meta=meta, errors=activity.errors)

        protected = [item for item in stats if item.protection_status == "protected"]
        active = sum(1 for item in stats if item.status == "active")
        capacity = definition.max_workflows
        used = active if capacity is None else min(active, capacity)

        fresh_after = now - timedelta(hours=self._settings.freshness_window_hours)
        uptime: float | None = None
        if protected:
            fresh = sum(
                1
                for item in protected
                if item.last_snapshot is not None and item.last_snapshot >= fresh_after
            )
            uptime = round(100 * fresh / len(protected), 1)

        return success(
            meta=meta,
            payload=DashboardStats(
                total_workflows=len(stats),
                active_workflows=active,
                protected_workflows=len(protected),
                total_versions=sum(item.versions for item in stats),
                uptime=uptime,
                last_snapshot=max(
                    (item.last_snapshot for item in protected if item.last_snapshot),
                    default=None,
                ),
                plan_id=definition.id,
                plan_status=account_plan.status,
                plan_capacity=capacity,
                plan_used=used,
                plan_overage=active - used,
                plan_history_days=definition.history_days,
                recent_activity=activity.payload.value,
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("owner_id",),
    )
    def list_workflow_stats(
        self, *, meta: EnvelopeMeta, owner_id: str
    ) -> Envelope[list[WorkflowStats]]:
        """Return rollups in workflow registration order."""
        request, errors = self._validate(meta=meta, owner_id=owner_id)
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, OwnerStatsRequest)
        return self._collect(meta=meta, owner_id=request.owner_id)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return readiness of both upstream state services."""
        versions = self._workflow_versions.health(meta=meta)
        audit = self._audit_trail.health(meta=meta)
        errors = [*versions.errors, *audit.errors]
        status = HealthStatus(
            service_ready=True,
            workflow_versions_ready=versions.ok,
            audit_trail_ready=audit.ok,
            detail="ok" if not errors else "degraded",
        )
        if errors:
            return failure(meta=meta, errors=errors, payload=status)
        return success(meta=meta, payload=status)

    def _collect(
        self, *, meta: EnvelopeMeta, owner_id: str
    ) -> Envelope[list[WorkflowStats]]:
        workflows = self._workflow_versions.list_workflows(meta=meta, owner_id=owner_id)
        if not workflows.ok or workflows.payload is None:
            return failure(meta=meta, errors=workflows.errors)

        stats: list[WorkflowStats] = []
        for workflow in workflows.payload.value:
            versions = self._workflow_versions.list_versions(
                meta=meta, workflow_id=workflow.id
            )
            if not versions.ok or versions.payload is None:
                return failure(meta=meta, errors=versions.errors)
            stats.append(workflow_stats(workflow, versions.payload.value))
        return success(meta=meta, payload=stats)

    def _account_plan(
        self, *, meta: EnvelopeMeta, owner_id: str
    ) -> Envelope[AccountPlan]:
        try:
            plan = self._billing.get_account_plan(account_id=owner_id)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning(
                "billing lookup failed: exception_type=%s",
                type(exc).__name__,
                exc_info=exc,
            )
            return failure(
                meta=meta,
                errors=[
                    dependency_error(
                        "billing plan lookup failed",
                        code=codes.DEPENDENCY_UNAVAILABLE,
                        metadata={"exception_type": type(exc).__name__},
                    )
                ],
            )
        return success(meta=meta, payload=plan)

    def _validate(
        self, *, meta: EnvelopeMeta, owner_id: str
    ) -> tuple[OwnerStatsRequest | None, list[Any]]:
        try:
            validate_meta(meta)
        except ValueError as exc:
            return None, [validation_error(str(exc), code=codes.INVALID_ARGUMENT)]
        try:
            return OwnerStatsRequest.model_validate({"owner_id": owner_id}), []
        except ValidationError as exc:
            return None, [
                validation_error(
                    f"request validation failed: {err['msg']}",
                    code=codes.INVALID_ARGUMENT,
                    metadata={"field": ".".join(str(p) for p in err["loc"])},
                )
                for err in exc.errors()
            ]
