"""Concrete Compliance Report Service implementation."""

from __future__ import annotations

from datetime import datetime

from pydantic import ValidationError

from packages.guard_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    validate_meta,
)
from packages.guard_shared.errors import codes, validation_error
from packages.guard_shared.logging import get_logger, public_api_instrumented
from services.action.compliance_reports import scoring
from services.action.compliance_reports.component import SERVICE_COMPONENT_ID
from services.action.compliance_reports.config import ComplianceReportSettings
from services.action.compliance_reports.domain import (
    ComplianceReport,
    HealthStatus,
    ReportPeriod,
    ReportVersion,
)
from services.action.compliance_reports.service import ComplianceReportService
from services.action.compliance_reports.validation import GenerateReportRequest
from services.state.audit_trail.service import AuditTrailService
from services.state.workflow_versions.service import WorkflowVersionService

_LOGGER = get_logger(__name__)


class DefaultComplianceReportService(ComplianceReportService):
    """Read-only aggregator over workflow versions and the audit trail."""

    def __init__(
        self,
        *,
        settings: ComplianceReportSettings,
        workflow_versions: WorkflowVersionService,
        audit_trail: AuditTrailService,
    ) -> None:
        self._settings = settings
        self._workflow_versions = workflow_versions
        self._audit_trail = audit_trail

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id",),
    )
    def generate(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        start: datetime,
        end: datetime,
    ) -> Envelope[ComplianceReport]:
        """Aggregate in-period versions and audit entries into one report.

        Version changes are measured against each version's real predecessor,
        which may fall before ``start``. An empty period is a valid report.
        """
        try:
            validate_meta(meta)
        except ValueError as exc:
            return failure(
                meta=meta,
                errors=[validation_error(str(exc), code=codes.INVALID_ARGUMENT)],
            )
        try:
            request = GenerateReportRequest.model_validate(
                {"workflow_id": workflow_id, "start": start, "end": end}
            )
        except ValidationError as exc:
            return failure(
                meta=meta,
                errors=[
                    validation_error(
                        f"request validation failed: {err['msg']}",
                        code=codes.INVALID_ARGUMENT,
                        metadata={"field": ".".join(str(p) for p in err["loc"])},
                    )
                    for err in exc.errors()
                ],
            )
        if request.start > request.end:
            return failure(
                meta=meta,
                errors=[
                    validation_error(
                        "start must not be after end",
                        code=codes.INVALID_RANGE,
                        metadata={
                            "start": request.start.isoformat(),
                            "end": request.end.isoformat(),
                        },
                    )
                ],
            )

        workflow = self._workflow_versions.get_workflow(
            meta=meta, workflow_id=request.workflow_id
        )
        if not workflow.ok or workflow.payload is None:
            return failure(meta=meta, errors=workflow.errors)

        history = self._workflow_versions.get_history(
            meta=meta, workflow_id=request.workflow_id
        )
        if not history.ok or history.payload is None:
            return failure(meta=meta, errors=history.errors)

        trail = self._audit_trail.list_entries(
            meta=meta,
            workflow_id=request.workflow_id,
            start=request.start,
            end=request.end,
        )
        if not trail.ok or trail.payload is None:
            return failure(meta=meta, errors=trail.errors)

        versions = tuple(
            ReportVersion(
                id=entry.version.id,
                version_number=entry.version.version_number,
                snapshot_type=entry.version.snapshot_type,
                created_by=entry.version.created_by,
                created_at=entry.version.created_at,
                changes=entry.changes,
            )
            for entry in history.payload.value
            if request.start <= entry.version.created_at <= request.end
        )
        audit_entries = tuple(trail.payload.value)
        summary = scoring.summarize(
            versions=versions,
            audit_trail=audit_entries,
            start=request.start,
            end=request.end,
            settings=self._settings,
        )
        advice = scoring.recommendations(
            summary=summary,
            audit_trail=audit_entries,
            history=[entry.version for entry in history.payload.value],
            end=request.end,
            settings=self._settings,
        )
        return success(
            meta=meta,
            payload=ComplianceReport(
                workflow_id=workflow.payload.value.id,
                workflow_name=workflow.payload.value.name,
                report_period=ReportPeriod(start=request.start, end=request.end),
                summary=summary,
                versions=versions,
                audit_trail=audit_entries,
                recommendations=advice,
            ),
        )

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
