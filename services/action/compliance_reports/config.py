"""Pydantic settings for Compliance Report Service scoring policy."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.guard_shared.config import GuardSettings, resolve_component_settings
from services.action.compliance_reports.component import SERVICE_COMPONENT_ID


class ComplianceReportSettings(BaseModel):
    """Backup-cadence policy used to score and annotate reports."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    expected_backup_interval_hours: int = Field(default=24, gt=0)
    score_warning_threshold: int = Field(default=80, ge=0, le=100)
    stale_backup_days: int = Field(default=7, gt=0)
    multi_editor_threshold: int = Field(default=3, gt=1)
    rollback_warning_threshold: int = Field(default=2, gt=0)
    system_actor: str = Field(default="system", min_length=1)


def resolve_compliance_report_settings(
    settings: GuardSettings,
) -> ComplianceReportSettings:
    """Resolve settings from ``components.service.compliance_reports``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=ComplianceReportSettings,
    )
