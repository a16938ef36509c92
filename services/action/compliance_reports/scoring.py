"""Deterministic summary, score and recommendation rules for reports."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime

from services.action.compliance_reports.config import ComplianceReportSettings
from services.action.compliance_reports.domain import ReportSummary, ReportVersion
from services.state.audit_trail.domain import AuditEntry
from services.state.workflow_versions.domain import (
    AUTOMATED_SNAPSHOT_TYPES,
    MANUAL_SNAPSHOT_TYPES,
    SYSTEM_SNAPSHOT_TYPES,
    WorkflowVersion,
)

_SECONDS_PER_HOUR = 3600
_SECONDS_PER_DAY = 86400


def expected_backups(*, start: datetime, end: datetime, interval_hours: int) -> int:
    """Return how many automated backups the period calls for (at least one)."""
    period_hours = (end - start).total_seconds() / _SECONDS_PER_HOUR
    return max(1, math.ceil(period_hours / interval_hours))


def compliance_score(*, automated_backups: int, expected: int) -> int:
    """Score automated backups against the expected count, capped at 100."""
    return min(100, round(100 * automated_backups / expected))


def summarize(
    *,
    versions: Sequence[ReportVersion],
    audit_trail: Sequence[AuditEntry],
    start: datetime,
    end: datetime,
    settings: ComplianceReportSettings,
) -> ReportSummary:
    """Compute report counts from the exact lists carried by the report."""
    automated = sum(1 for v in versions if v.snapshot_type in AUTOMATED_SNAPSHOT_TYPES)
    actors = {v.created_by for v in versions}
    actors.update(entry.user_id or settings.system_actor for entry in audit_trail)
    return ReportSummary(
        total_versions=len(versions),
        total_changes=sum(1 for v in versions if v.changes.has_changes),
        automated_backups=automated,
        manual_saves=sum(1 for v in versions if v.snapshot_type in MANUAL_SNAPSHOT_TYPES),
        system_backups=sum(1 for v in versions if v.snapshot_type in SYSTEM_SNAPSHOT_TYPES),
        unique_users=len(actors),
        compliance_score=compliance_score(
            automated_backups=automated,
            expected=expected_backups(
                start=start,
                end=end,
                interval_hours=settings.expected_backup_interval_hours,
            ),
        ),
    )


def recommendations(
    *,
    summary: ReportSummary,
    audit_trail: Sequence[AuditEntry],
    history: Sequence[WorkflowVersion],
    end: datetime,
    settings: ComplianceReportSettings,
) -> tuple[str, ...]:
    """Return advisory strings in a fixed rule order.

    ``history`` is the workflow's full version list so that backup staleness
    is measured from the last automated backup even when it predates the
    period.
    """
    advice: list[str] = []

    if summary.total_versions == 0:
        advice.append(
            "No versions were captured in this period; verify the workflow is "
            "still monitored."
        )

    last_automated = max(
        (
            version.created_at
            for version in history
            if version.snapshot_type in AUTOMATED_SNAPSHOT_TYPES
            and version.created_at <= end
        ),
        default=None,
    )
    if last_automated is None:
        advice.append(
            "No automated backup has ever been captured; enable daily backups "
            "for this workflow."
        )
    else:
        idle_days = int((end - last_automated).total_seconds() // _SECONDS_PER_DAY)
        if idle_days >= settings.stale_backup_days:
            advice.append(f"No automated backup in {idle_days} days.")

    if summary.compliance_score < settings.score_warning_threshold:
        advice.append(
            f"Compliance score {summary.compliance_score} is below "
            f"{settings.score_warning_threshold}; schedule automated backups at "
            f"least every {settings.expected_backup_interval_hours} hours."
        )

    if summary.unique_users >= settings.multi_editor_threshold:
        advice.append(
            f"{summary.unique_users} different users changed this workflow; "
            "consider requiring approval before publishing."
        )

    rollbacks = sum(1 for entry in audit_trail if entry.action == "rollback")
    if rollbacks >= settings.rollback_warning_threshold:
        advice.append(
            f"{rollbacks} rollbacks in this period; review changes before "
            "publishing to reduce rollbacks."
        )

    if not advice:
        advice.append("Backup cadence meets policy; no action required.")
    return tuple(advice)
