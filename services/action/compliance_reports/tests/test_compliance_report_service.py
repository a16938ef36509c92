"""Behavior tests for Compliance Report Service aggregation and scoring."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from packages.guard_shared.envelope import EnvelopeKind, new_meta
from packages.guard_shared.errors import ErrorCategory, codes
from packages.guard_shared.ids import generate_ulid_str
from services.action.compliance_reports.config import ComplianceReportSettings
from services.action.compliance_reports.implementation import (
    DefaultComplianceReportService,
)
from services.state.audit_trail.config import AuditTrailSettings
from services.state.audit_trail.data import InMemoryAuditRepository
from services.state.audit_trail.implementation import DefaultAuditTrailService
from services.state.workflow_versions.config import WorkflowVersionSettings
from services.state.workflow_versions.data import InMemoryWorkflowVersionRepository
from services.state.workflow_versions.implementation import (
    DefaultWorkflowVersionService,
)

_T0 = datetime(2026, 3, 1, tzinfo=UTC)


class _ManualClock:
    """Clock whose current time is set explicitly by each test."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class _Harness:
    def __init__(
        self,
        settings: ComplianceReportSettings | None = None,
        audit_settings: AuditTrailSettings | None = None,
    ) -> None:
        self.clock = _ManualClock(_T0 - timedelta(days=30))
        audit = DefaultAuditTrailService(
            settings=audit_settings or AuditTrailSettings(storage_backend="memory"),
            repository=InMemoryAuditRepository(),
            clock=self.clock,
        )
        self.versions = DefaultWorkflowVersionService(
            settings=WorkflowVersionSettings(storage_backend="memory"),
            repository=InMemoryWorkflowVersionRepository(),
            audit=audit,
            clock=self.clock,
        )
        self.reports = DefaultComplianceReportService(
            settings=settings or ComplianceReportSettings(),
            workflow_versions=self.versions,
            audit_trail=audit,
        )
        registered = self.versions.register_workflow(
            meta=_meta(), owner_id="owner-1", hubspot_id="wf1", name="Welcome series"
        )
        assert registered.payload is not None
        self.workflow_id = registered.payload.value.id

    def snapshot(
        self,
        at: datetime,
        data: dict[str, object],
        *,
        snapshot_type: str = "daily-backup",
        created_by: str = "system",
    ) -> str:
        self.clock.now = at
        created = self.versions.create_version(
            meta=_meta(),
            workflow_id=self.workflow_id,
            snapshot_type=snapshot_type,  # type: ignore[arg-type]
            created_by=created_by,
            data=data,  # type: ignore[arg-type]
        )
        assert created.payload is not None
        return created.payload.value.id

    def rollback(self, at: datetime, target_version_id: str, user_id: str) -> None:
        self.clock.now = at
        rolled = self.versions.rollback(
            meta=_meta(),
            workflow_id=self.workflow_id,
            target_version_id=target_version_id,
            user_id=user_id,
            user_name=user_id.title(),
        )
        assert rolled.ok is True


def _meta() -> object:
    """Return valid envelope metadata for compliance test requests."""
    return new_meta(kind=EnvelopeKind.QUERY, source="test", principal="operator")


def test_summary_counts_match_detail_lists() -> None:
    harness = _Harness()
    v1 = harness.snapshot(_T0 + timedelta(hours=1), {"steps": ["A"]}, snapshot_type="manual", created_by="user1")
    harness.snapshot(_T0 + timedelta(hours=2), {"steps": ["A", "B"]}, snapshot_type="on-publish")
    harness.snapshot(_T0 + timedelta(hours=3), {"steps": ["A", "B"]})
    harness.rollback(_T0 + timedelta(hours=4), v1, "user2")

    result = harness.reports.generate(
        meta=_meta(),
        workflow_id=harness.workflow_id,
        start=_T0,
        end=_T0 + timedelta(days=1),
    )

    assert result.ok is True
    assert result.payload is not None
    report = result.payload.value
    summary = report.summary
    assert report.workflow_name == "Welcome series"
    assert summary.total_versions == len(report.versions) == 4
    assert summary.automated_backups == 2
    assert summary.manual_saves == 1
    assert summary.system_backups == 1
    assert summary.total_changes == 3
    assert summary.unique_users == 3
    assert summary.unique_users <= summary.total_versions + len(report.audit_trail)
    assert [entry.action for entry in report.audit_trail] == [
        "create",
        "create",
        "create",
        "rollback",
    ]


def test_changes_are_measured_against_predecessor_before_period() -> None:
    harness = _Harness()
    harness.snapshot(_T0 - timedelta(days=2), {"steps": ["A", "B"]})
    harness.snapshot(_T0 + timedelta(hours=1), {"steps": ["A", "B", "C"]})

    result = harness.reports.generate(
        meta=_meta(),
        workflow_id=harness.workflow_id,
        start=_T0,
        end=_T0 + timedelta(days=1),
    )

    assert result.payload is not None
    (version,) = result.payload.value.versions
    assert version.version_number == 2
    assert version.changes.is_initial is False
    assert version.changes.added == 1


def test_empty_period_is_a_zero_report() -> None:
    harness = _Harness()
    harness.snapshot(_T0 - timedelta(days=3), {"steps": ["A"]})

    result = harness.reports.generate(
        meta=_meta(),
        workflow_id=harness.workflow_id,
        start=_T0,
        end=_T0 + timedelta(days=1),
    )

    assert result.ok is True
    assert result.payload is not None
    report = result.payload.value
    assert report.versions == ()
    assert report.audit_trail == ()
    assert report.summary.model_dump() == {
        "total_versions": 0,
        "total_changes": 0,
        "automated_backups": 0,
        "manual_saves": 0,
        "system_backups": 0,
        "unique_users": 0,
        "compliance_score": 0,
    }
    assert report.recommendations[0].startswith("No versions were captured")


def test_full_cadence_scores_one_hundred_without_warnings() -> None:
    harness = _Harness()
    harness.snapshot(_T0 + timedelta(hours=1), {"steps": ["A"]})
    harness.snapshot(_T0 + timedelta(hours=25), {"steps": ["A", "B"]})

    result = harness.reports.generate(
        meta=_meta(),
        workflow_id=harness.workflow_id,
        start=_T0,
        end=_T0 + timedelta(days=2),
    )

    assert result.payload is not None
    report = result.payload.value
    assert report.summary.compliance_score == 100
    assert report.recommendations == ("Backup cadence meets policy; no action required.",)


def test_partial_cadence_score_is_ratio_of_expected_backups() -> None:
    harness = _Harness()
    for day in (0, 1, 3):
        harness.snapshot(_T0 + timedelta(days=day, hours=1), {"steps": [day]})

    result = harness.reports.generate(
        meta=_meta(),
        workflow_id=harness.workflow_id,
        start=_T0,
        end=_T0 + timedelta(days=7),
    )

    assert result.payload is not None
    report = result.payload.value
    assert report.summary.compliance_score == 43
    assert report.recommendations == (
        "Compliance score 43 is below 80; schedule automated backups at least "
        "every 24 hours.",
    )


def test_stale_backups_editors_and_rollbacks_are_recommended() -> None:
    harness = _Harness(ComplianceReportSettings(stale_backup_days=3))
    v1 = harness.snapshot(_T0 - timedelta(days=10), {"steps": ["A"]})
    harness.snapshot(_T0 + timedelta(hours=1), {"steps": ["B"]}, snapshot_type="manual", created_by="user1")
    harness.rollback(_T0 + timedelta(hours=2), v1, "user2")
    harness.rollback(_T0 + timedelta(hours=3), v1, "user3")

    result = harness.reports.generate(
        meta=_meta(),
        workflow_id=harness.workflow_id,
        start=_T0,
        end=_T0 + timedelta(days=1),
    )

    assert result.payload is not None
    advice = result.payload.value.recommendations
    assert "No automated backup in 11 days." in advice
    assert any(line.startswith("3 different users changed") for line in advice)
    assert any(line.startswith("2 rollbacks in this period") for line in advice)


def test_inverted_range_is_rejected() -> None:
    harness = _Harness()

    result = harness.reports.generate(
        meta=_meta(),
        workflow_id=harness.workflow_id,
        start=_T0,
        end=_T0 - timedelta(seconds=1),
    )

    assert result.ok is False
    assert result.errors[0].category == ErrorCategory.VALIDATION
    assert result.errors[0].code == codes.INVALID_RANGE


def test_unknown_workflow_is_not_found() -> None:
    harness = _Harness()

    result = harness.reports.generate(
        meta=_meta(),
        workflow_id=generate_ulid_str(),
        start=_T0,
        end=_T0 + timedelta(days=1),
    )

    assert result.ok is False
    assert result.errors[0].category == ErrorCategory.NOT_FOUND
    assert result.errors[0].code == codes.WORKFLOW_NOT_FOUND


def test_audit_trail_over_list_limit_fails_the_report() -> None:
    harness = _Harness(
        audit_settings=AuditTrailSettings(storage_backend="memory", max_list_limit=2)
    )
    for hour in (1, 2, 3, 4):
        harness.snapshot(_T0 + timedelta(hours=hour), {"steps": [hour]})

    result = harness.reports.generate(
        meta=_meta(),
        workflow_id=harness.workflow_id,
        start=_T0,
        end=_T0 + timedelta(days=1),
    )

    assert result.ok is False
    assert result.payload is None
    assert result.errors[0].code == codes.AUDIT_RANGE_TOO_LARGE
