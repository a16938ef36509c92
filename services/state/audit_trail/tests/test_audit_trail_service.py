"""Behavior tests for Audit Trail Service append and ordering semantics."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from packages.guard_shared.envelope import EnvelopeKind, new_meta
from packages.guard_shared.errors import ErrorCategory, codes
from services.state.audit_trail.config import AuditTrailSettings
from services.state.audit_trail.data import InMemoryAuditRepository
from services.state.audit_trail.implementation import DefaultAuditTrailService

_T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class _FailingRepository(InMemoryAuditRepository):
    """Repository double whose storage is unreachable."""

    def append_entry(self, **kwargs: object):  # type: ignore[override]
        del kwargs
        raise ConnectionError("storage offline")

    def list_entries(self, **kwargs: object):  # type: ignore[override]
        del kwargs
        raise ConnectionError("storage offline")


class _FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _meta() -> object:
    """Return valid envelope metadata for audit test requests."""
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="operator")


def _service(
    repository: InMemoryAuditRepository | None = None,
    clock: _FixedClock | None = None,
) -> DefaultAuditTrailService:
    return DefaultAuditTrailService(
        settings=AuditTrailSettings(storage_backend="memory"),
        repository=repository or InMemoryAuditRepository(),
        clock=clock or _FixedClock(_T0),
    )


def test_record_appends_entry_with_clock_timestamp() -> None:
    service = _service()

    result = service.record(
        meta=_meta(),
        workflow_id="wf1",
        action="create",
        user_id="user1",
        user_name="User One",
        new_value={"steps": ["A"]},
    )

    assert result.ok is True
    assert result.payload is not None
    entry = result.payload.value
    assert entry.timestamp == _T0
    assert entry.sequence == 1
    assert entry.new_value == {"steps": ["A"]}
    assert entry.is_system is False


def test_record_defaults_system_actor_name_for_null_user() -> None:
    service = _service()

    result = service.record(
        meta=_meta(),
        workflow_id="wf1",
        action="sync",
        user_id=None,
        user_name="",
    )

    assert result.ok is True
    assert result.payload is not None
    assert result.payload.value.user_name == "System"
    assert result.payload.value.is_system is True


def test_record_requires_user_name_for_user_actions() -> None:
    result = _service().record(
        meta=_meta(),
        workflow_id="wf1",
        action="edit",
        user_id="user1",
        user_name="  ",
    )

    assert result.ok is False
    assert result.errors[0].category == ErrorCategory.VALIDATION
    assert result.errors[0].metadata == {"field": "user_name"}


def test_record_rejects_unknown_action() -> None:
    result = _service().record(
        meta=_meta(),
        workflow_id="wf1",
        action="publish",  # type: ignore[arg-type]
        user_id=None,
        user_name="",
    )

    assert result.ok is False
    assert result.errors[0].code == codes.INVALID_ARGUMENT
    assert result.errors[0].metadata["field"] == "action"


def test_list_entries_orders_timestamp_ties_by_insertion_sequence() -> None:
    clock = _FixedClock(_T0)
    service = _service(clock=clock)
    for action in ("create", "edit", "rollback"):
        service.record(
            meta=_meta(),
            workflow_id="wf1",
            action=action,
            user_id="user1",
            user_name="User One",
        )
    service.record(
        meta=_meta(),
        workflow_id="wf1",
        action="delete",
        user_id="user1",
        user_name="User One",
        timestamp=_T0 - timedelta(minutes=5),
    )

    result = service.list_entries(meta=_meta(), workflow_id="wf1")

    assert result.ok is True
    assert result.payload is not None
    assert [entry.action for entry in result.payload.value] == [
        "delete",
        "create",
        "edit",
        "rollback",
    ]


def test_list_entries_filters_inclusive_range_and_workflow() -> None:
    service = _service()
    for offset in (0, 1, 2, 3):
        service.record(
            meta=_meta(),
            workflow_id="wf1",
            action="edit",
            user_id="user1",
            user_name="User One",
            timestamp=_T0 + timedelta(days=offset),
        )
    service.record(
        meta=_meta(),
        workflow_id="wf2",
        action="edit",
        user_id="user1",
        user_name="User One",
        timestamp=_T0 + timedelta(days=1),
    )

    result = service.list_entries(
        meta=_meta(),
        workflow_id="wf1",
        start=_T0 + timedelta(days=1),
        end=_T0 + timedelta(days=2),
    )

    assert result.payload is not None
    assert [entry.timestamp for entry in result.payload.value] == [
        _T0 + timedelta(days=1),
        _T0 + timedelta(days=2),
    ]


def test_list_entries_over_limit_fails_instead_of_truncating() -> None:
    service = DefaultAuditTrailService(
        settings=AuditTrailSettings(storage_backend="memory", max_list_limit=2),
        repository=InMemoryAuditRepository(),
        clock=_FixedClock(_T0),
    )

    def _record(offset: int) -> None:
        service.record(
            meta=_meta(),
            workflow_id="wf1",
            action="edit",
            user_id="user1",
            user_name="User One",
            timestamp=_T0 + timedelta(hours=offset),
        )

    _record(0)
    _record(1)
    at_limit = service.list_entries(meta=_meta(), workflow_id="wf1")
    _record(2)
    over_limit = service.list_entries(meta=_meta(), workflow_id="wf1")

    assert at_limit.ok is True
    assert at_limit.payload is not None
    assert len(at_limit.payload.value) == 2
    assert over_limit.ok is False
    assert over_limit.payload is None
    assert over_limit.errors[0].code == codes.AUDIT_RANGE_TOO_LARGE
    assert over_limit.errors[0].category == ErrorCategory.VALIDATION
    assert over_limit.errors[0].metadata == {"limit": "2"}


def test_list_entries_rejects_inverted_range() -> None:
    result = _service().list_entries(
        meta=_meta(),
        workflow_id="wf1",
        start=_T0,
        end=_T0 - timedelta(seconds=1),
    )

    assert result.ok is False
    assert result.errors[0].code == codes.INVALID_RANGE
    assert result.errors[0].category == ErrorCategory.VALIDATION


def test_count_entries_counts_trailing_window_across_workflows() -> None:
    service = _service()
    for workflow_id, offset in (("wf1", 0), ("wf1", 30), ("wf2", 2), ("wf3", 1)):
        service.record(
            meta=_meta(),
            workflow_id=workflow_id,
            action="edit",
            user_id=None,
            user_name="",
            timestamp=_T0 - timedelta(hours=offset),
        )

    result = service.count_entries(
        meta=_meta(),
        workflow_ids=("wf1", "wf2"),
        since=_T0 - timedelta(hours=24),
    )

    assert result.ok is True
    assert result.payload is not None
    assert result.payload.value == 2


def test_count_entries_with_no_workflows_is_zero() -> None:
    result = _service().count_entries(meta=_meta(), workflow_ids=())

    assert result.payload is not None
    assert result.payload.value == 0


def test_storage_failure_is_surfaced_as_dependency_error() -> None:
    service = _service(repository=_FailingRepository())

    recorded = service.record(
        meta=_meta(),
        workflow_id="wf1",
        action="create",
        user_id=None,
        user_name="",
    )
    listed = service.list_entries(meta=_meta(), workflow_id="wf1")

    for result in (recorded, listed):
        assert result.ok is False
        assert result.errors[0].category == ErrorCategory.DEPENDENCY
        assert result.errors[0].code == codes.DEPENDENCY_UNAVAILABLE
        assert result.errors[0].retryable is True


def test_invalid_metadata_is_rejected_before_storage() -> None:
    meta = new_meta(kind=EnvelopeKind.UNSPECIFIED, source="test", principal="operator")

    result = _service(repository=_FailingRepository()).record(
        meta=meta,
        workflow_id="wf1",
        action="create",
        user_id=None,
        user_name="",
    )

    assert result.ok is False
    assert result.errors[0].message == "metadata.kind must be specified"
