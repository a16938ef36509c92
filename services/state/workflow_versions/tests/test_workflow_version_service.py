"""Behavior tests for Workflow Version Service lifecycle semantics."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from packages.guard_shared.envelope import EnvelopeKind, new_meta
from packages.guard_shared.errors import ErrorCategory, codes
from packages.guard_shared.ids import generate_ulid_str
from services.state.audit_trail.config import AuditTrailSettings
from services.state.audit_trail.data import InMemoryAuditRepository
from services.state.audit_trail.implementation import DefaultAuditTrailService
from services.state.workflow_versions.config import WorkflowVersionSettings
from services.state.workflow_versions.data import InMemoryWorkflowVersionRepository
from services.state.workflow_versions.domain import VersionNumberConflict
from services.state.workflow_versions.implementation import (
    DefaultWorkflowVersionService,
)

_T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class _StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime) -> None:
        self._next = start

    def __call__(self) -> datetime:
        current = self._next
        self._next = current + timedelta(seconds=1)
        return current


class _ConflictingRepository(InMemoryWorkflowVersionRepository):
    """Repository double losing the version-number race a fixed number of times."""

    def __init__(self, conflicts: int) -> None:
        super().__init__()
        self.remaining_conflicts = conflicts
        self.append_calls = 0

    def append_next_version(self, **kwargs):  # type: ignore[override]
        self.append_calls += 1
        if self.remaining_conflicts > 0:
            self.remaining_conflicts -= 1
            raise VersionNumberConflict(kwargs["workflow_id"], 1)
        return super().append_next_version(**kwargs)


class _OfflineRepository(InMemoryWorkflowVersionRepository):
    """Repository double whose version storage is unreachable."""

    def append_next_version(self, **kwargs):  # type: ignore[override]
        del kwargs
        raise ConnectionError("storage offline")


class _FailingAuditRepository(InMemoryAuditRepository):
    def append_entry(self, **kwargs):  # type: ignore[override]
        del kwargs
        raise ConnectionError("audit storage offline")


def _meta() -> object:
    """Return valid envelope metadata for workflow version test requests."""
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="operator")


def _services(
    repository: InMemoryWorkflowVersionRepository | None = None,
    audit_repository: InMemoryAuditRepository | None = None,
) -> tuple[DefaultWorkflowVersionService, DefaultAuditTrailService]:
    clock = _StepClock(_T0)
    audit = DefaultAuditTrailService(
        settings=AuditTrailSettings(storage_backend="memory"),
        repository=audit_repository or InMemoryAuditRepository(),
        clock=clock,
    )
    service = DefaultWorkflowVersionService(
        settings=WorkflowVersionSettings(storage_backend="memory"),
        repository=repository or InMemoryWorkflowVersionRepository(),
        audit=audit,
        clock=clock,
    )
    return service, audit


def _register(service: DefaultWorkflowVersionService, hubspot_id: str = "wf1") -> str:
    result = service.register_workflow(
        meta=_meta(), owner_id="owner-1", hubspot_id=hubspot_id, name=hubspot_id
    )
    assert result.ok is True
    assert result.payload is not None
    return result.payload.value.id


def test_create_rollback_history_scenario() -> None:
    service, audit = _services()
    workflow_id = _register(service)

    v1 = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="manual",
        created_by="user1",
        data={"steps": ["A", "B"]},
    )
    v2 = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="manual",
        created_by="user1",
        data={"steps": ["A", "B", "C"]},
    )
    assert v1.payload is not None and v2.payload is not None
    assert v1.payload.value.version_number == 1
    assert v2.payload.value.version_number == 2

    rolled = service.rollback(
        meta=_meta(),
        workflow_id=workflow_id,
        target_version_id=v1.payload.value.id,
        user_id="user1",
        user_name="User One",
    )
    assert rolled.ok is True
    assert rolled.payload is not None
    v3 = rolled.payload.value
    assert v3.version_number == 3
    assert v3.snapshot_type == "rollback"
    assert v3.data == {"steps": ["A", "B"]}

    history = service.get_history(meta=_meta(), workflow_id=workflow_id)
    assert history.payload is not None
    entries = history.payload.value
    assert [entry.version.version_number for entry in entries] == [1, 2, 3]
    assert entries[0].changes.is_initial is True
    assert entries[1].changes.added == 1
    assert entries[1].changes.added_paths == ("$.steps[2]",)
    assert entries[1].changes.removed == entries[1].changes.modified == 0
    assert entries[2].changes.removed_paths == ("$.steps[2]",)

    trail = audit.list_entries(meta=_meta(), workflow_id=workflow_id)
    assert trail.payload is not None
    actions = [entry.action for entry in trail.payload.value]
    assert actions == ["create", "create", "create", "rollback"]
    rollback_entry = trail.payload.value[-1]
    assert rollback_entry.old_value == {"steps": ["A", "B", "C"]}
    assert rollback_entry.new_value == {"steps": ["A", "B"]}
    assert rollback_entry.version_id == v3.id


def test_create_version_for_unknown_workflow_is_not_found() -> None:
    service, _ = _services()

    result = service.create_version(
        meta=_meta(),
        workflow_id=generate_ulid_str(),
        snapshot_type="manual",
        created_by="user1",
        data={"steps": []},
    )

    assert result.ok is False
    assert result.errors[0].category == ErrorCategory.NOT_FOUND
    assert result.errors[0].code == codes.WORKFLOW_NOT_FOUND


def test_create_version_rejects_unknown_snapshot_type_and_non_object_data() -> None:
    service, _ = _services()
    workflow_id = _register(service)

    result = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="hourly",  # type: ignore[arg-type]
        created_by="user1",
        data=["not", "an", "object"],  # type: ignore[arg-type]
    )

    assert result.ok is False
    fields = {error.metadata["field"] for error in result.errors}
    assert fields == {"snapshot_type", "data"}
    assert all(error.category == ErrorCategory.VALIDATION for error in result.errors)


def test_system_actor_versions_are_audited_as_system_actions() -> None:
    service, audit = _services()
    workflow_id = _register(service)

    created = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="daily-backup",
        created_by="system",
        data={"steps": ["A"]},
    )

    assert created.payload is not None
    assert created.payload.value.created_by_name == "System"
    trail = audit.list_entries(meta=_meta(), workflow_id=workflow_id)
    assert trail.payload is not None
    assert all(entry.user_id is None for entry in trail.payload.value)


def test_allocation_conflict_is_retried_once() -> None:
    repository = _ConflictingRepository(conflicts=1)
    service, _ = _services(repository=repository)
    workflow_id = _register(service)

    result = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="manual",
        created_by="user1",
        data={"steps": ["A"]},
    )

    assert result.ok is True
    assert repository.append_calls == 2
    assert result.payload is not None
    assert result.payload.value.version_number == 1


def test_repeated_allocation_conflict_surfaces_conflict() -> None:
    repository = _ConflictingRepository(conflicts=2)
    service, audit = _services(repository=repository)
    workflow_id = _register(service)

    result = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="manual",
        created_by="user1",
        data={"steps": ["A"]},
    )

    assert result.ok is False
    assert repository.append_calls == 2
    assert result.errors[0].category == ErrorCategory.CONFLICT
    assert result.errors[0].code == codes.VERSION_NUMBER_CONFLICT
    assert result.errors[0].retryable is True
    trail = audit.list_entries(meta=_meta(), workflow_id=workflow_id)
    assert trail.payload is not None
    assert [entry.action for entry in trail.payload.value] == ["create"]


def test_storage_failure_is_surfaced_as_dependency_error() -> None:
    service, _ = _services(repository=_OfflineRepository())
    workflow_id = _register(service)

    result = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="manual",
        created_by="user1",
        data={"steps": ["A"]},
    )

    assert result.ok is False
    assert result.errors[0].category == ErrorCategory.DEPENDENCY
    assert result.errors[0].code == codes.DEPENDENCY_UNAVAILABLE


def test_audit_failure_after_append_is_reported_with_stored_version() -> None:
    repository = InMemoryWorkflowVersionRepository()
    service, _ = _services(
        repository=repository, audit_repository=_FailingAuditRepository()
    )
    registered = service.register_workflow(
        meta=_meta(), owner_id="owner-1", hubspot_id="wf1", name="wf1"
    )
    assert registered.ok is False
    assert registered.payload is not None
    workflow_id = registered.payload.value.id

    result = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="manual",
        created_by="user1",
        data={"steps": ["A"]},
    )

    assert result.ok is False
    assert result.errors[0].category == ErrorCategory.DEPENDENCY
    assert result.payload is not None
    assert repository.get_latest_version(workflow_id=workflow_id) == result.payload.value


def test_rollback_to_version_of_other_workflow_is_not_found() -> None:
    service, _ = _services()
    first = _register(service, "wf1")
    second = _register(service, "wf2")
    other = service.create_version(
        meta=_meta(),
        workflow_id=second,
        snapshot_type="manual",
        created_by="user1",
        data={"steps": ["X"]},
    )
    assert other.payload is not None

    result = service.rollback(
        meta=_meta(),
        workflow_id=first,
        target_version_id=other.payload.value.id,
        user_id="user1",
        user_name="User One",
    )

    assert result.ok is False
    assert result.errors[0].code == codes.VERSION_NOT_FOUND
    history = service.list_versions(meta=_meta(), workflow_id=first)
    assert history.payload is not None
    assert history.payload.value == []


def test_get_history_of_unknown_workflow_is_not_found() -> None:
    service, _ = _services()

    result = service.get_history(meta=_meta(), workflow_id=generate_ulid_str())

    assert result.ok is False
    assert result.errors[0].code == codes.WORKFLOW_NOT_FOUND


def test_malformed_workflow_id_is_a_validation_error() -> None:
    service, _ = _services()

    result = service.get_history(meta=_meta(), workflow_id="wf1")

    assert result.ok is False
    assert result.errors[0].category == ErrorCategory.VALIDATION
    assert result.errors[0].metadata["field"] == "workflow_id"


def test_get_latest_version_without_versions_is_not_found() -> None:
    service, _ = _services()
    workflow_id = _register(service)

    result = service.get_latest_version(meta=_meta(), workflow_id=workflow_id)

    assert result.ok is False
    assert result.errors[0].code == codes.VERSION_NOT_FOUND


def test_register_workflow_is_idempotent_per_owner_and_hubspot_id() -> None:
    service, audit = _services()
    first = service.register_workflow(
        meta=_meta(), owner_id="owner-1", hubspot_id="123", name="Welcome"
    )
    second = service.register_workflow(
        meta=_meta(), owner_id="owner-1", hubspot_id="123", name="Welcome v2"
    )

    assert first.payload is not None and second.payload is not None
    assert first.payload.value.id == second.payload.value.id
    assert second.payload.value.name == "Welcome v2"
    trail = audit.list_entries(meta=_meta(), workflow_id=first.payload.value.id)
    assert trail.payload is not None
    assert len(trail.payload.value) == 1


def test_delete_workflow_keeps_versions_and_hides_from_hubspot_lookup() -> None:
    service, audit = _services()
    workflow_id = _register(service, "555")
    service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="manual",
        created_by="user1",
        data={"steps": ["A"]},
    )

    deleted = service.delete_workflow(
        meta=_meta(), workflow_id=workflow_id, user_id="user1", user_name="User One"
    )

    assert deleted.payload is not None
    assert deleted.payload.value.status == "inactive"
    lookup = service.find_workflow_by_hubspot_id(meta=_meta(), hubspot_id="555")
    assert lookup.payload is not None
    assert lookup.payload.value == []
    versions = service.list_versions(meta=_meta(), workflow_id=workflow_id)
    assert versions.payload is not None
    assert len(versions.payload.value) == 1
    trail = audit.list_entries(meta=_meta(), workflow_id=workflow_id)
    assert trail.payload is not None
    last = trail.payload.value[-1]
    assert last.action == "delete"
    assert last.old_value == {"status": "active"}
    assert last.new_value == {"status": "inactive"}


def test_compare_versions_reports_paths_with_old_and_new_values() -> None:
    service, _ = _services()
    workflow_id = _register(service)
    left = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="manual",
        created_by="user1",
        data={"name": "Welcome", "steps": ["A"]},
    )
    right = service.create_version(
        meta=_meta(),
        workflow_id=workflow_id,
        snapshot_type="manual",
        created_by="user1",
        data={"name": "Welcome!", "steps": ["A"]},
    )
    assert left.payload is not None and right.payload is not None

    result = service.compare_versions(
        meta=_meta(),
        left_version_id=left.payload.value.id,
        right_version_id=right.payload.value.id,
    )

    assert result.payload is not None
    comparison = result.payload.value
    assert comparison.summary.modified == 1
    assert [(c.path, c.old_value, c.new_value) for c in comparison.changes] == [
        ("$.name", "Welcome", "Welcome!"),
    ]


def test_compare_versions_of_different_workflows_is_rejected() -> None:
    service, _ = _services()
    ids = []
    for hubspot_id in ("wf1", "wf2"):
        created = service.create_version(
            meta=_meta(),
            workflow_id=_register(service, hubspot_id),
            snapshot_type="manual",
            created_by="user1",
            data={"steps": []},
        )
        assert created.payload is not None
        ids.append(created.payload.value.id)

    result = service.compare_versions(
        meta=_meta(), left_version_id=ids[0], right_version_id=ids[1]
    )

    assert result.ok is False
    assert result.errors[0].code == codes.INVALID_ARGUMENT


def test_health_reports_ready_for_memory_storage() -> None:
    service, _ = _services()

    result = service.health(meta=_meta())

    assert result.payload is not None
    assert result.payload.value.service_ready is True
