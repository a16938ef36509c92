"""Concurrency tests for per-workflow version-number allocation."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from packages.guard_shared.envelope import EnvelopeKind, new_meta
from packages.guard_shared.errors import codes
from services.state.audit_trail.config import AuditTrailSettings
from services.state.audit_trail.data import InMemoryAuditRepository
from services.state.audit_trail.implementation import DefaultAuditTrailService
from services.state.workflow_versions.config import WorkflowVersionSettings
from services.state.workflow_versions.data import InMemoryWorkflowVersionRepository
from services.state.workflow_versions.domain import VersionNumberConflict, WorkflowVersion
from services.state.workflow_versions.implementation import (
    DefaultWorkflowVersionService,
)


class _ReadThenInsertRepository(InMemoryWorkflowVersionRepository):
    """Repository double that reads the head outside its insert lock.

    The insert step enforces uniqueness the way a database constraint would,
    so concurrent writers that read the same head collide.
    """

    def __init__(self) -> None:
        super().__init__()
        self._insert_lock = threading.Lock()

    def append_next_version(self, **kwargs):  # type: ignore[override]
        expected = len(self.list_versions(workflow_id=kwargs["workflow_id"])) + 1
        time.sleep(0.001)
        with self._insert_lock:
            current = len(self.list_versions(workflow_id=kwargs["workflow_id"]))
            if current + 1 != expected:
                raise VersionNumberConflict(kwargs["workflow_id"], expected)
            return super().append_next_version(**kwargs)


def _meta() -> object:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="operator")


def _service(repository: InMemoryWorkflowVersionRepository) -> DefaultWorkflowVersionService:
    return DefaultWorkflowVersionService(
        settings=WorkflowVersionSettings(storage_backend="memory"),
        repository=repository,
        audit=DefaultAuditTrailService(
            settings=AuditTrailSettings(storage_backend="memory"),
            repository=InMemoryAuditRepository(),
        ),
    )


def _create_concurrently(
    service: DefaultWorkflowVersionService, workflow_id: str, count: int
) -> list:
    start = threading.Barrier(count)

    def _create(index: int):
        start.wait()
        return service.create_version(
            meta=_meta(),
            workflow_id=workflow_id,
            snapshot_type="manual",
            created_by=f"user{index}",
            data={"steps": [index]},
        )

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(_create, range(count)))


def _register(service: DefaultWorkflowVersionService) -> str:
    registered = service.register_workflow(
        meta=_meta(), owner_id="owner-1", hubspot_id="wf1", name="wf1"
    )
    assert registered.payload is not None
    return registered.payload.value.id


def test_concurrent_creates_yield_exactly_one_through_n() -> None:
    service = _service(InMemoryWorkflowVersionRepository())
    workflow_id = _register(service)

    results = _create_concurrently(service, workflow_id, 16)

    assert all(result.ok for result in results)
    numbers = sorted(result.payload.value.version_number for result in results)
    assert numbers == list(range(1, 17))


def test_racing_writers_never_duplicate_numbers() -> None:
    repository = _ReadThenInsertRepository()
    service = _service(repository)
    workflow_id = _register(service)

    results = _create_concurrently(service, workflow_id, 8)

    succeeded = [result for result in results if result.ok]
    failed = [result for result in results if not result.ok]
    numbers = sorted(result.payload.value.version_number for result in succeeded)
    assert numbers == list(range(1, len(succeeded) + 1))
    assert all(
        result.errors[0].code == codes.VERSION_NUMBER_CONFLICT for result in failed
    )
    stored: list[WorkflowVersion] = repository.list_versions(workflow_id=workflow_id)
    assert [version.version_number for version in stored] == numbers
