"""Concrete Workflow Version Service implementation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, JsonValue, ValidationError

from packages.guard_shared.clock import Clock, utc_now
from packages.guard_shared.config import GuardSettings
from packages.guard_shared.envelope import (
    Envelope,
    EnvelopeMeta,
    failure,
    success,
    validate_meta,
)
from packages.guard_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    dependency_error,
    not_found_error,
    validation_error,
)
from packages.guard_shared.logging import get_logger, public_api_instrumented
from resources.substrates.postgres.errors import (
    is_postgres_error,
    normalize_postgres_error,
)
from services.state.audit_trail.domain import AuditAction
from services.state.audit_trail.service import AuditTrailService
from services.state.workflow_versions.changes import (
    ChangeSummary,
    FieldChange,
    diff_documents,
    summarize_changes,
)
from services.state.workflow_versions.component import SERVICE_COMPONENT_ID
from services.state.workflow_versions.config import (
    WorkflowVersionSettings,
    resolve_workflow_version_settings,
)
from services.state.workflow_versions.data import (
    PostgresWorkflowVersionRepository,
    WorkflowVersionPostgresRuntime,
)
from services.state.workflow_versions.domain import (
    HealthStatus,
    SnapshotType,
    VersionComparison,
    VersionHistoryEntry,
    VersionNumberConflict,
    Workflow,
    WorkflowStatus,
    WorkflowVersion,
)
from services.state.workflow_versions.interfaces import WorkflowVersionRepository
from services.state.workflow_versions.service import WorkflowVersionService
from services.state.workflow_versions.validation import (
    CompareVersionsRequest,
    CreateVersionRequest,
    DeleteWorkflowRequest,
    HubspotLookupRequest,
    OwnerRequest,
    RegisterWorkflowRequest,
    RollbackRequest,
    VersionRequest,
    WorkflowRequest,
)

_LOGGER = get_logger(__name__)


class _StorageFailure(Exception):
    """Carries an already-built failure envelope out of a helper."""

    def __init__(self, envelope: Envelope[Any]) -> None:
        super().__init__("storage failure")
        self.envelope = envelope


class DefaultWorkflowVersionService(WorkflowVersionService):
    """Default lifecycle manager for monitored workflows and their versions.

    Versions are append-only: rollback appends a copy of an earlier version.
    Every state change is recorded through the audit trail service, and a
    failed audit write is reported to the caller even though the version
    itself was already stored.
    """

    def __init__(
        self,
        *,
        settings: WorkflowVersionSettings,
        repository: WorkflowVersionRepository,
        audit: AuditTrailService,
        clock: Clock = utc_now,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._audit = audit
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: GuardSettings, *, audit: AuditTrailService
    ) -> "DefaultWorkflowVersionService":
        """Build the service with a dedicated Postgres runtime."""
        runtime = WorkflowVersionPostgresRuntime.from_settings(settings)
        return cls(
            settings=resolve_workflow_version_settings(settings),
            repository=PostgresWorkflowVersionRepository(runtime.schema_sessions),
            audit=audit,
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("owner_id", "hubspot_id"),
    )
    def register_workflow(
        self,
        *,
        meta: EnvelopeMeta,
        owner_id: str,
        hubspot_id: str,
        name: str,
        status: WorkflowStatus = "active",
    ) -> Envelope[Workflow]:
        """Upsert by ``(owner_id, hubspot_id)``; audit only first registration."""
        request, errors = self._validate_request(
            meta=meta,
            model=RegisterWorkflowRequest,
            payload={
                "owner_id": owner_id,
                "hubspot_id": hubspot_id,
                "name": name,
                "status": status,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, RegisterWorkflowRequest)

        try:
            workflow, created = self._repository.upsert_workflow(
                owner_id=request.owner_id,
                hubspot_id=request.hubspot_id,
                name=request.name,
                status=request.status,
                now=self._clock(),
            )
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="register_workflow", exc=exc)

        if created:
            audited = self._record(
                meta=meta,
                workflow_id=workflow.id,
                action="create",
                actor=None,
                new_value={"hubspotId": workflow.hubspot_id, "name": workflow.name},
            )
            if not audited.ok:
                return failure(meta=meta, errors=audited.errors, payload=workflow)
        return success(meta=meta, payload=workflow)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id",),
    )
    def get_workflow(self, *, meta: EnvelopeMeta, workflow_id: str) -> Envelope[Workflow]:
        """Return one workflow or ``WORKFLOW_NOT_FOUND``."""
        request, errors = self._validate_request(
            meta=meta, model=WorkflowRequest, payload={"workflow_id": workflow_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, WorkflowRequest)

        try:
            workflow = self._require_workflow(meta=meta, workflow_id=request.workflow_id)
        except _StorageFailure as exc:
            return exc.envelope
        if isinstance(workflow, ErrorDetail):
            return failure(meta=meta, errors=[workflow])
        return success(meta=meta, payload=workflow)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("owner_id",),
    )
    def list_workflows(self, *, meta: EnvelopeMeta, owner_id: str) -> Envelope[list[Workflow]]:
        """Return workflows in registration order, active and inactive."""
        request, errors = self._validate_request(
            meta=meta, model=OwnerRequest, payload={"owner_id": owner_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, OwnerRequest)

        try:
            listed = self._repository.list_workflows(owner_id=request.owner_id)
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="list_workflows", exc=exc)
        return success(meta=meta, payload=listed)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("hubspot_id", "owner_id"),
    )
    def find_workflow_by_hubspot_id(
        self,
        *,
        meta: EnvelopeMeta,
        hubspot_id: str,
        owner_id: str | None = None,
    ) -> Envelope[list[Workflow]]:
        """Return active workflows tracking ``hubspot_id``; empty when none."""
        request, errors = self._validate_request(
            meta=meta,
            model=HubspotLookupRequest,
            payload={"hubspot_id": hubspot_id, "owner_id": owner_id},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, HubspotLookupRequest)

        try:
            matches = self._repository.find_workflows_by_hubspot_id(
                hubspot_id=request.hubspot_id,
                owner_id=request.owner_id,
            )
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(
                meta=meta, operation="find_workflow_by_hubspot_id", exc=exc
            )
        return success(meta=meta, payload=[wf for wf in matches if wf.is_active])

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id", "user_id"),
    )
    def delete_workflow(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        user_id: str | None = None,
        user_name: str = "",
    ) -> Envelope[Workflow]:
        """Mark one workflow inactive and audit the deletion."""
        request, errors = self._validate_request(
            meta=meta,
            model=DeleteWorkflowRequest,
            payload={"workflow_id": workflow_id, "user_id": user_id, "user_name": user_name},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, DeleteWorkflowRequest)

        try:
            previous = self._require_workflow(meta=meta, workflow_id=request.workflow_id)
        except _StorageFailure as exc:
            return exc.envelope
        if isinstance(previous, ErrorDetail):
            return failure(meta=meta, errors=[previous])

        try:
            updated = self._repository.set_workflow_status(
                workflow_id=request.workflow_id,
                status="inactive",
                now=self._clock(),
            )
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="delete_workflow", exc=exc)
        if updated is None:
            return failure(meta=meta, errors=[_workflow_not_found(request.workflow_id)])

        audited = self._record(
            meta=meta,
            workflow_id=updated.id,
            action="delete",
            actor=(request.user_id, request.user_name),
            old_value={"status": previous.status},
            new_value={"status": updated.status},
        )
        if not audited.ok:
            return failure(meta=meta, errors=audited.errors, payload=updated)
        return success(meta=meta, payload=updated)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id", "snapshot_type", "created_by"),
    )
    def create_version(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        snapshot_type: SnapshotType,
        created_by: str,
        data: dict[str, JsonValue],
        created_by_name: str | None = None,
        description: str = "",
    ) -> Envelope[WorkflowVersion]:
        """Append the next version number and record an audit ``create``."""
        request, errors = self._validate_request(
            meta=meta,
            model=CreateVersionRequest,
            payload={
                "workflow_id": workflow_id,
                "snapshot_type": snapshot_type,
                "created_by": created_by,
                "data": data,
                "created_by_name": created_by_name,
                "description": description,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, CreateVersionRequest)

        try:
            workflow = self._require_workflow(meta=meta, workflow_id=request.workflow_id)
        except _StorageFailure as exc:
            return exc.envelope
        if isinstance(workflow, ErrorDetail):
            return failure(meta=meta, errors=[workflow])

        actor_name = request.created_by_name or self._display_name(request.created_by)
        appended = self._append_version(
            meta=meta,
            workflow_id=workflow.id,
            snapshot_type=request.snapshot_type,
            created_by=request.created_by,
            created_by_name=actor_name,
            description=request.description,
            data=request.data,
        )
        if not appended.ok or appended.payload is None:
            return appended
        version = appended.payload.value

        audited = self._record(
            meta=meta,
            workflow_id=workflow.id,
            version_id=version.id,
            action="create",
            actor=(self._actor_user_id(request.created_by), actor_name),
            new_value=version.data,
        )
        if not audited.ok:
            return failure(meta=meta, errors=audited.errors, payload=version)
        return success(meta=meta, payload=version)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id", "target_version_id", "user_id"),
    )
    def rollback(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        target_version_id: str,
        user_id: str,
        user_name: str,
    ) -> Envelope[WorkflowVersion]:
        """Append a ``rollback`` version whose data is the target's data.

        The target is used as read; a head appended concurrently is simply
        superseded by the new rollback version.
        """
        request, errors = self._validate_request(
            meta=meta,
            model=RollbackRequest,
            payload={
                "workflow_id": workflow_id,
                "target_version_id": target_version_id,
                "user_id": user_id,
                "user_name": user_name,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, RollbackRequest)

        try:
            workflow = self._require_workflow(meta=meta, workflow_id=request.workflow_id)
            if isinstance(workflow, ErrorDetail):
                return failure(meta=meta, errors=[workflow])
            target = self._repository.get_version(version_id=request.target_version_id)
            head = self._repository.get_latest_version(workflow_id=workflow.id)
        except _StorageFailure as exc:
            return exc.envelope
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="rollback", exc=exc)

        if target is None or target.workflow_id != workflow.id:
            return failure(
                meta=meta,
                errors=[
                    not_found_error(
                        "target version not found for workflow",
                        code=codes.VERSION_NOT_FOUND,
                        metadata={
                            "workflow_id": workflow.id,
                            "version_id": request.target_version_id,
                        },
                    )
                ],
            )

        appended = self._append_version(
            meta=meta,
            workflow_id=workflow.id,
            snapshot_type="rollback",
            created_by=request.user_id,
            created_by_name=request.user_name,
            description=f"Rollback to version {target.version_number}",
            data=target.data,
        )
        if not appended.ok or appended.payload is None:
            return appended
        version = appended.payload.value

        audited = self._record(
            meta=meta,
            workflow_id=workflow.id,
            version_id=version.id,
            action="rollback",
            actor=(request.user_id, request.user_name),
            old_value=None if head is None else head.data,
            new_value=target.data,
        )
        if not audited.ok:
            return failure(meta=meta, errors=audited.errors, payload=version)
        return success(meta=meta, payload=version)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id",),
    )
    def get_history(
        self, *, meta: EnvelopeMeta, workflow_id: str
    ) -> Envelope[list[VersionHistoryEntry]]:
        """Pair each version with changes relative to the version before it."""
        listed = self.list_versions(meta=meta, workflow_id=workflow_id)
        if not listed.ok or listed.payload is None:
            return failure(meta=meta, errors=listed.errors)

        history: list[VersionHistoryEntry] = []
        previous: WorkflowVersion | None = None
        for version in listed.payload.value:
            history.append(
                VersionHistoryEntry(
                    version=version,
                    changes=self._summarize(previous=previous, current=version),
                )
            )
            previous = version
        return success(meta=meta, payload=history)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id",),
    )
    def list_versions(
        self, *, meta: EnvelopeMeta, workflow_id: str
    ) -> Envelope[list[WorkflowVersion]]:
        """Return versions in ascending version-number order."""
        request, errors = self._validate_request(
            meta=meta, model=WorkflowRequest, payload={"workflow_id": workflow_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, WorkflowRequest)

        try:
            workflow = self._require_workflow(meta=meta, workflow_id=request.workflow_id)
            if isinstance(workflow, ErrorDetail):
                return failure(meta=meta, errors=[workflow])
            versions = self._repository.list_versions(workflow_id=workflow.id)
        except _StorageFailure as exc:
            return exc.envelope
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="list_versions", exc=exc)
        return success(
            meta=meta,
            payload=sorted(versions, key=lambda item: item.version_number),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("version_id",),
    )
    def get_version(self, *, meta: EnvelopeMeta, version_id: str) -> Envelope[WorkflowVersion]:
        """Return one version or ``VERSION_NOT_FOUND``."""
        request, errors = self._validate_request(
            meta=meta, model=VersionRequest, payload={"version_id": version_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, VersionRequest)

        try:
            version = self._repository.get_version(version_id=request.version_id)
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="get_version", exc=exc)
        if version is None:
            return failure(meta=meta, errors=[_version_not_found(request.version_id)])
        return success(meta=meta, payload=version)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id",),
    )
    def get_latest_version(
        self, *, meta: EnvelopeMeta, workflow_id: str
    ) -> Envelope[WorkflowVersion]:
        """Return the head version; ``VERSION_NOT_FOUND`` when none exist yet."""
        request, errors = self._validate_request(
            meta=meta, model=WorkflowRequest, payload={"workflow_id": workflow_id}
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, WorkflowRequest)

        try:
            workflow = self._require_workflow(meta=meta, workflow_id=request.workflow_id)
            if isinstance(workflow, ErrorDetail):
                return failure(meta=meta, errors=[workflow])
            head = self._repository.get_latest_version(workflow_id=workflow.id)
        except _StorageFailure as exc:
            return exc.envelope
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="get_latest_version", exc=exc)
        if head is None:
            return failure(
                meta=meta,
                errors=[
                    not_found_error(
                        "workflow has no versions",
                        code=codes.VERSION_NOT_FOUND,
                        metadata={"workflow_id": workflow.id},
                    )
                ],
            )
        return success(meta=meta, payload=head)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("left_version_id", "right_version_id"),
    )
    def compare_versions(
        self,
        *,
        meta: EnvelopeMeta,
        left_version_id: str,
        right_version_id: str,
    ) -> Envelope[VersionComparison]:
        """Diff ``left`` (older side) against ``right`` element by element."""
        request, errors = self._validate_request(
            meta=meta,
            model=CompareVersionsRequest,
            payload={
                "left_version_id": left_version_id,
                "right_version_id": right_version_id,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, CompareVersionsRequest)

        try:
            left = self._repository.get_version(version_id=request.left_version_id)
            right = self._repository.get_version(version_id=request.right_version_id)
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="compare_versions", exc=exc)

        missing = [
            _version_not_found(version_id)
            for version_id, version in (
                (request.left_version_id, left),
                (request.right_version_id, right),
            )
            if version is None
        ]
        if missing:
            return failure(meta=meta, errors=missing)
        assert left is not None and right is not None
        if left.workflow_id != right.workflow_id:
            return failure(
                meta=meta,
                errors=[
                    validation_error(
                        "versions belong to different workflows",
                        code=codes.INVALID_ARGUMENT,
                        metadata={
                            "left_workflow_id": left.workflow_id,
                            "right_workflow_id": right.workflow_id,
                        },
                    )
                ],
            )

        summary = self._summarize(previous=left, current=right)
        changes: tuple[FieldChange, ...] = ()
        if summary.complete:
            changes = tuple(diff_documents(left.data, right.data))
        return success(
            meta=meta,
            payload=VersionComparison(
                workflow_id=left.workflow_id,
                left=left,
                right=right,
                summary=summary,
                changes=changes,
            ),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return readiness based on owned repository availability."""
        _, errors = self._validate_request(meta=meta, model=None, payload=None)
        if errors:
            return failure(meta=meta, errors=errors)
        try:
            self._repository.ping()
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="health", exc=exc)
        return success(
            meta=meta,
            payload=HealthStatus(service_ready=True, substrate_ready=True, detail="ok"),
        )

    def _append_version(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        snapshot_type: SnapshotType,
        created_by: str,
        created_by_name: str,
        description: str,
        data: JsonValue,
    ) -> Envelope[WorkflowVersion]:
        """Allocate the next version number, re-reading the head on conflict."""
        attempts = 1 + self._settings.allocation_retries
        last_conflict: VersionNumberConflict | None = None
        for attempt in range(1, attempts + 1):
            try:
                version = self._repository.append_next_version(
                    workflow_id=workflow_id,
                    snapshot_type=snapshot_type,
                    created_by=created_by,
                    created_by_name=created_by_name,
                    description=description,
                    data=data,
                    created_at=self._clock(),
                )
            except VersionNumberConflict as exc:
                last_conflict = exc
                _LOGGER.info(
                    "version number allocation conflicted: workflow_id=%s "
                    "version_number=%s attempt=%s/%s",
                    workflow_id,
                    exc.version_number,
                    attempt,
                    attempts,
                )
                continue
            except Exception as exc:  # noqa: BLE001
                return self._storage_failure(meta=meta, operation="create_version", exc=exc)
            return success(meta=meta, payload=version)

        metadata = {"workflow_id": workflow_id, "attempts": str(attempts)}
        if last_conflict is not None:
            metadata["version_number"] = str(last_conflict.version_number)
        return failure(
            meta=meta,
            errors=[
                conflict_error(
                    "version number allocation conflicted with a concurrent writer",
                    code=codes.VERSION_NUMBER_CONFLICT,
                    retryable=True,
                    metadata=metadata,
                )
            ],
        )

    def _record(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        action: AuditAction,
        actor: tuple[str | None, str] | None,
        version_id: str | None = None,
        old_value: JsonValue = None,
        new_value: JsonValue = None,
    ) -> Envelope[Any]:
        """Append one audit entry; ``actor=None`` records the system actor."""
        user_id, user_name = actor if actor is not None else (None, "")
        if user_id is None and user_name == "":
            user_name = self._settings.system_actor_name
        recorded = self._audit.record(
            meta=meta,
            workflow_id=workflow_id,
            action=action,
            user_id=user_id,
            user_name=user_name,
            version_id=version_id,
            old_value=old_value,
            new_value=new_value,
        )
        if not recorded.ok:
            _LOGGER.warning(
                "audit write failed after state change: workflow_id=%s action=%s "
                "error_codes=%s",
                workflow_id,
                action,
                ",".join(error.code for error in recorded.errors),
            )
        return recorded

    def _summarize(
        self, *, previous: WorkflowVersion | None, current: WorkflowVersion
    ) -> ChangeSummary:
        summary = summarize_changes(
            None if previous is None else previous.data,
            current.data,
        )
        if not summary.complete:
            _LOGGER.warning(
                "change summary unavailable: workflow_id=%s version_number=%s",
                current.workflow_id,
                current.version_number,
            )
        return summary

    def _require_workflow(
        self, *, meta: EnvelopeMeta, workflow_id: str
    ) -> Workflow | ErrorDetail:
        """Load one workflow, returning a not-found error when it is unknown."""
        try:
            workflow = self._repository.get_workflow(workflow_id=workflow_id)
        except Exception as exc:  # noqa: BLE001
            raise _StorageFailure(
                self._storage_failure(meta=meta, operation="get_workflow", exc=exc)
            ) from exc
        if workflow is None:
            return _workflow_not_found(workflow_id)
        return workflow

    def _actor_user_id(self, created_by: str) -> str | None:
        return None if created_by == self._settings.system_actor else created_by

    def _display_name(self, created_by: str) -> str:
        if created_by == self._settings.system_actor:
            return self._settings.system_actor_name
        return created_by

    def _validate_request(
        self,
        *,
        meta: EnvelopeMeta,
        model: type[BaseModel] | None,
        payload: dict[str, Any] | None,
    ) -> tuple[BaseModel | None, list[ErrorDetail]]:
        """Validate envelope metadata and request payload model."""
        try:
            validate_meta(meta)
        except ValueError as exc:
            return None, [validation_error(str(exc), code=codes.INVALID_ARGUMENT)]
        if model is None:
            return None, []

        try:
            request = model.model_validate(payload or {})
        except ValidationError as exc:
            return None, [
                validation_error(
                    f"request validation failed: {err['msg']}",
                    code=codes.INVALID_ARGUMENT,
                    metadata={"field": ".".join(str(p) for p in err["loc"])},
                )
                for err in exc.errors()
            ]
        return request, []

    def _storage_failure(
        self,
        *,
        meta: EnvelopeMeta,
        operation: str,
        exc: Exception,
    ) -> Envelope[Any]:
        """Log and surface one storage exception as a structured error."""
        _LOGGER.warning(
            "%s failed due to storage error: exception_type=%s",
            operation,
            type(exc).__name__,
            exc_info=exc,
        )
        if is_postgres_error(exc):
            return failure(meta=meta, errors=[normalize_postgres_error(exc)])
        return failure(
            meta=meta,
            errors=[
                dependency_error(
                    f"{operation} failed: workflow storage unavailable",
                    code=codes.DEPENDENCY_UNAVAILABLE,
                    metadata={"exception_type": type(exc).__name__},
                )
            ],
        )


def _workflow_not_found(workflow_id: str) -> ErrorDetail:
    return not_found_error(
        "workflow not found",
        code=codes.WORKFLOW_NOT_FOUND,
        metadata={"workflow_id": workflow_id},
    )


def _version_not_found(version_id: str) -> ErrorDetail:
    return not_found_error(
        "version not found",
        code=codes.VERSION_NOT_FOUND,
        metadata={"version_id": version_id},
    )
