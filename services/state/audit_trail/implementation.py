"""Concrete Audit Trail Service implementation."""

from __future__ import annotations

from datetime import datetime
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
    dependency_error,
    validation_error,
)
from packages.guard_shared.logging import get_logger, public_api_instrumented
from resources.substrates.postgres.errors import (
    is_postgres_error,
    normalize_postgres_error,
)
from services.state.audit_trail.component import SERVICE_COMPONENT_ID
from services.state.audit_trail.config import (
    AuditTrailSettings,
    resolve_audit_trail_settings,
)
from services.state.audit_trail.data import AuditPostgresRuntime, PostgresAuditRepository
from services.state.audit_trail.domain import AuditAction, AuditEntry, HealthStatus
from services.state.audit_trail.interfaces import AuditRepository
from services.state.audit_trail.service import AuditTrailService
from services.state.audit_trail.validation import (
    CountEntriesRequest,
    ListEntriesRequest,
    RecordEntryRequest,
)

_LOGGER = get_logger(__name__)


class DefaultAuditTrailService(AuditTrailService):
    """Default audit recorder over an append-only repository.

    Storage failures are logged and surfaced as dependency errors; an audit
    write is never dropped silently.
    """

    def __init__(
        self,
        *,
        settings: AuditTrailSettings,
        repository: AuditRepository,
        clock: Clock = utc_now,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: GuardSettings) -> "DefaultAuditTrailService":
        """Build the service with a dedicated Postgres runtime."""
        runtime = AuditPostgresRuntime.from_settings(settings)
        return cls(
            settings=resolve_audit_trail_settings(settings),
            repository=PostgresAuditRepository(runtime.schema_sessions),
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id", "version_id", "action"),
    )
    def record(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        action: AuditAction,
        user_id: str | None,
        user_name: str,
        version_id: str | None = None,
        old_value: JsonValue = None,
        new_value: JsonValue = None,
        timestamp: datetime | None = None,
    ) -> Envelope[AuditEntry]:
        """Append one audit entry stamped with the service clock by default."""
        request, errors = self._validate_request(
            meta=meta,
            model=RecordEntryRequest,
            payload={
                "workflow_id": workflow_id,
                "action": action,
                "user_id": user_id,
                "user_name": user_name,
                "version_id": version_id,
                "old_value": old_value,
                "new_value": new_value,
                "timestamp": timestamp,
            },
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, RecordEntryRequest)

        user_name = request.user_name
        if user_name == "":
            if request.user_id is not None:
                return failure(
                    meta=meta,
                    errors=[
                        validation_error(
                            "user_name is required for user actions",
                            code=codes.INVALID_ARGUMENT,
                            metadata={"field": "user_name"},
                        )
                    ],
                )
            user_name = self._settings.system_actor_name

        try:
            entry = self._repository.append_entry(
                workflow_id=request.workflow_id,
                version_id=request.version_id,
                action=request.action,
                user_id=request.user_id,
                user_name=user_name,
                timestamp=request.timestamp or self._clock(),
                old_value=request.old_value,
                new_value=request.new_value,
            )
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="record", exc=exc)
        return success(meta=meta, payload=entry)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
        id_fields=("workflow_id",),
    )
    def list_entries(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Envelope[list[AuditEntry]]:
        """Return entries ordered by timestamp then insertion sequence."""
        request, errors = self._validate_request(
            meta=meta,
            model=ListEntriesRequest,
            payload={"workflow_id": workflow_id, "start": start, "end": end},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, ListEntriesRequest)

        if (
            request.start is not None
            and request.end is not None
            and request.start > request.end
        ):
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

        try:
            entries = self._repository.list_entries(
                workflow_id=request.workflow_id,
                start=request.start,
                end=request.end,
                limit=self._settings.max_list_limit + 1,
            )
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="list_entries", exc=exc)
        if len(entries) > self._settings.max_list_limit:
            return failure(
                meta=meta,
                errors=[
                    validation_error(
                        f"more than {self._settings.max_list_limit} audit entries in range; "
                        "narrow start and end",
                        code=codes.AUDIT_RANGE_TOO_LARGE,
                        metadata={"limit": str(self._settings.max_list_limit)},
                    )
                ],
            )
        return success(meta=meta, payload=entries)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=str(SERVICE_COMPONENT_ID),
    )
    def count_entries(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_ids: tuple[str, ...],
        since: datetime | None = None,
    ) -> Envelope[int]:
        """Count entries across workflows, typically for a trailing window."""
        request, errors = self._validate_request(
            meta=meta,
            model=CountEntriesRequest,
            payload={"workflow_ids": tuple(workflow_ids), "since": since},
        )
        if errors:
            return failure(meta=meta, errors=errors)
        assert isinstance(request, CountEntriesRequest)

        if len(request.workflow_ids) == 0:
            return success(meta=meta, payload=0)
        try:
            count = self._repository.count_entries(
                workflow_ids=request.workflow_ids,
                since=request.since,
            )
        except Exception as exc:  # noqa: BLE001
            return self._storage_failure(meta=meta, operation="count_entries", exc=exc)
        return success(meta=meta, payload=count)

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
                    f"{operation} failed: audit storage unavailable",
                    code=codes.DEPENDENCY_UNAVAILABLE,
                    metadata={"exception_type": type(exc).__name__},
                )
            ],
        )
