"""Authoritative in-process Python API for Audit Trail Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import JsonValue

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.envelope import Envelope, EnvelopeMeta
from services.state.audit_trail.domain import AuditAction, AuditEntry, HealthStatus

if TYPE_CHECKING:
    from resources.substrates.postgres.substrate import SharedPostgresSubstrate


class AuditTrailService(ABC):
    """Public API for the append-only workflow audit trail."""

    @abstractmethod
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
        """Append one audit entry; ``user_id=None`` records a system action."""

    @abstractmethod
    def list_entries(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Envelope[list[AuditEntry]]:
        """Return one workflow's entries in canonical order, bounds inclusive.

        Fails with ``AUDIT_RANGE_TOO_LARGE`` instead of truncating when more
        than ``max_list_limit`` entries match.
        """

    @abstractmethod
    def count_entries(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_ids: tuple[str, ...],
        since: datetime | None = None,
    ) -> Envelope[int]:
        """Count entries recorded for ``workflow_ids`` at or after ``since``."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and owned storage readiness."""


def build_audit_trail_service(
    *,
    settings: GuardSettings,
    postgres: SharedPostgresSubstrate | None = None,
) -> AuditTrailService:
    """Build default Audit Trail implementation from typed settings."""
    from services.state.audit_trail.config import resolve_audit_trail_settings
    from services.state.audit_trail.data import (
        AuditPostgresRuntime,
        InMemoryAuditRepository,
        PostgresAuditRepository,
    )
    from services.state.audit_trail.implementation import DefaultAuditTrailService

    service_settings = resolve_audit_trail_settings(settings)
    if service_settings.storage_backend == "memory":
        repository = InMemoryAuditRepository()
    elif postgres is not None:
        repository = PostgresAuditRepository(
            AuditPostgresRuntime.from_substrate(postgres).schema_sessions
        )
    else:
        repository = PostgresAuditRepository(
            AuditPostgresRuntime.from_settings(settings).schema_sessions
        )
    return DefaultAuditTrailService(settings=service_settings, repository=repository)
