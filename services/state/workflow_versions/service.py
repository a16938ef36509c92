"""Authoritative in-process Python API for Workflow Version Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import JsonValue

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.envelope import Envelope, EnvelopeMeta
from services.state.audit_trail.service import AuditTrailService
from services.state.workflow_versions.domain import (
    HealthStatus,
    SnapshotType,
    VersionComparison,
    VersionHistoryEntry,
    Workflow,
    WorkflowStatus,
    WorkflowVersion,
)

if TYPE_CHECKING:
    from resources.substrates.postgres.substrate import SharedPostgresSubstrate


class WorkflowVersionService(ABC):
    """Public API for monitored workflows and their append-only versions."""

    @abstractmethod
    def register_workflow(
        self,
        *,
        meta: EnvelopeMeta,
        owner_id: str,
        hubspot_id: str,
        name: str,
        status: WorkflowStatus = "active",
    ) -> Envelope[Workflow]:
        """Start (or refresh) monitoring of one HubSpot workflow for an owner."""

    @abstractmethod
    def get_workflow(self, *, meta: EnvelopeMeta, workflow_id: str) -> Envelope[Workflow]:
        """Return one monitored workflow."""

    @abstractmethod
    def list_workflows(self, *, meta: EnvelopeMeta, owner_id: str) -> Envelope[list[Workflow]]:
        """Return every workflow registered for ``owner_id``."""

    @abstractmethod
    def find_workflow_by_hubspot_id(
        self,
        *,
        meta: EnvelopeMeta,
        hubspot_id: str,
        owner_id: str | None = None,
    ) -> Envelope[list[Workflow]]:
        """Return active workflows tracking ``hubspot_id``."""

    @abstractmethod
    def delete_workflow(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        user_id: str | None = None,
        user_name: str = "",
    ) -> Envelope[Workflow]:
        """Stop monitoring one workflow; its versions are kept."""

    @abstractmethod
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
        """Append the next version of one workflow and audit it."""

    @abstractmethod
    def rollback(
        self,
        *,
        meta: EnvelopeMeta,
        workflow_id: str,
        target_version_id: str,
        user_id: str,
        user_name: str,
    ) -> Envelope[WorkflowVersion]:
        """Append a new version copying ``target_version_id``'s data."""

    @abstractmethod
    def get_history(
        self, *, meta: EnvelopeMeta, workflow_id: str
    ) -> Envelope[list[VersionHistoryEntry]]:
        """Return versions ascending, each with changes against its predecessor."""

    @abstractmethod
    def list_versions(
        self, *, meta: EnvelopeMeta, workflow_id: str
    ) -> Envelope[list[WorkflowVersion]]:
        """Return versions ascending without change summaries."""

    @abstractmethod
    def get_version(self, *, meta: EnvelopeMeta, version_id: str) -> Envelope[WorkflowVersion]:
        """Return one version."""

    @abstractmethod
    def get_latest_version(
        self, *, meta: EnvelopeMeta, workflow_id: str
    ) -> Envelope[WorkflowVersion]:
        """Return the head version of one workflow."""

    @abstractmethod
    def compare_versions(
        self,
        *,
        meta: EnvelopeMeta,
        left_version_id: str,
        right_version_id: str,
    ) -> Envelope[VersionComparison]:
        """Diff two versions of the same workflow element by element."""

    @abstractmethod
    def health(self, *, meta: EnvelopeMeta) -> Envelope[HealthStatus]:
        """Return service and owned storage readiness."""


def build_workflow_version_service(
    *,
    settings: GuardSettings,
    audit: AuditTrailService,
    postgres: SharedPostgresSubstrate | None = None,
) -> WorkflowVersionService:
    """Build default Workflow Version implementation from typed settings."""
    from services.state.workflow_versions.config import (
        resolve_workflow_version_settings,
    )
    from services.state.workflow_versions.data import (
        InMemoryWorkflowVersionRepository,
        PostgresWorkflowVersionRepository,
        WorkflowVersionPostgresRuntime,
    )
    from services.state.workflow_versions.implementation import (
        DefaultWorkflowVersionService,
    )

    service_settings = resolve_workflow_version_settings(settings)
    if service_settings.storage_backend == "memory":
        repository = InMemoryWorkflowVersionRepository()
    elif postgres is not None:
        repository = PostgresWorkflowVersionRepository(
            WorkflowVersionPostgresRuntime.from_substrate(postgres).schema_sessions
        )
    else:
        repository = PostgresWorkflowVersionRepository(
            WorkflowVersionPostgresRuntime.from_settings(settings).schema_sessions
        )
    return DefaultWorkflowVersionService(
        settings=service_settings,
        repository=repository,
        audit=audit,
    )
