"""Workflow Version Service native package exports."""

from packages.guard_shared.envelope import Envelope, EnvelopeKind, EnvelopeMeta
from packages.guard_shared.errors import ErrorCategory, ErrorDetail
from services.state.workflow_versions.changes import (
    ChangeSummary,
    FieldChange,
    diff_documents,
    summarize_changes,
)
from services.state.workflow_versions.component import MANIFEST
from services.state.workflow_versions.config import WorkflowVersionSettings
from services.state.workflow_versions.domain import (
    AUTOMATED_SNAPSHOT_TYPES,
    MANUAL_SNAPSHOT_TYPES,
    SYSTEM_SNAPSHOT_TYPES,
    HealthStatus,
    SnapshotType,
    VersionComparison,
    VersionHistoryEntry,
    Workflow,
    WorkflowStatus,
    WorkflowVersion,
)
from services.state.workflow_versions.implementation import (
    DefaultWorkflowVersionService,
)
from services.state.workflow_versions.service import WorkflowVersionService

__all__ = [
    "AUTOMATED_SNAPSHOT_TYPES",
    "MANIFEST",
    "MANUAL_SNAPSHOT_TYPES",
    "SYSTEM_SNAPSHOT_TYPES",
    "ChangeSummary",
    "DefaultWorkflowVersionService",
    "Envelope",
    "EnvelopeKind",
    "EnvelopeMeta",
    "ErrorCategory",
    "ErrorDetail",
    "FieldChange",
    "HealthStatus",
    "SnapshotType",
    "VersionComparison",
    "VersionHistoryEntry",
    "Workflow",
    "WorkflowStatus",
    "WorkflowVersion",
    "WorkflowVersionService",
    "WorkflowVersionSettings",
    "diff_documents",
    "summarize_changes",
]
