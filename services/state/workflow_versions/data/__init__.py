"""Data-layer exports for Workflow Version Service."""

from services.state.workflow_versions.data.repository import (
    InMemoryWorkflowVersionRepository,
    PostgresWorkflowVersionRepository,
)
from services.state.workflow_versions.data.runtime import (
    WorkflowVersionPostgresRuntime,
)

__all__ = [
    "InMemoryWorkflowVersionRepository",
    "PostgresWorkflowVersionRepository",
    "WorkflowVersionPostgresRuntime",
]
