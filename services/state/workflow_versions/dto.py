"""HTTP-boundary request DTOs for workflow versions.

These mirror the JSON bodies accepted by the web layer (camelCase keys). They
only check shape; snapshot-type vocabulary and identifier format are enforced
by the service's own request validation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, JsonValue, StrictFloat, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from packages.guard_shared.logging import get_logger
from services.state.workflow_versions.domain import WorkflowVersion

_LOGGER = get_logger(__name__)


class _BoundaryModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _not_empty(value: str) -> str:
    normalized = value.strip()
    if normalized == "":
        raise ValueError("must not be empty")
    return normalized


class CreateWorkflowVersionDto(_BoundaryModel):
    """Body of a create-version request.

    ``version`` is the number the client believes comes next. Allocation is
    always done by the service, so the value is only logged.
    """

    workflow_id: str
    version: StrictInt | StrictFloat
    snapshot_type: str
    created_by: str
    data: dict[str, JsonValue]

    @field_validator("workflow_id", "snapshot_type", "created_by")
    @classmethod
    def _validate_required(cls, value: str) -> str:
        return _not_empty(value)

    def create_kwargs(self) -> dict[str, Any]:
        """Return keyword arguments for ``WorkflowVersionService.create_version``."""
        _log_version_hint(workflow_id=self.workflow_id, version=self.version)
        return {
            "workflow_id": self.workflow_id,
            "snapshot_type": self.snapshot_type,
            "created_by": self.created_by,
            "data": self.data,
        }


class UpdateWorkflowVersionDto(_BoundaryModel):
    """Body of an update-version request; every create field is optional.

    Versions are append-only, so an update is applied by creating a new
    version from an existing one with the supplied fields replaced.
    """

    workflow_id: str | None = None
    version: StrictInt | StrictFloat | None = None
    snapshot_type: str | None = None
    created_by: str | None = None
    data: dict[str, JsonValue] | None = None

    @field_validator("workflow_id", "snapshot_type", "created_by")
    @classmethod
    def _validate_optional(cls, value: str | None) -> str | None:
        return None if value is None else _not_empty(value)

    def create_kwargs(self, *, base: WorkflowVersion, created_by: str) -> dict[str, Any]:
        """Return create-version keyword arguments derived from ``base``.

        ``created_by`` is the requesting actor, used when the body names none.
        Raises ``ValueError`` when the body names a different workflow.
        """
        if self.workflow_id is not None and self.workflow_id != base.workflow_id:
            raise ValueError("workflowId does not match the version being updated")
        if self.version is not None:
            _log_version_hint(workflow_id=base.workflow_id, version=self.version)
        return {
            "workflow_id": base.workflow_id,
            "snapshot_type": self.snapshot_type or base.snapshot_type,
            "created_by": self.created_by or created_by,
            "data": base.data if self.data is None else self.data,
            "description": f"Updated from version {base.version_number}",
        }


def _log_version_hint(*, workflow_id: str, version: int | float) -> None:
    _LOGGER.debug(
        "client version hint ignored; storage allocates the number: "
        "workflow_id=%s version=%s",
        workflow_id,
        version,
    )
