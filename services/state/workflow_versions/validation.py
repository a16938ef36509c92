"""Pydantic request-validation models for Workflow Version Service API."""

from __future__ import annotations

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    ValidationInfo,
    field_validator,
)

from packages.guard_shared.ids import ulid_str_to_bytes
from services.state.workflow_versions.domain import SnapshotType, WorkflowStatus


class _ValidationModel(BaseModel):
    """Base request model with strict shape semantics."""

    model_config = ConfigDict(frozen=True, extra="forbid")


def _required_text(value: str, *, field_name: str) -> str:
    normalized = value.strip()
    if normalized == "":
        raise ValueError(f"{field_name} is required")
    return normalized


def _require_ulid(value: str, *, field_name: str) -> str:
    """Require one valid ULID string with stable error messages."""
    normalized = _required_text(value, field_name=field_name).upper()
    try:
        ulid_str_to_bytes(normalized)
    except ValueError:
        raise ValueError(f"{field_name} must be a valid ULID string") from None
    return normalized


class RegisterWorkflowRequest(_ValidationModel):
    """Validated upsert request for one monitored workflow."""

    owner_id: str
    hubspot_id: str
    name: str
    status: WorkflowStatus = "active"

    @field_validator("owner_id", "hubspot_id", "name")
    @classmethod
    def _validate_required(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, field_name=info.field_name)


class WorkflowRequest(_ValidationModel):
    """Validated request addressing one workflow."""

    workflow_id: str

    @field_validator("workflow_id")
    @classmethod
    def _validate_workflow_id(cls, value: str, info: ValidationInfo) -> str:
        return _require_ulid(value, field_name=info.field_name)


class OwnerRequest(_ValidationModel):
    """Validated request addressing one account's workflows."""

    owner_id: str

    @field_validator("owner_id")
    @classmethod
    def _validate_owner_id(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, field_name=info.field_name)


class HubspotLookupRequest(_ValidationModel):
    """Validated lookup of a monitored workflow by its HubSpot id."""

    hubspot_id: str
    owner_id: str | None = None

    @field_validator("hubspot_id")
    @classmethod
    def _validate_hubspot_id(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, field_name=info.field_name)

    @field_validator("owner_id")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class VersionRequest(_ValidationModel):
    """Validated request addressing one version."""

    version_id: str

    @field_validator("version_id")
    @classmethod
    def _validate_version_id(cls, value: str, info: ValidationInfo) -> str:
        return _require_ulid(value, field_name=info.field_name)


class CreateVersionRequest(_ValidationModel):
    """Validated append request for one new workflow snapshot."""

    workflow_id: str
    snapshot_type: SnapshotType
    created_by: str
    data: dict[str, JsonValue]
    created_by_name: str | None = None
    description: str = Field(default="", max_length=2000)

    @field_validator("workflow_id")
    @classmethod
    def _validate_workflow_id(cls, value: str, info: ValidationInfo) -> str:
        return _require_ulid(value, field_name=info.field_name)

    @field_validator("created_by")
    @classmethod
    def _validate_created_by(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, field_name=info.field_name)

    @field_validator("created_by_name")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        return value.strip()


class RollbackRequest(_ValidationModel):
    """Validated rollback of a workflow to one of its earlier versions."""

    workflow_id: str
    target_version_id: str
    user_id: str
    user_name: str

    @field_validator("workflow_id", "target_version_id")
    @classmethod
    def _validate_ids(cls, value: str, info: ValidationInfo) -> str:
        return _require_ulid(value, field_name=info.field_name)

    @field_validator("user_id", "user_name")
    @classmethod
    def _validate_actor(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, field_name=info.field_name)


class CompareVersionsRequest(_ValidationModel):
    """Validated comparison of two versions."""

    left_version_id: str
    right_version_id: str

    @field_validator("left_version_id", "right_version_id")
    @classmethod
    def _validate_ids(cls, value: str, info: ValidationInfo) -> str:
        return _require_ulid(value, field_name=info.field_name)


class DeleteWorkflowRequest(_ValidationModel):
    """Validated request to stop monitoring one workflow."""

    workflow_id: str
    user_id: str | None = None
    user_name: str = ""

    @field_validator("workflow_id")
    @classmethod
    def _validate_workflow_id(cls, value: str, info: ValidationInfo) -> str:
        return _require_ulid(value, field_name=info.field_name)

    @field_validator("user_id")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("user_name")
    @classmethod
    def _strip_user_name(cls, value: str) -> str:
        return value.strip()
