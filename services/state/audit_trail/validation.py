"""Pydantic request-validation models for Audit Trail Service API."""

from __future__ import annotations

from datetime import datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    ValidationInfo,
    field_validator,
)

from packages.guard_shared.clock import ensure_utc
from services.state.audit_trail.domain import AuditAction


class _ValidationModel(BaseModel):
    """Base request model with strict shape semantics."""

    model_config = ConfigDict(frozen=True, extra="forbid")


def _required_text(value: str, info: ValidationInfo) -> str:
    normalized = value.strip()
    if normalized == "":
        raise ValueError(f"{info.field_name} is required")
    return normalized


class RecordEntryRequest(_ValidationModel):
    """Validated append request for one audit entry."""

    workflow_id: str
    action: AuditAction
    user_id: str | None = None
    user_name: str = ""
    version_id: str | None = None
    old_value: JsonValue = None
    new_value: JsonValue = None
    timestamp: datetime | None = None

    @field_validator("workflow_id")
    @classmethod
    def _validate_workflow_id(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("user_id", "version_id")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        """Treat blank optional identifiers as absent."""
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    @field_validator("user_name")
    @classmethod
    def _strip_user_name(cls, value: str) -> str:
        return value.strip()

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime | None) -> datetime | None:
        return None if value is None else ensure_utc(value)


class ListEntriesRequest(_ValidationModel):
    """Validated list request for one workflow's audit entries."""

    workflow_id: str
    start: datetime | None = None
    end: datetime | None = None

    @field_validator("workflow_id")
    @classmethod
    def _validate_workflow_id(cls, value: str, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("start", "end")
    @classmethod
    def _normalize_bounds(cls, value: datetime | None) -> datetime | None:
        return None if value is None else ensure_utc(value)


class CountEntriesRequest(_ValidationModel):
    """Validated count request across a set of workflows."""

    workflow_ids: tuple[str, ...] = Field(default=())
    since: datetime | None = None

    @field_validator("workflow_ids")
    @classmethod
    def _validate_workflow_ids(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        normalized = tuple(item.strip() for item in value)
        if any(item == "" for item in normalized):
            raise ValueError("workflow_ids must not contain blank values")
        return tuple(dict.fromkeys(normalized))

    @field_validator("since")
    @classmethod
    def _normalize_since(cls, value: datetime | None) -> datetime | None:
        return None if value is None else ensure_utc(value)
