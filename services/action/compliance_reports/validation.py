"""Pydantic request-validation models for Compliance Report Service API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from packages.guard_shared.clock import ensure_utc
from packages.guard_shared.ids import ulid_str_to_bytes


class GenerateReportRequest(BaseModel):
    """Validated report request; range ordering is checked by the service."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    workflow_id: str
    start: datetime
    end: datetime

    @field_validator("workflow_id")
    @classmethod
    def _validate_workflow_id(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized == "":
            raise ValueError("workflow_id is required")
        try:
            ulid_str_to_bytes(normalized)
        except ValueError:
            raise ValueError("workflow_id must be a valid ULID string") from None
        return normalized

    @field_validator("start", "end")
    @classmethod
    def _normalize_bounds(cls, value: datetime) -> datetime:
        return ensure_utc(value)
