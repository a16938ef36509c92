"""Pydantic request-validation models for Dashboard Stats Service API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class OwnerStatsRequest(BaseModel):
    """Validated account-scope request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    owner_id: str

    @field_validator("owner_id")
    @classmethod
    def _validate_owner_id(cls, value: str) -> str:
        normalized = value.strip()
        if normalized == "":
            raise ValueError("owner_id is required")
        return normalized
