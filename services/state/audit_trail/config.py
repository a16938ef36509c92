"""Pydantic settings for Audit Trail Service behavior."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from packages.guard_shared.config import GuardSettings, resolve_component_settings
from services.state.audit_trail.component import SERVICE_COMPONENT_ID


class AuditTrailSettings(BaseModel):
    """Audit Trail Service runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    storage_backend: Literal["postgres", "memory"] = "postgres"
    max_list_limit: int = Field(default=10_000, gt=0)
    system_actor_name: str = Field(default="System", min_length=1)


def resolve_audit_trail_settings(settings: GuardSettings) -> AuditTrailSettings:
    """Resolve settings from ``components.service.audit_trail``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=AuditTrailSettings,
    )
