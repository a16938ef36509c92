"""Pydantic settings for Workflow Version Service behavior."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from packages.guard_shared.config import GuardSettings, resolve_component_settings
from services.state.workflow_versions.component import SERVICE_COMPONENT_ID


class WorkflowVersionSettings(BaseModel):
    """Workflow Version Service runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    storage_backend: Literal["postgres", "memory"] = "postgres"
    allocation_retries: int = Field(default=1, ge=0, le=5)
    system_actor: str = Field(default="system", min_length=1)
    system_actor_name: str = Field(default="System", min_length=1)


def resolve_workflow_version_settings(
    settings: GuardSettings,
) -> WorkflowVersionSettings:
    """Resolve settings from ``components.service.workflow_versions``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=WorkflowVersionSettings,
    )
