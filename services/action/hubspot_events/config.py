"""Pydantic settings for HubSpot Events Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.guard_shared.config import GuardSettings, resolve_component_settings
from services.action.hubspot_events.component import SERVICE_COMPONENT_ID
from services.state.workflow_versions.domain import SnapshotType


class HubspotEventsSettings(BaseModel):
    """Snapshot attribution for versions captured from webhook events."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    snapshot_type: SnapshotType = "on-publish"
    system_actor: str = Field(default="system", min_length=1)


def resolve_hubspot_events_settings(settings: GuardSettings) -> HubspotEventsSettings:
    """Resolve settings from ``components.service.hubspot_events``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=HubspotEventsSettings,
    )
