"""Pydantic settings for the HubSpot adapter resource."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.guard_shared.config import GuardSettings, resolve_component_settings
from resources.adapters.hubspot.component import RESOURCE_COMPONENT_ID


class HubspotAdapterSettings(BaseModel):
    """Runtime settings for HubSpot Automation API access."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = "https://api.hubapi.com"
    access_token: str = ""
    timeout_seconds: float = Field(default=10.0, gt=0)
    volatile_fields: tuple[str, ...] = ("updatedAt", "insertedAt", "lastUpdatedBy")


def resolve_hubspot_adapter_settings(
    settings: GuardSettings,
) -> HubspotAdapterSettings:
    """Resolve adapter settings from ``components.adapter.hubspot``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(RESOURCE_COMPONENT_ID),
        model=HubspotAdapterSettings,
    )
