"""HubSpot adapter resource exports."""

from resources.adapters.hubspot.adapter import (
    HubspotAdapter,
    HubspotAdapterDependencyError,
    HubspotAdapterError,
    HubspotAdapterInternalError,
    HubspotAdapterNotFoundError,
    HubspotWorkflowDefinition,
)
from resources.adapters.hubspot.component import MANIFEST, RESOURCE_COMPONENT_ID
from resources.adapters.hubspot.config import (
    HubspotAdapterSettings,
    resolve_hubspot_adapter_settings,
)
from resources.adapters.hubspot.hubspot_adapter import HubspotAutomationAdapter

__all__ = [
    "HubspotAdapter",
    "HubspotAdapterDependencyError",
    "HubspotAdapterError",
    "HubspotAdapterInternalError",
    "HubspotAdapterNotFoundError",
    "HubspotAdapterSettings",
    "HubspotAutomationAdapter",
    "HubspotWorkflowDefinition",
    "MANIFEST",
    "RESOURCE_COMPONENT_ID",
    "resolve_hubspot_adapter_settings",
]
