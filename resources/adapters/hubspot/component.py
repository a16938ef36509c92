"""Component declaration for the HubSpot Automation API adapter resource."""

from __future__ import annotations

from collections.abc import Mapping

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ResourceManifest,
    register_component,
)

RESOURCE_COMPONENT_ID = ComponentId("adapter_hubspot")

MANIFEST = register_component(
    ResourceManifest(
        id=RESOURCE_COMPONENT_ID,
        layer=0,
        system="action",
        kind="adapter",
        module_roots=frozenset({ModuleRoot("resources.adapters.hubspot")}),
        owner_service_id=ComponentId("service_hubspot_events"),
    )
)


def build_component(
    *, settings: GuardSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered resource component."""
    del components
    from resources.adapters.hubspot.config import resolve_hubspot_adapter_settings
    from resources.adapters.hubspot.hubspot_adapter import HubspotAutomationAdapter

    return HubspotAutomationAdapter(
        settings=resolve_hubspot_adapter_settings(settings),
    )
