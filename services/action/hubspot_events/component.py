"""Component declaration for HubSpot Events Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ServiceManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_hubspot_events")

MANIFEST = register_component(
    ServiceManifest(
        id=SERVICE_COMPONENT_ID,
        layer=1,
        system="action",
        module_roots=frozenset({ModuleRoot("services.action.hubspot_events")}),
        public_api_roots=frozenset(
            {
                ModuleRoot("services.action.hubspot_events.service"),
                ModuleRoot("services.action.hubspot_events.domain"),
                ModuleRoot("services.action.hubspot_events.dto"),
            }
        ),
        owns_resources=frozenset({ComponentId("adapter_hubspot")}),
    )
)


def build_component(
    *, settings: GuardSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered service component."""
    from services.action.hubspot_events.service import build_hubspot_events_service

    return build_hubspot_events_service(
        settings=settings,
        workflow_versions=components["service_workflow_versions"],  # type: ignore[arg-type]
        hubspot=components["adapter_hubspot"],  # type: ignore[arg-type]
    )
