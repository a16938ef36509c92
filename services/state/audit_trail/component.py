"""Component declaration for Audit Trail Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ServiceManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_audit_trail")

MANIFEST = register_component(
    ServiceManifest(
        id=SERVICE_COMPONENT_ID,
        layer=1,
        system="state",
        module_roots=frozenset({ModuleRoot("services.state.audit_trail")}),
        public_api_roots=frozenset({ModuleRoot("services.state.audit_trail.service")}),
        persistent=True,
    )
)


def build_component(
    *, settings: GuardSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered service component."""
    from services.state.audit_trail.service import build_audit_trail_service

    return build_audit_trail_service(
        settings=settings,
        postgres=components.get("substrate_postgres"),
    )
