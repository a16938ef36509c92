"""Component declaration for Workflow Version Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ServiceManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_workflow_versions")

MANIFEST = register_component(
    ServiceManifest(
        id=SERVICE_COMPONENT_ID,
        layer=1,
        system="state",
        module_roots=frozenset({ModuleRoot("services.state.workflow_versions")}),
        public_api_roots=frozenset(
            {ModuleRoot("services.state.workflow_versions.service")}
        ),
        persistent=True,
    )
)


def build_component(
    *, settings: GuardSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered service component."""
    from services.state.audit_trail.service import AuditTrailService
    from services.state.workflow_versions.service import build_workflow_version_service

    audit = components["service_audit_trail"]
    if not isinstance(audit, AuditTrailService):
        raise TypeError("service_audit_trail must be an AuditTrailService")
    return build_workflow_version_service(
        settings=settings,
        audit=audit,
        postgres=components.get("substrate_postgres"),
    )
