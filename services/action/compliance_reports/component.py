"""Component declaration for Compliance Report Service."""

from __future__ import annotations

from collections.abc import Mapping

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ServiceManifest,
    register_component,
)

SERVICE_COMPONENT_ID = ComponentId("service_compliance_reports")

MANIFEST = register_component(
    ServiceManifest(
        id=SERVICE_COMPONENT_ID,
        layer=1,
        system="action",
        module_roots=frozenset({ModuleRoot("services.action.compliance_reports")}),
        public_api_roots=frozenset(
            {
                ModuleRoot("services.action.compliance_reports.service"),
                ModuleRoot("services.action.compliance_reports.domain"),
            }
        ),
        owns_resources=frozenset(),
    )
)


def build_component(
    *, settings: GuardSettings, components: Mapping[str, object]
) -> object:
    """Build concrete runtime instance for this registered service component."""
    from services.action.compliance_reports.service import (
        build_compliance_report_service,
    )

    return build_compliance_report_service(
        settings=settings,
        workflow_versions=components["service_workflow_versions"],  # type: ignore[arg-type]
        audit_trail=components["service_audit_trail"],  # type: ignore[arg-type]
    )
