"""Tests for component manifest validation and registry ordering."""

from __future__ import annotations

import pytest

from packages.guard_shared.manifest import (
    ComponentId,
    ManifestError,
    ManifestRegistry,
    ModuleRoot,
    ResourceManifest,
    ServiceManifest,
    component_id_to_schema_name,
)


def _service(
    component_id: str,
    *,
    system: str = "state",
    owns: frozenset[str] | None = None,
) -> ServiceManifest:
    root = ModuleRoot(f"services.{system}.{component_id.removeprefix('service_')}")
    return ServiceManifest(
        id=ComponentId(component_id),
        layer=1,
        system=system,  # type: ignore[arg-type]
        module_roots=frozenset({root}),
        public_api_roots=frozenset({root}),
        owns_resources=None if owns is None else frozenset(ComponentId(i) for i in owns),
    )


def _adapter(component_id: str, owner: str | None) -> ResourceManifest:
    return ResourceManifest(
        id=ComponentId(component_id),
        layer=0,
        system="action",
        module_roots=frozenset({ModuleRoot(f"resources.adapters.{component_id}")}),
        kind="adapter",
        owner_service_id=None if owner is None else ComponentId(owner),
    )


@pytest.mark.parametrize("component_id", ["", "Service", "9lives", "has-dash", "x"])
def test_invalid_component_ids_are_rejected(component_id: str) -> None:
    with pytest.raises(ManifestError, match="invalid component id"):
        _service(component_id)


def test_empty_module_roots_are_rejected() -> None:
    with pytest.raises(ManifestError, match="module_roots"):
        ServiceManifest(
            id=ComponentId("service_empty"),
            layer=1,
            system="state",
            module_roots=frozenset(),
            public_api_roots=frozenset({ModuleRoot("services.state.empty")}),
        )


def test_reregistering_identical_manifest_is_idempotent() -> None:
    registry = ManifestRegistry()
    manifest = _service("service_versions")

    registry.register_component(manifest)
    registry.register_component(_service("service_versions"))

    assert registry.list_services() == (manifest,)


def test_duplicate_id_with_different_definition_is_rejected() -> None:
    registry = ManifestRegistry()
    registry.register_component(_service("service_versions"))

    with pytest.raises(ManifestError, match="duplicate component id"):
        registry.register_component(_service("service_versions", system="action"))


def test_resource_owner_must_match_declaring_service() -> None:
    registry = ManifestRegistry()
    registry.register_component(_service("service_events", system="action", owns={"adapter_crm"}))
    registry.register_component(_service("service_stats", system="action"))

    with pytest.raises(ManifestError, match="owner mismatch"):
        registry.register_component(_adapter("adapter_crm", owner="service_stats"))


def test_unknown_owner_is_only_rejected_by_strict_validation() -> None:
    registry = ManifestRegistry()
    registry.register_component(_adapter("adapter_crm", owner="service_events"))

    with pytest.raises(ManifestError, match="unknown owner service"):
        registry.assert_valid()

    registry.register_component(_service("service_events", system="action", owns={"adapter_crm"}))
    registry.assert_valid()


def test_services_are_listed_state_first_then_by_id() -> None:
    registry = ManifestRegistry()
    for manifest in (
        _service("service_reports", system="action"),
        _service("service_versions"),
        _service("service_events", system="action"),
        _service("service_audit"),
    ):
        registry.register_component(manifest)

    assert [str(item.id) for item in registry.list_services()] == [
        "service_audit",
        "service_versions",
        "service_events",
        "service_reports",
    ]


def test_unregistered_component_lookup_raises() -> None:
    with pytest.raises(ManifestError, match="not registered"):
        ManifestRegistry().get_component(ComponentId("service_missing"))


def test_schema_name_is_the_component_id() -> None:
    assert component_id_to_schema_name(ComponentId("service_audit_trail")) == (
        "service_audit_trail"
    )
    assert _service("service_audit_trail").schema_name == "service_audit_trail"
