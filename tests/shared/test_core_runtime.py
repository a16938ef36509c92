"""Tests for component instantiation and end-to-end composition."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from packages.guard_core.runtime import (
    ComponentResolutionError,
    build_runtime,
    instantiate_components,
)
from packages.guard_shared.clock import utc_now
from packages.guard_shared.config import GuardSettings
from packages.guard_shared.envelope import EnvelopeKind, new_meta
from packages.guard_shared.manifest import (
    ComponentId,
    ModuleRoot,
    ResourceManifest,
    ServiceManifest,
)

_REPO_ROOT = Path(__file__).resolve().parents[2]


def _memory_settings() -> GuardSettings:
    return GuardSettings(
        components={
            "service": {
                "workflow_versions": {"storage_backend": "memory"},
                "audit_trail": {"storage_backend": "memory"},
            }
        }
    )


def _service(component_id: str) -> ServiceManifest:
    root = ModuleRoot(f"services.state.{component_id}")
    return ServiceManifest(
        id=ComponentId(component_id),
        layer=1,
        system="state",
        module_roots=frozenset({root}),
        public_api_roots=frozenset({root}),
    )


def _meta(kind: EnvelopeKind = EnvelopeKind.COMMAND) -> object:
    return new_meta(kind=kind, source="test", principal="operator")


def test_components_are_built_after_their_dependencies() -> None:
    substrate = ResourceManifest(
        id=ComponentId("substrate_store"),
        layer=0,
        system="state",
        module_roots=frozenset({ModuleRoot("resources.substrates.store")}),
        kind="substrate",
    )
    builders = {
        # Listed before its dependency so it must wait one round.
        "service_reports": lambda *, settings, components: (
            "reports",
            components["service_versions"],
        ),
        "service_versions": lambda *, settings, components: (
            "versions",
            components["substrate_store"],
        ),
        "substrate_store": lambda *, settings, components: "store",
    }

    built = instantiate_components(
        settings=GuardSettings(),
        manifests=[_service("service_reports"), _service("service_versions"), substrate],
        resolve_builder=lambda manifest: builders[str(manifest.id)],
    )

    assert built["substrate_store"] == "store"
    assert built["service_versions"] == ("versions", "store")
    assert built["service_reports"] == ("reports", ("versions", "store"))


def test_unsatisfiable_dependency_raises_resolution_error() -> None:
    def _needs_missing(*, settings, components):
        return components["service_missing"]

    with pytest.raises(ComponentResolutionError, match="service_orphan"):
        instantiate_components(
            settings=GuardSettings(),
            manifests=[_service("service_orphan")],
            resolve_builder=lambda manifest: _needs_missing,
        )


def test_builder_type_errors_are_not_retried() -> None:
    def _broken(*, settings, components):
        raise TypeError("wrong dependency type")

    with pytest.raises(TypeError, match="wrong dependency type"):
        instantiate_components(
            settings=GuardSettings(),
            manifests=[_service("service_broken")],
            resolve_builder=lambda manifest: _broken,
        )


def test_runtime_composes_services_over_memory_storage() -> None:
    """A composed runtime should version, roll back, report, and roll up."""
    runtime = build_runtime(settings=_memory_settings(), repo_root=_REPO_ROOT)

    assert {
        "service_audit_trail",
        "service_workflow_versions",
        "service_compliance_reports",
        "service_dashboard_stats",
        "service_hubspot_events",
        "substrate_postgres",
        "adapter_hubspot",
    } <= set(runtime.components)

    versions = runtime.component("service_workflow_versions")
    reports = runtime.component("service_compliance_reports")
    stats = runtime.component("service_dashboard_stats")

    started = utc_now()
    workflow = versions.register_workflow(
        meta=_meta(), owner_id="owner-1", hubspot_id="wf1", name="Welcome series"
    ).payload.value
    v1 = versions.create_version(
        meta=_meta(),
        workflow_id=workflow.id,
        snapshot_type="manual",
        created_by="user1",
        data={"steps": ["A", "B"]},
    ).payload.value
    versions.create_version(
        meta=_meta(),
        workflow_id=workflow.id,
        snapshot_type="daily-backup",
        created_by="system",
        data={"steps": ["A", "B", "C"]},
    )
    rolled = versions.rollback(
        meta=_meta(),
        workflow_id=workflow.id,
        target_version_id=v1.id,
        user_id="user2",
        user_name="User Two",
    )
    assert rolled.ok is True
    assert rolled.payload.value.version_number == 3

    history = versions.get_history(meta=_meta(EnvelopeKind.QUERY), workflow_id=workflow.id)
    assert [entry.version.version_number for entry in history.payload.value] == [1, 2, 3]

    report = reports.generate(
        meta=_meta(EnvelopeKind.QUERY),
        workflow_id=workflow.id,
        start=started - timedelta(minutes=1),
        end=utc_now() + timedelta(minutes=1),
    )
    assert report.ok is True
    assert report.payload.value.summary.total_versions == 3

    dashboard = stats.get_dashboard_stats(meta=_meta(EnvelopeKind.QUERY), owner_id="owner-1")
    assert dashboard.ok is True
    assert dashboard.payload.value.total_workflows == 1
    assert dashboard.payload.value.total_versions == 3
