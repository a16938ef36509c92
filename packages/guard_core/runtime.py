"""Composition root: instantiate every registered component from settings."""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from packages.guard_shared.component_loader import (
    import_component_modules,
    import_registered_component_modules,
)
from packages.guard_shared.config import GuardSettings
from packages.guard_shared.logging import get_logger
from packages.guard_shared.manifest import ComponentManifest, get_registry

_LOGGER = get_logger(__name__)

ComponentBuilder = Callable[..., object]


class ComponentResolutionError(RuntimeError):
    """Raised when registered components cannot all be instantiated."""


@dataclass(frozen=True)
class GuardRuntime:
    """Instantiated components keyed by component id."""

    settings: GuardSettings
    components: Mapping[str, object] = field(default_factory=dict)

    def component(self, component_id: str) -> object:
        """Return one built component; raises ``KeyError`` when absent."""
        return self.components[component_id]


def build_runtime(
    *,
    settings: GuardSettings,
    repo_root: Path | None = None,
) -> GuardRuntime:
    """Discover component manifests and build them in dependency order."""
    imported = import_registered_component_modules(repo_root=repo_root)
    registry = get_registry()
    registry.assert_valid()
    _LOGGER.info(
        "component registration completed",
        extra={
            "imported_count": len(imported),
            "service_count": len(registry.list_services()),
            "resource_count": len(registry.list_resources()),
        },
    )
    components = instantiate_components(
        settings=settings,
        manifests=[*registry.list_resources(), *registry.list_services()],
    )
    return GuardRuntime(settings=settings, components=components)


def instantiate_components(
    *,
    settings: GuardSettings,
    manifests: list[ComponentManifest],
    resolve_builder: Callable[[ComponentManifest], ComponentBuilder] | None = None,
) -> dict[str, object]:
    """Build manifests in rounds until every dependency is satisfied.

    A builder signals a missing dependency by raising ``KeyError`` and is
    retried in the next round. A round without progress is fatal.
    """
    resolver = resolve_builder or _resolve_component_builder
    pending = list(manifests)
    built: dict[str, object] = {}

    while pending:
        progressed = False
        next_round: list[ComponentManifest] = []
        for manifest in pending:
            builder = resolver(manifest)
            try:
                built[str(manifest.id)] = builder(settings=settings, components=built)
            except KeyError:
                next_round.append(manifest)
                continue
            progressed = True
            _LOGGER.info(
                "component instantiated",
                extra={"component_id": str(manifest.id), "layer": manifest.layer},
            )

        if not progressed:
            unresolved = ", ".join(str(item.id) for item in next_round)
            raise ComponentResolutionError(
                "unable to resolve component dependency graph; unresolved components: "
                f"{unresolved}"
            )
        pending = next_round
    return built


def _resolve_component_builder(manifest: ComponentManifest) -> ComponentBuilder:
    """Load one component module and return its build callable."""
    for module_root in sorted(manifest.module_roots):
        module_name = f"{module_root}.component"
        import_component_modules((module_name,))
        module = sys.modules[module_name]
        builder = getattr(module, "build_component", None)
        if callable(builder):
            return builder
    raise ComponentResolutionError(
        f"component '{manifest.id}' does not expose build_component(...) in its component module"
    )
