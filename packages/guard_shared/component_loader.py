"""Discovery and import of ``component.py`` manifest modules."""

from __future__ import annotations

import importlib
from pathlib import Path

_DISCOVERY_ROOTS = ("services", "resources")


def discover_component_modules(repo_root: Path | None = None) -> tuple[str, ...]:
    """Return dotted import paths for every component declaration module."""
    root = (repo_root or Path.cwd()).resolve()
    modules: list[str] = []
    for discovery_root in _DISCOVERY_ROOTS:
        package_root = root / discovery_root
        if not package_root.exists():
            continue
        for component_file in sorted(package_root.rglob("component.py")):
            rel_component = component_file.relative_to(root)
            if "tests" in rel_component.parts:
                continue
            if not _declares_manifest(component_file):
                continue
            modules.append(".".join(rel_component.with_suffix("").parts))
    return tuple(modules)


def import_component_modules(modules: tuple[str, ...]) -> tuple[str, ...]:
    """Import component modules to trigger manifest registration."""
    for module in modules:
        importlib.import_module(module)
    return modules


def import_registered_component_modules(
    repo_root: Path | None = None,
) -> tuple[str, ...]:
    """Discover and import all component modules to trigger registration."""
    modules = discover_component_modules(repo_root=repo_root)
    return import_component_modules(modules)


def _declares_manifest(component_file: Path) -> bool:
    source = component_file.read_text(encoding="utf-8")
    return "MANIFEST" in source and "register_component(" in source
