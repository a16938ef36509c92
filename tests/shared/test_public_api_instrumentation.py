"""Tests for public API instrumentation and its coverage of service APIs."""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

from packages.guard_shared.component_loader import import_registered_component_modules
from packages.guard_shared.envelope import EnvelopeKind, failure, new_meta, success
from packages.guard_shared.errors import codes, not_found_error
from packages.guard_shared.logging import (
    CompletionContext,
    InvocationContext,
    public_api_instrumented,
)
from packages.guard_shared.manifest import ServiceManifest, get_registry


class _RecordingConcern:
    def __init__(self) -> None:
        self.invocations: list[InvocationContext] = []
        self.completions: list[CompletionContext] = []

    def on_invocation(self, context: InvocationContext) -> None:
        self.invocations.append(context)

    def on_completion(self, context: CompletionContext) -> None:
        self.completions.append(context)


def _meta() -> object:
    return new_meta(kind=EnvelopeKind.QUERY, source="test", principal="operator")


def test_concerns_receive_references_and_outcome() -> None:
    concern = _RecordingConcern()

    @public_api_instrumented(
        component_id="service_example",
        id_fields=("workflow_id",),
        concerns=[concern],
    )
    def lookup(*, meta: object, workflow_id: str) -> object:
        return failure(
            meta=meta,
            errors=[not_found_error("missing", code=codes.WORKFLOW_NOT_FOUND)],
        )

    meta = _meta()
    lookup(meta=meta, workflow_id="01ABC")

    (invocation,) = concern.invocations
    assert invocation.api_name == "lookup"
    assert invocation.trace_id == meta.trace_id
    assert invocation.references == {"workflow_id": "01ABC"}
    (completion,) = concern.completions
    assert completion.success is False
    assert completion.errors == ["WORKFLOW_NOT_FOUND: missing"]
    assert completion.error_categories == ["not_found"]


def test_successful_call_reports_success() -> None:
    concern = _RecordingConcern()

    @public_api_instrumented(component_id="service_example", concerns=[concern])
    def ping(*, meta: object) -> object:
        return success(meta=meta, payload=True)

    assert ping(meta=_meta()).ok is True
    assert concern.completions[0].success is True


def test_raised_exceptions_are_reported_and_reraised() -> None:
    concern = _RecordingConcern()

    @public_api_instrumented(component_id="service_example", concerns=[concern])
    def explode(*, meta: object) -> object:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        explode(meta=_meta())
    assert concern.completions[0].errors == ["RuntimeError: boom"]


def test_registered_services_decorate_public_api_methods() -> None:
    """Every abstract Service API method must be instrumented in its implementation."""
    repo_root = Path(__file__).resolve().parents[2]
    failures: list[str] = []
    for service in _load_services():
        for module_root in sorted(str(item) for item in service.module_roots):
            package_dir = repo_root / Path(*module_root.split("."))
            contract = _abstract_methods(package_dir / "service.py")
            decorated = _decorated_methods(package_dir / "implementation.py")
            missing = sorted(contract - decorated)
            if missing:
                failures.append(f"{service.id}: {missing}")

    assert not failures, (
        "Missing @public_api_instrumented on Service public API methods:\n"
        + "\n".join(failures)
    )


def _load_services() -> tuple[ServiceManifest, ...]:
    import_registered_component_modules(repo_root=Path(__file__).resolve().parents[2])
    registry = get_registry()
    registry.assert_valid()
    return registry.list_services()


def _abstract_methods(path: Path) -> set[str]:
    names: set[str] = set()
    for node in ast.walk(ast.parse(path.read_text(encoding="utf-8"))):
        if isinstance(node, ast.FunctionDef) and any(
            _decorator_name(item) == "abstractmethod" for item in node.decorator_list
        ):
            names.add(node.name)
    return names


def _decorated_methods(path: Path) -> set[str]:
    names: set[str] = set()
    for node in ast.walk(ast.parse(path.read_text(encoding="utf-8"))):
        if isinstance(node, ast.FunctionDef) and any(
            _decorator_name(item) == "public_api_instrumented"
            for item in node.decorator_list
        ):
            names.add(node.name)
    return names


def _decorator_name(node: ast.expr) -> str:
    target = node.func if isinstance(node, ast.Call) else node
    if isinstance(target, ast.Attribute):
        return target.attr
    if isinstance(target, ast.Name):
        return target.id
    return ""
