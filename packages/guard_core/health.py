"""Aggregate readiness across instantiated components."""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError

from pydantic import BaseModel, ConfigDict, Field

from packages.guard_shared.envelope import EnvelopeKind, new_meta
from packages.guard_shared.manifest import get_registry


class ComponentHealthResult(BaseModel):
    """One component-level readiness result."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    detail: str = ""


class RuntimeHealthResult(BaseModel):
    """Aggregate readiness across services and shared resources."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    ready: bool
    services: dict[str, ComponentHealthResult] = Field(default_factory=dict)
    resources: dict[str, ComponentHealthResult] = Field(default_factory=dict)


def evaluate_runtime_health(
    *,
    components: Mapping[str, object],
    max_timeout_seconds: float = 5.0,
) -> RuntimeHealthResult:
    """Evaluate readiness of every registered component.

    Services must expose ``health(meta=...)`` returning an envelope. Resources
    without a ``health()`` method (HTTP adapters) are reported ready.
    """
    registry = get_registry()
    service_results: dict[str, ComponentHealthResult] = {}
    resource_results: dict[str, ComponentHealthResult] = {}

    for manifest in registry.list_services():
        component_id = str(manifest.id)
        service = components.get(component_id)
        if service is None:
            service_results[component_id] = ComponentHealthResult(
                ready=False, detail="component not instantiated"
            )
            continue
        service_results[component_id] = _evaluate(
            component=service, with_meta=True, max_timeout_seconds=max_timeout_seconds
        )

    for manifest in registry.list_resources():
        component_id = str(manifest.id)
        resource = components.get(component_id)
        if resource is None:
            resource_results[component_id] = ComponentHealthResult(
                ready=False, detail="component not instantiated"
            )
            continue
        if not callable(getattr(resource, "health", None)):
            resource_results[component_id] = ComponentHealthResult(
                ready=True, detail="no health check"
            )
            continue
        resource_results[component_id] = _evaluate(
            component=resource, with_meta=False, max_timeout_seconds=max_timeout_seconds
        )

    overall_ready = all(item.ready for item in service_results.values()) and all(
        item.ready for item in resource_results.values()
    )
    return RuntimeHealthResult(
        ready=overall_ready,
        services=service_results,
        resources=resource_results,
    )


def _evaluate(
    *, component: object, with_meta: bool, max_timeout_seconds: float
) -> ComponentHealthResult:
    """Evaluate one component health with global timeout enforcement."""
    health_fn = getattr(component, "health", None)
    if not callable(health_fn):
        return ComponentHealthResult(
            ready=False, detail="component does not expose health()"
        )

    def _call() -> object:
        if with_meta:
            return health_fn(
                meta=new_meta(
                    kind=EnvelopeKind.QUERY, source="runtime_health", principal="system"
                )
            )
        return health_fn()

    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(_call)
        try:
            result = future.result(timeout=max_timeout_seconds)
        except FutureTimeoutError:
            return ComponentHealthResult(
                ready=False,
                detail=f"health() exceeded global max timeout ({max_timeout_seconds:.3f}s)",
            )
        except Exception as exc:  # noqa: BLE001
            return ComponentHealthResult(
                ready=False, detail=f"health() raised {type(exc).__name__}"
            )
    return _coerce(result)


def _coerce(result: object) -> ComponentHealthResult:
    """Normalize envelope and model health results into ready/detail."""
    if hasattr(result, "ok") and hasattr(result, "payload"):
        payload_wrapper = getattr(result, "payload")
        payload = None if payload_wrapper is None else payload_wrapper.value
        values = payload.model_dump(mode="python") if payload is not None else {}
        ready = bool(getattr(result, "ok")) and all(
            value
            for key, value in values.items()
            if key.endswith("_ready") and isinstance(value, bool)
        )
        detail = values.get("detail")
        if not isinstance(detail, str):
            errors = getattr(result, "errors", [])
            detail = errors[0].message if errors else ""
        return ComponentHealthResult(ready=ready, detail=detail or "ok")

    if hasattr(result, "model_dump"):
        values = result.model_dump(mode="python")
        ready_value = values.get("ready")
        if isinstance(ready_value, bool):
            detail = values.get("detail")
            return ComponentHealthResult(
                ready=ready_value, detail=detail if isinstance(detail, str) else ""
            )
    return ComponentHealthResult(
        ready=False, detail="health() result missing readiness fields"
    )
