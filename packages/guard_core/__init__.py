"""Public API for WorkflowGuard composition and startup."""

from packages.guard_core.health import (
    ComponentHealthResult,
    RuntimeHealthResult,
    evaluate_runtime_health,
)
from packages.guard_core.migrations import (
    MigrationExecutionError,
    MigrationRunResult,
    discover_service_migration_configs,
    run_startup_migrations,
)
from packages.guard_core.runtime import (
    ComponentResolutionError,
    GuardRuntime,
    build_runtime,
    instantiate_components,
)

__all__ = [
    "ComponentHealthResult",
    "ComponentResolutionError",
    "GuardRuntime",
    "MigrationExecutionError",
    "MigrationRunResult",
    "RuntimeHealthResult",
    "build_runtime",
    "discover_service_migration_configs",
    "evaluate_runtime_health",
    "instantiate_components",
    "run_startup_migrations",
]
