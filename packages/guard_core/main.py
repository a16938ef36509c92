"""Process entrypoint: migrate, compose components and report readiness."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from packages.guard_core.health import evaluate_runtime_health
from packages.guard_core.migrations import run_startup_migrations
from packages.guard_core.runtime import build_runtime
from packages.guard_shared.config import load_settings
from packages.guard_shared.logging import configure_logging, get_logger

_LOGGER = get_logger(__name__)


def main() -> int:
    """Run startup once and return a process exit status."""
    config_path = os.getenv("WORKFLOWGUARD_CONFIG_FILE", "").strip()
    settings = load_settings(config_path=Path(config_path) if config_path else None)
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        service=settings.logging.service,
        environment=settings.logging.environment,
    )

    if os.getenv("WORKFLOWGUARD_SKIP_MIGRATIONS", "").strip().lower() not in {"1", "true"}:
        result = run_startup_migrations(settings=settings)
        _LOGGER.info(
            "startup migrations completed",
            extra={"executed_count": len(result.executed_alembic_configs)},
        )

    runtime = build_runtime(settings=settings)
    health = evaluate_runtime_health(components=runtime.components)
    for component_id, status in {**health.resources, **health.services}.items():
        _LOGGER.info(
            "component health",
            extra={
                "component_id": component_id,
                "ready": status.ready,
                "detail": status.detail,
            },
        )
    _LOGGER.info("workflowguard startup completed", extra={"ready": health.ready})
    return 0 if health.ready else 1


if __name__ == "__main__":
    sys.exit(main())
