"""Pre-migration bootstrap for service schemas and shared SQL primitives."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Connection, text

from packages.guard_shared.component_loader import import_registered_component_modules
from packages.guard_shared.config import GuardSettings, load_settings
from packages.guard_shared.ids.constants import ULID_DOMAIN_NAME
from packages.guard_shared.logging import get_logger, log_context
from packages.guard_shared.manifest import ServiceManifest, get_registry
from resources.substrates.postgres.config import resolve_postgres_settings
from resources.substrates.postgres.engine import create_postgres_engine

_LOGGER = get_logger(__name__)

ULID_DOMAIN_DEFINITION_SQL = (
    "DO $$ BEGIN "
    f"CREATE DOMAIN {{schema}}.{ULID_DOMAIN_NAME} "
    "AS bytea CHECK (octet_length(VALUE) = 16); "
    "EXCEPTION WHEN duplicate_object THEN NULL; "
    "END $$"
)


@dataclass(frozen=True)
class BootstrapResult:
    """Summary of pre-migration bootstrap actions."""

    imported_components: tuple[str, ...]
    provisioned_schemas: tuple[str, ...]


def bootstrap_service_schemas(
    settings: GuardSettings | None = None,
) -> BootstrapResult:
    """Provision every persistent service schema and its ULID domain."""
    resolved_settings = load_settings() if settings is None else settings
    postgres_settings = resolve_postgres_settings(resolved_settings)

    imported = import_registered_component_modules()
    registry = get_registry()
    registry.assert_valid()
    services = tuple(service for service in registry.list_services() if service.persistent)
    if len(services) == 0:
        raise RuntimeError("no persistent services discovered; refusing schema bootstrap")

    engine = create_postgres_engine(postgres_settings)
    try:
        provisioned: list[str] = []
        with engine.begin() as connection:
            for service in services:
                _provision_service_schema(connection=connection, service=service)
                provisioned.append(service.schema_name)
    finally:
        engine.dispose()

    with log_context({"schemas": ",".join(provisioned)}):
        _LOGGER.info("Provisioned service schemas")
    return BootstrapResult(
        imported_components=imported,
        provisioned_schemas=tuple(provisioned),
    )


def _provision_service_schema(*, connection: Connection, service: ServiceManifest) -> None:
    schema = service.schema_name
    connection.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))
    connection.execute(text(ULID_DOMAIN_DEFINITION_SQL.format(schema=schema)))
