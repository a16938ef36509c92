"""Audit Trail-owned Postgres runtime wiring."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine

from packages.guard_shared.config import GuardSettings
from packages.guard_shared.manifest import component_id_to_schema_name
from resources.substrates.postgres import (
    ServiceSchemaSessionProvider,
    create_postgres_engine,
    create_session_factory,
    ping,
    resolve_postgres_settings,
)
from resources.substrates.postgres.substrate import SharedPostgresSubstrate
from services.state.audit_trail.component import SERVICE_COMPONENT_ID


@dataclass(frozen=True)
class AuditPostgresRuntime:
    """Concrete handle for schema-scoped Postgres access."""

    engine: Engine
    schema_sessions: ServiceSchemaSessionProvider

    @classmethod
    def from_settings(cls, settings: GuardSettings) -> "AuditPostgresRuntime":
        """Build a dedicated engine from typed application settings."""
        engine = create_postgres_engine(resolve_postgres_settings(settings))
        return cls(
            engine=engine,
            schema_sessions=ServiceSchemaSessionProvider(
                session_factory=create_session_factory(engine),
                schema=audit_postgres_schema(),
            ),
        )

    @classmethod
    def from_substrate(cls, substrate: SharedPostgresSubstrate) -> "AuditPostgresRuntime":
        """Reuse the shared substrate engine."""
        return cls(
            engine=substrate.engine,
            schema_sessions=substrate.schema_sessions(audit_postgres_schema()),
        )

    def is_healthy(self) -> bool:
        return ping(self.engine)


def audit_postgres_schema() -> str:
    """Resolve canonical schema name from component identity."""
    return component_id_to_schema_name(SERVICE_COMPONENT_ID)
