"""Data-layer exports for Audit Trail Service."""

from services.state.audit_trail.data.repository import (
    InMemoryAuditRepository,
    PostgresAuditRepository,
)
from services.state.audit_trail.data.runtime import AuditPostgresRuntime

__all__ = [
    "AuditPostgresRuntime",
    "InMemoryAuditRepository",
    "PostgresAuditRepository",
]
