"""SQLAlchemy table definitions owned by Audit Trail Service."""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Identity,
    Index,
    MetaData,
    String,
    Table,
)
from sqlalchemy.dialects.postgresql import JSONB

from packages.guard_shared.ids import ulid_primary_key_column

metadata = MetaData()

audit_entries = Table(
    "audit_entries",
    metadata,
    ulid_primary_key_column("id"),
    Column("sequence", BigInteger, Identity(always=True), nullable=False, unique=True),
    Column("workflow_id", String(64), nullable=False),
    Column("version_id", String(64), nullable=True),
    Column("action", String(32), nullable=False),
    Column("user_id", String(256), nullable=True),
    Column("user_name", String(256), nullable=False),
    Column("timestamp", DateTime(timezone=True), nullable=False),
    Column("old_value", JSONB, nullable=True),
    Column("new_value", JSONB, nullable=True),
    Index("ix_audit_entries_workflow_order", "workflow_id", "timestamp", "sequence"),
)
