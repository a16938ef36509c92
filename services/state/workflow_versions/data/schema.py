"""SQLAlchemy table definitions owned by Workflow Version Service."""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB

from packages.guard_shared.ids import ulid_foreign_key_column, ulid_primary_key_column

metadata = MetaData()

workflows = Table(
    "workflows",
    metadata,
    ulid_primary_key_column("id"),
    Column("owner_id", String(256), nullable=False),
    Column("hubspot_id", String(64), nullable=False),
    Column("name", String(512), nullable=False),
    Column("status", String(16), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("owner_id", "hubspot_id", name="uq_workflows_owner_hubspot"),
    CheckConstraint("status IN ('active', 'inactive')", name="ck_workflows_status"),
    Index("ix_workflows_hubspot_id", "hubspot_id"),
)

workflow_versions = Table(
    "workflow_versions",
    metadata,
    ulid_primary_key_column("id"),
    ulid_foreign_key_column("workflow_id", "workflows.id", ondelete="CASCADE"),
    Column("version_number", Integer, nullable=False),
    Column("snapshot_type", String(32), nullable=False),
    Column("created_by", String(256), nullable=False),
    Column("created_by_name", String(256), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("data", JSONB, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint(
        "workflow_id",
        "version_number",
        name="uq_workflow_versions_workflow_number",
    ),
    CheckConstraint("version_number > 0", name="ck_workflow_versions_number_positive"),
)
