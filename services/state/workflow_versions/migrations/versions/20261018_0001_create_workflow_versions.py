"""create workflows and workflow versions tables"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from packages.guard_shared.ids.constants import ULID_DOMAIN_NAME
from services.state.workflow_versions.data.runtime import (
    workflow_versions_postgres_schema,
)

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def _ulid_domain(schema: str) -> postgresql.DOMAIN:
    """Return schema-local ``ulid_bin`` domain reference."""
    return postgresql.DOMAIN(
        name=ULID_DOMAIN_NAME,
        data_type=postgresql.BYTEA(),
        schema=schema,
        create_type=False,
    )


def upgrade() -> None:
    """Create the workflow registry and append-only version tables."""
    schema = workflow_versions_postgres_schema()

    op.create_table(
        "workflows",
        sa.Column("id", _ulid_domain(schema), primary_key=True, nullable=False),
        sa.Column("owner_id", sa.String(length=256), nullable=False),
        sa.Column("hubspot_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=512), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("owner_id", "hubspot_id", name="uq_workflows_owner_hubspot"),
        sa.CheckConstraint("status IN ('active', 'inactive')", name="ck_workflows_status"),
        schema=schema,
    )
    op.create_index(
        "ix_workflows_hubspot_id", "workflows", ["hubspot_id"], schema=schema
    )

    op.create_table(
        "workflow_versions",
        sa.Column("id", _ulid_domain(schema), primary_key=True, nullable=False),
        sa.Column(
            "workflow_id",
            _ulid_domain(schema),
            sa.ForeignKey(f"{schema}.workflows.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("snapshot_type", sa.String(length=32), nullable=False),
        sa.Column("created_by", sa.String(length=256), nullable=False),
        sa.Column("created_by_name", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("data", postgresql.JSONB(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "workflow_id",
            "version_number",
            name="uq_workflow_versions_workflow_number",
        ),
        sa.CheckConstraint(
            "version_number > 0", name="ck_workflow_versions_number_positive"
        ),
        sa.CheckConstraint(
            "snapshot_type IN ('manual', 'on-publish', 'daily-backup', 'system', 'rollback')",
            name="ck_workflow_versions_snapshot_type",
        ),
        schema=schema,
    )


def downgrade() -> None:
    """Drop version and workflow tables."""
    schema = workflow_versions_postgres_schema()
    op.drop_table("workflow_versions", schema=schema)
    op.drop_index("ix_workflows_hubspot_id", table_name="workflows", schema=schema)
    op.drop_table("workflows", schema=schema)
