"""create audit entries table"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from packages.guard_shared.ids.constants import ULID_DOMAIN_NAME
from services.state.audit_trail.data.runtime import audit_postgres_schema

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
    """Create the append-only audit entry table."""
    schema = audit_postgres_schema()

    op.create_table(
        "audit_entries",
        sa.Column("id", _ulid_domain(schema), primary_key=True, nullable=False),
        sa.Column(
            "sequence",
            sa.BigInteger(),
            sa.Identity(always=True),
            nullable=False,
            unique=True,
        ),
        sa.Column("workflow_id", sa.String(length=64), nullable=False),
        sa.Column("version_id", sa.String(length=64), nullable=True),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("user_id", sa.String(length=256), nullable=True),
        sa.Column("user_name", sa.String(length=256), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("old_value", postgresql.JSONB(), nullable=True),
        sa.Column("new_value", postgresql.JSONB(), nullable=True),
        sa.CheckConstraint(
            "action IN ('create', 'edit', 'rollback', 'delete', 'sync')",
            name="ck_audit_entries_action",
        ),
        schema=schema,
    )
    op.create_index(
        "ix_audit_entries_workflow_order",
        "audit_entries",
        ["workflow_id", "timestamp", "sequence"],
        schema=schema,
    )


def downgrade() -> None:
    """Drop the audit entry table."""
    schema = audit_postgres_schema()
    op.drop_index("ix_audit_entries_workflow_order", table_name="audit_entries", schema=schema)
    op.drop_table("audit_entries", schema=schema)
