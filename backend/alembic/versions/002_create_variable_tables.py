"""Create application_variables and application_variable_audits tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Variables: clear value for plain kinds, cipher value for secret kinds
    op.create_table(
        "application_variables",
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "application_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("var_name", sa.String(255), nullable=False),
        sa.Column("var_value", sa.Text(), nullable=True),
        sa.Column("cipher_value", sa.LargeBinary(), nullable=True),
        sa.Column("var_type", sa.String(50), nullable=False),
        sa.UniqueConstraint(
            "application_id",
            "var_name",
            name="uq_application_variables_application_id_var_name",
        ),
    )
    op.create_index(
        "ix_application_variables_application_id", "application_variables", ["application_id"]
    )

    # Snapshots: JSON block, secrets kept as base64 cipher tokens
    op.create_table(
        "application_variable_audits",
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "application_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("versioned", sa.DateTime(timezone=True), nullable=False),
        sa.Column("data", sa.Text(), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
    )
    op.create_index(
        "ix_application_variable_audits_application_id",
        "application_variable_audits",
        ["application_id"],
    )
    op.create_index(
        "ix_application_variable_audits_versioned",
        "application_variable_audits",
        ["versioned"],
    )


def downgrade() -> None:
    op.drop_index("ix_application_variable_audits_versioned", table_name="application_variable_audits")
    op.drop_index("ix_application_variable_audits_application_id", table_name="application_variable_audits")
    op.drop_table("application_variable_audits")
    op.drop_index("ix_application_variables_application_id", table_name="application_variables")
    op.drop_table("application_variables")
