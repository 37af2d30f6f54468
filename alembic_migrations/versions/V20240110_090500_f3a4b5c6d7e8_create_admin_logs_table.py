"""create_admin_logs_table

Revision ID: f3a4b5c6d7e8
Revises: e7f8a9b0c1d2
Create Date: 2024-01-10 09:05:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "f3a4b5c6d7e8"
down_revision = "e7f8a9b0c1d2"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "admin_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("admin_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column(
            "target_type",
            sa.String(length=50),
            nullable=True,
            comment="user, emission_factor or system",
        ),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("old_data", sa.JSON(), nullable=True),
        sa.Column("new_data", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["admin_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        comment="Audit log of admin actions",
    )
    op.create_index(
        "ix_admin_logs_admin_created",
        "admin_logs",
        ["admin_id", "created_at"],
        unique=False,
    )
    op.create_index(
        "ix_admin_logs_action_created",
        "admin_logs",
        ["action", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_admin_logs_action_created", table_name="admin_logs")
    op.drop_index("ix_admin_logs_admin_created", table_name="admin_logs")
    op.drop_table("admin_logs")
