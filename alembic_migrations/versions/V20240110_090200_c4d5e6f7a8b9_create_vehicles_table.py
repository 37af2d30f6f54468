"""create_vehicles_table

Revision ID: c4d5e6f7a8b9
Revises: 8b2e4d6f1a93
Create Date: 2024-01-10 09:02:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "c4d5e6f7a8b9"
down_revision = "8b2e4d6f1a93"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("make", sa.String(length=100), nullable=True),
        sa.Column("model", sa.String(length=100), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("vehicle_type", sa.String(length=20), nullable=False),
        sa.Column("fuel_type", sa.String(length=20), nullable=False),
        sa.Column(
            "fuel_efficiency",
            sa.Numeric(precision=8, scale=2),
            nullable=True,
            comment="km per litre, or km per kWh for electric vehicles",
        ),
        sa.Column(
            "engine_size",
            sa.Numeric(precision=8, scale=2),
            nullable=True,
            comment="Litres, or battery kWh for electric vehicles",
        ),
        sa.Column("transmission", sa.String(length=20), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        comment="User vehicles",
    )
    op.create_index(
        "ix_vehicles_user_default",
        "vehicles",
        ["user_id", "is_default"],
        unique=False,
    )
    # At most one default vehicle per user
    op.create_index(
        "uq_vehicles_one_default_per_user",
        "vehicles",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_default"),
        sqlite_where=sa.text("is_default"),
    )


def downgrade() -> None:
    op.drop_index("uq_vehicles_one_default_per_user", table_name="vehicles")
    op.drop_index("ix_vehicles_user_default", table_name="vehicles")
    op.drop_table("vehicles")
