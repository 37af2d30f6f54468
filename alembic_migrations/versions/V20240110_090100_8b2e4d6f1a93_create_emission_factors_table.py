"""create_emission_factors_table

Revision ID: 8b2e4d6f1a93
Revises: 3f1a9c2d7b40
Create Date: 2024-01-10 09:01:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "8b2e4d6f1a93"
down_revision = "3f1a9c2d7b40"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "emission_factors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "vehicle_type",
            sa.String(length=20),
            nullable=False,
            comment="car, motorcycle, truck, bus or van",
        ),
        sa.Column(
            "fuel_type",
            sa.String(length=20),
            nullable=False,
            comment="gasoline, diesel, electric, hybrid, lpg or cng",
        ),
        sa.Column(
            "factor_g_per_km",
            sa.Numeric(precision=8, scale=4),
            nullable=False,
            comment="Grams of CO2 emitted per kilometre",
        ),
        sa.Column(
            "description",
            sa.String(length=255),
            nullable=True,
            comment="Human readable profile (e.g. 'Large gasoline car/SUV')",
        ),
        sa.Column(
            "source",
            sa.String(length=255),
            nullable=True,
            comment="Source of the emission factor (e.g. 'EPA 2023')",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_by",
            sa.Integer(),
            nullable=True,
            comment="Admin who created the factor",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        comment="Emission factor lookup table for trip CO2 estimates",
    )
    op.create_index(
        "ix_emission_factors_profile_active",
        "emission_factors",
        ["vehicle_type", "fuel_type", "is_active"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_emission_factors_profile_active", table_name="emission_factors")
    op.drop_table("emission_factors")
