"""create_trips_table

Revision ID: d1e2f3a4b5c6
Revises: c4d5e6f7a8b9
Create Date: 2024-01-10 09:03:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "d1e2f3a4b5c6"
down_revision = "c4d5e6f7a8b9"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "trips",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "vehicle_id",
            sa.Integer(),
            nullable=True,
            comment="Vehicle used; NULL once the vehicle is deleted",
        ),
        sa.Column("origin", sa.String(length=255), nullable=False),
        sa.Column("destination", sa.String(length=255), nullable=False),
        sa.Column("origin_lat", sa.Numeric(precision=10, scale=8), nullable=True),
        sa.Column("origin_lng", sa.Numeric(precision=11, scale=8), nullable=True),
        sa.Column("destination_lat", sa.Numeric(precision=10, scale=8), nullable=True),
        sa.Column("destination_lng", sa.Numeric(precision=11, scale=8), nullable=True),
        sa.Column("distance_km", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("travel_mode", sa.String(length=20), nullable=False),
        sa.Column(
            "co2_emissions",
            sa.Numeric(precision=10, scale=4),
            nullable=True,
            comment="kg CO2, rounded to 0.01; NULL while emissions are pending",
        ),
        sa.Column(
            "emissions_status",
            sa.String(length=20),
            nullable=False,
            server_default="calculated",
            comment="calculated or pending",
        ),
        sa.Column("emission_factor_id", sa.Integer(), nullable=True),
        sa.Column(
            "emission_factor_g_per_km", sa.Numeric(precision=8, scale=4), nullable=True
        ),
        sa.Column("vehicle_type", sa.String(length=20), nullable=True),
        sa.Column("fuel_type", sa.String(length=20), nullable=True),
        sa.Column(
            "calculation_metadata",
            sa.JSON(),
            nullable=True,
            comment="Resolution method, matched description and inputs",
        ),
        sa.Column("route_data", sa.JSON(), nullable=True),
        sa.Column("is_saved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("planned_date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["vehicle_id"], ["vehicles.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(
            ["emission_factor_id"], ["emission_factors.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        comment="User trips with frozen CO2 estimates",
    )
    op.create_index(
        "ix_trips_user_created", "trips", ["user_id", "created_at"], unique=False
    )
    op.create_index(
        "ix_trips_emissions_status", "trips", ["emissions_status"], unique=False
    )
    op.create_index("ix_trips_planned_date", "trips", ["planned_date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_trips_planned_date", table_name="trips")
    op.drop_index("ix_trips_emissions_status", table_name="trips")
    op.drop_index("ix_trips_user_created", table_name="trips")
    op.drop_table("trips")
