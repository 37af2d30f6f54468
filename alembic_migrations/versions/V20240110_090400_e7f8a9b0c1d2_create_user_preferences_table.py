"""create_user_preferences_table

Revision ID: e7f8a9b0c1d2
Revises: d1e2f3a4b5c6
Create Date: 2024-01-10 09:04:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "e7f8a9b0c1d2"
down_revision = "d1e2f3a4b5c6"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_preferences",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("avoid_tolls", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "avoid_highways", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "prefer_eco_routes", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "max_walking_distance_km",
            sa.Numeric(precision=5, scale=2),
            nullable=False,
            server_default="2.0",
        ),
        sa.Column(
            "max_cycling_distance_km",
            sa.Numeric(precision=5, scale=2),
            nullable=False,
            server_default="10.0",
        ),
        sa.Column(
            "default_travel_mode",
            sa.String(length=20),
            nullable=False,
            server_default="driving",
        ),
        sa.Column("notification_settings", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
        comment="Per-user routing preferences",
    )


def downgrade() -> None:
    op.drop_table("user_preferences")
