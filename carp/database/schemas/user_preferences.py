"""
UserPreferences SQLAlchemy model.
"""
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, Numeric, String

from carp.database import Base
from carp.database.schemas.mixins import TimestampMixin
from carp.utils.constants import TravelMode


class UserPreferencesDBModel(Base, TimestampMixin):
    """Routing preferences, one row per user, created on first access."""

    __tablename__ = "user_preferences"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    avoid_tolls = Column(Boolean, nullable=False, default=False)
    avoid_highways = Column(Boolean, nullable=False, default=False)
    prefer_eco_routes = Column(Boolean, nullable=False, default=True)
    max_walking_distance_km = Column(Numeric(5, 2), nullable=False, default=Decimal("2.0"))
    max_cycling_distance_km = Column(Numeric(5, 2), nullable=False, default=Decimal("10.0"))
    default_travel_mode = Column(
        String(20), nullable=False, default=TravelMode.DRIVING.value
    )
    notification_settings = Column(JSON, nullable=True, default=dict)

    __table_args__ = ({"comment": "Per-user routing preferences"},)

    def __repr__(self):
        return f"<UserPreferencesDBModel: user {self.user_id}>"
