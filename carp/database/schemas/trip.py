"""
Trip SQLAlchemy model.
"""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)

from carp.database import Base
from carp.database.schemas.mixins import TimestampMixin
from carp.utils.constants import EmissionsStatus


class TripDBModel(Base, TimestampMixin):
    """
    Recorded trip.

    co2_emissions is computed once at creation and frozen together with a
    snapshot of the factor and vehicle profile used. A trip created while
    no factor covered its profile stays pending (co2_emissions NULL) until
    a covering factor exists.
    """

    __tablename__ = "trips"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    vehicle_id = Column(
        Integer,
        ForeignKey("vehicles.id", ondelete="SET NULL"),
        nullable=True,
        comment="Vehicle used; NULL once the vehicle is deleted",
    )

    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    origin_lat = Column(Numeric(10, 8), nullable=True)
    origin_lng = Column(Numeric(11, 8), nullable=True)
    destination_lat = Column(Numeric(10, 8), nullable=True)
    destination_lng = Column(Numeric(11, 8), nullable=True)

    distance_km = Column(Numeric(10, 2), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=0)
    travel_mode = Column(String(20), nullable=False)

    co2_emissions = Column(
        Numeric(10, 4),
        nullable=True,
        comment="kg CO2, rounded to 0.01; NULL while emissions are pending",
    )

    emissions_status = Column(
        String(20),
        nullable=False,
        default=EmissionsStatus.CALCULATED,
        comment="calculated or pending",
    )

    # Snapshot of the factor used for co2_emissions
    emission_factor_id = Column(
        Integer,
        ForeignKey("emission_factors.id", ondelete="SET NULL"),
        nullable=True,
    )
    emission_factor_g_per_km = Column(Numeric(8, 4), nullable=True)
    vehicle_type = Column(String(20), nullable=True)
    fuel_type = Column(String(20), nullable=True)

    calculation_metadata = Column(
        JSON,
        nullable=True,
        default=dict,
        comment="Resolution method, matched description and inputs",
    )

    route_data = Column(JSON, nullable=True, default=dict)

    is_saved = Column(Boolean, nullable=False, default=False)
    planned_date = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_trips_user_created", "user_id", "created_at"),
        Index("ix_trips_emissions_status", "emissions_status"),
        Index("ix_trips_planned_date", "planned_date"),
        {"comment": "User trips with frozen CO2 estimates"},
    )

    def __repr__(self):
        return (
            f"<TripDBModel: {self.origin} -> {self.destination} "
            f"{self.distance_km} km, {self.co2_emissions} kg>"
        )

    @property
    def is_pending(self) -> bool:
        return self.emissions_status == EmissionsStatus.PENDING
