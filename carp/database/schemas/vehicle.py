"""
Vehicle SQLAlchemy model.
"""
from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, Numeric, String, text

from carp.database import Base
from carp.database.schemas.mixins import TimestampMixin


class VehicleDBModel(Base, TimestampMixin):
    """
    Vehicle owned by a single user.

    At most one vehicle per user has is_default set. The vehicle service
    keeps that invariant; the partial unique index is a backstop.
    """

    __tablename__ = "vehicles"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    name = Column(String(100), nullable=False)
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    year = Column(Integer, nullable=True)

    vehicle_type = Column(String(20), nullable=False)
    fuel_type = Column(String(20), nullable=False)

    fuel_efficiency = Column(
        Numeric(8, 2),
        nullable=True,
        comment="km per litre, or km per kWh for electric vehicles",
    )

    engine_size = Column(
        Numeric(8, 2),
        nullable=True,
        comment="Litres, or battery kWh for electric vehicles",
    )

    transmission = Column(String(20), nullable=True)

    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ix_vehicles_user_default", "user_id", "is_default"),
        Index(
            "uq_vehicles_one_default_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default"),
        ),
        {"comment": "User vehicles"},
    )

    def __repr__(self):
        return f"<VehicleDBModel: {self.name} ({self.vehicle_type}/{self.fuel_type})>"
