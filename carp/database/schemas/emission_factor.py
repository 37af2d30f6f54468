"""
EmissionFactor SQLAlchemy model.
"""
from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, Numeric, String

from carp.database import Base
from carp.database.schemas.mixins import TimestampMixin


class EmissionFactorDBModel(Base, TimestampMixin):
    """
    Emission factor lookup table.

    Maps a (vehicle_type, fuel_type) profile to grams of CO2 per kilometre.
    Several active rows may share a profile (e.g. small, average and large
    gasoline cars); the resolver picks one. Rows are deactivated, never
    deleted, so historical trips keep a valid reference.
    """

    __tablename__ = "emission_factors"

    vehicle_type = Column(
        String(20),
        nullable=False,
        comment="car, motorcycle, truck, bus or van",
    )

    fuel_type = Column(
        String(20),
        nullable=False,
        comment="gasoline, diesel, electric, hybrid, lpg or cng",
    )

    factor_g_per_km = Column(
        Numeric(8, 4),
        nullable=False,
        comment="Grams of CO2 emitted per kilometre",
    )

    description = Column(
        String(255),
        nullable=True,
        comment="Human readable profile (e.g. 'Large gasoline car/SUV')",
    )

    source = Column(
        String(255),
        nullable=True,
        comment="Source of the emission factor (e.g. 'EPA 2023')",
    )

    is_active = Column(Boolean, nullable=False, default=True)

    created_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Admin who created the factor",
    )

    __table_args__ = (
        Index(
            "ix_emission_factors_profile_active",
            "vehicle_type",
            "fuel_type",
            "is_active",
        ),
        {"comment": "Emission factor lookup table for trip CO2 estimates"},
    )

    def __repr__(self):
        return (
            f"<EmissionFactorDBModel: {self.vehicle_type}/{self.fuel_type} "
            f"{self.factor_g_per_km} g/km>"
        )
