"""
Pydantic models for EmissionFactor following kkb_fastapi pattern.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from carp.utils.constants import FuelType, VehicleType


class EmissionFactorBase(BaseModel):
    """Base emission factor model."""

    vehicle_type: VehicleType = Field(..., description="Vehicle category", examples=["car"])
    fuel_type: FuelType = Field(..., description="Fuel category", examples=["gasoline"])
    factor_g_per_km: Decimal = Field(
        ...,
        description="Grams of CO2 per kilometre",
        examples=[Decimal("120.0")],
    )
    description: Optional[str] = Field(
        None, max_length=255, examples=["Average gasoline car"]
    )
    source: Optional[str] = Field(None, max_length=255, examples=["EPA 2023"])


class EmissionFactorCreate(EmissionFactorBase):
    """Model for creating emission factor."""

    is_active: bool = True


class EmissionFactorUpdate(BaseModel):
    """Model for updating emission factor."""

    vehicle_type: Optional[VehicleType] = None
    fuel_type: Optional[FuelType] = None
    factor_g_per_km: Optional[Decimal] = None
    description: Optional[str] = Field(None, max_length=255)
    source: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None


class EmissionFactorPydModel(EmissionFactorBase):
    """Model for emission factor response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    is_active: bool
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
