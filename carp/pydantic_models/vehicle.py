"""
Pydantic models for Vehicle.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from carp.utils.constants import FuelType, Transmission, VehicleType


class VehicleBase(BaseModel):
    """Base vehicle model."""

    name: str = Field(..., min_length=1, max_length=100, examples=["Toyota Camry 2020"])
    make: Optional[str] = Field(None, max_length=100, examples=["Toyota"])
    model: Optional[str] = Field(None, max_length=100, examples=["Camry"])
    year: Optional[int] = Field(None, ge=1900, le=2100, examples=[2020])
    vehicle_type: VehicleType = Field(..., examples=["car"])
    fuel_type: FuelType = Field(..., examples=["gasoline"])
    fuel_efficiency: Optional[Decimal] = Field(
        None,
        gt=0,
        description="km per litre, or km per kWh for electric vehicles",
        examples=[Decimal("12.0")],
    )
    engine_size: Optional[Decimal] = Field(
        None,
        gt=0,
        description="Litres, or battery kWh for electric vehicles",
        examples=[Decimal("2.5")],
    )
    transmission: Optional[Transmission] = Field(None, examples=["automatic"])


class VehicleCreate(VehicleBase):
    """Model for creating vehicle."""

    is_default: bool = False


class VehicleUpdate(BaseModel):
    """Model for updating vehicle. is_default changes go through set-default."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    make: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    vehicle_type: Optional[VehicleType] = None
    fuel_type: Optional[FuelType] = None
    fuel_efficiency: Optional[Decimal] = Field(None, gt=0)
    engine_size: Optional[Decimal] = Field(None, gt=0)
    transmission: Optional[Transmission] = None
    is_active: Optional[bool] = None


class VehiclePydModel(VehicleBase):
    """Model for vehicle response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    is_default: bool
    is_active: bool
    co2_per_km: Optional[Decimal] = Field(
        None, description="kg CO2 per km of the resolved factor; null when none covers the vehicle"
    )
    created_at: datetime
    updated_at: datetime


class EmissionEstimateRequest(BaseModel):
    vehicle_id: int
    distance_km: Decimal = Field(..., examples=[Decimal("100")])


class EmissionEstimate(BaseModel):
    """Emission estimate for a vehicle over a distance."""

    vehicle_id: int
    distance_km: Decimal
    emission_factor_id: int
    factor_g_per_km: Decimal
    co2_emissions: Decimal = Field(..., description="kg CO2")
    resolution_method: str
