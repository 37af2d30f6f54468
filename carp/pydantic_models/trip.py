"""
Pydantic models for Trip.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from carp.utils.constants import TravelMode


class TripBase(BaseModel):
    """Base trip model."""

    origin: str = Field(..., min_length=1, max_length=255, examples=["New York, NY"])
    destination: str = Field(..., min_length=1, max_length=255, examples=["Boston, MA"])
    origin_lat: Optional[Decimal] = Field(None, ge=-90, le=90)
    origin_lng: Optional[Decimal] = Field(None, ge=-180, le=180)
    destination_lat: Optional[Decimal] = Field(None, ge=-90, le=90)
    destination_lng: Optional[Decimal] = Field(None, ge=-180, le=180)
    distance_km: Decimal = Field(..., examples=[Decimal("306.5")])
    duration_minutes: int = Field(0, ge=0, examples=[285])
    travel_mode: TravelMode = Field(TravelMode.DRIVING, examples=["driving"])


class TripCreate(TripBase):
    """Model for creating trip. Without vehicle_id the user's default vehicle is used."""

    vehicle_id: Optional[int] = None
    route_data: Optional[dict[str, Any]] = Field(default_factory=dict)
    is_saved: bool = False
    planned_date: Optional[datetime] = None


class TripUpdate(BaseModel):
    """Only bookkeeping fields are editable; emissions are frozen."""

    is_saved: Optional[bool] = None
    planned_date: Optional[datetime] = None


class TripPydModel(TripBase):
    """Model for trip response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    vehicle_id: Optional[int] = None
    co2_emissions: Optional[Decimal] = Field(None, description="kg CO2; null while pending")
    emissions_status: str
    emission_factor_id: Optional[int] = None
    emission_factor_g_per_km: Optional[Decimal] = None
    vehicle_type: Optional[str] = None
    fuel_type: Optional[str] = None
    calculation_metadata: Optional[dict[str, Any]] = None
    route_data: Optional[dict[str, Any]] = None
    is_saved: bool
    planned_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TripListResponse(BaseModel):
    trips: list[TripPydModel]
    total: int
    skip: int
    limit: int


class ResolvePendingResult(BaseModel):
    resolved: int = Field(..., description="Trips that received emissions")
    still_pending: int = Field(..., description="Trips still without a covering factor")
