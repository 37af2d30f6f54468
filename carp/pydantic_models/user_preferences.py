"""
Pydantic models for UserPreferences.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from carp.utils.constants import TravelMode


class UserPreferencesUpdate(BaseModel):
    avoid_tolls: Optional[bool] = None
    avoid_highways: Optional[bool] = None
    prefer_eco_routes: Optional[bool] = None
    max_walking_distance_km: Optional[Decimal] = Field(None, ge=0, le=50)
    max_cycling_distance_km: Optional[Decimal] = Field(None, ge=0, le=200)
    default_travel_mode: Optional[TravelMode] = None
    notification_settings: Optional[dict[str, Any]] = None


class UserPreferencesPydModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    avoid_tolls: bool
    avoid_highways: bool
    prefer_eco_routes: bool
    max_walking_distance_km: Decimal
    max_cycling_distance_km: Decimal
    default_travel_mode: TravelMode
    notification_settings: Optional[dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime
