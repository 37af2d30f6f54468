"""
Pydantic models for dashboard and admin statistics.

Field names serialize in camelCase to match the dashboard view models.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from carp.utils.constants import GroupBy, LeaderboardType, Period


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DashboardStats(CamelModel):
    """Per-user trip statistics. Distances in km, CO2 in kg."""

    total_trips: int = 0
    total_distance: float = 0.0
    total_co2: float = 0.0
    co2_saved: float = 0.0
    eco_trips: int = 0
    average_eco_rating: float = Field(0.0, ge=0, le=5)


class AdminStats(CamelModel):
    """System-wide statistics for the admin console."""

    total_users: int = 0
    total_vehicles: int = 0
    total_trips: int = 0
    total_co2_saved: float = 0.0
    active_users: int = 0
    new_users_today: int = 0


class MonthlyEmission(CamelModel):
    month: str = Field(..., examples=["2024-01"])
    trips: int
    total_distance: float
    total_co2: float


class ModeDistribution(CamelModel):
    travel_mode: str
    trips: int
    total_distance: float


class DashboardResponse(CamelModel):
    stats: DashboardStats
    monthly_emissions: list[MonthlyEmission]
    mode_distribution: list[ModeDistribution]


# Reports over a look-back period

class PeriodEmissionStats(CamelModel):
    """trip_count and total_distance count every trip; CO2 figures only calculated ones."""

    trip_count: int = 0
    total_distance: float = 0.0
    total_co2: float = 0.0
    average_co2_per_trip: float = 0.0
    max_co2: float = 0.0
    min_co2: float = 0.0


class DailyEmission(CamelModel):
    date: str = Field(..., examples=["2024-01-15"])
    trips: int
    total_co2: float


class EmissionReport(CamelModel):
    period: Period
    vehicle_id: Optional[int] = None
    stats: PeriodEmissionStats
    daily_emissions: list[DailyEmission]


class SavingsBreakdown(CamelModel):
    walking: float = 0.0
    cycling: float = 0.0
    transit: float = 0.0
    electric: float = 0.0


class CarbonSavings(CamelModel):
    """CO2 saved against the baseline car by walking, cycling, transit and electric driving."""

    total_co2_saved: float = 0.0
    savings_breakdown: SavingsBreakdown = Field(default_factory=SavingsBreakdown)
    trips_analyzed: int = 0
    equivalent_trees_planted: int = 0


class LeaderboardEntry(CamelModel):
    user_id: int
    first_name: str
    last_name: str
    total_trips: int
    eco_trips: int
    eco_share: float = Field(..., ge=0, le=1)
    co2_saved: float


class Leaderboard(CamelModel):
    type: LeaderboardType
    entries: list[LeaderboardEntry]


class MonthlyTrend(CamelModel):
    month: str = Field(..., examples=["2024-01"])
    trips: int
    eco_trips: int
    total_distance: float
    total_co2: float


class ModeTrend(CamelModel):
    month: str
    travel_mode: str
    trips: int


class TrendReport(CamelModel):
    months: int
    monthly_trends: list[MonthlyTrend]
    travel_mode_trends: list[ModeTrend]


# Admin analytics

class PeriodCount(CamelModel):
    period: str = Field(..., examples=["2024-01-15", "2024-W03", "2024-01"])
    count: int


class UserAnalytics(CamelModel):
    period: Period
    group_by: GroupBy
    user_registrations: list[PeriodCount]
    active_users: list[PeriodCount]


class VehicleTypeEmissions(CamelModel):
    vehicle_type: str
    trips: int
    total_co2: float
    total_saved: float
    average_co2: float


class EmissionAnalytics(CamelModel):
    period: Period
    vehicle_type: Optional[str] = None
    emissions_by_vehicle: list[VehicleTypeEmissions]
    total_co2: float
    total_saved: float
