"""
Dashboard Aggregation Service.

Builds dashboard statistics from stored trips. The functions below read
trips and never modify them, so statistics can be recomputed at any time.
"""

import logging
from collections import OrderedDict
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories import TripRepository, UserRepository, VehicleRepository
from carp.pydantic_models.stats import (
    AdminStats,
    DashboardStats,
    ModeDistribution,
    MonthlyEmission,
)
from carp.services.calculators.trip_emission_calculator import TripEmissionCalculator
from carp.services.calculators.unit_converter import UnitConverter
from carp.utils.constants import (
    DEFAULT_BASELINE_FACTOR_G_PER_KM,
    ECO_FUEL_TYPES,
    ZERO_EMISSION_MODES,
    EmissionsStatus,
    UserStatus,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
RATING_PRECISION = Decimal("0.1")
DISTANCE_PRECISION = Decimal("0.01")


def as_decimal(value) -> Decimal:
    return ZERO if value is None else UnitConverter.normalize_number(value)


def travel_mode_of(trip) -> str:
    return getattr(trip.travel_mode, "value", trip.travel_mode)


def is_calculated(trip) -> bool:
    return (
        trip.emissions_status == EmissionsStatus.CALCULATED
        and trip.co2_emissions is not None
    )


def is_eco_trip(trip) -> bool:
    """Electric or hybrid vehicle, or a walking / cycling trip."""
    return trip.fuel_type in ECO_FUEL_TYPES or travel_mode_of(trip) in ZERO_EMISSION_MODES


def trip_eco_rating(trip, reference_factors: Sequence = ()) -> Optional[int]:
    """Eco rating of a calculated trip; None while its emissions are pending."""
    if not is_calculated(trip):
        return None
    if travel_mode_of(trip) in ZERO_EMISSION_MODES:
        return TripEmissionCalculator.MAX_RATING
    return TripEmissionCalculator.eco_rating(
        as_decimal(trip.emission_factor_g_per_km), reference_factors
    )


def aggregate(
    trips: Iterable,
    reference_factors: Sequence = (),
    baseline: Decimal = DEFAULT_BASELINE_FACTOR_G_PER_KM,
) -> DashboardStats:
    """
    Summarise trips into dashboard statistics.

    totalTrips and totalDistance count every trip; totalCo2, co2Saved and
    averageEcoRating only count trips whose emissions are calculated.
    co2Saved is the summed difference between the baseline car and the
    actual emissions, floored at zero as a whole.

    Args:
        trips: Trip models
        reference_factors: g/km values of the active factors, for eco ratings
        baseline: Baseline factor in g/km

    Returns:
        DashboardStats (all zeros for no trips)
    """
    total_trips = 0
    total_distance = ZERO
    total_co2 = ZERO
    savings = ZERO
    eco_trips = 0
    ratings = []

    for trip in trips:
        total_trips += 1
        distance = as_decimal(trip.distance_km)
        total_distance += distance
        if is_eco_trip(trip):
            eco_trips += 1

        if not is_calculated(trip):
            continue

        co2 = as_decimal(trip.co2_emissions)
        total_co2 += co2
        savings += TripEmissionCalculator.baseline_emissions(distance, baseline) - co2
        ratings.append(trip_eco_rating(trip, reference_factors))

    average_rating = ZERO
    if ratings:
        average_rating = (Decimal(sum(ratings)) / len(ratings)).quantize(
            RATING_PRECISION, rounding=ROUND_HALF_UP
        )

    return DashboardStats(
        total_trips=total_trips,
        total_distance=float(total_distance.quantize(DISTANCE_PRECISION)),
        total_co2=float(UnitConverter.round_kg(total_co2)),
        co2_saved=float(UnitConverter.round_kg(max(savings, ZERO))),
        eco_trips=eco_trips,
        average_eco_rating=float(average_rating),
    )


def monthly_emissions(trips: Iterable) -> list[MonthlyEmission]:
    """Per-month (YYYY-MM) trip count, distance and CO2, oldest month first."""
    months: "OrderedDict[str, list]" = OrderedDict()
    for trip in sorted(trips, key=lambda t: t.created_at):
        key = trip.created_at.strftime("%Y-%m")
        bucket = months.setdefault(key, [0, ZERO, ZERO])
        bucket[0] += 1
        bucket[1] += as_decimal(trip.distance_km)
        if is_calculated(trip):
            bucket[2] += as_decimal(trip.co2_emissions)

    return [
        MonthlyEmission(
            month=month,
            trips=count,
            total_distance=float(distance.quantize(DISTANCE_PRECISION)),
            total_co2=float(UnitConverter.round_kg(co2)),
        )
        for month, (count, distance, co2) in months.items()
    ]


def mode_distribution(trips: Iterable) -> list[ModeDistribution]:
    """Trip count and distance per travel mode, most used first."""
    modes: dict[str, list] = {}
    for trip in trips:
        bucket = modes.setdefault(travel_mode_of(trip), [0, ZERO])
        bucket[0] += 1
        bucket[1] += as_decimal(trip.distance_km)

    return [
        ModeDistribution(
            travel_mode=mode,
            trips=count,
            total_distance=float(distance.quantize(DISTANCE_PRECISION)),
        )
        for mode, (count, distance) in sorted(
            modes.items(), key=lambda item: (-item[1][0], item[0])
        )
    ]


class AdminStatsAggregator:
    """System-wide statistics for the admin console."""

    def __init__(
        self, session: AsyncSession, baseline: Decimal = DEFAULT_BASELINE_FACTOR_G_PER_KM
    ):
        self.session = session
        self.baseline = baseline
        self.users = UserRepository(session)
        self.vehicles = VehicleRepository(session)
        self.trips = TripRepository(session)

    async def build(self) -> AdminStats:
        logger.info("Building admin statistics")
        start_of_day = datetime.combine(datetime.utcnow().date(), time.min)

        distance, co2 = await self.trips.calculated_totals()
        saved = TripEmissionCalculator.baseline_emissions(distance, self.baseline) - co2

        return AdminStats(
            total_users=await self.users.count(),
            total_vehicles=await self.vehicles.count(filters={"is_active": True}),
            total_trips=await self.trips.count(),
            total_co2_saved=float(UnitConverter.round_kg(max(saved, ZERO))),
            active_users=await self.users.count(
                filters={"status": UserStatus.ACTIVE.value}
            ),
            new_users_today=await self.users.count_created_since(start_of_day),
        )
