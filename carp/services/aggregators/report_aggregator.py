"""
Report Aggregation Service.

Period reports, carbon savings, trends and leaderboards built from stored
trips. Like the dashboard statistics they only read trips, so they can be
recomputed at any time.
"""

import logging
from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories import TripRepository, UserRepository
from carp.pydantic_models.stats import (
    CarbonSavings,
    DailyEmission,
    EmissionAnalytics,
    Leaderboard,
    LeaderboardEntry,
    ModeTrend,
    MonthlyTrend,
    PeriodCount,
    PeriodEmissionStats,
    SavingsBreakdown,
    UserAnalytics,
    VehicleTypeEmissions,
)
from carp.services.aggregators.dashboard_aggregator import (
    DISTANCE_PRECISION,
    ZERO,
    aggregate,
    as_decimal,
    is_calculated,
    is_eco_trip,
    travel_mode_of,
)
from carp.services.calculators.trip_emission_calculator import TripEmissionCalculator
from carp.services.calculators.unit_converter import UnitConverter
from carp.utils.constants import (
    CO2_KG_PER_TREE_YEAR,
    DEFAULT_BASELINE_FACTOR_G_PER_KM,
    ECO_FUEL_TYPES,
    MIN_LEADERBOARD_TRIPS,
    PERIOD_DAYS,
    GroupBy,
    LeaderboardType,
    Period,
    TravelMode,
    UserStatus,
)

logger = logging.getLogger(__name__)

SHARE_PRECISION = Decimal("0.01")


def _kg(value: Decimal) -> float:
    return float(UnitConverter.round_kg(value))


def _km(value: Decimal) -> float:
    return float(value.quantize(DISTANCE_PRECISION))


def period_start(period: Period, now: Optional[datetime] = None) -> datetime:
    """First instant covered by a look-back period."""
    now = now or datetime.utcnow()
    return now - timedelta(days=PERIOD_DAYS[Period(period)])


def months_start(months: int, today: Optional[date] = None) -> datetime:
    """
    Start of a window of calendar months ending with the current month.

    Example:
        >>> months_start(3, date(2024, 2, 10))
        datetime.datetime(2023, 12, 1, 0, 0)
    """
    today = today or datetime.utcnow().date()
    index = today.year * 12 + today.month - 1 - (months - 1)
    return datetime(index // 12, index % 12 + 1, 1)


def bucket_key(moment: datetime, group_by: GroupBy) -> str:
    """Label of the day, ISO week or month a moment falls in."""
    group_by = GroupBy(group_by)
    if group_by is GroupBy.DAY:
        return moment.strftime("%Y-%m-%d")
    if group_by is GroupBy.WEEK:
        year, week, _ = moment.isocalendar()
        return f"{year}-W{week:02d}"
    return moment.strftime("%Y-%m")


def trip_savings(trip, baseline: Decimal) -> Decimal:
    """Baseline car emissions minus the trip's own; zero while pending."""
    if not is_calculated(trip):
        return ZERO
    return TripEmissionCalculator.baseline_emissions(
        as_decimal(trip.distance_km), baseline
    ) - as_decimal(trip.co2_emissions)


def period_emissions(trips: Iterable) -> tuple[PeriodEmissionStats, list[DailyEmission]]:
    """Totals and per-day series of the trips of one period."""
    trip_count = 0
    distance = ZERO
    co2_values = []
    days: "OrderedDict[str, list]" = OrderedDict()

    for trip in sorted(trips, key=lambda t: (t.created_at, t.id)):
        trip_count += 1
        distance += as_decimal(trip.distance_km)
        bucket = days.setdefault(trip.created_at.strftime("%Y-%m-%d"), [0, ZERO])
        bucket[0] += 1
        if is_calculated(trip):
            co2 = as_decimal(trip.co2_emissions)
            co2_values.append(co2)
            bucket[1] += co2

    stats = PeriodEmissionStats(trip_count=trip_count, total_distance=_km(distance))
    if co2_values:
        total = sum(co2_values, ZERO)
        stats.total_co2 = _kg(total)
        stats.average_co2_per_trip = _kg(total / len(co2_values))
        stats.max_co2 = _kg(max(co2_values))
        stats.min_co2 = _kg(min(co2_values))

    daily = [
        DailyEmission(date=day, trips=count, total_co2=_kg(co2))
        for day, (count, co2) in days.items()
    ]
    return stats, daily


def carbon_savings(
    trips: Iterable, baseline: Decimal = DEFAULT_BASELINE_FACTOR_G_PER_KM
) -> CarbonSavings:
    """
    CO2 saved by greener choices, compared with driving the baseline car.

    Walking, cycling and transit trips are grouped by travel mode; driving
    trips count under "electric" when their fuel is electric or hybrid.
    Other driving trips are not analysed. Each category is floored at zero.
    """
    categories = {
        TravelMode.WALKING.value: ZERO,
        TravelMode.CYCLING.value: ZERO,
        TravelMode.TRANSIT.value: ZERO,
        "electric": ZERO,
    }
    analysed = 0

    for trip in trips:
        mode = travel_mode_of(trip)
        if mode in categories:
            category = mode
        elif trip.fuel_type in ECO_FUEL_TYPES:
            category = "electric"
        else:
            continue
        if not is_calculated(trip):
            continue
        analysed += 1
        categories[category] += trip_savings(trip, baseline)

    breakdown = {key: max(value, ZERO) for key, value in categories.items()}
    total = UnitConverter.round_kg(sum(breakdown.values(), ZERO))
    trees = (total / CO2_KG_PER_TREE_YEAR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

    return CarbonSavings(
        total_co2_saved=float(total),
        savings_breakdown=SavingsBreakdown(
            **{key: _kg(value) for key, value in breakdown.items()}
        ),
        trips_analyzed=analysed,
        equivalent_trees_planted=int(trees),
    )


def monthly_trends(trips: Iterable) -> tuple[list[MonthlyTrend], list[ModeTrend]]:
    """Per-month totals and per-month travel mode counts, oldest month first."""
    months: "OrderedDict[str, list]" = OrderedDict()
    modes: dict[tuple[str, str], int] = {}

    for trip in sorted(trips, key=lambda t: (t.created_at, t.id)):
        month = trip.created_at.strftime("%Y-%m")
        bucket = months.setdefault(month, [0, 0, ZERO, ZERO])
        bucket[0] += 1
        if is_eco_trip(trip):
            bucket[1] += 1
        bucket[2] += as_decimal(trip.distance_km)
        if is_calculated(trip):
            bucket[3] += as_decimal(trip.co2_emissions)
        key = (month, travel_mode_of(trip))
        modes[key] = modes.get(key, 0) + 1

    return (
        [
            MonthlyTrend(
                month=month,
                trips=count,
                eco_trips=eco,
                total_distance=_km(distance),
                total_co2=_kg(co2),
            )
            for month, (count, eco, distance, co2) in months.items()
        ],
        [
            ModeTrend(month=month, travel_mode=mode, trips=count)
            for (month, mode), count in sorted(modes.items())
        ],
    )


def leaderboard(
    users: Sequence,
    trips: Iterable,
    kind: LeaderboardType = LeaderboardType.ECO_FRIENDLY,
    limit: int = 10,
    baseline: Decimal = DEFAULT_BASELINE_FACTOR_G_PER_KM,
) -> list[LeaderboardEntry]:
    """
    Rank users by eco-friendly share or by CO2 saved.

    eco_friendly ranks users with at least MIN_LEADERBOARD_TRIPS trips by the
    share of eco trips; carbon_saved ranks every user with a trip by the
    dashboard co2Saved figure. Ties go to the lower user id.
    """
    by_user: dict[int, list] = {}
    for trip in trips:
        by_user.setdefault(trip.user_id, []).append(trip)

    entries = []
    for user in users:
        user_trips = by_user.get(user.id)
        if not user_trips:
            continue
        stats = aggregate(user_trips, baseline=baseline)
        share = (Decimal(stats.eco_trips) / stats.total_trips).quantize(
            SHARE_PRECISION, rounding=ROUND_HALF_UP
        )
        entries.append(
            LeaderboardEntry(
                user_id=user.id,
                first_name=user.first_name,
                last_name=user.last_name,
                total_trips=stats.total_trips,
                eco_trips=stats.eco_trips,
                eco_share=float(share),
                co2_saved=stats.co2_saved,
            )
        )

    if LeaderboardType(kind) is LeaderboardType.ECO_FRIENDLY:
        entries = [e for e in entries if e.total_trips >= MIN_LEADERBOARD_TRIPS]
        entries.sort(key=lambda e: (-e.eco_share, -e.eco_trips, e.user_id))
    else:
        entries.sort(key=lambda e: (-e.co2_saved, e.user_id))
    return entries[:limit]


def count_by_bucket(
    moments: Iterable[tuple[datetime, int]], group_by: GroupBy
) -> list[PeriodCount]:
    """Distinct ids per bucket, for (moment, id) pairs."""
    buckets: dict[str, set] = {}
    for moment, key in moments:
        buckets.setdefault(bucket_key(moment, group_by), set()).add(key)
    return [
        PeriodCount(period=period, count=len(ids))
        for period, ids in sorted(buckets.items())
    ]


def emissions_by_vehicle(
    trips: Iterable, baseline: Decimal = DEFAULT_BASELINE_FACTOR_G_PER_KM
) -> tuple[list[VehicleTypeEmissions], Decimal, Decimal]:
    """
    CO2 and savings of calculated trips per vehicle type.

    Trips without a vehicle type (walking, cycling) are grouped by travel
    mode. Savings are floored at zero as sums, per group and overall.

    Returns:
        Tuple of (groups by total CO2 descending, total CO2, total saved)
    """
    groups: dict[str, list] = {}
    for trip in trips:
        if not is_calculated(trip):
            continue
        key = trip.vehicle_type or travel_mode_of(trip)
        bucket = groups.setdefault(key, [0, ZERO, ZERO])
        bucket[0] += 1
        bucket[1] += as_decimal(trip.co2_emissions)
        bucket[2] += trip_savings(trip, baseline)

    rows = [
        VehicleTypeEmissions(
            vehicle_type=key,
            trips=count,
            total_co2=_kg(co2),
            total_saved=_kg(max(saved, ZERO)),
            average_co2=_kg(co2 / count),
        )
        for key, (count, co2, saved) in groups.items()
    ]
    rows.sort(key=lambda row: (-row.total_co2, row.vehicle_type))

    total_co2 = sum((bucket[1] for bucket in groups.values()), ZERO)
    total_saved = max(sum((bucket[2] for bucket in groups.values()), ZERO), ZERO)
    return rows, total_co2, total_saved


class LeaderboardAggregator:
    """Leaderboard over every active user."""

    def __init__(
        self, session: AsyncSession, baseline: Decimal = DEFAULT_BASELINE_FACTOR_G_PER_KM
    ):
        self.session = session
        self.baseline = baseline
        self.users = UserRepository(session)
        self.trips = TripRepository(session)

    async def build(self, kind: LeaderboardType, limit: int = 10) -> Leaderboard:
        users = await self.users.list_by_status(UserStatus.ACTIVE.value)
        trips = await self.trips.all_for_users([user.id for user in users])
        return Leaderboard(
            type=kind,
            entries=leaderboard(users, trips, kind=kind, limit=limit, baseline=self.baseline),
        )


class AdminAnalyticsAggregator:
    """Registration, activity and emission analytics for the admin console."""

    def __init__(
        self, session: AsyncSession, baseline: Decimal = DEFAULT_BASELINE_FACTOR_G_PER_KM
    ):
        self.session = session
        self.baseline = baseline
        self.users = UserRepository(session)
        self.trips = TripRepository(session)

    async def user_analytics(self, period: Period, group_by: GroupBy) -> UserAnalytics:
        """New users and distinct users with saved trips, per day, week or month."""
        since = period_start(period)
        users = await self.users.list_created_since(since)
        trips = await self.trips.saved_since(since)
        return UserAnalytics(
            period=period,
            group_by=group_by,
            user_registrations=count_by_bucket(
                ((user.created_at, user.id) for user in users), group_by
            ),
            active_users=count_by_bucket(
                ((trip.created_at, trip.user_id) for trip in trips), group_by
            ),
        )

    async def emission_analytics(
        self, period: Period, vehicle_type: Optional[str] = None
    ) -> EmissionAnalytics:
        """CO2 and savings of saved trips per vehicle type."""
        trips = await self.trips.saved_since(period_start(period), vehicle_type=vehicle_type)
        rows, total_co2, total_saved = emissions_by_vehicle(trips, self.baseline)
        logger.info(f"Emission analytics over {len(trips)} saved trips ({period})")
        return EmissionAnalytics(
            period=period,
            vehicle_type=vehicle_type,
            emissions_by_vehicle=rows,
            total_co2=_kg(total_co2),
            total_saved=_kg(total_saved),
        )
