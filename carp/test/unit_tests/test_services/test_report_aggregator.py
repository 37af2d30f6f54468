"""
Service tests for period reports, carbon savings, trends and leaderboards.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from carp.services.aggregators.report_aggregator import (
    AdminAnalyticsAggregator,
    LeaderboardAggregator,
    bucket_key,
    carbon_savings,
    count_by_bucket,
    emissions_by_vehicle,
    leaderboard,
    monthly_trends,
    months_start,
    period_emissions,
)
from carp.test.factory.trip import TripFactory
from carp.test.factory.user import UserFactory
from carp.utils.constants import EmissionsStatus, LeaderboardType, UserStatus


def trip(
    id=1,
    user_id=1,
    distance="100",
    co2="12.00",
    travel_mode="driving",
    vehicle_type="car",
    fuel_type="gasoline",
    created_at=datetime(2024, 1, 15, 10),
):
    return SimpleNamespace(
        id=id,
        user_id=user_id,
        distance_km=Decimal(distance),
        co2_emissions=None if co2 is None else Decimal(co2),
        emissions_status=(
            EmissionsStatus.PENDING if co2 is None else EmissionsStatus.CALCULATED
        ),
        emission_factor_g_per_km=Decimal("120.0"),
        travel_mode=travel_mode,
        vehicle_type=vehicle_type,
        fuel_type=fuel_type,
        created_at=created_at,
    )


def walk(distance="5", **kwargs):
    return trip(
        distance=distance,
        co2="0",
        travel_mode="walking",
        vehicle_type=None,
        fuel_type=None,
        **kwargs,
    )


def test_period_emissions():
    trips = [
        trip(id=1, created_at=datetime(2024, 1, 15, 10)),
        trip(id=2, distance="50", co2="6.00", created_at=datetime(2024, 1, 15, 18)),
        walk(id=3, created_at=datetime(2024, 1, 16, 8)),
        trip(id=4, distance="20", co2=None, created_at=datetime(2024, 1, 16, 9)),
    ]

    stats, daily = period_emissions(trips)

    assert stats.trip_count == 4
    assert stats.total_distance == pytest.approx(175.0)
    # pending trips have no CO2 figure
    assert stats.total_co2 == pytest.approx(18.0)
    assert stats.average_co2_per_trip == pytest.approx(6.0)
    assert stats.max_co2 == pytest.approx(12.0)
    assert stats.min_co2 == 0
    assert [(d.date, d.trips, d.total_co2) for d in daily] == [
        ("2024-01-15", 2, 18.0),
        ("2024-01-16", 2, 0.0),
    ]


def test_period_emissions_without_trips():
    stats, daily = period_emissions([])
    assert stats.trip_count == 0
    assert stats.total_co2 == 0
    assert stats.average_co2_per_trip == 0
    assert daily == []


def test_carbon_savings_breakdown():
    trips = [
        walk(id=1, distance="5"),
        trip(id=2, distance="10", co2="0", travel_mode="cycling", vehicle_type=None, fuel_type=None),
        trip(id=3, distance="35.8", co2="2.86", travel_mode="transit", vehicle_type="bus", fuel_type="diesel"),
        trip(id=4, co2="5.00", fuel_type="electric"),
        # gasoline driving is not a greener choice
        trip(id=5),
        # pending trips have nothing to compare yet
        trip(id=6, co2=None, fuel_type="hybrid"),
    ]

    savings = carbon_savings(trips)

    assert savings.savings_breakdown.walking == pytest.approx(0.60)
    assert savings.savings_breakdown.cycling == pytest.approx(1.20)
    # 35.8 km at 120 g/km is 4.30 kg against 2.86 kg by bus
    assert savings.savings_breakdown.transit == pytest.approx(1.44)
    assert savings.savings_breakdown.electric == pytest.approx(7.00)
    assert savings.total_co2_saved == pytest.approx(10.24)
    assert savings.trips_analyzed == 4
    assert savings.equivalent_trees_planted == 0


def test_carbon_savings_categories_are_floored_at_zero():
    savings = carbon_savings(
        [
            trip(id=1, distance="10", co2="5.00", travel_mode="transit", vehicle_type="bus"),
            walk(id=2, distance="250"),
        ]
    )
    assert savings.savings_breakdown.transit == 0
    assert savings.total_co2_saved == pytest.approx(30.0)
    # one tree absorbs about 25 kg a year
    assert savings.equivalent_trees_planted == 1


def test_carbon_savings_uses_configured_baseline():
    savings = carbon_savings([walk(distance="100")], baseline=Decimal("150"))
    assert savings.total_co2_saved == pytest.approx(15.0)


def test_monthly_trends():
    trips = [
        trip(id=1, created_at=datetime(2024, 1, 5)),
        walk(id=2, created_at=datetime(2024, 1, 20)),
        trip(id=3, distance="35.8", co2="2.86", travel_mode="transit", created_at=datetime(2024, 2, 1)),
    ]

    monthly, modes = monthly_trends(trips)

    assert [(m.month, m.trips, m.eco_trips) for m in monthly] == [
        ("2024-01", 2, 1),
        ("2024-02", 1, 0),
    ]
    assert monthly[0].total_distance == pytest.approx(105.0)
    assert monthly[0].total_co2 == pytest.approx(12.0)
    assert [(m.month, m.travel_mode, m.trips) for m in modes] == [
        ("2024-01", "driving", 1),
        ("2024-01", "walking", 1),
        ("2024-02", "transit", 1),
    ]


@pytest.mark.parametrize(
    "months, today, expected",
    [
        (3, date(2024, 2, 10), datetime(2023, 12, 1)),
        (1, date(2024, 5, 31), datetime(2024, 5, 1)),
        (12, date(2024, 12, 1), datetime(2024, 1, 1)),
    ],
)
def test_months_start(months, today, expected):
    assert months_start(months, today) == expected


@pytest.mark.parametrize(
    "moment, group_by, expected",
    [
        (datetime(2024, 1, 3, 15), "day", "2024-01-03"),
        (datetime(2024, 1, 3, 15), "week", "2024-W01"),
        (datetime(2021, 1, 1), "week", "2020-W53"),
        (datetime(2024, 1, 3, 15), "month", "2024-01"),
    ],
)
def test_bucket_key(moment, group_by, expected):
    assert bucket_key(moment, group_by) == expected


def test_count_by_bucket_counts_distinct_ids():
    counts = count_by_bucket(
        [
            (datetime(2024, 1, 3, 9), 1),
            (datetime(2024, 1, 3, 18), 1),
            (datetime(2024, 1, 3, 20), 2),
            (datetime(2024, 1, 4, 8), 1),
        ],
        "day",
    )
    assert [(c.period, c.count) for c in counts] == [("2024-01-03", 2), ("2024-01-04", 1)]


def test_emissions_by_vehicle():
    trips = [
        trip(id=1),
        trip(id=2, distance="50", co2="6.00"),
        trip(id=3, co2="25.00", vehicle_type="truck", fuel_type="diesel"),
        walk(id=4),
        trip(id=5, co2=None, vehicle_type="van"),
    ]

    rows, total_co2, total_saved = emissions_by_vehicle(trips)

    assert [(r.vehicle_type, r.trips) for r in rows] == [
        ("truck", 1),
        ("car", 2),
        ("walking", 1),
    ]
    car = rows[1]
    assert car.total_co2 == pytest.approx(18.0)
    assert car.average_co2 == pytest.approx(9.0)
    assert rows[0].total_saved == 0
    assert rows[2].total_saved == pytest.approx(0.60)
    assert total_co2 == Decimal("43.00")
    # the truck's extra 13 kg outweighs the walk
    assert total_saved == 0


def leaderboard_fixture():
    users = [
        SimpleNamespace(id=1, first_name="Ada", last_name="A"),
        SimpleNamespace(id=2, first_name="Bo", last_name="B"),
        SimpleNamespace(id=3, first_name="Cy", last_name="C"),
    ]
    trips = (
        [walk(id=i, user_id=1) for i in range(1, 4)]
        + [trip(id=i, user_id=1) for i in range(4, 6)]
        + [walk(id=i, user_id=2) for i in range(6, 11)]
        + [walk(id=i, user_id=3, distance="50") for i in range(11, 13)]
    )
    return users, trips


def test_leaderboard_eco_friendly():
    users, trips = leaderboard_fixture()

    entries = leaderboard(users, trips, kind=LeaderboardType.ECO_FRIENDLY)

    # Cy has fewer than five trips
    assert [e.user_id for e in entries] == [2, 1]
    assert entries[0].eco_share == pytest.approx(1.0)
    assert entries[1].eco_share == pytest.approx(0.6)
    assert entries[1].total_trips == 5
    assert entries[1].eco_trips == 3


def test_leaderboard_carbon_saved():
    users, trips = leaderboard_fixture()

    entries = leaderboard(users, trips, kind=LeaderboardType.CARBON_SAVED, limit=2)

    assert [e.user_id for e in entries] == [3, 2]
    assert entries[0].co2_saved == pytest.approx(12.0)
    assert entries[1].co2_saved == pytest.approx(3.0)


@pytest.mark.asyncio
async def test_leaderboard_only_ranks_active_users(test_db_session):
    active = await UserFactory()
    suspended = await UserFactory(status=UserStatus.SUSPENDED.value)
    for user in (active, suspended):
        await TripFactory.create_batch(
            5,
            user_id=user.id,
            travel_mode="walking",
            co2_emissions=Decimal("0"),
            emission_factor_g_per_km=Decimal("0"),
            vehicle_type=None,
            fuel_type=None,
        )

    board = await LeaderboardAggregator(test_db_session).build(LeaderboardType.ECO_FRIENDLY)

    assert board.type is LeaderboardType.ECO_FRIENDLY
    assert [e.user_id for e in board.entries] == [active.id]


@pytest.mark.asyncio
async def test_admin_user_analytics(test_db_session):
    first = await UserFactory()
    second = await UserFactory()
    await TripFactory.create_batch(2, user_id=first.id, is_saved=True)
    await TripFactory(user_id=second.id, is_saved=False)
    today = datetime.utcnow().strftime("%Y-%m-%d")

    analytics = await AdminAnalyticsAggregator(test_db_session).user_analytics("30d", "day")

    assert [(c.period, c.count) for c in analytics.user_registrations] == [(today, 2)]
    # only saved trips make a user active
    assert [(c.period, c.count) for c in analytics.active_users] == [(today, 1)]


@pytest.mark.asyncio
async def test_admin_emission_analytics(test_db_session):
    user = await UserFactory()
    await TripFactory(user_id=user.id, is_saved=True)
    await TripFactory(
        user_id=user.id,
        is_saved=True,
        vehicle_type="truck",
        fuel_type="diesel",
        co2_emissions=Decimal("25.00"),
    )
    await TripFactory(user_id=user.id, is_saved=False, co2_emissions=Decimal("99.00"))
    await TripFactory(
        user_id=user.id,
        is_saved=True,
        created_at=datetime.utcnow() - timedelta(days=40),
    )
    aggregator = AdminAnalyticsAggregator(test_db_session)

    analytics = await aggregator.emission_analytics("30d")
    assert [(r.vehicle_type, r.trips) for r in analytics.emissions_by_vehicle] == [
        ("truck", 1),
        ("car", 1),
    ]
    assert analytics.total_co2 == pytest.approx(37.0)

    analytics = await aggregator.emission_analytics("90d", vehicle_type="car")
    assert analytics.vehicle_type == "car"
    assert [(r.vehicle_type, r.trips) for r in analytics.emissions_by_vehicle] == [("car", 2)]
    assert analytics.total_co2 == pytest.approx(24.0)
    assert analytics.total_saved == 0
