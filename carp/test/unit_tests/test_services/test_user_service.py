"""
Service tests for user accounts and personal statistics.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from carp.core.exceptions import NotFound
from carp.services.users.user_service import UserService
from carp.test.factory.emission_factor import EmissionFactorFactory
from carp.test.factory.trip import PendingTripFactory, TripFactory
from carp.test.factory.user import UserFactory
from carp.test.factory.vehicle import VehicleFactory


@pytest.mark.asyncio
async def test_stats_for_user_without_trips(test_db_session):
    user = await UserFactory()

    stats = await UserService(test_db_session).get_stats(user.id)

    assert stats.total_trips == 0
    assert stats.total_co2 == 0
    assert stats.average_eco_rating == 0


@pytest.mark.asyncio
async def test_stats_only_count_own_trips(test_db_session):
    user = await UserFactory()
    other = await UserFactory()
    await EmissionFactorFactory()
    await TripFactory(user_id=user.id)
    await TripFactory(
        user_id=user.id,
        travel_mode="walking",
        distance_km=Decimal("5"),
        co2_emissions=Decimal("0"),
        emission_factor_g_per_km=Decimal("0"),
        fuel_type=None,
        vehicle_type=None,
    )
    await PendingTripFactory(user_id=user.id)
    await TripFactory(user_id=other.id, co2_emissions=Decimal("50.00"))

    stats = await UserService(test_db_session).get_stats(user.id)

    assert stats.total_trips == 3
    assert stats.total_distance == pytest.approx(205)
    assert stats.total_co2 == pytest.approx(12.0)
    assert stats.co2_saved == pytest.approx(0.6)
    assert stats.eco_trips == 2


@pytest.mark.asyncio
async def test_dashboard(test_db_session):
    user = await UserFactory()
    await TripFactory(user_id=user.id, created_at=datetime(2024, 1, 10))
    await TripFactory(user_id=user.id, created_at=datetime(2024, 2, 10))
    await TripFactory(user_id=user.id, travel_mode="transit", created_at=datetime(2024, 2, 11))

    dashboard = await UserService(test_db_session).get_dashboard(user.id)

    assert dashboard.stats.total_trips == 3
    assert [m.month for m in dashboard.monthly_emissions] == ["2024-01", "2024-02"]
    assert [(m.travel_mode, m.trips) for m in dashboard.mode_distribution] == [
        ("driving", 2),
        ("transit", 1),
    ]


@pytest.mark.asyncio
async def test_delete_account_removes_owned_rows(test_db_session):
    user = await UserFactory()
    vehicle = await VehicleFactory(user_id=user.id, is_default=True)
    trip = await TripFactory(user_id=user.id, vehicle_id=vehicle.id)
    service = UserService(test_db_session)

    await service.delete_account(user.id)

    with pytest.raises(NotFound):
        await service.get_user(user.id)
    assert await service.trips.get_by_id(trip.id) is None
