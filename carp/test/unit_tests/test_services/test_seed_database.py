"""
Service tests for database seeding.
"""

from decimal import Decimal

import pytest

from carp.database.repositories import (
    EmissionFactorRepository,
    TripRepository,
    UserRepository,
)
from carp.services.seed_database import ADMIN_USER, DatabaseSeeder
from carp.utils.constants import EmissionsStatus


@pytest.mark.asyncio
async def test_seed_all(test_db_session):
    async with DatabaseSeeder(session=test_db_session) as seeder:
        stats = await seeder.seed_all()

    assert stats == {
        "emission_factors": 19,
        "users": 1,
        "vehicles": 1,
        "trips": 5,
        "errors": [],
    }

    admin = await UserRepository(test_db_session).get_by_email(ADMIN_USER["email"])
    assert admin.is_admin

    trips = await TripRepository(test_db_session).all_for_user(admin.id)
    by_route = {(t.origin, t.destination, t.travel_mode): t for t in trips}
    assert all(t.emissions_status == EmissionsStatus.CALCULATED for t in trips)
    assert by_route[("New York, NY", "Boston, MA", "driving")].co2_emissions == Decimal("36.78")
    assert by_route[("Boston, MA", "Providence, RI", "driving")].co2_emissions == Decimal("9.26")
    assert by_route[("Newport, RI", "Providence, RI", "transit")].co2_emissions == Decimal("2.86")
    assert by_route[("Providence, RI", "Newport, RI", "walking")].co2_emissions == Decimal("0")
    assert by_route[("Providence, RI", "Warwick, RI", "cycling")].co2_emissions == Decimal("0")
    assert sorted(t.created_at.strftime("%Y-%m") for t in trips) == [
        "2024-01", "2024-01", "2024-01", "2024-02", "2024-02",
    ]


@pytest.mark.asyncio
async def test_seeding_is_idempotent(test_db_session):
    async with DatabaseSeeder(session=test_db_session) as seeder:
        await seeder.seed_all()
        stats = await seeder.seed_all()

    assert stats["emission_factors"] == 0
    assert stats["users"] == 0
    assert stats["vehicles"] == 0
    assert stats["trips"] == 0
    assert await EmissionFactorRepository(test_db_session).count() == 19


@pytest.mark.asyncio
async def test_seed_with_clear_and_skip_samples(test_db_session):
    async with DatabaseSeeder(session=test_db_session) as seeder:
        await seeder.seed_all()
        stats = await seeder.seed_all(clear_existing=True, skip_samples=True)

    assert stats["emission_factors"] == 19
    assert stats["users"] == 1
    assert stats["trips"] == 0
    assert await TripRepository(test_db_session).count() == 0


def test_missing_data_directory(tmp_path):
    with pytest.raises(ValueError):
        DatabaseSeeder(data_dir=tmp_path / "missing")
