"""
Service tests for user preferences.
"""

from decimal import Decimal

import pytest

from carp.core.exceptions import ConstraintViolation
from carp.pydantic_models.user_preferences import UserPreferencesUpdate
from carp.services.users.preferences_service import UserPreferencesService
from carp.test.factory.user import UserFactory


@pytest.mark.asyncio
async def test_preferences_created_with_defaults_on_first_read(test_db_session):
    user = await UserFactory()
    service = UserPreferencesService(test_db_session)

    preferences = await service.get_preferences(user.id)

    assert preferences.user_id == user.id
    assert preferences.max_walking_distance_km == Decimal("2.0")
    assert preferences.max_cycling_distance_km == Decimal("10.0")
    assert preferences.default_travel_mode == "driving"
    assert (await service.get_preferences(user.id)).id == preferences.id


@pytest.mark.asyncio
async def test_create_preferences_twice_is_rejected(test_db_session):
    user = await UserFactory()
    service = UserPreferencesService(test_db_session)

    await service.create_preferences(user.id)

    with pytest.raises(ConstraintViolation):
        await service.create_preferences(user.id)


@pytest.mark.asyncio
async def test_update_preferences(test_db_session):
    user = await UserFactory()
    service = UserPreferencesService(test_db_session)

    preferences = await service.update_preferences(
        user.id,
        UserPreferencesUpdate(
            avoid_tolls=True, default_travel_mode="cycling", max_cycling_distance_km=25
        ),
    )

    assert preferences.avoid_tolls is True
    assert preferences.default_travel_mode == "cycling"
    assert preferences.max_cycling_distance_km == Decimal("25")
    assert preferences.max_walking_distance_km == Decimal("2.0")
