"""
Service tests for trip recording and pending emissions.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from carp.core.exceptions import InvalidInput, NotFound
from carp.pydantic_models.trip import TripCreate, TripUpdate
from carp.services.stores.emission_factor_store import EmissionFactorStore
from carp.services.trips.trip_service import TripService
from carp.services.vehicles.vehicle_service import VehicleService
from carp.test.factory.emission_factor import (
    DieselBusFactorFactory,
    EmissionFactorFactory,
    LargeGasolineCarFactorFactory,
)
from carp.test.factory.trip import PendingTripFactory, TripFactory
from carp.test.factory.user import UserFactory
from carp.test.factory.vehicle import VehicleFactory
from carp.utils.constants import EmissionsStatus


def trip_data(**overrides):
    data = {
        "origin": "New York, NY",
        "destination": "Boston, MA",
        "distance_km": Decimal("100"),
        "duration_minutes": 240,
    }
    data.update(overrides)
    return TripCreate(**data)


@pytest.mark.asyncio
async def test_driving_trip_uses_default_vehicle(test_db_session):
    user = await UserFactory()
    factor = await EmissionFactorFactory()
    vehicle = await VehicleFactory(user_id=user.id, is_default=True)

    trip = await TripService(test_db_session).create_trip(user.id, trip_data())

    assert trip.vehicle_id == vehicle.id
    assert trip.co2_emissions == Decimal("12.00")
    assert trip.emissions_status == EmissionsStatus.CALCULATED
    assert trip.emission_factor_id == factor.id
    assert trip.emission_factor_g_per_km == Decimal("120.0")
    assert trip.vehicle_type == "car"
    assert trip.fuel_type == "gasoline"
    assert trip.calculation_metadata["method"] == "single_candidate"
    assert Decimal(trip.calculation_metadata["vehicle_profile"]["engine_size"]) == Decimal("2.5")


@pytest.mark.asyncio
async def test_explicit_vehicle_overrides_default(test_db_session):
    user = await UserFactory()
    await EmissionFactorFactory()
    await LargeGasolineCarFactorFactory()
    await VehicleFactory(user_id=user.id, is_default=True)
    suv = await VehicleFactory(user_id=user.id, engine_size=Decimal("4.0"))

    trip = await TripService(test_db_session).create_trip(
        user.id, trip_data(vehicle_id=suv.id)
    )

    assert trip.vehicle_id == suv.id
    assert trip.co2_emissions == Decimal("15.00")
    assert trip.calculation_metadata["method"] == "size_bracket_match"


@pytest.mark.asyncio
async def test_driving_trip_without_vehicle_is_rejected(test_db_session):
    user = await UserFactory()
    await EmissionFactorFactory()

    with pytest.raises(InvalidInput) as exc_info:
        await TripService(test_db_session).create_trip(user.id, trip_data())
    assert exc_info.value.field == "vehicle_id"


@pytest.mark.asyncio
async def test_trip_with_someone_elses_vehicle_is_rejected(test_db_session):
    owner = await UserFactory()
    other = await UserFactory()
    vehicle = await VehicleFactory(user_id=owner.id)

    with pytest.raises(NotFound):
        await TripService(test_db_session).create_trip(
            other.id, trip_data(vehicle_id=vehicle.id)
        )


@pytest.mark.asyncio
async def test_trip_with_inactive_vehicle_is_rejected(test_db_session):
    user = await UserFactory()
    await EmissionFactorFactory()
    retired = await VehicleFactory(user_id=user.id, is_active=False)
    service = TripService(test_db_session)

    with pytest.raises(InvalidInput) as exc_info:
        await service.create_trip(user.id, trip_data(vehicle_id=retired.id))
    assert exc_info.value.field == "vehicle_id"

    _, total = await service.list_trips(user.id)
    assert total == 0


@pytest.mark.asyncio
async def test_trip_distance_is_stored_rounded_and_used_rounded(test_db_session):
    user = await UserFactory()
    await EmissionFactorFactory(factor_g_per_km=Decimal("2000"))
    await VehicleFactory(user_id=user.id, is_default=True)
    service = TripService(test_db_session)

    # 1.004 km x 2000 g/km would give 2.01 kg; the stored 1.00 km gives 2.00 kg
    trip = await service.create_trip(user.id, trip_data(distance_km=Decimal("1.004")))
    assert trip.distance_km == Decimal("1.00")
    assert trip.co2_emissions == Decimal("2.00")

    trip = await service.create_trip(
        user.id, trip_data(distance_km=Decimal("33.333333"))
    )
    assert trip.distance_km == Decimal("33.33")
    assert trip.co2_emissions == Decimal("66.66")


@pytest.mark.asyncio
async def test_trip_longer_than_a_row_holds_is_rejected(test_db_session):
    user = await UserFactory()

    with pytest.raises(InvalidInput) as exc_info:
        await TripService(test_db_session).create_trip(
            user.id,
            trip_data(distance_km=Decimal("100000000"), travel_mode="walking"),
        )
    assert exc_info.value.field == "distance_km"


@pytest.mark.asyncio
async def test_trip_emissions_larger_than_a_row_holds_are_rejected(test_db_session):
    user = await UserFactory()
    await EmissionFactorFactory(factor_g_per_km=Decimal("400"))
    await VehicleFactory(user_id=user.id, is_default=True)
    service = TripService(test_db_session)

    # 5,000,000 km x 400 g/km = 2,000,000 kg
    with pytest.raises(InvalidInput) as exc_info:
        await service.create_trip(user.id, trip_data(distance_km=Decimal("5000000")))
    assert exc_info.value.field == "distance_km"

    _, total = await service.list_trips(user.id)
    assert total == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("distance", [Decimal("-1"), Decimal("-0.5")])
async def test_invalid_distance_is_rejected(test_db_session, distance):
    user = await UserFactory()

    with pytest.raises(InvalidInput) as exc_info:
        await TripService(test_db_session).create_trip(
            user.id, trip_data(distance_km=distance, travel_mode="walking")
        )
    assert exc_info.value.field == "distance_km"


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", ["walking", "cycling"])
async def test_zero_emission_modes(test_db_session, mode):
    user = await UserFactory()
    await VehicleFactory(user_id=user.id, is_default=True)

    trip = await TripService(test_db_session).create_trip(
        user.id, trip_data(distance_km=Decimal("13.2"), travel_mode=mode)
    )

    assert trip.co2_emissions == Decimal("0")
    assert trip.emission_factor_g_per_km == Decimal("0")
    assert trip.vehicle_id is None
    assert trip.emissions_status == EmissionsStatus.CALCULATED
    assert trip.calculation_metadata == {"method": "zero_emission_mode"}


@pytest.mark.asyncio
async def test_transit_trip_uses_bus_factor(test_db_session):
    user = await UserFactory()
    bus = await DieselBusFactorFactory()

    trip = await TripService(test_db_session).create_trip(
        user.id, trip_data(distance_km=Decimal("35.8"), travel_mode="transit")
    )

    assert trip.vehicle_id is None
    assert trip.vehicle_type == "bus"
    assert trip.fuel_type == "diesel"
    assert trip.emission_factor_id == bus.id
    assert trip.co2_emissions == Decimal("2.86")


@pytest.mark.asyncio
async def test_uncovered_vehicle_makes_trip_pending(test_db_session):
    user = await UserFactory()
    van = await VehicleFactory(
        user_id=user.id, vehicle_type="van", fuel_type="hybrid", is_default=True
    )

    trip = await TripService(test_db_session).create_trip(user.id, trip_data())

    assert trip.vehicle_id == van.id
    assert trip.co2_emissions is None
    assert trip.emissions_status == EmissionsStatus.PENDING
    assert trip.is_pending
    assert trip.calculation_metadata["reason"] == "no_active_factor"
    assert trip.calculation_metadata["vehicle_profile"]["vehicle_type"] == "van"


@pytest.mark.asyncio
async def test_resolve_pending_fills_covered_trips(test_db_session):
    user = await UserFactory()
    pending = await PendingTripFactory(user_id=user.id)
    uncovered = await PendingTripFactory(
        user_id=user.id,
        vehicle_type="truck",
        fuel_type="cng",
        calculation_metadata={},
    )
    service = TripService(test_db_session)

    result = await service.resolve_pending()
    assert result.resolved == 0
    assert result.still_pending == 2

    store = EmissionFactorStore(test_db_session)
    factor = await store.upsert(
        {"vehicle_type": "van", "fuel_type": "hybrid", "factor_g_per_km": "95"}
    )
    await test_db_session.commit()

    result = await service.resolve_pending(user.id)
    assert result.resolved == 1
    assert result.still_pending == 1

    trip = await service.get_trip(user.id, pending.id)
    await test_db_session.refresh(trip)
    assert trip.emissions_status == EmissionsStatus.CALCULATED
    assert trip.co2_emissions == Decimal("9.50")
    assert trip.emission_factor_id == factor.id
    assert trip.calculation_metadata["resolved_later"] is True

    still = await service.get_trip(user.id, uncovered.id)
    await test_db_session.refresh(still)
    assert still.co2_emissions is None


@pytest.mark.asyncio
async def test_resolve_pending_keeps_unstorable_trips_pending(test_db_session):
    user = await UserFactory()
    await PendingTripFactory(user_id=user.id, distance_km=Decimal("5000000.00"))
    await EmissionFactorFactory(
        vehicle_type="van", fuel_type="hybrid", factor_g_per_km=Decimal("400")
    )

    result = await TripService(test_db_session).resolve_pending()

    assert result.resolved == 0
    assert result.still_pending == 1


@pytest.mark.asyncio
async def test_resolve_pending_never_touches_calculated_trips(test_db_session):
    user = await UserFactory()
    calculated = await TripFactory(user_id=user.id, co2_emissions=Decimal("7.00"))
    await EmissionFactorFactory(factor_g_per_km=Decimal("999"))
    service = TripService(test_db_session)

    result = await service.resolve_pending()

    assert result.resolved == 0
    trip = await service.get_trip(user.id, calculated.id)
    assert trip.co2_emissions == Decimal("7.00")


@pytest.mark.asyncio
async def test_update_trip_only_changes_bookkeeping(test_db_session):
    user = await UserFactory()
    created = await TripFactory(user_id=user.id)
    service = TripService(test_db_session)
    planned = datetime(2024, 3, 1, 9, 30)

    trip = await service.update_trip(
        user.id, created.id, TripUpdate(is_saved=True, planned_date=planned)
    )

    assert trip.is_saved is True
    assert trip.planned_date == planned
    assert trip.co2_emissions == Decimal("12.00")


@pytest.mark.asyncio
async def test_deleting_vehicle_keeps_trip_snapshot(test_db_session):
    user = await UserFactory()
    await EmissionFactorFactory()
    vehicle = await VehicleFactory(user_id=user.id, is_default=True)
    service = TripService(test_db_session)
    trip = await service.create_trip(user.id, trip_data())

    await VehicleService(test_db_session).delete_vehicle(user.id, vehicle.id)

    await test_db_session.refresh(trip)
    assert trip.vehicle_id is None
    assert trip.vehicle_type == "car"
    assert trip.fuel_type == "gasoline"
    assert trip.co2_emissions == Decimal("12.00")


@pytest.mark.asyncio
async def test_list_trips_filters_and_paginates(test_db_session):
    user = await UserFactory()
    other = await UserFactory()
    await TripFactory.create_batch(3, user_id=user.id)
    await TripFactory(user_id=user.id, travel_mode="walking", co2_emissions=Decimal("0"))
    await TripFactory(user_id=other.id)
    service = TripService(test_db_session)

    trips, total = await service.list_trips(user.id)
    assert total == 4
    assert len(trips) == 4

    trips, total = await service.list_trips(user.id, travel_mode="walking")
    assert total == 1

    trips, total = await service.list_trips(user.id, skip=1, limit=2)
    assert total == 4
    assert len(trips) == 2


@pytest.mark.asyncio
async def test_delete_trip(test_db_session):
    user = await UserFactory()
    trip = await TripFactory(user_id=user.id)
    service = TripService(test_db_session)

    await service.delete_trip(user.id, trip.id)

    with pytest.raises(NotFound):
        await service.get_trip(user.id, trip.id)
