"""
Vehicle management.

Each user has at most one default vehicle. Changing the default locks the
user's vehicle rows, clears every default flag and sets the new one inside a
single transaction, so concurrent requests serialize and the last commit wins.
"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.exceptions import ConstraintViolation, InvalidInput, NoFactorAvailable, NotFound
from carp.database.repositories import VehicleRepository
from carp.database.schemas import VehicleDBModel
from carp.pydantic_models.vehicle import (
    EmissionEstimate,
    VehicleCreate,
    VehiclePydModel,
    VehicleUpdate,
)
from carp.services.calculators.trip_emission_calculator import TripEmissionCalculator
from carp.services.calculators.unit_converter import UnitConverter
from carp.services.resolvers.factor_resolver import FactorResolver

logger = logging.getLogger(__name__)


class VehicleService:
    """Vehicle CRUD and default-vehicle handling for one user at a time."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = VehicleRepository(session)
        self.resolver = FactorResolver(session)

    async def get_vehicle(self, user_id: int, vehicle_id: int) -> VehicleDBModel:
        vehicle = await self.repo.get_for_user(vehicle_id, user_id)
        if vehicle is None:
            raise NotFound("Vehicle", vehicle_id)
        return vehicle

    async def co2_per_km(self, vehicle: VehicleDBModel) -> Optional[Decimal]:
        """kg CO2 per km of the vehicle's resolved factor, None when uncovered."""
        try:
            resolution = await self.resolver.resolve(vehicle)
        except NoFactorAvailable:
            return None
        return UnitConverter.grams_to_kg(
            UnitConverter.normalize_number(resolution.factor.factor_g_per_km)
        )

    async def to_pyd_model(self, vehicle: VehicleDBModel) -> VehiclePydModel:
        model = VehiclePydModel.model_validate(vehicle)
        model.co2_per_km = await self.co2_per_km(vehicle)
        return model

    async def list_vehicles(self, user_id: int) -> list[VehiclePydModel]:
        """Active vehicles of a user, default first."""
        vehicles = await self.repo.list_for_user(user_id)
        return [await self.to_pyd_model(vehicle) for vehicle in vehicles]

    async def add_vehicle(self, user_id: int, data: VehicleCreate) -> VehicleDBModel:
        fields = data.model_dump(exclude={"is_default"})
        vehicle = await self.repo.create(
            user_id=user_id,
            is_default=False,
            **{key: getattr(value, "value", value) for key, value in fields.items()},
        )
        if data.is_default:
            await self._make_default(user_id, vehicle.id)
        await self._commit()
        await self.session.refresh(vehicle)
        logger.info(f"User {user_id} added vehicle {vehicle.id} ({vehicle.name})")
        return vehicle

    async def update_vehicle(
        self, user_id: int, vehicle_id: int, data: VehicleUpdate
    ) -> VehicleDBModel:
        await self.get_vehicle(user_id, vehicle_id)
        changes = {
            key: getattr(value, "value", value)
            for key, value in data.model_dump(exclude_unset=True).items()
        }
        if changes.get("is_active") is False:
            # an inactive vehicle cannot stay the default
            changes["is_default"] = False
        if not changes:
            return await self.get_vehicle(user_id, vehicle_id)

        vehicle = await self.repo.update(vehicle_id, **changes)
        await self._commit()
        logger.info(f"User {user_id} updated vehicle {vehicle_id}: {sorted(changes)}")
        return vehicle

    async def delete_vehicle(self, user_id: int, vehicle_id: int) -> None:
        """Delete a vehicle. Its trips keep their snapshot with vehicle_id cleared."""
        await self.get_vehicle(user_id, vehicle_id)
        await self.repo.delete(vehicle_id)
        await self._commit()
        logger.info(f"User {user_id} deleted vehicle {vehicle_id}")

    async def set_default(self, user_id: int, vehicle_id: int) -> VehicleDBModel:
        """
        Make a vehicle the user's only default.

        Raises:
            NotFound: the vehicle does not belong to the user
            InvalidInput: the vehicle is inactive
            ConstraintViolation: another default was committed concurrently
        """
        vehicle = await self.get_vehicle(user_id, vehicle_id)
        if not vehicle.is_active:
            raise InvalidInput("vehicle_id", "inactive vehicles cannot be the default")

        await self._make_default(user_id, vehicle_id)
        await self._commit()
        await self.session.refresh(vehicle)
        logger.info(f"User {user_id} set vehicle {vehicle_id} as default")
        return vehicle

    async def _make_default(self, user_id: int, vehicle_id: int) -> None:
        await self.repo.lock_user_vehicles(user_id)
        try:
            await self.repo.clear_default(user_id)
            await self.repo.update(vehicle_id, is_default=True)
        except IntegrityError as e:
            await self.session.rollback()
            raise ConstraintViolation(
                "A user can have only one default vehicle", field="is_default"
            ) from e

    async def get_default_vehicle(self, user_id: int) -> Optional[VehicleDBModel]:
        return await self.repo.get_default_for_user(user_id)

    async def estimate_emissions(
        self, user_id: int, vehicle_id: int, distance_km
    ) -> EmissionEstimate:
        """
        CO2 the vehicle would emit over a distance, without recording a trip.

        Raises:
            NotFound: the vehicle does not belong to the user
            InvalidInput: invalid distance
            NoFactorAvailable: no active factor covers the vehicle
        """
        vehicle = await self.get_vehicle(user_id, vehicle_id)
        distance = TripEmissionCalculator.validate_distance(distance_km)
        resolution = await self.resolver.resolve(vehicle)
        return EmissionEstimate(
            vehicle_id=vehicle.id,
            distance_km=distance,
            emission_factor_id=resolution.factor.id,
            factor_g_per_km=resolution.factor.factor_g_per_km,
            co2_emissions=TripEmissionCalculator.compute_emissions(
                distance, resolution.factor
            ),
            resolution_method=resolution.method,
        )

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Vehicle write rejected by a constraint: {e}")
            raise ConstraintViolation(
                "A user can have only one default vehicle", field="is_default"
            ) from e
