"""
Trip recording.

A trip's CO2 is computed once, when the trip is created, and stored together
with a snapshot of the factor and vehicle profile it was computed from. When
no active factor covers the profile the trip is stored as pending and filled
later by ``resolve_pending``; calculated trips are never recomputed.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.exceptions import InvalidInput, NoFactorAvailable, NotFound
from carp.database.repositories import TripRepository, VehicleRepository
from carp.database.schemas import TripDBModel
from carp.pydantic_models.trip import ResolvePendingResult, TripCreate, TripUpdate
from carp.services.calculators.trip_emission_calculator import TripEmissionCalculator
from carp.services.resolvers.factor_resolver import FactorResolver, VehicleProfile
from carp.utils.constants import (
    TRANSIT_PROFILE,
    ZERO_EMISSION_MODES,
    EmissionsStatus,
    TravelMode,
)

logger = logging.getLogger(__name__)


class TripService:
    """Create, read and bookkeep trips of a user."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = TripRepository(session)
        self.vehicles = VehicleRepository(session)
        self.resolver = FactorResolver(session)

    async def _pick_vehicle(self, user_id: int, data: TripCreate):
        if data.vehicle_id is not None:
            vehicle = await self.vehicles.get_for_user(data.vehicle_id, user_id)
            if vehicle is None:
                raise NotFound("Vehicle", data.vehicle_id)
            if not vehicle.is_active:
                raise InvalidInput("vehicle_id", "inactive vehicles cannot record trips")
            return vehicle

        if data.travel_mode == TravelMode.DRIVING:
            vehicle = await self.vehicles.get_default_for_user(user_id)
            if vehicle is None:
                raise InvalidInput(
                    "vehicle_id",
                    "driving trips need a vehicle or a default vehicle",
                )
            return vehicle
        return None

    async def create_trip(self, user_id: int, data: TripCreate) -> TripDBModel:
        """
        Record a trip and freeze its emissions.

        walking and cycling trips are zero-emission. transit trips without a
        vehicle use the bus/diesel factor. driving trips use the given vehicle,
        else the user's default vehicle.

        Raises:
            InvalidInput: invalid or unstorable distance, an inactive vehicle, or a
                driving trip with no vehicle
            NotFound: vehicle_id does not belong to the user
        """
        distance = TripEmissionCalculator.validate_trip_distance(data.distance_km)
        travel_mode = TravelMode(data.travel_mode).value
        vehicle = await self._pick_vehicle(user_id, data)

        trip_data = data.model_dump(exclude={"vehicle_id", "travel_mode", "distance_km"})
        trip_data.update(
            user_id=user_id,
            vehicle_id=vehicle.id if vehicle is not None else None,
            travel_mode=travel_mode,
            distance_km=distance,
        )

        if travel_mode in ZERO_EMISSION_MODES:
            trip_data.update(
                co2_emissions=TripEmissionCalculator.compute_emissions(distance, 0),
                emissions_status=EmissionsStatus.CALCULATED,
                emission_factor_g_per_km=0,
                vehicle_type=None,
                fuel_type=None,
                calculation_metadata={"method": "zero_emission_mode"},
            )
        else:
            if vehicle is not None:
                profile = VehicleProfile.from_vehicle(vehicle)
            else:
                profile = VehicleProfile(*TRANSIT_PROFILE)
            trip_data.update(
                vehicle_type=profile.vehicle_type,
                fuel_type=profile.fuel_type,
                **await self._emissions_for(profile, distance),
            )

        trip = await self.repo.create(**trip_data)
        await self.session.commit()
        logger.info(
            f"User {user_id} recorded trip {trip.id}: {trip.distance_km} km, "
            f"{trip.co2_emissions} kg CO2 ({trip.emissions_status})"
        )
        return trip

    async def _emissions_for(self, profile: VehicleProfile, distance) -> dict:
        try:
            resolution = await self.resolver.resolve(profile)
        except NoFactorAvailable as e:
            logger.warning(f"Trip emissions pending: {e.message}")
            return {
                "co2_emissions": None,
                "emissions_status": EmissionsStatus.PENDING,
                "emission_factor_id": None,
                "emission_factor_g_per_km": None,
                "calculation_metadata": {
                    "method": None,
                    "reason": "no_active_factor",
                    "vehicle_profile": profile.to_dict(),
                },
            }

        return {
            "co2_emissions": TripEmissionCalculator.trip_emissions(
                distance, resolution.factor
            ),
            "emissions_status": EmissionsStatus.CALCULATED,
            "emission_factor_id": resolution.factor.id,
            "emission_factor_g_per_km": resolution.factor.factor_g_per_km,
            "calculation_metadata": {
                **resolution.to_metadata(),
                "vehicle_profile": profile.to_dict(),
            },
        }

    async def list_trips(
        self,
        user_id: int,
        travel_mode: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[TripDBModel], int]:
        return await self.repo.list_for_user(
            user_id, travel_mode=travel_mode, skip=skip, limit=limit
        )

    async def get_trip(self, user_id: int, trip_id: int) -> TripDBModel:
        trip = await self.repo.get_for_user(trip_id, user_id)
        if trip is None:
            raise NotFound("Trip", trip_id)
        return trip

    async def update_trip(
        self, user_id: int, trip_id: int, data: TripUpdate
    ) -> TripDBModel:
        """Update is_saved / planned_date. Emissions cannot be edited."""
        await self.get_trip(user_id, trip_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            return await self.get_trip(user_id, trip_id)
        trip = await self.repo.update(trip_id, **changes)
        await self.session.commit()
        return trip

    async def delete_trip(self, user_id: int, trip_id: int) -> None:
        await self.get_trip(user_id, trip_id)
        await self.repo.delete(trip_id)
        await self.session.commit()
        logger.info(f"User {user_id} deleted trip {trip_id}")

    async def resolve_pending(self, user_id: Optional[int] = None) -> ResolvePendingResult:
        """
        Compute emissions for pending trips now covered by an active factor.

        Args:
            user_id: Only this user's trips; None for every user

        Returns:
            How many trips were resolved and how many are still pending
        """
        resolved = 0
        still_pending = 0
        for trip in await self.repo.get_pending(user_id):
            metadata = trip.calculation_metadata or {}
            profile_data = metadata.get("vehicle_profile") or {
                "vehicle_type": trip.vehicle_type,
                "fuel_type": trip.fuel_type,
            }
            profile = VehicleProfile.from_dict(profile_data)
            try:
                resolution = await self.resolver.resolve(profile)
                co2 = TripEmissionCalculator.trip_emissions(
                    trip.distance_km, resolution.factor
                )
            except NoFactorAvailable:
                still_pending += 1
                continue
            except InvalidInput as e:
                logger.warning(f"Trip {trip.id} left pending: {e.message}")
                still_pending += 1
                continue

            filled = await self.repo.record_emissions(
                trip.id,
                co2_emissions=co2,
                emission_factor_id=resolution.factor.id,
                emission_factor_g_per_km=resolution.factor.factor_g_per_km,
                calculation_metadata={
                    **resolution.to_metadata(),
                    "vehicle_profile": profile.to_dict(),
                    "resolved_later": True,
                },
            )
            if filled:
                resolved += 1

        await self.session.commit()
        logger.info(f"Resolved {resolved} pending trips, {still_pending} still pending")
        return ResolvePendingResult(resolved=resolved, still_pending=still_pending)
