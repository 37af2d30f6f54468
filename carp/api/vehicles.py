"""
Vehicles API router.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.dependencies import get_current_user, get_db_session
from carp.database.schemas import UserDBModel
from carp.pydantic_models.vehicle import (
    EmissionEstimate,
    EmissionEstimateRequest,
    VehicleCreate,
    VehiclePydModel,
    VehicleUpdate,
)
from carp.services.vehicles.vehicle_service import VehicleService

router = APIRouter(
    prefix="/api/v1/vehicles",
    tags=["Vehicles"],
)

logger = logging.getLogger(__name__)


@router.get("/", response_model=list[VehiclePydModel])
async def list_vehicles(
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """List the caller's active vehicles, default first."""
    return await VehicleService(session).list_vehicles(user.id)


@router.post("/", response_model=VehiclePydModel, status_code=status.HTTP_201_CREATED)
async def add_vehicle(
    payload: VehicleCreate,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    service = VehicleService(session)
    vehicle = await service.add_vehicle(user.id, payload)
    return await service.to_pyd_model(vehicle)


@router.post("/calculate-emissions", response_model=EmissionEstimate)
async def calculate_emissions(
    payload: EmissionEstimateRequest,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Estimate the CO2 (kg) a vehicle would emit over a distance."""
    return await VehicleService(session).estimate_emissions(
        user.id, payload.vehicle_id, payload.distance_km
    )


@router.get("/{vehicle_id}", response_model=VehiclePydModel)
async def get_vehicle(
    vehicle_id: int,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    service = VehicleService(session)
    return await service.to_pyd_model(await service.get_vehicle(user.id, vehicle_id))


@router.put("/{vehicle_id}", response_model=VehiclePydModel)
async def update_vehicle(
    vehicle_id: int,
    payload: VehicleUpdate,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    service = VehicleService(session)
    vehicle = await service.update_vehicle(user.id, vehicle_id, payload)
    return await service.to_pyd_model(vehicle)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: int,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    await VehicleService(session).delete_vehicle(user.id, vehicle_id)


@router.post("/{vehicle_id}/default", response_model=VehiclePydModel)
async def set_default_vehicle(
    vehicle_id: int,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Make the vehicle the caller's default, clearing the previous default."""
    service = VehicleService(session)
    vehicle = await service.set_default(user.id, vehicle_id)
    return await service.to_pyd_model(vehicle)
