"""
Emission Factors API router.

Read-only operations for emission factors. Admin writes live in the admin router.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.dependencies import Pagination, get_current_user, get_db_session, get_pagination
from carp.pydantic_models.emission_factor import EmissionFactorPydModel
from carp.services.stores.emission_factor_store import EmissionFactorStore
from carp.utils.constants import FuelType, VehicleType

router = APIRouter(
    prefix="/api/v1/factors",
    tags=["Emission Factors"],
    dependencies=[Depends(get_current_user)],
)

logger = logging.getLogger(__name__)


@router.get("/", response_model=list[EmissionFactorPydModel])
async def list_emission_factors(
    vehicle_type: VehicleType | None = None,
    fuel_type: FuelType | None = None,
    include_inactive: bool = False,
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List emission factors with optional filtering.

    Args:
        vehicle_type: Filter by vehicle type (optional)
        fuel_type: Filter by fuel type (optional)
        include_inactive: Also list deactivated factors
    """
    store = EmissionFactorStore(session)
    return await store.list_factors(
        vehicle_type=vehicle_type,
        fuel_type=fuel_type,
        is_active=None if include_inactive else True,
        skip=pagination.skip,
        limit=pagination.limit,
    )


@router.get("/{factor_id}", response_model=EmissionFactorPydModel)
async def get_emission_factor(
    factor_id: int,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Get emission factor by ID.
    """
    return await EmissionFactorStore(session).get(factor_id)
