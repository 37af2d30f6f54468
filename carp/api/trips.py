"""
Trips API router.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.dependencies import (
    Pagination,
    get_current_user,
    get_db_session,
    get_pagination,
)
from carp.database.schemas import UserDBModel
from carp.pydantic_models.trip import (
    ResolvePendingResult,
    TripCreate,
    TripListResponse,
    TripPydModel,
    TripUpdate,
)
from carp.services.trips.trip_service import TripService
from carp.utils.constants import TravelMode

router = APIRouter(
    prefix="/api/v1/trips",
    tags=["Trips"],
)

logger = logging.getLogger(__name__)


@router.get("/", response_model=TripListResponse)
async def list_trips(
    travel_mode: TravelMode | None = None,
    pagination: Pagination = Depends(get_pagination),
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """List the caller's trips, newest first."""
    trips, total = await TripService(session).list_trips(
        user.id,
        travel_mode=travel_mode.value if travel_mode else None,
        skip=pagination.skip,
        limit=pagination.limit,
    )
    return TripListResponse(
        trips=[TripPydModel.model_validate(trip) for trip in trips],
        total=total,
        skip=pagination.skip,
        limit=pagination.limit,
    )


@router.post("/", response_model=TripPydModel, status_code=status.HTTP_201_CREATED)
async def create_trip(
    payload: TripCreate,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Record a trip.

    Without vehicle_id the caller's default vehicle is used. When no emission
    factor covers the vehicle the trip is stored with emissions_status "pending".
    """
    return await TripService(session).create_trip(user.id, payload)


@router.post("/resolve-pending", response_model=ResolvePendingResult)
async def resolve_pending_trips(
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Compute emissions for the caller's pending trips where possible."""
    return await TripService(session).resolve_pending(user_id=user.id)


@router.get("/{trip_id}", response_model=TripPydModel)
async def get_trip(
    trip_id: int,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await TripService(session).get_trip(user.id, trip_id)


@router.patch("/{trip_id}", response_model=TripPydModel)
async def update_trip(
    trip_id: int,
    payload: TripUpdate,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Update is_saved / planned_date of a trip."""
    return await TripService(session).update_trip(user.id, trip_id, payload)


@router.delete("/{trip_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_trip(
    trip_id: int,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    await TripService(session).delete_trip(user.id, trip_id)
