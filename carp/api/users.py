"""
Users API router.

Operations of the calling user on their own account.
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
from carp.pydantic_models.stats import DashboardStats
from carp.pydantic_models.trip import TripListResponse
from carp.pydantic_models.user import UserPydModel
from carp.pydantic_models.user_preferences import (
    UserPreferencesPydModel,
    UserPreferencesUpdate,
)
from carp.services.users.preferences_service import UserPreferencesService
from carp.services.users.user_service import UserService

router = APIRouter(
    prefix="/api/v1/users",
    tags=["Users"],
)

logger = logging.getLogger(__name__)


@router.get("/me", response_model=UserPydModel)
async def get_me(user: UserDBModel = Depends(get_current_user)):
    return user


@router.get("/preferences", response_model=UserPreferencesPydModel)
async def get_preferences(
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the caller's preferences, created with defaults on first access."""
    return await UserPreferencesService(session).get_preferences(user.id)


@router.put("/preferences", response_model=UserPreferencesPydModel)
async def update_preferences(
    payload: UserPreferencesUpdate,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await UserPreferencesService(session).update_preferences(user.id, payload)


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await UserService(session).get_stats(user.id)


@router.get("/activity", response_model=TripListResponse)
async def get_activity(
    pagination: Pagination = Depends(get_pagination),
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """The caller's most recent trips, newest first."""
    return await UserService(session).get_activity(
        user.id, skip=pagination.skip, limit=pagination.limit
    )


@router.delete("/account", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete the caller's account with all their vehicles, trips and preferences."""
    await UserService(session).delete_account(user.id)
