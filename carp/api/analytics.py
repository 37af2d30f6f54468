"""
Analytics API router.
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.dependencies import get_current_user, get_db_session
from carp.database.schemas import UserDBModel
from carp.pydantic_models.stats import (
    CarbonSavings,
    DashboardResponse,
    EmissionReport,
    Leaderboard,
    TrendReport,
)
from carp.services.users.user_service import UserService
from carp.utils.constants import LeaderboardType, Period

router = APIRouter(
    prefix="/api/v1/analytics",
    tags=["Analytics"],
)

logger = logging.getLogger(__name__)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Dashboard statistics, monthly emissions and travel mode split."""
    return await UserService(session).get_dashboard(user.id)


@router.get("/emissions", response_model=EmissionReport)
async def get_emission_report(
    period: Period = Period.MONTH,
    vehicle_id: int | None = None,
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Emission totals and daily series of the caller's trips over a period."""
    return await UserService(session).get_emission_report(
        user.id, period, vehicle_id=vehicle_id
    )


@router.get("/carbon-savings", response_model=CarbonSavings)
async def get_carbon_savings(
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await UserService(session).get_carbon_savings(user.id)


@router.get("/leaderboard", response_model=Leaderboard)
async def get_leaderboard(
    leaderboard_type: LeaderboardType = Query(LeaderboardType.ECO_FRIENDLY, alias="type"),
    limit: int = Query(10, ge=1, le=100),
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Active users ranked by eco-friendly trip share or by CO2 saved."""
    return await UserService(session).get_leaderboard(leaderboard_type, limit=limit)


@router.get("/trends", response_model=TrendReport)
async def get_trends(
    months: int = Query(6, ge=1, le=24),
    user: UserDBModel = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await UserService(session).get_trends(user.id, months=months)
