"""
User account and personal statistics.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.config import get_baseline_factor_from_config
from carp.core.exceptions import NotFound
from carp.database.repositories import TripRepository, UserRepository
from carp.database.schemas import UserDBModel
from carp.pydantic_models.stats import (
    CarbonSavings,
    DashboardResponse,
    DashboardStats,
    EmissionReport,
    Leaderboard,
    TrendReport,
)
from carp.pydantic_models.trip import TripListResponse, TripPydModel
from carp.services.aggregators.dashboard_aggregator import (
    aggregate,
    mode_distribution,
    monthly_emissions,
)
from carp.services.aggregators.report_aggregator import (
    LeaderboardAggregator,
    carbon_savings,
    monthly_trends,
    months_start,
    period_emissions,
    period_start,
)
from carp.services.stores.emission_factor_store import EmissionFactorStore
from carp.utils.constants import LeaderboardType, Period

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = UserRepository(session)
        self.trips = TripRepository(session)
        self.store = EmissionFactorStore(session)

    async def get_user(self, user_id: int) -> UserDBModel:
        user = await self.repo.get_by_id(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    async def delete_account(self, user_id: int) -> None:
        """Delete a user with their vehicles, trips and preferences."""
        await self.get_user(user_id)
        await self.repo.delete(user_id)
        await self.session.commit()
        logger.info(f"User {user_id} deleted their account")

    async def get_stats(self, user_id: int) -> DashboardStats:
        trips = await self.trips.all_for_user(user_id)
        return aggregate(
            trips,
            reference_factors=await self.store.reference_factors(),
            baseline=get_baseline_factor_from_config(),
        )

    async def get_dashboard(self, user_id: int) -> DashboardResponse:
        """Statistics, monthly series and travel mode split of a user's trips."""
        trips = await self.trips.all_for_user(user_id)
        return DashboardResponse(
            stats=aggregate(
                trips,
                reference_factors=await self.store.reference_factors(),
                baseline=get_baseline_factor_from_config(),
            ),
            monthly_emissions=monthly_emissions(trips),
            mode_distribution=mode_distribution(trips),
        )

    async def get_emission_report(
        self, user_id: int, period: Period, vehicle_id: Optional[int] = None
    ) -> EmissionReport:
        """Emission totals and daily series over the last 7 / 30 / 90 / 365 days."""
        trips = await self.trips.for_user_since(
            user_id, period_start(period), vehicle_id=vehicle_id
        )
        stats, daily = period_emissions(trips)
        return EmissionReport(
            period=period, vehicle_id=vehicle_id, stats=stats, daily_emissions=daily
        )

    async def get_carbon_savings(self, user_id: int) -> CarbonSavings:
        trips = await self.trips.all_for_user(user_id)
        return carbon_savings(trips, baseline=get_baseline_factor_from_config())

    async def get_trends(self, user_id: int, months: int = 6) -> TrendReport:
        """Monthly totals and travel mode counts over the last ``months`` calendar months."""
        trips = await self.trips.for_user_since(user_id, months_start(months))
        monthly, modes = monthly_trends(trips)
        return TrendReport(
            months=months, monthly_trends=monthly, travel_mode_trends=modes
        )

    async def get_leaderboard(
        self, kind: LeaderboardType, limit: int = 10
    ) -> Leaderboard:
        return await LeaderboardAggregator(
            self.session, baseline=get_baseline_factor_from_config()
        ).build(kind, limit=limit)

    async def get_activity(
        self, user_id: int, skip: int = 0, limit: int = 20
    ) -> TripListResponse:
        """The user's most recent trips, newest first."""
        trips, total = await self.trips.list_for_user(user_id, skip=skip, limit=limit)
        return TripListResponse(
            trips=[TripPydModel.model_validate(trip) for trip in trips],
            total=total,
            skip=skip,
            limit=limit,
        )
