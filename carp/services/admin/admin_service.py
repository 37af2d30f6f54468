"""
Admin console operations.

Every mutation of a user or an emission factor goes through the ``audited``
decorator, which records the before/after snapshot in the admin log.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.config import get_baseline_factor_from_config
from carp.core.exceptions import InvalidInput, NotFound
from carp.database.repositories import AdminLogRepository, UserRepository
from carp.database.schemas import AdminLogDBModel, EmissionFactorDBModel, UserDBModel
from carp.pydantic_models.emission_factor import EmissionFactorCreate, EmissionFactorUpdate
from carp.pydantic_models.stats import AdminStats, EmissionAnalytics, UserAnalytics
from carp.pydantic_models.trip import ResolvePendingResult
from carp.services.aggregators.dashboard_aggregator import AdminStatsAggregator
from carp.services.aggregators.report_aggregator import AdminAnalyticsAggregator
from carp.services.audit.audit_log_recorder import AdminContext, AuditLogRecorder, audited
from carp.services.stores.emission_factor_store import EmissionFactorStore
from carp.services.trips.trip_service import TripService
from carp.utils.constants import AdminAction, GroupBy, Period, TargetType, UserStatus

logger = logging.getLogger(__name__)


class AdminService:
    """Admin operations on users, emission factors and the admin log."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.logs = AdminLogRepository(session)
        self.store = EmissionFactorStore(session)
        self.recorder = AuditLogRecorder(session)

    async def load_target(self, target_type: TargetType, target_id: int):
        """Load the entity an audited action changes."""
        if target_type is TargetType.USER:
            return await self.get_user(target_id)
        if target_type is TargetType.EMISSION_FACTOR:
            return await self.store.get(target_id)
        raise InvalidInput("target_type", f"{target_type} has no loadable target")

    # Users

    async def list_users(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[UserDBModel], int]:
        return await self.users.search(search=search, status=status, skip=skip, limit=limit)

    async def get_user(self, user_id: int) -> UserDBModel:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    async def update_user_status(
        self, user_id: int, status: UserStatus, *, context: AdminContext
    ) -> UserDBModel:
        """Change a user's status; suspensions are logged as user_suspended."""
        status = UserStatus(status)
        if user_id == context.admin_id and status is not UserStatus.ACTIVE:
            raise InvalidInput("user_id", "admins cannot deactivate their own account")
        if status is UserStatus.SUSPENDED:
            return await self.suspend_user(user_id, context=context)
        return await self.set_user_status(user_id, status, context=context)

    @audited(AdminAction.USER_SUSPENDED, TargetType.USER)
    async def suspend_user(self, user_id: int, *, context: AdminContext) -> UserDBModel:
        return await self.users.update(user_id, status=UserStatus.SUSPENDED.value)

    @audited(AdminAction.USER_UPDATED, TargetType.USER)
    async def set_user_status(
        self, user_id: int, status: UserStatus, *, context: AdminContext
    ) -> UserDBModel:
        return await self.users.update(user_id, status=UserStatus(status).value)

    async def delete_user(self, user_id: int, *, context: AdminContext) -> None:
        """
        Delete a user with everything they own.

        Raises:
            InvalidInput: an admin tried to delete their own account
            AdminActionFailed: the admin log could not be written; nothing was deleted
        """
        if user_id == context.admin_id:
            raise InvalidInput("user_id", "admins cannot delete their own account")
        await self._delete_user(user_id, context=context)

    @audited(AdminAction.USER_DELETED, TargetType.USER, deletes=True)
    async def _delete_user(self, user_id: int, *, context: AdminContext) -> None:
        await self.users.delete(user_id)

    # Emission factors

    @audited(AdminAction.EMISSION_FACTOR_CREATED, TargetType.EMISSION_FACTOR, creates=True)
    async def create_emission_factor(
        self, data: EmissionFactorCreate, *, context: AdminContext
    ) -> EmissionFactorDBModel:
        return await self.store.upsert(data.model_dump(), created_by=context.admin_id)

    @audited(AdminAction.EMISSION_FACTOR_UPDATED, TargetType.EMISSION_FACTOR)
    async def update_emission_factor(
        self, factor_id: int, data: EmissionFactorUpdate, *, context: AdminContext
    ) -> EmissionFactorDBModel:
        return await self.store.upsert(data.model_dump(exclude_unset=True), factor_id=factor_id)

    @audited(AdminAction.EMISSION_FACTOR_DELETED, TargetType.EMISSION_FACTOR)
    async def deactivate_emission_factor(
        self, factor_id: int, *, context: AdminContext
    ) -> EmissionFactorDBModel:
        return await self.store.deactivate(factor_id)

    # Logs, statistics, maintenance

    async def list_logs(
        self,
        action: Optional[str] = None,
        admin_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[AdminLogDBModel], int]:
        return await self.logs.list_logs(
            action=action, admin_id=admin_id, skip=skip, limit=limit
        )

    async def get_stats(self) -> AdminStats:
        return await AdminStatsAggregator(
            self.session, baseline=get_baseline_factor_from_config()
        ).build()

    async def get_user_analytics(self, period: Period, group_by: GroupBy) -> UserAnalytics:
        return await AdminAnalyticsAggregator(self.session).user_analytics(period, group_by)

    async def get_emission_analytics(
        self, period: Period, vehicle_type: Optional[str] = None
    ) -> EmissionAnalytics:
        return await AdminAnalyticsAggregator(
            self.session, baseline=get_baseline_factor_from_config()
        ).emission_analytics(period, vehicle_type=vehicle_type)

    async def resolve_pending_trips(self) -> ResolvePendingResult:
        return await TripService(self.session).resolve_pending()
