"""
Admin API router.

Every route requires an admin caller. Mutations are recorded in the admin log.
"""
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.dependencies import (
    Pagination,
    get_admin_context,
    get_db_session,
    get_pagination,
    require_admin,
)
from carp.pydantic_models.admin_log import AdminLogListResponse, AdminLogPydModel
from carp.pydantic_models.emission_factor import (
    EmissionFactorCreate,
    EmissionFactorPydModel,
    EmissionFactorUpdate,
)
from carp.pydantic_models.stats import AdminStats, EmissionAnalytics, UserAnalytics
from carp.pydantic_models.trip import ResolvePendingResult
from carp.pydantic_models.user import UserListResponse, UserPydModel, UserStatusUpdate
from carp.services.admin.admin_service import AdminService
from carp.services.audit.audit_log_recorder import AdminContext
from carp.utils.constants import (
    AdminAction,
    FuelType,
    GroupBy,
    Period,
    UserStatus,
    VehicleType,
)

router = APIRouter(
    prefix="/api/v1/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)

logger = logging.getLogger(__name__)


@router.get("/stats", response_model=AdminStats)
async def get_admin_stats(session: AsyncSession = Depends(get_db_session)):
    return await AdminService(session).get_stats()


@router.get("/analytics/users", response_model=UserAnalytics)
async def get_user_analytics(
    period: Period = Period.MONTH,
    group_by: GroupBy = GroupBy.DAY,
    session: AsyncSession = Depends(get_db_session),
):
    """New registrations and users with saved trips, per day, week or month."""
    return await AdminService(session).get_user_analytics(period, group_by)


@router.get("/analytics/emissions", response_model=EmissionAnalytics)
async def get_emission_analytics(
    period: Period = Period.MONTH,
    vehicle_type: VehicleType | None = None,
    session: AsyncSession = Depends(get_db_session),
):
    """CO2 and savings of saved trips per vehicle type."""
    return await AdminService(session).get_emission_analytics(
        period, vehicle_type=vehicle_type.value if vehicle_type else None
    )


# Users
@router.get("/users", response_model=UserListResponse)
async def list_users(
    search: str | None = None,
    user_status: UserStatus | None = Query(None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_db_session),
):
    """List users, newest first, optionally searched by name/email and status."""
    users, total = await AdminService(session).list_users(
        search=search,
        status=user_status.value if user_status else None,
        skip=pagination.skip,
        limit=pagination.limit,
    )
    return UserListResponse(
        users=[UserPydModel.model_validate(user) for user in users],
        total=total,
        skip=pagination.skip,
        limit=pagination.limit,
    )


@router.get("/users/{user_id}", response_model=UserPydModel)
async def get_user(user_id: int, session: AsyncSession = Depends(get_db_session)):
    return await AdminService(session).get_user(user_id)


@router.put("/users/{user_id}/status", response_model=UserPydModel)
async def update_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    context: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_db_session),
):
    return await AdminService(session).update_user_status(
        user_id, payload.status, context=context
    )


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    context: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a user. Aborted if the deletion cannot be written to the admin log."""
    await AdminService(session).delete_user(user_id, context=context)


# Emission factors
@router.get("/emission-factors", response_model=list[EmissionFactorPydModel])
async def list_emission_factors(
    vehicle_type: VehicleType | None = None,
    fuel_type: FuelType | None = None,
    is_active: bool | None = None,
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_db_session),
):
    return await AdminService(session).store.list_factors(
        vehicle_type=vehicle_type,
        fuel_type=fuel_type,
        is_active=is_active,
        skip=pagination.skip,
        limit=pagination.limit,
    )


@router.post(
    "/emission-factors",
    response_model=EmissionFactorPydModel,
    status_code=status.HTTP_201_CREATED,
)
async def create_emission_factor(
    payload: EmissionFactorCreate,
    context: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_db_session),
):
    return await AdminService(session).create_emission_factor(payload, context=context)


@router.put("/emission-factors/{factor_id}", response_model=EmissionFactorPydModel)
async def update_emission_factor(
    factor_id: int,
    payload: EmissionFactorUpdate,
    context: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_db_session),
):
    return await AdminService(session).update_emission_factor(
        factor_id, payload, context=context
    )


@router.delete("/emission-factors/{factor_id}", response_model=EmissionFactorPydModel)
async def deactivate_emission_factor(
    factor_id: int,
    context: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_db_session),
):
    """Deactivate an emission factor. Trips computed with it keep their figures."""
    return await AdminService(session).deactivate_emission_factor(
        factor_id, context=context
    )


# Logs and maintenance
@router.get("/logs", response_model=AdminLogListResponse)
async def list_admin_logs(
    action: AdminAction | None = None,
    admin_id: int | None = None,
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_db_session),
):
    logs, total = await AdminService(session).list_logs(
        action=action.value if action else None,
        admin_id=admin_id,
        skip=pagination.skip,
        limit=pagination.limit,
    )
    return AdminLogListResponse(
        logs=[AdminLogPydModel.model_validate(log) for log in logs],
        total=total,
        skip=pagination.skip,
        limit=pagination.limit,
    )


@router.post("/trips/resolve-pending", response_model=ResolvePendingResult)
async def resolve_pending_trips(session: AsyncSession = Depends(get_db_session)):
    """Compute emissions for every pending trip now covered by an active factor."""
    return await AdminService(session).resolve_pending_trips()
