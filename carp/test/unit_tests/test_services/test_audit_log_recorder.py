"""
Service tests for admin audit logging and its failure policies.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from carp.core.exceptions import AdminActionFailed, AuditLogWriteError, InvalidInput
from carp.database.schemas import AdminLogDBModel, UserDBModel
from carp.database.session_manager.db_session import Database
from carp.pydantic_models.emission_factor import EmissionFactorCreate, EmissionFactorUpdate
from carp.services.admin.admin_service import AdminService
from carp.services.audit.audit_log_recorder import (
    AdminContext,
    AuditLogRecorder,
    policy_for,
    snapshot_model,
)
from carp.test.factory.emission_factor import EmissionFactorFactory
from carp.test.factory.user import AdminUserFactory, UserFactory
from carp.utils.constants import AdminAction, AuditPolicy, TargetType, UserStatus


def broken_log_write(*args, **kwargs):
    raise OperationalError("INSERT INTO admin_logs", {}, Exception("disk I/O error"))


async def fetch_logs():
    async with Database() as session:
        result = await session.execute(select(AdminLogDBModel).order_by(AdminLogDBModel.id))
        return list(result.scalars().all())


async def fetch_user(user_id):
    async with Database() as session:
        return await session.get(UserDBModel, user_id)


def test_policies():
    assert policy_for(AdminAction.USER_DELETED) is AuditPolicy.FAIL_CLOSED
    assert policy_for(AdminAction.SYSTEM_CONFIG_UPDATED) is AuditPolicy.FAIL_CLOSED
    assert policy_for(AdminAction.USER_SUSPENDED) is AuditPolicy.FAIL_OPEN
    assert policy_for(AdminAction.EMISSION_FACTOR_UPDATED) is AuditPolicy.FAIL_OPEN


def test_snapshot_of_nothing_is_none():
    assert snapshot_model(None) is None


@pytest.mark.asyncio
async def test_record_writes_row(test_db_session):
    admin = await AdminUserFactory()

    log = await AuditLogRecorder(test_db_session).record(
        admin_id=admin.id,
        action=AdminAction.USER_UPDATED,
        target_type=TargetType.USER,
        target_id=admin.id,
        new_data={"status": "active"},
        ip_address="127.0.0.1",
    )
    await test_db_session.commit()

    logs = await fetch_logs()
    assert [entry.id for entry in logs] == [log.id]
    assert logs[0].action == "user_updated"
    assert logs[0].target_type == "user"
    assert logs[0].ip_address == "127.0.0.1"


@pytest.mark.asyncio
async def test_record_failure_raises_audit_error(test_db_session, monkeypatch):
    admin = await AdminUserFactory()
    recorder = AuditLogRecorder(test_db_session)
    monkeypatch.setattr(recorder.repo, "create", broken_log_write)

    with pytest.raises(AuditLogWriteError) as exc_info:
        await recorder.record(admin_id=admin.id, action=AdminAction.USER_UPDATED)
    assert exc_info.value.action == "user_updated"


@pytest.mark.asyncio
async def test_suspend_user_logs_before_and_after(test_db_session):
    admin = await AdminUserFactory()
    user = await UserFactory()
    context = AdminContext(admin_id=admin.id, ip_address="10.0.0.1", user_agent="pytest")

    result = await AdminService(test_db_session).update_user_status(
        user.id, UserStatus.SUSPENDED, context=context
    )

    assert result.status == "suspended"
    logs = await fetch_logs()
    assert len(logs) == 1
    assert logs[0].action == "user_suspended"
    assert logs[0].admin_id == admin.id
    assert logs[0].target_id == user.id
    assert logs[0].old_data["status"] == "active"
    assert logs[0].new_data["status"] == "suspended"
    assert logs[0].user_agent == "pytest"


@pytest.mark.asyncio
async def test_reactivation_logged_as_user_updated(test_db_session):
    admin = await AdminUserFactory()
    user = await UserFactory(status=UserStatus.SUSPENDED.value)

    await AdminService(test_db_session).update_user_status(
        user.id, UserStatus.ACTIVE, context=AdminContext(admin_id=admin.id)
    )

    logs = await fetch_logs()
    assert [entry.action for entry in logs] == ["user_updated"]


@pytest.mark.asyncio
async def test_fail_open_mutation_survives_log_failure(test_db_session, monkeypatch):
    admin = await AdminUserFactory()
    user = await UserFactory()
    service = AdminService(test_db_session)
    monkeypatch.setattr(service.recorder.repo, "create", broken_log_write)

    result = await service.update_user_status(
        user.id, UserStatus.SUSPENDED, context=AdminContext(admin_id=admin.id)
    )

    assert result.status == "suspended"
    assert (await fetch_user(user.id)).status == "suspended"
    assert await fetch_logs() == []


@pytest.mark.asyncio
async def test_fail_closed_delete_rolls_back_on_log_failure(test_db_session, monkeypatch):
    admin = await AdminUserFactory()
    user = await UserFactory()
    service = AdminService(test_db_session)
    monkeypatch.setattr(service.recorder.repo, "create", broken_log_write)

    with pytest.raises(AdminActionFailed) as exc_info:
        await service.delete_user(user.id, context=AdminContext(admin_id=admin.id))

    assert exc_info.value.action == "user_deleted"
    assert isinstance(exc_info.value.__cause__, AuditLogWriteError)
    assert await fetch_user(user.id) is not None
    assert await fetch_logs() == []


@pytest.mark.asyncio
async def test_delete_user_logs_old_snapshot_only(test_db_session):
    admin = await AdminUserFactory()
    user = await UserFactory()

    await AdminService(test_db_session).delete_user(
        user.id, context=AdminContext(admin_id=admin.id)
    )

    assert await fetch_user(user.id) is None
    logs = await fetch_logs()
    assert len(logs) == 1
    assert logs[0].action == "user_deleted"
    assert logs[0].old_data["email"] == user.email
    assert logs[0].new_data is None


@pytest.mark.asyncio
async def test_admin_cannot_delete_or_suspend_self(test_db_session):
    admin = await AdminUserFactory()
    service = AdminService(test_db_session)
    context = AdminContext(admin_id=admin.id)

    with pytest.raises(InvalidInput):
        await service.delete_user(admin.id, context=context)
    with pytest.raises(InvalidInput):
        await service.update_user_status(admin.id, UserStatus.SUSPENDED, context=context)
    assert await fetch_logs() == []


@pytest.mark.asyncio
async def test_emission_factor_lifecycle_is_logged(test_db_session):
    admin = await AdminUserFactory()
    service = AdminService(test_db_session)
    context = AdminContext(admin_id=admin.id)

    factor = await service.create_emission_factor(
        EmissionFactorCreate(
            vehicle_type="van", fuel_type="diesel", factor_g_per_km=Decimal("200")
        ),
        context=context,
    )
    await service.update_emission_factor(
        factor.id, EmissionFactorUpdate(factor_g_per_km=Decimal("190")), context=context
    )
    deactivated = await service.deactivate_emission_factor(factor.id, context=context)

    assert factor.created_by == admin.id
    assert deactivated.is_active is False
    logs = await fetch_logs()
    assert [entry.action for entry in logs] == [
        "emission_factor_created",
        "emission_factor_updated",
        "emission_factor_deleted",
    ]
    assert {entry.target_id for entry in logs} == {factor.id}
    assert logs[0].old_data is None
    assert Decimal(logs[0].new_data["factor_g_per_km"]) == Decimal("200")
    assert Decimal(logs[1].old_data["factor_g_per_km"]) == Decimal("200")
    assert Decimal(logs[1].new_data["factor_g_per_km"]) == Decimal("190")
    assert logs[2].new_data["is_active"] is False


@pytest.mark.asyncio
async def test_failed_mutation_is_not_logged(test_db_session):
    admin = await AdminUserFactory()
    factor = await EmissionFactorFactory()
    service = AdminService(test_db_session)

    with pytest.raises(InvalidInput):
        await service.update_emission_factor(
            factor.id,
            EmissionFactorUpdate(factor_g_per_km=Decimal("-1")),
            context=AdminContext(admin_id=admin.id),
        )
    assert await fetch_logs() == []
