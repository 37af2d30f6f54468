"""
Audit logging for admin mutations.

``AuditLogRecorder.record`` appends one AdminLog row. The ``audited``
decorator wraps admin service methods so every mutation is logged with a
before and after snapshot of its target, following the action's policy:

- fail-closed (user deletion, system configuration): the mutation and its log
  row commit together. If the log cannot be written, both are rolled back and
  AdminActionFailed is raised.
- fail-open (every other action): the mutation commits first. The log row is
  then written best-effort; a failure is logged as a warning and the mutation
  stands.
"""

import functools
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.exceptions import AdminActionFailed, AuditLogWriteError
from carp.database.repositories import AdminLogRepository
from carp.database.schemas import AdminLogDBModel
from carp.utils.constants import (
    FAIL_CLOSED_ACTIONS,
    AdminAction,
    AuditPolicy,
    TargetType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminContext:
    """Who performed an admin action, and from where."""

    admin_id: int
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def policy_for(action: AdminAction) -> AuditPolicy:
    if action in FAIL_CLOSED_ACTIONS:
        return AuditPolicy.FAIL_CLOSED
    return AuditPolicy.FAIL_OPEN


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def snapshot_model(instance) -> Optional[dict]:
    """Column values of a model as a JSON-safe dict; None for no instance."""
    if instance is None:
        return None
    return {
        column.key: _json_value(getattr(instance, column.key))
        for column in instance.__table__.columns
    }


class AuditLogRecorder:
    """Writes admin log rows."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = AdminLogRepository(session)

    async def record(
        self,
        admin_id: int,
        action: AdminAction,
        target_type: Optional[TargetType] = None,
        target_id: Optional[int] = None,
        old_data: Optional[dict] = None,
        new_data: Optional[dict] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AdminLogDBModel:
        """
        Append an admin log row to the current transaction.

        Raises:
            AuditLogWriteError: the row could not be stored
        """
        try:
            return await self.repo.create(
                admin_id=admin_id,
                action=AdminAction(action).value,
                target_type=TargetType(target_type).value if target_type else None,
                target_id=target_id,
                old_data=old_data,
                new_data=new_data,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to write admin log for {action}: {e}")
            raise AuditLogWriteError(AdminAction(action).value, e) from e


def audited(
    action: AdminAction,
    target_type: TargetType,
    creates: bool = False,
    deletes: bool = False,
):
    """
    Decorate an admin service mutation with audit logging.

    The decorated method is called as ``method(self, target_id, ..., *, context)``
    (no target id for creations) and must flush, not commit, its changes. The
    owning service provides ``session``, ``recorder`` and
    ``load_target(target_type, target_id)``.

    Args:
        action: Logged action
        target_type: Kind of entity the action changes
        creates: The method creates its target; there is no before snapshot
        deletes: The method deletes its target; there is no after snapshot
    """
    policy = policy_for(action)

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, context: AdminContext, **kwargs):
            target_id = None
            old_data = None
            if not creates:
                target_id = args[0]
                old_data = snapshot_model(await self.load_target(target_type, target_id))

            try:
                result = await func(self, *args, context=context, **kwargs)
            except Exception:
                await self.session.rollback()
                raise

            new_data = None if deletes else snapshot_model(result)
            if creates:
                target_id = result.id

            log_kwargs = dict(
                admin_id=context.admin_id,
                action=action,
                target_type=target_type,
                target_id=target_id,
                old_data=old_data,
                new_data=new_data,
                ip_address=context.ip_address,
                user_agent=context.user_agent,
            )

            if policy is AuditPolicy.FAIL_CLOSED:
                try:
                    await self.recorder.record(**log_kwargs)
                    await self.session.commit()
                except (AuditLogWriteError, SQLAlchemyError) as e:
                    await self.session.rollback()
                    logger.error(
                        f"{action.value} on {target_type.value} {target_id} rolled back: "
                        f"audit log could not be written",
                        exc_info=True,
                    )
                    raise AdminActionFailed(action.value) from e
                logger.info(
                    f"Admin {context.admin_id} performed {action.value} on "
                    f"{target_type.value} {target_id}"
                )
                return result

            await self.session.commit()
            logger.info(
                f"Admin {context.admin_id} performed {action.value} on "
                f"{target_type.value} {target_id}"
            )
            try:
                await self.recorder.record(**log_kwargs)
                await self.session.commit()
            except (AuditLogWriteError, SQLAlchemyError) as e:
                logger.warning(
                    f"Audit log for {action.value} on {target_type.value} "
                    f"{target_id} was not written: {e}"
                )
                await self.session.rollback()
                if result is not None and not deletes:
                    await self.session.refresh(result)
            return result

        wrapper.audit_action = action
        wrapper.audit_policy = policy
        return wrapper

    return decorator
