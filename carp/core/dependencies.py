"""
FastAPI dependencies.

Caller identity is taken from the X-User-Id header; issuing and verifying
that header is the job of the gateway in front of this service.
"""
import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories import UserRepository
from carp.database.schemas import UserDBModel
from carp.database.session_manager.db_session import Database
from carp.services.audit.audit_log_recorder import AdminContext

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session that commits or rolls back on exit."""
    async with Database() as session:
        yield session


async def get_current_user(
    x_user_id: Optional[int] = Header(None, alias="X-User-Id"),
    session: AsyncSession = Depends(get_db_session),
) -> UserDBModel:
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="X-User-Id header missing"
        )

    user = await UserRepository(session).get_by_id(x_user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Unknown user {x_user_id}"
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=f"User account is {user.status}"
        )
    return user


async def require_admin(user: UserDBModel = Depends(get_current_user)) -> UserDBModel:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required"
        )
    return user


async def get_admin_context(
    request: Request, admin: UserDBModel = Depends(require_admin)
) -> AdminContext:
    return AdminContext(
        admin_id=admin.id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


class Pagination:
    def __init__(self, skip: int, limit: int):
        self.skip = skip
        self.limit = limit


def get_pagination(
    request: Request,
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
) -> Pagination:
    """skip/limit query parameters, limit capped by the [pagination] config."""
    settings = request.app.state.config.data.get("pagination", {})
    default_limit = settings.get("default_limit", DEFAULT_PAGE_LIMIT)
    max_limit = settings.get("max_limit", MAX_PAGE_LIMIT)
    return Pagination(skip=skip, limit=min(limit or default_limit, max_limit))
