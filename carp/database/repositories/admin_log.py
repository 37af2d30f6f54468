"""
Repository for AdminLog database operations.

Admin logs are append-only: this repository adds rows and reads them back,
it never updates or deletes them.
"""
from typing import Any, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories.base import BaseRepository
from carp.database.schemas import AdminLogDBModel


class AdminLogRepository(BaseRepository[AdminLogDBModel]):
    """Append-only repository for admin log rows."""

    def __init__(self, session: AsyncSession):
        super().__init__(AdminLogDBModel, session)

    async def create(self, **data: Any) -> AdminLogDBModel:
        """Add a log row and flush it without refreshing."""
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def update(self, id: int, **data: Any):
        raise NotImplementedError("Admin logs are append-only")

    async def delete(self, id: int) -> bool:
        raise NotImplementedError("Admin logs are append-only")

    async def list_logs(
        self,
        action: Optional[str] = None,
        admin_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[AdminLogDBModel], int]:
        """
        Get a page of admin logs, newest first.

        Returns:
            Tuple of (logs, total count)
        """
        conditions = []
        if action:
            conditions.append(self.model.action == action)
        if admin_id is not None:
            conditions.append(self.model.admin_id == admin_id)

        count_stmt = select(func.count()).select_from(self.model).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(self.model)
            .where(*conditions)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
