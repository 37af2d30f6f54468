"""
Repository for User database operations.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories.base import BaseRepository
from carp.database.schemas import UserDBModel


class UserRepository(BaseRepository[UserDBModel]):
    """Repository for user operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(UserDBModel, session)

    async def get_by_email(self, email: str) -> Optional[UserDBModel]:
        stmt = select(self.model).where(self.model.email == email)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def search(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[UserDBModel], int]:
        """
        Search users by name or email, optionally filtered by status.

        Args:
            search: Case-insensitive substring of first name, last name or email
            status: User status filter
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (page of users, newest first; total matching count)
        """
        conditions = []
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(self.model.first_name).like(pattern),
                    func.lower(self.model.last_name).like(pattern),
                    func.lower(self.model.email).like(pattern),
                )
            )
        if status:
            conditions.append(self.model.status == status)

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

    async def count_created_since(self, since: datetime) -> int:
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(self.model.created_at >= since)
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def list_created_since(self, since: datetime) -> List[UserDBModel]:
        stmt = (
            select(self.model)
            .where(self.model.created_at >= since)
            .order_by(self.model.created_at, self.model.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_status(self, status: str) -> List[UserDBModel]:
        stmt = select(self.model).where(self.model.status == status).order_by(self.model.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
