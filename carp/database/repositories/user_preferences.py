"""
Repository for UserPreferences database operations.
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories.base import BaseRepository
from carp.database.schemas import UserPreferencesDBModel


class UserPreferencesRepository(BaseRepository[UserPreferencesDBModel]):
    """Repository for user preference operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(UserPreferencesDBModel, session)

    async def get_by_user_id(self, user_id: int) -> Optional[UserPreferencesDBModel]:
        stmt = select(self.model).where(self.model.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()
