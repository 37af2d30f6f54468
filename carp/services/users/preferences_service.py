"""
User routing preferences.

Preferences are created with their defaults the first time a user reads
them, and only the owner updates them.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.exceptions import ConstraintViolation
from carp.database.repositories import UserPreferencesRepository
from carp.database.schemas import UserPreferencesDBModel
from carp.pydantic_models.user_preferences import UserPreferencesUpdate

logger = logging.getLogger(__name__)


def _fields(data: Optional[UserPreferencesUpdate]) -> dict:
    if data is None:
        return {}
    return {
        key: getattr(value, "value", value)
        for key, value in data.model_dump(exclude_unset=True).items()
    }


class UserPreferencesService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = UserPreferencesRepository(session)

    async def create_preferences(
        self, user_id: int, data: Optional[UserPreferencesUpdate] = None
    ) -> UserPreferencesDBModel:
        """
        Create the preferences row of a user.

        Raises:
            ConstraintViolation: the user already has preferences
        """
        if await self.repo.get_by_user_id(user_id) is not None:
            raise ConstraintViolation(
                f"Preferences for user {user_id} already exist", field="user_id"
            )
        try:
            preferences = await self.repo.create(user_id=user_id, **_fields(data))
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConstraintViolation(
                f"Preferences for user {user_id} already exist", field="user_id"
            ) from e
        logger.info(f"Created preferences for user {user_id}")
        return preferences

    async def get_preferences(self, user_id: int) -> UserPreferencesDBModel:
        """Get the preferences of a user, creating the defaults on first access."""
        preferences = await self.repo.get_by_user_id(user_id)
        if preferences is not None:
            return preferences
        try:
            return await self.create_preferences(user_id)
        except ConstraintViolation:
            # created by a concurrent request
            return await self.repo.get_by_user_id(user_id)

    async def update_preferences(
        self, user_id: int, data: UserPreferencesUpdate
    ) -> UserPreferencesDBModel:
        preferences = await self.get_preferences(user_id)
        changes = _fields(data)
        if not changes:
            return preferences
        preferences = await self.repo.update(preferences.id, **changes)
        await self.session.commit()
        logger.info(f"User {user_id} updated preferences: {sorted(changes)}")
        return preferences
