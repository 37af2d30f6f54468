"""
Repository for Vehicle database operations.
"""
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories.base import BaseRepository
from carp.database.schemas import VehicleDBModel


class VehicleRepository(BaseRepository[VehicleDBModel]):
    """Repository for vehicle operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(VehicleDBModel, session)

    async def list_for_user(
        self, user_id: int, include_inactive: bool = False
    ) -> List[VehicleDBModel]:
        """
        Get a user's vehicles, default first, then newest.

        Args:
            user_id: Owner id
            include_inactive: Also return vehicles with is_active false

        Returns:
            List of vehicles
        """
        stmt = select(self.model).where(self.model.user_id == user_id)
        if not include_inactive:
            stmt = stmt.where(self.model.is_active.is_(True))
        stmt = stmt.order_by(
            self.model.is_default.desc(),
            self.model.created_at.desc(),
            self.model.id.desc(),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_user(
        self, vehicle_id: int, user_id: int
    ) -> Optional[VehicleDBModel]:
        """Get a vehicle only if it belongs to the given user."""
        stmt = select(self.model).where(
            self.model.id == vehicle_id, self.model.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_default_for_user(self, user_id: int) -> Optional[VehicleDBModel]:
        stmt = select(self.model).where(
            self.model.user_id == user_id,
            self.model.is_default.is_(True),
            self.model.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def lock_user_vehicles(self, user_id: int) -> List[VehicleDBModel]:
        """
        Lock all vehicles of a user for the rest of the transaction.

        Concurrent default changes for the same user serialize on these rows.
        SQLite has no row locks and ignores FOR UPDATE.
        """
        stmt = (
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def clear_default(self, user_id: int) -> None:
        """Unset is_default on every vehicle of the user."""
        stmt = (
            update(self.model)
            .where(self.model.user_id == user_id, self.model.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)
        await self.session.flush()
