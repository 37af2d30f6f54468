"""
Repository for EmissionFactor database operations.

Handles all database interactions for emission factors.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories.base import BaseRepository
from carp.database.schemas import EmissionFactorDBModel


class EmissionFactorRepository(BaseRepository[EmissionFactorDBModel]):
    """Repository for emission factor operations."""

    def __init__(self, session: AsyncSession):
        """
        Initialize emission factor repository.

        Args:
            session: Async database session
        """
        super().__init__(EmissionFactorDBModel, session)

    async def find_candidates(
        self, vehicle_type: str, fuel_type: str
    ) -> List[EmissionFactorDBModel]:
        """
        Get active emission factors for a vehicle profile.

        Args:
            vehicle_type: Vehicle category (e.g., 'car')
            fuel_type: Fuel category (e.g., 'gasoline')

        Returns:
            Active factors ordered by id (insertion order)
        """
        stmt = (
            select(self.model)
            .where(
                self.model.vehicle_type == vehicle_type,
                self.model.fuel_type == fuel_type,
                self.model.is_active.is_(True),
            )
            .order_by(self.model.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_factors(
        self,
        vehicle_type: Optional[str] = None,
        fuel_type: Optional[str] = None,
        is_active: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[EmissionFactorDBModel]:
        """
        List emission factors with optional profile and status filters.

        Returns:
            Factors ordered by vehicle type, fuel type and id
        """
        stmt = select(self.model)
        if vehicle_type:
            stmt = stmt.where(self.model.vehicle_type == vehicle_type)
        if fuel_type:
            stmt = stmt.where(self.model.fuel_type == fuel_type)
        if is_active is not None:
            stmt = stmt.where(self.model.is_active.is_(is_active))

        stmt = (
            stmt.order_by(self.model.vehicle_type, self.model.fuel_type, self.model.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active_factor_values(self) -> List:
        """Get the g/km values of all active factors."""
        stmt = select(self.model.factor_g_per_km).where(self.model.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_profile_and_description(
        self, vehicle_type: str, fuel_type: str, description: Optional[str]
    ) -> Optional[EmissionFactorDBModel]:
        """
        Get a factor by its profile and description.

        Used by the seeder to keep seeding idempotent.
        """
        stmt = select(self.model).where(
            self.model.vehicle_type == vehicle_type,
            self.model.fuel_type == fuel_type,
            self.model.description == description,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
