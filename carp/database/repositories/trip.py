"""
Repository for Trip database operations.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from carp.database.repositories.base import BaseRepository
from carp.database.schemas import TripDBModel
from carp.utils.constants import EmissionsStatus


class TripRepository(BaseRepository[TripDBModel]):
    """Repository for trip operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(TripDBModel, session)

    async def list_for_user(
        self,
        user_id: int,
        travel_mode: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Tuple[List[TripDBModel], int]:
        """
        Get a page of a user's trips, newest first.

        Returns:
            Tuple of (trips, total count)
        """
        conditions = [self.model.user_id == user_id]
        if travel_mode:
            conditions.append(self.model.travel_mode == travel_mode)

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

    async def all_for_user(self, user_id: int) -> List[TripDBModel]:
        """Get every trip of a user in insertion order."""
        stmt = (
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_for_user(self, trip_id: int, user_id: int) -> Optional[TripDBModel]:
        stmt = select(self.model).where(
            self.model.id == trip_id, self.model.user_id == user_id
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_pending(self, user_id: Optional[int] = None) -> List[TripDBModel]:
        """Get trips still waiting for an emission factor."""
        stmt = select(self.model).where(
            self.model.emissions_status == EmissionsStatus.PENDING
        )
        if user_id is not None:
            stmt = stmt.where(self.model.user_id == user_id)
        result = await self.session.execute(stmt.order_by(self.model.id))
        return list(result.scalars().all())

    async def record_emissions(
        self,
        trip_id: int,
        co2_emissions: Decimal,
        emission_factor_id: int,
        emission_factor_g_per_km: Decimal,
        calculation_metadata: Dict[str, Any],
    ) -> bool:
        """
        Fill the emissions of a pending trip.

        The update only matches pending rows, so calculated trips keep their
        frozen figure.

        Returns:
            True if the trip was pending and is now calculated
        """
        stmt = (
            update(self.model)
            .where(
                self.model.id == trip_id,
                self.model.emissions_status == EmissionsStatus.PENDING,
            )
            .values(
                co2_emissions=co2_emissions,
                emissions_status=EmissionsStatus.CALCULATED,
                emission_factor_id=emission_factor_id,
                emission_factor_g_per_km=emission_factor_g_per_km,
                calculation_metadata=calculation_metadata,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def calculated_totals(self) -> Tuple[Decimal, Decimal]:
        """
        Sum distance and CO2 over all calculated trips.

        Returns:
            Tuple of (total distance in km, total CO2 in kg)
        """
        stmt = select(
            func.coalesce(func.sum(self.model.distance_km), 0),
            func.coalesce(func.sum(self.model.co2_emissions), 0),
        ).where(self.model.emissions_status == EmissionsStatus.CALCULATED)
        distance, co2 = (await self.session.execute(stmt)).one()
        return Decimal(str(distance)), Decimal(str(co2))

    async def for_user_since(
        self, user_id: int, since: datetime, vehicle_id: Optional[int] = None
    ) -> List[TripDBModel]:
        """Get a user's trips created at or after ``since``, oldest first."""
        stmt = select(self.model).where(
            self.model.user_id == user_id, self.model.created_at >= since
        )
        if vehicle_id is not None:
            stmt = stmt.where(self.model.vehicle_id == vehicle_id)
        result = await self.session.execute(
            stmt.order_by(self.model.created_at, self.model.id)
        )
        return list(result.scalars().all())

    async def saved_since(
        self, since: datetime, vehicle_type: Optional[str] = None
    ) -> List[TripDBModel]:
        """Get every user's saved trips created at or after ``since``."""
        stmt = select(self.model).where(
            self.model.is_saved.is_(True), self.model.created_at >= since
        )
        if vehicle_type:
            stmt = stmt.where(self.model.vehicle_type == vehicle_type)
        result = await self.session.execute(
            stmt.order_by(self.model.created_at, self.model.id)
        )
        return list(result.scalars().all())

    async def all_for_users(self, user_ids: List[int]) -> List[TripDBModel]:
        if not user_ids:
            return []
        stmt = (
            select(self.model)
            .where(self.model.user_id.in_(user_ids))
            .order_by(self.model.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
