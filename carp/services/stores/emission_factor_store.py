"""
Emission factor store.

Owns the write rules for emission factors: profiles must use the known
vehicle and fuel types, factors are non-negative and finite, and factors are
deactivated rather than deleted so trips keep a valid reference.
"""

import logging
from decimal import InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.exceptions import InvalidInput, NotFound
from carp.database.repositories import EmissionFactorRepository
from carp.database.schemas import EmissionFactorDBModel
from carp.services.calculators.unit_converter import UnitConverter
from carp.utils.constants import FuelType, VehicleType

logger = logging.getLogger(__name__)

VEHICLE_TYPES = frozenset(v.value for v in VehicleType)
FUEL_TYPES = frozenset(f.value for f in FuelType)

WRITABLE_FIELDS = (
    "vehicle_type",
    "fuel_type",
    "factor_g_per_km",
    "description",
    "source",
    "is_active",
)


def _plain(value):
    return value.value if hasattr(value, "value") else value


class EmissionFactorStore:
    """Read and write access to emission factors."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = EmissionFactorRepository(session)

    @staticmethod
    def _validate(data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {
            key: _plain(value) for key, value in data.items() if key in WRITABLE_FIELDS
        }

        if "vehicle_type" in cleaned and cleaned["vehicle_type"] not in VEHICLE_TYPES:
            raise InvalidInput(
                "vehicle_type", f"must be one of {', '.join(sorted(VEHICLE_TYPES))}"
            )
        if "fuel_type" in cleaned and cleaned["fuel_type"] not in FUEL_TYPES:
            raise InvalidInput(
                "fuel_type", f"must be one of {', '.join(sorted(FUEL_TYPES))}"
            )

        if "factor_g_per_km" in cleaned:
            try:
                factor = UnitConverter.normalize_number(cleaned["factor_g_per_km"])
            except (InvalidOperation, TypeError, ValueError):
                raise InvalidInput("factor_g_per_km", "must be a number")
            if not factor.is_finite() or factor < 0:
                raise InvalidInput(
                    "factor_g_per_km", "must be a finite, non-negative number"
                )
            cleaned["factor_g_per_km"] = factor

        return cleaned

    async def get(self, factor_id: int) -> EmissionFactorDBModel:
        """
        Get an emission factor by id.

        Raises:
            NotFound: unknown id
        """
        factor = await self.repo.get_by_id(factor_id)
        if factor is None:
            raise NotFound("Emission factor", factor_id)
        return factor

    async def upsert(
        self,
        data: Dict[str, Any],
        factor_id: Optional[int] = None,
        created_by: Optional[int] = None,
    ) -> EmissionFactorDBModel:
        """
        Create a factor, or update the given fields of an existing one.

        Changes are flushed, not committed.

        Args:
            data: Factor fields
            factor_id: Id of the factor to update; None creates a new factor
            created_by: Admin creating the factor

        Returns:
            Created or updated factor

        Raises:
            NotFound: factor_id does not exist
            InvalidInput: unknown vehicle/fuel type or invalid factor
        """
        cleaned = self._validate(data)

        if factor_id is None:
            for required in ("vehicle_type", "fuel_type", "factor_g_per_km"):
                if cleaned.get(required) is None:
                    raise InvalidInput(required, "is required")
            factor = await self.repo.create(created_by=created_by, **cleaned)
            logger.info(
                f"Created emission factor {factor.id}: {factor.vehicle_type}/"
                f"{factor.fuel_type} {factor.factor_g_per_km} g/km"
            )
            return factor

        await self.get(factor_id)
        if not cleaned:
            return await self.get(factor_id)
        factor = await self.repo.update(factor_id, **cleaned)
        logger.info(f"Updated emission factor {factor_id}: {sorted(cleaned)}")
        return factor

    async def deactivate(self, factor_id: int) -> EmissionFactorDBModel:
        """
        Deactivate a factor. Already inactive factors are returned unchanged.

        Raises:
            NotFound: factor_id does not exist
        """
        factor = await self.get(factor_id)
        if not factor.is_active:
            return factor
        factor = await self.repo.update(factor_id, is_active=False)
        logger.info(f"Deactivated emission factor {factor_id}")
        return factor

    async def find_candidates(
        self, vehicle_type: str, fuel_type: str
    ) -> List[EmissionFactorDBModel]:
        """Active factors for a profile, in insertion order."""
        return await self.repo.find_candidates(_plain(vehicle_type), _plain(fuel_type))

    async def list_factors(
        self,
        vehicle_type: Optional[str] = None,
        fuel_type: Optional[str] = None,
        is_active: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[EmissionFactorDBModel]:
        return await self.repo.list_factors(
            vehicle_type=_plain(vehicle_type),
            fuel_type=_plain(fuel_type),
            is_active=is_active,
            skip=skip,
            limit=limit,
        )

    async def reference_factors(self) -> list:
        """g/km values of every active factor, used for eco ratings."""
        return await self.repo.get_active_factor_values()
