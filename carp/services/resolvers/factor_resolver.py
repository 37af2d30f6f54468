"""
Emission factor resolution.

Several active factors may cover the same (vehicle_type, fuel_type) profile,
e.g. "Small gasoline car", "Average gasoline car" and "Large gasoline car/SUV".
Resolution tags every candidate with the size bracket its description names
(fuzzy matched with rapidfuzz so "Lrg" or "S.U.V" still count), works out the
vehicle's own bracket from its engine size or fuel efficiency, and runs an
ordered rule chain:

1. ``single_candidate``: only one candidate, use it.
2. ``size_bracket_match``: first candidate tagged with the vehicle's bracket.
3. ``insertion_order``: first candidate by id. This is an approximation for
   vehicles with no size hints or catalogues with no size wording.

``resolve`` is pure: the same vehicle and candidates always give the same
factor, whatever order the candidates are passed in.
"""

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, NamedTuple, Optional, Sequence

from rapidfuzz import fuzz, process
from sqlalchemy.ext.asyncio import AsyncSession

from carp.core.exceptions import NoFactorAvailable
from carp.services.calculators.unit_converter import UnitConverter
from carp.services.stores.emission_factor_store import EmissionFactorStore
from carp.utils.constants import FuelType, VehicleType

logger = logging.getLogger(__name__)

SMALL = "small"
AVERAGE = "average"
LARGE = "large"

SIZE_VOCABULARY = {
    "small": SMALL,
    "compact": SMALL,
    "mini": SMALL,
    "light": SMALL,
    "average": AVERAGE,
    "medium": AVERAGE,
    "standard": AVERAGE,
    "large": LARGE,
    "suv": LARGE,
    "heavy": LARGE,
}

# Minimum rapidfuzz ratio for a description token to count as a size word
SIZE_MATCH_THRESHOLD = 85


class SizeThresholds(NamedTuple):
    """Size brackets of one vehicle type: engine in litres, efficiency in km/l."""

    small_engine_below: Decimal
    large_engine_from: Decimal
    small_efficiency_from: Decimal
    large_efficiency_up_to: Decimal


# Types missing here (buses) get no size bracket
SIZE_THRESHOLDS = {
    VehicleType.CAR.value: SizeThresholds(
        Decimal("1.6"), Decimal("3.0"), Decimal("18"), Decimal("8")
    ),
    VehicleType.MOTORCYCLE.value: SizeThresholds(
        Decimal("0.5"), Decimal("1.0"), Decimal("35"), Decimal("18")
    ),
    VehicleType.VAN.value: SizeThresholds(
        Decimal("2.0"), Decimal("3.5"), Decimal("14"), Decimal("7")
    ),
    VehicleType.TRUCK.value: SizeThresholds(
        Decimal("5.0"), Decimal("7.0"), Decimal("7"), Decimal("3.5")
    ),
}

# engine_size and fuel_efficiency are litres and km/l only for these fuels
COMBUSTION_FUELS = frozenset(
    {
        FuelType.GASOLINE.value,
        FuelType.DIESEL.value,
        FuelType.HYBRID.value,
        FuelType.LPG.value,
        FuelType.CNG.value,
    }
)


@dataclass(frozen=True)
class VehicleProfile:
    """The parts of a vehicle that resolution looks at."""

    vehicle_type: str
    fuel_type: str
    engine_size: Optional[Decimal] = None
    fuel_efficiency: Optional[Decimal] = None

    @classmethod
    def from_vehicle(cls, vehicle) -> "VehicleProfile":
        return cls(
            vehicle_type=getattr(vehicle.vehicle_type, "value", vehicle.vehicle_type),
            fuel_type=getattr(vehicle.fuel_type, "value", vehicle.fuel_type),
            engine_size=getattr(vehicle, "engine_size", None),
            fuel_efficiency=getattr(vehicle, "fuel_efficiency", None),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "VehicleProfile":
        def number(key):
            value = data.get(key)
            return None if value is None else UnitConverter.normalize_number(value)

        return cls(
            vehicle_type=data["vehicle_type"],
            fuel_type=data["fuel_type"],
            engine_size=number("engine_size"),
            fuel_efficiency=number("fuel_efficiency"),
        )

    def to_dict(self) -> dict:
        return {
            "vehicle_type": self.vehicle_type,
            "fuel_type": self.fuel_type,
            "engine_size": None if self.engine_size is None else str(self.engine_size),
            "fuel_efficiency": (
                None if self.fuel_efficiency is None else str(self.fuel_efficiency)
            ),
        }


@dataclass(frozen=True)
class TaggedCandidate:
    factor: object
    size: Optional[str]


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one vehicle profile."""

    factor: object
    method: str
    size_bracket: Optional[str]
    candidates: tuple = field(default_factory=tuple)

    def to_metadata(self) -> dict:
        return {
            "method": self.method,
            "size_bracket": self.size_bracket,
            "candidate_count": len(self.candidates),
            "description": getattr(self.factor, "description", None),
        }


def size_from_description(description: Optional[str]) -> Optional[str]:
    """
    Size bracket named by a factor description, if any.

    Example:
        >>> size_from_description("Large gasoline car/SUV")
        'large'
    """
    if not description:
        return None
    for token in re.findall(r"[a-z]+", description.lower()):
        match = process.extractOne(
            token,
            SIZE_VOCABULARY.keys(),
            scorer=fuzz.ratio,
            score_cutoff=SIZE_MATCH_THRESHOLD,
        )
        if match is not None:
            return SIZE_VOCABULARY[match[0]]
    return None


def size_bracket(profile: VehicleProfile) -> Optional[str]:
    """
    Size bracket of a vehicle: engine size first, fuel efficiency second.

    Thresholds depend on the vehicle type, so a 3.0 l pickup is a light
    truck while a 3.0 l car is large. Electric vehicles report battery kWh
    and km/kWh, which say nothing about size, so they have no bracket.
    """
    thresholds = SIZE_THRESHOLDS.get(profile.vehicle_type)
    if thresholds is None or profile.fuel_type not in COMBUSTION_FUELS:
        return None

    if profile.engine_size is not None:
        engine_size = UnitConverter.normalize_number(profile.engine_size)
        if engine_size < thresholds.small_engine_below:
            return SMALL
        if engine_size >= thresholds.large_engine_from:
            return LARGE
        return AVERAGE

    if profile.fuel_efficiency is not None:
        efficiency = UnitConverter.normalize_number(profile.fuel_efficiency)
        if efficiency >= thresholds.small_efficiency_from:
            return SMALL
        if efficiency <= thresholds.large_efficiency_up_to:
            return LARGE
        return AVERAGE

    return None


def tag_candidates(candidates: Sequence) -> list[TaggedCandidate]:
    """Tag candidates with their size bracket, ordered by id."""
    ordered = sorted(candidates, key=lambda f: (f.id is None, f.id or 0))
    return [TaggedCandidate(f, size_from_description(f.description)) for f in ordered]


def _single_candidate(tagged, bracket):
    return tagged[0] if len(tagged) == 1 else None


def _size_bracket_match(tagged, bracket):
    if bracket is None:
        return None
    return next((c for c in tagged if c.size == bracket), None)


def _insertion_order(tagged, bracket):
    return tagged[0]


RULES: tuple[tuple[str, Callable], ...] = (
    ("single_candidate", _single_candidate),
    ("size_bracket_match", _size_bracket_match),
    ("insertion_order", _insertion_order),
)


def resolve(vehicle, candidates: Sequence) -> Resolution:
    """
    Pick exactly one emission factor for a vehicle.

    Args:
        vehicle: Vehicle model or VehicleProfile
        candidates: Active factors for the vehicle's profile

    Returns:
        Resolution naming the factor and the rule that picked it

    Raises:
        NoFactorAvailable: no candidates
    """
    profile = vehicle if isinstance(vehicle, VehicleProfile) else VehicleProfile.from_vehicle(vehicle)
    if not candidates:
        raise NoFactorAvailable(profile.vehicle_type, profile.fuel_type)

    tagged = tag_candidates(candidates)
    bracket = size_bracket(profile)

    for method, rule in RULES:
        chosen = rule(tagged, bracket)
        if chosen is not None:
            return Resolution(
                factor=chosen.factor,
                method=method,
                size_bracket=bracket,
                candidates=tuple(tagged),
            )

    # insertion_order always picks
    raise AssertionError("resolution rule chain ended without a factor")


class FactorResolver:
    """Loads candidates from the store and resolves them."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.store = EmissionFactorStore(session)

    async def resolve(self, vehicle) -> Resolution:
        profile = vehicle if isinstance(vehicle, VehicleProfile) else VehicleProfile.from_vehicle(vehicle)
        candidates = await self.store.find_candidates(profile.vehicle_type, profile.fuel_type)
        resolution = resolve(profile, candidates)
        logger.debug(
            f"Resolved {profile.vehicle_type}/{profile.fuel_type} to factor "
            f"{resolution.factor.id} via {resolution.method}"
        )
        return resolution
