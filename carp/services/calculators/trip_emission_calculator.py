"""
Trip emission calculator.

Turns a resolved emission factor (g CO2/km) and a trip distance (km) into a
CO2 figure in kilograms, and rates factors on a 1-5 eco scale.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from carp.core.exceptions import InvalidInput
from carp.services.calculators.unit_converter import UnitConverter
from carp.utils.constants import DEFAULT_BASELINE_FACTOR_G_PER_KM


def _factor_value(factor) -> Decimal:
    value = getattr(factor, "factor_g_per_km", factor)
    return UnitConverter.normalize_number(value)


class TripEmissionCalculator:
    """
    Pure emission arithmetic.

    All methods are static: the calculator holds no state and never touches
    the database.
    """

    MAX_RATING = 5
    MIN_RATING = 1
    UNRATED_DEFAULT = 3

    # Largest figures a trip row holds: distance Numeric(10, 2), CO2 Numeric(10, 4)
    MAX_TRIP_DISTANCE_KM = Decimal("99999999.99")
    MAX_TRIP_CO2_KG = Decimal("999999.99")

    @staticmethod
    def validate_distance(distance_km) -> Decimal:
        """
        Validate a trip distance.

        Args:
            distance_km: Distance in kilometres

        Returns:
            Distance as Decimal

        Raises:
            InvalidInput: distance is not a number, not finite or negative
        """
        try:
            distance = UnitConverter.normalize_number(distance_km)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidInput("distance_km", "must be a number")

        if not distance.is_finite():
            raise InvalidInput("distance_km", "must be a finite number")
        if distance < 0:
            raise InvalidInput("distance_km", "must not be negative")
        return distance

    @staticmethod
    def validate_trip_distance(distance_km) -> Decimal:
        """
        Validate the distance of a trip about to be stored.

        The distance is rounded to 0.01 km first, so the stored distance is
        the one emissions are computed from.

        Raises:
            InvalidInput: invalid distance, or longer than a trip row can hold
        """
        distance = UnitConverter.round_km(
            TripEmissionCalculator.validate_distance(distance_km)
        )
        if distance > TripEmissionCalculator.MAX_TRIP_DISTANCE_KM:
            raise InvalidInput(
                "distance_km",
                f"must not exceed {TripEmissionCalculator.MAX_TRIP_DISTANCE_KM} km",
            )
        return distance

    @staticmethod
    def trip_emissions(distance_km, factor) -> Decimal:
        """
        compute_emissions for a trip about to be stored.

        Raises:
            InvalidInput: the emissions exceed what a trip row can hold
        """
        co2 = TripEmissionCalculator.compute_emissions(distance_km, factor)
        if co2 > TripEmissionCalculator.MAX_TRIP_CO2_KG:
            raise InvalidInput(
                "distance_km",
                f"emissions over this distance exceed "
                f"{TripEmissionCalculator.MAX_TRIP_CO2_KG} kg CO2",
            )
        return co2

    @staticmethod
    def compute_emissions(distance_km, factor) -> Decimal:
        """
        Compute the CO2 emitted over a distance.

        kg CO2 = distance_km x factor_g_per_km / 1000, rounded to 0.01 kg.

        Args:
            distance_km: Distance in kilometres
            factor: Emission factor model or its g/km value

        Returns:
            CO2 in kilograms

        Example:
            >>> TripEmissionCalculator.compute_emissions(100, Decimal("120.0"))
            Decimal('12.00')
        """
        distance = TripEmissionCalculator.validate_distance(distance_km)
        grams = distance * _factor_value(factor)
        return UnitConverter.round_kg(UnitConverter.grams_to_kg(grams))

    @staticmethod
    def baseline_emissions(
        distance_km, baseline: Decimal = DEFAULT_BASELINE_FACTOR_G_PER_KM
    ) -> Decimal:
        """CO2 the same distance would have cost with the baseline car."""
        return TripEmissionCalculator.compute_emissions(distance_km, baseline)

    @staticmethod
    def eco_rating(
        factor_g_per_km, reference_factors: Optional[Iterable] = None
    ) -> int:
        """
        Rate a factor from 1 (worst) to 5 (best).

        The rating drops one step for every fifth of the reference factors
        that are strictly cleaner than this one. Zero-emission travel is
        always rated 5; without reference factors the rating is 3.

        Args:
            factor_g_per_km: Factor being rated (g/km)
            reference_factors: g/km values of the known active factors

        Returns:
            Rating in 1..5
        """
        value = _factor_value(factor_g_per_km)
        if value <= 0:
            return TripEmissionCalculator.MAX_RATING

        references = [_factor_value(r) for r in (reference_factors or ())]
        if not references:
            return TripEmissionCalculator.UNRATED_DEFAULT

        cleaner = sum(1 for r in references if r < value)
        steps = math.floor(
            Decimal(TripEmissionCalculator.MAX_RATING) * cleaner / len(references)
        )
        return TripEmissionCalculator.MAX_RATING - min(
            TripEmissionCalculator.MAX_RATING - TripEmissionCalculator.MIN_RATING,
            steps,
        )
