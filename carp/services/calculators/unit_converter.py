"""
Unit conversion utilities for emissions calculations.

Emission factors are stored in grams of CO2 per kilometre; trip emissions and
dashboard totals are reported in kilograms of CO2.
"""

from decimal import ROUND_HALF_UP, Decimal

from carp.utils.constants import GRAMS_PER_KG


class UnitConverter:
    """
    Unit conversion service.

    Provides methods to convert between the units used in emissions
    calculations.
    """

    # Conversion constants
    KG_PRECISION = Decimal("0.01")
    KM_PRECISION = Decimal("0.01")

    @staticmethod
    def grams_to_kg(grams: float | Decimal) -> Decimal:
        """
        Convert grams to kilograms.

        Args:
            grams: Mass in grams

        Returns:
            Mass in kilograms as Decimal

        Example:
            >>> UnitConverter.grams_to_kg(12000)
            Decimal('12')
        """

        if isinstance(grams, float):
            grams = Decimal(str(grams))
        return grams / GRAMS_PER_KG

    @staticmethod
    def round_kg(kg: Decimal) -> Decimal:
        """
        Round a mass in kilograms to the reported precision (0.01 kg).

        Example:
            >>> UnitConverter.round_kg(Decimal("36.78"))
            Decimal('36.78')
        """

        return kg.quantize(UnitConverter.KG_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def round_km(km: Decimal) -> Decimal:
        """
        Round a distance to the stored precision (0.01 km).

        Example:
            >>> UnitConverter.round_km(Decimal("33.333333"))
            Decimal('33.33')
        """

        return km.quantize(UnitConverter.KM_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def normalize_number(value: str | int | float | Decimal) -> Decimal:
        """
        Normalize a number value to Decimal.

        Handles string inputs with commas, floats, and existing Decimals.

        Args:
            value: Number value in various formats

        Returns:
            Normalized Decimal value (may be NaN or infinite)

        Example:
            >>> UnitConverter.normalize_number("1,234.56")
            Decimal('1234.56')
        """

        if isinstance(value, Decimal):
            return value

        if isinstance(value, str):
            # Remove commas from string numbers
            value = value.replace(",", "")

        return Decimal(str(value))
