"""Temperature unit conversion.

Every function passes ``None`` through unchanged so that a missing reading
stays missing all the way to the display layer.
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional, Union

ZERO_CELSIUS_IN_KELVIN = Decimal("273.15")


class TempUnit(str, Enum):
    """Units a temperature can be displayed in."""
    FAHRENHEIT = "fahrenheit"
    CELSIUS = "celsius"


def round_half_up(value: float, places: int = 0) -> float:
    """Round half away from zero (21.5 -> 22, -0.5 -> -1).

    Goes through the decimal repr of the float so that 21.45 rounds the way
    it reads instead of the way it is stored.
    """
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(exponent, rounding=ROUND_HALF_UP))


def kelvin_to_celsius(temp_k: Optional[float]) -> Optional[float]:
    """Convert Kelvin to Celsius at 1-decimal precision."""
    if temp_k is None:
        return None
    return round_half_up(float(Decimal(repr(float(temp_k))) - ZERO_CELSIUS_IN_KELVIN), 1)


def celsius_to_kelvin(temp_c: Optional[float]) -> Optional[float]:
    """Convert Celsius to Kelvin at 2-decimal precision."""
    if temp_c is None:
        return None
    return round_half_up(float(Decimal(repr(float(temp_c))) + ZERO_CELSIUS_IN_KELVIN), 2)


def celsius_to_fahrenheit(temp_c: Optional[float]) -> Optional[float]:
    if temp_c is None:
        return None
    return float(temp_c) * 9.0 / 5.0 + 32.0


def fahrenheit_to_celsius(temp_f: Optional[float]) -> Optional[float]:
    if temp_f is None:
        return None
    return (float(temp_f) - 32.0) * 5.0 / 9.0


def parse_temp_unit(unit: Union[TempUnit, str, None]) -> TempUnit:
    """Resolve a unit name, treating blank or unknown input as Fahrenheit."""
    if isinstance(unit, TempUnit):
        return unit
    if unit and str(unit).strip().lower() == TempUnit.CELSIUS.value:
        return TempUnit.CELSIUS
    return TempUnit.FAHRENHEIT


def to_display_unit(
    temp_c: Optional[float],
    unit: Union[TempUnit, str, None] = TempUnit.FAHRENHEIT
) -> Optional[int]:
    """Convert a stored Celsius value into a whole-degree display value.

    Args:
        temp_c: Temperature in Celsius
        unit: Target unit, Fahrenheit unless Celsius is asked for

    Returns:
        Rounded temperature in the requested unit, or None if temp_c is None
    """
    if temp_c is None:
        return None
    if parse_temp_unit(unit) is TempUnit.CELSIUS:
        temp = float(temp_c)
    else:
        temp = celsius_to_fahrenheit(temp_c)
    return int(round_half_up(temp))
