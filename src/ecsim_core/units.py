# src/ecsim_core/units.py
import logging
from typing import Union

import pint

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.debug("Pint Unit Registry initialized.")


# Project terminology for the two immittance dimensions.
ureg.define("[admittance] = [current] / [voltage]")
ureg.define("[impedance] = [voltage] / [current]")

# --- Canonical dimensionality objects for explicit checks ---
ADMITTANCE_DIMENSIONALITY = ureg.parse_expression('siemens').dimensionality
IMPEDANCE_DIMENSIONALITY = ureg.parse_expression('ohm').dimensionality


def to_si_magnitude(value: Union[int, float, str, Quantity], unit: str) -> float:
    """
    Converts a raw parameter value into a plain float expressed in `unit`.

    Bare numbers are taken to already be in `unit`. Strings are parsed by pint, so
    "1 kohm", "10 uF" and "2.5e3" are all accepted. A string without units is treated
    like a bare number.

    Raises:
        pint.DimensionalityError: If the value's dimension is incompatible with `unit`.
        pint.UndefinedUnitError: If the string names an unknown unit.
        ValueError: If the value cannot be interpreted as a real number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Boolean value '{value}' is not a valid physical quantity.")
    if isinstance(value, (int, float)):
        return float(value)

    qty = value if isinstance(value, Quantity) else Quantity(value)
    if qty.dimensionless and not ureg.Unit(unit).dimensionless:
        # "2.5e3" parses to a dimensionless quantity; read it in the target unit.
        magnitude = qty.to('dimensionless').magnitude
    else:
        magnitude = qty.to(unit).magnitude

    if isinstance(magnitude, complex):
        raise ValueError(f"Value '{value}' must be real, but resolved to a complex number.")
    return float(magnitude)
