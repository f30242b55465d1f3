"""
Fixed-point amount helpers.

All values handled by the ledger are integer counts of minor units, so sums
and comparisons are exact. These helpers convert to and from decimal text.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

DECIMALS = 8
COIN = 10 ** DECIMALS

# Values are serialized as signed 64-bit integers
MAX_VALUE = 2 ** 63 - 1
MIN_VALUE = -(2 ** 63)


def to_minor_units(value: Union[str, int, Decimal], decimals: int = DECIMALS) -> int:
    """
    Convert a decimal amount to an integer count of minor units.

    The conversion is exact: it works on the decimal digits directly and
    never rounds through a Decimal context.

    Args:
        value: Amount as a decimal string, int or Decimal (floats are refused)
        decimals: Number of minor-unit digits per whole unit

    Returns:
        int: Amount in minor units

    Raises:
        ValueError: If the value is a float, unparseable, more precise than
            one minor unit, or outside the signed 64-bit range in minor units
    """
    if isinstance(value, float):
        raise ValueError("Float amounts are not accepted; pass a string or Decimal")
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")

    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e

    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")

    sign, digits, exponent = amount.as_tuple()
    coefficient = int("".join(map(str, digits))) if digits else 0
    if coefficient == 0:
        return 0

    if amount.adjusted() + decimals > len(str(MAX_VALUE)) - 1:
        raise ValueError(f"Amount {value} out of range")

    shift = exponent + decimals
    if shift >= 0:
        units = coefficient * 10 ** shift
    else:
        # Coefficients shorter than the shift are all fraction
        if -shift >= len(digits):
            raise ValueError(f"Amount {value} has more than {decimals} decimal places")
        units, remainder = divmod(coefficient, 10 ** -shift)
        if remainder:
            raise ValueError(f"Amount {value} has more than {decimals} decimal places")

    if sign:
        units = -units
    if not MIN_VALUE <= units <= MAX_VALUE:
        raise ValueError(f"Amount {value} out of range")
    return units


def format_amount(units: int, decimals: int = DECIMALS) -> str:
    """Render minor units as a fixed-point decimal string, e.g. 150000000 -> '1.50000000'."""
    sign = "-" if units < 0 else ""
    whole, frac = divmod(abs(units), 10 ** decimals)
    if decimals == 0:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{frac:0{decimals}d}"
