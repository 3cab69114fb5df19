"""
Money helpers.

Amounts travel through the services as :class:`decimal.Decimal` with
two decimal places and are stored in SQLite as integer minor units
(cents), so balances never pick up binary floating-point error.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from .errors import ValidationFailedError

CENT = Decimal("0.01")
MINOR_UNITS = 100

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert ``value`` to a two-place ``Decimal``.

    Floats go through ``str`` so ``1.1`` becomes ``Decimal("1.10")``
    rather than its binary expansion.  Values with more than two
    decimal places are rejected.
    """
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
        quantized = amount.quantize(CENT)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationFailedError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValidationFailedError(f"Invalid amount: {value!r}")
    if quantized != amount:
        raise ValidationFailedError("Amount must have at most 2 decimal places")
    return quantized


def to_minor_units(value: Number) -> int:
    return int(to_decimal(value) * MINOR_UNITS)


def from_minor_units(units: int) -> Decimal:
    return (Decimal(units) / MINOR_UNITS).quantize(CENT)
