"""
Monetary precision helpers.

Key Principles:
1. NEVER use float for money
2. Keep full precision through intermediate steps
3. Quantize to two places only when a value is written to an amount field
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(amount: Union[Decimal, str, int, float]) -> Decimal:
    """
    Convert any numeric input to Decimal without float artefacts.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(amount, float):
        # Convert float to string first to avoid precision issues
        amount = str(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError):
        raise ValueError(f"'{amount}' is not a valid amount.")
    if not value.is_finite():
        raise ValueError(f"'{amount}' is not a valid amount.")
    return value


def quantize(amount: Union[Decimal, str, int, float]) -> Decimal:
    """
    Round to two decimal places, halves away from zero.

    Examples:
        >>> quantize("10.125")
        Decimal('10.13')
        >>> quantize("2")
        Decimal('2.00')
    """
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def has_at_most_two_places(amount: Union[Decimal, str, int]) -> bool:
    """True when `amount` needs no rounding to be stored in a money field."""
    value = to_decimal(amount)
    return value == value.quantize(CENT)
