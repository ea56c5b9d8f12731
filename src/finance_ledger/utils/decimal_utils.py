"""Decimal utilities for monetary values.

All amounts are held as Decimal so category totals add up exactly to the
statement totals.
"""

import re
from decimal import Decimal, InvalidOperation

ZERO = Decimal("0")

# Leading signed decimal number; trailing text such as a currency code is ignored
LEADING_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_amount(raw_amount: str) -> Decimal:
    """Parse a signed amount string into a Decimal.

    The amount is the longest leading signed decimal number, so
    ``12.50 USD`` reads as 12.50 while ``1_000`` and a quoted
    ``1,234.56`` read as 1. Text with no leading number is rejected and
    treated as a malformed row by the caller.

    Args:
        raw_amount: The raw amount string.

    Returns:
        The parsed amount.

    Raises:
        ValueError: If the value is empty, has no leading number, or is not finite.
    """
    amount_str = raw_amount.strip() if raw_amount else ""
    if not amount_str:
        raise ValueError("Empty amount string")

    match = LEADING_NUMBER_PATTERN.match(amount_str)
    if not match:
        raise ValueError(f"Cannot parse amount '{raw_amount}'")

    try:
        amount = Decimal(match.group(0))
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse amount '{raw_amount}'") from e

    if not amount.is_finite():
        raise ValueError(f"Amount is not a finite number: '{raw_amount}'")

    return amount


def to_decimal(value: object) -> Decimal:
    """Convert a JSON number (or numeric string) to Decimal.

    Floats go through ``str`` first so ``54.32`` stays ``54.32``.

    Args:
        value: int, float, str or Decimal.

    Returns:
        Decimal value.

    Raises:
        ValueError: If the value is not numeric.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        return parse_amount(str(value))
    raise ValueError(f"Not a numeric amount: {value!r}")


def to_json_number(amount: Decimal) -> int | float:
    """Convert a Decimal to a JSON-friendly number.

    Integral values become ints so stored files read naturally.

    Args:
        amount: Decimal amount.

    Returns:
        int or float.
    """
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)
