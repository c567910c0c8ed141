"""Utility functions for the loan amortizer.

This module provides helpers for turning user input (numbers or numeric
strings) into ``Decimal`` values and the shared numeric constants used by the
engine.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, getcontext
from typing import Optional, Tuple, Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

# Balances at or below one cent are treated as fully paid.
EPSILON = Decimal("0.01")
# Longest supported loan, in months (100 years).
MAX_TERM_MONTHS = 1200
ZERO = Decimal("0")

Number = Union[Decimal, float, int, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a number or numeric string into a ``Decimal``.

    Strings have surrounding whitespace and thousands separators (commas)
    removed. Floats go through ``str`` so that ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. ``NaN`` and infinities are returned as
    the corresponding special ``Decimal`` values; callers decide whether they
    are acceptable. Raises ``ValueError`` if conversion fails.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    try:
        cleaned = str(value).strip().replace(",", "")
        return Decimal(cleaned)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def parse_amount(value: Number) -> Decimal:
    """Parse an amount with optional ``k``/``m`` suffixes.

    Accepts plain numbers ("500000") and shorthand such as "500k" meaning
    500 000 or "1.2m" meaning 1 200 000.
    """
    if not isinstance(value, str):
        return to_decimal(value)
    text = value.strip().lower().replace(",", "")
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    return to_decimal(text) * factor


def parse_extra_payment(value: str) -> Tuple[Decimal, Decimal]:
    """Parse an ``AMOUNT@MONTH`` string into its two numeric parts.

    The month is returned as a ``Decimal`` so that the validator can reject
    fractional months with a proper message.
    """
    parts = value.split("@")
    if len(parts) != 2:
        raise ValueError(f"Extra payment must be in AMOUNT@MONTH format; got {value}")
    amount_str, month_str = parts
    return parse_amount(amount_str), to_decimal(month_str)


def is_finite(value: Decimal) -> bool:
    return isinstance(value, Decimal) and value.is_finite()


def as_float(value) -> Optional[float]:
    """Convert ``Decimal`` values (or ``None``) for JSON output."""
    if value is None:
        return None
    return float(value)
