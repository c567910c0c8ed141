"""Input validation for loan parameters and extraordinary payments.

Raw values arrive from the CLI, the web API or plain Python callers as numbers
or numeric strings. The functions here normalize them into the values the
engine works with, or raise one of the exceptions below with a message that
can be shown to the user as is.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Tuple

from .data_models import TERM_UNITS, TERM_YEARS, LoanParameters
from .utils import MAX_TERM_MONTHS, Number, ZERO, is_finite, parse_amount, to_decimal


class InvalidLoanParameters(ValueError):
    """Principal, rate or term cannot be used for a computation."""


class InvalidExtraPayment(ValueError):
    """An extraordinary payment was rejected when it was being added."""


def _parse(value: Number, parser, error_cls, label: str) -> Decimal:
    if value is None:
        raise error_cls(f"{label} is required")
    try:
        return parser(value)
    except ValueError as exc:
        raise error_cls(f"{label} must be a number; got {value!r}") from exc


def _whole_number(value: Decimal) -> bool:
    return is_finite(value) and value == value.to_integral_value()


def validate_loan_parameters(
    principal: Number,
    annual_rate: Number,
    term: Number,
    term_unit: str = "months",
) -> LoanParameters:
    """Return computation-ready ``LoanParameters`` or raise ``InvalidLoanParameters``.

    Negative interest rates are accepted; only values that are not finite
    numbers are rejected for the rate.
    """
    principal_value = _parse(principal, parse_amount, InvalidLoanParameters, "Principal")
    if not is_finite(principal_value) or principal_value <= ZERO:
        raise InvalidLoanParameters("Principal must be a positive number")

    rate_value = _parse(annual_rate, to_decimal, InvalidLoanParameters, "Annual rate")
    if not is_finite(rate_value):
        raise InvalidLoanParameters("Annual rate must be a finite number")

    if not isinstance(term_unit, str):
        raise InvalidLoanParameters(f"Term unit must be 'months' or 'years'; got {term_unit!r}")
    unit = term_unit.strip().lower()
    if unit not in TERM_UNITS:
        raise InvalidLoanParameters(f"Term unit must be 'months' or 'years'; got {term_unit!r}")

    term_value = _parse(term, to_decimal, InvalidLoanParameters, "Term")
    if not _whole_number(term_value) or term_value <= ZERO:
        raise InvalidLoanParameters("Term must be a positive whole number")
    if term_value * (12 if unit == TERM_YEARS else 1) > MAX_TERM_MONTHS:
        raise InvalidLoanParameters(f"Term must not exceed {MAX_TERM_MONTHS} months")

    params = LoanParameters(
        principal=principal_value,
        annual_rate=rate_value,
        term=int(term_value),
        term_unit=unit,
    )
    return params


def extra_payment_month_limit(total_months: int) -> int:
    """Return the last month an extraordinary payment may target.

    This is the same bound the engine uses as its hard iteration cap.
    """
    return total_months * 2 + 1


def validate_extra_payment(amount: Number, month: Number, total_months: int) -> Tuple[Decimal, int]:
    """Validate an extraordinary payment before it is added to a loan.

    Returns the normalized ``(amount, month)`` pair. When ``total_months`` is
    not positive (the loan itself is invalid) no month is acceptable.
    """
    try:
        amount_value = parse_amount(amount) if amount is not None else None
    except ValueError:
        amount_value = None
    if amount_value is None or not is_finite(amount_value) or amount_value <= ZERO:
        raise InvalidExtraPayment("Please enter a valid amount for the extra payment.")

    limit = extra_payment_month_limit(max(total_months, 0))
    try:
        month_value = to_decimal(month) if month is not None else None
    except ValueError:
        month_value = None
    if (
        month_value is None
        or not _whole_number(month_value)
        or month_value < 1
        or month_value > limit
        or total_months <= 0
    ):
        raise InvalidExtraPayment(f"Please enter a valid month (between 1 and {limit}).")

    return amount_value, int(month_value)
