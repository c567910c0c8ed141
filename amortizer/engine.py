"""Core calculation engine for the loan amortizer.

This module implements the financial logic required to build amortization
schedules for fixed-payment (annuity) loans with extraordinary payments, and
the baseline used to quantify how much interest those payments save.

Neither ``compute_schedule`` nor ``compute_baseline`` raises for bad numbers:
invalid inputs yield an empty schedule and zero interest.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from .data_models import CalculationResult, ExtraPayment, LoanParameters, ScheduleRow, SummaryMetrics
from .utils import EPSILON, MAX_TERM_MONTHS, ZERO, Number, is_finite, to_decimal
from .validation import InvalidLoanParameters, extra_payment_month_limit, validate_loan_parameters

logger = logging.getLogger(__name__)


def calculate_monthly_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * i / (1 - (1 + i)^-n)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(term)
    return principal * (rate_per_month / (1 - (1 + rate_per_month) ** -term))


def _loan_inputs(principal, annual_rate, total_months) -> Optional[Tuple[Decimal, Decimal, Decimal]]:
    """Return ``(principal, monthly rate, payment)`` or ``None`` when no loan can be built."""
    if not isinstance(total_months, int) or isinstance(total_months, bool):
        return None
    if total_months <= 0 or total_months > MAX_TERM_MONTHS:
        return None
    try:
        principal = to_decimal(principal)
        annual_rate = to_decimal(annual_rate)
    except ValueError:
        return None
    if not (is_finite(principal) and is_finite(annual_rate)) or principal <= ZERO:
        return None
    rate_per_month = LoanParameters(principal, annual_rate, total_months).monthly_rate
    if rate_per_month <= -1:
        return None
    try:
        monthly_payment = calculate_monthly_payment(principal, rate_per_month, total_months)
    except ArithmeticError:
        return None
    if not is_finite(monthly_payment):
        return None
    return principal, rate_per_month, monthly_payment


def compute_baseline(principal: Decimal, annual_rate: Decimal, total_months: int) -> Decimal:
    """Return the total interest of the standard schedule, without extra payments.

    Parameters
    ----------
    principal: Decimal
        The original loan amount.
    annual_rate: Decimal
        Annual nominal interest rate in percent.
    total_months: int
        Number of monthly payments.

    Returns
    -------
    Decimal
        Accumulated interest, or zero when the inputs cannot describe a loan.
    """
    inputs = _loan_inputs(principal, annual_rate, total_months)
    if inputs is None:
        return ZERO
    principal, rate_per_month, monthly_payment = inputs

    balance = principal
    total_interest = ZERO
    for _ in range(total_months):
        if balance <= EPSILON:
            break
        interest_payment = balance * rate_per_month
        principal_payment = monthly_payment - interest_payment
        if principal_payment < ZERO:
            principal_payment = ZERO
        if balance < principal_payment:
            principal_payment = balance
        total_interest += interest_payment
        balance -= principal_payment
    return total_interest


def _prepare_extra_payments(extra_payments: Iterable[ExtraPayment]) -> List[Tuple[int, Decimal]]:
    """Return ``(month, amount)`` pairs sorted by month.

    Payments that cannot apply (non-positive or non-numeric amounts, months
    that are not whole numbers) are dropped. The amount is a tie-breaker so
    that the input order never changes the result.
    """
    prepared: List[Tuple[int, Decimal]] = []
    for ep in extra_payments:
        try:
            amount = to_decimal(ep.amount)
        except ValueError:
            continue
        if not is_finite(amount) or amount <= ZERO:
            continue
        if not isinstance(ep.month, int) or isinstance(ep.month, bool):
            continue
        prepared.append((ep.month, amount))
    return sorted(prepared)


def compute_schedule(
    params: LoanParameters, extra_payments: Iterable[ExtraPayment] = ()
) -> Tuple[List[ScheduleRow], Decimal]:
    """Compute the amortization schedule of a loan with extraordinary payments.

    Parameters
    ----------
    params: LoanParameters
        The loan. Its regular payment is computed once from the original
        principal and term; extraordinary payments shorten the schedule but
        never re-amortize the installment.
    extra_payments: Iterable[ExtraPayment]
        Lump sums in any order. Payments sharing a month are summed.

    Returns
    -------
    schedule: List[ScheduleRow]
        One row per month until the balance is paid off, capped at
        ``2 * total_months + 1`` months.
    total_interest_paid: Decimal
        Sum of ``interest_payment`` over the schedule.
    """
    try:
        total_months = params.total_months
    except TypeError:
        total_months = None
    inputs = _loan_inputs(params.principal, params.annual_rate, total_months)
    if inputs is None:
        logger.debug("Skipping schedule for invalid loan parameters: %r", params)
        return [], ZERO
    principal, rate_per_month, monthly_payment = inputs

    pending = _prepare_extra_payments(extra_payments)
    next_extra = 0

    schedule: List[ScheduleRow] = []
    balance = principal
    total_interest_paid = ZERO
    max_months = extra_payment_month_limit(total_months)

    month = 1
    while month <= max_months and balance > EPSILON:
        # Extra payments targeting months already simulated can never apply.
        while next_extra < len(pending) and pending[next_extra][0] < month:
            next_extra += 1

        extra_applied = ZERO
        while next_extra < len(pending) and pending[next_extra][0] == month:
            if balance <= EPSILON:
                break
            applied = min(pending[next_extra][1], balance)
            extra_applied += applied
            balance -= applied
            next_extra += 1

        extra_value: Optional[Decimal] = extra_applied if extra_applied > ZERO else None

        # Paid off by the extra payments alone
        if balance <= EPSILON:
            schedule.append(
                ScheduleRow(
                    month=month,
                    monthly_payment=ZERO,
                    principal_payment=ZERO,
                    interest_payment=ZERO,
                    remaining_balance=ZERO,
                    extra_payment_applied=extra_value,
                )
            )
            balance = ZERO
            break

        # Interest accrues on the balance left after this month's extra payments.
        interest_payment = balance * rate_per_month
        principal_payment = monthly_payment - interest_payment

        if principal_payment > balance + EPSILON:
            # Final month: the regular installment would overpay
            principal_payment = balance
            payment = principal_payment + interest_payment
            balance = ZERO
        else:
            payment = monthly_payment
            balance -= principal_payment

        if interest_payment < ZERO:
            interest_payment = ZERO
        if principal_payment < ZERO:
            principal_payment = ZERO
        # Sub-cent residue left by the last regular installment
        if balance <= EPSILON:
            balance = ZERO

        schedule.append(
            ScheduleRow(
                month=month,
                monthly_payment=payment,
                principal_payment=principal_payment,
                interest_payment=interest_payment,
                remaining_balance=balance,
                extra_payment_applied=extra_value,
            )
        )
        total_interest_paid += interest_payment
        month += 1

    logger.debug(
        "Computed %d schedule rows for %d months with %d extra payments",
        len(schedule),
        total_months,
        len(pending),
    )
    return schedule, total_interest_paid


def summarize(
    params: LoanParameters, schedule: List[ScheduleRow], total_interest_paid: Decimal
) -> SummaryMetrics:
    """Derive the summary metrics of a schedule, including interest saved."""
    baseline = compute_baseline(params.principal, params.annual_rate, params.total_months)
    return SummaryMetrics(
        monthly_payment=schedule[0].monthly_payment if schedule else ZERO,
        payment_count=len(schedule),
        total_interest_paid=total_interest_paid,
        total_interest_saved=baseline - total_interest_paid,
        original_principal=params.principal,
    )


def chart_series(schedule: Iterable[ScheduleRow]) -> List[dict]:
    """Convert schedule rows into the stacked series plotted per month."""
    series = []
    for row in schedule:
        series.append(
            {
                "month": row.month,
                "regular_principal": float(row.principal_payment),
                "interest": float(row.interest_payment),
                "extra_payment": float(row.extra_payment_applied or ZERO),
                "remaining_balance": float(row.remaining_balance),
            }
        )
    return series


def calculate(
    principal: Number,
    annual_rate: Number,
    term: Number,
    term_unit: str = "months",
    extra_payments: Iterable[ExtraPayment] = (),
) -> CalculationResult:
    """Validate raw loan inputs and compute schedule, chart and summary.

    Invalid loan parameters produce an empty result with a zeroed summary.
    """
    try:
        params = validate_loan_parameters(principal, annual_rate, term, term_unit)
    except InvalidLoanParameters as exc:
        logger.debug("Resetting result: %s", exc)
        return CalculationResult()

    schedule, total_interest_paid = compute_schedule(params, extra_payments)
    return CalculationResult(
        schedule=schedule,
        chart=chart_series(schedule),
        summary=summarize(params, schedule, total_interest_paid),
    )
