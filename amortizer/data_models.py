"""Data models for the loan amortizer.

This module defines dataclasses representing the different entities used by the
amortizer: the loan parameters, extraordinary (lump-sum) payments, individual
schedule rows and the summary metrics derived from a schedule. Using
dataclasses makes it easy to construct, inspect and serialize these structures.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

TERM_MONTHS = "months"
TERM_YEARS = "years"
TERM_UNITS = (TERM_MONTHS, TERM_YEARS)


@dataclass(frozen=True)
class LoanParameters:
    """Validated inputs of a fixed-payment (annuity) loan.

    Attributes
    ----------
    principal: Decimal
        The original loan amount before interest.
    annual_rate: Decimal
        Annual nominal interest rate in percent (``5`` means 5 %).
    term: int
        The loan term, expressed in ``term_unit``.
    term_unit: str
        ``"months"`` or ``"years"``.
    """

    principal: Decimal
    annual_rate: Decimal
    term: int
    term_unit: str = TERM_MONTHS

    @property
    def total_months(self) -> int:
        if self.term_unit == TERM_YEARS:
            return self.term * 12
        return self.term

    @property
    def monthly_rate(self) -> Decimal:
        return (self.annual_rate / Decimal(100)) / Decimal(12)


@dataclass(frozen=True)
class ExtraPayment:
    """An extraordinary payment applied to the principal at a given month.

    Attributes
    ----------
    id: str
        Opaque identifier assigned when the payment is created. It is only
        unique within the session that created it.
    amount: Decimal
        The lump sum applied to the principal.
    month: int
        The 1-based month index at which the payment is applied.
    """

    id: str
    amount: Decimal
    month: int


@dataclass
class ScheduleRow:
    """A row in the amortization schedule.

    ``principal_payment`` only covers the regular installment; money paid
    through extraordinary payments shows up in ``extra_payment_applied``,
    which is ``None`` for months without one.
    """

    month: int
    monthly_payment: Decimal
    principal_payment: Decimal
    interest_payment: Decimal
    remaining_balance: Decimal
    extra_payment_applied: Optional[Decimal] = None


@dataclass
class SummaryMetrics:
    """Aggregate figures shown next to a schedule."""

    monthly_payment: Decimal = Decimal("0")
    payment_count: int = 0
    total_interest_paid: Decimal = Decimal("0")
    total_interest_saved: Decimal = Decimal("0")
    original_principal: Decimal = Decimal("0")


@dataclass
class CalculationResult:
    """Everything a presentation layer needs after one recomputation."""

    schedule: List[ScheduleRow] = field(default_factory=list)
    chart: List[dict] = field(default_factory=list)
    summary: SummaryMetrics = field(default_factory=SummaryMetrics)
