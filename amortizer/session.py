"""Calculator session state.

A ``CalculatorSession`` holds what one user has typed in so far: the raw loan
inputs, the extraordinary payments added to the loan and the last validation
message. Every change is followed by a call to ``recalculate`` which rebuilds
the whole result from scratch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from .data_models import TERM_YEARS, CalculationResult, ExtraPayment
from .engine import calculate
from .utils import Number, as_float, to_decimal
from .validation import InvalidExtraPayment, InvalidLoanParameters, validate_extra_payment, validate_loan_parameters

logger = logging.getLogger(__name__)

LOAN_FIELDS = ("principal", "annual_rate", "term", "term_unit")


@dataclass
class CalculatorSession:
    principal: Any = 100000
    annual_rate: Any = 5
    term: Any = 5
    term_unit: str = TERM_YEARS
    extra_payments: List[ExtraPayment] = field(default_factory=list)
    message: str = ""

    def total_months(self) -> int:
        """Return the validated term in months, or 0 while the loan inputs are invalid."""
        try:
            params = validate_loan_parameters(self.principal, self.annual_rate, self.term, self.term_unit)
        except InvalidLoanParameters:
            return 0
        return params.total_months

    def update_loan(self, **fields: Any) -> None:
        unknown = set(fields) - set(LOAN_FIELDS)
        if unknown:
            raise TypeError(f"Unknown loan fields: {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(self, name, value)

    def add_extra_payment(self, amount: Number, month: Number) -> Optional[ExtraPayment]:
        """Add an extraordinary payment.

        On rejection the reason is stored in ``message`` and ``None`` is
        returned; the existing payments are left untouched.
        """
        try:
            amount_value, month_value = validate_extra_payment(amount, month, self.total_months())
        except InvalidExtraPayment as exc:
            logger.info("Rejected extra payment %r at month %r: %s", amount, month, exc)
            self.message = str(exc)
            return None
        payment = ExtraPayment(id=uuid4().hex, amount=amount_value, month=month_value)
        self.extra_payments.append(payment)
        self.message = ""
        return payment

    def remove_extra_payment(self, payment_id: str) -> None:
        self.extra_payments = [ep for ep in self.extra_payments if ep.id != payment_id]
        self.message = ""

    def dismiss_message(self) -> None:
        self.message = ""

    def recalculate(self) -> CalculationResult:
        return calculate(
            self.principal,
            self.annual_rate,
            self.term,
            self.term_unit,
            self.extra_payments,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the session into JSON-compatible values."""
        def plain(value):
            return str(value) if isinstance(value, Decimal) else value

        return {
            "principal": plain(self.principal),
            "annual_rate": plain(self.annual_rate),
            "term": plain(self.term),
            "term_unit": self.term_unit,
            "extra_payments": [
                {"id": ep.id, "amount": str(ep.amount), "month": ep.month}
                for ep in self.extra_payments
            ],
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CalculatorSession":
        if not data:
            return cls()
        session = cls(**{name: data[name] for name in LOAN_FIELDS if name in data})
        session.extra_payments = [
            ExtraPayment(id=item["id"], amount=to_decimal(item["amount"]), month=int(item["month"]))
            for item in data.get("extra_payments", [])
        ]
        session.message = data.get("message", "")
        return session


def serialize_result(result: CalculationResult) -> Dict[str, Any]:
    """Convert a ``CalculationResult`` into JSON-serialisable dictionaries."""
    summary = result.summary
    return {
        "summary": {
            "monthly_payment": as_float(summary.monthly_payment),
            "payment_count": summary.payment_count,
            "total_interest_paid": as_float(summary.total_interest_paid),
            "total_interest_saved": as_float(summary.total_interest_saved),
            "original_principal": as_float(summary.original_principal),
        },
        "schedule": [
            {
                "month": row.month,
                "monthly_payment": as_float(row.monthly_payment),
                "principal_payment": as_float(row.principal_payment),
                "interest_payment": as_float(row.interest_payment),
                "remaining_balance": as_float(row.remaining_balance),
                "extra_payment_applied": as_float(row.extra_payment_applied),
            }
            for row in result.schedule
        ],
        "chart": result.chart,
    }
