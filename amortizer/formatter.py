"""Output helpers for the loan amortizer.

This module provides simple functions to render amortization schedules and
summaries in a tabular text format. We rely only on built‑in printing and
string formatting; locale-aware currency formatting is left to whatever
presentation layer consumes the results.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import ScheduleRow, SummaryMetrics


def print_summary(summary: SummaryMetrics) -> None:
    """Print a summary of loan metrics in a human‑readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Principal          : {summary.original_principal:.2f}")
    print(f"Monthly payment    : {summary.monthly_payment:.2f}")
    print(f"Payments           : {summary.payment_count}")
    print(f"Total interest     : {summary.total_interest_paid:.2f}")
    # Only meaningful when extraordinary payments shortened the loan
    if summary.total_interest_saved:
        print(f"Interest saved     : {summary.total_interest_saved:.2f}")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleRow]) -> None:
    """Print the amortization schedule as a simple table.

    Months with an extraordinary payment show its amount in the ``Extra``
    column; other months show ``-``.
    """
    headers = [
        "Month",
        "Payment",
        "Principal",
        "Interest",
        "Extra",
        "Balance",
    ]
    print("\t".join(headers))
    for row in schedule:
        extra = f"{row.extra_payment_applied:.2f}" if row.extra_payment_applied is not None else "-"
        cells = [
            str(row.month),
            f"{row.monthly_payment:.2f}",
            f"{row.principal_payment:.2f}",
            f"{row.interest_payment:.2f}",
            extra,
            f"{row.remaining_balance:.2f}",
        ]
        print("\t".join(cells))
