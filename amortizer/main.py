"""Command‑line interface for the loan amortizer.

This module uses the ``click`` library to implement a multi‑command interface.
Users can compute full amortization schedules with extraordinary payments or
view only the summary. Results are printed to the terminal as text tables or
as JSON.
"""

from __future__ import annotations

import json
from typing import List, Tuple

import click

from .data_models import TERM_UNITS, ExtraPayment
from .engine import calculate
from .formatter import print_schedule, print_summary
from .session import serialize_result
from .utils import parse_extra_payment
from .validation import InvalidLoanParameters, validate_extra_payment, validate_loan_parameters


def parse_extra_payment_strings(values: Tuple[str, ...], total_months: int) -> List[ExtraPayment]:
    extra_payments: List[ExtraPayment] = []
    for index, item in enumerate(values, start=1):
        try:
            amount, month = parse_extra_payment(item)
            amount, month = validate_extra_payment(amount, month, total_months)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--extra")
        extra_payments.append(ExtraPayment(id=str(index), amount=amount, month=month))
    return extra_payments


def build_inputs_from_options(
    principal: str,
    rate: str,
    term: str,
    unit: str,
    extra: Tuple[str, ...],
):
    try:
        params = validate_loan_parameters(principal, rate, term, unit)
    except InvalidLoanParameters as exc:
        raise click.BadParameter(str(exc))
    extra_payments = parse_extra_payment_strings(extra, params.total_months) if extra else []
    return params, extra_payments


def loan_options(func):
    """Options shared by every command that describes a loan."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (supports k/m suffixes)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--term", "-t", "term", required=True, help="Loan term"),
        click.option("--unit", "unit", type=click.Choice(TERM_UNITS), default="months", help="Unit of --term"),
        click.option("--extra", "extra", multiple=True, help="Extraordinary payment in AMOUNT@MONTH format"),
        click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text tables"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def cli() -> None:
    """A loan amortization calculator with extraordinary payments."""
    pass


@cli.command()
@loan_options
@click.option("--max-rows", "max_rows", type=int, default=120, show_default=True, help="Rows to print (0 for all)")
def schedule(
    principal: str,
    rate: str,
    term: str,
    unit: str,
    extra: Tuple[str, ...],
    as_json: bool,
    max_rows: int,
) -> None:
    """Compute and print the full amortization schedule."""
    params, extra_payments = build_inputs_from_options(principal, rate, term, unit, extra)
    result = calculate(params.principal, params.annual_rate, params.term, params.term_unit, extra_payments)
    if as_json:
        click.echo(json.dumps(serialize_result(result), indent=2))
        return
    print_summary(result.summary)
    rows = result.schedule
    # Limit schedule length printed to avoid flooding the terminal
    if max_rows and len(rows) > max_rows:
        click.echo(f"Schedule has {len(rows)} rows; showing first {max_rows} rows.")
        rows = rows[:max_rows]
    print_schedule(rows)


@cli.command()
@loan_options
def summary(
    principal: str,
    rate: str,
    term: str,
    unit: str,
    extra: Tuple[str, ...],
    as_json: bool,
) -> None:
    """Compute and print only the summary metrics for a loan."""
    params, extra_payments = build_inputs_from_options(principal, rate, term, unit, extra)
    result = calculate(params.principal, params.annual_rate, params.term, params.term_unit, extra_payments)
    if as_json:
        click.echo(json.dumps({"summary": serialize_result(result)["summary"]}, indent=2))
    else:
        print_summary(result.summary)


if __name__ == "__main__":
    cli()
