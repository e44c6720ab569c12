"""Command-line interface for the amortization engine.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries,
compare the four interest methods for one loan or work out an early
repayment amount. Results can be printed to the terminal or exported to
JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import click

from .config import Settings, load_settings
from .data_models import AmortizationResult, Frequency, InterestMethod, LoanTerms
from .disclosures import compare_methods, payoff_amount, summarize
from .engine import generate_schedule, make_terms
from .exceptions import InvalidInput, NumericOverflow
from .formatter import print_comparison, print_schedule, print_summary
from .utils import parse_amount, parse_percent, parse_start_date

logger = logging.getLogger(__name__)

METHOD_CHOICES = [
    "simple",
    "compound",
    "reducing_balance",
    "reducing",
    "declining",
    "flat",
    "flat_rate",
]
FREQUENCY_CHOICES = [f.value for f in Frequency]


def build_terms_from_options(
    principal: str,
    rate: str,
    term: int,
    method: str,
    start_date: str,
    frequency: str,
) -> LoanTerms:
    """Turn raw option strings into validated ``LoanTerms``."""
    try:
        principal_value = parse_amount(principal)
        rate_value = parse_percent(rate)
        start_dt = parse_start_date(start_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    try:
        return make_terms(principal_value, rate_value, term, method, start_dt, frequency)
    except InvalidInput as exc:
        raise click.BadParameter(str(exc))
    except NumericOverflow as exc:
        raise click.ClickException(str(exc))


def _run(terms: LoanTerms) -> AmortizationResult:
    try:
        return generate_schedule(terms)
    except NumericOverflow as exc:
        raise click.ClickException(str(exc))


def export_to_json(path: Path, result: AmortizationResult, summary: Dict[str, Any]) -> None:
    """Export schedule and summary to a JSON file."""
    sched_list = []
    for e in result.schedule:
        sched_list.append(
            {
                "period": e.period_number,
                "due_date": e.due_date.isoformat(),
                "opening_balance": float(e.opening_balance),
                "principal": float(e.principal_amount),
                "interest": float(e.interest_amount),
                "total_payment": float(e.total_payment),
                "outstanding_balance": float(e.outstanding_balance),
                "cumulative_interest": float(e.cumulative_interest),
            }
        )
    data = {"summary": summary, "schedule": sched_list}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: AmortizationResult) -> None:
    """Export schedule to a CSV file."""
    header = [
        "Period",
        "Due_Date",
        "Opening_Balance",
        "Principal",
        "Interest",
        "Total_Payment",
        "Outstanding_Balance",
        "Cumulative_Interest",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in result.schedule:
            writer.writerow(
                [
                    e.period_number,
                    e.due_date.isoformat(),
                    f"{e.opening_balance:.2f}",
                    f"{e.principal_amount:.2f}",
                    f"{e.interest_amount:.2f}",
                    f"{e.total_payment:.2f}",
                    f"{e.outstanding_balance:.2f}",
                    f"{e.cumulative_interest:.2f}",
                ]
            )


def loan_options(with_method: bool = True) -> Callable:
    """Attach the options shared by every loan command."""

    def decorator(func: Callable) -> Callable:
        options = [
            click.option("--principal", "-p", "principal", required=True, help="Loan amount, e.g. 10000 or 10k"),
            click.option("--rate", "-r", "rate", required=True, help="Nominal annual interest rate (percent)"),
            click.option("--term", "-t", "term", required=True, type=int, help="Number of repayment periods"),
            click.option("--start-date", "-s", "start_date", required=True, help="Loan start date (YYYY-MM or YYYY-MM-DD)"),
            click.option(
                "--frequency",
                "frequency",
                type=click.Choice(FREQUENCY_CHOICES, case_sensitive=False),
                default=None,
                help="Repayment frequency (defaults to LOAN_AMORTIZATION_DEFAULT_FREQUENCY or monthly)",
            ),
        ]
        if with_method:
            options.append(
                click.option(
                    "--method",
                    "-m",
                    "method",
                    type=click.Choice(METHOD_CHOICES, case_sensitive=False),
                    default=None,
                    help="Interest method (defaults to LOAN_AMORTIZATION_DEFAULT_METHOD or reducing_balance)",
                )
            )
        for option in reversed(options):
            func = option(func)
        return func

    return decorator


@click.group()
@click.option("--log-level", "log_level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """A command-line loan interest and amortization calculator."""
    try:
        settings = load_settings()
    except ValueError as exc:
        raise click.ClickException(str(exc))
    level = (log_level or settings.log_level).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise click.BadParameter(f"Unknown log level: {log_level}", param_hint="--log-level")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.debug("Loaded settings: %s", settings)
    ctx.obj = settings


@cli.command()
@loan_options()
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_obj
def schedule(
    settings: Settings,
    principal: str,
    rate: str,
    term: int,
    start_date: str,
    frequency: Optional[str],
    method: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    terms = build_terms_from_options(
        principal,
        rate,
        term,
        method or settings.default_method.value,
        start_date,
        frequency or settings.default_frequency.value,
    )
    result = _run(terms)
    summary_data = summarize(result)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result, summary_data)
            click.echo(f"Schedule exported to {path}")
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
            click.echo(f"Schedule exported to {path}")
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
    else:
        print_summary(summary_data)
        max_rows = settings.max_rows
        if len(result.schedule) > max_rows:
            click.echo(
                f"Schedule has {len(result.schedule)} rows; showing first {max_rows} rows."
            )
            print_schedule(result.schedule[:max_rows])
        else:
            print_schedule(result.schedule)


@cli.command()
@loan_options()
@click.option("--output", "output", type=str, help="Output file path (.json)")
@click.pass_obj
def summary(
    settings: Settings,
    principal: str,
    rate: str,
    term: int,
    start_date: str,
    frequency: Optional[str],
    method: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    terms = build_terms_from_options(
        principal,
        rate,
        term,
        method or settings.default_method.value,
        start_date,
        frequency or settings.default_frequency.value,
    )
    summary_data = summarize(_run(terms))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command()
@loan_options(with_method=False)
@click.pass_obj
def compare(
    settings: Settings,
    principal: str,
    rate: str,
    term: int,
    start_date: str,
    frequency: Optional[str],
) -> None:
    """Compare the same loan under all four interest methods.

    Example:

        loan-amortization compare -p 10k -r 24 -t 12 -s 2024-01
    """
    terms = build_terms_from_options(
        principal,
        rate,
        term,
        InterestMethod.REDUCING_BALANCE.value,
        start_date,
        frequency or settings.default_frequency.value,
    )
    try:
        results = compare_methods(
            terms.principal,
            terms.annual_rate_percent,
            terms.term_periods,
            terms.start_date,
            terms.frequency,
        )
    except NumericOverflow as exc:
        raise click.ClickException(str(exc))
    print_comparison({method: summarize(result) for method, result in results.items()})


@cli.command()
@click.option("--balance", "-b", "balance", required=True, help="Outstanding balance")
@click.option("--remaining", "-n", "remaining", required=True, type=int, help="Remaining repayment periods")
@click.option("--rate", "-r", "rate", required=True, help="Nominal annual interest rate (percent)")
@click.option(
    "--frequency",
    "frequency",
    type=click.Choice(FREQUENCY_CHOICES, case_sensitive=False),
    default=None,
    help="Repayment frequency",
)
@click.pass_obj
def payoff(
    settings: Settings,
    balance: str,
    remaining: int,
    rate: str,
    frequency: Optional[str],
) -> None:
    """Print the amount needed to repay a loan early."""
    try:
        amount = payoff_amount(
            parse_amount(balance),
            remaining,
            parse_percent(rate),
            frequency or settings.default_frequency,
        )
    except NumericOverflow as exc:
        raise click.ClickException(str(exc))
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    click.echo(f"Payoff amount: {amount:.2f}")


if __name__ == "__main__":
    cli()
