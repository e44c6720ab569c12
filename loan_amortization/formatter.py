"""Output helpers for the amortization engine.

This module provides simple functions to render amortization schedules,
summaries and method comparisons in a tabular text format using built-in
printing and string formatting.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from .data_models import InterestMethod, ScheduleEntry


def print_summary(summary: Dict[str, Any]) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Method             : {summary['method']}")
    print(f"Principal          : {summary['principal']:.2f}")
    print(f"Nominal rate       : {summary['annual_rate_percent']:.2f}% ({summary['frequency']})")
    print(f"Periodic payment   : {summary['periodic_payment']:.2f}")
    print(f"Total interest     : {summary['total_interest']:.2f}")
    print(f"Total amount       : {summary['total_amount']:.2f}")
    print(f"Effective rate     : {summary['effective_annual_rate']:.2f}%")
    print(f"APR                : {summary['apr']:.2f}%")
    print(f"First due date     : {summary['first_due_date']}")
    print(f"Final due date     : {summary['final_due_date']}")
    print(f"Payments           : {summary['payments']}")
    # The last installment absorbs rounding, so it can exceed the periodic payment.
    if summary.get("max_payment"):
        print(f"Highest payment    : {summary['max_payment']:.2f}")
    print("-" * 72)


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the amortization schedule as a tab separated table."""
    headers = [
        "Period",
        "Due",
        "OpenBal",
        "Payment",
        "Principal",
        "Interest",
        "CumInterest",
        "Balance",
    ]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.period_number),
            entry.due_date.isoformat(),
            f"{entry.opening_balance:.2f}",
            f"{entry.total_payment:.2f}",
            f"{entry.principal_amount:.2f}",
            f"{entry.interest_amount:.2f}",
            f"{entry.cumulative_interest:.2f}",
            f"{entry.outstanding_balance:.2f}",
        ]
        print("\t".join(row))


def print_comparison(summaries: Mapping[InterestMethod, Dict[str, Any]]) -> None:
    """Print the same loan under several methods side by side.

    The last column is the difference between the most and least expensive
    method for each metric.
    """
    methods = list(summaries)
    print("Comparison")
    print("=" * (22 + 16 * (len(methods) + 1)))
    header = f"{'Metric':20s}  " + "".join(f"{m.label:>16s}" for m in methods)
    print(header + f"{'Spread':>16s}")
    for key in ("periodic_payment", "total_interest", "total_amount", "apr"):
        values = [summaries[m][key] for m in methods]
        cells = "".join(f"{v:16.2f}" for v in values)
        print(f"{key:20s}  {cells}{max(values) - min(values):16.2f}")
    print("=" * (22 + 16 * (len(methods) + 1)))
