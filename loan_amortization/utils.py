"""Utility functions for the amortization engine.

This module provides helpers for parsing user input into Python data types,
for rounding money to cents and for stepping dates forward by a number of
repayment periods. Month arithmetic clamps the day to the end of the target
month.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .data_models import Frequency

CENTS = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    """Round ``value`` to cents using round-half-up."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_start_date(text: str) -> date:
    """Parse ``YYYY-MM`` or ``YYYY-MM-DD`` into a ``date``.

    A missing day component means the first day of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = text.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except ValueError as exc:
        raise ValueError(f"Invalid date string: {text}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_periods(dt: date, periods: int, frequency: Frequency) -> date:
    """Return the date ``periods`` repayment periods after ``dt``.

    Month-based frequencies are always computed from ``dt`` itself rather than
    chained, so a loan anchored on the 31st keeps falling on month ends.
    """
    if frequency.months:
        return add_months(dt, periods * frequency.months)
    return dt + timedelta(days=periods * frequency.days)


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and surrounding whitespace. It raises
    ``ValueError`` if conversion fails.
    """
    try:
        cleaned = str(value).replace(",", "").strip()
        return Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def parse_amount(value: str) -> Decimal:
    """Parse a money amount with optional ``k``/``m`` suffix.

    ``"500k"`` means 500 000 and ``"1.2m"`` means 1 200 000.
    """
    text = str(value).strip().lower().replace(",", "")
    factor = Decimal(1)
    if text.endswith("k"):
        factor = Decimal(1_000)
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal(1_000_000)
        text = text[:-1]
    return decimal_from_str(text) * factor


def parse_percent(value: str) -> Decimal:
    """Parse a percentage such as ``"24"`` or ``"24%"``.

    Unlike fractions, the number is kept as percent: ``"24"`` stays 24.
    """
    text = str(value).strip()
    if text.endswith("%"):
        text = text[:-1]
    return decimal_from_str(text)
