"""Data models for the amortization engine.

This module defines the value objects that flow through the engine: the
interest method and payment frequency enumerations, the loan terms supplied
by the caller, and the schedule entries and result returned by the engine.
All dataclasses are frozen; a result is never modified after it has been
returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class InterestMethod(Enum):
    """The four supported interest calculation methods."""

    SIMPLE = "simple"
    COMPOUND = "compound"
    REDUCING_BALANCE = "reducing_balance"
    FLAT = "flat"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]

    @classmethod
    def parse(cls, value: str | InterestMethod) -> InterestMethod:
        """Return the method matching ``value``.

        Names are matched case-insensitively and ``-``/space are treated as
        ``_``. Common aliases such as ``declining`` or ``flat_rate`` are
        accepted as well.

        Raises
        ------
        ValueError
            If ``value`` does not name a known method.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return _METHOD_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown interest method: {value}") from None


_METHOD_LABELS = {
    InterestMethod.SIMPLE: "Simple interest",
    InterestMethod.COMPOUND: "Compound interest",
    InterestMethod.REDUCING_BALANCE: "Reducing balance",
    InterestMethod.FLAT: "Flat rate",
}

_METHOD_ALIASES = {
    "simple": InterestMethod.SIMPLE,
    "compound": InterestMethod.COMPOUND,
    "reducing_balance": InterestMethod.REDUCING_BALANCE,
    "reducing": InterestMethod.REDUCING_BALANCE,
    "declining": InterestMethod.REDUCING_BALANCE,
    "declining_balance": InterestMethod.REDUCING_BALANCE,
    "amortized": InterestMethod.REDUCING_BALANCE,
    "annuity": InterestMethod.REDUCING_BALANCE,
    "flat": InterestMethod.FLAT,
    "flat_rate": InterestMethod.FLAT,
}


class Frequency(Enum):
    """Length of one repayment period.

    Each member knows how many periods make up a year (used to turn the
    nominal annual rate into a periodic rate) and how far apart consecutive
    due dates are.
    """

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]

    @property
    def months(self) -> int:
        """Months per period, or 0 for day-based frequencies."""
        return _MONTH_STEP.get(self, 0)

    @property
    def days(self) -> int:
        """Days per period, or 0 for month-based frequencies."""
        return _DAY_STEP.get(self, 0)

    @classmethod
    def parse(cls, value: str | Frequency) -> Frequency:
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "").replace("_", "")
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown payment frequency: {value}")


_PERIODS_PER_YEAR = {
    Frequency.WEEKLY: 52,
    Frequency.BIWEEKLY: 26,
    Frequency.MONTHLY: 12,
    Frequency.QUARTERLY: 4,
    Frequency.SEMIANNUAL: 2,
    Frequency.ANNUAL: 1,
}

_MONTH_STEP = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.SEMIANNUAL: 6,
    Frequency.ANNUAL: 12,
}

_DAY_STEP = {
    Frequency.WEEKLY: 7,
    Frequency.BIWEEKLY: 14,
}


@dataclass(frozen=True)
class LoanTerms:
    """Inputs to the engine.

    Attributes
    ----------
    principal: Decimal
        The amount borrowed. Must be positive.
    annual_rate_percent: Decimal
        Nominal annual rate in percent, e.g. ``Decimal("24")`` for 24 %.
    term_periods: int
        Number of repayment periods. Must be at least 1.
    method: InterestMethod
        How interest is charged.
    start_date: date
        Anchor date; the first payment falls one period after it.
    frequency: Frequency
        Period length, monthly unless stated otherwise.
    """

    principal: Decimal
    annual_rate_percent: Decimal
    term_periods: int
    method: InterestMethod
    start_date: date
    frequency: Frequency = Frequency.MONTHLY


@dataclass(frozen=True)
class ScheduleEntry:
    """One installment of an amortization schedule.

    All amounts are rounded to cents. ``total_payment`` always equals
    ``principal_amount + interest_amount`` and ``outstanding_balance`` is the
    balance left after this installment has been paid.
    """

    period_number: int
    due_date: date
    opening_balance: Decimal
    principal_amount: Decimal
    interest_amount: Decimal
    total_payment: Decimal
    outstanding_balance: Decimal
    cumulative_interest: Decimal


@dataclass(frozen=True)
class AmortizationResult:
    """Totals and the full schedule for one set of loan terms."""

    terms: LoanTerms
    total_interest: Decimal
    total_amount: Decimal
    periodic_payment: Decimal
    schedule: Tuple[ScheduleEntry, ...]

    @property
    def total_principal(self) -> Decimal:
        return sum((e.principal_amount for e in self.schedule), Decimal("0"))

    @property
    def max_payment(self) -> Decimal:
        return max((e.total_payment for e in self.schedule), default=Decimal("0"))

    @property
    def final_due_date(self) -> Optional[date]:
        return self.schedule[-1].due_date if self.schedule else None
