"""Rate disclosures and helpers built on top of the engine.

Effective annual rate, APR implied by an installment stream, day-count
accrual for partial periods, early repayment amounts and side-by-side method
comparison. Everything here is a pure function of its arguments.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Union

from scipy.optimize import brentq

from .data_models import AmortizationResult, Frequency, InterestMethod
from .engine import (
    HUNDRED,
    Number,
    coerce_decimal,
    coerce_term,
    calculate,
    periodic_rate,
)
from .exceptions import InvalidInput
from .utils import round2

FOUR_PLACES = Decimal("0.0001")


def effective_annual_rate(
    annual_rate_percent: Number, frequency: Union[Frequency, str] = Frequency.MONTHLY
) -> Decimal:
    """Return the effective annual rate in percent.

    ``EAR = (1 + r/n)^n - 1`` where ``n`` is the number of periods per year.
    A 12 % nominal rate compounded monthly is 12.6825 %.
    """
    rate = coerce_decimal(annual_rate_percent, "annual_rate_percent")
    if rate < 0:
        raise InvalidInput(f"annual_rate_percent must not be negative, got {rate}")
    frequency = Frequency.parse(frequency)
    ear = (1 + periodic_rate(rate, frequency)) ** frequency.periods_per_year - 1
    return (ear * HUNDRED).quantize(FOUR_PLACES, ROUND_HALF_UP)


def annual_percentage_rate(
    periodic_payment: Number,
    principal: Number,
    term_periods: int,
    frequency: Union[Frequency, str] = Frequency.MONTHLY,
) -> Decimal:
    """Return the APR in percent implied by a level installment.

    This is the nominal annual rate at which the present value of
    ``term_periods`` payments equals ``principal``. It is solved with Brent's
    method. When the payments do not repay more than the principal there is
    no positive rate and ``0`` is returned.
    """
    payment = coerce_decimal(periodic_payment, "periodic_payment")
    amount = coerce_decimal(principal, "principal")
    n = coerce_term(term_periods)
    if payment <= 0 or amount <= 0 or n <= 0:
        raise InvalidInput("periodic_payment, principal and term_periods must be positive")
    frequency = Frequency.parse(frequency)
    if payment * n <= amount:
        return Decimal("0")

    pmt = float(payment)
    pv_target = float(amount)

    def pv_gap(rate: float) -> float:
        return pmt * (1 - (1 + rate) ** -n) / rate - pv_target

    low = 1e-9
    if pv_gap(low) <= 0:
        return Decimal("0")
    # A perpetuity of pmt is worth pmt / rate, so pmt / principal bounds the rate.
    rate = brentq(pv_gap, low, pmt / pv_target, xtol=1e-12, maxiter=1000)
    apr = rate * frequency.periods_per_year * 100
    return Decimal(str(apr)).quantize(FOUR_PLACES, ROUND_HALF_UP)


def interest_for_days(
    balance: Number,
    annual_rate_percent: Number,
    days: int,
    day_count: int = 365,
) -> Decimal:
    """Interest accrued on ``balance`` over ``days`` days (actual/``day_count``)."""
    amount = coerce_decimal(balance, "balance")
    rate = coerce_decimal(annual_rate_percent, "annual_rate_percent")
    days = coerce_term(days, "days")
    day_count = coerce_term(day_count, "day_count")
    if amount < 0 or rate < 0 or days < 0 or day_count <= 0:
        raise InvalidInput("balance, rate and days must not be negative")
    return round2(amount * rate / HUNDRED / Decimal(day_count) * Decimal(days))


def reschedule_after_prepayment(
    new_balance: Number,
    remaining_periods: int,
    annual_rate_percent: Number,
    start_date: Optional[date] = None,
    frequency: Union[Frequency, str] = Frequency.MONTHLY,
) -> AmortizationResult:
    """Re-amortize what is left after a partial prepayment.

    The remaining balance is spread over the remaining periods on a reducing
    balance basis.
    """
    return calculate(
        new_balance,
        annual_rate_percent,
        remaining_periods,
        InterestMethod.REDUCING_BALANCE,
        start_date,
        frequency,
    )


def payoff_amount(
    outstanding_balance: Number,
    remaining_periods: int,
    annual_rate_percent: Number,
    frequency: Union[Frequency, str] = Frequency.MONTHLY,
) -> Decimal:
    """Amount needed to settle a loan now.

    The outstanding balance plus the interest still due on it over the
    remaining periods on a reducing balance basis.
    """
    balance = coerce_decimal(outstanding_balance, "outstanding_balance")
    remaining = coerce_term(remaining_periods, "remaining_periods")
    rate = coerce_decimal(annual_rate_percent, "annual_rate_percent")
    if balance < 0 or remaining < 0 or rate < 0:
        raise InvalidInput(
            "outstanding_balance, remaining_periods and annual_rate_percent must not be negative"
        )
    if remaining == 0 or round2(balance) == 0:
        return round2(balance)
    return reschedule_after_prepayment(
        balance, remaining, annual_rate_percent, frequency=frequency
    ).total_amount


def total_cost(
    principal: Number,
    annual_rate_percent: Number,
    term_periods: int,
    method: Union[InterestMethod, str] = InterestMethod.REDUCING_BALANCE,
    frequency: Union[Frequency, str] = Frequency.MONTHLY,
) -> Decimal:
    """Principal plus all interest charged under ``method``."""
    return calculate(
        principal, annual_rate_percent, term_periods, method, frequency=frequency
    ).total_amount


def compare_methods(
    principal: Number,
    annual_rate_percent: Number,
    term_periods: int,
    start_date: Optional[date] = None,
    frequency: Union[Frequency, str] = Frequency.MONTHLY,
) -> Dict[InterestMethod, AmortizationResult]:
    """Compute the same loan under every interest method."""
    start_date = start_date or date.today()
    return {
        method: calculate(
            principal, annual_rate_percent, term_periods, method, start_date, frequency
        )
        for method in InterestMethod
    }


def _disclosed_apr(result: AmortizationResult) -> Decimal:
    terms = result.terms
    # An installment that rounds to 0.00 carries no measurable rate.
    if result.periodic_payment <= 0:
        return Decimal("0")
    return annual_percentage_rate(
        result.periodic_payment, terms.principal, terms.term_periods, terms.frequency
    )


def summarize(result: AmortizationResult) -> Dict[str, Any]:
    """Return the headline figures of ``result`` as plain JSON types."""
    terms = result.terms
    first_due = result.schedule[0].due_date if result.schedule else terms.start_date
    final_due = result.final_due_date or terms.start_date
    return {
        "method": terms.method.value,
        "principal": float(terms.principal),
        "annual_rate_percent": float(terms.annual_rate_percent),
        "term_periods": terms.term_periods,
        "frequency": terms.frequency.value,
        "periodic_payment": float(result.periodic_payment),
        "total_interest": float(result.total_interest),
        "total_amount": float(result.total_amount),
        "max_payment": float(result.max_payment),
        "effective_annual_rate": float(
            effective_annual_rate(terms.annual_rate_percent, terms.frequency)
        ),
        "apr": float(_disclosed_apr(result)),
        "first_due_date": first_due.isoformat(),
        "final_due_date": final_due.isoformat(),
        "payments": len(result.schedule),
    }
