"""Core calculation engine for loan interest and amortization schedules.

This module implements the four supported interest methods:

* simple interest, charged once on the original principal for the whole term;
* compound interest, accrued per period with the future value formula;
* reducing balance, the standard annuity where each period's interest is
  charged on the outstanding balance;
* flat rate, the simple-interest total disclosed upfront and split equally.

Every method returns an ``AmortizationResult`` with exactly one
``ScheduleEntry`` per period. Arithmetic is done with ``Decimal`` at full
precision and amounts are rounded to cents only when an entry is built. The
final period always absorbs whatever rounding drift is left so that the
principal portions sum to the principal and the balance ends at zero.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation, Overflow, getcontext
from typing import Callable, Dict, List, Optional, Tuple, Union

from .data_models import (
    AmortizationResult,
    Frequency,
    InterestMethod,
    LoanTerms,
    ScheduleEntry,
)
from .exceptions import InvalidInput, NumericOverflow
from .utils import add_periods, decimal_from_str, round2

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

Number = Union[Decimal, int, float, str]


def _invalid(message: str) -> InvalidInput:
    logger.info("Rejected loan terms: %s", message)
    return InvalidInput(message)


def coerce_decimal(value: Number, name: str) -> Decimal:
    if isinstance(value, bool):
        raise _invalid(f"{name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = decimal_from_str(str(value))
        except ValueError:
            raise _invalid(f"{name} must be a number, got {value!r}") from None
    else:
        raise _invalid(f"{name} must be a number, got {value!r}")
    if not result.is_finite():
        raise _invalid(f"{name} must be finite, got {value!r}")
    return result


def coerce_term(value: Union[int, Decimal, str], name: str = "term_periods") -> int:
    number = coerce_decimal(value, name)
    if number != number.to_integral_value():
        raise _invalid(f"{name} must be a whole number, got {value!r}")
    return int(number)


def validate_terms(
    principal: Number,
    annual_rate_percent: Number,
    term_periods: Union[int, Decimal, str],
) -> Tuple[Decimal, Decimal, int]:
    """Check and normalise the three numeric loan inputs.

    The principal is rounded to cents; the rate is kept at full precision.

    Returns
    -------
    tuple
        ``(principal, annual_rate_percent, term_periods)`` as
        ``(Decimal, Decimal, int)``.

    Raises
    ------
    InvalidInput
        If the principal is not positive, the rate is negative, the term is
        not a positive whole number, or any value is not a finite number.
    NumericOverflow
        If the principal cannot be represented to the cent.
    """
    amount = coerce_decimal(principal, "principal")
    rate = coerce_decimal(annual_rate_percent, "annual_rate_percent")
    term = coerce_term(term_periods)
    if amount <= 0:
        raise _invalid(f"principal must be positive, got {amount}")
    if rate < 0:
        raise _invalid(f"annual_rate_percent must not be negative, got {rate}")
    if term <= 0:
        raise _invalid(f"term_periods must be at least 1, got {term}")
    try:
        amount = round2(amount)
    except InvalidOperation:
        raise NumericOverflow(f"principal {principal} is too large") from None
    if amount <= 0:
        raise _invalid(f"principal must be at least 0.01, got {principal}")
    return amount, rate, term


def make_terms(
    principal: Number,
    annual_rate_percent: Number,
    term_periods: Union[int, Decimal, str],
    method: Union[InterestMethod, str],
    start_date: Optional[date] = None,
    frequency: Union[Frequency, str] = Frequency.MONTHLY,
) -> LoanTerms:
    """Build validated ``LoanTerms`` from loosely typed values.

    ``start_date`` defaults to today. Method and frequency may be given by
    name (see ``InterestMethod.parse`` and ``Frequency.parse``).
    """
    amount, rate, term = validate_terms(principal, annual_rate_percent, term_periods)
    try:
        method = InterestMethod.parse(method)
        frequency = Frequency.parse(frequency)
    except ValueError as exc:
        raise _invalid(str(exc)) from None
    terms = LoanTerms(
        principal=amount,
        annual_rate_percent=rate,
        term_periods=term,
        method=method,
        start_date=start_date or date.today(),
        frequency=frequency,
    )
    _check_calendar(terms)
    return terms


def _check_calendar(terms: LoanTerms) -> None:
    if not isinstance(terms.start_date, date):
        raise _invalid(f"start_date must be a date, got {terms.start_date!r}")
    if not isinstance(terms.frequency, Frequency):
        raise _invalid(f"frequency must be a Frequency, got {terms.frequency!r}")
    try:
        add_periods(terms.start_date, terms.term_periods, terms.frequency)
    except (ValueError, OverflowError):
        raise _invalid(
            f"a term of {terms.term_periods} periods from {terms.start_date} "
            "runs past the supported calendar"
        ) from None


def _normalized(terms: LoanTerms, method: InterestMethod) -> LoanTerms:
    amount, rate, term = validate_terms(
        terms.principal, terms.annual_rate_percent, terms.term_periods
    )
    normalized = replace(
        terms,
        principal=amount,
        annual_rate_percent=rate,
        term_periods=term,
        method=method,
    )
    _check_calendar(normalized)
    return normalized


def _guard_overflow(func: Callable[[LoanTerms], AmortizationResult]):
    """Turn decimal overflow inside a calculation into ``NumericOverflow``."""

    @functools.wraps(func)
    def wrapper(terms: LoanTerms) -> AmortizationResult:
        try:
            return func(terms)
        except (Overflow, InvalidOperation) as exc:
            raise NumericOverflow(
                f"{func.__name__} overflowed for principal={terms.principal}, "
                f"rate={terms.annual_rate_percent}, term={terms.term_periods}"
            ) from exc

    return wrapper


def periodic_rate(annual_rate_percent: Decimal, frequency: Frequency) -> Decimal:
    """Return the nominal rate per period as a fraction."""
    return annual_rate_percent / HUNDRED / Decimal(frequency.periods_per_year)


def annuity_payment(principal: Decimal, rate_per_period: Decimal, term: int) -> Decimal:
    """Return the equal installment that repays ``principal`` in ``term`` periods.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the periodic interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if term <= 0:
        raise InvalidInput("Term must be positive")
    if rate_per_period == 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_period) ** term
    return principal * (rate_per_period * factor) / (factor - 1)


def _simple_total_interest(terms: LoanTerms) -> Decimal:
    years = Decimal(terms.term_periods) / Decimal(terms.frequency.periods_per_year)
    return terms.principal * (terms.annual_rate_percent / HUNDRED) * years


def _build_result(
    terms: LoanTerms,
    payment: Decimal,
    portions: List[Tuple[Decimal, Decimal]],
) -> AmortizationResult:
    """Turn ``(principal, interest)`` cent amounts into schedule entries."""
    schedule: List[ScheduleEntry] = []
    balance = terms.principal
    cumulative_interest = ZERO
    for period, (principal_part, interest) in enumerate(portions, start=1):
        opening = balance
        balance = opening - principal_part
        cumulative_interest += interest
        schedule.append(
            ScheduleEntry(
                period_number=period,
                due_date=add_periods(terms.start_date, period, terms.frequency),
                opening_balance=opening,
                principal_amount=principal_part,
                interest_amount=interest,
                total_payment=principal_part + interest,
                outstanding_balance=balance,
                cumulative_interest=cumulative_interest,
            )
        )
    total_interest = cumulative_interest
    logger.debug(
        "Built %s schedule: %d periods, payment %s, interest %s",
        terms.method.value,
        len(schedule),
        round2(payment),
        total_interest,
    )
    return AmortizationResult(
        terms=terms,
        total_interest=total_interest,
        total_amount=terms.principal + total_interest,
        periodic_payment=round2(payment),
        schedule=tuple(schedule),
    )


def _split_evenly(
    terms: LoanTerms,
    total_interest: Decimal,
    payment: Decimal,
    principal_share: Optional[Decimal] = None,
) -> List[Tuple[Decimal, Decimal]]:
    """Allocate a precomputed interest total evenly over the term.

    Each period carries ``total_interest / n`` of interest. The principal
    portion is either ``payment - interest`` or, for flat-rate loans, a fixed
    ``principal_share``. Neither portion may overdraw what is left; the last
    period takes the remaining principal and interest exactly.
    """
    n = terms.term_periods
    interest_left = round2(total_interest)
    interest_share = round2(total_interest / Decimal(n))
    installment = round2(payment)
    balance = terms.principal
    portions: List[Tuple[Decimal, Decimal]] = []
    for period in range(1, n + 1):
        if period == n:
            interest = interest_left
            principal_part = balance
        else:
            interest = min(interest_share, interest_left)
            if principal_share is None:
                principal_part = installment - interest
            else:
                principal_part = principal_share
            principal_part = min(max(principal_part, ZERO), balance)
        interest_left -= interest
        balance -= principal_part
        portions.append((principal_part, interest))
    return portions


@_guard_overflow
def calculate_simple_interest(terms: LoanTerms) -> AmortizationResult:
    """Simple interest: ``I = P * r * t`` charged on the original principal.

    ``t`` is the term in years, i.e. ``term_periods / periods_per_year``. The
    equal installment is ``(P + I) / n`` and interest is spread evenly over
    the periods.
    """
    terms = _normalized(terms, InterestMethod.SIMPLE)
    total_interest = _simple_total_interest(terms)
    payment = (terms.principal + total_interest) / Decimal(terms.term_periods)
    return _build_result(terms, payment, _split_evenly(terms, total_interest, payment))


@_guard_overflow
def calculate_compound_interest(terms: LoanTerms) -> AmortizationResult:
    """Compound interest: ``A = P * (1 + i)^n`` and ``I = A - P``.

    The installment is ``A / n``. The schedule spreads the compounded
    interest evenly over the periods, exactly like simple interest; it does
    not compound period by period.
    """
    terms = _normalized(terms, InterestMethod.COMPOUND)
    rate = periodic_rate(terms.annual_rate_percent, terms.frequency)
    total_amount = terms.principal * (1 + rate) ** terms.term_periods
    total_interest = total_amount - terms.principal
    payment = total_amount / Decimal(terms.term_periods)
    return _build_result(terms, payment, _split_evenly(terms, total_interest, payment))


@_guard_overflow
def calculate_reducing_balance(terms: LoanTerms) -> AmortizationResult:
    """Reducing (declining) balance annuity.

    Each period's interest is charged on the balance left after the previous
    installment; the rest of the fixed installment repays principal.
    """
    terms = _normalized(terms, InterestMethod.REDUCING_BALANCE)
    rate = periodic_rate(terms.annual_rate_percent, terms.frequency)
    payment = annuity_payment(terms.principal, rate, terms.term_periods)

    balance = terms.principal
    portions: List[Tuple[Decimal, Decimal]] = []
    for period in range(1, terms.term_periods + 1):
        interest = round2(balance * rate)
        if period == terms.term_periods:
            principal_part = balance
        else:
            principal_part = min(max(round2(payment - interest), ZERO), balance)
        balance -= principal_part
        portions.append((principal_part, interest))
    return _build_result(terms, payment, portions)


@_guard_overflow
def calculate_flat_rate(terms: LoanTerms) -> AmortizationResult:
    """Flat rate: simple-interest total, principal and interest split equally.

    Every period repays ``P / n`` of principal and ``I / n`` of interest; the
    last period picks up the rounding remainder of both.
    """
    terms = _normalized(terms, InterestMethod.FLAT)
    total_interest = _simple_total_interest(terms)
    payment = (terms.principal + total_interest) / Decimal(terms.term_periods)
    principal_share = round2(terms.principal / Decimal(terms.term_periods))
    portions = _split_evenly(terms, total_interest, payment, principal_share)
    return _build_result(terms, payment, portions)


_METHOD_CALCULATORS: Dict[InterestMethod, Callable[[LoanTerms], AmortizationResult]] = {
    InterestMethod.SIMPLE: calculate_simple_interest,
    InterestMethod.COMPOUND: calculate_compound_interest,
    InterestMethod.REDUCING_BALANCE: calculate_reducing_balance,
    InterestMethod.FLAT: calculate_flat_rate,
}


def generate_schedule(terms: LoanTerms) -> AmortizationResult:
    """Compute the result for ``terms`` using ``terms.method``."""
    try:
        calculator = _METHOD_CALCULATORS[terms.method]
    except (KeyError, TypeError):
        raise _invalid(f"Unsupported interest method: {terms.method!r}") from None
    return calculator(terms)


def calculate(
    principal: Number,
    annual_rate_percent: Number,
    term_periods: Union[int, Decimal, str],
    method: Union[InterestMethod, str] = InterestMethod.REDUCING_BALANCE,
    start_date: Optional[date] = None,
    frequency: Union[Frequency, str] = Frequency.MONTHLY,
) -> AmortizationResult:
    """Validate loose inputs and compute the schedule in one call."""
    terms = make_terms(
        principal, annual_rate_percent, term_periods, method, start_date, frequency
    )
    return generate_schedule(terms)
