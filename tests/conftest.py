"""Shared fixtures for the engine tests.

Reference loan: 10 000 at 24 % p.a. over 12 monthly periods, starting
2024-01-01, i.e. a periodic rate of exactly 2 %.
"""

from datetime import date
from decimal import Decimal

import pytest

from loan_amortization.data_models import Frequency, InterestMethod, LoanTerms


@pytest.fixture
def start_date() -> date:
    return date(2024, 1, 1)


@pytest.fixture
def reference_terms(start_date) -> LoanTerms:
    return LoanTerms(
        principal=Decimal("10000"),
        annual_rate_percent=Decimal("24"),
        term_periods=12,
        method=InterestMethod.REDUCING_BALANCE,
        start_date=start_date,
    )


@pytest.fixture
def make_loan(start_date):
    """Factory for ``LoanTerms`` with string amounts."""

    def _make(principal, rate, term, method, frequency=Frequency.MONTHLY):
        return LoanTerms(
            principal=Decimal(principal),
            annual_rate_percent=Decimal(rate),
            term_periods=term,
            method=method,
            start_date=start_date,
            frequency=frequency,
        )

    return _make
