from datetime import date
from decimal import Decimal

import pytest

from loan_amortization.data_models import Frequency, InterestMethod
from loan_amortization.utils import (
    add_months,
    add_periods,
    decimal_from_str,
    parse_amount,
    parse_percent,
    parse_start_date,
    round2,
)


class TestRounding:
    def test_half_up(self):
        assert round2(Decimal("0.005")) == Decimal("0.01")
        assert round2(Decimal("2.675")) == Decimal("2.68")
        assert round2(Decimal("-1.005")) == Decimal("-1.01")

    def test_keeps_two_places(self):
        assert str(round2(Decimal("100"))) == "100.00"


class TestDates:
    def test_parse_year_month(self):
        assert parse_start_date("2024-03") == date(2024, 3, 1)

    def test_parse_full_date(self):
        assert parse_start_date(" 2024-03-15 ") == date(2024, 3, 15)

    @pytest.mark.parametrize("text", ["2024", "2024-13", "march", "2024-02-30", "2024-1-2-3"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            parse_start_date(text)

    def test_add_months_clamps_day(self):
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_add_months_crosses_year(self):
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)

    def test_add_periods(self):
        start = date(2024, 1, 31)
        assert add_periods(start, 2, Frequency.MONTHLY) == date(2024, 3, 31)
        assert add_periods(start, 1, Frequency.QUARTERLY) == date(2024, 4, 30)
        assert add_periods(start, 1, Frequency.ANNUAL) == date(2025, 1, 31)
        assert add_periods(start, 2, Frequency.BIWEEKLY) == date(2024, 2, 28)


class TestNumbers:
    def test_decimal_from_str(self):
        assert decimal_from_str("1,234.50") == Decimal("1234.50")

    def test_decimal_from_str_invalid(self):
        with pytest.raises(ValueError):
            decimal_from_str("12a")

    @pytest.mark.parametrize(
        "text,expected",
        [("500k", Decimal("500000")), ("1.2m", Decimal("1200000")), ("10,000", Decimal("10000"))],
    )
    def test_parse_amount(self, text, expected):
        assert parse_amount(text) == expected

    def test_parse_percent(self):
        assert parse_percent("24%") == Decimal("24")
        assert parse_percent("0.5") == Decimal("0.5")


class TestEnums:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("SIMPLE", InterestMethod.SIMPLE),
            ("compound", InterestMethod.COMPOUND),
            ("Reducing Balance", InterestMethod.REDUCING_BALANCE),
            ("declining", InterestMethod.REDUCING_BALANCE),
            ("flat-rate", InterestMethod.FLAT),
        ],
    )
    def test_method_aliases(self, text, expected):
        assert InterestMethod.parse(text) is expected

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            InterestMethod.parse("balloon")

    def test_frequency_parse(self):
        assert Frequency.parse("Semi-Annual") is Frequency.SEMIANNUAL
        assert Frequency.parse("bi_weekly") is Frequency.BIWEEKLY
        assert Frequency.MONTHLY.periods_per_year == 12
        assert Frequency.WEEKLY.days == 7
        assert Frequency.WEEKLY.months == 0
