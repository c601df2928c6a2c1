"""Tests for income normalization helpers."""

from decimal import Decimal

import pytest

from deeppockets_core.exceptions import ValidationError
from deeppockets_core.income import (
    IncomePeriod,
    PayPeriod,
    income_percentile,
    to_monthly_income,
)


class TestToMonthlyIncome:
    """Test suite for pay period conversion."""

    @pytest.mark.parametrize(
        "amount,period,expected",
        [
            (Decimal("1200"), PayPeriod.WEEKLY, Decimal("5200")),
            (Decimal("2400"), PayPeriod.BIWEEKLY, Decimal("5200")),
            (Decimal("2500"), PayPeriod.SEMIMONTHLY, Decimal("5000")),
            (Decimal("5000"), PayPeriod.MONTHLY, Decimal("5000")),
            (Decimal("60000"), PayPeriod.YEARLY, Decimal("5000")),
        ],
    )
    def test_conversion(self, amount, period, expected):
        assert to_monthly_income(amount, period) == pytest.approx(expected)

    def test_negative_income_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            to_monthly_income(Decimal("-1"), PayPeriod.MONTHLY)

        assert exc_info.value.field == "amount"


class TestIncomePeriod:
    """Test suite for income display figures."""

    def test_format_income(self):
        """Monthly income expands to annual and per-paycheck figures."""
        figures = IncomePeriod.format_income(Decimal("5200"), PayPeriod.BIWEEKLY)

        assert figures.annual == Decimal("62400")
        assert figures.monthly == Decimal("5200")
        assert figures.per_paycheck == Decimal("2400")


class TestIncomePercentile:
    """Test suite for income percentile brackets."""

    @pytest.mark.parametrize(
        "monthly,expected",
        [
            (Decimal("60000"), 1),
            (Decimal("25000"), 5),
            (Decimal("15000"), 10),
            (Decimal("10000"), 20),
            (Decimal("7500"), 30),
            (Decimal("6000"), 40),
            (Decimal("5000"), 50),
            (Decimal("3000"), 60),
            (Decimal("2100"), 70),
            (Decimal("1000"), 80),
        ],
    )
    def test_brackets(self, monthly, expected):
        assert income_percentile(monthly) == expected
