"""Income normalization helpers.

Pay can arrive on any schedule; every engine works in monthly figures.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from .exceptions import ValidationError
from .standards import DEFAULT_INCOME_PERCENTILE, INCOME_PERCENTILES


class PayPeriod(str, Enum):
    """How often income is received."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMIMONTHLY = "semimonthly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def monthly_multiplier(self) -> Decimal:
        """Factor converting one period's pay into a monthly figure."""
        return _MONTHLY_MULTIPLIERS[self]

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]


_MONTHLY_MULTIPLIERS = {
    PayPeriod.WEEKLY: Decimal("52") / Decimal("12"),
    PayPeriod.BIWEEKLY: Decimal("26") / Decimal("12"),
    PayPeriod.SEMIMONTHLY: Decimal("2"),
    PayPeriod.MONTHLY: Decimal("1"),
    PayPeriod.YEARLY: Decimal("1") / Decimal("12"),
}

_PERIODS_PER_YEAR = {
    PayPeriod.WEEKLY: 52,
    PayPeriod.BIWEEKLY: 26,
    PayPeriod.SEMIMONTHLY: 24,
    PayPeriod.MONTHLY: 12,
    PayPeriod.YEARLY: 1,
}


def to_monthly_income(amount: Decimal, pay_period: PayPeriod) -> Decimal:
    """Convert pay received per ``pay_period`` into monthly income.

    Raises:
        ValidationError: If the amount is negative
    """
    if amount < 0:
        raise ValidationError(
            "Income cannot be negative",
            field="amount",
            value=str(amount),
            constraint="amount >= 0",
        )
    return amount * pay_period.monthly_multiplier


class IncomePeriod(BaseModel):
    """One monthly income expressed at annual, monthly and paycheck scale."""

    annual: Decimal
    monthly: Decimal
    per_paycheck: Decimal
    pay_period: PayPeriod

    @classmethod
    def format_income(
        cls, monthly_income: Decimal, pay_period: PayPeriod
    ) -> "IncomePeriod":
        """Build the display figures for a monthly income.

        Args:
            monthly_income: Normalized monthly income
            pay_period: Schedule used for the per-paycheck figure
        """
        annual = monthly_income * 12
        return cls(
            annual=annual,
            monthly=monthly_income,
            per_paycheck=annual / pay_period.periods_per_year,
            pay_period=pay_period,
        )


def income_percentile(monthly_income: Decimal) -> int:
    """Return the "top N%" bracket for a monthly income.

    A result of 10 means the income sits in the top 10% of earners.
    """
    annual_income = monthly_income * 12
    for threshold, percentile in INCOME_PERCENTILES:
        if annual_income >= threshold:
            return percentile
    return DEFAULT_INCOME_PERCENTILE
