"""Debt payoff schedules from amortization math.

Plans are derived on demand and never stored. A payment that cannot cover
the monthly interest produces a sentinel plan capped at
``NEVER_PAYS_OFF_MONTHS`` instead of an infinite or NaN month count.
"""

from datetime import date
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Optional

import structlog
from dateutil.relativedelta import relativedelta

from .config import AffordabilityAssumptions
from .exceptions import ValidationError
from .models import Category, DebtAffordability, DebtPlan

logger = structlog.get_logger()

NEVER_PAYS_OFF_MONTHS = 999
RECOMMENDED_PAYMENT_SHARE = Decimal("0.10")

CENTS = Decimal("0.01")


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _ceil(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``, at least 1."""
    delta = relativedelta(end, start)
    return max(delta.years * 12 + delta.months, 1)


class DebtPayoffCalculator:
    """
    Derive payoff plans for a debt balance.

    Exactly one of a fixed monthly payment or a target payoff date drives
    the plan; the other is solved for.
    """

    def __init__(self, start_date: Optional[date] = None):
        """
        Args:
            start_date: Date the plan starts from (default: today at call time)
        """
        self.start_date = start_date

    def _start(self) -> date:
        return self.start_date or date.today()

    def calculate(
        self,
        principal: Decimal,
        annual_rate_percent: Decimal,
        monthly_payment: Optional[Decimal] = None,
        target_date: Optional[date] = None,
    ) -> DebtPlan:
        """
        Build a payoff plan.

        Args:
            principal: Outstanding balance
            annual_rate_percent: Annual interest rate in percent (7 means 7%)
            monthly_payment: Fixed payment to derive the month count from
            target_date: Payoff date to derive the payment from

        Returns:
            DebtPlan (``pays_off`` False for the never-pays-off sentinel)

        Raises:
            ValidationError: If both or neither of payment and target date
                are given, or the rate is negative
        """
        if (monthly_payment is None) == (target_date is None):
            raise ValidationError(
                "Provide exactly one of monthly_payment or target_date",
                field="monthly_payment",
                constraint="exactly one of monthly_payment, target_date",
            )
        if annual_rate_percent < 0:
            raise ValidationError(
                "Interest rate cannot be negative",
                field="annual_rate_percent",
                value=str(annual_rate_percent),
                constraint="annual_rate_percent >= 0",
            )

        start = self._start()
        if principal <= 0:
            return self._plan(Decimal("0"), annual_rate_percent, Decimal("0"), 0, start)

        monthly_rate = annual_rate_percent / 100 / 12
        if monthly_payment is not None:
            return self._from_payment(principal, annual_rate_percent, monthly_rate, monthly_payment, start)
        return self._from_target_date(principal, annual_rate_percent, monthly_rate, target_date, start)

    def _from_payment(
        self,
        principal: Decimal,
        annual_rate_percent: Decimal,
        monthly_rate: Decimal,
        payment: Decimal,
        start: date,
    ) -> DebtPlan:
        payment = _to_cents(payment)
        if payment <= 0 or payment <= monthly_rate * principal:
            logger.warning(
                "debt_never_pays_off",
                principal=str(principal),
                payment=str(payment),
                monthly_interest=str(monthly_rate * principal),
            )
            return self._never_pays_off(principal, annual_rate_percent, payment, start)

        if monthly_rate == 0:
            months = _ceil(principal / payment)
        else:
            ratio = payment / (payment - monthly_rate * principal)
            months = _ceil(ratio.ln() / (1 + monthly_rate).ln())

        return self._plan(principal, annual_rate_percent, payment, months, start)

    def _from_target_date(
        self,
        principal: Decimal,
        annual_rate_percent: Decimal,
        monthly_rate: Decimal,
        target_date: date,
        start: date,
    ) -> DebtPlan:
        months = months_between(start, target_date)
        if monthly_rate == 0:
            payment = principal / months
        else:
            growth = (1 + monthly_rate) ** months
            payment = principal * monthly_rate * growth / (growth - 1)
        return self._plan(principal, annual_rate_percent, _to_cents(payment), months, start)

    @staticmethod
    def _plan(
        principal: Decimal,
        annual_rate_percent: Decimal,
        payment: Decimal,
        months: int,
        start: date,
    ) -> DebtPlan:
        total_interest = max(payment * months - principal, Decimal("0"))
        return DebtPlan(
            principal=principal,
            annual_rate=annual_rate_percent,
            monthly_payment=payment,
            months=months,
            total_interest=total_interest,
            total_cost=principal + total_interest,
            start_date=start,
            payoff_date=start + relativedelta(months=months),
        )

    @staticmethod
    def _never_pays_off(
        principal: Decimal,
        annual_rate_percent: Decimal,
        payment: Decimal,
        start: date,
    ) -> DebtPlan:
        payment = max(payment, Decimal("0"))
        total_interest = max(payment * NEVER_PAYS_OFF_MONTHS - principal, Decimal("0"))
        return DebtPlan(
            principal=principal,
            annual_rate=annual_rate_percent,
            monthly_payment=payment,
            months=NEVER_PAYS_OFF_MONTHS,
            total_interest=total_interest,
            total_cost=principal + total_interest,
            start_date=start,
            payoff_date=start + relativedelta(months=NEVER_PAYS_OFF_MONTHS),
            pays_off=False,
        )


def calculate_debt_payoff(
    principal: Decimal,
    annual_rate_percent: Decimal,
    monthly_payment: Optional[Decimal] = None,
    target_date: Optional[date] = None,
    start_date: Optional[date] = None,
) -> DebtPlan:
    """Build a payoff plan from a payment or a target date."""
    return DebtPayoffCalculator(start_date).calculate(
        principal, annual_rate_percent, monthly_payment, target_date
    )


def recommended_payment(minimum_payment: Decimal, income: Decimal) -> Decimal:
    """Suggested monthly payment: the minimum or 10% of income, whichever is larger."""
    return max(minimum_payment, income * RECOMMENDED_PAYMENT_SHARE)


def plan_for_category(
    category: Category,
    income: Decimal,
    start_date: Optional[date] = None,
    assumptions: Optional[AffordabilityAssumptions] = None,
) -> DebtPlan:
    """
    Payoff plan for a debt category at the recommended payment.

    The minimum payment is one month of interest on the category's balance;
    the plan pays the larger of that and 10% of income.
    """
    assumptions = assumptions or AffordabilityAssumptions()
    principal = category.debt_amount or Decimal("0")
    rate = category.interest_rate(assumptions.default_interest_rate)
    minimum = principal * rate / 100 / 12
    payment = _to_cents(recommended_payment(minimum, income))
    logger.debug(
        "debt_plan_for_category",
        category_id=category.id,
        principal=str(principal),
        rate=str(rate),
        payment=str(payment),
    )
    return calculate_debt_payoff(principal, rate, monthly_payment=payment, start_date=start_date)


def check_debt_affordability(
    plan: DebtPlan, category: Category, income: Decimal
) -> DebtAffordability:
    """Compare a plan's payment with the category's share of income."""
    recommended = income * category.allocation_percentage
    return DebtAffordability(
        plan=plan,
        recommended_monthly_payment=recommended,
        can_afford=plan.monthly_payment <= recommended,
    )
