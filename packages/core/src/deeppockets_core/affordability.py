"""Per-category affordability calculations.

Every category resolves to a ``FormulaKind`` and every kind maps to one
formula function in a registry. New kinds are added with
``register_formula`` (or a per-calculator override map) without touching
the dispatcher.

All functions here are pure: same inputs, same output, no hidden state.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Protocol, Union, runtime_checkable

import structlog

from .catalog import CategoryCatalog
from .config import AffordabilityAssumptions
from .exceptions import ConfigurationError, ValidationError
from .models import (
    AffordabilityCheck,
    AffordabilityTimeframe,
    Category,
    CategoryNotFound,
    FormulaKind,
    HomeAffordability,
)
from .standards import HOME_CATEGORY_ID, get_income_tier_multiplier

logger = structlog.get_logger()

AMOUNT_PRECISION = Decimal("0.1")

DESTINATION_MULTIPLIERS = {
    "domestic": Decimal("1"),
    "international": Decimal("2"),
    "luxury": Decimal("3"),
}

COLLEGE_YEARS = 4
DEFAULT_YEARS_TO_COLLEGE = Decimal("18")


def round_amount(value: Decimal) -> Decimal:
    """Round half-up to the nearest 0.1."""
    return value.quantize(AMOUNT_PRECISION, rounding=ROUND_HALF_UP)


def debt_to_income_ratio(peer_debt_total: Decimal, income: Decimal) -> Decimal:
    """Monthly debt payments as a fraction of income; 0 when income is 0."""
    if income <= 0:
        return Decimal("0")
    return peer_debt_total / income


@dataclass(frozen=True)
class FormulaContext:
    """Inputs shared by every formula for one calculation."""

    income: Decimal
    debt_to_income_ratio: Decimal
    assumptions: AffordabilityAssumptions
    catalog: Optional[CategoryCatalog] = None


@runtime_checkable
class AffordabilityFormula(Protocol):
    """Callable computing an unrounded affordable amount for a category."""

    def __call__(self, category: Category, context: FormulaContext) -> Decimal: ...


_FORMULAS: dict[FormulaKind, AffordabilityFormula] = {}


def register_formula(
    kind: FormulaKind,
) -> Callable[[AffordabilityFormula], AffordabilityFormula]:
    """Register the decorated function as the formula for ``kind``.

    Registering a kind twice replaces the earlier formula.
    """

    def decorator(func: AffordabilityFormula) -> AffordabilityFormula:
        _FORMULAS[kind] = func
        return func

    return decorator


def registered_formulas() -> dict[FormulaKind, AffordabilityFormula]:
    return dict(_FORMULAS)


def _monthly_share(category: Category, context: FormulaContext) -> Decimal:
    return context.income * category.allocation_percentage


# =============================================================================
# MORTGAGE MATH
# =============================================================================


def loan_principal(
    monthly_payment: Decimal, annual_rate_percent: Decimal, term_months: int
) -> Decimal:
    """Loan principal a fixed monthly payment amortizes over ``term_months``.

    A zero rate degrades to ``payment * term``.
    """
    if monthly_payment <= 0:
        return Decimal("0")
    monthly_rate = annual_rate_percent / 100 / 12
    if monthly_rate == 0:
        return monthly_payment * term_months
    growth = (1 + monthly_rate) ** term_months
    return monthly_payment * (growth - 1) / (monthly_rate * growth)


def home_affordability(
    category: Category,
    income: Decimal,
    debt_ratio: Decimal,
    assumptions: Optional[AffordabilityAssumptions] = None,
) -> HomeAffordability:
    """Break down the mortgage-derived purchase price for a housing category.

    Args:
        category: Housing category carrying Down Payment, Interest Rate and
            Property Tax Rate assumptions (defaults apply when absent)
        income: Monthly income
        debt_ratio: Existing debt payments as a fraction of income
        assumptions: Market assumptions (defaults when None)
    """
    assumptions = assumptions or AffordabilityAssumptions()

    ratio = min(assumptions.front_end_ratio, assumptions.back_end_ratio - debt_ratio)
    max_payment = income * max(ratio, Decimal("0"))
    eligible_payment = max_payment - max_payment * assumptions.tax_and_insurance_rate / 12

    rate = category.interest_rate(assumptions.default_interest_rate)
    loan = loan_principal(eligible_payment, rate, assumptions.mortgage_term_months)

    down_payment = category.assumption_value("Down Payment", assumptions.default_down_payment)
    if not Decimal("0") <= down_payment < Decimal("100"):
        down_payment = assumptions.default_down_payment
    price = loan / (1 - down_payment / 100)

    tax_rate = category.assumption_value("Property Tax Rate", assumptions.default_property_tax)
    appreciation = (1 + assumptions.property_appreciation) ** assumptions.appreciation_years

    return HomeAffordability(
        max_monthly_payment=max_payment,
        eligible_monthly_payment=eligible_payment,
        loan_amount=loan,
        purchase_price=price,
        down_payment_amount=price * down_payment / 100,
        monthly_property_tax=price * tax_rate / 100 / 12,
        projected_price=price * appreciation,
    )


# =============================================================================
# FORMULAS
# =============================================================================


@register_formula(FormulaKind.MONTHLY)
def monthly_formula(category: Category, context: FormulaContext) -> Decimal:
    """Income share scaled by the income tier multiplier."""
    return _monthly_share(category, context) * get_income_tier_multiplier(context.income)


@register_formula(FormulaKind.MORTGAGE)
def mortgage_formula(category: Category, context: FormulaContext) -> Decimal:
    """Projected purchase price after appreciation."""
    breakdown = home_affordability(
        category, context.income, context.debt_to_income_ratio, context.assumptions
    )
    return breakdown.projected_price


@register_formula(FormulaKind.HOME_MAINTENANCE)
def home_maintenance_formula(category: Category, context: FormulaContext) -> Decimal:
    """Yearly maintenance on the affordable home price, per month."""
    home = _mortgage_category(context.catalog)
    if home is None:
        return monthly_formula(category, context)
    home_price = round_amount(mortgage_formula(home, context))
    return home_price * context.assumptions.home_maintenance_rate / 12


@register_formula(FormulaKind.VEHICLE)
def vehicle_formula(category: Category, context: FormulaContext) -> Decimal:
    """Vehicle budget shrinking as existing debt load rises."""
    if context.debt_to_income_ratio >= 1:
        return Decimal("0")
    rate = category.interest_rate(context.assumptions.default_interest_rate)
    share = _monthly_share(category, context)
    monthly = share * (rate / 100) / context.assumptions.vehicle_term_months
    return monthly / (1 - context.debt_to_income_ratio)


@register_formula(FormulaKind.SAVINGS_GOAL)
def savings_goal_formula(category: Category, context: FormulaContext) -> Decimal:
    """Amount saved over the timeline, capped at the goal."""
    timeline = category.savings_timeline or context.assumptions.default_savings_timeline_months
    accumulated = _monthly_share(category, context) * timeline
    goal = category.savings_goal
    if goal is None:
        goal = category.assumption_value("Target Amount")
    if goal is None:
        return accumulated
    return min(goal, accumulated)


@register_formula(FormulaKind.DEBT_PAYMENT)
def debt_payment_formula(category: Category, context: FormulaContext) -> Decimal:
    """Larger of the minimum interest payment and the budget share."""
    rate = category.interest_rate(context.assumptions.default_interest_rate)
    minimum = Decimal("0")
    if category.debt_amount is not None:
        minimum = category.debt_amount * rate / 100 / 12
    return max(minimum, _monthly_share(category, context))


@register_formula(FormulaKind.ANNUAL)
def annual_formula(category: Category, context: FormulaContext) -> Decimal:
    return _monthly_share(category, context) * 12


@register_formula(FormulaKind.VACATION)
def vacation_formula(category: Category, context: FormulaContext) -> Decimal:
    """Annual share scaled by destination type and one year of inflation."""
    assumption = category.assumption("Destination Type")
    destination = assumption.value.strip().lower() if assumption else "domestic"
    multiplier = DESTINATION_MULTIPLIERS.get(destination, Decimal("1"))
    annual = _monthly_share(category, context) * 12
    return annual * multiplier * (1 + context.assumptions.inflation_rate)


@register_formula(FormulaKind.COLLEGE_FUND)
def college_fund_formula(category: Category, context: FormulaContext) -> Decimal:
    """Four-year college cost at enrollment, blended public and private."""
    assumptions = context.assumptions
    years = category.assumption_value("Years to College", DEFAULT_YEARS_TO_COLLEGE)
    years = max(int(years), 0)
    yearly_cost = assumptions.college_annual_cost * (1 + assumptions.inflation_rate) ** years
    public_total = yearly_cost * COLLEGE_YEARS
    private_total = public_total * assumptions.college_private_multiplier
    public_weight = assumptions.college_public_weight
    return public_total * public_weight + private_total * (1 - public_weight)


def _mortgage_category(catalog: Optional[CategoryCatalog]) -> Optional[Category]:
    if catalog is None:
        return None
    home = catalog.get(HOME_CATEGORY_ID)
    if home is not None and home.resolved_formula == FormulaKind.MORTGAGE:
        return home
    candidates = catalog.by_formula(FormulaKind.MORTGAGE)
    return candidates[0] if candidates else None


# =============================================================================
# CALCULATOR
# =============================================================================


class AffordabilityCalculator:
    """
    Compute recommended amounts for catalog categories.

    The calculator holds only read-only inputs (catalog, assumptions,
    formula overrides), so one instance can be shared freely and called on
    every edit.
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        assumptions: Optional[AffordabilityAssumptions] = None,
        formulas: Optional[Mapping[FormulaKind, AffordabilityFormula]] = None,
    ):
        self.catalog = catalog
        self.assumptions = assumptions or AffordabilityAssumptions()
        self._formulas = dict(formulas or {})

    def _formula_for(self, category: Category) -> AffordabilityFormula:
        kind = category.resolved_formula
        formula = self._formulas.get(kind) or _FORMULAS.get(kind)
        if formula is None:
            raise ConfigurationError(
                f"No affordability formula registered for '{kind.value}'",
                config_key="formula",
                expected="registered FormulaKind",
                actual=kind.value,
            )
        return formula

    def estimate_peer_debt_total(self, income: Decimal) -> Decimal:
        """Recommended monthly payment summed over the catalog's debt categories."""
        return sum(
            (income * c.allocation_percentage for c in self.catalog.debt_categories()),
            Decimal("0"),
        )

    def calculate(
        self,
        category: Category,
        income: Decimal,
        peer_debt_total: Optional[Decimal] = None,
    ) -> Decimal:
        """
        Calculate the affordable amount for one category.

        Args:
            category: Category to evaluate
            income: Monthly income
            peer_debt_total: Monthly payments on existing debt; estimated
                from the catalog when None

        Returns:
            Amount rounded to 0.1 (a monthly figure or a total, per the
            category's display type)

        Raises:
            ValidationError: If income or the debt total is negative
        """
        _require_non_negative("income", income)
        if peer_debt_total is None:
            peer_debt_total = self.estimate_peer_debt_total(income)
        _require_non_negative("peer_debt_total", peer_debt_total)

        context = FormulaContext(
            income=income,
            debt_to_income_ratio=debt_to_income_ratio(peer_debt_total, income),
            assumptions=self.assumptions,
            catalog=self.catalog,
        )
        amount = round_amount(self._formula_for(category)(category, context))
        logger.debug(
            "affordable_amount_calculated",
            category_id=category.id,
            formula=category.resolved_formula.value,
            income=str(income),
            amount=str(amount),
        )
        return amount

    def affordable_amount_for(
        self,
        category_id: str,
        income: Decimal,
        peer_debt_total: Optional[Decimal] = None,
    ) -> Union[Decimal, CategoryNotFound]:
        """Like ``calculate`` but looked up by id."""
        category = self.catalog.lookup(category_id)
        if isinstance(category, CategoryNotFound):
            return category
        return self.calculate(category, income, peer_debt_total)

    def recommended_amounts(self, income: Decimal) -> dict[str, Decimal]:
        """Affordable amount of every catalog category, keyed by id."""
        peer_debt_total = self.estimate_peer_debt_total(income)
        return {
            category.id: self.calculate(category, income, peer_debt_total)
            for category in self.catalog
        }

    def home_affordability(
        self,
        income: Decimal,
        peer_debt_total: Optional[Decimal] = None,
        category: Optional[Category] = None,
    ) -> Union[HomeAffordability, CategoryNotFound]:
        """Mortgage breakdown for ``category`` or the catalog's home category."""
        _require_non_negative("income", income)
        category = category or _mortgage_category(self.catalog)
        if category is None:
            return CategoryNotFound(
                category_id=HOME_CATEGORY_ID,
                message="Catalog has no mortgage category",
            )
        if peer_debt_total is None:
            peer_debt_total = self.estimate_peer_debt_total(income)
        return home_affordability(
            category,
            income,
            debt_to_income_ratio(peer_debt_total, income),
            self.assumptions,
        )


def check_affordability(
    category: Category,
    income: Decimal,
    amount: Decimal,
    timeframe: AffordabilityTimeframe = AffordabilityTimeframe.MONTHLY,
) -> AffordabilityCheck:
    """
    Check a proposed purchase amount against the category's income share.

    Args:
        category: Category the purchase falls under
        income: Monthly income
        amount: Proposed amount, per month or per year
        timeframe: Period ``amount`` is expressed in

    Returns:
        AffordabilityCheck with the recommendation and the difference
        (positive when the amount fits)
    """
    _require_non_negative("income", income)
    _require_non_negative("amount", amount)

    recommended_monthly = income * category.allocation_percentage
    if timeframe == AffordabilityTimeframe.ANNUAL:
        recommended = recommended_monthly * 12
        monthly_amount = amount / 12
    else:
        recommended = recommended_monthly
        monthly_amount = amount

    return AffordabilityCheck(
        category_id=category.id,
        amount=amount,
        timeframe=timeframe,
        monthly_amount=monthly_amount,
        recommended_amount=recommended,
        recommended_monthly=recommended_monthly,
        difference=recommended - amount,
        can_afford=amount <= recommended,
    )


def calculate_affordable_amount(
    category: Category,
    income: Decimal,
    peer_debt_total: Optional[Decimal] = None,
    catalog: Optional[CategoryCatalog] = None,
    assumptions: Optional[AffordabilityAssumptions] = None,
) -> Decimal:
    """
    Calculate a category's recommended amount.

    Convenience wrapper around ``AffordabilityCalculator``. The catalog is
    needed only for formulas that read other categories (home maintenance)
    and for estimating the peer debt total; without one a missing debt
    total counts as 0.
    """
    calculator = AffordabilityCalculator(
        catalog if catalog is not None else CategoryCatalog([category]),
        assumptions,
    )
    if peer_debt_total is None and catalog is None:
        peer_debt_total = Decimal("0")
    return calculator.calculate(category, income, peer_debt_total)


def _require_non_negative(field: str, value: Decimal) -> None:
    if value < 0:
        raise ValidationError(
            f"{field} cannot be negative",
            field=field,
            value=str(value),
            constraint=f"{field} >= 0",
        )
