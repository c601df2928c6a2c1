"""Fixed budgeting lookup tables.

This module holds the tables the engines consult but users never edit:
category priority tiers, the allocation order of category types, income
tier multipliers for affordability, income percentiles, and the category
id groups the diagnostic rules refer to.

Tuning constants that people do want to adjust (surplus reserve, housing
cap, savings targets) live in ``config.py`` instead.
"""

from decimal import Decimal

from .models import CategoryPriority, CategoryType


# =============================================================================
# PRIORITY TIERS
# =============================================================================
# Tier membership is keyed by category id. Anything not listed is
# discretionary.

ESSENTIAL_CATEGORY_IDS = frozenset({
    "rent",
    "groceries",
    "utilities",
    "transportation",
    "emergency_savings",
})

IMPORTANT_CATEGORY_IDS = frozenset({
    "home",
    "car",
    "public_transportation",
    "investments",
    "credit_cards",
    "student_loans",
    "personal_loans",
    "car_loan",
})


def get_category_priority(category_id: str) -> CategoryPriority:
    """Get the priority tier for a category id.

    Args:
        category_id: Catalog category id

    Returns:
        Priority tier (discretionary for unknown ids)
    """
    if category_id in ESSENTIAL_CATEGORY_IDS:
        return CategoryPriority.ESSENTIAL
    if category_id in IMPORTANT_CATEGORY_IDS:
        return CategoryPriority.IMPORTANT
    return CategoryPriority.DISCRETIONARY


# =============================================================================
# ALLOCATION ORDER
# =============================================================================
# Iteration order within a tier. Savings first, debt near the bottom.

ALLOCATION_ORDER = {
    CategoryType.SAVINGS: 1,
    CategoryType.HOUSING: 2,
    CategoryType.UTILITIES: 3,
    CategoryType.FOOD: 4,
    CategoryType.HEALTH: 5,
    CategoryType.INSURANCE: 6,
    CategoryType.TRANSPORTATION: 7,
    CategoryType.FAMILY: 8,
    CategoryType.EDUCATION: 9,
    CategoryType.PERSONAL: 10,
    CategoryType.ENTERTAINMENT: 11,
    CategoryType.DEBT: 12,
    CategoryType.OTHER: 13,
}


def get_allocation_order(category_type: CategoryType) -> int:
    """Get the allocation order index for a category type."""
    return ALLOCATION_ORDER[category_type]


# =============================================================================
# INCOME TIERS
# =============================================================================
# Annual income brackets scaling generic monthly recommendations.
# Format: (annual income lower bound, multiplier), highest bracket first.

INCOME_TIER_MULTIPLIERS = (
    (Decimal("200000"), Decimal("1.2")),
    (Decimal("100000"), Decimal("1.1")),
    (Decimal("50000"), Decimal("1.0")),
    (Decimal("0"), Decimal("0.9")),
)


def get_income_tier_multiplier(monthly_income: Decimal) -> Decimal:
    """Get the affordability multiplier for a monthly income.

    Args:
        monthly_income: Monthly income

    Returns:
        0.9 below $50k/yr, 1.0 to $100k, 1.1 to $200k, 1.2 above
    """
    annual_income = monthly_income * 12
    for lower_bound, multiplier in INCOME_TIER_MULTIPLIERS:
        if annual_income >= lower_bound:
            return multiplier
    return INCOME_TIER_MULTIPLIERS[-1][1]


# =============================================================================
# INCOME PERCENTILES
# =============================================================================
# Simplified "top N%" placement by annual income.

INCOME_PERCENTILES = (
    (Decimal("650000"), 1),
    (Decimal("250000"), 5),
    (Decimal("180000"), 10),
    (Decimal("120000"), 20),
    (Decimal("90000"), 30),
    (Decimal("70000"), 40),
    (Decimal("50000"), 50),
    (Decimal("35000"), 60),
    (Decimal("25000"), 70),
)

DEFAULT_INCOME_PERCENTILE = 80


# =============================================================================
# CATEGORY GROUPS
# =============================================================================

EMERGENCY_SAVINGS_ID = "emergency_savings"
RETIREMENT_SAVINGS_ID = "retirement_savings"
HOME_CATEGORY_ID = "home"

HEALTH_CATEGORY_IDS = frozenset({
    "health_insurance",
    "medical_expenses",
    "dental",
    "vision_care",
})

HEALTH_SUGGESTION_ID = "medical_expenses"
