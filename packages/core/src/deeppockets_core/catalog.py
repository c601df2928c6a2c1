"""Read-only category catalog.

The catalog is passed explicitly into every engine instead of living in a
process-wide singleton, so tests can run against small fixture catalogs
and two sessions never share hidden state.
"""

from collections.abc import Iterable, Iterator
from decimal import Decimal
from functools import lru_cache
from typing import Optional, Union

import structlog

from .exceptions import ConfigurationError
from .models import (
    Category,
    CategoryAssumption,
    CategoryNotFound,
    CategoryType,
    DisplayType,
    FormulaKind,
)

logger = structlog.get_logger()


class CategoryCatalog:
    """Immutable, id-keyed collection of category definitions.

    Iteration follows the order the categories were supplied in.
    """

    def __init__(self, categories: Iterable[Category]):
        by_id: dict[str, Category] = {}
        for category in categories:
            if category.id in by_id:
                raise ConfigurationError(
                    f"Duplicate category id in catalog: {category.id}",
                    config_key="catalog",
                    expected="unique category ids",
                    actual=category.id,
                )
            by_id[category.id] = category
        self._by_id = by_id
        self._ordered = tuple(by_id.values())

    def __iter__(self) -> Iterator[Category]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def __repr__(self) -> str:
        return f"CategoryCatalog({len(self)} categories)"

    @property
    def categories(self) -> tuple[Category, ...]:
        return self._ordered

    def get(self, category_id: str) -> Optional[Category]:
        """Return the category with ``category_id`` or None."""
        return self._by_id.get(category_id)

    def lookup(self, category_id: str) -> Union[Category, CategoryNotFound]:
        """Return the category or a typed ``CategoryNotFound`` result."""
        category = self._by_id.get(category_id)
        if category is None:
            logger.debug("category_not_found", category_id=category_id)
            return CategoryNotFound(
                category_id=category_id,
                message=f"Category '{category_id}' is not in the catalog",
            )
        return category

    def by_type(self, category_type: CategoryType) -> list[Category]:
        return [c for c in self._ordered if c.type == category_type]

    def by_formula(self, formula: FormulaKind) -> list[Category]:
        return [c for c in self._ordered if c.resolved_formula == formula]

    def debt_categories(self) -> list[Category]:
        return self.by_type(CategoryType.DEBT)

    def savings_categories(self) -> list[Category]:
        return self.by_type(CategoryType.SAVINGS)

    def with_category(self, category: Category) -> "CategoryCatalog":
        """Return a new catalog with ``category`` replacing the entry of the same id.

        Used to carry edited assumptions into a calculation without
        mutating the shared catalog.
        """
        if category.id not in self._by_id:
            return CategoryCatalog([*self._ordered, category])
        return CategoryCatalog(
            category if c.id == category.id else c for c in self._ordered
        )


# =============================================================================
# DEFAULT CATALOG
# =============================================================================


def _assumption(title: str, value: str, description: str) -> CategoryAssumption:
    return CategoryAssumption(title=title, value=value, description=description)


def _category(
    id: str,
    name: str,
    type: CategoryType,
    allocation: str,
    description: str,
    display_type: DisplayType = DisplayType.MONTHLY,
    assumptions: tuple[CategoryAssumption, ...] = (),
    **extra,
) -> Category:
    return Category(
        id=id,
        name=name,
        type=type,
        display_type=display_type,
        allocation_percentage=Decimal(allocation),
        description=description,
        assumptions=assumptions,
        **extra,
    )


def _default_categories() -> list[Category]:
    return [
        # Housing & shelter
        _category(
            "home", "Home", CategoryType.HOUSING, "0.28",
            "Total purchase price for a home, including ownership costs like taxes and insurance.",
            display_type=DisplayType.TOTAL,
            assumptions=(
                _assumption("Down Payment", "20", "Percentage paid upfront."),
                _assumption("Interest Rate", "7.0", "Annual mortgage interest rate."),
                _assumption("Property Tax Rate", "1.1", "Annual property tax as % of value."),
            ),
        ),
        _category(
            "rent", "Rent", CategoryType.HOUSING, "0.30",
            "Monthly rent for your residence.",
            assumptions=(_assumption("Lease Term", "12", "Length of lease in months."),),
        ),
        _category(
            "home_maintenance", "Home Maintenance", CategoryType.HOUSING, "0.05",
            "Repairs and upkeep for your home.",
            formula=FormulaKind.HOME_MAINTENANCE,
        ),
        # Transportation
        _category(
            "car", "Car", CategoryType.TRANSPORTATION, "0.15",
            "Total purchase price for a car, including financing costs and fees.",
            display_type=DisplayType.TOTAL,
            assumptions=(
                _assumption("Down Payment", "10", "Percentage paid upfront."),
                _assumption("Interest Rate", "5.0", "Annual car loan interest rate."),
                _assumption("Sales Tax Rate", "8.0", "Sales tax applied to the purchase price."),
            ),
        ),
        _category(
            "car_maintenance", "Car Maintenance", CategoryType.TRANSPORTATION, "0.03",
            "Repairs and routine maintenance for your car.",
        ),
        _category(
            "transportation", "Transportation", CategoryType.TRANSPORTATION, "0.07",
            "Costs for public transit, fuel, parking, and tolls.",
        ),
        # Utilities & bills
        _category(
            "utilities", "Utilities", CategoryType.UTILITIES, "0.08",
            "Monthly costs for electricity, water, and gas.",
        ),
        _category(
            "internet", "Internet & Cable", CategoryType.UTILITIES, "0.03",
            "Monthly internet and cable TV expenses.",
        ),
        _category(
            "cell_phone", "Cell Phone", CategoryType.UTILITIES, "0.03",
            "Monthly cell phone bill.",
        ),
        # Food
        _category(
            "groceries", "Groceries", CategoryType.FOOD, "0.12",
            "Monthly food and household essentials.",
        ),
        _category(
            "dining", "Dining Out", CategoryType.FOOD, "0.05",
            "Expenses for eating out and coffee.",
        ),
        # Entertainment
        _category(
            "entertainment", "Entertainment", CategoryType.ENTERTAINMENT, "0.02",
            "Movies, concerts, and events.",
        ),
        _category(
            "hobbies", "Hobbies", CategoryType.ENTERTAINMENT, "0.02",
            "Supplies and expenses for hobbies and recreational activities.",
        ),
        _category(
            "subscriptions", "Subscriptions", CategoryType.ENTERTAINMENT, "0.02",
            "Costs for streaming services and apps.",
        ),
        # Insurance
        _category(
            "insurance", "Insurance", CategoryType.INSURANCE, "0.06",
            "Monthly premiums for home, auto, and renters insurance.",
        ),
        _category(
            "health_insurance", "Health Insurance", CategoryType.INSURANCE, "0.05",
            "Monthly health insurance premium.",
        ),
        # Health
        _category(
            "medical_expenses", "Medical Expenses", CategoryType.HEALTH, "0.05",
            "Out-of-pocket medical costs.",
        ),
        _category(
            "dental", "Dental", CategoryType.HEALTH, "0.02",
            "Expenses for dental care.",
        ),
        _category(
            "vision_care", "Vision Care", CategoryType.HEALTH, "0.01",
            "Expenses for eye exams and glasses.",
        ),
        # Savings
        _category(
            "emergency_savings", "Emergency Savings", CategoryType.SAVINGS, "0.10",
            "Savings for unexpected emergencies.",
            assumptions=(_assumption("Target Amount", "10000", "Desired emergency fund total."),),
        ),
        _category(
            "retirement_savings", "Retirement Savings", CategoryType.SAVINGS, "0.10",
            "Contributions to retirement accounts.",
        ),
        _category(
            "investments", "Investments", CategoryType.SAVINGS, "0.05",
            "Monthly contributions to investment accounts.",
            assumptions=(
                _assumption("Stocks", "60", "Percentage allocation to stocks."),
                _assumption("Bonds", "30", "Percentage allocation to bonds."),
                _assumption("Other Assets", "10", "Percentage allocation to other assets."),
            ),
        ),
        _category(
            "college_savings", "College Savings", CategoryType.SAVINGS, "0.05",
            "Savings for future college expenses.",
            display_type=DisplayType.TOTAL,
            formula=FormulaKind.COLLEGE_FUND,
            assumptions=(_assumption("Years to College", "18", "Years until college starts."),),
        ),
        _category(
            "vacation", "Vacation", CategoryType.SAVINGS, "0.03",
            "Savings for vacations and leisure travel.",
            display_type=DisplayType.TOTAL,
            formula=FormulaKind.VACATION,
            assumptions=(
                _assumption("Destination Type", "domestic", "Domestic, international, or luxury."),
            ),
        ),
        _category(
            "house_fund", "House Down Payment Fund", CategoryType.SAVINGS, "0.05",
            "Savings toward a home down payment.",
            display_type=DisplayType.TOTAL,
            savings_goal=Decimal("40000"),
            savings_timeline=36,
        ),
        # Education
        _category(
            "education", "Education", CategoryType.EDUCATION, "0.05",
            "Tuition, books, and supplies for education.",
        ),
        _category(
            "personal_development", "Personal Development", CategoryType.EDUCATION, "0.02",
            "Expenses for courses and self-improvement.",
        ),
        # Family
        _category(
            "childcare", "Childcare", CategoryType.FAMILY, "0.08",
            "Expenses for childcare or daycare.",
        ),
        _category(
            "pet_care", "Pet Care", CategoryType.FAMILY, "0.03",
            "Expenses for pet food, vet, and supplies.",
        ),
        # Personal
        _category(
            "clothing", "Clothing", CategoryType.PERSONAL, "0.04",
            "Expenses for apparel and accessories.",
        ),
        _category(
            "personal_care", "Personal Care", CategoryType.PERSONAL, "0.03",
            "Expenses for grooming, haircuts, and toiletries.",
        ),
        _category(
            "gym_membership", "Gym Membership", CategoryType.PERSONAL, "0.02",
            "Cost for fitness club membership.",
        ),
        # Debt
        _category(
            "credit_cards", "Credit Card Debt", CategoryType.DEBT, "0.05",
            "Monthly credit card payments.",
            assumptions=(
                _assumption("APR", "18", "Annual percentage rate."),
                _assumption("Min Payment", "2", "Minimum payment as % of balance."),
            ),
        ),
        _category(
            "student_loans", "Student Loan Debt", CategoryType.DEBT, "0.05",
            "Monthly student loan payments.",
            assumptions=(
                _assumption("Interest Rate", "5", "Annual interest rate."),
                _assumption("Loan Term", "10", "Term in years."),
            ),
        ),
        _category(
            "personal_loans", "Personal Loan Debt", CategoryType.DEBT, "0.05",
            "Monthly personal loan payments.",
            assumptions=(
                _assumption("Interest Rate", "8", "Annual interest rate."),
                _assumption("Loan Term", "5", "Term in years."),
            ),
        ),
        _category(
            "car_loan", "Car Loan", CategoryType.DEBT, "0.05",
            "Outstanding car loan balance.",
            display_type=DisplayType.TOTAL,
            debt_amount=Decimal("15000"),
            debt_interest_rate=Decimal("6.5"),
        ),
        # Other
        _category(
            "gifts", "Gifts", CategoryType.OTHER, "0.02",
            "Budget for gift giving.",
        ),
        _category(
            "charity", "Charity", CategoryType.OTHER, "0.02",
            "Donations and charitable contributions.",
        ),
        _category(
            "miscellaneous", "Miscellaneous", CategoryType.OTHER, "0.03",
            "Other unplanned expenses.",
        ),
    ]


@lru_cache(maxsize=1)
def default_catalog() -> CategoryCatalog:
    """Return the built-in category catalog.

    The catalog is immutable, so one cached instance is shared safely.
    """
    catalog = CategoryCatalog(_default_categories())
    logger.debug("default_catalog_loaded", categories=len(catalog))
    return catalog
