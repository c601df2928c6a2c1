"""Category catalog models.

A category is an immutable catalog entry describing one place money can go:
its type, how its amount is displayed, the default share of income it
nominally receives, and the user-editable assumptions that feed its
affordability formula.
"""

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class CategoryType(str, Enum):
    """Broad spending family of a category."""

    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    SAVINGS = "savings"
    DEBT = "debt"
    UTILITIES = "utilities"
    FOOD = "food"
    INSURANCE = "insurance"
    EDUCATION = "education"
    PERSONAL = "personal"
    HEALTH = "health"
    FAMILY = "family"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"


class DisplayType(str, Enum):
    """Whether a recommended amount is a monthly figure or a one-off total."""

    MONTHLY = "monthly"
    TOTAL = "total"


class CategoryPriority(str, Enum):
    """Priority tier governing which categories absorb income shortfalls."""

    ESSENTIAL = "essential"
    IMPORTANT = "important"
    DISCRETIONARY = "discretionary"

    @property
    def rank(self) -> int:
        """Sort rank, essential first."""
        return _PRIORITY_RANK[self]

    @property
    def label(self) -> str:
        """Short display label."""
        return _PRIORITY_LABEL[self]


_PRIORITY_RANK = {
    CategoryPriority.ESSENTIAL: 1,
    CategoryPriority.IMPORTANT: 2,
    CategoryPriority.DISCRETIONARY: 3,
}

_PRIORITY_LABEL = {
    CategoryPriority.ESSENTIAL: "Essential",
    CategoryPriority.IMPORTANT: "Important",
    CategoryPriority.DISCRETIONARY: "Optional",
}


class FormulaKind(str, Enum):
    """Affordability formula a category is computed with.

    Categories may carry an explicit tag; untagged categories resolve a kind
    from their display type and category type (see ``Category.resolved_formula``).
    """

    MONTHLY = "monthly"
    MORTGAGE = "mortgage"
    HOME_MAINTENANCE = "home_maintenance"
    VEHICLE = "vehicle"
    SAVINGS_GOAL = "savings_goal"
    DEBT_PAYMENT = "debt_payment"
    ANNUAL = "annual"
    VACATION = "vacation"
    COLLEGE_FUND = "college_fund"


_TOTAL_FORMULAS_BY_TYPE = {
    CategoryType.HOUSING: FormulaKind.MORTGAGE,
    CategoryType.TRANSPORTATION: FormulaKind.VEHICLE,
    CategoryType.SAVINGS: FormulaKind.SAVINGS_GOAL,
    CategoryType.DEBT: FormulaKind.DEBT_PAYMENT,
}


class CategoryAssumption(BaseModel):
    """A titled, user-editable assumption stored as a string.

    Values stay string-encoded because they come straight from text inputs;
    ``numeric_value`` is the parsed view the formulas read.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    value: str
    description: Optional[str] = None

    @property
    def numeric_value(self) -> Optional[Decimal]:
        """Parsed value, or None when the text is not a finite number."""
        try:
            parsed = Decimal(self.value.strip())
        except (InvalidOperation, AttributeError):
            return None
        if not parsed.is_finite():
            return None
        return parsed


class Category(BaseModel):
    """An immutable category definition from the catalog."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "home",
                    "name": "Home",
                    "type": "housing",
                    "display_type": "total",
                    "allocation_percentage": "0.28",
                    "assumptions": [
                        {"title": "Down Payment", "value": "20"},
                        {"title": "Interest Rate", "value": "7.0"},
                    ],
                }
            ]
        },
    )

    id: str = Field(min_length=1, description="Stable category key")
    name: str
    type: CategoryType
    display_type: DisplayType = DisplayType.MONTHLY
    allocation_percentage: Decimal = Field(
        ge=0,
        le=1,
        description="Default fraction of monthly income assigned to the category",
    )
    assumptions: tuple[CategoryAssumption, ...] = ()
    description: Optional[str] = None
    formula: Optional[FormulaKind] = Field(
        default=None,
        description="Explicit affordability formula; derived from type when unset",
    )
    savings_goal: Optional[Decimal] = Field(default=None, ge=0)
    savings_timeline: Optional[int] = Field(
        default=None, ge=1, description="Savings timeline in months"
    )
    debt_amount: Optional[Decimal] = Field(default=None, ge=0)
    debt_interest_rate: Optional[Decimal] = Field(
        default=None, ge=0, description="Annual interest rate in percent"
    )

    @field_validator("allocation_percentage", mode="before")
    @classmethod
    def coerce_percentage_to_decimal(cls, v):
        """Coerce float and string percentages to Decimal without float noise."""
        if isinstance(v, (float, int, str)):
            return Decimal(str(v))
        return v

    @computed_field
    @property
    def priority(self) -> CategoryPriority:
        """Priority tier from the fixed id lookup table."""
        from ..standards import get_category_priority

        return get_category_priority(self.id)

    @property
    def resolved_formula(self) -> FormulaKind:
        """Formula kind used by the affordability calculator."""
        if self.formula is not None:
            return self.formula
        if self.display_type == DisplayType.MONTHLY:
            return FormulaKind.MONTHLY
        return _TOTAL_FORMULAS_BY_TYPE.get(self.type, FormulaKind.ANNUAL)

    @property
    def is_savings(self) -> bool:
        return self.type == CategoryType.SAVINGS

    @property
    def is_debt(self) -> bool:
        return self.type == CategoryType.DEBT

    @property
    def formatted_allocation(self) -> str:
        """Allocation percentage as display text, e.g. ``"28.0%"``."""
        return f"{self.allocation_percentage * 100:.1f}%"

    def assumption(self, title: str) -> Optional[CategoryAssumption]:
        """Return the assumption with the given title, if present."""
        for assumption in self.assumptions:
            if assumption.title == title:
                return assumption
        return None

    def assumption_value(
        self, title: str, default: Optional[Decimal] = None
    ) -> Optional[Decimal]:
        """Numeric value of an assumption, falling back to ``default``."""
        assumption = self.assumption(title)
        if assumption is None:
            return default
        value = assumption.numeric_value
        return default if value is None else value

    def interest_rate(self, default: Decimal) -> Decimal:
        """Annual rate in percent: the debt rate, then the "Interest Rate" or
        "APR" assumption, then ``default``. Negative assumption values are ignored."""
        if self.debt_interest_rate is not None:
            return self.debt_interest_rate
        for title in ("Interest Rate", "APR"):
            value = self.assumption_value(title)
            if value is not None and value >= 0:
                return value
        return default

    def with_assumption(self, title: str, value: str) -> "Category":
        """Return a copy with one assumption replaced or appended.

        The catalog entry itself stays untouched; edited assumptions travel
        as a new Category value.
        """
        updated = []
        replaced = False
        for assumption in self.assumptions:
            if assumption.title == title:
                updated.append(assumption.model_copy(update={"value": value}))
                replaced = True
            else:
                updated.append(assumption)
        if not replaced:
            updated.append(CategoryAssumption(title=title, value=value))
        return self.model_copy(update={"assumptions": tuple(updated)})
