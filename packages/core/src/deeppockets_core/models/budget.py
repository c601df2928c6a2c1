"""Budget, plan, and suggestion models produced by the engines.

Every model here is a value: engines return fresh instances and the ledger
swaps whole allocations in and out instead of editing them in place.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .audit import AuditEntry
from .category import Category, CategoryPriority

CUSTOM_CATEGORY_PREFIX = "custom_"


class AllocationType(str, Enum):
    """Whether an allocation is spent or saved."""

    EXPENSE = "expense"
    SAVINGS = "savings"


class AffordabilityTimeframe(str, Enum):
    """Period an amount being checked for affordability is expressed in."""

    MONTHLY = "monthly"
    ANNUAL = "annual"


class CategoryNotFound(BaseModel):
    """Typed failure result for a category id that is not available.

    Returned, never raised, so callers keep working against a partially
    loaded catalog or ledger.
    """

    model_config = ConfigDict(frozen=True)

    category_id: str
    message: str = "Category not found"

    def __bool__(self) -> bool:
        return False


class Allocation(BaseModel):
    """A budget line: money assigned to one category for the month."""

    model_config = ConfigDict(frozen=True)

    category: Category
    allocated_amount: Decimal = Field(ge=0)
    spent_amount: Decimal = Field(default=Decimal("0"), ge=0)
    type: AllocationType = AllocationType.EXPENSE
    priority: CategoryPriority = CategoryPriority.DISCRETIONARY
    is_active: bool = True

    @computed_field
    @property
    def category_id(self) -> str:
        """Id of the category this allocation funds."""
        return self.category.id

    @computed_field
    @property
    def remaining_amount(self) -> Decimal:
        """Allocated minus spent; negative when overspent."""
        return self.allocated_amount - self.spent_amount

    @computed_field
    @property
    def percentage_spent(self) -> Decimal:
        """Spent share of the allocation in percent (0 for empty allocations)."""
        if self.allocated_amount <= 0:
            return Decimal("0")
        return self.spent_amount / self.allocated_amount * 100

    @property
    def is_custom(self) -> bool:
        return self.category.id.startswith(CUSTOM_CATEGORY_PREFIX)


class DebtPlan(BaseModel):
    """Derived payoff schedule for a debt balance.

    ``pays_off`` is False for the sentinel plan returned when the payment
    never covers the monthly interest; ``months`` is then capped at the
    practical horizon instead of being infinite.
    """

    model_config = ConfigDict(frozen=True)

    principal: Decimal
    annual_rate: Decimal
    monthly_payment: Decimal
    months: int = Field(ge=0)
    total_interest: Decimal
    total_cost: Decimal
    start_date: date
    payoff_date: date
    pays_off: bool = True


class DebtAffordability(BaseModel):
    """Whether a payoff plan's payment fits the category's budget share."""

    plan: DebtPlan
    recommended_monthly_payment: Decimal
    can_afford: bool


class SavingsPlan(BaseModel):
    """Monthly savings needed to reach a goal by a target date."""

    target_amount: Decimal
    months_to_goal: int = Field(ge=1)
    required_monthly_savings: Decimal
    recommended_monthly_savings: Decimal
    can_save: bool


class AffordabilityCheck(BaseModel):
    """Comparison of a proposed amount against a category's recommendation."""

    category_id: str
    amount: Decimal
    timeframe: AffordabilityTimeframe
    monthly_amount: Decimal
    recommended_amount: Decimal
    recommended_monthly: Decimal
    difference: Decimal
    can_afford: bool


class HomeAffordability(BaseModel):
    """Intermediate figures of the mortgage affordability formula."""

    max_monthly_payment: Decimal
    eligible_monthly_payment: Decimal
    loan_amount: Decimal
    purchase_price: Decimal
    down_payment_amount: Decimal
    monthly_property_tax: Decimal
    projected_price: Decimal


class SuggestionKind(str, Enum):
    """Type of correction a suggestion proposes."""

    INCREASE = "increase"
    DECREASE = "decrease"
    ADD = "add"
    REMOVE = "remove"


class Suggestion(BaseModel):
    """A proposed correction to the current allocation.

    The kind, target and suggested amount are the contract; ``reason`` is
    informational text for display.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    kind: SuggestionKind
    category: Category
    current_amount: Optional[Decimal] = None
    suggested_amount: Decimal = Field(ge=0)
    reason: str
    priority_class: int = Field(ge=1, le=5)
    selected: bool = False

    @computed_field
    @property
    def category_id(self) -> str:
        return self.category.id

    @computed_field
    @property
    def change_amount(self) -> Decimal:
        """Size of the change this suggestion makes to the budget."""
        if self.kind == SuggestionKind.ADD:
            return self.suggested_amount
        current = self.current_amount or Decimal("0")
        if self.kind == SuggestionKind.REMOVE:
            return current
        return abs(self.suggested_amount - current)


class SmartBudgetPlan(BaseModel):
    """Full result of a smart budget generation run."""

    income: Decimal
    available_income: Decimal
    reserved_surplus: Decimal
    allocations: list[Allocation] = Field(default_factory=list)
    tier_scales: dict[CategoryPriority, Decimal] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    audit_log: list[AuditEntry] = Field(default_factory=list)

    @computed_field
    @property
    def total_allocated(self) -> Decimal:
        return sum((a.allocated_amount for a in self.allocations), Decimal("0"))


class LedgerSnapshot(BaseModel):
    """Immutable view of the ledger at one point in time."""

    model_config = ConfigDict(frozen=True)

    income: Decimal
    allocations: tuple[Allocation, ...] = ()

    @property
    def active_allocations(self) -> list[Allocation]:
        return [a for a in self.allocations if a.is_active]

    @computed_field
    @property
    def total_allocated(self) -> Decimal:
        """Sum of active allocated amounts."""
        return sum((a.allocated_amount for a in self.active_allocations), Decimal("0"))

    @computed_field
    @property
    def unused_amount(self) -> Decimal:
        """Income minus active allocations; negative in a deficit."""
        return self.income - self.total_allocated

    @computed_field
    @property
    def is_deficit(self) -> bool:
        return self.unused_amount < 0
