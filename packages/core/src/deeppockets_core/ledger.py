"""Budget ledger: the mutable collection of allocations for one session.

Allocations are immutable values keyed by category id; every mutation
swaps in a new value under a re-entrant lock so concurrent callers never
interleave a read-modify-write. Aggregates are always derived from the
current allocations and never stored.
"""

import threading
from collections.abc import Iterable
from decimal import Decimal
from typing import Optional, Union
from uuid import uuid4

import structlog

from .allocation import AllocationEngine
from .catalog import CategoryCatalog
from .exceptions import DeletionNotAllowedError, ValidationError
from .models import (
    CUSTOM_CATEGORY_PREFIX,
    Allocation,
    AllocationType,
    Category,
    CategoryNotFound,
    CategoryPriority,
    CategoryType,
    LedgerSnapshot,
    SmartBudgetPlan,
    Suggestion,
    SuggestionKind,
)
from .optimizer import apply_optimizations

logger = structlog.get_logger()

LedgerResult = Union[Allocation, CategoryNotFound]


def _require_non_negative(field: str, value: Decimal) -> None:
    if value < 0:
        raise ValidationError(
            f"{field} cannot be negative",
            field=field,
            value=str(value),
            constraint=f"{field} >= 0",
        )


class BudgetLedger:
    """
    Active allocations for one user session.

    Lookups go through an id map; a separate id list keeps display order.
    """

    def __init__(self, catalog: CategoryCatalog, income: Decimal = Decimal("0")):
        _require_non_negative("income", income)
        self.catalog = catalog
        self._income = income
        self._allocations: dict[str, Allocation] = {}
        self._order: list[str] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._allocations

    # -------------------------------------------------------------------------
    # Internal helpers (callers hold the lock)
    # -------------------------------------------------------------------------

    def _not_found(self, category_id: str) -> CategoryNotFound:
        logger.debug("ledger_category_not_found", category_id=category_id)
        return CategoryNotFound(
            category_id=category_id,
            message=f"No allocation for '{category_id}' in the budget",
        )

    def _put(self, allocation: Allocation) -> Allocation:
        if allocation.category_id not in self._allocations:
            self._order.append(allocation.category_id)
        self._allocations[allocation.category_id] = allocation
        return allocation

    def _replace_all(self, allocations: Iterable[Allocation]) -> None:
        self._allocations = {}
        self._order = []
        for allocation in allocations:
            self._put(allocation)

    def _update(self, category_id: str, **changes) -> LedgerResult:
        with self._lock:
            current = self._allocations.get(category_id)
            if current is None:
                return self._not_found(category_id)
            return self._put(current.model_copy(update=changes))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def income(self) -> Decimal:
        return self._income

    @property
    def allocations(self) -> list[Allocation]:
        """All allocations in display order, including inactive ones."""
        with self._lock:
            return [self._allocations[i] for i in self._order]

    @property
    def active_allocations(self) -> list[Allocation]:
        return [a for a in self.allocations if a.is_active]

    def get(self, category_id: str) -> LedgerResult:
        with self._lock:
            allocation = self._allocations.get(category_id)
            return allocation if allocation is not None else self._not_found(category_id)

    def snapshot(self) -> LedgerSnapshot:
        """Immutable copy of the current income and allocations."""
        with self._lock:
            return LedgerSnapshot(income=self._income, allocations=tuple(self.allocations))

    @property
    def total_allocated(self) -> Decimal:
        return sum((a.allocated_amount for a in self.active_allocations), Decimal("0"))

    @property
    def unused_amount(self) -> Decimal:
        """Income minus active allocations; negative in a deficit."""
        with self._lock:
            return self._income - self.total_allocated

    @property
    def is_deficit(self) -> bool:
        return self.unused_amount < 0

    @property
    def total_spent(self) -> Decimal:
        return sum((a.spent_amount for a in self.active_allocations), Decimal("0"))

    @property
    def total_savings(self) -> Decimal:
        return sum(
            (a.allocated_amount for a in self.active_allocations if a.type == AllocationType.SAVINGS),
            Decimal("0"),
        )

    @property
    def savings_rate(self) -> Decimal:
        """Active savings as a fraction of income (0 when income is 0)."""
        with self._lock:
            if self._income <= 0:
                return Decimal("0")
            return self.total_savings / self._income

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def set_income(self, income: Decimal) -> None:
        _require_non_negative("income", income)
        with self._lock:
            self._income = income
        logger.info("ledger_income_set", income=str(income))

    def load(self, allocations: Iterable[Allocation]) -> None:
        """Replace the ledger contents (e.g. from the persistence layer)."""
        with self._lock:
            self._replace_all(allocations)
            count = len(self._order)
        logger.info("ledger_loaded", allocations=count)

    def setup_initial_budget(self, category_ids: Iterable[str]) -> list[CategoryNotFound]:
        """
        Start a budget from manually selected catalog categories.

        Each selected category is allocated ``income * allocation_percentage``.

        Returns:
            Not-found results for ids missing from the catalog (empty when
            every id was found)
        """
        missing: list[CategoryNotFound] = []
        allocations: list[Allocation] = []
        with self._lock:
            for category_id in category_ids:
                category = self.catalog.lookup(category_id)
                if isinstance(category, CategoryNotFound):
                    missing.append(category)
                    continue
                allocations.append(
                    Allocation(
                        category=category,
                        allocated_amount=self._income * category.allocation_percentage,
                        type=AllocationType.SAVINGS if category.is_savings else AllocationType.EXPENSE,
                        priority=category.priority,
                    )
                )
            self._replace_all(allocations)
        logger.info("initial_budget_setup", allocations=len(allocations), missing=len(missing))
        return missing

    def generate_smart_budget(self, engine: Optional[AllocationEngine] = None) -> SmartBudgetPlan:
        """Replace the ledger with a generated smart budget for the current income."""
        engine = engine or AllocationEngine(self.catalog)
        with self._lock:
            plan = engine.build_plan(self._income)
            self._replace_all(plan.allocations)
        return plan

    def update_allocation(self, category_id: str, amount: Decimal) -> LedgerResult:
        _require_non_negative("amount", amount)
        return self._update(category_id, allocated_amount=amount)

    def update_spent_amount(self, category_id: str, amount: Decimal) -> LedgerResult:
        _require_non_negative("amount", amount)
        return self._update(category_id, spent_amount=amount)

    def toggle_category(self, category_id: str) -> LedgerResult:
        """Flip ``is_active``; the allocated amount is kept as is."""
        with self._lock:
            current = self._allocations.get(category_id)
            if current is None:
                return self._not_found(category_id)
            return self._put(current.model_copy(update={"is_active": not current.is_active}))

    def add_custom_category(
        self,
        name: str,
        amount: Decimal,
        category_type: CategoryType = CategoryType.OTHER,
        description: Optional[str] = None,
    ) -> Allocation:
        """
        Add a user-defined category with a fixed monthly amount.

        The category's allocation percentage is ``amount / income`` (capped
        at 1, and 0 when income is 0) so later re-derivation from income
        reproduces the amount.
        """
        _require_non_negative("amount", amount)
        with self._lock:
            percentage = Decimal("0")
            if self._income > 0:
                percentage = min(amount / self._income, Decimal("1"))
            category = Category(
                id=f"{CUSTOM_CATEGORY_PREFIX}{uuid4().hex}",
                name=name,
                type=category_type,
                allocation_percentage=percentage,
                description=description,
            )
            allocation = self._put(
                Allocation(
                    category=category,
                    allocated_amount=amount,
                    type=AllocationType.SAVINGS if category.is_savings else AllocationType.EXPENSE,
                    priority=category.priority,
                )
            )
        logger.info("custom_category_added", category_id=category.id, amount=str(amount))
        return allocation

    def can_delete(self, category_id: str) -> bool:
        """Custom categories always; catalog categories unless essential."""
        if category_id.startswith(CUSTOM_CATEGORY_PREFIX):
            return True
        with self._lock:
            allocation = self._allocations.get(category_id)
            if allocation is None:
                return False
            return allocation.priority != CategoryPriority.ESSENTIAL

    def delete_category(self, category_id: str) -> LedgerResult:
        """
        Permanently remove an allocation.

        Raises:
            DeletionNotAllowedError: For essential, non-custom categories
        """
        with self._lock:
            allocation = self._allocations.get(category_id)
            if allocation is None:
                return self._not_found(category_id)
            if not self.can_delete(category_id):
                raise DeletionNotAllowedError(
                    f"Essential category '{category_id}' cannot be deleted",
                    category_id=category_id,
                    priority=allocation.priority.value,
                )
            del self._allocations[category_id]
            self._order.remove(category_id)
        logger.info("category_deleted", category_id=category_id)
        return allocation

    def apply_optimizations(self, suggestions: Iterable[Suggestion]) -> LedgerSnapshot:
        """
        Apply the selected suggestions atomically and return the new state.

        Raises:
            DeletionNotAllowedError: If a selected remove targets an essential,
                non-custom category; nothing is applied
        """
        selected = [s for s in suggestions if s.selected]
        with self._lock:
            for suggestion in selected:
                if (
                    suggestion.kind == SuggestionKind.REMOVE
                    and suggestion.category_id in self._allocations
                    and not self.can_delete(suggestion.category_id)
                ):
                    raise DeletionNotAllowedError(
                        f"Essential category '{suggestion.category_id}' cannot be removed",
                        category_id=suggestion.category_id,
                        priority=suggestion.category.priority.value,
                    )
            self._replace_all(apply_optimizations(self.allocations, selected))
            snapshot = self.snapshot()
        logger.info(
            "optimizations_applied",
            applied=len(selected),
            unused_amount=str(snapshot.unused_amount),
        )
        return snapshot
