"""Rule-based budget diagnostics.

Each rule is evaluated independently against a snapshot of the current
allocations. The resulting suggestions are ranked by priority class and
truncated; applying them sets absolute amounts, so applying twice changes
nothing.
"""

from collections.abc import Iterable
from decimal import ROUND_DOWN, Decimal
from typing import Optional

import structlog

from .catalog import CategoryCatalog
from .config import OptimizationRules
from .models import (
    Allocation,
    AllocationType,
    Category,
    CategoryPriority,
    CategoryType,
    Suggestion,
    SuggestionKind,
)
from .standards import (
    ESSENTIAL_CATEGORY_IDS,
    HEALTH_CATEGORY_IDS,
    HEALTH_SUGGESTION_ID,
    RETIREMENT_SAVINGS_ID,
)

logger = structlog.get_logger()

# Evaluation order of the missing-essential rule
ESSENTIAL_ADD_ORDER = ("rent", "groceries", "utilities", "transportation", "emergency_savings")

PRIORITY_ESSENTIAL_ADD = 1
PRIORITY_SAVINGS = 2
PRIORITY_DECREASE = 3
PRIORITY_OTHER = 4
PRIORITY_REMOVE = 5

CENTS = Decimal("0.01")


def _floor_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_DOWN)


def priority_class(kind: SuggestionKind, category: Category) -> int:
    """Ranking class of a suggestion, 1 (most urgent) to 5."""
    if kind == SuggestionKind.ADD and category.id in ESSENTIAL_CATEGORY_IDS:
        return PRIORITY_ESSENTIAL_ADD
    if kind in (SuggestionKind.ADD, SuggestionKind.INCREASE) and category.is_savings:
        return PRIORITY_SAVINGS
    if kind == SuggestionKind.DECREASE:
        return PRIORITY_DECREASE
    if kind == SuggestionKind.REMOVE:
        return PRIORITY_REMOVE
    return PRIORITY_OTHER


class OptimizationEngine:
    """
    Diagnose an allocation and propose corrections.

    Suggestions are always returned sorted by priority class (ties: larger
    change first) and capped at ``rules.max_suggestions``.
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        rules: Optional[OptimizationRules] = None,
    ):
        self.catalog = catalog
        self.rules = rules or OptimizationRules()

    def _suggest(
        self,
        kind: SuggestionKind,
        category: Category,
        suggested_amount: Decimal,
        reason: str,
        current_amount: Optional[Decimal] = None,
    ) -> Suggestion:
        return Suggestion(
            kind=kind,
            category=category,
            current_amount=current_amount,
            suggested_amount=_floor_cents(max(suggested_amount, Decimal("0"))),
            reason=reason,
            priority_class=priority_class(kind, category),
        )

    def _add(self, category_id: str, amount: Optional[Decimal], income: Decimal, reason: str) -> list[Suggestion]:
        category = self.catalog.get(category_id)
        if category is None:
            logger.debug("suggestion_skipped_missing_category", category_id=category_id)
            return []
        if amount is None:
            amount = income * category.allocation_percentage
        return [self._suggest(SuggestionKind.ADD, category, amount, reason)]

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def _missing_essentials(self, active: list[Allocation], income: Decimal) -> list[Suggestion]:
        present = {a.category_id for a in active}
        has_housing = any(a.category.type == CategoryType.HOUSING for a in active)
        suggestions = []
        for category_id in ESSENTIAL_ADD_ORDER:
            if category_id in present:
                continue
            if category_id == "rent" and has_housing:
                continue
            suggestions += self._add(
                category_id, None, income, "Essential category missing from your budget"
            )
        return suggestions

    def _low_savings(self, active: list[Allocation], income: Decimal) -> list[Suggestion]:
        if income <= 0:
            return []
        savings = [a for a in active if a.category.is_savings]
        total_savings = sum((a.allocated_amount for a in savings), Decimal("0"))
        if total_savings / income >= self.rules.target_savings_rate:
            return []

        cap = income * self.rules.target_savings_rate
        suggestions = []
        for allocation in savings:
            target = _floor_cents(min(allocation.allocated_amount * self.rules.savings_increase_factor, cap))
            if target <= allocation.allocated_amount:
                continue
            suggestions.append(
                self._suggest(
                    SuggestionKind.INCREASE,
                    allocation.category,
                    target,
                    f"Savings rate is below {self.rules.target_savings_rate * 100:.0f}% of income",
                    current_amount=allocation.allocated_amount,
                )
            )
        return suggestions

    def _excess_housing(self, active: list[Allocation], income: Decimal) -> list[Suggestion]:
        """Decrease housing items above the target once the combined total breaks the ceiling.

        Items already at or below the target are left alone, so a total over the
        ceiling spread across small items produces no suggestion.
        """
        housing = [a for a in active if a.category.type == CategoryType.HOUSING]
        total_housing = sum((a.allocated_amount for a in housing), Decimal("0"))
        if total_housing <= income * self.rules.housing_ceiling:
            return []

        target = income * self.rules.housing_target
        return [
            self._suggest(
                SuggestionKind.DECREASE,
                a.category,
                target,
                f"Housing costs exceed {self.rules.housing_ceiling * 100:.0f}% of income",
                current_amount=a.allocated_amount,
            )
            for a in housing
            if a.allocated_amount > target
        ]

    def _missing_retirement(self, active: list[Allocation], income: Decimal) -> list[Suggestion]:
        if income < self.rules.retirement_income_threshold:
            return []
        if any(a.category_id == RETIREMENT_SAVINGS_ID for a in active):
            return []
        return self._add(RETIREMENT_SAVINGS_ID, None, income, "Start saving for retirement")

    def _missing_health(self, active: list[Allocation], income: Decimal) -> list[Suggestion]:
        if any(
            a.category.type == CategoryType.HEALTH or a.category_id in HEALTH_CATEGORY_IDS
            for a in active
        ):
            return []
        return self._add(
            HEALTH_SUGGESTION_ID,
            income * self.rules.health_share,
            income,
            "Budget for health and medical costs",
        )

    def _missing_lifestyle(self, active: list[Allocation], income: Decimal) -> list[Suggestion]:
        present = {a.category_id for a in active}
        thresholds = (
            ("entertainment", self.rules.entertainment_income_threshold, "Leave room for entertainment"),
            ("gifts", self.rules.gifts_income_threshold, "Plan ahead for gifts"),
            ("personal_development", self.rules.personal_development_income_threshold, "Invest in personal development"),
            ("vacation", self.rules.vacation_income_threshold, "Save for a vacation"),
        )
        suggestions = []
        for category_id, threshold, reason in thresholds:
            if category_id not in present and income >= threshold:
                suggestions += self._add(category_id, None, income, reason)
        return suggestions

    def _deficit_removals(self, active: list[Allocation], income: Decimal) -> list[Suggestion]:
        total = sum((a.allocated_amount for a in active), Decimal("0"))
        if total <= income:
            return []
        limit = income * self.rules.removal_share
        return [
            self._suggest(
                SuggestionKind.REMOVE,
                a.category,
                Decimal("0"),
                "Budget is in deficit; drop small optional items",
                current_amount=a.allocated_amount,
            )
            for a in active
            if a.priority == CategoryPriority.DISCRETIONARY
            and a.category_id not in ESSENTIAL_CATEGORY_IDS
            and a.allocated_amount < limit
        ]

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def generate(self, allocations: Iterable[Allocation], income: Decimal) -> list[Suggestion]:
        """
        Run every rule against the active allocations.

        Args:
            allocations: Current allocations (inactive ones are ignored)
            income: Monthly income

        Returns:
            Ranked suggestions, at most ``rules.max_suggestions``; empty
            when the budget needs no corrections
        """
        active = [a for a in allocations if a.is_active]
        rules = (
            self._missing_essentials,
            self._low_savings,
            self._excess_housing,
            self._missing_retirement,
            self._missing_health,
            self._missing_lifestyle,
            self._deficit_removals,
        )
        suggestions: list[Suggestion] = []
        for rule in rules:
            suggestions.extend(rule(active, income))

        ranked = sorted(suggestions, key=lambda s: (s.priority_class, -s.change_amount))
        kept = ranked[: self.rules.max_suggestions]
        logger.info(
            "optimizations_generated",
            income=str(income),
            generated=len(suggestions),
            returned=len(kept),
        )
        return kept

    def apply(
        self, allocations: Iterable[Allocation], suggestions: Iterable[Suggestion]
    ) -> list[Allocation]:
        """Apply the selected suggestions; see ``apply_optimizations``."""
        return apply_optimizations(allocations, suggestions)


def apply_optimizations(
    allocations: Iterable[Allocation], suggestions: Iterable[Suggestion]
) -> list[Allocation]:
    """
    Apply the selected suggestions to a list of allocations and return the new list.

    Increase and decrease set the target's amount, add inserts (or
    re-activates and sets) an allocation, and remove deletes it. Targets
    that are no longer present are skipped, as are suggestions with
    ``selected`` unset.
    """
    by_id: dict[str, Allocation] = {a.category_id: a for a in allocations}

    for suggestion in suggestions:
        if not suggestion.selected:
            continue
        category_id = suggestion.category_id
        current = by_id.get(category_id)

        if suggestion.kind == SuggestionKind.ADD:
            if current is None:
                by_id[category_id] = Allocation(
                    category=suggestion.category,
                    allocated_amount=suggestion.suggested_amount,
                    type=AllocationType.SAVINGS if suggestion.category.is_savings else AllocationType.EXPENSE,
                    priority=suggestion.category.priority,
                )
            else:
                by_id[category_id] = current.model_copy(
                    update={"allocated_amount": suggestion.suggested_amount, "is_active": True}
                )
            continue

        if current is None:
            logger.warning(
                "optimization_target_missing",
                category_id=category_id,
                kind=suggestion.kind.value,
            )
            continue

        if suggestion.kind == SuggestionKind.REMOVE:
            del by_id[category_id]
        else:
            by_id[category_id] = current.model_copy(
                update={"allocated_amount": suggestion.suggested_amount}
            )

    return list(by_id.values())


def generate_optimizations(
    allocations: Iterable[Allocation],
    income: Decimal,
    catalog: CategoryCatalog,
    rules: Optional[OptimizationRules] = None,
) -> list[Suggestion]:
    """Ranked correction suggestions for the current allocations."""
    return OptimizationEngine(catalog, rules).generate(allocations, income)


def projected_surplus(unused_amount: Decimal, suggestions: Iterable[Suggestion]) -> Decimal:
    """Unused amount after applying the selected suggestions."""
    surplus = unused_amount
    for suggestion in suggestions:
        if not suggestion.selected:
            continue
        current = suggestion.current_amount or Decimal("0")
        if suggestion.kind == SuggestionKind.ADD:
            surplus -= suggestion.suggested_amount
        elif suggestion.kind == SuggestionKind.REMOVE:
            surplus += current
        else:
            surplus -= suggestion.suggested_amount - current
    return surplus
