"""Smart budget generation.

Builds a complete allocation from an income figure and a catalog:

1. Reserve the target surplus; the rest is the available income.
2. Compute each category's base allocation from a type-keyed rule table.
3. Fund the essential tier in full.
4. Scale the important tier, then the discretionary tier, to what remains.

Every step is recorded in an audit log so a generated budget can be
explained line by line.
"""

from decimal import ROUND_DOWN, Decimal
from typing import Optional

import structlog

from .catalog import CategoryCatalog
from .config import AllocationRules
from .exceptions import ValidationError
from .models import (
    Allocation,
    AllocationType,
    AuditEntry,
    Category,
    CategoryPriority,
    CategoryType,
    SmartBudgetPlan,
)
from .standards import (
    EMERGENCY_SAVINGS_ID,
    RETIREMENT_SAVINGS_ID,
    get_allocation_order,
)

logger = structlog.get_logger()

CENTS = Decimal("0.01")

TIER_SEQUENCE = (
    CategoryPriority.ESSENTIAL,
    CategoryPriority.IMPORTANT,
    CategoryPriority.DISCRETIONARY,
)


def _floor_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_DOWN)


class AllocationEngine:
    """
    Generate a proportional budget plan for a monthly income.

    The engine reads only its catalog and rules. Each ``build_plan`` call
    starts a fresh audit log, so results never depend on earlier calls.
    """

    def __init__(
        self,
        catalog: CategoryCatalog,
        rules: Optional[AllocationRules] = None,
    ):
        """
        Initialize the engine.

        Args:
            catalog: Categories to allocate across
            rules: Surplus, housing, emergency and retirement rules
                (defaults from the environment when None)
        """
        self.catalog = catalog
        self.rules = rules or AllocationRules()
        self._audit_log: list[AuditEntry] = []

    def _log_step(
        self,
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        entry = AuditEntry(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        )
        self._audit_log.append(entry)
        logger.info(
            "calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def base_allocation(self, category: Category, available_income: Decimal) -> Decimal:
        """
        Unscaled allocation for one category.

        Debt is always 0 here; debt is budgeted through payoff plans.
        """
        share = available_income * category.allocation_percentage

        if category.type == CategoryType.DEBT:
            return Decimal("0")
        if category.id == EMERGENCY_SAVINGS_ID:
            floor = self.rules.min_emergency_savings / 12
            ceiling = available_income * self.rules.emergency_fund_cap
            return min(max(share, floor), ceiling)
        if category.type == CategoryType.HOUSING:
            return min(available_income * self.rules.max_housing_ratio, share)
        if category.id == RETIREMENT_SAVINGS_ID:
            return max(available_income * self.rules.min_retirement_percentage, share)
        return share

    def _sort_key(self, category: Category, position: int) -> tuple[int, int, int]:
        return (category.priority.rank, get_allocation_order(category.type), position)

    def build_plan(self, income: Decimal) -> SmartBudgetPlan:
        """
        Generate the full smart budget plan.

        Args:
            income: Monthly income

        Returns:
            SmartBudgetPlan with allocations (only amounts > 0), tier scale
            factors, warnings and the audit log

        Raises:
            ValidationError: If income is negative
        """
        if income < 0:
            raise ValidationError(
                "Monthly income cannot be negative",
                field="income",
                value=str(income),
                constraint="income >= 0",
            )

        self._audit_log = []
        warnings: list[str] = []

        surplus = income * self.rules.target_surplus
        available_income = income - surplus
        self._log_step(
            step="available_income",
            input_value=f"income={income}, target_surplus={self.rules.target_surplus}",
            output_value=str(available_income),
            source="income * (1 - target_surplus)",
        )

        # Base allocations grouped by tier, in deterministic order
        ordered = sorted(
            enumerate(self.catalog),
            key=lambda item: self._sort_key(item[1], item[0]),
        )
        tiers: dict[CategoryPriority, list[tuple[Category, Decimal]]] = {
            tier: [] for tier in TIER_SEQUENCE
        }
        for _, category in ordered:
            base = self.base_allocation(category, available_income)
            tiers[category.priority].append((category, base))
            self._log_step(
                step=f"base_{category.id}",
                input_value=f"available={available_income}, share={category.allocation_percentage}",
                output_value=str(base),
                source=f"{category.type.value} base rule",
            )

        # Essential tier is funded in full
        essential_sum = sum((base for _, base in tiers[CategoryPriority.ESSENTIAL]), Decimal("0"))
        remaining = available_income - essential_sum
        tier_scales = {CategoryPriority.ESSENTIAL: Decimal("1")}
        self._log_step(
            step="tier_essential",
            input_value=f"essential_sum={essential_sum}",
            output_value=f"remaining={remaining}",
            source="essential tier funded unscaled",
        )
        if remaining < 0:
            message = (
                f"Essential categories ({essential_sum}) exceed available income "
                f"({available_income})"
            )
            warnings.append(message)
            logger.warning(
                "essential_tier_exceeds_income",
                essential_sum=str(essential_sum),
                available_income=str(available_income),
            )

        allocations = [
            self._allocation(category, base)
            for category, base in tiers[CategoryPriority.ESSENTIAL]
        ]

        for tier in (CategoryPriority.IMPORTANT, CategoryPriority.DISCRETIONARY):
            members = tiers[tier]
            tier_sum = sum((base for _, base in members), Decimal("0"))
            scale = self._tier_scale(remaining, tier_sum)
            tier_scales[tier] = scale

            scaled = [self._allocation(category, base * scale) for category, base in members]
            allocations.extend(scaled)
            scaled_total = sum((a.allocated_amount for a in scaled), Decimal("0"))
            self._log_step(
                step=f"tier_{tier.value}",
                input_value=f"tier_sum={tier_sum}, remaining={remaining}",
                output_value=f"scale={scale}, allocated={scaled_total}",
                source="min(1, remaining / tier_sum)",
            )
            remaining -= scaled_total

        emitted = [a for a in allocations if a.allocated_amount > 0]
        self._log_step(
            step="total_allocated",
            input_value=f"{len(emitted)} allocations",
            output_value=str(sum((a.allocated_amount for a in emitted), Decimal("0"))),
            source="sum of emitted allocations",
        )
        plan = SmartBudgetPlan(
            income=income,
            available_income=available_income,
            reserved_surplus=surplus,
            allocations=emitted,
            tier_scales=tier_scales,
            warnings=warnings,
            audit_log=list(self._audit_log),
        )
        logger.info(
            "smart_budget_generated",
            income=str(income),
            allocations=len(emitted),
            total=str(plan.total_allocated),
            warnings=len(warnings),
        )
        return plan

    @staticmethod
    def _tier_scale(remaining: Decimal, tier_sum: Decimal) -> Decimal:
        if remaining <= 0:
            return Decimal("0")
        if tier_sum <= 0:
            return Decimal("1")
        return min(Decimal("1"), remaining / tier_sum)

    @staticmethod
    def _allocation(category: Category, amount: Decimal) -> Allocation:
        return Allocation(
            category=category,
            allocated_amount=_floor_cents(max(amount, Decimal("0"))),
            type=AllocationType.SAVINGS if category.is_savings else AllocationType.EXPENSE,
            priority=category.priority,
        )

    def generate_smart_budget(self, income: Decimal) -> list[Allocation]:
        """Allocations of ``build_plan`` only."""
        return self.build_plan(income).allocations

    def get_audit_log(self) -> list[AuditEntry]:
        """Get the audit log of the most recent plan."""
        return list(self._audit_log)


def generate_smart_budget(
    income: Decimal,
    catalog: CategoryCatalog,
    rules: Optional[AllocationRules] = None,
) -> list[Allocation]:
    """Generate smart budget allocations for ``income`` across ``catalog``."""
    return AllocationEngine(catalog, rules).generate_smart_budget(income)
