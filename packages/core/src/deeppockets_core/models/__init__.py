"""Data models for deeppockets-core.

This package provides the value types shared by the budget engines:
- Category catalog entries and their assumptions (category.py)
- Allocations, plans, suggestions and ledger snapshots (budget.py)
- Calculation audit entries (audit.py)
"""

from deeppockets_core.models.audit import AuditEntry
from deeppockets_core.models.budget import (
    CUSTOM_CATEGORY_PREFIX,
    AffordabilityCheck,
    AffordabilityTimeframe,
    Allocation,
    AllocationType,
    CategoryNotFound,
    DebtAffordability,
    DebtPlan,
    HomeAffordability,
    LedgerSnapshot,
    SavingsPlan,
    SmartBudgetPlan,
    Suggestion,
    SuggestionKind,
)
from deeppockets_core.models.category import (
    Category,
    CategoryAssumption,
    CategoryPriority,
    CategoryType,
    DisplayType,
    FormulaKind,
)

__all__ = [
    # Catalog
    "Category",
    "CategoryAssumption",
    "CategoryPriority",
    "CategoryType",
    "DisplayType",
    "FormulaKind",
    # Budget
    "CUSTOM_CATEGORY_PREFIX",
    "Allocation",
    "AllocationType",
    "AffordabilityCheck",
    "AffordabilityTimeframe",
    "CategoryNotFound",
    "DebtAffordability",
    "DebtPlan",
    "HomeAffordability",
    "LedgerSnapshot",
    "SavingsPlan",
    "SmartBudgetPlan",
    "Suggestion",
    "SuggestionKind",
    # Audit
    "AuditEntry",
]
