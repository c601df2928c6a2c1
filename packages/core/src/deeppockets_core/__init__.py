"""Deep Pockets Core - Budget allocation, affordability and optimization."""

__version__ = "0.1.0"

from .affordability import AffordabilityCalculator, calculate_affordable_amount
from .allocation import AllocationEngine, generate_smart_budget
from .catalog import CategoryCatalog, default_catalog
from .config import DeepPocketsConfig, configure_logging
from .debt import DebtPayoffCalculator, calculate_debt_payoff
from .ledger import BudgetLedger
from .models import Allocation, Category, CategoryNotFound, DebtPlan, Suggestion
from .optimizer import OptimizationEngine, apply_optimizations, generate_optimizations

__all__ = [
    "AffordabilityCalculator",
    "AllocationEngine",
    "BudgetLedger",
    "CategoryCatalog",
    "DebtPayoffCalculator",
    "DeepPocketsConfig",
    "OptimizationEngine",
    "Allocation",
    "Category",
    "CategoryNotFound",
    "DebtPlan",
    "Suggestion",
    "apply_optimizations",
    "calculate_affordable_amount",
    "calculate_debt_payoff",
    "configure_logging",
    "default_catalog",
    "generate_optimizations",
    "generate_smart_budget",
]
