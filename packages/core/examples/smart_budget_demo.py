#!/usr/bin/env python3
"""
Smart Budget Demonstration

This script walks through the budgeting workflow:
1. Normalize a biweekly paycheck to monthly income
2. Generate a smart budget into a ledger
3. Look up affordability figures and a debt payoff plan
4. Run the diagnostic pass and apply its suggestions

Run: python examples/smart_budget_demo.py
"""

from decimal import Decimal

from deeppockets_core import (
    AffordabilityCalculator,
    BudgetLedger,
    DeepPocketsConfig,
    OptimizationEngine,
    configure_logging,
    default_catalog,
)
from deeppockets_core.allocation import AllocationEngine
from deeppockets_core.debt import plan_for_category
from deeppockets_core.income import PayPeriod, income_percentile, to_monthly_income
from deeppockets_core.optimizer import projected_surplus


def main():
    config = DeepPocketsConfig()
    configure_logging("WARNING")
    catalog = default_catalog()

    print("=" * 70)
    print("DEEP POCKETS - SMART BUDGET DEMO")
    print("=" * 70)

    # Step 1: Income
    income = to_monthly_income(Decimal("2600"), PayPeriod.BIWEEKLY).quantize(Decimal("0.01"))
    print(f"\nMonthly income: ${income:,.2f} (top {income_percentile(income)}% of earners)")

    # Step 2: Smart budget
    ledger = BudgetLedger(catalog, income)
    plan = ledger.generate_smart_budget(AllocationEngine(catalog, config.allocation))

    print(f"\nReserved surplus: ${plan.reserved_surplus:,.2f}")
    print(f"{'Category':<28}{'Tier':<12}{'Amount':>12}")
    print("-" * 52)
    for allocation in plan.allocations:
        print(
            f"{allocation.category.name:<28}{allocation.priority.label:<12}"
            f"${allocation.allocated_amount:>11,.2f}"
        )
    print("-" * 52)
    print(f"{'Total allocated':<40}${plan.total_allocated:>11,.2f}")
    print(f"{'Unused':<40}${ledger.unused_amount:>11,.2f}")
    for warning in plan.warnings:
        print(f"WARNING: {warning}")

    # Step 3: Affordability and debt
    calculator = AffordabilityCalculator(catalog, config.affordability)
    home = calculator.home_affordability(income)
    print(f"\nAffordable home price: ${home.purchase_price:,.0f}")
    print(f"Projected in {config.affordability.appreciation_years} years: ${home.projected_price:,.0f}")

    car_loan = catalog.get("car_loan")
    debt_plan = plan_for_category(car_loan, income)
    print(
        f"\n{car_loan.name}: ${debt_plan.principal:,.2f} at {debt_plan.annual_rate}% "
        f"paying ${debt_plan.monthly_payment:,.2f}/month"
    )
    print(f"  Paid off in {debt_plan.months} months ({debt_plan.payoff_date:%B %Y})")
    print(f"  Total interest: ${debt_plan.total_interest:,.2f}")

    # Step 4: Optimization
    optimizer = OptimizationEngine(catalog, config.optimization)
    suggestions = optimizer.generate(ledger.allocations, income)
    print(f"\nSuggestions ({len(suggestions)}):")
    for suggestion in suggestions:
        print(
            f"  [{suggestion.priority_class}] {suggestion.kind.value:<9}"
            f"{suggestion.category.name:<24}${suggestion.suggested_amount:>10,.2f}  {suggestion.reason}"
        )

    selected = [s.model_copy(update={"selected": True}) for s in suggestions]
    print(f"\nProjected surplus after applying: ${projected_surplus(ledger.unused_amount, selected):,.2f}")
    snapshot = ledger.apply_optimizations(selected)
    print(f"Unused after applying: ${snapshot.unused_amount:,.2f}")

    print("\n" + "=" * 70)
    print("Demo complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
