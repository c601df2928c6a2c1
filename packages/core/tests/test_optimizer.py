"""Tests for budget diagnostics and suggestion application."""

from decimal import Decimal
from typing import Optional

import pytest

from deeppockets_core.catalog import CategoryCatalog, default_catalog
from deeppockets_core.config import OptimizationRules
from deeppockets_core.models import (
    Allocation,
    Suggestion,
    SuggestionKind,
)
from deeppockets_core.optimizer import (
    OptimizationEngine,
    apply_optimizations,
    generate_optimizations,
    priority_class,
    projected_surplus,
)

ESSENTIAL_IDS = {"rent", "groceries", "utilities", "transportation", "emergency_savings"}


@pytest.fixture
def catalog() -> CategoryCatalog:
    return default_catalog()


@pytest.fixture
def engine(catalog) -> OptimizationEngine:
    """Engine that keeps every suggestion so individual rules are visible."""
    return OptimizationEngine(catalog, OptimizationRules(max_suggestions=20))


def _allocations(catalog: CategoryCatalog, **amounts: str) -> list[Allocation]:
    return [
        Allocation(
            category=catalog.get(category_id),
            allocated_amount=Decimal(amount),
            priority=catalog.get(category_id).priority,
        )
        for category_id, amount in amounts.items()
    ]


def _find(
    suggestions: list[Suggestion], kind: SuggestionKind, category_id: str
) -> Optional[Suggestion]:
    for suggestion in suggestions:
        if suggestion.kind == kind and suggestion.category_id == category_id:
            return suggestion
    return None


def _suggestion(catalog, kind, category_id, amount, current=None, selected=True) -> Suggestion:
    category = catalog.get(category_id)
    return Suggestion(
        kind=kind,
        category=category,
        current_amount=None if current is None else Decimal(current),
        suggested_amount=Decimal(amount),
        reason="test",
        priority_class=priority_class(kind, category),
        selected=selected,
    )


class TestRanking:
    """Suggestions are ranked by class and capped."""

    def test_empty_budget_suggests_essentials_first(self, catalog):
        suggestions = generate_optimizations([], Decimal("5000"), catalog)

        assert len(suggestions) == 5
        assert {s.category_id for s in suggestions} == ESSENTIAL_IDS
        assert all(s.kind == SuggestionKind.ADD for s in suggestions)
        assert all(s.priority_class == 1 for s in suggestions)

    @pytest.mark.parametrize(
        "amounts,income",
        [
            ({}, "5000"),
            ({}, "1000"),
            ({"rent": "2500", "groceries": "600"}, "5000"),
            ({"rent": "600", "groceries": "300", "utilities": "100", "subscriptions": "10"}, "800"),
            ({"rent": "1400", "groceries": "600", "utilities": "400", "transportation": "350", "emergency_savings": "100"}, "8000"),
        ],
    )
    def test_never_more_than_five_and_sorted(self, catalog, amounts, income):
        suggestions = generate_optimizations(_allocations(catalog, **amounts), Decimal(income), catalog)
        classes = [s.priority_class for s in suggestions]

        assert len(suggestions) <= 5
        assert classes == sorted(classes)

    def test_ties_break_by_larger_change(self, engine, catalog):
        allocations = _allocations(
            catalog,
            rent="1400", groceries="600", utilities="400", transportation="350", emergency_savings="100",
        )

        suggestions = engine.generate(allocations, Decimal("5000"))
        class_two = [s for s in suggestions if s.priority_class == 2]
        changes = [s.change_amount for s in class_two]

        assert changes == sorted(changes, reverse=True)

    def test_balanced_budget_returns_empty_list(self):
        catalog = CategoryCatalog([default_catalog().get("groceries")])
        allocations = _allocations(catalog, groceries="500")

        assert generate_optimizations(allocations, Decimal("1000"), catalog) == []

    @pytest.mark.parametrize(
        "kind,category_id,expected",
        [
            (SuggestionKind.ADD, "groceries", 1),
            (SuggestionKind.ADD, "emergency_savings", 1),
            (SuggestionKind.ADD, "retirement_savings", 2),
            (SuggestionKind.INCREASE, "emergency_savings", 2),
            (SuggestionKind.DECREASE, "rent", 3),
            (SuggestionKind.ADD, "medical_expenses", 4),
            (SuggestionKind.INCREASE, "dining", 4),
            (SuggestionKind.REMOVE, "subscriptions", 5),
        ],
    )
    def test_priority_classes(self, catalog, kind, category_id, expected):
        assert priority_class(kind, catalog.get(category_id)) == expected


class TestRules:
    """Each diagnostic rule in isolation."""

    def test_missing_essential_amount_is_income_share(self, engine):
        suggestions = engine.generate([], Decimal("5000"))
        groceries = _find(suggestions, SuggestionKind.ADD, "groceries")

        assert groceries.suggested_amount == Decimal("600")

    def test_any_housing_satisfies_rent(self, engine, catalog):
        suggestions = engine.generate(_allocations(catalog, home="1200"), Decimal("5000"))
        assert _find(suggestions, SuggestionKind.ADD, "rent") is None

    def test_low_savings_increase(self, engine, catalog):
        allocations = _allocations(
            catalog,
            rent="1400", groceries="600", utilities="400", transportation="350", emergency_savings="100",
        )

        increase = _find(engine.generate(allocations, Decimal("5000")), SuggestionKind.INCREASE, "emergency_savings")

        assert increase.current_amount == Decimal("100")
        assert increase.suggested_amount == Decimal("120.0")
        assert increase.priority_class == 2

    def test_savings_increase_capped(self, engine, catalog):
        allocations = _allocations(catalog, emergency_savings="900")

        increase = _find(engine.generate(allocations, Decimal("5000")), SuggestionKind.INCREASE, "emergency_savings")

        assert increase.suggested_amount == Decimal("1000")

    def test_empty_savings_item_not_increased(self, engine, catalog):
        allocations = _allocations(catalog, investments="0")
        assert _find(engine.generate(allocations, Decimal("5000")), SuggestionKind.INCREASE, "investments") is None

    def test_no_increase_at_target_rate(self, engine, catalog):
        allocations = _allocations(catalog, emergency_savings="1000")
        assert _find(engine.generate(allocations, Decimal("5000")), SuggestionKind.INCREASE, "emergency_savings") is None

    def test_excess_housing_decrease(self, engine, catalog):
        allocations = _allocations(catalog, rent="2000")

        decrease = _find(engine.generate(allocations, Decimal("5000")), SuggestionKind.DECREASE, "rent")

        assert decrease.suggested_amount == Decimal("1500")
        assert decrease.priority_class == 3

    @pytest.mark.parametrize(
        "rent,home",
        [("1000", "1000"), ("1260", "918.75")],
    )
    def test_housing_items_below_target_not_decreased(self, engine, catalog, rent, home):
        """Combined housing over 35% with no single item over 30% yields no decrease."""
        allocations = _allocations(catalog, rent=rent, home=home)
        suggestions = engine.generate(allocations, Decimal("5000"))
        assert not [s for s in suggestions if s.kind == SuggestionKind.DECREASE]

    def test_suggested_amounts_floored_to_cents(self, engine, catalog):
        allocations = _allocations(catalog, emergency_savings="100.01")

        suggestions = engine.generate(allocations, Decimal("3333.33"))
        increase = _find(suggestions, SuggestionKind.INCREASE, "emergency_savings")
        groceries = _find(suggestions, SuggestionKind.ADD, "groceries")

        assert increase.suggested_amount == Decimal("120.01")
        assert groceries.suggested_amount == Decimal("399.99")
        assert all(s.suggested_amount == s.suggested_amount.quantize(Decimal("0.01")) for s in suggestions)

    @pytest.mark.parametrize("income,expected", [("4000", True), ("3999", False)])
    def test_retirement_threshold(self, engine, income, expected):
        suggestions = engine.generate([], Decimal(income))
        assert (_find(suggestions, SuggestionKind.ADD, "retirement_savings") is not None) is expected

    def test_health_add_at_small_share(self, engine):
        health = _find(engine.generate([], Decimal("5000")), SuggestionKind.ADD, "medical_expenses")
        assert health.suggested_amount == Decimal("150")

    def test_health_satisfied_by_any_health_category(self, engine, catalog):
        suggestions = engine.generate(_allocations(catalog, dental="50"), Decimal("5000"))
        assert _find(suggestions, SuggestionKind.ADD, "medical_expenses") is None

    def test_lifestyle_thresholds(self, engine):
        suggestions = engine.generate([], Decimal("3000"))

        assert _find(suggestions, SuggestionKind.ADD, "gifts") is not None
        assert _find(suggestions, SuggestionKind.ADD, "entertainment") is None
        assert _find(suggestions, SuggestionKind.ADD, "personal_development") is None
        assert _find(suggestions, SuggestionKind.ADD, "vacation") is None

    def test_deficit_removes_small_optional_items(self, engine, catalog):
        allocations = _allocations(
            catalog,
            rent="600", groceries="300", utilities="100", transportation="50",
            emergency_savings="50", subscriptions="10",
        )

        suggestions = engine.generate(allocations, Decimal("1000"))
        remove = _find(suggestions, SuggestionKind.REMOVE, "subscriptions")

        assert remove is not None
        assert remove.priority_class == 5
        assert _find(suggestions, SuggestionKind.REMOVE, "groceries") is None

    def test_inactive_allocations_ignored(self, engine, catalog):
        allocations = [
            a.model_copy(update={"is_active": False})
            for a in _allocations(catalog, groceries="600")
        ]
        assert _find(engine.generate(allocations, Decimal("5000")), SuggestionKind.ADD, "groceries") is not None

    def test_missing_catalog_entries_skipped(self):
        catalog = CategoryCatalog([default_catalog().get("groceries")])

        suggestions = generate_optimizations([], Decimal("5000"), catalog)

        assert [s.category_id for s in suggestions] == ["groceries"]


class TestApplyOptimizations:
    """Applying suggestions sets absolute amounts."""

    def test_increase_is_idempotent(self, catalog):
        allocations = _allocations(catalog, emergency_savings="100")
        increase = _suggestion(catalog, SuggestionKind.INCREASE, "emergency_savings", "120", current="100")

        once = apply_optimizations(allocations, [increase])
        twice = apply_optimizations(once, [increase])

        assert once[0].allocated_amount == Decimal("120")
        assert twice[0].allocated_amount == Decimal("120")

    def test_decrease(self, catalog):
        allocations = _allocations(catalog, rent="2000")
        decrease = _suggestion(catalog, SuggestionKind.DECREASE, "rent", "1500", current="2000")

        assert apply_optimizations(allocations, [decrease])[0].allocated_amount == Decimal("1500")

    def test_add_inserts_active_allocation(self, catalog):
        add = _suggestion(catalog, SuggestionKind.ADD, "groceries", "600")

        result = apply_optimizations(_allocations(catalog, rent="1400"), [add])

        assert [a.category_id for a in result] == ["rent", "groceries"]
        assert result[1].allocated_amount == Decimal("600")
        assert result[1].is_active is True

    def test_add_is_idempotent_and_reactivates(self, catalog):
        inactive = [
            a.model_copy(update={"is_active": False})
            for a in _allocations(catalog, groceries="100")
        ]
        add = _suggestion(catalog, SuggestionKind.ADD, "groceries", "600")

        once = apply_optimizations(inactive, [add])
        twice = apply_optimizations(once, [add])

        assert len(twice) == 1
        assert twice[0].allocated_amount == Decimal("600")
        assert twice[0].is_active is True

    def test_remove(self, catalog):
        allocations = _allocations(catalog, rent="600", subscriptions="10")
        remove = _suggestion(catalog, SuggestionKind.REMOVE, "subscriptions", "0", current="10")

        once = apply_optimizations(allocations, [remove])
        twice = apply_optimizations(once, [remove])

        assert [a.category_id for a in twice] == ["rent"]

    def test_unknown_target_skipped(self, catalog):
        allocations = _allocations(catalog, rent="600")
        increase = _suggestion(catalog, SuggestionKind.INCREASE, "dining", "200", current="100")

        assert apply_optimizations(allocations, [increase]) == allocations

    def test_input_not_mutated(self, catalog):
        allocations = _allocations(catalog, rent="2000")
        decrease = _suggestion(catalog, SuggestionKind.DECREASE, "rent", "1500", current="2000")

        apply_optimizations(allocations, [decrease])

        assert allocations[0].allocated_amount == Decimal("2000")

    def test_unselected_suggestions_skipped(self, catalog):
        allocations = _allocations(catalog, rent="2000", subscriptions="10")
        suggestions = [
            _suggestion(catalog, SuggestionKind.DECREASE, "rent", "1500", current="2000"),
            _suggestion(catalog, SuggestionKind.ADD, "groceries", "600", selected=False),
            _suggestion(catalog, SuggestionKind.REMOVE, "subscriptions", "0", current="10", selected=False),
        ]

        result = apply_optimizations(allocations, suggestions)

        assert [a.category_id for a in result] == ["rent", "subscriptions"]
        assert result[0].allocated_amount == Decimal("1500")

    def test_apply_matches_projected_surplus(self, engine):
        """Freshly generated suggestions are unselected, so nothing changes."""
        suggestions = engine.generate([], Decimal("5000"))

        assert projected_surplus(Decimal("0"), suggestions) == Decimal("0")
        assert apply_optimizations([], suggestions) == []

    def test_engine_apply(self, engine, catalog):
        suggestions = [
            s.model_copy(update={"selected": True})
            for s in engine.generate([], Decimal("5000"))
        ]
        allocations = engine.apply([], suggestions)
        assert ESSENTIAL_IDS <= {a.category_id for a in allocations}


def test_projected_surplus(catalog):
    """Only selected suggestions move the surplus."""
    suggestions = [
        _suggestion(catalog, SuggestionKind.ADD, "medical_expenses", "150", selected=True),
        _suggestion(catalog, SuggestionKind.INCREASE, "emergency_savings", "120", current="100", selected=True),
        _suggestion(catalog, SuggestionKind.REMOVE, "subscriptions", "0", current="10", selected=True),
        _suggestion(catalog, SuggestionKind.DECREASE, "rent", "1500", current="2000", selected=False),
    ]

    assert projected_surplus(Decimal("500"), suggestions) == Decimal("340")
