"""Tests for the configuration system."""

from decimal import Decimal

import pytest

from deeppockets_core.config import (
    AffordabilityAssumptions,
    AllocationRules,
    DeepPocketsConfig,
    OptimizationRules,
    configure_logging,
)


class TestAllocationRules:
    """Test suite for AllocationRules."""

    def test_default_values(self):
        """AllocationRules should carry the canonical defaults."""
        rules = AllocationRules()

        assert rules.target_surplus == Decimal("0.10")
        assert rules.max_housing_ratio == Decimal("0.28")
        assert rules.emergency_fund_cap == Decimal("0.20")
        assert rules.min_emergency_savings == Decimal("1000")
        assert rules.min_retirement_percentage == Decimal("0.15")

    def test_surplus_validation(self):
        """Surplus must be a fraction below 1."""
        AllocationRules(target_surplus=Decimal("0"))
        AllocationRules(target_surplus=Decimal("0.15"))

        with pytest.raises(ValueError):
            AllocationRules(target_surplus=Decimal("-0.01"))

        with pytest.raises(ValueError):
            AllocationRules(target_surplus=Decimal("1"))

    def test_from_environment(self, monkeypatch):
        """AllocationRules should load from environment variables."""
        monkeypatch.setenv("DEEPPOCKETS_ALLOCATION_TARGET_SURPLUS", "0.15")
        monkeypatch.setenv("DEEPPOCKETS_ALLOCATION_MAX_HOUSING_RATIO", "0.30")

        rules = AllocationRules()

        assert rules.target_surplus == Decimal("0.15")
        assert rules.max_housing_ratio == Decimal("0.30")


class TestAffordabilityAssumptions:
    """Test suite for AffordabilityAssumptions."""

    def test_default_values(self):
        """Underwriting defaults match the common 28/36 rule."""
        assumptions = AffordabilityAssumptions()

        assert assumptions.front_end_ratio == Decimal("0.28")
        assert assumptions.back_end_ratio == Decimal("0.36")
        assert assumptions.mortgage_term_months == 360
        assert assumptions.property_appreciation == Decimal("0.035")
        assert assumptions.appreciation_years == 5
        assert assumptions.default_down_payment == Decimal("20")
        assert assumptions.default_interest_rate == Decimal("7")
        assert assumptions.default_property_tax == Decimal("1.1")

    def test_down_payment_validation(self):
        """Default down payment must stay below 100%."""
        with pytest.raises(ValueError):
            AffordabilityAssumptions(default_down_payment=Decimal("100"))

    def test_term_validation(self):
        """Loan terms must be positive."""
        with pytest.raises(ValueError):
            AffordabilityAssumptions(mortgage_term_months=0)

        with pytest.raises(ValueError):
            AffordabilityAssumptions(vehicle_term_months=-12)

    def test_from_environment(self, monkeypatch):
        """AffordabilityAssumptions should load from environment variables."""
        monkeypatch.setenv("DEEPPOCKETS_AFFORDABILITY_DEFAULT_INTEREST_RATE", "6.25")
        monkeypatch.setenv("DEEPPOCKETS_AFFORDABILITY_MORTGAGE_TERM_MONTHS", "180")

        assumptions = AffordabilityAssumptions()

        assert assumptions.default_interest_rate == Decimal("6.25")
        assert assumptions.mortgage_term_months == 180


class TestOptimizationRules:
    """Test suite for OptimizationRules."""

    def test_default_values(self):
        """OptimizationRules should have the documented thresholds."""
        rules = OptimizationRules()

        assert rules.max_suggestions == 5
        assert rules.target_savings_rate == Decimal("0.20")
        assert rules.savings_increase_factor == Decimal("1.2")
        assert rules.housing_ceiling == Decimal("0.35")
        assert rules.housing_target == Decimal("0.30")
        assert rules.retirement_income_threshold == Decimal("4000")
        assert rules.entertainment_income_threshold == Decimal("3500")
        assert rules.gifts_income_threshold == Decimal("2500")
        assert rules.personal_development_income_threshold == Decimal("4000")
        assert rules.vacation_income_threshold == Decimal("5000")

    def test_housing_target_cannot_exceed_ceiling(self):
        """Decreases must aim below the level that triggers them."""
        with pytest.raises(ValueError, match="housing_target"):
            OptimizationRules(housing_ceiling=Decimal("0.30"), housing_target=Decimal("0.35"))

    def test_max_suggestions_validation(self):
        """At least one suggestion must be kept."""
        with pytest.raises(ValueError):
            OptimizationRules(max_suggestions=0)


class TestDeepPocketsConfig:
    """Test suite for DeepPocketsConfig."""

    def test_default_values(self):
        """DeepPocketsConfig should have sensible defaults."""
        config = DeepPocketsConfig()

        assert config.env == "development"
        assert config.log_level == "INFO"
        assert isinstance(config.allocation, AllocationRules)
        assert isinstance(config.affordability, AffordabilityAssumptions)
        assert isinstance(config.optimization, OptimizationRules)

    def test_env_validation(self):
        """Environment should be normalized and validated."""
        assert DeepPocketsConfig(env="PRODUCTION").env == "production"
        assert DeepPocketsConfig(env="  Test ").env == "test"

        with pytest.raises(ValueError):
            DeepPocketsConfig(env="qa")

    def test_log_level_validation(self):
        """Log level should be normalized and validated."""
        assert DeepPocketsConfig(log_level="debug").log_level == "DEBUG"

        with pytest.raises(ValueError):
            DeepPocketsConfig(log_level="verbose")

    def test_is_production(self):
        """is_production should reflect the environment."""
        assert DeepPocketsConfig(env="production").is_production is True
        assert DeepPocketsConfig(env="development").is_production is False

    def test_is_debug(self):
        """is_debug should reflect the log level."""
        assert DeepPocketsConfig(log_level="DEBUG").is_debug is True
        assert DeepPocketsConfig(log_level="INFO").is_debug is False

    def test_nested_override(self):
        """Nested rule sets can be overridden explicitly."""
        config = DeepPocketsConfig(
            allocation=AllocationRules(target_surplus=Decimal("0.15")),
        )

        assert config.allocation.target_surplus == Decimal("0.15")
        assert config.optimization.max_suggestions == 5

    def test_from_environment(self, monkeypatch):
        """DeepPocketsConfig should load from environment variables."""
        monkeypatch.setenv("DEEPPOCKETS_ENV", "staging")
        monkeypatch.setenv("DEEPPOCKETS_LOG_LEVEL", "warning")
        monkeypatch.setenv("DEEPPOCKETS_OPTIMIZATION_MAX_SUGGESTIONS", "3")

        config = DeepPocketsConfig()

        assert config.env == "staging"
        assert config.log_level == "WARNING"
        assert config.optimization.max_suggestions == 3


def test_configure_logging_accepts_config_level():
    """configure_logging should accept any validated level."""
    config = DeepPocketsConfig(log_level="warning")
    configure_logging(config.log_level)
    configure_logging("INFO")
