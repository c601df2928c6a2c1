"""Configuration system for the Deep Pockets budget core.

This module provides Pydantic Settings-based configuration with environment
variable support and one canonical default for every tuning constant the
engines use.

Usage:
    from deeppockets_core.config import DeepPocketsConfig

    # Load from environment variables and .env file
    config = DeepPocketsConfig()

    # Access allocation rules
    print(config.allocation.target_surplus)

    # Access optimization rules
    print(config.optimization.max_suggestions)
"""

import logging
from decimal import Decimal

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AllocationRules(BaseSettings):
    """Smart budget generation rules.

    Environment Variables:
        DEEPPOCKETS_ALLOCATION_TARGET_SURPLUS: Share of income held back unallocated
        DEEPPOCKETS_ALLOCATION_MAX_HOUSING_RATIO: Ceiling on housing as a share of income
        DEEPPOCKETS_ALLOCATION_EMERGENCY_FUND_CAP: Ceiling on emergency savings share
        DEEPPOCKETS_ALLOCATION_MIN_EMERGENCY_SAVINGS: Annual emergency savings floor
        DEEPPOCKETS_ALLOCATION_MIN_RETIREMENT_PERCENTAGE: Retirement savings floor share
    """

    model_config = SettingsConfigDict(
        env_prefix="DEEPPOCKETS_ALLOCATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    target_surplus: Decimal = Field(
        default=Decimal("0.10"),
        ge=0,
        lt=1,
        description="Fraction of income reserved as surplus",
    )
    max_housing_ratio: Decimal = Field(
        default=Decimal("0.28"),
        gt=0,
        le=1,
        description="Maximum share of income assigned to a housing category",
    )
    emergency_fund_cap: Decimal = Field(
        default=Decimal("0.20"),
        gt=0,
        le=1,
        description="Maximum share of income assigned to emergency savings",
    )
    min_emergency_savings: Decimal = Field(
        default=Decimal("1000"),
        ge=0,
        description="Minimum yearly emergency savings contribution",
    )
    min_retirement_percentage: Decimal = Field(
        default=Decimal("0.15"),
        ge=0,
        le=1,
        description="Minimum share of income assigned to retirement savings",
    )


class AffordabilityAssumptions(BaseSettings):
    """Market and underwriting assumptions for affordability formulas.

    Environment Variables:
        DEEPPOCKETS_AFFORDABILITY_FRONT_END_RATIO: Housing-only payment limit
        DEEPPOCKETS_AFFORDABILITY_BACK_END_RATIO: Total debt payment limit
        DEEPPOCKETS_AFFORDABILITY_PROPERTY_APPRECIATION: Yearly home appreciation
        DEEPPOCKETS_AFFORDABILITY_DEFAULT_INTEREST_RATE: Fallback rate in percent
        (and one variable per remaining field)
    """

    model_config = SettingsConfigDict(
        env_prefix="DEEPPOCKETS_AFFORDABILITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    front_end_ratio: Decimal = Field(default=Decimal("0.28"), gt=0, le=1)
    back_end_ratio: Decimal = Field(default=Decimal("0.36"), gt=0, le=1)
    tax_and_insurance_rate: Decimal = Field(
        default=Decimal("0.015"),
        ge=0,
        description="Yearly tax and insurance share deducted from the housing payment",
    )
    mortgage_term_months: int = Field(default=360, gt=0)
    property_appreciation: Decimal = Field(default=Decimal("0.035"), ge=0)
    appreciation_years: int = Field(default=5, ge=0)
    home_maintenance_rate: Decimal = Field(
        default=Decimal("0.01"),
        ge=0,
        description="Yearly maintenance as a share of the home price",
    )
    vehicle_term_months: int = Field(default=60, gt=0)
    default_down_payment: Decimal = Field(default=Decimal("20"), ge=0, lt=100)
    default_interest_rate: Decimal = Field(default=Decimal("7"), ge=0)
    default_property_tax: Decimal = Field(default=Decimal("1.1"), ge=0)
    inflation_rate: Decimal = Field(default=Decimal("0.04"), ge=0)
    default_savings_timeline_months: int = Field(default=12, gt=0)
    college_annual_cost: Decimal = Field(default=Decimal("22690"), ge=0)
    college_private_multiplier: Decimal = Field(default=Decimal("2.5"), ge=0)
    college_public_weight: Decimal = Field(default=Decimal("0.7"), ge=0, le=1)


class OptimizationRules(BaseSettings):
    """Diagnostic thresholds for budget suggestions.

    Environment Variables:
        DEEPPOCKETS_OPTIMIZATION_MAX_SUGGESTIONS: Suggestions kept after ranking
        DEEPPOCKETS_OPTIMIZATION_TARGET_SAVINGS_RATE: Savings rate below which increases are suggested
        DEEPPOCKETS_OPTIMIZATION_HOUSING_CEILING: Housing share that triggers decreases
        DEEPPOCKETS_OPTIMIZATION_HOUSING_TARGET: Housing share decreases aim for
        (and one variable per remaining field)
    """

    model_config = SettingsConfigDict(
        env_prefix="DEEPPOCKETS_OPTIMIZATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_suggestions: int = Field(default=5, ge=1, le=20)
    target_savings_rate: Decimal = Field(default=Decimal("0.20"), ge=0, le=1)
    savings_increase_factor: Decimal = Field(default=Decimal("1.2"), ge=1)
    housing_ceiling: Decimal = Field(default=Decimal("0.35"), gt=0, le=1)
    housing_target: Decimal = Field(default=Decimal("0.30"), gt=0, le=1)
    retirement_income_threshold: Decimal = Field(default=Decimal("4000"), ge=0)
    health_share: Decimal = Field(default=Decimal("0.03"), ge=0, le=1)
    entertainment_income_threshold: Decimal = Field(default=Decimal("3500"), ge=0)
    gifts_income_threshold: Decimal = Field(default=Decimal("2500"), ge=0)
    personal_development_income_threshold: Decimal = Field(default=Decimal("4000"), ge=0)
    vacation_income_threshold: Decimal = Field(default=Decimal("5000"), ge=0)
    removal_share: Decimal = Field(
        default=Decimal("0.02"),
        ge=0,
        le=1,
        description="Discretionary items below this share of income are removal candidates in a deficit",
    )

    @field_validator("housing_target")
    @classmethod
    def validate_housing_target(cls, v: Decimal, info) -> Decimal:
        """Housing target must not exceed the ceiling that triggers it."""
        ceiling = info.data.get("housing_ceiling")
        if ceiling is not None and v > ceiling:
            raise ValueError(
                f"housing_target ({v}) cannot exceed housing_ceiling ({ceiling})"
            )
        return v


class DeepPocketsConfig(BaseSettings):
    """Root configuration for the budget core.

    Environment Variables:
        DEEPPOCKETS_ENV: Environment name (development, staging, production, test)
        DEEPPOCKETS_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        # Load all configuration from environment
        config = DeepPocketsConfig()

        # Override specific settings
        config = DeepPocketsConfig(
            allocation=AllocationRules(target_surplus=Decimal("0.15")),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="DEEPPOCKETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production, test)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    allocation: AllocationRules = Field(default_factory=AllocationRules)
    affordability: AffordabilityAssumptions = Field(default_factory=AffordabilityAssumptions)
    optimization: OptimizationRules = Field(default_factory=OptimizationRules)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        """Check if debug logging is enabled."""
        return self.log_level == "DEBUG"


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog to drop events below ``level``."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )
