"""Configuration system for the HomePlan affordability engine.

This module provides Pydantic Settings-based configuration with environment
variable support and defaults for every policy number the solver uses.
Nothing in the calculation modules embeds a ratio, rate or threshold;
they all read it from here so the engine can be reused across locations
and lending policies.

Usage:
    from homeplan_core.config import EngineConfig

    # Load from environment variables and .env file
    config = EngineConfig()

    # Access affordability policy
    print(config.affordability.housing_percentage)
    print(config.affordability.income_basis)
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IncomeBasis(str, Enum):
    """Income figure used for the housing ratio and DTI.

    The same basis is applied to both computations.
    """

    GROSS = "gross"
    TAKE_HOME = "take_home"


class AffordabilityConfig(BaseSettings):
    """Affordability policy settings.

    Environment Variables:
        HOMEPLAN_AFFORDABILITY_INCOME_BASIS: gross or take_home
        HOMEPLAN_AFFORDABILITY_HOUSING_PERCENTAGE: Default housing share of income
        HOMEPLAN_AFFORDABILITY_DOWN_PAYMENT_PERCENTAGE: Default down payment target
        HOMEPLAN_AFFORDABILITY_MAX_DTI_RATIO: Lender DTI ceiling (percent)
        HOMEPLAN_AFFORDABILITY_DEFAULT_PROPERTY_TAX_RATE: Annual fraction for unknown locations
        HOMEPLAN_AFFORDABILITY_INSURANCE_RATE: Annual insurance as a fraction of value
        HOMEPLAN_AFFORDABILITY_PRICE_TOLERANCE: Convergence tolerance for the price solve
        HOMEPLAN_AFFORDABILITY_MAX_ITERATIONS: Iteration cap for the price solve
    """

    model_config = SettingsConfigDict(
        env_prefix="HOMEPLAN_AFFORDABILITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    income_basis: IncomeBasis = Field(
        default=IncomeBasis.GROSS,
        description="Income basis for the housing ratio and DTI",
    )
    housing_percentage: Decimal = Field(
        default=Decimal("28"),
        gt=0,
        le=100,
        description="Share of monthly income allowed for housing when the inputs omit it",
    )
    down_payment_percentage: Decimal = Field(
        default=Decimal("20"),
        gt=0,
        le=100,
        description="Down payment target when the inputs omit it",
    )
    max_dti_ratio: Decimal = Field(
        default=Decimal("43"),
        gt=0,
        le=100,
        description="Maximum debt-to-income ratio in percent",
    )
    dti_warning_threshold: Decimal = Field(
        default=Decimal("40"),
        gt=0,
        le=100,
        description="DTI in percent above which a constraint is reported",
    )
    default_property_tax_rate: Decimal = Field(
        default=Decimal("0.0181"),
        ge=0,
        le=Decimal("0.1"),
        description="Annual property tax as a fraction of price for unknown locations",
    )
    insurance_rate: Decimal = Field(
        default=Decimal("0.0035"),
        ge=0,
        le=Decimal("0.05"),
        description="Annual homeowners insurance as a fraction of price",
    )
    pmi_annual_rate: Decimal = Field(
        default=Decimal("0.006"),
        ge=0,
        le=Decimal("0.05"),
        description="Annual PMI as a fraction of the loan amount",
    )
    pmi_threshold_percentage: Decimal = Field(
        default=Decimal("20"),
        ge=0,
        le=100,
        description="Down payment percentage below which PMI applies",
    )
    closing_cost_rate: Decimal = Field(
        default=Decimal("0.03"),
        ge=0,
        le=Decimal("0.2"),
        description="Closing costs as a fraction of price",
    )
    fallback_take_home_ratio: Decimal = Field(
        default=Decimal("0.70"),
        gt=0,
        le=1,
        description="Take-home share of gross income when no per-item take-home is known",
    )
    price_tolerance: Decimal = Field(
        default=Decimal("100"),
        gt=0,
        description="Bracket width in dollars below which the price search stops",
    )
    max_iterations: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Hard cap on bisection steps for the price search",
    )
    initial_price_estimate: Decimal = Field(
        default=Decimal("400000"),
        gt=0,
        description="Upper end of the first price search bracket",
    )
    down_payment_tolerance_pct: Decimal = Field(
        default=Decimal("5"),
        ge=0,
        le=100,
        description="Band around the required down payment treated as on-target (percent)",
    )
    excellent_dti_threshold: Decimal = Field(
        default=Decimal("30"),
        gt=0,
        le=100,
        description="DTI in percent below which a property is called out as comfortable",
    )
    tight_margin_threshold: Decimal = Field(
        default=Decimal("500"),
        description="Remaining monthly budget below which the margin is reported as tight",
    )
    strong_margin_threshold: Decimal = Field(
        default=Decimal("1000"),
        description="Remaining monthly budget above which the margin is reported as strong",
    )
    margin_to_price_multiplier: Decimal = Field(
        default=Decimal("200"),
        ge=0,
        description="Rough purchase price supported per dollar of monthly margin",
    )
    cap_by_dti_headroom: bool = Field(
        default=True,
        description="Cap the housing payment by the DTI ceiling minus fixed debts",
    )
    cap_by_cashflow: bool = Field(
        default=True,
        description="Cap the housing payment by take-home income minus expenses and debts",
    )
    rate_option_spread: Decimal = Field(
        default=Decimal("0.2"),
        gt=0,
        le=5,
        description="Spread in percentage points between generated rate options",
    )

    @field_validator("dti_warning_threshold")
    @classmethod
    def validate_warning_threshold(cls, v: Decimal, info) -> Decimal:
        """Warning threshold cannot sit above the DTI ceiling."""
        max_dti = info.data.get("max_dti_ratio")
        if max_dti is not None and v > max_dti:
            raise ValueError("dti_warning_threshold must not exceed max_dti_ratio")
        return v


class EngineConfig(BaseSettings):
    """Root configuration for the HomePlan engine.

    Environment Variables:
        HOMEPLAN_ENV: Environment name (development, staging, production, test)
        HOMEPLAN_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        HOMEPLAN_REFERENCE_RATE: Market reference rate (annual percent)

    Example:
        config = EngineConfig(
            affordability=AffordabilityConfig(income_basis=IncomeBasis.TAKE_HOME),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="HOMEPLAN_",
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
    reference_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=20,
        description="Market reference rate in percent used to seed rate options",
    )

    affordability: AffordabilityConfig = Field(default_factory=AffordabilityConfig)

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
