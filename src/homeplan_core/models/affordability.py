"""Affordability input and result models.

This module provides the solver-facing data structures:
- FinancialInputs: the canonical normalized input
- Property: a target or candidate home
- AffordabilityCalculation: result of solving for a price ceiling
- PropertyAffordability: result of scoring one specific property
- CalculationStep: audit entry recorded for every solver stage

Results are built once per calculation and never patched afterwards;
any input change produces a fresh result.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


class DownPaymentStatus(str, Enum):
    """Whether available funds meet the down payment target."""

    ON_TARGET = "on-target"
    EXCESS = "excess"
    SHORTFALL = "shortfall"


class ExcessDownPaymentStrategy(str, Enum):
    """What to do with down payment funds beyond the target."""

    SAVE = "save"
    REDUCE_PAYMENT = "reduce-payment"
    INCREASE_PRICE = "increase-price"


class BindingConstraint(str, Enum):
    """Which bound sets the maximum purchase price."""

    INCOME = "income"
    DOWN_PAYMENT = "down-payment"


class FinancialInputs(BaseModel):
    """Normalized household figures consumed by the solver.

    All money figures are monthly except where the name says annual.
    ``annual_take_home_income`` is produced by the take-home income
    calculator; when it is missing the solver estimates take-home from
    gross income using the configured fallback ratio.
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "annual_income": "100000",
                    "monthly_expenses": "3000",
                    "fixed_debts": "500",
                    "down_payment_sources": "50000",
                    "interest_rate": "6.5",
                    "loan_term": 30,
                    "credit_score": 740,
                }
            ]
        }
    }

    annual_income: Decimal = Field(description="Gross annual household income")
    monthly_expenses: Decimal = Field(default=Decimal("0"), description="Recurring lifestyle expenses per month")
    fixed_debts: Decimal = Field(default=Decimal("0"), description="Minimum debt payments per month")
    down_payment_sources: Decimal = Field(default=Decimal("0"), description="Lump-sum funds available")
    interest_rate: Decimal = Field(description="Annual interest rate in percent (6.5 means 6.5%)")
    loan_term: int = Field(default=30, description="Loan term in years")
    credit_score: int = Field(default=740, description="FICO score")
    housing_percentage: Optional[Decimal] = Field(
        default=None,
        description="Share of monthly income allowed for housing, in percent",
    )
    down_payment_percentage: Optional[Decimal] = Field(
        default=None,
        description="Down payment target as percent of price",
    )
    future_income_monthly: Decimal = Field(default=Decimal("0"), description="Expected extra income after purchase")
    future_expenses_monthly: Decimal = Field(default=Decimal("0"), description="Expected extra expenses after purchase")
    one_time_expenses: Decimal = Field(default=Decimal("0"), description="Moving and first-month costs")
    excess_down_payment_strategy: ExcessDownPaymentStrategy = ExcessDownPaymentStrategy.SAVE
    annual_take_home_income: Optional[Decimal] = Field(
        default=None,
        description="Annual income after withholding, derived from the income ledger",
    )
    market_reference_rate: Optional[Decimal] = Field(
        default=None,
        description="Market rate the selected rate options were generated around",
    )

    @property
    def gross_monthly_income(self) -> Decimal:
        """Gross monthly income including expected future income."""
        return self.annual_income / 12 + self.future_income_monthly


class Property(BaseModel):
    """A target or candidate home.

    Only ``price`` and the tax inputs feed the solver; the rest is
    display metadata carried through for consumers.
    """

    id: Optional[str] = None
    address: Optional[str] = None
    price: Decimal = Field(ge=0, description="List or target price")
    property_tax_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Annual property tax as a fraction of price (0.0181 means 1.81%)",
    )
    location: Optional[str] = Field(
        default=None,
        description="Location key for tax-rate lookup, e.g. 'Austin, TX'",
    )
    hoa_fees: Decimal = Field(default=Decimal("0"), ge=0, description="Monthly HOA dues")
    estimated_insurance: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Annual insurance estimate; derived from price when absent",
    )

    # Display metadata
    bedrooms: Optional[int] = None
    bathrooms: Optional[Decimal] = None
    square_feet: Optional[int] = None
    year_built: Optional[int] = None
    property_type: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class CalculationStep(BaseModel):
    """Audit entry for one solver stage."""

    timestamp: datetime = Field(default_factory=_utc_now)
    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


class PaymentBreakdown(BaseModel):
    """Monthly housing payment split into its components."""

    principal_and_interest: Decimal = Decimal("0")
    property_tax: Decimal = Decimal("0")
    insurance: Decimal = Decimal("0")
    pmi: Decimal = Decimal("0")
    hoa: Decimal = Decimal("0")

    @computed_field
    @property
    def total(self) -> Decimal:
        """Full monthly housing payment."""
        return self.principal_and_interest + self.property_tax + self.insurance + self.pmi + self.hoa

    @property
    def escrow(self) -> Decimal:
        """Tax and insurance collected with the payment."""
        return self.property_tax + self.insurance


class AffordabilityCalculation(BaseModel):
    """Result of solving for the maximum affordable purchase price."""

    # Prices
    max_purchase_price: Decimal
    max_price_from_income: Decimal
    max_price_from_down_payment: Decimal
    binding_constraint: BindingConstraint
    strategy_purchase_price: Decimal

    # Payments
    housing_budget: Decimal
    max_monthly_payment: Decimal
    actual_monthly_payment: Decimal
    payment_breakdown: PaymentBreakdown
    loan_amount: Decimal

    # Down payment
    available_down_payment: Decimal
    required_down_payment: Decimal
    down_payment_used: Decimal
    down_payment_status: DownPaymentStatus
    excess_amount: Optional[Decimal] = None
    shortfall_amount: Optional[Decimal] = None
    cash_to_close: Decimal

    # Ratios and income
    dti_ratio: Optional[Decimal] = Field(
        default=None,
        description="(fixed debts + max monthly payment) / income, percent; None when income is zero",
    )
    actual_dti_ratio: Optional[Decimal] = None
    monthly_income: Decimal
    take_home_income: Decimal
    monthly_margin: Decimal = Field(description="Housing budget headroom at the max price")
    remaining_budget: Decimal = Field(description="Take-home left after housing, expenses and debts")

    # Policy echo
    housing_percentage: Decimal
    down_payment_percentage: Decimal
    interest_rate: Decimal
    loan_term: int

    # Verdict
    can_afford: bool
    converged: bool = True
    iterations: int = 0
    constraints: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    audit_log: list[CalculationStep] = Field(default_factory=list)
    calculated_at: datetime = Field(default_factory=_utc_now)

    @property
    def monthly_principal_interest(self) -> Decimal:
        return self.payment_breakdown.principal_and_interest

    @property
    def monthly_property_tax(self) -> Decimal:
        return self.payment_breakdown.property_tax

    @property
    def monthly_insurance(self) -> Decimal:
        return self.payment_breakdown.insurance


class PropertyAffordability(BaseModel):
    """Result of scoring one specific property against household finances."""

    can_afford: bool
    affordability_score: Decimal = Field(ge=0, le=100)
    monthly_payment: Decimal
    payment_breakdown: PaymentBreakdown
    down_payment_needed: Decimal
    loan_amount: Decimal
    down_payment_status: DownPaymentStatus
    excess_amount: Optional[Decimal] = None
    shortfall_amount: Optional[Decimal] = None
    max_monthly_payment: Decimal
    monthly_margin: Decimal = Field(description="Max monthly payment minus this property's payment")
    remaining_budget: Decimal
    dti_ratio: Optional[Decimal] = Field(
        default=None,
        description="(fixed debts + payment) / income, percent; None when income is zero",
    )
    recommendations: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    audit_log: list[CalculationStep] = Field(default_factory=list)
    calculated_at: datetime = Field(default_factory=_utc_now)


class ImpactCategory(str, Enum):
    """Grouping for trade-off messages."""

    AFFORDABILITY = "Affordability"
    ONE_TIME_COST = "One-Time Cost"
    LOAN_TERMS = "Loan Terms"


class TradeoffImpact(BaseModel):
    """How one ledger edit moved the affordable price."""

    id: str
    message: str
    item_label: str
    max_price_impact: Decimal
    item_type: str
    impact_category: ImpactCategory = ImpactCategory.AFFORDABILITY
