"""Data models for homeplan-core.

This package provides:
- Ledger line items, categories and mortgage option groups (ledger.py)
- Solver inputs, properties and calculation results (affordability.py)
"""

from homeplan_core.models.ledger import (
    ItemType,
    Frequency,
    IncomeEntry,
    CategoryType,
    FinancialItem,
    ItemCategory,
    MortgageOptionGroup,
    LedgerSnapshot,
)

from homeplan_core.models.affordability import (
    DownPaymentStatus,
    ExcessDownPaymentStrategy,
    BindingConstraint,
    ImpactCategory,
    FinancialInputs,
    Property,
    CalculationStep,
    PaymentBreakdown,
    AffordabilityCalculation,
    PropertyAffordability,
    TradeoffImpact,
)

__all__ = [
    # Ledger
    "ItemType",
    "Frequency",
    "IncomeEntry",
    "CategoryType",
    "FinancialItem",
    "ItemCategory",
    "MortgageOptionGroup",
    "LedgerSnapshot",
    # Affordability
    "DownPaymentStatus",
    "ExcessDownPaymentStrategy",
    "BindingConstraint",
    "ImpactCategory",
    "FinancialInputs",
    "Property",
    "CalculationStep",
    "PaymentBreakdown",
    "AffordabilityCalculation",
    "PropertyAffordability",
    "TradeoffImpact",
]
