"""HomePlan Core - Household ledger normalization and home affordability."""

__version__ = "0.1.0"

from .aggregation import build_financial_inputs
from .config import AffordabilityConfig, EngineConfig, IncomeBasis
from .models import AffordabilityCalculation, FinancialInputs, Property, PropertyAffordability
from .mortgage_terms import resolve_terms
from .solver import AffordabilitySolver, compute_affordability
from .store import LedgerStore

__all__ = [
    "AffordabilityConfig",
    "AffordabilityCalculation",
    "AffordabilitySolver",
    "EngineConfig",
    "FinancialInputs",
    "IncomeBasis",
    "LedgerStore",
    "Property",
    "PropertyAffordability",
    "build_financial_inputs",
    "compute_affordability",
    "resolve_terms",
]
