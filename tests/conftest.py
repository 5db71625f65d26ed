"""Shared fixtures for homeplan-core tests."""

from decimal import Decimal

import pytest

from homeplan_core.config import AffordabilityConfig
from homeplan_core.defaults import default_snapshot
from homeplan_core.models import FinancialInputs, FinancialItem, Frequency, IncomeEntry, ItemType, LedgerSnapshot


@pytest.fixture
def config() -> AffordabilityConfig:
    """Default policy, unaffected by the environment."""
    return AffordabilityConfig(_env_file=None)


@pytest.fixture
def scenario_inputs() -> FinancialInputs:
    """$100k household: $3,000 expenses, $500 debts, $50k saved, 6.5% / 30y, 28% housing."""
    return FinancialInputs(
        annual_income=Decimal("100000"),
        monthly_expenses=Decimal("3000"),
        fixed_debts=Decimal("500"),
        down_payment_sources=Decimal("50000"),
        interest_rate=Decimal("6.5"),
        loan_term=30,
        housing_percentage=Decimal("28"),
    )


@pytest.fixture
def gross_salary() -> FinancialItem:
    """$120k annual gross salary with 35% withheld."""
    return FinancialItem(
        id="income-1",
        label="Salary",
        amount=Decimal("120000"),
        item_type=ItemType.INCOME,
        frequency=Frequency.ANNUAL,
        income_entry=IncomeEntry.GROSS,
        withholding_tax_pct=Decimal("25"),
        withholding_401k_pct=Decimal("5"),
        withholding_healthcare_pct=Decimal("5"),
    )


@pytest.fixture
def seed_snapshot() -> LedgerSnapshot:
    """Default ledger with rate options around 6.85%."""
    return default_snapshot(Decimal("6.85"))
