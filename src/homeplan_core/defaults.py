"""Seed ledger for a new household plan.

Two gross salaries are active; every expense is present but switched off
so a new user starts from income and toggles costs on. The interest rate
options are generated around a caller-supplied reference rate.
"""

from decimal import Decimal
from typing import Optional

from .aggregation import (
    ANNUAL_EXPENSES_CATEGORY,
    FIXED_DEBTS_CATEGORY,
    FUTURE_ANNUAL_EXPENSES_CATEGORY,
    FUTURE_INCOME_CATEGORY,
    FUTURE_MONTHLY_EXPENSES_CATEGORY,
    HOME_RELATED_EXPENSES_CATEGORY,
    HOUSING_PERCENTAGE_CATEGORY,
    INCOME_CATEGORY,
    MONTHLY_EXPENSES_CATEGORY,
    MOVING_EXPENSES_CATEGORY,
)
from .models.ledger import (
    CategoryType,
    FinancialItem,
    Frequency,
    IncomeEntry,
    ItemCategory,
    ItemType,
    LedgerSnapshot,
    MortgageOptionGroup,
)
from .mortgage_terms import (
    DOWN_PAYMENT_PERCENTAGE_GROUP,
    DOWN_PAYMENT_SOURCES_GROUP,
    generate_rate_options,
    generate_term_options,
)

DEFAULT_HOUSING_PERCENTAGE = Decimal("30")
DEFAULT_DOWN_PAYMENT_PERCENTAGE = Decimal("20")

# (id, label, amount, frequency)
MONTHLY_EXPENSES = [
    ("me-1", "Internet", "120", Frequency.MONTHLY),
    ("me-2", "Groceries", "400", Frequency.MONTHLY),
    ("me-3", "Auto Insurance", "200", Frequency.MONTHLY),
    ("me-4", "Gas", "150", Frequency.MONTHLY),
    ("me-5", "Mass Transit", "75", Frequency.MONTHLY),
]

ANNUAL_EXPENSES = [
    ("ae-1", "Car Registration", "300", Frequency.ANNUAL),
    ("ae-2", "Amazon Membership", "160", Frequency.ANNUAL),
    ("ae-3", "Clothing Shopping", "1000", Frequency.ANNUAL),
]

FIXED_DEBTS = [
    ("fd-1", "Cap1 Credit Card", "70", Frequency.MONTHLY),
    ("fd-2", "BoA Credit Card", "112", Frequency.MONTHLY),
    ("fd-3", "Auto Loan", "400", Frequency.MONTHLY),
]

FUTURE_INCOME = [
    ("fi-1", "AirBnB", "2000", Frequency.ANNUAL),
    ("fi-2", "Roommate", "12000", Frequency.ANNUAL),
]

HOME_RELATED_EXPENSES = [
    ("hre-1", "HOA Fees", "500", Frequency.MONTHLY),
    ("hre-2", "Pool Expenses", "1000", Frequency.ANNUAL),
    ("hre-3", "Landscaping", "1500", Frequency.ANNUAL),
]

FUTURE_MONTHLY_EXPENSES = [
    ("fme-1", "Gym", "100", Frequency.MONTHLY),
    ("fme-2", "Daycare", "1500", Frequency.MONTHLY),
]

FUTURE_ANNUAL_EXPENSES = [
    ("fae-1", "Pediatrics", "2000", Frequency.ANNUAL),
]

MOVING_EXPENSES = [
    ("mfme-1", "Movers", "4000", Frequency.ONE_TIME),
    ("mfme-2", "Cleaners", "500", Frequency.ONE_TIME),
    ("mfme-3", "Painters", "2000", Frequency.ONE_TIME),
]

DOWN_PAYMENT_SOURCES = [
    ("dps-1", "Gift", "10000", Frequency.ONE_TIME),
    ("dps-2", "Sell Motorcycle", "12000", Frequency.ONE_TIME),
    ("dps-3", "Cash", "5000", Frequency.ONE_TIME),
    ("dps-4", "Sell Stocks", "16000", Frequency.ONE_TIME),
]


def _items(rows, item_type: ItemType, active: bool) -> list[FinancialItem]:
    return [
        FinancialItem(
            id=item_id,
            label=label,
            amount=Decimal(amount),
            item_type=item_type,
            frequency=frequency,
            active=active,
        )
        for item_id, label, amount, frequency in rows
    ]


def _salary(
    item_id: str,
    label: str,
    amount: str,
    frequency: Frequency,
    active: bool,
    tax: str,
    k401: str,
    health: str,
) -> FinancialItem:
    return FinancialItem(
        id=item_id,
        label=label,
        amount=Decimal(amount),
        item_type=ItemType.INCOME,
        frequency=frequency,
        active=active,
        income_entry=IncomeEntry.GROSS,
        withholding_tax_pct=Decimal(tax),
        withholding_401k_pct=Decimal(k401),
        withholding_healthcare_pct=Decimal(health),
    )


def default_personal_finances() -> list[ItemCategory]:
    """Income, housing share, expenses and debts."""
    return [
        ItemCategory(
            id=INCOME_CATEGORY,
            name="Income",
            items=[
                _salary("income-1", "Dale Income", "85000", Frequency.ANNUAL, True, "25", "5", "5"),
                _salary("income-3", "Jamie Income", "55000", Frequency.ANNUAL, True, "25", "5", "5"),
                _salary("income-2", "Door Dash", "500", Frequency.MONTHLY, False, "25", "0", "0"),
            ],
        ),
        ItemCategory(
            id=HOUSING_PERCENTAGE_CATEGORY,
            name="Desired Monthly Payment (Mortgage + Escrow)",
            type=CategoryType.INPUT,
            items=[
                FinancialItem(
                    id="mp-1",
                    label="Monthly payment as a percentage of income",
                    amount=DEFAULT_HOUSING_PERCENTAGE,
                    item_type=ItemType.INFO,
                ),
            ],
        ),
        ItemCategory(
            id=MONTHLY_EXPENSES_CATEGORY,
            name="Monthly Expenses",
            items=_items(MONTHLY_EXPENSES, ItemType.EXPENSE, active=False),
        ),
        ItemCategory(
            id=ANNUAL_EXPENSES_CATEGORY,
            name="Annual Expenses",
            items=_items(ANNUAL_EXPENSES, ItemType.EXPENSE, active=False),
        ),
        ItemCategory(
            id=FIXED_DEBTS_CATEGORY,
            name="Fixed Debts (Minimum Payments)",
            items=_items(FIXED_DEBTS, ItemType.EXPENSE, active=False),
        ),
    ]


def default_future_home() -> list[ItemCategory]:
    """Income and costs expected after the purchase, all inactive."""
    return [
        ItemCategory(
            id=FUTURE_INCOME_CATEGORY,
            name="Future Income",
            items=_items(FUTURE_INCOME, ItemType.INCOME, active=False),
        ),
        ItemCategory(
            id=HOME_RELATED_EXPENSES_CATEGORY,
            name="Home-related Expenses",
            items=_items(HOME_RELATED_EXPENSES, ItemType.EXPENSE, active=False),
        ),
        ItemCategory(
            id=FUTURE_MONTHLY_EXPENSES_CATEGORY,
            name="Future Monthly Expenses",
            items=_items(FUTURE_MONTHLY_EXPENSES, ItemType.EXPENSE, active=False),
        ),
        ItemCategory(
            id=FUTURE_ANNUAL_EXPENSES_CATEGORY,
            name="Future Annual Expenses",
            items=_items(FUTURE_ANNUAL_EXPENSES, ItemType.EXPENSE, active=False),
        ),
        ItemCategory(
            id=MOVING_EXPENSES_CATEGORY,
            name="Moving and First Month Expenses",
            items=_items(MOVING_EXPENSES, ItemType.EXPENSE, active=False),
        ),
    ]


def default_mortgage_options(
    reference_rate: Decimal,
    spread: Optional[Decimal] = None,
) -> list[MortgageOptionGroup]:
    """Down payment sources, down payment %, term and rate options.

    Args:
        reference_rate: Market rate in percent, from a RateSource
        spread: Distance between generated rate options; the configured
            rate_option_spread when omitted
    """
    return [
        MortgageOptionGroup(
            id=DOWN_PAYMENT_SOURCES_GROUP,
            name="Downpayment Sources",
            type=CategoryType.DEFAULT,
            items=_items(DOWN_PAYMENT_SOURCES, ItemType.INCOME, active=True),
        ),
        MortgageOptionGroup(
            id=DOWN_PAYMENT_PERCENTAGE_GROUP,
            name="Downpayment %",
            type=CategoryType.INPUT,
            items=[
                FinancialItem(
                    id="dp-percentage-1",
                    label="Down Payment Percentage",
                    amount=DEFAULT_DOWN_PAYMENT_PERCENTAGE,
                    item_type=ItemType.INFO,
                ),
            ],
        ),
        generate_term_options(),
        generate_rate_options(reference_rate, spread=spread),
    ]


def default_snapshot(reference_rate: Decimal, spread: Optional[Decimal] = None) -> LedgerSnapshot:
    """A complete seed ledger."""
    return LedgerSnapshot(
        personal_finances=default_personal_finances(),
        future_home=default_future_home(),
        mortgage_options=default_mortgage_options(reference_rate, spread=spread),
    )
