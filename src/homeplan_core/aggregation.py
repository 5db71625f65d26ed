"""Ledger aggregation into solver inputs.

Reads a LedgerSnapshot by well-known category ids and produces the
FinancialInputs the solver consumes. Take-home income always comes from
the take-home calculator; it is never entered by hand on this path.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

import structlog

from .income import calculate_take_home
from .models.affordability import ExcessDownPaymentStrategy, FinancialInputs
from .models.ledger import FinancialItem, Frequency, ItemCategory, ItemType, LedgerSnapshot
from .mortgage_terms import MortgageTerms, resolve_terms
from .normalizer import MONTHS_PER_YEAR, sum_monthly, sum_one_time

logger = structlog.get_logger()

# Personal finance category ids
INCOME_CATEGORY = "income"
HOUSING_PERCENTAGE_CATEGORY = "monthly-payment"
MONTHLY_EXPENSES_CATEGORY = "monthly-expenses"
ANNUAL_EXPENSES_CATEGORY = "annual-expenses"
FIXED_DEBTS_CATEGORY = "fixed-debts"

LIFESTYLE_CATEGORIES = (MONTHLY_EXPENSES_CATEGORY, ANNUAL_EXPENSES_CATEGORY)

# Future home category ids
FUTURE_INCOME_CATEGORY = "future-income"
HOME_RELATED_EXPENSES_CATEGORY = "home-related-expenses"
FUTURE_MONTHLY_EXPENSES_CATEGORY = "future-monthly-expenses"
FUTURE_ANNUAL_EXPENSES_CATEGORY = "future-annual-expenses"
MOVING_EXPENSES_CATEGORY = "moving-first-month-expenses"


def _items_in(categories: Iterable[ItemCategory], category_ids: Iterable[str]) -> list[FinancialItem]:
    wanted = set(category_ids)
    return [item for category in categories if category.id in wanted for item in category.items]


def _all_items(categories: Iterable[ItemCategory]) -> list[FinancialItem]:
    return [item for category in categories for item in category.items]


def housing_percentage_from(snapshot: LedgerSnapshot) -> Optional[Decimal]:
    """The housing share of income entered in the monthly-payment category."""
    for category in snapshot.personal_finances:
        if category.id == HOUSING_PERCENTAGE_CATEGORY and category.items:
            return category.items[0].amount
    return None


def build_financial_inputs(
    snapshot: LedgerSnapshot,
    terms: Optional[MortgageTerms] = None,
    credit_score: int = 740,
    *,
    excess_down_payment_strategy: ExcessDownPaymentStrategy = ExcessDownPaymentStrategy.SAVE,
    market_reference_rate: Optional[Decimal] = None,
) -> FinancialInputs:
    """
    Turn a ledger snapshot into solver inputs.

    Args:
        snapshot: Ledger copy from LedgerStore.snapshot()
        terms: Resolved financing terms; resolved from the snapshot's
            mortgage options when omitted
        credit_score: FICO score
        excess_down_payment_strategy: What to do with funds beyond the target
        market_reference_rate: Rate the rate options were generated around

    Returns:
        FinancialInputs ready for compute_affordability

    Raises:
        UnresolvedRateError: no usable interest rate selection
        UnresolvedTermError: no usable loan term selection
    """
    if terms is None:
        terms = resolve_terms(snapshot.mortgage_options)

    personal_items = _all_items(snapshot.personal_finances)
    income_items = [item for item in personal_items if item.item_type == ItemType.INCOME]
    income = calculate_take_home(income_items)

    fixed_debts = sum_monthly(_items_in(snapshot.personal_finances, [FIXED_DEBTS_CATEGORY]))
    lifestyle = sum_monthly(_items_in(snapshot.personal_finances, LIFESTYLE_CATEGORIES))

    future_items = _all_items(snapshot.future_home)
    future_income = sum_monthly(item for item in future_items if item.item_type == ItemType.INCOME)
    future_expenses = sum_monthly(
        item
        for item in future_items
        if item.item_type == ItemType.EXPENSE and item.frequency != Frequency.ONE_TIME
    )
    one_time = sum_one_time(item for item in future_items if item.item_type == ItemType.EXPENSE)

    inputs = FinancialInputs(
        annual_income=income.gross_monthly_income * MONTHS_PER_YEAR,
        annual_take_home_income=income.take_home_monthly_income * MONTHS_PER_YEAR,
        monthly_expenses=lifestyle,
        fixed_debts=fixed_debts,
        down_payment_sources=terms.down_payment_sources_total,
        interest_rate=terms.interest_rate,
        loan_term=terms.loan_term_years,
        credit_score=credit_score,
        housing_percentage=housing_percentage_from(snapshot),
        down_payment_percentage=terms.down_payment_percentage,
        future_income_monthly=future_income,
        future_expenses_monthly=future_expenses,
        one_time_expenses=one_time,
        excess_down_payment_strategy=excess_down_payment_strategy,
        market_reference_rate=market_reference_rate,
    )

    logger.info(
        "financial_inputs_built",
        annual_income=str(inputs.annual_income),
        monthly_expenses=str(lifestyle),
        fixed_debts=str(fixed_debts),
        future_income_monthly=str(future_income),
        future_expenses_monthly=str(future_expenses),
        one_time_expenses=str(one_time),
        income_items=income.item_count,
    )
    return inputs
