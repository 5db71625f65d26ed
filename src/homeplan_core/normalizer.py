"""Frequency normalization for ledger items.

Every recurring figure the engine uses is a monthly figure. One-time items
never contribute to recurring cashflow; they only reach a calculation
through the down payment aggregator.
"""

from collections.abc import Iterable
from decimal import Decimal

import structlog

from .models.ledger import FinancialItem, Frequency

logger = structlog.get_logger()

MONTHS_PER_YEAR = 12


def monthly_amount(item: FinancialItem) -> Decimal:
    """Convert an item's amount to a monthly figure.

    Args:
        item: Ledger item with amount and frequency

    Returns:
        annual -> amount / 12, monthly -> amount, one-time -> 0.
        Unrecognized frequencies are treated as monthly.
    """
    frequency = item.frequency
    if frequency == Frequency.MONTHLY:
        return item.amount
    if frequency == Frequency.ANNUAL:
        return item.amount / MONTHS_PER_YEAR
    if frequency == Frequency.ONE_TIME:
        return Decimal("0")

    logger.warning(
        "unknown_frequency",
        item_id=item.id,
        label=item.label,
        frequency=frequency_label(item),
        treated_as=Frequency.MONTHLY.value,
    )
    return item.amount


def frequency_label(item: FinancialItem) -> str:
    """Plain text frequency, including unrecognized values."""
    if isinstance(item.frequency, Frequency):
        return item.frequency.value
    return str(item.frequency)


def annual_amount(item: FinancialItem) -> Decimal:
    """Convert an item's amount to an annual figure (one-time -> 0)."""
    if item.frequency == Frequency.ANNUAL:
        return item.amount
    return monthly_amount(item) * MONTHS_PER_YEAR


def sum_monthly(items: Iterable[FinancialItem]) -> Decimal:
    """Sum the monthly figures of active items."""
    return sum((monthly_amount(item) for item in items if item.active), Decimal("0"))


def sum_one_time(items: Iterable[FinancialItem]) -> Decimal:
    """Sum the amounts of active one-time items."""
    return sum(
        (item.amount for item in items if item.active and item.frequency == Frequency.ONE_TIME),
        Decimal("0"),
    )
