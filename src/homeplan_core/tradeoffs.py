"""Trade-off messages for ledger edits.

After each edit the caller recomputes affordability and passes the old
and new max purchase price here. Moves smaller than the threshold are
noise and produce no message.
"""

import uuid
from decimal import Decimal
from typing import Optional

from .formatting import format_currency
from .models.affordability import ImpactCategory, TradeoffImpact
from .models.ledger import FinancialItem, ItemType
from .mortgage_terms import DOWN_PAYMENT_SOURCES_GROUP, INTEREST_RATE_GROUP, TERM_LENGTH_GROUP
from .normalizer import annual_amount, monthly_amount

DEFAULT_IMPACT_THRESHOLD = Decimal("100")
DEFAULT_LOG_SIZE = 10


def _direction(diff: Decimal) -> str:
    return "increased" if diff > 0 else "reduced"


def describe_tradeoff(
    item: FinancialItem,
    previous_price: Decimal,
    new_price: Decimal,
    *,
    category_id: Optional[str] = None,
    threshold: Decimal = DEFAULT_IMPACT_THRESHOLD,
) -> Optional[TradeoffImpact]:
    """
    Describe how editing ``item`` moved the max purchase price.

    Args:
        item: The item after the edit
        previous_price: Max purchase price before the edit
        new_price: Max purchase price after the edit
        category_id: Category or option group the item belongs to
        threshold: Smallest price move worth reporting

    Returns:
        TradeoffImpact, or None for moves under the threshold and for
        items with no meaningful message
    """
    diff = new_price - previous_price
    if abs(diff) < threshold:
        return None

    sign = "+" if item.active else "-"
    change = format_currency(abs(diff))
    category = ImpactCategory.AFFORDABILITY

    if category_id == DOWN_PAYMENT_SOURCES_GROUP or item.id.startswith("dps-"):
        message = (
            f"{item.label}: {sign}{format_currency(item.amount)} -> "
            f"Purchase price {_direction(diff)} by {change}"
        )
        category = ImpactCategory.ONE_TIME_COST
    elif category_id in (TERM_LENGTH_GROUP, INTEREST_RATE_GROUP):
        message = f"{item.label} selected -> Purchase price {_direction(diff)} by {change}"
        category = ImpactCategory.LOAN_TERMS
    elif item.item_type == ItemType.INCOME:
        message = (
            f"{item.label}: {sign}{format_currency(annual_amount(item))}/year income -> "
            f"Purchase price {_direction(diff)} by {change}"
        )
    elif item.item_type == ItemType.EXPENSE:
        message = (
            f"{item.label}: {sign}{format_currency(monthly_amount(item))}/month expenses -> "
            f"Purchase price {_direction(diff)} by {change}"
        )
    else:
        return None

    return TradeoffImpact(
        id=uuid.uuid4().hex,
        message=message,
        item_label=item.label,
        max_price_impact=diff,
        item_type=item.item_type.value,
        impact_category=category,
    )


class TradeoffLog:
    """Most-recent-first list of trade-off impacts, capped at ``max_entries``."""

    def __init__(self, max_entries: int = DEFAULT_LOG_SIZE):
        self.max_entries = max_entries
        self._entries: list[TradeoffImpact] = []

    def record(self, impact: Optional[TradeoffImpact]) -> None:
        if impact is None:
            return
        self._entries = [impact, *self._entries][: self.max_entries]

    @property
    def entries(self) -> list[TradeoffImpact]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
