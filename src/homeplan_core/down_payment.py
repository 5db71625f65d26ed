"""Down payment source aggregation.

Down payment capital is a lump sum, so only active one-time items count.
A recurring item in a down payment category is a configuration mistake:
it is reported as a warning and left out of the total.
"""

from collections.abc import Iterable
from decimal import Decimal

import structlog
from pydantic import BaseModel, Field

from .models.ledger import FinancialItem, Frequency
from .normalizer import frequency_label

logger = structlog.get_logger()


class DownPaymentSummary(BaseModel):
    """Total lump-sum funds available for a down payment."""

    total: Decimal = Decimal("0")
    source_count: int = 0
    excluded_item_ids: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def aggregate_down_payment_sources(items: Iterable[FinancialItem]) -> DownPaymentSummary:
    """Sum active one-time down payment sources.

    Args:
        items: Items from the down payment source categories

    Returns:
        DownPaymentSummary with the total and any flagged items
    """
    total = Decimal("0")
    count = 0
    excluded: list[str] = []
    warnings: list[str] = []

    for item in items:
        if not item.active:
            continue
        if item.frequency != Frequency.ONE_TIME:
            excluded.append(item.id)
            warnings.append(
                f"Down payment source '{item.label}' is {frequency_label(item)} rather than one-time "
                "and was not counted"
            )
            logger.warning(
                "recurring_down_payment_source",
                item_id=item.id,
                label=item.label,
                frequency=frequency_label(item),
            )
            continue
        total += item.amount
        count += 1

    return DownPaymentSummary(
        total=total,
        source_count=count,
        excluded_item_ids=excluded,
        warnings=warnings,
    )
