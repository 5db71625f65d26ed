"""Take-home income calculation from income line items.

Each active income item contributes its normalized monthly amount to
gross income. Items entered as gross also have their withholding
percentages applied before contributing to take-home income; items
entered as net (or with no entry mode) contribute unchanged.
"""

from collections.abc import Iterable
from decimal import Decimal

import structlog
from pydantic import BaseModel, computed_field

from .models.ledger import FinancialItem, ItemType
from .normalizer import MONTHS_PER_YEAR, monthly_amount

logger = structlog.get_logger()

HUNDRED = Decimal("100")


def clamp_percentage(value: Decimal) -> Decimal:
    """Clamp a percentage to the [0, 100] range."""
    return max(Decimal("0"), min(HUNDRED, value))


class WithholdingBreakdown(BaseModel):
    """Monthly withholding totals by bucket."""

    taxes: Decimal = Decimal("0")
    retirement: Decimal = Decimal("0")
    healthcare: Decimal = Decimal("0")
    hsa: Decimal = Decimal("0")
    other: Decimal = Decimal("0")

    @computed_field
    @property
    def total(self) -> Decimal:
        """All withholding combined."""
        return self.taxes + self.retirement + self.healthcare + self.hsa + self.other


class IncomeSummary(BaseModel):
    """Gross and take-home income derived from the income ledger."""

    gross_monthly_income: Decimal = Decimal("0")
    take_home_monthly_income: Decimal = Decimal("0")
    withholding: WithholdingBreakdown = WithholdingBreakdown()
    item_count: int = 0

    @computed_field
    @property
    def gross_annual_income(self) -> Decimal:
        """Gross income over a year."""
        return self.gross_monthly_income * MONTHS_PER_YEAR

    @computed_field
    @property
    def take_home_annual_income(self) -> Decimal:
        """Take-home income over a year."""
        return self.take_home_monthly_income * MONTHS_PER_YEAR


def _withholding_for(item: FinancialItem, monthly: Decimal) -> WithholdingBreakdown:
    """Split an item's monthly withholding into buckets.

    When the percentages sum past 100 each bucket is scaled down so the
    total withheld equals the item's monthly amount.
    """
    raw_total = item.total_withholding_pct
    if raw_total <= 0:
        return WithholdingBreakdown()

    scale = clamp_percentage(raw_total) / raw_total

    def share(pct: Decimal) -> Decimal:
        return monthly * pct * scale / HUNDRED

    return WithholdingBreakdown(
        taxes=share(item.withholding_tax_pct),
        retirement=share(item.withholding_401k_pct),
        healthcare=share(item.withholding_healthcare_pct),
        hsa=share(item.withholding_hsa_pct),
        other=share(item.withholding_other_pct),
    )


def take_home_contribution(item: FinancialItem) -> Decimal:
    """Monthly take-home contribution of a single income item."""
    monthly = monthly_amount(item)
    if not item.is_gross_income:
        return monthly
    withheld_pct = clamp_percentage(item.total_withholding_pct)
    return monthly * (1 - withheld_pct / HUNDRED)


def calculate_take_home(items: Iterable[FinancialItem]) -> IncomeSummary:
    """Compute gross and take-home monthly income from income items.

    Args:
        items: Ledger items; inactive and non-income items are ignored

    Returns:
        IncomeSummary with both totals and the withholding breakdown.
        An empty or all-inactive ledger yields zeros.
    """
    gross = Decimal("0")
    take_home = Decimal("0")
    taxes = retirement = healthcare = hsa = other = Decimal("0")
    count = 0

    for item in items:
        if not item.active or item.item_type != ItemType.INCOME:
            continue

        monthly = monthly_amount(item)
        contribution = take_home_contribution(item)
        gross += monthly
        take_home += contribution
        count += 1

        if item.is_gross_income:
            if item.total_withholding_pct > HUNDRED:
                logger.warning(
                    "withholding_exceeds_income",
                    item_id=item.id,
                    total_pct=str(item.total_withholding_pct),
                )
            buckets = _withholding_for(item, monthly)
            taxes += buckets.taxes
            retirement += buckets.retirement
            healthcare += buckets.healthcare
            hsa += buckets.hsa
            other += buckets.other

    summary = IncomeSummary(
        gross_monthly_income=max(Decimal("0"), gross),
        take_home_monthly_income=max(Decimal("0"), take_home),
        withholding=WithholdingBreakdown(
            taxes=taxes,
            retirement=retirement,
            healthcare=healthcare,
            hsa=hsa,
            other=other,
        ),
        item_count=count,
    )
    logger.debug(
        "take_home_calculated",
        items=count,
        gross_monthly=str(summary.gross_monthly_income),
        take_home_monthly=str(summary.take_home_monthly_income),
    )
    return summary
