"""Mortgage term selection and interest-rate option generation.

Rate options are generated around a reference rate supplied by a
RateSource. The selector resolves exactly one active term and one active
rate; when either cannot be resolved the calculation fails closed with an
UnresolvedTermsError instead of falling back to a default.
"""

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

import structlog
from pydantic import BaseModel

from .config import AffordabilityConfig
from .down_payment import aggregate_down_payment_sources
from .exceptions import InvalidInputError, UnresolvedRateError, UnresolvedTermError
from .models.ledger import CategoryType, FinancialItem, ItemType, MortgageOptionGroup

logger = structlog.get_logger()

# Option group ids
DOWN_PAYMENT_SOURCES_GROUP = "downpayment-sources"
DOWN_PAYMENT_PERCENTAGE_GROUP = "downpayment-percentage"
TERM_LENGTH_GROUP = "term-length"
INTEREST_RATE_GROUP = "interest-rate"

DEFAULT_TERM_OPTIONS = (15, 20, 30)
MAX_INTEREST_RATE = Decimal("20")
TWO_PLACES = Decimal("0.01")
EIGHTH = Decimal("8")


class MortgageTerms(BaseModel):
    """Financing terms resolved from the option groups."""

    loan_term_years: int
    interest_rate: Decimal
    down_payment_percentage: Optional[Decimal] = None
    down_payment_sources_total: Decimal = Decimal("0")
    warnings: list[str] = []


def _parse_decimal(raw: Union[str, Decimal, None]) -> Optional[Decimal]:
    """Parse an option value such as '6.85', '6.85%' or '30 Years'."""
    if raw is None:
        return None
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else None
    text = str(raw).strip().rstrip("%").strip()
    if text.lower().endswith("years"):
        text = text[: -len("years")].strip()
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def _option_value(item: FinancialItem) -> Union[str, Decimal, None]:
    """An option's value, falling back to its label."""
    return item.value if item.value is not None else item.label


def _find_group(groups: Iterable[MortgageOptionGroup], group_id: str) -> Optional[MortgageOptionGroup]:
    for group in groups:
        if group.id == group_id:
            return group
    return None


def generate_rate_options(
    reference_rate: Decimal,
    spread: Optional[Decimal] = None,
    selected: str = "reference",
) -> MortgageOptionGroup:
    """Build the interest-rate radio group around a reference rate.

    Args:
        reference_rate: Market rate in percent from a RateSource
        spread: Distance in percentage points of the lower/higher options;
            defaults to the configured rate_option_spread
        selected: Which option starts active: "lower", "reference" or "higher"

    Returns:
        Radio MortgageOptionGroup with up to three options. Options that
        would fall below zero are dropped.
    """
    reference_rate = Decimal(reference_rate)
    if spread is None:
        spread = AffordabilityConfig().rate_option_spread
    spread = Decimal(spread)
    if reference_rate < 0 or reference_rate > MAX_INTEREST_RATE:
        raise InvalidInputError(
            "Reference rate out of range",
            field="reference_rate",
            value=reference_rate,
            constraint=f"0 <= reference_rate <= {MAX_INTEREST_RATE}",
        )
    if selected not in ("lower", "reference", "higher"):
        raise InvalidInputError(
            "Unknown rate option",
            field="selected",
            value=selected,
            constraint="lower, reference or higher",
        )

    candidates = [
        ("ir-1", "lower", reference_rate - spread),
        ("ir-2", "reference", reference_rate),
        ("ir-3", "higher", reference_rate + spread),
    ]
    items = []
    for item_id, name, rate in candidates:
        if rate < 0:
            continue
        text = str(rate.quantize(TWO_PLACES))
        items.append(
            FinancialItem(
                id=item_id,
                label=f"{text}%",
                value=text,
                item_type=ItemType.INFO,
                active=(name == selected),
                editable=True,
            )
        )

    return MortgageOptionGroup(
        id=INTEREST_RATE_GROUP,
        name="Interest Rate Options",
        type=CategoryType.RADIO,
        items=items,
    )


def generate_term_options(
    terms: Sequence[int] = DEFAULT_TERM_OPTIONS,
    selected: int = 30,
) -> MortgageOptionGroup:
    """Build the term-length radio group."""
    items = [
        FinancialItem(
            id=f"tl-{index}",
            label=f"{term} Years",
            value=str(term),
            item_type=ItemType.INFO,
            active=(term == selected),
            editable=False,
        )
        for index, term in enumerate(terms, start=1)
    ]
    return MortgageOptionGroup(
        id=TERM_LENGTH_GROUP,
        name="Term Length (Years)",
        type=CategoryType.RADIO,
        items=items,
    )


def resolve_interest_rate(groups: Iterable[MortgageOptionGroup]) -> Decimal:
    """Resolve the selected interest rate in percent.

    Raises:
        UnresolvedRateError: group missing, nothing selected, or the value
            is unparseable or outside 0-20%
    """
    group = _find_group(groups, INTEREST_RATE_GROUP)
    if group is None:
        logger.warning("unresolved_rate", reason="missing_group")
        raise UnresolvedRateError(
            "No interest rate options are available",
            group_id=INTEREST_RATE_GROUP,
        )

    item = group.selected_item()
    if item is None:
        logger.warning("unresolved_rate", reason="no_selection")
        raise UnresolvedRateError(
            "No interest rate option is selected",
            group_id=INTEREST_RATE_GROUP,
        )

    raw = _option_value(item)
    rate = _parse_decimal(raw)
    if rate is None or rate < 0 or rate > MAX_INTEREST_RATE:
        logger.warning("unresolved_rate", reason="invalid_value", raw_value=str(raw))
        raise UnresolvedRateError(
            f"Selected interest rate '{raw}' is not a valid rate",
            group_id=INTEREST_RATE_GROUP,
            raw_value=raw,
        )
    return rate


def resolve_loan_term(groups: Iterable[MortgageOptionGroup]) -> int:
    """Resolve the selected loan term in years.

    Raises:
        UnresolvedTermError: group missing, nothing selected, or the value
            is not a positive whole number of years
    """
    group = _find_group(groups, TERM_LENGTH_GROUP)
    if group is None:
        logger.warning("unresolved_term", reason="missing_group")
        raise UnresolvedTermError("No loan term options are available", group_id=TERM_LENGTH_GROUP)

    item = group.selected_item()
    if item is None:
        logger.warning("unresolved_term", reason="no_selection")
        raise UnresolvedTermError("No loan term option is selected", group_id=TERM_LENGTH_GROUP)

    raw = _option_value(item)
    years = _parse_decimal(raw)
    if years is None or years <= 0 or years != years.to_integral_value():
        logger.warning("unresolved_term", reason="invalid_value", raw_value=str(raw))
        raise UnresolvedTermError(
            f"Selected loan term '{raw}' is not a whole number of years",
            group_id=TERM_LENGTH_GROUP,
            raw_value=raw,
        )
    return int(years)


def resolve_terms(groups: Sequence[MortgageOptionGroup]) -> MortgageTerms:
    """Resolve all financing choices from the mortgage option groups.

    The term and rate are required. The down payment percentage is
    optional (the solver falls back to its configured default) and the
    sources total is zero when the group is absent.
    """
    rate = resolve_interest_rate(groups)
    term = resolve_loan_term(groups)
    warnings: list[str] = []

    dp_percentage = None
    dp_group = _find_group(groups, DOWN_PAYMENT_PERCENTAGE_GROUP)
    if dp_group is not None and dp_group.items:
        dp_item = dp_group.selected_item() or dp_group.items[0]
        dp_percentage = dp_item.amount

    sources_total = Decimal("0")
    sources_group = _find_group(groups, DOWN_PAYMENT_SOURCES_GROUP)
    if sources_group is not None:
        summary = aggregate_down_payment_sources(sources_group.items)
        sources_total = summary.total
        warnings.extend(summary.warnings)

    logger.info(
        "mortgage_terms_resolved",
        interest_rate=str(rate),
        loan_term_years=term,
        down_payment_percentage=str(dp_percentage) if dp_percentage is not None else None,
        down_payment_sources_total=str(sources_total),
    )
    return MortgageTerms(
        loan_term_years=term,
        interest_rate=rate,
        down_payment_percentage=dp_percentage,
        down_payment_sources_total=sources_total,
        warnings=warnings,
    )


def estimate_interest_rate(
    credit_score: int,
    loan_term: int,
    down_payment_pct: Decimal,
    reference_rate: Decimal,
) -> Decimal:
    """Estimate a borrower-specific rate from the market reference rate.

    The reference rate is a 30-year fixed for 760+ credit with 20% down.
    Adjustments are added for credit tier, shorter terms and smaller down
    payments, and the result is rounded to the nearest 0.125%.

    Args:
        credit_score: FICO score
        loan_term: Term in years
        down_payment_pct: Down payment in percent
        reference_rate: Market reference rate in percent

    Returns:
        Estimated annual rate in percent (never negative)
    """
    if credit_score >= 760:
        credit_adj = Decimal("-0.25")
    elif credit_score >= 720:
        credit_adj = Decimal("0")
    elif credit_score >= 680:
        credit_adj = Decimal("0.375")
    elif credit_score >= 640:
        credit_adj = Decimal("0.875")
    elif credit_score >= 620:
        credit_adj = Decimal("1.375")
    else:
        credit_adj = Decimal("2.25")

    if loan_term <= 15:
        term_adj = Decimal("-0.625")
    elif loan_term <= 20:
        term_adj = Decimal("-0.375")
    else:
        term_adj = Decimal("0")

    if down_payment_pct < 15:
        dp_adj = Decimal("0.25")
    elif down_payment_pct < 20:
        dp_adj = Decimal("0.125")
    else:
        dp_adj = Decimal("0")

    raw = reference_rate + credit_adj + term_adj + dp_adj
    rounded = (raw * EIGHTH).quantize(Decimal("1"), rounding=ROUND_HALF_UP) / EIGHTH
    return max(Decimal("0"), rounded)
