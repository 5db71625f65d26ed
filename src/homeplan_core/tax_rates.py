"""Property tax and insurance reference data.

This module contains location-keyed effective property tax rates and the
homeowners insurance estimate used when a property does not carry its own
figures. Rates are annual fractions of the purchase price.

These are planning estimates, not assessor data. Callers with better data
supply their own rate on the Property or plug in a different
PropertyTaxRateSource.
"""

from decimal import Decimal
from typing import Optional


# =============================================================================
# VERSION TRACKING
# =============================================================================

TAX_TABLE_VERSION = "2025-Q3"


# =============================================================================
# PROPERTY TAX RATES
# =============================================================================
# Location key -> effective annual rate (fraction of price).
# Keys are "City, ST" for metro-level overrides and "ST" for state averages.

PROPERTY_TAX_RATES = {
    # Metro overrides
    "Austin, TX": Decimal("0.0181"),
    "Houston, TX": Decimal("0.0209"),
    "Dallas, TX": Decimal("0.0193"),
    "Seattle, WA": Decimal("0.0092"),
    "Denver, CO": Decimal("0.0051"),
    "Phoenix, AZ": Decimal("0.0062"),
    "Chicago, IL": Decimal("0.0207"),
    "New York, NY": Decimal("0.0088"),
    "Los Angeles, CA": Decimal("0.0072"),
    "Miami, FL": Decimal("0.0102"),
    "Atlanta, GA": Decimal("0.0101"),
    "Boston, MA": Decimal("0.0112"),
    "Portland, OR": Decimal("0.0104"),
    # State averages
    "AL": Decimal("0.0040"),
    "AZ": Decimal("0.0062"),
    "CA": Decimal("0.0075"),
    "CO": Decimal("0.0055"),
    "CT": Decimal("0.0179"),
    "FL": Decimal("0.0091"),
    "GA": Decimal("0.0092"),
    "HI": Decimal("0.0032"),
    "IL": Decimal("0.0223"),
    "MA": Decimal("0.0114"),
    "MI": Decimal("0.0138"),
    "NC": Decimal("0.0082"),
    "NJ": Decimal("0.0247"),
    "NY": Decimal("0.0173"),
    "OH": Decimal("0.0159"),
    "OR": Decimal("0.0093"),
    "PA": Decimal("0.0149"),
    "TX": Decimal("0.0168"),
    "UT": Decimal("0.0057"),
    "VA": Decimal("0.0082"),
    "WA": Decimal("0.0094"),
}

# Default for unknown locations
DEFAULT_PROPERTY_TAX_RATE = Decimal("0.0181")


def normalize_location(location: str) -> str:
    """Normalize a location key: trimmed, single-spaced, state code upper-cased."""
    parts = [p.strip() for p in location.split(",")]
    if len(parts) == 1:
        key = parts[0]
        return key.upper() if len(key) == 2 else key.title()
    city = " ".join(parts[0].split()).title()
    state = parts[-1].upper()
    return f"{city}, {state}"


def get_property_tax_rate(
    location: Optional[str],
    default: Decimal = DEFAULT_PROPERTY_TAX_RATE,
    table: Optional[dict[str, Decimal]] = None,
) -> Decimal:
    """Get the annual property tax rate for a location.

    Looks up the metro key first, then the state average, then falls back
    to ``default``.

    Args:
        location: "City, ST", "ST", or None
        default: Rate used when the location is unknown
        table: Alternate rate table (defaults to PROPERTY_TAX_RATES)

    Returns:
        Annual tax rate as a fraction of price
    """
    rates = PROPERTY_TAX_RATES if table is None else table
    if not location or not location.strip():
        return default

    key = normalize_location(location)
    if key in rates:
        return rates[key]

    # Fall back to the state average for "City, ST" keys
    if "," in key:
        state = key.rsplit(",", 1)[1].strip()
        if state in rates:
            return rates[state]

    return default


# =============================================================================
# HOMEOWNERS INSURANCE
# =============================================================================
# Rough industry figure: $3-5 per $1,000 of home value per year.

DEFAULT_INSURANCE_RATE = Decimal("0.0035")


def estimate_annual_insurance(home_value: Decimal, rate: Decimal = DEFAULT_INSURANCE_RATE) -> Decimal:
    """Estimate annual homeowners insurance from home value.

    Args:
        home_value: Purchase price or market value
        rate: Annual premium as a fraction of value

    Returns:
        Estimated annual premium (never negative)
    """
    if home_value <= 0:
        return Decimal("0")
    return home_value * rate
