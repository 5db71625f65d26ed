"""Display formatting for money and percentages."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[Decimal, int, float]


def format_currency(amount: Number, decimals: int = 0) -> str:
    """Format a dollar amount, e.g. ``format_currency(1234.5) == "$1,235"``.

    Negative amounts render as ``-$1,235``.
    """
    value = Decimal(str(amount))
    exponent = Decimal(1).scaleb(-decimals)
    rounded = value.quantize(exponent, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.{decimals}f}"


def format_percentage(value: Number, decimals: int = 1) -> str:
    """Format a percentage already expressed in percent: 43 -> "43.0%"."""
    rounded = Decimal(str(value)).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return f"{rounded:.{decimals}f}%"
