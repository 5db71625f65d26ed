"""Boundary validation for solver inputs.

Raw user text and out-of-range numbers are rejected here, before anything
reaches the amortization math. Every failure names the offending field;
nothing is silently coerced to zero.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .exceptions import InvalidInputError
from .models.affordability import FinancialInputs, Property

MIN_INTEREST_RATE = Decimal("0")
MAX_INTEREST_RATE = Decimal("20")
MAX_LOAN_TERM_YEARS = 50
MIN_CREDIT_SCORE = 300
MAX_CREDIT_SCORE = 850

_NON_NEGATIVE_FIELDS = (
    "annual_income",
    "monthly_expenses",
    "fixed_debts",
    "down_payment_sources",
    "future_income_monthly",
    "future_expenses_monthly",
    "one_time_expenses",
)


def parse_amount(raw: Any, field: str) -> Decimal:
    """Parse a user-entered money amount.

    Accepts numbers and strings such as "$85,000" or " 1200.50 ".

    Raises:
        InvalidInputError: blank, non-numeric, non-finite or negative input
    """
    if isinstance(raw, bool) or raw is None:
        raise InvalidInputError(f"{field} is required", field=field, value=raw)

    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float)):
        value = Decimal(str(raw))
    else:
        text = str(raw).strip().replace(",", "").replace("$", "").strip()
        if not text:
            raise InvalidInputError(f"{field} is required", field=field, value=raw)
        try:
            value = Decimal(text)
        except InvalidOperation:
            raise InvalidInputError(
                f"{field} is not a number",
                field=field,
                value=raw,
                constraint="numeric amount",
            ) from None

    if not value.is_finite():
        raise InvalidInputError(f"{field} must be finite", field=field, value=raw)
    if value < 0:
        raise InvalidInputError(
            f"{field} cannot be negative",
            field=field,
            value=value,
            constraint=f"{field} >= 0",
        )
    return value


def parse_percentage(
    raw: Any,
    field: str,
    minimum: Decimal = Decimal("0"),
    maximum: Decimal = Decimal("100"),
) -> Decimal:
    """Parse a user-entered percentage such as "6.5%" or "28"."""
    if isinstance(raw, str):
        raw = raw.strip().rstrip("%")
    value = parse_amount(raw, field)
    _check_range(field, value, minimum, maximum)
    return value


def _check_range(
    field: str,
    value: Decimal,
    minimum: Decimal,
    maximum: Decimal,
    *,
    exclusive_minimum: bool = False,
) -> None:
    too_low = value <= minimum if exclusive_minimum else value < minimum
    if too_low or value > maximum:
        lower = f"{minimum} <" if exclusive_minimum else f"{minimum} <="
        raise InvalidInputError(
            f"{field} is out of range",
            field=field,
            value=value,
            constraint=f"{lower} {field} <= {maximum}",
        )


def validate_financial_inputs(inputs: FinancialInputs) -> FinancialInputs:
    """Check solver inputs against the accepted ranges.

    Returns:
        The same inputs, unchanged, when every field is valid

    Raises:
        InvalidInputError: for the first offending field
    """
    for field in _NON_NEGATIVE_FIELDS:
        value = getattr(inputs, field)
        if not value.is_finite() or value < 0:
            raise InvalidInputError(
                f"{field} cannot be negative",
                field=field,
                value=value,
                constraint=f"{field} >= 0",
            )

    if inputs.annual_take_home_income is not None:
        take_home = inputs.annual_take_home_income
        if not take_home.is_finite() or take_home < 0:
            raise InvalidInputError(
                "annual_take_home_income cannot be negative",
                field="annual_take_home_income",
                value=take_home,
                constraint="annual_take_home_income >= 0",
            )

    if not inputs.interest_rate.is_finite():
        raise InvalidInputError("interest_rate must be finite", field="interest_rate", value=inputs.interest_rate)
    _check_range("interest_rate", inputs.interest_rate, MIN_INTEREST_RATE, MAX_INTEREST_RATE)

    if inputs.loan_term <= 0 or inputs.loan_term > MAX_LOAN_TERM_YEARS:
        raise InvalidInputError(
            "loan_term is out of range",
            field="loan_term",
            value=inputs.loan_term,
            constraint=f"0 < loan_term <= {MAX_LOAN_TERM_YEARS}",
        )

    if not MIN_CREDIT_SCORE <= inputs.credit_score <= MAX_CREDIT_SCORE:
        raise InvalidInputError(
            "credit_score is out of range",
            field="credit_score",
            value=inputs.credit_score,
            constraint=f"{MIN_CREDIT_SCORE} <= credit_score <= {MAX_CREDIT_SCORE}",
        )

    for field in ("housing_percentage", "down_payment_percentage"):
        value: Optional[Decimal] = getattr(inputs, field)
        if value is not None:
            if not value.is_finite():
                raise InvalidInputError(f"{field} must be finite", field=field, value=value)
            _check_range(field, value, Decimal("0"), Decimal("100"), exclusive_minimum=True)

    return inputs


def validate_property(property: Property) -> Property:
    """Check a property's numeric fields before scoring it."""
    if property.price <= 0:
        raise InvalidInputError(
            "price must be positive",
            field="price",
            value=property.price,
            constraint="price > 0",
        )
    if property.property_tax_rate is not None and property.property_tax_rate > Decimal("0.1"):
        raise InvalidInputError(
            "property_tax_rate looks like a percentage; expected a fraction of price",
            field="property_tax_rate",
            value=property.property_tax_rate,
            constraint="0 <= property_tax_rate <= 0.1",
        )
    return property
