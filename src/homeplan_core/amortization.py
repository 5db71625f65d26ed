"""Fixed-rate amortization math.

All functions assume validated, non-negative inputs. A zero interest rate
falls back to straight-line repayment instead of dividing by zero.
"""

from decimal import Decimal

from .models.affordability import PaymentBreakdown

MONTHS_PER_YEAR = 12
HUNDRED = Decimal("100")
PCT_PLACES = Decimal("0.000001")


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Convert an annual percentage rate (6.5) to a monthly fraction."""
    return annual_rate_percent / HUNDRED / MONTHS_PER_YEAR


def number_of_payments(loan_term_years: int) -> int:
    """Monthly payment count for a term in years."""
    return loan_term_years * MONTHS_PER_YEAR


def payment_factor(annual_rate_percent: Decimal, loan_term_years: int) -> Decimal:
    """Monthly payment per dollar financed.

    r(1+r)^n / ((1+r)^n - 1), or 1/n when the rate is zero.
    """
    n = number_of_payments(loan_term_years)
    if n <= 0:
        return Decimal("0")
    r = monthly_rate(annual_rate_percent)
    if r == 0:
        return Decimal("1") / n
    growth = (1 + r) ** n
    return r * growth / (growth - 1)


def monthly_principal_and_interest(
    loan_amount: Decimal,
    annual_rate_percent: Decimal,
    loan_term_years: int,
) -> Decimal:
    """Monthly principal and interest for a fully amortizing loan."""
    if loan_amount <= 0:
        return Decimal("0")
    return loan_amount * payment_factor(annual_rate_percent, loan_term_years)


def loan_for_payment(
    monthly_payment: Decimal,
    annual_rate_percent: Decimal,
    loan_term_years: int,
) -> Decimal:
    """Largest loan whose principal and interest equals ``monthly_payment``."""
    if monthly_payment <= 0:
        return Decimal("0")
    factor = payment_factor(annual_rate_percent, loan_term_years)
    if factor <= 0:
        return Decimal("0")
    return monthly_payment / factor


def total_interest(
    loan_amount: Decimal,
    annual_rate_percent: Decimal,
    loan_term_years: int,
) -> Decimal:
    """Interest paid over the full term."""
    payment = monthly_principal_and_interest(loan_amount, annual_rate_percent, loan_term_years)
    return payment * number_of_payments(loan_term_years) - max(Decimal("0"), loan_amount)


def housing_payment(
    price: Decimal,
    down_payment: Decimal,
    annual_rate_percent: Decimal,
    loan_term_years: int,
    *,
    property_tax_rate: Decimal,
    annual_insurance: Decimal,
    pmi_annual_rate: Decimal = Decimal("0"),
    pmi_threshold_percentage: Decimal = Decimal("20"),
    monthly_hoa: Decimal = Decimal("0"),
) -> tuple[PaymentBreakdown, Decimal]:
    """Full monthly housing payment (PITI plus PMI and HOA).

    Args:
        price: Purchase price
        down_payment: Cash applied to the purchase
        annual_rate_percent: Interest rate in percent
        loan_term_years: Term in years
        property_tax_rate: Annual tax as a fraction of price
        annual_insurance: Annual homeowners insurance premium
        pmi_annual_rate: Annual PMI as a fraction of the loan
        pmi_threshold_percentage: PMI applies below this down payment percent
        monthly_hoa: Monthly HOA dues

    Returns:
        Tuple of (payment breakdown, loan amount)
    """
    price = max(Decimal("0"), price)
    loan = max(Decimal("0"), price - down_payment)

    pmi = Decimal("0")
    if loan > 0 and price > 0:
        # Rounded so that price x 20% down compares equal to a 20% threshold
        down_payment_pct = ((price - loan) / price * HUNDRED).quantize(PCT_PLACES)
        if down_payment_pct < pmi_threshold_percentage:
            pmi = loan * pmi_annual_rate / MONTHS_PER_YEAR

    breakdown = PaymentBreakdown(
        principal_and_interest=monthly_principal_and_interest(loan, annual_rate_percent, loan_term_years),
        property_tax=price * property_tax_rate / MONTHS_PER_YEAR,
        insurance=annual_insurance / MONTHS_PER_YEAR,
        pmi=pmi,
        hoa=monthly_hoa,
    )
    return breakdown, loan
