#!/usr/bin/env python3
"""
Home Affordability Demonstration

This script walks through the planning workflow:
1. Seed a household ledger around today's reference rate
2. Solve the maximum purchase price
3. Toggle ledger items and report the trade-offs
4. Score a specific listing

Run: python examples/affordability_demo.py
"""

from decimal import Decimal

from homeplan_core import LedgerStore, Property, build_financial_inputs, compute_affordability
from homeplan_core.formatting import format_currency, format_percentage
from homeplan_core.sources import StaticRateSource
from homeplan_core.tradeoffs import TradeoffLog, describe_tradeoff

REFERENCE_RATE = Decimal("6.85")


def max_price(store: LedgerStore) -> Decimal:
    return compute_affordability(build_financial_inputs(store.snapshot())).max_purchase_price


def main():
    """Run the affordability demonstration."""
    print("=" * 70)
    print("HOMEPLAN CORE - Affordability Demo")
    print("=" * 70)
    print()

    # Step 1: Seed the ledger
    print("Step 1: Seeding the household ledger...")
    store = LedgerStore.with_defaults(StaticRateSource(REFERENCE_RATE))
    inputs = build_financial_inputs(store.snapshot(), market_reference_rate=REFERENCE_RATE)
    print(f"  - Gross Annual Income: {format_currency(inputs.annual_income)}")
    print(f"  - Take-home Annual Income: {format_currency(inputs.annual_take_home_income)}")
    print(f"  - Down Payment Sources: {format_currency(inputs.down_payment_sources)}")
    print(f"  - Rate / Term: {format_percentage(inputs.interest_rate, 2)} / {inputs.loan_term} years")
    print()

    # Step 2: Solve
    print("Step 2: Solving the maximum purchase price...")
    result = compute_affordability(inputs)
    print(f"  - Max Purchase Price: {format_currency(result.max_purchase_price)}")
    print(f"  - Limited By: {result.binding_constraint.value}")
    print(f"  - Monthly Payment: {format_currency(result.actual_monthly_payment, 2)}")
    print(f"  - Down Payment Status: {result.down_payment_status.value}")
    if result.dti_ratio is not None:
        print(f"  - DTI Ratio: {format_percentage(result.dti_ratio)}")
    for constraint in result.constraints:
        print(f"  ! {constraint}")
    for opportunity in result.opportunities:
        print(f"  + {opportunity}")
    print()

    # Step 3: Trade-offs
    print("Step 3: Toggling ledger items...")
    log = TradeoffLog()
    edits = [
        ("monthly-expenses", "me-2"),
        ("fixed-debts", "fd-3"),
        ("income", "income-2"),
        ("downpayment-sources", "dps-4"),
    ]
    for category_id, item_id in edits:
        before = max_price(store)
        store.toggle_active(category_id, item_id)
        after = max_price(store)
        item = store.snapshot().category(category_id).get_item(item_id)
        log.record(describe_tradeoff(item, before, after, category_id=category_id))
    for entry in log.entries:
        print(f"  - [{entry.impact_category.value}] {entry.message}")
    print()

    # Step 4: Score a listing
    print("Step 4: Scoring a listing...")
    listing = Property(
        address="1204 Barton Hills Dr",
        price=Decimal("425000"),
        city="Austin",
        state="TX",
        hoa_fees=Decimal("45"),
    )
    scored = compute_affordability(build_financial_inputs(store.snapshot()), listing)
    print(f"  - Listing: {listing.address} at {format_currency(listing.price)}")
    print(f"  - Can Afford: {scored.can_afford}")
    print(f"  - Score: {scored.affordability_score}/100")
    print(f"  - Monthly Payment: {format_currency(scored.monthly_payment, 2)}")
    for constraint in scored.constraints:
        print(f"  ! {constraint}")
    for recommendation in scored.recommendations:
        print(f"  + {recommendation}")

    print()
    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
