"""Tests for mortgage term selection and rate options."""

from decimal import Decimal

import pytest

from homeplan_core.exceptions import InvalidInputError, UnresolvedRateError, UnresolvedTermError, UnresolvedTermsError
from homeplan_core.models import CategoryType, FinancialItem, ItemType, MortgageOptionGroup
from homeplan_core.mortgage_terms import (
    INTEREST_RATE_GROUP,
    TERM_LENGTH_GROUP,
    estimate_interest_rate,
    generate_rate_options,
    generate_term_options,
    resolve_interest_rate,
    resolve_loan_term,
    resolve_terms,
)


def _radio(group_id: str, *options: tuple[str, str, bool]) -> MortgageOptionGroup:
    return MortgageOptionGroup(
        id=group_id,
        name=group_id,
        type=CategoryType.RADIO,
        items=[
            FinancialItem(id=item_id, label=value, value=value, item_type=ItemType.INFO, active=active)
            for item_id, value, active in options
        ],
    )


class TestGenerateRateOptions:
    """Test suite for generate_rate_options."""

    def test_three_options_around_reference(self):
        group = generate_rate_options(Decimal("6.85"))

        assert group.id == INTEREST_RATE_GROUP
        assert group.type == CategoryType.RADIO
        assert [item.value for item in group.items] == ["6.65", "6.85", "7.05"]
        assert [item.label for item in group.items] == ["6.65%", "6.85%", "7.05%"]
        assert group.selected_item().id == "ir-2"

    def test_custom_spread_and_selection(self):
        group = generate_rate_options(Decimal("6"), spread=Decimal("0.5"), selected="lower")
        assert [item.value for item in group.items] == ["5.50", "6.00", "6.50"]
        assert group.selected_item().value == "5.50"

    def test_spread_from_environment(self, monkeypatch):
        monkeypatch.setenv("HOMEPLAN_AFFORDABILITY_RATE_OPTION_SPREAD", "0.5")
        group = generate_rate_options(Decimal("6"))
        assert [item.value for item in group.items] == ["5.50", "6.00", "6.50"]

    def test_negative_options_dropped(self):
        group = generate_rate_options(Decimal("0.1"))
        assert [item.value for item in group.items] == ["0.10", "0.30"]

    def test_out_of_range_reference_rejected(self):
        with pytest.raises(InvalidInputError):
            generate_rate_options(Decimal("25"))

    def test_unknown_selection_rejected(self):
        with pytest.raises(InvalidInputError):
            generate_rate_options(Decimal("6.85"), selected="middle")


class TestGenerateTermOptions:
    def test_default_terms(self):
        group = generate_term_options()
        assert [item.value for item in group.items] == ["15", "20", "30"]
        assert group.selected_item().label == "30 Years"


class TestResolveTerms:
    """Test suite for term and rate resolution."""

    def test_resolves_seed_ledger(self, seed_snapshot):
        terms = resolve_terms(seed_snapshot.mortgage_options)

        assert terms.interest_rate == Decimal("6.85")
        assert terms.loan_term_years == 30
        assert terms.down_payment_percentage == Decimal("20")
        assert terms.down_payment_sources_total == Decimal("43000")

    def test_rate_parsed_from_percent_label(self):
        groups = [_radio(INTEREST_RATE_GROUP, ("ir-1", "6.5%", True))]
        assert resolve_interest_rate(groups) == Decimal("6.5")

    def test_term_parsed_from_years_label(self):
        groups = [_radio(TERM_LENGTH_GROUP, ("tl-1", "15 Years", True))]
        assert resolve_loan_term(groups) == 15

    def test_missing_rate_group_raises(self):
        with pytest.raises(UnresolvedRateError):
            resolve_interest_rate([])

    def test_no_selected_rate_raises(self):
        """A missing selection is never defaulted."""
        groups = [_radio(INTEREST_RATE_GROUP, ("ir-1", "6.5", False))]
        with pytest.raises(UnresolvedRateError):
            resolve_interest_rate(groups)

    @pytest.mark.parametrize("raw", ["abc", "NaN", "Infinity", "25", "-1"])
    def test_invalid_rate_raises(self, raw: str):
        groups = [_radio(INTEREST_RATE_GROUP, ("ir-1", raw, True))]
        with pytest.raises(UnresolvedRateError) as exc_info:
            resolve_interest_rate(groups)
        assert exc_info.value.details["group_id"] == INTEREST_RATE_GROUP

    @pytest.mark.parametrize("raw", ["thirty", "0", "12.5"])
    def test_invalid_term_raises(self, raw: str):
        groups = [_radio(TERM_LENGTH_GROUP, ("tl-1", raw, True))]
        with pytest.raises(UnresolvedTermError):
            resolve_loan_term(groups)

    def test_resolve_terms_requires_term(self):
        groups = [_radio(INTEREST_RATE_GROUP, ("ir-1", "6.5", True))]
        with pytest.raises(UnresolvedTermsError):
            resolve_terms(groups)

    def test_down_payment_optional(self):
        groups = [
            _radio(INTEREST_RATE_GROUP, ("ir-1", "6.5", True)),
            _radio(TERM_LENGTH_GROUP, ("tl-1", "30", True)),
        ]
        terms = resolve_terms(groups)
        assert terms.down_payment_percentage is None
        assert terms.down_payment_sources_total == Decimal("0")


class TestEstimateInterestRate:
    """Test suite for estimate_interest_rate."""

    def test_prime_borrower_gets_discount(self):
        assert estimate_interest_rate(780, 30, Decimal("20"), Decimal("6.85")) == Decimal("6.625")

    def test_adjustments_stack(self):
        # 6.85 + 0.375 (680-719) - 0.375 (20y) + 0.25 (<15% down) = 7.1 -> 7.125
        assert estimate_interest_rate(700, 20, Decimal("10"), Decimal("6.85")) == Decimal("7.125")

    def test_rounded_to_eighth(self):
        rate = estimate_interest_rate(740, 30, Decimal("20"), Decimal("6.8"))
        assert (rate * 8) == (rate * 8).to_integral_value()

    def test_never_negative(self):
        assert estimate_interest_rate(800, 15, Decimal("25"), Decimal("0.1")) == Decimal("0")
