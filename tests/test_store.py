"""Tests for the in-memory ledger store."""

from decimal import Decimal

import pytest

from homeplan_core.exceptions import InvalidInputError, LedgerError
from homeplan_core.models import FinancialItem, Frequency, ItemType
from homeplan_core.mortgage_terms import INTEREST_RATE_GROUP, TERM_LENGTH_GROUP, resolve_terms
from homeplan_core.sources import StaticRateSource
from homeplan_core.store import LedgerStore


@pytest.fixture
def store(seed_snapshot) -> LedgerStore:
    return LedgerStore(seed_snapshot)


def _item(store: LedgerStore, category_id: str, item_id: str) -> FinancialItem:
    return store.snapshot().category(category_id).get_item(item_id)


class TestSnapshot:
    def test_snapshot_is_a_copy(self, store):
        snapshot = store.snapshot()
        snapshot.category("monthly-expenses").items[0].active = True

        assert _item(store, "monthly-expenses", "me-1").active is False

    def test_store_copies_initial_snapshot(self, seed_snapshot):
        store = LedgerStore(seed_snapshot)
        store.toggle_active("monthly-expenses", "me-1")

        assert seed_snapshot.category("monthly-expenses").get_item("me-1").active is False

    def test_empty_store(self):
        store = LedgerStore()
        assert store.snapshot().personal_finances == []
        assert store.revision == 0

    def test_with_defaults(self):
        store = LedgerStore.with_defaults(StaticRateSource(Decimal("7")))
        terms = resolve_terms(store.snapshot().mortgage_options)
        assert terms.interest_rate == Decimal("7")

    def test_with_defaults_uses_configured_spread(self, monkeypatch):
        monkeypatch.setenv("HOMEPLAN_AFFORDABILITY_RATE_OPTION_SPREAD", "0.5")
        store = LedgerStore.with_defaults(StaticRateSource(Decimal("6")))
        rates = store.snapshot().category(INTEREST_RATE_GROUP)
        assert [item.value for item in rates.items] == ["5.50", "6.00", "6.50"]


class TestEdits:
    """Test suite for ledger edits."""

    def test_toggle_active(self, store):
        assert store.toggle_active("monthly-expenses", "me-2") is True
        assert _item(store, "monthly-expenses", "me-2").active is True
        assert store.toggle_active("monthly-expenses", "me-2") is False
        assert store.revision == 2

    def test_set_amount_from_text(self, store):
        value = store.set_amount("income", "income-1", "$90,000")

        assert value == Decimal("90000")
        assert _item(store, "income", "income-1").amount == Decimal("90000")

    def test_set_amount_invalid_leaves_ledger_unchanged(self, store):
        with pytest.raises(InvalidInputError):
            store.set_amount("income", "income-1", "ninety thousand")

        assert _item(store, "income", "income-1").amount == Decimal("85000")
        assert store.revision == 0

    def test_add_and_remove(self, store):
        bonus = FinancialItem(
            id="income-9",
            label="Bonus",
            amount=Decimal("5000"),
            item_type=ItemType.INCOME,
            frequency=Frequency.ANNUAL,
        )
        store.add_item("income", bonus)
        assert _item(store, "income", "income-9").label == "Bonus"

        removed = store.remove_item("income", "income-9")
        assert removed.id == "income-9"
        assert _item(store, "income", "income-9") is None

    def test_duplicate_item_rejected(self, store):
        existing = _item(store, "income", "income-1")
        with pytest.raises(LedgerError):
            store.add_item("income", existing)

    @pytest.mark.parametrize(
        "category_id,item_id",
        [("no-such-category", "me-1"), ("monthly-expenses", "me-99")],
    )
    def test_unknown_target(self, store, category_id, item_id):
        with pytest.raises(LedgerError) as exc_info:
            store.toggle_active(category_id, item_id)
        assert exc_info.value.details["category_id"] == category_id


class TestSelections:
    """Test suite for radio group handling."""

    def test_select_option(self, store):
        store.select_option(TERM_LENGTH_GROUP, "tl-1")

        terms = resolve_terms(store.snapshot().mortgage_options)
        assert terms.loan_term_years == 15
        group = store.snapshot().category(TERM_LENGTH_GROUP)
        assert [item.id for item in group.items if item.active] == ["tl-1"]

    def test_second_radio_selection_rejected(self, store):
        """Toggling on a second rate would leave two selected."""
        with pytest.raises(LedgerError):
            store.toggle_active(INTEREST_RATE_GROUP, "ir-1")

        assert _item(store, INTEREST_RATE_GROUP, "ir-1").active is False

    def test_select_requires_selection_group(self, store):
        with pytest.raises(LedgerError):
            store.select_option("monthly-expenses", "me-1")

    def test_select_unknown_option(self, store):
        with pytest.raises(LedgerError):
            store.select_option(INTEREST_RATE_GROUP, "ir-9")
