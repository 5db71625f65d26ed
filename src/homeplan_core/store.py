"""In-memory ledger store.

Holds the household's categories and mortgage option groups and applies
edits to them. Readers only ever receive deep copies through
``snapshot()``, so a snapshot handed to the solver never changes under it.
"""

from decimal import Decimal
from typing import Any, Optional

import structlog

from .defaults import default_snapshot
from .exceptions import LedgerError
from .models.ledger import CategoryType, FinancialItem, ItemCategory, LedgerSnapshot
from .sources import RateSource
from .validation import parse_amount

logger = structlog.get_logger()

SELECTION_TYPES = (CategoryType.RADIO, CategoryType.SELECT)


class LedgerStore:
    """
    Mutable home for the ledger.

    Every edit is addressed by category (or option group) id and item id.
    Edits that reference a missing category or item, or that would leave
    a radio group with two selections, raise LedgerError and leave the
    ledger unchanged.

    Example:
        store = LedgerStore.with_defaults(StaticRateSource(Decimal("6.85")))
        store.toggle_active("monthly-expenses", "me-2")
        inputs = build_financial_inputs(store.snapshot())
    """

    def __init__(self, snapshot: Optional[LedgerSnapshot] = None):
        self._ledger = snapshot.model_copy(deep=True) if snapshot is not None else LedgerSnapshot()
        self.revision = 0

    @classmethod
    def with_defaults(cls, rate_source: RateSource, spread: Optional[Decimal] = None) -> "LedgerStore":
        """Seed a store with the default ledger around today's reference rate.

        ``spread`` falls back to HOMEPLAN_AFFORDABILITY_RATE_OPTION_SPREAD.
        """
        return cls(default_snapshot(rate_source.reference_rate(), spread=spread))

    def snapshot(self) -> LedgerSnapshot:
        """Deep copy of the current ledger."""
        return self._ledger.model_copy(deep=True)

    def _category(self, category_id: str) -> ItemCategory:
        category = self._ledger.category(category_id)
        if category is None:
            raise LedgerError(f"Unknown category '{category_id}'", category_id=category_id)
        return category

    def _index(self, category: ItemCategory, item_id: str) -> int:
        for index, item in enumerate(category.items):
            if item.id == item_id:
                return index
        raise LedgerError(
            f"Unknown item '{item_id}' in '{category.id}'",
            category_id=category.id,
            item_id=item_id,
        )

    def _check_selection(self, category: ItemCategory, activating: FinancialItem) -> None:
        """Reject a second active item in a radio group."""
        if category.type != CategoryType.RADIO or not activating.active:
            return
        for item in category.items:
            if item.active and item.id != activating.id:
                raise LedgerError(
                    f"'{category.id}' already has '{item.id}' selected; use select_option",
                    category_id=category.id,
                    item_id=activating.id,
                )

    def _commit(self, event: str, category_id: str, item_id: str, **fields: Any) -> None:
        self.revision += 1
        logger.info(event, category_id=category_id, item_id=item_id, revision=self.revision, **fields)

    def add_item(self, category_id: str, item: FinancialItem) -> None:
        """Append an item to a category."""
        category = self._category(category_id)
        if category.get_item(item.id) is not None:
            raise LedgerError(
                f"Item '{item.id}' already exists in '{category_id}'",
                category_id=category_id,
                item_id=item.id,
            )
        self._check_selection(category, item)
        category.items.append(item.model_copy(deep=True))
        self._commit("ledger_item_added", category_id, item.id)

    def remove_item(self, category_id: str, item_id: str) -> FinancialItem:
        """Remove an item and return it."""
        category = self._category(category_id)
        removed = category.items.pop(self._index(category, item_id))
        self._commit("ledger_item_removed", category_id, item_id)
        return removed

    def toggle_active(self, category_id: str, item_id: str) -> bool:
        """Flip an item's active flag and return the new value.

        In a radio group an item can only be switched on when nothing else
        is selected.
        """
        category = self._category(category_id)
        index = self._index(category, item_id)
        updated = category.items[index].model_copy(update={"active": not category.items[index].active})
        self._check_selection(category, updated)
        category.items[index] = updated
        self._commit("ledger_item_toggled", category_id, item_id, active=updated.active)
        return updated.active

    def set_amount(self, category_id: str, item_id: str, amount: Any) -> Decimal:
        """Set an item's amount from a number or user-entered text.

        Raises:
            InvalidInputError: the amount is blank, non-numeric or negative
        """
        category = self._category(category_id)
        index = self._index(category, item_id)
        value = parse_amount(amount, field=f"{category_id}.{item_id}.amount")
        category.items[index] = category.items[index].model_copy(update={"amount": value})
        self._commit("ledger_amount_set", category_id, item_id, amount=str(value))
        return value

    def select_option(self, group_id: str, item_id: str) -> None:
        """Make one option the single active choice in a radio or select group."""
        category = self._category(group_id)
        if category.type not in SELECTION_TYPES:
            raise LedgerError(
                f"'{group_id}' is not a selection group",
                category_id=group_id,
                item_id=item_id,
            )
        self._index(category, item_id)
        category.items = [
            item.model_copy(update={"active": item.id == item_id}) for item in category.items
        ]
        self._commit("ledger_option_selected", group_id, item_id)
