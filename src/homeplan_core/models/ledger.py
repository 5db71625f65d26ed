"""Household ledger data models.

This module provides the line-item structures the engine reads:
- Income, expense and informational items with mixed frequencies
- Per-item withholding percentages for gross income entries
- Named categories grouping items (Income, Monthly Expenses, Fixed Debts, ...)
- Mortgage option groups holding financing choices as radio selections

Amounts are always non-negative; whether an amount adds to or subtracts
from cashflow is implied by the item type.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator


class ItemType(str, Enum):
    """Direction of a ledger item."""

    INCOME = "income"
    EXPENSE = "expense"
    INFO = "info"


class Frequency(str, Enum):
    """How often an item's amount recurs."""

    MONTHLY = "monthly"
    ANNUAL = "annual"
    ONE_TIME = "one-time"


FREQUENCY_ALIASES = {
    "monthly": Frequency.MONTHLY,
    "annual": Frequency.ANNUAL,
    "annually": Frequency.ANNUAL,
    "yearly": Frequency.ANNUAL,
    "one-time": Frequency.ONE_TIME,
    "one_time": Frequency.ONE_TIME,
    "onetime": Frequency.ONE_TIME,
}


class IncomeEntry(str, Enum):
    """Whether an income amount was entered before or after withholding."""

    GROSS = "gross"
    NET = "net"


class CategoryType(str, Enum):
    """Presentation hint for a category or option group."""

    DEFAULT = "default"
    INPUT = "input"
    RADIO = "radio"
    SELECT = "select"


class FinancialItem(BaseModel):
    """A single ledger line item.

    Unknown frequency strings are kept as-is rather than rejected; the
    normalizer treats them as monthly and logs a warning.
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "income-1",
                    "label": "Primary salary",
                    "amount": "85000",
                    "item_type": "income",
                    "frequency": "annual",
                    "active": True,
                    "income_entry": "gross",
                    "withholding_tax_pct": "25",
                    "withholding_401k_pct": "5",
                }
            ]
        }
    }

    id: str = Field(description="Stable identifier, unique within its category")
    label: str = Field(description="Display label")
    amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Non-negative amount; direction is implied by item_type",
    )
    item_type: ItemType = Field(description="income, expense or info")
    frequency: Union[Frequency, str] = Field(
        default=Frequency.MONTHLY,
        description="monthly, annual or one-time; other strings are retained and flagged",
    )
    active: bool = Field(default=True, description="Inactive items are excluded from every calculation")
    editable: bool = Field(default=True, description="Whether the user may edit the item")
    value: Optional[Union[str, Decimal]] = Field(
        default=None,
        description="Option value for informational items (e.g. '30' years, '6.85' percent)",
    )

    # Withholding (only meaningful for gross income entries)
    income_entry: Optional[IncomeEntry] = Field(
        default=None,
        description="gross or net; unset is treated as net",
    )
    withholding_tax_pct: Decimal = Field(default=Decimal("0"), ge=0)
    withholding_401k_pct: Decimal = Field(default=Decimal("0"), ge=0)
    withholding_healthcare_pct: Decimal = Field(default=Decimal("0"), ge=0)
    withholding_hsa_pct: Decimal = Field(default=Decimal("0"), ge=0)
    withholding_other_pct: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator(
        "amount",
        "withholding_tax_pct",
        "withholding_401k_pct",
        "withholding_healthcare_pct",
        "withholding_hsa_pct",
        "withholding_other_pct",
        mode="before",
    )
    @classmethod
    def coerce_to_decimal(cls, v):
        """Treat a missing amount as zero and trim string input."""
        if v is None:
            return Decimal("0")
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("frequency", mode="before")
    @classmethod
    def normalize_frequency(cls, v):
        """Map known spellings onto Frequency, keep unknown strings verbatim."""
        if isinstance(v, Frequency):
            return v
        if isinstance(v, str):
            return FREQUENCY_ALIASES.get(v.strip().lower(), v)
        return v

    @computed_field
    @property
    def total_withholding_pct(self) -> Decimal:
        """Sum of all withholding percentages (unclamped)."""
        return (
            self.withholding_tax_pct
            + self.withholding_401k_pct
            + self.withholding_healthcare_pct
            + self.withholding_hsa_pct
            + self.withholding_other_pct
        )

    @property
    def is_gross_income(self) -> bool:
        """True when withholding applies to this item."""
        return self.item_type == ItemType.INCOME and self.income_entry == IncomeEntry.GROSS

    @property
    def has_known_frequency(self) -> bool:
        """True when the frequency is one of the recognized values."""
        return isinstance(self.frequency, Frequency)


class ItemCategory(BaseModel):
    """A named grouping of ledger items.

    Categories are the unit of user-facing organization: Income, Monthly
    Expenses, Annual Expenses, Fixed Debts, Future Income, and so on.
    """

    id: str
    name: str
    type: Optional[CategoryType] = None
    items: list[FinancialItem] = Field(default_factory=list)

    def active_items(self) -> list[FinancialItem]:
        """Items that participate in calculations."""
        return [item for item in self.items if item.active]

    def get_item(self, item_id: str) -> Optional[FinancialItem]:
        """Find an item by id."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class MortgageOptionGroup(ItemCategory):
    """A group of financing choices.

    Radio groups (term length, interest rate) carry the user's selection
    as the single active item.
    """

    type: CategoryType = CategoryType.DEFAULT

    @model_validator(mode="after")
    def check_single_selection(self) -> "MortgageOptionGroup":
        """At most one active item in a radio group."""
        if self.type == CategoryType.RADIO:
            active_count = sum(1 for item in self.items if item.active)
            if active_count > 1:
                raise ValueError(
                    f"Radio group '{self.id}' has {active_count} active options; at most one allowed"
                )
        return self

    def selected_item(self) -> Optional[FinancialItem]:
        """The active option, if any."""
        for item in self.items:
            if item.active:
                return item
        return None


class LedgerSnapshot(BaseModel):
    """Point-in-time copy of the whole ledger.

    ``personal_finances`` holds today's income, expenses and debts;
    ``future_home`` holds income and costs expected after the purchase;
    ``mortgage_options`` holds the financing choices.
    """

    personal_finances: list[ItemCategory] = Field(default_factory=list)
    future_home: list[ItemCategory] = Field(default_factory=list)
    mortgage_options: list[MortgageOptionGroup] = Field(default_factory=list)

    def category(self, category_id: str) -> Optional[ItemCategory]:
        """Find a category or option group by id across all sections."""
        for group in (*self.personal_finances, *self.future_home, *self.mortgage_options):
            if group.id == category_id:
                return group
        return None
