"""Pluggable data sources consumed by the engine.

The engine never computes or hardcodes a market rate or a tax rate; it
asks a collaborator. These protocols define the contracts, using
structural subtyping so any object with matching methods is compatible.

Example Usage:
    ```python
    class FredRateSource:
        def reference_rate(self) -> Decimal:
            return fetch_latest_30yr_fixed()

    options = generate_rate_options(FredRateSource().reference_rate())
    ```
"""

from decimal import Decimal
from typing import Optional, Protocol, runtime_checkable

from .config import EngineConfig
from .exceptions import ConfigurationError
from .tax_rates import DEFAULT_PROPERTY_TAX_RATE, PROPERTY_TAX_RATES, get_property_tax_rate


@runtime_checkable
class RateSource(Protocol):
    """Supplies today's reference mortgage rate (annual percent)."""

    def reference_rate(self) -> Decimal:
        """Return the reference rate, e.g. Decimal('6.85')."""
        ...


@runtime_checkable
class PropertyTaxRateSource(Protocol):
    """Maps a location key to an annual property tax rate."""

    def tax_rate_for(self, location: Optional[str]) -> Decimal:
        """Return the annual tax rate as a fraction of price."""
        ...


class StaticRateSource:
    """Rate source returning a fixed, caller-supplied rate."""

    def __init__(self, rate: Decimal):
        if rate < 0:
            raise ConfigurationError(
                "Reference rate cannot be negative",
                config_key="reference_rate",
                expected="Non-negative annual rate in percent",
                actual=rate,
            )
        self._rate = Decimal(rate)

    def reference_rate(self) -> Decimal:
        return self._rate

    @classmethod
    def from_config(cls, config: EngineConfig) -> "StaticRateSource":
        """Build from HOMEPLAN_REFERENCE_RATE."""
        if config.reference_rate is None:
            raise ConfigurationError(
                "No reference rate configured",
                config_key="HOMEPLAN_REFERENCE_RATE",
                expected="Annual rate in percent, e.g. 6.85",
            )
        return cls(config.reference_rate)


class TablePropertyTaxRateSource:
    """Tax rate source backed by a location-keyed table.

    Unknown locations get ``default_rate``.
    """

    def __init__(
        self,
        table: Optional[dict[str, Decimal]] = None,
        default_rate: Decimal = DEFAULT_PROPERTY_TAX_RATE,
    ):
        self.table = dict(PROPERTY_TAX_RATES if table is None else table)
        self.default_rate = default_rate

    def tax_rate_for(self, location: Optional[str]) -> Decimal:
        return get_property_tax_rate(location, default=self.default_rate, table=self.table)
