"""Data models shared across ingestion and reconciliation modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from rial_rates.config import (
    CASH_BUY_LABEL,
    CASH_SELL_LABEL,
    FREE_MARKET_LABEL,
    REMIT_BUY_LABEL,
    REMIT_SELL_LABEL,
)

# ``None`` is the missing-value marker for every numeric field.
RateValues = Dict[str, Optional[int]]
Snapshot = Dict[str, RateValues]

_LABEL_FIELDS: Mapping[str, str] = {
    FREE_MARKET_LABEL: "free_market",
    CASH_BUY_LABEL: "cash_buy",
    CASH_SELL_LABEL: "cash_sell",
    REMIT_BUY_LABEL: "remit_buy",
    REMIT_SELL_LABEL: "remit_sell",
}


@dataclass(slots=True, frozen=True)
class RawQuote:
    """A single free-market quote as returned by the market data API."""

    symbol: str
    price: object | None
    name: str | None = None


@dataclass(slots=True, frozen=True)
class CurrencyRecord:
    """Canonical per-currency values for the current run."""

    symbol: str
    free_market: int | None = None
    cash_buy: int | None = None
    cash_sell: int | None = None
    remit_buy: int | None = None
    remit_sell: int | None = None
    name: str | None = None

    def value(self, label: str) -> int | None:
        """Return the value stored under the canonical output ``label``."""

        try:
            attribute = _LABEL_FIELDS[label]
        except KeyError:
            raise KeyError(f"Unknown rate label: {label!r}") from None
        return getattr(self, attribute)

    def values(self) -> RateValues:
        return {label: getattr(self, attribute) for label, attribute in _LABEL_FIELDS.items()}

    @classmethod
    def from_values(
        cls, symbol: str, values: Mapping[str, int | None], *, name: str | None = None
    ) -> "CurrencyRecord":
        kwargs = {
            attribute: values.get(label)
            for label, attribute in _LABEL_FIELDS.items()
            if label in values
        }
        return cls(symbol=symbol, name=name, **kwargs)


@dataclass(slots=True)
class RateTableResult:
    """Values extracted from the rate table page.

    ``rates`` maps currency code to ``{label: value}``; ``labels`` lists the
    canonical labels whose table heading was recognised, in page order.
    """

    rates: dict[str, RateValues] = field(default_factory=dict)
    labels: tuple[str, ...] = ()

    def for_symbol(self, symbol: str) -> RateValues:
        return dict(self.rates.get(symbol, {}))


__all__ = ["CurrencyRecord", "RateTableResult", "RateValues", "RawQuote", "Snapshot"]
