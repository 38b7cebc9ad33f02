"""Run configuration for the rial_rates pipeline.

All tracked symbols, table headings and endpoints live on a single frozen
:class:`TrackerConfig` that is built once per process and handed to every
component explicitly.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Final, Mapping

FREE_MARKET_LABEL: Final[str] = "Free Market"
CASH_BUY_LABEL: Final[str] = "Cash Buy"
CASH_SELL_LABEL: Final[str] = "Cash Sell"
REMIT_BUY_LABEL: Final[str] = "Remit Buy"
REMIT_SELL_LABEL: Final[str] = "Remit Sell"

CATEGORY_LABELS: Final[tuple[str, ...]] = (
    CASH_BUY_LABEL,
    CASH_SELL_LABEL,
    REMIT_BUY_LABEL,
    REMIT_SELL_LABEL,
)
TRACKED_LABELS: Final[tuple[str, ...]] = (FREE_MARKET_LABEL, *CATEGORY_LABELS)
CHANGE_SUFFIX: Final[str] = " Change"

DEFAULT_SYMBOLS: Final[tuple[str, ...]] = ("USD", "EUR", "AED", "CNY")

# Headings exactly as rendered by fxmarketrate.cbi.ir.
DEFAULT_CATEGORY_HEADINGS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "نرخ خرید": CASH_BUY_LABEL,
        "نرخ فروش": CASH_SELL_LABEL,
        "نرخ خرید حواله": REMIT_BUY_LABEL,
        "نرخ فروش حواله": REMIT_SELL_LABEL,
    }
)

DEFAULT_MARKET_URL: Final[str] = "https://BrsApi.ir/Api/Market/Gold_Currency.php"
DEFAULT_RATE_TABLE_URL: Final[str] = "https://fxmarketrate.cbi.ir/"
DEFAULT_SNAPSHOT_FILENAME: Final[str] = "rates.json"
DEFAULT_TIMEOUT: Final[float] = 30.0
TABLE_VALUE_DIVISOR: Final[int] = 10

BROWSER_USER_AGENT: Final[str] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
)
MARKET_HEADERS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
        "Accept": "application/json",
    }
)
RATE_TABLE_HEADERS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "User-Agent": BROWSER_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "fa-IR,fa;q=0.9,en-US;q=0.5",
    }
)


def change_label(label: str) -> str:
    """Return the output key holding the change indicator for ``label``."""

    return f"{label}{CHANGE_SUFFIX}"


def _default_fragments(symbols: tuple[str, ...]) -> Mapping[str, str]:
    return MappingProxyType({symbol: symbol.lower() for symbol in symbols})


@dataclass(frozen=True)
class TrackerConfig:
    """Immutable settings shared by every stage of a run."""

    symbols: tuple[str, ...] = DEFAULT_SYMBOLS
    slug_fragments: Mapping[str, str] = field(default_factory=dict)
    category_headings: Mapping[str, str] = field(default_factory=lambda: DEFAULT_CATEGORY_HEADINGS)
    market_url: str = DEFAULT_MARKET_URL
    market_api_key: str | None = None
    rate_table_url: str = DEFAULT_RATE_TABLE_URL
    snapshot_path: Path = Path(DEFAULT_SNAPSHOT_FILENAME)
    timeout: float = DEFAULT_TIMEOUT
    table_value_divisor: int = TABLE_VALUE_DIVISOR
    market_headers: Mapping[str, str] = field(default_factory=lambda: MARKET_HEADERS)
    rate_table_headers: Mapping[str, str] = field(default_factory=lambda: RATE_TABLE_HEADERS)

    def __post_init__(self) -> None:
        symbols = tuple(symbol.strip().upper() for symbol in self.symbols if symbol.strip())
        if not symbols:
            raise ValueError("At least one currency symbol must be tracked")
        if not math.isfinite(self.timeout) or self.timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds")
        if self.table_value_divisor <= 0:
            raise ValueError("table_value_divisor must be positive")
        fragments = dict(_default_fragments(symbols))
        for symbol, fragment in dict(self.slug_fragments).items():
            if symbol.upper() in fragments and fragment:
                fragments[symbol.upper()] = fragment.lower()
        # frozen dataclass: normalised values are written through object.__setattr__
        object.__setattr__(self, "symbols", symbols)
        object.__setattr__(self, "slug_fragments", MappingProxyType(fragments))
        object.__setattr__(self, "snapshot_path", Path(self.snapshot_path))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TrackerConfig":
        """Build a config from defaults overridden by ``RIAL_RATES_*`` variables."""

        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}
        if env.get("RIAL_RATES_SYMBOLS"):
            overrides["symbols"] = tuple(env["RIAL_RATES_SYMBOLS"].split(","))
        if env.get("RIAL_RATES_MARKET_URL"):
            overrides["market_url"] = env["RIAL_RATES_MARKET_URL"]
        if env.get("RIAL_RATES_MARKET_API_KEY"):
            overrides["market_api_key"] = env["RIAL_RATES_MARKET_API_KEY"]
        if env.get("RIAL_RATES_TABLE_URL"):
            overrides["rate_table_url"] = env["RIAL_RATES_TABLE_URL"]
        if env.get("RIAL_RATES_SNAPSHOT_PATH"):
            overrides["snapshot_path"] = Path(env["RIAL_RATES_SNAPSHOT_PATH"])
        if env.get("RIAL_RATES_TIMEOUT"):
            raw_timeout = env["RIAL_RATES_TIMEOUT"]
            try:
                overrides["timeout"] = float(raw_timeout)
            except ValueError as exc:
                raise ValueError(f"RIAL_RATES_TIMEOUT must be numeric, got {raw_timeout!r}") from exc
        return cls(**overrides)  # type: ignore[arg-type]

    def with_overrides(self, **changes: object) -> "TrackerConfig":
        """Return a copy with ``changes`` applied, skipping ``None`` values."""

        effective = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **effective) if effective else self


__all__ = [
    "CASH_BUY_LABEL",
    "CASH_SELL_LABEL",
    "CATEGORY_LABELS",
    "CHANGE_SUFFIX",
    "DEFAULT_CATEGORY_HEADINGS",
    "DEFAULT_SYMBOLS",
    "FREE_MARKET_LABEL",
    "REMIT_BUY_LABEL",
    "REMIT_SELL_LABEL",
    "TABLE_VALUE_DIVISOR",
    "TRACKED_LABELS",
    "TrackerConfig",
    "change_label",
]
