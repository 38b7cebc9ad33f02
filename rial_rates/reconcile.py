"""Assemble canonical per-currency records from both rate sources."""

from __future__ import annotations

from typing import Mapping

from rial_rates.config import FREE_MARKET_LABEL, TrackerConfig
from rial_rates.ingestion.models import CurrencyRecord, RateTableResult, RawQuote
from rial_rates.utils.logger import get_logger
from rial_rates.utils.numbers import coerce_number

LOGGER = get_logger(__name__)


def coerce_market_price(price: object | None) -> int | None:
    """Round a numeric market price; anything else is a missing value."""

    return coerce_number(price)


def assemble_records(
    quotes: Mapping[str, RawQuote],
    table: RateTableResult,
    config: TrackerConfig,
) -> dict[str, CurrencyRecord]:
    """Build one record for every tracked symbol, in configuration order.

    A symbol absent from either source keeps ``None`` for the fields that
    source would have supplied.
    """

    records: dict[str, CurrencyRecord] = {}
    for symbol in config.symbols:
        quote = quotes.get(symbol)
        values = table.for_symbol(symbol)
        values[FREE_MARKET_LABEL] = coerce_market_price(quote.price) if quote else None
        if quote is None and not table.rates.get(symbol):
            LOGGER.warning("Neither source supplied data for %s", symbol)
        records[symbol] = CurrencyRecord.from_values(
            symbol, values, name=quote.name if quote else None
        )
    return records


__all__ = ["assemble_records", "coerce_market_price"]
