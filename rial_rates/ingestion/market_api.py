"""Free-market quotes from the BrsApi gold/currency endpoint."""

from __future__ import annotations

from typing import Any, Iterable

import requests

from rial_rates.config import TrackerConfig
from rial_rates.ingestion.http import SourceFetchError, fetch
from rial_rates.ingestion.models import RawQuote
from rial_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)

SOURCE_NAME = "market API"


def parse_market_payload(payload: Any, symbols: Iterable[str]) -> dict[str, RawQuote]:
    """Pick the tracked symbols out of a decoded market API body.

    The body is expected to be an object with a ``currency`` list of
    ``{"symbol", "price", "name_en"}`` entries. A missing list simply yields no
    quotes; a body that is not an object at all is rejected.
    """

    if not isinstance(payload, dict):
        raise SourceFetchError(
            f"{SOURCE_NAME} returned {type(payload).__name__}, expected a JSON object",
            source=SOURCE_NAME,
        )
    tracked = set(symbols)
    entries = payload.get("currency")
    if not isinstance(entries, list):
        LOGGER.warning("%s payload has no currency list; free-market values will be empty", SOURCE_NAME)
        return {}

    quotes: dict[str, RawQuote] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        raw_symbol = entry.get("symbol")
        if not isinstance(raw_symbol, str) or not raw_symbol.strip():
            continue
        symbol = raw_symbol.strip().upper()
        if symbol not in tracked:
            continue
        name = entry.get("name_en")
        quotes[symbol] = RawQuote(
            symbol=symbol,
            price=entry.get("price"),
            name=name if isinstance(name, str) else None,
        )
    return quotes


def fetch_market_quotes(
    config: TrackerConfig, *, session: requests.Session | None = None
) -> dict[str, RawQuote]:
    """Download the market API body and return quotes for tracked symbols."""

    params = {"key": config.market_api_key} if config.market_api_key else None
    response = fetch(
        config.market_url,
        source=SOURCE_NAME,
        headers=config.market_headers,
        timeout=config.timeout,
        params=params,
        session=session,
    )
    try:
        payload = response.json()
    except ValueError as exc:
        raise SourceFetchError(
            f"{SOURCE_NAME} returned a body that is not valid JSON: {exc}",
            source=SOURCE_NAME,
            url=config.market_url,
            status_code=response.status_code,
        ) from exc
    quotes = parse_market_payload(payload, config.symbols)
    LOGGER.info("Fetched %s free-market quotes from %s", len(quotes), SOURCE_NAME)
    return quotes


__all__ = ["SOURCE_NAME", "fetch_market_quotes", "parse_market_payload"]
