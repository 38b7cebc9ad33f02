"""Ingestion helpers for the CBI foreign exchange market rate tables."""

from __future__ import annotations

import re
from decimal import InvalidOperation

import requests
from bs4 import BeautifulSoup

from rial_rates.config import CATEGORY_LABELS, TrackerConfig
from rial_rates.ingestion.http import fetch
from rial_rates.ingestion.models import RateTableResult
from rial_rates.utils.logger import get_logger
from rial_rates.utils.numbers import parse_grouped_int, scale_and_round

LOGGER = get_logger(__name__)

SOURCE_NAME = "rate table"
ROW_ID_ATTRIBUTES: tuple[str, ...] = ("data-slug", "id")
ROW_VALUE_ATTRIBUTE = "data-price"
LEGACY_CASH_ROWS_SELECTOR = "#MainContent_ViewCashChequeRates_divCash table tbody tr"


def _cell_text(cell) -> str:
    return re.sub(r"\s+", " ", " ".join(cell.stripped_strings)).strip()


def normalise_table_value(raw: object | None, divisor: int) -> int | None:
    """Convert a table value (published in tenths of a rial unit) to an integer.

    Separators and local digits are removed before dividing by ``divisor`` and
    rounding half-up; unreadable values become ``None``.
    """

    parsed = parse_grouped_int(raw)
    if parsed is None:
        return None
    try:
        return scale_and_round(parsed, divisor)
    except InvalidOperation:
        return None


def _own_elements(table, name: str) -> list:
    # Elements of nested tables belong to those tables, not to ``table``.
    return [element for element in table.find_all(name) if element.find_parent("table") is table]


def _table_heading(table) -> str:
    caption = table.find("caption", recursive=False)
    if caption is not None:
        return _cell_text(caption)
    headings = _own_elements(table, "th")
    return _cell_text(headings[0]) if headings else ""


def match_symbol(identifier: str, config: TrackerConfig) -> str | None:
    """Return the tracked symbol whose slug fragment occurs in ``identifier``."""

    lowered = identifier.lower()
    for symbol in config.symbols:
        if config.slug_fragments[symbol] in lowered:
            return symbol
    return None


def _row_identifier(row) -> str | None:
    for attribute in ROW_ID_ATTRIBUTES:
        value = row.get(attribute)
        if value:
            return str(value)
    return None


def _row_value(row) -> str | None:
    attribute_value = row.get(ROW_VALUE_ATTRIBUTE)
    if attribute_value is not None:
        return str(attribute_value)
    cells = row.find_all("td", recursive=False)
    if not cells:
        return None
    return _cell_text(cells[-1])


def parse_rate_tables(html: str, config: TrackerConfig) -> RateTableResult:
    """Parse the labelled rate tables of the CBI page.

    Every ``<table>`` is keyed by its caption (or first header cell). Only the
    configured category headings are read; rows are attributed to a currency by
    substring match on their ``data-slug`` (or ``id``) attribute, and later rows
    overwrite earlier ones for the same currency and label. Pages without any
    recognised table fall back to :func:`parse_legacy_cash_table`.
    """

    soup = BeautifulSoup(html, "html.parser")
    result = RateTableResult()
    labels: list[str] = []
    for table in soup.find_all("table"):
        label = config.category_headings.get(_table_heading(table))
        if label is None:
            continue
        if label not in labels:
            labels.append(label)
        for row in _own_elements(table, "tr"):
            identifier = _row_identifier(row)
            if identifier is None:
                continue
            symbol = match_symbol(identifier, config)
            if symbol is None:
                continue
            raw_value = _row_value(row)
            value = normalise_table_value(raw_value, config.table_value_divisor)
            if value is None:
                LOGGER.warning("Unreadable %s value %r for %s", label, raw_value, symbol)
            bucket = result.rates.setdefault(symbol, {})
            if label in bucket:
                LOGGER.debug("Duplicate %s row for %s; keeping the later one", label, symbol)
            bucket[label] = value

    if not labels:
        legacy = parse_legacy_cash_table(soup, config)
        if legacy.labels:
            LOGGER.info("No labelled rate tables found; read the legacy cash table instead")
            return legacy
        LOGGER.warning("No recognised rate tables found in %s page", SOURCE_NAME)
    result.labels = tuple(labels)
    return result


def parse_legacy_cash_table(html: str | BeautifulSoup, config: TrackerConfig) -> RateTableResult:
    """Read the older single-table CBI layout.

    Rows carry the currency code in the second cell followed by cash buy, cash
    sell, remittance buy and remittance sell columns.
    """

    soup = html if isinstance(html, BeautifulSoup) else BeautifulSoup(html, "html.parser")
    rows = soup.select(LEGACY_CASH_ROWS_SELECTOR)
    result = RateTableResult()
    if not rows:
        return result
    result.labels = CATEGORY_LABELS
    for row in rows:
        cells = row.find_all("td")
        if len(cells) < 6:
            continue
        code = _cell_text(cells[1]).upper()
        if code not in config.symbols:
            continue
        result.rates[code] = {
            label: normalise_table_value(_cell_text(cell), config.table_value_divisor)
            for label, cell in zip(CATEGORY_LABELS, cells[2:6])
        }
    return result


def fetch_rate_table_html(config: TrackerConfig, *, session: requests.Session | None = None) -> str:
    """Download the rate table page and return its HTML text."""

    response = fetch(
        config.rate_table_url,
        source=SOURCE_NAME,
        headers=config.rate_table_headers,
        timeout=config.timeout,
        session=session,
    )
    LOGGER.info("Fetched %s page from %s", SOURCE_NAME, config.rate_table_url)
    return response.text


__all__ = [
    "SOURCE_NAME",
    "fetch_rate_table_html",
    "match_symbol",
    "normalise_table_value",
    "parse_legacy_cash_table",
    "parse_rate_tables",
]
