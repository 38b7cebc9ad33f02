from __future__ import annotations

import pytest
import requests

from rial_rates.config import TrackerConfig
from rial_rates.ingestion.http import SourceFetchError
from rial_rates.ingestion.rate_table import (
    fetch_rate_table_html,
    match_symbol,
    normalise_table_value,
    parse_legacy_cash_table,
    parse_rate_tables,
)

from conftest import FakeResponse, FakeSession

LABELLED_PAGE = """
<html><body>
<table>
    <thead><tr><th>نرخ خرید</th></tr></thead>
    <tbody>
        <tr data-slug="usd-cash-buy" data-price="1,234,567"><td>دلار</td><td>1,234,567</td></tr>
        <tr data-slug="eur-cash-buy"><td>یورو</td><td>1,400,005</td></tr>
        <tr data-slug="gbp-cash-buy" data-price="1,700,000"><td>پوند</td></tr>
    </tbody>
</table>
<table>
    <caption>نرخ فروش حواله</caption>
    <tr data-slug="usdx-remit" data-price="12345"><td>12345</td></tr>
    <tr data-slug="aed-remit" data-price="n/a"><td>n/a</td></tr>
</table>
<table>
    <thead><tr><th>Gold coins</th></tr></thead>
    <tr data-slug="usd-coin" data-price="999999"><td>999999</td></tr>
</table>
</body></html>
"""


def test_parse_rate_tables_reads_recognised_headings() -> None:
    result = parse_rate_tables(LABELLED_PAGE, TrackerConfig())

    assert result.labels == ("Cash Buy", "Remit Sell")
    assert result.rates["USD"] == {"Cash Buy": 123457, "Remit Sell": 1235}
    assert result.rates["EUR"] == {"Cash Buy": 140001}
    assert result.rates["AED"] == {"Remit Sell": None}
    assert "GBP" not in result.rates
    assert "CNY" not in result.rates


def test_unrecognised_heading_contributes_nothing() -> None:
    html = """
    <table>
        <tr><th>Cash Buy</th></tr>
        <tr data-slug="usd" data-price="1000"><td>1000</td></tr>
    </table>
    """

    result = parse_rate_tables(html, TrackerConfig())

    assert result.labels == ()
    assert result.rates == {}


def test_slug_matching_uses_containment() -> None:
    config = TrackerConfig()

    assert match_symbol("usdx", config) == "USD"
    assert match_symbol("Price-EUR-Cash", config) == "EUR"
    assert match_symbol("gbp", config) is None


def test_duplicate_rows_last_one_wins() -> None:
    html = """
    <table>
        <tr><th>نرخ فروش</th></tr>
        <tr data-slug="cny-1" data-price="2000"><td>2000</td></tr>
        <tr data-slug="cny-2" data-price="3000"><td>3000</td></tr>
    </table>
    """

    result = parse_rate_tables(html, TrackerConfig())

    assert result.rates["CNY"] == {"Cash Sell": 300}


def test_row_id_is_used_when_slug_missing() -> None:
    html = """
    <table>
        <tr><th>نرخ خرید حواله</th></tr>
        <tr id="row-aed"><td>AED</td><td>۱۲٬۵۴۰</td></tr>
    </table>
    """

    result = parse_rate_tables(html, TrackerConfig())

    assert result.rates["AED"] == {"Remit Buy": 1254}


def test_parsing_is_deterministic() -> None:
    config = TrackerConfig()

    first = parse_rate_tables(LABELLED_PAGE, config)
    second = parse_rate_tables(LABELLED_PAGE, config)

    assert first.rates == second.rates
    assert first.labels == second.labels


def test_page_without_tables_is_not_an_error() -> None:
    result = parse_rate_tables("<html><body><p>maintenance</p></body></html>", TrackerConfig())

    assert result.rates == {}
    assert result.labels == ()


@pytest.mark.parametrize(
    "raw, expected",
    [("12345", 1235), ("12344", 1234), ("1,000,000", 100000), ("", None), ("12.5", None)],
)
def test_normalise_table_value(raw, expected) -> None:
    assert normalise_table_value(raw, 10) == expected


LEGACY_PAGE = """
<div id="MainContent_ViewCashChequeRates_divCash">
<table>
    <thead><tr><th>#</th><th>Code</th><th>Buy</th><th>Sell</th><th>Remit buy</th><th>Remit sell</th></tr></thead>
    <tbody>
        <tr><td>1</td><td>usd</td><td>420,000</td><td>430,005</td><td>415,000</td><td></td></tr>
        <tr><td>2</td><td>JPY</td><td>3,000</td><td>3,100</td><td>2,900</td><td>3,200</td></tr>
        <tr><td>3</td><td>EUR</td><td>450,000</td></tr>
    </tbody>
</table>
</div>
"""


def test_parse_legacy_cash_table_reads_fixed_columns() -> None:
    result = parse_legacy_cash_table(LEGACY_PAGE, TrackerConfig())

    assert result.labels == ("Cash Buy", "Cash Sell", "Remit Buy", "Remit Sell")
    assert result.rates == {
        "USD": {"Cash Buy": 42000, "Cash Sell": 43001, "Remit Buy": 41500, "Remit Sell": None}
    }


def test_parse_rate_tables_falls_back_to_legacy_layout() -> None:
    result = parse_rate_tables(LEGACY_PAGE, TrackerConfig())

    assert result.rates["USD"]["Cash Buy"] == 42000


def test_fetch_rate_table_html_returns_text() -> None:
    config = TrackerConfig(rate_table_url="https://example.test/")
    session = FakeSession(FakeResponse(text="<html></html>"))

    html = fetch_rate_table_html(config, session=session)  # type: ignore[arg-type]

    assert html == "<html></html>"
    assert session.calls[0]["url"] == "https://example.test/"
    assert session.calls[0]["headers"]["Accept-Language"].startswith("fa-IR")
    assert session.calls[0]["timeout"] == config.timeout


def test_fetch_rate_table_html_rejects_error_status() -> None:
    session = FakeSession(FakeResponse(status_code=503, text="down"))

    with pytest.raises(SourceFetchError) as excinfo:
        fetch_rate_table_html(TrackerConfig(), session=session)  # type: ignore[arg-type]

    assert excinfo.value.status_code == 503


def test_fetch_rate_table_html_wraps_network_errors() -> None:
    session = FakeSession(requests.ConnectionError("refused"))

    with pytest.raises(SourceFetchError, match="refused"):
        fetch_rate_table_html(TrackerConfig(), session=session)  # type: ignore[arg-type]


WRAPPED_PAGE = """
<table class="layout">
    <tr><td>
        <table>
            <caption>نرخ خرید</caption>
            <tr data-slug="usd-buy" data-price="3000"><td>3000</td></tr>
        </table>
    </td></tr>
    <tr><td>
        <table>
            <caption>نرخ فروش</caption>
            <tr data-slug="usd-sell" data-price="3000"><td>3000</td></tr>
            <tr data-slug="eur-sell" data-price="3000"><td>3000</td></tr>
        </table>
    </td></tr>
</table>
"""


def test_nested_tables_keep_their_own_rows() -> None:
    result = parse_rate_tables(WRAPPED_PAGE, TrackerConfig())

    assert result.labels == ("Cash Buy", "Cash Sell")
    assert result.rates["USD"] == {"Cash Buy": 300, "Cash Sell": 300}
    assert result.rates["EUR"] == {"Cash Sell": 300}


def test_outer_table_does_not_borrow_inner_header() -> None:
    page = """
    <table>
        <tr><td><table><tr><th>نرخ خرید</th></tr></table></td></tr>
        <tr data-slug="usd-outer" data-price="5000"><td>5000</td></tr>
    </table>
    """

    result = parse_rate_tables(page, TrackerConfig())

    assert result.labels == ("Cash Buy",)
    assert result.rates == {}


def test_oversized_price_is_unreadable() -> None:
    page = f"""
    <table>
        <caption>نرخ خرید</caption>
        <tr data-slug="usd-buy" data-price="{'9' * 5000}"><td></td></tr>
    </table>
    """

    result = parse_rate_tables(page, TrackerConfig())

    assert result.rates["USD"] == {"Cash Buy": None}
