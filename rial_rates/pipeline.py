"""Fetch, reconcile and diff currency rates, then persist the snapshot."""

from __future__ import annotations

import argparse
import sys
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Sequence

from rial_rates.config import TrackerConfig
from rial_rates.diff import build_document
from rial_rates.ingestion.http import SourceFetchError
from rial_rates.ingestion.market_api import fetch_market_quotes
from rial_rates.ingestion.models import RawQuote
from rial_rates.ingestion.rate_table import fetch_rate_table_html, parse_rate_tables
from rial_rates.reconcile import assemble_records
from rial_rates.storage.snapshot_store import SnapshotStore, dump_document
from rial_rates.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["PipelineResult", "fetch_sources", "run_pipeline", "parse_args", "main"]

MarketFetcher = Callable[[TrackerConfig], dict[str, RawQuote]]
TableFetcher = Callable[[TrackerConfig], str]


@dataclass(slots=True)
class PipelineResult:
    document: dict[str, dict[str, Any]]
    snapshot_path: Path
    previous_found: bool
    written: bool


def fetch_sources(
    config: TrackerConfig,
    *,
    market_fetcher: MarketFetcher | None = None,
    table_fetcher: TableFetcher | None = None,
) -> tuple[dict[str, RawQuote], str]:
    """Fetch both sources concurrently and return once both have succeeded.

    The first failure is re-raised as soon as it happens; the other request is
    left to finish on its own and its result is discarded.
    """

    market_fetcher = market_fetcher or fetch_market_quotes
    table_fetcher = table_fetcher or fetch_rate_table_html
    executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="rial-rates")
    try:
        market_future = executor.submit(market_fetcher, config)
        table_future = executor.submit(table_fetcher, config)
        done, _ = wait((market_future, table_future), return_when=FIRST_EXCEPTION)
        for future in (market_future, table_future):
            if future in done and future.exception() is not None:
                raise future.exception()  # type: ignore[misc]
        return market_future.result(), table_future.result()
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def run_pipeline(
    config: TrackerConfig,
    *,
    store: SnapshotStore | None = None,
    write: bool = True,
    market_fetcher: MarketFetcher | None = None,
    table_fetcher: TableFetcher | None = None,
) -> PipelineResult:
    """Run one fetch → extract → assemble → diff → persist cycle.

    Source failures propagate before anything is written, so the previous
    snapshot stays untouched.
    """

    snapshot_store = store or SnapshotStore(config.snapshot_path)
    quotes, html = fetch_sources(
        config, market_fetcher=market_fetcher, table_fetcher=table_fetcher
    )
    table = parse_rate_tables(html, config)
    records = assemble_records(quotes, table, config)
    previous_found = snapshot_store.exists
    snapshot = snapshot_store.load()
    document = build_document(records, snapshot, table.labels)
    if write:
        snapshot_store.save(document)
    else:
        LOGGER.info("Dry-run enabled; leaving %s untouched", snapshot_store.path)
    return PipelineResult(
        document=document,
        snapshot_path=snapshot_store.path,
        previous_found=previous_found,
        written=write,
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--snapshot",
        dest="snapshot_path",
        type=Path,
        help="Snapshot file read as the previous run and overwritten with this run",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds for both sources",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the document without overwriting the snapshot",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = TrackerConfig.from_env().with_overrides(
            snapshot_path=args.snapshot_path, timeout=args.timeout
        )
    except ValueError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 1
    try:
        result = run_pipeline(config, write=not args.dry_run)
    except SourceFetchError as exc:
        LOGGER.error("Pipeline error: %s", exc)
        return 1
    LOGGER.info(
        "Processed %d currencies against %s (%s)",
        len(result.document),
        result.snapshot_path,
        "compared with the previous run" if result.previous_found else "first run, no baseline",
    )
    sys.stdout.write(dump_document(result.document) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
