"""Public interface for the rial_rates package."""

from __future__ import annotations

from importlib import metadata as importlib_metadata

from rial_rates.config import TrackerConfig
from rial_rates.diff import ChangeIndicator
from rial_rates.ingestion.http import SourceFetchError
from rial_rates.ingestion.models import CurrencyRecord, RateTableResult, RawQuote
from rial_rates.storage import SnapshotStore

__all__ = [
    "__version__",
    "ChangeIndicator",
    "CurrencyRecord",
    "RateTableResult",
    "RawQuote",
    "SnapshotStore",
    "SourceFetchError",
    "TrackerConfig",
    "run_pipeline",
]

try:
    __version__ = importlib_metadata.version("rial-rates")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"


def run_pipeline(*args, **kwargs):
    from rial_rates.pipeline import run_pipeline as _run_pipeline

    return _run_pipeline(*args, **kwargs)
