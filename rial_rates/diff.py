"""Day-over-day change indicators and the output document."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping

from rial_rates.config import FREE_MARKET_LABEL, TRACKED_LABELS, change_label
from rial_rates.ingestion.models import CurrencyRecord, RateValues, Snapshot


class ChangeIndicator(str, Enum):
    """Direction of a field compared with the previous run."""

    INCREASED = "▲"
    DECREASED = "▼"
    UNCHANGED = "="
    INDETERMINATE = "-"

    @classmethod
    def compare(cls, previous: object, current: object) -> "ChangeIndicator":
        if not (_is_number(previous) and _is_number(current)):
            return cls.INDETERMINATE
        if current > previous:  # type: ignore[operator]
            return cls.INCREASED
        if current < previous:  # type: ignore[operator]
            return cls.DECREASED
        return cls.UNCHANGED


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compute_changes(
    record: CurrencyRecord, previous: RateValues | None
) -> dict[str, ChangeIndicator]:
    """Compare every tracked label of ``record`` with the previous run."""

    baseline = previous or {}
    return {
        label: ChangeIndicator.compare(baseline.get(label), record.value(label))
        for label in TRACKED_LABELS
    }


def build_document(
    records: Mapping[str, CurrencyRecord],
    snapshot: Snapshot,
    labels: Iterable[str],
) -> dict[str, dict[str, Any]]:
    """Render records and their change indicators as a JSON-ready mapping.

    Each entry lists the free-market value, the categories recognised this run
    (``labels``) and one ``"<label> Change"`` key for every tracked label.
    """

    category_labels = [label for label in labels if label != FREE_MARKET_LABEL]
    document: dict[str, dict[str, Any]] = {}
    for symbol, record in records.items():
        entry: dict[str, Any] = {FREE_MARKET_LABEL: record.free_market}
        for label in category_labels:
            entry[label] = record.value(label)
        changes = compute_changes(record, snapshot.get(symbol))
        for label in TRACKED_LABELS:
            entry[change_label(label)] = changes[label].value
        document[symbol] = entry
    return document


__all__ = ["ChangeIndicator", "build_document", "compute_changes"]
