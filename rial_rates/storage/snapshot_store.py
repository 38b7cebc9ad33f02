"""JSON file holding the most recent rates document."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Iterable, Mapping

from rial_rates.config import TRACKED_LABELS
from rial_rates.ingestion.models import RateValues, Snapshot
from rial_rates.utils.logger import get_logger
from rial_rates.utils.numbers import coerce_number

LOGGER = get_logger(__name__)


def _baseline_values(record: Mapping[str, Any], labels: Iterable[str]) -> RateValues:
    # Only the plain numeric fields are comparison baselines; "<label> Change"
    # entries and anything else are dropped.
    return {label: coerce_number(record.get(label)) for label in labels}


class SnapshotStore:
    """Read and overwrite the single snapshot file of the previous run."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    @property
    def exists(self) -> bool:
        return self.path.is_file()

    def load(self, labels: Iterable[str] = TRACKED_LABELS) -> Snapshot:
        """Return the previous run's values, or an empty snapshot.

        A missing, unreadable or malformed file is reported in the log and
        treated as if no previous run existed.
        """

        wanted = tuple(labels)
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            LOGGER.warning("No previous snapshot at %s; all changes are indeterminate", self.path)
            return {}
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Could not read snapshot %s (%s); ignoring it", self.path, exc)
            return {}
        try:
            document = json.loads(text)
        except (ValueError, RecursionError) as exc:
            LOGGER.warning("Snapshot %s is not valid JSON (%s); ignoring it", self.path, exc)
            return {}
        if not isinstance(document, dict):
            LOGGER.warning("Snapshot %s does not hold a JSON object; ignoring it", self.path)
            return {}
        return {
            str(symbol): _baseline_values(record, wanted)
            for symbol, record in document.items()
            if isinstance(record, dict)
        }

    def save(self, document: Mapping[str, Any]) -> Path:
        """Overwrite the snapshot with ``document`` via a temporary file."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(dump_document(document) + "\n", encoding="utf-8")
        os.replace(tmp_path, self.path)
        LOGGER.info("Wrote snapshot for %s currencies to %s", len(document), self.path)
        return self.path


def dump_document(document: Mapping[str, Any]) -> str:
    return json.dumps(document, ensure_ascii=False, indent=2)


__all__ = ["SnapshotStore", "dump_document"]
