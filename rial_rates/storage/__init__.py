"""Persistence of the previous run's rates document."""

from __future__ import annotations

from rial_rates.storage.snapshot_store import SnapshotStore

__all__ = ["SnapshotStore"]
