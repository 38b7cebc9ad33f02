"""Allow ``python -m rial_rates``."""

from __future__ import annotations

from rial_rates.pipeline import main

if __name__ == "__main__":  # pragma: no cover - thin wrapper
    raise SystemExit(main())
