"""Logging utilities for the rial_rates package."""

from __future__ import annotations

import logging
import os
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger(name: str = "rial_rates") -> logging.Logger:
    """Return a module-level logger writing to stderr with a simple formatter.

    Stdout is reserved for the rates document, so records always go through the
    ``basicConfig`` stream handler (stderr). ``RIAL_RATES_LOG_LEVEL`` selects the
    level on first use.
    """
    global _LOGGER
    if _LOGGER is None:
        level_name = os.getenv("RIAL_RATES_LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level_name, logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        _LOGGER = logging.getLogger("rial_rates")
    return logging.getLogger(name)
