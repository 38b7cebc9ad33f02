"""Numeric normalisation shared by both rate sources."""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from numbers import Real

# Persian (U+06F0..) and Arabic-Indic (U+0660..) digits map onto ASCII.
_DIGIT_TRANSLATION = str.maketrans("۰۱۲۳۴۵۶۷۸۹٠١٢٣٤٥٦٧٨٩", "01234567890123456789")
_GROUPING_PATTERN = re.compile(r"[,٬،\s]")
_INTEGER_PATTERN = re.compile(r"[+-]?\d+")


def round_half_up(value: Decimal | int | float) -> int:
    """Round ``value`` to the nearest integer, ties away from zero.

    Floats go through ``repr`` so that ``1234.5`` is treated as written rather
    than as its binary approximation.
    """

    decimal_value = value if isinstance(value, Decimal) else Decimal(repr(value))
    return int(decimal_value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def parse_grouped_int(value: object | None) -> int | None:
    """Parse an integer written with thousands separators and local digits.

    Returns ``None`` for anything that is not a plain integer once grouping
    characters are removed (fractions included).
    """

    if value is None:
        return None
    cleaned = _GROUPING_PATTERN.sub("", str(value).translate(_DIGIT_TRANSLATION))
    if not _INTEGER_PATTERN.fullmatch(cleaned):
        return None
    try:
        return int(cleaned)
    except ValueError:
        # digit runs beyond the interpreter's int conversion limit
        return None


def scale_and_round(raw: int, divisor: int) -> int:
    """Divide ``raw`` by ``divisor`` and round half-up to an integer."""

    return round_half_up(Decimal(raw) / Decimal(divisor))


def coerce_number(value: object) -> int | None:
    """Round a JSON number to an integer; non-numbers become ``None``.

    Booleans, strings and non-finite floats are not considered numeric.
    """

    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        return round_half_up(value)  # type: ignore[arg-type]
    except (InvalidOperation, ValueError):
        return None


__all__ = ["coerce_number", "parse_grouped_int", "round_half_up", "scale_and_round"]
