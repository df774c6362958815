"""Utility constants and helpers for calduration.

Unit constants describe how the combined storage fields fold their
coarser units (years into months, weeks into days, hours into minutes)
and how nanoseconds carry into seconds.
"""

import math
from typing import Any

# Unit constants
MONTHS_PER_YEAR = 12
DAYS_PER_WEEK = 7
MINUTES_PER_HOUR = 60
SECONDS_PER_MINUTE = 60
MICROSECONDS_PER_SECOND = 1_000_000
NANOSECONDS_PER_MICROSECOND = 1_000
NANOSECONDS_PER_SECOND = 1_000_000_000

# Non-finite sentinels; normalization passes these through untouched
INFINITY = float("inf")
NEG_INFINITY = float("-inf")
NAN = float("nan")


def is_sentinel(value: Any) -> bool:
    """True if value is one of the non-finite float markers (inf, -inf, nan)."""
    return isinstance(value, float) and not math.isfinite(value)


def truncate_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero (``//`` rounds toward -inf)."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator < 0) == (denominator < 0) else -quotient
