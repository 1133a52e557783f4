"""Simulator enums.

All enums are lowercase string enums so they round-trip through config
files and CLI flags unchanged.
"""

from enum import Enum


class Direction(str, Enum):
    """Trade direction; decides the profit/loss sign."""

    BUY = "buy"
    SELL = "sell"


class SamplingMode(str, Enum):
    """How swept prices are picked for result rows.

    EXACT_MODULO: keep a price when (price - start) % display_interval == 0.
    STEP_INDEX: keep every Nth swept step, N = display / add interval.
    """

    EXACT_MODULO = "exact_modulo"
    STEP_INDEX = "step_index"


class ParseMode(str, Enum):
    """How raw rule rows with missing or non-numeric fields are handled."""

    LENIENT = "lenient"  # Skip the row
    STRICT = "strict"  # Reject the row
