"""Shared numeric helpers for simulator contracts.

All prices, sizes and money values are carried as ``Decimal``:
- floats are converted through ``str`` to keep their shortest repr
- rounding to whole currency units is half-up towards +inf
- positions are quantized to one tenth
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
HALF = Decimal("0.5")
POSITION_STEP = Decimal("0.1")


def parse_decimal(v: Any) -> Decimal:
    """Parse value to Decimal safely.

    Accepts:
    - Decimal (passthrough)
    - str (parsed to Decimal)
    - int (converted via string to avoid precision loss)
    - float (converted via string to preserve representation)
    """
    if isinstance(v, Decimal):
        return v
    if isinstance(v, bool):
        raise ValueError("Cannot convert bool to Decimal")
    if isinstance(v, (int, float)):
        return Decimal(str(v))
    if isinstance(v, str):
        try:
            return Decimal(v.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a decimal number: {v!r}") from exc
    raise ValueError(f"Cannot convert {type(v).__name__} to Decimal")


def round_to_whole(value: Decimal) -> int:
    """Round to the nearest whole unit, halves going up (``floor(x + 0.5)``)."""
    return int((value + HALF).to_integral_value(rounding=ROUND_FLOOR))


def quantize_position(value: Decimal) -> Decimal:
    """Quantize a position size to one tenth."""
    return value.quantize(POSITION_STEP, rounding=ROUND_HALF_UP)


def is_tenth_multiple(value: Decimal) -> bool:
    """Check that value is an exact multiple of 0.1."""
    scaled = value * 10
    return scaled == scaled.to_integral_value()
