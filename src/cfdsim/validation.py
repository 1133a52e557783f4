"""Input validation: raw form values to RuleSet and SimulationParameters.

Raw rule rows arrive as scratch entries from a form or config file. Each row
is a (start, end, size) triple or a mapping with those keys, and any value
may be empty or non-numeric.

Row handling depends on ParseMode:
- LENIENT: rows with a missing/non-numeric field are skipped (default)
- STRICT: such rows are rejected, only fully blank rows are skipped

Every check raises on the first violation; nothing is computed on failure.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from cfdsim.contracts import (
    DEFAULT_MAX_ITERATIONS,
    Direction,
    ParseMode,
    RuleSet,
    SamplingMode,
    SimulationParameters,
    SizingRule,
    validate_rule,
)
from cfdsim.contracts.base import ZERO
from cfdsim.errors import InvalidParameterError, InvalidRuleRangeError, InvalidRuleRowError

logger = logging.getLogger(__name__)

RULE_FIELDS = ("start", "end", "size")


def parse_number(value: Any) -> Decimal | None:
    """Parse a raw form value to a finite Decimal.

    Returns None for None, blanks, bools, non-numeric text, NaN and Infinity.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    return number if number.is_finite() else None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _row_values(row: Any) -> tuple[Any, ...] | None:
    """Extract (start, end, size) from a triple or mapping; None if malformed."""
    if isinstance(row, Mapping):
        return tuple(row.get(name) for name in RULE_FIELDS)
    if isinstance(row, Sequence) and not isinstance(row, (str, bytes)) and len(row) == 3:
        return tuple(row)
    return None


def _whole_price(value: Decimal, label: str, number: int) -> int:
    if value != value.to_integral_value():
        raise InvalidRuleRangeError(
            f"Rule {number}: {label} price must be a whole number, got {value}"
        )
    return int(value)


def parse_rules(
    rows: Iterable[Any],
    mode: ParseMode = ParseMode.LENIENT,
) -> RuleSet:
    """Convert raw rule rows into a validated RuleSet.

    Args:
        rows: Raw rows, each a (start, end, size) triple or mapping.
        mode: LENIENT skips incomplete rows, STRICT rejects them.

    Returns:
        RuleSet in input order.

    Raises:
        InvalidRuleRowError: STRICT mode and a row is incomplete/non-numeric.
        InvalidRuleRangeError: start/end not whole, below 1, or start >= end.
        InvalidRuleSizeError: size <= 0 or not a multiple of 0.1.
        MissingRuleError: no rule left after filtering.
    """
    rules: list[SizingRule] = []
    skipped = 0

    for number, row in enumerate(rows, start=1):
        values = _row_values(row)
        parsed = [parse_number(v) for v in values] if values is not None else None

        if parsed is None or any(v is None for v in parsed):
            if values is not None and all(_is_blank(v) for v in values):
                skipped += 1
                continue
            if mode == ParseMode.STRICT:
                raise InvalidRuleRowError(
                    f"Rule {number}: start, end and size must all be numbers"
                )
            logger.debug("Skipping incomplete rule row", extra={"rule_number": number})
            skipped += 1
            continue

        start, end, size = parsed  # type: ignore[misc]
        rule = SizingRule(
            start=_whole_price(start, "start", number),
            end=_whole_price(end, "end", number),
            size=size,
        )
        validate_rule(rule, number)
        rules.append(rule)

    if skipped:
        logger.debug("Rule rows skipped", extra={"skipped": skipped, "kept": len(rules)})

    return RuleSet(tuple(rules))


def validate_parameters(params: SimulationParameters) -> None:
    """Check that all scalar parameters are usable.

    Raises:
        InvalidParameterError: a numeric parameter is not strictly positive,
            or max_iterations is below 1.
    """
    for label, value in (
        ("Start price", params.start_price),
        ("Add interval", params.add_interval),
        ("Display interval", params.display_interval),
    ):
        if not value.is_finite() or value <= ZERO:
            raise InvalidParameterError(f"{label} must be a positive number, got {value}")
    if params.max_iterations < 1:
        raise InvalidParameterError(
            f"Max iterations must be at least 1, got {params.max_iterations}"
        )


def _require_number(value: Any, label: str) -> Decimal:
    number = parse_number(value)
    if number is None:
        raise InvalidParameterError(f"{label} is missing or not a number")
    return number


def parse_parameters(
    start_price: Any,
    add_interval: Any,
    display_interval: Any,
    direction: Any = Direction.BUY,
    sampling_mode: Any = SamplingMode.EXACT_MODULO,
    max_iterations: Any = DEFAULT_MAX_ITERATIONS,
) -> SimulationParameters:
    """Convert raw form values into validated SimulationParameters.

    Raises:
        InvalidParameterError: any value is missing, non-numeric,
            non-positive, or not a known enum value.
    """
    try:
        direction_value = Direction(str(getattr(direction, "value", direction)).strip().lower())
    except ValueError as exc:
        raise InvalidParameterError(f"Direction must be 'buy' or 'sell', got {direction!r}") from exc
    try:
        mode_value = SamplingMode(
            str(getattr(sampling_mode, "value", sampling_mode)).strip().lower()
        )
    except ValueError as exc:
        choices = ", ".join(m.value for m in SamplingMode)
        raise InvalidParameterError(
            f"Sampling mode must be one of {choices}, got {sampling_mode!r}"
        ) from exc
    iterations = parse_number(max_iterations)
    if iterations is None or iterations != iterations.to_integral_value():
        raise InvalidParameterError(f"Max iterations must be a whole number, got {max_iterations!r}")

    params = SimulationParameters(
        start_price=_require_number(start_price, "Start price"),
        add_interval=_require_number(add_interval, "Add interval"),
        display_interval=_require_number(display_interval, "Display interval"),
        direction=direction_value,
        sampling_mode=mode_value,
        max_iterations=int(iterations),
    )
    validate_parameters(params)
    return params
