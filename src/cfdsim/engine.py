"""Cost-averaging sweep engine.

Sweeps the price axis upward from the start price to the highest rule end.
At every swept price the first matching rule's size is added to the
position, the weighted average entry price is updated, and selected prices
are emitted as ResultRows.

The sweep is a fold over the swept price sequence: each step takes a
SweepState and returns a new one, so nothing carries over between calls
and identical inputs always give identical rows.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator, Sequence
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import NamedTuple

from cfdsim.contracts import (
    Direction,
    ResultRow,
    ResultSet,
    RuleSet,
    SamplingMode,
    SimulationParameters,
    SizingRule,
    build_result_set,
)
from cfdsim.contracts.base import ZERO, quantize_position, round_to_whole
from cfdsim.errors import InvalidParameterError, SimulationCancelledError, SweepLimitError
from cfdsim.validation import validate_parameters

logger = logging.getLogger(__name__)

CancelHook = Callable[[], bool]


class SweepState(NamedTuple):
    """Accumulator carried from one swept price to the next."""

    total_position: Decimal = ZERO
    average_price: Decimal = ZERO


def update_average(
    old_average: Decimal,
    old_position: Decimal,
    new_price: Decimal,
    new_size: Decimal,
) -> Decimal:
    """Weighted average entry price after adding new_size at new_price.

    Returns 0 when the combined position is 0.
    """
    total = old_position + new_size
    if total == ZERO:
        return ZERO
    return (old_average * old_position + new_price * new_size) / total


def profit_loss(
    current_price: Decimal,
    average_price: Decimal,
    total_position: Decimal,
    direction: Direction,
) -> Decimal:
    """Unrealized profit/loss of the position at current_price.

    Example:
        >>> profit_loss(Decimal(200), Decimal(150), Decimal(3), Direction.BUY)
        Decimal('150')
    """
    if total_position == ZERO:
        return ZERO
    if direction == Direction.SELL:
        return (average_price - current_price) * total_position
    return (current_price - average_price) * total_position


def accumulate(state: SweepState, price: int, size: Decimal) -> SweepState:
    """Fold step: add size at price, or return state unchanged if size <= 0."""
    if size <= ZERO:
        return state
    average = update_average(state.average_price, state.total_position, Decimal(price), size)
    return SweepState(
        total_position=quantize_position(state.total_position + size),
        average_price=average,
    )


def _effective_step(params: SimulationParameters) -> Decimal:
    """Per-step price advance once prices are rounded."""
    if params.sampling_mode == SamplingMode.EXACT_MODULO:
        # The rounded price is what advances, so a fractional step is
        # itself rounded on every iteration after the first.
        return Decimal(round_to_whole(params.add_interval))
    return params.add_interval


def estimate_steps(params: SimulationParameters, max_price: int) -> int:
    """Number of prices the sweep will visit.

    Raises:
        SweepLimitError: the step rounds to zero (the sweep would not advance).
    """
    step = _effective_step(params)
    if step <= ZERO:
        raise SweepLimitError(
            f"Add interval {params.add_interval} rounds to 0 and the sweep would never advance; "
            "use a larger interval or step_index sampling"
        )
    span = Decimal(max_price) - params.start_price
    if span < ZERO:
        return 0
    if params.sampling_mode == SamplingMode.STEP_INDEX:
        return math.floor(span / step) + 1
    # Every step after the first starts from the rounded previous price.
    remaining = Decimal(max_price) - round_to_whole(params.start_price) - params.add_interval
    if remaining < ZERO:
        return 1
    return math.floor(remaining / step) + 2


def sweep_prices(params: SimulationParameters, max_price: int) -> Iterator[tuple[int, int]]:
    """Yield (step index, rounded price) for every swept price.

    EXACT_MODULO carries the rounded price into the next step, STEP_INDEX
    derives each price from the start price and the step index.
    """
    index = 0
    if params.sampling_mode == SamplingMode.EXACT_MODULO:
        raw = params.start_price
        while raw <= max_price:
            price = round_to_whole(raw)
            yield index, price
            raw = Decimal(price) + params.add_interval
            index += 1
    else:
        raw = params.start_price
        while raw <= max_price:
            yield index, round_to_whole(raw)
            index += 1
            raw = params.start_price + params.add_interval * index


def is_sampled(params: SimulationParameters, index: int, price: int) -> bool:
    """Check if the swept price at this step becomes a result row.

    The first step always does.
    """
    if index == 0:
        return True
    if params.sampling_mode == SamplingMode.STEP_INDEX:
        return index % params.display_stride == 0
    offset = Decimal(price) - params.start_price
    try:
        return offset % params.display_interval == ZERO
    except InvalidOperation:
        # Quotient wider than the context precision; check exactly.
        return Fraction(offset) % Fraction(params.display_interval) == 0


def _check_bounds(params: SimulationParameters, rule_set: RuleSet) -> None:
    max_price = rule_set.max_end
    if params.start_price > max_price:
        raise InvalidParameterError(
            f"Start price {params.start_price} is above the highest rule end price {max_price}"
        )
    steps = estimate_steps(params, max_price)
    if steps > params.max_iterations:
        raise SweepLimitError(
            f"Sweep from {params.start_price} to {max_price} by {params.add_interval} "
            f"needs {steps} steps, more than the limit of {params.max_iterations}"
        )


def simulate(
    params: SimulationParameters,
    rules: RuleSet | Sequence[SizingRule],
    *,
    should_cancel: CancelHook | None = None,
) -> ResultSet:
    """Run one cost-averaging sweep.

    Args:
        params: Scalar sweep parameters.
        rules: RuleSet, or a sequence of SizingRule to validate into one.
        should_cancel: Optional hook polled before every step; returning True
            stops the sweep.

    Returns:
        ResultSet with rows ascending by price (never empty).

    Raises:
        InvalidParameterError: parameters are non-positive or out of bounds.
        SweepLimitError: the sweep would not advance or is too long.
        MissingRuleError, InvalidRuleRangeError, InvalidRuleSizeError:
            rules are rejected.
        SimulationCancelledError: should_cancel returned True.
    """
    validate_parameters(params)
    rule_set = rules if isinstance(rules, RuleSet) else RuleSet(tuple(rules))
    _check_bounds(params, rule_set)

    logger.info(
        "Starting sweep",
        extra={
            "start_price": params.start_price,
            "max_price": rule_set.max_end,
            "add_interval": params.add_interval,
            "rule_count": len(rule_set),
            "sampling_mode": params.sampling_mode.value,
        },
    )

    state = SweepState()
    rows: list[ResultRow] = []
    steps = 0

    for index, price in sweep_prices(params, rule_set.max_end):
        if should_cancel is not None and should_cancel():
            raise SimulationCancelledError(f"Simulation cancelled at price {price}")

        state = accumulate(state, price, rule_set.lookup(price))
        steps += 1

        if is_sampled(params, index, price):
            rows.append(
                ResultRow(
                    price=price,
                    total_position=state.total_position,
                    average_price=state.average_price,
                    profit_loss=profit_loss(
                        Decimal(price),
                        state.average_price,
                        state.total_position,
                        params.direction,
                    ),
                )
            )

    result = build_result_set(params, rule_set, rows, steps)
    logger.info(
        "Sweep complete",
        extra={
            "steps": steps,
            "row_count": len(rows),
            "final_position": result.final.total_position,
            "sha256": result.sha256[:12],
        },
    )
    return result
