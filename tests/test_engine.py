"""Sweep engine tests.

Verifies the per-step math, the sweep properties that must hold for any
input (determinism, monotonic position, quantization, zero-position P/L),
and concrete scenarios computed by hand.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from cfdsim.contracts import (
    Direction,
    RuleSet,
    SamplingMode,
    SimulationParameters,
    SizingRule,
)
from cfdsim.engine import (
    SweepState,
    accumulate,
    estimate_steps,
    profit_loss,
    simulate,
    sweep_prices,
    update_average,
)
from cfdsim.errors import (
    InvalidParameterError,
    InvalidRuleRangeError,
    InvalidRuleSizeError,
    MissingRuleError,
    SimulationCancelledError,
    SweepLimitError,
)


def rule(start: int, end: int, size: str | float | int) -> SizingRule:
    return SizingRule(start=start, end=end, size=size)


def params(
    start: str | int = 100,
    add: str | int = 50,
    display: str | int = 50,
    **kwargs: object,
) -> SimulationParameters:
    return SimulationParameters(
        start_price=start,
        add_interval=add,
        display_interval=display,
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
def default_rules() -> RuleSet:
    return RuleSet(
        (
            rule(41150, 41950, 0.1),
            rule(42150, 42950, 0.2),
            rule(43150, 43950, 0.3),
        )
    )


@pytest.fixture
def default_params() -> SimulationParameters:
    return params(41150, 50, 400, direction=Direction.BUY)


class TestUpdateAverage:
    """Tests for update_average."""

    def test_first_addition_is_price(self) -> None:
        assert update_average(Decimal(0), Decimal(0), Decimal(100), Decimal("0.1")) == 100

    def test_weighted_mean(self) -> None:
        # (100 * 1 + 200 * 3) / 4 = 175
        result = update_average(Decimal(100), Decimal(1), Decimal(200), Decimal(3))
        assert result == Decimal(175)

    def test_zero_total_returns_zero(self) -> None:
        assert update_average(Decimal(0), Decimal(0), Decimal(100), Decimal(0)) == 0


class TestProfitLoss:
    """Tests for profit_loss."""

    def test_zero_position(self) -> None:
        assert profit_loss(Decimal(500), Decimal(100), Decimal(0), Direction.BUY) == 0
        assert profit_loss(Decimal(500), Decimal(100), Decimal(0), Direction.SELL) == 0

    def test_buy_gains_when_price_rises(self) -> None:
        assert profit_loss(Decimal(200), Decimal(150), Decimal(3), Direction.BUY) == 150

    def test_sell_loses_when_price_rises(self) -> None:
        assert profit_loss(Decimal(200), Decimal(150), Decimal(3), Direction.SELL) == -150


class TestAccumulate:
    """Tests for the fold step."""

    def test_no_match_leaves_state(self) -> None:
        state = SweepState(Decimal("1.0"), Decimal(100))
        assert accumulate(state, 150, Decimal(0)) is state

    def test_match_updates_both_fields(self) -> None:
        state = accumulate(SweepState(), 100, Decimal("0.1"))
        state = accumulate(state, 200, Decimal("0.1"))
        assert state.total_position == Decimal("0.2")
        assert state.average_price == Decimal(150)

    def test_position_quantized(self) -> None:
        state = SweepState()
        for price in range(100, 110):
            state = accumulate(state, price, Decimal("0.1"))
        assert str(state.total_position) == "1.0"


class TestSweepPrices:
    """Tests for the swept price sequence."""

    def test_integer_step(self) -> None:
        prices = [p for _, p in sweep_prices(params(100, 50), 200)]
        assert prices == [100, 150, 200]

    def test_exact_mode_carries_rounded_price(self) -> None:
        """100 -> 102.5 -> 103, then 103 + 2.5 = 105.5 -> 106, ..."""
        prices = [p for _, p in sweep_prices(params(100, "2.5", 5), 110)]
        assert prices == [100, 103, 106, 109]

    def test_step_index_mode_from_start(self) -> None:
        p = params(100, "2.5", 5, sampling_mode=SamplingMode.STEP_INDEX)
        assert [price for _, price in sweep_prices(p, 110)] == [100, 103, 105, 108, 110]

    def test_indices_count_up(self) -> None:
        indices = [i for i, _ in sweep_prices(params(100, 50), 300)]
        assert indices == [0, 1, 2, 3, 4]

    def test_estimate_steps(self) -> None:
        assert estimate_steps(params(100, 50), 200) == 3
        assert estimate_steps(params(100, 30), 200) == 4

    def test_estimate_matches_exact_sweep(self) -> None:
        p = params(100, "2.5", 5)
        assert estimate_steps(p, 110) == len(list(sweep_prices(p, 110)))


class TestSimulateScenarios:
    """Concrete scenarios computed by hand."""

    def test_direction_sign(self) -> None:
        """Single rule [100, 200, 1]: adds at 100, 150, 200, average 150."""
        rules = RuleSet((rule(100, 200, 1),))
        buy = simulate(params(100, 50, 50, direction=Direction.BUY), rules)
        sell = simulate(params(100, 50, 50, direction=Direction.SELL), rules)

        assert [r.price for r in buy.rows] == [100, 150, 200]
        assert buy.final.total_position == Decimal(3)
        assert buy.final.average_price == Decimal(150)
        assert buy.final.profit_loss == (200 - buy.final.average_price) * 3
        assert buy.final.profit_loss == Decimal(150)
        assert sell.final.profit_loss == -buy.final.profit_loss

    def test_middle_row(self) -> None:
        rules = RuleSet((rule(100, 200, 1),))
        result = simulate(params(100, 50, 50), rules)
        middle = result.rows[1]
        assert middle.total_position == Decimal(2)
        assert middle.average_price == Decimal(125)
        assert middle.profit_loss == Decimal(50)

    def test_default_ladder(
        self, default_params: SimulationParameters, default_rules: RuleSet
    ) -> None:
        """Three ladders of 17 adds each, sampled every 400."""
        result = simulate(default_params, default_rules)

        assert [r.price for r in result.rows] == [41150 + 400 * k for k in range(8)]
        assert result.final.price == 43950
        assert result.steps == 57

        # 17 adds per rule: 1.7 + 3.4 + 5.1
        assert result.final.total_position == Decimal("10.2")

        # Size-weighted mean of every matched price
        matched = [
            (Decimal(p), r.size)
            for r in default_rules
            for p in range(r.start, r.end + 1, 50)
        ]
        expected = sum(p * s for p, s in matched) / sum(s for _, s in matched)
        assert abs(result.final.average_price - expected) < Decimal("1e-18")

        expected_pl = (43950 - result.final.average_price) * Decimal("10.2")
        assert result.final.profit_loss == expected_pl
        assert 10879 < result.final.profit_loss < 10881

    def test_default_ladder_early_rows(
        self, default_params: SimulationParameters, default_rules: RuleSet
    ) -> None:
        rows = simulate(default_params, default_rules).rows
        # 41150..41550 -> 9 adds of 0.1, mean 41350
        assert rows[1].total_position == Decimal("0.9")
        assert rows[1].average_price == Decimal(41350)
        # 41150..41950 -> 17 adds, mean 41550
        assert rows[2].total_position == Decimal("1.7")
        assert rows[2].average_price == Decimal(41550)
        # 42150..42350 -> 5 adds of 0.2 on top
        assert rows[3].total_position == Decimal("2.7")

    def test_gap_between_rules_adds_nothing(self) -> None:
        rules = RuleSet((rule(100, 100 + 50, 1), rule(300, 400, 1)))
        result = simulate(params(100, 50, 50), rules)
        by_price = {r.price: r.total_position for r in result.rows}
        assert by_price[200] == by_price[250] == Decimal(2)
        assert by_price[300] == Decimal(3)

    def test_start_below_first_rule(self) -> None:
        """Rows before any match show zero position and zero P/L."""
        rules = RuleSet((rule(200, 300, 1),))
        result = simulate(params(100, 50, 50), rules)
        first = result.rows[0]
        assert first.price == 100
        assert first.total_position == 0
        assert first.average_price == 0
        assert first.profit_loss == 0

    def test_overlap_uses_first_rule(self) -> None:
        rules = RuleSet((rule(10, 20, 1), rule(15, 25, 2)))
        result = simulate(params(10, 1, 1), rules)
        by_price = {r.price: r.total_position for r in result.rows}
        # 10..20 adds 1 each (11), 21..25 adds 2 each (10)
        assert by_price[20] == Decimal(11)
        assert by_price[25] == Decimal(21)


class TestSimulateProperties:
    """Properties that hold for every sweep."""

    def test_idempotent(
        self, default_params: SimulationParameters, default_rules: RuleSet
    ) -> None:
        a = simulate(default_params, default_rules)
        b = simulate(default_params, default_rules)
        assert a.rows == b.rows
        assert a.sha256 == b.sha256

    def test_position_non_decreasing(
        self, default_params: SimulationParameters, default_rules: RuleSet
    ) -> None:
        rows = simulate(default_params, default_rules).rows
        for prev, curr in zip(rows, rows[1:]):
            assert curr.price > prev.price
            assert curr.total_position >= prev.total_position

    def test_positions_quantized_to_tenths(self) -> None:
        rules = RuleSet((rule(1, 1000, "0.1"), rule(1001, 2000, "0.3")))
        for row in simulate(params(1, 7, 70), rules).rows:
            scaled = row.total_position * 10
            assert scaled == scaled.to_integral_value()

    def test_zero_position_zero_pl(self) -> None:
        rules = RuleSet((rule(500, 600, 1),))
        for row in simulate(params(100, 50, 50, direction=Direction.SELL), rules).rows:
            if row.total_position == 0:
                assert row.profit_loss == 0

    def test_first_row_is_start_price(self) -> None:
        rules = RuleSet((rule(100, 1000, 1),))
        result = simulate(params(100, 50, 1000), rules)
        assert result.rows[0].price == 100
        assert len(result.rows) == 1

    def test_accepts_rule_sequence(self) -> None:
        result = simulate(params(), [rule(100, 200, 1)])
        assert result.final.total_position == Decimal(3)


class TestSamplingModes:
    """Exact-modulo vs step-index sampling with a fractional step."""

    def test_exact_modulo_misses_fractional_strides(self) -> None:
        """Carried rounding gives 100, 103, 106, 109: none lands on a 5 stride."""
        rules = RuleSet((rule(100, 110, 1),))
        result = simulate(params(100, "2.5", 5), rules)
        assert [r.price for r in result.rows] == [100]
        assert result.steps == 4

    def test_step_index_samples_every_nth_step(self) -> None:
        rules = RuleSet((rule(100, 110, 1),))
        p = params(100, "2.5", 5, sampling_mode=SamplingMode.STEP_INDEX)
        result = simulate(p, rules)
        assert [r.price for r in result.rows] == [100, 105, 110]
        assert result.final.total_position == Decimal(5)

    def test_fractional_start_keeps_first_row_only(self) -> None:
        """Start 100.4 rounds to 100; later offsets (49.6, 99.6, ...) never hit a stride."""
        rules = RuleSet((rule(100, 300, 1),))
        p = params("100.4", 50, 50)
        result = simulate(p, rules)
        assert [r.price for r in result.rows] == [100]
        assert result.rows[0].total_position == Decimal(1)
        assert result.steps == 5
        assert estimate_steps(p, rules.max_end) == result.steps

    def test_tiny_display_interval(self) -> None:
        """Offsets far beyond the Decimal precision are still checked exactly."""
        rules = RuleSet((rule(100, 200, 1),))
        every = simulate(params(100, 1, "1e-27"), rules)
        assert len(every.rows) == 101

        thirds = simulate(params(100, 1, "3e-27"), rules)
        assert [r.price for r in thirds.rows] == list(range(100, 201, 3))

    def test_step_index_matches_exact_for_integer_steps(
        self, default_rules: RuleSet
    ) -> None:
        exact = simulate(params(41150, 50, 400), default_rules)
        indexed = simulate(
            params(41150, 50, 400, sampling_mode=SamplingMode.STEP_INDEX), default_rules
        )
        assert exact.rows == indexed.rows


class TestSimulateRejects:
    """Validation happens before any sweep work."""

    def test_empty_rules(self) -> None:
        with pytest.raises(MissingRuleError):
            simulate(params(), [])

    def test_invalid_range(self) -> None:
        with pytest.raises(InvalidRuleRangeError):
            simulate(params(), [rule(100, 50, 1)])

    def test_non_tenth_size(self) -> None:
        with pytest.raises(InvalidRuleSizeError):
            simulate(params(), [rule(100, 200, 0.15)])

    def test_non_positive_parameter(self) -> None:
        with pytest.raises(InvalidParameterError, match="Add interval"):
            simulate(params(add=0), [rule(100, 200, 1)])

    def test_start_above_max_end(self) -> None:
        with pytest.raises(InvalidParameterError, match="above the highest rule end"):
            simulate(params(start=500), [rule(100, 200, 1)])

    def test_step_rounding_to_zero(self) -> None:
        with pytest.raises(SweepLimitError, match="never advance"):
            simulate(params(add="0.4"), [rule(100, 200, 1)])

    def test_too_many_steps(self) -> None:
        with pytest.raises(SweepLimitError, match="limit of 10"):
            simulate(params(100, 1, 1, max_iterations=10), [rule(100, 1000, 1)])

    def test_sweep_limit_is_parameter_error(self) -> None:
        with pytest.raises(InvalidParameterError):
            simulate(params(100, 1, 1, max_iterations=10), [rule(100, 1000, 1)])


class TestCancellation:
    """Cooperative cancellation between steps."""

    def test_cancel_hook_stops_sweep(self) -> None:
        calls = []

        def should_cancel() -> bool:
            calls.append(1)
            return len(calls) > 2

        with pytest.raises(SimulationCancelledError, match="cancelled at price 200"):
            simulate(params(), [rule(100, 300, 1)], should_cancel=should_cancel)

    def test_hook_returning_false_completes(self) -> None:
        result = simulate(params(), [rule(100, 300, 1)], should_cancel=lambda: False)
        assert result.final.price == 300
