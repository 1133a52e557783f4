"""CFD cost-averaging position simulator.

Sweeps a price range, adds position according to price-range sizing rules,
and reports the weighted average entry price and unrealized profit/loss at
sampled prices.

Usage:
    from cfdsim import parse_parameters, parse_rules, simulate

    params = parse_parameters(start_price=41150, add_interval=50, display_interval=400)
    rules = parse_rules([(41150, 41950, 0.1), (42150, 42950, 0.2)])
    result = simulate(params, rules)
    result.final.profit_loss
"""

from cfdsim.contracts import (
    Direction,
    ParseMode,
    ResultRow,
    ResultSet,
    RuleSet,
    SamplingMode,
    SimulationParameters,
    SizingRule,
)
from cfdsim.engine import profit_loss, simulate, update_average
from cfdsim.validation import parse_parameters, parse_rules

__all__ = [
    "Direction",
    "ParseMode",
    "ResultRow",
    "ResultSet",
    "RuleSet",
    "SamplingMode",
    "SimulationParameters",
    "SizingRule",
    "parse_parameters",
    "parse_rules",
    "profit_loss",
    "simulate",
    "update_average",
]
