"""Simulator data contracts.

Pydantic models and value types shared by validation, the sweep engine and
the report layer.

All contracts follow these invariants:
- Price/size/money fields use Decimal (not float)
- Models are frozen and forbid extra fields
- Enums are lowercase string enums
"""

from cfdsim.contracts.params import DEFAULT_MAX_ITERATIONS, SimulationParameters
from cfdsim.contracts.result import ResultRow, ResultSet, build_result_set
from cfdsim.contracts.rules import RuleSet, SizingRule, validate_rule
from cfdsim.contracts.types import Direction, ParseMode, SamplingMode

__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "Direction",
    "ParseMode",
    "ResultRow",
    "ResultSet",
    "RuleSet",
    "SamplingMode",
    "SimulationParameters",
    "SizingRule",
    "build_result_set",
    "validate_rule",
]
