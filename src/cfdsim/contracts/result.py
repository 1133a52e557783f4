"""ResultRow and ResultSet contracts.

A ResultSet is the only output of a sweep: the sampled rows in ascending
price order plus the inputs that produced them. Its SHA256 is computed over
a canonical JSON dump, so two runs with identical inputs hash identically.
"""

from __future__ import annotations

import hashlib
from decimal import Decimal
from typing import TYPE_CHECKING, Annotated, Any

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cfdsim.contracts.base import parse_decimal
from cfdsim.contracts.params import SimulationParameters
from cfdsim.contracts.rules import SizingRule

if TYPE_CHECKING:
    from cfdsim.contracts.rules import RuleSet


class ResultRow(BaseModel):
    """Snapshot of the position at one sampled price."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    price: int = Field(description="Swept price (whole currency units)")
    total_position: Annotated[Decimal, Field(description="Cumulative position")] = Field()
    average_price: Annotated[Decimal, Field(description="Weighted average entry price")] = Field()
    profit_loss: Annotated[Decimal, Field(description="Unrealized profit/loss")] = Field()

    @field_validator("total_position", "average_price", "profit_loss", mode="before")
    @classmethod
    def parse_decimal_fields(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)


class ResultSet(BaseModel):
    """Sampled rows of one sweep, with inputs and deterministic SHA256."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    parameters: SimulationParameters
    rules: list[SizingRule]
    rows: list[ResultRow] = Field(description="Sampled rows, ascending by price")
    steps: int = Field(ge=0, description="Number of swept prices")
    sha256: str = Field(description="SHA256 of canonical JSON dump (computed)")

    @property
    def final(self) -> ResultRow:
        """Last sampled row (the summary row)."""
        return self.rows[-1]

    @classmethod
    def compute_sha256(cls, data: dict[str, Any]) -> str:
        """Compute SHA256 of canonical JSON dump (sorted keys, no whitespace)."""
        canonical = orjson.dumps(data, option=orjson.OPT_SORT_KEYS)
        return hashlib.sha256(canonical).hexdigest()


def build_result_set(
    params: SimulationParameters,
    rule_set: RuleSet,
    rows: list[ResultRow],
    steps: int,
) -> ResultSet:
    """Build a ResultSet with its SHA256 filled in.

    Args:
        params: Parameters the sweep ran with.
        rule_set: Rules the sweep ran with.
        rows: Sampled rows in sweep order.
        steps: Number of swept prices.

    Returns:
        ResultSet with computed SHA256.
    """
    rules = list(rule_set)
    data = {
        "parameters": params.model_dump(mode="json"),
        "rules": [rule.model_dump(mode="json") for rule in rules],
        "rows": [row.model_dump(mode="json") for row in rows],
        "steps": steps,
    }
    return ResultSet(
        parameters=params,
        rules=rules,
        rows=rows,
        steps=steps,
        sha256=ResultSet.compute_sha256(data),
    )
