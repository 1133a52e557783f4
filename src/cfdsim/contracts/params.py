"""Simulation parameters (frozen).

Holds the scalar inputs of one sweep. Positivity and sweep bounds are
checked by ``cfdsim.validation.validate_parameters`` so that failures
surface as ``InvalidParameterError`` rather than model errors.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cfdsim.contracts.base import parse_decimal, round_to_whole
from cfdsim.contracts.types import Direction, SamplingMode

DEFAULT_MAX_ITERATIONS = 1_000_000


class SimulationParameters(BaseModel):
    """Scalar inputs of a sweep.

    All price values use Decimal for precision.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    start_price: Annotated[Decimal, Field(description="Price the sweep starts from")] = Field()
    add_interval: Annotated[
        Decimal,
        Field(description="Amount the swept price advances per step"),
    ] = Field()
    display_interval: Annotated[
        Decimal,
        Field(description="Stride between swept prices kept as result rows"),
    ] = Field()
    direction: Direction = Field(
        default=Direction.BUY,
        description="buy or sell; decides the profit/loss sign",
    )
    sampling_mode: SamplingMode = Field(
        default=SamplingMode.EXACT_MODULO,
        description="Row sampling rule (exact modulo or every Nth step)",
    )
    max_iterations: int = Field(
        default=DEFAULT_MAX_ITERATIONS,
        description="Upper bound on swept steps",
    )

    @field_validator("start_price", "add_interval", "display_interval", mode="before")
    @classmethod
    def parse_decimal_fields(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)

    @property
    def display_stride(self) -> int:
        """Steps between sampled rows in STEP_INDEX mode (at least 1)."""
        return max(1, round_to_whole(self.display_interval / self.add_interval))
