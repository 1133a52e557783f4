"""SizingRule contract and RuleSet.

A SizingRule maps an inclusive price range to the position size added at
every swept price inside it. A RuleSet is the ordered, validated collection
the sweep engine consumes.

Lookup policy is first-match-wins: rules are scanned in the order they were
given and the first rule whose [start, end] range contains the price decides
the increment. Overlapping ranges are allowed and are never reordered,
merged or resolved by width.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cfdsim.contracts.base import ZERO, is_tenth_multiple, parse_decimal
from cfdsim.errors import InvalidRuleRangeError, InvalidRuleSizeError, MissingRuleError


class SizingRule(BaseModel):
    """Price range to position increment mapping (immutable)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: int = Field(description="Inclusive lower bound (whole currency units)")
    end: int = Field(description="Inclusive upper bound (whole currency units)")
    size: Annotated[Decimal, Field(description="Position added per matched price")] = Field()

    @field_validator("size", mode="before")
    @classmethod
    def parse_size(cls, v: object) -> Decimal:
        """Parse size to Decimal."""
        return parse_decimal(v)

    def contains(self, price: int) -> bool:
        """Check if price falls inside the inclusive range."""
        return self.start <= price <= self.end


def validate_rule(rule: SizingRule, number: int) -> None:
    """Check a single rule, raising on the first violation.

    Args:
        rule: Rule to check.
        number: 1-based rule number used in the error message.

    Raises:
        InvalidRuleRangeError: start below 1 or start >= end.
        InvalidRuleSizeError: size <= 0 or not a multiple of 0.1.
    """
    if rule.start < 1 or rule.end < 1:
        raise InvalidRuleRangeError(
            f"Rule {number}: start and end prices must be whole numbers of at least 1"
        )
    if rule.start >= rule.end:
        raise InvalidRuleRangeError(
            f"Rule {number}: start price ({rule.start}) must be less than end price ({rule.end})"
        )
    if rule.size <= ZERO:
        raise InvalidRuleSizeError(f"Rule {number}: size must be greater than 0, got {rule.size}")
    if not is_tenth_multiple(rule.size):
        raise InvalidRuleSizeError(
            f"Rule {number}: size must be a multiple of 0.1, got {rule.size}"
        )


@dataclass(frozen=True)
class RuleSet:
    """Ordered, non-empty collection of valid sizing rules."""

    rules: tuple[SizingRule, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))
        if not self.rules:
            raise MissingRuleError("At least one position sizing rule is required")
        for number, rule in enumerate(self.rules, start=1):
            validate_rule(rule, number)

    def __iter__(self) -> Iterator[SizingRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def max_end(self) -> int:
        """Highest end price across all rules (the sweep ceiling)."""
        return max(rule.end for rule in self.rules)

    def lookup(self, price: int) -> Decimal:
        """Return the size of the first rule containing price, or 0."""
        for rule in self.rules:
            if rule.contains(price):
                return rule.size
        return ZERO
