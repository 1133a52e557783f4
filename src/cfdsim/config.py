"""Simulator configuration file loading.

A config file holds the same inputs as the simulator form: scalar
parameters, raw rule rows and presentation settings. YAML (.yaml/.yml) and
JSON (.json) are accepted.

Example (YAML):
    parameters:
      start_price: 41150
      add_interval: 50
      display_interval: 400
      direction: buy
    rules:
      - [41150, 41950, 0.1]
      - {start: 42150, end: 42950, size: 0.2}
    parse_mode: lenient

Raw values are kept as written and only converted by ``cfdsim.validation``,
so a bad value fails with the same error the form would show.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
import pydantic
import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field

from cfdsim.contracts import (
    DEFAULT_MAX_ITERATIONS,
    Direction,
    ParseMode,
    RuleSet,
    SamplingMode,
    SimulationParameters,
)
from cfdsim.errors import ConfigError
from cfdsim.report.formatter import DEFAULT_CURRENCY_SUFFIX
from cfdsim.validation import parse_parameters, parse_rules

RawValue = str | int | float | None

# Starter rows the form is pre-filled with
DEFAULT_RULES: tuple[tuple[int, int, float], ...] = (
    (41150, 41950, 0.1),
    (42150, 42950, 0.2),
    (43150, 43950, 0.3),
)
DEFAULT_START_PRICE = 41150
DEFAULT_ADD_INTERVAL = 50
DEFAULT_DISPLAY_INTERVAL = 400


class ParameterConfig(BaseModel):
    """Raw scalar parameters as written in the config file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start_price: RawValue = DEFAULT_START_PRICE
    add_interval: RawValue = DEFAULT_ADD_INTERVAL
    display_interval: RawValue = DEFAULT_DISPLAY_INTERVAL
    direction: str = Direction.BUY.value
    sampling_mode: str = SamplingMode.EXACT_MODULO.value
    max_iterations: int = DEFAULT_MAX_ITERATIONS


class SimulatorConfig(BaseModel):
    """Complete simulator input (frozen)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    parameters: ParameterConfig = Field(default_factory=ParameterConfig)
    rules: list[list[RawValue] | dict[str, RawValue]] = Field(
        default_factory=lambda: [list(rule) for rule in DEFAULT_RULES],
        description="Raw rule rows: [start, end, size] or {start, end, size}",
    )
    parse_mode: ParseMode = Field(
        default=ParseMode.LENIENT,
        description="lenient skips incomplete rule rows, strict rejects them",
    )
    currency_suffix: str = Field(
        default=DEFAULT_CURRENCY_SUFFIX,
        description="Suffix appended to formatted money values",
    )

    def build_parameters(self) -> SimulationParameters:
        """Validate the raw parameters block."""
        return parse_parameters(**self.parameters.model_dump())

    def build_rule_set(self) -> RuleSet:
        """Validate the raw rule rows."""
        return parse_rules(self.rules, mode=self.parse_mode)


def _read_data(path: Path) -> Any:
    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(path.read_text(encoding="utf-8"))
        if suffix == ".json":
            return orjson.loads(path.read_bytes())
    except (yaml.YAMLError, orjson.JSONDecodeError) as exc:
        raise ConfigError(f"Malformed config file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    raise ConfigError(f"Unsupported config file type '{suffix}' (use .yaml, .yml or .json)")


def load_config(path: Path) -> SimulatorConfig:
    """Load a simulator config file.

    Args:
        path: Path to a .yaml, .yml or .json file.

    Returns:
        SimulatorConfig (values not yet validated as numbers).

    Raises:
        ConfigError: missing, unreadable, malformed or wrongly shaped file.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    data = _read_data(path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")

    try:
        return SimulatorConfig.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc
