"""Error taxonomy for the position simulator.

Every failure carries exactly one human-readable message (``str(exc)``)
that the presentation layer can show as-is. Validation runs eagerly,
before any sweep work starts, and the first violation found is raised.
"""

from __future__ import annotations


class SimulatorError(Exception):
    """Base exception for all simulator failures."""


class ValidationError(SimulatorError):
    """Raised when rules or parameters are rejected before a sweep."""


class MissingRuleError(ValidationError):
    """Raised when no valid sizing rule remains after filtering."""


class InvalidRuleRowError(ValidationError):
    """Raised in strict parse mode for a partially filled or unparseable row."""


class InvalidRuleRangeError(ValidationError):
    """Raised when rule prices are not whole, below 1, or out of order."""


class InvalidRuleSizeError(ValidationError):
    """Raised when a rule's size is non-positive or not a 0.1 multiple."""


class InvalidParameterError(ValidationError):
    """Raised when a scalar simulation parameter is missing or invalid."""


class SweepLimitError(InvalidParameterError):
    """Raised when a sweep would never finish or exceed the iteration cap."""


class ConfigError(SimulatorError):
    """Raised when a configuration file cannot be read or parsed."""


class SimulationCancelledError(SimulatorError):
    """Raised when a caller-supplied cancel hook stops a running sweep."""
