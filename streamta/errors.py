"""
Indicator error kinds.

Errors are raised only at construction (invalid parameters) and from batch
computation (unusable input). Streaming updates never raise for numeric edge
cases; those are resolved by the explicit policies of each accumulator.

Every error carries structured attributes so callers can branch on them
without parsing messages.
"""

from __future__ import annotations

import numbers
from typing import Any


class IndicatorError(ValueError):
    """Base class for all indicator errors."""


class ConfigurationError(IndicatorError):
    """
    A constructor parameter is outside its valid domain.

    Permanent: the instance is never created.

    Attributes:
        parameter: Name of the offending parameter (None if not tied to one).
        value: The rejected value.
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        value: Any = None,
    ) -> None:
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class InsufficientDataError(IndicatorError):
    """
    Batch input is shorter than the indicator's warm-up requirement.

    No partial output is returned.

    Attributes:
        indicator: Indicator name.
        required: Minimum number of inputs needed.
        received: Number of inputs supplied.
    """

    def __init__(self, indicator: str, required: int, received: int) -> None:
        super().__init__(
            f"{indicator} needs at least {required} inputs, got {received}\n"
            f"\n"
            f"Fix: supply >= {required} observations or lower the period"
        )
        self.indicator = indicator
        self.required = required
        self.received = received


class EmptyInputError(InsufficientDataError):
    """Batch input has zero length."""

    def __init__(self, indicator: str, required: int) -> None:
        super().__init__(indicator, required, 0)
        self.args = (f"{indicator} received empty input (needs >= {required})",)


def validate_period(value: Any, name: str = "length", minimum: int = 1) -> int:
    """
    Validate an integer period parameter.

    Raises:
        ConfigurationError: If value is not an int or is below `minimum`.
    """
    # bool is an int subclass; True would silently mean period 1
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(
            f"{name} must be an integer, got {value!r}\n"
            f"\n"
            f"Fix: {name}=14",
            parameter=name,
            value=value,
        )
    if value < minimum:
        raise ConfigurationError(
            f"{name} must be >= {minimum}, got {value}\n"
            f"\n"
            f"Fix: {name}={max(minimum, 14)}",
            parameter=name,
            value=value,
        )
    return int(value)


def validate_positive(value: Any, name: str) -> float:
    """
    Validate a strictly positive finite real parameter (e.g. band multiplier).

    Raises:
        ConfigurationError: If value is not a number, not finite, or <= 0.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(
            f"{name} must be a number, got {value!r}\n"
            f"\n"
            f"Fix: {name}=2.0",
            parameter=name,
            value=value,
        )
    # NaN fails every comparison, so `not value > 0` also rejects it
    if not value > 0 or value == float("inf"):
        raise ConfigurationError(
            f"{name} must be a positive finite number, got {value}\n"
            f"\n"
            f"Fix: {name}=2.0",
            parameter=name,
            value=value,
        )
    return float(value)
