"""
Configuration errors.

Every invalid parameter is reported when a spec, indicator or strategy is
constructed. Missing data during evaluation is never an error: it yields
None (indicators) or False (filters).
"""
from typing import Any, Iterable


class ConfigurationError(ValueError):
    """Raised when an indicator, filter or strategy is configured with invalid parameters."""


def require_positive_int(name: str, value: Any) -> int:
    """Validate a strictly positive integer parameter (bools are rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")
    return value


def require_non_negative_int(name: str, value: Any) -> int:
    """Validate an integer parameter that may be zero."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {value}")
    return value


def require_number(name: str, value: Any) -> float:
    """Validate a finite real number and return it as float."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    value = float(value)
    if value != value or value in (float('inf'), float('-inf')):
        raise ConfigurationError(f"{name} must be finite, got {value}")
    return value


def require_positive_number(name: str, value: Any) -> float:
    value = require_number(name, value)
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")
    return value


def require_ascending_periods(name: str, values: Iterable[Any], min_length: int = 1) -> tuple:
    """
    Validate a list of periods: non-empty, positive integers, strictly ascending.

    Returns:
        The periods as a tuple (hashable, usable as part of a cache key)
    """
    if isinstance(values, (str, bytes)) or not hasattr(values, '__iter__'):
        raise ConfigurationError(f"{name} must be a list of periods, got {values!r}")
    periods = tuple(values)
    if len(periods) < min_length:
        raise ConfigurationError(
            f"{name} must contain at least {min_length} period(s), got {list(periods)}"
        )
    for period in periods:
        require_positive_int(f"{name} entry", period)
    if any(a >= b for a, b in zip(periods, periods[1:])):
        raise ConfigurationError(f"{name} must be strictly ascending, got {list(periods)}")
    return periods
