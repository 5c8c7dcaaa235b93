"""
Base indicator interface.

All indicators follow this pattern:
1. Validate parameters at construction (ConfigurationError on bad values)
2. Consume bars one at a time via update()
3. Return None until warm_up_length bars have been consumed, then one
   snapshot per bar

Indicators never look at future bars and never recompute history, so
feeding a series bar by bar produces exactly the same values as any other
replay of the same bars.
"""
from abc import ABC, abstractmethod
from operator import attrgetter
from typing import Any, Callable, Dict, Optional, Tuple

from ..data.candles import Bar
from ..shared.errors import ConfigurationError

PRICE_SOURCES: Dict[str, Callable[[Bar], float]] = {
    'open': attrgetter('open'),
    'high': attrgetter('high'),
    'low': attrgetter('low'),
    'close': attrgetter('close'),
    'volume': attrgetter('volume'),
    'typical_price': attrgetter('typical_price'),
    'hl2': attrgetter('hl2'),
}


def price_source(name: str) -> Callable[[Bar], float]:
    """Return the bar accessor for a price source name."""
    try:
        return PRICE_SOURCES[name]
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"source must be one of {sorted(PRICE_SOURCES)}, got {name!r}"
        ) from None


class Indicator(ABC):
    """
    Base class for all incremental indicators.

    One instance holds the smoothing state for one parameter set; the
    IndicatorEngine keys instances by (class, params) so different parameter
    sets never share state.
    """

    def __init__(self):
        self._bars_seen = 0

    @property
    @abstractmethod
    def params(self) -> Tuple:
        """Normalized parameter tuple (part of the engine cache key)."""

    @property
    @abstractmethod
    def warm_up_length(self) -> int:
        """Number of bars required before the first defined value."""

    @abstractmethod
    def _next(self, bar: Bar) -> Any:
        """Consume one bar and return the raw value for it (None while undefined)."""

    def update(self, bar: Bar) -> Optional[Any]:
        """
        Advance the indicator by one bar.

        Args:
            bar: The next bar of the series

        Returns:
            Snapshot for this bar, or None during warm-up
        """
        self._bars_seen += 1
        value = self._next(bar)
        if self._bars_seen < self.warm_up_length:
            return None
        return value

    @property
    def bars_seen(self) -> int:
        return self._bars_seen

    def __repr__(self) -> str:
        args = ", ".join(str(p) for p in self.params)
        return f"{type(self).__name__}({args})"
