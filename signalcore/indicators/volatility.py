"""
Volatility indicators: Bollinger Bands and ATR.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .base import Indicator
from .smoothing import RollingWindow, WilderAverage
from ..data.candles import Bar
from ..shared.defaults import ATR_PERIOD, BB_MULTIPLIER, BB_PERIOD
from ..shared.errors import ConfigurationError, require_positive_int, require_positive_number


def true_range(bar: Bar, prev_close: Optional[float]) -> float:
    """True range; the first bar of a series has no previous close and uses high - low."""
    if prev_close is None:
        return bar.high - bar.low
    return max(
        bar.high - bar.low,
        abs(bar.high - prev_close),
        abs(bar.low - prev_close),
    )


@dataclass(frozen=True)
class BollingerBands:
    """Bollinger band values for one bar."""
    upper: float
    middle: float
    lower: float

    @property
    def width(self) -> float:
        """Absolute band width (upper - lower)."""
        return self.upper - self.lower

    @property
    def normalized_width(self) -> float:
        """Band width relative to the middle band; +inf when the middle band is 0."""
        if self.middle == 0:
            return math.inf
        return (self.upper - self.lower) / self.middle


class Bollinger(Indicator):
    """
    Bollinger Bands over the close.

    Mean and population standard deviation come from the running sum and sum
    of squares of a RollingWindow over the last `period` closes. A NaN close
    makes the bands NaN until it leaves the window.
    """

    def __init__(self, period: int = BB_PERIOD, multiplier: float = BB_MULTIPLIER):
        super().__init__()
        self.period = require_positive_int("Bollinger period", period)
        if period < 2:
            raise ConfigurationError(f"Bollinger period must be >= 2, got {period}")
        self.multiplier = require_positive_number("Bollinger multiplier", multiplier)
        self._closes = RollingWindow(period)

    @property
    def params(self) -> Tuple:
        return (self.period, self.multiplier)

    @property
    def warm_up_length(self) -> int:
        return self.period

    def _next(self, bar: Bar) -> Optional[BollingerBands]:
        self._closes.push(bar.close)
        if not self._closes.full:
            return None
        mean = self._closes.total / self.period
        variance = max(self._closes.total_squares / self.period - mean * mean, 0.0)
        deviation = self.multiplier * math.sqrt(variance)
        return BollingerBands(upper=mean + deviation, middle=mean, lower=mean - deviation)


class ATR(Indicator):
    """Average True Range with Wilder smoothing."""

    def __init__(self, period: int = ATR_PERIOD):
        super().__init__()
        self.period = require_positive_int("ATR period", period)
        self._prev_close: Optional[float] = None
        self._average = WilderAverage(period)

    @property
    def params(self) -> Tuple:
        return (self.period,)

    @property
    def warm_up_length(self) -> int:
        return self.period

    def _next(self, bar: Bar) -> Optional[float]:
        tr = true_range(bar, self._prev_close)
        self._prev_close = bar.close
        return self._average.push(tr)
