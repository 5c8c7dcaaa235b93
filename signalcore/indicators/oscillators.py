"""
Bounded and momentum oscillators: RSI, Stochastic, Williams %R, ROC, CCI.

Ratio-based values resolve division by zero to a documented saturation
value instead of NaN:
- RSI: average loss 0 -> 100
- Stochastic %K: flat high/low range -> 50
- Williams %R: flat high/low range -> -50
- ROC: base close 0 -> 0
- CCI: mean deviation 0 -> 0
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from .base import Indicator
from .smoothing import RollingExtreme, RollingWindow, RunningSMA, WilderAverage
from ..data.candles import Bar
from ..shared.defaults import (
    RSI_PERIOD, STOCH_PERIOD, STOCH_D_PERIOD, WILLIAMS_PERIOD, ROC_PERIOD, CCI_PERIOD,
)
from ..shared.errors import require_positive_int

CCI_CONSTANT = 0.015


def rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    """RSI = 100 - 100 / (1 + avg_gain / avg_loss), saturating at 100."""
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


class RSI(Indicator):
    """
    Relative Strength Index with Wilder smoothing.

    Needs period + 1 bars: the first bar only provides the reference close.
    """

    def __init__(self, period: int = RSI_PERIOD):
        super().__init__()
        self.period = require_positive_int("RSI period", period)
        self._prev_close: Optional[float] = None
        self._gain = WilderAverage(period)
        self._loss = WilderAverage(period)

    @property
    def params(self) -> Tuple:
        return (self.period,)

    @property
    def warm_up_length(self) -> int:
        return self.period + 1

    def _next(self, bar: Bar) -> Optional[float]:
        if self._prev_close is None:
            self._prev_close = bar.close
            return None
        change = bar.close - self._prev_close
        self._prev_close = bar.close
        avg_gain = self._gain.push(change if change > 0 else 0.0)
        avg_loss = self._loss.push(-change if change < 0 else 0.0)
        if avg_gain is None or avg_loss is None:
            return None
        return rsi_from_averages(avg_gain, avg_loss)


@dataclass(frozen=True)
class StochasticValue:
    """Stochastic oscillator %K and its SMA %D."""
    k: float
    d: float


class Stochastic(Indicator):
    """Stochastic oscillator (%K over k_period, %D = SMA of %K over d_period)."""

    def __init__(self, k_period: int = STOCH_PERIOD, d_period: int = STOCH_D_PERIOD):
        super().__init__()
        self.k_period = require_positive_int("Stochastic k_period", k_period)
        self.d_period = require_positive_int("Stochastic d_period", d_period)
        self._highest = RollingExtreme(k_period, maximum=True)
        self._lowest = RollingExtreme(k_period, maximum=False)
        self._d = RunningSMA(d_period)

    @property
    def params(self) -> Tuple:
        return (self.k_period, self.d_period)

    @property
    def warm_up_length(self) -> int:
        return self.k_period + self.d_period - 1

    def _next(self, bar: Bar) -> Optional[StochasticValue]:
        highest = self._highest.push(bar.high)
        lowest = self._lowest.push(bar.low)
        if highest is None or lowest is None:
            return None
        if highest == lowest:
            k = 50.0
        else:
            k = 100.0 * (bar.close - lowest) / (highest - lowest)
        d = self._d.push(k)
        if d is None:
            return None
        return StochasticValue(k=k, d=d)


class WilliamsR(Indicator):
    """Williams %R in [-100, 0]."""

    def __init__(self, period: int = WILLIAMS_PERIOD):
        super().__init__()
        self.period = require_positive_int("Williams %R period", period)
        self._highest = RollingExtreme(period, maximum=True)
        self._lowest = RollingExtreme(period, maximum=False)

    @property
    def params(self) -> Tuple:
        return (self.period,)

    @property
    def warm_up_length(self) -> int:
        return self.period

    def _next(self, bar: Bar) -> Optional[float]:
        highest = self._highest.push(bar.high)
        lowest = self._lowest.push(bar.low)
        if highest is None or lowest is None:
            return None
        if highest == lowest:
            return -50.0
        return -100.0 * (highest - bar.close) / (highest - lowest)


class ROC(Indicator):
    """Rate of change in percent versus the close `period` bars earlier."""

    def __init__(self, period: int = ROC_PERIOD):
        super().__init__()
        self.period = require_positive_int("ROC period", period)
        self._closes = RollingWindow(period + 1)

    @property
    def params(self) -> Tuple:
        return (self.period,)

    @property
    def warm_up_length(self) -> int:
        return self.period + 1

    def _next(self, bar: Bar) -> Optional[float]:
        self._closes.push(bar.close)
        if not self._closes.full:
            return None
        base = self._closes.values[0]
        if base == 0:
            return 0.0
        return 100.0 * (bar.close - base) / base


class CCI(Indicator):
    """
    Commodity Channel Index on the typical price.

    The mean absolute deviation has no running form, so each update walks
    the `period` window once.
    """

    def __init__(self, period: int = CCI_PERIOD):
        super().__init__()
        self.period = require_positive_int("CCI period", period)
        self._prices = RollingWindow(period)

    @property
    def params(self) -> Tuple:
        return (self.period,)

    @property
    def warm_up_length(self) -> int:
        return self.period

    def _next(self, bar: Bar) -> Optional[float]:
        typical = bar.typical_price
        self._prices.push(typical)
        if not self._prices.full:
            return None
        mean = self._prices.total / self.period
        deviation = sum(abs(v - mean) for v in self._prices.values) / self.period
        if deviation == 0:
            return 0.0
        return (typical - mean) / (CCI_CONSTANT * deviation)
