"""
Trend indicators: MACD, ADX/DMI, Ichimoku, SuperTrend.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from .base import Indicator
from .smoothing import RollingExtreme, RunningEMA, WilderAverage
from .volatility import ATR, true_range
from ..data.candles import Bar
from ..shared.defaults import (
    ADX_PERIOD, ICHIMOKU_KIJUN, ICHIMOKU_SENKOU_B, ICHIMOKU_TENKAN,
    MACD_FAST, MACD_SIGNAL, MACD_SLOW, SUPERTREND_MULTIPLIER, SUPERTREND_PERIOD,
)
from ..shared.errors import (
    ConfigurationError, require_ascending_periods, require_positive_int, require_positive_number,
)


@dataclass(frozen=True)
class MACDValue:
    """MACD line, signal line and histogram for one bar."""
    macd: float
    signal: float
    histogram: float


class MACD(Indicator):
    """
    Moving Average Convergence Divergence.

    MACD = EMA(fast) - EMA(slow); signal = EMA(signal) of the MACD line;
    histogram = MACD - signal. Values are published from bar slow + signal.
    """

    def __init__(self, fast: int = MACD_FAST, slow: int = MACD_SLOW, signal: int = MACD_SIGNAL):
        super().__init__()
        self.fast = require_positive_int("MACD fast period", fast)
        self.slow = require_positive_int("MACD slow period", slow)
        self.signal = require_positive_int("MACD signal period", signal)
        if fast >= slow:
            raise ConfigurationError(
                f"MACD fast period must be < slow period, got fast={fast}, slow={slow}"
            )
        self._fast_ema = RunningEMA(fast)
        self._slow_ema = RunningEMA(slow)
        self._signal_ema = RunningEMA(signal)

    @property
    def params(self) -> Tuple:
        return (self.fast, self.slow, self.signal)

    @property
    def warm_up_length(self) -> int:
        return self.slow + self.signal

    def _next(self, bar: Bar) -> Optional[MACDValue]:
        fast = self._fast_ema.push(bar.close)
        slow = self._slow_ema.push(bar.close)
        if fast is None or slow is None:
            return None
        line = fast - slow
        signal = self._signal_ema.push(line)
        if signal is None:
            return None
        return MACDValue(macd=line, signal=signal, histogram=line - signal)


@dataclass(frozen=True)
class ADXValue:
    """ADX with its directional indicators."""
    adx: float
    plus_di: float
    minus_di: float

    @property
    def di_spread(self) -> float:
        return abs(self.plus_di - self.minus_di)


class ADX(Indicator):
    """
    Average Directional Index (Wilder).

    +DM/-DM and true range are Wilder-smoothed over `period`; DX is then
    Wilder-smoothed again, so the first ADX needs 2 * period bars.
    """

    def __init__(self, period: int = ADX_PERIOD):
        super().__init__()
        self.period = require_positive_int("ADX period", period)
        self._prev: Optional[Bar] = None
        self._tr = WilderAverage(period)
        self._plus_dm = WilderAverage(period)
        self._minus_dm = WilderAverage(period)
        self._dx = WilderAverage(period)

    @property
    def params(self) -> Tuple:
        return (self.period,)

    @property
    def warm_up_length(self) -> int:
        return 2 * self.period

    def _next(self, bar: Bar) -> Optional[ADXValue]:
        prev = self._prev
        self._prev = bar
        if prev is None:
            return None

        up_move = bar.high - prev.high
        down_move = prev.low - bar.low
        plus_dm = up_move if up_move > down_move and up_move > 0 else 0.0
        minus_dm = down_move if down_move > up_move and down_move > 0 else 0.0

        atr = self._tr.push(true_range(bar, prev.close))
        smoothed_plus = self._plus_dm.push(plus_dm)
        smoothed_minus = self._minus_dm.push(minus_dm)
        if atr is None or smoothed_plus is None or smoothed_minus is None:
            return None

        if atr == 0:
            plus_di = minus_di = 0.0
        else:
            plus_di = 100.0 * smoothed_plus / atr
            minus_di = 100.0 * smoothed_minus / atr
        di_total = plus_di + minus_di
        dx = 0.0 if di_total == 0 else 100.0 * abs(plus_di - minus_di) / di_total

        adx = self._dx.push(dx)
        if adx is None:
            return None
        return ADXValue(adx=adx, plus_di=plus_di, minus_di=minus_di)


@dataclass(frozen=True)
class IchimokuValue:
    """Ichimoku lines for one bar (spans are not displaced forward)."""
    tenkan: float
    kijun: float
    senkou_a: float
    senkou_b: float

    @property
    def cloud_top(self) -> float:
        return max(self.senkou_a, self.senkou_b)

    @property
    def cloud_bottom(self) -> float:
        return min(self.senkou_a, self.senkou_b)

    @property
    def cloud_thickness(self) -> float:
        return abs(self.senkou_a - self.senkou_b)


class Ichimoku(Indicator):
    """Ichimoku Kinko Hyo from rolling high/low midpoints."""

    def __init__(self, tenkan: int = ICHIMOKU_TENKAN, kijun: int = ICHIMOKU_KIJUN,
                 senkou_b: int = ICHIMOKU_SENKOU_B):
        super().__init__()
        self.tenkan, self.kijun, self.senkou_b = require_ascending_periods(
            "Ichimoku periods (tenkan, kijun, senkou_b)", (tenkan, kijun, senkou_b), min_length=3
        )
        self._windows = [
            (RollingExtreme(p, maximum=True), RollingExtreme(p, maximum=False))
            for p in (self.tenkan, self.kijun, self.senkou_b)
        ]

    @property
    def params(self) -> Tuple:
        return (self.tenkan, self.kijun, self.senkou_b)

    @property
    def warm_up_length(self) -> int:
        return self.senkou_b

    def _next(self, bar: Bar) -> Optional[IchimokuValue]:
        midpoints = []
        for highest, lowest in self._windows:
            high = highest.push(bar.high)
            low = lowest.push(bar.low)
            midpoints.append(None if high is None else (high + low) / 2.0)
        tenkan, kijun, senkou_b = midpoints
        if senkou_b is None:
            return None
        return IchimokuValue(
            tenkan=tenkan,
            kijun=kijun,
            senkou_a=(tenkan + kijun) / 2.0,
            senkou_b=senkou_b,
        )


@dataclass(frozen=True)
class SuperTrendValue:
    """SuperTrend line and direction (+1 uptrend, -1 downtrend)."""
    value: float
    direction: int
    upper: float
    lower: float

    @property
    def is_uptrend(self) -> bool:
        return self.direction > 0


class SuperTrend(Indicator):
    """
    SuperTrend on hl2 +/- multiplier * ATR.

    Final bands only tighten while price stays inside them; the direction
    flips when the close breaks the opposite band. The first defined bar
    starts in an uptrend when close >= hl2.
    """

    def __init__(self, period: int = SUPERTREND_PERIOD, multiplier: float = SUPERTREND_MULTIPLIER):
        super().__init__()
        self.period = require_positive_int("SuperTrend period", period)
        self.multiplier = require_positive_number("SuperTrend multiplier", multiplier)
        self._atr = ATR(period)
        self._prev_close: Optional[float] = None
        self._upper: Optional[float] = None
        self._lower: Optional[float] = None
        self._direction: Optional[int] = None

    @property
    def params(self) -> Tuple:
        return (self.period, self.multiplier)

    @property
    def warm_up_length(self) -> int:
        return self.period

    def _next(self, bar: Bar) -> Optional[SuperTrendValue]:
        atr = self._atr.update(bar)
        prev_close = self._prev_close
        self._prev_close = bar.close
        if atr is None:
            return None

        mid = bar.hl2
        basic_upper = mid + self.multiplier * atr
        basic_lower = mid - self.multiplier * atr

        if self._direction is None:
            upper, lower = basic_upper, basic_lower
            direction = 1 if bar.close >= mid else -1
        else:
            upper = basic_upper if basic_upper < self._upper or prev_close > self._upper else self._upper
            lower = basic_lower if basic_lower > self._lower or prev_close < self._lower else self._lower
            if self._direction > 0:
                direction = -1 if bar.close < lower else 1
            else:
                direction = 1 if bar.close > upper else -1

        self._upper, self._lower, self._direction = upper, lower, direction
        value = lower if direction > 0 else upper
        return SuperTrendValue(value=value, direction=direction, upper=upper, lower=lower)
