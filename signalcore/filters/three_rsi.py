"""
Three-RSI filter: short/medium/long RSI alignment with MA and ADX context.

Codes 0-8 read all RSIs at once. The range and cross codes from 9 on also
apply to every RSI; SIDEWAYS, the reversal and the double bottom/top codes
read the shortest RSI, and DIVERGENCE / CONVERGENCE compare the spread
between the shortest and longest.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple

from .base import (
    FilterKind, FilterSpec, all_of, bar_field, crossed, falling, field, gt, is_defined, lt,
    rising, sideways, window,
)
from ..indicators.moving_average import moving_average_class
from ..shared.defaults import MA_TYPE, THREE_RSI_ADX_PERIOD, THREE_RSI_MA_PERIOD, THREE_RSI_PERIODS
from ..shared.errors import require_ascending_periods, require_positive_int

ADX_TREND_LEVEL = 20.0
SIDEWAYS_TOLERANCE = 0.02


class ThreeRSIFilterType(IntEnum):
    ALL_BELOW_50 = 0
    ALL_ABOVE_50 = 1
    REVERSE_ARRANGEMENT = 2
    REGULAR_ARRANGEMENT = 3
    LOW_BELOW_MA = 4
    HIGH_ABOVE_MA = 5
    ADX_ABOVE_20 = 6
    ALL_BELOW_30 = 7
    ALL_ABOVE_70 = 8
    STABLE_RANGE = 9
    BULLISH_RANGE = 10
    BEARISH_RANGE = 11
    OVERBOUGHT_RANGE = 12
    OVERSOLD_RANGE = 13
    CROSS_ABOVE_50 = 14
    CROSS_BELOW_50 = 15
    CROSS_ABOVE_40 = 16
    CROSS_BELOW_60 = 17
    CROSS_ABOVE_20 = 18
    CROSS_BELOW_80 = 19
    SIDEWAYS = 20
    BULLISH_MOMENTUM = 21
    BEARISH_MOMENTUM = 22
    DIVERGENCE = 23
    CONVERGENCE = 24
    DOUBLE_BOTTOM = 25
    DOUBLE_TOP = 26
    OVERBOUGHT_REVERSAL = 27
    OVERSOLD_REVERSAL = 28
    NEUTRAL_TREND = 29
    EXTREME_OVERBOUGHT = 30
    EXTREME_OVERSOLD = 31


def _rsis(s, ctx, i) -> Optional[List[float]]:
    values = [ctx.rsi(i, p) for p in s.rsi_periods]
    return values if is_defined(*values) else None


def _with_rsis(predicate):
    def condition(s, ctx, i):
        values = _rsis(s, ctx, i)
        return None if values is None else predicate(values)
    return condition


def _all_in(low, high):
    return _with_rsis(lambda rsis: all(low <= r <= high for r in rsis))


def _all_cross_above(level):
    above = _with_rsis(lambda rsis: all(r > level for r in rsis))
    return lambda s, ctx, i: crossed(lambda j: above(s, ctx, j), i)


def _all_cross_below(level):
    below = _with_rsis(lambda rsis: all(r < level for r in rsis))
    return lambda s, ctx, i: crossed(lambda j: below(s, ctx, j), i)


def _short(s, ctx):
    return lambda j: ctx.rsi(j, s.rsi_periods[0])


def _spread(s, ctx):
    def spread(j):
        values = _rsis(s, ctx, j)
        return None if values is None else abs(values[0] - values[-1])
    return spread


def _ma(s, ctx, i):
    return ctx.moving_average(i, s.ma_type, s.ma_period)


def _double_extreme(s, ctx, i, bottom):
    """W (bottom) or M (top) shape over the last five values of the shortest RSI."""
    v = window(_short(s, ctx), i, 5)
    if v is None:
        return None
    if bottom:
        return v[0] <= 30.0 and v[1] > v[0] and v[2] <= 30.0 and v[3] > v[2] and v[4] > v[3]
    return v[0] >= 70.0 and v[1] < v[0] and v[2] >= 70.0 and v[3] < v[2] and v[4] < v[3]


_T = ThreeRSIFilterType

_REGULAR = _with_rsis(lambda rsis: all(a > b for a, b in zip(rsis, rsis[1:])))
# Shortest period weakest: short < medium < long
_REVERSE = _with_rsis(lambda rsis: all(a < b for a, b in zip(rsis, rsis[1:])))

_CONDITIONS = {
    _T.ALL_BELOW_50: _with_rsis(lambda rsis: all(r < 50.0 for r in rsis)),
    _T.ALL_ABOVE_50: _with_rsis(lambda rsis: all(r > 50.0 for r in rsis)),
    _T.REVERSE_ARRANGEMENT: _REVERSE,
    _T.REGULAR_ARRANGEMENT: _REGULAR,
    _T.LOW_BELOW_MA: lambda s, ctx, i: lt(bar_field(ctx, i, 'low'), _ma(s, ctx, i)),
    _T.HIGH_ABOVE_MA: lambda s, ctx, i: gt(bar_field(ctx, i, 'high'), _ma(s, ctx, i)),
    _T.ADX_ABOVE_20: lambda s, ctx, i: gt(field(ctx.adx(i, s.adx_period), 'adx'), ADX_TREND_LEVEL),
    _T.ALL_BELOW_30: _with_rsis(lambda rsis: all(r < 30.0 for r in rsis)),
    _T.ALL_ABOVE_70: _with_rsis(lambda rsis: all(r > 70.0 for r in rsis)),
    _T.STABLE_RANGE: _all_in(40.0, 60.0),
    _T.BULLISH_RANGE: _all_in(50.0, 70.0),
    _T.BEARISH_RANGE: _all_in(30.0, 50.0),
    _T.OVERBOUGHT_RANGE: _all_in(70.0, 80.0),
    _T.OVERSOLD_RANGE: _all_in(20.0, 30.0),
    _T.CROSS_ABOVE_50: _all_cross_above(50.0),
    _T.CROSS_BELOW_50: _all_cross_below(50.0),
    _T.CROSS_ABOVE_40: _all_cross_above(40.0),
    _T.CROSS_BELOW_60: _all_cross_below(60.0),
    _T.CROSS_ABOVE_20: _all_cross_above(20.0),
    _T.CROSS_BELOW_80: _all_cross_below(80.0),
    _T.SIDEWAYS: lambda s, ctx, i: sideways(_short(s, ctx), i, SIDEWAYS_TOLERANCE),
    _T.BULLISH_MOMENTUM: lambda s, ctx, i: all_of(_REGULAR(s, ctx, i), rising(_short(s, ctx), i)),
    _T.BEARISH_MOMENTUM: lambda s, ctx, i: all_of(_REVERSE(s, ctx, i), falling(_short(s, ctx), i)),
    _T.DIVERGENCE: lambda s, ctx, i: rising(_spread(s, ctx), i),
    _T.CONVERGENCE: lambda s, ctx, i: falling(_spread(s, ctx), i),
    _T.DOUBLE_BOTTOM: lambda s, ctx, i: _double_extreme(s, ctx, i, True),
    _T.DOUBLE_TOP: lambda s, ctx, i: _double_extreme(s, ctx, i, False),
    _T.OVERBOUGHT_REVERSAL: lambda s, ctx, i: crossed(lambda j: lt(_short(s, ctx)(j), 70.0), i),
    _T.OVERSOLD_REVERSAL: lambda s, ctx, i: crossed(lambda j: gt(_short(s, ctx)(j), 30.0), i),
    _T.NEUTRAL_TREND: _all_in(45.0, 55.0),
    _T.EXTREME_OVERBOUGHT: _with_rsis(lambda rsis: all(r >= 80.0 for r in rsis)),
    _T.EXTREME_OVERSOLD: _with_rsis(lambda rsis: all(r <= 20.0 for r in rsis)),
}


@dataclass(frozen=True)
class ThreeRSIFilter(FilterSpec):
    """Three-RSI filter; `rsi_periods` must be strictly ascending with at least two periods."""
    rsi_periods: Tuple[int, ...] = THREE_RSI_PERIODS
    ma_type: str = MA_TYPE
    ma_period: int = THREE_RSI_MA_PERIOD
    adx_period: int = THREE_RSI_ADX_PERIOD

    kind = FilterKind.THREE_RSI
    filter_types = ThreeRSIFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        object.__setattr__(
            self, 'rsi_periods', require_ascending_periods("RSI periods", self.rsi_periods, min_length=2)
        )
        object.__setattr__(self, 'ma_type', moving_average_class(self.ma_type).__name__)
        require_positive_int("MA period", self.ma_period)
        require_positive_int("ADX period", self.adx_period)
