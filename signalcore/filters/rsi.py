"""
RSI filter.
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import (
    FilterKind, FilterSpec, bar_field, between, crossed, falling, ge, gt, le, lt, rising,
    sideways, window,
)
from ..shared.defaults import RSI_MIDLINE, RSI_OVERBOUGHT, RSI_OVERSOLD, RSI_PERIOD
from ..shared.errors import ConfigurationError, require_number, require_positive_int

SIDEWAYS_TOLERANCE = 0.02
STRONG_MOVE = 3.0


class RSIFilterType(IntEnum):
    OVERBOUGHT = 0
    OVERSOLD = 1
    IN_RANGE = 2
    THRESHOLD_CROSS_UP = 3
    THRESHOLD_CROSS_DOWN = 4
    MIDLINE_CROSS_UP = 5
    MIDLINE_CROSS_DOWN = 6
    RISING = 7
    FALLING = 8
    CROSS_ABOVE_40 = 9
    CROSS_BELOW_60 = 10
    CROSS_ABOVE_20 = 11
    CROSS_BELOW_80 = 12
    SIDEWAYS = 13
    STRONG_RISE = 14
    STRONG_FALL = 15
    NEUTRAL = 16
    OVERBOUGHT_TURN_DOWN = 17
    OVERSOLD_TURN_UP = 18
    DOUBLE_BOTTOM = 19
    DOUBLE_TOP = 20
    BEARISH_DIVERGENCE = 21
    BULLISH_DIVERGENCE = 22
    OVERBOUGHT_DECLINE = 23
    OVERSOLD_RECOVERY = 24
    NORMAL_RANGE = 25
    EXTREME_OVERBOUGHT = 26
    EXTREME_OVERSOLD = 27
    MID_RANGE = 28
    BULLISH_RANGE = 29
    BEARISH_RANGE = 30
    EXIT_OVERSOLD = 31
    EXIT_OVERBOUGHT = 32


def _rsi(spec, ctx):
    return lambda j: ctx.rsi(j, spec.period)


def _cross_above(level):
    return lambda s, ctx, i: crossed(lambda j: gt(_rsi(s, ctx)(j), level), i)


def _cross_below(level):
    return lambda s, ctx, i: crossed(lambda j: lt(_rsi(s, ctx)(j), level), i)


def _in_band(low, high):
    return lambda s, ctx, i: between(_rsi(s, ctx)(i), low, high)


def _strong_move(s, ctx, i, sign):
    values = window(_rsi(s, ctx), i, 2)
    if values is None:
        return None
    return sign * (values[1] - values[0]) > STRONG_MOVE


def _turn(s, ctx, i, extreme_down):
    """Previous RSI in the overbought (oversold) zone and the current one lower (higher)."""
    values = window(_rsi(s, ctx), i, 2)
    if values is None:
        return None
    previous, current = values
    if extreme_down:
        return previous >= s.overbought and current < previous
    return previous <= s.oversold and current > previous


def _double_extreme(s, ctx, i, bottom):
    """W (bottom) or M (top) shape over the last five RSI values."""
    v = window(_rsi(s, ctx), i, 5)
    if v is None:
        return None
    if bottom:
        return (v[0] <= s.oversold and v[1] > v[0] and v[2] <= s.oversold
                and v[3] > v[2] and v[4] > v[3])
    return (v[0] >= s.overbought and v[1] < v[0] and v[2] >= s.overbought
            and v[3] < v[2] and v[4] < v[3])


def _divergence(s, ctx, i, bearish):
    """Close and RSI moved in opposite directions versus two bars earlier."""
    rsi = window(_rsi(s, ctx), i, 3)
    close = window(lambda j: bar_field(ctx, j, 'close'), i, 3)
    if rsi is None or close is None:
        return None
    if bearish:
        return close[2] > close[0] and rsi[2] < rsi[0]
    return close[2] < close[0] and rsi[2] > rsi[0]


def _continued(s, ctx, i, from_overbought):
    """Two further moves away from the zone the RSI started in."""
    v = window(_rsi(s, ctx), i, 3)
    if v is None:
        return None
    if from_overbought:
        return v[0] >= s.overbought and v[1] < v[0] and v[2] < v[1]
    return v[0] <= s.oversold and v[1] > v[0] and v[2] > v[1]


_T = RSIFilterType

_CONDITIONS = {
    _T.OVERBOUGHT: lambda s, ctx, i: gt(_rsi(s, ctx)(i), s.overbought),
    _T.OVERSOLD: lambda s, ctx, i: lt(_rsi(s, ctx)(i), s.oversold),
    _T.IN_RANGE: lambda s, ctx, i: between(_rsi(s, ctx)(i), s.oversold, s.overbought),
    _T.THRESHOLD_CROSS_UP: lambda s, ctx, i: crossed(lambda j: gt(_rsi(s, ctx)(j), s.overbought), i),
    _T.THRESHOLD_CROSS_DOWN: lambda s, ctx, i: crossed(lambda j: lt(_rsi(s, ctx)(j), s.oversold), i),
    _T.MIDLINE_CROSS_UP: _cross_above(RSI_MIDLINE),
    _T.MIDLINE_CROSS_DOWN: _cross_below(RSI_MIDLINE),
    _T.RISING: lambda s, ctx, i: rising(_rsi(s, ctx), i),
    _T.FALLING: lambda s, ctx, i: falling(_rsi(s, ctx), i),
    _T.CROSS_ABOVE_40: _cross_above(40.0),
    _T.CROSS_BELOW_60: _cross_below(60.0),
    _T.CROSS_ABOVE_20: _cross_above(20.0),
    _T.CROSS_BELOW_80: _cross_below(80.0),
    _T.SIDEWAYS: lambda s, ctx, i: sideways(_rsi(s, ctx), i, SIDEWAYS_TOLERANCE),
    _T.STRONG_RISE: lambda s, ctx, i: _strong_move(s, ctx, i, 1),
    _T.STRONG_FALL: lambda s, ctx, i: _strong_move(s, ctx, i, -1),
    _T.NEUTRAL: _in_band(45.0, 55.0),
    _T.OVERBOUGHT_TURN_DOWN: lambda s, ctx, i: _turn(s, ctx, i, True),
    _T.OVERSOLD_TURN_UP: lambda s, ctx, i: _turn(s, ctx, i, False),
    _T.DOUBLE_BOTTOM: lambda s, ctx, i: _double_extreme(s, ctx, i, True),
    _T.DOUBLE_TOP: lambda s, ctx, i: _double_extreme(s, ctx, i, False),
    _T.BEARISH_DIVERGENCE: lambda s, ctx, i: _divergence(s, ctx, i, True),
    _T.BULLISH_DIVERGENCE: lambda s, ctx, i: _divergence(s, ctx, i, False),
    _T.OVERBOUGHT_DECLINE: lambda s, ctx, i: _continued(s, ctx, i, True),
    _T.OVERSOLD_RECOVERY: lambda s, ctx, i: _continued(s, ctx, i, False),
    _T.NORMAL_RANGE: _in_band(30.0, 70.0),
    _T.EXTREME_OVERBOUGHT: lambda s, ctx, i: ge(_rsi(s, ctx)(i), 90.0),
    _T.EXTREME_OVERSOLD: lambda s, ctx, i: le(_rsi(s, ctx)(i), 10.0),
    _T.MID_RANGE: _in_band(40.0, 60.0),
    _T.BULLISH_RANGE: _in_band(60.0, 80.0),
    _T.BEARISH_RANGE: _in_band(20.0, 40.0),
    _T.EXIT_OVERSOLD: lambda s, ctx, i: crossed(lambda j: ge(_rsi(s, ctx)(j), s.oversold), i),
    _T.EXIT_OVERBOUGHT: lambda s, ctx, i: crossed(lambda j: le(_rsi(s, ctx)(j), s.overbought), i),
}


@dataclass(frozen=True)
class RSIFilter(FilterSpec):
    """
    RSI filter.

    THRESHOLD_CROSS_UP fires on the bar where RSI moves above `overbought`;
    THRESHOLD_CROSS_DOWN on the bar where it moves below `oversold`.
    The fixed-level crosses (40, 60, 20, 80) and bands ignore the configured
    thresholds. EXIT_* fire when RSI leaves the oversold/overbought zone.
    """
    period: int = RSI_PERIOD
    oversold: float = RSI_OVERSOLD
    overbought: float = RSI_OVERBOUGHT

    kind = FilterKind.RSI
    filter_types = RSIFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_positive_int("RSI period", self.period)
        oversold = require_number("RSI oversold", self.oversold)
        overbought = require_number("RSI overbought", self.overbought)
        if not 0 <= oversold < overbought <= 100:
            raise ConfigurationError(
                f"RSI thresholds must satisfy 0 <= oversold < overbought <= 100, "
                f"got oversold={oversold}, overbought={overbought}"
            )
