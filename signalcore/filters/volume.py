"""
Volume filter (volume against its simple moving average).
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import FilterKind, FilterSpec, all_of, ge, gt, is_defined, lt, window
from ..shared.defaults import VOLUME_PERIOD, VOLUME_THRESHOLD
from ..shared.errors import require_positive_int, require_positive_number

RATIO_JUMP = 1.5
RATIO_DROP = 0.5


class VolumeFilterType(IntEnum):
    ABOVE_AVERAGE = 0
    BELOW_AVERAGE = 1
    SURGE = 2
    DECLINE = 3
    SIGNIFICANTLY_ABOVE = 4
    BULLISH_WITH_VOLUME = 5
    BEARISH_WITH_VOLUME = 6
    INCREASING_IN_UPTREND = 7
    DECREASING_IN_DOWNTREND = 8


def _ratio(s, ctx):
    """Volume over its average, None while undefined or the average is 0."""
    def ratio(j):
        bar = ctx.bar(j)
        average = ctx.sma(j, s.period, 'volume')
        if bar is None or not is_defined(average) or average == 0:
            return None
        return bar.volume / average
    return ratio


def _jump(s, ctx, i, surge):
    """Ratio beyond the threshold and a sharp change against the previous bar's ratio."""
    ratios = window(_ratio(s, ctx), i, 2)
    if ratios is None:
        return None
    previous, current = ratios
    if surge:
        return current > s.threshold and current > previous * RATIO_JUMP
    return current < 1.0 / s.threshold and current < previous * RATIO_DROP


def _candle(name):
    def check(ctx, i):
        bar = ctx.bar(i)
        return None if bar is None else getattr(bar, name)
    return check


_is_bullish = _candle('is_bullish')
_is_bearish = _candle('is_bearish')


def _above_average(s, ctx, i):
    return gt(_ratio(s, ctx)(i), 1.0)


def _volume_change(ctx, i, increasing):
    volumes = window(lambda j: None if ctx.bar(j) is None else ctx.bar(j).volume, i, 2)
    if volumes is None:
        return None
    return volumes[1] > volumes[0] if increasing else volumes[1] < volumes[0]


_T = VolumeFilterType

_CONDITIONS = {
    _T.ABOVE_AVERAGE: _above_average,
    _T.BELOW_AVERAGE: lambda s, ctx, i: lt(_ratio(s, ctx)(i), 1.0),
    _T.SURGE: lambda s, ctx, i: _jump(s, ctx, i, True),
    _T.DECLINE: lambda s, ctx, i: _jump(s, ctx, i, False),
    _T.SIGNIFICANTLY_ABOVE: lambda s, ctx, i: ge(_ratio(s, ctx)(i), s.threshold),
    _T.BULLISH_WITH_VOLUME: lambda s, ctx, i: all_of(_is_bullish(ctx, i), _above_average(s, ctx, i)),
    _T.BEARISH_WITH_VOLUME: lambda s, ctx, i: all_of(_is_bearish(ctx, i), _above_average(s, ctx, i)),
    _T.INCREASING_IN_UPTREND: lambda s, ctx, i: all_of(_is_bullish(ctx, i), _volume_change(ctx, i, True)),
    _T.DECREASING_IN_DOWNTREND: lambda s, ctx, i: all_of(_is_bearish(ctx, i), _volume_change(ctx, i, False)),
}


@dataclass(frozen=True)
class VolumeFilter(FilterSpec):
    """
    Volume filter on ratio = volume / SMA(volume, period).

    SURGE needs ratio > threshold and 1.5x the previous ratio; DECLINE needs
    ratio < 1 / threshold and half the previous ratio.
    """
    period: int = VOLUME_PERIOD
    threshold: float = VOLUME_THRESHOLD

    kind = FilterKind.VOLUME
    filter_types = VolumeFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_positive_int("volume period", self.period)
        require_positive_number("volume threshold", self.threshold)
