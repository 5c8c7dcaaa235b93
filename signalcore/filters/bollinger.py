"""
Bollinger band filter, including the squeeze/breakout pattern.
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import (
    FilterKind, FilterSpec, all_of, any_of, bar_field, between, crossed, falling, field, ge, gt, le,
    lt, rising, sideways, window,
)
from ..patterns.squeeze import Phase, SqueezeParams, squeeze_tracker
from ..shared.defaults import (
    BB_MULTIPLIER, BB_PERIOD, BB_WIDTH_THRESHOLD, SQUEEZE_NARROWING_PERIOD, SQUEEZE_PERIOD,
)

SQUEEZE_LOOKBACK = 5
SIDEWAYS_TOLERANCE = 0.02
TOUCH_TOLERANCE = 0.01
WIDTH_BREAKOUT = 0.05
NEAR_BAND = 0.1  # Fraction of the band width
LOW_VOLATILITY_RATIO = 0.02
HIGH_VOLATILITY_RATIO = 0.05


class BollingerFilterType(IntEnum):
    ABOVE_UPPER = 0
    BELOW_LOWER = 1
    INSIDE_BANDS = 2
    OUTSIDE_BANDS = 3
    ABOVE_MIDDLE = 4
    BELOW_MIDDLE = 5
    WIDTH_SUFFICIENT = 6
    LOWER_BAND_CROSS_UP = 7
    SQUEEZE_BREAKOUT = 8
    ENHANCED_SQUEEZE_BREAKOUT = 9
    SQUEEZE = 10
    NARROWING = 11
    EXPANSION_START = 12
    UPPER_BAND_CROSS_DOWN = 13
    LOWER_BAND_REBOUND = 14
    EXPANDING = 15
    MIDDLE_BAND_SIDEWAYS = 16
    UPPER_BAND_SIDEWAYS = 17
    LOWER_BAND_SIDEWAYS = 18
    WIDTH_SIDEWAYS = 19
    UPPER_BAND_REJECTION = 20
    LOWER_BAND_SUPPORT = 21
    WIDTH_BREAKOUT = 22
    MOVING_TO_UPPER = 23
    MOVING_TO_LOWER = 24
    CONVERGE_THEN_DIVERGE = 25
    DIVERGE_THEN_CONVERGE = 26
    UPPER_HALF = 27
    LOWER_HALF = 28
    LOW_VOLATILITY = 29
    HIGH_VOLATILITY = 30


def _band(spec, ctx, name):
    return lambda j: field(ctx.bollinger(j, spec.period, spec.multiplier), name)


def _close(ctx):
    return lambda j: bar_field(ctx, j, 'close')


def _above_upper(s, ctx, i):
    return gt(_close(ctx)(i), _band(s, ctx, 'upper')(i))


def _below_lower(s, ctx, i):
    return lt(_close(ctx)(i), _band(s, ctx, 'lower')(i))


def _lower_band_cross_up(s, ctx, i):
    return crossed(lambda j: gt(_close(ctx)(j), _band(s, ctx, 'lower')(j)), i)


def _squeeze_breakout(s, ctx, i):
    """Close above the upper band after the width narrowed over the lookback."""
    width = _band(s, ctx, 'normalized_width')
    if i < SQUEEZE_LOOKBACK:
        return None
    return all_of(_above_upper(s, ctx, i), lt(width(i - 1), width(i - SQUEEZE_LOOKBACK)))


def _enhanced_squeeze_breakout(s, ctx, i):
    return squeeze_tracker(ctx, s.squeeze_params).phase_at(i) is Phase.BREAKOUT


def _expansion_start(s, ctx, i):
    """Width leaves the squeeze zone: previous width below threshold, current width larger."""
    values = window(_band(s, ctx, 'normalized_width'), i, 2)
    if values is None:
        return None
    return values[0] < s.threshold and values[1] > values[0]


def _touch_and_turn(s, ctx, i, upper):
    close = window(_close(ctx), i, 2)
    band = window(_band(s, ctx, 'upper' if upper else 'lower'), i, 2)
    if close is None or band is None:
        return None
    if upper:
        return close[0] >= band[0] * (1 - TOUCH_TOLERANCE) and close[1] < band[1]
    return close[0] <= band[0] * (1 + TOUCH_TOLERANCE) and close[1] > band[1]


def _moving_to_band(s, ctx, i, upper):
    """Previous close near the middle band and current close near the outer band."""
    if i < 1:
        return None
    previous = ctx.bollinger(i - 1, s.period, s.multiplier)
    current = ctx.bollinger(i, s.period, s.multiplier)
    close = window(_close(ctx), i, 2)
    if previous is None or current is None or close is None:
        return None
    near = previous.width * NEAR_BAND
    target = current.upper if upper else current.lower
    return abs(close[0] - previous.middle) < near and abs(close[1] - target) < near


def _width_turn(s, ctx, i, diverging):
    w = window(_band(s, ctx, 'width'), i, 3)
    if w is None:
        return None
    if diverging:
        return w[1] < w[0] and w[2] > w[1]
    return w[1] > w[0] and w[2] < w[1]


def _width_ratio(s, ctx, i):
    """Absolute band width as a fraction of the close."""
    width, close = _band(s, ctx, 'width')(i), _close(ctx)(i)
    if width is None or not close:
        return None
    return width / close


_T = BollingerFilterType

_CONDITIONS = {
    _T.ABOVE_UPPER: _above_upper,
    _T.BELOW_LOWER: _below_lower,
    _T.INSIDE_BANDS: lambda s, ctx, i: between(_close(ctx)(i), _band(s, ctx, 'lower')(i), _band(s, ctx, 'upper')(i)),
    _T.OUTSIDE_BANDS: lambda s, ctx, i: any_of(_above_upper(s, ctx, i), _below_lower(s, ctx, i)),
    _T.ABOVE_MIDDLE: lambda s, ctx, i: gt(_close(ctx)(i), _band(s, ctx, 'middle')(i)),
    _T.BELOW_MIDDLE: lambda s, ctx, i: lt(_close(ctx)(i), _band(s, ctx, 'middle')(i)),
    _T.WIDTH_SUFFICIENT: lambda s, ctx, i: ge(_band(s, ctx, 'normalized_width')(i), s.threshold),
    _T.LOWER_BAND_CROSS_UP: _lower_band_cross_up,
    _T.SQUEEZE_BREAKOUT: _squeeze_breakout,
    _T.ENHANCED_SQUEEZE_BREAKOUT: _enhanced_squeeze_breakout,
    _T.SQUEEZE: lambda s, ctx, i: lt(_band(s, ctx, 'normalized_width')(i), s.threshold),
    _T.NARROWING: lambda s, ctx, i: falling(_band(s, ctx, 'normalized_width'), i),
    _T.EXPANSION_START: _expansion_start,
    _T.UPPER_BAND_CROSS_DOWN: lambda s, ctx, i: crossed(lambda j: lt(_close(ctx)(j), _band(s, ctx, 'upper')(j)), i),
    _T.LOWER_BAND_REBOUND: _lower_band_cross_up,
    _T.EXPANDING: lambda s, ctx, i: rising(_band(s, ctx, 'normalized_width'), i),
    _T.MIDDLE_BAND_SIDEWAYS: lambda s, ctx, i: sideways(_band(s, ctx, 'middle'), i, SIDEWAYS_TOLERANCE),
    _T.UPPER_BAND_SIDEWAYS: lambda s, ctx, i: sideways(_band(s, ctx, 'upper'), i, SIDEWAYS_TOLERANCE),
    _T.LOWER_BAND_SIDEWAYS: lambda s, ctx, i: sideways(_band(s, ctx, 'lower'), i, SIDEWAYS_TOLERANCE),
    _T.WIDTH_SIDEWAYS: lambda s, ctx, i: sideways(_band(s, ctx, 'width'), i, SIDEWAYS_TOLERANCE),
    _T.UPPER_BAND_REJECTION: lambda s, ctx, i: _touch_and_turn(s, ctx, i, True),
    _T.LOWER_BAND_SUPPORT: lambda s, ctx, i: _touch_and_turn(s, ctx, i, False),
    _T.WIDTH_BREAKOUT: lambda s, ctx, i: crossed(lambda j: gt(_band(s, ctx, 'normalized_width')(j), WIDTH_BREAKOUT), i),
    _T.MOVING_TO_UPPER: lambda s, ctx, i: _moving_to_band(s, ctx, i, True),
    _T.MOVING_TO_LOWER: lambda s, ctx, i: _moving_to_band(s, ctx, i, False),
    _T.CONVERGE_THEN_DIVERGE: lambda s, ctx, i: _width_turn(s, ctx, i, True),
    _T.DIVERGE_THEN_CONVERGE: lambda s, ctx, i: _width_turn(s, ctx, i, False),
    _T.UPPER_HALF: lambda s, ctx, i: all_of(
        gt(_close(ctx)(i), _band(s, ctx, 'middle')(i)), lt(_close(ctx)(i), _band(s, ctx, 'upper')(i)),
    ),
    _T.LOWER_HALF: lambda s, ctx, i: all_of(
        lt(_close(ctx)(i), _band(s, ctx, 'middle')(i)), gt(_close(ctx)(i), _band(s, ctx, 'lower')(i)),
    ),
    _T.LOW_VOLATILITY: lambda s, ctx, i: le(_width_ratio(s, ctx, i), LOW_VOLATILITY_RATIO),
    _T.HIGH_VOLATILITY: lambda s, ctx, i: ge(_width_ratio(s, ctx, i), HIGH_VOLATILITY_RATIO),
}


@dataclass(frozen=True)
class BollingerFilter(FilterSpec):
    """
    Bollinger band filter.

    `threshold` bounds the normalized band width ((upper - lower) / middle):
    WIDTH_SUFFICIENT needs width >= threshold, SQUEEZE width < threshold.
    SQUEEZE_BREAKOUT is a close above the upper band after the width
    narrowed over the last five bars. ENHANCED_SQUEEZE_BREAKOUT is true on
    the bar the narrowing -> squeeze -> breakout pattern completes, using
    threshold as the squeeze threshold.
    """
    period: int = BB_PERIOD
    multiplier: float = BB_MULTIPLIER
    threshold: float = BB_WIDTH_THRESHOLD
    narrowing_period: int = SQUEEZE_NARROWING_PERIOD
    squeeze_period: int = SQUEEZE_PERIOD

    kind = FilterKind.BOLLINGER_BAND
    filter_types = BollingerFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        object.__setattr__(self, 'squeeze_params', SqueezeParams(
            period=self.period,
            multiplier=self.multiplier,
            narrowing_period=self.narrowing_period,
            squeeze_period=self.squeeze_period,
            squeeze_threshold=self.threshold,
        ))
