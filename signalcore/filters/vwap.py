"""
VWAP filter.
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import FilterKind, FilterSpec, all_of, bar_field, crossed, gt, is_defined, le, lt
from ..shared.defaults import VWAP_PERIOD, VWAP_THRESHOLD
from ..shared.errors import require_non_negative_int, require_positive_number


class VWAPFilterType(IntEnum):
    PRICE_ABOVE = 0
    PRICE_BELOW = 1
    PRICE_NEAR = 2
    CROSS_UP = 3
    CROSS_DOWN = 4
    REBOUND = 5
    DIVERGING = 6
    CONVERGING = 7
    STRONG_ABOVE = 8
    STRONG_BELOW = 9
    TREND_STRENGTHENING = 10
    TREND_WEAKENING = 11


def _price_above(s, ctx, i):
    return gt(bar_field(ctx, i, 'close'), ctx.vwap(i, s.period))


def _price_below(s, ctx, i):
    return lt(bar_field(ctx, i, 'close'), ctx.vwap(i, s.period))


def _deviation(s, ctx, i):
    """|close - vwap| / vwap, None when undefined or vwap is 0."""
    close = bar_field(ctx, i, 'close')
    vwap = ctx.vwap(i, s.period)
    if not is_defined(close, vwap) or vwap == 0:
        return None
    return abs(close - vwap) / abs(vwap)


def _deviation_change(s, ctx, i, compare):
    if i < 1:
        return None
    return compare(_deviation(s, ctx, i), _deviation(s, ctx, i - 1))


def _rebound(s, ctx, i):
    """Low touched VWAP and the bar closed back above it."""
    return all_of(le(bar_field(ctx, i, 'low'), ctx.vwap(i, s.period)), _price_above(s, ctx, i))


_T = VWAPFilterType

_CONDITIONS = {
    _T.PRICE_ABOVE: _price_above,
    _T.PRICE_BELOW: _price_below,
    _T.PRICE_NEAR: lambda s, ctx, i: le(_deviation(s, ctx, i), s.threshold),
    _T.CROSS_UP: lambda s, ctx, i: crossed(lambda j: _price_above(s, ctx, j), i),
    _T.CROSS_DOWN: lambda s, ctx, i: crossed(lambda j: _price_below(s, ctx, j), i),
    _T.REBOUND: _rebound,
    _T.DIVERGING: lambda s, ctx, i: _deviation_change(s, ctx, i, gt),
    _T.CONVERGING: lambda s, ctx, i: _deviation_change(s, ctx, i, lt),
    _T.STRONG_ABOVE: lambda s, ctx, i: gt(bar_field(ctx, i, 'low'), ctx.vwap(i, s.period)),
    _T.STRONG_BELOW: lambda s, ctx, i: lt(bar_field(ctx, i, 'high'), ctx.vwap(i, s.period)),
    _T.TREND_STRENGTHENING: lambda s, ctx, i: _deviation_change(s, ctx, i, gt),
    _T.TREND_WEAKENING: lambda s, ctx, i: _deviation_change(s, ctx, i, lt),
}


@dataclass(frozen=True)
class VWAPFilter(FilterSpec):
    """
    VWAP filter; `threshold` is the PRICE_NEAR band as a fraction of VWAP, `period` 0 is cumulative.

    STRONG_ABOVE / STRONG_BELOW need the whole bar range on one side of VWAP.
    TREND_STRENGTHENING and TREND_WEAKENING share the DIVERGING and
    CONVERGING tests under their own codes.
    """
    period: int = VWAP_PERIOD
    threshold: float = VWAP_THRESHOLD

    kind = FilterKind.VWAP
    filter_types = VWAPFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_non_negative_int("VWAP period", self.period)
        require_positive_number("VWAP threshold", self.threshold)
