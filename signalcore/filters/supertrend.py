"""
SuperTrend filter.
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import FilterKind, FilterSpec, bar_field, crossed, field, gt, is_defined, lt
from ..shared.defaults import SUPERTREND_MULTIPLIER, SUPERTREND_PERIOD
from ..shared.errors import require_positive_int, require_positive_number


class SuperTrendFilterType(IntEnum):
    ALL_UPTREND = 0
    ALL_DOWNTREND = 1
    PRICE_ABOVE = 2
    PRICE_BELOW = 3
    CROSS_ABOVE = 4
    CROSS_BELOW = 5
    TREND_CHANGED = 6
    UPTREND = 7
    DOWNTREND = 8


def _st(spec, ctx, name):
    return lambda j: field(ctx.supertrend(j, spec.period, spec.multiplier), name)


def _price_above(s, ctx, i):
    return gt(bar_field(ctx, i, 'close'), _st(s, ctx, 'value')(i))


def _price_below(s, ctx, i):
    return lt(bar_field(ctx, i, 'close'), _st(s, ctx, 'value')(i))


def _trend_changed(s, ctx, i):
    if i < 1:
        return None
    direction = _st(s, ctx, 'direction')
    current, previous = direction(i), direction(i - 1)
    if not is_defined(current, previous):
        return None
    return current != previous


def _uptrend(s, ctx, i):
    return gt(_st(s, ctx, 'direction')(i), 0)


def _downtrend(s, ctx, i):
    return lt(_st(s, ctx, 'direction')(i), 0)


_T = SuperTrendFilterType

_CONDITIONS = {
    _T.ALL_UPTREND: _uptrend,
    _T.ALL_DOWNTREND: _downtrend,
    _T.PRICE_ABOVE: _price_above,
    _T.PRICE_BELOW: _price_below,
    _T.CROSS_ABOVE: lambda s, ctx, i: crossed(lambda j: _price_above(s, ctx, j), i),
    _T.CROSS_BELOW: lambda s, ctx, i: crossed(lambda j: _price_below(s, ctx, j), i),
    _T.TREND_CHANGED: _trend_changed,
    _T.UPTREND: _uptrend,
    _T.DOWNTREND: _downtrend,
}


@dataclass(frozen=True)
class SuperTrendFilter(FilterSpec):
    """
    SuperTrend filter over one (period, multiplier) setting.

    ALL_UPTREND / ALL_DOWNTREND keep their own codes; a spec carries a
    single setting, so they match UPTREND / DOWNTREND.
    """
    period: int = SUPERTREND_PERIOD
    multiplier: float = SUPERTREND_MULTIPLIER

    kind = FilterKind.SUPERTREND
    filter_types = SuperTrendFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_positive_int("SuperTrend period", self.period)
        require_positive_number("SuperTrend multiplier", self.multiplier)
