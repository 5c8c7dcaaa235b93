"""
Moving average filter over a list of periods (short to long).
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple

from .base import FilterKind, FilterSpec, bar_field, between, crossed, gt, is_defined, lt
from ..indicators.moving_average import moving_average_class
from ..shared.defaults import MA_PERIODS, MA_TYPE
from ..shared.errors import require_ascending_periods


class MAFilterType(IntEnum):
    PRICE_ABOVE_FIRST = 0
    PRICE_ABOVE_LAST = 1
    REGULAR_ARRANGEMENT = 2
    FIRST_ABOVE_LAST = 3
    FIRST_BELOW_LAST = 4
    GOLDEN_CROSS = 5
    PRICE_BETWEEN = 6
    CONVERGING = 7
    DIVERGING = 8
    ABOVE_ALL = 9
    BELOW_ALL = 10
    DEAD_CROSS = 11


def _averages(spec, ctx, index: int) -> Optional[List[float]]:
    """Every configured average at index, or None if any is still warming up."""
    values = [ctx.moving_average(index, spec.ma_type, p) for p in spec.periods]
    if not is_defined(*values):
        return None
    return values


def _with_averages(predicate):
    def condition(s, ctx, i):
        averages = _averages(s, ctx, i)
        close = bar_field(ctx, i, 'close')
        if averages is None or close is None:
            return None
        return predicate(close, averages)
    return condition


def _first_above_last(s, ctx, i):
    averages = _averages(s, ctx, i)
    return None if averages is None else gt(averages[0], averages[-1])


def _first_below_last(s, ctx, i):
    averages = _averages(s, ctx, i)
    return None if averages is None else lt(averages[0], averages[-1])


def _spread(s, ctx, i):
    averages = _averages(s, ctx, i)
    return None if averages is None else abs(averages[0] - averages[-1])


def _spread_change(s, ctx, i, compare):
    if i < 1:
        return None
    return compare(_spread(s, ctx, i), _spread(s, ctx, i - 1))


_T = MAFilterType

_CONDITIONS = {
    _T.PRICE_ABOVE_FIRST: _with_averages(lambda close, mas: close > mas[0]),
    _T.PRICE_ABOVE_LAST: _with_averages(lambda close, mas: close > mas[-1]),
    _T.REGULAR_ARRANGEMENT: _with_averages(lambda close, mas: all(a > b for a, b in zip(mas, mas[1:]))),
    _T.FIRST_ABOVE_LAST: _first_above_last,
    _T.FIRST_BELOW_LAST: _first_below_last,
    _T.GOLDEN_CROSS: lambda s, ctx, i: crossed(lambda j: _first_above_last(s, ctx, j), i),
    _T.PRICE_BETWEEN: _with_averages(lambda close, mas: between(close, min(mas[0], mas[-1]), max(mas[0], mas[-1]))),
    _T.CONVERGING: lambda s, ctx, i: _spread_change(s, ctx, i, lt),
    _T.DIVERGING: lambda s, ctx, i: _spread_change(s, ctx, i, gt),
    _T.ABOVE_ALL: _with_averages(lambda close, mas: all(close > ma for ma in mas)),
    _T.BELOW_ALL: _with_averages(lambda close, mas: all(close < ma for ma in mas)),
    _T.DEAD_CROSS: lambda s, ctx, i: crossed(lambda j: _first_below_last(s, ctx, j), i),
}


@dataclass(frozen=True)
class MovingAverageFilter(FilterSpec):
    """
    Moving average filter.

    `periods` must be non-empty and strictly ascending; "first" is the
    shortest average, "last" the longest. Every filter type needs all
    configured averages, so nothing passes before the longest one is warm.
    """
    periods: Tuple[int, ...] = MA_PERIODS
    ma_type: str = MA_TYPE

    kind = FilterKind.MOVING_AVERAGE
    filter_types = MAFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        object.__setattr__(self, 'periods', require_ascending_periods("MA periods", self.periods))
        object.__setattr__(self, 'ma_type', moving_average_class(self.ma_type).__name__)
