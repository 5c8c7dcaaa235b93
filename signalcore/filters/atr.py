"""
ATR volatility filter.
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import FilterKind, FilterSpec, bar_field, falling, gt, is_defined, lt, rising, window
from ..shared.defaults import ATR_PERIOD, ATR_THRESHOLD
from ..shared.errors import require_positive_int, require_positive_number

AVERAGE_LOOKBACK = 5


class ATRFilterType(IntEnum):
    ABOVE_THRESHOLD = 0
    VOLATILITY_EXPANDING = 1
    VOLATILITY_CONTRACTING = 2
    HIGH_VOLATILITY = 3
    LOW_VOLATILITY = 4
    VOLATILITY_INCREASING = 5
    VOLATILITY_DECREASING = 6
    WIDE_RANGE = 7


def _atr(spec, ctx):
    return lambda j: ctx.atr(j, spec.period)


def _relative_atr(s, ctx, i):
    """ATR as a fraction of the close."""
    atr = ctx.atr(i, s.period)
    close = bar_field(ctx, i, 'close')
    if not is_defined(atr, close) or close == 0:
        return None
    return atr / close


def _versus_average(s, ctx, i, expanding):
    """Current ATR against the mean of the previous AVERAGE_LOOKBACK values."""
    values = window(_atr(s, ctx), i, AVERAGE_LOOKBACK + 1)
    if values is None:
        return None
    average = sum(values[:-1]) / AVERAGE_LOOKBACK
    return values[-1] > average if expanding else values[-1] < average


def _wide_range(s, ctx, i):
    """The bar's high-low range exceeds the ATR."""
    bar = ctx.bar(i)
    if bar is None:
        return None
    return gt(bar.high - bar.low, ctx.atr(i, s.period))


_T = ATRFilterType

_CONDITIONS = {
    _T.ABOVE_THRESHOLD: lambda s, ctx, i: gt(_relative_atr(s, ctx, i), s.threshold),
    _T.VOLATILITY_EXPANDING: lambda s, ctx, i: _versus_average(s, ctx, i, True),
    _T.VOLATILITY_CONTRACTING: lambda s, ctx, i: _versus_average(s, ctx, i, False),
    _T.HIGH_VOLATILITY: lambda s, ctx, i: gt(_relative_atr(s, ctx, i), s.threshold),
    _T.LOW_VOLATILITY: lambda s, ctx, i: lt(_relative_atr(s, ctx, i), s.threshold),
    _T.VOLATILITY_INCREASING: lambda s, ctx, i: rising(_atr(s, ctx), i),
    _T.VOLATILITY_DECREASING: lambda s, ctx, i: falling(_atr(s, ctx), i),
    _T.WIDE_RANGE: _wide_range,
}


@dataclass(frozen=True)
class ATRFilter(FilterSpec):
    """
    ATR filter; `threshold` is compared with ATR / close.

    ABOVE_THRESHOLD and HIGH_VOLATILITY are the same test under both of
    their stored codes.
    """
    period: int = ATR_PERIOD
    threshold: float = ATR_THRESHOLD

    kind = FilterKind.ATR
    filter_types = ATRFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_positive_int("ATR period", self.period)
        require_positive_number("ATR threshold", self.threshold)
