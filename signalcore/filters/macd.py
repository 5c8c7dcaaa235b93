"""
MACD filter.
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import (
    FilterKind, FilterSpec, all_of, bar_field, crossed, falling, field, ge, gt, le, lt, rising, sideways,
    window,
)
from ..shared.defaults import MACD_FAST, MACD_SIGNAL, MACD_SLOW, MACD_THRESHOLD
from ..shared.errors import ConfigurationError, require_number, require_positive_int

EXTREME_RATIO = 0.02  # MACD line as a fraction of close
SIDEWAYS_TOLERANCE = 0.05


class MACDFilterType(IntEnum):
    MACD_ABOVE_SIGNAL = 0
    MACD_BELOW_SIGNAL = 1
    SIGNAL_CROSS_UP = 2
    SIGNAL_CROSS_DOWN = 3
    HISTOGRAM_ABOVE_THRESHOLD = 4
    HISTOGRAM_BELOW_THRESHOLD = 5
    ZERO_CROSS_UP = 6
    ZERO_CROSS_DOWN = 7
    HISTOGRAM_TURNS_NEGATIVE = 8
    HISTOGRAM_TURNS_POSITIVE = 9
    BOTH_ABOVE_ZERO = 10
    BOTH_BELOW_ZERO = 11
    MACD_RISING = 12
    MACD_FALLING = 13
    HISTOGRAM_EXPANDING = 14
    HISTOGRAM_CONTRACTING = 15
    BEARISH_DIVERGENCE = 16
    BULLISH_DIVERGENCE = 17
    EXTREME_HIGH = 18
    EXTREME_LOW = 19
    SIDEWAYS = 20


def _line(spec, ctx, name):
    return lambda j: field(ctx.macd(j, spec.fast, spec.slow, spec.signal), name)


def _macd_above_signal(s, ctx, i):
    return gt(_line(s, ctx, 'macd')(i), _line(s, ctx, 'signal')(i))


def _macd_below_signal(s, ctx, i):
    return lt(_line(s, ctx, 'macd')(i), _line(s, ctx, 'signal')(i))


def _both_above_zero(s, ctx, i):
    return all_of(gt(_line(s, ctx, 'macd')(i), 0.0), gt(_line(s, ctx, 'signal')(i), 0.0))


def _both_below_zero(s, ctx, i):
    return all_of(lt(_line(s, ctx, 'macd')(i), 0.0), lt(_line(s, ctx, 'signal')(i), 0.0))


def _abs_histogram(spec, ctx):
    histogram = _line(spec, ctx, 'histogram')
    return lambda j: None if histogram(j) is None else abs(histogram(j))


def _divergence(s, ctx, i, bearish):
    """Close and MACD line moved in opposite directions versus two bars earlier."""
    macd = window(_line(s, ctx, 'macd'), i, 3)
    close = window(lambda j: bar_field(ctx, j, 'close'), i, 3)
    if macd is None or close is None:
        return None
    if bearish:
        return close[2] > close[0] and macd[2] < macd[0]
    return close[2] < close[0] and macd[2] > macd[0]


def _macd_ratio(s, ctx, i):
    macd, close = _line(s, ctx, 'macd')(i), bar_field(ctx, i, 'close')
    if macd is None or not close:
        return None
    return macd / close


_T = MACDFilterType

_CONDITIONS = {
    _T.MACD_ABOVE_SIGNAL: _macd_above_signal,
    _T.MACD_BELOW_SIGNAL: _macd_below_signal,
    _T.SIGNAL_CROSS_UP: lambda s, ctx, i: crossed(lambda j: _macd_above_signal(s, ctx, j), i),
    _T.SIGNAL_CROSS_DOWN: lambda s, ctx, i: crossed(lambda j: _macd_below_signal(s, ctx, j), i),
    _T.HISTOGRAM_ABOVE_THRESHOLD: lambda s, ctx, i: gt(_line(s, ctx, 'histogram')(i), s.threshold),
    _T.HISTOGRAM_BELOW_THRESHOLD: lambda s, ctx, i: lt(_line(s, ctx, 'histogram')(i), s.threshold),
    _T.ZERO_CROSS_UP: lambda s, ctx, i: crossed(lambda j: gt(_line(s, ctx, 'macd')(j), 0.0), i),
    _T.ZERO_CROSS_DOWN: lambda s, ctx, i: crossed(lambda j: lt(_line(s, ctx, 'macd')(j), 0.0), i),
    _T.HISTOGRAM_TURNS_NEGATIVE: lambda s, ctx, i: crossed(lambda j: lt(_line(s, ctx, 'histogram')(j), 0.0), i),
    _T.HISTOGRAM_TURNS_POSITIVE: lambda s, ctx, i: crossed(lambda j: gt(_line(s, ctx, 'histogram')(j), 0.0), i),
    _T.BOTH_ABOVE_ZERO: _both_above_zero,
    _T.BOTH_BELOW_ZERO: _both_below_zero,
    _T.MACD_RISING: lambda s, ctx, i: rising(_line(s, ctx, 'macd'), i),
    _T.MACD_FALLING: lambda s, ctx, i: falling(_line(s, ctx, 'macd'), i),
    _T.HISTOGRAM_EXPANDING: lambda s, ctx, i: rising(_abs_histogram(s, ctx), i),
    _T.HISTOGRAM_CONTRACTING: lambda s, ctx, i: falling(_abs_histogram(s, ctx), i),
    _T.BEARISH_DIVERGENCE: lambda s, ctx, i: _divergence(s, ctx, i, True),
    _T.BULLISH_DIVERGENCE: lambda s, ctx, i: _divergence(s, ctx, i, False),
    _T.EXTREME_HIGH: lambda s, ctx, i: ge(_macd_ratio(s, ctx, i), EXTREME_RATIO),
    _T.EXTREME_LOW: lambda s, ctx, i: le(_macd_ratio(s, ctx, i), -EXTREME_RATIO),
    _T.SIDEWAYS: lambda s, ctx, i: sideways(_line(s, ctx, 'macd'), i, SIDEWAYS_TOLERANCE),
}


@dataclass(frozen=True)
class MACDFilter(FilterSpec):
    """
    MACD filter; `threshold` applies to the histogram.

    EXTREME_HIGH / EXTREME_LOW compare the MACD line with 2% of the close.
    """
    fast: int = MACD_FAST
    slow: int = MACD_SLOW
    signal: int = MACD_SIGNAL
    threshold: float = MACD_THRESHOLD

    kind = FilterKind.MACD
    filter_types = MACDFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_positive_int("MACD fast period", self.fast)
        require_positive_int("MACD slow period", self.slow)
        require_positive_int("MACD signal period", self.signal)
        if self.fast >= self.slow:
            raise ConfigurationError(
                f"MACD fast period must be < slow period, got fast={self.fast}, slow={self.slow}"
            )
        require_number("MACD threshold", self.threshold)
