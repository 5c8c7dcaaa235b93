"""
CopyS filter: RSI, Bollinger Band and EMA-stack confluence.

Each side has three component signals. The buy side is RSI below
`rsi_lower`, close at or crossing back above the lower band, and close
resting on one of the averages; the sell side mirrors it. BUY/SELL need
two of three, STRONG_* all three and WEAK_* exactly one.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Tuple

from .base import FilterKind, FilterSpec, bar_field, between, field, gt, is_defined, lt
from ..indicators.moving_average import moving_average_class
from ..shared.defaults import (
    BB_MULTIPLIER, BB_PERIOD, COPYS_MA_PERIODS, COPYS_MA_TYPE, COPYS_RSI_LOWER,
    COPYS_RSI_PERIOD, COPYS_RSI_UPPER,
)
from ..shared.errors import (
    ConfigurationError, require_ascending_periods, require_number, require_positive_int,
    require_positive_number,
)

# Close within this fraction of an average counts as resting on it
MA_DISTANCE = 0.02


class CopysFilterType(IntEnum):
    BUY = 0
    SELL = 1
    RSI_OVERSOLD = 2
    RSI_OVERBOUGHT = 3
    LOWER_BAND_TOUCH = 4
    UPPER_BAND_TOUCH = 5
    MA_SUPPORT = 6
    MA_RESISTANCE = 7
    STRONG_BUY = 8
    STRONG_SELL = 9
    WEAK_BUY = 10
    WEAK_SELL = 11
    RSI_NEUTRAL = 12
    INSIDE_BANDS = 13
    MA_ALIGNED = 14
    MA_REVERSED = 15


def _rsi(s, ctx, i):
    return ctx.rsi(i, s.rsi_period)


def _band(s, ctx, i, name):
    return field(ctx.bollinger(i, s.bb_period, s.bb_multiplier), name)


def _close(ctx, i):
    return bar_field(ctx, i, 'close')


def _averages(s, ctx, i) -> List[float]:
    """The averages that are already defined at i, shortest period first."""
    values = [ctx.moving_average(i, s.ma_type, p) for p in s.ma_periods]
    return [v for v in values if is_defined(v) and v != 0]


def _on_average(s, ctx, i, above) -> Optional[bool]:
    close, averages = _close(ctx, i), _averages(s, ctx, i)
    if not averages or not is_defined(close):
        return None
    for ma in averages:
        near = abs(close - ma) / abs(ma) <= MA_DISTANCE
        if near and (close >= ma if above else close <= ma):
            return True
    return False


def _rsi_oversold(s, ctx, i):
    return lt(_rsi(s, ctx, i), s.rsi_lower)


def _rsi_overbought(s, ctx, i):
    return gt(_rsi(s, ctx, i), s.rsi_upper)


def _lower_band_touch(s, ctx, i):
    """Close below the lower band, or back above it after closing below on the previous bar."""
    def below(j):
        return lt(_close(ctx, j), _band(s, ctx, j, 'lower'))

    current = below(i)
    if current is not False or i < 1:
        return current
    return below(i - 1)


def _upper_band_touch(s, ctx, i):
    return gt(_close(ctx, i), _band(s, ctx, i, 'upper'))


def _ma_support(s, ctx, i):
    return _on_average(s, ctx, i, above=True)


def _ma_resistance(s, ctx, i):
    return _on_average(s, ctx, i, above=False)


_BUY = (_rsi_oversold, _lower_band_touch, _ma_support)
_SELL = (_rsi_overbought, _upper_band_touch, _ma_resistance)


def _count(components, s, ctx, i) -> Tuple[int, int]:
    results = [c(s, ctx, i) for c in components]
    return sum(r is True for r in results), sum(r is None for r in results)


def _at_least(components, needed):
    def condition(s, ctx, i):
        hits, unknown = _count(components, s, ctx, i)
        if hits >= needed:
            return True
        return None if hits + unknown >= needed else False
    return condition


def _exactly_one(components):
    def condition(s, ctx, i):
        hits, unknown = _count(components, s, ctx, i)
        if hits > 1:
            return False
        return None if unknown else hits == 1
    return condition


def _ma_order(s, ctx, i, compare):
    first = ctx.moving_average(i, s.ma_type, s.ma_periods[0])
    last = ctx.moving_average(i, s.ma_type, s.ma_periods[-1])
    return compare(first, last)


_T = CopysFilterType

_CONDITIONS = {
    _T.BUY: _at_least(_BUY, 2),
    _T.SELL: _at_least(_SELL, 2),
    _T.RSI_OVERSOLD: _rsi_oversold,
    _T.RSI_OVERBOUGHT: _rsi_overbought,
    _T.LOWER_BAND_TOUCH: _lower_band_touch,
    _T.UPPER_BAND_TOUCH: _upper_band_touch,
    _T.MA_SUPPORT: _ma_support,
    _T.MA_RESISTANCE: _ma_resistance,
    _T.STRONG_BUY: _at_least(_BUY, 3),
    _T.STRONG_SELL: _at_least(_SELL, 3),
    _T.WEAK_BUY: _exactly_one(_BUY),
    _T.WEAK_SELL: _exactly_one(_SELL),
    _T.RSI_NEUTRAL: lambda s, ctx, i: between(_rsi(s, ctx, i), s.rsi_lower, s.rsi_upper),
    _T.INSIDE_BANDS: lambda s, ctx, i: between(
        _close(ctx, i), _band(s, ctx, i, 'lower'), _band(s, ctx, i, 'upper')
    ),
    _T.MA_ALIGNED: lambda s, ctx, i: _ma_order(s, ctx, i, gt),
    _T.MA_REVERSED: lambda s, ctx, i: _ma_order(s, ctx, i, lt),
}


@dataclass(frozen=True)
class CopysFilter(FilterSpec):
    """
    CopyS confluence filter.

    MA_SUPPORT / MA_RESISTANCE consider every average already warm at the
    bar. MA_ALIGNED / MA_REVERSED compare the shortest with the longest and
    stay false until the longest is warm.
    """
    rsi_period: int = COPYS_RSI_PERIOD
    rsi_upper: float = COPYS_RSI_UPPER
    rsi_lower: float = COPYS_RSI_LOWER
    bb_period: int = BB_PERIOD
    bb_multiplier: float = BB_MULTIPLIER
    ma_type: str = COPYS_MA_TYPE
    ma_periods: Tuple[int, ...] = COPYS_MA_PERIODS

    kind = FilterKind.COPYS
    filter_types = CopysFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_positive_int("RSI period", self.rsi_period)
        lower = require_number("RSI lower", self.rsi_lower)
        upper = require_number("RSI upper", self.rsi_upper)
        if not 0 <= lower < upper <= 100:
            raise ConfigurationError(
                f"RSI bounds must satisfy 0 <= rsi_lower < rsi_upper <= 100, "
                f"got rsi_lower={lower}, rsi_upper={upper}"
            )
        if require_positive_int("Bollinger period", self.bb_period) < 2:
            raise ConfigurationError(f"Bollinger period must be at least 2, got {self.bb_period}")
        require_positive_number("Bollinger multiplier", self.bb_multiplier)
        object.__setattr__(self, 'ma_periods', require_ascending_periods("MA periods", self.ma_periods))
        object.__setattr__(self, 'ma_type', moving_average_class(self.ma_type).__name__)
