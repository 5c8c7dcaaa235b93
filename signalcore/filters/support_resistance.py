"""
Support / resistance filter.

Support is the lowest low and resistance the highest high of the
`lookback_period` bars before the evaluated one; the current bar never
moves its own levels. A level is strong when at least `min_touch_count`
bars of the window came within `touch_threshold` of it.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Optional

from .base import FilterKind, FilterSpec, all_of, ge, gt, is_defined, le, lt, window
from ..shared.defaults import SR_LOOKBACK_PERIOD, SR_MIN_TOUCH_COUNT, SR_THRESHOLD, SR_TOUCH_THRESHOLD
from ..shared.errors import ConfigurationError, require_number, require_positive_int


class SupportResistanceFilterType(IntEnum):
    SUPPORT_BREAKDOWN = 0
    RESISTANCE_BREAKOUT = 1
    SUPPORT_BOUNCE = 2
    RESISTANCE_REJECTION = 3
    NEAR_STRONG_SUPPORT = 4
    NEAR_STRONG_RESISTANCE = 5
    ABOVE_SUPPORT = 6
    BELOW_RESISTANCE = 7
    NEAR_SUPPORT = 8
    NEAR_RESISTANCE = 9


class Levels(NamedTuple):
    support: float
    resistance: float
    support_touches: int
    resistance_touches: int


def levels(s, ctx, i) -> Optional[Levels]:
    """Levels from the lookback window ending at i - 1; None before it is full."""
    bars = window(ctx.bar, i - 1, s.lookback_period)
    if bars is None:
        return None
    lows, highs = [b.low for b in bars], [b.high for b in bars]
    if not is_defined(*lows, *highs):
        return None
    support, resistance = min(lows), max(highs)
    return Levels(
        support=support,
        resistance=resistance,
        support_touches=sum(1 for low in lows if low - support <= s.touch_threshold * abs(support)),
        resistance_touches=sum(1 for high in highs if resistance - high <= s.touch_threshold * abs(resistance)),
    )


def _with_levels(predicate):
    def condition(s, ctx, i):
        found = levels(s, ctx, i)
        bar = ctx.bar(i)
        if found is None or bar is None:
            return None
        return predicate(s, bar, found)
    return condition


def _near_support(s, bar, lv):
    if lv.support == 0:
        return None
    return all_of(ge(bar.close, lv.support), le((bar.close - lv.support) / abs(lv.support), s.threshold))


def _near_resistance(s, bar, lv):
    if lv.resistance == 0:
        return None
    return all_of(le(bar.close, lv.resistance), le((lv.resistance - bar.close) / abs(lv.resistance), s.threshold))


def _bounce(s, bar, lv):
    touched = le(bar.low, lv.support + s.touch_threshold * abs(lv.support))
    return all_of(touched, gt(bar.close, lv.support), gt(bar.close, bar.open))


def _rejection(s, bar, lv):
    touched = ge(bar.high, lv.resistance - s.touch_threshold * abs(lv.resistance))
    return all_of(touched, lt(bar.close, lv.resistance), lt(bar.close, bar.open))


_T = SupportResistanceFilterType

_CONDITIONS = {
    _T.SUPPORT_BREAKDOWN: _with_levels(lambda s, bar, lv: lt(bar.close, lv.support)),
    _T.RESISTANCE_BREAKOUT: _with_levels(lambda s, bar, lv: gt(bar.close, lv.resistance)),
    _T.SUPPORT_BOUNCE: _with_levels(_bounce),
    _T.RESISTANCE_REJECTION: _with_levels(_rejection),
    _T.NEAR_STRONG_SUPPORT: _with_levels(
        lambda s, bar, lv: all_of(_near_support(s, bar, lv), lv.support_touches >= s.min_touch_count)
    ),
    _T.NEAR_STRONG_RESISTANCE: _with_levels(
        lambda s, bar, lv: all_of(_near_resistance(s, bar, lv), lv.resistance_touches >= s.min_touch_count)
    ),
    _T.ABOVE_SUPPORT: _with_levels(lambda s, bar, lv: gt(bar.close, lv.support)),
    _T.BELOW_RESISTANCE: _with_levels(lambda s, bar, lv: lt(bar.close, lv.resistance)),
    _T.NEAR_SUPPORT: _with_levels(_near_support),
    _T.NEAR_RESISTANCE: _with_levels(_near_resistance),
}


@dataclass(frozen=True)
class SupportResistanceFilter(FilterSpec):
    """
    Support / resistance filter.

    `threshold` is the NEAR_* distance and `touch_threshold` the touch band,
    both as fractions of the level.
    """
    lookback_period: int = SR_LOOKBACK_PERIOD
    touch_threshold: float = SR_TOUCH_THRESHOLD
    min_touch_count: int = SR_MIN_TOUCH_COUNT
    threshold: float = SR_THRESHOLD

    kind = FilterKind.SUPPORT_RESISTANCE
    filter_types = SupportResistanceFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_positive_int("lookback period", self.lookback_period)
        require_positive_int("minimum touch count", self.min_touch_count)
        if self.min_touch_count > self.lookback_period:
            raise ConfigurationError(
                f"minimum touch count ({self.min_touch_count}) cannot exceed "
                f"the lookback period ({self.lookback_period})"
            )
        for name in ('touch_threshold', 'threshold'):
            if require_number(name, getattr(self, name)) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)}")
