"""
ADX / DMI filter.
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import (
    FilterKind, FilterSpec, all_of, between, change_ratio, crossed, falling, field, ge, gt, le, lt,
    rising, window,
)
from ..shared.defaults import ADX_PERIOD, ADX_THRESHOLD
from ..shared.errors import require_number, require_positive_int


class ADXFilterType(IntEnum):
    ADX_BELOW_THRESHOLD = 0
    ADX_ABOVE_THRESHOLD = 1
    PLUS_DI_ABOVE = 2
    MINUS_DI_ABOVE = 3
    STRONG_UPTREND = 4
    STRONG_DOWNTREND = 5
    ADX_RISING = 6
    ADX_FALLING = 7
    DI_SPREAD_WIDENING = 8
    DI_SPREAD_NARROWING = 9
    ADX_EXTREME_HIGH = 10
    ADX_EXTREME_LOW = 11
    ADX_MODERATE = 12
    PLUS_DI_CROSS_UP = 13
    MINUS_DI_CROSS_UP = 14
    ADX_SIDEWAYS = 15
    ADX_SURGE = 16
    ADX_PLUNGE = 17
    BOTH_DI_HIGH = 18
    BOTH_DI_LOW = 19
    ADX_ABOVE_PLUS_DI = 20
    ADX_ABOVE_MINUS_DI = 21
    PLUS_DI_ABOVE_ADX = 22
    MINUS_DI_ABOVE_ADX = 23
    ADX_PEAK = 24
    ADX_TROUGH = 25
    DI_CONVERGED = 26
    PLUS_DI_EXTREME = 27
    MINUS_DI_EXTREME = 28
    ADX_STABLE = 29
    ADX_VOLATILE = 30


def _adx(spec, ctx, name):
    return lambda j: field(ctx.adx(j, spec.period), name)


def _plus_above(s, ctx, i):
    return gt(_adx(s, ctx, 'plus_di')(i), _adx(s, ctx, 'minus_di')(i))


def _minus_above(s, ctx, i):
    return gt(_adx(s, ctx, 'minus_di')(i), _adx(s, ctx, 'plus_di')(i))


def _trending(s, ctx, i):
    return gt(_adx(s, ctx, 'adx')(i), s.threshold)


def _adx_change(s, ctx, i):
    return change_ratio(_adx(s, ctx, 'adx'), i)


def _abs_adx_change(s, ctx, i):
    ratio = _adx_change(s, ctx, i)
    return None if ratio is None else abs(ratio)


def _adx_turn(s, ctx, i, peak):
    v = window(_adx(s, ctx, 'adx'), i, 3)
    if v is None:
        return None
    if peak:
        return v[0] < v[1] > v[2]
    return v[0] > v[1] < v[2]


def _line_vs(s, ctx, i, first, second):
    return gt(_adx(s, ctx, first)(i), _adx(s, ctx, second)(i))


_T = ADXFilterType

_CONDITIONS = {
    _T.ADX_BELOW_THRESHOLD: lambda s, ctx, i: le(_adx(s, ctx, 'adx')(i), s.threshold),
    _T.ADX_ABOVE_THRESHOLD: _trending,
    _T.PLUS_DI_ABOVE: _plus_above,
    _T.MINUS_DI_ABOVE: _minus_above,
    _T.STRONG_UPTREND: lambda s, ctx, i: all_of(_trending(s, ctx, i), _plus_above(s, ctx, i)),
    _T.STRONG_DOWNTREND: lambda s, ctx, i: all_of(_trending(s, ctx, i), _minus_above(s, ctx, i)),
    _T.ADX_RISING: lambda s, ctx, i: rising(_adx(s, ctx, 'adx'), i),
    _T.ADX_FALLING: lambda s, ctx, i: falling(_adx(s, ctx, 'adx'), i),
    _T.DI_SPREAD_WIDENING: lambda s, ctx, i: rising(_adx(s, ctx, 'di_spread'), i),
    _T.DI_SPREAD_NARROWING: lambda s, ctx, i: falling(_adx(s, ctx, 'di_spread'), i),
    _T.ADX_EXTREME_HIGH: lambda s, ctx, i: ge(_adx(s, ctx, 'adx')(i), 50.0),
    _T.ADX_EXTREME_LOW: lambda s, ctx, i: le(_adx(s, ctx, 'adx')(i), 10.0),
    _T.ADX_MODERATE: lambda s, ctx, i: between(_adx(s, ctx, 'adx')(i), 20.0, 30.0),
    _T.PLUS_DI_CROSS_UP: lambda s, ctx, i: crossed(lambda j: _plus_above(s, ctx, j), i),
    _T.MINUS_DI_CROSS_UP: lambda s, ctx, i: crossed(lambda j: _minus_above(s, ctx, j), i),
    _T.ADX_SIDEWAYS: lambda s, ctx, i: le(_abs_adx_change(s, ctx, i), 0.05),
    _T.ADX_SURGE: lambda s, ctx, i: ge(_adx_change(s, ctx, i), 0.1),
    _T.ADX_PLUNGE: lambda s, ctx, i: le(_adx_change(s, ctx, i), -0.1),
    _T.BOTH_DI_HIGH: lambda s, ctx, i: all_of(gt(_adx(s, ctx, 'plus_di')(i), 25.0), gt(_adx(s, ctx, 'minus_di')(i), 25.0)),
    _T.BOTH_DI_LOW: lambda s, ctx, i: all_of(lt(_adx(s, ctx, 'plus_di')(i), 15.0), lt(_adx(s, ctx, 'minus_di')(i), 15.0)),
    _T.ADX_ABOVE_PLUS_DI: lambda s, ctx, i: _line_vs(s, ctx, i, 'adx', 'plus_di'),
    _T.ADX_ABOVE_MINUS_DI: lambda s, ctx, i: _line_vs(s, ctx, i, 'adx', 'minus_di'),
    _T.PLUS_DI_ABOVE_ADX: lambda s, ctx, i: _line_vs(s, ctx, i, 'plus_di', 'adx'),
    _T.MINUS_DI_ABOVE_ADX: lambda s, ctx, i: _line_vs(s, ctx, i, 'minus_di', 'adx'),
    _T.ADX_PEAK: lambda s, ctx, i: _adx_turn(s, ctx, i, True),
    _T.ADX_TROUGH: lambda s, ctx, i: _adx_turn(s, ctx, i, False),
    _T.DI_CONVERGED: lambda s, ctx, i: le(_adx(s, ctx, 'di_spread')(i), 2.0),
    _T.PLUS_DI_EXTREME: lambda s, ctx, i: ge(_adx(s, ctx, 'plus_di')(i), 40.0),
    _T.MINUS_DI_EXTREME: lambda s, ctx, i: ge(_adx(s, ctx, 'minus_di')(i), 40.0),
    _T.ADX_STABLE: lambda s, ctx, i: le(_abs_adx_change(s, ctx, i), 0.02),
    _T.ADX_VOLATILE: lambda s, ctx, i: ge(_abs_adx_change(s, ctx, i), 0.15),
}


@dataclass(frozen=True)
class ADXFilter(FilterSpec):
    """
    ADX / DMI filter.

    `threshold` applies to ADX_BELOW_THRESHOLD (adx <= threshold),
    ADX_ABOVE_THRESHOLD and the strong trend types. The extreme, moderate
    and change-rate types use fixed levels.
    """
    period: int = ADX_PERIOD
    threshold: float = ADX_THRESHOLD

    kind = FilterKind.ADX
    filter_types = ADXFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_positive_int("ADX period", self.period)
        require_number("ADX threshold", self.threshold)
