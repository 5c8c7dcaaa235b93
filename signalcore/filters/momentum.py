"""
Momentum oscillator filter (Stochastic, Williams %R, ROC, CCI).

Codes 0-11 are composite momentum reads; the single-oscillator zones and
crosses follow from 12.
"""
import math
from dataclasses import dataclass
from enum import IntEnum

from .base import FilterKind, FilterSpec, all_of, any_of, bar_field, crossed, field, gt, is_defined, lt, window
from ..shared.defaults import (
    CCI_OVERBOUGHT, CCI_OVERSOLD, CCI_PERIOD, MOMENTUM_THRESHOLD, ROC_PERIOD,
    STOCH_D_PERIOD, STOCH_OVERBOUGHT, STOCH_OVERSOLD, STOCH_PERIOD,
    WILLIAMS_OVERBOUGHT, WILLIAMS_OVERSOLD, WILLIAMS_PERIOD,
)
from ..shared.errors import ConfigurationError, require_number, require_positive_int

DIVERGENCE_LOOKBACK = 2
PERSISTENCE_BARS = 5
STABILITY_BARS = 5
# Population stddev of %K below which momentum counts as stable
STABILITY_STD = 20.0


class MomentumFilterType(IntEnum):
    STRONG_POSITIVE = 0
    STRONG_NEGATIVE = 1
    ACCELERATING = 2
    DECELERATING = 3
    OVERBOUGHT = 4
    OVERSOLD = 5
    DIVERGENCE = 6
    BULLISH_DIVERGENCE = 7
    BEARISH_DIVERGENCE = 8
    PERSISTENT = 9
    STABLE = 10
    REVERSAL = 11
    STOCH_OVERBOUGHT = 12
    STOCH_OVERSOLD = 13
    STOCH_CROSS_UP = 14
    STOCH_CROSS_DOWN = 15
    WILLIAMS_OVERBOUGHT = 16
    WILLIAMS_OVERSOLD = 17
    ROC_POSITIVE = 18
    ROC_NEGATIVE = 19
    CCI_OVERBOUGHT = 20
    CCI_OVERSOLD = 21


def _stoch(spec, ctx, name):
    return lambda j: field(ctx.stochastic(j, spec.stoch_period, spec.stoch_d_period), name)


def _williams(s, ctx, i):
    return ctx.williams_r(i, s.williams_period)


def _roc(s, ctx, i):
    return ctx.roc(i, s.roc_period)


def _cci(s, ctx, i):
    return ctx.cci(i, s.cci_period)


def _k_above_d(s, ctx, i):
    return gt(_stoch(s, ctx, 'k')(i), _stoch(s, ctx, 'd')(i))


def _k_below_d(s, ctx, i):
    return lt(_stoch(s, ctx, 'k')(i), _stoch(s, ctx, 'd')(i))


def _strong_positive(s, ctx, i):
    """Every oscillator on the bullish side of its midline and ROC above threshold."""
    return all_of(
        gt(_stoch(s, ctx, 'k')(i), 50.0),
        gt(_williams(s, ctx, i), -50.0),
        gt(_roc(s, ctx, i), s.threshold),
        gt(_cci(s, ctx, i), 0.0),
    )


def _strong_negative(s, ctx, i):
    return all_of(
        lt(_stoch(s, ctx, 'k')(i), 50.0),
        lt(_williams(s, ctx, i), -50.0),
        lt(_roc(s, ctx, i), -s.threshold),
        lt(_cci(s, ctx, i), 0.0),
    )


def _overbought(s, ctx, i):
    return all_of(
        gt(_stoch(s, ctx, 'k')(i), STOCH_OVERBOUGHT),
        gt(_williams(s, ctx, i), WILLIAMS_OVERBOUGHT),
    )


def _oversold(s, ctx, i):
    return all_of(
        lt(_stoch(s, ctx, 'k')(i), STOCH_OVERSOLD),
        lt(_williams(s, ctx, i), WILLIAMS_OVERSOLD),
    )


def _roc_magnitude_change(s, ctx, i, compare):
    """Compare |ROC| at i with |ROC| at i - 1."""
    if i < 1:
        return None
    current, previous = _roc(s, ctx, i), _roc(s, ctx, i - 1)
    if not is_defined(current, previous):
        return None
    return compare(abs(current), abs(previous))


def _divergence(s, ctx, i, bullish):
    """Close and ROC moved in opposite directions over DIVERGENCE_LOOKBACK bars."""
    length = DIVERGENCE_LOOKBACK + 1
    roc = window(lambda j: _roc(s, ctx, j), i, length)
    close = window(lambda j: bar_field(ctx, j, 'close'), i, length)
    if roc is None or close is None:
        return None
    if bullish:
        return close[-1] < close[0] and roc[-1] > roc[0]
    return close[-1] > close[0] and roc[-1] < roc[0]


def _persistent(s, ctx, i):
    """ROC kept one sign, beyond the threshold, for PERSISTENCE_BARS bars."""
    values = window(lambda j: _roc(s, ctx, j), i, PERSISTENCE_BARS)
    if values is None:
        return None
    return all(v > s.threshold for v in values) or all(v < -s.threshold for v in values)


def _stable(s, ctx, i):
    values = window(_stoch(s, ctx, 'k'), i, STABILITY_BARS)
    if values is None:
        return None
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values)) < STABILITY_STD


def _reversal(s, ctx, i):
    """ROC changed sign on this bar while the oscillators sit in an extreme zone."""
    values = window(lambda j: _roc(s, ctx, j), i, 2)
    if values is None:
        return None
    flipped = values[0] * values[1] < 0
    return all_of(flipped, any_of(_overbought(s, ctx, i), _oversold(s, ctx, i)))


_T = MomentumFilterType

_CONDITIONS = {
    _T.STRONG_POSITIVE: _strong_positive,
    _T.STRONG_NEGATIVE: _strong_negative,
    _T.ACCELERATING: lambda s, ctx, i: _roc_magnitude_change(s, ctx, i, gt),
    _T.DECELERATING: lambda s, ctx, i: _roc_magnitude_change(s, ctx, i, lt),
    _T.OVERBOUGHT: _overbought,
    _T.OVERSOLD: _oversold,
    _T.DIVERGENCE: lambda s, ctx, i: any_of(_divergence(s, ctx, i, True), _divergence(s, ctx, i, False)),
    _T.BULLISH_DIVERGENCE: lambda s, ctx, i: _divergence(s, ctx, i, True),
    _T.BEARISH_DIVERGENCE: lambda s, ctx, i: _divergence(s, ctx, i, False),
    _T.PERSISTENT: _persistent,
    _T.STABLE: _stable,
    _T.REVERSAL: _reversal,
    _T.STOCH_OVERBOUGHT: lambda s, ctx, i: gt(_stoch(s, ctx, 'k')(i), STOCH_OVERBOUGHT),
    _T.STOCH_OVERSOLD: lambda s, ctx, i: lt(_stoch(s, ctx, 'k')(i), STOCH_OVERSOLD),
    _T.STOCH_CROSS_UP: lambda s, ctx, i: crossed(lambda j: _k_above_d(s, ctx, j), i),
    _T.STOCH_CROSS_DOWN: lambda s, ctx, i: crossed(lambda j: _k_below_d(s, ctx, j), i),
    _T.WILLIAMS_OVERBOUGHT: lambda s, ctx, i: gt(_williams(s, ctx, i), WILLIAMS_OVERBOUGHT),
    _T.WILLIAMS_OVERSOLD: lambda s, ctx, i: lt(_williams(s, ctx, i), WILLIAMS_OVERSOLD),
    _T.ROC_POSITIVE: lambda s, ctx, i: gt(_roc(s, ctx, i), s.threshold),
    _T.ROC_NEGATIVE: lambda s, ctx, i: lt(_roc(s, ctx, i), -s.threshold),
    _T.CCI_OVERBOUGHT: lambda s, ctx, i: gt(_cci(s, ctx, i), CCI_OVERBOUGHT),
    _T.CCI_OVERSOLD: lambda s, ctx, i: lt(_cci(s, ctx, i), CCI_OVERSOLD),
}


@dataclass(frozen=True)
class MomentumFilter(FilterSpec):
    """
    Momentum filter.

    `threshold` is the ROC level (percent) for ROC_POSITIVE / ROC_NEGATIVE,
    PERSISTENT and the STRONG_* composites. Oscillator zones use the standard
    levels (Stochastic 80/20, Williams %R -20/-80, CCI +100/-100); OVERBOUGHT
    and OVERSOLD need Stochastic and Williams %R to agree.
    """
    stoch_period: int = STOCH_PERIOD
    stoch_d_period: int = STOCH_D_PERIOD
    williams_period: int = WILLIAMS_PERIOD
    roc_period: int = ROC_PERIOD
    cci_period: int = CCI_PERIOD
    threshold: float = MOMENTUM_THRESHOLD

    kind = FilterKind.MOMENTUM
    filter_types = MomentumFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_positive_int("Stochastic period", self.stoch_period)
        require_positive_int("Stochastic %D period", self.stoch_d_period)
        require_positive_int("Williams %R period", self.williams_period)
        require_positive_int("ROC period", self.roc_period)
        require_positive_int("CCI period", self.cci_period)
        if require_number("momentum threshold", self.threshold) < 0:
            raise ConfigurationError(f"momentum threshold must be >= 0, got {self.threshold}")
