"""
Candle pattern filter.

Codes 11 and up are individual shapes read straight from the bars. Codes
0-10 group them: directional, reversal and continuation sets, with volume,
prior-trend and clustering confirmation on top.
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import FilterKind, FilterSpec, all_of, any_of, bar_field, ge, gt, lt, window
from ..shared.defaults import (
    CANDLE_CLUSTER_THRESHOLD, CANDLE_HISTORY_LENGTH, CANDLE_MIN_BODY_RATIO,
    CANDLE_MIN_SHADOW_RATIO, CANDLE_VOLUME_PERIOD,
)
from ..shared.errors import ConfigurationError, require_number, require_positive_int

DOJI_RATIO = 0.1
MARUBOZU_RATIO = 0.9
# Relative tolerance for "equal" lows, highs and closes
LEVEL_TOLERANCE = 0.002
DOUBLE_TOLERANCE = 0.01
VOLUME_SURGE = 1.5


class CandlePatternFilterType(IntEnum):
    STRONG_BULLISH = 0
    STRONG_BEARISH = 1
    REVERSAL = 2
    CONTINUATION = 3
    VOLUME_CONFIRMED = 4
    HIGH_RELIABILITY = 5
    CONTEXT_ALIGNED = 6
    STRONG_REVERSAL_SIGNAL = 7
    HIGH_CONFIDENCE_SIGNAL = 8
    VOLUME_CONFIRMED_SIGNAL = 9
    PATTERN_CLUSTERING = 10
    HAMMER = 11
    SHOOTING_STAR = 12
    DOJI = 13
    SPINNING_TOP = 14
    MARUBOZU = 15
    MORNING_STAR = 16
    EVENING_STAR = 17
    ENGULFING = 18
    PIERCING = 19
    DARK_CLOUD = 20
    HARAMI = 21
    TWEEZER = 22
    TRI_STAR = 23
    ADVANCE_BLOCK = 24
    DELIBERATION = 25
    BREAKAWAY = 26
    CONCEALMENT = 27
    COUNTERATTACK = 28
    DARK_CLOUD_COVER = 29
    RISING_WINDOW = 30
    FALLING_WINDOW = 31
    HIGH_BREAKOUT = 32
    LOW_BREAKOUT = 33
    GAP = 34
    GAP_FILL = 35
    DOUBLE_BOTTOM = 36
    DOUBLE_TOP = 37
    TRIANGLE = 38
    FLAG = 39
    PENNANT = 40


# Bar geometry

def _range(b):
    return b.high - b.low


def _body(b):
    return abs(b.close - b.open)


def _upper(b):
    return b.high - max(b.open, b.close)


def _lower(b):
    return min(b.open, b.close) - b.low


def _body_top(b):
    return max(b.open, b.close)


def _body_bottom(b):
    return min(b.open, b.close)


def _midpoint(b):
    return (b.open + b.close) / 2


def _bullish(b):
    return b.close > b.open


def _bearish(b):
    return b.close < b.open


def _strong_body(s, b):
    return _range(b) > 0 and _body(b) >= s.min_body_ratio * _range(b)


def _small_body(s, b):
    return _range(b) > 0 and _body(b) < s.min_body_ratio * _range(b)


def _is_doji(b):
    return _range(b) > 0 and _body(b) <= DOJI_RATIO * _range(b)


def _is_marubozu(b):
    return _range(b) > 0 and _body(b) >= MARUBOZU_RATIO * _range(b)


def _close_to(a, b, tolerance):
    return abs(a - b) <= tolerance * abs(b)


def _on_bars(length, shape):
    """Condition over the `length` bars ending at the index: shape(spec, *bars)."""
    def condition(s, ctx, i):
        bars = window(ctx.bar, i, length)
        return None if bars is None else shape(s, *bars)
    return condition


def _on_history(extra, shape):
    """Condition over pattern_history_length + extra bars: shape(spec, bars)."""
    def condition(s, ctx, i):
        bars = window(ctx.bar, i, s.pattern_history_length + extra)
        return None if bars is None else shape(s, bars)
    return condition


# Single bar

def _hammer(s, b):
    r = _range(b)
    return r > 0 and _lower(b) >= max(2 * _body(b), s.min_shadow_ratio * r) and _upper(b) <= _body(b)


def _shooting_star(s, b):
    r = _range(b)
    return r > 0 and _upper(b) >= max(2 * _body(b), s.min_shadow_ratio * r) and _lower(b) <= _body(b)


def _spinning_top(s, b):
    return (_small_body(s, b) and not _is_doji(b)
            and _upper(b) >= _body(b) and _lower(b) >= _body(b))


# Two bars

def _bullish_engulfing(s, p, c):
    return (_bearish(p) and _bullish(c) and c.open <= p.close and c.close >= p.open
            and _body(c) > _body(p))


def _bearish_engulfing(s, p, c):
    return (_bullish(p) and _bearish(c) and c.open >= p.close and c.close <= p.open
            and _body(c) > _body(p))


def _piercing(s, p, c):
    return (_bearish(p) and _strong_body(s, p) and _bullish(c)
            and c.open < p.close and _midpoint(p) < c.close < p.open)


def _dark_cloud(s, p, c):
    return (_bullish(p) and _strong_body(s, p) and _bearish(c)
            and c.open > p.close and p.open < c.close < _midpoint(p))


def _dark_cloud_cover(s, p, c):
    """Dark cloud opening above the previous high."""
    return _dark_cloud(s, p, c) and c.open > p.high


def _harami(s, p, c):
    return (_strong_body(s, p) and _body(c) < _body(p)
            and _body_top(c) < _body_top(p) and _body_bottom(c) > _body_bottom(p))


def _tweezer(s, p, c):
    bottom = _bearish(p) and _bullish(c) and _close_to(c.low, p.low, LEVEL_TOLERANCE)
    top = _bullish(p) and _bearish(c) and _close_to(c.high, p.high, LEVEL_TOLERANCE)
    return bottom or top


def _counterattack(s, p, c):
    opposite = (_bullish(p) and _bearish(c)) or (_bearish(p) and _bullish(c))
    return (opposite and _strong_body(s, p) and _strong_body(s, c)
            and _close_to(c.close, p.close, LEVEL_TOLERANCE))


def _rising_window(s, p, c):
    return c.low > p.high


def _falling_window(s, p, c):
    return c.high < p.low


# Three or more bars

def _morning_star(s, a, b, c):
    return (_bearish(a) and _strong_body(s, a) and _small_body(s, b)
            and _body_top(b) < a.close and _bullish(c) and c.close > _midpoint(a))


def _evening_star(s, a, b, c):
    return (_bullish(a) and _strong_body(s, a) and _small_body(s, b)
            and _body_bottom(b) > a.close and _bearish(c) and c.close < _midpoint(a))


def _tri_star(s, a, b, c):
    if not (_is_doji(a) and _is_doji(b) and _is_doji(c)):
        return False
    above = _body_bottom(b) > max(_body_top(a), _body_top(c))
    below = _body_top(b) < min(_body_bottom(a), _body_bottom(c))
    return above or below


def _advance_block(s, a, b, c):
    """Three rising white bars with shrinking bodies and growing upper shadows."""
    return (_bullish(a) and _bullish(b) and _bullish(c)
            and a.close < b.close < c.close
            and a.open < b.open <= a.close and b.open < c.open <= b.close
            and _body(a) > _body(b) > _body(c) and _upper(c) > _upper(a))


def _deliberation(s, a, b, c):
    """Two strong white bars, then a small one opening near the prior close."""
    return (_bullish(a) and _bullish(b) and _bullish(c)
            and a.close < b.close < c.close
            and _strong_body(s, a) and _strong_body(s, b) and _small_body(s, c)
            and c.open >= b.close * (1 - LEVEL_TOLERANCE))


def _breakaway(s, a, b, c, d, e):
    bullish = (_bearish(a) and _strong_body(s, a) and b.high < a.low
               and b.close >= c.close >= d.close
               and _bullish(e) and _strong_body(s, e) and e.close > b.high)
    bearish = (_bullish(a) and _strong_body(s, a) and b.low > a.high
               and b.close <= c.close <= d.close
               and _bearish(e) and _strong_body(s, e) and e.close < b.low)
    return bullish or bearish


def _concealment(s, a, b, c, d):
    """Concealing baby swallow: two black marubozu, a gapping black bar, then a swallowing one."""
    return (_bearish(a) and _is_marubozu(a) and _bearish(b) and _is_marubozu(b)
            and _bearish(c) and c.open < b.close and c.high > b.close
            and _bearish(d) and d.open > c.high and d.close < c.low)


def _gap_fill(s, a, b, c):
    filled_up_gap = b.low > a.high and c.low <= a.high
    filled_down_gap = b.high < a.low and c.high >= a.low
    return filled_up_gap or filled_down_gap


def _high_breakout(s, bars):
    return bars[-1].close > max(b.high for b in bars[:-1])


def _low_breakout(s, bars):
    return bars[-1].close < min(b.low for b in bars[:-1])


def _double_bottom(s, bars):
    half = len(bars) // 2
    first, second = min(b.low for b in bars[:half]), min(b.low for b in bars[half:])
    last, previous = bars[-1], bars[-2]
    return _close_to(second, first, DOUBLE_TOLERANCE) and _bullish(last) and last.close > previous.high


def _double_top(s, bars):
    half = len(bars) // 2
    first, second = max(b.high for b in bars[:half]), max(b.high for b in bars[half:])
    last, previous = bars[-1], bars[-2]
    return _close_to(second, first, DOUBLE_TOLERANCE) and _bearish(last) and last.close < previous.low


def _contracting(bars):
    """Every bar inside the previous one, and the last range narrower than the first."""
    nested = all(b.high <= p.high and b.low >= p.low for p, b in zip(bars, bars[1:]))
    return nested and _range(bars[-1]) < _range(bars[0])


def _triangle(s, bars):
    return _contracting(bars)


def _pole(s, bars):
    """First bar is a strong move at least twice the range of every later bar."""
    pole, rest = bars[0], bars[1:]
    return _strong_body(s, pole) and _range(pole) >= 2 * max(_range(b) for b in rest)


def _flag(s, bars):
    if not _pole(s, bars):
        return False
    pole, rest = bars[0], bars[1:]
    closes = [b.close for b in rest]
    if _bullish(pole):
        return (all(b.high <= pole.high and b.low >= pole.open for b in rest)
                and all(y <= x for x, y in zip(closes, closes[1:])))
    return (all(b.low >= pole.low and b.high <= pole.open for b in rest)
            and all(y >= x for x, y in zip(closes, closes[1:])))


def _pennant(s, bars):
    return _pole(s, bars) and _contracting(bars[1:])


_T = CandlePatternFilterType

_SHAPES = {
    _T.HAMMER: _on_bars(1, _hammer),
    _T.SHOOTING_STAR: _on_bars(1, _shooting_star),
    _T.DOJI: _on_bars(1, lambda s, b: _is_doji(b)),
    _T.SPINNING_TOP: _on_bars(1, _spinning_top),
    _T.MARUBOZU: _on_bars(1, lambda s, b: _is_marubozu(b)),
    _T.MORNING_STAR: _on_bars(3, _morning_star),
    _T.EVENING_STAR: _on_bars(3, _evening_star),
    _T.ENGULFING: _on_bars(2, lambda s, p, c: _bullish_engulfing(s, p, c) or _bearish_engulfing(s, p, c)),
    _T.PIERCING: _on_bars(2, _piercing),
    _T.DARK_CLOUD: _on_bars(2, _dark_cloud),
    _T.HARAMI: _on_bars(2, _harami),
    _T.TWEEZER: _on_bars(2, _tweezer),
    _T.TRI_STAR: _on_bars(3, _tri_star),
    _T.ADVANCE_BLOCK: _on_bars(3, _advance_block),
    _T.DELIBERATION: _on_bars(3, _deliberation),
    _T.BREAKAWAY: _on_bars(5, _breakaway),
    _T.CONCEALMENT: _on_bars(4, _concealment),
    _T.COUNTERATTACK: _on_bars(2, _counterattack),
    _T.DARK_CLOUD_COVER: _on_bars(2, _dark_cloud_cover),
    _T.RISING_WINDOW: _on_bars(2, _rising_window),
    _T.FALLING_WINDOW: _on_bars(2, _falling_window),
    _T.HIGH_BREAKOUT: _on_history(1, _high_breakout),
    _T.LOW_BREAKOUT: _on_history(1, _low_breakout),
    _T.GAP: _on_bars(2, lambda s, p, c: _rising_window(s, p, c) or _falling_window(s, p, c)),
    _T.GAP_FILL: _on_bars(3, _gap_fill),
    _T.DOUBLE_BOTTOM: _on_history(0, _double_bottom),
    _T.DOUBLE_TOP: _on_history(0, _double_top),
    _T.TRIANGLE: _on_history(0, _triangle),
    _T.FLAG: _on_history(0, _flag),
    _T.PENNANT: _on_history(0, _pennant),
}

_BULLISH = (
    _SHAPES[_T.HAMMER],
    _on_bars(2, _bullish_engulfing),
    _SHAPES[_T.PIERCING],
    _SHAPES[_T.MORNING_STAR],
    _on_bars(1, lambda s, b: _is_marubozu(b) and _bullish(b)),
    _SHAPES[_T.RISING_WINDOW],
)
_BEARISH = (
    _SHAPES[_T.SHOOTING_STAR],
    _on_bars(2, _bearish_engulfing),
    _SHAPES[_T.DARK_CLOUD],
    _SHAPES[_T.EVENING_STAR],
    _on_bars(1, lambda s, b: _is_marubozu(b) and _bearish(b)),
    _SHAPES[_T.FALLING_WINDOW],
)
_REVERSAL = tuple(_SHAPES[t] for t in (
    _T.HAMMER, _T.SHOOTING_STAR, _T.DOJI, _T.ENGULFING, _T.HARAMI, _T.TWEEZER,
    _T.MORNING_STAR, _T.EVENING_STAR, _T.PIERCING, _T.DARK_CLOUD,
))
_CONTINUATION = tuple(_SHAPES[t] for t in (_T.RISING_WINDOW, _T.FALLING_WINDOW, _T.MARUBOZU))
_RELIABLE = tuple(_SHAPES[t] for t in (
    _T.ENGULFING, _T.MORNING_STAR, _T.EVENING_STAR, _T.PIERCING, _T.DARK_CLOUD_COVER,
))
_ANY = _BULLISH + _BEARISH + _REVERSAL + _CONTINUATION


def _any(group):
    return lambda s, ctx, i: any_of(*(condition(s, ctx, i) for condition in group))


def _volume_ratio(s, ctx, i):
    volume, average = bar_field(ctx, i, 'volume'), ctx.sma(i, s.volume_period, 'volume')
    if gt(average, 0.0) is not True:
        return None
    return volume / average


def _prior_move(s, ctx, i):
    """Close change over the pattern history, ending at the previous bar."""
    start = i - 1 - s.pattern_history_length
    if start < 0:
        return None
    previous, earlier = bar_field(ctx, i - 1, 'close'), bar_field(ctx, start, 'close')
    return previous - earlier


def _context_aligned(s, ctx, i):
    move = _prior_move(s, ctx, i)
    return any_of(
        all_of(_any(_BULLISH)(s, ctx, i), lt(move, 0.0)),
        all_of(_any(_BEARISH)(s, ctx, i), gt(move, 0.0)),
    )


def _clustering(s, ctx, i):
    """Share of the last pattern_history_length bars showing any pattern."""
    start = i - s.pattern_history_length + 1
    if start < 0:
        return None
    hits = sum(1 for j in range(start, i + 1) if _any(_ANY)(s, ctx, j) is True)
    return hits / s.pattern_history_length >= s.threshold


_CONDITIONS = {
    _T.STRONG_BULLISH: _any(_BULLISH),
    _T.STRONG_BEARISH: _any(_BEARISH),
    _T.REVERSAL: _any(_REVERSAL),
    _T.CONTINUATION: _any(_CONTINUATION),
    _T.VOLUME_CONFIRMED: lambda s, ctx, i: all_of(_any(_ANY)(s, ctx, i), gt(_volume_ratio(s, ctx, i), 1.0)),
    _T.HIGH_RELIABILITY: _any(_RELIABLE),
    _T.CONTEXT_ALIGNED: _context_aligned,
    _T.STRONG_REVERSAL_SIGNAL: lambda s, ctx, i: all_of(
        _context_aligned(s, ctx, i), gt(_volume_ratio(s, ctx, i), 1.0)
    ),
    _T.HIGH_CONFIDENCE_SIGNAL: lambda s, ctx, i: all_of(
        _any(_RELIABLE)(s, ctx, i), ge(_volume_ratio(s, ctx, i), 1.0)
    ),
    _T.VOLUME_CONFIRMED_SIGNAL: lambda s, ctx, i: all_of(
        _any(_ANY)(s, ctx, i), ge(_volume_ratio(s, ctx, i), VOLUME_SURGE)
    ),
    _T.PATTERN_CLUSTERING: _clustering,
    **_SHAPES,
}


@dataclass(frozen=True)
class CandlePatternFilter(FilterSpec):
    """
    Candle pattern filter.

    `min_body_ratio` separates strong bodies from small ones and
    `min_shadow_ratio` is the minimum hammer / shooting star shadow, both as
    fractions of the bar range. `pattern_history_length` is the window of the
    breakout, double bottom/top and chart-shape codes, the prior-trend
    lookback of CONTEXT_ALIGNED and the PATTERN_CLUSTERING window, where
    `threshold` is the share of bars that must show a pattern.
    """
    min_body_ratio: float = CANDLE_MIN_BODY_RATIO
    min_shadow_ratio: float = CANDLE_MIN_SHADOW_RATIO
    pattern_history_length: int = CANDLE_HISTORY_LENGTH
    threshold: float = CANDLE_CLUSTER_THRESHOLD
    volume_period: int = CANDLE_VOLUME_PERIOD

    kind = FilterKind.CANDLE_PATTERN
    filter_types = CandlePatternFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        for name in ('min_body_ratio', 'min_shadow_ratio', 'threshold'):
            value = require_number(name, getattr(self, name))
            if not 0 < value <= 1:
                raise ConfigurationError(f"{name} must be in (0, 1], got {value}")
        if require_positive_int("pattern history length", self.pattern_history_length) < 4:
            raise ConfigurationError(
                f"pattern history length must be at least 4, got {self.pattern_history_length}"
            )
        require_positive_int("volume period", self.volume_period)
