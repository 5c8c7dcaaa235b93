"""
Ichimoku cloud filter.
"""
from dataclasses import dataclass
from enum import IntEnum

from .base import FilterKind, FilterSpec, all_of, bar_field, crossed, field, gt, lt, rising
from ..shared.defaults import ICHIMOKU_KIJUN, ICHIMOKU_SENKOU_B, ICHIMOKU_TENKAN
from ..shared.errors import require_ascending_periods


class IchimokuFilterType(IntEnum):
    PRICE_ABOVE_CLOUD = 0
    PRICE_BELOW_CLOUD = 1
    TENKAN_ABOVE_KIJUN = 2
    GOLDEN_CROSS = 3
    DEAD_CROSS = 4
    CLOUD_BREAKOUT_UP = 5
    CLOUD_BREAKDOWN = 6
    BUY_SIGNAL = 7
    SELL_SIGNAL = 8
    CLOUD_THICKENING = 9


def _line(spec, ctx, name):
    return lambda j: field(ctx.ichimoku(j, spec.tenkan, spec.kijun, spec.senkou_b), name)


def _above_cloud(s, ctx, i):
    return gt(bar_field(ctx, i, 'close'), _line(s, ctx, 'cloud_top')(i))


def _below_cloud(s, ctx, i):
    return lt(bar_field(ctx, i, 'close'), _line(s, ctx, 'cloud_bottom')(i))


def _tenkan_above(s, ctx, i):
    return gt(_line(s, ctx, 'tenkan')(i), _line(s, ctx, 'kijun')(i))


def _tenkan_below(s, ctx, i):
    return lt(_line(s, ctx, 'tenkan')(i), _line(s, ctx, 'kijun')(i))


_T = IchimokuFilterType

_CONDITIONS = {
    _T.PRICE_ABOVE_CLOUD: _above_cloud,
    _T.PRICE_BELOW_CLOUD: _below_cloud,
    _T.TENKAN_ABOVE_KIJUN: _tenkan_above,
    _T.GOLDEN_CROSS: lambda s, ctx, i: crossed(lambda j: _tenkan_above(s, ctx, j), i),
    _T.DEAD_CROSS: lambda s, ctx, i: crossed(lambda j: _tenkan_below(s, ctx, j), i),
    _T.CLOUD_BREAKOUT_UP: lambda s, ctx, i: crossed(lambda j: _above_cloud(s, ctx, j), i),
    _T.CLOUD_BREAKDOWN: lambda s, ctx, i: crossed(lambda j: _below_cloud(s, ctx, j), i),
    _T.BUY_SIGNAL: lambda s, ctx, i: all_of(_above_cloud(s, ctx, i), _tenkan_above(s, ctx, i)),
    _T.SELL_SIGNAL: lambda s, ctx, i: all_of(_below_cloud(s, ctx, i), _tenkan_below(s, ctx, i)),
    _T.CLOUD_THICKENING: lambda s, ctx, i: rising(_line(s, ctx, 'cloud_thickness'), i),
}


@dataclass(frozen=True)
class IchimokuFilter(FilterSpec):
    tenkan: int = ICHIMOKU_TENKAN
    kijun: int = ICHIMOKU_KIJUN
    senkou_b: int = ICHIMOKU_SENKOU_B

    kind = FilterKind.ICHIMOKU
    filter_types = IchimokuFilterType
    conditions = _CONDITIONS

    def _validate(self) -> None:
        require_ascending_periods(
            "Ichimoku periods (tenkan, kijun, senkou_b)", (self.tenkan, self.kijun, self.senkou_b)
        )
