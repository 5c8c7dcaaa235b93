"""
Moving averages (SMA, EMA, WMA) over any bar price source.
"""
from typing import Dict, Optional, Tuple, Type

from .base import Indicator, price_source
from .smoothing import RunningEMA, RunningSMA, RunningWMA
from ..data.candles import Bar
from ..shared.errors import ConfigurationError, require_positive_int


class _MovingAverage(Indicator):
    _smoother_cls = RunningSMA

    def __init__(self, period: int, source: str = 'close'):
        super().__init__()
        self.period = require_positive_int(f"{type(self).__name__} period", period)
        self.source = source
        self._price = price_source(source)
        self._smoother = self._smoother_cls(period)

    @property
    def params(self) -> Tuple:
        return (self.period, self.source)

    @property
    def warm_up_length(self) -> int:
        return self.period

    def _next(self, bar: Bar) -> Optional[float]:
        return self._smoother.push(self._price(bar))


class SMA(_MovingAverage):
    """Simple moving average."""
    _smoother_cls = RunningSMA


class EMA(_MovingAverage):
    """Exponential moving average seeded with the SMA of the first `period` values."""
    _smoother_cls = RunningEMA


class WMA(_MovingAverage):
    """Linearly weighted moving average."""
    _smoother_cls = RunningWMA


MA_TYPES: Dict[str, Type[_MovingAverage]] = {
    'SMA': SMA,
    'EMA': EMA,
    'WMA': WMA,
}


def moving_average_class(ma_type: str) -> Type[_MovingAverage]:
    """Resolve an MA type name ("SMA", "ema", ...) to its indicator class."""
    if isinstance(ma_type, str) and ma_type.upper() in MA_TYPES:
        return MA_TYPES[ma_type.upper()]
    raise ConfigurationError(f"ma_type must be one of {sorted(MA_TYPES)}, got {ma_type!r}")
