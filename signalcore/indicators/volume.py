"""
Volume-weighted indicators.
"""
import math
from typing import Optional, Tuple

from .base import Indicator
from .smoothing import RollingWindow
from ..data.candles import Bar
from ..shared.defaults import VWAP_PERIOD
from ..shared.errors import require_non_negative_int


class VWAP(Indicator):
    """
    Volume Weighted Average Price on the typical price.

    period > 0 uses a rolling window of that many bars; period 0 accumulates
    from the first bar. With zero volume in the window the typical price of
    the current bar is returned. A bar with a NaN price or volume reads NaN; the
    rolling form stays NaN until it leaves the window, the cumulative form
    leaves it out of the running sums.
    """

    def __init__(self, period: int = VWAP_PERIOD):
        super().__init__()
        self.period = require_non_negative_int("VWAP period", period)
        if period:
            self._pv: Optional[RollingWindow] = RollingWindow(period)
            self._volume: Optional[RollingWindow] = RollingWindow(period)
        else:
            self._pv = self._volume = None
        self._cumulative_pv = 0.0
        self._cumulative_volume = 0.0

    @property
    def params(self) -> Tuple:
        return (self.period,)

    @property
    def warm_up_length(self) -> int:
        return max(self.period, 1)

    def _next(self, bar: Bar) -> Optional[float]:
        typical = bar.typical_price
        if self._pv is not None:
            self._pv.push(typical * bar.volume)
            self._volume.push(bar.volume)
            pv_total, volume_total = self._pv.total, self._volume.total
        else:
            pv = typical * bar.volume
            if not (math.isfinite(pv) and math.isfinite(bar.volume)):
                return math.nan
            self._cumulative_pv += pv
            self._cumulative_volume += bar.volume
            pv_total, volume_total = self._cumulative_pv, self._cumulative_volume
        if volume_total == 0:
            return typical
        return pv_total / volume_total
