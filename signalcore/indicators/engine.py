"""
Indicator engine: lazily advanced, memoized indicator states for one series.

Each (indicator class, parameter tuple) owns exactly one Indicator instance.
A query for index i advances that instance forward from the last consumed
bar up to i and stores every produced value, so:
- each bar is consumed once per state (O(1) amortized per bar)
- re-querying an index returns the stored value (idempotent)
- appending bars to the series and querying again gives the same values as
  building the full series first (streaming == batch)
"""
import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple, Type, Union

import numpy as np
import pandas as pd

from .base import Indicator
from .moving_average import EMA, SMA, WMA, moving_average_class
from .oscillators import CCI, ROC, RSI, Stochastic, WilliamsR
from .trend import ADX, MACD, Ichimoku, SuperTrend
from .volatility import ATR, Bollinger
from .volume import VWAP
from ..data.candles import Bar, CandleSeries

logger = logging.getLogger(__name__)


class _IndicatorState:
    """One indicator instance plus every value it has produced so far."""

    __slots__ = ('indicator', 'values')

    def __init__(self, indicator: Indicator):
        self.indicator = indicator
        self.values: List[Any] = []


class IndicatorEngine:
    """
    Per-series indicator cache.

    Example:
        >>> engine = IndicatorEngine(series)
        >>> engine.rsi(30, 14)
        57.3
        >>> engine.value_at(RSI, 30, 14)   # same state, same value
        57.3
    """

    def __init__(self, series: CandleSeries):
        self.series = series
        self._states: Dict[Tuple, _IndicatorState] = {}
        self._call_keys: Dict[Tuple, Tuple] = {}
        self._attachments: Dict[Hashable, Any] = {}

    def __len__(self) -> int:
        return len(self.series)

    def bar(self, index: int) -> Optional[Bar]:
        """Bar at index, or None outside the series."""
        if 0 <= index < len(self.series):
            return self.series[index]
        return None

    def _state(self, indicator_cls: Type[Indicator], args: Tuple, kwargs: Dict) -> _IndicatorState:
        call_key = (indicator_cls, args, tuple(sorted(kwargs.items())))
        state_key = self._call_keys.get(call_key)
        if state_key is None:
            # Construction validates parameters; equivalent calls map to one state
            indicator = indicator_cls(*args, **kwargs)
            state_key = (indicator_cls, indicator.params)
            if state_key not in self._states:
                logger.debug(f"New indicator state {indicator!r}")
                self._states[state_key] = _IndicatorState(indicator)
            self._call_keys[call_key] = state_key
        return self._states[state_key]

    def _advance(self, state: _IndicatorState, index: int) -> None:
        values = state.values
        while len(values) <= index:
            values.append(state.indicator.update(self.series[len(values)]))

    def value_at(self, indicator_cls: Type[Indicator], index: int, *args, **kwargs) -> Optional[Any]:
        """
        Snapshot of an indicator at a bar index.

        Args:
            indicator_cls: Indicator class (RSI, MACD, ...)
            index: Bar index (0 = oldest)
            *args, **kwargs: Indicator parameters

        Returns:
            The snapshot, or None during warm-up or outside the series

        Raises:
            ConfigurationError: If the parameters are invalid
        """
        state = self._state(indicator_cls, args, kwargs)
        if index < 0 or index >= len(self.series):
            return None
        self._advance(state, index)
        return state.values[index]

    def history(self, indicator_cls: Type[Indicator], *args, **kwargs) -> List[Any]:
        """All snapshots for the current series, index-aligned."""
        state = self._state(indicator_cls, args, kwargs)
        self._advance(state, len(self.series) - 1)
        return list(state.values[:len(self.series)])

    def frame(self, indicator_cls: Type[Indicator], *args, **kwargs) -> Union[pd.Series, pd.DataFrame]:
        """
        Indicator history as pandas, indexed by bar timestamp.

        Single-valued indicators give a Series, multi-valued ones a DataFrame
        with one column per snapshot field. Warm-up rows are NaN.
        """
        values = self.history(indicator_cls, *args, **kwargs)
        index = pd.DatetimeIndex(self.series.timestamps(), name='Date')
        defined = [v for v in values if v is not None]
        if defined and is_dataclass(defined[0]):
            columns = list(asdict(defined[0]).keys())
            rows = [asdict(v) if v is not None else dict.fromkeys(columns, np.nan) for v in values]
            return pd.DataFrame(rows, index=index, columns=columns)
        data = [np.nan if v is None else v for v in values]
        return pd.Series(data, index=index, name=repr(self._state(indicator_cls, args, kwargs).indicator),
                         dtype=float)

    def attachment(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        """Return the object stored under key, creating it with factory() on first use."""
        if key not in self._attachments:
            self._attachments[key] = factory()
        return self._attachments[key]

    # Convenience accessors: index first, then the indicator's own parameters

    def sma(self, index: int, period: int, source: str = 'close') -> Optional[float]:
        return self.value_at(SMA, index, period, source)

    def ema(self, index: int, period: int, source: str = 'close') -> Optional[float]:
        return self.value_at(EMA, index, period, source)

    def wma(self, index: int, period: int, source: str = 'close') -> Optional[float]:
        return self.value_at(WMA, index, period, source)

    def moving_average(self, index: int, ma_type: str, period: int, source: str = 'close') -> Optional[float]:
        return self.value_at(moving_average_class(ma_type), index, period, source)

    def rsi(self, index: int, *args, **kwargs):
        return self.value_at(RSI, index, *args, **kwargs)

    def macd(self, index: int, *args, **kwargs):
        return self.value_at(MACD, index, *args, **kwargs)

    def bollinger(self, index: int, *args, **kwargs):
        return self.value_at(Bollinger, index, *args, **kwargs)

    def atr(self, index: int, *args, **kwargs):
        return self.value_at(ATR, index, *args, **kwargs)

    def adx(self, index: int, *args, **kwargs):
        return self.value_at(ADX, index, *args, **kwargs)

    def ichimoku(self, index: int, *args, **kwargs):
        return self.value_at(Ichimoku, index, *args, **kwargs)

    def vwap(self, index: int, *args, **kwargs):
        return self.value_at(VWAP, index, *args, **kwargs)

    def supertrend(self, index: int, *args, **kwargs):
        return self.value_at(SuperTrend, index, *args, **kwargs)

    def stochastic(self, index: int, *args, **kwargs):
        return self.value_at(Stochastic, index, *args, **kwargs)

    def williams_r(self, index: int, *args, **kwargs):
        return self.value_at(WilliamsR, index, *args, **kwargs)

    def roc(self, index: int, *args, **kwargs):
        return self.value_at(ROC, index, *args, **kwargs)

    def cci(self, index: int, *args, **kwargs):
        return self.value_at(CCI, index, *args, **kwargs)
