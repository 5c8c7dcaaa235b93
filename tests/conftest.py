"""
Shared fixtures: synthetic OHLCV data and bar-series builders.
"""
import numpy as np
import pandas as pd
import pytest

from signalcore.data import Bar, CandleSeries


def _series_from_closes(closes, start='2024-01-01', spread=1.0, volume=1000.0):
    """Bars whose open is the previous close and whose range extends `spread` beyond the body."""
    dates = pd.date_range(start, periods=len(closes), freq='D')
    bars = []
    prev = closes[0] if len(closes) else 0.0
    for ts, close in zip(dates, closes):
        bars.append(Bar(
            timestamp=ts,
            open=float(prev),
            high=float(max(prev, close) + spread),
            low=float(min(prev, close) - spread),
            close=float(close),
            volume=float(volume),
        ))
        prev = close
    return CandleSeries(bars)


@pytest.fixture
def make_series():
    """Factory building a CandleSeries from a list of closes."""
    return _series_from_closes


@pytest.fixture
def sample_ohlcv():
    """Random-walk OHLCV DataFrame (200 daily bars, fixed seed)."""
    rng = np.random.default_rng(42)
    n = 200
    dates = pd.date_range('2020-01-01', periods=n, freq='D')
    close = 100 + np.cumsum(rng.normal(0, 1, n))
    open_ = close + rng.normal(0, 0.5, n)
    wick = np.abs(rng.normal(0, 1, n)) + 0.2
    df = pd.DataFrame({
        'Open': open_,
        'High': np.maximum(open_, close) + wick,
        'Low': np.minimum(open_, close) - wick,
        'Close': close,
        'Volume': rng.integers(1000, 5000, n).astype(float),
    }, index=dates)
    return df


@pytest.fixture
def sample_series(sample_ohlcv):
    return CandleSeries.from_frame(sample_ohlcv)


@pytest.fixture
def squeeze_series():
    """
    30 quiet bars whose Bollinger(10) width shrinks by ~20% per bar, then a breakout bar.

    Closes alternate around 100 with amplitude decaying by 0.8, so every
    10-bar window is the previous one scaled by -0.8. Bar 30 closes at 105
    with a high of 106, far above the collapsed upper band.
    """
    dates = pd.date_range('2024-01-01', periods=31, freq='D')
    bars = []
    for k in range(30):
        close = 100.0 + 5.0 * (-0.8) ** k
        bars.append(Bar(dates[k], close, close, close, close, 1000.0))
    bars.append(Bar(dates[30], 100.0, 106.0, 100.0, 105.0, 5000.0))
    return CandleSeries(bars)
