"""
Ordered OHLCV bar storage.

CandleSeries is the read contract consumed by the indicator engine:
index 0 is the oldest bar, bars are immutable once appended and indices
never change. Ordering is the producer's responsibility and is not
re-validated here.
"""
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

import pandas as pd

OHLCV_COLUMNS = ('Open', 'High', 'Low', 'Close', 'Volume')


@dataclass(frozen=True)
class Bar:
    """One OHLCV observation for a fixed time interval."""
    timestamp: pd.Timestamp
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3.0

    @property
    def hl2(self) -> float:
        return (self.high + self.low) / 2.0

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


class CandleSeries:
    """
    Append-only, random-access sequence of bars.

    Read access from several indicator states is safe without locking because
    bars never change after they are appended.
    """

    def __init__(self, bars: Optional[Iterable[Bar]] = None):
        self._bars: List[Bar] = list(bars) if bars is not None else []

    def __len__(self) -> int:
        return len(self._bars)

    def __getitem__(self, index: int) -> Bar:
        return self._bars[index]

    def __iter__(self) -> Iterator[Bar]:
        return iter(self._bars)

    def __repr__(self) -> str:
        if not self._bars:
            return "CandleSeries(empty)"
        return (
            f"CandleSeries({len(self._bars)} bars, "
            f"{self._bars[0].timestamp} .. {self._bars[-1].timestamp})"
        )

    def append(self, bar: Bar) -> None:
        """Append the next bar (must be newer than the last one)."""
        self._bars.append(bar)

    def extend(self, bars: Iterable[Bar]) -> None:
        for bar in bars:
            self._bars.append(bar)

    @property
    def last(self) -> Optional[Bar]:
        return self._bars[-1] if self._bars else None

    def timestamps(self) -> List[pd.Timestamp]:
        return [bar.timestamp for bar in self._bars]

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "CandleSeries":
        """
        Build a series from an OHLCV DataFrame.

        Args:
            df: DataFrame with Open/High/Low/Close columns (any case), an optional
                Volume column, and either a datetime index or a 'timestamp' column

        Returns:
            CandleSeries with one bar per row, in row order
        """
        columns = {str(c).lower(): c for c in df.columns}
        missing = [c for c in OHLCV_COLUMNS[:4] if c.lower() not in columns]
        if missing:
            raise ValueError(f"DataFrame is missing OHLC columns: {missing}")

        if 'timestamp' in columns:
            timestamps = pd.to_datetime(df[columns['timestamp']])
        else:
            timestamps = pd.to_datetime(df.index)

        opens = df[columns['open']].astype(float).to_numpy()
        highs = df[columns['high']].astype(float).to_numpy()
        lows = df[columns['low']].astype(float).to_numpy()
        closes = df[columns['close']].astype(float).to_numpy()
        if 'volume' in columns:
            volumes = df[columns['volume']].astype(float).to_numpy()
        else:
            volumes = [0.0] * len(df)

        bars = [
            Bar(
                timestamp=pd.Timestamp(ts),
                open=float(o),
                high=float(h),
                low=float(lo),
                close=float(c),
                volume=float(v),
            )
            for ts, o, h, lo, c, v in zip(timestamps, opens, highs, lows, closes, volumes)
        ]
        return cls(bars)

    def to_frame(self) -> pd.DataFrame:
        """Return the bars as an OHLCV DataFrame indexed by timestamp."""
        return pd.DataFrame(
            {
                'Open': [b.open for b in self._bars],
                'High': [b.high for b in self._bars],
                'Low': [b.low for b in self._bars],
                'Close': [b.close for b in self._bars],
                'Volume': [b.volume for b in self._bars],
            },
            index=pd.DatetimeIndex(self.timestamps(), name='Date'),
        )


def load_candles_csv(
    data_path: Union[str, Path],
    start_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
    end_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
) -> CandleSeries:
    """
    Load bars from a CSV file with a date index and OHLCV columns.

    Args:
        data_path: Path to the CSV file
        start_date: Start date for filtering (inclusive). If None, no start filter.
        end_date: End date for filtering (inclusive). If None, no end filter.

    Returns:
        CandleSeries sorted by date

    Raises:
        FileNotFoundError: If the CSV file doesn't exist
    """
    data_path = Path(data_path)
    if not data_path.exists():
        raise FileNotFoundError(f"Data file not found: {data_path}")

    df = pd.read_csv(data_path, index_col=0, parse_dates=True)
    if not isinstance(df.index, pd.DatetimeIndex):
        df.index = pd.to_datetime(df.index)
    df = df.sort_index()

    if start_date is not None:
        df = df[df.index >= pd.to_datetime(start_date)]
    if end_date is not None:
        df = df[df.index <= pd.to_datetime(end_date)]

    return CandleSeries.from_frame(df)
