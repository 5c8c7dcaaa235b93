"""
Tests for candle storage and ingestion.
"""
import pandas as pd
import pytest

from signalcore.data import Bar, CandleSeries, load_candles_csv


class TestBar:
    def test_derived_prices(self):
        bar = Bar(pd.Timestamp('2024-01-01'), 10.0, 12.0, 9.0, 11.0, 100.0)
        assert bar.typical_price == pytest.approx((12.0 + 9.0 + 11.0) / 3)
        assert bar.hl2 == pytest.approx(10.5)
        assert bar.is_bullish
        assert not bar.is_bearish


class TestCandleSeries:
    def test_append_and_index(self, make_series):
        series = make_series([1.0, 2.0, 3.0])
        assert len(series) == 3
        assert series[0].close == 1.0
        assert series.last.close == 3.0

        series.append(Bar(pd.Timestamp('2024-01-04'), 3.0, 5.0, 2.0, 4.0, 10.0))
        assert len(series) == 4
        assert series[3].close == 4.0
        # Earlier bars are unchanged
        assert series[0].close == 1.0

    def test_empty_series(self):
        series = CandleSeries()
        assert len(series) == 0
        assert series.last is None
        assert "empty" in repr(series)

    def test_from_frame(self, sample_ohlcv):
        series = CandleSeries.from_frame(sample_ohlcv)
        assert len(series) == len(sample_ohlcv)
        assert series[5].close == pytest.approx(sample_ohlcv['Close'].iloc[5])
        assert series[5].timestamp == sample_ohlcv.index[5]

    def test_from_frame_lowercase_and_timestamp_column(self):
        df = pd.DataFrame({
            'timestamp': ['2024-01-01', '2024-01-02'],
            'open': [1, 2], 'high': [2, 3], 'low': [0.5, 1.5], 'close': [1.5, 2.5],
        })
        series = CandleSeries.from_frame(df)
        assert series[1].timestamp == pd.Timestamp('2024-01-02')
        assert series[1].volume == 0.0

    def test_from_frame_missing_columns(self):
        df = pd.DataFrame({'Close': [1.0, 2.0]}, index=pd.date_range('2024-01-01', periods=2))
        with pytest.raises(ValueError, match="missing OHLC columns"):
            CandleSeries.from_frame(df)

    def test_to_frame_roundtrip(self, sample_ohlcv):
        frame = CandleSeries.from_frame(sample_ohlcv).to_frame()
        assert list(frame.columns) == ['Open', 'High', 'Low', 'Close', 'Volume']
        pd.testing.assert_series_equal(
            frame['Close'], sample_ohlcv['Close'], check_names=False, check_freq=False,
            check_index_type=False,
        )


class TestLoadCandlesCsv:
    def test_load_with_date_filter(self, sample_ohlcv, tmp_path):
        path = tmp_path / "prices.csv"
        sample_ohlcv.to_csv(path)

        series = load_candles_csv(path, start_date='2020-01-11', end_date='2020-01-20')
        assert len(series) == 10
        assert series[0].timestamp == pd.Timestamp('2020-01-11')
        assert series.last.timestamp == pd.Timestamp('2020-01-20')

    def test_sorts_by_date(self, sample_ohlcv, tmp_path):
        path = tmp_path / "shuffled.csv"
        sample_ohlcv.iloc[::-1].to_csv(path)
        series = load_candles_csv(path)
        assert series[0].timestamp == sample_ohlcv.index[0]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Data file not found"):
            load_candles_csv(tmp_path / "nope.csv")
