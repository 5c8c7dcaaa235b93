"""
Candle data module.

Provides the ordered, append-only bar store every indicator reads from,
plus helpers to build it from pandas DataFrames and CSV files.
"""
from .candles import Bar, CandleSeries, load_candles_csv

__all__ = [
    'Bar',
    'CandleSeries',
    'load_candles_csv',
]
