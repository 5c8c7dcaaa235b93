"""
Incremental technical indicators and the per-series IndicatorEngine.
"""
from .base import Indicator, PRICE_SOURCES, price_source
from .engine import IndicatorEngine
from .moving_average import EMA, MA_TYPES, SMA, WMA, moving_average_class
from .oscillators import CCI, ROC, RSI, Stochastic, StochasticValue, WilliamsR, rsi_from_averages
from .trend import ADX, ADXValue, Ichimoku, IchimokuValue, MACD, MACDValue, SuperTrend, SuperTrendValue
from .volatility import ATR, Bollinger, BollingerBands, true_range
from .volume import VWAP

__all__ = [
    'Indicator', 'PRICE_SOURCES', 'price_source',
    'IndicatorEngine',
    'SMA', 'EMA', 'WMA', 'MA_TYPES', 'moving_average_class',
    'RSI', 'rsi_from_averages', 'Stochastic', 'StochasticValue', 'WilliamsR', 'ROC', 'CCI',
    'MACD', 'MACDValue', 'ADX', 'ADXValue', 'Ichimoku', 'IchimokuValue',
    'SuperTrend', 'SuperTrendValue',
    'Bollinger', 'BollingerBands', 'ATR', 'true_range',
    'VWAP',
]
