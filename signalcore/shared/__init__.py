"""
Shared types, errors and defaults for the signal core.

This module provides:
- Direction and SignalAction enums and the Signal dataclass
- ConfigurationError raised for invalid parameters
- Centralized default values for all indicator and filter parameters
"""
from .types import Direction, Signal, SignalAction
from .errors import ConfigurationError
from .defaults import (
    RSI_PERIOD, RSI_OVERSOLD, RSI_OVERBOUGHT,
    MA_PERIODS, MA_TYPE,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    BB_PERIOD, BB_MULTIPLIER,
    SQUEEZE_NARROWING_PERIOD, SQUEEZE_PERIOD, SQUEEZE_THRESHOLD,
    ADX_PERIOD, ADX_THRESHOLD,
    ATR_PERIOD, ATR_THRESHOLD,
)

__all__ = [
    'Direction',
    'Signal',
    'SignalAction',
    'ConfigurationError',
    'RSI_PERIOD', 'RSI_OVERSOLD', 'RSI_OVERBOUGHT',
    'MA_PERIODS', 'MA_TYPE',
    'MACD_FAST', 'MACD_SLOW', 'MACD_SIGNAL',
    'BB_PERIOD', 'BB_MULTIPLIER',
    'SQUEEZE_NARROWING_PERIOD', 'SQUEEZE_PERIOD', 'SQUEEZE_THRESHOLD',
    'ADX_PERIOD', 'ADX_THRESHOLD',
    'ATR_PERIOD', 'ATR_THRESHOLD',
]
