"""
Signal evaluation core.

Provides unified interfaces for:
- Candle storage (ordered OHLCV bars, DataFrame/CSV ingestion)
- Incremental indicator calculations (MA, RSI, MACD, Bollinger, ATR, ADX,
  Ichimoku, VWAP, SuperTrend, momentum oscillators)
- Declarative filters with consecutive-bar confirmation
- Bollinger squeeze/breakout pattern detection
- Strategy evaluation (strict conjunction of filters and patterns)
"""
