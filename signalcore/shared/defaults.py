"""
Centralized default values for indicator and filter parameters.

This is the SINGLE SOURCE OF TRUTH for parameter defaults.
Filter specs, strategy configs and the YAML loader import from here.
"""

# Moving averages
MA_PERIODS = (5, 20)
MA_TYPE = "SMA"

# RSI (Relative Strength Index, Wilder smoothing)
RSI_PERIOD = 14
RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0
RSI_MIDLINE = 50.0

# MACD (Moving Average Convergence Divergence)
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
MACD_THRESHOLD = 0.0

# Bollinger Bands
BB_PERIOD = 20
BB_MULTIPLIER = 2.0
BB_WIDTH_THRESHOLD = 0.02  # Normalized width ((upper - lower) / middle)

# Bollinger squeeze / breakout pattern
SQUEEZE_NARROWING_PERIOD = 5
SQUEEZE_PERIOD = 5
SQUEEZE_THRESHOLD = 0.02

# ADX (Average Directional Index)
ADX_PERIOD = 14
ADX_THRESHOLD = 25.0

# ATR (Average True Range)
ATR_PERIOD = 14
ATR_THRESHOLD = 0.01  # ATR as a fraction of close

# Ichimoku
ICHIMOKU_TENKAN = 9
ICHIMOKU_KIJUN = 26
ICHIMOKU_SENKOU_B = 52

# VWAP (period 0 = cumulative since the first bar)
VWAP_PERIOD = 20
VWAP_THRESHOLD = 0.05

# SuperTrend
SUPERTREND_PERIOD = 10
SUPERTREND_MULTIPLIER = 3.0

# Momentum cluster
STOCH_PERIOD = 14
STOCH_D_PERIOD = 3
STOCH_OVERBOUGHT = 80.0
STOCH_OVERSOLD = 20.0
WILLIAMS_PERIOD = 14
WILLIAMS_OVERBOUGHT = -20.0
WILLIAMS_OVERSOLD = -80.0
ROC_PERIOD = 10
CCI_PERIOD = 20
CCI_OVERBOUGHT = 100.0
CCI_OVERSOLD = -100.0
MOMENTUM_THRESHOLD = 0.5  # ROC percent

# Volume
VOLUME_PERIOD = 20
VOLUME_THRESHOLD = 1.5

# Three RSI
THREE_RSI_PERIODS = (7, 14, 21)
THREE_RSI_MA_PERIOD = 20
THREE_RSI_ADX_PERIOD = 14

# Filter evaluation
CONSECUTIVE_N = 1
OFFSET = 0

# Candle patterns
CANDLE_MIN_BODY_RATIO = 0.3  # Body as a fraction of the bar range
CANDLE_MIN_SHADOW_RATIO = 0.3
CANDLE_HISTORY_LENGTH = 5
CANDLE_CLUSTER_THRESHOLD = 0.5  # Share of recent bars showing a pattern
CANDLE_VOLUME_PERIOD = 20

# Support / resistance
SR_LOOKBACK_PERIOD = 20
SR_TOUCH_THRESHOLD = 0.01
SR_MIN_TOUCH_COUNT = 2
SR_THRESHOLD = 0.05  # Distance to a level as a fraction of the level

# CopyS (RSI + Bollinger + EMA stack)
COPYS_RSI_PERIOD = 14
COPYS_RSI_UPPER = 70.0
COPYS_RSI_LOWER = 30.0
COPYS_MA_TYPE = "EMA"
COPYS_MA_PERIODS = (5, 20, 60, 120, 200, 240)
