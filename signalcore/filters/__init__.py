"""
Filter kinds and the FilterEvaluator.

Each kind module defines a closed IntEnum of filter types, a frozen spec
dataclass and the condition table dispatching every type.
"""
from typing import Dict, Type

from .adx import ADXFilter, ADXFilterType
from .atr import ATRFilter, ATRFilterType
from .base import FilterKind, FilterSpec, coerce_filter_type
from .bollinger import BollingerFilter, BollingerFilterType
from .candle_pattern import CandlePatternFilter, CandlePatternFilterType
from .copys import CopysFilter, CopysFilterType
from .evaluator import FilterEvaluator
from .ichimoku import IchimokuFilter, IchimokuFilterType
from .macd import MACDFilter, MACDFilterType
from .momentum import MomentumFilter, MomentumFilterType
from .moving_average import MAFilterType, MovingAverageFilter
from .rsi import RSIFilter, RSIFilterType
from .support_resistance import SupportResistanceFilter, SupportResistanceFilterType
from .supertrend import SuperTrendFilter, SuperTrendFilterType
from .three_rsi import ThreeRSIFilter, ThreeRSIFilterType
from .volume import VolumeFilter, VolumeFilterType
from .vwap import VWAPFilter, VWAPFilterType

FILTER_SPECS: Dict[FilterKind, Type[FilterSpec]] = {
    FilterKind.RSI: RSIFilter,
    FilterKind.MACD: MACDFilter,
    FilterKind.BOLLINGER_BAND: BollingerFilter,
    FilterKind.ADX: ADXFilter,
    FilterKind.MOVING_AVERAGE: MovingAverageFilter,
    FilterKind.ICHIMOKU: IchimokuFilter,
    FilterKind.VWAP: VWAPFilter,
    FilterKind.ATR: ATRFilter,
    FilterKind.SUPERTREND: SuperTrendFilter,
    FilterKind.MOMENTUM: MomentumFilter,
    FilterKind.VOLUME: VolumeFilter,
    FilterKind.THREE_RSI: ThreeRSIFilter,
    FilterKind.CANDLE_PATTERN: CandlePatternFilter,
    FilterKind.SUPPORT_RESISTANCE: SupportResistanceFilter,
    FilterKind.COPYS: CopysFilter,
}

__all__ = [
    'FilterKind', 'FilterSpec', 'FilterEvaluator', 'FILTER_SPECS', 'coerce_filter_type',
    'RSIFilter', 'RSIFilterType',
    'MACDFilter', 'MACDFilterType',
    'BollingerFilter', 'BollingerFilterType',
    'ADXFilter', 'ADXFilterType',
    'MovingAverageFilter', 'MAFilterType',
    'IchimokuFilter', 'IchimokuFilterType',
    'VWAPFilter', 'VWAPFilterType',
    'ATRFilter', 'ATRFilterType',
    'SuperTrendFilter', 'SuperTrendFilterType',
    'MomentumFilter', 'MomentumFilterType',
    'VolumeFilter', 'VolumeFilterType',
    'ThreeRSIFilter', 'ThreeRSIFilterType',
    'CandlePatternFilter', 'CandlePatternFilterType',
    'SupportResistanceFilter', 'SupportResistanceFilterType',
    'CopysFilter', 'CopysFilterType',
]
