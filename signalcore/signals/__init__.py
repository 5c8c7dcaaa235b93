"""
Strategy layer: evaluator, builder, configuration and YAML loading.
"""
from .strategy import Predicate, StrategyBuilder, StrategyEvaluator
from .config import (
    StrategyConfig,
    filter_from_mapping,
    filter_to_mapping,
    pattern_from_config,
    strategy_config_from_dict,
)
from .config_loader import load_strategy_from_yaml, save_strategy_to_yaml

__all__ = [
    'Predicate', 'StrategyBuilder', 'StrategyEvaluator',
    'StrategyConfig', 'filter_from_mapping', 'filter_to_mapping', 'pattern_from_config',
    'strategy_config_from_dict',
    'load_strategy_from_yaml', 'save_strategy_to_yaml',
]
