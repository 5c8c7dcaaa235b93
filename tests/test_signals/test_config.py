"""
Tests for strategy configuration.
"""
import logging

import pytest

from signalcore.filters import (
    BollingerFilter, BollingerFilterType, MovingAverageFilter, RSIFilter, RSIFilterType, ThreeRSIFilter,
)
from signalcore.patterns import SqueezeParams
from signalcore.shared.errors import ConfigurationError
from signalcore.shared.types import Direction
from signalcore.signals import (
    StrategyConfig, StrategyEvaluator, filter_from_mapping, filter_to_mapping, pattern_from_config,
    strategy_config_from_dict,
)


class TestFilterFromMapping:
    def test_rsi(self):
        spec = filter_from_mapping({'type': 'RSI', 'filter_type': 'oversold', 'period': 10, 'consecutive_n': 2})
        assert spec == RSIFilter(filter_type=RSIFilterType.OVERSOLD, period=10, consecutive_n=2)

    def test_integer_filter_type(self):
        assert filter_from_mapping({'type': 'RSI', 'filter_type': 1}).filter_type is RSIFilterType.OVERSOLD

    def test_kind_key_alias(self):
        spec = filter_from_mapping({'kind': 'bb', 'filter_type': 'SQUEEZE'})
        assert isinstance(spec, BollingerFilter)
        assert spec.filter_type is BollingerFilterType.SQUEEZE

    @pytest.mark.parametrize("name", ['MA', 'moving_average', 'MovingAverage', 'moving-average'])
    def test_moving_average_aliases(self, name):
        spec = filter_from_mapping({'type': name, 'periods': [10, 50], 'ma_type': 'ema'})
        assert isinstance(spec, MovingAverageFilter)
        assert spec.periods == (10, 50)
        assert spec.ma_type == 'EMA'

    def test_lists_become_tuples(self):
        spec = filter_from_mapping({'type': 'THREE_RSI', 'rsi_periods': [5, 10]})
        assert isinstance(spec, ThreeRSIFilter)
        assert spec.rsi_periods == (5, 10)

    def test_defaults_apply(self):
        assert filter_from_mapping({'type': 'RSI'}) == RSIFilter()

    def test_unknown_parameter(self):
        with pytest.raises(ConfigurationError, match="unknown parameter"):
            filter_from_mapping({'type': 'RSI', 'perod': 14})

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError, match="Unknown filter kind"):
            filter_from_mapping({'type': 'FIBONACCI'})

    @pytest.mark.parametrize("mapping", [
        {'filter_type': 0},
        {'type': 'RSI', 'kind': 'RSI'},
    ])
    def test_needs_exactly_one_kind(self, mapping):
        with pytest.raises(ConfigurationError, match="exactly one"):
            filter_from_mapping(mapping)

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            filter_from_mapping(['RSI'])

    @pytest.mark.parametrize("mapping", [
        {'type': 'RSI', 'period': 0},
        {'type': 'RSI', 'oversold': 80, 'overbought': 20},
        {'type': 'RSI', 'filter_type': 99},
        {'type': 'MA', 'periods': [50, 10]},
        {'type': 'MA', 'periods': []},
        {'type': 'BB', 'period': 1},
        {'type': 'MACD', 'fast': 26, 'slow': 12},
    ])
    def test_invalid_values_are_rejected(self, mapping):
        with pytest.raises(ConfigurationError):
            filter_from_mapping(mapping)

    def test_to_mapping_round_trip(self):
        spec = MovingAverageFilter(filter_type='GOLDEN_CROSS', periods=(10, 50), ma_type='WMA', offset=1)
        mapping = filter_to_mapping(spec)
        assert mapping['type'] == 'MOVING_AVERAGE'
        assert mapping['filter_type'] == 'GOLDEN_CROSS'
        assert mapping['periods'] == [10, 50]
        assert filter_from_mapping(mapping) == spec


class TestPatternFromConfig:
    def test_disabled(self):
        assert pattern_from_config(None) is None
        assert pattern_from_config(False) is None

    def test_defaults(self):
        assert pattern_from_config(True) == SqueezeParams()

    def test_mapping(self):
        params = pattern_from_config({'narrowing_period': 3, 'squeeze_threshold': 0.05})
        assert params == SqueezeParams(narrowing_period=3, squeeze_threshold=0.05)

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match="unknown parameter"):
            pattern_from_config({'width': 0.1})

    def test_wrong_type(self):
        with pytest.raises(ConfigurationError):
            pattern_from_config("yes")


class TestStrategyConfig:
    def test_from_dict(self):
        config = strategy_config_from_dict({
            'name': 'rsi_rebound',
            'direction': 'SHORT',
            'description': 'fade overbought',
            'filters': [
                {'type': 'RSI', 'filter_type': 'OVERBOUGHT'},
                {'type': 'ADX', 'filter_type': 'ADX_ABOVE_THRESHOLD', 'threshold': 30},
            ],
        })
        assert config.name == 'rsi_rebound'
        assert config.direction is Direction.SHORT
        assert len(config.filters) == 2
        assert config.pattern is None

        strategy = config.to_evaluator()
        assert isinstance(strategy, StrategyEvaluator)
        assert strategy.direction is Direction.SHORT
        assert strategy.predicates == tuple(config.filters)

    def test_default_name_and_direction(self):
        config = strategy_config_from_dict({'pattern': True}, default_name='squeeze')
        assert config.name == 'squeeze'
        assert config.direction is Direction.LONG
        assert config.pattern == SqueezeParams()

    def test_error_names_filter_position(self):
        with pytest.raises(ConfigurationError, match=r"filters\[1\]: .*period"):
            strategy_config_from_dict({
                'name': 'bad',
                'filters': [{'type': 'RSI'}, {'type': 'RSI', 'period': -5}],
            })

    def test_filters_must_be_a_list(self):
        with pytest.raises(ConfigurationError, match="must be a list"):
            strategy_config_from_dict({'name': 'bad', 'filters': {'type': 'RSI'}})

    def test_no_filters_and_no_pattern(self, caplog):
        with caplog.at_level(logging.WARNING):
            with pytest.raises(ConfigurationError, match="no filters and no pattern"):
                strategy_config_from_dict({'name': 'empty', 'filters': []})
        assert "empty filters section" in caplog.text

    def test_unknown_section_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = strategy_config_from_dict({'name': 'x', 'pattern': True, 'risk': 0.02})
        assert config.name == 'x'
        assert "'risk'" in caplog.text

    @pytest.mark.parametrize("kwargs, match", [
        ({'name': ''}, "name"),
        ({'name': 'x', 'direction': 'none'}, "long or short"),
        ({'name': 'x', 'filters': [{'type': 'RSI'}]}, "not a filter spec"),
        ({'name': 'x', 'pattern': {'period': 10}}, "pattern"),
    ])
    def test_invalid(self, kwargs, match):
        kwargs.setdefault('filters', [RSIFilter()])
        with pytest.raises(ConfigurationError, match=match):
            StrategyConfig(**kwargs)

    def test_to_dict_round_trip(self):
        config = StrategyConfig(
            name='squeeze_long',
            direction=Direction.LONG,
            filters=[RSIFilter(filter_type='IN_RANGE'), BollingerFilter(filter_type='WIDTH_SUFFICIENT')],
            pattern=SqueezeParams(narrowing_period=4),
            description='squeeze then break out',
        )
        data = config.to_dict()
        assert data['direction'] == 'long'
        assert data['filters'][0]['filter_type'] == 'IN_RANGE'
        assert data['pattern']['narrowing_period'] == 4
        assert strategy_config_from_dict(data) == config

    def test_exit_filters(self):
        config = strategy_config_from_dict({
            'name': 'bb_long',
            'filters': [{'type': 'BB', 'filter_type': 'BELOW_LOWER'}],
            'exit_filters': [{'type': 'BB', 'filter_type': 'ABOVE_MIDDLE'}],
        })
        assert config.exit_filters == [BollingerFilter(filter_type=BollingerFilterType.ABOVE_MIDDLE)]
        strategy = config.to_evaluator()
        assert strategy.exit_predicates == tuple(config.exit_filters)
        assert config.to_dict()['exit_filters'][0]['filter_type'] == 'ABOVE_MIDDLE'
        assert strategy_config_from_dict(config.to_dict()) == config

    def test_exit_filter_error_names_position(self):
        with pytest.raises(ConfigurationError, match=r"exit_filters\[0\]: "):
            strategy_config_from_dict({
                'name': 'bad',
                'filters': [{'type': 'RSI'}],
                'exit_filters': [{'type': 'RSI', 'filter_type': 99}],
            })

    def test_exit_filters_alone_do_not_make_a_strategy(self):
        with pytest.raises(ConfigurationError, match="no filters and no pattern"):
            StrategyConfig(name='x', filters=[], exit_filters=[RSIFilter()])

    def test_no_exit_section_is_omitted_from_dict(self):
        assert 'exit_filters' not in StrategyConfig(name='x', filters=[RSIFilter()]).to_dict()
