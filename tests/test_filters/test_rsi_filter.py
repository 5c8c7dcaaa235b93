"""
Tests for the RSI filter against a stub indicator context.
"""
import math

import pytest

from signalcore.filters import FilterEvaluator, RSIFilter, RSIFilterType
from signalcore.shared.errors import ConfigurationError


class StubContext:
    """Indicator context serving a fixed RSI sequence."""

    def __init__(self, rsi_values):
        self.rsi_values = list(rsi_values)
        self.calls = 0

    def __len__(self):
        return len(self.rsi_values)

    def rsi(self, index, period):
        self.calls += 1
        if 0 <= index < len(self.rsi_values):
            return self.rsi_values[index]
        return None


def _evaluate_all(spec, values):
    evaluator = FilterEvaluator(StubContext(values))
    return [evaluator.evaluate(spec, i) for i in range(len(values))]


class TestThresholdCross:
    def test_upward_cross_fires_once(self):
        """[68, 69, 71, 72] with overbought 70: only bar 2 is a new cross."""
        spec = RSIFilter(filter_type=RSIFilterType.THRESHOLD_CROSS_UP, overbought=70)
        assert _evaluate_all(spec, [68, 69, 71, 72]) == [False, False, True, False]

    def test_downward_cross(self):
        spec = RSIFilter(filter_type=RSIFilterType.THRESHOLD_CROSS_DOWN, oversold=30)
        assert _evaluate_all(spec, [35, 31, 29, 25]) == [False, False, True, False]

    def test_exit_oversold(self):
        spec = RSIFilter(filter_type=RSIFilterType.EXIT_OVERSOLD)
        assert _evaluate_all(spec, [25, 28, 31, 35]) == [False, False, True, False]

    def test_midline_cross(self):
        up = RSIFilter(filter_type=RSIFilterType.MIDLINE_CROSS_UP)
        down = RSIFilter(filter_type=RSIFilterType.MIDLINE_CROSS_DOWN)
        values = [45, 55, 60, 48]
        assert _evaluate_all(up, values) == [False, True, False, False]
        assert _evaluate_all(down, values) == [False, False, False, True]

    def test_cross_after_undefined_bar_is_false(self):
        spec = RSIFilter(filter_type=RSIFilterType.THRESHOLD_CROSS_UP)
        assert _evaluate_all(spec, [None, 75, 76]) == [False, False, False]


class TestLevels:
    def test_zones(self):
        values = [20, 50, 80]
        assert _evaluate_all(RSIFilter(filter_type="OVERSOLD"), values) == [True, False, False]
        assert _evaluate_all(RSIFilter(filter_type="in_range"), values) == [False, True, False]
        assert _evaluate_all(RSIFilter(filter_type=0), values) == [False, False, True]

    def test_rising_and_falling(self):
        values = [40, 45, 45, 42]
        assert _evaluate_all(RSIFilter(filter_type=RSIFilterType.RISING), values) == [False, True, False, False]
        assert _evaluate_all(RSIFilter(filter_type=RSIFilterType.FALLING), values) == [False, False, False, True]

    def test_nan_is_not_satisfied(self):
        spec = RSIFilter(filter_type=RSIFilterType.OVERBOUGHT)
        assert _evaluate_all(spec, [math.nan, 90]) == [False, True]


class TestConfirmation:
    VALUES = [71, 72, 69, 75, 76, 77]

    def test_consecutive_n(self):
        overbought = RSIFilterType.OVERBOUGHT
        assert _evaluate_all(RSIFilter(filter_type=overbought, consecutive_n=1), self.VALUES) == \
            [True, True, False, True, True, True]
        assert _evaluate_all(RSIFilter(filter_type=overbought, consecutive_n=2), self.VALUES) == \
            [False, True, False, False, True, True]
        assert _evaluate_all(RSIFilter(filter_type=overbought, consecutive_n=3), self.VALUES) == \
            [False, False, False, False, False, True]

    def test_not_enough_history_is_false(self):
        spec = RSIFilter(filter_type=RSIFilterType.OVERBOUGHT, consecutive_n=7)
        assert _evaluate_all(spec, self.VALUES) == [False] * 6

    def test_offset_evaluates_earlier_bar(self):
        spec = RSIFilter(filter_type=RSIFilterType.OVERBOUGHT, offset=1)
        assert _evaluate_all(spec, self.VALUES) == [False, True, True, False, True, True]

    def test_index_outside_series_is_false(self):
        evaluator = FilterEvaluator(StubContext(self.VALUES))
        spec = RSIFilter(filter_type=RSIFilterType.OVERBOUGHT)
        assert evaluator.evaluate(spec, 6) is False
        assert evaluator.evaluate(spec, -1) is False
        assert evaluator.raw(spec, 6) is None

    def test_idempotent(self):
        evaluator = FilterEvaluator(StubContext(self.VALUES))
        spec = RSIFilter(filter_type=RSIFilterType.OVERBOUGHT, consecutive_n=2)
        assert evaluator.evaluate(spec, 4) == evaluator.evaluate(spec, 4)

    def test_evaluation_stops_at_first_failure(self):
        ctx = StubContext([50, 50, 50, 80])
        spec = RSIFilter(filter_type=RSIFilterType.OVERBOUGHT, consecutive_n=3)
        assert FilterEvaluator(ctx).evaluate(spec, 3) is False
        # Bar 3 passes, bar 2 fails, bar 1 is never looked at
        assert ctx.calls == 2


class TestRSIFilterValidation:
    @pytest.mark.parametrize("kwargs,message", [
        ({'filter_type': 11}, "Invalid filter_type"),
        ({'filter_type': 'SIDEWAYS'}, "Invalid filter_type"),
        ({'filter_type': True}, "Invalid filter_type"),
        ({'consecutive_n': 0}, "consecutive_n must be > 0"),
        ({'offset': -1}, "offset must be >= 0"),
        ({'period': 0}, "RSI period must be > 0"),
        ({'oversold': 70, 'overbought': 30}, "oversold < overbought"),
    ])
    def test_invalid_specs(self, kwargs, message):
        with pytest.raises(ConfigurationError, match=message):
            RSIFilter(**kwargs)

    def test_filter_type_is_normalized(self):
        spec = RSIFilter(filter_type='threshold_cross_up')
        assert spec.filter_type is RSIFilterType.THRESHOLD_CROSS_UP
        assert spec == RSIFilter(filter_type=3)

    def test_spec_is_immutable(self):
        spec = RSIFilter()
        with pytest.raises(AttributeError):
            spec.period = 21


class TestExtendedTypes:
    def test_fixed_level_crosses(self):
        above = RSIFilter(filter_type=RSIFilterType.CROSS_ABOVE_40)
        below = RSIFilter(filter_type=RSIFilterType.CROSS_BELOW_60)
        assert _evaluate_all(above, [35, 38, 42, 45]) == [False, False, True, False]
        assert _evaluate_all(below, [65, 61, 58, 55]) == [False, False, True, False]

    def test_double_bottom(self):
        spec = RSIFilter(filter_type=RSIFilterType.DOUBLE_BOTTOM, oversold=30)
        assert _evaluate_all(spec, [25, 35, 28, 40, 45]) == [False, False, False, False, True]

    def test_turn_down_from_overbought(self):
        spec = RSIFilter(filter_type=RSIFilterType.OVERBOUGHT_TURN_DOWN)
        assert _evaluate_all(spec, [72, 75, 73]) == [False, False, True]

    def test_strong_rise_and_sideways(self):
        strong = RSIFilter(filter_type=RSIFilterType.STRONG_RISE)
        flat = RSIFilter(filter_type=RSIFilterType.SIDEWAYS)
        assert _evaluate_all(strong, [40, 42, 46]) == [False, False, True]
        assert _evaluate_all(flat, [50, 50.5, 55]) == [False, True, False]
