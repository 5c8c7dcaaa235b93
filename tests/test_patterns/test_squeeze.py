"""
Tests for the narrowing -> squeeze -> breakout state machine.
"""
import pytest

from signalcore.indicators import IndicatorEngine
from signalcore.patterns import (
    BandObservation, IDLE_STATE, PatternState, Phase, SqueezeBreakoutDetector, SqueezeParams,
    SqueezeTracker, derive_state, replay, squeeze_tracker, transition,
)
from signalcore.shared.errors import ConfigurationError

PARAMS = SqueezeParams(narrowing_period=7, squeeze_period=6, squeeze_threshold=0.02)


def _quiet(width, previous):
    return BandObservation(width=width, previous_width=previous, high=100.0, close=99.0, upper=103.0)


def _breakout(width, previous):
    return BandObservation(width=width, previous_width=previous, high=105.0, close=104.0, upper=103.0)


def _scenario():
    """Baseline bar, 7 strictly decreasing widths, 6 widths below 0.02, then a breakout bar."""
    widths = [0.10, 0.09, 0.08, 0.07, 0.06, 0.05, 0.04, 0.03,
              0.015, 0.014, 0.013, 0.012, 0.011, 0.010]
    observations = []
    previous = None
    for width in widths:
        observations.append(_quiet(width, previous))
        previous = width
    observations.append(_breakout(0.011, previous))
    return observations


class TestTransition:
    def test_scenario_reaches_breakout_at_final_bar(self):
        phases = [state.phase for state in replay(_scenario(), PARAMS)]
        assert phases == (
            [Phase.IDLE] * 7          # baseline + 6 narrowing comparisons
            + [Phase.NARROWING] * 6   # 7th comparison enters, 5 squeeze bars
            + [Phase.SQUEEZE]         # 6th squeeze bar
            + [Phase.BREAKOUT]
        )
        assert Phase.BREAKOUT not in phases[:-1]

    def test_counters(self):
        states = replay(_scenario(), PARAMS)
        assert states[6] == PatternState(Phase.IDLE, 6, 0)
        assert states[7] == PatternState(Phase.NARROWING, 7, 0)
        assert states[13].squeeze_count == 6

    def test_breakout_is_single_shot(self):
        observations = _scenario() + [_quiet(0.009, 0.011)]
        states = replay(observations, PARAMS)
        assert states[-2].phase is Phase.BREAKOUT
        # Processed from IDLE: one narrowing comparison counted
        assert states[-1] == PatternState(Phase.IDLE, 1, 0)

    def test_first_bar_squeeze_and_breakout_is_not_breakout(self):
        state = transition(IDLE_STATE, _breakout(0.01, 0.012), PARAMS)
        assert state.phase is Phase.IDLE

    def test_breakout_requires_squeeze_phase(self):
        state = PatternState(Phase.NARROWING, 7, 3)
        assert transition(state, _breakout(0.011, 0.012), PARAMS).phase is Phase.NARROWING

    def test_breakout_needs_high_and_close_above_upper(self):
        state = PatternState(Phase.SQUEEZE, 7, 6)
        only_high = BandObservation(width=0.01, previous_width=0.01, high=105.0, close=102.0, upper=103.0)
        assert transition(state, only_high, PARAMS).phase is Phase.SQUEEZE

    def test_widening_during_idle_resets_count(self):
        state = PatternState(Phase.IDLE, 5, 0)
        assert transition(state, _quiet(0.06, 0.05), PARAMS) == IDLE_STATE

    def test_widening_during_narrowing_resets(self):
        state = PatternState(Phase.NARROWING, 7, 0)
        assert transition(state, _quiet(0.06, 0.05), PARAMS) == IDLE_STATE

    def test_narrowing_above_threshold_resets_squeeze_count(self):
        state = PatternState(Phase.NARROWING, 7, 3)
        assert transition(state, _quiet(0.03, 0.04), PARAMS) == PatternState(Phase.NARROWING, 8, 0)

    def test_squeeze_ends_when_width_leaves_threshold(self):
        state = PatternState(Phase.SQUEEZE, 7, 6)
        assert transition(state, _quiet(0.025, 0.019), PARAMS) == IDLE_STATE

    def test_undefined_observation_resets(self):
        state = PatternState(Phase.SQUEEZE, 7, 6)
        assert transition(state, None, PARAMS) == IDLE_STATE


class TestCallStyles:
    def test_detector_matches_replay(self):
        detector = SqueezeBreakoutDetector(PARAMS)
        incremental = [detector.advance(o) for o in _scenario()]
        assert incremental == replay(_scenario(), PARAMS)
        assert detector.state.is_breakout

        detector.reset()
        assert detector.state == IDLE_STATE

    def test_tracker_matches_derive_state(self, sample_series):
        params = SqueezeParams(period=5, narrowing_period=2, squeeze_period=2, squeeze_threshold=0.05)
        engine = IndicatorEngine(sample_series)
        tracker = SqueezeTracker(engine, params)
        for index in range(len(sample_series)):
            assert tracker.state_at(index) == derive_state(engine, index, params)

    def test_engine_scenario(self, squeeze_series):
        params = SqueezeParams(period=10, narrowing_period=3, squeeze_period=2, squeeze_threshold=0.02)
        engine = IndicatorEngine(squeeze_series)
        tracker = squeeze_tracker(engine, params)
        assert tracker.phase_at(12) is Phase.NARROWING
        assert tracker.phase_at(29) is Phase.SQUEEZE
        assert tracker.phase_at(30) is Phase.BREAKOUT
        assert tracker.is_breakout(30)
        assert derive_state(engine, 30, params).phase is Phase.BREAKOUT
        assert tracker.state_at(31) is None

    def test_tracker_is_shared_per_engine(self, squeeze_series):
        params = SqueezeParams(period=10)
        engine = IndicatorEngine(squeeze_series)
        assert squeeze_tracker(engine, params) is squeeze_tracker(engine, SqueezeParams(period=10))
        assert squeeze_tracker(engine, params) is not squeeze_tracker(engine, SqueezeParams(period=12))


class TestSqueezeParams:
    @pytest.mark.parametrize("kwargs", [
        {'period': 1},
        {'multiplier': 0.0},
        {'narrowing_period': 0},
        {'squeeze_period': -1},
        {'squeeze_threshold': 0.0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            SqueezeParams(**kwargs)
