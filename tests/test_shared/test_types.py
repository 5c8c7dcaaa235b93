"""
Tests for shared types.
"""
import pandas as pd
import pytest

from signalcore.shared import ConfigurationError, Direction, Signal, SignalAction


class TestDirection:
    @pytest.mark.parametrize("value,expected", [
        ("long", Direction.LONG),
        ("SHORT", Direction.SHORT),
        (" None ", Direction.NONE),
        (Direction.LONG, Direction.LONG),
    ])
    def test_parse(self, value, expected):
        assert Direction.parse(value) is expected

    @pytest.mark.parametrize("value", ["buy", 1, None])
    def test_parse_rejects_unknown(self, value):
        with pytest.raises(ConfigurationError, match="direction must be one of"):
            Direction.parse(value)


class TestSignal:
    def test_entry_flag(self):
        ts = pd.Timestamp('2024-01-02')
        assert Signal(3, Direction.LONG, ts, "s").is_entry is True
        assert Signal(3, Direction.NONE, ts, "s").is_entry is False

    def test_exit_flag(self):
        exit_signal = Signal(3, Direction.SHORT, action=SignalAction.EXIT)
        assert exit_signal.is_exit is True
        assert exit_signal.is_entry is False
        assert Signal(3, Direction.NONE, action=SignalAction.EXIT).is_exit is False
        assert Signal(3, Direction.LONG).action is SignalAction.ENTRY

    def test_signal_is_immutable(self):
        signal = Signal(1, Direction.SHORT)
        with pytest.raises(AttributeError):
            signal.index = 2
