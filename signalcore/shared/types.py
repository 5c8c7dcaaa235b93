"""
Shared types for strategy evaluation.

Direction, SignalAction and Signal are produced by the strategy layer and consumed by
whatever drives the evaluation (backtest loop, live runner, report).
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pandas as pd

from .errors import ConfigurationError


class SignalAction(Enum):
    """Whether a signal opens or closes a position in the strategy direction."""
    ENTRY = "entry"
    EXIT = "exit"


class Direction(Enum):
    """Direction of a strategy signal."""
    LONG = "long"
    SHORT = "short"
    NONE = "none"

    @classmethod
    def parse(cls, value) -> "Direction":
        """Map a config value ("long", "SHORT", Direction.LONG) onto a Direction."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ConfigurationError(
            f"direction must be one of {[d.value for d in cls]}, got {value!r}"
        )


@dataclass(frozen=True)
class Signal:
    """
    Strategy outcome at one bar index.

    A signal is produced per evaluation call and is not persisted.
    """
    index: int
    direction: Direction
    timestamp: Optional[pd.Timestamp] = None
    strategy: str = ""
    action: SignalAction = SignalAction.ENTRY

    @property
    def is_entry(self) -> bool:
        return self.action is SignalAction.ENTRY and self.direction is not Direction.NONE

    @property
    def is_exit(self) -> bool:
        return self.action is SignalAction.EXIT and self.direction is not Direction.NONE
