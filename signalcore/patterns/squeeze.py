"""
Bollinger band narrowing -> squeeze -> breakout pattern.

The pattern is a finite-state machine driven by one pure function,
transition(state, observation, params). Three ways of running it share
that function and therefore agree bar for bar:

- SqueezeBreakoutDetector.advance(): feed observations one at a time (live)
- replay() / derive_state(): fold from scratch over a fixed history (backtest)
- SqueezeTracker: engine-attached, lazily advanced and memoized per index
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from ..shared.defaults import (
    BB_MULTIPLIER, BB_PERIOD, SQUEEZE_NARROWING_PERIOD, SQUEEZE_PERIOD, SQUEEZE_THRESHOLD,
)
from ..shared.errors import ConfigurationError, require_positive_int, require_positive_number

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    NARROWING = "narrowing"
    SQUEEZE = "squeeze"
    BREAKOUT = "breakout"


@dataclass(frozen=True)
class PatternState:
    """Current phase plus the consecutive narrowing / squeeze counters."""
    phase: Phase = Phase.IDLE
    narrowing_count: int = 0
    squeeze_count: int = 0

    @property
    def is_breakout(self) -> bool:
        return self.phase is Phase.BREAKOUT


IDLE_STATE = PatternState()


@dataclass(frozen=True)
class SqueezeParams:
    """
    Pattern parameters.

    Attributes:
        period: Bollinger period
        multiplier: Bollinger standard deviation multiplier
        narrowing_period: Consecutive width decreases needed to enter NARROWING
        squeeze_period: Consecutive bars below squeeze_threshold needed to enter SQUEEZE
        squeeze_threshold: Normalized band width ((upper - lower) / middle) limit
    """
    period: int = BB_PERIOD
    multiplier: float = BB_MULTIPLIER
    narrowing_period: int = SQUEEZE_NARROWING_PERIOD
    squeeze_period: int = SQUEEZE_PERIOD
    squeeze_threshold: float = SQUEEZE_THRESHOLD

    def __post_init__(self):
        require_positive_int("Bollinger period", self.period)
        if self.period < 2:
            raise ConfigurationError(f"Bollinger period must be >= 2, got {self.period}")
        require_positive_number("Bollinger multiplier", self.multiplier)
        require_positive_int("narrowing_period", self.narrowing_period)
        require_positive_int("squeeze_period", self.squeeze_period)
        require_positive_number("squeeze_threshold", self.squeeze_threshold)


@dataclass(frozen=True)
class BandObservation:
    """Band metrics of one bar as seen by the state machine."""
    width: float
    previous_width: Optional[float]
    high: float
    close: float
    upper: float

    @property
    def is_narrowing(self) -> bool:
        return self.previous_width is not None and self.width < self.previous_width

    @property
    def breaks_upper(self) -> bool:
        return self.high > self.upper and self.close > self.upper


def transition(state: PatternState, observation: Optional[BandObservation],
               params: SqueezeParams) -> PatternState:
    """
    Next pattern state after one bar.

    Args:
        state: State after the previous bar
        observation: Band metrics of the new bar (None while bands are undefined)
        params: Pattern parameters

    Returns:
        State after the new bar
    """
    if state.phase is Phase.BREAKOUT:
        # Single-shot: the bar after a breakout starts a new cycle
        state = IDLE_STATE
    if observation is None:
        return IDLE_STATE

    narrowing = observation.is_narrowing
    below_threshold = observation.width < params.squeeze_threshold

    if state.phase is Phase.IDLE:
        if not narrowing:
            return IDLE_STATE
        count = state.narrowing_count + 1
        phase = Phase.NARROWING if count >= params.narrowing_period else Phase.IDLE
        return PatternState(phase, count, 0)

    if state.phase is Phase.NARROWING:
        narrowing_count = state.narrowing_count + 1 if narrowing else state.narrowing_count
        if below_threshold:
            squeeze_count = state.squeeze_count + 1
            phase = Phase.SQUEEZE if squeeze_count >= params.squeeze_period else Phase.NARROWING
            return PatternState(phase, narrowing_count, squeeze_count)
        if narrowing:
            return PatternState(Phase.NARROWING, narrowing_count, 0)
        return IDLE_STATE

    # SQUEEZE
    if observation.breaks_upper:
        return PatternState(Phase.BREAKOUT, state.narrowing_count, state.squeeze_count)
    if below_threshold:
        return PatternState(Phase.SQUEEZE, state.narrowing_count, state.squeeze_count + 1)
    return IDLE_STATE


class SqueezeBreakoutDetector:
    """Incrementally advanced pattern detector for live evaluation."""

    def __init__(self, params: Optional[SqueezeParams] = None):
        self.params = params or SqueezeParams()
        self.state = IDLE_STATE

    def advance(self, observation: Optional[BandObservation]) -> PatternState:
        previous = self.state
        self.state = transition(previous, observation, self.params)
        if self.state.phase is not previous.phase:
            logger.debug(f"Squeeze pattern {previous.phase.value} -> {self.state.phase.value}")
        return self.state

    def reset(self) -> None:
        self.state = IDLE_STATE


def replay(observations: Iterable[Optional[BandObservation]],
           params: Optional[SqueezeParams] = None) -> List[PatternState]:
    """Fold transition over a fixed history; one state per observation."""
    params = params or SqueezeParams()
    states = []
    state = IDLE_STATE
    for observation in observations:
        state = transition(state, observation, params)
        states.append(state)
    return states


def observe(ctx, index: int, params: SqueezeParams) -> Optional[BandObservation]:
    """Band observation of bar `index` from an IndicatorEngine, None while undefined."""
    bands = ctx.bollinger(index, params.period, params.multiplier)
    bar = ctx.bar(index)
    if bands is None or bar is None:
        return None
    previous = ctx.bollinger(index - 1, params.period, params.multiplier) if index > 0 else None
    return BandObservation(
        width=bands.normalized_width,
        previous_width=None if previous is None else previous.normalized_width,
        high=bar.high,
        close=bar.close,
        upper=bands.upper,
    )


def derive_state(ctx, index: int, params: Optional[SqueezeParams] = None) -> PatternState:
    """
    Re-derive the pattern state at `index` from scratch.

    Bars before the first defined band leave the machine in IDLE, so the fold
    starts at the end of the Bollinger warm-up.
    """
    params = params or SqueezeParams()
    state = IDLE_STATE
    for j in range(max(params.period - 1, 0), index + 1):
        state = transition(state, observe(ctx, j, params), params)
    return state


class SqueezeTracker:
    """
    Pattern states of one engine's series, advanced lazily and memoized.

    Obtain through squeeze_tracker() so every filter and strategy with the
    same parameters shares one tracker per engine.
    """

    def __init__(self, ctx, params: SqueezeParams):
        self.ctx = ctx
        self.params = params
        self._detector = SqueezeBreakoutDetector(params)
        self._states: List[PatternState] = []

    def state_at(self, index: int) -> Optional[PatternState]:
        if index < 0 or index >= len(self.ctx):
            return None
        while len(self._states) <= index:
            j = len(self._states)
            self._states.append(self._detector.advance(observe(self.ctx, j, self.params)))
        return self._states[index]

    def phase_at(self, index: int) -> Optional[Phase]:
        state = self.state_at(index)
        return None if state is None else state.phase

    def is_breakout(self, index: int) -> bool:
        return self.phase_at(index) is Phase.BREAKOUT


def squeeze_tracker(ctx, params: SqueezeParams) -> SqueezeTracker:
    """The engine's shared tracker for these parameters."""
    return ctx.attachment(('squeeze', params), lambda: SqueezeTracker(ctx, params))
