"""
Streaming smoothing primitives.

Every primitive consumes one float per call and keeps only the state it
needs, so each update is O(1) amortized. Indicators compose these instead
of recomputing over their full window.

Non-finite input (NaN from a gap in the data) never sticks: windowed
primitives report NaN only while the value is inside their window, and the
recursive averages skip it and carry their previous value.
"""
import math
from collections import deque
from typing import Deque, Optional, Tuple


class RollingWindow:
    """
    Fixed-length window of the most recent values with running sums.

    Non-finite values are counted instead of summed, so total and
    total_squares are NaN only while one is inside the window. The sums are
    rebuilt exactly once every `period` pushes to bound rounding drift.
    """

    def __init__(self, period: int):
        self.period = period
        self.values: Deque[float] = deque(maxlen=period)
        self._sum = 0.0
        self._sum_squares = 0.0
        self._non_finite = 0
        self._pushes = 0

    def push(self, value: float) -> Optional[float]:
        """Add a value; return the value that fell out of the window, if any."""
        dropped = None
        if len(self.values) == self.period:
            dropped = self.values[0]
            self._remove(dropped)
        self.values.append(value)
        self._add(value)
        self._pushes += 1
        if self._pushes % self.period == 0:
            self._rebuild()
        return dropped

    def _add(self, value: float) -> None:
        if math.isfinite(value):
            self._sum += value
            self._sum_squares += value * value
        else:
            self._non_finite += 1

    def _remove(self, value: float) -> None:
        if math.isfinite(value):
            self._sum -= value
            self._sum_squares -= value * value
        else:
            self._non_finite -= 1

    def _rebuild(self) -> None:
        finite = [v for v in self.values if math.isfinite(v)]
        self._sum = math.fsum(finite)
        self._sum_squares = math.fsum(v * v for v in finite)

    @property
    def finite(self) -> bool:
        return self._non_finite == 0

    @property
    def total(self) -> float:
        return self._sum if self._non_finite == 0 else math.nan

    @property
    def total_squares(self) -> float:
        return self._sum_squares if self._non_finite == 0 else math.nan

    @property
    def full(self) -> bool:
        return len(self.values) == self.period

    def __len__(self) -> int:
        return len(self.values)


class RunningSMA:
    """Simple moving average over the last `period` values."""

    def __init__(self, period: int):
        self.period = period
        self._window = RollingWindow(period)

    def push(self, value: float) -> Optional[float]:
        self._window.push(value)
        if not self._window.full:
            return None
        return self._window.total / self.period


class RunningEMA:
    """
    Exponential moving average.

    Seeded with the SMA of the first `period` values, then smoothed with
    alpha = 2 / (period + 1).
    """

    def __init__(self, period: int):
        self.period = period
        self.alpha = 2.0 / (period + 1)
        self.value: Optional[float] = None
        self._seed_total = 0.0
        self._seed_count = 0

    def push(self, value: float) -> Optional[float]:
        if not math.isfinite(value):
            return self.value
        if self.value is None:
            self._seed_total += value
            self._seed_count += 1
            if self._seed_count == self.period:
                self.value = self._seed_total / self.period
            return self.value
        self.value = self.alpha * value + (1.0 - self.alpha) * self.value
        return self.value


class WilderAverage:
    """
    Wilder smoothing used by RSI, ATR and ADX.

    Seeded with the simple average of the first `period` values, then
    value = (prev * (period - 1) + new) / period.
    """

    def __init__(self, period: int):
        self.period = period
        self.value: Optional[float] = None
        self._seed_total = 0.0
        self._seed_count = 0

    def push(self, value: float) -> Optional[float]:
        if not math.isfinite(value):
            return self.value
        if self.value is None:
            self._seed_total += value
            self._seed_count += 1
            if self._seed_count == self.period:
                self.value = self._seed_total / self.period
            return self.value
        self.value = (self.value * (self.period - 1) + value) / self.period
        return self.value


class RunningWMA:
    """Linearly weighted moving average (newest value has weight `period`)."""

    def __init__(self, period: int):
        self.period = period
        self._denominator = period * (period + 1) / 2.0
        self._window = RollingWindow(period)
        self._weighted = math.nan
        self._pushes = 0

    def push(self, value: float) -> Optional[float]:
        window = self._window
        was_full = window.full
        previous_total = window.total
        window.push(value)
        self._pushes += 1
        if not window.full:
            return None
        if not window.finite:
            self._weighted = math.nan
        elif not was_full or math.isnan(self._weighted) or self._pushes % self.period == 0:
            self._weighted = math.fsum((k + 1) * v for k, v in enumerate(window.values))
        else:
            # Every weight drops by one, the oldest value reaches weight 0
            self._weighted += self.period * value - previous_total
        return self._weighted / self._denominator


class RollingExtreme:
    """
    Rolling maximum or minimum over the last `period` values.

    Uses a monotonic deque: each value is pushed and popped at most once.
    Non-finite values stay out of the deque and make the result NaN while
    they are inside the window.
    """

    def __init__(self, period: int, maximum: bool = True):
        self.period = period
        self.maximum = maximum
        self._deque: Deque[Tuple[int, float]] = deque()
        self._position = -1
        self._last_non_finite: Optional[int] = None

    def push(self, value: float) -> Optional[float]:
        self._position += 1
        dq = self._deque
        if math.isfinite(value):
            if self.maximum:
                while dq and dq[-1][1] <= value:
                    dq.pop()
            else:
                while dq and dq[-1][1] >= value:
                    dq.pop()
            dq.append((self._position, value))
        else:
            self._last_non_finite = self._position
        while dq and dq[0][0] <= self._position - self.period:
            dq.popleft()
        if self._position + 1 < self.period:
            return None
        if self._last_non_finite is not None and self._last_non_finite > self._position - self.period:
            return math.nan
        return dq[0][1]
