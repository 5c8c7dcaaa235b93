"""
Filter evaluation with offset and consecutive confirmation.
"""
import logging
from typing import Iterable, Optional

from .base import FilterSpec

logger = logging.getLogger(__name__)


class FilterEvaluator:
    """
    Evaluates filter specs against one indicator context.

    The context is normally an IndicatorEngine; anything with len() and the
    accessors a filter kind reads (rsi, macd, bar, ...) works.

    A spec passes at `index` only if its raw condition is exactly True on
    every bar of [target - consecutive_n + 1, target], where
    target = index - offset. Missing history, warm-up and NaN all fail.
    """

    def __init__(self, ctx):
        self.ctx = ctx

    def raw(self, spec: FilterSpec, index: int) -> Optional[bool]:
        """Raw condition at one bar (no confirmation), None outside the series."""
        if index < 0 or index >= len(self.ctx):
            return None
        return spec.raw(self.ctx, index)

    def evaluate(self, spec: FilterSpec, index: int) -> bool:
        """
        Args:
            spec: Validated filter spec
            index: Bar index to evaluate

        Returns:
            True if the filter is satisfied, False otherwise (never raises
            for a well-formed spec)
        """
        target = index - spec.offset
        start = target - spec.consecutive_n + 1
        if start < 0 or target >= len(self.ctx):
            return False
        for j in range(target, start - 1, -1):
            if spec.raw(self.ctx, j) is not True:
                return False
        return True

    def evaluate_all(self, specs: Iterable[FilterSpec], index: int) -> bool:
        """Strict conjunction of specs, stopping at the first failure."""
        for spec in specs:
            if not self.evaluate(spec, index):
                logger.debug(f"Bar {index}: {spec.describe()} failed")
                return False
            logger.debug(f"Bar {index}: {spec.describe()} passed")
        return True
