"""
Strategy evaluation: strict conjunction of filters plus optional pattern confirmation.

A strategy is an ordered list of predicates over a shared indicator context
(an IndicatorEngine). Filters that read the same indicator with the same
parameters hit the same engine state, so nothing is computed twice.

Entry and exit are evaluated independently. Entry predicates (and the
pattern, when configured) open a position in the strategy direction; the
optional exit predicates close it.
"""
import logging
from typing import Callable, List, Optional, Protocol, Sequence, Union

from ..filters.base import FilterSpec
from ..filters.evaluator import FilterEvaluator
from ..patterns.squeeze import SqueezeParams, squeeze_tracker
from ..shared.errors import ConfigurationError
from ..shared.types import Direction, Signal, SignalAction

logger = logging.getLogger(__name__)


class Predicate(Protocol):
    """Custom strategy condition evaluated at one bar."""

    def __call__(self, engine, index: int) -> bool:
        ...


StrategyComponent = Union[FilterSpec, Predicate]


def _check_components(name: str, components: Sequence[StrategyComponent], role: str) -> tuple:
    for component in components:
        if not isinstance(component, FilterSpec) and not callable(component):
            raise ConfigurationError(
                f"Strategy {name!r}: {role} must be filter specs or callables, got {component!r}"
            )
    return tuple(components)


class StrategyEvaluator:
    """
    Turns filter results into one Signal per bar.

    The entry signal carries the configured direction only if every
    predicate holds at the bar and, when a pattern is configured, the
    squeeze/breakout pattern is in BREAKOUT at that bar. Anything else is
    Direction.NONE. A strategy without predicates and pattern is rejected,
    since it would fire on every bar.

    The exit signal follows the same conjunction over exit_predicates and
    never fires when none are configured.
    """

    def __init__(
        self,
        name: str,
        direction: Union[Direction, str],
        predicates: Sequence[StrategyComponent] = (),
        pattern: Optional[SqueezeParams] = None,
        exit_predicates: Sequence[StrategyComponent] = (),
    ):
        self.name = name
        self.direction = Direction.parse(direction)
        if self.direction is Direction.NONE:
            raise ConfigurationError(f"Strategy {name!r} needs a long or short direction")
        self.predicates = _check_components(name, predicates, "predicates")
        self.exit_predicates = _check_components(name, exit_predicates, "exit predicates")
        if pattern is not None and not isinstance(pattern, SqueezeParams):
            raise ConfigurationError(f"Strategy {name!r}: pattern must be SqueezeParams, got {pattern!r}")
        if not self.predicates and pattern is None:
            raise ConfigurationError(f"Strategy {name!r} has no entry predicates and no pattern")
        self.pattern = pattern

    def __repr__(self) -> str:
        return (
            f"StrategyEvaluator({self.name!r}, {self.direction.value}, "
            f"{len(self.predicates)} predicates, {len(self.exit_predicates)} exit predicates, "
            f"pattern={self.pattern is not None})"
        )

    def _all_pass(self, engine, predicates: Sequence[StrategyComponent], index: int, role: str) -> bool:
        evaluator = FilterEvaluator(engine)
        for position, predicate in enumerate(predicates):
            if isinstance(predicate, FilterSpec):
                passed = evaluator.evaluate(predicate, index)
            else:
                passed = bool(predicate(engine, index))
            if not passed:
                logger.debug(f"{self.name}: {role} predicate {position} failed at bar {index}")
                return False
        return True

    def is_satisfied(self, engine, index: int) -> bool:
        """True if every entry component holds at index."""
        if index < 0 or index >= len(engine):
            return False
        if not self._all_pass(engine, self.predicates, index, "entry"):
            return False
        if self.pattern is not None and not squeeze_tracker(engine, self.pattern).is_breakout(index):
            logger.debug(f"{self.name}: no squeeze breakout at bar {index}")
            return False
        return True

    def is_exit(self, engine, index: int) -> bool:
        """True if exit predicates are configured and all of them hold at index."""
        if not self.exit_predicates or index < 0 or index >= len(engine):
            return False
        return self._all_pass(engine, self.exit_predicates, index, "exit")

    def _signal(self, engine, index: int, fired: bool, action: SignalAction) -> Signal:
        direction = self.direction if fired else Direction.NONE
        bar = engine.bar(index)
        if fired:
            logger.debug(f"{self.name}: {direction.value} {action.value} signal at bar {index}")
        return Signal(
            index=index,
            direction=direction,
            timestamp=None if bar is None else bar.timestamp,
            strategy=self.name,
            action=action,
        )

    def evaluate(self, engine, index: int) -> Signal:
        """
        Evaluate the entry side of the strategy at one bar.

        Args:
            engine: IndicatorEngine over the series
            index: Bar index

        Returns:
            Entry Signal with the strategy direction, or Direction.NONE
        """
        return self._signal(engine, index, self.is_satisfied(engine, index), SignalAction.ENTRY)

    def evaluate_exit(self, engine, index: int) -> Signal:
        """Exit Signal for a position in the strategy direction, or Direction.NONE."""
        return self._signal(engine, index, self.is_exit(engine, index), SignalAction.EXIT)


class StrategyBuilder:
    """
    Fluent builder for StrategyEvaluator.

    Example:
        >>> strategy = (StrategyBuilder("rsi_rebound", Direction.LONG)
        ...             .add_filter(RSIFilter(filter_type=RSIFilterType.EXIT_OVERSOLD))
        ...             .add_filter(ADXFilter(filter_type="ADX_ABOVE_THRESHOLD"))
        ...             .add_exit_filter(RSIFilter(filter_type="OVERBOUGHT"))
        ...             .build())
    """

    def __init__(self, name: str, direction: Union[Direction, str] = Direction.LONG):
        self.name = name
        self.direction = direction
        self._predicates: List[StrategyComponent] = []
        self._exit_predicates: List[StrategyComponent] = []
        self._pattern: Optional[SqueezeParams] = None

    @staticmethod
    def _require_spec(spec, method: str) -> FilterSpec:
        if not isinstance(spec, FilterSpec):
            raise ConfigurationError(f"{method} expects a filter spec, got {spec!r}")
        return spec

    @staticmethod
    def _require_callable(predicate, method: str):
        if not callable(predicate):
            raise ConfigurationError(f"{method} expects a callable, got {predicate!r}")
        return predicate

    def add_filter(self, spec: FilterSpec) -> "StrategyBuilder":
        self._predicates.append(self._require_spec(spec, "add_filter"))
        return self

    def add_filters(self, specs: Sequence[FilterSpec]) -> "StrategyBuilder":
        for spec in specs:
            self.add_filter(spec)
        return self

    def add_predicate(self, predicate: Callable[..., bool]) -> "StrategyBuilder":
        self._predicates.append(self._require_callable(predicate, "add_predicate"))
        return self

    def add_exit_filter(self, spec: FilterSpec) -> "StrategyBuilder":
        self._exit_predicates.append(self._require_spec(spec, "add_exit_filter"))
        return self

    def add_exit_predicate(self, predicate: Callable[..., bool]) -> "StrategyBuilder":
        self._exit_predicates.append(self._require_callable(predicate, "add_exit_predicate"))
        return self

    def with_pattern(self, params: Optional[SqueezeParams] = None) -> "StrategyBuilder":
        """Require the squeeze/breakout pattern to be in BREAKOUT."""
        self._pattern = params or SqueezeParams()
        return self

    def build(self) -> StrategyEvaluator:
        strategy = StrategyEvaluator(
            self.name, self.direction, self._predicates, self._pattern, self._exit_predicates,
        )
        logger.info(f"Built strategy {strategy!r}")
        return strategy
