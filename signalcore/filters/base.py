"""
Filter building blocks.

A filter spec is an immutable, validated parameter set for one filter kind.
Each kind owns a closed IntEnum of filter types and a table mapping every
member to a raw condition:

    condition(spec, ctx, index) -> Optional[bool]

where ctx is an IndicatorEngine (or anything exposing the same accessors)
and None means "not computable at this bar" (warm-up, missing previous bar,
NaN). The FilterEvaluator applies offset and consecutive confirmation on
top of the raw condition and treats None as not satisfied.
"""
import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, ClassVar, Dict, Optional, Type

from ..shared.defaults import CONSECUTIVE_N, OFFSET
from ..shared.errors import ConfigurationError, require_non_negative_int, require_positive_int

Condition = Callable[[Any, Any, int], Optional[bool]]


class FilterKind(Enum):
    """Filter kinds, with the names accepted at the configuration boundary."""
    RSI = "RSI"
    MACD = "MACD"
    BOLLINGER_BAND = "BOLLINGER_BAND"
    ADX = "ADX"
    MOVING_AVERAGE = "MOVING_AVERAGE"
    ICHIMOKU = "ICHIMOKU"
    VWAP = "VWAP"
    ATR = "ATR"
    SUPERTREND = "SUPERTREND"
    MOMENTUM = "MOMENTUM"
    VOLUME = "VOLUME"
    THREE_RSI = "THREE_RSI"
    CANDLE_PATTERN = "CANDLE_PATTERN"
    SUPPORT_RESISTANCE = "SUPPORT_RESISTANCE"
    COPYS = "COPYS"

    @classmethod
    def parse(cls, value) -> "FilterKind":
        """Parse a kind name (case-insensitive, aliases BB, MA, BOLLINGERBAND, ...)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace('-', '_')
            key = _KIND_ALIASES.get(key, key)
            if key in cls.__members__:
                return cls[key]
        raise ConfigurationError(
            f"Unknown filter kind {value!r}; expected one of {list(cls.__members__)}"
        )


_KIND_ALIASES = {
    'BB': 'BOLLINGER_BAND',
    'BOLLINGERBAND': 'BOLLINGER_BAND',
    'BOLLINGER': 'BOLLINGER_BAND',
    'MA': 'MOVING_AVERAGE',
    'MOVINGAVERAGE': 'MOVING_AVERAGE',
    'THREERSI': 'THREE_RSI',
    'SUPER_TREND': 'SUPERTREND',
    'CANDLEPATTERN': 'CANDLE_PATTERN',
    'SUPPORTRESISTANCE': 'SUPPORT_RESISTANCE',
    'SR': 'SUPPORT_RESISTANCE',
    'COPY_S': 'COPYS',
}


def coerce_filter_type(enum_cls: Type[IntEnum], value: Any) -> IntEnum:
    """Map an integer code, member name or member onto the kind's filter type enum."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return enum_cls(value)
        except ValueError:
            pass
    elif isinstance(value, str) and value.strip().upper() in enum_cls.__members__:
        return enum_cls[value.strip().upper()]
    raise ConfigurationError(
        f"Invalid filter_type {value!r} for {enum_cls.__name__}; expected a code "
        f"0..{len(enum_cls) - 1} or one of {list(enum_cls.__members__)}"
    )


@dataclass(frozen=True)
class FilterSpec:
    """
    Common fields of every filter spec.

    Attributes:
        filter_type: Kind-specific filter type (code, name or enum member)
        consecutive_n: Raw condition must hold on this many trailing bars
        offset: Evaluate this many bars before the requested index
    """
    filter_type: Any = 0
    consecutive_n: int = CONSECUTIVE_N
    offset: int = OFFSET

    kind: ClassVar[FilterKind]
    filter_types: ClassVar[Type[IntEnum]]
    conditions: ClassVar[Dict[IntEnum, Condition]] = {}

    def __post_init__(self):
        object.__setattr__(self, 'filter_type', coerce_filter_type(self.filter_types, self.filter_type))
        require_positive_int("consecutive_n", self.consecutive_n)
        require_non_negative_int("offset", self.offset)
        self._validate()

    def _validate(self) -> None:
        """Validate kind-specific parameters (override in subclasses)."""

    def raw(self, ctx, index: int) -> Optional[bool]:
        """Raw (unconfirmed) condition at one bar."""
        return self.conditions[self.filter_type](self, ctx, index)

    def describe(self) -> str:
        return f"{self.kind.value}:{self.filter_type.name}"


# Comparison helpers: None or NaN on either side gives None

def is_defined(*values) -> bool:
    for value in values:
        if value is None:
            return False
        if isinstance(value, float) and math.isnan(value):
            return False
    return True


def gt(a, b) -> Optional[bool]:
    return a > b if is_defined(a, b) else None


def lt(a, b) -> Optional[bool]:
    return a < b if is_defined(a, b) else None


def ge(a, b) -> Optional[bool]:
    return a >= b if is_defined(a, b) else None


def le(a, b) -> Optional[bool]:
    return a <= b if is_defined(a, b) else None


def between(value, low, high) -> Optional[bool]:
    """low <= value <= high."""
    if not is_defined(value, low, high):
        return None
    return low <= value <= high


def all_of(*results: Optional[bool]) -> Optional[bool]:
    """Conjunction of raw results: False wins over None, None wins over True."""
    if any(r is False for r in results):
        return False
    if any(r is None for r in results):
        return None
    return True


def any_of(*results: Optional[bool]) -> Optional[bool]:
    if any(r is True for r in results):
        return True
    if any(r is None for r in results):
        return None
    return False


def field(snapshot, name: str):
    """Attribute of an indicator snapshot, None when the snapshot is undefined."""
    return None if snapshot is None else getattr(snapshot, name)


def bar_field(ctx, index: int, name: str):
    bar = ctx.bar(index)
    return None if bar is None else getattr(bar, name)


def rising(series: Callable[[int], Any], index: int) -> Optional[bool]:
    """series(index) > series(index - 1)."""
    if index < 1:
        return None
    return gt(series(index), series(index - 1))


def falling(series: Callable[[int], Any], index: int) -> Optional[bool]:
    if index < 1:
        return None
    return lt(series(index), series(index - 1))


def crossed(condition: Callable[[int], Optional[bool]], index: int) -> bool:
    """Condition was False at index - 1 and is True at index."""
    if index < 1:
        return False
    return condition(index - 1) is False and condition(index) is True


def window(series: Callable[[int], Any], index: int, length: int) -> Optional[list]:
    """[series(index - length + 1), ..., series(index)], None if any value is undefined."""
    start = index - length + 1
    if start < 0:
        return None
    values = [series(j) for j in range(start, index + 1)]
    return values if is_defined(*values) else None


def change_ratio(series: Callable[[int], Any], index: int) -> Optional[float]:
    """(series(index) - series(index - 1)) / |series(index - 1)|; None if undefined or the base is 0."""
    values = window(series, index, 2)
    if values is None or values[0] == 0:
        return None
    return (values[1] - values[0]) / abs(values[0])


def sideways(series: Callable[[int], Any], index: int, tolerance: float) -> Optional[bool]:
    """Relative one-bar change of at most `tolerance`."""
    ratio = change_ratio(series, index)
    return None if ratio is None else abs(ratio) <= tolerance
