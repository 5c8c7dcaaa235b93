"""
Strategy configuration.

Maps plain config mappings (as produced by a YAML/JSON loader) onto
validated filter specs and strategies. Validation runs at construction time
(fail fast with clear errors); explicitly provided but invalid values are
never replaced by defaults.
"""
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Union

from ..filters import FILTER_SPECS
from ..filters.base import FilterKind, FilterSpec
from ..patterns.squeeze import SqueezeParams
from ..shared.errors import ConfigurationError
from ..shared.types import Direction
from .strategy import StrategyEvaluator

logger = logging.getLogger(__name__)

KIND_KEYS = ('type', 'kind')
STRATEGY_KEYS = ('name', 'description', 'direction', 'filters', 'pattern', 'exit_filters')


def _check_keys(context: str, data: Mapping, allowed) -> None:
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ConfigurationError(f"{context}: unknown parameter(s) {unknown}; allowed: {sorted(allowed)}")


def filter_from_mapping(mapping: Mapping[str, Any]) -> FilterSpec:
    """
    Build a filter spec from a config mapping.

    Args:
        mapping: {'type': <kind>, 'filter_type': <code or name>, <params>...}

    Returns:
        The validated spec

    Raises:
        ConfigurationError: Unknown kind, unknown keys or invalid values
    """
    if not isinstance(mapping, Mapping):
        raise ConfigurationError(f"Filter config must be a mapping, got {mapping!r}")
    data = dict(mapping)
    kinds = [data.pop(key) for key in KIND_KEYS if key in data]
    if len(kinds) != 1:
        raise ConfigurationError(f"Filter config needs exactly one 'type' entry, got {mapping!r}")
    spec_cls = FILTER_SPECS[FilterKind.parse(kinds[0])]

    spec_fields = {f.name for f in fields(spec_cls)}
    _check_keys(f"{spec_cls.kind.value} filter", data, spec_fields)
    for name, value in data.items():
        if isinstance(value, list):
            data[name] = tuple(value)
    return spec_cls(**data)


def filter_to_mapping(spec: FilterSpec) -> Dict[str, Any]:
    """Inverse of filter_from_mapping (filter_type written by name)."""
    result: Dict[str, Any] = {'type': spec.kind.value}
    for f in fields(spec):
        value = getattr(spec, f.name)
        if f.name == 'filter_type':
            value = value.name
        elif isinstance(value, tuple):
            value = list(value)
        result[f.name] = value
    return result


def pattern_from_config(value: Any) -> Optional[SqueezeParams]:
    """None/False -> no pattern, True -> defaults, mapping -> SqueezeParams(**mapping)."""
    if value is None or value is False:
        return None
    if value is True:
        return SqueezeParams()
    if isinstance(value, Mapping):
        _check_keys("pattern", value, {f.name for f in fields(SqueezeParams)})
        return SqueezeParams(**value)
    raise ConfigurationError(f"pattern must be a boolean or a mapping, got {value!r}")


@dataclass
class StrategyConfig:
    """
    Declarative strategy: direction, ordered entry filters, optional squeeze
    pattern and optional exit filters.

    Attributes:
        name: Strategy name (copied onto every Signal)
        direction: LONG or SHORT
        filters: Filter specs, all of which must pass
        pattern: Squeeze/breakout parameters, or None for no pattern confirmation
        description: Free text
        exit_filters: Filter specs that close a position when all of them pass
    """
    name: str
    direction: Union[Direction, str] = Direction.LONG
    filters: List[FilterSpec] = field(default_factory=list)
    pattern: Optional[SqueezeParams] = None
    description: str = ""
    exit_filters: List[FilterSpec] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError(f"Strategy name must be a non-empty string, got {self.name!r}")
        self.direction = Direction.parse(self.direction)
        if self.direction is Direction.NONE:
            raise ConfigurationError(f"Strategy {self.name!r} needs a long or short direction")
        for spec in list(self.filters) + list(self.exit_filters):
            if not isinstance(spec, FilterSpec):
                raise ConfigurationError(f"Strategy {self.name!r}: not a filter spec: {spec!r}")
        if self.pattern is not None and not isinstance(self.pattern, SqueezeParams):
            raise ConfigurationError(f"Strategy {self.name!r}: pattern must be SqueezeParams")
        if not self.filters and self.pattern is None:
            raise ConfigurationError(f"Strategy {self.name!r} has no filters and no pattern")

    def to_evaluator(self) -> StrategyEvaluator:
        return StrategyEvaluator(self.name, self.direction, self.filters, self.pattern, self.exit_filters)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'name': self.name,
            'description': self.description,
            'direction': self.direction.value,
            'filters': [filter_to_mapping(spec) for spec in self.filters],
        }
        if self.pattern is not None:
            result['pattern'] = {f.name: getattr(self.pattern, f.name) for f in fields(self.pattern)}
        if self.exit_filters:
            result['exit_filters'] = [filter_to_mapping(spec) for spec in self.exit_filters]
        return result


def _filters_from_list(section: str, raw_filters: Any) -> List[FilterSpec]:
    if not isinstance(raw_filters, list):
        raise ConfigurationError(f"{section} must be a list, got {raw_filters!r}")
    specs = []
    for position, raw in enumerate(raw_filters):
        try:
            specs.append(filter_from_mapping(raw))
        except ConfigurationError as e:
            raise ConfigurationError(f"{section}[{position}]: {e}") from e
    return specs


def strategy_config_from_dict(config_dict: Mapping[str, Any], default_name: Optional[str] = None) -> StrategyConfig:
    """
    Build a StrategyConfig from a nested mapping.

    Expected shape:
        name: squeeze_long
        direction: long
        filters:
          - {type: RSI, filter_type: OVERSOLD, period: 14}
        pattern: {narrowing_period: 5, squeeze_period: 5}
        exit_filters:
          - {type: BollingerBand, filter_type: ABOVE_MIDDLE}
    """
    if not isinstance(config_dict, Mapping):
        raise ConfigurationError(f"Strategy config must be a mapping, got {type(config_dict).__name__}")
    for key in sorted(set(config_dict) - set(STRATEGY_KEYS)):
        logger.warning(f"Ignoring unknown strategy config section {key!r}")

    name = config_dict.get('name', default_name)
    raw_filters = config_dict.get('filters') or []
    if not raw_filters:
        logger.warning(f"Strategy {name!r} has an empty filters section")

    filters = _filters_from_list('filters', raw_filters)
    exit_filters = _filters_from_list('exit_filters', config_dict.get('exit_filters') or [])

    return StrategyConfig(
        name=name,
        direction=config_dict.get('direction', Direction.LONG),
        filters=filters,
        pattern=pattern_from_config(config_dict.get('pattern')),
        description=config_dict.get('description') or "",
        exit_filters=exit_filters,
    )
