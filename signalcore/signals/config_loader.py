"""
YAML loader for strategy configurations.

Strategies can be shared and changed without code changes; the YAML layout
is the mapping accepted by strategy_config_from_dict.
"""
import logging
from pathlib import Path
from typing import Union

import yaml

from .config import StrategyConfig, strategy_config_from_dict
from ..shared.errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_strategy_from_yaml(yaml_path: Union[str, Path]) -> StrategyConfig:
    """
    Load a strategy configuration from a YAML file.

    Args:
        yaml_path: Path to the YAML file (the file stem is the default name)

    Returns:
        Validated StrategyConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the YAML is empty, malformed or invalid
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, 'r') as f:
        try:
            config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {yaml_path}: {e}") from e

    if not config_dict:
        raise ConfigurationError(f"Empty config file: {yaml_path}")

    config = strategy_config_from_dict(config_dict, default_name=yaml_path.stem)
    logger.info(
        f"Loaded strategy '{config.name}' with {len(config.filters)} filter(s) and "
        f"{len(config.exit_filters)} exit filter(s) from {yaml_path}"
    )
    return config


def save_strategy_to_yaml(config: StrategyConfig, yaml_path: Union[str, Path]) -> None:
    """Write a strategy configuration so that load_strategy_from_yaml reads it back."""
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)
    with open(yaml_path, 'w') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
