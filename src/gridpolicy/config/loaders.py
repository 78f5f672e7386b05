"""YAML loading and saving of game configurations.

A game file only has to list what differs from the built-in game when it is
loaded with ``merge_defaults``; everything else comes from
``default_game_config``.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import yaml

from .defaults import default_game_config
from .schema import GameConfig


class ConfigLoader(ABC):
    """Interface for turning a file or a mapping into a ``GameConfig``."""

    @abstractmethod
    def load_config(self, config_path: str | Path) -> GameConfig:
        """Read and validate a game file.

        Raises:
            FileNotFoundError: If there is no file at ``config_path``
            ValidationError: If the content is not a valid game
        """

    @abstractmethod
    def load_config_from_dict(self, config_dict: dict[str, Any]) -> GameConfig:
        """Validate an in-memory game description.

        Raises:
            ValidationError: If the content is not a valid game
        """


class YamlConfigLoader(ConfigLoader):
    """Loads game files written in YAML."""

    def __init__(self, safe_load: bool = True):
        """Create a loader.

        Args:
            safe_load: Parse with ``yaml.safe_load`` (default) instead of the full loader
        """
        self.safe_load = safe_load

    def read_mapping(self, config_path: str | Path) -> dict[str, Any]:
        """Parse a YAML file that must hold a top-level mapping.

        Raises:
            FileNotFoundError: If there is no file at ``config_path``
            ValueError: If the path is a directory, the file is empty, or the
                top level is not a mapping
            yaml.YAMLError: If the file is not valid YAML
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Game file not found: {config_path}")
        if not config_path.is_file():
            raise ValueError(f"Game file path is not a file: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) if self.safe_load else yaml.load(f, Loader=yaml.FullLoader)
            except yaml.YAMLError as e:
                raise yaml.YAMLError(f"Could not parse {config_path}: {e}") from e

        if data is None:
            raise ValueError(f"Game file {config_path} is empty")
        if not isinstance(data, dict):
            raise ValueError(f"Game file {config_path} must contain a YAML mapping, got {type(data).__name__}")
        return data

    def load_config(self, config_path: str | Path) -> GameConfig:
        """Read and validate a game file as written."""
        return self.load_config_from_dict(self.read_mapping(config_path))

    def load_config_from_dict(self, config_dict: dict[str, Any]) -> GameConfig:
        """Validate an in-memory game description."""
        if not isinstance(config_dict, dict):
            raise ValueError(f"Game description must be a mapping, got {type(config_dict).__name__}")
        return GameConfig.model_validate(config_dict)

    def merge_with_defaults(self, config_dict: dict[str, Any]) -> dict[str, Any]:
        """Overlay a partial game description on the built-in game.

        Nested sections such as ``shocks`` or ``demand`` are merged key by
        key; lists (plants, templates, policies) replace the built-in list.
        """
        return _overlay(default_game_config().model_dump(mode="json"), config_dict)

    def save_config(self, config: GameConfig, config_path: str | Path) -> None:
        """Write a configuration as YAML, creating parent directories."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False, indent=2)

    def generate_example_config(self, config_path: str | Path) -> None:
        """Write the built-in game to ``config_path`` as a starting point."""
        self.save_config(default_game_config(), config_path)


def _overlay(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _overlay(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_from_yaml(config_path: str | Path, merge_defaults: bool = False) -> GameConfig:
    """Load a game file.

    Args:
        config_path: YAML file to read
        merge_defaults: Fill sections missing from the file from the built-in game

    Raises:
        FileNotFoundError: If there is no file at ``config_path``
        yaml.YAMLError: If the file is not valid YAML
        ValidationError: If the result is not a valid game
    """
    loader = YamlConfigLoader()
    if not merge_defaults:
        return loader.load_config(config_path)

    data = loader.read_mapping(config_path)
    return loader.load_config_from_dict(loader.merge_with_defaults(data))


def load_config_from_dict(config_dict: dict[str, Any]) -> GameConfig:
    """Validate an in-memory game description with the YAML loader's rules."""
    return YamlConfigLoader().load_config_from_dict(config_dict)


__all__ = [
    "ConfigLoader",
    "YamlConfigLoader",
    "load_config_from_dict",
    "load_config_from_yaml",
]
