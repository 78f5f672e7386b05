"""Configuration module for the gridpolicy simulation core.

This module provides configuration loading capabilities using Pydantic models
to read YAML game setup files, plus the built-in game catalog.
"""

from .defaults import default_game_config, default_plants, default_policies, default_shock_templates
from .loaders import ConfigLoader, YamlConfigLoader, load_config_from_dict, load_config_from_yaml
from .schema import (
    DemandConfig,
    GameConfig,
    LoggingConfig,
    PlantSpec,
    Policy,
    ShockRequirement,
    ShockReward,
    ShockSettings,
    ShockTemplate,
)

__all__ = [
    # Configuration schema models
    "GameConfig",
    "DemandConfig",
    "PlantSpec",
    "Policy",
    "ShockSettings",
    "ShockTemplate",
    "ShockRequirement",
    "ShockReward",
    "LoggingConfig",
    # Configuration loaders
    "ConfigLoader",
    "YamlConfigLoader",
    # Convenience functions
    "load_config_from_yaml",
    "load_config_from_dict",
    # Built-in catalog
    "default_game_config",
    "default_plants",
    "default_policies",
    "default_shock_templates",
]
