"""Configuration schema models for the gridpolicy simulation core.

This module defines Pydantic models for validating game setup: the initial
plant roster, seasonal demand, the shock catalog and random-draw settings,
the policy catalog, and logging.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gridpolicy.utils.enums import DurationClass, PlantType, PolicyTag, RequirementKind, Season, ShockTarget
from gridpolicy.utils.types import (
    ALL_SEASONS,
    DEFAULT_HORIZON_TURNS,
    DEFAULT_SHOCK_PROBABILITY,
    DEFAULT_STARTING_SUPPORT,
    MAX_HORIZON_TURNS,
)


class LogLevel(str, Enum):
    """Valid logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PlantSpec(BaseModel):
    """Specification of a power plant to commission."""

    model_config = ConfigDict(extra="forbid")

    plant_id: str = Field(..., min_length=1, description="Unique identifier for the plant")
    name: str | None = Field(default=None, description="Display name (defaults to the id)")
    plant_type: PlantType = Field(..., description="Generation technology")
    capacity: float = Field(..., ge=0.0, description="Rated capacity in energy units")
    availability: dict[Season, float] = Field(..., description="Seasonal availability factor in [0, 1]")
    life_span: int | None = Field(default=None, ge=1, description="Turns in service before decommissioning")

    @field_validator("availability")
    @classmethod
    def validate_availability(cls, v: dict[Season, float]) -> dict[Season, float]:
        """Validate every season has a fraction in [0, 1]."""
        for season in ALL_SEASONS:
            if season not in v:
                raise ValueError(f"Availability missing for {season.value}")
            if not 0.0 <= v[season] <= 1.0:
                raise ValueError(f"Availability for {season.value} must be in [0, 1]")
        return v


class DemandConfig(BaseModel):
    """Seasonal demand baselines and yearly increments."""

    model_config = ConfigDict(extra="forbid")

    baseline: dict[Season, float] = Field(
        default_factory=lambda: {Season.WINTER: 90.0, Season.SUMMER: 70.0},
        description="Demand at turn 0 per season",
    )
    increment: dict[Season, float] = Field(
        default_factory=lambda: {Season.WINTER: 4.0, Season.SUMMER: 3.0},
        description="Demand growth per turn per season",
    )

    @model_validator(mode="after")
    def validate_seasons(self) -> "DemandConfig":
        """Validate both mappings cover every season and baselines are non-negative."""
        for season in ALL_SEASONS:
            if season not in self.baseline or season not in self.increment:
                raise ValueError(f"Demand configuration missing season {season.value}")
            if self.baseline[season] < 0:
                raise ValueError(f"Baseline demand for {season.value} must be non-negative")
        return self


class ShockRequirement(BaseModel):
    """Threshold the grid must meet for the player to weather a shock."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: RequirementKind = Field(..., description="Support or a seasonal supply margin")
    value: float = Field(..., description="Minimum support, or minimum supply minus demand in energy units")


class ShockReward(BaseModel):
    """Effects granted when every requirement of a shock is met."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str = Field(default="", description="Player-facing description")
    support_delta: float = Field(default=0.0, ge=-1.0, le=1.0, description="Change to political support")
    demand_deltas: dict[Season, float] = Field(
        default_factory=dict, description="One-off demand delta per season on the firing turn"
    )


class ShockTemplate(BaseModel):
    """A shock the engine can fire, either on a schedule or by random draw."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    template_id: str = Field(..., min_length=1, description="Unique identifier for the template")
    name: str = Field(default="", description="Display name")
    target: ShockTarget = Field(..., description="Component the shock is routed to")
    magnitude: float = Field(..., description="Signed effect size (energy units, fraction or support)")
    duration: DurationClass = Field(default=DurationClass.ONE_OFF, description="One-off or persistent")
    weight: float = Field(default=1.0, ge=0.0, description="Relative weight in random draws")
    min_turn: int = Field(default=0, ge=0, description="Earliest turn the shock may be drawn")
    trigger_turn: int | None = Field(default=None, ge=0, description="Fixed turn for scheduled shocks")
    max_occurrences: int = Field(default=1, ge=1, description="How many times the shock may fire")
    season: Season | None = Field(default=None, description="Affected season (None for all)")
    plant_type: PlantType | None = Field(default=None, description="Plant type targeted by plant shocks")
    plant_id: str | None = Field(default=None, description="Specific plant targeted by plant shocks")
    requirements: list[ShockRequirement] = Field(
        default_factory=list, description="Thresholds checked once the shock has fired"
    )
    reward: ShockReward | None = Field(default=None, description="Granted when every requirement is met")

    @model_validator(mode="after")
    def validate_target_selectors(self) -> "ShockTemplate":
        """Validate plant selectors are only used (and required) by plant shocks."""
        if self.target == ShockTarget.PLANT:
            if self.plant_type is None and self.plant_id is None:
                raise ValueError(f"Plant shock '{self.template_id}' needs a plant_type or plant_id")
        elif self.plant_type is not None or self.plant_id is not None:
            raise ValueError(f"Only plant shocks may select plants ('{self.template_id}')")
        return self

    @property
    def is_scheduled(self) -> bool:
        """Whether the shock fires at a fixed turn instead of by random draw."""
        return self.trigger_turn is not None


class Policy(BaseModel):
    """A player-selectable action with a fixed effect vector."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    policy_id: str = Field(..., min_length=1, description="Unique identifier for the policy")
    name: str = Field(default="", description="Display name")
    description: str = Field(default="", description="Player-facing description")
    support_delta: float = Field(default=0.0, ge=-1.0, le=1.0, description="Change to political support")
    availability_deltas: dict[PlantType, float] = Field(
        default_factory=dict, description="Persistent availability delta per plant type"
    )
    demand_deltas: dict[Season, float] = Field(default_factory=dict, description="Demand delta per season")
    demand_duration: DurationClass = Field(
        default=DurationClass.PERSISTENT, description="Whether demand deltas shift the increment or one turn"
    )
    builds: list[PlantSpec] = Field(default_factory=list, description="Plants commissioned by the policy")
    min_support: float = Field(default=0.0, ge=0.0, le=1.0, description="Minimum support to enact")
    max_support: float = Field(default=1.0, ge=0.0, le=1.0, description="Maximum support to enact")
    repeatable: bool = Field(default=True, description="False if the policy can only be enacted once")
    tag: PolicyTag | None = Field(default=None, description="Bonus pool the policy draws on or a campaign feeds")
    vote_probability: float | None = Field(
        default=None, ge=0.0, le=1.0, description="Base chance the policy passes its vote (None: no vote)"
    )
    campaign_turns: int | None = Field(
        default=None, ge=1, description="Turns until a campaign's bonus lands (None: not a campaign)"
    )
    campaign_bonus: float = Field(default=0.0, ge=-1.0, le=1.0, description="Vote bonus added to the tag pool")

    @model_validator(mode="after")
    def validate_support_window(self) -> "Policy":
        """Validate the support window, one-shot builds and campaign settings."""
        if self.min_support > self.max_support:
            raise ValueError(f"Policy '{self.policy_id}' has min_support above max_support")
        if self.builds and self.repeatable:
            raise ValueError(f"Policy '{self.policy_id}' builds plants and must not be repeatable")
        if self.campaign_turns is not None and self.tag is None:
            raise ValueError(f"Campaign '{self.policy_id}' needs a tag")
        if self.campaign_turns is not None and self.vote_probability is not None:
            raise ValueError(f"Campaign '{self.policy_id}' cannot be put to a vote")
        return self

    @property
    def is_campaign(self) -> bool:
        """Whether enacting the policy schedules a campaign."""
        return self.campaign_turns is not None


class ShockSettings(BaseModel):
    """Random-draw settings and catalog for the shock engine."""

    model_config = ConfigDict(extra="forbid")

    seed: int | None = Field(default=None, ge=0, description="Seed for the shock engine's random source")
    probability: float = Field(
        default=DEFAULT_SHOCK_PROBABILITY, ge=0.0, le=1.0, description="Chance of a random shock each turn"
    )
    max_random_per_turn: int = Field(default=1, ge=0, le=10, description="Random shocks drawn per turn")
    templates: list[ShockTemplate] = Field(default_factory=list, description="Shock catalog")

    @field_validator("templates")
    @classmethod
    def validate_unique_ids(cls, v: list[ShockTemplate]) -> list[ShockTemplate]:
        """Validate template identifiers are unique."""
        ids = [template.template_id for template in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Shock template ids must be unique")
        return v


class LoggingConfig(BaseModel):
    """Configuration for logging parameters."""

    model_config = ConfigDict(use_enum_values=True, extra="forbid")

    level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    file_path: str | None = Field(default=None, description="Optional log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=1000, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, ge=0, le=100, description="Number of backup log files to keep")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format"
    )
    enable_console: bool = Field(default=True, description="Enable console output")


class GameConfig(BaseModel):
    """Main configuration model for a game."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    version: str = Field(default="0.1.0", description="Configuration format version")
    horizon: int = Field(
        default=DEFAULT_HORIZON_TURNS, ge=1, le=MAX_HORIZON_TURNS, description="Number of turns in a game"
    )
    starting_support: float = Field(
        default=DEFAULT_STARTING_SUPPORT, ge=0.0, le=1.0, description="Political support at game start"
    )
    plants: list[PlantSpec] = Field(default_factory=list, description="Initial plant roster")
    demand: DemandConfig = Field(default_factory=DemandConfig, description="Seasonal demand")
    shocks: ShockSettings = Field(default_factory=ShockSettings, description="Shock engine settings")
    policies: list[Policy] = Field(default_factory=list, description="Policy catalog in menu order")
    vote_seed: int | None = Field(
        default=None, ge=0, description="Seed for policy votes (None: reuse the shock engine seed)"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version format."""
        parts = v.split(".")
        if len(parts) != 3:
            raise ValueError("Version must be in format X.Y.Z")
        try:
            for part in parts:
                int(part)
        except ValueError:
            raise ValueError("Version parts must be integers") from None
        return v

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "GameConfig":
        """Validate plant and policy identifiers are unique, including planned builds."""
        plant_ids = [plant.plant_id for plant in self.plants]
        plant_ids.extend(spec.plant_id for policy in self.policies for spec in policy.builds)
        if len(plant_ids) != len(set(plant_ids)):
            raise ValueError("Plant ids must be unique across the roster and policy builds")

        policy_ids = [policy.policy_id for policy in self.policies]
        if len(policy_ids) != len(set(policy_ids)):
            raise ValueError("Policy ids must be unique")
        return self


__all__ = [
    "DemandConfig",
    "GameConfig",
    "LogLevel",
    "LoggingConfig",
    "PlantSpec",
    "Policy",
    "ShockRequirement",
    "ShockReward",
    "ShockSettings",
    "ShockTemplate",
]
