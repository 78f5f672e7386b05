"""Domain enumerations for the gridpolicy simulation core.

This module defines enumerations for the seasons, plant types, shock
classifications and game states used throughout the simulation.
"""

from enum import Enum


class Season(Enum):
    """Demand and availability partitions of a simulated year."""

    WINTER = "winter"
    SUMMER = "summer"


class PlantType(Enum):
    """Types of generation assets a player can operate."""

    NUCLEAR = "nuclear"
    COAL = "coal"
    GAS = "gas"
    HYDRO = "hydro"
    SOLAR = "solar"
    WIND = "wind"
    BIOMASS = "biomass"
    WASTE = "waste"


class ShockTarget(Enum):
    """Component a shock is routed to."""

    PLANT = "plant"
    DEMAND = "demand"
    SUPPORT = "support"


class DurationClass(Enum):
    """How long an effect lasts."""

    ONE_OFF = "one_off"
    PERSISTENT = "persistent"


class ShockOutcome(Enum):
    """What happened to a shock once it was drawn."""

    APPLIED = "applied"
    DROPPED = "dropped"


class PolicyOutcome(Enum):
    """Result of submitting a policy for a turn."""

    APPLIED = "applied"
    REJECTED = "rejected"
    VOTE_FAILED = "vote_failed"
    NONE = "none"


class PolicyTag(Enum):
    """Bonus pools that campaigns feed and voted policies draw on."""

    ENVIRONMENT = "env"
    DEMAND = "demand"


class RequirementKind(Enum):
    """Quantity a shock requirement is checked against."""

    SUPPORT = "support"
    WINTER_MARGIN = "winter_margin"
    SUMMER_MARGIN = "summer_margin"


class GameState(Enum):
    """Lifecycle states of a game context."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"


class EndReason(Enum):
    """Why a game reached the ended state."""

    HORIZON_REACHED = "horizon_reached"
    SUPPORT_DEPLETED = "support_depleted"
