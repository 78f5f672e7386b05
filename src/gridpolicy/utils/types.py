"""Type definitions and constants for the gridpolicy simulation core.

This module provides type aliases and domain constants shared by the
simulation components and the configuration schema.
"""

from typing import TypeAlias

from gridpolicy.utils.enums import Season
from gridpolicy.utils.errors import InvalidArgumentError

# =============================================================================
# Energy Type Definitions and Aliases
# =============================================================================

EnergyUnits: TypeAlias = float  # Abstract energy units used by the game
Fraction: TypeAlias = float  # Value in [0, 1]
TurnIndex: TypeAlias = int  # 0-based turn counter

# =============================================================================
# Game Constants
# =============================================================================

DEFAULT_HORIZON_TURNS: int = 10  # One turn per in-game year
MAX_HORIZON_TURNS: int = 200
DEFAULT_STARTING_SUPPORT: float = 0.6
MIN_SUPPORT: float = 0.0
MAX_SUPPORT: float = 1.0
MIN_AVAILABILITY: float = 0.0
MAX_AVAILABILITY: float = 1.0
DEFAULT_SHOCK_PROBABILITY: float = 0.8
DEFAULT_LIFE_SPAN_TURNS: int = 10
NUCLEAR_LIFE_SPAN_TURNS: int = 5

ALL_SEASONS: tuple[Season, ...] = tuple(Season)

# =============================================================================
# Helper Functions
# =============================================================================


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a value to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))


def clamp_fraction(value: float) -> Fraction:
    """Clamp a value to [0, 1]."""
    return clamp(value, MIN_AVAILABILITY, MAX_AVAILABILITY)


def parse_season(value: Season | str) -> Season:
    """Convert a season tag into a ``Season``.

    Accepts enum members, their values ("winter") or their names ("WINTER").

    Raises:
        InvalidArgumentError: If the tag does not name a season
    """
    if isinstance(value, Season):
        return value
    if isinstance(value, str):
        tag = value.strip()
        for season in Season:
            if tag.lower() == season.value or tag.upper() == season.name:
                return season
    raise InvalidArgumentError(f"Unknown season: {value!r}")
