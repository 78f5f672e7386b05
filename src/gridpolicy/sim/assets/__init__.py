"""Asset module for the gridpolicy simulation core.

This module provides the generation asset model shared by the shock engine,
the policy resolver and the turn orchestrator.
"""

from .plant import AvailabilityChange, PowerPlant

__all__ = [
    "AvailabilityChange",
    "PowerPlant",
]
