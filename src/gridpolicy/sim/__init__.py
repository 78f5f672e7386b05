"""Simulation module for the gridpolicy energy-policy game.

This module provides the turn-based simulation core: power plants, seasonal
demand, the shock engine, the policy resolver, the support tracker and the
turn orchestrator that sequences them, plus save/load of a running game.
"""

from .assets import AvailabilityChange, PowerPlant
from .demand import DemandCurve, DemandShift
from .engine import GameEngine, GameSnapshot, PlantStatus, TurnBalance, TurnResult
from .persistence import GameRecord, load_game, save_game
from .policy import Campaign, ContextView, EffectVector, PolicyResolver, ResolverState, build_plant
from .shocks import Shock, ShockEngine, ShockEngineState, ShockReport
from .support import SupportTracker

__all__ = [
    "AvailabilityChange",
    "PowerPlant",
    "DemandCurve",
    "DemandShift",
    "GameEngine",
    "GameSnapshot",
    "PlantStatus",
    "TurnBalance",
    "TurnResult",
    "GameRecord",
    "load_game",
    "save_game",
    "Campaign",
    "ContextView",
    "EffectVector",
    "PolicyResolver",
    "ResolverState",
    "build_plant",
    "Shock",
    "ShockEngine",
    "ShockEngineState",
    "ShockReport",
    "SupportTracker",
]
