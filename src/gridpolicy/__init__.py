"""gridpolicy - turn-based energy-policy grid simulation core."""

from .api import advance_turn, get_snapshot, list_available_policies, load_game, save_game, start_game
from .sim import GameEngine, GameSnapshot, TurnResult

__version__ = "0.1.0"
__description__ = "Turn-based energy-policy grid simulation core"

__all__ = [
    "GameEngine",
    "GameSnapshot",
    "TurnResult",
    "advance_turn",
    "get_snapshot",
    "list_available_policies",
    "load_game",
    "save_game",
    "start_game",
]
