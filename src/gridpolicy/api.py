"""External interface of the gridpolicy simulation core.

Renderers and other front ends drive a game exclusively through these
functions. The ``GameEngine`` returned by ``start_game`` is the handle passed
to every other call; there is no global game registry.
"""

from typing import Any

from gridpolicy.config import GameConfig, default_game_config, load_config_from_dict
from gridpolicy.config.schema import Policy
from gridpolicy.sim.engine import GameEngine, GameSnapshot, TurnResult
from gridpolicy.sim.persistence import load_game, save_game


def start_game(config: GameConfig | dict[str, Any] | None = None) -> GameEngine:
    """Create a game and move it to the in-progress state.

    Args:
        config: Game configuration, a mapping to validate into one, or None
            for the built-in game

    Returns:
        Handle to the running game

    Raises:
        ValidationError: If a mapping does not describe a valid configuration
    """
    if config is None:
        config = default_game_config()
    elif isinstance(config, dict):
        config = load_config_from_dict(config)

    engine = GameEngine(config)
    engine.start()
    return engine


def get_snapshot(engine: GameEngine) -> GameSnapshot:
    """Return a read-only snapshot of the game."""
    return engine.get_snapshot()


def advance_turn(engine: GameEngine, policy_id: str | None = None) -> TurnResult:
    """Play one turn with the given policy (None to pass).

    Raises:
        InvalidStateError: If the game is not in progress
        InvalidArgumentError: If the policy id is unknown
    """
    return engine.advance_turn(policy_id)


def list_available_policies(engine: GameEngine) -> list[Policy]:
    """Return the policies that can be enacted this turn, in menu order."""
    return engine.list_available_policies()


__all__ = [
    "advance_turn",
    "get_snapshot",
    "list_available_policies",
    "load_game",
    "save_game",
    "start_game",
]
