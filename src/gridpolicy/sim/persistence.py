"""Save and load support for the gridpolicy simulation core.

A saved game is the JSON form of a ``GameRecord``: the configuration the
game was started with plus every piece of mutable engine state, including
the random sources of the shock engine and the policy votes, so a loaded game
continues exactly as the saved one would have.
"""

from pathlib import Path

from pydantic import BaseModel, Field

from gridpolicy.config.schema import GameConfig
from gridpolicy.sim.assets.plant import PowerPlant
from gridpolicy.sim.demand import DemandCurve
from gridpolicy.sim.engine import GameEngine, TurnResult
from gridpolicy.sim.policy import ResolverState
from gridpolicy.sim.shocks import ShockEngineState
from gridpolicy.sim.support import SupportTracker
from gridpolicy.utils.enums import EndReason, GameState
from gridpolicy.utils.errors import InvalidArgumentError
from gridpolicy.utils.logger import logger
from gridpolicy.utils.types import TurnIndex

RECORD_FORMAT_VERSION = 2


class GameRecord(BaseModel):
    """Serializable state of a game."""

    format_version: int = Field(default=RECORD_FORMAT_VERSION, description="Save format version")
    config: GameConfig
    state: GameState
    turn: TurnIndex = Field(..., ge=0)
    end_reason: EndReason | None = None
    plants: list[PowerPlant]
    demand: DemandCurve
    support: SupportTracker
    shocks: ShockEngineState
    policies: ResolverState
    enacted_policies: list[str] = Field(default_factory=list)
    history: list[TurnResult] = Field(default_factory=list)


def to_record(engine: GameEngine) -> GameRecord:
    """Capture an engine's state as a record."""
    return GameRecord(
        config=engine.config,
        state=engine.state,
        turn=engine.turn,
        end_reason=engine.end_reason,
        plants=[plant.model_copy(deep=True) for plant in engine.plants.values()],
        demand=engine.demand.model_copy(deep=True),
        support=engine.support.model_copy(deep=True),
        shocks=engine.shock_engine.state_dict(),
        policies=engine.resolver.state_dict(),
        enacted_policies=list(engine.enacted_policies),
        history=[result.model_copy(deep=True) for result in engine.history],
    )


def from_record(record: GameRecord) -> GameEngine:
    """Rebuild an engine from a record.

    Raises:
        InvalidArgumentError: If the record uses an unsupported format version
    """
    if record.format_version != RECORD_FORMAT_VERSION:
        raise InvalidArgumentError(f"Unsupported save format version {record.format_version}")

    engine = GameEngine(record.config)
    engine.state = record.state
    engine.turn = record.turn
    engine.end_reason = record.end_reason
    engine.plants = {plant.plant_id: plant.model_copy(deep=True) for plant in record.plants}
    engine.demand = record.demand.model_copy(deep=True)
    engine.support = record.support.model_copy(deep=True)
    engine.shock_engine.load_state(record.shocks)
    engine.resolver.load_state(record.policies)
    engine.enacted_policies = list(record.enacted_policies)
    engine.history = [result.model_copy(deep=True) for result in record.history]
    return engine


def save_game(engine: GameEngine, path: str | Path) -> Path:
    """Write a game to a JSON file.

    Args:
        engine: Game to save
        path: Destination file

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_record(engine).model_dump_json(indent=2), encoding="utf-8")
    logger.info(f"Game saved to {path} at turn {engine.turn}")
    return path


def load_game(path: str | Path) -> GameEngine:
    """Load a game saved by ``save_game``.

    Raises:
        FileNotFoundError: If the save file doesn't exist
        ValidationError: If the file is not a valid game record
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Save file not found: {path}")

    record = GameRecord.model_validate_json(path.read_text(encoding="utf-8"))
    engine = from_record(record)
    logger.info(f"Game loaded from {path} at turn {engine.turn}")
    return engine


__all__ = ["GameRecord", "from_record", "load_game", "save_game", "to_record"]
