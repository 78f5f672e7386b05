"""Seasonal demand model for the gridpolicy simulation core.

Demand for each season grows linearly with the turn counter:
``projected(season, t) = baseline(season) + increment(season) * t``.
Persistent shifts change the increment from a given turn onward while
one-off deltas only change the realized value of a single turn.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gridpolicy.utils.enums import Season
from gridpolicy.utils.errors import InvalidArgumentError
from gridpolicy.utils.types import ALL_SEASONS, EnergyUnits, TurnIndex, parse_season


class DemandShift(BaseModel):
    """Record of a persistent change to a season's yearly increment."""

    model_config = ConfigDict(frozen=True)

    turn: TurnIndex = Field(..., ge=0, description="First turn affected by the shift")
    season: Season = Field(..., description="Season whose increment changed")
    delta: float = Field(..., description="Change applied to the increment")


class DemandCurve(BaseModel):
    """Per-season baseline demand and yearly increment."""

    model_config = ConfigDict(validate_assignment=True)

    baseline: dict[Season, EnergyUnits] = Field(..., description="Demand at turn 0 per season")
    increment: dict[Season, EnergyUnits] = Field(..., description="Demand growth per turn per season")
    one_off: dict[str, float] = Field(default_factory=dict, description="One-off deltas keyed by '<turn>:<season>'")
    shifts: list[DemandShift] = Field(default_factory=list, description="Persistent shift history")

    @field_validator("baseline")
    @classmethod
    def validate_baseline(cls, v: dict[Season, float]) -> dict[Season, float]:
        """Validate a non-negative baseline exists for every season."""
        for season in ALL_SEASONS:
            if season not in v:
                raise ValueError(f"Baseline demand missing for {season.value}")
            if v[season] < 0:
                raise ValueError(f"Baseline demand for {season.value} must be non-negative")
        return v

    @field_validator("increment")
    @classmethod
    def validate_increment(cls, v: dict[Season, float]) -> dict[Season, float]:
        """Validate an increment exists for every season."""
        for season in ALL_SEASONS:
            if season not in v:
                raise ValueError(f"Demand increment missing for {season.value}")
        return v

    def baseline_for(self, season: Season | str) -> EnergyUnits:
        """Return the stored baseline for a season."""
        return self.baseline[parse_season(season)]

    def increment_for(self, season: Season | str) -> EnergyUnits:
        """Return the stored yearly increment for a season."""
        return self.increment[parse_season(season)]

    def projected_demand(self, season: Season | str, turn: TurnIndex) -> EnergyUnits:
        """Return realized demand for a season at a turn.

        Includes one-off deltas registered for that turn. The result is
        floored at zero.

        Raises:
            InvalidArgumentError: If the season is invalid or turn is negative
        """
        season = parse_season(season)
        _check_turn(turn)
        value = self.baseline[season] + self.increment[season] * turn
        # shifts only apply to the turns after they were made
        value -= sum(shift.delta * min(turn, shift.turn) for shift in self.shifts if shift.season == season)
        value += self.one_off.get(_key(turn, season), 0.0)
        return max(0.0, value)

    def curve(self, season: Season | str, turns: int) -> list[EnergyUnits]:
        """Return projected demand for turns ``0..turns-1``."""
        if turns < 0:
            raise InvalidArgumentError(f"Number of turns must be non-negative, got {turns}")
        return [self.projected_demand(season, turn) for turn in range(turns)]

    def apply_persistent_shift(self, season: Season | str, delta: float, turn: TurnIndex = 0) -> None:
        """Change a season's increment from ``turn`` onward.

        Projections for turns up to and including ``turn`` keep their
        previous values.
        """
        season = parse_season(season)
        _check_turn(turn)

        increment = dict(self.increment)
        increment[season] += delta
        self.increment = increment
        self.shifts = [*self.shifts, DemandShift(turn=turn, season=season, delta=delta)]

    def apply_one_off_delta(self, season: Season | str, turn: TurnIndex, delta: float) -> None:
        """Adjust the realized demand of one turn only."""
        season = parse_season(season)
        _check_turn(turn)
        one_off = dict(self.one_off)
        key = _key(turn, season)
        one_off[key] = one_off.get(key, 0.0) + delta
        self.one_off = one_off

    def one_off_delta(self, season: Season | str, turn: TurnIndex) -> float:
        """Return the total one-off delta registered for a season and turn."""
        return self.one_off.get(_key(turn, parse_season(season)), 0.0)


def _key(turn: TurnIndex, season: Season) -> str:
    return f"{turn}:{season.value}"


def _check_turn(turn: TurnIndex) -> None:
    if turn < 0:
        raise InvalidArgumentError(f"Turn must be non-negative, got {turn}")


__all__ = ["DemandCurve", "DemandShift"]
