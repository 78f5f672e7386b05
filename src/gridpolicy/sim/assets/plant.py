"""Power plant asset for the gridpolicy simulation core.

This module provides the generation asset model: a plant with a rated
capacity and one availability fraction per season. Availability changes made
by shocks and policies are explicit, audited state changes.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gridpolicy.utils.enums import PlantType, Season
from gridpolicy.utils.errors import InvalidArgumentError
from gridpolicy.utils.types import ALL_SEASONS, EnergyUnits, Fraction, TurnIndex, clamp_fraction, parse_season


class AvailabilityChange(BaseModel):
    """Audit record of a persistent availability change on one plant."""

    model_config = ConfigDict(frozen=True)

    turn: TurnIndex = Field(..., ge=0, description="Turn the change was applied")
    season: Season = Field(..., description="Season whose availability changed")
    delta: float = Field(..., description="Requested availability delta")
    source: str = Field(..., min_length=1, description="Shock template or policy id responsible")
    resulting_availability: Fraction = Field(..., ge=0.0, le=1.0, description="Availability after clamping")


class PowerPlant(BaseModel):
    """A single generation asset.

    Plants are created at game setup or by a build policy and are never
    removed from the roster. Reaching the end of the life span flips the
    ``active`` flag instead, which keeps plant identity stable for consumers
    that chart per-plant supply across turns.
    """

    model_config = ConfigDict(validate_assignment=True)

    plant_id: str = Field(..., min_length=1, description="Unique identifier for the plant")
    name: str = Field(..., min_length=1, description="Human-readable name of the plant")
    plant_type: PlantType = Field(..., description="Generation technology")
    capacity: EnergyUnits = Field(..., ge=0.0, description="Rated capacity in energy units")
    availability: dict[Season, Fraction] = Field(..., description="Seasonal availability factor")
    life_span: int | None = Field(default=None, ge=0, description="Turns in service before decommissioning")
    age: int = Field(default=0, ge=0, description="Turns spent in service")
    active: bool = Field(default=True, description="False once decommissioned")
    commissioned_turn: TurnIndex = Field(default=0, ge=0, description="Turn the plant entered service")
    changes: list[AvailabilityChange] = Field(default_factory=list, description="Availability audit trail")
    one_off_availability: dict[str, float] = Field(
        default_factory=dict, description="One-off availability deltas keyed by '<turn>:<season>'"
    )

    @field_validator("plant_id", "name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Validate identifiers are not blank."""
        if not v or not v.strip():
            raise ValueError("Plant identifiers cannot be empty")
        return v.strip()

    @field_validator("availability")
    @classmethod
    def validate_availability(cls, v: dict[Season, float]) -> dict[Season, float]:
        """Validate one fraction in [0, 1] is given for every season."""
        missing = [season.value for season in ALL_SEASONS if season not in v]
        if missing:
            raise ValueError(f"Availability missing for seasons: {', '.join(missing)}")
        for season, value in v.items():
            if value < 0.0 or value > 1.0:
                raise ValueError(f"Availability for {season.value} must be in [0, 1], got {value}")
        return v

    def capacity_value(self) -> EnergyUnits:
        """Return the rated capacity."""
        return self.capacity

    def availability_for(self, season: Season | str) -> Fraction:
        """Return the seasonal availability fraction.

        Raises:
            InvalidArgumentError: If the season tag is invalid
        """
        return self.availability[parse_season(season)]

    def realized_output(self, season: Season | str, turn: TurnIndex | None = None) -> EnergyUnits:
        """Return capacity times availability for a season.

        Args:
            season: Season to evaluate
            turn: When given, one-off availability deltas registered for this
                turn are included

        Returns:
            Realized output in energy units (0 when decommissioned)
        """
        season = parse_season(season)
        if not self.active:
            return 0.0

        availability = self.availability[season]
        if turn is not None:
            availability = clamp_fraction(availability + self.one_off_availability.get(_one_off_key(turn, season), 0.0))

        return self.capacity * availability

    def apply_availability_delta(
        self, season: Season | str | None, delta: float, turn: TurnIndex, source: str
    ) -> list[AvailabilityChange]:
        """Persistently shift availability and record the change.

        Args:
            season: Season to change, or None for every season
            delta: Availability delta (clamped result stays in [0, 1])
            turn: Turn the change takes effect
            source: Identifier of the shock or policy causing the change

        Returns:
            The audit records created
        """
        records = []
        availability = dict(self.availability)
        for target in _target_seasons(season):
            availability[target] = clamp_fraction(availability[target] + delta)
            records.append(
                AvailabilityChange(
                    turn=turn,
                    season=target,
                    delta=delta,
                    source=source,
                    resulting_availability=availability[target],
                )
            )
        self.availability = availability
        self.changes = [*self.changes, *records]
        return records

    def apply_one_off_availability(self, season: Season | str | None, delta: float, turn: TurnIndex) -> None:
        """Register an availability delta that only affects one turn's output."""
        if turn < 0:
            raise InvalidArgumentError(f"Turn must be non-negative, got {turn}")
        one_off = dict(self.one_off_availability)
        for target in _target_seasons(season):
            key = _one_off_key(turn, target)
            one_off[key] = one_off.get(key, 0.0) + delta
        self.one_off_availability = one_off

    def advance_age(self) -> bool:
        """Age the plant by one turn.

        Returns:
            True if the plant was decommissioned by this call
        """
        if not self.active:
            return False
        self.age += 1
        if self.life_span is not None and self.age >= self.life_span:
            self.decommission()
            return True
        return False

    def decommission(self) -> None:
        """Take the plant out of service without removing it."""
        self.active = False

    def get_state(self) -> dict[str, Any]:
        """Get a plain summary of the plant for reporting."""
        return {
            "plant_id": self.plant_id,
            "name": self.name,
            "plant_type": self.plant_type.value,
            "capacity": self.capacity,
            "availability": {season.value: value for season, value in self.availability.items()},
            "active": self.active,
            "age": self.age,
            "life_span": self.life_span,
        }

    def __str__(self) -> str:
        """String representation of the plant."""
        return f"{self.name} ({self.plant_type.value}, {self.capacity:.1f} units)"


def _one_off_key(turn: TurnIndex, season: Season) -> str:
    return f"{turn}:{season.value}"


def _target_seasons(season: Season | str | None) -> tuple[Season, ...]:
    if season is None:
        return ALL_SEASONS
    return (parse_season(season),)


__all__ = ["AvailabilityChange", "PowerPlant"]
