"""Shock and event engine for the gridpolicy simulation core.

At the start of every turn the engine fires the shocks scheduled for that
turn, then draws random shocks from the eligible part of the catalog with a
seeded ``numpy`` generator. Each fired shock is routed to its target
(plant availability, demand, or support) and kept as an immutable record.

A shock may carry requirements on support and the seasonal supply margins.
They are checked right after the shock lands; when all are met the shock
counts as survived and its reward is granted.
"""

import json
from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from gridpolicy.config.schema import ShockTemplate
from gridpolicy.sim.assets.plant import PowerPlant
from gridpolicy.sim.demand import DemandCurve
from gridpolicy.utils.enums import DurationClass, RequirementKind, Season, ShockOutcome, ShockTarget
from gridpolicy.utils.errors import InvalidArgumentError, ShockTargetMissingError
from gridpolicy.utils.logger import logger
from gridpolicy.utils.types import ALL_SEASONS, DEFAULT_SHOCK_PROBABILITY, Fraction, TurnIndex


class Shock(BaseModel):
    """Immutable record of a shock that fired (or was dropped) on a turn."""

    model_config = ConfigDict(frozen=True)

    turn: TurnIndex = Field(..., ge=0, description="Turn the shock fired")
    template_id: str = Field(..., min_length=1, description="Template the shock was created from")
    name: str = Field(default="", description="Display name")
    target: ShockTarget = Field(..., description="Component the shock was routed to")
    magnitude: float = Field(..., description="Signed effect size")
    duration: DurationClass = Field(..., description="One-off or persistent")
    season: Season | None = Field(default=None, description="Affected season (None for all)")
    plant_ids: tuple[str, ...] = Field(default=(), description="Plants affected by a plant shock")
    scheduled: bool = Field(default=False, description="Fired by schedule rather than random draw")
    outcome: ShockOutcome = Field(default=ShockOutcome.APPLIED, description="Applied or dropped")
    reason: str | None = Field(default=None, description="Why the shock was dropped")
    survived: bool | None = Field(
        default=None, description="Whether every requirement was met (None when the shock has none)"
    )
    reward_applied: bool = Field(default=False, description="Whether the shock's reward was granted")


class ShockReport(BaseModel):
    """Everything the shock engine did during one turn."""

    model_config = ConfigDict(frozen=True)

    fired: tuple[Shock, ...] = Field(default=(), description="Shocks applied this turn")
    dropped: tuple[Shock, ...] = Field(default=(), description="Shocks dropped for a missing target")
    support_delta: float = Field(default=0.0, description="Support change from shocks and active drifts")


class ShockEngineState(BaseModel):
    """Serializable state of a shock engine."""

    seed: int | None = None
    occurrences: dict[str, int] = Field(default_factory=dict)
    active_persistent: list[str] = Field(default_factory=list)
    support_drift: dict[str, float] = Field(default_factory=dict)
    history: list[Shock] = Field(default_factory=list)
    rng_state: str = Field(..., description="JSON-encoded numpy bit generator state")


class ShockEngine:
    """Selects and applies shocks.

    The random source is owned by the instance: two engines built with the
    same seed and driven through the same turns produce identical histories.
    """

    def __init__(
        self,
        templates: list[ShockTemplate],
        seed: int | None = None,
        probability: float = DEFAULT_SHOCK_PROBABILITY,
        max_random_per_turn: int = 1,
    ):
        """Initialize the shock engine.

        Args:
            templates: Shock catalog, in draw order
            seed: Seed for the random source (None for OS entropy)
            probability: Chance that random shocks are drawn on a turn
            max_random_per_turn: Upper bound on random shocks per turn
        """
        if not 0.0 <= probability <= 1.0:
            raise InvalidArgumentError(f"Shock probability must be in [0, 1], got {probability}")
        if max_random_per_turn < 0:
            raise InvalidArgumentError("max_random_per_turn must be non-negative")

        self.templates: dict[str, ShockTemplate] = {}
        for template in templates:
            if template.template_id in self.templates:
                raise InvalidArgumentError(f"Duplicate shock template '{template.template_id}'")
            self.templates[template.template_id] = template

        self.seed = seed
        self.probability = probability
        self.max_random_per_turn = max_random_per_turn
        self.rng = np.random.default_rng(seed)

        self.occurrences: dict[str, int] = {}
        self.active_persistent: list[str] = []
        self.support_drift: dict[str, float] = {}
        self.history: list[Shock] = []

    def is_eligible(self, template: ShockTemplate, turn: TurnIndex) -> bool:
        """Check whether a template may fire on ``turn``."""
        if self.occurrences.get(template.template_id, 0) >= template.max_occurrences:
            return False
        if template.duration == DurationClass.PERSISTENT and template.template_id in self.active_persistent:
            return False
        if template.is_scheduled:
            return template.trigger_turn == turn
        return turn >= template.min_turn

    def draw(self, turn: TurnIndex) -> list[tuple[ShockTemplate, bool]]:
        """Select the shocks to fire on ``turn``.

        Scheduled shocks for the turn always fire. Random shocks are drawn
        without replacement, weighted by template weight, with probability
        ``self.probability``.

        Returns:
            ``(template, scheduled)`` pairs in firing order
        """
        selected = [
            (template, True)
            for template in self.templates.values()
            if template.is_scheduled and self.is_eligible(template, turn)
        ]

        pool = [
            template
            for template in self.templates.values()
            if not template.is_scheduled and template.weight > 0 and self.is_eligible(template, turn)
        ]
        if not pool or self.max_random_per_turn == 0:
            return selected

        if self.rng.random() >= self.probability:
            return selected

        weights = np.array([template.weight for template in pool], dtype=float)
        count = min(self.max_random_per_turn, len(pool))
        indices = self.rng.choice(len(pool), size=count, replace=False, p=weights / weights.sum())
        selected.extend((pool[int(i)], False) for i in indices)
        return selected

    def fire_turn(
        self,
        turn: TurnIndex,
        plants: dict[str, PowerPlant],
        demand: DemandCurve,
        support: Fraction,
    ) -> ShockReport:
        """Draw and apply this turn's shocks.

        Drifts from persistent support shocks fired on earlier turns are
        included in the returned support delta, as are the support rewards of
        survived shocks.

        Args:
            turn: Turn being played
            plants: Plant roster keyed by plant id
            demand: Demand curve to mutate
            support: Committed support before the turn, for support requirements

        Returns:
            Report of fired and dropped shocks and the combined support delta
        """
        support_delta = sum(self.support_drift.values())
        fired: list[Shock] = []
        dropped: list[Shock] = []

        for template, scheduled in self.draw(turn):
            self.occurrences[template.template_id] = self.occurrences.get(template.template_id, 0) + 1
            try:
                record, delta = self.fire(template, turn, plants, demand, scheduled=scheduled)
            except ShockTargetMissingError as e:
                logger.warning(f"Turn {turn}: {e}")
                record = _record(template, turn, scheduled, outcome=ShockOutcome.DROPPED, reason=e.reason)
                dropped.append(record)
            else:
                survived = self.requirements_met(template, turn, plants, demand, support)
                if survived:
                    delta += self._grant_reward(template, turn, demand)
                    record = record.model_copy(update={"survived": True, "reward_applied": template.reward is not None})
                elif survived is False:
                    logger.info(f"Turn {turn}: requirements of shock '{template.template_id}' not met")
                    record = record.model_copy(update={"survived": False})
                support_delta += delta
                fired.append(record)
            self.history.append(record)

        return ShockReport(fired=tuple(fired), dropped=tuple(dropped), support_delta=support_delta)

    def requirements_met(
        self,
        template: ShockTemplate,
        turn: TurnIndex,
        plants: dict[str, PowerPlant],
        demand: DemandCurve,
        support: Fraction,
    ) -> bool | None:
        """Check a template's requirements against the grid on ``turn``.

        Margin requirements compare realized supply minus projected demand
        for the season; support requirements compare ``support``.

        Returns:
            None when the template has no requirements, else whether all hold
        """
        if not template.requirements:
            return None

        for requirement in template.requirements:
            if requirement.kind == RequirementKind.SUPPORT:
                value = support
            else:
                season = Season.WINTER if requirement.kind == RequirementKind.WINTER_MARGIN else Season.SUMMER
                supply = sum(plant.realized_output(season, turn) for plant in plants.values())
                value = supply - demand.projected_demand(season, turn)
            if value < requirement.value:
                return False
        return True

    def _grant_reward(self, template: ShockTemplate, turn: TurnIndex, demand: DemandCurve) -> float:
        reward = template.reward
        if reward is None:
            return 0.0
        for season, delta in reward.demand_deltas.items():
            demand.apply_one_off_delta(season, turn, delta)
        logger.info(f"Turn {turn}: shock '{template.template_id}' survived, reward granted")
        return reward.support_delta

    def fire(
        self,
        template: ShockTemplate,
        turn: TurnIndex,
        plants: dict[str, PowerPlant],
        demand: DemandCurve,
        scheduled: bool = False,
    ) -> tuple[Shock, float]:
        """Route one shock's effect to its target.

        Returns:
            The shock record and the support delta it contributes this turn

        Raises:
            ShockTargetMissingError: If a plant shock has no active target
        """
        persistent = template.duration == DurationClass.PERSISTENT
        support_delta = 0.0
        plant_ids: tuple[str, ...] = ()

        if template.target == ShockTarget.PLANT:
            targets = self._plant_targets(template, plants)
            for plant in targets:
                if persistent:
                    plant.apply_availability_delta(template.season, template.magnitude, turn, template.template_id)
                else:
                    plant.apply_one_off_availability(template.season, template.magnitude, turn)
            plant_ids = tuple(plant.plant_id for plant in targets)

        elif template.target == ShockTarget.DEMAND:
            seasons = (template.season,) if template.season is not None else ALL_SEASONS
            for season in seasons:
                if persistent:
                    demand.apply_persistent_shift(season, template.magnitude, turn)
                else:
                    demand.apply_one_off_delta(season, turn, template.magnitude)

        else:
            support_delta = template.magnitude
            if persistent:
                self.support_drift[template.template_id] = template.magnitude

        if persistent:
            self.active_persistent.append(template.template_id)

        logger.info(f"Turn {turn}: shock '{template.template_id}' fired ({template.target.value})")
        return _record(template, turn, scheduled, plant_ids=plant_ids), support_delta

    def _plant_targets(self, template: ShockTemplate, plants: dict[str, PowerPlant]) -> list[PowerPlant]:
        if template.plant_id is not None:
            plant = plants.get(template.plant_id)
            if plant is None:
                raise ShockTargetMissingError(template.template_id, f"plant '{template.plant_id}' does not exist")
            if not plant.active:
                raise ShockTargetMissingError(template.template_id, f"plant '{template.plant_id}' is decommissioned")
            return [plant]

        targets = [plant for plant in plants.values() if plant.active and plant.plant_type == template.plant_type]
        if not targets:
            raise ShockTargetMissingError(
                template.template_id, f"no active {template.plant_type.value} plant"  # type: ignore[union-attr]
            )
        return targets

    def state_dict(self) -> ShockEngineState:
        """Capture the engine state, including the random source."""
        return ShockEngineState(
            seed=self.seed,
            occurrences=dict(self.occurrences),
            active_persistent=list(self.active_persistent),
            support_drift=dict(self.support_drift),
            history=list(self.history),
            rng_state=json.dumps(self.rng.bit_generator.state),
        )

    def load_state(self, state: ShockEngineState) -> None:
        """Restore state captured by ``state_dict``."""
        self.seed = state.seed
        self.occurrences = dict(state.occurrences)
        self.active_persistent = list(state.active_persistent)
        self.support_drift = dict(state.support_drift)
        self.history = list(state.history)
        self.rng.bit_generator.state = json.loads(state.rng_state)

    def survived_count(self) -> int:
        """Number of shocks whose requirements were all met."""
        return sum(1 for shock in self.history if shock.survived)

    def get_state(self) -> dict[str, Any]:
        """Get a plain summary of the engine for reporting."""
        return {
            "templates": len(self.templates),
            "fired": sum(1 for shock in self.history if shock.outcome == ShockOutcome.APPLIED),
            "dropped": sum(1 for shock in self.history if shock.outcome == ShockOutcome.DROPPED),
            "survived": self.survived_count(),
            "active_persistent": list(self.active_persistent),
        }


def _record(
    template: ShockTemplate,
    turn: TurnIndex,
    scheduled: bool,
    plant_ids: tuple[str, ...] = (),
    outcome: ShockOutcome = ShockOutcome.APPLIED,
    reason: str | None = None,
) -> Shock:
    return Shock(
        turn=turn,
        template_id=template.template_id,
        name=template.name,
        target=template.target,
        magnitude=template.magnitude,
        duration=template.duration,
        season=template.season,
        plant_ids=plant_ids,
        scheduled=scheduled,
        outcome=outcome,
        reason=reason,
    )


__all__ = ["Shock", "ShockEngine", "ShockEngineState", "ShockReport"]
