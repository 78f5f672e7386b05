"""Turn orchestrator for the gridpolicy simulation core.

This module provides the game engine that owns every piece of mutable game
state (plant roster, demand curve, support score, shock and policy history)
and sequences the simulation components once per turn. Consumers only ever
receive frozen snapshot and result models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gridpolicy.config.schema import GameConfig, Policy
from gridpolicy.sim.assets.plant import PowerPlant
from gridpolicy.sim.demand import DemandCurve
from gridpolicy.sim.policy import Campaign, ContextView, PolicyResolver, build_plant
from gridpolicy.sim.shocks import Shock, ShockEngine
from gridpolicy.sim.support import SupportTracker
from gridpolicy.utils.enums import EndReason, GameState, PlantType, PolicyOutcome, PolicyTag, Season
from gridpolicy.utils.errors import InvalidStateError, PolicyRejectedError, PolicyVoteFailedError
from gridpolicy.utils.logger import logger
from gridpolicy.utils.types import ALL_SEASONS, EnergyUnits, Fraction, TurnIndex


class TurnBalance(BaseModel):
    """Realized demand and supply of one turn, per season."""

    model_config = ConfigDict(frozen=True)

    turn: TurnIndex = Field(..., ge=0, description="Turn the balance was computed for")
    demand: dict[Season, EnergyUnits] = Field(..., description="Realized demand per season")
    supply: dict[Season, EnergyUnits] = Field(..., description="Total realized supply per season")
    plant_output: dict[str, dict[Season, EnergyUnits]] = Field(
        default_factory=dict, description="Realized output per plant and season"
    )

    def margin(self, season: Season) -> EnergyUnits:
        """Supply minus demand for a season (negative means a shortfall)."""
        return self.supply[season] - self.demand[season]

    @property
    def critical_season(self) -> Season:
        """Season with the tightest margin."""
        return min(ALL_SEASONS, key=self.margin)

    @property
    def has_shortfall(self) -> bool:
        """Whether demand exceeds supply in any season."""
        return any(self.margin(season) < 0 for season in ALL_SEASONS)


class PlantStatus(BaseModel):
    """Read-only copy of a plant's state."""

    model_config = ConfigDict(frozen=True)

    plant_id: str
    name: str
    plant_type: PlantType
    capacity: EnergyUnits
    availability: dict[Season, Fraction]
    active: bool
    age: int
    life_span: int | None = None


class TurnResult(BaseModel):
    """Outcome of one ``advance_turn`` call."""

    model_config = ConfigDict(frozen=True)

    turn: TurnIndex = Field(..., ge=0, description="Turn that was played")
    applied_policy: str | None = Field(default=None, description="Policy id requested for the turn")
    policy_outcome: PolicyOutcome = Field(..., description="Applied, rejected, vote failed, or none requested")
    rejection_reason: str | None = Field(default=None, description="Why the policy was rejected")
    vote_probability: float | None = Field(default=None, description="Pass chance of the vote, if one was held")
    fired_shocks: tuple[Shock, ...] = Field(default=(), description="Shocks applied this turn")
    dropped_shocks: tuple[Shock, ...] = Field(default=(), description="Shocks dropped for a missing target")
    built_plants: tuple[str, ...] = Field(default=(), description="Plants commissioned by the policy")
    decommissioned_plants: tuple[str, ...] = Field(default=(), description="Plants that reached end of life")
    finished_campaigns: tuple[str, ...] = Field(default=(), description="Campaigns whose bonus landed")
    support_delta: float = Field(default=0.0, description="Combined support delta before clamping")
    new_support: Fraction = Field(..., ge=0.0, le=1.0, description="Committed support after the turn")
    new_state: GameState = Field(..., description="Game state after the turn")
    end_reason: EndReason | None = Field(default=None, description="Why the game ended, if it did")
    balance: TurnBalance = Field(..., description="Demand and supply of the played turn")


class GameSnapshot(BaseModel):
    """Immutable copy of everything a renderer needs to redraw."""

    model_config = ConfigDict(frozen=True)

    turn: TurnIndex
    horizon: int
    season: Season = Field(..., description="Season with the tightest margin on the current turn")
    state: GameState
    support: Fraction
    demand: dict[Season, EnergyUnits]
    supply: dict[str, dict[Season, EnergyUnits]] = Field(..., description="Realized output per plant")
    total_supply: dict[Season, EnergyUnits]
    plants: tuple[PlantStatus, ...] = ()
    enacted_policies: tuple[str, ...] = ()
    last_balance: TurnBalance | None = None
    end_reason: EndReason | None = None
    shocks_survived: int = Field(default=0, ge=0, description="Shocks whose requirements were all met")
    vote_bonuses: dict[PolicyTag, float] = Field(default_factory=dict, description="Vote bonus per tag")
    campaigns: tuple[Campaign, ...] = Field(default=(), description="Campaigns still running")


class GameEngine:
    """Main state machine of a game: ``setup -> in_progress -> ended``.

    The engine is the handle external consumers hold on to. ``advance_turn``
    is the single mutation entry point; it validates its preconditions
    before touching any component, so a rejected call leaves no trace.
    """

    def __init__(self, config: GameConfig):
        """Initialize a game in the setup state.

        Args:
            config: Validated game configuration
        """
        self.config = config
        self.horizon = config.horizon
        self.state = GameState.SETUP
        self.turn: TurnIndex = 0
        self.end_reason: EndReason | None = None

        self.plants: dict[str, PowerPlant] = {spec.plant_id: build_plant(spec) for spec in config.plants}
        self.demand = DemandCurve(baseline=dict(config.demand.baseline), increment=dict(config.demand.increment))
        self.support = SupportTracker(score=config.starting_support)
        self.shock_engine = ShockEngine(
            config.shocks.templates,
            seed=config.shocks.seed,
            probability=config.shocks.probability,
            max_random_per_turn=config.shocks.max_random_per_turn,
        )
        vote_seed = config.vote_seed if config.vote_seed is not None else config.shocks.seed
        self.resolver = PolicyResolver(config.policies, seed=vote_seed)

        self.enacted_policies: list[str] = []
        self.history: list[TurnResult] = []

        logger.info(f"GameEngine initialized with {len(self.plants)} plants and a {self.horizon}-turn horizon")

    def start(self) -> None:
        """Leave the setup state and begin play.

        Raises:
            InvalidStateError: If the game has already started
        """
        if self.state != GameState.SETUP:
            raise InvalidStateError(f"Game cannot be started from state '{self.state.value}'")

        self.state = GameState.IN_PROGRESS
        logger.info("Game started")
        if self.support.is_depleted:
            self._end(EndReason.SUPPORT_DEPLETED)

    def advance_turn(self, policy_id: str | None = None) -> TurnResult:
        """Play one turn.

        Order of operations: fire shocks, resolve the policy, commit one
        combined support update, compute the turn balance, age plants and
        count down campaigns, then increment the turn counter.

        Args:
            policy_id: Policy to enact this turn, or None to pass

        Returns:
            Result of the played turn (a copy; the engine keeps its own)

        Raises:
            InvalidStateError: If the game is not in progress, the turn's
                policy slot is taken, or a plant the policy builds exists
            InvalidArgumentError: If ``policy_id`` is not in the catalog
        """
        if self.state != GameState.IN_PROGRESS:
            raise InvalidStateError(f"Cannot advance turn in state '{self.state.value}'")
        policy = self.resolver.get(policy_id) if policy_id is not None else None
        if policy is not None:
            self.resolver.check_ready(policy, self.turn, self.plants)

        turn = self.turn
        view = self.context_view()

        # 1. shocks
        report = self.shock_engine.fire_turn(turn, self.plants, self.demand, view.support)

        # 2. policy
        outcome = PolicyOutcome.NONE
        rejection_reason = None
        vote_probability = None
        policy_delta = 0.0
        built: list[PowerPlant] = []
        if policy is not None:
            try:
                effect = self.resolver.apply(policy, view)
            except PolicyRejectedError as e:
                outcome = PolicyOutcome.REJECTED
                rejection_reason = e.reason
                logger.info(f"Turn {turn}: {e}")
            except PolicyVoteFailedError as e:
                outcome = PolicyOutcome.VOTE_FAILED
                vote_probability = e.probability
                logger.info(f"Turn {turn}: {e}")
            else:
                built = self.resolver.commit(effect, turn, self.plants, self.demand)
                self.enacted_policies.append(policy.policy_id)
                policy_delta = effect.support_delta
                vote_probability = effect.vote_probability
                outcome = PolicyOutcome.APPLIED

        # 3. support
        support_delta = policy_delta + report.support_delta
        new_support = self.support.update(support_delta)

        # 4. balance, then plant ageing and campaign countdown
        balance = self.compute_balance(turn)
        decommissioned = [plant.plant_id for plant in self.plants.values() if plant.advance_age()]
        for plant_id in decommissioned:
            logger.info(f"Turn {turn}: plant '{plant_id}' decommissioned")
        finished_campaigns = self.resolver.advance_campaigns()

        # 5. turn counter
        self.turn += 1
        if self.support.is_depleted:
            self._end(EndReason.SUPPORT_DEPLETED)
        elif self.turn >= self.horizon:
            self._end(EndReason.HORIZON_REACHED)

        result = TurnResult(
            turn=turn,
            applied_policy=policy_id,
            policy_outcome=outcome,
            rejection_reason=rejection_reason,
            vote_probability=vote_probability,
            fired_shocks=report.fired,
            dropped_shocks=report.dropped,
            built_plants=tuple(plant.plant_id for plant in built),
            decommissioned_plants=tuple(decommissioned),
            finished_campaigns=tuple(finished_campaigns),
            support_delta=support_delta,
            new_support=new_support,
            new_state=self.state,
            end_reason=self.end_reason,
            balance=balance,
        )
        self.history.append(result)

        logger.info(
            f"Turn {turn} complete: policy={policy_id or '-'} ({outcome.value}), "
            f"shocks={len(report.fired)}, support={new_support:.2f}"
        )
        return result.model_copy(deep=True)

    def context_view(self) -> ContextView:
        """Return the read-only view policies are resolved against."""
        return ContextView(
            turn=self.turn,
            support=self.support.score,
            enacted_policy_ids=frozenset(self.enacted_policies),
        )

    def list_available_policies(self) -> list[Policy]:
        """Return the policies that can be enacted this turn, in catalog order.

        Nothing is available once the game has ended.
        """
        if self.state == GameState.ENDED:
            return []
        return [policy.model_copy(deep=True) for policy in self.resolver.available(self.context_view())]

    def compute_balance(self, turn: TurnIndex) -> TurnBalance:
        """Compute realized demand and supply for ``turn``."""
        plant_output = {
            plant.plant_id: {season: plant.realized_output(season, turn) for season in ALL_SEASONS}
            for plant in self.plants.values()
        }
        return TurnBalance(
            turn=turn,
            demand={season: self.demand.projected_demand(season, turn) for season in ALL_SEASONS},
            supply={season: sum(output[season] for output in plant_output.values()) for season in ALL_SEASONS},
            plant_output=plant_output,
        )

    def get_snapshot(self) -> GameSnapshot:
        """Return an immutable snapshot of the current game state."""
        balance = self.compute_balance(self.turn)
        return GameSnapshot(
            turn=self.turn,
            horizon=self.horizon,
            season=balance.critical_season,
            state=self.state,
            support=self.support.score,
            demand=balance.demand,
            supply=balance.plant_output,
            total_supply=balance.supply,
            plants=tuple(
                PlantStatus(
                    plant_id=plant.plant_id,
                    name=plant.name,
                    plant_type=plant.plant_type,
                    capacity=plant.capacity,
                    availability=dict(plant.availability),
                    active=plant.active,
                    age=plant.age,
                    life_span=plant.life_span,
                )
                for plant in self.plants.values()
            ),
            enacted_policies=tuple(self.enacted_policies),
            last_balance=self.history[-1].balance.model_copy(deep=True) if self.history else None,
            end_reason=self.end_reason,
            shocks_survived=self.shock_engine.survived_count(),
            vote_bonuses=dict(self.resolver.bonuses),
            campaigns=tuple(campaign.model_copy() for campaign in self.resolver.campaigns),
        )

    def support_trajectory(self) -> list[Fraction]:
        """Return committed support scores, starting value first."""
        return list(self.support.history)

    def shock_history(self) -> list[Shock]:
        """Return every shock record in firing order."""
        return list(self.shock_engine.history)

    def get_summary(self) -> dict[str, Any]:
        """Get a summary of the game for end-of-game reporting."""
        return {
            "turn": self.turn,
            "horizon": self.horizon,
            "state": self.state.value,
            "end_reason": self.end_reason.value if self.end_reason else None,
            "support": self.support.score,
            "plants": {
                "total": len(self.plants),
                "active": sum(1 for plant in self.plants.values() if plant.active),
            },
            "policies_enacted": list(self.enacted_policies),
            "shortfall_turns": [result.turn for result in self.history if result.balance.has_shortfall],
            "shocks": self.shock_engine.get_state(),
            "shocks_survived": self.shock_engine.survived_count(),
            "vote_bonuses": {tag.value: bonus for tag, bonus in self.resolver.bonuses.items()},
        }

    def _end(self, reason: EndReason) -> None:
        self.state = GameState.ENDED
        self.end_reason = reason
        logger.info(f"Game ended after {self.turn} turns: {reason.value}")


__all__ = ["GameEngine", "GameSnapshot", "PlantStatus", "TurnBalance", "TurnResult"]
