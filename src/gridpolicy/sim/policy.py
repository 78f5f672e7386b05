"""Policy effect resolver for the gridpolicy simulation core.

Maps a player-chosen policy to an ``EffectVector`` under the current game
context, and commits that vector to the plant roster and demand curve.
Support effects are returned to the caller so they can be summed with the
turn's shock effects before a single support update.

Policies with a ``vote_probability`` are put to a seeded vote after the
eligibility check. Campaign policies schedule a bonus that lands on their tag
pool once the campaign has run its course; the pool raises the pass chance
of every voted policy with the same tag.
"""

import json

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from gridpolicy.config.schema import PlantSpec, Policy
from gridpolicy.sim.assets.plant import PowerPlant
from gridpolicy.sim.demand import DemandCurve
from gridpolicy.utils.enums import DurationClass, PlantType, PolicyTag, Season
from gridpolicy.utils.errors import (
    InvalidArgumentError,
    InvalidStateError,
    PolicyRejectedError,
    PolicyVoteFailedError,
)
from gridpolicy.utils.logger import logger
from gridpolicy.utils.types import (
    DEFAULT_LIFE_SPAN_TURNS,
    NUCLEAR_LIFE_SPAN_TURNS,
    Fraction,
    TurnIndex,
    clamp_fraction,
)


class ContextView(BaseModel):
    """Read-only view of the game state a policy is resolved against."""

    model_config = ConfigDict(frozen=True)

    turn: TurnIndex = Field(..., ge=0, description="Turn being played")
    support: Fraction = Field(..., ge=0.0, le=1.0, description="Committed support before this turn")
    enacted_policy_ids: frozenset[str] = Field(default=frozenset(), description="Policies applied so far")


class Campaign(BaseModel):
    """A campaign that has been launched and not yet finished."""

    policy_id: str = Field(..., min_length=1, description="Campaign policy that was enacted")
    tag: PolicyTag = Field(..., description="Bonus pool the campaign feeds")
    bonus: float = Field(..., description="Vote bonus added when the campaign finishes")
    turns_left: int = Field(..., ge=0, description="Turn ticks until the bonus lands")


class EffectVector(BaseModel):
    """Deltas produced by resolving one policy."""

    model_config = ConfigDict(frozen=True)

    policy_id: str = Field(..., min_length=1, description="Policy the effects come from")
    support_delta: float = Field(default=0.0, description="Change to political support")
    availability_deltas: dict[PlantType, float] = Field(default_factory=dict, description="Per plant type")
    demand_deltas: dict[Season, float] = Field(default_factory=dict, description="Per season")
    demand_duration: DurationClass = Field(default=DurationClass.PERSISTENT, description="Demand delta duration")
    builds: tuple[PlantSpec, ...] = Field(default=(), description="Plants to commission")
    campaign: Campaign | None = Field(default=None, description="Campaign to schedule")
    vote_probability: float | None = Field(default=None, description="Pass chance of the vote, if one was held")


class ResolverState(BaseModel):
    """Serializable state of a policy resolver."""

    last_applied_turn: TurnIndex | None = None
    bonuses: dict[PolicyTag, float] = Field(default_factory=dict)
    campaigns: list[Campaign] = Field(default_factory=list)
    rng_state: str = Field(..., description="JSON-encoded numpy bit generator state")


def build_plant(spec: PlantSpec, turn: TurnIndex = 0) -> PowerPlant:
    """Commission a plant from its specification.

    Nuclear plants default to a shorter life span than other technologies.
    """
    life_span = spec.life_span
    if life_span is None:
        life_span = NUCLEAR_LIFE_SPAN_TURNS if spec.plant_type == PlantType.NUCLEAR else DEFAULT_LIFE_SPAN_TURNS

    return PowerPlant(
        plant_id=spec.plant_id,
        name=spec.name or spec.plant_id,
        plant_type=spec.plant_type,
        capacity=spec.capacity,
        availability=dict(spec.availability),
        life_span=life_span,
        commissioned_turn=turn,
    )


class PolicyResolver:
    """Resolves and commits policies, at most one per turn."""

    def __init__(self, policies: list[Policy], seed: int | None = None):
        """Initialize the resolver.

        Args:
            policies: Policy catalog in menu order
            seed: Seed for the vote draws (None for OS entropy)
        """
        self.policies: dict[str, Policy] = {}
        for policy in policies:
            if policy.policy_id in self.policies:
                raise InvalidArgumentError(f"Duplicate policy '{policy.policy_id}'")
            self.policies[policy.policy_id] = policy

        self.rng = np.random.default_rng(seed)
        self.last_applied_turn: TurnIndex | None = None
        self.bonuses: dict[PolicyTag, float] = {tag: 0.0 for tag in PolicyTag}
        self.campaigns: list[Campaign] = []

    def get(self, policy_id: str) -> Policy:
        """Look up a policy by id.

        Raises:
            InvalidArgumentError: If the policy id is unknown
        """
        policy = self.policies.get(policy_id)
        if policy is None:
            raise InvalidArgumentError(f"Unknown policy: {policy_id!r}")
        return policy

    def check_ready(self, policy: Policy, turn: TurnIndex, plants: dict[str, PowerPlant] | None = None) -> None:
        """Check the turn still has its policy slot and the policy's builds are free.

        Raises:
            InvalidStateError: If a policy was already applied on ``turn`` or a
                plant the policy builds already exists
        """
        if self.last_applied_turn == turn:
            raise InvalidStateError(f"A policy has already been applied on turn {turn}")
        for spec in policy.builds:
            if plants is not None and spec.plant_id in plants:
                raise InvalidStateError(f"Plant '{spec.plant_id}' already exists")

    def rejection_reason(self, policy: Policy, view: ContextView) -> str | None:
        """Return why ``policy`` cannot be enacted, or None if it can."""
        if view.support < policy.min_support:
            return f"support {view.support:.2f} is below the required {policy.min_support:.2f}"
        if view.support > policy.max_support:
            return f"support {view.support:.2f} is above the allowed {policy.max_support:.2f}"
        if not policy.repeatable and policy.policy_id in view.enacted_policy_ids:
            return "policy has already been enacted"
        return None

    def eligible(self, policy: Policy, view: ContextView) -> bool:
        """Check whether a policy can be enacted under ``view``."""
        return self.rejection_reason(policy, view) is None

    def available(self, view: ContextView) -> list[Policy]:
        """Return eligible policies in catalog order."""
        return [policy for policy in self.policies.values() if self.eligible(policy, view)]

    def vote_probability(self, policy: Policy, view: ContextView) -> float | None:
        """Chance that ``policy`` passes its vote, or None if it is not voted on.

        The base chance plus the tag bonus is clamped to [0, 1], then scaled
        by how far support sits above (or below) the policy's minimum.
        """
        if policy.vote_probability is None:
            return None

        bonus = self.bonuses.get(policy.tag, 0.0) if policy.tag is not None else 0.0
        base = clamp_fraction(policy.vote_probability + bonus)
        return clamp_fraction(base - base * (policy.min_support - view.support))

    def apply(self, policy: Policy, view: ContextView) -> EffectVector:
        """Resolve a policy into its effect vector.

        A held vote uses up the turn's policy slot whether it passes or not.

        Args:
            policy: Policy chosen by the player
            view: Current game context

        Returns:
            Effects to commit for the turn

        Raises:
            InvalidStateError: If a policy was already applied this turn
            PolicyRejectedError: If the policy is ineligible under ``view``
            PolicyVoteFailedError: If the policy lost its vote
        """
        self.check_ready(policy, view.turn)

        reason = self.rejection_reason(policy, view)
        if reason is not None:
            raise PolicyRejectedError(policy.policy_id, reason)

        probability = self.vote_probability(policy, view)
        self.last_applied_turn = view.turn
        if probability is not None and self.rng.random() >= probability:
            raise PolicyVoteFailedError(policy.policy_id, probability)

        campaign = None
        if policy.is_campaign:
            campaign = Campaign(
                policy_id=policy.policy_id,
                tag=policy.tag,
                bonus=policy.campaign_bonus,
                turns_left=policy.campaign_turns,
            )

        return EffectVector(
            policy_id=policy.policy_id,
            support_delta=policy.support_delta,
            availability_deltas=dict(policy.availability_deltas),
            demand_deltas=dict(policy.demand_deltas),
            demand_duration=policy.demand_duration,
            builds=tuple(policy.builds),
            campaign=campaign,
            vote_probability=probability,
        )

    def commit(
        self, effect: EffectVector, turn: TurnIndex, plants: dict[str, PowerPlant], demand: DemandCurve
    ) -> list[PowerPlant]:
        """Apply the non-support part of an effect vector.

        Availability deltas are persistent and reach every active plant of
        the matching type. Build specs are commissioned into ``plants`` and a
        campaign joins the running campaigns.

        Returns:
            Newly commissioned plants
        """
        for plant_type, delta in effect.availability_deltas.items():
            targets = [plant for plant in plants.values() if plant.active and plant.plant_type == plant_type]
            if not targets:
                logger.debug(f"Policy '{effect.policy_id}': no active {plant_type.value} plant to adjust")
            for plant in targets:
                plant.apply_availability_delta(None, delta, turn, effect.policy_id)

        for season, delta in effect.demand_deltas.items():
            if effect.demand_duration == DurationClass.PERSISTENT:
                demand.apply_persistent_shift(season, delta, turn)
            else:
                demand.apply_one_off_delta(season, turn, delta)

        built = []
        for spec in effect.builds:
            if spec.plant_id in plants:
                raise InvalidStateError(f"Plant '{spec.plant_id}' already exists")
            plant = build_plant(spec, turn)
            plants[plant.plant_id] = plant
            built.append(plant)
            logger.info(f"Turn {turn}: commissioned {plant}")

        if effect.campaign is not None:
            self.campaigns.append(effect.campaign.model_copy())
            logger.info(f"Turn {turn}: campaign '{effect.policy_id}' launched for {effect.campaign.turns_left} turns")

        return built

    def advance_campaigns(self) -> list[str]:
        """Count down running campaigns by one turn.

        Returns:
            Ids of the campaigns that finished and added their bonus
        """
        finished = []
        running = []
        for campaign in self.campaigns:
            turns_left = campaign.turns_left - 1
            if turns_left <= 0:
                self.bonuses[campaign.tag] = self.bonuses.get(campaign.tag, 0.0) + campaign.bonus
                finished.append(campaign.policy_id)
                logger.info(f"Campaign '{campaign.policy_id}' finished: {campaign.tag.value} {campaign.bonus:+.2f}")
            else:
                running.append(campaign.model_copy(update={"turns_left": turns_left}))
        self.campaigns = running
        return finished

    def state_dict(self) -> ResolverState:
        """Capture the resolver state, including the vote random source."""
        return ResolverState(
            last_applied_turn=self.last_applied_turn,
            bonuses=dict(self.bonuses),
            campaigns=[campaign.model_copy() for campaign in self.campaigns],
            rng_state=json.dumps(self.rng.bit_generator.state),
        )

    def load_state(self, state: ResolverState) -> None:
        """Restore state captured by ``state_dict``."""
        self.last_applied_turn = state.last_applied_turn
        self.bonuses = {tag: 0.0 for tag in PolicyTag}
        self.bonuses.update(state.bonuses)
        self.campaigns = [campaign.model_copy() for campaign in state.campaigns]
        self.rng.bit_generator.state = json.loads(state.rng_state)


__all__ = [
    "Campaign",
    "ContextView",
    "EffectVector",
    "Policy",
    "PolicyResolver",
    "ResolverState",
    "build_plant",
]
