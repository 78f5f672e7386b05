"""Built-in game catalog for the gridpolicy simulation core.

The starting roster, shock catalog and policy menu used when no
configuration file is supplied. A game opens with one nuclear and one coal
plant; nuclear reintroduction is always put to a vote on the fourth turn.
"""

from gridpolicy.config.schema import (
    DemandConfig,
    GameConfig,
    PlantSpec,
    Policy,
    ShockRequirement,
    ShockReward,
    ShockSettings,
    ShockTemplate,
)
from gridpolicy.utils.enums import DurationClass, PlantType, PolicyTag, RequirementKind, Season, ShockTarget
from gridpolicy.utils.types import DEFAULT_LIFE_SPAN_TURNS, NUCLEAR_LIFE_SPAN_TURNS

NUCLEAR_REINTRODUCTION_TURN = 3


def default_plants() -> list[PlantSpec]:
    """Return the starting plant roster."""
    return [
        PlantSpec(
            plant_id="nuclear-1",
            name="Nuclear",
            plant_type=PlantType.NUCLEAR,
            capacity=100.0,
            availability={Season.WINTER: 0.9, Season.SUMMER: 0.8},
            life_span=NUCLEAR_LIFE_SPAN_TURNS,
        ),
        PlantSpec(
            plant_id="coal-1",
            name="Coal",
            plant_type=PlantType.COAL,
            capacity=60.0,
            availability={Season.WINTER: 0.85, Season.SUMMER: 0.85},
            life_span=DEFAULT_LIFE_SPAN_TURNS,
        ),
    ]


def default_shock_templates() -> list[ShockTemplate]:
    """Return the shock catalog."""
    return [
        ShockTemplate(
            template_id="cold_spell",
            name="Cold spell",
            target=ShockTarget.DEMAND,
            magnitude=15.0,
            season=Season.WINTER,
            max_occurrences=2,
            requirements=[ShockRequirement(kind=RequirementKind.WINTER_MARGIN, value=0.0)],
            reward=ShockReward(text="Winter supply held", support_delta=0.03),
        ),
        ShockTemplate(
            template_id="heat_wave",
            name="Heat wave",
            target=ShockTarget.DEMAND,
            magnitude=10.0,
            season=Season.SUMMER,
            requirements=[ShockRequirement(kind=RequirementKind.SUMMER_MARGIN, value=0.0)],
            reward=ShockReward(text="Summer supply held", support_delta=0.02),
        ),
        ShockTemplate(
            template_id="glaciers_melting",
            name="Glaciers melting",
            target=ShockTarget.PLANT,
            magnitude=-0.15,
            duration=DurationClass.PERSISTENT,
            season=Season.SUMMER,
            plant_type=PlantType.HYDRO,
            min_turn=2,
        ),
        ShockTemplate(
            template_id="severe_weather",
            name="Severe weather",
            target=ShockTarget.PLANT,
            magnitude=-0.3,
            plant_type=PlantType.SOLAR,
        ),
        ShockTemplate(
            template_id="renewables_support",
            name="Public support for renewables",
            target=ShockTarget.SUPPORT,
            magnitude=0.05,
        ),
        ShockTemplate(
            template_id="inc_raw_cost_10",
            name="Raw material costs up 10%",
            target=ShockTarget.SUPPORT,
            magnitude=-0.05,
            max_occurrences=2,
        ),
        ShockTemplate(
            template_id="inc_raw_cost_20",
            name="Raw material costs up 20%",
            target=ShockTarget.SUPPORT,
            magnitude=-0.1,
        ),
        ShockTemplate(
            template_id="dec_raw_cost_20",
            name="Raw material costs down 20%",
            target=ShockTarget.SUPPORT,
            magnitude=0.05,
        ),
        ShockTemplate(
            template_id="mass_immigration",
            name="Population growth",
            target=ShockTarget.DEMAND,
            magnitude=2.0,
            duration=DurationClass.PERSISTENT,
            min_turn=1,
        ),
        ShockTemplate(
            template_id="nuc_reintro",
            name="Nuclear reintroduction vote",
            target=ShockTarget.SUPPORT,
            magnitude=-0.05,
            trigger_turn=NUCLEAR_REINTRODUCTION_TURN,
            requirements=[ShockRequirement(kind=RequirementKind.SUPPORT, value=0.5)],
            reward=ShockReward(text="Reintroduction rejected with broad support", support_delta=0.05),
        ),
    ]


def default_policies() -> list[Policy]:
    """Return the policy menu in display order."""
    return [
        Policy(
            policy_id="efficiency_campaign",
            name="Energy efficiency campaign",
            description="Slows yearly demand growth in both seasons.",
            support_delta=-0.02,
            demand_deltas={Season.WINTER: -1.0, Season.SUMMER: -1.0},
        ),
        Policy(
            policy_id="renewable_subsidies",
            name="Renewable subsidies",
            description="Improves availability of solar and wind plants.",
            support_delta=0.03,
            availability_deltas={PlantType.SOLAR: 0.05, PlantType.WIND: 0.05},
            min_support=0.3,
        ),
        Policy(
            policy_id="build_solar_park",
            name="Build a solar park",
            description="Commissions an alpine solar park.",
            support_delta=0.02,
            builds=[
                PlantSpec(
                    plant_id="solar-1",
                    name="Solar park",
                    plant_type=PlantType.SOLAR,
                    capacity=40.0,
                    availability={Season.WINTER: 0.3, Season.SUMMER: 0.7},
                    life_span=DEFAULT_LIFE_SPAN_TURNS,
                )
            ],
            repeatable=False,
        ),
        Policy(
            policy_id="build_hydro_dam",
            name="Build a hydro dam",
            description="Commissions a pumped-storage hydro dam.",
            support_delta=-0.04,
            builds=[
                PlantSpec(
                    plant_id="hydro-1",
                    name="Hydro dam",
                    plant_type=PlantType.HYDRO,
                    capacity=60.0,
                    availability={Season.WINTER: 0.6, Season.SUMMER: 0.9},
                )
            ],
            min_support=0.4,
            repeatable=False,
        ),
        Policy(
            policy_id="build_gas_plant",
            name="Build a gas plant",
            description="Commissions a gas plant for winter security of supply.",
            support_delta=-0.06,
            builds=[
                PlantSpec(
                    plant_id="gas-1",
                    name="Gas plant",
                    plant_type=PlantType.GAS,
                    capacity=50.0,
                    availability={Season.WINTER: 0.95, Season.SUMMER: 0.95},
                    life_span=DEFAULT_LIFE_SPAN_TURNS,
                )
            ],
            min_support=0.5,
            repeatable=False,
        ),
        Policy(
            policy_id="carbon_tax",
            name="Carbon tax",
            description="Cuts demand growth sharply at a political cost.",
            support_delta=-0.08,
            demand_deltas={Season.WINTER: -2.0, Season.SUMMER: -2.0},
            min_support=0.5,
        ),
        Policy(
            policy_id="public_consultation",
            name="Public consultation",
            description="Rebuilds support when it is running low.",
            support_delta=0.05,
            max_support=0.5,
        ),
        Policy(
            policy_id="feed_in_tariff",
            name="Feed-in tariff",
            description="Raises solar and wind output if parliament passes it.",
            support_delta=0.02,
            availability_deltas={PlantType.SOLAR: 0.05, PlantType.WIND: 0.05},
            min_support=0.4,
            tag=PolicyTag.ENVIRONMENT,
            vote_probability=0.6,
        ),
        Policy(
            policy_id="demand_response",
            name="Demand response programme",
            description="Slows demand growth if parliament passes it.",
            support_delta=-0.01,
            demand_deltas={Season.WINTER: -1.5, Season.SUMMER: -1.5},
            min_support=0.3,
            tag=PolicyTag.DEMAND,
            vote_probability=0.5,
        ),
        Policy(
            policy_id="green_campaign",
            name="Environmental campaign",
            description="Improves the odds of environmental votes once it has run.",
            support_delta=-0.01,
            tag=PolicyTag.ENVIRONMENT,
            campaign_turns=3,
            campaign_bonus=0.15,
        ),
        Policy(
            policy_id="awareness_campaign",
            name="Energy awareness campaign",
            description="Improves the odds of demand votes once it has run.",
            tag=PolicyTag.DEMAND,
            campaign_turns=2,
            campaign_bonus=0.1,
        ),
    ]


def default_game_config(seed: int | None = None) -> GameConfig:
    """Return a complete game configuration using the built-in catalog.

    Args:
        seed: Optional seed for the shock engine
    """
    return GameConfig(
        plants=default_plants(),
        demand=DemandConfig(),
        shocks=ShockSettings(seed=seed, templates=default_shock_templates()),
        policies=default_policies(),
    )


__all__ = [
    "NUCLEAR_REINTRODUCTION_TURN",
    "default_game_config",
    "default_plants",
    "default_policies",
    "default_shock_templates",
]
