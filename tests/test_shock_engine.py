"""Tests for the shock and event engine."""

import logging

import pytest
from gridpolicy.config import default_plants, default_shock_templates
from gridpolicy.config.schema import DemandConfig, ShockRequirement, ShockReward, ShockTemplate
from gridpolicy.sim.demand import DemandCurve
from gridpolicy.sim.policy import build_plant
from gridpolicy.sim.shocks import ShockEngine
from gridpolicy.utils.enums import DurationClass, PlantType, RequirementKind, Season, ShockOutcome, ShockTarget
from gridpolicy.utils.errors import InvalidArgumentError

SUPPORT = 0.6


def make_plants():
    return {spec.plant_id: build_plant(spec) for spec in default_plants()}


def make_demand() -> DemandCurve:
    config = DemandConfig()
    return DemandCurve(baseline=dict(config.baseline), increment=dict(config.increment))


def run_turns(engine: ShockEngine, turns: range):
    plants = make_plants()
    demand = make_demand()
    return [engine.fire_turn(turn, plants, demand, SUPPORT) for turn in turns]


class TestShockEngineCreation:
    """Test shock engine construction."""

    def test_invalid_probability(self):
        """Test probabilities outside [0, 1] are rejected."""
        with pytest.raises(InvalidArgumentError):
            ShockEngine([], probability=1.5)

    def test_duplicate_templates(self):
        """Test duplicate template ids are rejected."""
        template = ShockTemplate(template_id="a", target=ShockTarget.SUPPORT, magnitude=0.1)
        with pytest.raises(InvalidArgumentError):
            ShockEngine([template, template])


class TestShockSelection:
    """Test scheduled and random shock selection."""

    def test_scheduled_shock_fires_at_trigger_turn(self):
        """Test a scheduled shock fires exactly on its trigger turn."""
        template = ShockTemplate(
            template_id="vote", target=ShockTarget.SUPPORT, magnitude=-0.05, trigger_turn=3
        )
        engine = ShockEngine([template], seed=1, probability=0.0)
        reports = run_turns(engine, range(6))

        fired_turns = [turn for turn, report in enumerate(reports) if report.fired]
        assert fired_turns == [3]
        assert reports[3].fired[0].scheduled is True
        assert reports[3].support_delta == pytest.approx(-0.05)

    def test_random_shock_respects_min_turn_and_occurrences(self):
        """Test random shocks wait for their minimum turn and stop at max occurrences."""
        template = ShockTemplate(
            template_id="costs", target=ShockTarget.SUPPORT, magnitude=-0.05, min_turn=2, max_occurrences=2
        )
        engine = ShockEngine([template], seed=1, probability=1.0)
        reports = run_turns(engine, range(6))

        fired_turns = [turn for turn, report in enumerate(reports) if report.fired]
        assert fired_turns == [2, 3]
        assert engine.occurrences["costs"] == 2

    def test_zero_probability_never_draws(self):
        """Test random shocks never fire with probability 0."""
        engine = ShockEngine(default_shock_templates(), seed=3, probability=0.0)
        reports = run_turns(engine, range(10))
        fired = [shock.template_id for report in reports for shock in report.fired]
        assert fired == ["nuc_reintro"]

    def test_max_random_per_turn(self):
        """Test several random shocks can be drawn on one turn without replacement."""
        templates = [
            ShockTemplate(template_id=f"s{i}", target=ShockTarget.SUPPORT, magnitude=0.0) for i in range(5)
        ]
        engine = ShockEngine(templates, seed=5, probability=1.0, max_random_per_turn=3)
        report = run_turns(engine, range(1))[0]
        ids = [shock.template_id for shock in report.fired]
        assert len(ids) == 3
        assert len(set(ids)) == 3

    def test_zero_weight_never_drawn(self):
        """Test templates with zero weight are excluded from random draws."""
        templates = [
            ShockTemplate(template_id="never", target=ShockTarget.SUPPORT, magnitude=-1.0, weight=0.0),
            ShockTemplate(template_id="always", target=ShockTarget.SUPPORT, magnitude=0.0, max_occurrences=10),
        ]
        engine = ShockEngine(templates, seed=9, probability=1.0)
        reports = run_turns(engine, range(5))
        fired = {shock.template_id for report in reports for shock in report.fired}
        assert fired == {"always"}


class TestShockDeterminism:
    """Test reproducibility of seeded shock draws."""

    def test_same_seed_same_history(self):
        """Test two engines with the same seed produce identical histories."""
        first = ShockEngine(default_shock_templates(), seed=42)
        second = ShockEngine(default_shock_templates(), seed=42)
        run_turns(first, range(10))
        run_turns(second, range(10))
        assert first.history == second.history
        assert len(first.history) > 0

    def test_state_round_trip_continues_identically(self):
        """Test restoring a captured state continues the same shock sequence."""
        source = ShockEngine(default_shock_templates(), seed=7)
        plants = make_plants()
        demand = make_demand()
        for turn in range(3):
            source.fire_turn(turn, plants, demand, SUPPORT)

        restored = ShockEngine(default_shock_templates(), seed=7)
        restored.load_state(source.state_dict())

        plants_copy = {plant_id: plant.model_copy(deep=True) for plant_id, plant in plants.items()}
        demand_copy = demand.model_copy(deep=True)
        for turn in range(3, 10):
            expected = source.fire_turn(turn, plants, demand, SUPPORT)
            assert restored.fire_turn(turn, plants_copy, demand_copy, SUPPORT) == expected


class TestShockRouting:
    """Test effects are routed to the right component."""

    def test_one_off_demand_shock(self):
        """Test a one-off demand shock changes only the firing turn."""
        template = ShockTemplate(
            template_id="cold_spell", target=ShockTarget.DEMAND, magnitude=15.0, season=Season.WINTER, trigger_turn=1
        )
        engine = ShockEngine([template], probability=0.0)
        plants = make_plants()
        demand = make_demand()
        engine.fire_turn(1, plants, demand, SUPPORT)

        assert demand.projected_demand(Season.WINTER, 1) == pytest.approx(90.0 + 4.0 + 15.0)
        assert demand.projected_demand(Season.WINTER, 2) == pytest.approx(98.0)
        assert demand.projected_demand(Season.SUMMER, 1) == pytest.approx(73.0)

    def test_persistent_demand_shock(self):
        """Test a persistent demand shock raises the increment in every season."""
        template = ShockTemplate(
            template_id="growth",
            target=ShockTarget.DEMAND,
            magnitude=2.0,
            duration=DurationClass.PERSISTENT,
            trigger_turn=0,
        )
        engine = ShockEngine([template], probability=0.0)
        demand = make_demand()
        engine.fire_turn(0, make_plants(), demand, SUPPORT)
        assert demand.increment_for(Season.WINTER) == 6.0
        assert demand.increment_for(Season.SUMMER) == 5.0

    def test_plant_shock_by_type(self):
        """Test a persistent plant shock reaches active plants of the type."""
        template = ShockTemplate(
            template_id="outage",
            target=ShockTarget.PLANT,
            magnitude=-0.25,
            duration=DurationClass.PERSISTENT,
            plant_type=PlantType.COAL,
            trigger_turn=0,
        )
        engine = ShockEngine([template], probability=0.0)
        plants = make_plants()
        report = engine.fire_turn(0, plants, make_demand(), SUPPORT)

        assert report.fired[0].plant_ids == ("coal-1",)
        assert plants["coal-1"].availability[Season.WINTER] == pytest.approx(0.6)
        assert plants["coal-1"].changes[0].source == "outage"
        assert plants["nuclear-1"].changes == []

    def test_persistent_support_shock_drifts(self):
        """Test a persistent support shock keeps contributing on later turns."""
        template = ShockTemplate(
            template_id="scandal",
            target=ShockTarget.SUPPORT,
            magnitude=-0.1,
            duration=DurationClass.PERSISTENT,
            trigger_turn=0,
        )
        engine = ShockEngine([template], probability=0.0)
        reports = run_turns(engine, range(3))
        assert [report.support_delta for report in reports] == pytest.approx([-0.1, -0.1, -0.1])
        assert [len(report.fired) for report in reports] == [1, 0, 0]

    def test_active_persistent_shock_not_redrawn(self):
        """Test a persistent shock is not drawn again while active."""
        template = ShockTemplate(
            template_id="growth",
            target=ShockTarget.DEMAND,
            magnitude=1.0,
            duration=DurationClass.PERSISTENT,
            max_occurrences=5,
        )
        engine = ShockEngine([template], seed=0, probability=1.0)
        reports = run_turns(engine, range(4))
        assert [len(report.fired) for report in reports] == [1, 0, 0, 0]
        assert engine.active_persistent == ["growth"]


class TestShockRequirements:
    """Test requirement checks and rewards of fired shocks."""

    MARGIN_CHECKED = ShockTemplate(
        template_id="cold_snap",
        target=ShockTarget.DEMAND,
        magnitude=20.0,
        season=Season.WINTER,
        trigger_turn=0,
        requirements=[ShockRequirement(kind=RequirementKind.WINTER_MARGIN, value=0.0)],
        reward=ShockReward(text="Held", support_delta=0.04, demand_deltas={Season.SUMMER: -5.0}),
    )

    def test_requirements_met_grants_reward(self):
        """Test a shock whose requirements hold counts as survived and pays its reward."""
        engine = ShockEngine([self.MARGIN_CHECKED], probability=0.0)
        demand = make_demand()
        report = engine.fire_turn(0, make_plants(), demand, SUPPORT)

        # winter supply 90 + 51 against demand 90 + 20
        shock = report.fired[0]
        assert shock.survived is True
        assert shock.reward_applied is True
        assert report.support_delta == pytest.approx(0.04)
        assert demand.projected_demand(Season.SUMMER, 0) == pytest.approx(65.0)
        assert engine.survived_count() == 1
        assert engine.get_state()["survived"] == 1

    def test_requirements_missed_withholds_reward(self):
        """Test a shock whose requirements fail is recorded as not survived."""
        engine = ShockEngine([self.MARGIN_CHECKED], probability=0.0)
        plants = make_plants()
        plants["nuclear-1"].decommission()
        demand = make_demand()
        report = engine.fire_turn(0, plants, demand, SUPPORT)

        shock = report.fired[0]
        assert shock.survived is False
        assert shock.reward_applied is False
        assert report.support_delta == 0.0
        assert demand.projected_demand(Season.SUMMER, 0) == pytest.approx(70.0)
        assert engine.survived_count() == 0

    def test_support_requirement(self):
        """Test support requirements compare the support committed before the turn."""
        template = ShockTemplate(
            template_id="referendum",
            target=ShockTarget.SUPPORT,
            magnitude=-0.05,
            trigger_turn=0,
            requirements=[ShockRequirement(kind=RequirementKind.SUPPORT, value=0.5)],
            reward=ShockReward(support_delta=0.05),
        )
        strong = ShockEngine([template], probability=0.0).fire_turn(0, make_plants(), make_demand(), 0.6)
        weak = ShockEngine([template], probability=0.0).fire_turn(0, make_plants(), make_demand(), 0.4)

        assert strong.fired[0].survived is True
        assert strong.support_delta == pytest.approx(0.0)
        assert weak.fired[0].survived is False
        assert weak.support_delta == pytest.approx(-0.05)

    def test_shock_without_requirements(self):
        """Test shocks without requirements are neither survived nor failed."""
        template = ShockTemplate(template_id="news", target=ShockTarget.SUPPORT, magnitude=0.01, trigger_turn=0)
        engine = ShockEngine([template], probability=0.0)
        report = engine.fire_turn(0, make_plants(), make_demand(), SUPPORT)
        assert report.fired[0].survived is None
        assert engine.survived_count() == 0


class TestMissingTargets:
    """Test shocks whose target is missing are dropped."""

    def test_unknown_plant_dropped(self, caplog):
        """Test a shock aimed at an unknown plant is dropped with a warning."""
        template = ShockTemplate(
            template_id="ghost", target=ShockTarget.PLANT, magnitude=-0.5, plant_id="ghost-1", trigger_turn=0
        )
        engine = ShockEngine([template], probability=0.0)
        with caplog.at_level(logging.WARNING, logger="gridpolicy"):
            report = engine.fire_turn(0, make_plants(), make_demand(), SUPPORT)

        assert report.fired == ()
        assert len(report.dropped) == 1
        assert report.dropped[0].outcome == ShockOutcome.DROPPED
        assert "ghost-1" in report.dropped[0].reason
        assert engine.history == list(report.dropped)
        assert any("ghost" in record.getMessage() for record in caplog.records)

    def test_decommissioned_plant_dropped(self):
        """Test a shock aimed at a decommissioned plant is dropped."""
        template = ShockTemplate(
            template_id="strike", target=ShockTarget.PLANT, magnitude=-0.5, plant_id="coal-1", trigger_turn=0
        )
        engine = ShockEngine([template], probability=0.0)
        plants = make_plants()
        plants["coal-1"].decommission()
        report = engine.fire_turn(0, plants, make_demand(), SUPPORT)
        assert report.dropped[0].template_id == "strike"
        assert plants["coal-1"].changes == []

    def test_no_plant_of_type_dropped(self):
        """Test a type-targeted shock with no matching plant is dropped."""
        engine = ShockEngine(
            [
                ShockTemplate(
                    template_id="severe_weather",
                    target=ShockTarget.PLANT,
                    magnitude=-0.3,
                    plant_type=PlantType.SOLAR,
                    trigger_turn=0,
                )
            ],
            probability=0.0,
        )
        report = engine.fire_turn(0, make_plants(), make_demand(), SUPPORT)
        assert [shock.template_id for shock in report.dropped] == ["severe_weather"]
        assert report.support_delta == 0.0
