"""Tests for the power plant asset model."""

import pytest
from gridpolicy.sim.assets.plant import PowerPlant
from gridpolicy.utils.enums import PlantType, Season
from gridpolicy.utils.errors import InvalidArgumentError
from pydantic import ValidationError


def make_plant(**overrides) -> PowerPlant:
    params = {
        "plant_id": "nuclear-1",
        "name": "Nuclear",
        "plant_type": PlantType.NUCLEAR,
        "capacity": 100.0,
        "availability": {Season.WINTER: 0.8, Season.SUMMER: 0.6},
        "life_span": 5,
    }
    params.update(overrides)
    return PowerPlant(**params)


class TestPowerPlantCreation:
    """Test plant construction and validation."""

    def test_plant_creation(self):
        """Test creating a plant with valid parameters."""
        plant = make_plant()
        assert plant.plant_id == "nuclear-1"
        assert plant.plant_type == PlantType.NUCLEAR
        assert plant.capacity_value() == 100.0
        assert plant.active is True
        assert plant.age == 0
        assert plant.changes == []

    def test_negative_capacity_rejected(self):
        """Test capacity must be non-negative."""
        with pytest.raises(ValidationError):
            make_plant(capacity=-1.0)

    def test_availability_out_of_range_rejected(self):
        """Test availability fractions must lie in [0, 1]."""
        with pytest.raises(ValidationError):
            make_plant(availability={Season.WINTER: 1.2, Season.SUMMER: 0.5})
        with pytest.raises(ValidationError):
            make_plant(availability={Season.WINTER: -0.1, Season.SUMMER: 0.5})

    def test_availability_requires_every_season(self):
        """Test a missing season is rejected."""
        with pytest.raises(ValidationError):
            make_plant(availability={Season.WINTER: 0.5})

    def test_blank_identifier_rejected(self):
        """Test blank identifiers are rejected."""
        with pytest.raises(ValidationError):
            make_plant(plant_id="   ")


class TestPowerPlantOutput:
    """Test realized output queries."""

    def test_realized_output_scenario(self):
        """Capacity 100 at availability 0.8 yields 80."""
        plant = make_plant()
        assert plant.realized_output(Season.WINTER) == pytest.approx(80.0)

    def test_season_tags_accepted(self):
        """Test season values and names are accepted."""
        plant = make_plant()
        assert plant.availability_for("winter") == 0.8
        assert plant.availability_for("SUMMER") == 0.6

    def test_invalid_season_raises(self):
        """Test an unknown season tag raises InvalidArgumentError."""
        plant = make_plant()
        with pytest.raises(InvalidArgumentError):
            plant.availability_for("autumn")
        with pytest.raises(InvalidArgumentError):
            plant.realized_output("spring")

    def test_decommissioned_plant_produces_nothing(self):
        """Test a decommissioned plant has zero output."""
        plant = make_plant()
        plant.decommission()
        assert plant.realized_output(Season.WINTER) == 0.0


class TestAvailabilityChanges:
    """Test persistent and one-off availability changes."""

    def test_persistent_delta_is_audited(self):
        """Test a persistent change mutates availability and records an audit entry."""
        plant = make_plant()
        records = plant.apply_availability_delta(Season.SUMMER, -0.2, turn=2, source="glaciers_melting")

        assert plant.availability[Season.SUMMER] == pytest.approx(0.4)
        assert plant.availability[Season.WINTER] == 0.8
        assert len(records) == 1
        assert plant.changes == records
        assert records[0].source == "glaciers_melting"
        assert records[0].turn == 2
        assert records[0].resulting_availability == pytest.approx(0.4)

    def test_persistent_delta_all_seasons(self):
        """Test a season of None changes every season."""
        plant = make_plant()
        records = plant.apply_availability_delta(None, 0.1, turn=0, source="renewable_subsidies")
        assert len(records) == 2
        assert plant.availability[Season.WINTER] == pytest.approx(0.9)
        assert plant.availability[Season.SUMMER] == pytest.approx(0.7)

    def test_persistent_delta_is_clamped(self):
        """Test availability never leaves [0, 1]."""
        plant = make_plant()
        plant.apply_availability_delta(Season.WINTER, 0.5, turn=0, source="boost")
        plant.apply_availability_delta(Season.SUMMER, -2.0, turn=0, source="outage")
        assert plant.availability[Season.WINTER] == 1.0
        assert plant.availability[Season.SUMMER] == 0.0

    def test_one_off_delta_only_affects_its_turn(self):
        """Test one-off deltas change a single turn's output."""
        plant = make_plant()
        plant.apply_one_off_availability(Season.WINTER, -0.3, turn=4)

        assert plant.realized_output(Season.WINTER, turn=4) == pytest.approx(50.0)
        assert plant.realized_output(Season.WINTER, turn=4) == pytest.approx(50.0)
        assert plant.realized_output(Season.WINTER, turn=5) == pytest.approx(80.0)
        assert plant.availability[Season.WINTER] == 0.8
        assert plant.changes == []


class TestPlantLifecycle:
    """Test ageing and decommissioning."""

    def test_plant_decommissioned_at_end_of_life(self):
        """Test a plant is flagged inactive once it reaches its life span."""
        plant = make_plant(life_span=2)
        assert plant.advance_age() is False
        assert plant.active is True
        assert plant.advance_age() is True
        assert plant.active is False
        assert plant.advance_age() is False
        assert plant.age == 2

    def test_unlimited_life_span(self):
        """Test a plant without a life span never retires."""
        plant = make_plant(life_span=None)
        for _ in range(50):
            assert plant.advance_age() is False
        assert plant.active is True

    def test_get_state(self):
        """Test plain state summary."""
        state = make_plant().get_state()
        assert state["plant_type"] == "nuclear"
        assert state["availability"] == {"winter": 0.8, "summer": 0.6}
        assert state["active"] is True
