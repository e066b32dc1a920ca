"""Tests for load and battery totals (lib.types + powerbudget.services.aggregates)."""

import typing

import pytest

from lib.constants import DEFAULT_DOD
from lib.types import Battery, BatteryChemistry, Load, OtherSource, ProjectConfig
from powerbudget.services.aggregates import BatteryBank, LoadAggregator, other_sources_daily_energy


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


def test_load_average_power_and_daily_energy():
    load = Load(name="Sensor", power_on=10.0, power_idle=2.0, duty_cycle=25.0)
    assert load.average_power == pytest.approx(4.0)
    assert load.daily_energy == pytest.approx(96.0)


def test_load_always_on():
    load = Load(name="Beacon", power_on=3.0, power_idle=0.5)
    assert load.average_power == pytest.approx(3.0)


def test_load_invalid_duty_cycle():
    with pytest.raises(ValueError, match="duty_cycle must be in"):
        Load(name="Bad", power_on=1.0, duty_cycle=120.0)


def test_load_ids_are_unique():
    assert Load().id != Load().id


# ---------------------------------------------------------------------------
# Battery
# ---------------------------------------------------------------------------


def test_battery_capacities():
    battery = Battery(chemistry="AGM", voltage=12.0, capacity_ah=200.0, quantity=2, depth_of_discharge=50.0)
    assert battery.total_capacity == pytest.approx(4800.0)
    assert battery.usable_capacity == pytest.approx(2400.0)


@pytest.mark.parametrize(
    "chemistry, dod",
    [("Lead-Acid", 50.0), ("AGM", 50.0), ("Gel", 50.0), ("Lithium-Ion", 80.0), ("LiFePO4", 90.0)],
)
def test_battery_default_dod(chemistry, dod):
    assert Battery(chemistry=chemistry).depth_of_discharge == dod
    assert BatteryBank.default_dod(chemistry) == dod


def test_battery_explicit_dod_kept():
    assert Battery(chemistry="LiFePO4", depth_of_discharge=70.0).depth_of_discharge == 70.0


def test_with_chemistry_resets_dod():
    battery = Battery(chemistry="Lead-Acid", depth_of_discharge=60.0)
    switched = battery.with_chemistry("LiFePO4")
    assert switched.chemistry == "LiFePO4"
    assert switched.depth_of_discharge == 90.0
    assert switched.id == battery.id
    assert battery.depth_of_discharge == 60.0


def test_chemistry_type_matches_default_table():
    assert set(typing.get_args(BatteryChemistry)) == set(DEFAULT_DOD)
    assert typing.get_type_hints(Battery)["chemistry"] == BatteryChemistry


def test_unknown_chemistry():
    with pytest.raises(ValueError, match="unknown battery chemistry"):
        Battery(chemistry="NiCd")
    with pytest.raises(ValueError, match="unknown battery chemistry"):
        BatteryBank.default_dod("NiCd")


# ---------------------------------------------------------------------------
# Aggregators
# ---------------------------------------------------------------------------


def test_load_aggregator_empty_is_zero():
    agg = LoadAggregator([])
    assert len(agg) == 0
    assert agg.total_average_power == 0.0
    assert agg.total_daily_energy == 0.0


def test_load_aggregator_sums():
    agg = LoadAggregator(
        [
            Load(power_on=10.0, power_idle=2.0, duty_cycle=25.0),
            Load(power_on=20.0, power_idle=5.0, duty_cycle=50.0),
        ]
    )
    assert agg.total_average_power == pytest.approx(16.5)
    assert agg.total_daily_energy == pytest.approx(396.0)


def test_battery_bank_sums():
    bank = BatteryBank(
        [
            Battery(chemistry="AGM", voltage=12.0, capacity_ah=200.0, quantity=2),
            Battery(chemistry="LiFePO4", voltage=24.0, capacity_ah=100.0),
        ]
    )
    assert bank.total_capacity == pytest.approx(4800.0 + 2400.0)
    assert bank.usable_capacity == pytest.approx(2400.0 + 2160.0)


def test_other_sources_daily_energy():
    assert other_sources_daily_energy([OtherSource(name="Fuel cell", average_power=5.0)]) == pytest.approx(120.0)


# ---------------------------------------------------------------------------
# ProjectConfig helpers
# ---------------------------------------------------------------------------


def test_duplicate_ids_detected():
    config = ProjectConfig(loads=[Load(id="a"), Load(id="a"), Load(id="b")])
    assert config.duplicate_ids() == [("loads", "a")]


def test_same_id_in_different_collections_allowed():
    config = ProjectConfig(loads=[Load(id="x")], other_sources=[OtherSource(id="x")])
    assert config.duplicate_ids() == []


def test_has_generation():
    assert not ProjectConfig().has_generation
    assert ProjectConfig(other_sources=[OtherSource(average_power=1.0)]).has_generation
