"""Tests for powerbudget.services.budget.PowerBudgetCalculator."""

import math

import pytest

from lib.types import (
    Battery,
    Load,
    Location,
    OtherSource,
    ProjectConfig,
    SolarData,
    SolarMonth,
    SolarPanel,
    WindData,
    WindGenerator,
    WindMonth,
)
from powerbudget.errors import NumericDomainError, ValidationError
from powerbudget.services.budget import PowerBudgetCalculator
from powerbudget.simulators.battery_soc import BatterySOCSimulator

# (ghi, diffuse) in kWh/m²/day, a mid-latitude northern site
MONTHLY_IRRADIANCE = [
    (1.8, 0.9), (2.6, 1.2), (3.6, 1.5), (4.7, 1.8), (5.8, 2.0), (6.5, 2.0),
    (6.3, 2.0), (5.5, 1.8), (4.4, 1.5), (3.1, 1.2), (2.0, 0.9), (1.5, 0.8),
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def calculator() -> PowerBudgetCalculator:
    return PowerBudgetCalculator()


@pytest.fixture
def solar_data() -> SolarData:
    return SolarData(
        latitude=40.0,
        longitude=-70.0,
        monthly=[
            SolarMonth(month=i + 1, ghi=ghi, diffuse=diffuse)
            for i, (ghi, diffuse) in enumerate(MONTHLY_IRRADIANCE)
        ],
    )


@pytest.fixture
def solar_project(solar_data) -> ProjectConfig:
    """One 100 W panel at 20° tilt feeding a 300 Wh/day load."""
    return ProjectConfig(
        project_name="Scenario",
        location=Location(latitude=40.0, longitude=-70.0),
        loads=[Load(name="Logger", power_on=20.0, power_idle=5.0, duty_cycle=50.0)],
        batteries=[Battery(chemistry="AGM", voltage=12.0, capacity_ah=200.0, quantity=2)],
        solar_panels=[SolarPanel(power_rating=100.0, tilt_angle=20.0, azimuth=180.0)],
        solar_data=solar_data,
    )


def constant_project(load_w: float, other_w: float) -> ProjectConfig:
    return ProjectConfig(
        loads=[Load(name="Load", power_on=load_w)],
        other_sources=[OtherSource(name="Fuel cell", average_power=other_w)],
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def test_no_loads_rejected(calculator):
    config = ProjectConfig(other_sources=[OtherSource(average_power=5.0)])
    with pytest.raises(ValidationError, match="at least one load"):
        calculator.calculate_budget(config)


def test_no_generation_rejected(calculator):
    config = ProjectConfig(loads=[Load(power_on=5.0)])
    with pytest.raises(ValidationError, match="at least one power source"):
        calculator.calculate_budget(config)


def test_duplicate_ids_rejected(calculator):
    config = constant_project(10.0, 20.0)
    config.loads.append(Load(power_on=1.0, id=config.loads[0].id))
    with pytest.raises(ValidationError, match="duplicate ids"):
        calculator.calculate_budget(config)


def test_invalid_latitude_rejected(calculator, solar_project):
    solar_project.location = Location(latitude=95.0)
    with pytest.raises(NumericDomainError):
        calculator.calculate_budget(solar_project)


# ---------------------------------------------------------------------------
# Seasonal scenario
# ---------------------------------------------------------------------------


def test_load_consumes_300_wh_per_day(calculator, solar_project):
    result = calculator.calculate_budget(solar_project)
    june = result.monthly_data[5]
    assert june.consumption == pytest.approx(300.0 * 30)


def test_summer_month_in_surplus(calculator, solar_project):
    june = calculator.calculate_budget(solar_project).monthly_data[5]
    assert june.month == 6
    assert june.solar_generation / 30 > 300.0
    assert june.surplus is True


def test_winter_month_in_deficit(calculator, solar_project):
    result = calculator.calculate_budget(solar_project)
    december = result.monthly_data[11]
    assert december.surplus is False
    assert result.summary.system_adequate is False


def test_row_invariants(calculator, solar_project):
    for row in calculator.calculate_budget(solar_project).monthly_data:
        assert row.total_generation == pytest.approx(row.solar_generation + row.wind_generation + row.other_generation)
        assert row.net_energy == pytest.approx(row.total_generation - row.consumption)
        assert row.surplus == (row.net_energy >= 0)


def test_rows_cover_every_month_in_order(calculator, solar_project):
    months = [r.month for r in calculator.calculate_budget(solar_project).monthly_data]
    assert months == list(range(1, 13))


def test_summary_totals(calculator, solar_project):
    result = calculator.calculate_budget(solar_project)
    s = result.summary
    assert s.annual_consumption == pytest.approx(300.0 * 365)
    assert s.solar_contribution == pytest.approx(sum(r.solar_generation for r in result.monthly_data))
    assert s.annual_generation == pytest.approx(s.solar_contribution + s.wind_contribution + s.other_contribution)
    assert s.net_annual == pytest.approx(s.annual_generation - s.annual_consumption)


def test_autonomy_days(calculator, solar_project):
    s = calculator.calculate_budget(solar_project).summary
    assert s.battery_capacity == pytest.approx(2400.0)
    assert s.autonomy_days == pytest.approx(8.0)


def test_worst_month_is_minimum_net(calculator, solar_project):
    result = calculator.calculate_budget(solar_project)
    assert result.summary.worst_month.net_energy == min(r.net_energy for r in result.monthly_data)


# ---------------------------------------------------------------------------
# Adequacy and ties
# ---------------------------------------------------------------------------


def test_balanced_system_is_adequate_and_worst_is_january(calculator):
    result = calculator.calculate_budget(constant_project(10.0, 10.0))
    assert all(r.net_energy == 0 for r in result.monthly_data)
    assert result.summary.system_adequate is True
    assert result.summary.worst_month.month == 1


def test_deficit_tie_goes_to_earliest_month(calculator):
    result = calculator.calculate_budget(constant_project(20.0, 10.0))
    # every 31-day month has the same deficit; January comes first
    assert result.summary.worst_month.month == 1
    assert result.summary.system_adequate is False


def test_percent_of_demand(calculator):
    row = calculator.calculate_budget(constant_project(20.0, 10.0)).monthly_data[0]
    assert row.percent_of_demand == pytest.approx(50.0)


def test_zero_consumption_gives_infinite_autonomy(calculator):
    result = calculator.calculate_budget(constant_project(0.0, 10.0))
    assert math.isinf(result.summary.autonomy_days)
    assert result.monthly_data[0].percent_of_demand == 0.0


# ---------------------------------------------------------------------------
# Reliability flags
# ---------------------------------------------------------------------------


def test_missing_solar_data_is_flagged_not_fatal(calculator, solar_project):
    solar_project.solar_data = None
    solar_project.other_sources.append(OtherSource(average_power=1.0))
    result = calculator.calculate_budget(solar_project)
    assert result.summary.solar_contribution == 0.0
    assert result.reliability["solar"].reliable is False
    assert result.unreliable_sources == ["solar"]


def test_incomplete_solar_data_is_flagged(calculator, solar_project):
    solar_project.solar_data = SolarData(
        latitude=40.0,
        longitude=-70.0,
        monthly=[SolarMonth(month=6, ghi=6.5, diffuse=2.0)],
    )
    result = calculator.calculate_budget(solar_project)
    assert result.monthly_data[0].solar_generation == 0.0
    assert result.monthly_data[5].solar_generation > 0.0
    assert result.reliability["solar"].data_available is False
    assert result.unreliable_sources == ["solar"]


def test_empty_wind_data_is_flagged(calculator):
    config = constant_project(5.0, 1.0)
    config.wind_generators.append(WindGenerator())
    config.wind_data = WindData(latitude=40.0, longitude=-70.0, monthly=[])
    result = calculator.calculate_budget(config)
    assert result.summary.wind_contribution == 0.0
    assert result.unreliable_sources == ["wind"]


def test_missing_wind_data_is_flagged(calculator):
    config = constant_project(5.0, 1.0)
    config.wind_generators.append(WindGenerator())
    result = calculator.calculate_budget(config)
    assert result.reliability["wind"].configured is True
    assert result.reliability["wind"].data_available is False
    assert result.summary.wind_contribution == 0.0


def test_reliable_when_data_present(calculator, solar_project):
    result = calculator.calculate_budget(solar_project)
    assert result.unreliable_sources == []
    assert result.reliability["wind"].configured is False


def test_wind_contribution(calculator):
    config = constant_project(5.0, 0.0)
    config.wind_generators.append(WindGenerator(rated_power=400.0))
    config.wind_data = WindData(
        latitude=40.0,
        longitude=-70.0,
        monthly=[WindMonth(month=m, avg_wind_speed=15.0, min_wind_speed=7.5, max_wind_speed=27.0) for m in range(1, 13)],
    )
    result = calculator.calculate_budget(config)
    assert result.monthly_data[0].wind_generation == pytest.approx(400.0 * 24 * 31)
    assert result.summary.wind_contribution == pytest.approx(400.0 * 24 * 365)


# ---------------------------------------------------------------------------
# simulate_soc
# ---------------------------------------------------------------------------


def test_simulate_soc_uses_usable_capacity(calculator, solar_project):
    budget, trace = calculator.simulate_soc(solar_project)
    assert trace.capacity_wh == pytest.approx(budget.summary.battery_capacity)
    assert len(trace) == 365


def test_simulate_soc_custom_simulator(calculator, solar_project):
    _, trace = calculator.simulate_soc(solar_project, BatterySOCSimulator(initial_soc=50.0))
    assert trace.initial_soc == 50.0


def test_simulate_soc_without_battery_rejected(calculator):
    with pytest.raises(ValidationError, match="usable battery capacity"):
        calculator.simulate_soc(constant_project(5.0, 10.0))
