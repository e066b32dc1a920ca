from __future__ import annotations

import logging
import math

from lib.constants import DAYS_IN_YEAR, MONTHS_IN_YEAR
from lib.time_util import days_in_month
from lib.types import (
    BudgetResult,
    BudgetSummary,
    MonthlyBudgetRow,
    ProjectConfig,
    SOCTrace,
    SourceReliability,
    WindAveraging,
)
from powerbudget.errors import ValidationError
from powerbudget.services.aggregates import BatteryBank, LoadAggregator, other_sources_daily_energy
from powerbudget.simulators.battery_soc import BatterySOCSimulator
from powerbudget.simulators.solar import SolarSimulator
from powerbudget.simulators.wind import WindSimulator

log = logging.getLogger(__name__)


class PowerBudgetCalculator:
    """Combine loads, storage and generation into a 12-month energy budget.

    The calculator holds only model parameters; every call takes the
    project explicitly and recomputes from scratch.

    Args:
        system_efficiency:    PV balance-of-system factor in (0, 1].
        default_ambient_temp: Ambient temperature (°C) for months whose
                              solar data carries none.
        wind_averaging:       ``"mean"`` or ``"rayleigh"``, see
                              :class:`WindSimulator`.
    """

    def __init__(
        self,
        system_efficiency: float = 0.85,
        default_ambient_temp: float = 25.0,
        wind_averaging: WindAveraging = "mean",
    ) -> None:
        self.solar = SolarSimulator(
            system_efficiency=system_efficiency,
            default_ambient_temp=default_ambient_temp,
        )
        self.wind = WindSimulator(averaging=wind_averaging)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(config: ProjectConfig) -> None:
        if not config.loads:
            raise ValidationError("at least one load must be configured")
        if not config.has_generation:
            raise ValidationError("at least one power source (solar, wind, or other) must be configured")

        duplicates = config.duplicate_ids()
        if duplicates:
            listed = ", ".join(f"{name}:{item_id}" for name, item_id in duplicates)
            raise ValidationError(f"duplicate ids in project: {listed}")

    @staticmethod
    def _reliability(config: ProjectConfig) -> dict[str, SourceReliability]:
        flags = {
            "solar": SourceReliability(
                source="solar",
                configured=bool(config.solar_panels),
                data_available=config.solar_data is not None and config.solar_data.is_complete,
            ),
            "wind": SourceReliability(
                source="wind",
                configured=bool(config.wind_generators),
                data_available=config.wind_data is not None and config.wind_data.is_complete,
            ),
        }
        for flag in flags.values():
            if not flag.reliable:
                log.warning(
                    "%s sources are configured but %s data is missing or incomplete; uncovered months contribute zero.",
                    flag.source.capitalize(),
                    flag.source,
                )
        return flags

    @staticmethod
    def _row(month: int, solar: float, wind: float, other: float, consumption: float) -> MonthlyBudgetRow:
        total = solar + wind + other
        net = total - consumption
        return MonthlyBudgetRow(
            month=month,
            solar_generation=solar,
            wind_generation=wind,
            other_generation=other,
            total_generation=total,
            consumption=consumption,
            net_energy=net,
            surplus=net >= 0,
            percent_of_demand=total / consumption * 100.0 if consumption > 0 else 0.0,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate_budget(self, config: ProjectConfig) -> BudgetResult:
        """Build the monthly budget and annual summary for *config*.

        Raises:
            ValidationError: If there are no loads, no generation sources,
                             or ids repeat within a collection.
            NumericDomainError: If the site latitude or a panel tilt is
                                physically invalid.
        """
        self._validate(config)
        reliability = self._reliability(config)

        latitude = config.location.latitude
        solar_gen = self.solar.monthly_generation(config.solar_panels, config.solar_data, latitude)
        wind_gen = self.wind.monthly_generation(config.wind_generators, config.wind_data)

        loads = LoadAggregator(config.loads)
        daily_consumption = loads.total_daily_energy
        daily_other = other_sources_daily_energy(config.other_sources)

        rows: list[MonthlyBudgetRow] = []
        for month in range(1, MONTHS_IN_YEAR + 1):
            days = days_in_month(month)
            rows.append(
                self._row(
                    month,
                    solar=solar_gen[month - 1],
                    wind=wind_gen[month - 1],
                    other=daily_other * days,
                    consumption=daily_consumption * days,
                )
            )

        annual_generation = sum(r.total_generation for r in rows)
        annual_consumption = sum(r.consumption for r in rows)
        battery_capacity = BatteryBank(config.batteries).usable_capacity

        avg_daily_consumption = annual_consumption / DAYS_IN_YEAR
        autonomy_days = battery_capacity / avg_daily_consumption if avg_daily_consumption > 0 else math.inf

        # min() keeps the first of equal rows, so ties go to the earlier month
        worst_month = min(rows, key=lambda r: r.net_energy)

        summary = BudgetSummary(
            annual_generation=annual_generation,
            annual_consumption=annual_consumption,
            net_annual=annual_generation - annual_consumption,
            solar_contribution=sum(solar_gen),
            wind_contribution=sum(wind_gen),
            other_contribution=sum(r.other_generation for r in rows),
            battery_capacity=battery_capacity,
            autonomy_days=autonomy_days,
            worst_month=worst_month,
            system_adequate=all(r.surplus for r in rows),
        )

        log.debug(
            "Budget for %r: generation %.0f Wh, consumption %.0f Wh, adequate=%s",
            config.project_name,
            annual_generation,
            annual_consumption,
            summary.system_adequate,
        )

        return BudgetResult(summary=summary, monthly_data=rows, reliability=reliability)

    def simulate_soc(
        self,
        config: ProjectConfig,
        simulator: BatterySOCSimulator | None = None,
    ) -> tuple[BudgetResult, SOCTrace]:
        """Run the budget and replay it against the project's usable battery capacity."""
        budget = self.calculate_budget(config)
        simulator = simulator or BatterySOCSimulator()
        return budget, simulator.simulate(budget, budget.summary.battery_capacity)
