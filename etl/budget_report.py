"""Job: compute and log the power budget and battery state of charge for a
project file.

Run from the repository root::

    python -m etl.budget_report path/to/project.json [--rayleigh] [--strict]
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from lib.types import BudgetResult, SOCTrace
from lib.time_util import month_name
from powerbudget.config import settings
from powerbudget.errors import DataUnavailableError
from powerbudget.services.budget import PowerBudgetCalculator
from powerbudget.services.project_io import load_project
from powerbudget.simulators.battery_soc import BatterySOCSimulator

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger("etl.budget_report")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _log_budget(budget: BudgetResult) -> None:
    log.info("%-5s %10s %10s %10s %12s %10s", "Month", "Solar", "Wind", "Other", "Consumption", "Net")
    for row in budget.monthly_data:
        log.info(
            "%-5s %10.0f %10.0f %10.0f %12.0f %+10.0f%s",
            month_name(row.month),
            row.solar_generation,
            row.wind_generation,
            row.other_generation,
            row.consumption,
            row.net_energy,
            "" if row.surplus else "  DEFICIT",
        )

    s = budget.summary
    log.info("Annual generation:  %.0f Wh", s.annual_generation)
    log.info("Annual consumption: %.0f Wh", s.annual_consumption)
    log.info("Net annual:         %+.0f Wh", s.net_annual)
    log.info("Usable battery:     %.0f Wh (%.1f days autonomy)", s.battery_capacity, s.autonomy_days)

    if s.system_adequate:
        log.info("System adequate in every month.")
    else:
        log.warning(
            "Power deficit in worst month (%s): %.0f Wh shortage",
            month_name(s.worst_month.month),
            abs(s.worst_month.net_energy),
        )


def _log_trace(trace: SOCTrace) -> None:
    log.info("Minimum state of charge: %.1f %%", trace.min_soc)
    if trace.depleted_days:
        log.warning(
            "Battery empty on %d day(s); %.0f Wh of load unmet.",
            len(trace.depleted_days),
            trace.unmet_energy_wh,
        )


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def run(project_path: Path, rayleigh: bool = False, strict: bool = False) -> BudgetResult:
    config = load_project(project_path)
    log.info("Power budget for %r", config.project_name)

    calculator = PowerBudgetCalculator(
        system_efficiency=settings.SYSTEM_EFFICIENCY,
        default_ambient_temp=settings.DEFAULT_AMBIENT_TEMP,
        wind_averaging="rayleigh" if rayleigh else settings.WIND_AVERAGING,
    )
    budget = calculator.calculate_budget(config)

    if strict and budget.unreliable_sources:
        raise DataUnavailableError(budget.unreliable_sources[0])

    _log_budget(budget)

    if budget.summary.battery_capacity > 0:
        _log_trace(BatterySOCSimulator().simulate(budget, budget.summary.battery_capacity))
    else:
        log.warning("No battery capacity configured; skipping state-of-charge simulation.")

    return budget


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Print the monthly power budget for a project file.")
    parser.add_argument("project", type=Path, help="Project JSON file")
    parser.add_argument(
        "--rayleigh",
        action="store_true",
        help="Average wind power over a Rayleigh speed distribution",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a configured source has no measured data",
    )
    args = parser.parse_args()

    if not args.project.exists():
        print(f"Project file not found: {args.project}", file=sys.stderr)
        sys.exit(1)

    try:
        run(args.project, rayleigh=args.rayleigh, strict=args.strict)
    except Exception as exc:
        log.exception("Budget report failed: %s", exc)
        sys.exit(1)
