"""Daily battery state-of-charge simulator.

Replays a monthly energy budget as a year of daily steps.  Each day of a
month receives an equal share of that month's net energy:

    E[n] = clamp(E[n-1] + net_month / days_in_month, 0, C_usable)
    SOC[n] = 100 × E[n] / C_usable

The bank starts at ``initial_soc`` (full by default) before day 1.

Clamping at the ceiling discards surplus that would overcharge the bank.
Clamping at the floor discards the shortfall: the unmet load is counted in
``unmet_energy_wh`` but is not owed by later days.  Setting
``carry_deficit=True`` switches to the stricter model where the shortfall
becomes a debt that later surplus must repay before the bank recharges.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from lib.constants import MONTHS_IN_YEAR
from lib.time_util import days_in_month
from lib.types import BudgetResult, SOCTrace
from powerbudget.errors import ValidationError

log = logging.getLogger(__name__)

# Charge at or below this fraction of capacity counts as empty
_EMPTY_TOLERANCE = 1e-9


@dataclass
class BatterySOCSimulator:
    initial_soc: float = 100.0
    carry_deficit: bool = False

    # ------------------------------------------------------------------ #
    # Validation                                                           #
    # ------------------------------------------------------------------ #

    def __post_init__(self) -> None:
        if not 0.0 <= self.initial_soc <= 100.0:
            raise ValueError("initial_soc must be in [0, 100]")

    # ------------------------------------------------------------------ #
    # Public API                                                           #
    # ------------------------------------------------------------------ #

    def simulate(self, budget: BudgetResult, usable_capacity_wh: float) -> SOCTrace:
        """Return one SOC sample per day of the year for *budget*.

        Raises:
            ValidationError: If the capacity is not positive or the budget
                             does not hold exactly twelve months.
        """
        if usable_capacity_wh <= 0:
            raise ValidationError("usable battery capacity must be positive to simulate state of charge")
        if len(budget.monthly_data) != MONTHS_IN_YEAR:
            raise ValidationError(
                f"budget must contain {MONTHS_IN_YEAR} months, got {len(budget.monthly_data)}"
            )

        charge = usable_capacity_wh * self.initial_soc / 100.0
        debt = 0.0
        unmet = 0.0

        soc: list[float] = []
        energy: list[float] = []
        depleted_days: list[int] = []

        for row in sorted(budget.monthly_data, key=lambda r: r.month):
            daily_net = row.net_energy / days_in_month(row.month)

            for _ in range(days_in_month(row.month)):
                delta = daily_net
                if self.carry_deficit and debt > 0.0 and delta > 0.0:
                    repaid = min(debt, delta)
                    debt -= repaid
                    delta -= repaid

                charge += delta
                if charge <= usable_capacity_wh * _EMPTY_TOLERANCE:
                    shortfall = max(-charge, 0.0)
                    unmet += shortfall
                    if self.carry_deficit:
                        debt += shortfall
                    charge = 0.0
                    depleted_days.append(len(soc) + 1)
                elif charge > usable_capacity_wh:
                    charge = usable_capacity_wh

                soc.append(100.0 * charge / usable_capacity_wh)
                energy.append(charge)

        if depleted_days:
            log.warning(
                "Battery depleted on %d day(s), first on day %d; %.0f Wh of load unmet.",
                len(depleted_days),
                depleted_days[0],
                unmet,
            )

        return SOCTrace(
            soc=soc,
            energy_wh=energy,
            depleted_days=depleted_days,
            unmet_energy_wh=unmet,
            initial_soc=self.initial_soc,
            capacity_wh=usable_capacity_wh,
        )
