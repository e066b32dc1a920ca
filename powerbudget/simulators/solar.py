"""Monthly solar energy simulator.

Converts monthly-average horizontal irradiation (GHI and diffuse, in
kWh/m²/day) into the energy a set of tilted PV panels delivers each month.

Model
-----
The production model has three stages:

1.  **Horizontal → plane of array** using an isotropic-sky transposition
    evaluated on a single representative day per month:

        H_t = (H − H_d) × R_b  +  H_d × (1 + cos β) / 2  +  H × ρ × (1 − cos β) / 2

    with ground albedo ``ρ = 0.2``.  The beam ratio is the monthly-average
    proxy

        R_b = [sin(φ−β) sin δ + cos(φ−β) cos δ] / [sin φ sin δ + cos φ cos δ]

    clamped at zero, so a tilt facing away from the sun contributes no beam.
    This is a monthly-average approximation, not an hourly integral.

2.  **Temperature derating**.  Because ``H_t`` in kWh/m²/day equals the
    number of peak sun hours (hours at 1000 W/m²), cells are assumed to run
    at STC irradiance during those hours.  Cell temperature follows the NOCT
    approximation

        T_cell = T_amb + (NOCT − 20) × (G / 1000)

    and the derating factor is

        f_temp = max(0, 1 + γ/100 × (T_cell − 25))

    with ``γ`` in %/°C (−0.4 for crystalline silicon).

3.  **System losses** are captured by a single efficiency factor
    (0.85 by default: wiring, soiling, charge controller).

Combined, per panel and month:

    E = P_rated × H_t × f_temp × η_sys × days_in_month      [Wh]
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from lib.constants import G_STC, GROUND_ALBEDO, MONTHS_IN_YEAR, NOCT_AMBIENT, T_STC
from lib.solar_geometry import declination
from lib.time_util import days_in_month, representative_day
from lib.types import SolarData, SolarPanel
from powerbudget.errors import NumericDomainError

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Irradiance on a tilted plane
# ---------------------------------------------------------------------------


def _check_geometry(latitude: float, tilt: float) -> None:
    if not -90.0 <= latitude <= 90.0:
        raise NumericDomainError(f"latitude must be in [-90, 90], got {latitude}")
    if not 0.0 <= tilt <= 90.0:
        raise NumericDomainError(f"tilt must be in [0, 90], got {tilt}")


def beam_ratio(tilt: float, latitude: float, day_of_year: int) -> float:
    """Monthly-average beam transposition ratio R_b, floored at zero."""
    lat = math.radians(latitude)
    beta = math.radians(tilt)
    dec = math.radians(declination(day_of_year))

    cos_zenith = math.sin(lat) * math.sin(dec) + math.cos(lat) * math.cos(dec)
    cos_tilted = math.sin(lat - beta) * math.sin(dec) + math.cos(lat - beta) * math.cos(dec)

    if cos_zenith <= 0.0:
        # sun never clears the horizon on the representative day
        return 0.0
    return max(0.0, cos_tilted / cos_zenith)


def irradiance_on_tilt(
    ghi: float,
    diffuse: float,
    tilt: float,
    panel_azimuth: float,
    latitude: float,
    day_of_year: int,
) -> float:
    """Estimate plane-of-array irradiation from horizontal values.

    Output is in the same unit as ``ghi`` (kWh/m²/day for monthly data).
    ``panel_azimuth`` is accepted for interface symmetry; the monthly proxy
    assumes an equator-facing panel.

    Raises:
        NumericDomainError: If latitude or tilt is physically invalid.
    """
    _check_geometry(latitude, tilt)

    direct = max(ghi - diffuse, 0.0)
    beta = math.radians(tilt)

    tilted_direct = direct * beam_ratio(tilt, latitude, day_of_year)
    tilted_diffuse = diffuse * (1.0 + math.cos(beta)) / 2.0
    ground_reflected = ghi * GROUND_ALBEDO * (1.0 - math.cos(beta)) / 2.0

    return tilted_direct + tilted_diffuse + ground_reflected


# ---------------------------------------------------------------------------
# Thermal derating
# ---------------------------------------------------------------------------


def estimate_cell_temperature(ambient_temp: float, irradiance: float, noct: float = 45.0) -> float:
    """Estimate cell temperature (°C) with the linear NOCT model."""
    return ambient_temp + (noct - NOCT_AMBIENT) * (irradiance / G_STC)


def derating_factor(cell_temp: float, temp_coefficient: float = -0.4, stc_temp: float = T_STC) -> float:
    """Return the power multiplier for *cell_temp*; never negative."""
    return max(0.0, 1.0 + (temp_coefficient / 100.0) * (cell_temp - stc_temp))


def apply_derating(
    power: float,
    cell_temp: float,
    temp_coefficient: float = -0.4,
    stc_temp: float = T_STC,
) -> float:
    return power * derating_factor(cell_temp, temp_coefficient, stc_temp)


# ---------------------------------------------------------------------------
# Simulator
# ---------------------------------------------------------------------------


class SolarSimulator:
    """Estimate monthly PV energy for panels at one site.

    Args:
        system_efficiency:    Balance-of-system factor in (0, 1].
        default_ambient_temp: Ambient temperature (°C) used when the solar
                              data carries no monthly temperature.
    """

    def __init__(self, system_efficiency: float = 0.85, default_ambient_temp: float = 25.0) -> None:
        if not 0.0 < system_efficiency <= 1.0:
            raise ValueError("system_efficiency must be in (0, 1]")

        self.system_efficiency = system_efficiency
        self.default_ambient_temp = default_ambient_temp

    def daily_energy(
        self,
        panel: SolarPanel,
        ghi: float,
        diffuse: float,
        latitude: float,
        day_of_year: int,
        ambient_temp: Optional[float] = None,
    ) -> float:
        """Energy (Wh) one panel delivers on an average day."""
        peak_sun_hours = irradiance_on_tilt(
            ghi, diffuse, panel.tilt_angle, panel.azimuth, latitude, day_of_year
        )

        ambient = self.default_ambient_temp if ambient_temp is None else ambient_temp
        t_cell = estimate_cell_temperature(ambient, G_STC, panel.noct)
        power = apply_derating(panel.rated_power, t_cell, panel.temperature_coefficient)

        return power * peak_sun_hours * self.system_efficiency

    def monthly_generation(
        self,
        panels: Sequence[SolarPanel],
        solar_data: Optional[SolarData],
        latitude: float,
    ) -> list[float]:
        """Total energy (Wh) of all *panels* for each month, January first.

        Months without data, or a missing ``solar_data`` altogether, yield 0.
        """
        totals = [0.0] * MONTHS_IN_YEAR
        if solar_data is None or not panels:
            return totals

        for month in range(1, MONTHS_IN_YEAR + 1):
            month_data = solar_data.for_month(month)
            if month_data is None:
                log.warning("No solar data for month %d; assuming zero generation.", month)
                continue

            day = representative_day(month)
            daily = sum(
                self.daily_energy(
                    panel,
                    month_data.ghi,
                    month_data.diffuse,
                    latitude,
                    day,
                    month_data.temperature,
                )
                for panel in panels
            )
            totals[month - 1] = daily * days_in_month(month)

        return totals
