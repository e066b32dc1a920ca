"""Wind generator energy simulator.

Power curve
-----------
Unless a generator carries its own tabulated curve, output follows the
standard piecewise model:

    P(v) = 0                                           v < v_ci
    P(v) = P_r × (v³ − v_ci³) / (v_r³ − v_ci³)         v_ci ≤ v < v_r
    P(v) = P_r                                         v_r ≤ v ≤ v_co
    P(v) = 0                                           v > v_co

A tabulated curve of ``(speed, power)`` points is linearly interpolated and
still forced to zero outside ``[v_ci, v_co]``.

Monthly energy
--------------
By default the curve is evaluated at the month's average wind speed.  The
``"rayleigh"`` mode instead takes the expectation of the curve over a
Rayleigh distribution (Weibull, k = 2) with that mean, which accounts for
the cubic response to gusts.

When both the generator's hub height and the measurement height are known
the average speed is first extrapolated with the power-law wind profile

    v_hub = v_ref × (h_hub / h_ref) ^ α,   α = 0.14 (open water)
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from lib.constants import HOURS_IN_DAY, MONTHS_IN_YEAR
from lib.time_util import days_in_month
from lib.types import WindAveraging, WindData, WindGenerator

log = logging.getLogger(__name__)

_OPEN_WATER_SHEAR = 0.14
_RAYLEIGH_MAX_SPEED = 40.0  # m/s, upper integration bound
_RAYLEIGH_STEPS = 400


def adjust_for_height(
    wind_speed: float,
    reference_height: float,
    target_height: float,
    alpha: float = _OPEN_WATER_SHEAR,
) -> float:
    if reference_height <= 0 or target_height <= 0:
        raise ValueError("heights must be positive")
    return wind_speed * (target_height / reference_height) ** alpha


def _interpolate_curve(curve: Sequence[tuple[float, float]], wind_speed: float) -> float:
    for (v1, p1), (v2, p2) in zip(curve, curve[1:]):
        if v1 <= wind_speed <= v2:
            if v2 == v1:
                return p2
            return p1 + (wind_speed - v1) / (v2 - v1) * (p2 - p1)
    return 0.0


def power_at_wind_speed(generator: WindGenerator, wind_speed: float) -> float:
    """Electrical output (W) of *generator* at a steady *wind_speed* (m/s)."""
    if wind_speed < generator.cut_in_speed or wind_speed > generator.cut_out_speed:
        return 0.0

    if generator.power_curve:
        return max(0.0, _interpolate_curve(generator.power_curve, wind_speed))

    if wind_speed >= generator.rated_speed:
        return generator.rated_power

    v_ci3 = generator.cut_in_speed ** 3
    fraction = (wind_speed ** 3 - v_ci3) / (generator.rated_speed ** 3 - v_ci3)
    return generator.rated_power * fraction


def rayleigh_average_power(generator: WindGenerator, mean_speed: float) -> float:
    """Expected output (W) when wind speed is Rayleigh distributed around *mean_speed*."""
    if mean_speed <= 0:
        return 0.0

    # Weibull k=2 scale from the mean: c = v̄ / Γ(1.5)
    c = mean_speed / math.gamma(1.5)
    dv = _RAYLEIGH_MAX_SPEED / _RAYLEIGH_STEPS

    total = 0.0
    for i in range(_RAYLEIGH_STEPS):
        v = (i + 0.5) * dv
        pdf = (2.0 * v / c ** 2) * math.exp(-((v / c) ** 2))
        total += power_at_wind_speed(generator, v) * pdf * dv
    return total


def monthly_energy(generator: WindGenerator, avg_speed: float, days: int) -> float:
    """Energy (Wh) over *days* at a steady *avg_speed*."""
    return power_at_wind_speed(generator, avg_speed) * HOURS_IN_DAY * days


class WindSimulator:
    """Estimate monthly wind energy for a set of generators.

    Args:
        averaging: ``"mean"`` evaluates the power curve at the monthly
                   average speed; ``"rayleigh"`` integrates it over a
                   Rayleigh speed distribution.
    """

    def __init__(self, averaging: WindAveraging = "mean") -> None:
        if averaging not in ("mean", "rayleigh"):
            raise ValueError(f"averaging must be 'mean' or 'rayleigh', got {averaging!r}")
        self.averaging = averaging

    def _hub_speed(self, generator: WindGenerator, wind_speed: float, measurement_height: Optional[float]) -> float:
        if generator.hub_height is None or measurement_height is None:
            return wind_speed
        return adjust_for_height(wind_speed, measurement_height, generator.hub_height)

    def average_power(
        self,
        generator: WindGenerator,
        mean_speed: float,
        measurement_height: Optional[float] = None,
    ) -> float:
        speed = self._hub_speed(generator, mean_speed, measurement_height)
        if self.averaging == "rayleigh":
            return rayleigh_average_power(generator, speed)
        return power_at_wind_speed(generator, speed)

    def monthly_generation(
        self,
        generators: Sequence[WindGenerator],
        wind_data: Optional[WindData],
    ) -> list[float]:
        """Total energy (Wh) of all *generators* for each month, January first."""
        totals = [0.0] * MONTHS_IN_YEAR
        if wind_data is None or not generators:
            return totals

        for month in range(1, MONTHS_IN_YEAR + 1):
            month_data = wind_data.for_month(month)
            if month_data is None:
                log.warning("No wind data for month %d; assuming zero generation.", month)
                continue

            power = sum(
                self.average_power(g, month_data.avg_wind_speed, wind_data.measurement_height)
                for g in generators
            )
            totals[month - 1] = power * HOURS_IN_DAY * days_in_month(month)

        return totals
