"""Solar position geometry.

All angles are in degrees.  Azimuths follow the compass convention used for
panel orientation (0 = N, 90 = E, 180 = S, 270 = W).

Declination (Cooper, 1969):

    δ = 23.45 × sin(360/365 × (n − 81))

Altitude of the sun above the horizon:

    sin α = sin φ sin δ + cos φ cos δ cos ω

Azimuth:

    cos γs = (sin δ − sin α sin φ) / (cos α cos φ)

mirrored to ``360 − γs`` in the afternoon (ω > 0).

Angle of incidence on a surface tilted β and facing γ:

    cos θ = sin α cos β + cos α sin β cos(γs − γ)

Every inverse-trig argument is clamped to [-1, 1] so that rounding near the
poles, the zenith or the horizon never produces NaN.
"""

from __future__ import annotations

import math
from functools import lru_cache

from lib.constants import DAYS_IN_YEAR, MAX_DECLINATION


def _clamp_unit(x: float) -> float:
    return max(-1.0, min(1.0, x))


def _safe_ratio(numerator: float, denominator: float) -> float:
    # A vanishing denominator means the angle is undefined; pick the limit
    # that keeps the ratio in range.
    if abs(denominator) < 1e-12:
        return 1.0 if numerator >= 0 else -1.0
    return _clamp_unit(numerator / denominator)


@lru_cache(maxsize=DAYS_IN_YEAR + 1)
def declination(day_of_year: int) -> float:
    """Solar declination (degrees) for a 1-based day of year."""
    return MAX_DECLINATION * math.sin(math.radians(360.0 / DAYS_IN_YEAR * (day_of_year - 81)))


def hour_angle(solar_time: float) -> float:
    """Hour angle (degrees) for a solar time in hours; negative before noon."""
    return 15.0 * (solar_time - 12.0)


def altitude(latitude: float, decl: float, hour_angle_deg: float) -> float:
    lat = math.radians(latitude)
    dec = math.radians(decl)
    ha = math.radians(hour_angle_deg)

    sin_alt = math.sin(lat) * math.sin(dec) + math.cos(lat) * math.cos(dec) * math.cos(ha)
    return math.degrees(math.asin(_clamp_unit(sin_alt)))


def azimuth(latitude: float, decl: float, hour_angle_deg: float, altitude_deg: float) -> float:
    lat = math.radians(latitude)
    dec = math.radians(decl)
    alt = math.radians(altitude_deg)

    cos_az = _safe_ratio(
        math.sin(dec) - math.sin(alt) * math.sin(lat),
        math.cos(alt) * math.cos(lat),
    )
    result = math.degrees(math.acos(cos_az))

    if hour_angle_deg > 0:
        result = 360.0 - result
    return result


def incidence_angle(
    tilt: float,
    panel_azimuth: float,
    solar_altitude: float,
    solar_azimuth: float,
) -> float:
    """Angle (degrees) between the sun vector and the panel normal."""
    beta = math.radians(tilt)
    alt = math.radians(solar_altitude)
    az_diff = math.radians(solar_azimuth - panel_azimuth)

    cos_theta = math.sin(alt) * math.cos(beta) + math.cos(alt) * math.sin(beta) * math.cos(az_diff)
    return math.degrees(math.acos(_clamp_unit(cos_theta)))


def sun_position(latitude: float, day_of_year: int, solar_time: float) -> tuple[float, float]:
    """Return ``(altitude, azimuth)`` of the sun for a day and solar time."""
    decl = declination(day_of_year)
    ha = hour_angle(solar_time)
    alt = altitude(latitude, decl, ha)
    return alt, azimuth(latitude, decl, ha, alt)
