from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Literal, Optional, Sequence

from lib.constants import MONTHS_IN_YEAR
from lib.time_util import representative_day
from lib.types import WindData, WindMonth

LocationType = Literal["offshore", "coastal", "inland"]

# Typical annual mean wind speeds (m/s)
BASE_WIND_SPEEDS: dict[str, float] = {
    "offshore": 7.0,
    "coastal": 5.5,
    "inland": 4.0,
}
_UNKNOWN_LOCATION_SPEED = 6.0
_MIN_AVG_SPEED = 2.0
_MAX_FACTOR = 1.8
_MIN_FACTOR = 0.5


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def _month(month: int, avg: float) -> WindMonth:
    return WindMonth(
        month=month,
        avg_wind_speed=avg,
        min_wind_speed=avg * _MIN_FACTOR,
        max_wind_speed=avg * _MAX_FACTOR,
    )


def manual_wind_data(
    latitude: float,
    longitude: float,
    monthly_speeds: Sequence[float],
    measurement_height: Optional[float] = None,
) -> WindData:
    """Build wind data from twelve user-entered monthly averages (m/s).

    Minimum and maximum speeds are estimated as 0.5× and 1.8× the average.

    Raises:
        ValueError: Unless exactly twelve non-negative values are given.
    """
    if len(monthly_speeds) != MONTHS_IN_YEAR:
        raise ValueError("Must provide 12 monthly wind speed values")
    if any(speed < 0 for speed in monthly_speeds):
        raise ValueError("wind speeds must not be negative")

    return WindData(
        latitude=latitude,
        longitude=longitude,
        monthly=[_month(i + 1, float(speed)) for i, speed in enumerate(monthly_speeds)],
        fetched_at=_now_iso(),
        source="Manual input",
        measurement_height=measurement_height,
    )


def fallback_wind_data(
    latitude: float,
    longitude: float,
    location_type: str = "offshore",
) -> WindData:
    """Estimate monthly wind speeds from the kind of site alone.

    Winds are taken 20 % stronger in local winter and 20 % weaker in local
    summer, with a floor of 2 m/s on the monthly average.
    """
    base = BASE_WIND_SPEEDS.get(location_type, _UNKNOWN_LOCATION_SPEED)

    monthly: list[WindMonth] = []
    for month in range(1, MONTHS_IN_YEAR + 1):
        summer = math.cos((representative_day(month) - 172) * 2.0 * math.pi / 365.0)
        if latitude < 0:
            summer = -summer
        avg = max(base * (1.0 - 0.2 * summer), _MIN_AVG_SPEED)
        monthly.append(_month(month, avg))

    return WindData(
        latitude=latitude,
        longitude=longitude,
        monthly=monthly,
        fetched_at=_now_iso(),
        source=f"Estimated ({location_type})",
    )
