"""Client for the NASA POWER climatology API.

Docs: https://power.larc.nasa.gov/docs/services/api/temporal/climatology/
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Optional

import httpx

from lib.constants import MONTH_NAMES, MONTHS_IN_YEAR
from lib.time_util import representative_day
from lib.types import SolarData, SolarMonth

log = logging.getLogger(__name__)

BASE_URL = "https://power.larc.nasa.gov"
CLIMATOLOGY_PATH = "/api/temporal/climatology/point"

GHI_PARAM = "ALLSKY_SFC_SW_DWN"  # kWh/m²/day
DIFFUSE_PARAM = "ALLSKY_SFC_SW_DIFF"  # kWh/m²/day
TEMPERATURE_PARAM = "T2M"  # °C at 2 m
PARAMETERS = (GHI_PARAM, DIFFUSE_PARAM, TEMPERATURE_PARAM)

_FILL_VALUE = -999.0
SOURCE_NAME = "NASA POWER API"
FALLBACK_SOURCE_NAME = "Estimated (API unavailable)"


class NASAPowerError(Exception):
    """Raised when the NASA POWER API fails or returns an unusable body."""

    def __init__(self, status_code: Optional[int], message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"NASA POWER API error {status_code}: {message}")


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def _monthly_values(parameters: dict, name: str) -> list[Optional[float]]:
    series = parameters.get(name)
    if series is None:
        raise NASAPowerError(None, f"response is missing parameter {name}")

    values: list[Optional[float]] = []
    for abbrev in MONTH_NAMES:
        value = series.get(abbrev.upper())
        values.append(None if value is None or value <= _FILL_VALUE else float(value))
    return values


def parse_climatology(response: dict) -> SolarData:
    """Convert a climatology response body into :class:`SolarData`.

    Raises:
        NASAPowerError: If the body lacks GHI or diffuse values for any month.
    """
    try:
        parameters = response["properties"]["parameter"]
        lon, lat = response["geometry"]["coordinates"][:2]
    except (KeyError, TypeError, ValueError) as exc:
        raise NASAPowerError(None, f"unexpected response format: {exc}") from exc

    ghi = _monthly_values(parameters, GHI_PARAM)
    diffuse = _monthly_values(parameters, DIFFUSE_PARAM)
    temperature = (
        _monthly_values(parameters, TEMPERATURE_PARAM)
        if TEMPERATURE_PARAM in parameters
        else [None] * MONTHS_IN_YEAR
    )

    monthly: list[SolarMonth] = []
    for i in range(MONTHS_IN_YEAR):
        if ghi[i] is None or diffuse[i] is None:
            raise NASAPowerError(None, f"no irradiance value for {MONTH_NAMES[i]}")
        monthly.append(SolarMonth(month=i + 1, ghi=ghi[i], diffuse=diffuse[i], temperature=temperature[i]))

    return SolarData(
        latitude=float(lat),
        longitude=float(lon),
        monthly=monthly,
        fetched_at=_now_iso(),
        source=SOURCE_NAME,
    )


def fallback_solar_data(latitude: float, longitude: float = 0.0) -> SolarData:
    """Rough monthly irradiance estimate from the latitude band alone.

    A ±30 % cosine seasonal swing peaks at the local summer solstice;
    diffuse is taken as 30 % of GHI.
    """
    abs_lat = abs(latitude)
    if abs_lat < 25:
        base_ghi = 5.5  # tropical
    elif abs_lat < 40:
        base_ghi = 4.5  # subtropical
    elif abs_lat < 50:
        base_ghi = 3.5  # temperate
    else:
        base_ghi = 2.5

    monthly: list[SolarMonth] = []
    for month in range(1, MONTHS_IN_YEAR + 1):
        seasonal = math.cos((representative_day(month) - 172) * 2.0 * math.pi / 365.0)
        if latitude < 0:
            seasonal = -seasonal
        ghi = max(base_ghi * (1.0 + 0.3 * seasonal), 0.5)
        monthly.append(SolarMonth(month=month, ghi=ghi, diffuse=ghi * 0.3))

    return SolarData(
        latitude=latitude,
        longitude=longitude,
        monthly=monthly,
        fetched_at=_now_iso(),
        source=FALLBACK_SOURCE_NAME,
    )


class NASAPowerClient:
    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get(self, path: str, **params) -> dict:
        """Perform a GET request and return the parsed JSON body.

        Raises:
            NASAPowerError: on any non-2xx HTTP status or a non-JSON body.
        """
        response = self._client.get(path, params={k: v for k, v in params.items() if v is not None})
        if not response.is_success:
            raise NASAPowerError(response.status_code, response.text[:200])
        try:
            return response.json()
        except ValueError as exc:
            raise NASAPowerError(response.status_code, "response body is not JSON") from exc

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()

    def __enter__(self) -> "NASAPowerClient":
        return self

    def __exit__(self, *_) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Solar data
    # ------------------------------------------------------------------

    def get_solar_data(self, lat: float, lon: float) -> SolarData:
        log.info("Fetching NASA POWER climatology for (%.4f, %.4f)", lat, lon)
        body = self._get(
            CLIMATOLOGY_PATH,
            parameters=",".join(PARAMETERS),
            community="RE",
            latitude=f"{lat:.4f}",
            longitude=f"{lon:.4f}",
            format="JSON",
        )
        return parse_climatology(body)

    def get_solar_data_with_fallback(self, lat: float, lon: float) -> SolarData:
        """Fetch solar data, substituting a latitude estimate if the API fails."""
        try:
            return self.get_solar_data(lat, lon)
        except (NASAPowerError, httpx.HTTPError) as exc:
            log.warning("Using fallback solar data for (%.4f, %.4f): %s", lat, lon, exc)
            return fallback_solar_data(lat, lon)
