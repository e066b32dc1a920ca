"""Job: fetch monthly solar irradiance for a project's location from NASA
POWER and store it in the project file.

Run from the repository root::

    python -m etl.solar_data path/to/project.json
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from powerbudget.clients.nasa_power import NASAPowerClient, fallback_solar_data
from powerbudget.config import settings
from powerbudget.services.project_io import load_project, save_project

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger("etl.solar_data")

# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def run(project_path: Path, fallback_only: bool = False) -> None:
    config = load_project(project_path)
    lat = config.location.latitude
    lon = config.location.longitude

    if fallback_only:
        log.info("Estimating solar data for (%.4f, %.4f) without contacting NASA POWER.", lat, lon)
        data = fallback_solar_data(lat, lon)
    else:
        with NASAPowerClient(base_url=settings.NASA_POWER_BASE_URL, timeout=settings.HTTP_TIMEOUT) as client:
            data = client.get_solar_data_with_fallback(lat, lon)

    config.solar_data = data
    save_project(config, project_path)

    mean_ghi = sum(m.ghi for m in data.monthly) / len(data.monthly)
    log.info(
        "Stored solar data from %s, mean GHI %.2f kWh/m²/day.",
        data.source,
        mean_ghi,
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(
        description="Fetch monthly solar irradiance for a project's location and save it in the project file."
    )
    parser.add_argument("project", type=Path, help="Project JSON file")
    parser.add_argument(
        "--fallback",
        action="store_true",
        help="Skip the API and store a latitude-based estimate",
    )
    args = parser.parse_args()

    if not args.project.exists():
        print(f"Project file not found: {args.project}", file=sys.stderr)
        sys.exit(1)

    try:
        run(args.project, fallback_only=args.fallback)
    except Exception as exc:
        log.exception("Solar data job failed: %s", exc)
        sys.exit(1)
