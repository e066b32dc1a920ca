"""JSON import/export of project configurations.

The document layout matches the files written by earlier versions of the
tool: camelCase keys, batteries keyed by ``type``, monthly environmental
data under ``monthlyData``.  Documents are validated with pydantic before
being turned into domain dataclasses, so ``import_project(export_project(c))``
reproduces ``c`` exactly.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as SchemaError
from pydantic.alias_generators import to_camel

from lib.time_util import timestamp_slug
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
    new_id,
)
from powerbudget.errors import ProjectFormatError

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Document schema
# ---------------------------------------------------------------------------


class _Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LocationDocument(_Document):
    latitude: float = 38.0
    longitude: float = -70.0
    name: str = "Unknown"


class LoadDocument(_Document):
    id: str = Field(default_factory=lambda: new_id("load"))
    name: str = ""
    power_on: float = Field(0.0, ge=0)
    power_idle: float = Field(0.0, ge=0)
    duty_cycle: float = Field(100.0, ge=0, le=100)


class BatteryDocument(_Document):
    id: str = Field(default_factory=lambda: new_id("battery"))
    chemistry: Literal["Lead-Acid", "AGM", "Gel", "Lithium-Ion", "LiFePO4"] = Field("Lead-Acid", alias="type")
    voltage: float = Field(12.0, gt=0)
    capacity_ah: float = Field(100.0, ge=0)
    quantity: int = Field(1, ge=1)
    depth_of_discharge: Optional[float] = Field(None, ge=0, le=100)


class SolarPanelDocument(_Document):
    id: str = Field(default_factory=lambda: new_id("solar"))
    power_rating: float = Field(100.0, ge=0)
    tilt_angle: float = 0.0
    azimuth: float = 180.0
    efficiency: float = Field(17.0, ge=0, le=100)
    area: Optional[float] = Field(None, ge=0)
    temperature_coefficient: float = -0.4
    noct: float = 45.0


class WindGeneratorDocument(_Document):
    id: str = Field(default_factory=lambda: new_id("wind"))
    name: str = "Custom"
    rated_power: float = Field(400.0, ge=0)
    cut_in_speed: float = 3.0
    rated_speed: float = 12.5
    cut_out_speed: float = 25.0
    power_curve: Optional[list[tuple[float, float]]] = None
    hub_height: Optional[float] = Field(None, gt=0)


class OtherSourceDocument(_Document):
    id: str = Field(default_factory=lambda: new_id("other"))
    name: str = ""
    average_power: float = Field(0.0, ge=0)


class SolarMonthDocument(_Document):
    month: int = Field(ge=1, le=12)
    ghi: float = Field(ge=0)
    diffuse: float = Field(ge=0)
    temperature: Optional[float] = None

    @model_validator(mode="after")
    def _diffuse_within_global(self) -> "SolarMonthDocument":
        if self.diffuse > self.ghi:
            raise ValueError(f"month {self.month}: diffuse ({self.diffuse}) exceeds ghi ({self.ghi})")
        return self


class SolarDataDocument(_Document):
    latitude: float
    longitude: float
    monthly: list[SolarMonthDocument] = Field(alias="monthlyData")
    fetched_at: Optional[str] = None
    source: str = "Manual input"


class WindMonthDocument(_Document):
    month: int = Field(ge=1, le=12)
    avg_wind_speed: float = Field(ge=0)
    min_wind_speed: float = Field(ge=0)
    max_wind_speed: float = Field(ge=0)


class WindDataDocument(_Document):
    latitude: float
    longitude: float
    monthly: list[WindMonthDocument] = Field(alias="monthlyData")
    fetched_at: Optional[str] = None
    source: str = "Manual input"
    measurement_height: Optional[float] = Field(None, gt=0)


class ProjectDocument(_Document):
    project_name: str = "Imported Project"
    location: LocationDocument = Field(default_factory=LocationDocument)
    loads: list[LoadDocument] = Field(default_factory=list)
    batteries: list[BatteryDocument] = Field(default_factory=list)
    solar_panels: list[SolarPanelDocument] = Field(default_factory=list)
    wind_generators: list[WindGeneratorDocument] = Field(default_factory=list)
    other_sources: list[OtherSourceDocument] = Field(default_factory=list)
    solar_data: Optional[SolarDataDocument] = None
    wind_data: Optional[WindDataDocument] = None

    @classmethod
    def from_config(cls, config: ProjectConfig) -> "ProjectDocument":
        return cls.model_validate(asdict(config))

    def to_config(self) -> ProjectConfig:
        solar_data = None
        if self.solar_data is not None:
            solar_data = SolarData(
                latitude=self.solar_data.latitude,
                longitude=self.solar_data.longitude,
                monthly=[SolarMonth(**m.model_dump()) for m in self.solar_data.monthly],
                fetched_at=self.solar_data.fetched_at,
                source=self.solar_data.source,
            )

        wind_data = None
        if self.wind_data is not None:
            wind_data = WindData(
                latitude=self.wind_data.latitude,
                longitude=self.wind_data.longitude,
                monthly=[WindMonth(**m.model_dump()) for m in self.wind_data.monthly],
                fetched_at=self.wind_data.fetched_at,
                source=self.wind_data.source,
                measurement_height=self.wind_data.measurement_height,
            )

        return ProjectConfig(
            project_name=self.project_name,
            location=Location(**self.location.model_dump()),
            loads=[Load(**d.model_dump()) for d in self.loads],
            batteries=[Battery(**d.model_dump()) for d in self.batteries],
            solar_panels=[SolarPanel(**d.model_dump()) for d in self.solar_panels],
            wind_generators=[WindGenerator(**d.model_dump()) for d in self.wind_generators],
            other_sources=[OtherSource(**d.model_dump()) for d in self.other_sources],
            solar_data=solar_data,
            wind_data=wind_data,
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def export_project(config: ProjectConfig) -> str:
    """Serialise *config* to an indented JSON document."""
    return ProjectDocument.from_config(config).model_dump_json(by_alias=True, indent=2)


def import_project(text: Union[str, bytes]) -> ProjectConfig:
    """Parse a JSON project document.

    Raises:
        ProjectFormatError: If the document is not valid JSON, does not match
                            the schema, or repeats an id within a collection.
    """
    try:
        document = ProjectDocument.model_validate_json(text)
        config = document.to_config()
    except (SchemaError, ValueError) as exc:
        raise ProjectFormatError(f"invalid project document: {exc}") from exc

    duplicates = config.duplicate_ids()
    if duplicates:
        listed = ", ".join(f"{name}:{item_id}" for name, item_id in duplicates)
        raise ProjectFormatError(f"duplicate ids in project document: {listed}")

    return config


def save_project(config: ProjectConfig, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(export_project(config), encoding="utf-8")
    log.info("Saved project %r to %s", config.project_name, path)
    return path


def load_project(path: Union[str, Path]) -> ProjectConfig:
    path = Path(path)
    config = import_project(path.read_text(encoding="utf-8"))
    log.info("Loaded project %r from %s", config.project_name, path)
    return config


def export_filename(config: ProjectConfig, now: Optional[datetime] = None) -> str:
    """Human-readable export file name, e.g. ``North_Buoy_2026-03-01_14-05.json``."""
    safe_name = re.sub(r"[^a-zA-Z0-9]", "_", config.project_name)
    return f"{safe_name}_{timestamp_slug(now or datetime.now())}.json"
