from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Literal, Optional

from lib.constants import DEFAULT_DOD, HOURS_IN_DAY, MONTHS_IN_YEAR


BatteryChemistry = Literal["Lead-Acid", "AGM", "Gel", "Lithium-Ion", "LiFePO4"]
SourceKind = Literal["solar", "wind"]
WindAveraging = Literal["mean", "rayleigh"]


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Configuration entities
# ---------------------------------------------------------------------------


@dataclass
class Location:
    latitude: float = 38.0
    longitude: float = -70.0
    name: str = "Mid-Atlantic"


@dataclass
class Load:
    """An equipment load that alternates between ON and IDLE power."""

    name: str = ""
    power_on: float = 0.0  # W
    power_idle: float = 0.0  # W
    duty_cycle: float = 100.0  # % of time spent ON
    id: str = field(default_factory=lambda: new_id("load"))

    def __post_init__(self) -> None:
        if not 0.0 <= self.duty_cycle <= 100.0:
            raise ValueError("duty_cycle must be in [0, 100]")

    @property
    def average_power(self) -> float:
        on_time = self.duty_cycle / 100.0
        return self.power_on * on_time + self.power_idle * (1.0 - on_time)

    @property
    def daily_energy(self) -> float:
        """Energy drawn per day (Wh)."""
        return self.average_power * HOURS_IN_DAY


@dataclass
class Battery:
    """A bank of identical batteries.

    When ``depth_of_discharge`` is omitted it takes the chemistry default.
    """

    chemistry: BatteryChemistry = "Lead-Acid"
    voltage: float = 12.0
    capacity_ah: float = 100.0
    quantity: int = 1
    depth_of_discharge: Optional[float] = None  # %
    id: str = field(default_factory=lambda: new_id("battery"))

    def __post_init__(self) -> None:
        if self.chemistry not in DEFAULT_DOD:
            raise ValueError(f"unknown battery chemistry {self.chemistry!r}")
        if self.depth_of_discharge is None:
            self.depth_of_discharge = DEFAULT_DOD[self.chemistry]
        if not 0.0 <= self.depth_of_discharge <= 100.0:
            raise ValueError("depth_of_discharge must be in [0, 100]")

    @property
    def total_capacity(self) -> float:
        """Nameplate energy of the bank (Wh)."""
        return self.voltage * self.capacity_ah * self.quantity

    @property
    def usable_capacity(self) -> float:
        """Energy available before reaching the depth-of-discharge limit (Wh)."""
        return self.total_capacity * self.depth_of_discharge / 100.0

    def with_chemistry(self, chemistry: BatteryChemistry) -> Battery:
        """Return a copy switched to *chemistry* with that chemistry's default DoD."""
        if chemistry not in DEFAULT_DOD:
            raise ValueError(f"unknown battery chemistry {chemistry!r}")
        return replace(self, chemistry=chemistry, depth_of_discharge=DEFAULT_DOD[chemistry])


@dataclass
class SolarPanel:
    power_rating: float = 100.0  # W at STC
    tilt_angle: float = 0.0  # degrees from horizontal
    azimuth: float = 180.0  # degrees, 0=N 90=E 180=S 270=W
    efficiency: float = 17.0  # %
    area: Optional[float] = None  # m²
    temperature_coefficient: float = -0.4  # %/°C
    noct: float = 45.0  # °C
    id: str = field(default_factory=lambda: new_id("solar"))

    @property
    def rated_power(self) -> float:
        """STC power (W), derived from area and efficiency when no rating is set."""
        if self.power_rating > 0 or self.area is None:
            return self.power_rating
        return self.area * self.efficiency / 100.0 * 1000.0


@dataclass
class WindGenerator:
    name: str = "Custom"
    rated_power: float = 400.0  # W
    cut_in_speed: float = 3.0  # m/s
    rated_speed: float = 12.5  # m/s
    cut_out_speed: float = 25.0  # m/s
    power_curve: Optional[list[tuple[float, float]]] = None  # (m/s, W) pairs
    hub_height: Optional[float] = None  # m
    id: str = field(default_factory=lambda: new_id("wind"))

    def __post_init__(self) -> None:
        if not 0.0 <= self.cut_in_speed < self.rated_speed <= self.cut_out_speed:
            raise ValueError("wind speeds must satisfy 0 <= cut_in < rated <= cut_out")
        if self.power_curve is not None:
            self.power_curve = sorted((float(v), float(p)) for v, p in self.power_curve)


@dataclass
class OtherSource:
    """A constant generator such as a fuel cell or thermoelectric unit."""

    name: str = ""
    average_power: float = 0.0  # W
    id: str = field(default_factory=lambda: new_id("other"))

    @property
    def daily_energy(self) -> float:
        return self.average_power * HOURS_IN_DAY


# ---------------------------------------------------------------------------
# Environmental data
# ---------------------------------------------------------------------------


@dataclass
class SolarMonth:
    month: int
    ghi: float  # kWh/m²/day
    diffuse: float  # kWh/m²/day
    temperature: Optional[float] = None  # °C, mean ambient


@dataclass
class SolarData:
    latitude: float
    longitude: float
    monthly: list[SolarMonth]
    fetched_at: Optional[str] = None
    source: str = "Manual input"

    def for_month(self, month: int) -> Optional[SolarMonth]:
        return next((m for m in self.monthly if m.month == month), None)

    @property
    def is_complete(self) -> bool:
        """True when every month 1..12 has a record."""
        return {m.month for m in self.monthly} >= set(range(1, MONTHS_IN_YEAR + 1))


@dataclass
class WindMonth:
    month: int
    avg_wind_speed: float  # m/s
    min_wind_speed: float
    max_wind_speed: float


@dataclass
class WindData:
    latitude: float
    longitude: float
    monthly: list[WindMonth]
    fetched_at: Optional[str] = None
    source: str = "Manual input"
    measurement_height: Optional[float] = None  # m

    def for_month(self, month: int) -> Optional[WindMonth]:
        return next((m for m in self.monthly if m.month == month), None)

    @property
    def is_complete(self) -> bool:
        """True when every month 1..12 has a record."""
        return {m.month for m in self.monthly} >= set(range(1, MONTHS_IN_YEAR + 1))


@dataclass
class ProjectConfig:
    project_name: str = "New Buoy Project"
    location: Location = field(default_factory=Location)
    loads: list[Load] = field(default_factory=list)
    batteries: list[Battery] = field(default_factory=list)
    solar_panels: list[SolarPanel] = field(default_factory=list)
    wind_generators: list[WindGenerator] = field(default_factory=list)
    other_sources: list[OtherSource] = field(default_factory=list)
    solar_data: Optional[SolarData] = None
    wind_data: Optional[WindData] = None

    @property
    def has_generation(self) -> bool:
        return bool(self.solar_panels or self.wind_generators or self.other_sources)

    def duplicate_ids(self) -> list[tuple[str, str]]:
        """Return ``(collection, id)`` for every id that repeats within its collection."""
        duplicates: list[tuple[str, str]] = []
        for name in ("loads", "batteries", "solar_panels", "wind_generators", "other_sources"):
            seen: set[str] = set()
            for item in getattr(self, name):
                if item.id in seen:
                    duplicates.append((name, item.id))
                seen.add(item.id)
        return duplicates


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class MonthlyBudgetRow:
    month: int
    solar_generation: float  # Wh
    wind_generation: float
    other_generation: float
    total_generation: float
    consumption: float
    net_energy: float
    surplus: bool
    percent_of_demand: float


@dataclass
class SourceReliability:
    """Whether a configured generation source had measured data behind it."""

    source: SourceKind
    configured: bool
    data_available: bool

    @property
    def reliable(self) -> bool:
        return not self.configured or self.data_available


@dataclass
class BudgetSummary:
    annual_generation: float  # Wh
    annual_consumption: float
    net_annual: float
    solar_contribution: float
    wind_contribution: float
    other_contribution: float
    battery_capacity: float  # usable Wh
    autonomy_days: float
    worst_month: MonthlyBudgetRow
    system_adequate: bool


@dataclass
class BudgetResult:
    summary: BudgetSummary
    monthly_data: list[MonthlyBudgetRow]
    reliability: dict[str, SourceReliability]

    @property
    def unreliable_sources(self) -> list[str]:
        return [name for name, flag in self.reliability.items() if not flag.reliable]


@dataclass
class SOCTrace:
    soc: list[float]  # % of usable capacity, one per day
    energy_wh: list[float]
    depleted_days: list[int]  # 1-based
    unmet_energy_wh: float
    initial_soc: float
    capacity_wh: float

    @property
    def min_soc(self) -> float:
        return min(self.soc)

    def __len__(self) -> int:
        return len(self.soc)
