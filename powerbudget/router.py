import math
from dataclasses import asdict
from typing import Dict, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from lib.types import BudgetResult, MonthlyBudgetRow, ProjectConfig
from powerbudget.clients.nasa_power import NASAPowerClient
from powerbudget.config import settings
from powerbudget.errors import NumericDomainError, ValidationError
from powerbudget.services.budget import PowerBudgetCalculator
from powerbudget.services.project_io import ProjectDocument, SolarDataDocument
from powerbudget.simulators.battery_soc import BatterySOCSimulator

router = APIRouter()

_calculator = PowerBudgetCalculator(
    system_efficiency=settings.SYSTEM_EFFICIENCY,
    default_ambient_temp=settings.DEFAULT_AMBIENT_TEMP,
    wind_averaging=settings.WIND_AVERAGING,
)


def _nasa_client() -> NASAPowerClient:
    return NASAPowerClient(base_url=settings.NASA_POWER_BASE_URL, timeout=settings.HTTP_TIMEOUT)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class MonthlyBudgetRowResponse(BaseModel):
    month: int
    solar_generation: float
    wind_generation: float
    other_generation: float
    total_generation: float
    consumption: float
    net_energy: float
    surplus: bool
    percent_of_demand: float


class BudgetSummaryResponse(BaseModel):
    annual_generation: float
    annual_consumption: float
    net_annual: float
    solar_contribution: float
    wind_contribution: float
    other_contribution: float
    battery_capacity: float
    autonomy_days: Optional[float]  # null when there is no consumption
    worst_month: MonthlyBudgetRowResponse
    system_adequate: bool


class SourceReliabilityResponse(BaseModel):
    source: str
    configured: bool
    data_available: bool
    reliable: bool


class BudgetResponse(BaseModel):
    summary: BudgetSummaryResponse
    monthly_data: list[MonthlyBudgetRowResponse]
    reliability: Dict[str, SourceReliabilityResponse]
    unreliable_sources: list[str]


class SOCResponse(BaseModel):
    soc: list[float]
    energy_wh: list[float]
    depleted_days: list[int]
    unmet_energy_wh: float
    initial_soc: float
    capacity_wh: float
    min_soc: float


class SimulationResponse(BaseModel):
    budget: BudgetResponse
    trace: SOCResponse


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_config(document: ProjectDocument) -> ProjectConfig:
    try:
        return document.to_config()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _row_response(row: MonthlyBudgetRow) -> MonthlyBudgetRowResponse:
    return MonthlyBudgetRowResponse(**asdict(row))


def _budget_response(budget: BudgetResult) -> BudgetResponse:
    s = budget.summary
    return BudgetResponse(
        summary=BudgetSummaryResponse(
            annual_generation=s.annual_generation,
            annual_consumption=s.annual_consumption,
            net_annual=s.net_annual,
            solar_contribution=s.solar_contribution,
            wind_contribution=s.wind_contribution,
            other_contribution=s.other_contribution,
            battery_capacity=s.battery_capacity,
            autonomy_days=s.autonomy_days if math.isfinite(s.autonomy_days) else None,
            worst_month=_row_response(s.worst_month),
            system_adequate=s.system_adequate,
        ),
        monthly_data=[_row_response(r) for r in budget.monthly_data],
        reliability={
            name: SourceReliabilityResponse(
                source=flag.source,
                configured=flag.configured,
                data_available=flag.data_available,
                reliable=flag.reliable,
            )
            for name, flag in budget.reliability.items()
        },
        unreliable_sources=budget.unreliable_sources,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/budget", response_model=BudgetResponse)
def budget(document: ProjectDocument):
    """Return the 12-month energy budget and annual summary for a project."""
    config = _to_config(document)
    try:
        result = _calculator.calculate_budget(config)
    except (ValidationError, NumericDomainError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _budget_response(result)


@router.post("/soc", response_model=SimulationResponse)
def state_of_charge(
    document: ProjectDocument,
    initial_soc: float = Query(100.0, ge=0, le=100),
    carry_deficit: bool = False,
):
    """Return the budget together with a daily battery state-of-charge trace."""
    config = _to_config(document)
    simulator = BatterySOCSimulator(initial_soc=initial_soc, carry_deficit=carry_deficit)
    try:
        result, trace = _calculator.simulate_soc(config, simulator)
    except (ValidationError, NumericDomainError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return SimulationResponse(
        budget=_budget_response(result),
        trace=SOCResponse(**asdict(trace), min_soc=trace.min_soc),
    )


@router.get("/solar-data", response_model=SolarDataDocument)
def solar_data(
    lat: float = Query(ge=-90, le=90),
    lon: float = Query(ge=-180, le=180),
):
    """Monthly irradiance for a site from NASA POWER, or an estimate if it is unreachable."""
    with _nasa_client() as client:
        data = client.get_solar_data_with_fallback(lat, lon)
    return SolarDataDocument.model_validate(asdict(data))
