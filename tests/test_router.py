"""Tests for the HTTP API (powerbudget.main + powerbudget.router)."""

from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from powerbudget import router as router_module
from powerbudget.clients.nasa_power import FALLBACK_SOURCE_NAME, NASAPowerClient
from powerbudget.main import create_app


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def project() -> dict:
    """camelCase project document: 10 W of load against an 8 W fuel cell."""
    return {
        "projectName": "API test",
        "location": {"latitude": 40.0, "longitude": -70.0, "name": "Test"},
        "loads": [{"id": "load-1", "name": "Logger", "powerOn": 10.0, "powerIdle": 0.0, "dutyCycle": 100}],
        "batteries": [{"id": "bat-1", "type": "AGM", "voltage": 12, "capacityAh": 100, "quantity": 2}],
        "otherSources": [{"id": "fc-1", "name": "Fuel cell", "averagePower": 8.0}],
    }


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ---------------------------------------------------------------------------
# POST /api/budget
# ---------------------------------------------------------------------------


def test_budget(client, project):
    response = client.post("/api/budget", json=project)
    assert response.status_code == 200
    body = response.json()
    assert len(body["monthly_data"]) == 12
    assert body["monthly_data"][0]["consumption"] == pytest.approx(240.0 * 31)
    assert body["summary"]["battery_capacity"] == pytest.approx(1200.0)
    assert body["summary"]["autonomy_days"] == pytest.approx(5.0)
    assert body["summary"]["system_adequate"] is False
    assert body["unreliable_sources"] == []


def test_budget_zero_consumption_autonomy_is_null(client, project):
    project["loads"][0]["powerOn"] = 0.0
    body = client.post("/api/budget", json=project).json()
    assert body["summary"]["autonomy_days"] is None


def test_budget_flags_missing_solar_data(client, project):
    project["solarPanels"] = [{"id": "pv-1", "powerRating": 50, "tiltAngle": 30}]
    body = client.post("/api/budget", json=project).json()
    assert body["unreliable_sources"] == ["solar"]
    assert body["reliability"]["solar"]["reliable"] is False


def test_budget_without_loads_is_unprocessable(client, project):
    project["loads"] = []
    response = client.post("/api/budget", json=project)
    assert response.status_code == 422
    assert "at least one load" in response.json()["detail"]


def test_budget_rejects_schema_violation(client, project):
    project["loads"][0]["dutyCycle"] = 250
    assert client.post("/api/budget", json=project).status_code == 422


def test_budget_rejects_bad_wind_generator(client, project):
    project["windGenerators"] = [{"id": "w-1", "cutInSpeed": 20, "ratedSpeed": 10}]
    response = client.post("/api/budget", json=project)
    assert response.status_code == 400
    assert "wind speeds must satisfy" in response.json()["detail"]


# ---------------------------------------------------------------------------
# POST /api/soc
# ---------------------------------------------------------------------------


def test_soc(client, project):
    response = client.post("/api/soc", json=project)
    assert response.status_code == 200
    trace = response.json()["trace"]
    assert len(trace["soc"]) == 365
    assert trace["capacity_wh"] == pytest.approx(1200.0)
    assert trace["min_soc"] == 0.0
    # 48 Wh/day deficit empties 1200 Wh on day 25
    assert trace["depleted_days"][0] == 25


def test_soc_initial_soc_query(client, project):
    trace = client.post("/api/soc", params={"initial_soc": 50}, json=project).json()["trace"]
    assert trace["initial_soc"] == 50.0
    assert trace["depleted_days"][0] == 13


def test_soc_initial_soc_out_of_range(client, project):
    assert client.post("/api/soc", params={"initial_soc": 120}, json=project).status_code == 422


def test_soc_without_battery_is_unprocessable(client, project):
    project["batteries"] = []
    response = client.post("/api/soc", json=project)
    assert response.status_code == 422
    assert "usable battery capacity" in response.json()["detail"]


# ---------------------------------------------------------------------------
# GET /api/solar-data
# ---------------------------------------------------------------------------


def test_solar_data_falls_back_when_upstream_fails(client, monkeypatch):
    transport = httpx.MockTransport(lambda request: httpx.Response(502))
    monkeypatch.setattr(
        router_module,
        "_nasa_client",
        lambda: NASAPowerClient(base_url="https://power.test", transport=transport),
    )
    response = client.get("/api/solar-data", params={"lat": 40.0, "lon": -70.0})
    assert response.status_code == 200
    body = response.json()
    assert body["source"] == FALLBACK_SOURCE_NAME
    assert len(body["monthlyData"]) == 12
    assert body["fetchedAt"] is not None


def test_solar_data_latitude_out_of_range(client):
    assert client.get("/api/solar-data", params={"lat": 95.0, "lon": 0.0}).status_code == 422
