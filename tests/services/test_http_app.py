from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from gcal_mcp.api import api_state
from gcal_mcp.services.http import app


@pytest.fixture
def client() -> TestClient:
    # No context manager: the lifespan (and the reminder loop) stays off.
    return TestClient(app)


def test_index_lists_endpoints(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["sse"] == "/sse"


def test_health_reports_reminder_state(client: TestClient) -> None:
    response = client.get("/health")

    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["reminders_running"] is False


def test_reminders_endpoint_returns_status(client: TestClient) -> None:
    payload = client.get("/reminders").json()

    assert payload["running"] is False
    assert payload["records"] == []
    assert set(payload["summary"]) == {"pending", "fired", "failed", "missed"}


def test_function_listing_includes_calendar_tools(client: TestClient) -> None:
    names = {item["name"] for item in client.get("/api/functions").json()["functions"]}

    assert {"list_appointments", "create_appointment", "send_email", "get_current_datetime"} <= names


def test_invoke_date_tool(client: TestClient) -> None:
    response = client.post("/api/functions/get_current_datetime", json={"arguments": {"timezone_name": "UTC"}})

    assert response.status_code == 200
    assert response.json()["result"]["timezone"] == "UTC"


def test_unknown_function_is_404(client: TestClient) -> None:
    response = client.post("/api/functions/does_not_exist", json={"arguments": {}})

    assert response.status_code == 404


def test_calendar_tool_without_credentials_is_400(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(api_state.context.gateway, "is_ready", lambda: False)

    response = client.post(
        "/api/functions/list_appointments",
        json={"arguments": {"start": "2026-03-10T00:00:00Z", "end": "2026-03-11T00:00:00Z"}},
    )

    assert response.status_code == 400
    assert "GOOGLE_ACCESS_TOKEN" in response.json()["detail"]


def test_function_listing_filters_by_category(client: TestClient) -> None:
    functions = client.get("/api/functions", params={"category": "date"}).json()["functions"]

    assert {item["name"] for item in functions} == {"get_current_datetime", "format_datetime"}
