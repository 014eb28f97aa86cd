"""Test simulation control endpoints (/api/simulation)."""

import pytest


@pytest.fixture
def point_id(client) -> str:
    response = client.post(
        "/api/qr",
        json={"point_id": "Q1AB2", "vpa": "shop@upi", "reference_name": "Shop"},
    )
    return response.json()["point_id"]


def _running(client) -> list[str]:
    return client.get("/api/simulation/status").json()["running_ids"]


def test_toggle_starts_then_stops(client, point_id):
    first = client.post(f"/api/simulation/{point_id}/toggle")

    assert first.status_code == 200
    assert first.json() == {
        "point_id": point_id,
        "active": True,
        "message": f"Simulation started for {point_id}",
    }
    assert _running(client) == [point_id]

    second = client.post(f"/api/simulation/{point_id}/toggle")

    assert second.json()["active"] is False
    assert _running(client) == []


def test_toggle_missing_point_returns_404(client):
    assert client.post("/api/simulation/NOPE1/toggle").status_code == 404


def test_toggle_inactive_point_returns_400(client, point_id):
    client.patch(f"/api/qr/{point_id}/status")

    response = client.post(f"/api/simulation/{point_id}/toggle")

    assert response.status_code == 400
    assert _running(client) == []


def test_start_and_stop(client, point_id):
    start = client.post(f"/api/simulation/{point_id}/start")

    assert start.status_code == 200
    assert start.json()["running"] is True
    assert client.get(f"/api/qr/{point_id}").json()["point"]["simulation_enabled"] is True

    stop = client.post(f"/api/simulation/{point_id}/stop")

    assert stop.status_code == 200
    assert stop.json()["running"] is False
    assert client.get(f"/api/qr/{point_id}").json()["point"]["simulation_enabled"] is False


def test_start_when_running_returns_400(client, point_id):
    client.post(f"/api/simulation/{point_id}/start")

    response = client.post(f"/api/simulation/{point_id}/start")

    assert response.status_code == 400
    assert "already running" in response.json()["detail"]
    assert _running(client) == [point_id]


def test_start_inactive_returns_400(client, point_id):
    client.patch(f"/api/qr/{point_id}/status")
    assert client.post(f"/api/simulation/{point_id}/start").status_code == 400


def test_stop_when_not_running_returns_400(client, point_id):
    response = client.post(f"/api/simulation/{point_id}/stop")

    assert response.status_code == 400
    assert "not running" in response.json()["detail"]


@pytest.mark.parametrize("action", ["start", "stop"])
def test_start_stop_missing_point_returns_404(client, action):
    assert client.post(f"/api/simulation/NOPE1/{action}").status_code == 404


def test_status_reports_each_point(client, point_id):
    client.post("/api/qr", json={"point_id": "ZZ999", "vpa": "zz@upi.in", "reference_name": "Z"})
    client.post(f"/api/simulation/{point_id}/start")

    data = client.get("/api/simulation/status").json()

    assert data["active_count"] == 1
    assert data["initialized"] is True
    rows = {row["point_id"]: row for row in data["points"]}
    assert rows[point_id]["running"] is True
    assert rows[point_id]["simulation_enabled"] is True
    assert rows["ZZ999"]["running"] is False


def test_stop_all(client, point_id):
    client.post("/api/qr", json={"point_id": "ZZ999", "vpa": "zz@upi.in", "reference_name": "Z"})
    client.post(f"/api/simulation/{point_id}/start")
    client.post("/api/simulation/ZZ999/start")

    response = client.post("/api/simulation/stop-all")

    assert response.status_code == 200
    assert response.json()["stopped"] == 2
    assert response.json()["cleared"] == 2
    assert _running(client) == []

    again = client.post("/api/simulation/stop-all").json()
    assert (again["stopped"], again["cleared"]) == (0, 0)


def test_health_and_root(client):
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["initialized"] is True

    root = client.get("/").json()
    assert root["docs"] == "/docs"
