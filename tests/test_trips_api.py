import pytest
from sqlalchemy.exc import OperationalError

from conftest import north_of
from services.store import EarningsStore
from services.trip_sessions import trip_sessions

LAT, LNG = 41.0, 29.0


def _position(client, meters_north, **extra):
    resp = client.post("/api/trips/ali/positions", json={
        "latitude": north_of(LAT, meters_north),
        "longitude": LNG,
        **extra,
    })
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def test_trip_lifecycle_saves_summary(client):
    client.put("/api/fuel/settings/ali", json={"consumption_per_100km": 8, "fuel_price": 50})

    started = client.post("/api/trips/ali/start").json()
    assert started["data"]["status"] == "tracking"

    _position(client, 0, speed_mps=5)
    status = _position(client, 250, speed_mps=10)
    assert status["total_distance_km"] == pytest.approx(0.25, abs=1e-3)
    assert status["current_speed_kmh"] == pytest.approx(36)

    finished = client.post("/api/trips/ali/finish").json()["data"]

    assert finished["saved"] is True
    assert len(finished["coordinates"]) == 2
    summary = finished["summary"]
    assert summary["total_distance_km"] == pytest.approx(0.25, abs=1e-3)
    assert summary["consumption_per_100km"] == 8
    assert summary["fuel_price"] == 50
    assert summary["fuel_used_liters"] == pytest.approx(0.02)
    assert summary["fuel_cost"] == pytest.approx(1.0)

    history = client.get("/api/trips/ali/history").json()["data"]
    assert len(history) == 1
    assert history[0]["id"] == summary["id"]
    assert client.get("/api/trips/ali/status").json()["data"]["status"] == "idle"


def test_short_trip_is_not_saved_and_uses_live_price(client):
    client.post("/api/trips/ali/start")
    _position(client, 0)
    _position(client, 50)

    finished = client.post("/api/trips/ali/finish").json()["data"]

    assert finished["saved"] is False
    assert finished["summary"]["fuel_price"] == 50.0
    assert finished["summary"]["consumption_per_100km"] == 7.0
    assert client.get("/api/trips/ali/history").json()["data"] == []


def test_second_start_is_rejected(client):
    assert client.post("/api/trips/ali/start").status_code == 200

    resp = client.post("/api/trips/ali/start")

    assert resp.status_code == 409
    assert resp.json()["success"] is False


def test_trips_are_per_driver(client):
    client.post("/api/trips/ali/start")

    assert client.post("/api/trips/veli/start").status_code == 200
    assert client.get("/api/trips/veli/status").json()["data"]["status"] == "tracking"


def test_pause_freezes_distance(client):
    client.post("/api/trips/ali/start")
    _position(client, 0)

    assert client.post("/api/trips/ali/pause").status_code == 200
    paused = _position(client, 400)
    assert paused["status"] == "paused"
    assert paused["total_distance_km"] == 0

    assert client.post("/api/trips/ali/resume").status_code == 200
    resumed = _position(client, 30)
    assert resumed["total_distance_km"] == pytest.approx(0.03, abs=1e-3)


def test_invalid_transitions_are_conflicts(client):
    assert client.post("/api/trips/ali/pause").status_code == 409
    assert client.post("/api/trips/ali/resume").status_code == 409
    assert client.post("/api/trips/ali/finish").status_code == 409


def test_position_without_trip_is_not_delivered(client):
    data = _position(client, 0)

    assert data["delivered"] is False
    assert data["status"] == "idle"
    assert data["coordinates"] == []


def test_position_error_is_reported_in_status(client):
    client.post("/api/trips/ali/start")

    resp = client.post("/api/trips/ali/position-error", json={"cause": "permission-denied"})

    data = resp.json()["data"]
    assert data["status"] == "tracking"
    assert data["error"].startswith("Location permission denied")


def test_fuel_price_and_estimate_routes(client):
    price = client.get("/api/fuel/price").json()["data"]
    assert price["price"] == 50.0
    assert price["fallback"] is False

    refreshed = client.post("/api/fuel/price/refresh").json()["data"]
    assert refreshed["cached"] is False

    estimate = client.post("/api/fuel/estimate", json={
        "total_distance_km": 100, "consumption_per_100km": 7, "price_per_liter": 50,
    }).json()["data"]
    assert estimate == {"fuel_used_liters": 7.0, "fuel_cost": 350.0}


def test_fuel_settings_defaults_and_validation(client):
    data = client.get("/api/fuel/settings/ali").json()["data"]
    assert data == {"username": "ali", "consumption_per_100km": 7.0, "fuel_price": None}

    assert client.put("/api/fuel/settings/ali", json={"consumption_per_100km": 25}).status_code == 422
    assert client.put("/api/fuel/settings/ali", json={"consumption_per_100km": 2}).status_code == 422

    saved = client.put("/api/fuel/settings/ali", json={"consumption_per_100km": 6.5}).json()["data"]
    assert saved["consumption_per_100km"] == 6.5


def test_failed_save_still_returns_the_summary(client, monkeypatch):
    def failing_save(self, summary):
        raise OperationalError("INSERT INTO trip_history", {}, Exception("database is locked"))

    monkeypatch.setattr(EarningsStore, "save_trip_summary", failing_save)
    client.post("/api/trips/ali/start")
    _position(client, 0)
    _position(client, 500)

    resp = client.post("/api/trips/ali/finish")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is False
    assert body["data"]["saved"] is False
    assert body["data"]["error"] == "Trip could not be saved"
    assert body["data"]["summary"]["total_distance_km"] == pytest.approx(0.5, abs=1e-3)
    assert body["data"]["summary"]["fuel_cost"] > 0


def test_reads_do_not_open_sessions(client):
    assert client.get("/api/trips/nobody/status").json()["data"]["status"] == "idle"
    _position(client, 0)
    client.post("/api/trips/ali/position-error", json={"cause": "timeout"})
    assert client.post("/api/trips/ali/pause").status_code == 409

    assert len(trip_sessions) == 0


def test_finish_closes_the_session(client):
    client.post("/api/trips/ali/start")
    assert len(trip_sessions) == 1

    client.post("/api/trips/ali/finish")

    assert len(trip_sessions) == 0
    assert _position(client, 0)["delivered"] is False
