"""API-level tests for the Flask app."""

from datetime import datetime, timedelta, timezone

import pytest

from app import _series_interval, app


@pytest.fixture(autouse=True)
def env_setup(monkeypatch):
    monkeypatch.setenv("BAC_SERIES_INTERVAL_MINUTES", "15")
    yield


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def setup_profile(client, weight_kg=80, gender="male", drinking_frequency="occasionally"):
    res = client.post(
        "/api/setup",
        json={
            "weight_kg": weight_kg,
            "gender": gender,
            "age": 30,
            "drinking_frequency": drinking_frequency,
        },
    )
    assert res.status_code == 200
    return res.get_json()


def test_healthz(client):
    res = client.get("/healthz")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True}


def test_presets(client):
    data = client.get("/api/presets").get_json()
    assert {d["key"] for d in data["drinks"]} >= {"beer", "wine", "spirits", "cocktail"}
    assert any(f["key"] == "heavy_meal" for f in data["foods"])


def test_state_unconfigured(client):
    res = client.get("/api/state")
    assert res.status_code == 200
    data = res.get_json()
    assert data["configured"] is False
    assert data["bac_now"] == 0
    assert data["refresh_after_seconds"] == 30


def test_setup_rejects_invalid_profile(client):
    res = client.post("/api/setup", json={"weight_kg": 0, "gender": "male"})
    assert res.status_code == 400
    assert "weight_kg" in res.get_json()["error"]

    res = client.post("/api/setup", json={"weight_kg": 70, "gender": "robot"})
    assert res.status_code == 400


def test_setup_returns_profile(client):
    data = setup_profile(client, weight_kg="72.5", gender="Female", drinking_frequency="frequently")
    assert data["profile"]["weight_kg"] == 72.5
    assert data["profile"]["gender"] == "female"
    assert data["profile"]["drinking_frequency"] == "frequently"


def test_drink_requires_setup(client):
    res = client.post("/api/drink", json={"preset": "beer", "hours_ago": 0})
    assert res.status_code == 400
    assert "error" in res.get_json()


def test_drink_validation(client):
    setup_profile(client)
    bad = [
        {"volume_ml": 0, "alcohol_percentage": 5},
        {"volume_ml": 330, "alcohol_percentage": 120},
        {"volume_ml": 330, "alcohol_percentage": 5, "hours_ago": 30},
        {"volume_ml": 330, "alcohol_percentage": 5, "consumed_at": "not-a-time"},
        {"preset": "mead"},
    ]
    for payload in bad:
        res = client.post("/api/drink", json=payload)
        assert res.status_code == 400, payload


def test_drink_and_state_roundtrip(client):
    setup_profile(client)
    add = client.post("/api/drink", json={"preset": "beer", "size": "medium", "hours_ago": 1})
    assert add.status_code == 200
    assert add.get_json()["alcohol_grams"] == pytest.approx(13.02, abs=0.01)

    client.post("/api/drink", json={"volume_ml": 150, "alcohol_percentage": 12, "hours_ago": 0.5})

    state = client.get("/api/state")
    assert state.status_code == 200
    data = state.get_json()
    assert data["configured"] is True
    assert data["drink_count"] == 2
    assert data["bac_now"] > 0
    assert data["danger_level"] == "safe"
    assert data["info"]["level"] == "safe"
    assert data["drive_advice"]["status"] in ("caution", "do_not_drive")
    assert data["series"]
    assert all(p["bac"] >= 0 for p in data["series"])
    assert data["time_to_zero"] != "0h 00m"


def test_food_logging(client):
    setup_profile(client)
    assert client.post("/api/food", json={"absorption_factor": 1.5}).status_code == 400
    res = client.post("/api/food", json={"preset": "full_meal", "hours_ago": 1})
    assert res.status_code == 200
    assert res.get_json()["food"]["absorption_factor"] == 0.65
    assert client.get("/api/state").get_json()["food_count"] == 1


def test_delete_drink(client):
    setup_profile(client)
    client.post("/api/drink", json={"preset": "wine", "hours_ago": 2})
    assert client.delete("/api/drink/3").status_code == 400
    res = client.delete("/api/drink/0")
    assert res.status_code == 200
    assert client.get("/api/state").get_json()["drink_count"] == 0


def test_series_endpoint(client):
    setup_profile(client)
    now = datetime.now(timezone.utc)
    client.post("/api/drink", json={"preset": "spirits", "hours_ago": 2})
    start = now - timedelta(hours=2)
    res = client.get(
        "/api/series",
        query_string={"start": start.isoformat(), "end": now.isoformat(), "interval_minutes": 15},
    )
    assert res.status_code == 200
    data = res.get_json()
    assert data["count"] == 9
    assert data["series"][0]["bac"] == 0.0
    assert data["series"][2]["bac"] > 0

    fallback = client.get(
        "/api/series",
        query_string={"start": start.isoformat(), "end": (start - timedelta(hours=1)).isoformat(), "interval_minutes": 30},
    )
    assert fallback.get_json()["count"] == 13

    bad = client.get("/api/series?interval_minutes=0")
    assert bad.status_code == 400


def test_series_endpoint_rejects_oversized_requests(client):
    setup_profile(client)
    now = datetime.now(timezone.utc)
    two_months = client.get(
        "/api/series",
        query_string={"start": (now - timedelta(days=60)).isoformat(), "end": now.isoformat(), "interval_minutes": 0.5},
    )
    assert two_months.status_code == 400
    assert "hours" in two_months.get_json()["error"]

    dense = client.get("/api/series", query_string={"interval_minutes": 0.001})
    assert dense.status_code == 400


def test_drink_time_must_be_recent(client):
    setup_profile(client)
    now = datetime.now(timezone.utc)
    future = client.post(
        "/api/drink",
        json={"preset": "beer", "consumed_at": (now + timedelta(days=15)).isoformat()},
    )
    assert future.status_code == 400
    assert "future" in future.get_json()["error"]

    stale = client.post(
        "/api/drink",
        json={"preset": "beer", "consumed_at": (now - timedelta(hours=30)).isoformat()},
    )
    assert stale.status_code == 400
    assert client.post(
        "/api/food", json={"preset": "snack", "consumed_at": (now + timedelta(hours=1)).isoformat()}
    ).status_code == 400

    ok = client.post(
        "/api/drink",
        json={"preset": "beer", "consumed_at": (now - timedelta(hours=1)).isoformat()},
    )
    assert ok.status_code == 200
    assert client.get("/api/state").get_json()["drink_count"] == 1


def test_setup_start_time_must_be_recent(client):
    now = datetime.now(timezone.utc)
    res = client.post(
        "/api/setup",
        json={"weight_kg": 80, "gender": "male", "start_time": (now + timedelta(days=2)).isoformat()},
    )
    assert res.status_code == 400


def test_state_projection_matches_drive_advice(client):
    setup_profile(client)
    for k in range(6):
        client.post("/api/drink", json={"preset": "beer", "size": "medium", "hours_ago": 1.5 - k / 6})
    data = client.get("/api/state").get_json()
    assert data["bac_now"] > 0.5
    assert data["drive_advice"]["status"] == "do_not_drive"
    assert data["time_to_legal"] in data["drive_advice"]["action"]


def test_series_interval_env_is_clamped(client, monkeypatch):
    monkeypatch.setenv("BAC_SERIES_INTERVAL_MINUTES", "abc")
    assert _series_interval() == 15
    monkeypatch.setenv("BAC_SERIES_INTERVAL_MINUTES", "0")
    assert _series_interval() == 1.0
    monkeypatch.setenv("BAC_SERIES_INTERVAL_MINUTES", "1e9")
    assert _series_interval() == 60.0

    monkeypatch.setenv("BAC_SERIES_INTERVAL_MINUTES", "abc")
    setup_profile(client)
    client.post("/api/drink", json={"preset": "beer", "hours_ago": 1})
    res = client.get("/api/state")
    assert res.status_code == 200
    assert res.get_json()["series"]


def test_activity_lifecycle(client):
    setup_profile(client)
    idle = client.post("/api/activity", json={"action": "start"}).get_json()
    assert idle["state"]["status"] == "inactive"

    client.post("/api/drink", json={"volume_ml": 500, "alcohol_percentage": 12, "hours_ago": 0.5})
    started = client.post("/api/activity", json={"action": "start", "user": {"name": "Ada", "emoji": ""}}).get_json()
    assert started["state"]["status"] == "active"
    assert started["payload"]["user"]["name"] == "Ada"
    assert started["payload"]["is_above_legal_limit"] is True

    updated = client.post("/api/activity", json={"action": "update"}).get_json()
    assert updated["state"]["activity_id"] == started["state"]["activity_id"]

    stopped = client.post("/api/activity", json={"action": "stop"}).get_json()
    assert stopped["state"]["status"] == "inactive"

    assert client.post("/api/activity", json={"action": "launch"}).status_code == 400


def test_end_session_returns_summary(client):
    setup_profile(client)
    client.post("/api/drink", json={"preset": "beer", "hours_ago": 1})
    res = client.post("/api/session/end")
    assert res.status_code == 200
    body = res.get_json()
    assert body["summary"]["is_closed"] is True
    assert body["summary"]["drink_count"] == 1
    assert len(body["session"]["drinks"]) == 1
    assert client.get("/api/state").get_json()["configured"] is False


def test_reset_keeps_profile(client):
    setup_profile(client, weight_kg=90)
    client.post("/api/drink", json={"preset": "beer", "hours_ago": 0})
    assert client.post("/api/reset").get_json() == {"ok": True}
    data = client.get("/api/state").get_json()
    assert data["configured"] is True
    assert data["drink_count"] == 0
    assert data["profile"]["weight_kg"] == 90.0
