"""
Tests for the Run Coach session API.
Run with: pytest backend/tests -v
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "coach-engine"))

import pytest
import runpy
import uvicorn
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from backend import config
from backend.server import app, registry


STEADY = {
    "elapsed_time_sec": 300,
    "distance_meters": 1500,
    "current_pace_sec_per_km": 300,
    "avg_pace_sec_per_km": 300,
    "speed_mps": 3.33,
    "elevation_meters": 50,
    "elevation_delta_last_30s": 0,
    "pace_delta_last_30s": 0,
}

STRUGGLING = dict(STEADY, current_pace_sec_per_km=400, speed_mps=2.5, pace_delta_last_30s=15)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def session_id(client):
    response = client.post("/api/coach/sessions", json={
        "level": "intermediate",
        "typical_pace_sec_per_km": 300,
        "goal": "easy",
    })
    assert response.status_code == 201
    return response.json()["session_id"]


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_reports_registry_load(self, client, session_id):
        """Health carries the live session count and the limit."""
        data = client.get("/api/health").json()

        assert data["sessions"] == len(registry)
        assert data["sessions"] >= 1
        assert data["max_sessions"] == registry.max_sessions

    def test_main_serves_on_configured_address(self, monkeypatch):
        """Running the module starts uvicorn on BACKEND_HOST:BACKEND_PORT."""
        calls = []
        monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))

        runpy.run_module("backend.server", run_name="__main__")

        assert calls == [{"host": config.BACKEND_HOST, "port": config.BACKEND_PORT}]


class TestSessions:
    """Session lifecycle."""

    def test_open_session(self, client):
        """Opening a session echoes the profile and the cooldowns in use."""
        response = client.post("/api/coach/sessions", json={
            "level": "beginner",
            "typical_pace_sec_per_km": 360,
            "goal": "long",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["session_id"]
        assert data["profile"]["level"] == "beginner"
        assert data["cooldowns"] == {"high": 30, "medium": 45, "low": 60}

    def test_invalid_profile(self, client):
        """Missing typical pace or an unknown level is rejected."""
        assert client.post("/api/coach/sessions", json={"level": "beginner"}).status_code == 422
        assert client.post("/api/coach/sessions", json={
            "level": "elite", "typical_pace_sec_per_km": 300
        }).status_code == 422

    def test_close_session(self, client, session_id):
        assert client.delete(f"/api/coach/sessions/{session_id}").status_code == 204
        assert client.get(f"/api/coach/sessions/{session_id}/history").status_code == 404
        assert client.delete(f"/api/coach/sessions/{session_id}").status_code == 404

    def test_unknown_session(self, client):
        assert client.post("/api/coach/sessions/nope/metrics", json=STEADY).status_code == 404
        assert client.post("/api/coach/sessions/nope/reset").status_code == 404
        assert client.get("/api/coach/sessions/nope/history").status_code == 404


class TestMetrics:
    """Decisions over HTTP."""

    def test_first_snapshot_emits(self, client, session_id):
        response = client.post(f"/api/coach/sessions/{session_id}/metrics", json=STEADY)

        assert response.status_code == 200
        data = response.json()
        assert data["emitted"] is True
        assert data["output"]["state"] == "STEADY"
        assert data["output"]["intent"] == {"goal": "maintain", "tone": "calm", "urgency": "low"}
        assert 0.0 <= data["output"]["confidence"] <= 1.0

    def test_repeat_is_withheld(self, client, session_id):
        """The same snapshot right away hits the cooldown."""
        client.post(f"/api/coach/sessions/{session_id}/metrics", json=STEADY)
        response = client.post(f"/api/coach/sessions/{session_id}/metrics", json=STEADY)

        assert response.json() == {"emitted": False, "output": None}

    def test_new_intent_after_cooldown(self, client, session_id):
        client.post(f"/api/coach/sessions/{session_id}/metrics", json=STEADY)
        registry.get(session_id).engine.set_last_feedback_time(
            datetime.now(timezone.utc) - timedelta(seconds=61)
        )

        data = client.post(f"/api/coach/sessions/{session_id}/metrics", json=STRUGGLING).json()
        assert data["emitted"] is True
        assert data["output"]["state"] == "STRUGGLING"
        assert data["output"]["intent"]["urgency"] == "high"

    def test_missing_metric_rejected(self, client, session_id):
        body = dict(STEADY)
        del body["speed_mps"]
        response = client.post(f"/api/coach/sessions/{session_id}/metrics", json=body)

        assert response.status_code == 422


class TestHistory:

    def test_history_and_reset(self, client, session_id):
        client.post(f"/api/coach/sessions/{session_id}/metrics", json=STEADY)

        history = client.get(f"/api/coach/sessions/{session_id}/history").json()
        assert history["feedbacks_since_start"] == 1
        assert history["last_intent"] == {"goal": "maintain", "tone": "calm", "urgency": "low"}

        reset = client.post(f"/api/coach/sessions/{session_id}/reset").json()
        assert reset["feedbacks_since_start"] == 0
        assert reset["last_intent"] is None

        # Not blocked by the pre-reset history
        data = client.post(f"/api/coach/sessions/{session_id}/metrics", json=STEADY).json()
        assert data["emitted"] is True


def utc_offset(value: str) -> timedelta:
    return datetime.fromisoformat(value.replace("Z", "+00:00")).utcoffset()


class TestTimestamps:

    def test_all_timestamps_are_utc(self, client):
        """Session, decision and history timestamps all carry a UTC offset."""
        opened = client.post("/api/coach/sessions", json={"typical_pace_sec_per_km": 300}).json()
        session_id = opened["session_id"]
        decision = client.post(f"/api/coach/sessions/{session_id}/metrics", json=STEADY).json()
        history = client.get(f"/api/coach/sessions/{session_id}/history").json()

        assert utc_offset(opened["created_at"]) == timedelta(0)
        assert utc_offset(decision["output"]["timestamp"]) == timedelta(0)
        assert utc_offset(history["last_feedback_timestamp"]) == timedelta(0)
