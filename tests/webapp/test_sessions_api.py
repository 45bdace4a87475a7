"""Tests for session, phase and lock-in routes."""

import pytest

pytestmark = pytest.mark.webapp


def test_create_session(client, room):
    """Test a created session can be fetched."""
    response = client.get(f"/api/sessions/{room}")
    assert response.status_code == 200
    data = response.get_json()
    assert data["room_code"] == room
    assert data["current_phase"] == "lobby"
    assert [team["name"] for team in data["esp_teams"]] == ["Alpha", "Beta"]


def test_create_session_requires_fields(client):
    """Test session creation rejects incomplete bodies."""
    response = client.post("/api/sessions", json={"room_code": "X"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "room_code, esp_teams and destinations are required"


def test_duplicate_room_rejected(client, room):
    """Test creating the same room twice."""
    response = client.post(
        "/api/sessions",
        json={"room_code": room, "esp_teams": {"Alpha": ["a"]}, "destinations": {"Gmail": ["g"]}},
    )
    assert response.status_code == 400
    assert response.get_json()["reason"] == "room_exists"


def test_unknown_session_is_404(client):
    """Test missing sessions map to 404 on reads and operations."""
    assert client.get("/api/sessions/NOPE").status_code == 404
    response = client.post("/api/sessions/NOPE/pause")
    assert response.status_code == 404
    assert response.get_json()["reason"] == "session_not_found"


def test_start_allocates_resources(client, room):
    """Test starting the game allocates credits and client stock."""
    response = client.post(f"/api/sessions/{room}/start")
    assert response.status_code == 200
    assert response.get_json()["phase"] == "resource_allocation"

    team = client.get(f"/api/sessions/{room}").get_json()["esp_teams"][0]
    assert team["credits"] == 1000
    assert len(team["available_clients"]) == 13


def test_phase_requires_phase(client, room):
    """Test the phase route validates its body."""
    response = client.post(f"/api/sessions/{room}/phase", json={})
    assert response.status_code == 400
    assert response.get_json()["error"] == "phase is required"


def test_invalid_phase_transition(client, room):
    """Test illegal transitions are rejected."""
    response = client.post(f"/api/sessions/{room}/phase", json={"phase": "consequences"})
    assert response.status_code == 400
    assert response.get_json()["reason"] == "invalid_transition"


def test_lock_in_everyone_resolves_round(client, planning_room):
    """Test the last lock-in resolves the round."""
    base = f"/api/sessions/{planning_room}"
    for team in ("Alpha", "Beta"):
        assert client.post(f"{base}/teams/{team}/lock-in").status_code == 200
    for destination in ("Gmail", "Outlook"):
        client.post(f"{base}/destinations/{destination}/lock-in")

    response = client.post(f"{base}/destinations/Yahoo/lock-in")

    data = response.get_json()
    assert data["all_locked"] is True
    assert data["resolution"]["phase"] == "consequences"
    session = client.get(base).get_json()
    assert session["current_phase"] == "consequences"
    assert len(session["resolution_history"]) == 1


def test_end_phase_early(client, planning_room):
    """Test the facilitator can force resolution."""
    response = client.post(f"/api/sessions/{planning_room}/end-phase-early")
    assert response.status_code == 200
    data = response.get_json()
    assert data["phase"] == "consequences"
    assert data["round"] == 1


def test_pause_and_resume(client, room):
    """Test pausing twice is rejected."""
    assert client.post(f"/api/sessions/{room}/pause").get_json() == {"success": True, "paused": True}
    response = client.post(f"/api/sessions/{room}/pause")
    assert response.status_code == 400
    assert response.get_json()["reason"] == "no_change"
    assert client.post(f"/api/sessions/{room}/resume").status_code == 200


def test_scores(client, planning_room):
    """Test the scores route returns ranked results."""
    response = client.get(f"/api/sessions/{planning_room}/scores")
    assert response.status_code == 200
    data = response.get_json()
    assert [r["rank"] for r in data["esp_results"]] == [1, 2]
    assert data["all_disqualified"] is False


def test_json_error_handlers(client):
    """Test unknown routes and methods answer in JSON."""
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.get_json() == {"success": False, "error": "Not found"}

    response = client.get("/api/sessions")
    assert response.status_code == 405
    assert response.get_json()["error"] == "Method not allowed"
