"""Tests for incident routes."""

import pytest

pytestmark = pytest.mark.webapp


def test_list_incidents(client, planning_room):
    """Test round 1 offers the DMARC notice and venture capital."""
    response = client.get(f"/api/sessions/{planning_room}/incidents")
    assert response.status_code == 200
    data = response.get_json()
    assert data["round"] == 1
    assert [incident["id"] for incident in data["incidents"]] == ["INC-001", "INC-003"]


def test_trigger_targeted_incident(client, planning_room):
    """Test venture capital lands on the selected team."""
    response = client.post(f"/api/sessions/{planning_room}/incidents/INC-003", json={"selected_team": "Beta"})
    assert response.status_code == 200
    assert response.get_json()["changes"]["esp_credits"] == {"Beta": 200}


def test_trigger_without_selection(client, planning_room):
    """Test targeted incidents need a team."""
    response = client.post(f"/api/sessions/{planning_room}/incidents/INC-003")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Incident INC-003 requires a selected ESP team"


def test_choice_requires_fields(client, planning_room):
    """Test the choice route validates its body."""
    response = client.post(f"/api/sessions/{planning_room}/incidents/INC-018/choices", json={"team": "Alpha"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "team and choice_id are required"


def test_choice_without_pending(client, planning_room):
    """Test confirming a choice nobody was offered."""
    response = client.post(
        f"/api/sessions/{planning_room}/incidents/INC-018/choices",
        json={"team": "Alpha", "choice_id": "patch"},
    )
    assert response.status_code == 400
    assert response.get_json()["reason"] == "invalid_choice"
