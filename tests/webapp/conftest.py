"""Pytest fixtures for webapp tests."""

import pytest

from mailquest.webapp.app import create_app
from mailquest.webapp.config import TestConfig

SESSION_BODY = {
    "room_code": "WEB01",
    "esp_teams": {"Alpha": ["alice"], "Beta": ["bob"]},
    "destinations": {"Gmail": ["gina"], "Outlook": ["oscar"], "Yahoo": ["yara"]},
}


@pytest.fixture
def app():
    """Create test application with an in-memory, seeded engine."""
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def room(client):
    """A lobby session created through the API."""
    response = client.post("/api/sessions", json=SESSION_BODY)
    assert response.status_code == 201
    return SESSION_BODY["room_code"]


@pytest.fixture
def planning_room(client, room):
    """A session in round 1 planning."""
    client.post(f"/api/sessions/{room}/start")
    response = client.post(f"/api/sessions/{room}/phase", json={"phase": "planning"})
    assert response.status_code == 200
    return room
