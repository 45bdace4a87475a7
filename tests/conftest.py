"""Shared pytest fixtures and markers for all tests."""

import random

import pytest

from mailquest.catalog import default_catalog
from mailquest.game_logger import RecordingGameLogger
from mailquest.models.session import (
    Client,
    ClientRisk,
    ClientState,
    ClientType,
    Destination,
    ESPTeam,
    FilteringPolicy,
    GamePhase,
    GameSession,
)
from mailquest.parameters import DESTINATION_STARTING_BUDGETS

DESTINATIONS = ("Gmail", "Outlook", "Yahoo")


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks pure unit tests of engine modules"
    )
    config.addinivalue_line(
        "markers", "integration: marks multi-round games driven through GameEngine"
    )
    config.addinivalue_line(
        "markers", "webapp: marks webapp-specific tests"
    )


@pytest.fixture
def logger():
    """Logger that records every event for assertions."""
    return RecordingGameLogger()


@pytest.fixture
def rng():
    """Seeded random source so client stock and selections are repeatable."""
    return random.Random(42)


@pytest.fixture
def catalog(logger):
    """The default catalog, built with the recording logger."""
    return default_catalog(logger)


@pytest.fixture
def make_client():
    """Factory for marketplace clients."""

    def _make(
        client_id="client-Alpha-000",
        client_type=ClientType.GROWING_STARTUP,
        cost=100,
        revenue=100,
        volume=10000,
        risk=ClientRisk.MEDIUM,
        spam_rate=1.0,
        **kwargs,
    ) -> Client:
        return Client(
            id=client_id,
            name=kwargs.pop("name", "Test Client"),
            type=client_type,
            cost=cost,
            revenue=revenue,
            volume=volume,
            risk=risk,
            spam_rate=spam_rate,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_team():
    """Factory for ESP teams with reputation 70 everywhere.

    Clients passed in are placed straight into the portfolio as Active,
    never-activated clients.
    """

    def _make(name="Alpha", credits=1000, reputation=70, clients=(), tech=(), players=("p1",), **kwargs) -> ESPTeam:
        team = ESPTeam(
            name=name,
            players=list(players),
            credits=credits,
            reputation={d: reputation for d in DESTINATIONS},
            owned_tech_upgrades=list(tech),
            **kwargs,
        )
        for client in clients:
            team.portfolio[client.id] = client
            team.active_clients.append(client.id)
            team.client_states[client.id] = ClientState()
        return team

    return _make


@pytest.fixture
def make_session(make_team):
    """Factory for a session with Gmail, Outlook and Yahoo destinations."""

    def _make(teams=None, phase=GamePhase.PLANNING, current_round=1, room_code="ROOM01") -> GameSession:
        if teams is None:
            teams = [make_team("Alpha"), make_team("Beta")]
        destinations = [
            Destination(
                name=name,
                players=[f"{name.lower()}-player"],
                budget=DESTINATION_STARTING_BUDGETS[name],
                filtering_policies={t.name: FilteringPolicy(esp_name=t.name) for t in teams},
            )
            for name in DESTINATIONS
        ]
        return GameSession(
            room_code=room_code,
            esp_teams=teams,
            destinations=destinations,
            current_round=current_round,
            current_phase=phase,
        )

    return _make
