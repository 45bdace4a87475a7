"""Incident trigger manager.

Triggering an incident validates it against the current round and the game's
incident history, resolves any facilitator/random selection it needs, and
records it in history. Effects are applied separately by
mailquest.incidents.effects so the caller can apply them against the
resolved selection.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from mailquest.catalog import Catalog
from mailquest.game_logger import GameLogger
from mailquest.models.incidents import EffectTarget, IncidentCard
from mailquest.models.session import ClientStatus, GameSession, IncidentHistoryEntry


@dataclass(frozen=True)
class EffectSelection:
    """Who selected targets resolve to when effects are applied.

    Attributes:
        team_name: Team for ``selected_esp`` and owner for ``selected_client``
        client_id: Client picked for ``selected_client`` effects
        choosing_team: Team for ``self`` effects on choice options
    """

    team_name: Optional[str] = None
    client_id: Optional[str] = None
    choosing_team: Optional[str] = None


@dataclass(frozen=True)
class TriggerResult:
    success: bool
    incident: Optional[IncidentCard] = None
    selection: EffectSelection = field(default_factory=EffectSelection)
    error: Optional[str] = None


def get_available_incidents(catalog: Catalog, round_number: int) -> list[IncidentCard]:
    return catalog.incidents_for_round(round_number)


def get_automatic_incidents(catalog: Catalog, round_number: int) -> list[IncidentCard]:
    return catalog.automatic_incidents_for_round(round_number)


def was_triggered(session: GameSession, incident_id: str) -> bool:
    return any(entry.incident_id == incident_id for entry in session.incident_history)


def trigger_error(session: GameSession, catalog: Catalog, incident_id: str) -> Optional[str]:
    """The reason an incident cannot fire now, or None if it can."""
    incident = catalog.incident(incident_id)
    if incident is None:
        return f"Incident {incident_id} not found"
    if not incident.available_in(session.current_round):
        return f"Incident {incident_id} is not available for round {session.current_round}"
    if was_triggered(session, incident_id):
        return f"Incident {incident_id} was already triggered in this game"
    return None


def can_trigger_incident(session: GameSession, catalog: Catalog, incident_id: str) -> bool:
    return trigger_error(session, catalog, incident_id) is None


def select_random_active_client(session: GameSession, team_name: str, rng: random.Random) -> Optional[str]:
    team = session.find_team(team_name)
    if team is None:
        return None
    candidates = [
        client_id
        for client_id in team.active_clients
        if client_id in team.client_states and team.client_states[client_id].status == ClientStatus.ACTIVE
    ]
    if not candidates:
        return None
    return rng.choice(candidates)


def trigger_incident(
    session: GameSession,
    catalog: Catalog,
    incident_id: str,
    rng: random.Random,
    logger: GameLogger,
    selected_team: Optional[str] = None,
) -> TriggerResult:
    """Validate and record an incident.

    Incidents with ``selected_esp`` or ``selected_client`` effects need a
    selected team; for ``selected_client`` one of that team's Active clients
    is drawn uniformly at random. Nothing is recorded on failure.
    """
    error = trigger_error(session, catalog, incident_id)
    if error:
        return TriggerResult(False, error=error)

    incident = catalog.incident(incident_id)
    selection = EffectSelection()

    if incident.targets(EffectTarget.SELECTED_ESP, EffectTarget.SELECTED_CLIENT):
        if not selected_team:
            return TriggerResult(False, error=f"Incident {incident_id} requires a selected ESP team")
        team = session.find_team(selected_team)
        if team is None:
            return TriggerResult(False, error=f"Team {selected_team} not found")
        client_id = None
        if incident.targets(EffectTarget.SELECTED_CLIENT):
            client_id = select_random_active_client(session, team.name, rng)
            if client_id is None:
                return TriggerResult(
                    False, error=f"Team {team.name} has no active clients for incident {incident_id}"
                )
        selection = EffectSelection(team_name=team.name, client_id=client_id)

    session.incident_history.append(
        IncidentHistoryEntry(
            incident_id=incident.id,
            name=incident.name,
            category=incident.category,
            round_triggered=session.current_round,
        )
    )

    logger.event(
        "incident_triggered",
        room_code=session.room_code,
        incident_id=incident.id,
        incident_name=incident.name,
        round=session.current_round,
        phase=session.current_phase.value,
        automatic=incident.automatic,
        selected_team=selection.team_name,
        selected_client=selection.client_id,
    )
    return TriggerResult(True, incident=incident, selection=selection)
