"""Game phase state machine.

    lobby -> resource_allocation -> planning -> resolution -> consequences
                                       ^                           |
                                       +------- (next round) ------+--> finished

The round counter moves only on entry to planning: round 0 becomes 1, and
consequences -> planning advances to the next round. Once MAX_ROUNDS has been
played the only way out of consequences is finished.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from mailquest.catalog import Catalog
from mailquest.catalog.destination_tools import SPAM_TRAP_NETWORK
from mailquest.clients.portfolio import auto_correct_onboarding, finalize_team_lock
from mailquest.engine.investigation import clear_votes
from mailquest.game_logger import GameLogger
from mailquest.incidents.choices import initiate_pending_choices
from mailquest.incidents.effects import apply_incident_effects
from mailquest.incidents.triggers import get_automatic_incidents, trigger_incident
from mailquest.models.session import GamePhase, GameSession, utcnow
from mailquest.parameters import MAX_ROUNDS

VALID_TRANSITIONS: dict[GamePhase, tuple[GamePhase, ...]] = {
    GamePhase.LOBBY: (GamePhase.RESOURCE_ALLOCATION,),
    GamePhase.RESOURCE_ALLOCATION: (GamePhase.PLANNING,),
    GamePhase.PLANNING: (GamePhase.RESOLUTION,),
    GamePhase.RESOLUTION: (GamePhase.CONSEQUENCES,),
    GamePhase.CONSEQUENCES: (GamePhase.PLANNING, GamePhase.FINISHED),
    GamePhase.FINISHED: (),
}


@dataclass(frozen=True)
class PhaseTransitionResult:
    success: bool
    phase: Optional[GamePhase] = None
    round: Optional[int] = None
    phase_start_time: Optional[datetime] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class PlanningEntry:
    """What happened when a new planning phase opened."""

    auto_locked_teams: list[str] = field(default_factory=list)
    removed_tools: dict[str, list[str]] = field(default_factory=dict)
    automatic_incidents: list[str] = field(default_factory=list)


def transition_error(session: GameSession, to_phase: GamePhase) -> Optional[str]:
    """Why the transition is illegal, or None."""
    if to_phase not in VALID_TRANSITIONS.get(session.current_phase, ()):
        return f"Invalid phase transition from {session.current_phase.value} to {to_phase.value}"
    if (
        session.current_phase == GamePhase.CONSEQUENCES
        and to_phase == GamePhase.PLANNING
        and session.current_round >= MAX_ROUNDS
    ):
        return f"Round {MAX_ROUNDS} was the final round; the game must move to finished"
    return None


def transition_phase(session: GameSession, to_phase: GamePhase, logger: GameLogger) -> PhaseTransitionResult:
    """Move the session to another phase, applying the round rules.

    This only changes phase bookkeeping; planning entry hooks and resolution
    are run by the caller.
    """
    from_phase = session.current_phase
    error = transition_error(session, to_phase)
    if error:
        logger.event(
            "phase_transition_failed",
            room_code=session.room_code,
            from_phase=from_phase.value,
            to_phase=to_phase.value,
            reason=error,
        )
        return PhaseTransitionResult(False, error=error)

    session.current_phase = to_phase
    if to_phase == GamePhase.PLANNING:
        if session.current_round == 0:
            session.current_round = 1
        elif from_phase == GamePhase.CONSEQUENCES:
            session.current_round += 1

    session.phase_start_time = utcnow()
    session.touch()

    logger.event(
        "phase_transition",
        room_code=session.room_code,
        from_phase=from_phase.value,
        to_phase=to_phase.value,
        round=session.current_round,
        timestamp=session.phase_start_time.isoformat(),
    )
    return PhaseTransitionResult(
        True,
        phase=to_phase,
        round=session.current_round,
        phase_start_time=session.phase_start_time,
    )


def reset_lock_ins(session: GameSession) -> None:
    """Unlock everyone and drop last round's settled incident choices."""
    for team in session.esp_teams:
        team.locked_in = False
        team.locked_in_at = None
        team.pending_incident_choices = [c for c in team.pending_incident_choices if not c.effects_applied]
    for destination in session.destinations:
        destination.locked_in = False
        destination.locked_in_at = None


def remove_expired_tools(session: GameSession, catalog: Catalog) -> dict[str, list[str]]:
    """Drop single-round tools and end spam trap deployments."""
    removed = {}
    for destination in session.destinations:
        expired = []
        for tool_id in destination.owned_tools:
            tool = catalog.destination_tool(tool_id)
            if tool is not None and not tool.permanent:
                expired.append(tool_id)
        if expired:
            destination.owned_tools = [t for t in destination.owned_tools if t not in expired]
            removed[destination.name] = expired
        if destination.spam_trap_active is not None and SPAM_TRAP_NETWORK not in destination.owned_tools:
            destination.spam_trap_active = None
    return removed


def enter_planning(
    session: GameSession,
    catalog: Catalog,
    rng: random.Random,
    logger: GameLogger,
) -> PlanningEntry:
    """Prepare a freshly opened planning phase.

    Order: lock flags are reset, last round's investigation votes are
    cleared, pending auto-locks are honored, single-round tools expire, then
    the round's automatic incidents fire.
    """
    reset_lock_ins(session)
    clear_votes(session, logger)

    auto_locked = []
    for team in session.esp_teams:
        if team.pending_auto_lock:
            team.pending_auto_lock = False
            auto_correct_onboarding(team)
            finalize_team_lock(team, session.current_round)
            auto_locked.append(team.name)
            logger.event(
                "pending_auto_lock_applied",
                room_code=session.room_code,
                team=team.name,
                round=session.current_round,
            )

    removed_tools = remove_expired_tools(session, catalog)

    triggered = []
    for incident in get_automatic_incidents(catalog, session.current_round):
        result = trigger_incident(session, catalog, incident.id, rng, logger)
        if not result.success:
            logger.warning(
                "Automatic incident not triggered",
                room_code=session.room_code,
                incident_id=incident.id,
                error=result.error,
            )
            continue
        apply_incident_effects(session, incident, result.selection, logger)
        if incident.choice_config is not None:
            initiate_pending_choices(session, incident)
        triggered.append(incident.id)

    return PlanningEntry(auto_locked, removed_tools, triggered)
