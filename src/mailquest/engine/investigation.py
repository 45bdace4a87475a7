"""Destination investigation votes.

During planning each destination may vote to investigate one ESP. A vote
needs INVESTIGATION_COST in budget but is only charged if the investigation
actually runs. At resolution, an ESP that gathered votes from at least
two thirds of the destinations with players is investigated:

1. every voter pays INVESTIGATION_COST (budgets floor at 0)
2. the ESP's Active High-risk clients missing warm-up or list hygiene are
   violations
3. the violator with the highest spam rate is suspended

Votes are cleared when the next planning phase opens.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from mailquest.game_logger import GameLogger
from mailquest.models.session import (
    ClientRisk,
    ClientState,
    ClientStatus,
    GamePhase,
    GameSession,
    InvestigationHistoryEntry,
    InvestigationVote,
)
from mailquest.parameters import (
    INVESTIGATION_COST,
    INVESTIGATION_THRESHOLD,
    LIST_HYGIENE_SOURCE,
    WARMUP_SOURCE,
)


@dataclass(frozen=True)
class VoteResult:
    success: bool
    votes: dict[str, list[str]] = field(default_factory=dict)
    reserved_credits: int = 0
    error: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class InvestigationTrigger:
    triggered: bool
    target_esp: Optional[str] = None
    voters: list[str] = field(default_factory=list)
    threshold: int = 0


# =============================================================================
# Voting
# =============================================================================


def tally_votes(session: GameSession) -> dict[str, list[str]]:
    """ESP name -> destinations voting for it, in destination order."""
    votes: dict[str, list[str]] = {}
    for destination in session.destinations:
        if destination.pending_investigation_vote is not None:
            votes.setdefault(destination.pending_investigation_vote.esp_name, []).append(destination.name)
    return votes


def cast_vote(session: GameSession, destination_name: str, target_esp: str, logger: GameLogger) -> VoteResult:
    """Record (or change) a destination's vote."""
    destination = session.find_destination(destination_name)
    if destination is None:
        return VoteResult(False, error="Destination not found", reason="destination_not_found")

    team = session.find_team(target_esp)
    if team is None or not team.players:
        return VoteResult(False, error="Invalid ESP target", reason="invalid_target")

    if session.current_phase != GamePhase.PLANNING:
        return VoteResult(False, error="Voting is only available during planning phase", reason="wrong_phase")

    if destination.locked_in:
        return VoteResult(False, error="Cannot vote after locking in", reason="locked_in")

    if destination.budget < INVESTIGATION_COST:
        return VoteResult(
            False,
            error=f"Insufficient budget. Requires {INVESTIGATION_COST} credits to vote.",
            reason="insufficient_budget",
        )

    previous = destination.pending_investigation_vote
    destination.pending_investigation_vote = InvestigationVote(esp_name=team.name)
    votes = tally_votes(session)

    logger.event(
        "investigation_vote_cast",
        room_code=session.room_code,
        destination=destination.name,
        target_esp=team.name,
        previous_vote=previous.esp_name if previous else None,
        current_vote_count=len(votes[team.name]),
    )
    return VoteResult(True, votes=votes, reserved_credits=INVESTIGATION_COST)


def remove_vote(session: GameSession, destination_name: str, logger: GameLogger) -> VoteResult:
    destination = session.find_destination(destination_name)
    if destination is None:
        return VoteResult(False, error="Destination not found", reason="destination_not_found")

    if destination.locked_in:
        return VoteResult(False, error="Cannot modify vote after locking in", reason="locked_in")

    previous = destination.pending_investigation_vote
    destination.pending_investigation_vote = None
    if previous is not None:
        logger.event(
            "investigation_vote_removed",
            room_code=session.room_code,
            destination=destination.name,
            previous_vote=previous.esp_name,
        )
    return VoteResult(True, votes=tally_votes(session))


def clear_votes(session: GameSession, logger: GameLogger) -> None:
    for destination in session.destinations:
        destination.pending_investigation_vote = None
    logger.event("investigation_votes_cleared", room_code=session.room_code, round=session.current_round)


# =============================================================================
# Trigger and investigation
# =============================================================================


def vote_threshold(session: GameSession) -> int:
    """Votes needed: two thirds of destinations with players, rounded up."""
    return math.ceil(len(session.participating_destinations()) * INVESTIGATION_THRESHOLD)


def check_trigger(session: GameSession, logger: GameLogger) -> InvestigationTrigger:
    """First ESP, in vote order, whose votes reach the threshold."""
    votes = tally_votes(session)
    threshold = vote_threshold(session)
    for esp_name, voters in votes.items():
        if voters and len(voters) >= threshold:
            logger.event(
                "investigation_trigger_check",
                room_code=session.room_code,
                esp_name=esp_name,
                voter_count=len(voters),
                threshold=threshold,
                triggered=True,
            )
            return InvestigationTrigger(True, target_esp=esp_name, voters=list(voters), threshold=threshold)

    logger.event(
        "investigation_trigger_check",
        room_code=session.room_code,
        votes=votes,
        threshold=threshold,
        triggered=False,
    )
    return InvestigationTrigger(False, threshold=threshold)


def missing_protection(state: ClientState) -> Optional[str]:
    has_warmup = state.has_modifier_from(WARMUP_SOURCE)
    has_list_hygiene = state.has_modifier_from(LIST_HYGIENE_SOURCE)
    if not has_warmup and not has_list_hygiene:
        return "both"
    if not has_warmup:
        return "warmup"
    if not has_list_hygiene:
        return "list_hygiene"
    return None


def run_investigation(
    session: GameSession,
    target_esp: str,
    voters: list[str],
    logger: GameLogger,
) -> InvestigationHistoryEntry:
    """Investigate an ESP and suspend its worst unprotected High-risk client.

    Among violators the highest spam rate wins; ties go to the client
    acquired first.
    """
    team = session.find_team(target_esp)
    entry = InvestigationHistoryEntry(round=session.current_round, target_esp=target_esp, voters=list(voters))
    if team is None:
        entry.message = "ESP team not found"
        return entry

    worst = None
    for client, state in team.active_client_records():
        if client.risk != ClientRisk.HIGH or missing_protection(state) is None:
            continue
        if worst is None or client.spam_rate > worst[0].spam_rate:
            worst = (client, state)

    if worst is None:
        entry.message = "No violations detected - appears compliant"
        logger.event(
            "investigation_resolution",
            room_code=session.room_code,
            target_esp=team.name,
            voters=entry.voters,
            result="no_violation",
        )
        return entry

    client, state = worst
    entry.violation_found = True
    entry.suspended_client_id = client.id
    entry.missing_protection = missing_protection(state)
    entry.message = f"Bad practices found - {client.name} has been suspended"
    state.status = ClientStatus.SUSPENDED

    logger.event(
        "investigation_resolution",
        room_code=session.room_code,
        target_esp=team.name,
        voters=entry.voters,
        result="violation_found",
        suspended_client_id=client.id,
        spam_rate=client.spam_rate,
        missing_protection=entry.missing_protection,
    )
    return entry


def resolve_investigation(session: GameSession, logger: GameLogger) -> Optional[InvestigationHistoryEntry]:
    """Run the round's investigation if the votes call for one.

    Voters are charged and the outcome is appended to the session's
    investigation history. Returns None when nothing triggered.
    """
    trigger = check_trigger(session, logger)
    if not trigger.triggered:
        return None

    for name in trigger.voters:
        destination = session.find_destination(name)
        destination.budget = max(0, destination.budget - INVESTIGATION_COST)

    entry = run_investigation(session, trigger.target_esp, trigger.voters, logger)
    session.investigation_history.append(entry)
    return entry
