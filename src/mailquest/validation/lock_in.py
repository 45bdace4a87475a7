"""Lock-in validation for ESP teams and destinations.

Committed purchases are already deducted from credits, so the budget check
compares pending onboarding costs against what the team still holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mailquest.models.session import ESPTeam, GamePhase, GameSession
from mailquest.validation.onboarding import onboarding_cost


class LockInReason(str, Enum):
    WRONG_PHASE = "wrong_phase"
    NOT_FOUND = "not_found"
    ALREADY_LOCKED = "already_locked"
    NEGATIVE_CREDITS = "negative_credits"
    BUDGET_EXCEEDED = "budget_exceeded"
    CHOICE_UNCONFIRMED = "choice_unconfirmed"


@dataclass(frozen=True)
class LockInValidation:
    is_valid: bool
    reason: Optional[LockInReason] = None
    error: Optional[str] = None
    pending_costs: int = 0
    excess_amount: int = 0


def pending_onboarding_costs(team: ESPTeam) -> int:
    return sum(onboarding_cost(decision) for decision in team.pending_onboarding.values())


def validate_team_budget(team: ESPTeam) -> LockInValidation:
    """Credits must be non-negative and cover pending onboarding."""
    pending = pending_onboarding_costs(team)
    if team.credits < 0:
        return LockInValidation(
            False,
            LockInReason.NEGATIVE_CREDITS,
            f"Cannot lock in with negative budget. Current credits: {team.credits}",
            pending_costs=pending,
        )
    if pending > team.credits:
        excess = pending - team.credits
        return LockInValidation(
            False,
            LockInReason.BUDGET_EXCEEDED,
            f"Budget exceeded by {excess} credits. Remove some onboarding options.",
            pending_costs=pending,
            excess_amount=excess,
        )
    return LockInValidation(True, pending_costs=pending)


def validate_lock_in(session: GameSession, team_name: str) -> LockInValidation:
    """Phase, existence, lock state, pending choices, then budget."""
    if session.current_phase != GamePhase.PLANNING:
        return LockInValidation(False, LockInReason.WRONG_PHASE, "Can only lock in during planning phase.")

    team = session.find_team(team_name)
    if team is None:
        return LockInValidation(False, LockInReason.NOT_FOUND, f'Team "{team_name}" not found.')

    if team.locked_in:
        return LockInValidation(False, LockInReason.ALREADY_LOCKED, "Team is already locked in.")

    unconfirmed = [c for c in team.pending_incident_choices if not c.confirmed]
    if unconfirmed:
        return LockInValidation(
            False,
            LockInReason.CHOICE_UNCONFIRMED,
            f"Confirm your decision on incident {unconfirmed[0].incident_id} before locking in.",
        )

    return validate_team_budget(team)


def validate_destination_lock_in(session: GameSession, destination_name: str) -> LockInValidation:
    if session.current_phase != GamePhase.PLANNING:
        return LockInValidation(False, LockInReason.WRONG_PHASE, "Can only lock in during planning phase.")

    destination = session.find_destination(destination_name)
    if destination is None:
        return LockInValidation(False, LockInReason.NOT_FOUND, f'Destination "{destination_name}" not found.')

    if destination.locked_in:
        return LockInValidation(False, LockInReason.ALREADY_LOCKED, "Destination is already locked in.")

    return LockInValidation(True)
