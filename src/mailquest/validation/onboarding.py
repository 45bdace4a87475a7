"""Onboarding and client status validation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mailquest.models.session import ClientStatus, ESPTeam, OnboardingDecision
from mailquest.parameters import LIST_HYGIENE_COST, WARMUP_COST


class PortfolioReason(str, Enum):
    CLIENT_NOT_FOUND = "client_not_found"
    CLIENT_NOT_ACTIVE = "client_not_active"
    ALREADY_ACTIVATED = "already_activated"
    CLIENT_SUSPENDED = "client_suspended"
    SUSPEND_NOT_ALLOWED = "suspend_not_allowed"


@dataclass(frozen=True)
class PortfolioValidation:
    is_valid: bool
    reason: Optional[PortfolioReason] = None
    error: Optional[str] = None


def onboarding_cost(decision: OnboardingDecision) -> int:
    return (WARMUP_COST if decision.warmup else 0) + (LIST_HYGIENE_COST if decision.list_hygiene else 0)


def validate_onboarding_configuration(team: ESPTeam, client_id: str) -> PortfolioValidation:
    """A client may be onboarded only while it is active and never activated."""
    state = team.client_states.get(client_id)
    if state is None or client_id not in team.portfolio:
        return PortfolioValidation(
            False, PortfolioReason.CLIENT_NOT_FOUND, f"Client {client_id} not found in team portfolio"
        )
    if state.status != ClientStatus.ACTIVE:
        return PortfolioValidation(
            False, PortfolioReason.CLIENT_NOT_ACTIVE, "Onboarding can only be configured for active clients"
        )
    if state.first_active_round is not None:
        return PortfolioValidation(
            False,
            PortfolioReason.ALREADY_ACTIVATED,
            "Onboarding options are only available for clients that have not been activated yet. "
            "This client has already been activated in a previous round.",
        )
    return PortfolioValidation(True)


def validate_status_toggle(team: ESPTeam, client_id: str, new_status: ClientStatus) -> PortfolioValidation:
    """Only Active <-> Paused is allowed; suspension is engine-only and permanent."""
    state = team.client_states.get(client_id)
    if state is None:
        return PortfolioValidation(
            False, PortfolioReason.CLIENT_NOT_FOUND, f"Client {client_id} not found in team portfolio"
        )
    if state.status == ClientStatus.SUSPENDED:
        return PortfolioValidation(
            False, PortfolioReason.CLIENT_SUSPENDED, "Suspended clients cannot be reactivated"
        )
    if new_status == ClientStatus.SUSPENDED:
        return PortfolioValidation(
            False,
            PortfolioReason.SUSPEND_NOT_ALLOWED,
            "Cannot manually set Suspended status. Only the game engine can suspend clients.",
        )
    return PortfolioValidation(True)
