"""Client portfolio management: status toggles and onboarding.

Onboarding options are recorded as pending decisions during planning and
only paid for at lock-in. Committing a decision turns it into modifiers on
the client state:

- Warm-up: volume x0.5 in the client's first active round only
- List hygiene: permanent volume reduction by risk and spam trap risk x0.6
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from mailquest.models.modifiers import FirstActiveRoundOnly, Modifier, all_rounds
from mailquest.models.session import ClientStatus, ESPTeam, OnboardingDecision, utcnow
from mailquest.parameters import (
    LIST_HYGIENE_COST,
    LIST_HYGIENE_SOURCE,
    LIST_HYGIENE_SPAM_TRAP_MULTIPLIER,
    LIST_HYGIENE_VOLUME_MULTIPLIER,
    WARMUP_COST,
    WARMUP_SOURCE,
    WARMUP_VOLUME_MULTIPLIER,
)
from mailquest.validation.lock_in import validate_team_budget
from mailquest.validation.onboarding import (
    onboarding_cost,
    validate_onboarding_configuration,
    validate_status_toggle,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PortfolioResult:
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class OnboardingCorrection:
    """One onboarding option removed to fit the budget."""

    client_id: str
    client_name: str
    option: str  # "warmup" or "list_hygiene"
    cost_saved: int


@dataclass(frozen=True)
class OnboardingCommit:
    total_cost: int
    committed_clients: list[str] = field(default_factory=list)


def toggle_client_status(team: ESPTeam, client_id: str, status: ClientStatus) -> PortfolioResult:
    validation = validate_status_toggle(team, client_id, status)
    if not validation.is_valid:
        return PortfolioResult(False, validation.error)
    team.client_states[client_id].status = status
    return PortfolioResult(True)


def configure_onboarding(team: ESPTeam, client_id: str, warmup: bool, list_hygiene: bool) -> PortfolioResult:
    """Record (or clear) pending onboarding options for a never-activated client."""
    validation = validate_onboarding_configuration(team, client_id)
    if not validation.is_valid:
        return PortfolioResult(False, validation.error)

    if warmup or list_hygiene:
        team.pending_onboarding[client_id] = OnboardingDecision(warmup=warmup, list_hygiene=list_hygiene)
    else:
        team.pending_onboarding.pop(client_id, None)
    return PortfolioResult(True)


def warmup_modifier(client_id: str) -> Modifier:
    return Modifier(
        id=f"{WARMUP_SOURCE}-{client_id}",
        source=WARMUP_SOURCE,
        multiplier=WARMUP_VOLUME_MULTIPLIER,
        scope=FirstActiveRoundOnly(),
    )


def list_hygiene_modifiers(client_id: str, risk: str) -> tuple[Modifier, Modifier]:
    """(volume modifier, spam trap modifier), both permanent."""
    volume = Modifier(
        id=f"{LIST_HYGIENE_SOURCE}-volume-{client_id}",
        source=LIST_HYGIENE_SOURCE,
        multiplier=LIST_HYGIENE_VOLUME_MULTIPLIER[risk],
        scope=all_rounds(),
    )
    spam_trap = Modifier(
        id=f"{LIST_HYGIENE_SOURCE}-trap-{client_id}",
        source=LIST_HYGIENE_SOURCE,
        multiplier=LIST_HYGIENE_SPAM_TRAP_MULTIPLIER,
        scope=all_rounds(),
    )
    return volume, spam_trap


def commit_pending_onboarding(team: ESPTeam) -> OnboardingCommit:
    """Pay for pending onboarding options and attach their modifiers.

    Decisions for clients that have since been activated or removed are
    dropped without charge. The pending map is always cleared.
    """
    total_cost = 0
    committed = []
    for client_id, decision in team.pending_onboarding.items():
        state = team.client_states.get(client_id)
        client = team.portfolio.get(client_id)
        if state is None or client is None or state.first_active_round is not None:
            continue

        if decision.warmup and not state.has_modifier_from(WARMUP_SOURCE):
            state.volume_modifiers.append(warmup_modifier(client_id))
        if decision.list_hygiene and not state.has_modifier_from(LIST_HYGIENE_SOURCE):
            volume, spam_trap = list_hygiene_modifiers(client_id, client.risk.value)
            state.volume_modifiers.append(volume)
            state.spam_trap_modifiers.append(spam_trap)

        total_cost += onboarding_cost(decision)
        committed.append(client_id)

    team.credits -= total_cost
    team.pending_onboarding = {}
    if committed:
        logger.info(f"Committed onboarding for {team.name}: {len(committed)} clients, {total_cost} credits")
    return OnboardingCommit(total_cost=total_cost, committed_clients=committed)


def auto_correct_onboarding(team: ESPTeam) -> list[OnboardingCorrection]:
    """Drop pending options until the team can afford them.

    Warm-up options (the expensive ones) go first, one at a time, then
    list hygiene. Stops as soon as the budget validates.
    """
    corrections: list[OnboardingCorrection] = []

    for option, cost in (("warmup", WARMUP_COST), ("list_hygiene", LIST_HYGIENE_COST)):
        for client_id, decision in list(team.pending_onboarding.items()):
            if validate_team_budget(team).is_valid:
                break
            if not getattr(decision, option):
                continue
            team.pending_onboarding[client_id] = decision.model_copy(update={option: False})
            client = team.portfolio.get(client_id)
            corrections.append(
                OnboardingCorrection(
                    client_id=client_id,
                    client_name=client.name if client else client_id,
                    option=option,
                    cost_saved=cost,
                )
            )

    # Drop decisions left with no options selected
    team.pending_onboarding = {
        cid: d for cid, d in team.pending_onboarding.items() if d.warmup or d.list_hygiene
    }
    return corrections


def activate_clients(team: ESPTeam, current_round: int) -> list[str]:
    """Set first_active_round on every Active client that lacks one.

    Paused clients keep None until the first round they actually send.
    """
    activated = []
    for client_id in team.active_clients:
        state = team.client_states.get(client_id)
        if state is not None and state.status == ClientStatus.ACTIVE and state.activate(current_round):
            activated.append(client_id)
    return activated


def finalize_team_lock(team: ESPTeam, current_round: int) -> OnboardingCommit:
    """Commit onboarding, activate new clients and lock the team."""
    commit = commit_pending_onboarding(team)
    activate_clients(team, current_round)
    team.locked_in = True
    team.locked_in_at = utcnow()
    return commit
