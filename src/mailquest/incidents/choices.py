"""Incident choice manager.

Choice incidents ask one or more teams to pick an option. Each target team
gets a PendingChoice seeded with the default option; confirming a choice
applies its effects immediately. A team may confirm again to switch options
before it locks in, but effects of the previously confirmed option are not
rolled back. If an option fails partway, the previous choice stays pending
and the changes made before the failure stay applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from mailquest.game_logger import GameLogger
from mailquest.incidents.effects import EffectChanges, apply_effects
from mailquest.incidents.triggers import EffectSelection
from mailquest.models.incidents import IncidentCard, TeamSelection
from mailquest.models.session import ESPTeam, GameSession, PendingChoice


@dataclass(frozen=True)
class ChoiceInitiation:
    success: bool
    target_teams: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass(frozen=True)
class ChoiceResult:
    success: bool
    choice_id: Optional[str] = None
    changes: Optional[EffectChanges] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class PendingChoiceApplication:
    success: bool
    applied: bool = False
    choice_id: Optional[str] = None
    error: Optional[str] = None


def resolve_target_teams(session: GameSession, criterion: TeamSelection) -> list[str]:
    """Team names selected by a choice card.

    Reputation criteria compare the unweighted mean across destinations;
    on a tie the team listed first wins.
    """
    if not session.esp_teams:
        return []
    if criterion == TeamSelection.ALL_ESPS:
        return [team.name for team in session.esp_teams]

    best = session.esp_teams[0]
    for team in session.esp_teams[1:]:
        if criterion == TeamSelection.HIGHEST_REPUTATION and team.mean_reputation() > best.mean_reputation():
            best = team
        elif criterion == TeamSelection.LOWEST_REPUTATION and team.mean_reputation() < best.mean_reputation():
            best = team
    return [best.name]


def initiate_pending_choices(session: GameSession, incident: IncidentCard) -> ChoiceInitiation:
    config = incident.choice_config
    if config is None:
        return ChoiceInitiation(False, error=f"Incident {incident.id} is not a choice incident")

    target_teams = resolve_target_teams(session, config.target_selection)
    if not target_teams:
        return ChoiceInitiation(False, error="No target teams resolved for choice incident")

    default = config.default_option()
    if default is None:
        return ChoiceInitiation(False, error="No options defined for choice incident")

    option_ids = [option.id for option in config.options]
    for name in target_teams:
        team = session.find_team(name)
        team.pending_incident_choices = [
            c for c in team.pending_incident_choices if c.incident_id != incident.id
        ]
        team.pending_incident_choices.append(
            PendingChoice(incident_id=incident.id, choice_id=default.id, option_ids=option_ids)
        )
    return ChoiceInitiation(True, target_teams=target_teams)


def set_pending_choice(
    session: GameSession,
    incident: IncidentCard,
    team_name: str,
    choice_id: str,
    logger: GameLogger,
) -> ChoiceResult:
    """Confirm a team's option and apply its effects right away."""
    team = session.find_team(team_name)
    if team is None:
        return ChoiceResult(False, error=f"Team {team_name} not found")

    if not team.pending_incident_choices:
        return ChoiceResult(False, error=f"Team {team_name} has no pending choice")

    pending = team.find_pending_choice(incident.id)
    if pending is None:
        expected = ", ".join(c.incident_id for c in team.pending_incident_choices)
        return ChoiceResult(
            False, error=f"Pending incident ID does not match: expected {expected}, got {incident.id}"
        )

    option = incident.choice_config.option(choice_id) if incident.choice_config else None
    if option is None or choice_id not in pending.option_ids:
        return ChoiceResult(
            False,
            error=f"Invalid choice option: {choice_id}. Valid options: {', '.join(pending.option_ids)}",
        )

    previous_choice_id, previously_confirmed = pending.choice_id, pending.confirmed
    # Mark before applying so an auto_lock inside the option sees a confirmed choice
    pending.choice_id = choice_id
    pending.confirmed = True

    application = apply_effects(
        session, incident.id, option.effects, EffectSelection(choosing_team=team.name), logger
    )
    if not application.success:
        pending.choice_id = previous_choice_id
        pending.confirmed = previously_confirmed
        logger.event(
            "incident_choice_failed",
            room_code=session.room_code,
            incident_id=incident.id,
            team=team.name,
            choice_id=choice_id,
            error=application.error,
        )
        return ChoiceResult(False, choice_id=choice_id, changes=application.changes, error=application.error)

    pending.effects_applied = True
    logger.event(
        "incident_choice_confirmed",
        room_code=session.room_code,
        incident_id=incident.id,
        team=team.name,
        choice_id=choice_id,
    )
    return ChoiceResult(True, choice_id=choice_id, changes=application.changes)


def unsettled_choice_error(
    team: ESPTeam,
    incident_for: Callable[[str], Optional[IncidentCard]],
) -> Optional[str]:
    """Why the team's pending choices cannot all be settled, or None.

    Checked before any choice is settled so a lock-in either settles every
    choice or none.
    """
    for pending in team.pending_incident_choices:
        if not pending.confirmed:
            return f"Choice for team {team.name} is not confirmed"
        if pending.effects_applied:
            continue
        incident = incident_for(pending.incident_id)
        config = incident.choice_config if incident is not None else None
        if config is None or config.option(pending.choice_id) is None:
            return f"Choice option {pending.choice_id} not found"
    return None


def apply_pending_choice_effects(
    session: GameSession,
    incident: IncidentCard,
    team: ESPTeam,
    logger: GameLogger,
) -> PendingChoiceApplication:
    """Settle a team's pending choice on ``incident`` at lock-in.

    Confirmed choices already had their effects applied, so this just clears
    them. An unconfirmed choice blocks lock-in.
    """
    pending = team.find_pending_choice(incident.id)
    if pending is None:
        return PendingChoiceApplication(False, error=f"Team {team.name} has no pending choice for {incident.id}")

    if not pending.confirmed:
        return PendingChoiceApplication(False, error=f"Choice for team {team.name} is not confirmed")

    if pending.effects_applied:
        team.pending_incident_choices.remove(pending)
        return PendingChoiceApplication(True, applied=False, choice_id=pending.choice_id)

    option = incident.choice_config.option(pending.choice_id) if incident.choice_config else None
    if option is None:
        return PendingChoiceApplication(False, error=f"Choice option {pending.choice_id} not found")

    application = apply_effects(
        session, incident.id, option.effects, EffectSelection(choosing_team=team.name), logger
    )
    if not application.success:
        return PendingChoiceApplication(False, choice_id=pending.choice_id, error=application.error)
    team.pending_incident_choices.remove(pending)
    return PendingChoiceApplication(True, applied=True, choice_id=pending.choice_id)
