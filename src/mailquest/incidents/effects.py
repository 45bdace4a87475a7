"""Incident effect engine.

Effects are interpreted one at a time, in card order. Dispatch is on the
effect's class and then on its target. Every mutation is mirrored into an
EffectChanges record so callers can report exactly what an incident did.

Clamping rules:
- Reputation is rounded then clamped to [0, 100].
- Credits and budgets are floored at 0 after rounding.
- Recorded changes are the requested deltas, except for reputation_set
  which records new - old per destination.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from mailquest.clients.portfolio import auto_correct_onboarding, finalize_team_lock
from mailquest.game_logger import GameLogger
from mailquest.incidents.triggers import EffectSelection
from mailquest.models.incidents import (
    AutoLockEffect,
    BudgetEffect,
    ClientMultiplierEffect,
    ClientSpamTrapMultiplierEffect,
    ClientVolumeMultiplierEffect,
    Condition,
    CreditsEffect,
    Effect,
    EffectDuration,
    EffectTarget,
    IncidentCard,
    NotificationEffect,
    ReputationEffect,
    ReputationSetEffect,
    condition_holds,
)
from mailquest.models.modifiers import Modifier, RoundScope, SpecificRounds, all_rounds
from mailquest.models.session import ClientState, ESPTeam, GamePhase, GameSession, clamp_reputation


class EffectTargetError(LookupError):
    """A selected target named by an effect does not exist."""


@dataclass(frozen=True)
class ModifierChange:
    team: str
    client_id: str
    kind: str  # "volume" or "spam_trap"
    multiplier: float
    rounds: tuple[int, ...]


@dataclass
class EffectChanges:
    """Accumulated consequences of a batch of effects.

    Attributes:
        esp_reputation: Team -> destination -> reputation delta
        esp_credits: Team -> credits delta
        destination_budgets: Destination -> budget delta
        client_modifiers: Modifiers appended to client states
        locked_teams: Teams locked immediately by auto_lock
        pending_auto_lock: Teams that will lock at the next planning phase
        notifications: Messages to broadcast
    """

    esp_reputation: dict[str, dict[str, float]] = field(default_factory=dict)
    esp_credits: dict[str, float] = field(default_factory=dict)
    destination_budgets: dict[str, float] = field(default_factory=dict)
    client_modifiers: list[ModifierChange] = field(default_factory=list)
    locked_teams: list[str] = field(default_factory=list)
    pending_auto_lock: list[str] = field(default_factory=list)
    notifications: list[str] = field(default_factory=list)

    def add_reputation(self, team: str, destination: str, delta: float) -> None:
        per_team = self.esp_reputation.setdefault(team, {})
        per_team[destination] = per_team.get(destination, 0) + delta

    def add_credits(self, team: str, delta: float) -> None:
        self.esp_credits[team] = self.esp_credits.get(team, 0) + delta

    def add_budget(self, destination: str, delta: float) -> None:
        self.destination_budgets[destination] = self.destination_budgets.get(destination, 0) + delta

    def to_dict(self) -> dict:
        return {
            "esp_reputation": {team: dict(values) for team, values in self.esp_reputation.items()},
            "esp_credits": dict(self.esp_credits),
            "destination_budgets": dict(self.destination_budgets),
            "client_modifiers": [
                {
                    "team": m.team,
                    "client_id": m.client_id,
                    "kind": m.kind,
                    "multiplier": m.multiplier,
                    "rounds": list(m.rounds),
                }
                for m in self.client_modifiers
            ],
            "locked_teams": list(self.locked_teams),
            "pending_auto_lock": list(self.pending_auto_lock),
            "notifications": list(self.notifications),
        }


@dataclass(frozen=True)
class EffectApplicationResult:
    success: bool
    changes: EffectChanges
    error: Optional[str] = None


# =============================================================================
# Target resolution
# =============================================================================


def _require_team(session: GameSession, name: Optional[str], target: EffectTarget) -> ESPTeam:
    team = session.find_team(name) if name else None
    if team is None:
        raise EffectTargetError(f"No team resolved for target {target.value!r} (got {name!r})")
    return team


def resolve_esp_targets(
    session: GameSession,
    target: EffectTarget,
    selection: EffectSelection,
    condition: Optional[Condition] = None,
) -> list[ESPTeam]:
    """Teams an ESP-scoped effect applies to, filtered by its condition.

    Choice options carry no selected team, so there ``selected_esp`` means
    the choosing team, just like ``self``.
    """
    if target == EffectTarget.SELECTED_ESP:
        teams = [_require_team(session, selection.team_name or selection.choosing_team, target)]
    elif target == EffectTarget.SELF:
        teams = [_require_team(session, selection.choosing_team or selection.team_name, target)]
    elif target in (EffectTarget.ALL_ESPS, EffectTarget.CONDITIONAL_ESP):
        teams = list(session.esp_teams)
    else:
        return []
    return [team for team in teams if condition_holds(condition, team.owned_tech_upgrades)]


def _selected_client(session: GameSession, selection: EffectSelection) -> tuple[ESPTeam, str, ClientState]:
    team = _require_team(session, selection.team_name, EffectTarget.SELECTED_CLIENT)
    state = team.client_states.get(selection.client_id or "")
    if state is None:
        raise EffectTargetError(f"Client {selection.client_id!r} not found for team {team.name}")
    return team, selection.client_id, state


def client_capabilities(team: ESPTeam, state: ClientState) -> set[str]:
    """Tech ids plus onboarding sources (e.g. list_hygiene) carried by a client."""
    sources = {m.source for m in state.volume_modifiers + state.spam_trap_modifiers}
    return set(team.owned_tech_upgrades) | sources


def _teams_for(
    session: GameSession,
    effect: Effect,
    selection: EffectSelection,
) -> list[ESPTeam]:
    condition = getattr(effect, "condition", None)
    if effect.target == EffectTarget.SELECTED_CLIENT:
        team, _, state = _selected_client(session, selection)
        return [team] if condition_holds(condition, client_capabilities(team, state)) else []
    return resolve_esp_targets(session, effect.target, selection, condition)


# =============================================================================
# Effect handlers
# =============================================================================


def scope_for_duration(duration: EffectDuration, current_round: int) -> RoundScope:
    if duration == EffectDuration.NEXT_ROUND:
        return SpecificRounds(rounds=(current_round + 1,))
    if duration == EffectDuration.PERMANENT:
        return all_rounds()
    return SpecificRounds(rounds=(current_round,))


def _client_targets(
    session: GameSession,
    effect: ClientMultiplierEffect,
    selection: EffectSelection,
) -> Iterable[tuple[ESPTeam, str, ClientState]]:
    if effect.target == EffectTarget.SELECTED_CLIENT:
        team, client_id, state = _selected_client(session, selection)
        if condition_holds(effect.condition, client_capabilities(team, state)):
            yield team, client_id, state
        return

    for team in resolve_esp_targets(session, EffectTarget.ALL_ESPS, selection, effect.condition):
        for client, state in team.active_client_records():
            if effect.client_types is None or client.type in effect.client_types:
                yield team, client.id, state


def _apply_client_multiplier(
    session: GameSession,
    incident_id: str,
    effect: ClientMultiplierEffect,
    selection: EffectSelection,
    changes: EffectChanges,
) -> None:
    kind = "volume" if isinstance(effect, ClientVolumeMultiplierEffect) else "spam_trap"
    scope = scope_for_duration(effect.duration, session.current_round)
    for team, client_id, state in list(_client_targets(session, effect, selection)):
        modifier = Modifier(
            id=f"{incident_id}-{kind}-{client_id}-r{session.current_round}",
            source=incident_id,
            multiplier=effect.multiplier,
            scope=scope,
        )
        if kind == "volume":
            state.volume_modifiers.append(modifier)
        else:
            state.spam_trap_modifiers.append(modifier)
        changes.client_modifiers.append(
            ModifierChange(team.name, client_id, kind, effect.multiplier, tuple(modifier.scope.rounds))
        )


def _apply_auto_lock(session: GameSession, team: ESPTeam, changes: EffectChanges) -> None:
    if team.locked_in:
        return
    if session.current_phase == GamePhase.PLANNING:
        auto_correct_onboarding(team)
        finalize_team_lock(team, session.current_round)
        changes.locked_teams.append(team.name)
    else:
        team.pending_auto_lock = True
        changes.pending_auto_lock.append(team.name)


def _apply_effect(
    session: GameSession,
    incident_id: str,
    effect: Effect,
    selection: EffectSelection,
    changes: EffectChanges,
) -> None:
    if isinstance(effect, NotificationEffect):
        changes.notifications.append(effect.message)
        return

    if isinstance(effect, BudgetEffect):
        for destination in session.destinations:
            destination.budget = max(0, round(destination.budget + effect.value))
            changes.add_budget(destination.name, effect.value)
        return

    if isinstance(effect, (ClientVolumeMultiplierEffect, ClientSpamTrapMultiplierEffect)):
        _apply_client_multiplier(session, incident_id, effect, selection, changes)
        return

    for team in _teams_for(session, effect, selection):
        if isinstance(effect, ReputationEffect):
            for destination in list(team.reputation):
                team.set_reputation(destination, team.reputation[destination] + effect.value)
                changes.add_reputation(team.name, destination, effect.value)
        elif isinstance(effect, ReputationSetEffect):
            new_value = clamp_reputation(effect.value)
            for destination, old_value in list(team.reputation.items()):
                team.reputation[destination] = new_value
                changes.add_reputation(team.name, destination, new_value - old_value)
        elif isinstance(effect, CreditsEffect):
            team.credits = max(0, round(team.credits + effect.value))
            changes.add_credits(team.name, effect.value)
        elif isinstance(effect, AutoLockEffect):
            _apply_auto_lock(session, team, changes)


def apply_effects(
    session: GameSession,
    incident_id: str,
    effects: Sequence[Effect],
    selection: EffectSelection,
    logger: GameLogger,
) -> EffectApplicationResult:
    """Apply a batch of effects in order.

    An unexpected failure stops the batch; changes made up to that point
    stay applied and are returned alongside the error.
    """
    changes = EffectChanges()
    try:
        for effect in effects:
            _apply_effect(session, incident_id, effect, selection, changes)
    except Exception as e:
        logger.error(
            "Incident effect application failed",
            room_code=session.room_code,
            incident_id=incident_id,
            error=str(e),
        )
        return EffectApplicationResult(False, changes, error=str(e))

    logger.event(
        "incident_effects_applied",
        room_code=session.room_code,
        incident_id=incident_id,
        round=session.current_round,
        changes=changes.to_dict(),
    )
    return EffectApplicationResult(True, changes)


def apply_incident_effects(
    session: GameSession,
    incident: IncidentCard,
    selection: EffectSelection,
    logger: GameLogger,
) -> EffectApplicationResult:
    return apply_effects(session, incident.id, incident.effects, selection, logger)
