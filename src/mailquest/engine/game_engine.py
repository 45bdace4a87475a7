"""Game engine facade for Mailquest.

GameEngine is the single mutation path for game sessions. Every public
operation is keyed by room code, runs under that room's lock, loads the
session from the store, mutates it, saves it and returns an EngineResult.
Public methods never raise: unexpected exceptions are logged and reported
as failed results.

Round flow:
1. lobby -> resource_allocation: starting credits, reputation, budgets,
   client stock and filtering policies are allocated
2. resource_allocation -> planning: round 1 opens
3. planning: purchases, acquisitions, onboarding, incidents, lock-in
4. planning -> resolution: fires when every player has locked in, or when
   the facilitator ends the phase early (stragglers are auto-locked)
5. resolution -> consequences: a voted investigation runs, then results
   are computed, archived and applied, and the phase moves on immediately
6. consequences -> planning (next round) or finished
"""

from __future__ import annotations

import random
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Optional

from mailquest.catalog import Catalog, default_catalog
from mailquest.catalog.destination_tools import SPAM_TRAP_NETWORK
from mailquest.clients import (
    acquire_client as acquire_client_for_team,
    auto_correct_onboarding,
    configure_onboarding as configure_client_onboarding,
    finalize_team_lock,
    generate_client_stock,
    toggle_client_status as toggle_status,
)
from mailquest.engine.application import apply_resolution_to_game_state
from mailquest.engine.investigation import cast_vote, remove_vote, resolve_investigation, tally_votes
from mailquest.engine.phases import enter_planning, transition_phase as move_phase
from mailquest.engine.resolution import execute_resolution
from mailquest.engine.scoring import calculate_final_scores
from mailquest.game_logger import GameLogger, LoggingGameLogger
from mailquest.incidents import (
    apply_incident_effects,
    apply_pending_choice_effects,
    can_trigger_incident,
    get_available_incidents,
    initiate_pending_choices,
    set_pending_choice,
    unsettled_choice_error,
    trigger_incident as trigger_incident_for_session,
)
from mailquest.models.session import (
    ClientStatus,
    Destination,
    ESPTeam,
    FilteringLevel,
    FilteringPolicy,
    GamePhase,
    GameSession,
    ResolutionHistoryEntry,
    SpamTrapDeployment,
    utcnow,
)
from mailquest.parameters import (
    DESTINATION_STARTING_BUDGETS,
    ESP_STARTING_CREDITS,
    ESP_STARTING_REPUTATION,
    INVESTIGATION_COST,
)
from mailquest.storage import InMemorySessionRepository, SessionRepository
from mailquest.validation import (
    tech_error_message,
    tool_error_message,
    validate_destination_lock_in,
    validate_lock_in,
    validate_tech_purchase,
    validate_tool_purchase,
)

SESSION_NOT_FOUND = "session_not_found"


@dataclass(frozen=True)
class EngineResult:
    """Outcome of a GameEngine operation.

    Attributes:
        success: Whether the operation took effect
        data: Operation-specific payload (JSON-compatible)
        error: Human-readable failure message
        reason: Machine-readable failure reason, when one applies
    """

    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, **self.data}
        if self.error is not None:
            result["error"] = self.error
        if self.reason is not None:
            result["reason"] = self.reason
        return result


def _ok(**data: Any) -> EngineResult:
    return EngineResult(True, data=data)


def _fail(error: str, reason: Optional[str] = None, **data: Any) -> EngineResult:
    return EngineResult(False, data=data, error=error, reason=reason)


class GameEngine:
    """Room-keyed game operations over a session store.

    Args:
        store: Session repository (in-memory by default)
        catalog: Static catalog tables (default catalog if None)
        logger: Structured game logger (stdlib logging by default)
        rng: Random source for client variance and incident targets
    """

    def __init__(
        self,
        store: Optional[SessionRepository] = None,
        catalog: Optional[Catalog] = None,
        logger: Optional[GameLogger] = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store if store is not None else InMemorySessionRepository()
        self.logger = logger if logger is not None else LoggingGameLogger()
        self.catalog = catalog if catalog is not None else default_catalog(self.logger)
        self.rng = rng if rng is not None else random.Random()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # =========================================================================
    # Plumbing
    # =========================================================================

    def _room_lock(self, room_code: str) -> threading.Lock:
        with self._locks_guard:
            if room_code not in self._locks:
                self._locks[room_code] = threading.Lock()
            return self._locks[room_code]

    def _run(
        self,
        room_code: str,
        operation: str,
        action: Callable[[GameSession], EngineResult],
    ) -> EngineResult:
        """Run an operation on a session under the room lock and save it."""
        with self._room_lock(room_code):
            try:
                session = self.store.get(room_code)
                if session is None:
                    self.logger.event(f"{operation}_failed", room_code=room_code, reason=SESSION_NOT_FOUND)
                    return _fail("Session not found", SESSION_NOT_FOUND)
                result = action(session)
                session.touch()
                self.store.save(session)
                return result
            except Exception as e:
                self.logger.error(
                    f"Unexpected error in {operation}",
                    room_code=room_code,
                    exception=repr(e),
                )
                return _fail(f"{operation} failed: {e}", "internal_error")

    def _team(self, session: GameSession, team_name: str) -> Optional[ESPTeam]:
        return session.find_team(team_name)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(
        self,
        room_code: str,
        esp_teams: dict[str, list[str]],
        destinations: dict[str, list[str]],
    ) -> EngineResult:
        """Register a new lobby session.

        Args:
            esp_teams: Team name -> player names
            destinations: Destination kingdom -> player names
        """
        with self._room_lock(room_code):
            if self.store.get(room_code) is not None:
                return _fail(f"Room {room_code} already exists", "room_exists")
            session = GameSession(
                room_code=room_code,
                esp_teams=[ESPTeam(name=name, players=list(players)) for name, players in esp_teams.items()],
                destinations=[
                    Destination(name=name, players=list(players)) for name, players in destinations.items()
                ],
            )
            self.store.save(session)
            self.logger.event(
                "session_created",
                room_code=room_code,
                esp_teams=list(esp_teams),
                destinations=list(destinations),
            )
            return _ok(room_code=room_code)

    def get_session(self, room_code: str) -> Optional[GameSession]:
        return self.store.get(room_code)

    def delete_session(self, room_code: str) -> bool:
        with self._room_lock(room_code):
            deleted = self.store.delete(room_code)
        with self._locks_guard:
            self._locks.pop(room_code, None)
        return deleted

    # =========================================================================
    # Phases
    # =========================================================================

    def start_resource_allocation(self, room_code: str) -> EngineResult:
        return self._run(room_code, "resource_allocation", self._start_resource_allocation)

    def _start_resource_allocation(self, session: GameSession) -> EngineResult:
        if session.current_phase != GamePhase.LOBBY:
            return _fail(f"Cannot allocate resources during {session.current_phase.value} phase", "wrong_phase")
        if not session.participating_teams() or not session.participating_destinations():
            return _fail(
                "Cannot start game: at least one ESP team and one destination need players",
                "insufficient_players",
            )

        transition = move_phase(session, GamePhase.RESOURCE_ALLOCATION, self.logger)
        if not transition.success:
            return _fail(transition.error, "invalid_transition")

        destination_names = session.destination_names()
        for team in session.esp_teams:
            team.credits = ESP_STARTING_CREDITS
            team.reputation = {name: ESP_STARTING_REPUTATION for name in destination_names}
            team.available_clients = generate_client_stock(
                team.name, self.rng, self.catalog.client_profiles, self.catalog.client_names
            )
            team.portfolio = {}
            team.active_clients = []
            team.client_states = {}
            team.owned_tech_upgrades = []

        for destination in session.destinations:
            destination.budget = DESTINATION_STARTING_BUDGETS.get(destination.name, 0)
            destination.filtering_policies = {
                team.name: FilteringPolicy(esp_name=team.name) for team in session.esp_teams
            }
            destination.esp_reputation = {team.name: ESP_STARTING_REPUTATION for team in session.esp_teams}

        self.logger.event(
            "resources_allocated",
            room_code=session.room_code,
            esp_teams=[t.name for t in session.esp_teams],
            credits=ESP_STARTING_CREDITS,
            budgets={d.name: d.budget for d in session.destinations},
        )
        return _ok(phase=session.current_phase.value, round=session.current_round)

    def transition_phase(self, room_code: str, to_phase: GamePhase | str) -> EngineResult:
        """Facilitator-driven phase change.

        Entering resource_allocation allocates resources, entering planning
        runs the round-start hooks and entering resolution resolves the
        round (only once every player is locked in).
        """
        try:
            target = GamePhase(to_phase)
        except ValueError:
            return _fail(f"Unknown phase: {to_phase}", "invalid_phase")

        if target == GamePhase.RESOURCE_ALLOCATION:
            return self.start_resource_allocation(room_code)
        return self._run(room_code, "phase_transition", lambda session: self._transition(session, target))

    def _transition(self, session: GameSession, target: GamePhase) -> EngineResult:
        if target == GamePhase.RESOLUTION:
            if session.current_phase == GamePhase.PLANNING and not session.all_locked_in():
                return _fail(
                    f"{session.remaining_players_count()} players have not locked in",
                    "players_not_locked",
                )
            return self._resolve_round(session)

        transition = move_phase(session, target, self.logger)
        if not transition.success:
            return _fail(transition.error, "invalid_transition")

        data: dict[str, Any] = {"phase": target.value, "round": session.current_round}
        if target == GamePhase.PLANNING:
            data["planning"] = asdict(enter_planning(session, self.catalog, self.rng, self.logger))
        return _ok(**data)

    def _resolve_round(self, session: GameSession) -> EngineResult:
        """planning -> resolution -> consequences, running the round once."""
        transition = move_phase(session, GamePhase.RESOLUTION, self.logger)
        if not transition.success:
            return _fail(transition.error, "invalid_transition")

        investigation = resolve_investigation(session, self.logger)
        self.logger.info("Executing resolution calculation", room_code=session.room_code, round=session.current_round)
        results = execute_resolution(session, self.catalog, self.logger)
        results_dict = results.to_dict()
        session.resolution_history.append(ResolutionHistoryEntry(round=results.round, results=results_dict))

        application = apply_resolution_to_game_state(session, results, self.logger)
        if not application.success:
            self.logger.error(
                "Failed to apply resolution results",
                room_code=session.room_code,
                error=application.error,
            )

        consequences = move_phase(session, GamePhase.CONSEQUENCES, self.logger)
        if not consequences.success:
            return _fail(consequences.error, "invalid_transition")

        return _ok(
            phase=session.current_phase.value,
            round=session.current_round,
            results=results_dict,
            application=application.to_dict(),
            investigation=investigation.model_dump(mode="json") if investigation else None,
        )

    def end_phase_early(self, room_code: str) -> EngineResult:
        """Auto-lock everyone still planning and resolve the round."""
        return self._run(room_code, "end_phase_early", self._end_phase_early)

    def _end_phase_early(self, session: GameSession) -> EngineResult:
        if session.current_phase != GamePhase.PLANNING:
            return _fail("Can only end the planning phase early", "wrong_phase")

        self.logger.info("Planning ended early - auto-locking all players", room_code=session.room_code)
        corrections = {}
        for team in session.esp_teams:
            if team.locked_in:
                continue
            self._settle_choices_with_defaults(session, team)
            team_corrections = auto_correct_onboarding(team)
            if team_corrections:
                corrections[team.name] = [asdict(c) for c in team_corrections]
            finalize_team_lock(team, session.current_round)
            self.logger.event(
                "auto_locked",
                room_code=session.room_code,
                team=team.name,
                corrected=bool(team_corrections),
                credits=team.credits,
            )

        for destination in session.destinations:
            if not destination.locked_in:
                destination.locked_in = True
                destination.locked_in_at = utcnow()
                self.logger.event("auto_locked", room_code=session.room_code, destination=destination.name)

        resolution = self._resolve_round(session)
        if not resolution.success:
            return resolution
        return _ok(corrections=corrections, **resolution.data)

    def _settle_choices_with_defaults(self, session: GameSession, team: ESPTeam) -> None:
        """Confirm the preselected option of every unconfirmed choice.

        This is the facilitator override: a player's own lock-in is refused
        until their choices are confirmed.
        """
        for pending in list(team.pending_incident_choices):
            if pending.confirmed:
                continue
            incident = self.catalog.incident(pending.incident_id)
            if incident is None:
                team.pending_incident_choices.remove(pending)
                continue
            result = set_pending_choice(session, incident, team.name, pending.choice_id, self.logger)
            self.logger.event(
                "incident_choice_defaulted",
                room_code=session.room_code,
                team=team.name,
                incident_id=incident.id,
                choice_id=pending.choice_id,
                success=result.success,
                error=result.error,
            )

    def pause(self, room_code: str) -> EngineResult:
        return self._run(room_code, "pause", lambda session: self._set_paused(session, True))

    def resume(self, room_code: str) -> EngineResult:
        return self._run(room_code, "resume", lambda session: self._set_paused(session, False))

    def _set_paused(self, session: GameSession, paused: bool) -> EngineResult:
        if session.paused == paused:
            return _fail("Game is already paused" if paused else "Game is not paused", "no_change")
        session.paused = paused
        self.logger.event("game_paused" if paused else "game_resumed", room_code=session.room_code)
        return _ok(paused=paused)

    # =========================================================================
    # Lock-in
    # =========================================================================

    def lock_in_esp(self, room_code: str, team_name: str) -> EngineResult:
        return self._run(room_code, "lock_in", lambda session: self._lock_in_esp(session, team_name))

    def _lock_in_esp(self, session: GameSession, team_name: str) -> EngineResult:
        validation = validate_lock_in(session, team_name)
        if not validation.is_valid:
            return _fail(validation.error, validation.reason.value)

        team = self._team(session, team_name)
        blocking = unsettled_choice_error(team, self.catalog.incident)
        if blocking:
            return _fail(blocking, "choice_unconfirmed")
        for pending in list(team.pending_incident_choices):
            incident = self.catalog.incident(pending.incident_id)
            if incident is None:
                team.pending_incident_choices.remove(pending)
                continue
            application = apply_pending_choice_effects(session, incident, team, self.logger)
            if not application.success:
                return _fail(application.error, "effect_application_failed")

        commit = finalize_team_lock(team, session.current_round)
        self.logger.event(
            "player_locked_in",
            room_code=session.room_code,
            team=team.name,
            onboarding_cost=commit.total_cost,
            remaining_players=session.remaining_players_count(),
        )
        return self._after_lock_in(session, locked_in_at=team.locked_in_at.isoformat())

    def lock_in_destination(self, room_code: str, destination_name: str) -> EngineResult:
        return self._run(
            room_code, "lock_in", lambda session: self._lock_in_destination(session, destination_name)
        )

    def _lock_in_destination(self, session: GameSession, destination_name: str) -> EngineResult:
        validation = validate_destination_lock_in(session, destination_name)
        if not validation.is_valid:
            return _fail(validation.error, validation.reason.value)

        destination = session.find_destination(destination_name)
        destination.locked_in = True
        destination.locked_in_at = utcnow()
        self.logger.event(
            "player_locked_in",
            room_code=session.room_code,
            destination=destination.name,
            remaining_players=session.remaining_players_count(),
        )
        return self._after_lock_in(session, locked_in_at=destination.locked_in_at.isoformat())

    def _after_lock_in(self, session: GameSession, locked_in_at: str) -> EngineResult:
        """Resolve the round when the last player locks in."""
        all_locked = session.all_locked_in()
        data: dict[str, Any] = {
            "locked_in": True,
            "locked_in_at": locked_in_at,
            "remaining_players": session.remaining_players_count(),
            "all_locked": all_locked,
        }
        self._resolve_if_all_locked(session, data)
        return _ok(**data)

    def _resolve_if_all_locked(self, session: GameSession, data: dict[str, Any]) -> None:
        """Auto-locks from incidents can complete a round, so check after each."""
        if session.current_phase == GamePhase.PLANNING and session.all_locked_in():
            data["resolution"] = self._resolve_round(session).to_dict()

    # =========================================================================
    # Purchases and portfolio
    # =========================================================================

    def purchase_tech(self, room_code: str, team_name: str, upgrade_id: str) -> EngineResult:
        return self._run(
            room_code, "tech_purchase", lambda session: self._purchase_tech(session, team_name, upgrade_id)
        )

    def _purchase_tech(self, session: GameSession, team_name: str, upgrade_id: str) -> EngineResult:
        team = self._team(session, team_name)
        if team is None:
            self.logger.event(
                "tech_purchase_failed", room_code=session.room_code, team=team_name, reason="team_not_found"
            )
            return _fail("ESP team not found", "team_not_found")

        upgrade = self.catalog.tech_upgrade(upgrade_id)
        if upgrade is None:
            self.logger.event(
                "tech_purchase_failed", room_code=session.room_code, team=team.name, reason="upgrade_not_found"
            )
            return _fail("Tech upgrade not found", "upgrade_not_found")

        validation = validate_tech_purchase(team, upgrade)
        if not validation.can_purchase:
            names = {u.id: u.name for u in self.catalog.tech_upgrades}
            self.logger.event(
                "tech_purchase_failed",
                room_code=session.room_code,
                team=team.name,
                upgrade_id=upgrade.id,
                reason=validation.reason.value,
                missing_dependencies=list(validation.missing_dependencies),
            )
            return _fail(tech_error_message(validation, names), validation.reason.value)

        credits_before = team.credits
        team.credits -= upgrade.cost
        team.owned_tech_upgrades.append(upgrade.id)
        self.logger.event(
            "tech_purchase_success",
            room_code=session.room_code,
            team=team.name,
            upgrade_id=upgrade.id,
            cost=upgrade.cost,
            credits_before=credits_before,
            credits_after=team.credits,
            round=session.current_round,
        )
        return _ok(credits=team.credits, owned_tech_upgrades=list(team.owned_tech_upgrades))

    def purchase_destination_tool(
        self,
        room_code: str,
        destination_name: str,
        tool_id: str,
        announcement: Optional[str] = None,
    ) -> EngineResult:
        """Buy a filtering tool for a destination.

        Args:
            announcement: "announce" or "secret" for the spam trap network;
                the deployment is secret when omitted
        """
        return self._run(
            room_code,
            "destination_tool_purchase",
            lambda session: self._purchase_destination_tool(session, destination_name, tool_id, announcement),
        )

    def _purchase_destination_tool(
        self,
        session: GameSession,
        destination_name: str,
        tool_id: str,
        announcement: Optional[str],
    ) -> EngineResult:
        destination = session.find_destination(destination_name)
        if destination is None:
            self.logger.event(
                "destination_tool_purchase_failed",
                room_code=session.room_code,
                destination=destination_name,
                reason="destination_not_found",
            )
            return _fail("Destination not found", "destination_not_found")

        tool = self.catalog.destination_tool(tool_id)
        if tool is None:
            self.logger.event(
                "destination_tool_purchase_failed",
                room_code=session.room_code,
                destination=destination.name,
                reason="tool_not_found",
            )
            return _fail("Tool not found", "tool_not_found")

        validation = validate_tool_purchase(destination, tool)
        if not validation.can_purchase:
            self.logger.event(
                "destination_tool_purchase_failed",
                room_code=session.room_code,
                destination=destination.name,
                tool_id=tool.id,
                reason=validation.reason.value,
            )
            return _fail(tool_error_message(validation), validation.reason.value)

        cost = tool.price_for(destination.name)
        budget_before = destination.budget
        destination.budget -= cost
        destination.owned_tools.append(tool.id)

        if tool.authentication_level:
            previous = destination.authentication_level
            destination.authentication_level = tool.authentication_level
            self.logger.event(
                "auth_level_upgraded",
                room_code=session.room_code,
                destination=destination.name,
                from_level=previous,
                to_level=tool.authentication_level,
                round=session.current_round,
            )

        if tool.id == SPAM_TRAP_NETWORK:
            announced = announcement == "announce"
            destination.spam_trap_active = SpamTrapDeployment(round=session.current_round, announced=announced)
            self.logger.event(
                "spam_trap_deployed",
                room_code=session.room_code,
                destination=destination.name,
                announced=announced,
                round=session.current_round,
                cost=cost,
            )

        self.logger.event(
            "tool_purchased",
            room_code=session.room_code,
            destination=destination.name,
            tool_id=tool.id,
            cost=cost,
            budget_before=budget_before,
            budget_after=destination.budget,
            round=session.current_round,
        )
        return _ok(
            budget=destination.budget,
            owned_tools=list(destination.owned_tools),
            authentication_level=destination.authentication_level,
        )

    def acquire_client(self, room_code: str, team_name: str, client_id: str) -> EngineResult:
        return self._run(
            room_code, "client_acquisition", lambda session: self._acquire_client(session, team_name, client_id)
        )

    def _acquire_client(self, session: GameSession, team_name: str, client_id: str) -> EngineResult:
        team = self._team(session, team_name)
        if team is None:
            return _fail("ESP team not found", "team_not_found")
        if team.locked_in:
            return _fail("Team is locked in for this round", "already_locked")

        result = acquire_client_for_team(team, client_id, session.current_round, session.destination_names())
        if not result.success:
            reason = result.validation.reason.value if result.validation and result.validation.reason else None
            self.logger.event(
                "client_acquisition_failed",
                room_code=session.room_code,
                team=team.name,
                client_id=client_id,
                reason=reason,
            )
            return _fail(result.error, reason)

        index = session.esp_teams.index(team)
        session.esp_teams[index] = result.team
        client = result.team.portfolio[client_id]
        self.logger.event(
            "client_acquired",
            room_code=session.room_code,
            team=team.name,
            client_id=client_id,
            client_name=client.name,
            cost=client.cost,
            credits_after=result.team.credits,
        )
        return _ok(credits=result.team.credits, client=client.model_dump(mode="json"))

    def configure_onboarding(
        self,
        room_code: str,
        team_name: str,
        client_id: str,
        warmup: bool,
        list_hygiene: bool,
    ) -> EngineResult:
        def action(session: GameSession) -> EngineResult:
            team = self._team(session, team_name)
            if team is None:
                return _fail("ESP team not found", "team_not_found")
            result = configure_client_onboarding(team, client_id, warmup, list_hygiene)
            if not result.success:
                return _fail(result.error, "invalid_onboarding")
            self.logger.event(
                "onboarding_configured",
                room_code=session.room_code,
                team=team.name,
                client_id=client_id,
                warmup=warmup,
                list_hygiene=list_hygiene,
            )
            return _ok(pending_onboarding={cid: d.model_dump() for cid, d in team.pending_onboarding.items()})

        return self._run(room_code, "onboarding", action)

    def toggle_client_status(self, room_code: str, team_name: str, client_id: str, status: str) -> EngineResult:
        def action(session: GameSession) -> EngineResult:
            team = self._team(session, team_name)
            if team is None:
                return _fail("ESP team not found", "team_not_found")
            try:
                new_status = ClientStatus(status)
            except ValueError:
                return _fail(f"Invalid client status: {status}", "invalid_status")
            result = toggle_status(team, client_id, new_status)
            if not result.success:
                return _fail(result.error, "invalid_status_change")
            self.logger.event(
                "client_status_changed",
                room_code=session.room_code,
                team=team.name,
                client_id=client_id,
                status=new_status.value,
            )
            return _ok(client_id=client_id, status=new_status.value)

        return self._run(room_code, "client_status", action)

    def set_filtering_policy(self, room_code: str, destination_name: str, esp_name: str, level: str) -> EngineResult:
        def action(session: GameSession) -> EngineResult:
            destination = session.find_destination(destination_name)
            if destination is None:
                return _fail("Destination not found", "destination_not_found")
            team = self._team(session, esp_name)
            if team is None:
                return _fail(f'ESP team "{esp_name}" not found in game', "esp_not_found")
            try:
                filtering_level = FilteringLevel(level)
            except ValueError:
                return _fail("Invalid filtering level", "invalid_filtering_level")

            policy = FilteringPolicy(esp_name=team.name, level=filtering_level)
            destination.filtering_policies[team.name] = policy
            self.logger.event(
                "filtering_policy_updated",
                room_code=session.room_code,
                destination=destination.name,
                esp=team.name,
                level=filtering_level.value,
            )
            return _ok(policy=policy.model_dump(mode="json"))

        return self._run(room_code, "filtering_policy", action)

    # =========================================================================
    # Investigations
    # =========================================================================

    def cast_investigation_vote(self, room_code: str, destination_name: str, target_esp: str) -> EngineResult:
        def action(session: GameSession) -> EngineResult:
            result = cast_vote(session, destination_name, target_esp, self.logger)
            if not result.success:
                self.logger.event(
                    "investigation_vote_failed",
                    room_code=session.room_code,
                    destination=destination_name,
                    target_esp=target_esp,
                    error=result.error,
                )
                return _fail(result.error, result.reason)
            return _ok(votes=result.votes, reserved_credits=result.reserved_credits)

        return self._run(room_code, "investigation_vote", action)

    def remove_investigation_vote(self, room_code: str, destination_name: str) -> EngineResult:
        def action(session: GameSession) -> EngineResult:
            result = remove_vote(session, destination_name, self.logger)
            if not result.success:
                return _fail(result.error, result.reason)
            return _ok(votes=result.votes)

        return self._run(room_code, "investigation_vote_remove", action)

    def investigation_votes(self, room_code: str, destination_name: str) -> EngineResult:
        """Current votes plus what this destination may do with its own."""

        def action(session: GameSession) -> EngineResult:
            destination = session.find_destination(destination_name)
            if destination is None:
                return _fail("Destination not found", "destination_not_found")
            vote = destination.pending_investigation_vote
            return _ok(
                votes=tally_votes(session),
                my_vote=vote.esp_name if vote else None,
                esp_teams=[team.name for team in session.participating_teams()],
                vote_cost=INVESTIGATION_COST,
                can_vote=not destination.locked_in and session.current_phase == GamePhase.PLANNING,
            )

        return self._run(room_code, "investigation_votes", action)

    # =========================================================================
    # Incidents
    # =========================================================================

    def list_incidents(self, room_code: str) -> EngineResult:
        """Incidents for the current round with whether each can fire now."""

        def action(session: GameSession) -> EngineResult:
            incidents = [
                {
                    "id": incident.id,
                    "name": incident.name,
                    "category": incident.category,
                    "automatic": incident.automatic,
                    "has_choice": incident.choice_config is not None,
                    "can_trigger": can_trigger_incident(session, self.catalog, incident.id),
                }
                for incident in get_available_incidents(self.catalog, session.current_round)
            ]
            return _ok(round=session.current_round, incidents=incidents)

        return self._run(room_code, "list_incidents", action)

    def trigger_incident(
        self,
        room_code: str,
        incident_id: str,
        selected_team: Optional[str] = None,
    ) -> EngineResult:
        """Fire an incident, apply its effects and open any choice."""

        def action(session: GameSession) -> EngineResult:
            trigger = trigger_incident_for_session(
                session, self.catalog, incident_id, self.rng, self.logger, selected_team=selected_team
            )
            if not trigger.success:
                return _fail(trigger.error, "trigger_rejected")

            effects = apply_incident_effects(session, trigger.incident, trigger.selection, self.logger)
            data: dict[str, Any] = {
                "incident_id": trigger.incident.id,
                "selection": asdict(trigger.selection),
                "changes": effects.changes.to_dict(),
            }
            if trigger.incident.choice_config is not None:
                initiation = initiate_pending_choices(session, trigger.incident)
                if not initiation.success:
                    return _fail(initiation.error, "choice_initiation_failed", **data)
                data["choice_targets"] = list(initiation.target_teams)
            if not effects.success:
                return _fail(effects.error, "effect_application_failed", **data)
            self._resolve_if_all_locked(session, data)
            return _ok(**data)

        return self._run(room_code, "incident_trigger", action)

    def confirm_incident_choice(
        self,
        room_code: str,
        team_name: str,
        incident_id: str,
        choice_id: str,
    ) -> EngineResult:
        def action(session: GameSession) -> EngineResult:
            incident = self.catalog.incident(incident_id)
            if incident is None:
                return _fail(f"Incident {incident_id} not found", "incident_not_found")
            result = set_pending_choice(session, incident, team_name, choice_id, self.logger)
            if not result.success and result.changes is None:
                return _fail(result.error, "invalid_choice")
            data = {"choice_id": result.choice_id, "changes": result.changes.to_dict()}
            if not result.success:
                return _fail(result.error, "effect_application_failed", **data)
            self._resolve_if_all_locked(session, data)
            return _ok(**data)

        return self._run(room_code, "incident_choice", action)

    # =========================================================================
    # Scores
    # =========================================================================

    def final_scores(self, room_code: str) -> EngineResult:
        def action(session: GameSession) -> EngineResult:
            scores = calculate_final_scores(session, self.catalog)
            self.logger.event(
                "final_scores_calculated",
                room_code=session.room_code,
                winner=scores.winner.esp_names if scores.winner else None,
            )
            return _ok(**asdict(scores), all_disqualified=scores.all_disqualified)

        return self._run(room_code, "final_scores", action)
