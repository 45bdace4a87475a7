"""Tests for the GameEngine facade.

These drive single operations against a fresh in-memory store; complete
games live in the integration tests.
"""

import random
from dataclasses import replace

import pytest

from mailquest.catalog import default_catalog
from mailquest.engine import GameEngine
from mailquest.models.incidents import (
    ChoiceConfig,
    ChoiceOption,
    ClientVolumeMultiplierEffect,
    CreditsEffect,
    EffectTarget,
    IncidentCard,
    TeamSelection,
)
from mailquest.models.session import ClientStatus, GamePhase, PendingChoice
from mailquest.storage import InMemorySessionRepository

TEAMS = {"Alpha": ["alice"], "Beta": ["bob"]}
DESTINATIONS = {"Gmail": ["gina"], "Outlook": ["oscar"], "Yahoo": ["yara"]}


class BrokenStore(InMemorySessionRepository):
    """Store whose writes fail after the session has been created."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_saves = False

    def save(self, session) -> None:
        if self.fail_saves:
            raise OSError("disk full")
        super().save(session)


# Round 1 cards whose effects cannot all resolve
HALF_APPLIED = IncidentCard(
    id="INC-901",
    name="Half Applied",
    rounds=(1,),
    category="Industry",
    effects=(CreditsEffect(EffectTarget.ALL_ESPS, 100), CreditsEffect(EffectTarget.SELF, -50)),
)
BROKEN_OFFER = IncidentCard(
    id="INC-902",
    name="Broken Offer",
    rounds=(1,),
    category="Industry",
    choice_config=ChoiceConfig(
        target_selection=TeamSelection.ALL_ESPS,
        options=(
            ChoiceOption(
                "take",
                "Take",
                effects=(
                    CreditsEffect(EffectTarget.SELF, -100),
                    ClientVolumeMultiplierEffect(EffectTarget.SELECTED_CLIENT, 2.0),
                ),
            ),
            ChoiceOption("leave", "Leave", is_default=True),
        ),
    ),
)


@pytest.fixture
def engine(logger):
    return GameEngine(logger=logger, rng=random.Random(42))


@pytest.fixture
def room(engine):
    engine.create_session("ROOM01", TEAMS, DESTINATIONS)
    return "ROOM01"


@pytest.fixture
def planning_room(engine, room):
    engine.start_resource_allocation(room)
    engine.transition_phase(room, GamePhase.PLANNING)
    return room


@pytest.fixture
def broken_engine(logger):
    """Planning-phase engine whose catalog also holds the broken cards."""
    base = default_catalog(logger)
    catalog = replace(base, incidents=base.incidents + (HALF_APPLIED, BROKEN_OFFER))
    engine = GameEngine(catalog=catalog, logger=logger, rng=random.Random(42))
    engine.create_session("ROOM02", TEAMS, DESTINATIONS)
    engine.start_resource_allocation("ROOM02")
    engine.transition_phase("ROOM02", GamePhase.PLANNING)
    return engine


def lock_everyone(engine, room):
    results = [engine.lock_in_esp(room, name) for name in TEAMS]
    results += [engine.lock_in_destination(room, name) for name in DESTINATIONS]
    return results


# =============================================================================
# Sessions and phases
# =============================================================================


class TestSessions:
    """Tests for session creation and lookup."""

    def test_create_session(self, engine, room, logger) -> None:
        session = engine.get_session(room)
        assert session.current_phase == GamePhase.LOBBY
        assert [t.name for t in session.esp_teams] == ["Alpha", "Beta"]
        assert session.find_destination("Yahoo").players == ["yara"]
        assert logger.events("session_created")[0]["room_code"] == room

    def test_duplicate_room(self, engine, room) -> None:
        result = engine.create_session(room, TEAMS, DESTINATIONS)
        assert result.error == "Room ROOM01 already exists"
        assert result.reason == "room_exists"

    def test_delete_session(self, engine, room) -> None:
        assert engine.delete_session(room)
        assert engine.get_session(room) is None
        assert not engine.delete_session(room)

    @pytest.mark.parametrize(
        "operation",
        [
            lambda e: e.start_resource_allocation("NOPE"),
            lambda e: e.transition_phase("NOPE", "planning"),
            lambda e: e.lock_in_esp("NOPE", "Alpha"),
            lambda e: e.purchase_tech("NOPE", "Alpha", "spf"),
            lambda e: e.list_incidents("NOPE"),
            lambda e: e.final_scores("NOPE"),
        ],
    )
    def test_missing_session(self, engine, operation) -> None:
        result = operation(engine)
        assert not result.success
        assert result.error == "Session not found"
        assert result.reason == "session_not_found"

    def test_unexpected_errors_are_reported(self, logger) -> None:
        store = BrokenStore()
        engine = GameEngine(store=store, logger=logger)
        engine.create_session("ROOM01", TEAMS, DESTINATIONS)
        store.fail_saves = True

        result = engine.pause("ROOM01")

        assert not result.success
        assert result.reason == "internal_error"
        assert result.error == "pause failed: disk full"
        assert logger.by_level("error")[0].name == "Unexpected error in pause"


class TestPhaseControl:
    """Tests for resource allocation and facilitator phase changes."""

    def test_resource_allocation(self, engine, room, logger) -> None:
        result = engine.start_resource_allocation(room)

        assert result.data == {"phase": "resource_allocation", "round": 0}
        session = engine.get_session(room)
        alpha = session.find_team("Alpha")
        assert alpha.credits == 1000
        assert alpha.reputation == {"Gmail": 70, "Outlook": 70, "Yahoo": 70}
        assert len(alpha.available_clients) == 13
        assert session.find_destination("Gmail").budget == 500
        assert session.find_destination("Outlook").filtering_policies["Beta"].level.value == "permissive"
        assert logger.events("resources_allocated")[0]["credits"] == 1000

    def test_allocation_only_from_lobby(self, engine, room) -> None:
        engine.start_resource_allocation(room)
        assert engine.start_resource_allocation(room).reason == "wrong_phase"

    def test_allocation_needs_players(self, engine) -> None:
        engine.create_session("EMPTY", {"Alpha": []}, {"Gmail": []})
        assert engine.start_resource_allocation("EMPTY").reason == "insufficient_players"

    def test_resource_allocation_via_transition(self, engine, room) -> None:
        assert engine.transition_phase(room, "resource_allocation").success
        assert engine.get_session(room).find_team("Beta").credits == 1000

    def test_planning_opens_round_one(self, engine, room) -> None:
        engine.start_resource_allocation(room)

        result = engine.transition_phase(room, "planning")

        assert result.data["round"] == 1
        assert result.data["planning"] == {"auto_locked_teams": [], "removed_tools": {}, "automatic_incidents": []}

    def test_unknown_phase(self, engine, room) -> None:
        result = engine.transition_phase(room, "lunch")
        assert (result.error, result.reason) == ("Unknown phase: lunch", "invalid_phase")

    def test_invalid_transition(self, engine, room) -> None:
        result = engine.transition_phase(room, "finished")
        assert result.error == "Invalid phase transition from lobby to finished"
        assert result.reason == "invalid_transition"

    def test_resolution_needs_everyone_locked(self, engine, planning_room) -> None:
        engine.lock_in_esp(planning_room, "Alpha")
        result = engine.transition_phase(planning_room, "resolution")
        assert result.reason == "players_not_locked"
        assert result.error == "4 players have not locked in"

    def test_pause_and_resume(self, engine, room, logger) -> None:
        assert engine.pause(room).data == {"paused": True}
        assert engine.pause(room).error == "Game is already paused"
        assert engine.resume(room).success
        assert engine.resume(room).error == "Game is not paused"
        assert len(logger.events("game_paused")) == 1


# =============================================================================
# Lock-in and resolution
# =============================================================================


class TestLockIn:
    """Tests for lock-in and the round resolution it triggers."""

    def test_partial_lock_in(self, engine, planning_room) -> None:
        result = engine.lock_in_esp(planning_room, "Alpha")
        assert result.data["locked_in"]
        assert result.data["remaining_players"] == 4
        assert not result.data["all_locked"]
        assert "resolution" not in result.data

    def test_double_lock_in(self, engine, planning_room) -> None:
        engine.lock_in_destination(planning_room, "Gmail")
        assert engine.lock_in_destination(planning_room, "gmail").reason == "already_locked"

    def test_last_lock_in_resolves_round(self, engine, planning_room, logger) -> None:
        last = lock_everyone(engine, planning_room)[-1]

        assert last.data["all_locked"]
        assert last.data["resolution"]["success"]
        assert last.data["resolution"]["phase"] == "consequences"
        session = engine.get_session(planning_room)
        assert session.current_phase == GamePhase.CONSEQUENCES
        assert [entry.round for entry in session.resolution_history] == [1]
        assert len(logger.events("resolution_applied")) == 2

    def test_lock_in_outside_planning(self, engine, room) -> None:
        assert engine.lock_in_esp(room, "Alpha").reason == "wrong_phase"

    def test_end_phase_early(self, engine, planning_room, logger) -> None:
        engine.lock_in_esp(planning_room, "Alpha")

        result = engine.end_phase_early(planning_room)

        assert result.success
        assert result.data["phase"] == "consequences"
        assert result.data["corrections"] == {}
        assert [e["team"] for e in logger.events("auto_locked") if "team" in e] == ["Beta"]

    def test_end_phase_early_drops_unaffordable_onboarding(self, engine, planning_room) -> None:
        engine.acquire_client(planning_room, "Beta", "client-Beta-005")
        engine.configure_onboarding(planning_room, "Beta", "client-Beta-005", warmup=True, list_hygiene=False)
        engine.get_session(planning_room).find_team("Beta").credits = 100

        result = engine.end_phase_early(planning_room)

        correction = result.data["corrections"]["Beta"][0]
        assert (correction["client_id"], correction["option"]) == ("client-Beta-005", "warmup")

    def test_end_phase_early_only_in_planning(self, engine, room) -> None:
        assert engine.end_phase_early(room).reason == "wrong_phase"

    def test_end_phase_early_defaults_open_choices(self, engine, planning_room, logger) -> None:
        engine.get_session(planning_room).current_round = 4
        engine.trigger_incident(planning_room, "INC-018")
        engine.confirm_incident_choice(planning_room, "Beta", "INC-018", "ignore")

        assert engine.end_phase_early(planning_room).success

        defaulted = logger.events("incident_choice_defaulted")
        assert [(e["team"], e["choice_id"], e["success"]) for e in defaulted] == [("Alpha", "patch", True)]

    def test_rejected_lock_in_keeps_choices(self, engine, planning_room) -> None:
        session = engine.get_session(planning_room)
        session.current_round = 4
        engine.trigger_incident(planning_room, "INC-018")
        engine.confirm_incident_choice(planning_room, "Alpha", "INC-018", "patch")
        alpha = session.find_team("Alpha")
        alpha.pending_incident_choices.append(
            PendingChoice(incident_id="INC-020", choice_id="vanished", confirmed=True, option_ids=["vanished"])
        )

        result = engine.lock_in_esp(planning_room, "Alpha")

        assert (result.error, result.reason) == ("Choice option vanished not found", "choice_unconfirmed")
        assert [c.incident_id for c in alpha.pending_incident_choices] == ["INC-018", "INC-020"]
        assert not alpha.locked_in


# =============================================================================
# Purchases and portfolio
# =============================================================================


class TestPurchases:
    """Tests for purchases, acquisitions and policy changes."""

    def test_purchase_tech(self, engine, planning_room, logger) -> None:
        result = engine.purchase_tech(planning_room, "Alpha", "spf")
        assert result.data == {"credits": 900, "owned_tech_upgrades": ["spf"]}
        assert logger.events("tech_purchase_success")[0]["credits_after"] == 900

    def test_purchase_tech_failures(self, engine, planning_room) -> None:
        assert engine.purchase_tech(planning_room, "Gamma", "spf").error == "ESP team not found"
        assert engine.purchase_tech(planning_room, "Alpha", "warp-drive").error == "Tech upgrade not found"
        result = engine.purchase_tech(planning_room, "Alpha", "dmarc")
        assert result.reason == "unmet_dependencies"
        assert result.error == "Missing required upgrades: SPF, DKIM"

    def test_auth_validator_raises_level(self, engine, planning_room) -> None:
        result = engine.purchase_destination_tool(planning_room, "Gmail", "auth_validator_l1")
        assert result.data["budget"] == 450
        assert result.data["authentication_level"] == 1

    @pytest.mark.parametrize("announcement, announced", [("announce", True), ("secret", False), (None, False)])
    def test_spam_trap_deployment(self, engine, planning_room, announcement, announced) -> None:
        engine.purchase_destination_tool(planning_room, "Outlook", "spam_trap_network", announcement)
        deployment = engine.get_session(planning_room).find_destination("Outlook").spam_trap_active
        assert deployment.round == 1
        assert deployment.announced is announced

    def test_tool_unavailable(self, engine, planning_room) -> None:
        result = engine.purchase_destination_tool(planning_room, "Yahoo", "ml_system")
        assert result.reason == "tool_unavailable_for_kingdom"

    def test_acquire_client(self, engine, planning_room, logger) -> None:
        result = engine.acquire_client(planning_room, "Alpha", "client-Alpha-002")

        assert result.success
        assert result.data["client"]["type"] == "growing_startup"
        alpha = engine.get_session(planning_room).find_team("Alpha")
        assert alpha.credits == 1000 - result.data["client"]["cost"]
        assert alpha.active_clients == ["client-Alpha-002"]
        assert logger.events("client_acquired")[0]["client_id"] == "client-Alpha-002"

    def test_premium_client_not_yet_available(self, engine, planning_room) -> None:
        result = engine.acquire_client(planning_room, "Alpha", "client-Alpha-000")
        assert result.reason == "not_yet_available"

    def test_no_acquisition_after_lock_in(self, engine, planning_room) -> None:
        engine.lock_in_esp(planning_room, "Alpha")
        result = engine.acquire_client(planning_room, "Alpha", "client-Alpha-002")
        assert result.error == "Team is locked in for this round"

    def test_onboarding_and_status(self, engine, planning_room) -> None:
        engine.acquire_client(planning_room, "Alpha", "client-Alpha-002")

        onboarding = engine.configure_onboarding(planning_room, "Alpha", "client-Alpha-002", True, True)
        assert onboarding.data["pending_onboarding"] == {"client-Alpha-002": {"warmup": True, "list_hygiene": True}}

        assert engine.toggle_client_status(planning_room, "Alpha", "client-Alpha-002", "Paused").success
        invalid = engine.toggle_client_status(planning_room, "Alpha", "client-Alpha-002", "Frozen")
        assert invalid.error == "Invalid client status: Frozen"

    def test_filtering_policy(self, engine, planning_room) -> None:
        result = engine.set_filtering_policy(planning_room, "Gmail", "beta", "strict")
        assert result.data["policy"] == {"esp_name": "Beta", "level": "strict"}
        assert engine.set_filtering_policy(planning_room, "Gmail", "Gamma", "strict").error == (
            'ESP team "Gamma" not found in game'
        )
        assert engine.set_filtering_policy(planning_room, "Gmail", "Beta", "paranoid").error == (
            "Invalid filtering level"
        )


# =============================================================================
# Incidents and scores
# =============================================================================


class TestIncidentOperations:
    """Tests for incident listing, triggering and choices."""

    def test_list_incidents(self, engine, planning_room) -> None:
        result = engine.list_incidents(planning_room)
        assert result.data["round"] == 1
        assert [i["id"] for i in result.data["incidents"]] == ["INC-001", "INC-003"]
        assert all(i["can_trigger"] for i in result.data["incidents"])

    def test_trigger_incident(self, engine, planning_room) -> None:
        result = engine.trigger_incident(planning_room, "INC-003", selected_team="Beta")

        assert result.data["selection"]["team_name"] == "Beta"
        assert engine.get_session(planning_room).find_team("Beta").credits == 1200
        listed = {i["id"]: i["can_trigger"] for i in engine.list_incidents(planning_room).data["incidents"]}
        assert listed["INC-003"] is False

    def test_trigger_rejected(self, engine, planning_room) -> None:
        result = engine.trigger_incident(planning_room, "INC-006")
        assert result.reason == "trigger_rejected"
        assert result.error == "Incident INC-006 is not available for round 1"

    def test_unknown_incident_choice(self, engine, planning_room) -> None:
        result = engine.confirm_incident_choice(planning_room, "Alpha", "INC-999", "accept")
        assert result.reason == "incident_not_found"

    def test_choice_without_pending(self, engine, planning_room) -> None:
        result = engine.confirm_incident_choice(planning_room, "Alpha", "INC-018", "patch")
        assert result.reason == "invalid_choice"

    def test_partially_applied_incident(self, broken_engine, logger) -> None:
        result = broken_engine.trigger_incident("ROOM02", "INC-901")

        assert (result.reason, result.error) == (
            "effect_application_failed",
            "No team resolved for target 'self' (got None)",
        )
        assert result.data["changes"]["esp_credits"] == {"Alpha": 100, "Beta": 100}
        session = broken_engine.get_session("ROOM02")
        assert [team.credits for team in session.esp_teams] == [1100, 1100]
        assert [h.incident_id for h in session.incident_history] == ["INC-901"]
        assert [r.name for r in logger.by_level("error")] == ["Incident effect application failed"]

    def test_failed_choice_stays_unconfirmed(self, broken_engine) -> None:
        broken_engine.trigger_incident("ROOM02", "INC-902")

        result = broken_engine.confirm_incident_choice("ROOM02", "Alpha", "INC-902", "take")

        assert result.reason == "effect_application_failed"
        assert result.data["changes"]["esp_credits"] == {"Alpha": -100}
        pending = broken_engine.get_session("ROOM02").find_team("Alpha").find_pending_choice("INC-902")
        assert (pending.choice_id, pending.confirmed, pending.effects_applied) == ("leave", False, False)
        assert broken_engine.lock_in_esp("ROOM02", "Alpha").reason == "choice_unconfirmed"


class TestFinalScores:
    """Tests for the final_scores operation."""

    def test_scores_shape(self, engine, planning_room, logger) -> None:
        result = engine.final_scores(planning_room)

        assert [r["esp_name"] for r in result.data["esp_results"]] == ["Alpha", "Beta"]
        assert result.data["winner"]["esp_names"] == ["Alpha", "Beta"]
        assert result.data["all_disqualified"] is False
        assert logger.events("final_scores_calculated")[0]["winner"] == ["Alpha", "Beta"]


# =============================================================================
# Investigations
# =============================================================================


class TestInvestigationOperations:
    """Tests for destination votes and the investigation run at resolution."""

    def test_cast_vote(self, engine, planning_room) -> None:
        result = engine.cast_investigation_vote(planning_room, "Gmail", "Beta")
        assert result.data == {"votes": {"Beta": ["Gmail"]}, "reserved_credits": 50}

    def test_failed_vote_is_logged(self, engine, room, logger) -> None:
        result = engine.cast_investigation_vote(room, "Gmail", "Beta")

        assert result.reason == "wrong_phase"
        assert logger.events("investigation_vote_failed")[0]["error"] == (
            "Voting is only available during planning phase"
        )

    def test_vote_view(self, engine, planning_room) -> None:
        engine.cast_investigation_vote(planning_room, "Outlook", "Alpha")

        result = engine.investigation_votes(planning_room, "Outlook")

        assert result.data == {
            "votes": {"Alpha": ["Outlook"]},
            "my_vote": "Alpha",
            "esp_teams": ["Alpha", "Beta"],
            "vote_cost": 50,
            "can_vote": True,
        }
        assert engine.investigation_votes(planning_room, "Hotmail").reason == "destination_not_found"

    def test_remove_vote(self, engine, planning_room) -> None:
        engine.cast_investigation_vote(planning_room, "Gmail", "Beta")
        assert engine.remove_investigation_vote(planning_room, "Gmail").data == {"votes": {}}

    def test_resolution_runs_investigation(self, engine, planning_room) -> None:
        engine.acquire_client(planning_room, "Beta", "client-Beta-005")
        engine.cast_investigation_vote(planning_room, "Gmail", "Beta")
        engine.cast_investigation_vote(planning_room, "Yahoo", "Beta")

        resolution = lock_everyone(engine, planning_room)[-1].data["resolution"]

        investigation = resolution["investigation"]
        assert investigation["target_esp"] == "Beta"
        assert investigation["voters"] == ["Gmail", "Yahoo"]
        assert investigation["suspended_client_id"] == "client-Beta-005"
        assert investigation["missing_protection"] == "both"
        session = engine.get_session(planning_room)
        assert session.find_team("Beta").client_states["client-Beta-005"].status == ClientStatus.SUSPENDED
        assert len(session.investigation_history) == 1

    def test_resolution_without_votes(self, engine, planning_room) -> None:
        resolution = lock_everyone(engine, planning_room)[-1].data["resolution"]
        assert resolution["investigation"] is None

    def test_votes_cleared_next_round(self, engine, planning_room) -> None:
        engine.cast_investigation_vote(planning_room, "Gmail", "Beta")
        lock_everyone(engine, planning_room)

        engine.transition_phase(planning_room, "planning")

        assert engine.investigation_votes(planning_room, "Gmail").data["votes"] == {}
