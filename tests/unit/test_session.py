"""Tests for session models: lookups, clamping and serialization."""

import pytest
from pydantic import ValidationError

from mailquest.models.modifiers import FirstActiveRoundOnly, Modifier
from mailquest.models.session import (
    ClientState,
    ClientStatus,
    Destination,
    FilteringLevel,
    FilteringPolicy,
    GamePhase,
    GameSession,
    PendingChoice,
    SpamTrapDeployment,
    clamp_reputation,
)


# =============================================================================
# Clamping
# =============================================================================


class TestClamping:
    """Reputation and budget bounds."""

    def test_clamp_reputation_rounds_then_clamps(self) -> None:
        assert clamp_reputation(74.1) == 74
        assert clamp_reputation(-3) == 0
        assert clamp_reputation(104.6) == 100

    def test_team_reputation_clamped_on_construction(self, make_team) -> None:
        team = make_team(reputation=120)
        assert set(team.reputation.values()) == {100}

    def test_set_reputation_clamps(self, make_team) -> None:
        team = make_team()
        assert team.set_reputation("Gmail", -12) == 0
        assert team.reputation["Gmail"] == 0

    def test_destination_budget_never_negative(self) -> None:
        destination = Destination(name="Gmail", budget=-50)
        assert destination.budget == 0

    def test_round_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GameSession(room_code="ROOM01", current_round=5)


# =============================================================================
# Lookups and lock-in bookkeeping
# =============================================================================


class TestSessionQueries:
    """Tests for GameSession helpers."""

    def test_find_team_is_case_insensitive(self, make_session) -> None:
        session = make_session()
        assert session.find_team("alpha").name == "Alpha"
        assert session.find_team("Gamma") is None

    def test_find_destination_is_case_insensitive(self, make_session) -> None:
        session = make_session()
        assert session.find_destination("GMAIL").name == "Gmail"

    def test_players_gate_lock_in(self, make_session, make_team) -> None:
        """Teams without players never block the round."""
        session = make_session(teams=[make_team("Alpha"), make_team("Ghost", players=())])
        assert session.remaining_players_count() == 4

        session.find_team("Alpha").locked_in = True
        for destination in session.destinations:
            destination.locked_in = True
        assert session.all_locked_in()
        assert session.remaining_players_count() == 0

    def test_mean_reputation(self, make_team) -> None:
        team = make_team()
        team.reputation = {"Gmail": 90, "Outlook": 60, "Yahoo": 60}
        assert team.mean_reputation() == 70

    def test_active_client_records_skip_paused(self, make_team, make_client) -> None:
        team = make_team(clients=[make_client("c1"), make_client("c2")])
        team.client_states["c2"].status = ClientStatus.PAUSED
        assert [client.id for client, _ in team.active_client_records()] == ["c1"]

    def test_filtering_level_defaults_to_permissive(self) -> None:
        destination = Destination(
            name="Gmail",
            filtering_policies={"Alpha": FilteringPolicy(esp_name="Alpha", level=FilteringLevel.STRICT)},
        )
        assert destination.filtering_level_for("Alpha") == FilteringLevel.STRICT
        assert destination.filtering_level_for("Beta") == FilteringLevel.PERMISSIVE


# =============================================================================
# Serialization
# =============================================================================


class TestSessionSerialization:
    """JSON round trips keep the full session intact."""

    def test_json_round_trip(self, make_session, make_client) -> None:
        session = make_session()
        alpha = session.find_team("Alpha")
        client = make_client("c1")
        alpha.portfolio["c1"] = client
        alpha.active_clients.append("c1")
        alpha.client_states["c1"] = ClientState()
        alpha.client_states["c1"].volume_modifiers.append(
            Modifier(id="warmup-c1", source="warmup", multiplier=0.5, scope=FirstActiveRoundOnly())
        )
        alpha.pending_incident_choices.append(
            PendingChoice(incident_id="INC-018", choice_id="patch", option_ids=["patch", "ignore"])
        )
        session.destinations[0].spam_trap_active = SpamTrapDeployment(round=1, announced=True)

        restored = GameSession.from_json(session.to_json())

        assert restored == session
        assert isinstance(restored.find_team("Alpha").client_states["c1"].volume_modifiers[0].scope, FirstActiveRoundOnly)

    def test_to_dict_uses_persisted_scope_shape(self, make_session) -> None:
        session = make_session()
        alpha = session.find_team("Alpha")
        alpha.client_states["c1"] = ClientState(
            volume_modifiers=[Modifier(id="warmup-c1", source="warmup", multiplier=0.5, scope=FirstActiveRoundOnly())]
        )
        data = session.to_dict()
        modifier = data["esp_teams"][0]["client_states"]["c1"]["volume_modifiers"][0]
        assert modifier["applicable_rounds"] == [-1]
        assert data["current_phase"] == GamePhase.PLANNING.value

    def test_from_dict_accepts_stored_document(self, make_session) -> None:
        session = make_session()
        assert GameSession.from_dict(session.to_dict()) == session
