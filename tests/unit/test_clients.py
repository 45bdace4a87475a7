"""Tests for client stock generation, acquisition and portfolio management."""

import random

import pytest

from mailquest.catalog.client_profiles import CLIENT_PROFILES
from mailquest.clients import (
    acquire_client,
    activate_clients,
    apply_variance,
    auto_correct_onboarding,
    commit_pending_onboarding,
    configure_onboarding,
    finalize_team_lock,
    generate_client_stock,
    toggle_client_status,
)
from mailquest.models.modifiers import FirstActiveRoundOnly
from mailquest.models.session import ClientRisk, ClientStatus, ClientType, OnboardingDecision

DESTINATIONS = ["Gmail", "Outlook", "Yahoo"]


# =============================================================================
# Stock generation
# =============================================================================


class TestClientStock:
    """Tests for generate_client_stock."""

    def test_stock_layout(self, rng) -> None:
        stock = generate_client_stock("Alpha", rng)
        assert len(stock) == sum(p.count for p in CLIENT_PROFILES)
        assert stock[0].id == "client-Alpha-000"
        assert stock[-1].id == f"client-Alpha-{len(stock) - 1:03d}"
        assert [c.type for c in stock[:2]] == [ClientType.PREMIUM_BRAND] * 2
        assert stock[2].type == ClientType.GROWING_STARTUP

    def test_values_within_ten_percent(self, rng) -> None:
        for client in generate_client_stock("Alpha", rng):
            profile = next(p for p in CLIENT_PROFILES if p.type == client.type)
            assert profile.base_cost * 0.9 - 1 <= client.cost <= profile.base_cost * 1.1 + 1
            assert profile.base_volume * 0.9 - 1 <= client.volume <= profile.base_volume * 1.1 + 1
            assert profile.base_spam_rate * 0.9 - 0.01 <= client.spam_rate <= profile.base_spam_rate * 1.1 + 0.01

    def test_premium_requirements(self, rng) -> None:
        premium = generate_client_stock("Alpha", rng)[0]
        assert premium.available_from_round == 3
        assert premium.requirements.tech == ["spf", "dkim", "dmarc"]
        assert premium.requirements.reputation == 85

    def test_same_seed_same_stock(self) -> None:
        assert generate_client_stock("Alpha", random.Random(7)) == generate_client_stock("Alpha", random.Random(7))

    def test_small_values_keep_two_decimals(self, rng) -> None:
        value = apply_variance(1.2, rng)
        assert value == round(value, 2)
        assert 1.08 <= value <= 1.32


# =============================================================================
# Acquisition
# =============================================================================


class TestAcquisition:
    """Tests for acquire_client."""

    @pytest.fixture
    def team(self, make_team, make_client):
        return make_team(
            credits=500,
            available_clients=[make_client("c1", cost=150), make_client("c2", cost=600)],
        )

    def test_acquire_deducts_cost_and_moves_client(self, team) -> None:
        result = acquire_client(team, "c1", 1, DESTINATIONS)

        assert result.success
        updated = result.team
        assert updated.credits == 350
        assert [c.id for c in updated.available_clients] == ["c2"]
        assert updated.active_clients == ["c1"]
        assert updated.portfolio["c1"].cost == 150
        state = updated.client_states["c1"]
        assert state.status == ClientStatus.ACTIVE
        assert state.first_active_round is None

    def test_original_team_untouched(self, team) -> None:
        acquire_client(team, "c1", 1, DESTINATIONS)
        assert team.credits == 500
        assert len(team.available_clients) == 2
        assert team.active_clients == []

    def test_insufficient_credits(self, team) -> None:
        result = acquire_client(team, "c2", 1, DESTINATIONS)
        assert not result.success
        assert result.error == "Insufficient credits to acquire this client"
        assert result.team is None

    def test_already_owned(self, team) -> None:
        owned = acquire_client(team, "c1", 1, DESTINATIONS).team
        result = acquire_client(owned, "c1", 1, DESTINATIONS)
        assert result.error == "Client already acquired"

    def test_unknown_client(self, team) -> None:
        assert acquire_client(team, "nope", 1, DESTINATIONS).error == "Client not available in marketplace"


# =============================================================================
# Portfolio
# =============================================================================


class TestPortfolio:
    """Tests for status toggles, onboarding and lock-in commits."""

    @pytest.fixture
    def team(self, make_team, make_client):
        return make_team(
            credits=200,
            clients=[make_client("c1", risk=ClientRisk.HIGH), make_client("c2", risk=ClientRisk.LOW)],
        )

    def test_pause_and_resume(self, team) -> None:
        assert toggle_client_status(team, "c1", ClientStatus.PAUSED).success
        assert team.client_states["c1"].status == ClientStatus.PAUSED
        assert toggle_client_status(team, "c1", ClientStatus.ACTIVE).success

    def test_configure_then_clear_onboarding(self, team) -> None:
        configure_onboarding(team, "c1", warmup=True, list_hygiene=False)
        assert team.pending_onboarding["c1"] == OnboardingDecision(warmup=True)

        configure_onboarding(team, "c1", warmup=False, list_hygiene=False)
        assert "c1" not in team.pending_onboarding

    def test_commit_attaches_modifiers_and_charges(self, team) -> None:
        team.pending_onboarding = {"c1": OnboardingDecision(warmup=True, list_hygiene=True)}

        commit = commit_pending_onboarding(team)

        assert commit.total_cost == 230
        assert team.credits == -30
        assert team.pending_onboarding == {}
        state = team.client_states["c1"]
        warmup, hygiene = state.volume_modifiers
        assert isinstance(warmup.scope, FirstActiveRoundOnly)
        assert warmup.multiplier == 0.5
        assert hygiene.multiplier == 0.85
        assert state.spam_trap_modifiers[0].multiplier == 0.6

    def test_commit_skips_activated_clients(self, team) -> None:
        team.client_states["c1"].first_active_round = 1
        team.pending_onboarding = {"c1": OnboardingDecision(list_hygiene=True)}
        assert commit_pending_onboarding(team).total_cost == 0
        assert team.credits == 200

    def test_auto_correct_drops_warmup_first(self, team) -> None:
        """310 pending against 200 credits: dropping one warm-up is enough."""
        team.pending_onboarding = {
            "c1": OnboardingDecision(warmup=True, list_hygiene=True),
            "c2": OnboardingDecision(list_hygiene=True),
        }

        corrections = auto_correct_onboarding(team)

        assert [(c.client_id, c.option, c.cost_saved) for c in corrections] == [("c1", "warmup", 150)]
        assert team.pending_onboarding == {
            "c1": OnboardingDecision(list_hygiene=True),
            "c2": OnboardingDecision(list_hygiene=True),
        }

    def test_auto_correct_falls_back_to_hygiene(self, team) -> None:
        team.credits = 50
        team.pending_onboarding = {"c1": OnboardingDecision(warmup=True, list_hygiene=True)}

        corrections = auto_correct_onboarding(team)

        assert [c.option for c in corrections] == ["warmup", "list_hygiene"]
        assert team.pending_onboarding == {}

    def test_activation_skips_paused_clients(self, team) -> None:
        team.client_states["c2"].status = ClientStatus.PAUSED
        assert activate_clients(team, 2) == ["c1"]
        assert team.client_states["c1"].first_active_round == 2
        assert team.client_states["c2"].first_active_round is None

    def test_first_active_round_set_once(self, team) -> None:
        activate_clients(team, 1)
        activate_clients(team, 2)
        assert team.client_states["c1"].first_active_round == 1

    def test_finalize_locks_team(self, team) -> None:
        team.pending_onboarding = {"c2": OnboardingDecision(warmup=True)}
        commit = finalize_team_lock(team, 1)
        assert commit.committed_clients == ["c2"]
        assert team.locked_in
        assert team.locked_in_at is not None
        assert team.credits == 50
