"""Tests for round-scoped client modifiers.

Tests cover:
1. Scope applicability for explicit rounds and first-active-round-only
2. The [-1] persisted encoding of first-active-round-only scopes
3. Combined multipliers across several modifiers
"""

import pytest
from pydantic import ValidationError

from mailquest.models.modifiers import (
    FirstActiveRoundOnly,
    Modifier,
    SpecificRounds,
    all_rounds,
    combined_multiplier,
    decode_round_scope,
    encode_round_scope,
)
from mailquest.models.session import ClientState


# =============================================================================
# Round scopes
# =============================================================================


class TestRoundScope:
    """Tests for SpecificRounds and FirstActiveRoundOnly."""

    def test_specific_rounds_applies_only_in_listed_rounds(self) -> None:
        """A scope of (2, 3) applies in rounds 2 and 3 only."""
        scope = SpecificRounds(rounds=(2, 3))
        assert not scope.applies(1, None)
        assert scope.applies(2, None)
        assert scope.applies(3, 1)
        assert not scope.applies(4, None)

    def test_first_active_round_only_needs_activation(self) -> None:
        """Never-activated clients are not affected by first-round scopes."""
        scope = FirstActiveRoundOnly()
        assert not scope.applies(1, None)
        assert scope.applies(2, 2)
        assert not scope.applies(3, 2)

    def test_all_rounds_covers_whole_game(self) -> None:
        """Permanent scopes list every round of the game."""
        assert all_rounds().rounds == (1, 2, 3, 4)

    def test_sentinel_decodes_to_first_active_round(self) -> None:
        """[-1] decodes to FirstActiveRoundOnly and encodes back."""
        scope = decode_round_scope([-1])
        assert isinstance(scope, FirstActiveRoundOnly)
        assert encode_round_scope(scope) == [-1]

    def test_round_list_decodes_to_specific_rounds(self) -> None:
        scope = decode_round_scope([1, 4])
        assert scope == SpecificRounds(rounds=(1, 4))
        assert encode_round_scope(scope) == [1, 4]


# =============================================================================
# Modifier model
# =============================================================================


class TestModifier:
    """Tests for the Modifier model and its persisted shape."""

    def test_accepts_persisted_round_list(self) -> None:
        """applicable_rounds in stored JSON is decoded into a scope."""
        modifier = Modifier.model_validate(
            {"id": "warmup-c1", "source": "warmup", "multiplier": 0.5, "applicable_rounds": [-1]}
        )
        assert isinstance(modifier.scope, FirstActiveRoundOnly)

    def test_sentinel_survives_json_round_trip(self) -> None:
        """The [-1] sentinel is written back exactly as it was read."""
        modifier = Modifier(id="warmup-c1", source="warmup", multiplier=0.5, scope=FirstActiveRoundOnly())
        dumped = modifier.model_dump(mode="json", by_alias=True)
        assert dumped["applicable_rounds"] == [-1]

        restored = Modifier.model_validate_json(modifier.model_dump_json(by_alias=True))
        assert restored == modifier

    def test_multiplier_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Modifier(id="bad", source="test", multiplier=0, scope=all_rounds())

    def test_client_state_round_trip_keeps_modifiers(self) -> None:
        """Modifiers nested in a client state keep their scopes through JSON."""
        state = ClientState(
            first_active_round=2,
            volume_modifiers=[
                Modifier(id="warmup-c1", source="warmup", multiplier=0.5, scope=FirstActiveRoundOnly()),
                Modifier(id="INC-009-volume-c1-r2", source="INC-009", multiplier=1.5, scope=SpecificRounds(rounds=(2,))),
            ],
        )
        restored = ClientState.model_validate_json(state.model_dump_json(by_alias=True))
        assert restored == state


# =============================================================================
# Combined multipliers
# =============================================================================


class TestCombinedMultiplier:
    """Tests for combined_multiplier."""

    @pytest.fixture
    def modifiers(self) -> list[Modifier]:
        return [
            Modifier(id="warmup-c1", source="warmup", multiplier=0.5, scope=FirstActiveRoundOnly()),
            Modifier(id="list_hygiene-volume-c1", source="list_hygiene", multiplier=0.9, scope=all_rounds()),
            Modifier(id="INC-015-volume-c1-r4", source="INC-015", multiplier=2, scope=SpecificRounds(rounds=(4,))),
        ]

    def test_no_modifiers_is_identity(self) -> None:
        assert combined_multiplier([], 1, 1) == 1.0

    def test_first_active_round(self, modifiers) -> None:
        """Warm-up and hygiene stack in the client's first round."""
        assert combined_multiplier(modifiers, 1, 1) == pytest.approx(0.45)

    def test_later_round_drops_warmup(self, modifiers) -> None:
        assert combined_multiplier(modifiers, 2, 1) == pytest.approx(0.9)

    def test_round_specific_modifier(self, modifiers) -> None:
        assert combined_multiplier(modifiers, 4, 1) == pytest.approx(1.8)
