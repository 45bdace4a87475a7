"""Time-scoped multiplicative modifiers on a client's volume or spam-trap risk.

A modifier's applicability is decided every round from its RoundScope and
the client's first active round; nothing is ever removed from a modifier
list.

Persisted shape: ``applicable_rounds`` is a list of round numbers, where
``[-1]`` encodes "only the client's first active round". The sentinel is
decoded into FirstActiveRoundOnly when a Modifier is built and re-encoded
only on serialization.
"""

from __future__ import annotations

from typing import Iterable, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from mailquest.parameters import MAX_ROUNDS

FIRST_ACTIVE_ROUND_SENTINEL = -1


class SpecificRounds(BaseModel):
    """Modifier applies in an explicit set of rounds."""

    model_config = ConfigDict(frozen=True)

    rounds: tuple[int, ...]

    def applies(self, current_round: int, first_active_round: int | None) -> bool:
        return current_round in self.rounds


class FirstActiveRoundOnly(BaseModel):
    """Modifier applies only in the round the client first became active."""

    model_config = ConfigDict(frozen=True)

    def applies(self, current_round: int, first_active_round: int | None) -> bool:
        return first_active_round is not None and first_active_round == current_round


RoundScope = Union[SpecificRounds, FirstActiveRoundOnly]


def decode_round_scope(applicable_rounds: Iterable[int]) -> RoundScope:
    """Convert a persisted round list into a RoundScope."""
    rounds = tuple(applicable_rounds)
    if FIRST_ACTIVE_ROUND_SENTINEL in rounds:
        return FirstActiveRoundOnly()
    return SpecificRounds(rounds=rounds)


def encode_round_scope(scope: RoundScope) -> list[int]:
    """Convert a RoundScope back into its persisted round list."""
    if isinstance(scope, FirstActiveRoundOnly):
        return [FIRST_ACTIVE_ROUND_SENTINEL]
    return list(scope.rounds)


def all_rounds() -> SpecificRounds:
    """Scope covering every round of the game (permanent modifiers)."""
    return SpecificRounds(rounds=tuple(range(1, MAX_ROUNDS + 1)))


class Modifier(BaseModel):
    """A multiplicative adjustment attached to a client state.

    Attributes:
        id: Unique identifier, e.g. ``warmup-client-Alpha-003``
        source: What created the modifier (``warmup``, ``list_hygiene``,
            or an incident id)
        multiplier: Factor applied when the modifier is in scope
        scope: Rounds in which the modifier applies
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    source: str
    multiplier: float = Field(gt=0.0)
    scope: RoundScope = Field(alias="applicable_rounds")

    @field_validator("scope", mode="before")
    @classmethod
    def decode_scope(cls, v):
        """Accept either a RoundScope or a persisted round list."""
        if isinstance(v, (list, tuple)):
            return decode_round_scope(v)
        return v

    @field_serializer("scope")
    def encode_scope(self, scope: RoundScope) -> list[int]:
        return encode_round_scope(scope)

    def applies(self, current_round: int, first_active_round: int | None) -> bool:
        return self.scope.applies(current_round, first_active_round)


def combined_multiplier(
    modifiers: Iterable[Modifier],
    current_round: int,
    first_active_round: int | None,
) -> float:
    """Product of every modifier multiplier in scope for the round."""
    result = 1.0
    for modifier in modifiers:
        if modifier.applies(current_round, first_active_round):
            result *= modifier.multiplier
    return result
