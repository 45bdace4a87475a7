"""Incident card models and the effect language.

Effects form a closed tagged union: one frozen dataclass per effect type,
each carrying an EffectTarget and only the fields that type needs.
Incident content is authored as plain dicts (see mailquest.catalog.incidents);
``parse_effect`` is the single place where raw data is decoded, and any
unknown target, unknown type, or target/type combination the engine does
not support is logged and dropped there.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from mailquest.game_logger import GameLogger
from mailquest.models.session import ClientType

# =============================================================================
# Targets, durations, conditions
# =============================================================================


class EffectTarget(str, Enum):
    """Who an effect applies to."""

    SELECTED_ESP = "selected_esp"  # Facilitator picks the team
    SELECTED_CLIENT = "selected_client"  # Random active client of the selected team
    CONDITIONAL_ESP = "conditional_esp"  # Every team matching a condition
    ALL_ESPS = "all_esps"
    ALL_DESTINATIONS = "all_destinations"
    NOTIFICATION = "notification"
    SELF = "self"  # The team making a choice


ESP_TARGETS = frozenset(
    {EffectTarget.SELECTED_ESP, EffectTarget.CONDITIONAL_ESP, EffectTarget.ALL_ESPS, EffectTarget.SELF}
)


class EffectDuration(str, Enum):
    THIS_ROUND = "this_round"
    NEXT_ROUND = "next_round"
    PERMANENT = "permanent"


@dataclass(frozen=True)
class HasTech:
    """Holds when the tech id is owned.

    For client-targeted effects the only supported tech is ``list_hygiene``,
    checked against the client's modifiers instead of team upgrades.
    """

    tech: str


@dataclass(frozen=True)
class LacksTech:
    """Holds when the tech id is not owned."""

    tech: str


Condition = Union[HasTech, LacksTech]


def condition_holds(condition: Optional[Condition], owned: set[str] | list[str]) -> bool:
    """Evaluate a condition against a set of owned tech ids.

    A missing condition always holds.
    """
    if condition is None:
        return True
    if isinstance(condition, HasTech):
        return condition.tech in owned
    return condition.tech not in owned


# =============================================================================
# Effects
# =============================================================================


@dataclass(frozen=True)
class ReputationEffect:
    """Add ``value`` to every per-destination reputation of the target."""

    target: EffectTarget
    value: float
    condition: Optional[Condition] = None
    display_message: Optional[str] = None


@dataclass(frozen=True)
class ReputationSetEffect:
    """Overwrite every per-destination reputation of the target."""

    target: EffectTarget
    value: float
    display_message: Optional[str] = None


@dataclass(frozen=True)
class CreditsEffect:
    """Add ``value`` to the target's credits, flooring at zero."""

    target: EffectTarget
    value: float
    condition: Optional[Condition] = None
    display_message: Optional[str] = None


@dataclass(frozen=True)
class BudgetEffect:
    """Add ``value`` to every destination budget, flooring at zero."""

    value: float
    target: EffectTarget = EffectTarget.ALL_DESTINATIONS
    display_message: Optional[str] = None


@dataclass(frozen=True)
class ClientVolumeMultiplierEffect:
    """Append a volume modifier to the targeted clients."""

    target: EffectTarget
    multiplier: float
    duration: EffectDuration = EffectDuration.THIS_ROUND
    client_types: Optional[tuple[ClientType, ...]] = None
    condition: Optional[Condition] = None
    display_message: Optional[str] = None


@dataclass(frozen=True)
class ClientSpamTrapMultiplierEffect:
    """Append a spam-trap modifier to the targeted clients."""

    target: EffectTarget
    multiplier: float
    duration: EffectDuration = EffectDuration.THIS_ROUND
    client_types: Optional[tuple[ClientType, ...]] = None
    condition: Optional[Condition] = None
    display_message: Optional[str] = None


@dataclass(frozen=True)
class AutoLockEffect:
    """Force the target team to lock in."""

    target: EffectTarget


@dataclass(frozen=True)
class NotificationEffect:
    message: str
    target: EffectTarget = EffectTarget.NOTIFICATION


Effect = Union[
    ReputationEffect,
    ReputationSetEffect,
    CreditsEffect,
    BudgetEffect,
    ClientVolumeMultiplierEffect,
    ClientSpamTrapMultiplierEffect,
    AutoLockEffect,
    NotificationEffect,
]

ClientMultiplierEffect = Union[ClientVolumeMultiplierEffect, ClientSpamTrapMultiplierEffect]


# =============================================================================
# Incident cards
# =============================================================================


class TeamSelection(str, Enum):
    """Which teams are asked to decide on a choice incident."""

    HIGHEST_REPUTATION = "highest_reputation"
    LOWEST_REPUTATION = "lowest_reputation"
    ALL_ESPS = "all_esps"


@dataclass(frozen=True)
class ChoiceOption:
    id: str
    label: str
    effects: tuple[Effect, ...] = ()
    description: str = ""
    is_default: bool = False


@dataclass(frozen=True)
class ChoiceConfig:
    target_selection: TeamSelection
    options: tuple[ChoiceOption, ...]

    def default_option(self) -> Optional[ChoiceOption]:
        """The option flagged as default, else the first one."""
        for option in self.options:
            if option.is_default:
                return option
        return self.options[0] if self.options else None

    def option(self, option_id: str) -> Optional[ChoiceOption]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


@dataclass(frozen=True)
class IncidentCard:
    """Immutable catalog entry for a scripted incident."""

    id: str
    name: str
    rounds: tuple[int, ...]
    category: str
    rarity: str = "Common"
    description: str = ""
    educational_note: str = ""
    duration: str = "Immediate"
    effects: tuple[Effect, ...] = ()
    automatic: bool = False
    choice_config: Optional[ChoiceConfig] = None

    def available_in(self, round_number: int) -> bool:
        return round_number in self.rounds

    def targets(self, *targets: EffectTarget) -> bool:
        return any(effect.target in targets for effect in self.effects)


# =============================================================================
# Deserialization boundary
# =============================================================================

_VALID_TARGETS: dict[str, frozenset[EffectTarget]] = {
    "reputation": ESP_TARGETS | {EffectTarget.SELECTED_CLIENT},
    "credits": ESP_TARGETS | {EffectTarget.SELECTED_CLIENT},
    "reputation_set": ESP_TARGETS,
    "auto_lock": ESP_TARGETS,
    "budget": frozenset({EffectTarget.ALL_DESTINATIONS}),
    "client_volume_multiplier": frozenset({EffectTarget.SELECTED_CLIENT, EffectTarget.ALL_ESPS}),
    "client_spam_trap_multiplier": frozenset({EffectTarget.SELECTED_CLIENT, EffectTarget.ALL_ESPS}),
    "notification": frozenset({EffectTarget.NOTIFICATION}),
}


class EffectParseError(ValueError):
    """Raised internally when a raw effect cannot be decoded."""


def parse_condition(raw: Optional[dict[str, Any]]) -> Optional[Condition]:
    if raw is None:
        return None
    kind = raw.get("type")
    tech = raw.get("tech")
    if not tech:
        raise EffectParseError(f"condition {kind!r} requires a tech")
    if kind == "has_tech":
        return HasTech(tech)
    if kind == "lacks_tech":
        return LacksTech(tech)
    raise EffectParseError(f"unknown condition type {kind!r}")


def _require(raw: dict[str, Any], key: str) -> Any:
    if raw.get(key) is None:
        raise EffectParseError(f"{raw.get('type')!r} effect requires {key!r}")
    return raw[key]


def _client_types(raw: dict[str, Any]) -> Optional[tuple[ClientType, ...]]:
    types = raw.get("clientTypes", raw.get("client_types"))
    if types is None:
        return None
    return tuple(ClientType(t) for t in types)


def _build_effect(raw: dict[str, Any]) -> Effect:
    try:
        target = EffectTarget(raw.get("target"))
    except ValueError:
        raise EffectParseError(f"unknown target {raw.get('target')!r}") from None

    effect_type = raw.get("type")
    if effect_type not in _VALID_TARGETS:
        raise EffectParseError(f"unknown effect type {effect_type!r}")
    if target not in _VALID_TARGETS[effect_type]:
        raise EffectParseError(f"target {target.value!r} does not support {effect_type!r}")

    display = raw.get("displayMessage", raw.get("display_message"))

    if effect_type == "reputation":
        return ReputationEffect(target, float(_require(raw, "value")), parse_condition(raw.get("condition")), display)
    if effect_type == "reputation_set":
        return ReputationSetEffect(target, float(_require(raw, "value")), display)
    if effect_type == "credits":
        return CreditsEffect(target, float(_require(raw, "value")), parse_condition(raw.get("condition")), display)
    if effect_type == "budget":
        return BudgetEffect(float(_require(raw, "value")), target, display)
    if effect_type == "auto_lock":
        return AutoLockEffect(target)
    if effect_type == "notification":
        return NotificationEffect(str(_require(raw, "message")), target)

    effect_cls = ClientVolumeMultiplierEffect if effect_type == "client_volume_multiplier" else ClientSpamTrapMultiplierEffect
    return effect_cls(
        target=target,
        multiplier=float(_require(raw, "multiplier")),
        duration=EffectDuration(raw.get("duration", "this_round")),
        client_types=_client_types(raw),
        condition=parse_condition(raw.get("condition")),
        display_message=display,
    )


def parse_effect(raw: dict[str, Any], logger: GameLogger, incident_id: str = "") -> Optional[Effect]:
    """Decode one raw effect dict.

    Returns:
        The typed effect, or None if the effect is malformed. Malformed
        effects are logged as ``incident_effect_skipped`` and never raise.
    """
    try:
        return _build_effect(raw)
    except (EffectParseError, ValueError, TypeError) as e:
        logger.warning(
            "Skipping unsupported incident effect",
            incident_id=incident_id,
            target=raw.get("target"),
            type=raw.get("type"),
            reason=str(e),
        )
        logger.event("incident_effect_skipped", incident_id=incident_id, target=raw.get("target"), reason=str(e))
        return None


def parse_effects(raws: list[dict[str, Any]], logger: GameLogger, incident_id: str = "") -> tuple[Effect, ...]:
    effects = (parse_effect(raw, logger, incident_id) for raw in raws)
    return tuple(e for e in effects if e is not None)


def parse_incident_card(raw: dict[str, Any], logger: GameLogger) -> IncidentCard:
    """Decode a raw incident card, dropping unsupported effects."""
    incident_id = raw["id"]
    choice_config = None
    if raw.get("choiceConfig"):
        config = raw["choiceConfig"]
        choice_config = ChoiceConfig(
            target_selection=TeamSelection(config["targetSelection"]),
            options=tuple(
                ChoiceOption(
                    id=opt["id"],
                    label=opt.get("label", opt["id"]),
                    effects=parse_effects(opt.get("effects", []), logger, incident_id),
                    description=opt.get("description", ""),
                    is_default=bool(opt.get("isDefault", False)),
                )
                for opt in config.get("options", [])
            ),
        )

    return IncidentCard(
        id=incident_id,
        name=raw["name"],
        rounds=tuple(raw["round"]),
        category=raw.get("category", ""),
        rarity=raw.get("rarity", "Common"),
        description=raw.get("description", ""),
        educational_note=raw.get("educationalNote", ""),
        duration=raw.get("duration", "Immediate"),
        effects=parse_effects(raw.get("effects", []), logger, incident_id),
        automatic=bool(raw.get("automatic", False)),
        choice_config=choice_config,
    )
