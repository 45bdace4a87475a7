"""Data models for Mailquest."""

from mailquest.models.incidents import (
    AutoLockEffect,
    BudgetEffect,
    ChoiceConfig,
    ChoiceOption,
    ClientSpamTrapMultiplierEffect,
    ClientVolumeMultiplierEffect,
    Condition,
    CreditsEffect,
    Effect,
    EffectDuration,
    EffectTarget,
    HasTech,
    IncidentCard,
    LacksTech,
    NotificationEffect,
    ReputationEffect,
    ReputationSetEffect,
    TeamSelection,
    condition_holds,
    parse_effect,
    parse_incident_card,
)
from mailquest.models.modifiers import (
    FIRST_ACTIVE_ROUND_SENTINEL,
    FirstActiveRoundOnly,
    Modifier,
    RoundScope,
    SpecificRounds,
    all_rounds,
    combined_multiplier,
    decode_round_scope,
    encode_round_scope,
)
from mailquest.models.session import (
    Client,
    ClientRequirements,
    ClientRisk,
    ClientState,
    ClientStatus,
    ClientType,
    Destination,
    ESPTeam,
    FilteringLevel,
    FilteringPolicy,
    GamePhase,
    GameSession,
    IncidentHistoryEntry,
    InvestigationHistoryEntry,
    InvestigationVote,
    OnboardingDecision,
    PendingChoice,
    ResolutionHistoryEntry,
    SpamTrapDeployment,
    clamp,
    clamp_reputation,
)

__all__ = [
    # Session state
    "GameSession",
    "GamePhase",
    "ESPTeam",
    "Destination",
    "Client",
    "ClientRequirements",
    "ClientRisk",
    "ClientState",
    "ClientStatus",
    "ClientType",
    "FilteringLevel",
    "FilteringPolicy",
    "IncidentHistoryEntry",
    "InvestigationHistoryEntry",
    "InvestigationVote",
    "OnboardingDecision",
    "PendingChoice",
    "ResolutionHistoryEntry",
    "SpamTrapDeployment",
    "clamp",
    "clamp_reputation",
    # Modifiers
    "Modifier",
    "RoundScope",
    "SpecificRounds",
    "FirstActiveRoundOnly",
    "FIRST_ACTIVE_ROUND_SENTINEL",
    "all_rounds",
    "combined_multiplier",
    "decode_round_scope",
    "encode_round_scope",
    # Incidents
    "IncidentCard",
    "ChoiceConfig",
    "ChoiceOption",
    "TeamSelection",
    "Effect",
    "EffectTarget",
    "EffectDuration",
    "ReputationEffect",
    "ReputationSetEffect",
    "CreditsEffect",
    "BudgetEffect",
    "ClientVolumeMultiplierEffect",
    "ClientSpamTrapMultiplierEffect",
    "AutoLockEffect",
    "NotificationEffect",
    "Condition",
    "HasTech",
    "LacksTech",
    "condition_holds",
    "parse_effect",
    "parse_incident_card",
]
