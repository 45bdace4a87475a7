"""Incident subsystem: triggering, effect application and player choices.

Usage:
    from mailquest.incidents import trigger_incident, apply_incident_effects

    result = trigger_incident(session, catalog, "INC-006", rng, logger)
    if result.success:
        apply_incident_effects(session, result.incident, result.selection, logger)
"""

from mailquest.incidents.choices import (
    ChoiceInitiation,
    ChoiceResult,
    PendingChoiceApplication,
    apply_pending_choice_effects,
    initiate_pending_choices,
    resolve_target_teams,
    set_pending_choice,
    unsettled_choice_error,
)
from mailquest.incidents.effects import (
    EffectApplicationResult,
    EffectChanges,
    EffectTargetError,
    ModifierChange,
    apply_effects,
    apply_incident_effects,
    resolve_esp_targets,
    scope_for_duration,
)
from mailquest.incidents.triggers import (
    EffectSelection,
    TriggerResult,
    can_trigger_incident,
    get_automatic_incidents,
    get_available_incidents,
    trigger_incident,
)

__all__ = [
    "ChoiceInitiation",
    "ChoiceResult",
    "PendingChoiceApplication",
    "apply_pending_choice_effects",
    "initiate_pending_choices",
    "resolve_target_teams",
    "set_pending_choice",
    "unsettled_choice_error",
    "EffectApplicationResult",
    "EffectChanges",
    "EffectTargetError",
    "ModifierChange",
    "apply_effects",
    "apply_incident_effects",
    "resolve_esp_targets",
    "scope_for_duration",
    "EffectSelection",
    "TriggerResult",
    "can_trigger_incident",
    "get_automatic_incidents",
    "get_available_incidents",
    "trigger_incident",
]
