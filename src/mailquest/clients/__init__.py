"""Client marketplace and portfolio operations."""

from mailquest.clients.acquisition import AcquisitionResult, acquire_client
from mailquest.clients.generator import apply_variance, generate_client_stock
from mailquest.clients.portfolio import (
    OnboardingCommit,
    OnboardingCorrection,
    PortfolioResult,
    activate_clients,
    auto_correct_onboarding,
    commit_pending_onboarding,
    configure_onboarding,
    finalize_team_lock,
    list_hygiene_modifiers,
    toggle_client_status,
    warmup_modifier,
)

__all__ = [
    "AcquisitionResult",
    "acquire_client",
    "apply_variance",
    "generate_client_stock",
    "OnboardingCommit",
    "OnboardingCorrection",
    "PortfolioResult",
    "activate_clients",
    "auto_correct_onboarding",
    "commit_pending_onboarding",
    "configure_onboarding",
    "finalize_team_lock",
    "list_hygiene_modifiers",
    "toggle_client_status",
    "warmup_modifier",
]
