"""Pure validators that gate state mutation.

Every validator returns a frozen result object and never mutates its inputs.
"""

from mailquest.validation.clients import (
    ClientAcquisitionReason,
    ClientAcquisitionValidation,
    calculate_overall_reputation,
    client_error_message,
    validate_client_acquisition,
    weighted_reputation,
)
from mailquest.validation.destination_tools import (
    ToolPurchaseReason,
    ToolPurchaseValidation,
    tool_error_message,
    validate_tool_purchase,
)
from mailquest.validation.lock_in import (
    LockInReason,
    LockInValidation,
    pending_onboarding_costs,
    validate_destination_lock_in,
    validate_lock_in,
    validate_team_budget,
)
from mailquest.validation.onboarding import (
    PortfolioReason,
    PortfolioValidation,
    onboarding_cost,
    validate_onboarding_configuration,
    validate_status_toggle,
)
from mailquest.validation.tech import (
    TechPurchaseReason,
    TechPurchaseValidation,
    tech_error_message,
    validate_tech_purchase,
)

__all__ = [
    "ClientAcquisitionReason",
    "ClientAcquisitionValidation",
    "calculate_overall_reputation",
    "client_error_message",
    "validate_client_acquisition",
    "weighted_reputation",
    "ToolPurchaseReason",
    "ToolPurchaseValidation",
    "tool_error_message",
    "validate_tool_purchase",
    "LockInReason",
    "LockInValidation",
    "pending_onboarding_costs",
    "validate_destination_lock_in",
    "validate_lock_in",
    "validate_team_budget",
    "PortfolioReason",
    "PortfolioValidation",
    "onboarding_cost",
    "validate_onboarding_configuration",
    "validate_status_toggle",
    "TechPurchaseReason",
    "TechPurchaseValidation",
    "tech_error_message",
    "validate_tech_purchase",
]
