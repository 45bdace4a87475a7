"""Tech upgrade purchase validation.

Checks run in priority order and stop at the first failure:
1. Upgrade not already owned
2. Dependencies met (SPF -> DKIM -> DMARC chain)
3. Sufficient credits
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mailquest.catalog.tech_upgrades import TechUpgrade
from mailquest.models.session import ESPTeam


class TechPurchaseReason(str, Enum):
    ALREADY_OWNED = "already_owned"
    UNMET_DEPENDENCIES = "unmet_dependencies"
    INSUFFICIENT_CREDITS = "insufficient_credits"
    UPGRADE_NOT_FOUND = "upgrade_not_found"


@dataclass(frozen=True)
class TechPurchaseValidation:
    """Outcome of validate_tech_purchase.

    Attributes:
        can_purchase: True when every check passed
        reason: First failing check, None on success
        missing_dependencies: Every unmet dependency id
        required_credits: Cost of the upgrade when credits were insufficient
        available_credits: Team credits when credits were insufficient
    """

    can_purchase: bool
    reason: Optional[TechPurchaseReason] = None
    missing_dependencies: tuple[str, ...] = ()
    required_credits: Optional[int] = None
    available_credits: Optional[int] = None


def missing_dependencies(upgrade: TechUpgrade, owned: list[str]) -> list[str]:
    return [dep for dep in upgrade.dependencies if dep not in owned]


def validate_tech_purchase(team: ESPTeam, upgrade: TechUpgrade) -> TechPurchaseValidation:
    """Check whether a team may buy an upgrade. Never mutates the team."""
    if upgrade.id in team.owned_tech_upgrades:
        return TechPurchaseValidation(False, TechPurchaseReason.ALREADY_OWNED)

    missing = missing_dependencies(upgrade, team.owned_tech_upgrades)
    if missing:
        return TechPurchaseValidation(
            False, TechPurchaseReason.UNMET_DEPENDENCIES, missing_dependencies=tuple(missing)
        )

    if team.credits < upgrade.cost:
        return TechPurchaseValidation(
            False,
            TechPurchaseReason.INSUFFICIENT_CREDITS,
            required_credits=upgrade.cost,
            available_credits=team.credits,
        )

    return TechPurchaseValidation(True)


def tech_error_message(validation: TechPurchaseValidation, names: Optional[dict[str, str]] = None) -> str:
    """Human-readable message for a failed validation.

    Args:
        validation: Result of validate_tech_purchase
        names: Optional upgrade id -> display name lookup for dependencies
    """
    if validation.can_purchase:
        return ""
    names = names or {}
    reason = validation.reason
    if reason == TechPurchaseReason.INSUFFICIENT_CREDITS:
        return f"Insufficient credits. Need {validation.required_credits}, have {validation.available_credits}"
    if reason == TechPurchaseReason.UNMET_DEPENDENCIES:
        if not validation.missing_dependencies:
            return "Missing required dependencies"
        missing = ", ".join(names.get(dep, dep.upper()) for dep in validation.missing_dependencies)
        return f"Missing required upgrades: {missing}"
    if reason == TechPurchaseReason.ALREADY_OWNED:
        return "This upgrade is already owned"
    if reason == TechPurchaseReason.UPGRADE_NOT_FOUND:
        return "Upgrade not found"
    return "Cannot purchase this upgrade"
