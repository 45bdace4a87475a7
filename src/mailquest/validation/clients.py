"""Client acquisition validation.

Validation checks (in priority order):
1. Client not already owned
2. Client exists in the team's marketplace stock
3. Client is available in the current round
4. Sufficient credits
5. Tech requirements met (Premium clients)
6. Overall reputation requirement met (Premium clients)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from mailquest.models.session import Client, ESPTeam
from mailquest.parameters import KINGDOM_WEIGHTS


class ClientAcquisitionReason(str, Enum):
    ALREADY_OWNED = "already_owned"
    CLIENT_NOT_FOUND = "client_not_found"
    NOT_YET_AVAILABLE = "not_yet_available"
    INSUFFICIENT_CREDITS = "insufficient_credits"
    MISSING_TECH = "missing_tech"
    INSUFFICIENT_REPUTATION = "insufficient_reputation"


@dataclass(frozen=True)
class ClientAcquisitionValidation:
    can_acquire: bool
    reason: Optional[ClientAcquisitionReason] = None
    missing_tech: tuple[str, ...] = ()
    required_reputation: Optional[int] = None
    actual_reputation: Optional[int] = None
    available_from_round: Optional[int] = None


def weighted_reputation(reputation: dict[str, float], destination_names: Iterable[str]) -> float:
    """Kingdom-weighted mean of per-destination reputation.

    Destinations outside the kingdom table carry no weight; a missing
    reputation entry counts as 0.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for name in destination_names:
        weight = KINGDOM_WEIGHTS.get(name, 0.0)
        weighted_sum += reputation.get(name, 0) * weight
        total_weight += weight
    if total_weight == 0:
        return 0.0
    return weighted_sum / total_weight


def calculate_overall_reputation(reputation: dict[str, float], destination_names: Iterable[str]) -> int:
    """Weighted overall reputation rounded to an integer.

    >>> calculate_overall_reputation({"Gmail": 90, "Outlook": 80, "Yahoo": 70}, ["Gmail", "Outlook", "Yahoo"])
    83
    """
    return round(weighted_reputation(reputation, destination_names))


def validate_client_acquisition(
    team: ESPTeam,
    client: Client,
    current_round: int,
    destination_names: Iterable[str],
) -> ClientAcquisitionValidation:
    """Check whether a team may acquire a client. Never mutates the team."""
    if client.id in team.active_clients:
        return ClientAcquisitionValidation(False, ClientAcquisitionReason.ALREADY_OWNED)

    if not any(c.id == client.id for c in team.available_clients):
        return ClientAcquisitionValidation(False, ClientAcquisitionReason.CLIENT_NOT_FOUND)

    if client.available_from_round > current_round:
        return ClientAcquisitionValidation(
            False,
            ClientAcquisitionReason.NOT_YET_AVAILABLE,
            available_from_round=client.available_from_round,
        )

    if team.credits < client.cost:
        return ClientAcquisitionValidation(False, ClientAcquisitionReason.INSUFFICIENT_CREDITS)

    requirements = client.requirements
    if requirements and requirements.tech:
        missing = [tech for tech in requirements.tech if tech not in team.owned_tech_upgrades]
        if missing:
            return ClientAcquisitionValidation(
                False, ClientAcquisitionReason.MISSING_TECH, missing_tech=tuple(missing)
            )

    if requirements and requirements.reputation:
        overall = calculate_overall_reputation(team.reputation, destination_names)
        if overall < requirements.reputation:
            return ClientAcquisitionValidation(
                False,
                ClientAcquisitionReason.INSUFFICIENT_REPUTATION,
                required_reputation=requirements.reputation,
                actual_reputation=overall,
            )

    return ClientAcquisitionValidation(True)


def client_error_message(validation: ClientAcquisitionValidation) -> str:
    if validation.can_acquire:
        return ""
    reason = validation.reason
    if reason == ClientAcquisitionReason.INSUFFICIENT_CREDITS:
        return "Insufficient credits to acquire this client"
    if reason == ClientAcquisitionReason.MISSING_TECH:
        if len(validation.missing_tech) == 1:
            return f"Missing {validation.missing_tech[0].upper()}"
        return f"Missing required technology: {', '.join(validation.missing_tech)}"
    if reason == ClientAcquisitionReason.INSUFFICIENT_REPUTATION:
        return f"Reputation too low ({validation.actual_reputation}/{validation.required_reputation})"
    if reason == ClientAcquisitionReason.CLIENT_NOT_FOUND:
        return "Client not available in marketplace"
    if reason == ClientAcquisitionReason.NOT_YET_AVAILABLE:
        return f"Client not available until round {validation.available_from_round}"
    if reason == ClientAcquisitionReason.ALREADY_OWNED:
        return "Client already acquired"
    return "Cannot acquire this client"
