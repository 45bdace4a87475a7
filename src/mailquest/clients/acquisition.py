"""Client acquisition.

acquire_client is an immutable update: it returns a new ESPTeam and leaves
the input untouched, so callers can validate, acquire, and only then swap
the team into the session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from mailquest.models.session import ClientState, ClientStatus, ESPTeam
from mailquest.validation.clients import (
    ClientAcquisitionReason,
    ClientAcquisitionValidation,
    client_error_message,
    validate_client_acquisition,
)


@dataclass(frozen=True)
class AcquisitionResult:
    success: bool
    team: Optional[ESPTeam] = None
    error: Optional[str] = None
    validation: Optional[ClientAcquisitionValidation] = None


def acquire_client(
    team: ESPTeam,
    client_id: str,
    current_round: int,
    destination_names: Iterable[str],
) -> AcquisitionResult:
    """Move a client from the marketplace into the team's portfolio.

    On success the returned team has the cost deducted, the client removed
    from available_clients and stored in portfolio, its id appended to
    active_clients, and a fresh Active ClientState with no first active
    round.
    """
    if client_id in team.active_clients:
        validation = ClientAcquisitionValidation(False, ClientAcquisitionReason.ALREADY_OWNED)
        return AcquisitionResult(False, error=client_error_message(validation), validation=validation)

    client = next((c for c in team.available_clients if c.id == client_id), None)
    if client is None:
        validation = ClientAcquisitionValidation(False, ClientAcquisitionReason.CLIENT_NOT_FOUND)
        return AcquisitionResult(False, error=client_error_message(validation), validation=validation)

    validation = validate_client_acquisition(team, client, current_round, list(destination_names))
    if not validation.can_acquire:
        return AcquisitionResult(False, error=client_error_message(validation), validation=validation)

    updated = team.model_copy(deep=True)
    updated.credits -= client.cost
    updated.available_clients = [c for c in updated.available_clients if c.id != client_id]
    updated.portfolio[client_id] = client.model_copy(deep=True)
    updated.active_clients.append(client_id)
    updated.client_states[client_id] = ClientState(status=ClientStatus.ACTIVE, first_active_round=None)

    return AcquisitionResult(True, team=updated, validation=validation)
