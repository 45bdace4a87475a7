"""Round resolution engine.

execute_resolution runs the calculation pipeline for every ESP team and then
for every destination, producing a ResolutionResults snapshot. It reads the
session and never mutates it; mailquest.engine.application applies the
results.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from mailquest.catalog import Catalog
from mailquest.engine.calculators import (
    ComplaintResult,
    DeliveryResult,
    ReputationResult,
    RevenueResult,
    SpamTrapResult,
    VolumeResult,
    calculate_complaints,
    calculate_delivery,
    calculate_reputation,
    calculate_revenue,
    calculate_spam_traps,
    calculate_volume,
)
from mailquest.engine.destination_calculators import (
    DestinationRevenue,
    SatisfactionBreakdown,
    aggregate_satisfaction,
    calculate_destination_revenue,
    calculate_esp_satisfaction,
)
from mailquest.game_logger import GameLogger
from mailquest.models.session import ESPTeam, GameSession


@dataclass(frozen=True)
class ESPResolutionResult:
    """Everything the round produced for one ESP. Satisfaction is not included."""

    volume: VolumeResult
    delivery: DeliveryResult
    revenue: RevenueResult
    reputation: ReputationResult
    complaints: ComplaintResult
    spam_traps: SpamTrapResult


@dataclass(frozen=True)
class DestinationResolutionResult:
    aggregated_satisfaction: float
    esp_satisfaction: dict[str, SatisfactionBreakdown]
    revenue: DestinationRevenue
    total_volume: int


@dataclass(frozen=True)
class ResolutionResults:
    round: int
    esp_results: dict[str, ESPResolutionResult]
    destination_results: dict[str, DestinationResolutionResult]

    def to_dict(self) -> dict:
        """Plain-dict form stored in resolution_history."""
        return asdict(self)


def resolve_esp(session: GameSession, team: ESPTeam) -> ESPResolutionResult:
    current_round = session.current_round
    destination_names = session.destination_names()
    records = team.active_client_records()

    volume = calculate_volume(records, destination_names, current_round)
    delivery = calculate_delivery(team, session.destinations, volume, current_round)
    revenue = calculate_revenue(records, current_round)
    complaints = calculate_complaints(records, volume, team.owned_tech_upgrades, current_round)
    spam_traps = calculate_spam_traps(session.room_code, team, records, session.destinations, current_round)
    reputation = calculate_reputation(
        team, records, destination_names, volume, complaints, spam_traps, current_round
    )
    return ESPResolutionResult(volume, delivery, revenue, reputation, complaints, spam_traps)


def resolve_destinations(
    session: GameSession,
    esp_results: dict[str, ESPResolutionResult],
    catalog: Catalog,
) -> dict[str, DestinationResolutionResult]:
    results = {}
    for destination in session.destinations:
        breakdowns = {
            esp_name: calculate_esp_satisfaction(
                destination,
                esp_name,
                result.complaints.adjusted_rate,
                result.volume.per_destination.get(destination.name, 0),
                catalog,
            )
            for esp_name, result in esp_results.items()
        }
        satisfaction = aggregate_satisfaction(list(breakdowns.values()))
        total_volume = sum(b.volume for b in breakdowns.values())
        results[destination.name] = DestinationResolutionResult(
            aggregated_satisfaction=satisfaction,
            esp_satisfaction=breakdowns,
            revenue=calculate_destination_revenue(destination.name, total_volume, satisfaction),
            total_volume=total_volume,
        )
    return results


def execute_resolution(session: GameSession, catalog: Catalog, logger: GameLogger) -> ResolutionResults:
    """Compute the round's results from the current session snapshot."""
    esp_results = {team.name: resolve_esp(session, team) for team in session.esp_teams}
    destination_results = resolve_destinations(session, esp_results, catalog)

    for name, result in esp_results.items():
        logger.event(
            "esp_resolution_calculated",
            room_code=session.room_code,
            round=session.current_round,
            team=name,
            total_volume=result.volume.total_volume,
            delivery_rate=result.delivery.delivery_rate,
            revenue=result.revenue.actual_revenue,
            complaint_rate=result.complaints.adjusted_rate,
            spam_trap_hits=list(result.spam_traps.hit_destinations),
        )

    return ResolutionResults(session.current_round, esp_results, destination_results)
