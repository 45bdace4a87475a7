"""Apply resolution results to the game session.

Credits are never clamped. Reputation deltas are added to the current value
(70 when the destination entry is missing) and then rounded and clamped to
[0, 100]. Destination revenue is added to each destination budget.

Callers guarantee a single application per round.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from mailquest.engine.resolution import ResolutionResults
from mailquest.game_logger import GameLogger
from mailquest.models.session import GameSession, clamp_reputation
from mailquest.parameters import ESP_STARTING_REPUTATION


@dataclass(frozen=True)
class ApplicationResult:
    success: bool
    updated_teams: list[str] = field(default_factory=list)
    updated_destinations: list[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"success": self.success, "updated_teams": list(self.updated_teams)}
        if self.error:
            data["error"] = self.error
        return data


def apply_resolution_to_game_state(
    session: GameSession,
    results: ResolutionResults,
    logger: GameLogger,
) -> ApplicationResult:
    updated_teams = []
    try:
        for team in session.esp_teams:
            team_results = results.esp_results.get(team.name)
            if team_results is None:
                logger.info("No resolution results found for team", team=team.name)
                continue

            old_credits = team.credits
            team.credits += team_results.revenue.actual_revenue

            reputation_changes = {}
            for destination, change in team_results.reputation.per_destination.items():
                old = team.reputation.get(destination, ESP_STARTING_REPUTATION)
                team.reputation[destination] = clamp_reputation(old + change.total_change)
                reputation_changes[destination] = {
                    "old": old,
                    "new": team.reputation[destination],
                    "change": change.total_change,
                }

            logger.event(
                "resolution_applied",
                room_code=session.room_code,
                team=team.name,
                credits_change=team_results.revenue.actual_revenue,
                old_credits=old_credits,
                new_credits=team.credits,
                reputation_changes=reputation_changes,
            )
            updated_teams.append(team.name)

        updated_destinations = []
        for destination in session.destinations:
            destination_results = results.destination_results.get(destination.name)
            if destination_results is None:
                continue
            old_budget = destination.budget
            destination.budget += destination_results.revenue.total_revenue
            logger.event(
                "destination_revenue_applied",
                room_code=session.room_code,
                destination=destination.name,
                old_budget=old_budget,
                revenue_earned=destination_results.revenue.total_revenue,
                new_budget=destination.budget,
            )
            updated_destinations.append(destination.name)
    except Exception as e:
        logger.error(
            "Failed to apply resolution results",
            room_code=session.room_code,
            exception=str(e),
        )
        return ApplicationResult(
            False,
            updated_teams=updated_teams,
            error="Failed to apply resolution results to game state",
        )

    logger.info(
        "Resolution results applied to game state",
        room_code=session.room_code,
        teams=updated_teams,
        destinations=updated_destinations,
    )
    return ApplicationResult(True, updated_teams=updated_teams, updated_destinations=updated_destinations)
