"""End-of-game ESP scoring.

Score components (100 points total):
- Reputation: kingdom-weighted reputation / 100 x 50
- Revenue: total revenue over all rounds / best ESP's total x 35
- Technical: min(tech spend / 1200, 1) x 15

An ESP below 60 reputation at any kingdom is disqualified. The winner is the
highest-scoring qualified ESP, ties broken by weighted reputation; ESPs still
tied after that share the win.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from mailquest.catalog import Catalog
from mailquest.models.session import ESPTeam, GameSession, clamp
from mailquest.parameters import (
    MAX_TECH_INVESTMENT,
    MIN_REPUTATION_THRESHOLD,
    SCORE_WEIGHT_REPUTATION,
    SCORE_WEIGHT_REVENUE,
    SCORE_WEIGHT_TECHNICAL,
)
from mailquest.validation.clients import weighted_reputation


@dataclass(frozen=True)
class ScoreBreakdown:
    reputation_score: float
    revenue_score: float
    technical_score: float
    weighted_reputation: float


@dataclass(frozen=True)
class ESPFinalResult:
    esp_name: str
    rank: int
    total_score: float
    qualified: bool
    disqualification_reason: Optional[str]
    failing_kingdoms: list[str]
    breakdown: ScoreBreakdown
    reputation_by_kingdom: dict[str, int]
    total_revenue: int
    total_tech_investment: int


@dataclass(frozen=True)
class Winner:
    esp_names: list[str]
    total_score: float
    tie_breaker: bool


@dataclass(frozen=True)
class FinalScores:
    esp_results: list[ESPFinalResult] = field(default_factory=list)
    winner: Optional[Winner] = None

    @property
    def all_disqualified(self) -> bool:
        return self.winner is None


def _round2(value: float) -> float:
    return round(value * 100) / 100


def reputation_score(reputation: dict[str, float], kingdoms: list[str]) -> tuple[float, float]:
    """(weighted reputation, reputation score)."""
    clamped = {name: clamp(reputation.get(name, 0), 0, 100) for name in kingdoms}
    weighted = _round2(weighted_reputation(clamped, kingdoms))
    return weighted, _round2(weighted / 100 * SCORE_WEIGHT_REPUTATION)


def revenue_scores(revenues: dict[str, int]) -> dict[str, float]:
    best = max(list(revenues.values()) + [0])
    if best <= 0:
        return {name: 0.0 for name in revenues}
    return {name: _round2(revenue / best * SCORE_WEIGHT_REVENUE) for name, revenue in revenues.items()}


def technical_score(total_investment: int) -> float:
    return _round2(min(total_investment / MAX_TECH_INVESTMENT, 1.0) * SCORE_WEIGHT_TECHNICAL)


def tech_investment(team: ESPTeam, catalog: Catalog) -> int:
    total = 0
    for tech_id in team.owned_tech_upgrades:
        upgrade = catalog.tech_upgrade(tech_id)
        if upgrade is not None:
            total += upgrade.cost
    return total


def total_revenue(session: GameSession, team_name: str) -> int:
    """Actual revenue summed over every archived round."""
    total = 0
    for entry in session.resolution_history:
        esp_result = entry.results.get("esp_results", {}).get(team_name)
        if esp_result:
            total += esp_result["revenue"]["actual_revenue"]
    return total


def check_qualification(reputation: dict[str, float], kingdoms: list[str]) -> tuple[bool, list[str]]:
    failing = [name for name in kingdoms if reputation.get(name, 0) < MIN_REPUTATION_THRESHOLD]
    return not failing, failing


def determine_winner(results: list[ESPFinalResult]) -> Optional[Winner]:
    qualified = sorted(
        (r for r in results if r.qualified),
        key=lambda r: (r.total_score, r.breakdown.weighted_reputation),
        reverse=True,
    )
    if not qualified:
        return None

    top = qualified[0]
    winners = [
        r.esp_name
        for r in qualified
        if r.total_score == top.total_score
        and r.breakdown.weighted_reputation == top.breakdown.weighted_reputation
    ]
    same_score = sum(1 for r in qualified if r.total_score == top.total_score)
    return Winner(winners, top.total_score, tie_breaker=same_score > 1 and len(winners) == 1)


def calculate_final_scores(session: GameSession, catalog: Catalog) -> FinalScores:
    kingdoms = session.destination_names()
    revenues = {team.name: total_revenue(session, team.name) for team in session.esp_teams}
    revenue_points = revenue_scores(revenues)

    unranked = []
    for team in session.esp_teams:
        weighted, rep_points = reputation_score(team.reputation, kingdoms)
        investment = tech_investment(team, catalog)
        tech_points = technical_score(investment)
        qualified, failing = check_qualification(team.reputation, kingdoms)
        unranked.append(
            ESPFinalResult(
                esp_name=team.name,
                rank=0,
                total_score=_round2(rep_points + revenue_points[team.name] + tech_points),
                qualified=qualified,
                disqualification_reason=(
                    None
                    if qualified
                    else f"Reputation below {MIN_REPUTATION_THRESHOLD} in: {', '.join(failing)}"
                ),
                failing_kingdoms=failing,
                breakdown=ScoreBreakdown(rep_points, revenue_points[team.name], tech_points, weighted),
                reputation_by_kingdom=dict(team.reputation),
                total_revenue=revenues[team.name],
                total_tech_investment=investment,
            )
        )

    ordered = sorted(
        unranked,
        key=lambda r: (r.qualified, r.total_score, r.breakdown.weighted_reputation),
        reverse=True,
    )
    ranked = [replace(r, rank=index) for index, r in enumerate(ordered, start=1)]
    return FinalScores(ranked, determine_winner(ranked))
