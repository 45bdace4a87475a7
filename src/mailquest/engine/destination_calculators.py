"""Destination-side resolution calculators: user satisfaction and revenue.

Satisfaction for one (destination, ESP) pair, with the complaint rate r as a
fraction, effective spam blocking b and false positive rate f:

    75 + r*b*300 - r*(1-b)*400 - (1-r)*f*100, clamped to [0, 100]

b is the filtering policy's spam reduction plus owned tool boosts, capped at
0.95; f is the policy's false positive rate plus tool impacts, floored at
0.005.
"""

from __future__ import annotations

from dataclasses import dataclass

from mailquest.catalog import Catalog
from mailquest.models.session import Destination, clamp
from mailquest.parameters import (
    BASE_SATISFACTION,
    DESTINATION_BASE_REVENUE,
    FILTERING_IMPACT,
    MAX_SPAM_BLOCKED,
    MIN_FALSE_POSITIVES,
    SATISFACTION_MULTIPLIER_TIERS,
    SATISFACTION_WEIGHTS,
    VOLUME_BONUS_RATE,
    VOLUME_BONUS_UNIT,
)


@dataclass(frozen=True)
class SatisfactionBreakdown:
    """Satisfaction a destination's users have with one ESP's mail."""

    esp_name: str
    volume: int
    complaint_rate: float
    spam_blocked: float
    false_positives: float
    satisfaction_gain: float
    spam_penalty: float
    false_positive_penalty: float
    satisfaction: float


@dataclass(frozen=True)
class DestinationRevenue:
    base_revenue: int
    volume_bonus: int
    satisfaction_multiplier: float
    tier: str
    total_revenue: int


def effective_filtering_rates(destination: Destination, esp_name: str, catalog: Catalog) -> tuple[float, float]:
    """(spam blocked, false positives) as fractions after tool modifiers."""
    spam_reduction, false_positives = FILTERING_IMPACT[destination.filtering_level_for(esp_name).value]
    blocked = spam_reduction / 100
    fp = false_positives / 100
    for tool_id in destination.owned_tools:
        tool = catalog.destination_tool(tool_id)
        if tool is None:
            continue
        blocked += tool.spam_detection_boost / 100
        fp += tool.false_positive_impact / 100
    return min(MAX_SPAM_BLOCKED, blocked), max(MIN_FALSE_POSITIVES, fp)


def calculate_esp_satisfaction(
    destination: Destination,
    esp_name: str,
    complaint_rate: float,
    volume: int,
    catalog: Catalog,
) -> SatisfactionBreakdown:
    """Satisfaction for one ESP at one destination.

    Args:
        complaint_rate: Team complaint rate in percent
        volume: ESP volume delivered to this destination
    """
    blocked, fp = effective_filtering_rates(destination, esp_name, catalog)
    spam_fraction = complaint_rate / 100

    gain = spam_fraction * blocked * SATISFACTION_WEIGHTS["spam_blocked"]
    spam_penalty = spam_fraction * (1 - blocked) * SATISFACTION_WEIGHTS["spam_through"]
    fp_penalty = (1 - spam_fraction) * fp * SATISFACTION_WEIGHTS["false_positives"]
    satisfaction = clamp(BASE_SATISFACTION + gain - spam_penalty - fp_penalty, 0, 100)

    return SatisfactionBreakdown(
        esp_name=esp_name,
        volume=volume,
        complaint_rate=complaint_rate,
        spam_blocked=blocked,
        false_positives=fp,
        satisfaction_gain=gain,
        spam_penalty=spam_penalty,
        false_positive_penalty=fp_penalty,
        satisfaction=satisfaction,
    )


def aggregate_satisfaction(breakdowns: list[SatisfactionBreakdown]) -> float:
    """Volume-weighted mean; the baseline when no mail arrived."""
    total_volume = sum(b.volume for b in breakdowns)
    if total_volume == 0:
        return float(BASE_SATISFACTION)
    return clamp(sum(b.satisfaction * b.volume for b in breakdowns) / total_volume, 0, 100)


def satisfaction_tier(satisfaction: float) -> tuple[float, str]:
    for lower_bound, multiplier, label in SATISFACTION_MULTIPLIER_TIERS:
        if satisfaction >= lower_bound:
            return multiplier, label
    _, multiplier, label = SATISFACTION_MULTIPLIER_TIERS[-1]
    return multiplier, label


def calculate_destination_revenue(kingdom: str, total_volume: int, satisfaction: float) -> DestinationRevenue:
    """(base + volume bonus) scaled by the satisfaction tier multiplier."""
    base = DESTINATION_BASE_REVENUE.get(kingdom, 0)
    volume_bonus = round(total_volume / VOLUME_BONUS_UNIT * VOLUME_BONUS_RATE)
    multiplier, tier = satisfaction_tier(satisfaction)
    return DestinationRevenue(
        base_revenue=base,
        volume_bonus=volume_bonus,
        satisfaction_multiplier=multiplier,
        tier=tier,
        total_revenue=round((base + volume_bonus) * multiplier),
    )
