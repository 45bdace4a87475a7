"""ESP resolution calculators.

Each stage of the round pipeline is a pure function of the session snapshot
and the outputs of earlier stages:

    volume -> delivery -> revenue -> complaints -> spam traps -> reputation

Reputation is computed last because its complaint and spam trap penalties
depend on the complaint and spam trap stages. No function here mutates the
session.

Units:
- Delivery rates are fractions in [0, 1].
- Complaint (spam) rates are percentages, 1.2 means 1.2%.
- Spam trap risks are per-destination probabilities.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from mailquest.models.modifiers import combined_multiplier
from mailquest.models.session import (
    Client,
    ClientState,
    Destination,
    ESPTeam,
    FilteringLevel,
    clamp,
    clamp_reputation,
)
from mailquest.parameters import (
    AUTH_DELIVERY_BONUS,
    AUTH_REPUTATION_BONUS,
    COMPLAINT_PENALTY_THRESHOLDS,
    CONTENT_FILTERING_COMPLAINT_REDUCTION,
    DMARC_MANDATORY_FROM_ROUND,
    DMARC_MISSING_PENALTY,
    ESP_STARTING_REPUTATION,
    FILTERING_IMPACT,
    KINGDOM_WEIGHTS,
    REPUTATION_ZONES,
    RISK_REPUTATION_IMPACT,
    SPAM_TRAP_BASE_RISK,
    SPAM_TRAP_NETWORK_MULTIPLIER,
    SPAM_TRAP_REPUTATION_PENALTY,
    WARMUP_REPUTATION_BONUS,
    WARMUP_SOURCE,
)

CONTENT_FILTERING_TECH = "content-filtering"

# =============================================================================
# Result types
# =============================================================================


@dataclass(frozen=True)
class ClientVolume:
    client_id: str
    base_volume: int
    multiplier: float
    adjusted_volume: int


@dataclass(frozen=True)
class VolumeResult:
    """Total and per-destination volume for one ESP."""

    total_volume: int
    per_destination: dict[str, int]
    clients: tuple[ClientVolume, ...] = ()


@dataclass(frozen=True)
class DestinationDelivery:
    zone: str
    base_rate: float
    auth_bonus: float
    filtering_penalty: float
    dmarc_penalty_applied: bool
    final_rate: float


@dataclass(frozen=True)
class DeliveryResult:
    """Delivery per destination plus the volume-weighted aggregate.

    Attributes:
        delivery_rate: Volume-weighted mean of per-destination rates
        zone: Zone of the destination carrying the most volume
    """

    per_destination: dict[str, DestinationDelivery]
    delivery_rate: float
    zone: str


@dataclass(frozen=True)
class RevenueResult:
    base_revenue: int
    actual_revenue: int


@dataclass(frozen=True)
class ClientComplaint:
    client_id: str
    spam_rate: float
    multiplier: float
    adjusted_rate: float
    volume: int


@dataclass(frozen=True)
class ComplaintResult:
    """Team complaint rate, in percent.

    Attributes:
        base_rate: Volume-weighted rate before content filtering
        adjusted_rate: Rate after content filtering (used downstream)
    """

    base_rate: float
    adjusted_rate: float
    content_filtering_applied: bool
    clients: tuple[ClientComplaint, ...] = ()


@dataclass(frozen=True)
class ClientSpamTrap:
    client_id: str
    base_risk: float
    adjusted_risk: float
    risk_per_destination: dict[str, float]
    hit_destinations: tuple[str, ...]


@dataclass(frozen=True)
class SpamTrapResult:
    clients: tuple[ClientSpamTrap, ...]
    hit_destinations: tuple[str, ...]

    @property
    def trap_hit(self) -> bool:
        return bool(self.hit_destinations)


@dataclass(frozen=True)
class ReputationChange:
    """Per-destination reputation breakdown.

    total_change is the unrounded sum; new_reputation is rounded then
    clamped.
    """

    tech_bonus: float
    client_impact: float
    warmup_bonus: float
    complaint_penalty: float
    spam_trap_penalty: float
    total_change: float
    current_reputation: float
    new_reputation: int


@dataclass(frozen=True)
class ReputationResult:
    per_destination: dict[str, ReputationChange]
    volume_weighted_client_impact: float
    complaint_label: str | None = None


# =============================================================================
# Volume
# =============================================================================


def split_by_market_share(total: int, destinations: list[str]) -> dict[str, int]:
    """Split volume across destinations by kingdom market share.

    Shares are renormalized over the destinations present; unknown
    kingdoms split evenly when no known kingdom is present. The last
    destination absorbs rounding so the parts sum to the total.
    """
    if not destinations:
        return {}
    weights = {name: KINGDOM_WEIGHTS.get(name, 0.0) for name in destinations}
    total_weight = sum(weights.values())
    if total_weight == 0:
        weights = {name: 1.0 for name in destinations}
        total_weight = float(len(destinations))

    split: dict[str, int] = {}
    assigned = 0
    for name in destinations[:-1]:
        split[name] = round(total * weights[name] / total_weight)
        assigned += split[name]
    split[destinations[-1]] = total - assigned
    return split


def calculate_volume(
    records: list[tuple[Client, ClientState]],
    destinations: list[str],
    current_round: int,
) -> VolumeResult:
    """Sum each active client's volume times its applicable volume modifiers."""
    clients = []
    for client, state in records:
        multiplier = combined_multiplier(state.volume_modifiers, current_round, state.first_active_round)
        clients.append(ClientVolume(client.id, client.volume, multiplier, round(client.volume * multiplier)))

    total = sum(c.adjusted_volume for c in clients)
    return VolumeResult(
        total_volume=total,
        per_destination=split_by_market_share(total, destinations),
        clients=tuple(clients),
    )


# =============================================================================
# Delivery
# =============================================================================


def reputation_zone(reputation: float) -> tuple[str, float]:
    """(zone name, base delivery rate) for a reputation value."""
    for zone, lower_bound, rate in REPUTATION_ZONES:
        if reputation >= lower_bound:
            return zone, rate
    zone, _, rate = REPUTATION_ZONES[-1]
    return zone, rate


def authentication_delivery_bonus(owned: list[str]) -> float:
    return sum(bonus for tech, bonus in AUTH_DELIVERY_BONUS.items() if tech in owned)


def calculate_destination_delivery(
    reputation: float,
    owned_tech: list[str],
    filtering_level: FilteringLevel,
    current_round: int,
) -> DestinationDelivery:
    zone, base_rate = reputation_zone(reputation)
    auth_bonus = authentication_delivery_bonus(owned_tech)
    filtering_penalty = FILTERING_IMPACT[filtering_level.value][1] / 100

    rate = base_rate + auth_bonus - filtering_penalty
    dmarc_penalty = current_round >= DMARC_MANDATORY_FROM_ROUND and "dmarc" not in owned_tech
    if dmarc_penalty:
        rate *= DMARC_MISSING_PENALTY

    return DestinationDelivery(
        zone=zone,
        base_rate=base_rate,
        auth_bonus=auth_bonus,
        filtering_penalty=filtering_penalty,
        dmarc_penalty_applied=dmarc_penalty,
        final_rate=clamp(rate, 0.0, 1.0),
    )


def calculate_delivery(
    team: ESPTeam,
    destinations: list[Destination],
    volume: VolumeResult,
    current_round: int,
) -> DeliveryResult:
    per_destination = {
        destination.name: calculate_destination_delivery(
            team.reputation.get(destination.name, ESP_STARTING_REPUTATION),
            team.owned_tech_upgrades,
            destination.filtering_level_for(team.name),
            current_round,
        )
        for destination in destinations
    }
    if not per_destination:
        zone, rate = reputation_zone(team.mean_reputation())
        return DeliveryResult({}, rate, zone)

    if volume.total_volume > 0:
        rate = sum(
            d.final_rate * volume.per_destination.get(name, 0) for name, d in per_destination.items()
        ) / volume.total_volume
        dominant = max(per_destination, key=lambda name: volume.per_destination.get(name, 0))
    else:
        rate = sum(d.final_rate for d in per_destination.values()) / len(per_destination)
        dominant = next(iter(per_destination))

    return DeliveryResult(per_destination, rate, per_destination[dominant].zone)


# =============================================================================
# Revenue
# =============================================================================


def calculate_revenue(records: list[tuple[Client, ClientState]], current_round: int) -> RevenueResult:
    """Client revenue scaled by volume modifiers. Delivery does not reduce it."""
    base = sum(client.revenue for client, _ in records)
    actual = sum(
        client.revenue * combined_multiplier(state.volume_modifiers, current_round, state.first_active_round)
        for client, state in records
    )
    return RevenueResult(base_revenue=base, actual_revenue=round(actual))


# =============================================================================
# Complaints
# =============================================================================


def calculate_complaints(
    records: list[tuple[Client, ClientState]],
    volume: VolumeResult,
    owned_tech: list[str],
    current_round: int,
) -> ComplaintResult:
    volumes = {c.client_id: c.adjusted_volume for c in volume.clients}
    clients = []
    weighted = 0.0
    for client, state in records:
        multiplier = combined_multiplier(state.spam_trap_modifiers, current_round, state.first_active_round)
        adjusted = client.spam_rate * multiplier
        client_volume = volumes.get(client.id, 0)
        clients.append(ClientComplaint(client.id, client.spam_rate, multiplier, adjusted, client_volume))
        weighted += adjusted * client_volume

    base_rate = weighted / volume.total_volume if volume.total_volume > 0 else 0.0
    filtering = CONTENT_FILTERING_TECH in owned_tech
    adjusted_rate = base_rate * (1 - CONTENT_FILTERING_COMPLAINT_REDUCTION) if filtering else base_rate
    return ComplaintResult(base_rate, adjusted_rate, filtering, tuple(clients))


def complaint_penalty(complaint_rate: float) -> tuple[int, str | None]:
    """Reputation penalty for a team complaint rate, most severe tier first."""
    for threshold, penalty, label in COMPLAINT_PENALTY_THRESHOLDS:
        if complaint_rate >= threshold:
            return penalty, label
    return 0, None


# =============================================================================
# Spam traps
# =============================================================================


def seeded_roll(*parts: str | int) -> float:
    """Deterministic roll in [0, 1) derived from the seed parts."""
    seed = "-".join(str(p) for p in parts).encode("utf-8")
    digest = hashlib.sha256(seed).digest()
    return int.from_bytes(digest[:8], "big") / 2**64


def calculate_spam_traps(
    room_code: str,
    team: ESPTeam,
    records: list[tuple[Client, ClientState]],
    destinations: list[Destination],
    current_round: int,
) -> SpamTrapResult:
    """Roll each client once per destination against its trap risk."""
    clients = []
    hit_destinations: list[str] = []
    for client, state in records:
        base_risk = SPAM_TRAP_BASE_RISK.get(client.type.value, 0.0)
        adjusted = base_risk * combined_multiplier(
            state.spam_trap_modifiers, current_round, state.first_active_round
        )
        risks = {}
        hits = []
        for destination in destinations:
            network_active = (
                destination.spam_trap_active is not None and destination.spam_trap_active.round == current_round
            )
            risk = adjusted * (SPAM_TRAP_NETWORK_MULTIPLIER if network_active else 1)
            risks[destination.name] = risk
            if seeded_roll(room_code, current_round, team.name, client.id, destination.name) < risk:
                hits.append(destination.name)
                if destination.name not in hit_destinations:
                    hit_destinations.append(destination.name)
        clients.append(ClientSpamTrap(client.id, base_risk, adjusted, risks, tuple(hits)))
    return SpamTrapResult(tuple(clients), tuple(hit_destinations))


# =============================================================================
# Reputation
# =============================================================================


def authentication_reputation_bonus(owned: list[str]) -> int:
    return sum(bonus for tech, bonus in AUTH_REPUTATION_BONUS.items() if tech in owned)


def calculate_reputation(
    team: ESPTeam,
    records: list[tuple[Client, ClientState]],
    destinations: list[str],
    volume: VolumeResult,
    complaints: ComplaintResult,
    spam_traps: SpamTrapResult,
    current_round: int,
) -> ReputationResult:
    """Per-destination reputation change for one round.

    total = tech bonus + client risk impact + warm-up bonus
            + complaint penalty + spam trap penalty
    """
    tech_bonus = authentication_reputation_bonus(team.owned_tech_upgrades)

    volumes = {c.client_id: c.adjusted_volume for c in volume.clients}
    client_impact = 0.0
    warmup_bonus = 0.0
    if volume.total_volume > 0:
        client_impact = (
            sum(RISK_REPUTATION_IMPACT[client.risk.value] * volumes.get(client.id, 0) for client, _ in records)
            / volume.total_volume
        )
        warmed = sum(
            volumes.get(client.id, 0)
            for client, state in records
            if state.first_active_round == current_round
            and any(
                m.source == WARMUP_SOURCE and m.applies(current_round, state.first_active_round)
                for m in state.volume_modifiers
            )
        )
        warmup_bonus = WARMUP_REPUTATION_BONUS * warmed / volume.total_volume

    penalty, label = complaint_penalty(complaints.adjusted_rate)

    per_destination = {}
    for name in destinations:
        trap_penalty = SPAM_TRAP_REPUTATION_PENALTY if name in spam_traps.hit_destinations else 0
        total = tech_bonus + client_impact + warmup_bonus + penalty + trap_penalty
        current = team.reputation.get(name, ESP_STARTING_REPUTATION)
        per_destination[name] = ReputationChange(
            tech_bonus=tech_bonus,
            client_impact=client_impact,
            warmup_bonus=warmup_bonus,
            complaint_penalty=penalty,
            spam_trap_penalty=trap_penalty,
            total_change=total,
            current_reputation=current,
            new_reputation=clamp_reputation(current + total),
        )

    return ReputationResult(per_destination, client_impact, complaint_label=label)
