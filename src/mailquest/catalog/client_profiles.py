"""Client marketplace profiles.

Each ESP team gets 13 clients generated from these profiles with a ±10%
variance (see mailquest.clients.generator).
"""

from __future__ import annotations

from dataclasses import dataclass

from mailquest.models.session import ClientRisk, ClientType


@dataclass(frozen=True)
class ClientProfile:
    """Baseline values for one client type.

    Attributes:
        base_spam_rate: Complaint rate in percent
        available_from_round: Round in which this type can first be acquired
        count: Clients of this type per team
        required_tech: Tech upgrade ids required to acquire
        required_reputation: Weighted overall reputation required to acquire
    """

    type: ClientType
    base_cost: int
    base_revenue: int
    base_volume: int
    risk: ClientRisk
    base_spam_rate: float
    available_from_round: int
    count: int
    description: str
    required_tech: tuple[str, ...] = ()
    required_reputation: int | None = None


CLIENT_PROFILES: tuple[ClientProfile, ...] = (
    ClientProfile(
        type=ClientType.PREMIUM_BRAND,
        base_cost=300,
        base_revenue=350,
        base_volume=30000,
        risk=ClientRisk.LOW,
        base_spam_rate=0.5,
        available_from_round=3,
        count=2,
        description=(
            "Established brand with engaged subscriber base. Excellent reputation, "
            "low complaint rates. Requires full authentication stack."
        ),
        required_tech=("spf", "dkim", "dmarc"),
        required_reputation=85,
    ),
    ClientProfile(
        type=ClientType.GROWING_STARTUP,
        base_cost=150,
        base_revenue=180,
        base_volume=35000,
        risk=ClientRisk.MEDIUM,
        base_spam_rate=1.2,
        available_from_round=1,
        count=3,
        description="Fast-growing SaaS company with expanding list. Good engagement but occasional complaints.",
    ),
    ClientProfile(
        type=ClientType.RE_ENGAGEMENT,
        base_cost=100,
        base_revenue=120,
        base_volume=50000,
        risk=ClientRisk.HIGH,
        base_spam_rate=2.5,
        available_from_round=1,
        count=3,
        description="Re-activation campaign targeting inactive subscribers. High volume, significant reputation risk.",
    ),
    ClientProfile(
        type=ClientType.AGGRESSIVE_MARKETER,
        base_cost=200,
        base_revenue=250,
        base_volume=60000,
        risk=ClientRisk.HIGH,
        base_spam_rate=3.0,
        available_from_round=2,
        count=2,
        description="High-volume email marketer with purchased lists. High revenue but significant reputation risk.",
    ),
    ClientProfile(
        type=ClientType.EVENT_SEASONAL,
        base_cost=120,
        base_revenue=150,
        base_volume=40000,
        risk=ClientRisk.MEDIUM,
        base_spam_rate=1.5,
        available_from_round=1,
        count=3,
        description="Seasonal campaign with time-sensitive promotions. Moderate risk with concentrated traffic.",
    ),
)

CLIENT_NAMES: tuple[str, ...] = (
    "Tech Innovators",
    "Luxury Corp",
    "Green Energy Co",
    "Fashion Forward",
    "Travel Adventures",
    "Food Delights",
    "Fitness First",
    "Auto Express",
    "Home & Garden",
    "Education Hub",
    "Finance Pro",
    "Health Plus",
    "Entertainment Now",
)
