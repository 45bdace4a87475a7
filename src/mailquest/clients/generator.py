"""Client marketplace stock generation.

Every ESP team gets its own independent stock built from the same profiles
and names, each numeric value varied by up to ±10%.
"""

from __future__ import annotations

import random
from typing import Sequence

from mailquest.catalog.client_profiles import CLIENT_NAMES, CLIENT_PROFILES, ClientProfile
from mailquest.models.session import Client, ClientRequirements

VARIANCE = 0.1


def apply_variance(base_value: float, rng: random.Random) -> float:
    """Scale by a uniform factor in [0.9, 1.1].

    Integers of 10 or more stay integers; smaller or fractional values
    (spam rates) keep two decimals.
    """
    result = base_value * rng.uniform(1 - VARIANCE, 1 + VARIANCE)
    if float(base_value).is_integer() and base_value >= 10:
        return round(result)
    return round(result, 2)


def generate_client_stock(
    team_name: str,
    rng: random.Random,
    profiles: Sequence[ClientProfile] = CLIENT_PROFILES,
    names: Sequence[str] = CLIENT_NAMES,
) -> list[Client]:
    """Generate the marketplace stock for one team.

    Ids are ``client-{team}-{nnn}`` numbered across the whole stock.
    """
    clients: list[Client] = []
    for profile in profiles:
        for _ in range(profile.count):
            index = len(clients)
            requirements = None
            if profile.required_tech or profile.required_reputation is not None:
                requirements = ClientRequirements(
                    tech=list(profile.required_tech),
                    reputation=profile.required_reputation,
                )
            clients.append(
                Client(
                    id=f"client-{team_name}-{index:03d}",
                    name=names[index % len(names)],
                    type=profile.type,
                    cost=int(apply_variance(profile.base_cost, rng)),
                    revenue=int(apply_variance(profile.base_revenue, rng)),
                    volume=int(apply_variance(profile.base_volume, rng)),
                    risk=profile.risk,
                    spam_rate=apply_variance(profile.base_spam_rate, rng),
                    available_from_round=profile.available_from_round,
                    requirements=requirements,
                )
            )
    return clients
