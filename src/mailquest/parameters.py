"""Game balance parameters for Mailquest.

This module is the SINGLE SOURCE OF TRUTH for all tunable game constants.

Parameter Categories:
- Game Structure: rounds, starting resources
- Reputation & Delivery: zones, authentication bonuses, penalties
- Client Risk: reputation impact, complaint thresholds, spam traps
- Onboarding: warm-up and list hygiene
- Investigations: destination votes against an ESP
- Destination Satisfaction & Revenue
- Final Scoring

Usage:
    from mailquest.parameters import MAX_ROUNDS, DMARC_MISSING_PENALTY

Catalog data (which upgrades, tools, clients and incidents exist) lives in
mailquest.catalog; this module holds the numbers the engine computes with.
"""

# =============================================================================
# GAME STRUCTURE
# =============================================================================

MAX_ROUNDS = 4
"""Number of planning/resolution cycles in a game."""

ESP_STARTING_CREDITS = 1000
"""Credits allocated to every ESP team when resources are allocated."""

ESP_STARTING_REPUTATION = 70
"""Reputation at every destination when resources are allocated.

Also the value assumed when a per-destination reputation entry is missing
during resolution application.
"""

DESTINATION_STARTING_BUDGETS: dict[str, int] = {
    "Gmail": 500,
    "Outlook": 350,
    "Yahoo": 200,
}
"""Starting budget per destination kingdom."""

KINGDOM_WEIGHTS: dict[str, float] = {
    "Gmail": 0.5,
    "Outlook": 0.3,
    "Yahoo": 0.2,
}
"""Market share of each destination kingdom.

Used for the weighted overall reputation (client requirements, final score)
and to split an ESP's volume across destinations.
"""

# =============================================================================
# REPUTATION & DELIVERY
# =============================================================================

REPUTATION_MIN = 0
REPUTATION_MAX = 100

REPUTATION_ZONES: tuple[tuple[str, int, float], ...] = (
    ("excellent", 90, 0.95),
    ("good", 70, 0.85),
    ("warning", 50, 0.70),
    ("poor", 30, 0.50),
    ("blacklist", 0, 0.05),
)
"""(zone, lower bound, base delivery rate), highest zone first.

A reputation belongs to the first zone whose lower bound it reaches.
"""

AUTH_DELIVERY_BONUS: dict[str, float] = {
    "spf": 0.05,
    "dkim": 0.08,
    "dmarc": 0.12,
}
"""Cumulative delivery-rate bonus per owned authentication upgrade."""

AUTH_REPUTATION_BONUS: dict[str, int] = {
    "spf": 2,
    "dkim": 3,
    "dmarc": 5,
}
"""Cumulative per-round reputation bonus per owned authentication upgrade."""

DMARC_MANDATORY_FROM_ROUND = 3
"""First round in which missing DMARC is penalized."""

DMARC_MISSING_PENALTY = 0.2
"""Delivery multiplier for senders without DMARC once it is mandatory.

0.2 means 80% of mail is rejected.
"""

CONTENT_FILTERING_COMPLAINT_REDUCTION = 0.3
"""Fractional reduction of the team complaint rate with content filtering."""

FILTERING_IMPACT: dict[str, tuple[int, int]] = {
    "permissive": (0, 0),
    "moderate": (35, 3),
    "strict": (65, 8),
    "maximum": (85, 15),
}
"""Filtering level -> (spam reduction %, false positives %)."""

# =============================================================================
# CLIENT RISK
# =============================================================================

RISK_REPUTATION_IMPACT: dict[str, int] = {
    "Low": 2,
    "Medium": -1,
    "High": -4,
}
"""Per-round reputation impact of a client by risk level, volume-weighted."""

COMPLAINT_PENALTY_THRESHOLDS: tuple[tuple[float, int, str], ...] = (
    (4.5, -3, "Critical complaint rate"),
    (4.0, -2, "High complaint rate"),
    (3.0, -1, "Elevated complaint rate"),
)
"""(complaint rate %, reputation penalty, label), most severe first."""

SPAM_TRAP_BASE_RISK: dict[str, float] = {
    "premium_brand": 0.005,
    "growing_startup": 0.015,
    "re_engagement": 0.03,
    "aggressive_marketer": 0.05,
    "event_seasonal": 0.025,
}
"""Per-round probability that a client hits a spam trap at one destination."""

SPAM_TRAP_NETWORK_MULTIPLIER = 3
"""Risk multiplier at a destination running a spam trap network."""

SPAM_TRAP_REPUTATION_PENALTY = -5
"""Reputation penalty per trap hit; also the cap per destination per round."""

# =============================================================================
# ONBOARDING
# =============================================================================

WARMUP_COST = 150
LIST_HYGIENE_COST = 80

WARMUP_VOLUME_MULTIPLIER = 0.5
"""Volume multiplier applied in a warmed client's first active round."""

WARMUP_REPUTATION_BONUS = 2
"""Reputation bonus for warmed volume, weighted by its share of total volume."""

LIST_HYGIENE_VOLUME_MULTIPLIER: dict[str, float] = {
    "Low": 0.95,
    "Medium": 0.90,
    "High": 0.85,
}
"""Permanent volume reduction from removing bad addresses, by client risk."""

LIST_HYGIENE_SPAM_TRAP_MULTIPLIER = 0.6
"""Permanent spam-trap risk multiplier from list hygiene."""

LIST_HYGIENE_SOURCE = "list_hygiene"
WARMUP_SOURCE = "warmup"

# =============================================================================
# INVESTIGATIONS
# =============================================================================

INVESTIGATION_COST = 50
"""Budget a destination needs to vote, charged only if the investigation runs."""

INVESTIGATION_THRESHOLD = 2 / 3
"""Share of destinations with players that must vote for the same ESP."""

# =============================================================================
# DESTINATION SATISFACTION & REVENUE
# =============================================================================

BASE_SATISFACTION = 75

SATISFACTION_WEIGHTS: dict[str, int] = {
    "spam_blocked": 300,
    "spam_through": 400,
    "false_positives": 100,
}

MAX_SPAM_BLOCKED = 0.95
MIN_FALSE_POSITIVES = 0.005

DESTINATION_BASE_REVENUE: dict[str, int] = {
    "Gmail": 300,
    "Outlook": 200,
    "Yahoo": 150,
}

VOLUME_BONUS_RATE = 20
"""Credits earned per VOLUME_BONUS_UNIT emails processed."""

VOLUME_BONUS_UNIT = 100_000

SATISFACTION_MULTIPLIER_TIERS: tuple[tuple[int, float, str], ...] = (
    (90, 1.5, "Excellent"),
    (80, 1.3, "Very Good"),
    (75, 1.1, "Good"),
    (70, 0.95, "Acceptable"),
    (60, 0.8, "Warning"),
    (50, 0.6, "Poor"),
    (0, 0.3, "Crisis"),
)
"""(lower bound, revenue multiplier, label), highest tier first."""

# =============================================================================
# FINAL SCORING
# =============================================================================

SCORE_WEIGHT_REPUTATION = 50
SCORE_WEIGHT_REVENUE = 35
SCORE_WEIGHT_TECHNICAL = 15

MIN_REPUTATION_THRESHOLD = 60
"""An ESP below this reputation at any kingdom cannot win."""

MAX_TECH_INVESTMENT = 1200
"""Tech spend that earns the full technical score."""
