"""Destination tool catalog.

Tools are priced per kingdom; a price of None means the tool is unavailable
for that kingdom.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DestinationTool:
    """A purchasable destination filtering tool.

    Attributes:
        pricing: Kingdom -> cost, None when unavailable
        unavailable_reason: Kingdom -> explanation for unavailable tools
        requires: Tool ids that must be owned first
        permanent: False for tools that must be repurchased each round
        authentication_level: Auth validator level granted (1-3)
        spam_detection_boost: Percentage points added to spam blocking
        false_positive_impact: Percentage points added to false positives
        trap_multiplier: Spam trap risk multiplier while deployed
    """

    id: str
    name: str
    category: str
    description: str
    pricing: dict[str, int | None] = field(default_factory=dict)
    unavailable_reason: dict[str, str] = field(default_factory=dict)
    requires: tuple[str, ...] = ()
    permanent: bool = True
    authentication_level: int | None = None
    spam_detection_boost: int = 0
    false_positive_impact: int = 0
    trap_multiplier: float | None = None

    def price_for(self, kingdom: str) -> int | None:
        return self.pricing.get(kingdom)

    def available_for(self, kingdom: str) -> bool:
        return self.pricing.get(kingdom) is not None


SPAM_TRAP_NETWORK = "spam_trap_network"

DESTINATION_TOOLS: tuple[DestinationTool, ...] = (
    DestinationTool(
        id="content_analysis_filter",
        name="Content Analysis Filter",
        category="Content Analysis",
        description="Analyzes message content for spam patterns",
        pricing={"Gmail": 300, "Outlook": 240, "Yahoo": 160},
        spam_detection_boost=15,
        false_positive_impact=-2,
    ),
    DestinationTool(
        id="auth_validator_l1",
        name="Authentication Validator - Level 1 (SPF)",
        category="Authentication",
        description="Validates SPF authentication records, requires ESPs to implement SPF",
        pricing={"Gmail": 50, "Outlook": 50, "Yahoo": 50},
        authentication_level=1,
        spam_detection_boost=5,
    ),
    DestinationTool(
        id="auth_validator_l2",
        name="Authentication Validator - Level 2 (DKIM)",
        category="Authentication",
        description="Validates DKIM signatures, requires ESPs to implement DKIM",
        pricing={"Gmail": 50, "Outlook": 50, "Yahoo": 50},
        requires=("auth_validator_l1",),
        authentication_level=2,
        spam_detection_boost=8,
    ),
    DestinationTool(
        id="auth_validator_l3",
        name="Authentication Validator - Level 3 (DMARC)",
        category="Authentication",
        description="Validates DMARC policy, requires ESPs to implement full authentication stack",
        pricing={"Gmail": 50, "Outlook": 50, "Yahoo": 50},
        requires=("auth_validator_l1", "auth_validator_l2"),
        authentication_level=3,
        spam_detection_boost=12,
    ),
    DestinationTool(
        id="ml_system",
        name="Machine Learning System",
        category="Intelligence",
        description="Advanced AI detection of spam campaigns",
        pricing={"Gmail": 500, "Outlook": 400, "Yahoo": None},
        unavailable_reason={"Yahoo": "Insufficient computational resources"},
        spam_detection_boost=25,
        false_positive_impact=-3,
    ),
    DestinationTool(
        id=SPAM_TRAP_NETWORK,
        name="Spam Trap Network",
        category="Tactical",
        description=(
            "Deploy network of spam traps for single round. Triples spam trap hit probability. "
            "Can announce deployment as deterrent or keep secret for surprise."
        ),
        pricing={"Gmail": 250, "Outlook": 200, "Yahoo": 150},
        permanent=False,
        trap_multiplier=3,
    ),
    DestinationTool(
        id="volume_throttling",
        name="Volume Throttling",
        category="Infrastructure",
        description="Rate-limits sudden volume spikes from any single ESP",
        pricing={"Gmail": 200, "Outlook": 150, "Yahoo": 100},
        spam_detection_boost=5,
        false_positive_impact=-1,
    ),
)
