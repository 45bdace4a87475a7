"""ESP technical upgrade catalog."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TechUpgrade:
    """A purchasable ESP infrastructure upgrade.

    Attributes:
        dependencies: Upgrade ids that must be owned before purchase
        mandatory_from: Round from which the upgrade is penalized if missing
    """

    id: str
    name: str
    description: str
    cost: int
    category: str
    dependencies: tuple[str, ...] = ()
    mandatory_from: int | None = None


TECH_UPGRADES: tuple[TechUpgrade, ...] = (
    # Authentication
    TechUpgrade(
        id="spf",
        name="SPF Authentication",
        description="Sender Policy Framework - Validates sending IP addresses",
        cost=100,
        category="authentication",
    ),
    TechUpgrade(
        id="dkim",
        name="DKIM Signature",
        description="DomainKeys Identified Mail - Cryptographic email authentication",
        cost=150,
        category="authentication",
        dependencies=("spf",),
    ),
    TechUpgrade(
        id="dmarc",
        name="DMARC",
        description="Domain-based Message Authentication - Policy enforcement",
        cost=200,
        category="authentication",
        dependencies=("spf", "dkim"),
        mandatory_from=3,
    ),
    # Content
    TechUpgrade(
        id="content-filtering",
        name="Content Filtering",
        description="Scans outgoing campaigns and reduces complaint rates by 30%",
        cost=120,
        category="security",
    ),
    # Security
    TechUpgrade(
        id="tls-encryption",
        name="TLS Encryption",
        description="Transport Layer Security for email transmission",
        cost=120,
        category="security",
    ),
    TechUpgrade(
        id="anti-spam-filter",
        name="Anti-Spam Filter",
        description="Advanced spam detection and filtering",
        cost=180,
        category="security",
    ),
    # Infrastructure
    TechUpgrade(
        id="dedicated-ip",
        name="Dedicated IP",
        description="Exclusive IP address for sending",
        cost=250,
        category="infrastructure",
    ),
    TechUpgrade(
        id="cdn",
        name="Content Delivery Network",
        description="Faster email asset delivery",
        cost=150,
        category="infrastructure",
    ),
    # Monitoring
    TechUpgrade(
        id="analytics-dashboard",
        name="Analytics Dashboard",
        description="Real-time email performance metrics",
        cost=100,
        category="monitoring",
    ),
    TechUpgrade(
        id="reputation-monitoring",
        name="Reputation Monitoring",
        description="Track sender reputation across destinations",
        cost=130,
        category="monitoring",
    ),
)
