"""Static catalog tables for Mailquest.

The Catalog object bundles every read-only lookup table the engine needs so
it can be injected once at startup and swapped in tests.

Usage:
    from mailquest.catalog import default_catalog

    catalog = default_catalog()
    catalog.tech_upgrade("dkim").dependencies  # ('spf',)
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mailquest.catalog.client_profiles import CLIENT_NAMES, CLIENT_PROFILES, ClientProfile
from mailquest.catalog.destination_tools import DESTINATION_TOOLS, SPAM_TRAP_NETWORK, DestinationTool
from mailquest.catalog.incidents import INCIDENT_CARD_DATA
from mailquest.catalog.tech_upgrades import TECH_UPGRADES, TechUpgrade
from mailquest.game_logger import GameLogger, LoggingGameLogger
from mailquest.models.incidents import IncidentCard, parse_incident_card
from mailquest.models.session import ClientType


@dataclass(frozen=True)
class Catalog:
    """Read-only configuration tables."""

    tech_upgrades: tuple[TechUpgrade, ...]
    destination_tools: tuple[DestinationTool, ...]
    client_profiles: tuple[ClientProfile, ...]
    incidents: tuple[IncidentCard, ...]
    client_names: tuple[str, ...] = field(default=CLIENT_NAMES)

    def tech_upgrade(self, upgrade_id: str) -> TechUpgrade | None:
        for upgrade in self.tech_upgrades:
            if upgrade.id == upgrade_id:
                return upgrade
        return None

    def destination_tool(self, tool_id: str) -> DestinationTool | None:
        for tool in self.destination_tools:
            if tool.id == tool_id:
                return tool
        return None

    def client_profile(self, client_type: ClientType) -> ClientProfile | None:
        for profile in self.client_profiles:
            if profile.type == client_type:
                return profile
        return None

    def incident(self, incident_id: str) -> IncidentCard | None:
        for card in self.incidents:
            if card.id == incident_id:
                return card
        return None

    def incidents_for_round(self, round_number: int) -> list[IncidentCard]:
        return [card for card in self.incidents if card.available_in(round_number)]

    def automatic_incidents_for_round(self, round_number: int) -> list[IncidentCard]:
        return [card for card in self.incidents_for_round(round_number) if card.automatic]


def default_catalog(logger: GameLogger | None = None) -> Catalog:
    """Build the catalog shipped with the game."""
    logger = logger or LoggingGameLogger()
    return Catalog(
        tech_upgrades=TECH_UPGRADES,
        destination_tools=DESTINATION_TOOLS,
        client_profiles=CLIENT_PROFILES,
        incidents=tuple(parse_incident_card(raw, logger) for raw in INCIDENT_CARD_DATA),
    )


__all__ = [
    "Catalog",
    "ClientProfile",
    "DestinationTool",
    "TechUpgrade",
    "CLIENT_NAMES",
    "CLIENT_PROFILES",
    "DESTINATION_TOOLS",
    "INCIDENT_CARD_DATA",
    "SPAM_TRAP_NETWORK",
    "TECH_UPGRADES",
    "default_catalog",
]
