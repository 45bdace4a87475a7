"""Game session models for Mailquest.

This module defines the pydantic models for the whole mutable game state.
A GameSession is the root aggregate; the engine mutates it in place and
persists it through mailquest.storage.

Clamping rules:
- Reputation values are clamped to [0, 100] on validation.
- Destination budgets are never negative.
- ESP credits are NOT clamped by the model: purchases may leave a team
  negative until lock-in validation rejects it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from mailquest.models.modifiers import Modifier
from mailquest.parameters import FILTERING_IMPACT, MAX_ROUNDS, REPUTATION_MAX, REPUTATION_MIN


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value to the specified range."""
    return max(min_val, min(max_val, value))


def clamp_reputation(value: float) -> int:
    """Round, then clamp a reputation value to [0, 100]."""
    return int(clamp(round(value), REPUTATION_MIN, REPUTATION_MAX))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Enums
# =============================================================================


class GamePhase(str, Enum):
    """Phases of the game state machine."""

    LOBBY = "lobby"
    RESOURCE_ALLOCATION = "resource_allocation"
    PLANNING = "planning"
    RESOLUTION = "resolution"
    CONSEQUENCES = "consequences"
    FINISHED = "finished"


class ClientStatus(str, Enum):
    """Per-team client status.

    SUSPENDED is terminal and only ever set by the engine.
    """

    ACTIVE = "Active"
    PAUSED = "Paused"
    SUSPENDED = "Suspended"


class ClientRisk(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ClientType(str, Enum):
    PREMIUM_BRAND = "premium_brand"
    GROWING_STARTUP = "growing_startup"
    RE_ENGAGEMENT = "re_engagement"
    AGGRESSIVE_MARKETER = "aggressive_marketer"
    EVENT_SEASONAL = "event_seasonal"


class FilteringLevel(str, Enum):
    PERMISSIVE = "permissive"
    MODERATE = "moderate"
    STRICT = "strict"
    MAXIMUM = "maximum"


# =============================================================================
# Clients
# =============================================================================


class ClientRequirements(BaseModel):
    """Acquisition requirements (Premium clients only)."""

    tech: list[str] = Field(default_factory=list)
    reputation: int | None = Field(default=None)


class Client(BaseModel):
    """A marketplace client an ESP team can acquire.

    Attributes:
        id: Unique within the team, e.g. ``client-Alpha-004``
        cost: One-off acquisition cost in credits
        revenue: Credits earned per round while active
        volume: Emails sent per round
        spam_rate: Complaint rate in percent (1.2 means 1.2%)
        available_from_round: First round the client can be acquired
    """

    id: str
    name: str
    type: ClientType
    cost: int = Field(ge=0)
    revenue: int = Field(ge=0)
    volume: int = Field(ge=0)
    risk: ClientRisk
    spam_rate: float = Field(ge=0.0)
    available_from_round: int = Field(default=1, ge=1)
    requirements: ClientRequirements | None = Field(default=None)


class ClientState(BaseModel):
    """Mutable per-(team, client) record.

    Attributes:
        status: Active, Paused or Suspended
        first_active_round: Round the client was first activated; None means
            never activated. Set once.
        volume_modifiers: Multipliers on the client's volume
        spam_trap_modifiers: Multipliers on the client's spam trap risk
    """

    status: ClientStatus = Field(default=ClientStatus.ACTIVE)
    first_active_round: int | None = Field(default=None)
    volume_modifiers: list[Modifier] = Field(default_factory=list)
    spam_trap_modifiers: list[Modifier] = Field(default_factory=list)

    def activate(self, current_round: int) -> bool:
        """Record the first active round if not already set.

        Returns:
            True if the round was recorded by this call.
        """
        if self.first_active_round is not None:
            return False
        self.first_active_round = current_round
        return True

    def has_modifier_from(self, source: str) -> bool:
        return any(m.source == source for m in self.volume_modifiers + self.spam_trap_modifiers)


class OnboardingDecision(BaseModel):
    """Pending onboarding options for a newly acquired client."""

    warmup: bool = Field(default=False)
    list_hygiene: bool = Field(default=False)


# =============================================================================
# Incidents carried in session state
# =============================================================================


class PendingChoice(BaseModel):
    """A team's outstanding decision on a choice incident."""

    incident_id: str
    choice_id: str
    confirmed: bool = Field(default=False)
    effects_applied: bool = Field(default=False)
    option_ids: list[str] = Field(default_factory=list)


class IncidentHistoryEntry(BaseModel):
    incident_id: str
    name: str
    category: str
    round_triggered: int
    timestamp: datetime = Field(default_factory=utcnow)


# =============================================================================
# Teams
# =============================================================================


class ESPTeam(BaseModel):
    """An Email Service Provider team.

    Attributes:
        name: Unique team name within the session
        players: Player ids; teams without players do not gate phases
        credits: Spendable credits (may be transiently negative)
        reputation: Destination name -> reputation in [0, 100]
        active_clients: Ids of acquired clients
        available_clients: Marketplace stock not yet acquired
        portfolio: Definitions of acquired clients, keyed by id
        client_states: Per-client mutable state, keyed by id
        owned_tech_upgrades: Purchased tech upgrade ids
        locked_in: Whether planning decisions are final for this round
        pending_incident_choices: Outstanding choice-incident decisions
        pending_onboarding: Onboarding options not yet paid for
        pending_auto_lock: Lock at the next planning phase entry
    """

    name: str
    players: list[str] = Field(default_factory=list)
    credits: int = Field(default=0)
    reputation: dict[str, int] = Field(default_factory=dict)
    active_clients: list[str] = Field(default_factory=list)
    available_clients: list[Client] = Field(default_factory=list)
    portfolio: dict[str, Client] = Field(default_factory=dict)
    client_states: dict[str, ClientState] = Field(default_factory=dict)
    owned_tech_upgrades: list[str] = Field(default_factory=list)
    locked_in: bool = Field(default=False)
    locked_in_at: datetime | None = Field(default=None)
    pending_incident_choices: list[PendingChoice] = Field(default_factory=list)
    pending_onboarding: dict[str, OnboardingDecision] = Field(default_factory=dict)
    pending_auto_lock: bool = Field(default=False)

    @field_validator("reputation", mode="before")
    @classmethod
    def clamp_reputation_values(cls, v: dict) -> dict:
        """Clamp every reputation value to [0, 100]."""
        return {dest: clamp_reputation(score) for dest, score in v.items()}

    def active_client_records(self) -> list[tuple[Client, ClientState]]:
        """Acquired clients whose status is Active, in acquisition order."""
        records = []
        for client_id in self.active_clients:
            client = self.portfolio.get(client_id)
            state = self.client_states.get(client_id)
            if client is not None and state is not None and state.status == ClientStatus.ACTIVE:
                records.append((client, state))
        return records

    def set_reputation(self, destination: str, value: float) -> int:
        clamped = clamp_reputation(value)
        self.reputation[destination] = clamped
        return clamped

    def mean_reputation(self) -> float:
        """Unweighted mean of per-destination reputation."""
        if not self.reputation:
            return 0.0
        return sum(self.reputation.values()) / len(self.reputation)

    def find_pending_choice(self, incident_id: str | None = None) -> PendingChoice | None:
        for choice in self.pending_incident_choices:
            if incident_id is None or choice.incident_id == incident_id:
                return choice
        return None


# =============================================================================
# Destinations
# =============================================================================


class FilteringPolicy(BaseModel):
    """A destination's filtering level for one ESP."""

    esp_name: str
    level: FilteringLevel = Field(default=FilteringLevel.PERMISSIVE)

    @property
    def spam_reduction(self) -> int:
        return FILTERING_IMPACT[self.level.value][0]

    @property
    def false_positives(self) -> int:
        return FILTERING_IMPACT[self.level.value][1]


class SpamTrapDeployment(BaseModel):
    round: int
    announced: bool = Field(default=False)


class InvestigationVote(BaseModel):
    esp_name: str


class Destination(BaseModel):
    """A mailbox-provider team.

    Attributes:
        name: Kingdom name (Gmail, Outlook, Yahoo)
        budget: Spendable credits, never negative
        filtering_policies: ESP name -> filtering policy
        owned_tools: Purchased tool ids
        authentication_level: Highest auth validator owned (0-3)
        spam_trap_active: Current spam trap network deployment, if any
        pending_investigation_vote: ESP this destination votes to investigate
    """

    name: str
    players: list[str] = Field(default_factory=list)
    budget: int = Field(default=0, ge=0)
    filtering_policies: dict[str, FilteringPolicy] = Field(default_factory=dict)
    esp_reputation: dict[str, int] = Field(default_factory=dict)
    owned_tools: list[str] = Field(default_factory=list)
    authentication_level: int = Field(default=0, ge=0, le=3)
    spam_trap_active: SpamTrapDeployment | None = Field(default=None)
    pending_investigation_vote: InvestigationVote | None = Field(default=None)
    locked_in: bool = Field(default=False)
    locked_in_at: datetime | None = Field(default=None)

    @field_validator("budget", mode="before")
    @classmethod
    def clamp_budget(cls, v: float) -> int:
        """Budgets never go below zero."""
        return max(0, round(v))

    def filtering_level_for(self, esp_name: str) -> FilteringLevel:
        policy = self.filtering_policies.get(esp_name)
        return policy.level if policy else FilteringLevel.PERMISSIVE


# =============================================================================
# Session
# =============================================================================


class InvestigationHistoryEntry(BaseModel):
    """Outcome of an investigation run at resolution.

    Attributes:
        round: Round in which the investigation ran
        target_esp: ESP team that was investigated
        voters: Destinations whose votes triggered it (each charged)
        violation_found: Whether a High-risk client lacked protection
        suspended_client_id: Client suspended as a result, if any
        missing_protection: "warmup", "list_hygiene" or "both"
    """

    round: int
    target_esp: str
    voters: list[str] = Field(default_factory=list)
    violation_found: bool = Field(default=False)
    suspended_client_id: str | None = Field(default=None)
    missing_protection: str | None = Field(default=None)
    message: str = Field(default="")
    timestamp: datetime = Field(default_factory=utcnow)


class ResolutionHistoryEntry(BaseModel):
    """Archived resolution output for one round.

    The results are stored in their serialized dict form so the session
    stays a plain JSON document.
    """

    round: int
    results: dict
    timestamp: datetime = Field(default_factory=utcnow)


class GameSession(BaseModel):
    """Complete state of one game room.

    Attributes:
        room_code: Key of the session in the store
        esp_teams: ESP teams in join order (order breaks ties)
        destinations: Destination teams
        current_round: 0 before the first planning phase, then 1-4
        current_phase: Position in the phase state machine
        incident_history: Append-only log of triggered incidents
        resolution_history: Results of past rounds, index round - 1
        investigation_history: Investigations that ran, in order
        paused: Timers frozen; the state machine is unaffected
    """

    room_code: str
    esp_teams: list[ESPTeam] = Field(default_factory=list)
    destinations: list[Destination] = Field(default_factory=list)
    current_round: int = Field(default=0, ge=0, le=MAX_ROUNDS)
    current_phase: GamePhase = Field(default=GamePhase.LOBBY)
    incident_history: list[IncidentHistoryEntry] = Field(default_factory=list)
    resolution_history: list[ResolutionHistoryEntry] = Field(default_factory=list)
    investigation_history: list[InvestigationHistoryEntry] = Field(default_factory=list)
    paused: bool = Field(default=False)
    phase_start_time: datetime | None = Field(default=None)
    last_activity: datetime = Field(default_factory=utcnow)

    def find_team(self, name: str) -> ESPTeam | None:
        """Find an ESP team by name (case-insensitive)."""
        lowered = name.lower()
        for team in self.esp_teams:
            if team.name.lower() == lowered:
                return team
        return None

    def find_destination(self, name: str) -> Destination | None:
        """Find a destination by name (case-insensitive)."""
        lowered = name.lower()
        for destination in self.destinations:
            if destination.name.lower() == lowered:
                return destination
        return None

    def destination_names(self) -> list[str]:
        return [d.name for d in self.destinations]

    def participating_teams(self) -> list[ESPTeam]:
        return [t for t in self.esp_teams if t.players]

    def participating_destinations(self) -> list[Destination]:
        return [d for d in self.destinations if d.players]

    def all_locked_in(self) -> bool:
        """True when every team and destination with players is locked in."""
        return all(t.locked_in for t in self.participating_teams()) and all(
            d.locked_in for d in self.participating_destinations()
        )

    def remaining_players_count(self) -> int:
        return sum(1 for t in self.participating_teams() if not t.locked_in) + sum(
            1 for d in self.participating_destinations() if not d.locked_in
        )

    def touch(self) -> None:
        self.last_activity = utcnow()

    def to_json(self) -> str:
        """Serialize to JSON, encoding modifier scopes as round lists."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, json_str: str) -> GameSession:
        return cls.model_validate_json(json_str)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_dict(cls, data: dict) -> GameSession:
        return cls.model_validate(data)
