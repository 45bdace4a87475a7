"""Game engine module for Mailquest.

This module contains the core game logic including:
- calculators: ESP volume, delivery, revenue, complaints, spam traps, reputation
- destination_calculators: destination satisfaction and revenue
- resolution: the per-round resolution pipeline
- application: applying resolution results to the session
- phases: the phase state machine and planning entry hooks
- investigation: destination votes and the investigations they trigger
- scoring: end-of-game ESP scores
- game_engine: the room-keyed facade over a session store

Usage:
    from mailquest.engine import GameEngine

    engine = GameEngine()
    engine.create_session("ROOM01", {"SendWave": ["ana"]}, {"Gmail": ["ben"]})
    engine.start_resource_allocation("ROOM01")
    engine.transition_phase("ROOM01", "planning")

    engine.purchase_tech("ROOM01", "SendWave", "spf")
    engine.lock_in_esp("ROOM01", "SendWave")
    result = engine.lock_in_destination("ROOM01", "Gmail")  # resolves round 1
"""

from mailquest.engine.application import ApplicationResult, apply_resolution_to_game_state
from mailquest.engine.game_engine import SESSION_NOT_FOUND, EngineResult, GameEngine
from mailquest.engine.investigation import (
    InvestigationTrigger,
    VoteResult,
    cast_vote,
    check_trigger,
    clear_votes,
    remove_vote,
    resolve_investigation,
    run_investigation,
    tally_votes,
)
from mailquest.engine.phases import (
    VALID_TRANSITIONS,
    PhaseTransitionResult,
    PlanningEntry,
    enter_planning,
    transition_error,
    transition_phase,
)
from mailquest.engine.resolution import (
    DestinationResolutionResult,
    ESPResolutionResult,
    ResolutionResults,
    execute_resolution,
)
from mailquest.engine.scoring import ESPFinalResult, FinalScores, Winner, calculate_final_scores

__all__ = [
    # Facade
    "GameEngine",
    "EngineResult",
    "SESSION_NOT_FOUND",
    # Phases
    "VALID_TRANSITIONS",
    "PhaseTransitionResult",
    "PlanningEntry",
    "enter_planning",
    "transition_error",
    "transition_phase",
    # Investigations
    "VoteResult",
    "InvestigationTrigger",
    "cast_vote",
    "remove_vote",
    "clear_votes",
    "tally_votes",
    "check_trigger",
    "run_investigation",
    "resolve_investigation",
    # Resolution
    "ResolutionResults",
    "ESPResolutionResult",
    "DestinationResolutionResult",
    "execute_resolution",
    "ApplicationResult",
    "apply_resolution_to_game_state",
    # Scoring
    "FinalScores",
    "ESPFinalResult",
    "Winner",
    "calculate_final_scores",
]
