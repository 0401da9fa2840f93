"""Scenario engine for Deep-Think.

This module contains:
- state_manager: Current position, visit history and decision history
- branching: Decision validation, conditional transitions, graph validation
- session: In-memory training session tying the engine to scoring

Usage:
    from deepthink.engine import TrainingSession
    from deepthink.storage import get_scenario_repository

    repo = get_scenario_repository()
    graph = repo.get_scenario("hospital-outage")

    session = TrainingSession(graph)

    # Offer decisions
    for decision in session.state_manager.get_available_decisions():
        print(decision.id, decision.text)

    # Submit a choice
    result = session.submit_decision("activate-backup", time_taken_ms=42_000)

    # Check if the run is over
    if session.is_complete:
        print(session.score().total_score)
"""

from deepthink.engine.branching import (
    CONDITIONS_NOT_MET,
    INVALID_DECISION,
    NO_TRANSITION,
    TARGET_NOT_FOUND,
    DecisionBranchHandler,
    GraphValidationResult,
    PossibleTransition,
    TransitionResult,
    build_evaluation_context,
    validate_scenario_graph,
)
from deepthink.engine.session import (
    SessionMetrics,
    SessionSnapshot,
    TrainingSession,
    score_impact_of,
)
from deepthink.engine.state_manager import DecisionContext, ScenarioStateManager

__all__ = [
    # State tracking
    "ScenarioStateManager",
    "DecisionContext",
    # Branching
    "DecisionBranchHandler",
    "TransitionResult",
    "PossibleTransition",
    "GraphValidationResult",
    "build_evaluation_context",
    "validate_scenario_graph",
    # Error messages
    "INVALID_DECISION",
    "NO_TRANSITION",
    "CONDITIONS_NOT_MET",
    "TARGET_NOT_FOUND",
    # Sessions
    "TrainingSession",
    "SessionMetrics",
    "SessionSnapshot",
    "score_impact_of",
]
