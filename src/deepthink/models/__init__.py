"""Deep-Think data models.

This module exports the scenario configuration types, the branch condition
types, and the session/score records.
"""

from .conditions import (
    MISSING,
    OPERATORS,
    ComparatorCondition,
    Condition,
    EqualsCondition,
    evaluate_conditions,
    parse_condition,
    parse_conditions,
    resolve_path,
)
from .scenario import (
    Character,
    Consequence,
    ConsequenceKind,
    Decision,
    DecisionBranch,
    RiskLevel,
    ScenarioConfig,
    ScenarioGraph,
    ScenarioState,
    clamp,
)
from .session import (
    RiskProfile,
    ScoreBreakdown,
    ScoreResult,
    SessionDecision,
)

__all__ = [
    # Enums
    "ConsequenceKind",
    "RiskLevel",
    "RiskProfile",
    # Scenario Models
    "Consequence",
    "Decision",
    "Character",
    "ScenarioState",
    "DecisionBranch",
    "ScenarioGraph",
    "ScenarioConfig",
    # Session Models
    "SessionDecision",
    "ScoreBreakdown",
    "ScoreResult",
    # Conditions
    "Condition",
    "EqualsCondition",
    "ComparatorCondition",
    "MISSING",
    "OPERATORS",
    "evaluate_conditions",
    "parse_condition",
    "parse_conditions",
    "resolve_path",
    # Helpers
    "clamp",
]
