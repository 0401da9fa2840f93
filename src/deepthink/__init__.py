"""Deep-Think: crisis decision-training engine.

A trainee walks a scenario graph of crisis states, picking one decision per
state under time pressure. The engine tracks position and history, resolves
conditional transitions, and scores the run.

Subpackages:
- models: Scenario configuration, branch conditions, session and score records
- engine: State tracking, branching, training sessions
- scoring: Outcome and session scoring, per-decision impact analysis
- storage: JSON scenario repository
"""

__version__ = "1.0.0"

from deepthink.engine import DecisionBranchHandler, ScenarioStateManager, TrainingSession
from deepthink.models import RiskProfile, ScenarioGraph, ScoreResult, SessionDecision
from deepthink.scoring import ImpactAnalyzer, OutcomeCalculator, ScoreCalculator

__all__ = [
    "DecisionBranchHandler",
    "ImpactAnalyzer",
    "OutcomeCalculator",
    "RiskProfile",
    "ScenarioGraph",
    "ScenarioStateManager",
    "ScoreCalculator",
    "ScoreResult",
    "SessionDecision",
    "TrainingSession",
    "__version__",
]
