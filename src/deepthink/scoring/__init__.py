"""Scoring and impact analysis for Deep-Think.

This module contains:
- base: Shared scoring helpers and the BaseScoreCalculator interface
- outcome: Preview strategy (OutcomeCalculator) and severity distribution
- score_calculator: Canonical session strategy (ScoreCalculator)
- breakdown: Per-category explanation and suggestion tables
- impact: Per-decision multi-dimensional impact analysis
- text_matching: Pluggable keyword heuristics

Usage:
    from deepthink.scoring import ImpactAnalyzer, ScoreCalculator
    from deepthink.models import RiskProfile

    result = ScoreCalculator().calculate_session_score(decisions, RiskProfile.BALANCED)
    print(result.total_score, result.percentile)

    analysis = ImpactAnalyzer().analyze_decision_impact(decisions[-1], state, decisions[:-1])
    print(analysis.risk_assessment.overall_risk_level)
"""

from deepthink.scoring.base import (
    BaseScoreCalculator,
    delay_penalty,
    infer_risk_level,
    time_efficiency_for_ratio,
)
from deepthink.scoring.breakdown import BreakdownStats, CategoryText, build_breakdown
from deepthink.scoring.impact import (
    AmplificationFactor,
    CascadeAnalysis,
    CascadeChain,
    CompoundingEffect,
    ContextualFactorAnalysis,
    DecisionImpactAnalysis,
    ImpactAnalyzer,
    ImprovementOpportunity,
    RiskAssessment,
    RiskDimensions,
    StakeholderGroup,
    StakeholderGroupImpact,
    StakeholderImpactAnalysis,
    TimelineImpactAnalysis,
    decision_time_efficiency,
)
from deepthink.scoring.outcome import (
    OutcomeCalculator,
    consequence_severity,
    get_consequence_severity_distribution,
)
from deepthink.scoring.score_calculator import (
    ScoreCalculator,
    difficulty_multiplier,
    score_percentile,
)
from deepthink.scoring.text_matching import KeywordMatcher

__all__ = [
    # Calculators
    "BaseScoreCalculator",
    "OutcomeCalculator",
    "ScoreCalculator",
    "ImpactAnalyzer",
    "KeywordMatcher",
    # Breakdown
    "BreakdownStats",
    "CategoryText",
    "build_breakdown",
    # Impact results
    "DecisionImpactAnalysis",
    "StakeholderGroup",
    "StakeholderGroupImpact",
    "StakeholderImpactAnalysis",
    "CascadeAnalysis",
    "CascadeChain",
    "AmplificationFactor",
    "CompoundingEffect",
    "RiskAssessment",
    "RiskDimensions",
    "TimelineImpactAnalysis",
    "ContextualFactorAnalysis",
    "ImprovementOpportunity",
    # Functions
    "consequence_severity",
    "decision_time_efficiency",
    "delay_penalty",
    "difficulty_multiplier",
    "get_consequence_severity_distribution",
    "infer_risk_level",
    "score_percentile",
    "time_efficiency_for_ratio",
]
