"""Shared scoring machinery for Deep-Think.

Two scoring strategies exist, both implementing BaseScoreCalculator:

- OutcomeCalculator ("preview"): scores raw Decisions from the scenario
  configuration plus parallel time arrays. Caution is rewarded.
- ScoreCalculator ("session"): scores the SessionDecisions of a training run
  with profile awareness and a difficulty multiplier. This is the canonical
  strategy used by TrainingSession.

Both produce a ScoreResult whose four sub-scores lie in [0, 100] and combine
by a weighted sum whose weights sum to 1.0.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from deepthink.models.scenario import RiskLevel, clamp
from deepthink.models.session import RiskProfile, ScoreBreakdown, ScoreResult, SessionDecision
from deepthink.parameters import (
    DELAY_PENALTIES,
    DELAY_PENALTY_FLOOR,
    HIGH_IMPACT_THRESHOLD,
    INFERRED_HIGH_AVG_IMPACT,
    INFERRED_MEDIUM_AVG_IMPACT,
    OVERTIME_SLOPE,
    TIME_OPTIMAL_RATIO,
    TIME_RUSHED_RATIO,
)
from deepthink.scoring.breakdown import (
    BreakdownStats,
    CategoryText,
    build_breakdown,
    round_score,
)


def time_efficiency_for_ratio(ratio: float) -> float:
    """Piecewise time efficiency for time taken / time limit.

    - ratio <= 0.6: 60 -> 80 (rushed)
    - 0.6 < ratio <= 0.8: 80 -> 100 (optimal band)
    - 0.8 < ratio <= 1.0: 100 -> 70 (slower)
    - ratio > 1.0: 70 minus 50 per whole limit overrun, floored at 0
    """
    if ratio <= TIME_RUSHED_RATIO:
        return 60.0 + (ratio / TIME_RUSHED_RATIO) * 20.0
    if ratio <= TIME_OPTIMAL_RATIO:
        return 80.0 + ((ratio - TIME_RUSHED_RATIO) / (TIME_OPTIMAL_RATIO - TIME_RUSHED_RATIO)) * 20.0
    if ratio <= 1.0:
        return 100.0 - ((ratio - TIME_OPTIMAL_RATIO) / (1.0 - TIME_OPTIMAL_RATIO)) * 30.0
    return max(0.0, 70.0 - (ratio - 1.0) * OVERTIME_SLOPE)


def delay_penalty(delay_minutes: int | None) -> float:
    """Discount factor for a consequence resolving ``delay_minutes`` out."""
    delay = delay_minutes or 0
    for max_delay, factor in DELAY_PENALTIES:
        if delay <= max_delay:
            return factor
    return DELAY_PENALTY_FLOOR


def infer_risk_level(decision: SessionDecision) -> RiskLevel:
    """Risk level of a session decision.

    The declared risk is used when recorded. Otherwise it is inferred from the
    consequences: average impact above 70 or more than one consequence above
    70 is high; average above 40 or any consequence above 70 is medium.
    """
    if decision.risk_level is not None:
        return decision.risk_level
    consequences = decision.consequences
    if not consequences:
        return RiskLevel.LOW
    avg_impact = sum(c.impact_score for c in consequences) / len(consequences)
    high_impact = sum(1 for c in consequences if c.impact_score > HIGH_IMPACT_THRESHOLD)
    if avg_impact > INFERRED_HIGH_AVG_IMPACT or high_impact > 1:
        return RiskLevel.HIGH
    if avg_impact > INFERRED_MEDIUM_AVG_IMPACT or high_impact > 0:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def count_risk_levels(levels: Sequence[RiskLevel]) -> dict[RiskLevel, int]:
    counts = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 0, RiskLevel.HIGH: 0}
    for level in levels:
        counts[level] += 1
    return counts


class BaseScoreCalculator(ABC):
    """Common interface and helpers of the scoring strategies.

    Attributes:
        weights: Category weights keyed like breakdown.CATEGORY_KEYS
        texts: Breakdown text table keyed like breakdown.CATEGORY_KEYS
    """

    weights: dict[str, float]
    texts: dict[str, CategoryText]

    @abstractmethod
    def score_session(
        self,
        session_decisions: Sequence[SessionDecision],
        risk_profile: RiskProfile = RiskProfile.BALANCED,
        scenario_difficulty: int = 1,
    ) -> ScoreResult:
        """Score the decisions of a training session.

        Args:
            session_decisions: Accepted decisions, oldest first
            risk_profile: The trainee's declared risk posture
            scenario_difficulty: Scenario difficulty level (1-5)

        Returns:
            ScoreResult; the all-zero result for an empty sequence
        """

    def weighted_total(self, scores: dict[str, float]) -> float:
        """Weighted sum of the four category scores."""
        return sum(scores[key] * weight for key, weight in self.weights.items())

    def build_result(
        self,
        scores: dict[str, float],
        total: float,
        stats: BreakdownStats,
        percentile: float | None = None,
    ) -> ScoreResult:
        """Clamp, round and package sub-scores with their breakdown."""
        scores = {key: clamp(value, 0.0, 100.0) for key, value in scores.items()}
        breakdown: list[ScoreBreakdown] = build_breakdown(scores, self.texts, stats)
        return ScoreResult(
            total_score=round_score(clamp(total, 0.0, 100.0)),
            direct_impact=round_score(scores["direct_impact"]),
            second_order_effects=round_score(scores["second_order_effects"]),
            risk_management=round_score(scores["risk_management"]),
            time_efficiency=round_score(scores["time_efficiency"]),
            breakdown=breakdown,
            percentile=percentile,
        )
