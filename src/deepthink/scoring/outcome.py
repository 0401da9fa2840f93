"""Preview scoring strategy for Deep-Think.

OutcomeCalculator scores Decisions straight from the scenario configuration,
with decision times supplied as two parallel arrays. It is the lightweight
"what would this path score" estimator used for previews and authoring;
TrainingSession uses the canonical ScoreCalculator instead.

Weights (see parameters.PREVIEW_WEIGHTS):
    direct impact 0.40, second-order effects 0.30,
    risk management 0.20, time efficiency 0.10
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from deepthink.models.scenario import Consequence, ConsequenceKind, Decision, RiskLevel, clamp
from deepthink.models.session import RiskProfile, ScoreResult, SessionDecision
from deepthink.parameters import (
    CASCADE_GROWTH_PREVIEW,
    NO_LIMIT_TIME_EFFICIENCY,
    PREVIEW_RISK_SCORES,
    PREVIEW_WEIGHTS,
    RISK_BALANCE_PENALTY,
    SEVERITY_BANDS,
)
from deepthink.scoring.base import (
    BaseScoreCalculator,
    count_risk_levels,
    infer_risk_level,
    time_efficiency_for_ratio,
)
from deepthink.scoring.breakdown import PREVIEW_TEXT, BreakdownStats


class HasConsequences(Protocol):
    consequences: list[Consequence]


def consequence_severity(impact_score: float) -> str:
    """Severity bucket of an impact score: critical, high, medium or low."""
    for min_impact, severity in SEVERITY_BANDS:
        if impact_score >= min_impact:
            return severity
    return "low"


def get_consequence_severity_distribution(decisions: Iterable[HasConsequences]) -> dict[str, int]:
    """Count consequences per severity bucket.

    Args:
        decisions: Decisions or SessionDecisions

    Returns:
        Dict with keys low, medium, high, critical (all present)

    Example:
        Impacts 20/50/70/90 give one consequence in each bucket.
    """
    distribution = {"low": 0, "medium": 0, "high": 0, "critical": 0}
    for decision in decisions:
        for consequence in decision.consequences:
            distribution[consequence_severity(consequence.impact_score)] += 1
    return distribution


class OutcomeCalculator(BaseScoreCalculator):
    """Preview scoring of raw decision sequences."""

    weights = PREVIEW_WEIGHTS
    texts = PREVIEW_TEXT

    # =========================================================================
    # Public API
    # =========================================================================

    def calculate_outcomes(
        self,
        decisions: Sequence[Decision],
        time_taken_ms: Sequence[float],
        time_limits_ms: Sequence[float],
    ) -> ScoreResult:
        """Score a decision sequence.

        Args:
            decisions: Decisions taken, oldest first
            time_taken_ms: Time taken per decision
            time_limits_ms: Time limit per decision (<= 0 means untimed)

        Returns:
            ScoreResult with a four-entry breakdown, or the all-zero result
            for an empty sequence
        """
        return self._score(
            [list(d.consequences) for d in decisions],
            [d.risk_level for d in decisions],
            time_taken_ms,
            time_limits_ms,
        )

    def score_session(
        self,
        session_decisions: Sequence[SessionDecision],
        risk_profile: RiskProfile = RiskProfile.BALANCED,
        scenario_difficulty: int = 1,
    ) -> ScoreResult:
        """Preview-score a session; profile and difficulty are ignored."""
        return self._score(
            [list(d.consequences) for d in session_decisions],
            [infer_risk_level(d) for d in session_decisions],
            [d.time_taken_ms for d in session_decisions],
            [d.time_limit_ms or 0 for d in session_decisions],
        )

    def get_consequence_severity_distribution(
        self, decisions: Iterable[HasConsequences]
    ) -> dict[str, int]:
        return get_consequence_severity_distribution(decisions)

    # =========================================================================
    # Sub-scores
    # =========================================================================

    def _score(
        self,
        consequence_lists: list[list[Consequence]],
        risk_levels: list[RiskLevel],
        time_taken_ms: Sequence[float],
        time_limits_ms: Sequence[float],
    ) -> ScoreResult:
        if not consequence_lists:
            return ScoreResult.empty()

        scores = {
            "direct_impact": self._direct_impact(consequence_lists),
            "second_order_effects": self._second_order_effects(consequence_lists),
            "risk_management": self._risk_management(risk_levels),
            "time_efficiency": self._time_efficiency(time_taken_ms, time_limits_ms),
        }
        counts = count_risk_levels(risk_levels)
        direct_count = sum(
            1 for cs in consequence_lists for c in cs if c.kind == ConsequenceKind.DIRECT
        )
        stats = BreakdownStats(
            decision_count=len(consequence_lists),
            avg_direct_consequences=direct_count / len(consequence_lists),
            risk_high=counts[RiskLevel.HIGH],
            risk_medium=counts[RiskLevel.MEDIUM],
            risk_low=counts[RiskLevel.LOW],
        )
        return self.build_result(scores, self.weighted_total(scores), stats)

    def _direct_impact(self, consequence_lists: list[list[Consequence]]) -> float:
        total_impact = 0.0
        total_weight = 0.0
        for consequences in consequence_lists:
            for c in consequences:
                if c.kind == ConsequenceKind.DIRECT:
                    total_impact += c.impact_score * c.probability
                    total_weight += c.probability
        if total_weight <= 0:
            return 0.0
        return clamp(total_impact / total_weight, 0.0, 100.0)

    def _second_order_effects(self, consequence_lists: list[list[Consequence]]) -> float:
        total_impact = 0.0
        total_weight = 0.0
        cascade = 1.0
        for consequences in consequence_lists:
            for c in consequences:
                if c.kind != ConsequenceKind.SECOND_ORDER:
                    continue
                # Only the numerator is amplified; the clamp below bounds it
                total_impact += c.impact_score * c.probability * cascade
                total_weight += c.probability
                cascade *= CASCADE_GROWTH_PREVIEW
        if total_weight <= 0:
            return 0.0
        return clamp(total_impact / total_weight, 0.0, 100.0)

    def _risk_management(self, risk_levels: list[RiskLevel]) -> float:
        total = sum(PREVIEW_RISK_SCORES[level.value] for level in risk_levels)
        counts = count_risk_levels(risk_levels)
        balance = counts[RiskLevel.HIGH] - counts[RiskLevel.LOW]
        average = total / len(risk_levels)
        return clamp(average - abs(balance) * RISK_BALANCE_PENALTY, 0.0, 100.0)

    def _time_efficiency(
        self, time_taken_ms: Sequence[float], time_limits_ms: Sequence[float]
    ) -> float:
        count = min(len(time_taken_ms), len(time_limits_ms))
        if count == 0:
            return NO_LIMIT_TIME_EFFICIENCY
        total = 0.0
        for taken, limit in zip(time_taken_ms[:count], time_limits_ms[:count]):
            if limit <= 0:
                total += NO_LIMIT_TIME_EFFICIENCY
            else:
                total += time_efficiency_for_ratio(taken / limit)
        return total / count
