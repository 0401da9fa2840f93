"""Session scoring strategy for Deep-Think.

ScoreCalculator is the canonical scorer of a training session. Compared with
the preview OutcomeCalculator it:

- normalizes impacts to [0, 100] before averaging, with a neutral 50 when a
  category has no consequences at all
- applies the cascade multiplier (x1.15 per second-order consequence, capped
  at 2.0) to the weight, and a delay penalty to the impact
- rewards decisive risk (low 30, medium 70, high 100) plus profile alignment,
  consistency and adaptability, minus the balance penalty
- scores timing against each decision's recorded time limit
- scales the total by a difficulty multiplier and reports a percentile

Weights (see parameters.SESSION_WEIGHTS):
    direct impact 0.35, second-order effects 0.30,
    risk management 0.20, time efficiency 0.15
"""

from __future__ import annotations

from typing import Sequence

from deepthink.models.scenario import ConsequenceKind, RiskLevel, clamp
from deepthink.models.session import RiskProfile, ScoreResult, SessionDecision
from deepthink.parameters import (
    ADAPTABILITY_CAP,
    ADAPTABILITY_STEP,
    CASCADE_GROWTH_SESSION,
    CASCADE_MULTIPLIER_CAP,
    CONSISTENCY_BONUS_SCALE,
    DIFFICULTY_MULTIPLIER_CAP,
    DIFFICULTY_STEP,
    NO_LIMIT_TIME_EFFICIENCY,
    PERCENTILE_BANDS,
    PERCENTILE_FLOOR,
    PROFILE_ALIGNMENT_BONUS,
    PROFILE_OPTIMAL_RISK,
    RISK_BALANCE_PENALTY,
    SESSION_RISK_SCORES,
    SESSION_WEIGHTS,
)
from deepthink.scoring.base import (
    BaseScoreCalculator,
    count_risk_levels,
    delay_penalty,
    infer_risk_level,
    time_efficiency_for_ratio,
)
from deepthink.scoring.breakdown import SESSION_TEXT, BreakdownStats

NEUTRAL_SCORE = 50.0


def difficulty_multiplier(scenario_difficulty: int) -> float:
    """min(1.5, 1 + (difficulty - 1) * 0.1)."""
    return min(DIFFICULTY_MULTIPLIER_CAP, 1.0 + (scenario_difficulty - 1) * DIFFICULTY_STEP)


def score_percentile(total_score: float) -> float:
    """Approximate percentile of a total score from fixed bands."""
    for min_score, percentile in PERCENTILE_BANDS:
        if total_score >= min_score:
            return percentile
    return PERCENTILE_FLOOR


def normalize_impact(impact_score: float) -> float:
    """Map a signed impact onto the [0, 100] scoring scale."""
    return clamp(impact_score, 0.0, 100.0)


class ScoreCalculator(BaseScoreCalculator):
    """Profile-aware scoring of training sessions."""

    weights = SESSION_WEIGHTS
    texts = SESSION_TEXT

    # =========================================================================
    # Public API
    # =========================================================================

    def calculate_session_score(
        self,
        session_decisions: Sequence[SessionDecision],
        risk_profile: RiskProfile,
        scenario_difficulty: int = 1,
    ) -> ScoreResult:
        """Score a training session.

        Args:
            session_decisions: Accepted decisions, oldest first
            risk_profile: The trainee's declared risk posture
            scenario_difficulty: Scenario difficulty level (1-5)

        Returns:
            ScoreResult with percentile; the all-zero result (percentile 0)
            for an empty session
        """
        if not session_decisions:
            return ScoreResult.empty(percentile=0.0)

        risk_levels = [infer_risk_level(d) for d in session_decisions]
        scores = {
            "direct_impact": self._direct_impact(session_decisions),
            "second_order_effects": self._second_order_effects(session_decisions),
            "risk_management": self._risk_management(session_decisions, risk_levels, risk_profile),
            "time_efficiency": self._time_efficiency(session_decisions),
        }
        total = clamp(
            self.weighted_total(scores) * difficulty_multiplier(scenario_difficulty), 0.0, 100.0
        )
        stats = self._stats(session_decisions, risk_levels, risk_profile)
        return self.build_result(scores, total, stats, percentile=score_percentile(total))

    def score_session(
        self,
        session_decisions: Sequence[SessionDecision],
        risk_profile: RiskProfile = RiskProfile.BALANCED,
        scenario_difficulty: int = 1,
    ) -> ScoreResult:
        return self.calculate_session_score(session_decisions, risk_profile, scenario_difficulty)

    # =========================================================================
    # Sub-scores
    # =========================================================================

    def _direct_impact(self, session_decisions: Sequence[SessionDecision]) -> float:
        total_impact = 0.0
        total_weight = 0.0
        for decision in session_decisions:
            for c in decision.consequences:
                if c.kind == ConsequenceKind.DIRECT:
                    total_impact += normalize_impact(c.impact_score) * c.probability
                    total_weight += c.probability
        return total_impact / total_weight if total_weight > 0 else NEUTRAL_SCORE

    def _second_order_effects(self, session_decisions: Sequence[SessionDecision]) -> float:
        total_impact = 0.0
        total_weight = 0.0
        cascade = 1.0
        for decision in session_decisions:
            for c in decision.consequences:
                if c.kind != ConsequenceKind.SECOND_ORDER:
                    continue
                weight = c.probability * cascade
                total_impact += normalize_impact(c.impact_score) * weight * delay_penalty(c.delay_minutes)
                total_weight += weight
                cascade = min(CASCADE_MULTIPLIER_CAP, cascade * CASCADE_GROWTH_SESSION)
        return total_impact / total_weight if total_weight > 0 else NEUTRAL_SCORE

    def _risk_management(
        self,
        session_decisions: Sequence[SessionDecision],
        risk_levels: list[RiskLevel],
        risk_profile: RiskProfile,
    ) -> float:
        optimal = PROFILE_OPTIMAL_RISK[RiskProfile(risk_profile).value]
        total = 0.0
        for level in risk_levels:
            total += SESSION_RISK_SCORES[level.value]
            if level.value == optimal:
                total += PROFILE_ALIGNMENT_BONUS

        counts = count_risk_levels(risk_levels)
        decision_count = len(risk_levels)
        balance = counts[RiskLevel.HIGH] - counts[RiskLevel.LOW]
        consistency = max(counts.values()) / decision_count * CONSISTENCY_BONUS_SCALE
        adaptability = self._adaptability(session_decisions, risk_levels)

        score = (
            total / decision_count
            - abs(balance) * RISK_BALANCE_PENALTY
            + consistency
            + adaptability
        )
        return clamp(score, 0.0, 100.0)

    def _adaptability(
        self, session_decisions: Sequence[SessionDecision], risk_levels: list[RiskLevel]
    ) -> float:
        """+5 per risk escalation right after a negative-impact decision, capped at 20."""
        bonus = 0.0
        for i in range(1, len(session_decisions)):
            escalated = risk_levels[i].rank > risk_levels[i - 1].rank
            if session_decisions[i - 1].score_impact < 0 and escalated:
                bonus += ADAPTABILITY_STEP
        return min(ADAPTABILITY_CAP, bonus)

    def _time_efficiency(self, session_decisions: Sequence[SessionDecision]) -> float:
        total = 0.0
        for decision in session_decisions:
            if decision.time_limit_ms:
                total += time_efficiency_for_ratio(decision.time_taken_ms / decision.time_limit_ms)
            else:
                total += NO_LIMIT_TIME_EFFICIENCY
        return total / len(session_decisions)

    def _stats(
        self,
        session_decisions: Sequence[SessionDecision],
        risk_levels: list[RiskLevel],
        risk_profile: RiskProfile,
    ) -> BreakdownStats:
        count = len(session_decisions)
        counts = count_risk_levels(risk_levels)
        consequences = [c for d in session_decisions for c in d.consequences]
        return BreakdownStats(
            decision_count=count,
            avg_direct_consequences=sum(1 for c in consequences if c.kind == ConsequenceKind.DIRECT) / count,
            negative_outcomes=sum(1 for d in session_decisions if d.score_impact < 0),
            second_order_count=sum(1 for c in consequences if c.is_second_order),
            risk_high=counts[RiskLevel.HIGH],
            risk_medium=counts[RiskLevel.MEDIUM],
            risk_low=counts[RiskLevel.LOW],
            risk_profile=RiskProfile(risk_profile).value,
            avg_time_seconds=sum(d.time_taken_ms for d in session_decisions) / count / 1000,
        )
