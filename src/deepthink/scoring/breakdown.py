"""Score breakdown text for Deep-Think.

Each scoring category has four explanation templates, one per score band
(>= 80 excellent, >= 60 good, >= 40 moderate, else poor), and two suggestion
sets: one added below 60 and one added below 80. The text is a pure function
of the score band and a few summary statistics, so identical inputs always
produce identical breakdowns.

Templates are ``str.format`` strings over the fields of BreakdownStats.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass

from deepthink.models.session import ScoreBreakdown
from deepthink.parameters import EXCELLENT_BAND, GOOD_BAND, MODERATE_BAND

CATEGORY_KEYS = ("direct_impact", "second_order_effects", "risk_management", "time_efficiency")


@dataclass
class BreakdownStats:
    """Summary statistics of a decision sequence, available to templates."""

    decision_count: int = 0
    avg_direct_consequences: float = 0.0
    negative_outcomes: int = 0
    second_order_count: int = 0
    risk_high: int = 0
    risk_medium: int = 0
    risk_low: int = 0
    risk_profile: str = "balanced"
    avg_time_seconds: float = 0.0


@dataclass(frozen=True)
class CategoryText:
    """Fixed text for one scoring category."""

    category: str
    explanations: tuple[str, str, str, str]
    below_good: tuple[str, ...]
    below_excellent: tuple[str, ...]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def round_score(value: float) -> float:
    """Round to two decimals with halves rounded up, matching round_half_up."""
    return round_half_up(value * 100) / 100


def band_index(score: float) -> int:
    """0 = excellent, 1 = good, 2 = moderate, 3 = poor."""
    if score >= EXCELLENT_BAND:
        return 0
    if score >= GOOD_BAND:
        return 1
    if score >= MODERATE_BAND:
        return 2
    return 3


def build_breakdown(
    scores: dict[str, float],
    texts: dict[str, CategoryText],
    stats: BreakdownStats,
) -> list[ScoreBreakdown]:
    """Build the four-entry breakdown for a set of category scores.

    Args:
        scores: Sub-score per category key (see CATEGORY_KEYS)
        texts: Text table per category key
        stats: Values substituted into the explanation templates

    Returns:
        One ScoreBreakdown per category, in CATEGORY_KEYS order
    """
    values = asdict(stats)
    breakdown = []
    for key in CATEGORY_KEYS:
        score = scores[key]
        text = texts[key]
        suggestions: list[str] = []
        if score < GOOD_BAND:
            suggestions.extend(text.below_good)
        if score < EXCELLENT_BAND:
            suggestions.extend(text.below_excellent)
        breakdown.append(
            ScoreBreakdown(
                category=text.category,
                score=round_half_up(score),
                explanation=text.explanations[band_index(score)].format(**values),
                improvement_suggestions=suggestions,
            )
        )
    return breakdown


# =============================================================================
# Preview strategy text (OutcomeCalculator)
# =============================================================================

PREVIEW_TEXT: dict[str, CategoryText] = {
    "direct_impact": CategoryText(
        category="Direct Impact",
        explanations=(
            "Excellent direct impact management with an average of "
            "{avg_direct_consequences:.1f} immediate consequences per decision.",
            "Good direct impact handling, though some decisions had significant "
            "immediate consequences.",
            "Moderate direct impact management. Several decisions resulted in "
            "negative immediate outcomes.",
            "Poor direct impact control. Most decisions led to significant immediate "
            "negative consequences.",
        ),
        below_good=(
            "Focus on understanding immediate consequences before making decisions",
            "Consider stakeholder impact in your decision-making process",
        ),
        below_excellent=(
            "Practice identifying primary vs secondary stakeholders",
            "Develop frameworks for rapid impact assessment",
        ),
    ),
    "second_order_effects": CategoryText(
        category="Second-Order Effects",
        explanations=(
            "Excellent anticipation of cascading effects and long-term consequences.",
            "Good awareness of second-order effects, with room for improvement in "
            "prediction accuracy.",
            "Moderate consideration of long-term consequences. Some cascading effects "
            "were missed.",
            "Limited awareness of second-order effects. Focus on understanding how "
            "decisions create ripple effects.",
        ),
        below_good=(
            "Practice systems thinking to identify interconnected consequences",
            "Study case studies of decisions with significant long-term impacts",
        ),
        below_excellent=(
            "Develop mental models for predicting cascading effects",
            "Consider time-delayed consequences in your decision framework",
        ),
    ),
    "risk_management": CategoryText(
        category="Risk Management",
        explanations=(
            "Excellent risk balance with {risk_high} high-risk, {risk_medium} "
            "medium-risk, and {risk_low} low-risk decisions.",
            "Good risk management with appropriate risk-taking for the situation.",
            "Moderate risk management. Consider balancing conservative and aggressive "
            "approaches.",
            "Poor risk management. Either too conservative or too aggressive for the "
            "crisis context.",
        ),
        below_good=(
            "Learn to calibrate risk-taking based on crisis severity",
            "Practice identifying when bold action is necessary vs when caution is warranted",
        ),
        below_excellent=(
            "Develop frameworks for rapid risk assessment",
            "Study successful crisis leaders and their risk management approaches",
        ),
    ),
    "time_efficiency": CategoryText(
        category="Time Efficiency",
        explanations=(
            "Excellent time management with optimal decision timing.",
            "Good time efficiency, though some decisions could have been made faster "
            "or slower.",
            "Moderate time management. Work on balancing speed with thoroughness.",
            "Poor time management. Either too rushed or too slow for crisis conditions.",
        ),
        below_good=(
            "Practice rapid decision-making under time pressure",
            "Learn to identify when quick action is critical vs when deliberation is needed",
        ),
        below_excellent=(
            "Develop intuition for optimal decision timing",
            "Practice with time-constrained scenario simulations",
        ),
    ),
}


# =============================================================================
# Session strategy text (ScoreCalculator)
# =============================================================================

SESSION_TEXT: dict[str, CategoryText] = {
    "direct_impact": CategoryText(
        category="Direct Impact Management",
        explanations=(
            "Excellent direct impact management. You effectively minimized immediate "
            "negative consequences with an average of {avg_direct_consequences:.1f} "
            "direct outcomes per decision.",
            "Good direct impact handling. {negative_outcomes} of {decision_count} "
            "decisions had negative immediate outcomes, but overall impact was "
            "well-managed.",
            "Moderate direct impact management. {negative_outcomes} decisions resulted "
            "in significant immediate negative consequences that could have been avoided.",
            "Poor direct impact control. Most decisions led to immediate negative "
            "outcomes. Focus on understanding stakeholder impact before acting.",
        ),
        below_good=(
            "Practice stakeholder impact analysis before making decisions",
            'Use the "5 Whys" technique to understand immediate consequences',
            "Consider creating decision matrices for complex choices",
        ),
        below_excellent=(
            "Develop rapid impact assessment frameworks",
            "Study case studies of successful crisis decision-making",
        ),
    ),
    "second_order_effects": CategoryText(
        category="Second-Order Effects Anticipation",
        explanations=(
            "Excellent anticipation of cascading effects. You identified "
            "{second_order_count} second-order consequences and managed them effectively.",
            "Good awareness of second-order effects. Some long-term consequences were "
            "well-anticipated, though prediction accuracy could improve.",
            "Moderate consideration of cascading effects. Several important "
            "second-order consequences were missed or underestimated.",
            "Limited systems thinking evident. Focus on understanding how decisions "
            "create ripple effects throughout the organization and environment.",
        ),
        below_good=(
            "Practice systems thinking exercises to identify interconnected consequences",
            "Study historical crisis cases focusing on long-term impacts",
            "Use causal loop diagrams to map decision consequences",
        ),
        below_excellent=(
            "Develop mental models for predicting cascading effects",
            "Practice scenario planning techniques",
        ),
    ),
    "risk_management": CategoryText(
        category="Risk Management Strategy",
        explanations=(
            "Excellent risk calibration for your {risk_profile} profile. Risk "
            "distribution: {risk_high} high-risk, {risk_medium} medium-risk, "
            "{risk_low} low-risk decisions.",
            "Good risk management with appropriate balance for crisis conditions. Some "
            "decisions could have been better calibrated to the situation severity.",
            "Moderate risk management. Consider whether your risk-taking pattern "
            "matches the crisis severity and your role responsibilities.",
            "Poor risk calibration. Your decisions were either too conservative for the "
            "crisis urgency or too aggressive for the potential consequences.",
        ),
        below_good=(
            "Learn to calibrate risk-taking based on crisis severity and time constraints",
            "Practice identifying when bold action is necessary vs when caution is warranted",
            "Study your risk profile and how it should adapt in crisis situations",
        ),
        below_excellent=(
            "Develop frameworks for rapid risk assessment under pressure",
            "Analyze successful crisis leaders with similar risk profiles",
        ),
    ),
    "time_efficiency": CategoryText(
        category="Decision Timing Efficiency",
        explanations=(
            "Excellent decision timing with an average of {avg_time_seconds:.1f} "
            "seconds per decision. You balanced speed with thoroughness effectively.",
            "Good time management overall. Some decisions could have been made faster "
            "or with more deliberation depending on the situation.",
            "Moderate time efficiency. Work on recognizing when quick action is "
            "critical versus when more analysis is needed.",
            "Poor time management. You were either too rushed (risking poor decisions) "
            "or too slow (missing critical windows for action).",
        ),
        below_good=(
            "Practice rapid decision-making under time pressure",
            "Learn to identify decision types that require quick vs deliberate responses",
            "Use time-boxing techniques for complex decisions",
        ),
        below_excellent=(
            "Develop intuition for optimal decision timing in crisis situations",
            "Practice with progressively shorter time constraints",
        ),
    ),
}
