"""Scoring and analysis parameters for Deep-Think.

This module is the SINGLE SOURCE OF TRUTH for all tunable scoring constants.
The scenario engine itself has no tunables beyond the delay threshold below;
everything here feeds the score calculators and the impact analyzer.

Parameter Categories:
- Category weights: How the four sub-scores combine into a total
- Cascade & delay: How second-order consequences compound and discount
- Risk management: Per-level base scores, balance and profile bonuses
- Time efficiency: Band edges for the piecewise timing curve
- Impact analysis: Thresholds and lexicons for the keyword heuristics

Usage:
    from deepthink.parameters import SESSION_WEIGHTS, CASCADE_GROWTH_SESSION
"""

from __future__ import annotations

# =============================================================================
# CONSEQUENCE TIMING
# =============================================================================

IMMEDIATE_DELAY_MINUTES = 5
"""A consequence resolving within this many minutes counts as immediate.

An absent delay is also immediate. Used by the timeline buckets, the delay
penalty, and Consequence.is_immediate.
"""

SHORT_TERM_DELAY_MINUTES = 60
"""Upper edge of the short-term timeline bucket (5 < delay <= 60)."""

DELAYED_PATTERN_MINUTES = 30
"""Delay above which a consequence counts as 'delayed' for temporal patterns."""


# =============================================================================
# CATEGORY WEIGHTS
# =============================================================================

PREVIEW_WEIGHTS = {
    "direct_impact": 0.40,
    "second_order_effects": 0.30,
    "risk_management": 0.20,
    "time_efficiency": 0.10,
}
"""Weights of the lightweight preview strategy (OutcomeCalculator).

Sums to 1.0. Direct impact dominates because previews score raw Decision
configuration before any timing data exists.
"""

SESSION_WEIGHTS = {
    "direct_impact": 0.35,
    "second_order_effects": 0.30,
    "risk_management": 0.20,
    "time_efficiency": 0.15,
}
"""Weights of the canonical session strategy (ScoreCalculator).

Sums to 1.0. Timing carries more weight here because session decisions carry
real measured decision times.
"""


# =============================================================================
# CASCADE & DELAY
# =============================================================================

CASCADE_GROWTH_PREVIEW = 1.10
"""Cascade multiplier growth per second-order consequence (preview strategy).

The multiplier starts at 1.0 and is multiplied by this value after each
second-order consequence, in decision order. Only the numerator is amplified,
so the result is clamped to [0, 100].
"""

CASCADE_GROWTH_SESSION = 1.15
"""Cascade multiplier growth per second-order consequence (session strategy)."""

CASCADE_MULTIPLIER_CAP = 2.0
"""Ceiling for the session cascade multiplier.

Without a cap a long session would let its last few second-order consequences
drown out everything before them.
"""

DELAY_PENALTIES = (
    (5, 1.0),
    (30, 0.9),
    (120, 0.8),
)
"""(max_delay_minutes, factor) bands for the delay penalty, checked in order."""

DELAY_PENALTY_FLOOR = 0.7
"""Delay factor for consequences resolving more than 120 minutes out."""


# =============================================================================
# RISK MANAGEMENT
# =============================================================================

PREVIEW_RISK_SCORES = {"low": 100.0, "medium": 70.0, "high": 40.0}
"""Base risk score per decision for the preview strategy (caution rewarded)."""

SESSION_RISK_SCORES = {"low": 30.0, "medium": 70.0, "high": 100.0}
"""Base risk score per decision for the session strategy.

Inverted relative to the preview strategy: decisive action is rewarded, and
recklessness is reined in by the balance penalty.
"""

RISK_BALANCE_PENALTY = 5.0
"""Points subtracted per unit of |count(high) - count(low)|."""

PROFILE_ALIGNMENT_BONUS = 20.0
"""Flat bonus per decision whose risk level matches the trainee's profile."""

CONSISTENCY_BONUS_SCALE = 15.0
"""Consistency bonus = (share of the most common risk level) * this value."""

ADAPTABILITY_STEP = 5.0
"""Bonus per risk escalation immediately following a negative-impact decision."""

ADAPTABILITY_CAP = 20.0
"""Ceiling for the total adaptability bonus."""

PROFILE_OPTIMAL_RISK = {
    "conservative": "low",
    "balanced": "medium",
    "aggressive": "high",
}
"""Risk level each declared risk profile is expected to favour."""

INFERRED_HIGH_AVG_IMPACT = 70.0
"""Average consequence impact above which a session decision is inferred high risk."""

INFERRED_MEDIUM_AVG_IMPACT = 40.0
"""Average consequence impact above which a session decision is inferred medium risk."""

HIGH_IMPACT_THRESHOLD = 70.0
"""A consequence with impact above this counts as high-impact."""


# =============================================================================
# TIME EFFICIENCY
# =============================================================================

NO_LIMIT_TIME_EFFICIENCY = 100.0
"""Time efficiency credited to a decision made without a time limit."""

TIME_RUSHED_RATIO = 0.6
"""Below this fraction of the limit a decision is considered rushed."""

TIME_OPTIMAL_RATIO = 0.8
"""Upper edge of the optimal timing band (0.6-0.8 of the limit)."""

OVERTIME_SLOPE = 50.0
"""Points lost per whole time limit overrun beyond 1.0."""

DIFFICULTY_STEP = 0.1
"""Total-score multiplier gained per difficulty level above 1."""

DIFFICULTY_MULTIPLIER_CAP = 1.5
"""Ceiling for the difficulty multiplier."""

PERCENTILE_BANDS = (
    (90.0, 95.0),
    (80.0, 85.0),
    (70.0, 70.0),
    (60.0, 55.0),
    (50.0, 40.0),
)
"""(min_total_score, percentile) bands; anything lower maps to 25.

Fixed approximation until historical score distributions are available.
"""

PERCENTILE_FLOOR = 25.0


# =============================================================================
# SCORE BANDS (explanations and suggestions)
# =============================================================================

EXCELLENT_BAND = 80.0
GOOD_BAND = 60.0
MODERATE_BAND = 40.0

SEVERITY_BANDS = (
    (80.0, "critical"),
    (60.0, "high"),
    (40.0, "medium"),
)
"""(min_impact, severity) bands for consequence severity; lower is 'low'."""


# =============================================================================
# IMPACT ANALYSIS
# =============================================================================

DEFAULT_DECISION_TIME_LIMIT_MS = 300_000
"""Time limit assumed by the impact analyzer for states without one (5 minutes)."""

IMPLICIT_STAKEHOLDER_THRESHOLD = 2
"""Implicit stakeholder groups are synthesized when fewer explicit characters exist."""

ROLE_CONCERNS = {
    "Executive": ["Strategic outcomes", "Organizational reputation", "Financial impact"],
    "Manager": ["Team safety", "Operational continuity", "Resource allocation"],
    "Technical": ["System integrity", "Data security", "Technical feasibility"],
    "Customer Service": ["Customer satisfaction", "Service quality", "Communication"],
    "General Staff": ["Job security", "Work environment", "Clear direction"],
}

DEFAULT_CONCERNS = ["General welfare", "Clear communication", "Fair treatment"]

ROLE_INFLUENCE = {
    "Executive": "high",
    "Manager": "medium",
    "Technical": "medium",
    "Customer Service": "low",
    "General Staff": "low",
}

DEFAULT_ROLE = "General Staff"

REGULATED_DOMAIN_KEYWORDS = ("healthcare", "finance")
"""Scenario context words that add an implicit 'Regulatory Bodies' group."""

CHAIN_EXTENSION_LIMIT = 2
"""Maximum number of follow-on consequences appended to a cascade chain."""

AMPLIFICATION_LOOKBACK = 3
"""Number of prior decisions checked for amplification."""

COMPOUNDING_LOOKBACK = 2
"""Number of prior decisions checked for compounding effects."""

AMPLIFICATION_PER_KEYWORD = 0.2
AMPLIFICATION_MIN_FACTOR = 1.1
COMPOUNDING_PER_KEYWORD = 0.3

AMPLIFICATION_RISK_SCALE = 20.0
"""Cascade risk points contributed per unit of amplification above 1.0."""

CASCADE_RISK_ALERT = 70.0
"""Cascade risk score above which a Risk Mitigation opportunity is raised."""

STAKEHOLDER_ALERT = 40.0
"""Most-affected-group impact below which Stakeholder Management is raised."""

TIME_MANAGEMENT_ALERT = 80.0
"""Single-decision time efficiency below which Time Management is raised."""

KEYWORD_MIN_LENGTH = 4
KEYWORD_LIMIT = 10
KEYWORD_STOPWORDS = frozenset({"this", "that", "with", "from", "they", "will", "have", "been"})

IRREVERSIBILITY_LEXICON = ("permanent", "irreversible", "destroyed", "lost", "terminated")
PRESSURE_LEXICON = ("urgent", "critical", "emergency", "crisis", "immediate")
CONSTRAINT_LEXICON = ("limited", "shortage", "insufficient", "constrained", "budget")
INFORMATION_GAP_LEXICON = ("unknown", "unclear", "uncertain", "missing", "incomplete")

RISK_LEVEL_POINTS = {"low": 1, "medium": 2, "high": 3}
OVERALL_RISK_HIGH = 2.5
OVERALL_RISK_MEDIUM = 1.5

HIGH_CRITICALITY = 8
"""Criticality score (1-10 scale) at or above which a state is flagged critical."""

SEVERE_TIME_LIMIT_SECONDS = 120
"""Time limits below this many seconds count as a severe time constraint."""

IMPLICIT_CUSTOMER_GROUP = {
    "name": "Customers",
    "members": 100,
    "primary_concerns": ["Service availability", "Data security", "Communication"],
    "influence_level": "high",
}
"""Synthesized when few characters are present and none has a customer role.

The member count is an estimate; no scenario carries real headcounts.
"""

IMPLICIT_REGULATORY_GROUP = {
    "name": "Regulatory Bodies",
    "members": 5,
    "primary_concerns": ["Compliance", "Public safety", "Transparency"],
    "influence_level": "high",
}

MITIGATION_IMPACT_CEILING = 70.0
"""A high-influence group has high mitigation potential if any relevant impact is below this."""

MULTI_STAKEHOLDER_IMPACT = 60.0
CROSS_BOUNDARY_SECOND_ORDER_COUNT = 2

CRITICAL_LINK_IMPACT = 70.0
CRITICAL_CONSEQUENCE_IMPACT = 80.0
SUSTAINED_EFFECT_IMPACT = 50.0
UNCERTAIN_PROBABILITY = 0.7
"""Consequences below this probability count toward uncertainty risk."""

LOW_CONFIDENCE_PROBABILITY = 0.6
"""Consequences below this probability trigger information-gathering suggestions."""

DECISION_TIME_EFFICIENCY_BANDS = (
    (0.6, 70.0),
    (0.8, 90.0),
    (1.0, 100.0),
)
"""(max_ratio, efficiency) bands for a single decision's time efficiency.

Beyond the last band efficiency is 100 - (ratio - 1) * 50, floored at 30.
"""

DECISION_TIME_EFFICIENCY_FLOOR = 30.0
