"""Decision impact analysis for Deep-Think.

ImpactAnalyzer explains why a single decision scored as it did. Given the
SessionDecision, the ScenarioState it was made in, and the decisions made
before it, it reports:

- Stakeholder impact: groups derived from the state's characters (plus
  implicit Customers / Regulatory Bodies when few characters are present),
  each scored by the consequences touching its primary concerns
- Cascade analysis: chains of later second-order effects within the
  decision, amplification and compounding against recent decisions, and a
  cascade risk score in [0, 100]
- Risk assessment: probability, magnitude, timing, uncertainty and
  reversibility, each low/medium/high, plus an overall level
- Timeline impact: immediate (<= 5 min), short-term (<= 60 min) and long-term
  buckets and the overall temporal pattern
- Contextual factors: keyword-driven ratings of the scenario text
- Improvement opportunities: rule-based follow-ups

Analysis is a pure function of its inputs and never raises on schema-valid
data. All text matching goes through an injectable KeywordMatcher.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence

from deepthink.models.scenario import Consequence, ConsequenceKind, RiskLevel, ScenarioState
from deepthink.models.session import SessionDecision
from deepthink.parameters import (
    AMPLIFICATION_LOOKBACK,
    AMPLIFICATION_MIN_FACTOR,
    AMPLIFICATION_PER_KEYWORD,
    AMPLIFICATION_RISK_SCALE,
    CASCADE_RISK_ALERT,
    CHAIN_EXTENSION_LIMIT,
    COMPOUNDING_LOOKBACK,
    COMPOUNDING_PER_KEYWORD,
    CONSTRAINT_LEXICON,
    CRITICAL_CONSEQUENCE_IMPACT,
    CRITICAL_LINK_IMPACT,
    CROSS_BOUNDARY_SECOND_ORDER_COUNT,
    DECISION_TIME_EFFICIENCY_BANDS,
    DECISION_TIME_EFFICIENCY_FLOOR,
    DEFAULT_CONCERNS,
    DEFAULT_DECISION_TIME_LIMIT_MS,
    DEFAULT_ROLE,
    DELAYED_PATTERN_MINUTES,
    HIGH_CRITICALITY,
    HIGH_IMPACT_THRESHOLD,
    IMPLICIT_CUSTOMER_GROUP,
    IMPLICIT_REGULATORY_GROUP,
    IMPLICIT_STAKEHOLDER_THRESHOLD,
    INFORMATION_GAP_LEXICON,
    IRREVERSIBILITY_LEXICON,
    LOW_CONFIDENCE_PROBABILITY,
    MITIGATION_IMPACT_CEILING,
    MULTI_STAKEHOLDER_IMPACT,
    OVERALL_RISK_HIGH,
    OVERALL_RISK_MEDIUM,
    PRESSURE_LEXICON,
    REGULATED_DOMAIN_KEYWORDS,
    RISK_LEVEL_POINTS,
    ROLE_CONCERNS,
    ROLE_INFLUENCE,
    SEVERE_TIME_LIMIT_SECONDS,
    SHORT_TERM_DELAY_MINUTES,
    STAKEHOLDER_ALERT,
    SUSTAINED_EFFECT_IMPACT,
    TIME_MANAGEMENT_ALERT,
    UNCERTAIN_PROBABILITY,
)
from deepthink.scoring.text_matching import KeywordMatcher

Rating = Literal["low", "medium", "high"]
TemporalPattern = Literal["immediate", "gradual", "delayed", "mixed"]


# =============================================================================
# Result types
# =============================================================================


@dataclass
class StakeholderGroup:
    """A set of people affected alike by a decision."""

    name: str
    members: int
    primary_concerns: list[str]
    influence_level: Rating


@dataclass
class StakeholderGroupImpact:
    """Impact of a decision on one stakeholder group.

    Attributes:
        group_name: Name of the group
        impact_score: Mean probability-weighted impact of relevant consequences
        affected_members: Group size
        primary_concerns: Concerns used to select relevant consequences
        consequences: Consequences touching the group's concerns
        mitigation_potential: How much the group can soften the impact
    """

    group_name: str
    impact_score: float
    affected_members: int
    primary_concerns: list[str]
    consequences: list[Consequence]
    mitigation_potential: Rating


@dataclass
class StakeholderImpactAnalysis:
    total_stakeholders: int
    impact_by_group: dict[str, StakeholderGroupImpact]
    most_affected_group: Optional[str]
    cross_group_effects: list[str]


@dataclass
class CascadeChain:
    """A consequence followed by later second-order effects of the same decision."""

    initiating_consequence: Consequence
    chain_length: int
    total_impact: float
    critical_links: list[Consequence]


@dataclass
class AmplificationFactor:
    source_decision_id: str
    factor: float
    mechanism: str
    shared_elements: list[str]


@dataclass
class CompoundingEffect:
    source_decision_id: str
    compounding_factor: float
    shared_elements: list[str]
    description: str


@dataclass
class CascadeAnalysis:
    """Cascading-effect analysis of a decision.

    Attributes:
        direct_effects_count: Number of direct consequences
        second_order_effects_count: Number of second-order consequences
        cascade_chains: Chains of length > 1
        amplification_factors: Recent decisions amplifying this one (> 1.1)
        compounding_effects: Recent decisions sharing consequence keywords
        cascade_risk_score: Combined chain density and amplification, 0-100
        mitigation_strategies: Fixed strategies, present when any chain exists
    """

    direct_effects_count: int
    second_order_effects_count: int
    cascade_chains: list[CascadeChain]
    amplification_factors: list[AmplificationFactor]
    compounding_effects: list[CompoundingEffect]
    cascade_risk_score: float
    mitigation_strategies: list[str]


@dataclass
class RiskDimensions:
    probability: RiskLevel
    magnitude: RiskLevel
    timing: RiskLevel
    uncertainty: RiskLevel
    reversibility: RiskLevel

    def as_list(self) -> list[RiskLevel]:
        return [self.probability, self.magnitude, self.timing, self.uncertainty, self.reversibility]


@dataclass
class RiskAssessment:
    overall_risk_level: RiskLevel
    risk_dimensions: RiskDimensions
    mitigation_suggestions: list[str]
    contingency_planning: list[str]


@dataclass
class ImmediateImpact:
    count: int
    average_score: float
    critical_effects: list[Consequence]


@dataclass
class ShortTermImpact:
    count: int
    average_score: float
    peak_impact_time: int
    """Delay in minutes of the strongest short-term effect (0 if none)."""


@dataclass
class LongTermImpact:
    count: int
    average_score: float
    sustained_effects: list[Consequence]


@dataclass
class TimelineImpactAnalysis:
    immediate_impact: ImmediateImpact
    short_term_impact: ShortTermImpact
    long_term_impact: LongTermImpact
    temporal_pattern: TemporalPattern


@dataclass
class ContextualFactorAnalysis:
    scenario_complexity: Rating
    environmental_pressure: Rating
    resource_constraints: Rating
    stakeholder_dynamics: Literal["simple", "moderate", "complex"]
    time_constraints: Literal["relaxed", "moderate", "tight"]
    information_availability: Literal["complete", "partial", "limited"]
    contextual_risk_factors: list[str] = field(default_factory=list)


@dataclass
class ImprovementOpportunity:
    category: str
    description: str
    priority: Rating
    actionable_steps: list[str]


@dataclass
class DecisionImpactAnalysis:
    """Complete impact report for one decision."""

    decision_id: str
    overall_impact_score: float
    stakeholder_impact: StakeholderImpactAnalysis
    cascade_analysis: CascadeAnalysis
    risk_assessment: RiskAssessment
    timeline_impact: TimelineImpactAnalysis
    contextual_factors: ContextualFactorAnalysis
    improvement_opportunities: list[ImprovementOpportunity]


# =============================================================================
# Helpers
# =============================================================================


def _average_impact(consequences: Sequence[Consequence]) -> float:
    if not consequences:
        return 0.0
    return sum(c.impact_score for c in consequences) / len(consequences)


def _weighted_mean_impact(consequences: Sequence[Consequence]) -> float:
    if not consequences:
        return 0.0
    return sum(c.impact_score * c.probability for c in consequences) / len(consequences)


def _rate(value: float, high: float, medium: float) -> RiskLevel:
    """HIGH above ``high``, MEDIUM above ``medium``, else LOW."""
    if value > high:
        return RiskLevel.HIGH
    if value > medium:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _count_rating(count: int) -> Rating:
    if count > 2:
        return "high"
    if count > 0:
        return "medium"
    return "low"


def _group_from_template(template: dict) -> StakeholderGroup:
    return StakeholderGroup(
        name=template["name"],
        members=template["members"],
        primary_concerns=list(template["primary_concerns"]),
        influence_level=template["influence_level"],
    )


def decision_time_limit_ms(state: ScenarioState) -> int:
    """Time limit of a state in milliseconds (five minutes when untimed)."""
    if state.time_limit_seconds:
        return state.time_limit_seconds * 1000
    return DEFAULT_DECISION_TIME_LIMIT_MS


def decision_time_efficiency(time_taken_ms: float, time_limit_ms: float) -> float:
    """Time efficiency of a single decision against its limit."""
    ratio = time_taken_ms / time_limit_ms
    for max_ratio, efficiency in DECISION_TIME_EFFICIENCY_BANDS:
        if ratio <= max_ratio:
            return efficiency
    return max(DECISION_TIME_EFFICIENCY_FLOOR, 100.0 - (ratio - 1.0) * 50.0)


class ImpactAnalyzer:
    """Multi-dimensional impact analysis of single decisions.

    Attributes:
        matcher: Keyword heuristics used for all text matching
    """

    def __init__(self, matcher: KeywordMatcher | None = None) -> None:
        self.matcher = matcher or KeywordMatcher()

    # =========================================================================
    # Public API
    # =========================================================================

    def analyze_decision_impact(
        self,
        decision: SessionDecision,
        scenario_state: ScenarioState,
        previous_decisions: Sequence[SessionDecision] = (),
    ) -> DecisionImpactAnalysis:
        """Analyze one decision in its scenario and session context.

        Args:
            decision: The decision to analyze
            scenario_state: The state the decision was made in
            previous_decisions: Decisions made earlier in the session, oldest first

        Returns:
            DecisionImpactAnalysis
        """
        previous = list(previous_decisions)
        stakeholder_impact = self.analyze_stakeholder_impact(decision, scenario_state)
        cascade_analysis = self.analyze_cascading_effects(decision, previous)

        return DecisionImpactAnalysis(
            decision_id=decision.id,
            overall_impact_score=_weighted_mean_impact(decision.consequences),
            stakeholder_impact=stakeholder_impact,
            cascade_analysis=cascade_analysis,
            risk_assessment=self.assess_decision_risk(decision, scenario_state),
            timeline_impact=self.analyze_timeline_impact(decision),
            contextual_factors=self.analyze_contextual_factors(decision, scenario_state),
            improvement_opportunities=self.identify_improvement_opportunities(
                decision, scenario_state, stakeholder_impact, cascade_analysis
            ),
        )

    # =========================================================================
    # Stakeholders
    # =========================================================================

    def analyze_stakeholder_impact(
        self, decision: SessionDecision, scenario_state: ScenarioState
    ) -> StakeholderImpactAnalysis:
        groups = self.identify_stakeholder_groups(scenario_state)
        impact_by_group: dict[str, StakeholderGroupImpact] = {}

        for group in groups:
            relevant = [
                c
                for c in decision.consequences
                if self.matcher.is_relevant(c.description, group.primary_concerns)
            ]
            impact_by_group[group.name] = StakeholderGroupImpact(
                group_name=group.name,
                impact_score=_weighted_mean_impact(relevant),
                affected_members=group.members,
                primary_concerns=list(group.primary_concerns),
                consequences=relevant,
                mitigation_potential=self._mitigation_potential(relevant, group),
            )

        most_affected: Optional[str] = None
        if impact_by_group:
            most_affected = max(impact_by_group.values(), key=lambda g: g.impact_score).group_name

        return StakeholderImpactAnalysis(
            total_stakeholders=sum(group.members for group in groups),
            impact_by_group=impact_by_group,
            most_affected_group=most_affected,
            cross_group_effects=self._cross_group_effects(decision.consequences, groups),
        )

    def identify_stakeholder_groups(self, scenario_state: ScenarioState) -> list[StakeholderGroup]:
        """Explicit groups by character role, then implicit groups if few characters.

        An implicit group is skipped when a character role already has its name.
        """
        by_role: dict[str, int] = {}
        for character in scenario_state.characters:
            role = character.role or DEFAULT_ROLE
            by_role[role] = by_role.get(role, 0) + 1

        groups = [
            StakeholderGroup(
                name=role,
                members=members,
                primary_concerns=list(ROLE_CONCERNS.get(role, DEFAULT_CONCERNS)),
                influence_level=ROLE_INFLUENCE.get(role, "low"),
            )
            for role, members in by_role.items()
        ]
        explicit_names = {group.name for group in groups}
        groups.extend(
            group
            for group in self._implicit_groups(scenario_state)
            if group.name not in explicit_names
        )
        return groups

    def _implicit_groups(self, scenario_state: ScenarioState) -> list[StakeholderGroup]:
        characters = scenario_state.characters
        if len(characters) >= IMPLICIT_STAKEHOLDER_THRESHOLD:
            return []

        groups = []
        if not any(self.matcher.mentions(c.role, "customer") for c in characters):
            groups.append(_group_from_template(IMPLICIT_CUSTOMER_GROUP))
        if self.matcher.mentions_any(scenario_state.context, REGULATED_DOMAIN_KEYWORDS):
            groups.append(_group_from_template(IMPLICIT_REGULATORY_GROUP))
        return groups

    def _mitigation_potential(
        self, consequences: Sequence[Consequence], group: StakeholderGroup
    ) -> Rating:
        if group.influence_level == "high" and any(
            c.impact_score < MITIGATION_IMPACT_CEILING for c in consequences
        ):
            return "high"
        if group.influence_level == "medium":
            return "medium"
        return "low"

    def _cross_group_effects(
        self, consequences: Sequence[Consequence], groups: Sequence[StakeholderGroup]
    ) -> list[str]:
        effects = []
        if len(groups) > 2 and any(c.impact_score > MULTI_STAKEHOLDER_IMPACT for c in consequences):
            effects.append("Multi-stakeholder impact detected")
        if sum(1 for c in consequences if c.is_second_order) > CROSS_BOUNDARY_SECOND_ORDER_COUNT:
            effects.append("Cascading effects across stakeholder boundaries")
        return effects

    # =========================================================================
    # Cascades
    # =========================================================================

    def analyze_cascading_effects(
        self, decision: SessionDecision, previous_decisions: Sequence[SessionDecision]
    ) -> CascadeAnalysis:
        chains = self.identify_cascade_chains(decision)
        amplification = self.calculate_amplification_factors(decision, previous_decisions)
        return CascadeAnalysis(
            direct_effects_count=sum(
                1 for c in decision.consequences if c.kind == ConsequenceKind.DIRECT
            ),
            second_order_effects_count=sum(1 for c in decision.consequences if c.is_second_order),
            cascade_chains=chains,
            amplification_factors=amplification,
            compounding_effects=self.identify_compounding_effects(decision, previous_decisions),
            cascade_risk_score=self._cascade_risk_score(chains, amplification),
            mitigation_strategies=self._cascade_mitigation(chains),
        )

    def identify_cascade_chains(self, decision: SessionDecision) -> list[CascadeChain]:
        """Chains of a consequence plus up to two later second-order effects."""
        chains = []
        for consequence in decision.consequences:
            start_delay = consequence.delay_minutes or 0
            followers = [
                c
                for c in decision.consequences
                if c.id != consequence.id
                and c.is_second_order
                and c.delay_minutes
                and c.delay_minutes > start_delay
            ]
            chain = [consequence] + followers[:CHAIN_EXTENSION_LIMIT]
            if len(chain) > 1:
                chains.append(
                    CascadeChain(
                        initiating_consequence=consequence,
                        chain_length=len(chain),
                        total_impact=sum(c.impact_score for c in chain),
                        critical_links=[c for c in chain if c.impact_score > CRITICAL_LINK_IMPACT],
                    )
                )
        return chains

    def calculate_amplification_factors(
        self, decision: SessionDecision, previous_decisions: Sequence[SessionDecision]
    ) -> list[AmplificationFactor]:
        """Amplification by each of the last three decisions, kept if > 1.1."""
        factors = []
        for previous in list(previous_decisions)[-AMPLIFICATION_LOOKBACK:]:
            shared = self._shared_keywords(decision, previous)
            factor = 1.0 + len(shared) * AMPLIFICATION_PER_KEYWORD
            if factor > AMPLIFICATION_MIN_FACTOR:
                factors.append(
                    AmplificationFactor(
                        source_decision_id=previous.id,
                        factor=factor,
                        mechanism="Compounding effects" if shared else "Independent",
                        shared_elements=shared,
                    )
                )
        return factors

    def identify_compounding_effects(
        self, decision: SessionDecision, previous_decisions: Sequence[SessionDecision]
    ) -> list[CompoundingEffect]:
        """Compounding by each of the last two decisions sharing any keyword."""
        effects = []
        for previous in list(previous_decisions)[-COMPOUNDING_LOOKBACK:]:
            shared = self._shared_keywords(decision, previous)
            if shared:
                effects.append(
                    CompoundingEffect(
                        source_decision_id=previous.id,
                        compounding_factor=1.0 + len(shared) * COMPOUNDING_PER_KEYWORD,
                        shared_elements=shared,
                        description="Compounding effects from similar consequences in previous decision",
                    )
                )
        return effects

    def _shared_keywords(self, current: SessionDecision, previous: SessionDecision) -> list[str]:
        return self.matcher.shared_keywords(
            [c.description for c in current.consequences],
            [c.description for c in previous.consequences],
        )

    def _cascade_risk_score(
        self, chains: Sequence[CascadeChain], factors: Sequence[AmplificationFactor]
    ) -> float:
        chain_risk = sum(chain.total_impact / chain.chain_length for chain in chains)
        amplification_risk = sum((f.factor - 1.0) * AMPLIFICATION_RISK_SCALE for f in factors)
        return max(0.0, min(100.0, chain_risk + amplification_risk))

    def _cascade_mitigation(self, chains: Sequence[CascadeChain]) -> list[str]:
        if not chains:
            return []
        return [
            "Implement cascade interruption strategies at critical decision points",
            "Monitor early warning indicators for cascade initiation",
            "Develop rapid response protocols for cascade mitigation",
        ]

    # =========================================================================
    # Risk
    # =========================================================================

    def assess_decision_risk(
        self, decision: SessionDecision, scenario_state: ScenarioState
    ) -> RiskAssessment:
        consequences = decision.consequences
        dimensions = RiskDimensions(
            probability=self._probability_risk(consequences),
            magnitude=self._magnitude_risk(consequences),
            timing=_rate(
                decision.time_taken_ms / decision_time_limit_ms(scenario_state), 0.8, 0.6
            ),
            uncertainty=self._uncertainty_risk(consequences),
            reversibility=self._reversibility_risk(consequences),
        )
        return RiskAssessment(
            overall_risk_level=self.overall_risk_level(dimensions.as_list()),
            risk_dimensions=dimensions,
            mitigation_suggestions=self._risk_mitigation_suggestions(consequences),
            contingency_planning=self._contingency_planning(consequences),
        )

    @staticmethod
    def overall_risk_level(levels: Sequence[RiskLevel]) -> RiskLevel:
        """Average of 1/2/3 points per level, banded at 2.5 and 1.5."""
        if not levels:
            return RiskLevel.LOW
        average = sum(RISK_LEVEL_POINTS[level.value] for level in levels) / len(levels)
        if average >= OVERALL_RISK_HIGH:
            return RiskLevel.HIGH
        if average >= OVERALL_RISK_MEDIUM:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def _probability_risk(self, consequences: Sequence[Consequence]) -> RiskLevel:
        if not consequences:
            return RiskLevel.LOW
        average = sum(c.probability for c in consequences) / len(consequences)
        return _rate(average, 0.8, 0.5)

    def _magnitude_risk(self, consequences: Sequence[Consequence]) -> RiskLevel:
        if not consequences:
            return RiskLevel.LOW
        return _rate(max(c.impact_score for c in consequences), 80.0, 50.0)

    def _uncertainty_risk(self, consequences: Sequence[Consequence]) -> RiskLevel:
        if not consequences:
            return RiskLevel.LOW
        uncertain = sum(1 for c in consequences if c.probability < UNCERTAIN_PROBABILITY)
        return _rate(uncertain / len(consequences), 0.6, 0.3)

    def _reversibility_risk(self, consequences: Sequence[Consequence]) -> RiskLevel:
        irreversible = sum(
            1
            for c in consequences
            if self.matcher.mentions_any(c.description, IRREVERSIBILITY_LEXICON)
        )
        if irreversible > len(consequences) * 0.5:
            return RiskLevel.HIGH
        if irreversible > 0:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def _risk_mitigation_suggestions(self, consequences: Sequence[Consequence]) -> list[str]:
        suggestions = []
        if any(c.impact_score > HIGH_IMPACT_THRESHOLD for c in consequences):
            suggestions.append("Develop contingency plans for high-impact consequences")
            suggestions.append("Implement monitoring systems for early detection of negative outcomes")
        if any(c.probability < LOW_CONFIDENCE_PROBABILITY for c in consequences):
            suggestions.append("Gather additional information to reduce uncertainty")
            suggestions.append("Consider pilot testing or phased implementation")
        return suggestions

    def _contingency_planning(self, consequences: Sequence[Consequence]) -> list[str]:
        if not any(c.impact_score > CRITICAL_CONSEQUENCE_IMPACT for c in consequences):
            return []
        return [
            "Develop specific response plans for critical consequences",
            "Identify decision reversal or modification triggers",
            "Establish rapid response teams for critical outcomes",
        ]

    # =========================================================================
    # Timeline
    # =========================================================================

    def analyze_timeline_impact(self, decision: SessionDecision) -> TimelineImpactAnalysis:
        consequences = decision.consequences
        immediate = [c for c in consequences if c.is_immediate]
        short_term = [
            c
            for c in consequences
            if not c.is_immediate and c.delay_minutes <= SHORT_TERM_DELAY_MINUTES
        ]
        long_term = [
            c for c in consequences if not c.is_immediate and c.delay_minutes > SHORT_TERM_DELAY_MINUTES
        ]

        peak_time = 0
        if short_term:
            peak = short_term[0]
            for c in short_term[1:]:
                if c.impact_score > peak.impact_score:
                    peak = c
            peak_time = peak.delay_minutes or 0

        return TimelineImpactAnalysis(
            immediate_impact=ImmediateImpact(
                count=len(immediate),
                average_score=_average_impact(immediate),
                critical_effects=[c for c in immediate if c.impact_score > CRITICAL_LINK_IMPACT],
            ),
            short_term_impact=ShortTermImpact(
                count=len(short_term),
                average_score=_average_impact(short_term),
                peak_impact_time=peak_time,
            ),
            long_term_impact=LongTermImpact(
                count=len(long_term),
                average_score=_average_impact(long_term),
                sustained_effects=[c for c in long_term if c.impact_score > SUSTAINED_EFFECT_IMPACT],
            ),
            temporal_pattern=self.temporal_pattern(consequences),
        )

    @staticmethod
    def temporal_pattern(consequences: Sequence[Consequence]) -> TemporalPattern:
        """Classify when a decision's effects land.

        More than 80% immediate is "immediate"; more than 80% delayed beyond
        30 minutes is "delayed"; a mix of both is "mixed"; anything else,
        including no consequences, is "gradual".
        """
        total = len(consequences)
        if total == 0:
            return "gradual"
        immediate = sum(1 for c in consequences if c.is_immediate)
        delayed = sum(
            1 for c in consequences if c.delay_minutes and c.delay_minutes > DELAYED_PATTERN_MINUTES
        )
        if immediate / total > 0.8:
            return "immediate"
        if delayed / total > 0.8:
            return "delayed"
        if immediate > 0 and delayed > 0:
            return "mixed"
        return "gradual"

    # =========================================================================
    # Context
    # =========================================================================

    def analyze_contextual_factors(
        self, decision: SessionDecision, scenario_state: ScenarioState
    ) -> ContextualFactorAnalysis:
        texts = [scenario_state.description, scenario_state.context]
        complexity = (
            len(scenario_state.decisions)
            + len(scenario_state.characters)
            + len(scenario_state.environmental_factors)
        )
        info_gaps = self.matcher.count_lexicon_hits(texts, INFORMATION_GAP_LEXICON)
        if info_gaps > 2:
            information = "limited"
        elif info_gaps > 0:
            information = "partial"
        else:
            information = "complete"

        time_ratio = decision.time_taken_ms / decision_time_limit_ms(scenario_state)
        if time_ratio > 0.8:
            time_constraints = "tight"
        elif time_ratio > 0.5:
            time_constraints = "moderate"
        else:
            time_constraints = "relaxed"

        return ContextualFactorAnalysis(
            scenario_complexity=_rate(complexity, 15, 8).value,
            environmental_pressure=_count_rating(
                self.matcher.count_lexicon_hits(texts, PRESSURE_LEXICON)
            ),
            resource_constraints=_count_rating(
                self.matcher.count_lexicon_hits(texts, CONSTRAINT_LEXICON)
            ),
            stakeholder_dynamics=self._stakeholder_dynamics(scenario_state),
            time_constraints=time_constraints,
            information_availability=information,
            contextual_risk_factors=self._contextual_risk_factors(scenario_state),
        )

    def _stakeholder_dynamics(
        self, scenario_state: ScenarioState
    ) -> Literal["simple", "moderate", "complex"]:
        characters = len(scenario_state.characters)
        roles = len(Counter(c.role for c in scenario_state.characters))
        if characters >= 4 and roles >= 3:
            return "complex"
        if characters >= 3 and roles >= 2:
            return "complex"
        if characters >= 2 or roles >= 2:
            return "moderate"
        return "simple"

    def _contextual_risk_factors(self, scenario_state: ScenarioState) -> list[str]:
        factors = []
        if scenario_state.risk_level == RiskLevel.HIGH:
            factors.append("High baseline risk scenario")
        if scenario_state.criticality_score >= HIGH_CRITICALITY:
            factors.append("Critical system impact potential")
        limit = scenario_state.time_limit_seconds
        if limit and limit < SEVERE_TIME_LIMIT_SECONDS:
            factors.append("Severe time constraints")
        if len(scenario_state.environmental_factors) > 3:
            factors.append("Multiple environmental stressors")
        return factors

    # =========================================================================
    # Improvement opportunities
    # =========================================================================

    def identify_improvement_opportunities(
        self,
        decision: SessionDecision,
        scenario_state: ScenarioState,
        stakeholder_impact: StakeholderImpactAnalysis,
        cascade_analysis: CascadeAnalysis,
    ) -> list[ImprovementOpportunity]:
        opportunities = []

        group = stakeholder_impact.most_affected_group
        if group is not None and stakeholder_impact.impact_by_group[group].impact_score < STAKEHOLDER_ALERT:
            opportunities.append(
                ImprovementOpportunity(
                    category="Stakeholder Management",
                    description=f"Consider the impact on {group} more carefully",
                    priority="high",
                    actionable_steps=[
                        f"Analyze {group} primary concerns before deciding",
                        "Develop stakeholder communication strategy",
                        "Consider alternative approaches that better serve this group",
                    ],
                )
            )

        if cascade_analysis.cascade_risk_score > CASCADE_RISK_ALERT:
            opportunities.append(
                ImprovementOpportunity(
                    category="Risk Mitigation",
                    description="High cascade risk detected - implement preventive measures",
                    priority="high",
                    actionable_steps=[
                        "Identify cascade interruption points",
                        "Develop contingency plans for high-risk chains",
                        "Monitor early warning indicators",
                    ],
                )
            )

        efficiency = decision_time_efficiency(
            decision.time_taken_ms, decision_time_limit_ms(scenario_state)
        )
        if efficiency < TIME_MANAGEMENT_ALERT:
            opportunities.append(
                ImprovementOpportunity(
                    category="Time Management",
                    description="Improve decision timing and time allocation",
                    priority="medium",
                    actionable_steps=[
                        "Practice rapid decision-making frameworks",
                        "Identify decisions that require immediate vs deliberate response",
                        "Develop time-boxing strategies for complex decisions",
                    ],
                )
            )

        return opportunities
