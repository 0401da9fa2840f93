"""Session and score records for Deep-Think.

SessionDecision is the append-only log entry written once per accepted
transition. ScoreResult and ScoreBreakdown are produced by the score
calculators and consumed read-only by feedback and reporting layers.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from deepthink.models.scenario import Consequence, RiskLevel


class RiskProfile(str, Enum):
    """A trainee's declared risk posture.

    Inherits from str for proper JSON serialization.
    """

    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


class SessionDecision(BaseModel):
    """One accepted decision in a training session.

    Attributes:
        id: Record identifier
        decision_id: Id of the Decision chosen
        session_id: Owning session, if any
        state_id: State the decision was made in
        decision_text: Text of the chosen Decision
        timestamp: ISO-8601 time the decision was accepted
        time_taken_ms: Time the trainee took to decide
        score_impact: Probability-weighted mean consequence impact [-100, 100]
        consequences: The chosen Decision's consequences
        user_confidence: Self-reported confidence, 1-5
        risk_level: Declared risk of the chosen Decision
        time_limit_ms: State time limit in force when deciding (None = untimed)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    decision_id: str = Field(default="")
    session_id: str | None = Field(default=None)
    state_id: str = Field(min_length=1)
    decision_text: str = Field(default="")
    timestamp: str = Field(default="")
    time_taken_ms: int = Field(ge=0)
    score_impact: float = Field(default=0.0, ge=-100.0, le=100.0)
    consequences: list[Consequence] = Field(default_factory=list)
    user_confidence: int | None = Field(default=None, ge=1, le=5)
    risk_level: RiskLevel | None = Field(default=None)
    time_limit_ms: int | None = Field(default=None, gt=0)


class ScoreBreakdown(BaseModel):
    """Score and explanation for one scoring category."""

    model_config = ConfigDict(frozen=True)

    category: str
    score: int = Field(ge=0, le=100)
    max_score: int = Field(default=100)
    explanation: str
    improvement_suggestions: list[str] = Field(default_factory=list, max_length=5)


class ScoreResult(BaseModel):
    """Composite score of a decision sequence.

    All sub-scores and the total lie in [0, 100] and are rounded to two
    decimals. ``breakdown`` has one entry per category, or none for an empty
    decision sequence.
    """

    model_config = ConfigDict(frozen=True)

    total_score: float = Field(ge=0.0, le=100.0)
    direct_impact: float = Field(ge=0.0, le=100.0)
    second_order_effects: float = Field(ge=0.0, le=100.0)
    risk_management: float = Field(ge=0.0, le=100.0)
    time_efficiency: float = Field(ge=0.0, le=100.0)
    breakdown: list[ScoreBreakdown] = Field(default_factory=list, max_length=4)
    percentile: float | None = Field(default=None)

    @classmethod
    def empty(cls, percentile: float | None = None) -> ScoreResult:
        """The all-zero result returned for an empty decision sequence."""
        return cls(
            total_score=0.0,
            direct_impact=0.0,
            second_order_effects=0.0,
            risk_management=0.0,
            time_efficiency=0.0,
            breakdown=[],
            percentile=percentile,
        )
