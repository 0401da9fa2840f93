"""In-memory training session for Deep-Think.

TrainingSession is the caller the engine was designed around: it owns one
ScenarioStateManager and one DecisionBranchHandler for a single trainee,
turns every accepted transition into an immutable SessionDecision, and
scores or analyzes the run on demand.

Sessions perform no I/O. snapshot() returns a serializable SessionSnapshot;
persisting it is the caller's job, and resume() rebuilds an equivalent
session from it.

Usage:
    session = TrainingSession(graph, risk_profile=RiskProfile.AGGRESSIVE)
    result = session.submit_decision("evacuate", time_taken_ms=45_000)
    if not result.success:
        print(result.error)
    print(session.score().total_score)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, Field

from deepthink.engine.branching import DecisionBranchHandler, TransitionResult
from deepthink.engine.state_manager import ScenarioStateManager
from deepthink.models.scenario import Decision, ScenarioGraph, ScenarioState, clamp
from deepthink.models.session import RiskProfile, ScoreResult, SessionDecision
from deepthink.scoring.base import BaseScoreCalculator
from deepthink.scoring.impact import DecisionImpactAnalysis, ImpactAnalyzer
from deepthink.scoring.score_calculator import ScoreCalculator


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def score_impact_of(decision: Decision) -> float:
    """Probability-weighted mean impact of a decision's consequences, in [-100, 100]."""
    consequences = decision.consequences
    if not consequences:
        return 0.0
    mean = sum(c.impact_score * c.probability for c in consequences) / len(consequences)
    return clamp(mean, -100.0, 100.0)


@dataclass
class SessionMetrics:
    """Progress summary of a session.

    Attributes:
        decisions_count: Accepted decisions so far
        total_time_ms: Sum of decision times
        average_decision_time_ms: Mean decision time (0 with no decisions)
        current_score: Canonical total score of the decisions so far
    """

    decisions_count: int
    total_time_ms: int
    average_decision_time_ms: float
    current_score: float


class SessionSnapshot(BaseModel):
    """Serializable state of a session, sufficient to resume it."""

    session_id: str
    scenario_id: Optional[str] = None
    risk_profile: RiskProfile = RiskProfile.BALANCED
    state_history: list[str] = Field(min_length=1)
    decisions: list[SessionDecision] = Field(default_factory=list)


class TrainingSession:
    """One trainee's run through a scenario graph.

    Attributes:
        graph: Scenario being played
        risk_profile: Declared risk posture used for scoring
        session_id: Identifier stamped on every SessionDecision
    """

    def __init__(
        self,
        graph: ScenarioGraph,
        risk_profile: RiskProfile = RiskProfile.BALANCED,
        session_id: str | None = None,
        clock: Callable[[], datetime] | None = None,
        analyzer: ImpactAnalyzer | None = None,
    ) -> None:
        """Start a session at the graph's initial state.

        Args:
            graph: Scenario to play
            risk_profile: Trainee's declared risk posture
            session_id: Session identifier (default: random UUID)
            clock: Source of decision timestamps (default: UTC now)
            analyzer: Impact analyzer (default: keyword-based ImpactAnalyzer)
        """
        self.graph = graph
        self.risk_profile = RiskProfile(risk_profile)
        self.session_id = session_id or str(uuid.uuid4())
        self._clock = clock or _utc_now
        self._analyzer = analyzer or ImpactAnalyzer()

        self._state_manager = ScenarioStateManager(graph.initial_state)
        self._handler = DecisionBranchHandler(graph, self._state_manager)
        self._decisions: list[SessionDecision] = []
        self._decision_states: list[ScenarioState] = []

    # =========================================================================
    # Play
    # =========================================================================

    def submit_decision(
        self,
        decision_id: str,
        time_taken_ms: int,
        user_confidence: int | None = None,
        user_context: Mapping[str, Any] | None = None,
    ) -> TransitionResult:
        """Submit the trainee's choice in the current state.

        Args:
            decision_id: Id of the chosen decision
            time_taken_ms: Time the trainee took to decide
            user_confidence: Optional self-reported confidence, 1-5
            user_context: Facts about the trainee available to branch conditions

        Returns:
            TransitionResult from the branch handler. A SessionDecision is
            recorded only when it succeeds.

        Raises:
            ValueError: If time_taken_ms is negative or user_confidence is
                outside 1-5
        """
        if time_taken_ms < 0:
            raise ValueError(f"time_taken_ms must be non-negative, got {time_taken_ms}")
        if user_confidence is not None and not 1 <= user_confidence <= 5:
            raise ValueError(f"user_confidence must be in [1, 5], got {user_confidence}")

        state = self._state_manager.get_current_state()
        decision = self._state_manager.get_decision(decision_id)

        result = self._handler.process_decision(decision_id, time_taken_ms, user_context)
        if not result.success or decision is None:
            return result

        self._append_record(
            state,
            SessionDecision(
                id=str(uuid.uuid4()),
                decision_id=decision.id,
                session_id=self.session_id,
                state_id=state.id,
                decision_text=decision.text,
                timestamp=self._clock().isoformat(),
                time_taken_ms=int(time_taken_ms),
                score_impact=score_impact_of(decision),
                consequences=[c.model_copy(deep=True) for c in decision.consequences],
                user_confidence=user_confidence,
                risk_level=decision.risk_level,
                time_limit_ms=state.time_limit_seconds * 1000 if state.time_limit_seconds else None,
            ),
        )
        return result

    def _append_record(self, state: ScenarioState, record: SessionDecision) -> None:
        self._decisions.append(record)
        self._decision_states.append(state)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def state_manager(self) -> ScenarioStateManager:
        return self._state_manager

    @property
    def handler(self) -> DecisionBranchHandler:
        return self._handler

    @property
    def decisions(self) -> list[SessionDecision]:
        """Copies of the accepted decisions, oldest first."""
        return [record.model_copy(deep=True) for record in self._decisions]

    @property
    def state_history(self) -> list[str]:
        return self._state_manager.get_state_history()

    @property
    def current_state(self) -> ScenarioState:
        return self._state_manager.get_current_state()

    @property
    def is_complete(self) -> bool:
        """True once a terminal state has been reached."""
        return self._state_manager.is_terminal_state()

    def score(self, calculator: BaseScoreCalculator | None = None) -> ScoreResult:
        """Score the session so far.

        Args:
            calculator: Scoring strategy (default: the canonical ScoreCalculator)
        """
        calculator = calculator or ScoreCalculator()
        return calculator.score_session(
            self._decisions, self.risk_profile, self.graph.difficulty_level
        )

    def analyze_decision(self, index: int) -> DecisionImpactAnalysis:
        """Impact analysis of the ``index``-th accepted decision.

        The state the decision was made in and all earlier decisions form the
        analysis context.

        Raises:
            IndexError: If index is not in [0, len(decisions))
        """
        if not 0 <= index < len(self._decisions):
            raise IndexError(
                f"Decision index {index} out of range for {len(self._decisions)} decisions"
            )
        return self._analyzer.analyze_decision_impact(
            self._decisions[index],
            self._decision_states[index],
            self._decisions[:index],
        )

    def metrics(self) -> SessionMetrics:
        count = len(self._decisions)
        total_time = sum(record.time_taken_ms for record in self._decisions)
        return SessionMetrics(
            decisions_count=count,
            total_time_ms=total_time,
            average_decision_time_ms=total_time / count if count else 0.0,
            current_score=self.score().total_score,
        )

    # =========================================================================
    # Persistence support
    # =========================================================================

    def snapshot(self) -> SessionSnapshot:
        """Capture everything needed to resume this session."""
        return SessionSnapshot(
            session_id=self.session_id,
            scenario_id=self.graph.scenario_id,
            risk_profile=self.risk_profile,
            state_history=self._state_manager.get_state_history(),
            decisions=self.decisions,
        )

    @classmethod
    def resume(
        cls,
        graph: ScenarioGraph,
        snapshot: SessionSnapshot,
        clock: Callable[[], datetime] | None = None,
        analyzer: ImpactAnalyzer | None = None,
    ) -> TrainingSession:
        """Rebuild a session by replaying a snapshot against ``graph``.

        The state manager is reset to the initial state and every recorded
        decision is re-applied along its branch, which must lead to the next
        state in the snapshot's history. Branch conditions are not
        re-evaluated; they held when the decisions were first accepted.

        Raises:
            ValueError: If the snapshot does not describe a path through graph
        """
        session = cls(
            graph,
            risk_profile=snapshot.risk_profile,
            session_id=snapshot.session_id,
            clock=clock,
            analyzer=analyzer,
        )
        history = snapshot.state_history
        if len(history) != len(snapshot.decisions) + 1:
            raise ValueError(
                f"Snapshot has {len(history)} states for {len(snapshot.decisions)} decisions"
            )
        if history[0] != graph.initial_state.id:
            raise ValueError(
                f"Snapshot starts at '{history[0]}', scenario starts at '{graph.initial_state.id}'"
            )

        manager = session._state_manager
        manager.reset(graph.initial_state)
        for i, record in enumerate(snapshot.decisions):
            state = manager.get_current_state()
            if record.state_id != state.id:
                raise ValueError(
                    f"Decision {i} was made in '{record.state_id}', replay is at '{state.id}'"
                )
            decision = manager.get_decision(record.decision_id)
            if decision is None:
                raise ValueError(f"Unknown decision '{record.decision_id}' in state '{state.id}'")
            branch = graph.find_branch(state.id, decision.id)
            if branch is None:
                raise ValueError(f"No branch for decision '{decision.id}' in state '{state.id}'")
            if branch.to_state_id != history[i + 1]:
                raise ValueError(
                    f"Decision '{decision.id}' leads to '{branch.to_state_id}', "
                    f"snapshot records '{history[i + 1]}'"
                )
            next_state = graph.get_state(branch.to_state_id)
            if next_state is None:
                raise ValueError(f"Unknown state '{history[i + 1]}' in snapshot")

            manager.record_decision(decision)
            manager.update_state(next_state)
            session._append_record(state, record.model_copy(deep=True))

        return session
