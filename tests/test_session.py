"""Tests for deepthink.engine.session.

Tests cover:
- Recording accepted decisions and ignoring rejected ones
- Argument validation
- Scoring, metrics and per-decision impact analysis
- Snapshot and resume
"""

from datetime import datetime, timezone

import pytest

from deepthink.engine import (
    INVALID_DECISION,
    SessionSnapshot,
    TrainingSession,
    score_impact_of,
)
from deepthink.models import DecisionBranch, RiskLevel, RiskProfile, ScenarioGraph
from deepthink.scoring import OutcomeCalculator
from factories import make_consequence, make_decision, make_state

FIXED_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def session(linear_graph):
    return TrainingSession(linear_graph, session_id="sess-1", clock=lambda: FIXED_TIME)


@pytest.fixture
def finished_session(session):
    """The linear drill played to the end: d1 in 90 s, then d2 in 60 s."""
    session.submit_decision("d1", time_taken_ms=90_000)
    session.submit_decision("d2", time_taken_ms=60_000)
    return session


class TestSubmitDecision:
    """Tests for TrainingSession.submit_decision."""

    def test_records_accepted_decision(self, session):
        """Test an accepted transition appends a complete SessionDecision."""
        result = session.submit_decision("d1", time_taken_ms=90_000, user_confidence=4)

        assert result.success
        assert result.new_state.id == "state2"
        assert result.transition_effects == ["Backup generators online", "Staff notified"]

        [record] = session.decisions
        assert record.decision_id == "d1"
        assert record.session_id == "sess-1"
        assert record.state_id == "state1"
        assert record.decision_text == "Decision d1"
        assert record.timestamp == FIXED_TIME.isoformat()
        assert record.time_taken_ms == 90_000
        assert record.score_impact == pytest.approx(34.0)
        assert record.time_limit_ms == 300_000
        assert record.risk_level == RiskLevel.MEDIUM
        assert record.user_confidence == 4
        assert [c.id for c in record.consequences] == ["d1-c1", "d1-c2"]

    def test_rejected_decision_not_recorded(self, session):
        """Test a failed transition leaves the log and position alone."""
        result = session.submit_decision("nope", time_taken_ms=1_000)
        assert not result.success
        assert result.error == INVALID_DECISION
        assert session.decisions == []
        assert session.state_history == ["state1"]

    def test_negative_time_rejected(self, session):
        """Test negative decision times raise ValueError."""
        with pytest.raises(ValueError, match="time_taken_ms"):
            session.submit_decision("d1", time_taken_ms=-1)
        assert session.decisions == []

    @pytest.mark.parametrize("confidence", [0, 6])
    def test_confidence_range(self, session, confidence):
        """Test confidence outside 1-5 raises ValueError."""
        with pytest.raises(ValueError, match="user_confidence"):
            session.submit_decision("d1", time_taken_ms=1_000, user_confidence=confidence)

    def test_completion(self, session):
        """Test is_complete flips once the terminal state is reached."""
        session.submit_decision("d1", time_taken_ms=90_000)
        assert not session.is_complete
        session.submit_decision("d2", time_taken_ms=60_000)
        assert session.is_complete
        assert session.state_history == ["state1", "state2", "end"]
        assert session.current_state.id == "end"

    def test_decisions_are_copies(self, finished_session):
        """Test the returned log cannot be mutated in place."""
        finished_session.decisions.clear()
        assert len(finished_session.decisions) == 2

    def test_untimed_state_records_no_limit(self):
        """Test decisions in untimed states record time_limit_ms None."""
        start = make_state("start", decisions=[make_decision("go", next_state="end")])
        end = make_state("end")
        graph = ScenarioGraph(
            initial_state=start,
            states={"start": start, "end": end},
            branches=[DecisionBranch(from_state_id="start", decision_id="go", to_state_id="end")],
        )
        session = TrainingSession(graph)
        session.submit_decision("go", time_taken_ms=5_000)
        assert session.decisions[0].time_limit_ms is None


class TestUserContext:
    """Tests that user context reaches branch conditions."""

    @pytest.fixture
    def gated_graph(self):
        start = make_state("start", decisions=[make_decision("lead", next_state="end")])
        end = make_state("end")
        return ScenarioGraph(
            initial_state=start,
            states={"start": start, "end": end},
            branches=[
                DecisionBranch(
                    from_state_id="start",
                    decision_id="lead",
                    to_state_id="end",
                    conditions={"user_context.role": "commander"},
                )
            ],
        )

    def test_condition_uses_user_context(self, gated_graph):
        """Test the branch opens only for the matching role."""
        session = TrainingSession(gated_graph)
        assert not session.submit_decision("lead", 1_000, user_context={"role": "analyst"}).success
        assert session.submit_decision("lead", 1_000, user_context={"role": "commander"}).success

    def test_time_pressure_condition(self, conditional_graph):
        """Test elapsed time flows into the time pressure condition."""
        session = TrainingSession(conditional_graph)
        assert not session.submit_decision("act", time_taken_ms=200_000).success
        assert session.submit_decision("act", time_taken_ms=100_000).success


class TestScoringAndAnalysis:
    """Tests for score, metrics and analyze_decision."""

    def test_score(self, finished_session):
        """Test the canonical score of the finished drill."""
        result = finished_session.score()
        direct = 48.0 / 1.8
        second = 36.0
        risk = 97.5
        timing = (70.0 + (60.0 + 0.5 / 0.6 * 20.0)) / 2
        expected = direct * 0.35 + second * 0.30 + risk * 0.20 + timing * 0.15
        assert result.total_score == pytest.approx(expected, abs=0.01)
        assert result.percentile == 40.0

    def test_empty_session_score(self, session):
        """Test a session with no decisions scores zero."""
        result = session.score()
        assert result.total_score == 0.0
        assert result.percentile == 0.0

    def test_alternative_calculator(self, finished_session):
        """Test the preview strategy can score a session."""
        result = finished_session.score(OutcomeCalculator())
        assert 0.0 <= result.total_score <= 100.0
        assert result.percentile is None

    def test_risk_profile_changes_score(self, linear_graph):
        """Test the declared profile feeds risk management."""
        balanced = TrainingSession(linear_graph, risk_profile=RiskProfile.BALANCED)
        conservative = TrainingSession(linear_graph, risk_profile="conservative")
        for s in (balanced, conservative):
            s.submit_decision("d1", 90_000)
            s.submit_decision("d2", 60_000)
        assert conservative.score().risk_management != balanced.score().risk_management

    def test_metrics(self, finished_session):
        """Test counts, totals and averages."""
        metrics = finished_session.metrics()
        assert metrics.decisions_count == 2
        assert metrics.total_time_ms == 150_000
        assert metrics.average_decision_time_ms == 75_000
        assert metrics.current_score == finished_session.score().total_score

    def test_metrics_empty(self, session):
        """Test metrics with no decisions."""
        metrics = session.metrics()
        assert metrics.decisions_count == 0
        assert metrics.average_decision_time_ms == 0.0

    def test_analyze_decision(self, finished_session):
        """Test analysis runs against the state the decision was made in."""
        analysis = finished_session.analyze_decision(0)
        assert analysis.decision_id == finished_session.decisions[0].id
        assert len(analysis.cascade_analysis.cascade_chains) == 1
        assert analysis.timeline_impact.temporal_pattern == "gradual"
        assert analysis.contextual_factors.time_constraints == "relaxed"

    def test_analyze_later_decision_uses_history(self, finished_session):
        """Test later decisions are analyzed with earlier ones as history."""
        analysis = finished_session.analyze_decision(1)
        assert analysis.cascade_analysis.direct_effects_count == 1
        assert analysis.contextual_factors.time_constraints == "relaxed"

    @pytest.mark.parametrize("index", [-1, 2])
    def test_analyze_out_of_range(self, finished_session, index):
        """Test indexes outside the log raise IndexError."""
        with pytest.raises(IndexError):
            finished_session.analyze_decision(index)


class TestSnapshotResume:
    """Tests for snapshot and resume."""

    def test_snapshot_contents(self, finished_session):
        """Test the snapshot captures id, scenario, profile, path and log."""
        snapshot = finished_session.snapshot()
        assert snapshot.session_id == "sess-1"
        assert snapshot.scenario_id == "linear"
        assert snapshot.risk_profile == RiskProfile.BALANCED
        assert snapshot.state_history == ["state1", "state2", "end"]
        assert len(snapshot.decisions) == 2

    def test_resume_equivalent(self, linear_graph, finished_session):
        """Test a resumed session matches the original."""
        snapshot = SessionSnapshot.model_validate_json(
            finished_session.snapshot().model_dump_json()
        )
        resumed = TrainingSession.resume(linear_graph, snapshot)

        assert resumed.session_id == finished_session.session_id
        assert resumed.state_history == finished_session.state_history
        assert [d.model_dump() for d in resumed.decisions] == [
            d.model_dump() for d in finished_session.decisions
        ]
        assert resumed.is_complete
        assert resumed.score() == finished_session.score()
        assert (
            resumed.analyze_decision(1).overall_impact_score
            == finished_session.analyze_decision(1).overall_impact_score
        )

    def test_resume_mid_run(self, linear_graph, session):
        """Test a partial run resumes and can continue."""
        session.submit_decision("d1", 90_000)
        resumed = TrainingSession.resume(linear_graph, session.snapshot())
        assert resumed.current_state.id == "state2"
        assert resumed.submit_decision("d2", 60_000).success
        assert resumed.is_complete

    def test_wrong_start_rejected(self, linear_graph, finished_session):
        """Test a snapshot that does not start at the initial state."""
        snapshot = finished_session.snapshot().model_copy(
            update={"state_history": ["state2", "state2", "end"]}
        )
        with pytest.raises(ValueError, match="starts at"):
            TrainingSession.resume(linear_graph, snapshot)

    def test_length_mismatch_rejected(self, linear_graph, finished_session):
        """Test history length must be one more than the decision count."""
        snapshot = finished_session.snapshot().model_copy(update={"state_history": ["state1"]})
        with pytest.raises(ValueError):
            TrainingSession.resume(linear_graph, snapshot)

    def test_unknown_decision_rejected(self, linear_graph, finished_session):
        """Test a tampered decision id fails replay."""
        snapshot = finished_session.snapshot()
        first = snapshot.decisions[0].model_copy(update={"decision_id": "ghost"})
        tampered = snapshot.model_copy(update={"decisions": [first, snapshot.decisions[1]]})
        with pytest.raises(ValueError, match="ghost"):
            TrainingSession.resume(linear_graph, tampered)

    def test_unknown_state_rejected(self, linear_graph, finished_session):
        """Test a history naming a missing state fails replay."""
        snapshot = finished_session.snapshot().model_copy(
            update={"state_history": ["state1", "state2", "nowhere"]}
        )
        with pytest.raises(ValueError, match="nowhere"):
            TrainingSession.resume(linear_graph, snapshot)

    def test_path_off_branch_rejected(self, linear_graph, session):
        """Test a history that skips to a state the decision cannot reach."""
        session.submit_decision("d1", 90_000)
        snapshot = session.snapshot().model_copy(update={"state_history": ["state1", "end"]})
        with pytest.raises(ValueError, match="leads to 'state2'"):
            TrainingSession.resume(linear_graph, snapshot)

    def test_decision_without_branch_rejected(self, linear_graph, session):
        """Test replay needs a branch for every recorded decision."""
        session.submit_decision("d1", 90_000)
        snapshot = session.snapshot()
        pruned = linear_graph.model_copy(
            update={"branches": [b for b in linear_graph.branches if b.decision_id != "d1"]}
        )
        with pytest.raises(ValueError, match="No branch for decision 'd1'"):
            TrainingSession.resume(pruned, snapshot)


class TestScoreImpactOf:
    """Tests for the per-decision score impact."""

    def test_weighted_mean(self):
        """Test the probability-weighted mean of consequence impacts."""
        decision = make_decision(
            consequences=[
                make_consequence("a", impact=60, probability=0.8),
                make_consequence("b", impact=40, probability=0.5),
            ]
        )
        assert score_impact_of(decision) == pytest.approx(34.0)
