"""Tests for deepthink.engine.state_manager.

Tests cover:
- Queries on the current state and defensive copying
- Time pressure bounds and monotonicity
- Terminal detection, complexity and decision context
- History bookkeeping, update and reset
"""

import pytest

from deepthink.engine.state_manager import ScenarioStateManager
from deepthink.models import Character, RiskLevel
from factories import make_decision, make_state


@pytest.fixture
def manager(timed_state):
    """A manager positioned on the 300 second state."""
    return ScenarioStateManager(timed_state)


class TestQueries:
    """Tests for current-state queries."""

    def test_initial_position(self, manager):
        """Test the manager starts on the initial state with one history entry."""
        assert manager.get_current_state().id == "state1"
        assert manager.get_state_history() == ["state1"]
        assert manager.get_decision_history() == []

    def test_available_decisions(self, manager):
        """Test available decisions mirror the current state."""
        assert [d.id for d in manager.get_available_decisions()] == ["d1"]

    def test_is_valid_decision(self, manager):
        """Test membership check against the current state's decisions."""
        assert manager.is_valid_decision("d1")
        assert not manager.is_valid_decision("nope")

    def test_get_decision(self, manager):
        """Test lookup by id returns a Decision or None."""
        assert manager.get_decision("d1").id == "d1"
        assert manager.get_decision("nope") is None

    def test_get_decision_consequences(self, manager):
        """Test consequences of a current decision, [] for unknown ids."""
        assert [c.id for c in manager.get_decision_consequences("d1")] == ["d1-c1"]
        assert manager.get_decision_consequences("nope") == []


class TestDefensiveCopies:
    """Tests that callers never alias internal state."""

    def test_history_lists_are_copies(self, manager):
        """Test mutating returned histories does not leak back."""
        manager.get_state_history().append("rogue")
        manager.get_decision_history().append(make_decision("rogue"))
        assert manager.get_state_history() == ["state1"]
        assert manager.get_decision_history() == []

    def test_decision_lists_are_copies(self, manager):
        """Test mutating the returned decision list does not leak back."""
        decisions = manager.get_available_decisions()
        decisions.clear()
        assert len(manager.get_available_decisions()) == 1

    def test_nested_consequences_are_copies(self, manager):
        """Test nested consequence lists are copied too."""
        decision = manager.get_decision("d1")
        decision.consequences.clear()
        assert len(manager.get_decision("d1").consequences) == 1

    def test_state_copy_is_not_internal(self, manager):
        """Test the returned state is a distinct object on every call."""
        first = manager.get_current_state()
        first.decisions.clear()
        assert manager.get_current_state().decisions

    def test_input_state_is_copied(self, timed_state):
        """Test mutating the construction argument does not affect the manager."""
        manager = ScenarioStateManager(timed_state)
        timed_state.decisions.clear()
        assert manager.is_valid_decision("d1")


class TestTimePressure:
    """Tests for get_time_pressure."""

    def test_half_way(self, manager):
        """Test 150 s into a 300 s limit is 0.5 pressure."""
        assert manager.get_time_pressure(150_000) == pytest.approx(0.5)

    def test_capped_at_one(self, manager):
        """Test overrunning the limit caps pressure at 1.0."""
        assert manager.get_time_pressure(400_000) == 1.0

    def test_untimed_state(self):
        """Test untimed states never report pressure."""
        manager = ScenarioStateManager(make_state("s", decisions=[make_decision()]))
        assert manager.get_time_pressure(10_000_000) == 0.0

    def test_monotonic(self, manager):
        """Test pressure never decreases as elapsed time grows."""
        samples = [manager.get_time_pressure(ms) for ms in range(0, 500_001, 25_000)]
        assert samples == sorted(samples)
        assert all(0.0 <= p <= 1.0 for p in samples)


class TestStateShape:
    """Tests for terminal detection, complexity and decision context."""

    def test_terminal_detection(self, manager, terminal_state):
        """Test is_terminal_state follows the decision count."""
        assert not manager.is_terminal_state()
        manager.update_state(terminal_state)
        assert manager.is_terminal_state()
        assert manager.get_available_decisions() == []

    def test_state_complexity(self):
        """Test the 0.4/0.3/0.3 weighting."""
        state = make_state(
            "s",
            decisions=[make_decision("a"), make_decision("b")],
            environmental_factors=["storm", "night"],
            characters=[Character(id="c", name="Lee", role="Manager")],
        )
        manager = ScenarioStateManager(state)
        assert manager.get_state_complexity() == pytest.approx(2 * 0.4 + 2 * 0.3 + 0.3)

    def test_decision_context(self):
        """Test the context snapshot fields and remaining time."""
        state = make_state(
            "s",
            decisions=[make_decision()],
            time_limit=120,
            environmental_factors=["storm"],
            risk_level=RiskLevel.HIGH,
            criticality_score=8,
        )
        manager = ScenarioStateManager(state)
        context = manager.get_decision_context()
        assert context.risk_level == RiskLevel.HIGH
        assert context.criticality_score == 8
        assert context.environmental_factors == ["storm"]
        assert context.time_remaining_seconds == 120.0

        assert manager.get_decision_context(elapsed_ms=30_000).time_remaining_seconds == 90.0
        assert manager.get_decision_context(elapsed_ms=999_000).time_remaining_seconds == 0.0

    def test_decision_context_untimed(self):
        """Test untimed states report no remaining time."""
        manager = ScenarioStateManager(make_state("s"))
        assert manager.get_decision_context(elapsed_ms=5_000).time_remaining_seconds is None


class TestMutation:
    """Tests for record_decision, update_state and reset."""

    def test_record_does_not_move(self, manager):
        """Test recording a decision leaves the current state alone."""
        manager.record_decision(manager.get_decision("d1"))
        assert manager.get_current_state().id == "state1"
        assert [d.id for d in manager.get_decision_history()] == ["d1"]

    def test_update_appends_history(self, manager, terminal_state):
        """Test update_state moves and appends the new id."""
        manager.update_state(terminal_state)
        assert manager.get_current_state().id == "end"
        assert manager.get_state_history() == ["state1", "end"]

    def test_reset_clears_histories(self, manager, terminal_state, timed_state):
        """Test reset restarts at the given state with fresh histories."""
        manager.record_decision(manager.get_decision("d1"))
        manager.update_state(terminal_state)
        manager.reset(timed_state)
        assert manager.get_current_state().id == "state1"
        assert manager.get_state_history() == ["state1"]
        assert manager.get_decision_history() == []
