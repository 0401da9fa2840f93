"""Tests for deepthink.engine.branching.

Tests cover:
- process_decision success path and every fixed failure message
- Conditional branches over time pressure, user context and histories
- Transition atomicity on every failure
- Internal faults converted to results
- Structural previews and static graph validation
"""

import logging

import pytest

from deepthink.engine import (
    CONDITIONS_NOT_MET,
    INVALID_DECISION,
    NO_TRANSITION,
    TARGET_NOT_FOUND,
    DecisionBranchHandler,
    ScenarioStateManager,
    build_evaluation_context,
    validate_scenario_graph,
)
from deepthink.models import DecisionBranch, ScenarioGraph
from factories import make_decision, make_state


def make_handler(graph):
    """Handler and manager positioned at the graph's initial state."""
    manager = ScenarioStateManager(graph.initial_state)
    return DecisionBranchHandler(graph, manager), manager


def single_branch_graph(conditions=None, to_state="state2", include_target=True):
    """state1 --act--> to_state, optionally conditional."""
    state1 = make_state("state1", decisions=[make_decision("act", next_state=to_state)], time_limit=300)
    states = {"state1": state1}
    if include_target:
        states[to_state] = make_state(to_state)
    return ScenarioGraph(
        initial_state=state1,
        states=states,
        branches=[
            DecisionBranch(
                from_state_id="state1",
                decision_id="act",
                to_state_id=to_state,
                conditions=conditions,
            )
        ],
    )


def assert_unchanged(manager):
    """The manager is still at the start with no recorded decisions."""
    assert manager.get_current_state().id == "state1"
    assert manager.get_state_history() == ["state1"]
    assert manager.get_decision_history() == []


class TestProcessDecision:
    """Tests for the main transition path."""

    def test_successful_transition(self, linear_graph):
        """Test an unconditional branch moves to its target."""
        handler, manager = make_handler(linear_graph)
        result = handler.process_decision("d1", 90_000)

        assert result.success
        assert result.error is None
        assert result.new_state.id == "state2"
        assert len(manager.get_decision_history()) == 1
        assert manager.get_state_history() == ["state1", "state2"]

    def test_transition_effects_in_order(self, linear_graph):
        """Test the branch's effects are returned in order."""
        handler, _ = make_handler(linear_graph)
        result = handler.process_decision("d1", 1_000)
        assert result.transition_effects == ["Backup generators online", "Staff notified"]

    def test_returned_state_is_a_copy(self, linear_graph):
        """Test mutating the returned state does not affect the manager."""
        handler, manager = make_handler(linear_graph)
        result = handler.process_decision("d1", 1_000)
        result.new_state.decisions.clear()
        assert manager.get_available_decisions()

    def test_invalid_decision(self, linear_graph):
        """Test a decision not offered in the current state is rejected."""
        handler, manager = make_handler(linear_graph)
        result = handler.process_decision("d2", 1_000)
        assert not result.success
        assert result.error == INVALID_DECISION
        assert result.new_state is None
        assert_unchanged(manager)

    def test_no_transition(self):
        """Test an offered decision without a branch is rejected."""
        state1 = make_state("state1", decisions=[make_decision("act"), make_decision("wait")])
        state2 = make_state("state2")
        graph = ScenarioGraph(
            initial_state=state1,
            states={"state1": state1, "state2": state2},
            branches=[DecisionBranch(from_state_id="state1", decision_id="act", to_state_id="state2")],
        )
        handler, manager = make_handler(graph)
        result = handler.process_decision("wait", 1_000)
        assert result.error == NO_TRANSITION
        assert_unchanged(manager)

    def test_target_not_found(self):
        """Test a branch to a missing state is rejected."""
        handler, manager = make_handler(single_branch_graph(to_state="ghost", include_target=False))
        result = handler.process_decision("act", 1_000)
        assert result.error == TARGET_NOT_FOUND
        assert_unchanged(manager)

    def test_terminal_state_rejects_everything(self, linear_graph):
        """Test no decision is valid once a terminal state is reached."""
        handler, manager = make_handler(linear_graph)
        handler.process_decision("d1", 1_000)
        handler.process_decision("d2", 1_000)
        assert manager.is_terminal_state()
        assert handler.process_decision("d2", 1_000).error == INVALID_DECISION


class TestConditionalBranches:
    """Tests for branch condition evaluation."""

    def test_time_pressure_condition(self, conditional_graph):
        """Test a $lt time pressure gate rejects late and accepts early decisions."""
        handler, manager = make_handler(conditional_graph)

        late = handler.process_decision("act", 200_000)
        assert not late.success
        assert late.error == CONDITIONS_NOT_MET
        assert_unchanged(manager)

        early = handler.process_decision("act", 100_000)
        assert early.success
        assert early.new_state.id == "state2"

    def test_snake_case_time_pressure(self):
        """Test the snake_case spelling of the built-in key works too."""
        handler, _ = make_handler(single_branch_graph({"time_pressure": {"$lt": 0.5}}))
        assert handler.process_decision("act", 100_000).success

    def test_zero_elapsed_means_no_pressure(self):
        """Test elapsed time 0 gives time pressure 0."""
        handler, _ = make_handler(single_branch_graph({"time_pressure": {"$eq": 0}}))
        assert handler.process_decision("act", 0).success

    def test_user_context_nested_and_flattened(self):
        """Test user context is reachable at the root and under user_context."""
        nested, _ = make_handler(single_branch_graph({"user_context.role": "commander"}))
        assert nested.process_decision("act", 1_000, {"role": "commander"}).success

        camel, _ = make_handler(single_branch_graph({"userContext.role": "commander"}))
        assert camel.process_decision("act", 1_000, {"role": "commander"}).success

        flat, manager = make_handler(single_branch_graph({"role": "commander"}))
        assert flat.process_decision("act", 1_000, {"role": "analyst"}).error == CONDITIONS_NOT_MET
        assert_unchanged(manager)
        assert flat.process_decision("act", 1_000, {"role": "commander"}).success

    def test_membership_condition(self):
        """Test $in against a user context value."""
        handler, _ = make_handler(
            single_branch_graph({"user_context.experience": {"$in": ["senior", "lead"]}})
        )
        assert handler.process_decision("act", 1_000, {"experience": "lead"}).success

    def test_history_length_condition(self):
        """Test conditions can read the state history length."""
        handler, _ = make_handler(single_branch_graph({"state_history.length": {"$gte": 1}}))
        assert handler.process_decision("act", 1_000).success

    def test_missing_user_key_fails_condition(self):
        """Test a condition on an absent key is simply not met."""
        handler, manager = make_handler(single_branch_graph({"user_context.clearance": {"$gte": 3}}))
        assert handler.process_decision("act", 1_000).error == CONDITIONS_NOT_MET
        assert_unchanged(manager)

    def test_mismatched_types_not_met(self):
        """Test ordering a string against a number is rejected as conditions not met."""
        handler, manager = make_handler(single_branch_graph({"user_context.level": {"$gt": 3}}))
        result = handler.process_decision("act", 1_000, {"level": "senior"})
        assert result.error == CONDITIONS_NOT_MET
        assert_unchanged(manager)

    def test_boolean_flag_does_not_match_number(self):
        """Test a boolean context value never satisfies a numeric equality."""
        handler, _ = make_handler(single_branch_graph({"user_context.certified": 1}))
        result = handler.process_decision("act", 1_000, {"certified": True})
        assert result.error == CONDITIONS_NOT_MET
        assert handler.process_decision("act", 1_000, {"certified": 1}).success

    def test_builtins_win_over_user_keys(self):
        """Test user context cannot shadow a built-in key."""
        handler, _ = make_handler(single_branch_graph({"time_pressure": {"$lt": 0.5}}))
        result = handler.process_decision("act", 100_000, {"time_pressure": 0.99})
        assert result.success


class TestInternalFaults:
    """Tests for faults raised while applying a transition."""

    def test_fault_is_returned_not_raised(self, monkeypatch, caplog):
        """Test an exception while applying a transition becomes success=False."""
        handler, manager = make_handler(single_branch_graph())

        def broken_record(decision):
            raise RuntimeError("decision log unavailable")

        monkeypatch.setattr(manager, "record_decision", broken_record)
        with caplog.at_level(logging.ERROR, logger="deepthink.engine.branching"):
            result = handler.process_decision("act", 1_000)
        assert not result.success
        assert result.error == "decision log unavailable"
        assert_unchanged(manager)
        assert any("Transition fault" in r.getMessage() for r in caplog.records)


class TestLogging:
    """Tests for transition log records."""

    def test_accepted_transition_logged_at_info(self, linear_graph, caplog):
        """Test accepted transitions are logged at INFO."""
        handler, _ = make_handler(linear_graph)
        with caplog.at_level(logging.INFO, logger="deepthink.engine.branching"):
            handler.process_decision("d1", 1_000)
        assert any(r.levelno == logging.INFO and "state2" in r.getMessage() for r in caplog.records)

    def test_rejection_logged_at_debug(self, linear_graph, caplog):
        """Test rejected transitions are logged at DEBUG."""
        handler, _ = make_handler(linear_graph)
        with caplog.at_level(logging.DEBUG, logger="deepthink.engine.branching"):
            handler.process_decision("nope", 1_000)
        assert any(r.levelno == logging.DEBUG and INVALID_DECISION in r.getMessage() for r in caplog.records)


class TestEvaluationContext:
    """Tests for build_evaluation_context."""

    def test_keys_in_both_spellings(self, timed_state):
        """Test every built-in key is present in snake and camel case."""
        manager = ScenarioStateManager(timed_state)
        context = build_evaluation_context(manager, 150_000, {"team": "blue"})
        assert context["time_pressure"] == context["timePressure"] == pytest.approx(0.5)
        assert context["elapsed_time_ms"] == context["elapsedTimeMs"] == 150_000
        assert context["state_history"] == context["stateHistory"] == ["state1"]
        assert context["decision_history"] == context["decisionHistory"] == []
        assert context["user_context"] == context["userContext"] == {"team": "blue"}
        assert context["team"] == "blue"

    def test_decision_history_serialized(self, linear_graph):
        """Test prior decisions appear as plain dicts."""
        handler, manager = make_handler(linear_graph)
        handler.process_decision("d1", 1_000)
        context = build_evaluation_context(manager, 1_000)
        assert context["decision_history"][0]["id"] == "d1"
        assert context["decision_history"][0]["risk_level"] == "medium"


class TestPreviews:
    """Tests for get_possible_next_states and preview_transition_effects."""

    def test_possible_next_states_ignore_conditions(self, conditional_graph):
        """Test structural previews list conditional branches."""
        handler, _ = make_handler(conditional_graph)
        [possible] = handler.get_possible_next_states()
        assert possible.decision_id == "act"
        assert possible.next_state_id == "state2"
        assert possible.decision.id == "act"

    def test_possible_next_states_skip_unbranched(self):
        """Test decisions without a branch are omitted."""
        state1 = make_state("state1", decisions=[make_decision("act"), make_decision("wait")])
        graph = ScenarioGraph(
            initial_state=state1,
            states={"state1": state1, "state2": make_state("state2")},
            branches=[DecisionBranch(from_state_id="state1", decision_id="act", to_state_id="state2")],
        )
        handler, _ = make_handler(graph)
        assert [p.decision_id for p in handler.get_possible_next_states()] == ["act"]

    def test_preview_does_not_move(self, linear_graph):
        """Test previewing effects leaves the manager untouched."""
        handler, manager = make_handler(linear_graph)
        assert handler.preview_transition_effects("d1") == [
            "Backup generators online",
            "Staff notified",
        ]
        assert handler.preview_transition_effects("unknown") == []
        assert_unchanged(manager)


class TestGraphValidation:
    """Tests for validate_scenario_graph / validate_scenario_config."""

    def test_valid_graph(self, linear_graph):
        """Test a consistent graph has no errors."""
        handler, _ = make_handler(linear_graph)
        result = handler.validate_scenario_config()
        assert result.is_valid
        assert result.errors == []

    def test_orphaned_state(self, linear_graph):
        """Test a state no branch reaches is reported as orphaned."""
        data = linear_graph.to_dict()
        data["states"]["island"] = make_state("island").model_dump(mode="json")
        result = validate_scenario_graph(ScenarioGraph.from_dict(data))
        assert not result.is_valid
        assert "Orphaned state found: island" in result.errors

    def test_missing_initial_state(self, linear_graph):
        """Test an initial state absent from the states map is reported."""
        data = linear_graph.to_dict()
        data["initial_state"] = make_state("elsewhere").model_dump(mode="json")
        result = validate_scenario_graph(ScenarioGraph.from_dict(data))
        assert "Initial state not found in states collection" in result.errors
        assert "Orphaned state found: state1" in result.errors

    def test_dangling_branch_states(self):
        """Test branches to or from unknown states are reported."""
        state1 = make_state("state1", decisions=[make_decision("act")])
        graph = ScenarioGraph(
            initial_state=state1,
            states={"state1": state1},
            branches=[
                DecisionBranch(from_state_id="state1", decision_id="act", to_state_id="ghost"),
                DecisionBranch(from_state_id="phantom", decision_id="act", to_state_id="state1"),
            ],
        )
        errors = validate_scenario_graph(graph).errors
        assert "Branch references non-existent to state: ghost" in errors
        assert "Branch references non-existent from state: phantom" in errors

    def test_dangling_decision(self, linear_graph):
        """Test a branch naming a decision its state does not offer is reported."""
        data = linear_graph.to_dict()
        data["branches"].append(
            {"from_state_id": "state2", "decision_id": "teleport", "to_state_id": "end"}
        )
        errors = validate_scenario_graph(ScenarioGraph.from_dict(data)).errors
        assert errors == ["Branch references non-existent decision: teleport in state: state2"]

    def test_validation_is_static(self, linear_graph):
        """Test validation does not depend on the run's position."""
        handler, _ = make_handler(linear_graph)
        before = handler.validate_scenario_config()
        handler.process_decision("d1", 1_000)
        assert handler.validate_scenario_config() == before
