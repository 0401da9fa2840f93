"""Decision branching for Deep-Think.

DecisionBranchHandler is the only component that decides whether a transition
is legal and where it leads. It validates a decision against the current
state, evaluates the branch conditions, then records the decision and moves
the ScenarioStateManager.

Transition processing (process_decision):
1. VALIDATE  - The decision must be offered in the current state
2. LOOKUP    - A branch keyed by (current state, decision) must exist
3. CONDITION - All branch conditions must hold in the evaluation context
4. RESOLVE   - The branch target must exist in the graph
5. APPLY     - Record the decision, move to the target, return effects

Failures are returned as TransitionResult(success=False, error=...) with one
of the fixed messages below; internal faults raised while applying a transition carry the
exception message. A failed call leaves the state manager untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from deepthink.engine.state_manager import ScenarioStateManager
from deepthink.models.conditions import evaluate_conditions
from deepthink.models.scenario import Decision, DecisionBranch, ScenarioGraph, ScenarioState

logger = logging.getLogger(__name__)


INVALID_DECISION = "Invalid decision for current state"
NO_TRANSITION = "No valid transition found for this decision"
CONDITIONS_NOT_MET = "Branch conditions not met"
TARGET_NOT_FOUND = "Target state not found"
UNKNOWN_TRANSITION_ERROR = "Unknown error during transition"


@dataclass
class TransitionResult:
    """Result of processing a decision.

    Attributes:
        success: Whether the transition was applied
        new_state: Copy of the state reached (None if failed)
        transition_effects: Copy of the branch's effects, in order
        error: Error message if success=False
    """

    success: bool
    new_state: Optional[ScenarioState] = None
    transition_effects: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class PossibleTransition:
    """A structurally available move from the current state."""

    decision_id: str
    next_state_id: str
    decision: Decision


@dataclass
class GraphValidationResult:
    """Result of static scenario graph validation.

    Attributes:
        is_valid: True iff no errors were found
        errors: Human-readable integrity errors, in check order
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_scenario_graph(graph: ScenarioGraph) -> GraphValidationResult:
    """Check the referential integrity of a scenario graph.

    Checks, in order:
    - The initial state is present in ``states``
    - Every branch's from/to state exists
    - Every branch's decision exists in its from state
    - Every state other than the initial one is the target of some branch

    Args:
        graph: Scenario to check

    Returns:
        GraphValidationResult listing every problem found
    """
    errors: list[str] = []
    states = graph.states

    if graph.initial_state.id not in states:
        errors.append("Initial state not found in states collection")

    for branch in graph.branches:
        if branch.from_state_id not in states:
            errors.append(f"Branch references non-existent from state: {branch.from_state_id}")
        if branch.to_state_id not in states:
            errors.append(f"Branch references non-existent to state: {branch.to_state_id}")
        from_state = states.get(branch.from_state_id)
        if from_state is not None and from_state.get_decision(branch.decision_id) is None:
            errors.append(
                f"Branch references non-existent decision: {branch.decision_id} "
                f"in state: {branch.from_state_id}"
            )

    reachable = {graph.initial_state.id}
    reachable.update(branch.to_state_id for branch in graph.branches)
    for state_id in states:
        if state_id not in reachable:
            errors.append(f"Orphaned state found: {state_id}")

    return GraphValidationResult(is_valid=not errors, errors=errors)


def build_evaluation_context(
    state_manager: ScenarioStateManager,
    elapsed_time_ms: float,
    user_context: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the context that branch conditions are evaluated against.

    User-context keys are available both nested (``user_context.role``) and
    flattened at the root (``role``). Built-in keys are written last, so a
    user key can never shadow them. Every built-in key also has a camelCase
    spelling for scenario files authored that way.

    Args:
        state_manager: Source of time pressure and histories
        elapsed_time_ms: Time spent in the current state
        user_context: Caller-supplied facts about the trainee

    Returns:
        Plain dict suitable for resolve_path()
    """
    user = dict(user_context or {})
    time_pressure = state_manager.get_time_pressure(elapsed_time_ms) if elapsed_time_ms else 0.0
    state_history = state_manager.get_state_history()
    decision_history = [
        decision.model_dump(mode="json") for decision in state_manager.get_decision_history()
    ]

    context: dict[str, Any] = dict(user)
    context.update(
        {
            "user_context": user,
            "userContext": user,
            "elapsed_time_ms": elapsed_time_ms,
            "elapsedTimeMs": elapsed_time_ms,
            "time_pressure": time_pressure,
            "timePressure": time_pressure,
            "state_history": state_history,
            "stateHistory": state_history,
            "decision_history": decision_history,
            "decisionHistory": decision_history,
        }
    )
    return context


class DecisionBranchHandler:
    """Applies decisions to a ScenarioStateManager according to a scenario graph.

    Attributes:
        graph: The scenario graph being played
        state_manager: The run's position tracker (mutated on success only)
    """

    def __init__(self, graph: ScenarioGraph, state_manager: ScenarioStateManager) -> None:
        self.graph = graph
        self.state_manager = state_manager

    # =========================================================================
    # Public API
    # =========================================================================

    def process_decision(
        self,
        decision_id: str,
        elapsed_time_ms: float,
        user_context: Mapping[str, Any] | None = None,
    ) -> TransitionResult:
        """Validate and apply a decision.

        Args:
            decision_id: Id of the decision taken in the current state
            elapsed_time_ms: Time spent in the current state
            user_context: Facts about the trainee available to conditions

        Returns:
            TransitionResult. On failure the state manager is unchanged.
        """
        try:
            return self._process(decision_id, elapsed_time_ms, user_context)
        except Exception as e:
            message = str(e) or UNKNOWN_TRANSITION_ERROR
            logger.error("Transition fault for decision %r: %s", decision_id, message)
            return TransitionResult(success=False, error=message)

    def get_possible_next_states(self) -> list[PossibleTransition]:
        """List the decisions of the current state that have a branch.

        Conditions are not evaluated; this is a structural preview.
        """
        current = self.state_manager.get_current_state()
        possible: list[PossibleTransition] = []
        for decision in current.decisions:
            branch = self.graph.find_branch(current.id, decision.id)
            if branch is not None:
                possible.append(
                    PossibleTransition(
                        decision_id=decision.id,
                        next_state_id=branch.to_state_id,
                        decision=decision.model_copy(deep=True),
                    )
                )
        return possible

    def validate_scenario_config(self) -> GraphValidationResult:
        """Check the integrity of this handler's scenario graph."""
        return validate_scenario_graph(self.graph)

    def preview_transition_effects(self, decision_id: str) -> list[str]:
        """Get the effects a decision's branch would produce, without moving.

        Returns:
            Copy of the branch's transition effects, or [] if there is no branch
        """
        current_id = self.state_manager.get_current_state().id
        branch = self.graph.find_branch(current_id, decision_id)
        return list(branch.transition_effects) if branch is not None else []

    # =========================================================================
    # Internals
    # =========================================================================

    def _process(
        self,
        decision_id: str,
        elapsed_time_ms: float,
        user_context: Mapping[str, Any] | None,
    ) -> TransitionResult:
        manager = self.state_manager

        decision = manager.get_decision(decision_id)
        if decision is None:
            return self._reject(decision_id, INVALID_DECISION)

        current = manager.get_current_state()
        branch = self.graph.find_branch(current.id, decision_id)
        if branch is None:
            return self._reject(decision_id, NO_TRANSITION)

        if not self._conditions_hold(branch, elapsed_time_ms, user_context):
            return self._reject(decision_id, CONDITIONS_NOT_MET)

        next_state = self.graph.get_state(branch.to_state_id)
        if next_state is None:
            return self._reject(decision_id, TARGET_NOT_FOUND)

        manager.record_decision(decision)
        manager.update_state(next_state)
        logger.info("Transition %s --%s--> %s", current.id, decision_id, next_state.id)

        return TransitionResult(
            success=True,
            new_state=next_state.model_copy(deep=True),
            transition_effects=list(branch.transition_effects),
        )

    def _conditions_hold(
        self,
        branch: DecisionBranch,
        elapsed_time_ms: float,
        user_context: Mapping[str, Any] | None,
    ) -> bool:
        conditions = branch.parsed_conditions
        if not conditions:
            return True
        context = build_evaluation_context(self.state_manager, elapsed_time_ms, user_context)
        return evaluate_conditions(conditions, context)

    def _reject(self, decision_id: str, error: str) -> TransitionResult:
        logger.debug("Rejected decision %r: %s", decision_id, error)
        return TransitionResult(success=False, error=error)
