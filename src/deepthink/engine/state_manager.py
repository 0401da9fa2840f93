"""Scenario position tracking for Deep-Think.

ScenarioStateManager owns the single mutable "where is the trainee right now"
of a run: the current ScenarioState, the ordered list of visited state ids and
the ordered list of decisions taken. It knows nothing about branching rules;
transitions are validated by DecisionBranchHandler before update_state() is
called.

Every getter returns a deep copy. Callers may freely mutate what they get
back without affecting the manager.

One manager serves one trainee. Concurrent submissions for the same run must
be serialized by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from deepthink.models.scenario import (
    Character,
    Consequence,
    Decision,
    RiskLevel,
    ScenarioState,
    clamp,
)


@dataclass
class DecisionContext:
    """Read-only snapshot of the current state for presentation layers.

    Attributes:
        risk_level: Baseline risk of the current state
        criticality_score: Severity of the current state (1-10)
        environmental_factors: Copy of the state's environmental factors
        characters: Copies of the characters present
        time_remaining_seconds: Seconds left to decide (None = untimed)
    """

    risk_level: RiskLevel
    criticality_score: float
    environmental_factors: list[str] = field(default_factory=list)
    characters: list[Character] = field(default_factory=list)
    time_remaining_seconds: Optional[float] = None


class ScenarioStateManager:
    """Current position of a single run through a scenario graph.

    Attributes are private; use the getters, which return copies.
    """

    def __init__(self, initial_state: ScenarioState) -> None:
        """Start a run at ``initial_state``.

        Args:
            initial_state: State the trainee starts in
        """
        self._state = initial_state.model_copy(deep=True)
        self._state_history: list[str] = [initial_state.id]
        self._decision_history: list[Decision] = []

    # =========================================================================
    # Queries
    # =========================================================================

    def get_current_state(self) -> ScenarioState:
        """Get the current state.

        Returns:
            Deep copy of the current ScenarioState
        """
        return self._state.model_copy(deep=True)

    def get_available_decisions(self) -> list[Decision]:
        """Get the decisions offered in the current state.

        Returns:
            Deep copies of the current state's decisions (empty when terminal)
        """
        return [decision.model_copy(deep=True) for decision in self._state.decisions]

    def is_valid_decision(self, decision_id: str) -> bool:
        """Check whether ``decision_id`` is offered in the current state."""
        return any(decision.id == decision_id for decision in self._state.decisions)

    def get_decision(self, decision_id: str) -> Decision | None:
        """Get a decision of the current state by id.

        Returns:
            Deep copy of the Decision, or None if the current state does not
            offer it
        """
        decision = self._state.get_decision(decision_id)
        return decision.model_copy(deep=True) if decision is not None else None

    def get_decision_consequences(self, decision_id: str) -> list[Consequence]:
        """Get the consequences of a decision of the current state.

        Returns:
            Copies of the consequences, or an empty list for an unknown id
        """
        decision = self._state.get_decision(decision_id)
        if decision is None:
            return []
        return [consequence.model_copy(deep=True) for consequence in decision.consequences]

    def get_state_history(self) -> list[str]:
        """Get the ids of visited states, oldest first (starts with the initial state)."""
        return list(self._state_history)

    def get_decision_history(self) -> list[Decision]:
        """Get copies of the decisions taken, oldest first."""
        return [decision.model_copy(deep=True) for decision in self._decision_history]

    def get_time_pressure(self, elapsed_ms: float) -> float:
        """Fraction of the current state's time limit already used.

        Args:
            elapsed_ms: Milliseconds elapsed since the state was entered

        Returns:
            Value in [0, 1]; 0 for untimed states
        """
        limit_seconds = self._state.time_limit_seconds
        if not limit_seconds:
            return 0.0
        return clamp(elapsed_ms / (limit_seconds * 1000), 0.0, 1.0)

    def is_terminal_state(self) -> bool:
        """Check whether the current state offers no decisions."""
        return len(self._state.decisions) == 0

    def get_state_complexity(self) -> float:
        """Coarse authoring complexity of the current state.

        Weighted count of decisions (0.4), environmental factors (0.3) and
        characters (0.3). Not a scoring input.
        """
        return (
            len(self._state.decisions) * 0.4
            + len(self._state.environmental_factors) * 0.3
            + len(self._state.characters) * 0.3
        )

    def get_decision_context(self, elapsed_ms: float | None = None) -> DecisionContext:
        """Get a presentation snapshot of the current state.

        Args:
            elapsed_ms: Time already spent in the state. When given, the
                remaining time is reduced accordingly (never below 0).

        Returns:
            DecisionContext with copied collections
        """
        state = self._state
        time_remaining: float | None = None
        if state.time_limit_seconds:
            time_remaining = float(state.time_limit_seconds)
            if elapsed_ms is not None:
                time_remaining = max(0.0, time_remaining - elapsed_ms / 1000)

        return DecisionContext(
            risk_level=state.risk_level,
            criticality_score=state.criticality_score,
            environmental_factors=list(state.environmental_factors),
            characters=[character.model_copy(deep=True) for character in state.characters],
            time_remaining_seconds=time_remaining,
        )

    # =========================================================================
    # Mutation (DecisionBranchHandler only)
    # =========================================================================

    def record_decision(self, decision: Decision) -> None:
        """Append a decision to the history without moving.

        Args:
            decision: The decision taken (a copy is stored)
        """
        self._decision_history.append(decision.model_copy(deep=True))

    def update_state(self, new_state: ScenarioState) -> None:
        """Move to ``new_state`` and append its id to the state history.

        Performs no validation; the caller must already have checked that the
        transition is legal.
        """
        self._state = new_state.model_copy(deep=True)
        self._state_history.append(new_state.id)

    def reset(self, state: ScenarioState) -> None:
        """Restart the run at ``state``, clearing both histories."""
        self._state = state.model_copy(deep=True)
        self._state_history = [state.id]
        self._decision_history = []
