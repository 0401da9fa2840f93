"""Scenario configuration models for Deep-Think.

A scenario is a static graph of ScenarioStates joined by DecisionBranch edges.
Every state offers up to six Decisions, and every Decision carries the
Consequences scored once it is chosen. All models here are frozen: they are
loaded once per scenario and never mutated afterwards.

Field names are snake_case. The camelCase spellings used by older scenario
files (``impactScore``, ``nextStateId``, ``timeLimit``, ...) are accepted on
input; output always uses the snake_case names.

Referential integrity (initial state present, no dangling branch references,
no orphaned states) is NOT enforced here. It is reported by
``deepthink.engine.validate_scenario_graph`` so that a broken scenario can
still be loaded and inspected.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from deepthink.models.conditions import Condition, parse_conditions
from deepthink.parameters import IMMEDIATE_DELAY_MINUTES


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value to the specified range."""
    return max(min_val, min(max_val, value))


class ConsequenceKind(str, Enum):
    """Whether a consequence lands at decision time or later.

    Inherits from str for proper JSON serialization.
    """

    DIRECT = "direct"
    SECOND_ORDER = "second-order"


class RiskLevel(str, Enum):
    """Risk posture of a decision or a scenario state."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Ordinal position (low=0, medium=1, high=2) for ordered comparison."""
        return _RISK_RANK[self]


_RISK_RANK = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


class _ScenarioModel(BaseModel):
    """Frozen base accepting both snake_case and camelCase input keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Consequence(_ScenarioModel):
    """A single effect of choosing a decision.

    Attributes:
        id: Identifier, unique within its decision
        kind: DIRECT (lands now) or SECOND_ORDER (delayed, may cascade)
        description: Human-readable effect text; also the input to the
            keyword heuristics of the impact analyzer
        impact_score: Signed impact in [-100, 100]
        probability: Likelihood of the effect in [0, 1]
        delay_minutes: Minutes until the effect resolves (None = immediate)
    """

    id: str = Field(min_length=1)
    kind: ConsequenceKind = Field(validation_alias=AliasChoices("kind", "type"))
    description: str = Field(default="")
    impact_score: float = Field(ge=-100.0, le=100.0)
    probability: float = Field(ge=0.0, le=1.0)
    delay_minutes: int | None = Field(default=None, ge=0)

    @property
    def is_immediate(self) -> bool:
        """True when the effect resolves within five minutes of the decision."""
        return self.delay_minutes is None or self.delay_minutes <= IMMEDIATE_DELAY_MINUTES

    @property
    def is_second_order(self) -> bool:
        return self.kind == ConsequenceKind.SECOND_ORDER


class Decision(_ScenarioModel):
    """A choice offered to the trainee in one ScenarioState.

    Attributes:
        id: Identifier, unique within its state
        text: The choice as presented to the trainee
        consequences: One to six consequences of taking the decision
        next_state_id: State reached when the matching branch accepts it
        risk_level: Declared risk of the choice
        time_weight: Optional authoring weight in [0, 2]
    """

    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    consequences: list[Consequence] = Field(min_length=1, max_length=6)
    next_state_id: str = Field(min_length=1)
    risk_level: RiskLevel
    time_weight: float | None = Field(default=None, ge=0.0, le=2.0)


class Character(_ScenarioModel):
    """A person present in a state, used for stakeholder grouping."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: str = Field(min_length=1)
    personality_traits: list[str] = Field(default_factory=list, max_length=10)
    communication_style: str = Field(default="")
    expertise_areas: list[str] = Field(default_factory=list, max_length=10)


class ScenarioState(_ScenarioModel):
    """One node of the scenario graph.

    A state with no decisions is terminal.

    Attributes:
        id: State identifier (key in ScenarioGraph.states)
        description: Situation summary shown to the trainee
        context: Longer background text
        decisions: Zero to six decisions offered in this state
        time_limit_seconds: Decision time limit (None = untimed)
        environmental_factors: Up to ten situational factors
        characters: Up to five people involved
        risk_level: Baseline risk of the situation
        criticality_score: Severity on a 1-10 scale
    """

    id: str = Field(min_length=1)
    description: str = Field(default="")
    context: str = Field(default="")
    decisions: list[Decision] = Field(default_factory=list, max_length=6)
    time_limit_seconds: int | None = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("time_limit_seconds", "timeLimitSeconds", "timeLimit"),
    )
    environmental_factors: list[str] = Field(default_factory=list, max_length=10)
    characters: list[Character] = Field(default_factory=list, max_length=5)
    risk_level: RiskLevel = Field(default=RiskLevel.MEDIUM)
    criticality_score: float = Field(default=5.0, ge=1.0, le=10.0)

    @model_validator(mode="after")
    def validate_unique_decision_ids(self) -> ScenarioState:
        """Decision ids must be unique within a state."""
        seen: set[str] = set()
        for decision in self.decisions:
            if decision.id in seen:
                raise ValueError(f"Duplicate decision id '{decision.id}' in state '{self.id}'")
            seen.add(decision.id)
        return self

    @property
    def is_terminal(self) -> bool:
        return not self.decisions

    def get_decision(self, decision_id: str) -> Decision | None:
        """Get a decision of this state by id, or None."""
        for decision in self.decisions:
            if decision.id == decision_id:
                return decision
        return None


class DecisionBranch(_ScenarioModel):
    """A directed edge of the scenario graph.

    (from_state_id, decision_id) identifies the edge. Optional ``conditions``
    gate the transition at runtime; they are parsed when the branch is built,
    so an unknown ``$operator`` is rejected at load time.

    Attributes:
        from_state_id: State the decision is taken in
        decision_id: Decision that triggers this edge
        to_state_id: State reached when the transition is accepted
        conditions: Dot-path predicate map (see deepthink.models.conditions)
        transition_effects: Up to five effect notes shown on transition
    """

    from_state_id: str = Field(min_length=1)
    decision_id: str = Field(min_length=1)
    to_state_id: str = Field(min_length=1)
    conditions: dict[str, Any] | None = Field(default=None)
    transition_effects: list[str] = Field(default_factory=list, max_length=5)

    _parsed_conditions: list[Condition] = PrivateAttr(default_factory=list)

    @field_validator("conditions")
    @classmethod
    def validate_conditions(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        """Reject condition maps the interpreter cannot evaluate."""
        parse_conditions(v)
        return v

    def model_post_init(self, __context: Any) -> None:
        self._parsed_conditions = parse_conditions(self.conditions)

    @property
    def key(self) -> tuple[str, str]:
        return (self.from_state_id, self.decision_id)

    @property
    def parsed_conditions(self) -> list[Condition]:
        """The conditions as evaluable Condition objects (a fresh list)."""
        return list(self._parsed_conditions)


class ScenarioGraph(_ScenarioModel):
    """Complete scenario definition: states, branches and metadata.

    Attributes:
        scenario_id: Stable identifier (None = derived from title on save)
        title: Human-readable title
        domain: Training domain, e.g. "healthcare" or "cybersecurity"
        difficulty_level: 1 (introductory) to 5 (expert)
        version: Semantic version of the scenario content
        tags: Up to ten free-form tags
        initial_state: Where every run starts
        states: All states keyed by id (should include the initial state)
        branches: Graph edges
    """

    scenario_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("scenario_id", "scenarioId", "id"),
    )
    title: str = Field(default="")
    domain: str = Field(default="general")
    difficulty_level: int = Field(default=1, ge=1, le=5)
    version: str = Field(default="1.0.0", pattern=r"^\d+\.\d+\.\d+$")
    tags: list[str] = Field(default_factory=list, max_length=10)

    initial_state: ScenarioState
    states: dict[str, ScenarioState]
    branches: list[DecisionBranch] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_branch_keys(self) -> ScenarioGraph:
        """(from_state_id, decision_id) must identify at most one branch."""
        seen: set[tuple[str, str]] = set()
        duplicates: list[str] = []
        for branch in self.branches:
            if branch.key in seen:
                duplicates.append(f"{branch.from_state_id}/{branch.decision_id}")
            seen.add(branch.key)
        if duplicates:
            raise ValueError(f"Duplicate branches for (state, decision): {duplicates}")
        return self

    def get_state(self, state_id: str) -> ScenarioState | None:
        """Get a state by id, or None if it does not exist."""
        return self.states.get(state_id)

    def find_branch(self, from_state_id: str, decision_id: str) -> DecisionBranch | None:
        """Get the branch leaving ``from_state_id`` via ``decision_id``, or None."""
        for branch in self.branches:
            if branch.from_state_id == from_state_id and branch.decision_id == decision_id:
                return branch
        return None

    def all_states(self) -> list[ScenarioState]:
        """Get all states in insertion order."""
        return list(self.states.values())

    def to_json(self) -> str:
        """Serialize scenario to JSON string."""
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> ScenarioGraph:
        """Deserialize scenario from JSON string.

        Raises:
            pydantic.ValidationError: If schema validation fails
        """
        return cls.model_validate_json(json_str)

    def to_dict(self) -> dict:
        """Serialize scenario to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> ScenarioGraph:
        """Deserialize scenario from dictionary.

        Raises:
            pydantic.ValidationError: If schema validation fails
        """
        return cls.model_validate(data)


# Alias matching the configuration loader's name for the same structure
ScenarioConfig = ScenarioGraph
