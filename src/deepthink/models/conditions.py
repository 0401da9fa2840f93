"""Branch condition predicates for Deep-Think.

A DecisionBranch may carry a ``conditions`` mapping of dot-paths to expected
values. Each entry becomes one Condition:

- ``{"user_context.role": "incident_commander"}`` is an EqualsCondition
  (direct equality).
- ``{"time_pressure": {"$lt": 0.5}}`` is a ComparatorCondition holding one or
  more (operator, operand) pairs; every pair must hold.

All entries of a mapping must pass (logical AND). Paths are resolved against a
plain-dict evaluation context with ``resolve_path``; list segments accept an
integer index or ``length``.

Supported operators: $gt, $gte, $lt, $lte, $eq, $ne, $in, $nin.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Union


class _Missing:
    """Sentinel for a path that does not resolve in the context."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    # Unresolved paths and values that cannot be ordered against the operand
    # never satisfy an ordering comparison.
    def check(actual: Any, operand: Any) -> bool:
        if actual is MISSING or actual is None:
            return False
        try:
            return bool(compare(actual, operand))
        except TypeError:
            return False

    return check


def strict_equals(actual: Any, expected: Any) -> bool:
    """Equality that never treats booleans as the numbers 0 and 1."""
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected


def _member(actual: Any, operand: Any) -> bool:
    if not isinstance(operand, (list, tuple)):
        return False
    return any(strict_equals(actual, item) for item in operand)


def _not_member(actual: Any, operand: Any) -> bool:
    return isinstance(operand, (list, tuple)) and not _member(actual, operand)


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$gt": _ordered(operator.gt),
    "$gte": _ordered(operator.ge),
    "$lt": _ordered(operator.lt),
    "$lte": _ordered(operator.le),
    "$eq": lambda actual, operand: actual is not MISSING and strict_equals(actual, operand),
    "$ne": lambda actual, operand: actual is MISSING or not strict_equals(actual, operand),
    "$in": _member,
    "$nin": _not_member,
}


@dataclass(frozen=True)
class EqualsCondition:
    """Passes when the value at ``path`` equals ``expected``."""

    path: str
    expected: Any

    def evaluate(self, context: Mapping[str, Any]) -> bool:
        actual = resolve_path(context, self.path)
        return actual is not MISSING and strict_equals(actual, self.expected)


@dataclass(frozen=True)
class ComparatorCondition:
    """Passes when every (operator, operand) pair holds for the value at ``path``.

    Ordered operators on values that cannot be compared (e.g. str vs int)
    fail like any other unmet comparison.
    """

    path: str
    comparisons: tuple[tuple[str, Any], ...]

    def evaluate(self, context: Mapping[str, Any]) -> bool:
        actual = resolve_path(context, self.path)
        return all(OPERATORS[op](actual, operand) for op, operand in self.comparisons)


Condition = Union[EqualsCondition, ComparatorCondition]


def _is_comparator(expected: Any) -> bool:
    return isinstance(expected, Mapping) and any(
        isinstance(key, str) and key.startswith("$") for key in expected
    )


def parse_condition(path: str, expected: Any) -> Condition:
    """Build a Condition from one entry of a conditions mapping.

    Raises:
        ValueError: If a comparator mapping uses an unknown operator or mixes
            operators with plain keys.
    """
    if not path:
        raise ValueError("Condition path must be a non-empty string")

    if not _is_comparator(expected):
        return EqualsCondition(path=path, expected=expected)

    comparisons = []
    for op, operand in expected.items():
        if op not in OPERATORS:
            raise ValueError(
                f"Unknown condition operator '{op}' for '{path}'. "
                f"Valid operators: {sorted(OPERATORS)}"
            )
        if op in ("$in", "$nin") and not isinstance(operand, (list, tuple)):
            raise ValueError(f"Operator '{op}' for '{path}' requires a list operand")
        comparisons.append((op, operand))
    return ComparatorCondition(path=path, comparisons=tuple(comparisons))


def parse_conditions(conditions: Mapping[str, Any] | None) -> list[Condition]:
    """Parse a whole conditions mapping, preserving key order."""
    if not conditions:
        return []
    return [parse_condition(path, expected) for path, expected in conditions.items()]


def resolve_path(context: Any, path: str) -> Any:
    """Look up a dot-path in nested dicts/lists.

    Returns MISSING when any segment does not resolve.

    Examples:
        >>> resolve_path({"a": {"b": 2}}, "a.b")
        2
        >>> resolve_path({"h": ["s1", "s2"]}, "h.length")
        2
        >>> resolve_path({"h": ["s1", "s2"]}, "h.0")
        's1'
    """
    value = context
    for segment in path.split("."):
        if isinstance(value, Mapping):
            if segment not in value:
                return MISSING
            value = value[segment]
        elif isinstance(value, (list, tuple)):
            if segment == "length":
                value = len(value)
            elif segment.isdigit() and int(segment) < len(value):
                value = value[int(segment)]
            else:
                return MISSING
        else:
            return MISSING
    return value


def evaluate_conditions(conditions: list[Condition], context: Mapping[str, Any]) -> bool:
    """Return True when every condition passes (an empty list always passes)."""
    return all(condition.evaluate(context) for condition in conditions)
