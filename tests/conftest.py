"""Shared pytest fixtures and markers for all tests."""

import pytest

from deepthink.models import Character, DecisionBranch, RiskLevel, ScenarioGraph
from factories import make_consequence, make_decision, make_state


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks end-to-end session runs"
    )


# =============================================================================
# Scenario fixtures
# =============================================================================


@pytest.fixture
def timed_state():
    """A state with a 300 second limit and one decision."""
    return make_state("state1", decisions=[make_decision("d1")], time_limit=300)


@pytest.fixture
def terminal_state():
    """A state offering no decisions."""
    return make_state("end")


@pytest.fixture
def linear_graph():
    """state1 --d1--> state2 --d2--> end, with no conditions."""
    state1 = make_state(
        "state1",
        decisions=[
            make_decision(
                "d1",
                next_state="state2",
                risk="medium",
                consequences=[
                    make_consequence("d1-c1", impact=60.0, probability=0.8),
                    make_consequence("d1-c2", kind="second-order", impact=40.0, probability=0.5, delay=30),
                ],
            ),
            make_decision("d1b", next_state="state2", risk="low"),
        ],
        time_limit=300,
    )
    state2 = make_state(
        "state2",
        decisions=[
            make_decision(
                "d2",
                next_state="end",
                risk="high",
                consequences=[make_consequence("d2-c1", impact=-20.0, probability=1.0)],
            )
        ],
        time_limit=120,
    )
    end = make_state("end")
    return ScenarioGraph(
        scenario_id="linear",
        title="Linear Drill",
        difficulty_level=1,
        initial_state=state1,
        states={"state1": state1, "state2": state2, "end": end},
        branches=[
            DecisionBranch(
                from_state_id="state1",
                decision_id="d1",
                to_state_id="state2",
                transition_effects=["Backup generators online", "Staff notified"],
            ),
            DecisionBranch(from_state_id="state1", decision_id="d1b", to_state_id="state2"),
            DecisionBranch(from_state_id="state2", decision_id="d2", to_state_id="end"),
        ],
    )


@pytest.fixture
def conditional_graph():
    """A 300 second state whose only branch requires time_pressure < 0.5."""
    state1 = make_state("state1", decisions=[make_decision("act", next_state="state2")], time_limit=300)
    state2 = make_state("state2")
    return ScenarioGraph(
        initial_state=state1,
        states={"state1": state1, "state2": state2},
        branches=[
            DecisionBranch(
                from_state_id="state1",
                decision_id="act",
                to_state_id="state2",
                conditions={"timePressure": {"$lt": 0.5}},
            )
        ],
    )


@pytest.fixture
def crisis_state():
    """A rich hospital outage state used by impact analysis tests."""
    return make_state(
        "outage",
        description="Urgent power failure in the main hospital wing",
        context="A healthcare facility faces a critical emergency with limited generator fuel",
        decisions=[make_decision("evacuate"), make_decision("shelter")],
        time_limit=100,
        environmental_factors=["storm", "night shift", "fuel shortage", "road closures"],
        characters=[
            Character(id="ch1", name="Dana Ruiz", role="Executive"),
        ],
        risk_level=RiskLevel.HIGH,
        criticality_score=9,
    )
