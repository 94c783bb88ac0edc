"""Shared project spec fixtures for the test suite."""

from typing import Any

import pytest

from tests.spec_helpers import make_agent, make_edge, make_spec, make_tool


@pytest.fixture
def two_agent_spec() -> dict[str, Any]:
    """agent2 is declared before agent1; agent1 -> agent2."""
    return make_spec(
        agents=[make_agent("agent2", ["tool2"]), make_agent("agent1", ["tool1"])],
        tools=[make_tool("tool1"), make_tool("tool2", kind="graph")],
        edges=[make_edge("edge1", "agent1", "agent2")],
        start_node="agent1",
        outputs=["agent2"],
    )


@pytest.fixture
def full_spec() -> dict[str, Any]:
    """A spec exercising every optional field."""
    return make_spec(
        agents=[
            make_agent(
                "agent1",
                ["tool1"],
                memory={"type": "ephemeral", "maxTokens": 1000},
                policies={"maxIterations": 5, "timeout": 30000, "retryPolicy": "exponential"},
            ),
            make_agent("agent2", ["tool2"]),
        ],
        tools=[
            make_tool(
                "tool1",
                config={"url": "https://api.example.com"},
                auth={"type": "bearer", "credentials": {"token": "secret"}},
            ),
            make_tool("tool2", kind="graph", config={"endpoint": "https://graph.example.com"}),
        ],
        gates=[{"id": "gate1", "type": "approval", "approvers": ["user1", "user2"]}],
        edges=[make_edge("edge1", "agent1", "agent2"), make_edge("edge2", "agent2", "gate1")],
        start_node="agent1",
        outputs=["gate1"],
        description="A full example",
        metadata={
            "createdAt": "2024-01-01T00:00:00Z",
            "updatedAt": "2024-01-02T00:00:00+09:00",
            "author": "test-user",
            "tags": ["test", "example"],
            "nodePositions": {"agent1": {"x": 10, "y": 20.5}},
        },
    )
