"""Compiled service: the intermediate representation handed to a runtime."""

from __future__ import annotations

from enum import StrEnum, auto

from agentfactory._schema import (
    Edge,
    ExecutionPolicy,
    MemoryPolicy,
    NonEmptyStr,
    SpecMetadata,
    SpecModel,
    StrictStr,
    ToolBinding,
)


class NodeType(StrEnum):
    """The kind of node in the compiled topology."""

    AGENT = auto()
    TOOL = auto()
    GATE = auto()


class TopologyNode(SpecModel):
    id: StrictStr
    type: NodeType


class Topology(SpecModel):
    """All declared nodes tagged by kind, and every declared edge, each sorted by id."""

    nodes: tuple[TopologyNode, ...]
    edges: tuple[Edge, ...]


class CompiledAgent(SpecModel):
    """An agent with its tool references resolved and its successors computed.

    Attributes:
        tools: Full tool bindings, sorted by tool id.
        next_agents: Targets of the agent's outgoing edges, sorted; parallel
            edges to the same target are kept.

    """

    id: NonEmptyStr
    name: NonEmptyStr
    prompt: NonEmptyStr
    tools: tuple[ToolBinding, ...]
    next_agents: tuple[StrictStr, ...]
    memory: MemoryPolicy | None = None
    policies: ExecutionPolicy | None = None


class CompiledService(SpecModel):
    """The deterministic, fully resolved output of compilation.

    Every list is explicitly sorted, so compiling the same logical spec
    always serializes to the same bytes.
    """

    id: NonEmptyStr
    name: NonEmptyStr
    version: NonEmptyStr
    agents: tuple[CompiledAgent, ...]
    start_agent: NonEmptyStr
    outputs: tuple[StrictStr, ...]
    topology: Topology
    metadata: SpecMetadata | None = None

    def get_agent(self, agent_id: str) -> CompiledAgent:
        """Get a compiled agent by id.

        Raises:
            KeyError: If no compiled agent has that id.

        """
        for agent in self.agents:
            if agent.id == agent_id:
                return agent
        raise KeyError(agent_id)

    @property
    def agent_ids(self) -> frozenset[str]:
        return frozenset(agent.id for agent in self.agents)
