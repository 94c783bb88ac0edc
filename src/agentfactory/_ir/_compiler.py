"""Compile a ProjectSpec into a CompiledService.

Compilation is a pure function of its input: every lookup table is built
per call, and every output list has an explicit total order so the result
can serve as a content-addressing key.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from agentfactory._errors import CompileError, InvalidSpecError
from agentfactory._graph import check_graph
from agentfactory._result import Err, Ok
from agentfactory._schema import validate_spec

from ._compiled import CompiledAgent, CompiledService, NodeType, Topology, TopologyNode

if TYPE_CHECKING:
    from collections.abc import Mapping

    from agentfactory._result import Result
    from agentfactory._schema import AgentDef, Edge, Orchestration, ProjectSpec, SpecModel, ToolBinding

logger = logging.getLogger(__name__)


def _tiebreak(model: SpecModel) -> str:
    # Orders values that share an id (only possible with duplicate declarations).
    return json.dumps(model.model_dump(mode="json", by_alias=True, exclude_none=True), sort_keys=True)


def _build_tool_lookup(tools: tuple[ToolBinding, ...]) -> dict[str, ToolBinding]:
    # A later declaration with the same id replaces the earlier one.
    return {tool.id: tool for tool in tools}


def _compile_agent(agent: AgentDef, edges: tuple[Edge, ...], tool_lookup: dict[str, ToolBinding]) -> CompiledAgent:
    next_agents = sorted(edge.target for edge in edges if edge.source == agent.id)
    tools = sorted(
        (tool_lookup[tool_id] for tool_id in agent.tools if tool_id in tool_lookup),
        key=lambda tool: (tool.id, _tiebreak(tool)),
    )
    return CompiledAgent(
        id=agent.id,
        name=agent.name,
        prompt=agent.prompt,
        tools=tuple(tools),
        next_agents=tuple(next_agents),
        memory=agent.memory,
        policies=agent.policies,
    )


def _build_topology(orchestration: Orchestration) -> Topology:
    nodes = [
        *(TopologyNode(id=agent.id, type=NodeType.AGENT) for agent in orchestration.agents),
        *(TopologyNode(id=tool.id, type=NodeType.TOOL) for tool in orchestration.tools),
        *(TopologyNode(id=gate.id, type=NodeType.GATE) for gate in orchestration.gates),
    ]
    return Topology(
        nodes=tuple(sorted(nodes, key=lambda node: (node.id, node.type))),
        edges=tuple(sorted(orchestration.edges, key=lambda edge: (edge.id, _tiebreak(edge)))),
    )


def build_compiled_service(spec: ProjectSpec) -> CompiledService:
    """Build the IR from a spec that already passed schema and graph validation.

    Args:
        spec: A validated ProjectSpec whose graph checks produced no errors.

    Returns:
        The CompiledService for the project.

    """
    orchestration = spec.orchestration
    tool_lookup = _build_tool_lookup(orchestration.tools)

    compiled_agents = [_compile_agent(agent, orchestration.edges, tool_lookup) for agent in orchestration.agents]
    compiled_agents.sort(key=lambda agent: (agent.id, _tiebreak(agent)))

    return CompiledService(
        id=spec.id,
        name=spec.name,
        version=spec.version,
        agents=tuple(compiled_agents),
        start_agent=orchestration.start_node,
        outputs=tuple(sorted(orchestration.outputs)),
        topology=_build_topology(orchestration),
        metadata=spec.metadata,
    )


def compile_spec(spec: ProjectSpec | Mapping[str, Any]) -> Result[CompiledService]:
    """Compile a project spec into a CompiledService.

    The pipeline is: schema validation, then all graph checks, then IR
    construction. It fails fast: only the first error (in graph-check
    priority order) is reported, and warnings are never surfaced here; use
    `check_graph` directly for the full list.

    Args:
        spec: A raw JSON-like mapping or a ProjectSpec.

    Returns:
        ``Ok(CompiledService)`` on success, otherwise ``Err`` carrying an
        `InvalidSpecError` or the first graph `CompileError`.

    Example:
        match compile_spec(raw):
            case Ok(value=compiled):
                print(compiled.start_agent)
            case Err(error=error):
                print(error.code)

    """
    try:
        validated = validate_spec(spec)
    except InvalidSpecError as e:
        logger.debug("Schema validation failed: %d violation(s)", len(e.violations))
        return Err(e)

    graph_result = check_graph(validated.orchestration)
    if not graph_result.is_valid:
        first: CompileError = graph_result.errors[0]
        logger.debug("Graph validation failed with %d error(s); reporting %s", len(graph_result.errors), first.code)
        return Err(first)

    compiled = build_compiled_service(validated)
    logger.debug("Compiled project %r: %d agent(s)", compiled.name, len(compiled.agents))
    return Ok(compiled)
