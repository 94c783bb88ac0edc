"""Graph validation passes over an orchestration.

Each pass is independent and returns a `GraphCheckResult`. `check_graph`
runs them in a fixed priority order and concatenates the results, so the
first error of the combined result is the one compilation reports.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from agentfactory._errors import CompileError, ErrorCode, GraphWarning, WarningCode
from agentfactory._schema import Orchestration, validate_orchestration

from ._node_graph import NodeGraph

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GraphCheckResult:
    """Errors and warnings found by one or more passes.

    Errors block compilation; warnings never do.
    """

    errors: tuple[CompileError, ...] = ()
    warnings: tuple[GraphWarning, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __add__(self, other: GraphCheckResult) -> GraphCheckResult:
        return GraphCheckResult(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }


def check_reachability(orchestration: Orchestration) -> GraphCheckResult:
    """Check the start node exists and warn about nodes it cannot reach."""
    node_ids = set(orchestration.node_ids())
    warnings: list[GraphWarning] = []

    if not orchestration.agents:
        warnings.append(GraphWarning(WarningCode.NO_AGENTS, "No agents defined"))

    start = orchestration.start_node
    if start not in node_ids:
        error = CompileError(
            f'Start node "{start}" does not exist',
            ErrorCode.INVALID_START_NODE,
            {"startNode": start},
        )
        return GraphCheckResult(errors=(error,), warnings=tuple(warnings))

    graph = NodeGraph.from_edges(node_ids, ((e.source, e.target) for e in orchestration.edges))
    reachable = graph.reachable(start)
    warnings.extend(
        GraphWarning(
            WarningCode.UNREACHABLE_NODE,
            f'Node "{node_id}" is unreachable from start node',
            {"nodeId": node_id},
        )
        for node_id in sorted(node_ids - reachable)
    )
    return GraphCheckResult(warnings=tuple(warnings))


def check_tools_exist(orchestration: Orchestration) -> GraphCheckResult:
    """Check every tool id an agent references is a declared tool."""
    available = {tool.id for tool in orchestration.tools}
    errors = [
        CompileError(
            f'Agent "{agent.id}" references non-existent tool "{tool_id}"',
            ErrorCode.MISSING_TOOL,
            {"agentId": agent.id, "toolId": tool_id},
        )
        for agent in orchestration.agents
        for tool_id in agent.tools
        if tool_id not in available
    ]
    return GraphCheckResult(errors=tuple(errors))


def check_edges(orchestration: Orchestration) -> GraphCheckResult:
    """Check edge endpoints exist; warn about duplicate edges and duplicate node ids."""
    declared = orchestration.node_ids()
    node_ids = set(declared)
    errors: list[CompileError] = []
    warnings: list[GraphWarning] = []

    for edge in orchestration.edges:
        if edge.source not in node_ids:
            errors.append(
                CompileError(
                    f'Edge "{edge.id}" has invalid source node "{edge.source}"',
                    ErrorCode.INVALID_EDGE_SOURCE,
                    {"edgeId": edge.id, "source": edge.source},
                ),
            )
        if edge.target not in node_ids:
            errors.append(
                CompileError(
                    f'Edge "{edge.id}" has invalid target node "{edge.target}"',
                    ErrorCode.INVALID_EDGE_TARGET,
                    {"edgeId": edge.id, "target": edge.target},
                ),
            )

    seen: set[tuple[str, str]] = set()
    for edge in orchestration.edges:
        key = (edge.source, edge.target)
        if key in seen:
            warnings.append(
                GraphWarning(
                    WarningCode.DUPLICATE_EDGE,
                    f'Duplicate edge from "{edge.source}" to "{edge.target}"',
                    {"edgeId": edge.id, "source": edge.source, "target": edge.target},
                ),
            )
        seen.add(key)

    # Duplicate ids are tolerated (the later tool declaration wins at compile time) but flagged.
    for node_id, count in sorted(Counter(declared).items()):
        if count > 1:
            warnings.append(
                GraphWarning(
                    WarningCode.DUPLICATE_NODE_ID,
                    f'Node id "{node_id}" is declared {count} times',
                    {"nodeId": node_id, "count": count},
                ),
            )

    return GraphCheckResult(errors=tuple(errors), warnings=tuple(warnings))


def check_acyclic(orchestration: Orchestration) -> GraphCheckResult:
    """Check the node/edge graph is a DAG, reporting only the first cycle found."""
    graph = NodeGraph.from_edges(orchestration.node_ids(), ((e.source, e.target) for e in orchestration.edges))
    cycle = graph.find_cycle()
    if cycle is None:
        return GraphCheckResult()
    error = CompileError(
        "Cycle detected in agent graph",
        ErrorCode.CYCLE_DETECTED,
        {"nodeId": cycle[0], "cycle": cycle},
    )
    return GraphCheckResult(errors=(error,))


def check_outputs(orchestration: Orchestration) -> GraphCheckResult:
    """Check every output is a declared node; warn when there are none."""
    node_ids = set(orchestration.node_ids())
    errors = [
        CompileError(
            f'Output node "{output_id}" does not exist',
            ErrorCode.INVALID_OUTPUT_NODE,
            {"outputId": output_id},
        )
        for output_id in orchestration.outputs
        if output_id not in node_ids
    ]
    warnings = []
    if not orchestration.outputs:
        warnings.append(GraphWarning(WarningCode.NO_OUTPUTS, "No output nodes defined"))
    return GraphCheckResult(errors=tuple(errors), warnings=tuple(warnings))


GRAPH_CHECKS: tuple[Callable[[Orchestration], GraphCheckResult], ...] = (
    check_reachability,
    check_tools_exist,
    check_edges,
    check_acyclic,
    check_outputs,
)
"""All passes, in the priority order used to pick the error compilation reports."""


def check_graph(orchestration: Orchestration | Mapping[str, Any]) -> GraphCheckResult:
    """Run every graph pass and concatenate their results.

    Usable standalone (e.g. editor-time linting) to get the full list of
    errors and warnings, which compilation does not surface.

    Args:
        orchestration: An Orchestration, or a raw mapping to validate first.

    Returns:
        The combined result of all passes, in priority order.

    Raises:
        InvalidSpecError: If a raw mapping does not match the Orchestration schema.

    """
    if not isinstance(orchestration, Orchestration):
        orchestration = validate_orchestration(orchestration)

    result = GraphCheckResult()
    for check in GRAPH_CHECKS:
        pass_result = check(orchestration)
        logger.debug(
            "%s: %d error(s), %d warning(s)",
            check.__name__,
            len(pass_result.errors),
            len(pass_result.warnings),
        )
        result += pass_result
    return result
