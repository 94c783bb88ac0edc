"""Graph module: structural validation of orchestration graphs.

This module contains:
- NodeGraph: an immutable, index-based directed graph over node ids
- reachable_from / find_cycle: iterative traversals over node indices
- check_graph and the five validation passes it drives
"""

from ._algorithms import find_cycle, reachable_from
from ._checks import (
    GRAPH_CHECKS,
    GraphCheckResult,
    check_acyclic,
    check_edges,
    check_graph,
    check_outputs,
    check_reachability,
    check_tools_exist,
)
from ._node_graph import NodeGraph

__all__ = [
    "GRAPH_CHECKS",
    "GraphCheckResult",
    "NodeGraph",
    "check_acyclic",
    "check_edges",
    "check_graph",
    "check_outputs",
    "check_reachability",
    "check_tools_exist",
    "find_cycle",
    "reachable_from",
]
