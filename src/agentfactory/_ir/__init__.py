"""Intermediate Representation (IR) module for agentfactory.

The IR is the deterministic, fully resolved form of a ProjectSpec that an
execution runtime consumes.

Key types:
- NodeType: Enum for topology node kinds (AGENT, TOOL, GATE)
- CompiledAgent: An agent with resolved tools and sorted successors
- CompiledService: The compiled IR
- compile_spec: Function to build the IR from a ProjectSpec
- check_compiled: Optional consistency check over a produced IR
"""

from ._compiled import CompiledAgent, CompiledService, NodeType, Topology, TopologyNode
from ._compiler import build_compiled_service, compile_spec
from ._post_check import check_compiled

__all__ = [
    "CompiledAgent",
    "CompiledService",
    "NodeType",
    "Topology",
    "TopologyNode",
    "build_compiled_service",
    "check_compiled",
    "compile_spec",
]
