"""Compiler from declarative multi-agent workflow specs to a deterministic IR."""

__all__ = [
    "AgentDef",
    "CompileError",
    "CompiledAgent",
    "CompiledService",
    "Edge",
    "Err",
    "ErrorCode",
    "FieldViolation",
    "Gate",
    "GraphCheckResult",
    "GraphWarning",
    "InvalidSpecError",
    "NodeGraph",
    "NodeType",
    "Ok",
    "Orchestration",
    "ProjectSpec",
    "Result",
    "ToolBinding",
    "Topology",
    "TopologyNode",
    "WarningCode",
    "check_acyclic",
    "check_compiled",
    "check_edges",
    "check_graph",
    "check_outputs",
    "check_reachability",
    "check_tools_exist",
    "compile_spec",
    "export_compiled",
    "ir_digest",
    "load_compiled",
    "load_spec",
    "to_canonical_json",
    "validate_orchestration",
    "validate_spec",
]

from ._errors import CompileError, ErrorCode, FieldViolation, GraphWarning, InvalidSpecError, WarningCode
from ._graph import (
    GraphCheckResult,
    NodeGraph,
    check_acyclic,
    check_edges,
    check_graph,
    check_outputs,
    check_reachability,
    check_tools_exist,
)
from ._io import export_compiled, ir_digest, load_compiled, load_spec, to_canonical_json
from ._ir import CompiledAgent, CompiledService, NodeType, Topology, TopologyNode, check_compiled, compile_spec
from ._result import Err, Ok, Result
from ._schema import AgentDef, Edge, Gate, Orchestration, ProjectSpec, ToolBinding, validate_orchestration, validate_spec
