"""Structured errors and warnings produced by validation and compilation.

Every failure carries a machine-readable code plus the identifiers needed to
explain it, so callers at an HTTP boundary can map it to a status code
without re-deriving context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Self


class _DocumentedCode(StrEnum):
    """String enum whose members carry their own docstring."""

    def __new__(cls, value: str, doc: str = "") -> Self:
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.__doc__ = doc
        return obj


class ErrorCode(_DocumentedCode):
    """Codes for errors that abort compilation or post-compile checking."""

    INVALID_SPEC = "INVALID_SPEC", "The raw input does not conform to the ProjectSpec schema."
    INVALID_START_NODE = "INVALID_START_NODE", "The start node is not a declared agent, gate or tool."
    MISSING_TOOL = "MISSING_TOOL", "An agent references a tool id that is not declared."
    INVALID_EDGE_SOURCE = "INVALID_EDGE_SOURCE", "An edge starts at an undeclared node."
    INVALID_EDGE_TARGET = "INVALID_EDGE_TARGET", "An edge ends at an undeclared node."
    CYCLE_DETECTED = "CYCLE_DETECTED", "The node/edge graph contains a directed cycle."
    INVALID_OUTPUT_NODE = "INVALID_OUTPUT_NODE", "An output id is not a declared node."
    INVALID_START_AGENT = "INVALID_START_AGENT", "The compiled start agent is not among the compiled agents."
    INVALID_NEXT_AGENT = "INVALID_NEXT_AGENT", "A compiled agent lists a successor that is not a compiled agent."


class WarningCode(_DocumentedCode):
    """Codes for non-blocking findings of the graph checker."""

    UNREACHABLE_NODE = "UNREACHABLE_NODE", "A node cannot be reached from the start node."
    DUPLICATE_EDGE = "DUPLICATE_EDGE", "Two edges share the same (source, target) pair."
    DUPLICATE_NODE_ID = "DUPLICATE_NODE_ID", "An id is declared more than once across agents, gates and tools."
    NO_OUTPUTS = "NO_OUTPUTS", "The orchestration declares no output nodes."
    NO_AGENTS = "NO_AGENTS", "The orchestration declares no agents."


class CompileError(Exception):
    """An expected, structural failure of the input.

    Attributes:
        code: Machine-readable error code.
        message: Human-readable description.
        details: Contextual identifiers (agent id, edge id, ...).

    """

    def __init__(self, message: str, code: ErrorCode, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details: dict[str, Any] = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {"code": str(self.code), "message": self.message, "details": self.details}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r}, details={self.details!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompileError):
            return NotImplemented
        return (self.code, self.message, self.details) == (other.code, other.message, other.details)

    def __hash__(self) -> int:
        return hash((self.code, self.message))


@dataclass(frozen=True, slots=True)
class FieldViolation:
    """A single field-level schema violation."""

    loc: tuple[str | int, ...]
    msg: str
    type: str

    @property
    def path(self) -> str:
        """Dotted location, e.g. ``orchestration.agents.0.prompt``."""
        return ".".join(str(part) for part in self.loc)

    def to_dict(self) -> dict[str, Any]:
        return {"loc": list(self.loc), "msg": self.msg, "type": self.type}


class InvalidSpecError(CompileError):
    """Aggregated schema violations for a raw spec."""

    def __init__(self, violations: tuple[FieldViolation, ...] | list[FieldViolation]) -> None:
        self.violations = tuple(violations)
        super().__init__(
            "Invalid project specification",
            ErrorCode.INVALID_SPEC,
            {"violations": [v.to_dict() for v in self.violations]},
        )


@dataclass(frozen=True, slots=True)
class GraphWarning:
    """A non-blocking finding of the graph checker."""

    code: WarningCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {"code": str(self.code), "message": self.message, "details": self.details}
