"""Input schema for project specs and the schema validation entry points.

The models mirror the JSON wire format (camelCase keys) while exposing
snake_case attributes. Validation only establishes that a value is
shape-correct; graph reasoning happens in `agentfactory._graph`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ._errors import FieldViolation, InvalidSpecError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


def _check_iso_datetime(value: str) -> str:
    # Kept as the original string so metadata passes through unmodified.
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        msg = f"Invalid ISO-8601 datetime: {value!r}"
        raise ValueError(msg) from None
    if parsed.tzinfo is None:
        msg = f"Datetime must include a timezone: {value!r}"
        raise ValueError(msg)
    return value


NonEmptyStr = Annotated[str, Field(strict=True, min_length=1)]
StrictStr = Annotated[str, Field(strict=True)]
PositiveInt = Annotated[int, Field(strict=True, gt=0)]
PositiveNumber = Annotated[int, Field(strict=True, gt=0)] | Annotated[float, Field(strict=True, gt=0)]
Number = Annotated[int, Field(strict=True)] | Annotated[float, Field(strict=True)]
UnitInterval = Annotated[int, Field(strict=True, ge=0, le=1)] | Annotated[float, Field(strict=True, ge=0, le=1)]
IsoDatetime = Annotated[str, Field(strict=True), AfterValidator(_check_iso_datetime)]


class ToolKind(StrEnum):
    """External integration family of a tool binding."""

    GRAPH = "graph"
    SHAREPOINT = "sharepoint"
    SERVICENOW = "servicenow"
    DATAVERSE = "dataverse"
    REST = "rest"
    MCP = "mcp"


class AuthType(StrEnum):
    BEARER = "bearer"
    OAUTH2 = "oauth2"
    APIKEY = "apikey"
    NONE = "none"


class MemoryType(StrEnum):
    EPHEMERAL = "ephemeral"
    PERSISTENT = "persistent"


class RetryPolicy(StrEnum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    NONE = "none"


class GateType(StrEnum):
    """Decision gate behaviour."""

    APPROVAL = "approval"
    CONDITION = "condition"
    MERGE = "merge"
    SPLIT = "split"


class MergeStrategy(StrEnum):
    ALL = "all"
    ANY = "any"
    MAJORITY = "majority"


class EvalMetricType(StrEnum):
    ACCURACY = "accuracy"
    LATENCY = "latency"
    COST = "cost"
    CUSTOM = "custom"


class Environment(StrEnum):
    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class SpecModel(BaseModel):
    """Base for all wire models: immutable, camelCase on the wire, unknown keys dropped."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        revalidate_instances="always",
    )


class MemoryPolicy(SpecModel):
    type: MemoryType
    max_tokens: PositiveInt | None = None


class ExecutionPolicy(SpecModel):
    max_iterations: PositiveInt | None = None
    timeout: PositiveNumber | None = None
    retry_policy: RetryPolicy | None = None


class AgentDef(SpecModel):
    """An agent: a prompt plus references to the tools it may call."""

    id: NonEmptyStr
    name: NonEmptyStr
    prompt: NonEmptyStr
    tools: tuple[StrictStr, ...]
    memory: MemoryPolicy | None = None
    policies: ExecutionPolicy | None = None


class AuthDescriptor(SpecModel):
    type: AuthType
    credentials: dict[str, StrictStr] | None = None


class ToolBinding(SpecModel):
    """A declared external integration that agents may reference by id."""

    id: NonEmptyStr
    name: NonEmptyStr
    kind: ToolKind
    config: dict[str, Any]
    auth: AuthDescriptor | None = None


class Gate(SpecModel):
    id: NonEmptyStr
    type: GateType
    condition: StrictStr | None = None
    approvers: tuple[StrictStr, ...] | None = None
    merge_strategy: MergeStrategy | None = None


class Edge(SpecModel):
    id: NonEmptyStr
    source: NonEmptyStr
    target: NonEmptyStr
    condition: StrictStr | None = None
    label: StrictStr | None = None


class Orchestration(SpecModel):
    """The graph portion of a project spec."""

    id: NonEmptyStr
    name: NonEmptyStr
    agents: tuple[AgentDef, ...]
    tools: tuple[ToolBinding, ...]
    gates: tuple[Gate, ...]
    edges: tuple[Edge, ...]
    start_node: NonEmptyStr
    outputs: tuple[StrictStr, ...]

    def node_ids(self) -> list[str]:
        """All declared node ids (agents, gates, tools), in declaration order, duplicates kept."""
        return [a.id for a in self.agents] + [g.id for g in self.gates] + [t.id for t in self.tools]


class EvalMetric(SpecModel):
    name: NonEmptyStr
    type: EvalMetricType
    threshold: Number | None = None
    weight: UnitInterval | None = None


class EvalCase(SpecModel):
    id: NonEmptyStr
    input: dict[str, Any]
    expected_output: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None


class EvalSuite(SpecModel):
    id: NonEmptyStr
    name: NonEmptyStr
    description: StrictStr | None = None
    metrics: tuple[EvalMetric, ...]
    test_cases: tuple[EvalCase, ...]
    environment: Environment


class NodePosition(SpecModel):
    x: Number
    y: Number


class SpecMetadata(SpecModel):
    created_at: IsoDatetime
    updated_at: IsoDatetime
    author: StrictStr | None = None
    tags: tuple[StrictStr, ...] | None = None
    node_positions: dict[str, NodePosition] | None = None


class ProjectSpec(SpecModel):
    """The full user-authored workflow definition submitted for compilation."""

    id: NonEmptyStr
    name: NonEmptyStr
    version: NonEmptyStr
    description: StrictStr | None = None
    orchestration: Orchestration
    evaluations: tuple[EvalSuite, ...] | None = None
    metadata: SpecMetadata | None = None


def _violations(exc: ValidationError) -> list[FieldViolation]:
    return [
        FieldViolation(loc=tuple(err["loc"]), msg=err["msg"], type=err["type"])
        for err in exc.errors(include_url=False)
    ]


M = TypeVar("M", bound="SpecModel")


def _validate_as(model: type[M], raw: Mapping[str, Any] | M) -> M:
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        violations = _violations(e)
        logger.debug("%s failed schema validation with %d violation(s)", model.__name__, len(violations))
        raise InvalidSpecError(violations) from e


def validate_spec(raw: Mapping[str, Any] | ProjectSpec) -> ProjectSpec:
    """Validate a raw value against the ProjectSpec schema.

    Args:
        raw: A JSON-like mapping, or an existing ProjectSpec (re-validated).

    Returns:
        The validated, immutable ProjectSpec.

    Raises:
        InvalidSpecError: Aggregating every field-level violation.

    """
    return _validate_as(ProjectSpec, raw)


def validate_orchestration(raw: Mapping[str, Any] | Orchestration) -> Orchestration:
    """Validate a raw value against the Orchestration schema.

    Raises:
        InvalidSpecError: Aggregating every field-level violation.

    """
    return _validate_as(Orchestration, raw)
