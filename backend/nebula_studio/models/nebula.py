"""Pydantic models for nebula definitions (the workflow graph).

A node's ``data`` record is bound to its ``type``: each node kind is its own
model and ``NodeDef`` is a discriminated union over them, so a data record
of the wrong shape for its type cannot be constructed.
"""

import re
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from nebula_studio import coercion

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


class NodeType(str, Enum):
    """The closed set of node kinds a nebula can contain."""

    DATA_SOURCE = "data-source"
    USER_INPUT = "user-input"
    AI_PROCESS = "ai-process"
    TRANSFORM = "transform"
    OUTPUT = "output"


class SourceType(str, Enum):
    """Browsing data a data-source node can pull from."""

    PAGES = "pages"
    TOPICS = "topics"
    HIGHLIGHTS = "highlights"
    CATEGORIES = "categories"
    CONCEPTS = "concepts"


class InputType(str, Enum):
    """Widget used to collect a user-input value at run time."""

    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    TAGS = "tags"


class TransformType(str, Enum):
    """Operation applied by a transform node."""

    MERGE = "merge"
    FILTER = "filter"
    FORMAT = "format"
    EXTRACT = "extract"


class OutputFormat(str, Enum):
    """Format of the artifact produced by an output node."""

    MARKDOWN = "markdown"
    PLAIN_TEXT = "plain_text"


# ==================== Geometry ====================


class Position(BaseModel):
    """A point on the editing canvas."""

    x: float = 0.0
    y: float = 0.0


class Viewport(BaseModel):
    """Pan/zoom state of the editing canvas."""

    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    @field_validator("zoom", mode="before")
    @classmethod
    def _coerce_zoom(cls, v: Any) -> float:
        zoom = coercion.float_or_default(v, 1.0)
        return zoom if zoom > 0 else 1.0


# ==================== Node Configuration ====================


class DateRange(BaseModel):
    """Inclusive time window in epoch milliseconds."""

    start: int
    end: int


class DataSourceFilters(BaseModel):
    """Optional filters narrowing what a data source returns."""

    date_range: DateRange | None = None
    topic_ids: list[int] | None = None
    category_ids: list[int] | None = None
    limit: int | None = None

    @field_validator("limit", mode="before")
    @classmethod
    def _coerce_limit(cls, v: Any) -> int | None:
        return coercion.optional_positive_int(v)


class DataSourceConfig(BaseModel):
    """Configuration of a data-source node."""

    label: str = "Data Source"
    source_type: SourceType = SourceType.PAGES
    filters: DataSourceFilters = Field(default_factory=DataSourceFilters)

    @field_validator("source_type", mode="before")
    @classmethod
    def _coerce_source_type(cls, v: Any) -> SourceType:
        return coercion.choice_or_default(v, SourceType, SourceType.PAGES)

    @field_validator("filters", mode="before")
    @classmethod
    def _default_filters(cls, v: Any) -> Any:
        return {} if v is None else v


class UserInputConfig(BaseModel):
    """Configuration of a user-input node."""

    label: str = "User Input"
    input_type: InputType = InputType.TEXT
    placeholder: str = ""
    default_value: str = ""
    options: list[str] = Field(default_factory=list)  # Only used by select inputs
    required: bool = True

    @field_validator("input_type", mode="before")
    @classmethod
    def _coerce_input_type(cls, v: Any) -> InputType:
        return coercion.choice_or_default(v, InputType, InputType.TEXT)

    @field_validator("placeholder", "default_value", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return coercion.text(v)

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, v: Any) -> list[str]:
        return coercion.split_list(v)

    @field_validator("required", mode="before")
    @classmethod
    def _coerce_required(cls, v: Any) -> bool:
        return coercion.bool_or_default(v, True)


class AIProcessConfig(BaseModel):
    """Configuration of an ai-process node."""

    label: str = "AI Process"
    prompt_template: str = ""
    temperature: float = 0.5
    max_tokens: int = 3000

    @field_validator("prompt_template", mode="before")
    @classmethod
    def _coerce_prompt(cls, v: Any) -> str:
        return coercion.text(v)

    @field_validator("temperature", mode="before")
    @classmethod
    def _coerce_temperature(cls, v: Any) -> float:
        return coercion.float_or_default(v, 0.5)

    @field_validator("max_tokens", mode="before")
    @classmethod
    def _coerce_max_tokens(cls, v: Any) -> int:
        return coercion.positive_int_or_default(v, 3000)

    def referenced_node_ids(self) -> list[str]:
        """Node ids named by ``{{node-id}}`` placeholders, in first-use order."""
        seen: list[str] = []
        for match in PLACEHOLDER_PATTERN.finditer(self.prompt_template):
            key = match.group(1).strip()
            if key and key not in seen:
                seen.append(key)
        return seen


class TransformOptions(BaseModel):
    """Variant-specific settings of a transform node.

    ``keyword`` is read by filter transforms and ``lines`` by extract
    transforms; other keys are carried through untouched.
    """

    keyword: str | None = None
    lines: int | None = None

    model_config = {"extra": "allow"}

    @field_validator("lines", mode="before")
    @classmethod
    def _coerce_lines(cls, v: Any) -> int | None:
        if v is None:
            return None
        return coercion.positive_int_or_default(v, 20)


class TransformConfig(BaseModel):
    """Configuration of a transform node."""

    label: str = "Transform"
    transform_type: TransformType = TransformType.MERGE
    config: TransformOptions = Field(default_factory=TransformOptions)

    @field_validator("transform_type", mode="before")
    @classmethod
    def _coerce_transform_type(cls, v: Any) -> TransformType:
        return coercion.choice_or_default(v, TransformType, TransformType.MERGE)

    @field_validator("config", mode="before")
    @classmethod
    def _default_config(cls, v: Any) -> Any:
        return {} if v is None else v


class OutputConfig(BaseModel):
    """Configuration of an output node."""

    label: str = "Output"
    format: OutputFormat = OutputFormat.MARKDOWN
    artifact_title_template: str = ""

    @field_validator("format", mode="before")
    @classmethod
    def _coerce_format(cls, v: Any) -> OutputFormat:
        return coercion.choice_or_default(v, OutputFormat, OutputFormat.MARKDOWN)

    @field_validator("artifact_title_template", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        return coercion.text(v)


TypedConfig = Union[
    DataSourceConfig, UserInputConfig, AIProcessConfig, TransformConfig, OutputConfig
]


# ==================== Nodes & Edges ====================


class DataSourceNode(BaseModel):
    """A node that pulls browsing data."""

    id: str
    type: Literal["data-source"] = "data-source"
    position: Position = Field(default_factory=Position)
    data: DataSourceConfig = Field(default_factory=DataSourceConfig)


class UserInputNode(BaseModel):
    """A node that prompts the user for a value at run time."""

    id: str
    type: Literal["user-input"] = "user-input"
    position: Position = Field(default_factory=Position)
    data: UserInputConfig = Field(default_factory=UserInputConfig)


class AIProcessNode(BaseModel):
    """A node that generates content from a prompt template."""

    id: str
    type: Literal["ai-process"] = "ai-process"
    position: Position = Field(default_factory=Position)
    data: AIProcessConfig = Field(default_factory=AIProcessConfig)


class TransformNode(BaseModel):
    """A node that merges, filters, formats or extracts upstream results."""

    id: str
    type: Literal["transform"] = "transform"
    position: Position = Field(default_factory=Position)
    data: TransformConfig = Field(default_factory=TransformConfig)


class OutputNode(BaseModel):
    """A node that produces the final artifact."""

    id: str
    type: Literal["output"] = "output"
    position: Position = Field(default_factory=Position)
    data: OutputConfig = Field(default_factory=OutputConfig)


NodeDef = Annotated[
    Union[DataSourceNode, UserInputNode, AIProcessNode, TransformNode, OutputNode],
    Field(discriminator="type"),
]


class EdgeDef(BaseModel):
    """A directed connection between two nodes."""

    id: str
    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")
    target_handle: str | None = Field(default=None, alias="targetHandle")

    model_config = {"populate_by_name": True}

    @field_validator("source_handle", "target_handle", mode="before")
    @classmethod
    def _blank_handle_is_unset(cls, v: Any) -> Any:
        return v or None


def check_graph_integrity(nodes: list[Any], edges: list[EdgeDef]) -> None:
    """Raise ValueError if node/edge ids collide or an edge dangles."""
    node_ids: set[str] = set()
    for node in nodes:
        if node.id in node_ids:
            raise ValueError(f"Duplicate node id: {node.id}")
        node_ids.add(node.id)

    edge_ids: set[str] = set()
    for edge in edges:
        if edge.id in edge_ids:
            raise ValueError(f"Duplicate edge id: {edge.id}")
        edge_ids.add(edge.id)
        if edge.source not in node_ids:
            raise ValueError(f"Edge {edge.id} references unknown source node: {edge.source}")
        if edge.target not in node_ids:
            raise ValueError(f"Edge {edge.id} references unknown target node: {edge.target}")


# ==================== Definitions ====================


class WorkflowDefinition(BaseModel):
    """The persistable part of a nebula: its graph and canvas state."""

    name: str = "Untitled Nebula"
    nodes: list[NodeDef] = Field(default_factory=list)
    edges: list[EdgeDef] = Field(default_factory=list)
    viewport: Viewport | None = None

    @model_validator(mode="after")
    def check_integrity(self) -> "WorkflowDefinition":
        check_graph_integrity(self.nodes, self.edges)
        return self


class NebulaCreate(BaseModel):
    """Request model for creating a nebula."""

    name: str
    description: str = ""
    icon: str = ""
    nodes: list[NodeDef] = Field(default_factory=list)
    edges: list[EdgeDef] = Field(default_factory=list)
    viewport: Viewport | None = None
    is_template: bool = False
    template_id: str | None = None

    @model_validator(mode="after")
    def check_integrity(self) -> "NebulaCreate":
        check_graph_integrity(self.nodes, self.edges)
        return self


class NebulaUpdate(BaseModel):
    """Request model for updating a nebula (partial updates).

    Omitted fields are left unchanged. ``viewport`` may be sent as null to clear it.
    """

    name: str | None = None
    description: str | None = None
    icon: str | None = None
    nodes: list[NodeDef] | None = None
    edges: list[EdgeDef] | None = None
    viewport: Viewport | None = None


class Nebula(BaseModel):
    """A stored nebula record."""

    id: str
    name: str
    description: str = ""
    icon: str = ""
    nodes: list[NodeDef] = Field(default_factory=list)
    edges: list[EdgeDef] = Field(default_factory=list)
    viewport: Viewport | None = None
    is_template: bool = False
    template_id: str | None = None
    created_at: str
    updated_at: str

    def definition(self) -> WorkflowDefinition:
        """Project the record onto its persistable workflow definition."""
        return WorkflowDefinition(
            name=self.name,
            nodes=[node.model_copy(deep=True) for node in self.nodes],
            edges=[edge.model_copy() for edge in self.edges],
            viewport=self.viewport.model_copy() if self.viewport else None,
        )


class NebulaSummary(BaseModel):
    """Summary of a nebula for listing."""

    id: str
    name: str
    description: str
    icon: str
    is_template: bool
    template_id: str | None = None
    node_count: int
    edge_count: int
    created_at: str
    updated_at: str
