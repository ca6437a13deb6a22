"""Pydantic models for the editor: field schemas, palette and canvas events."""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from nebula_studio.models.nebula import EdgeDef, NodeDef, NodeType, Position, Viewport


class FieldKind(str, Enum):
    """Widget kinds a configuration form renders."""

    STRING = "string"
    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    STRING_LIST = "string[]"


class ConfigField(BaseModel):
    """An editable field of a node type's configuration."""

    key: str  # Dotted for nested fields, e.g. "filters.limit"
    label: str
    kind: FieldKind
    required: bool = False
    values: list[str] | None = None  # For enum fields
    default: Any | None = None
    placeholder: str = ""
    visible_when: dict[str, str] | None = Field(default=None, alias="visibleWhen")

    model_config = {"populate_by_name": True}


class PaletteItem(BaseModel):
    """An entry in the node palette."""

    type: NodeType
    label: str
    description: str


# ==================== Canvas Change Events ====================


class NodePositionChange(BaseModel):
    """A node was dragged to a new position."""

    type: Literal["position"] = "position"
    id: str
    position: Position


class NodeRemoveChange(BaseModel):
    """A node was removed on the canvas (e.g. via the delete key)."""

    type: Literal["remove"] = "remove"
    id: str


class NodeSelectChange(BaseModel):
    """A node's selection state changed on the canvas."""

    type: Literal["select"] = "select"
    id: str
    selected: bool


NodeChange = Annotated[
    Union[NodePositionChange, NodeRemoveChange, NodeSelectChange],
    Field(discriminator="type"),
]


class EdgeRemoveChange(BaseModel):
    """An edge was removed on the canvas."""

    type: Literal["remove"] = "remove"
    id: str


# ==================== Session State ====================


class SessionState(BaseModel):
    """Snapshot of an editing session handed to the canvas renderer."""

    session_id: str
    nebula_id: str | None = None
    name: str
    nodes: list[NodeDef]
    edges: list[EdgeDef]
    viewport: Viewport
    selected_node_id: str | None = None


class NodeTypeSchema(BaseModel):
    """Form schema and default configuration of one node type."""

    type: NodeType
    fields: list[ConfigField]
    defaults: dict[str, Any]
