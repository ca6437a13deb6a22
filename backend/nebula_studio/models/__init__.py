"""Pydantic models for Nebula Studio."""

from nebula_studio.models.editor import (
    ConfigField,
    EdgeRemoveChange,
    FieldKind,
    NodeChange,
    NodePositionChange,
    NodeRemoveChange,
    NodeSelectChange,
    NodeTypeSchema,
    PaletteItem,
    SessionState,
)
from nebula_studio.models.nebula import (
    AIProcessConfig,
    AIProcessNode,
    DataSourceConfig,
    DataSourceFilters,
    DataSourceNode,
    DateRange,
    EdgeDef,
    InputType,
    Nebula,
    NebulaCreate,
    NebulaSummary,
    NebulaUpdate,
    NodeDef,
    NodeType,
    OutputConfig,
    OutputFormat,
    OutputNode,
    Position,
    SourceType,
    TransformConfig,
    TransformNode,
    TransformOptions,
    TransformType,
    TypedConfig,
    UserInputConfig,
    UserInputNode,
    Viewport,
    WorkflowDefinition,
)

__all__ = [
    # Definition
    "WorkflowDefinition",
    "NodeType",
    "NodeDef",
    "EdgeDef",
    "Position",
    "Viewport",
    # Node kinds
    "DataSourceNode",
    "UserInputNode",
    "AIProcessNode",
    "TransformNode",
    "OutputNode",
    # Configuration
    "TypedConfig",
    "DataSourceConfig",
    "DataSourceFilters",
    "DateRange",
    "SourceType",
    "UserInputConfig",
    "InputType",
    "AIProcessConfig",
    "TransformConfig",
    "TransformOptions",
    "TransformType",
    "OutputConfig",
    "OutputFormat",
    # Stored records
    "Nebula",
    "NebulaCreate",
    "NebulaUpdate",
    "NebulaSummary",
    # Editor
    "ConfigField",
    "FieldKind",
    "PaletteItem",
    "NodeTypeSchema",
    "NodeChange",
    "NodePositionChange",
    "NodeRemoveChange",
    "NodeSelectChange",
    "EdgeRemoveChange",
    "SessionState",
]
