"""NodeTypeRegistry - binds each node type to its configuration model and form schema."""

from dataclasses import dataclass

from pydantic import BaseModel

from nebula_studio.models import (
    AIProcessConfig,
    AIProcessNode,
    ConfigField,
    DataSourceConfig,
    DataSourceNode,
    FieldKind,
    InputType,
    NodeType,
    OutputConfig,
    OutputFormat,
    OutputNode,
    PaletteItem,
    Position,
    SourceType,
    TransformConfig,
    TransformNode,
    TransformType,
    TypedConfig,
    UserInputConfig,
    UserInputNode,
)


def _label_field() -> ConfigField:
    return ConfigField(key="label", label="Label", kind=FieldKind.STRING, required=True)


def _enum_values(enum_cls: type) -> list[str]:
    return [member.value for member in enum_cls]


@dataclass(frozen=True)
class NodeKind:
    """Everything the editor knows about one node type."""

    type: NodeType
    label: str
    description: str
    config_model: type[BaseModel]
    node_model: type[BaseModel]
    fields: tuple[ConfigField, ...]


_KINDS: dict[NodeType, NodeKind] = {
    NodeType.DATA_SOURCE: NodeKind(
        type=NodeType.DATA_SOURCE,
        label="Data Source",
        description="Pull from your browsing data",
        config_model=DataSourceConfig,
        node_model=DataSourceNode,
        fields=(
            _label_field(),
            ConfigField(
                key="source_type",
                label="Source Type",
                kind=FieldKind.ENUM,
                required=True,
                values=_enum_values(SourceType),
                default=SourceType.PAGES.value,
            ),
            ConfigField(
                key="filters.limit",
                label="Limit (optional)",
                kind=FieldKind.INTEGER,
                placeholder="e.g., 30",
            ),
        ),
    ),
    NodeType.USER_INPUT: NodeKind(
        type=NodeType.USER_INPUT,
        label="User Input",
        description="Collect input at run time",
        config_model=UserInputConfig,
        node_model=UserInputNode,
        fields=(
            _label_field(),
            ConfigField(
                key="input_type",
                label="Input Type",
                kind=FieldKind.ENUM,
                required=True,
                values=_enum_values(InputType),
                default=InputType.TEXT.value,
            ),
            ConfigField(key="placeholder", label="Placeholder", kind=FieldKind.STRING, default=""),
            ConfigField(
                key="default_value", label="Default Value", kind=FieldKind.STRING, default=""
            ),
            ConfigField(
                key="options",
                label="Options (comma-separated)",
                kind=FieldKind.STRING_LIST,
                default=[],
                placeholder="Option 1, Option 2, Option 3",
                visible_when={"input_type": InputType.SELECT.value},
            ),
            ConfigField(key="required", label="Required", kind=FieldKind.BOOLEAN, default=True),
        ),
    ),
    NodeType.AI_PROCESS: NodeKind(
        type=NodeType.AI_PROCESS,
        label="AI Process",
        description="Generate content with AI",
        config_model=AIProcessConfig,
        node_model=AIProcessNode,
        fields=(
            _label_field(),
            ConfigField(
                key="prompt_template",
                label="Prompt Template",
                kind=FieldKind.TEXT,
                default="",
                placeholder="Use {{node-id}} to reference upstream nodes...",
            ),
            ConfigField(
                key="temperature",
                label="Temperature",
                kind=FieldKind.NUMBER,
                default=0.5,
                placeholder="0.0 - 1.0",
            ),
            ConfigField(key="max_tokens", label="Max Tokens", kind=FieldKind.INTEGER, default=3000),
        ),
    ),
    NodeType.TRANSFORM: NodeKind(
        type=NodeType.TRANSFORM,
        label="Transform",
        description="Merge, filter, or format data",
        config_model=TransformConfig,
        node_model=TransformNode,
        fields=(
            _label_field(),
            ConfigField(
                key="transform_type",
                label="Transform Type",
                kind=FieldKind.ENUM,
                required=True,
                values=_enum_values(TransformType),
                default=TransformType.MERGE.value,
            ),
            ConfigField(
                key="config.keyword",
                label="Filter Keyword",
                kind=FieldKind.STRING,
                default="",
                visible_when={"transform_type": TransformType.FILTER.value},
            ),
            ConfigField(
                key="config.lines",
                label="Lines to Extract",
                kind=FieldKind.INTEGER,
                default=20,
                visible_when={"transform_type": TransformType.EXTRACT.value},
            ),
        ),
    ),
    NodeType.OUTPUT: NodeKind(
        type=NodeType.OUTPUT,
        label="Output",
        description="Produce the final artifact",
        config_model=OutputConfig,
        node_model=OutputNode,
        fields=(
            _label_field(),
            ConfigField(
                key="format",
                label="Format",
                kind=FieldKind.ENUM,
                required=True,
                values=_enum_values(OutputFormat),
                default=OutputFormat.MARKDOWN.value,
            ),
            ConfigField(
                key="artifact_title_template",
                label="Artifact Title Template",
                kind=FieldKind.STRING,
                default="",
                placeholder="e.g., Article: {{input-topic}}",
            ),
        ),
    ),
}


def kind_of(node_type: NodeType | str) -> NodeKind:
    """Look up a node kind. Raises ValueError for a tag outside the closed type set."""
    return _KINDS[NodeType(node_type)]


def default_data(node_type: NodeType | str) -> TypedConfig:
    """Return a fresh, fully-populated default configuration for ``node_type``."""
    return kind_of(node_type).config_model()  # type: ignore[return-value]


def field_schema(node_type: NodeType | str) -> list[ConfigField]:
    """Return the editable fields of ``node_type`` in form order."""
    return [field.model_copy(deep=True) for field in kind_of(node_type).fields]


def config_model(node_type: NodeType | str) -> type[BaseModel]:
    """Return the configuration model bound to ``node_type``."""
    return kind_of(node_type).config_model


def node_model(node_type: NodeType | str) -> type[BaseModel]:
    """Return the node model bound to ``node_type``."""
    return kind_of(node_type).node_model


def create_node(node_type: NodeType | str, node_id: str, position: Position):
    """Build a node of ``node_type`` carrying the type's default configuration."""
    kind = kind_of(node_type)
    return kind.node_model(
        id=node_id,
        position=position.model_copy(),
        data=kind.config_model(),
    )


def palette() -> list[PaletteItem]:
    """The node palette, in display order."""
    return [
        PaletteItem(type=kind.type, label=kind.label, description=kind.description)
        for kind in _KINDS.values()
    ]
