"""ConfigBinder - applies single-field form edits to node configurations.

Every edit produces a new configuration value; the input is never mutated.
Raw values go through the coerce-or-default policies in
``nebula_studio.coercion``, so malformed input lands on the field's default
instead of raising. Field names a type does not have are ignored.

Nested fields use dotted keys: ``filters.limit`` on data sources and
``config.keyword`` / ``config.lines`` on transforms.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from nebula_studio import coercion
from nebula_studio.editor.session import GraphSession
from nebula_studio.models import (
    AIProcessConfig,
    AIProcessNode,
    DataSourceConfig,
    DataSourceFilters,
    DataSourceNode,
    InputType,
    NodeDef,
    OutputConfig,
    OutputFormat,
    OutputNode,
    SourceType,
    TransformConfig,
    TransformNode,
    TransformOptions,
    TransformType,
    TypedConfig,
    UserInputConfig,
    UserInputNode,
)

_NODE_MODELS = (DataSourceNode, UserInputNode, AIProcessNode, TransformNode, OutputNode)

Update = dict[str, Any] | None


def _data_source_update(config: DataSourceConfig, field: str, raw: Any) -> Update:
    if field == "label":
        return {"label": coercion.text(raw)}
    if field == "source_type":
        return {"source_type": coercion.choice_or_default(raw, SourceType, SourceType.PAGES)}
    if field in ("filters.limit", "limit"):
        limit = coercion.optional_positive_int(raw)
        return {"filters": config.filters.model_copy(update={"limit": limit}, deep=True)}
    if field == "filters" and isinstance(raw, Mapping):
        merged = {**config.filters.model_dump(), **raw}
        try:
            return {"filters": DataSourceFilters.model_validate(merged)}
        except ValidationError:
            return None
    return None


def _user_input_update(config: UserInputConfig, field: str, raw: Any) -> Update:
    if field in ("label", "placeholder", "default_value"):
        return {field: coercion.text(raw)}
    if field == "input_type":
        return {"input_type": coercion.choice_or_default(raw, InputType, InputType.TEXT)}
    if field == "options":
        return {"options": coercion.split_list(raw)}
    if field == "required":
        return {"required": coercion.bool_or_default(raw, True)}
    return None


def _ai_process_update(config: AIProcessConfig, field: str, raw: Any) -> Update:
    if field in ("label", "prompt_template"):
        return {field: coercion.text(raw)}
    if field == "temperature":
        return {"temperature": coercion.float_or_default(raw, 0.5)}
    if field == "max_tokens":
        return {"max_tokens": coercion.positive_int_or_default(raw, 3000)}
    return None


def _transform_update(config: TransformConfig, field: str, raw: Any) -> Update:
    if field == "label":
        return {"label": coercion.text(raw)}
    if field == "transform_type":
        return {
            "transform_type": coercion.choice_or_default(raw, TransformType, TransformType.MERGE)
        }
    if field in ("config.keyword", "keyword"):
        options = config.config.model_copy(update={"keyword": coercion.text(raw)}, deep=True)
        return {"config": options}
    if field in ("config.lines", "lines"):
        lines = coercion.positive_int_or_default(raw, 20)
        return {"config": config.config.model_copy(update={"lines": lines}, deep=True)}
    if field == "config" and isinstance(raw, Mapping):
        merged = {**config.config.model_dump(), **raw}
        try:
            return {"config": TransformOptions.model_validate(merged)}
        except ValidationError:
            return None
    return None


def _output_update(config: OutputConfig, field: str, raw: Any) -> Update:
    if field in ("label", "artifact_title_template"):
        return {field: coercion.text(raw)}
    if field == "format":
        return {"format": coercion.choice_or_default(raw, OutputFormat, OutputFormat.MARKDOWN)}
    return None


def set_field(target: NodeDef | TypedConfig, field_name: str, raw_value: Any) -> TypedConfig:
    """Return a copy of a node's configuration with one field replaced.

    Args:
        target: A node, or a node's configuration.
        field_name: The field to set (dotted for nested fields).
        raw_value: The value as submitted by the form.

    Returns:
        A new configuration of the same kind. Unknown field names yield an
        unchanged copy.
    """
    config = target.data if isinstance(target, _NODE_MODELS) else target

    if isinstance(config, DataSourceConfig):
        update = _data_source_update(config, field_name, raw_value)
    elif isinstance(config, UserInputConfig):
        update = _user_input_update(config, field_name, raw_value)
    elif isinstance(config, AIProcessConfig):
        update = _ai_process_update(config, field_name, raw_value)
    elif isinstance(config, TransformConfig):
        update = _transform_update(config, field_name, raw_value)
    elif isinstance(config, OutputConfig):
        update = _output_update(config, field_name, raw_value)
    else:
        raise TypeError(f"Unsupported node configuration: {type(config).__name__}")

    return config.model_copy(update=update or {}, deep=True)


def bind(session: GraphSession, node_id: str, field_name: str, raw_value: Any) -> NodeDef | None:
    """Apply a form edit to a node in ``session``; a missing node is a no-op."""
    node = session.get_node(node_id)
    if node is None:
        return None
    return session.update_node_data(node_id, set_field(node, field_name, raw_value))
