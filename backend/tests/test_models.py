"""Tests for nebula definition models."""

import pytest
from pydantic import TypeAdapter, ValidationError

from nebula_studio.models import (
    AIProcessConfig,
    AIProcessNode,
    DataSourceConfig,
    EdgeDef,
    NebulaCreate,
    NodeDef,
    TransformConfig,
    UserInputConfig,
    Viewport,
    WorkflowDefinition,
)

node_adapter = TypeAdapter(NodeDef)


class TestNodeDiscriminator:
    """Tests for binding node data to node type."""

    def test_selects_model_by_type(self):
        node = node_adapter.validate_python(
            {"id": "ai-process-0", "type": "ai-process", "data": {"prompt_template": "Hi"}}
        )
        assert isinstance(node, AIProcessNode)
        assert node.data.temperature == 0.5

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            node_adapter.validate_python({"id": "x", "type": "webhook", "data": {}})

    def test_missing_data_gets_defaults(self):
        node = node_adapter.validate_python({"id": "d", "type": "data-source"})
        assert node.data == DataSourceConfig()

    def test_loose_values_are_coerced(self):
        node = node_adapter.validate_python(
            {
                "id": "t",
                "type": "transform",
                "data": {"transform_type": "nope", "config": {"lines": "7", "extra": 1}},
            }
        )
        assert node.data == TransformConfig.model_validate({"config": {"lines": 7, "extra": 1}})


class TestConfigs:
    def test_referenced_node_ids(self):
        config = AIProcessConfig(
            prompt_template="Use {{input-topic}} and {{ source-pages }} then {{input-topic}} {{}}"
        )
        assert config.referenced_node_ids() == ["input-topic", "source-pages"]

    def test_options_from_text(self):
        assert UserInputConfig(options="a,b").options == ["a", "b"]

    def test_null_filters(self):
        assert DataSourceConfig.model_validate({"filters": None}).filters.limit is None

    def test_bad_zoom(self):
        assert Viewport(zoom=0).zoom == 1.0
        assert Viewport(zoom="2").zoom == 2.0
        assert Viewport(zoom=10**400).zoom == 1.0


class TestEdgeDef:
    def test_alias_and_field_names(self):
        by_alias = EdgeDef.model_validate(
            {"id": "e", "source": "a", "target": "b", "sourceHandle": "out"}
        )
        by_name = EdgeDef(id="e", source="a", target="b", source_handle="out")
        assert by_alias == by_name

    def test_blank_handle_is_unset(self):
        assert EdgeDef(id="e", source="a", target="b", target_handle="").target_handle is None


class TestGraphIntegrity:
    """Tests for definition-level id checks."""

    def test_duplicate_node_ids(self):
        with pytest.raises(ValidationError, match="Duplicate node id"):
            WorkflowDefinition.model_validate(
                {"nodes": [{"id": "a", "type": "output"}, {"id": "a", "type": "transform"}]}
            )

    def test_duplicate_edge_ids(self):
        with pytest.raises(ValidationError, match="Duplicate edge id"):
            WorkflowDefinition.model_validate(
                {
                    "nodes": [{"id": "a", "type": "output"}, {"id": "b", "type": "output"}],
                    "edges": [
                        {"id": "e", "source": "a", "target": "b"},
                        {"id": "e", "source": "b", "target": "a"},
                    ],
                }
            )

    def test_dangling_target(self):
        with pytest.raises(ValidationError, match="unknown target"):
            NebulaCreate.model_validate(
                {
                    "name": "Bad",
                    "nodes": [{"id": "a", "type": "output"}],
                    "edges": [{"id": "e", "source": "a", "target": "z"}],
                }
            )

    def test_duplicate_connections_are_valid(self):
        definition = WorkflowDefinition.model_validate(
            {
                "nodes": [{"id": "a", "type": "output"}, {"id": "b", "type": "output"}],
                "edges": [
                    {"id": "e1", "source": "a", "target": "b"},
                    {"id": "e2", "source": "a", "target": "b"},
                ],
            }
        )
        assert len(definition.edges) == 2

    def test_create_from_definition_dump(self, sample_definition):
        create = NebulaCreate(name="Sample", **sample_definition.model_dump(exclude={"name"}))
        assert len(create.nodes) == 4
        assert create.viewport == sample_definition.viewport
