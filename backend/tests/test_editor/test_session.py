"""Tests for GraphSession editing operations."""

import pytest

from nebula_studio.editor import codec
from nebula_studio.editor.session import GraphSession
from nebula_studio.models import (
    AIProcessConfig,
    EdgeRemoveChange,
    NodePositionChange,
    NodeRemoveChange,
    NodeSelectChange,
    OutputConfig,
    Position,
    Viewport,
)


@pytest.fixture
def session(sample_definition) -> GraphSession:
    return codec.decode(sample_definition)


class TestAddNode:
    """Tests for adding nodes."""

    def test_ids_on_empty_session(self):
        session = GraphSession()
        first = session.add_node("output", Position(x=10, y=20))
        second = session.add_node("output", Position(x=30, y=40))

        assert first.id == "output-0"
        assert second.id == "output-1"
        assert first.position == Position(x=10, y=20)

    def test_added_node_gets_defaults_and_selection(self):
        session = GraphSession()
        node = session.add_node("ai-process", Position())

        assert node.data == AIProcessConfig()
        assert session.selected_node_id == node.id
        assert session.selected_node is node

    def test_ids_are_pairwise_distinct(self, session):
        ids = [n.id for n in session.nodes]
        for i in range(25):
            node_type = ["data-source", "user-input", "ai-process", "transform", "output"][i % 5]
            ids.append(session.add_node(node_type, Position(x=i, y=i)).id)
        assert len(ids) == len(set(ids))

    def test_ids_not_reused_after_delete(self):
        session = GraphSession()
        node = session.add_node("output", Position())
        session.delete_node(node.id)
        assert session.add_node("output", Position()).id == "output-1"

    def test_continues_after_loaded_ids(self, session):
        # sample has output-4 as its highest suffix
        assert session.add_node("transform", Position()).id == "transform-5"

    def test_drop_node(self):
        session = GraphSession()
        node = session.drop_node("user-input", Position(x=5, y=5))
        assert node.id == "user-input-0"
        assert session.drop_node("", Position()) is None
        assert session.drop_node(None, Position()) is None
        assert len(session.nodes) == 1


class TestUpdateNodeData:
    """Tests for replacing node data."""

    def test_replace_with_config(self, session):
        new_data = AIProcessConfig(label="Rewrite", prompt_template="Hi", temperature=0.2)
        node = session.update_node_data("ai-process-3", new_data)

        assert node.data == new_data
        assert node.type == "ai-process"
        # Stored value is a copy
        new_data.label = "Changed"
        assert session.get_node("ai-process-3").data.label == "Rewrite"

    def test_replace_with_mapping(self, session):
        session.update_node_data("output-4", {"label": "Final", "format": "plain_text"})
        data = session.get_node("output-4").data
        assert data.label == "Final"
        assert data.format.value == "plain_text"

    def test_missing_node_is_noop(self, session):
        before = codec.encode(session)
        assert session.update_node_data("nope", OutputConfig()) is None
        assert codec.encode(session) == before

    def test_type_cannot_change(self, session):
        with pytest.raises(TypeError):
            session.update_node_data("output-4", AIProcessConfig())
        assert session.get_node("output-4").type == "output"


class TestDeleteNode:
    """Tests for node deletion."""

    def test_removes_exactly_incident_edges(self, session):
        nodes_before = len(session.nodes)
        edges_before = len(session.edges)
        incident = session.incident_edges("ai-process-3")

        removed = session.delete_node("ai-process-3")

        assert {e.id for e in removed} == {e.id for e in incident}
        assert len(session.nodes) == nodes_before - 1
        assert len(session.edges) == edges_before - len(incident)
        assert all("ai-process-3" not in (e.source, e.target) for e in session.edges)

    def test_leaves_unrelated_edges(self, session):
        session.delete_node("output-4")
        assert {e.id for e in session.edges} == {"e1", "e2"}

    def test_clears_selection_of_deleted_node(self, session):
        session.select("output-4")
        session.delete_node("output-4")
        assert session.selected_node_id is None

    def test_keeps_other_selection(self, session):
        session.select("input-topic")
        session.delete_node("output-4")
        assert session.selected_node_id == "input-topic"

    def test_missing_node_is_noop(self, session):
        assert session.delete_node("nope") == []
        assert len(session.nodes) == 4
        assert len(session.edges) == 3


class TestEdges:
    """Tests for connect/disconnect."""

    def test_connect(self, session):
        edge = session.connect("input-topic", "output-4", "a", "b")
        assert edge.source == "input-topic"
        assert edge.target == "output-4"
        assert edge.source_handle == "a"
        assert edge.target_handle == "b"
        assert session.get_edge(edge.id) is edge

    def test_duplicate_edges_are_allowed(self, session):
        first = session.connect("input-topic", "output-4")
        second = session.connect("input-topic", "output-4")
        assert first.id != second.id
        assert len(session.edges) == 5

    def test_cycles_are_allowed(self, session):
        assert session.connect("output-4", "input-topic") is not None
        assert session.connect("output-4", "output-4") is not None

    def test_connect_to_missing_node_is_noop(self, session):
        assert session.connect("input-topic", "ghost") is None
        assert session.connect("ghost", "input-topic") is None
        assert len(session.edges) == 3

    def test_disconnect(self, session):
        assert session.disconnect("e1") is True
        assert session.get_edge("e1") is None
        assert session.disconnect("e1") is False
        assert len(session.edges) == 2


class TestSelectionAndViewport:
    def test_single_selection(self, session):
        session.select("input-topic")
        session.select("output-4")
        assert session.selected_node_id == "output-4"

    def test_clear_selection(self, session):
        session.select("input-topic")
        session.select(None)
        assert session.selected_node is None

    def test_select_missing_node_is_noop(self, session):
        session.select("input-topic")
        session.select("ghost")
        assert session.selected_node_id == "input-topic"

    def test_viewport(self):
        session = GraphSession()
        assert session.viewport == Viewport()
        assert not session.viewport_was_set
        session.set_viewport(Viewport(x=3, y=4, zoom=2))
        assert session.viewport == Viewport(x=3, y=4, zoom=2)
        assert session.viewport_was_set


class TestCanvasChanges:
    """Tests for change notifications from the canvas."""

    def test_position_change(self, session):
        session.apply_node_changes(
            [NodePositionChange(id="output-4", position=Position(x=1, y=2))]
        )
        assert session.get_node("output-4").position == Position(x=1, y=2)

    def test_remove_change_cascades(self, session):
        session.apply_node_changes([NodeRemoveChange(id="ai-process-3")])
        assert session.get_node("ai-process-3") is None
        assert session.edges == []

    def test_select_changes(self, session):
        session.apply_node_changes([NodeSelectChange(id="input-topic", selected=True)])
        assert session.selected_node_id == "input-topic"
        session.apply_node_changes([NodeSelectChange(id="output-4", selected=False)])
        assert session.selected_node_id == "input-topic"
        session.apply_node_changes([NodeSelectChange(id="input-topic", selected=False)])
        assert session.selected_node_id is None

    def test_changes_for_missing_nodes_are_ignored(self, session):
        session.apply_node_changes(
            [
                NodePositionChange(id="ghost", position=Position(x=1, y=1)),
                NodeRemoveChange(id="ghost"),
            ]
        )
        assert len(session.nodes) == 4

    def test_edge_remove_change(self, session):
        session.apply_edge_changes([EdgeRemoveChange(id="e2"), EdgeRemoveChange(id="ghost")])
        assert {e.id for e in session.edges} == {"e1", "e3"}


class TestIsolation:
    def test_sessions_do_not_share_state(self, sample_definition):
        first = codec.decode(sample_definition)
        second = codec.decode(sample_definition)

        first.add_node("output", Position())
        first.get_node("input-topic").position = Position(x=999, y=999)

        assert second.add_node("output", Position()).id == "output-5"
        assert second.get_node("input-topic").position == Position(x=50, y=80)
        assert sample_definition.nodes[0].position == Position(x=50, y=80)
