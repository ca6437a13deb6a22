"""GraphSession - the authoritative in-memory graph of one editing session.

All mutations are synchronous and driven by discrete user gestures. Operations
that address a node or edge that is not in the session are no-ops: the canvas
cannot reference something it does not render, so such a call is never an
error worth surfacing.

No cross-node validation happens here. Cycles, duplicate edges and
type-incompatible connections are all allowed; deciding executability is
left to the run engine.
"""

import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from nebula_studio.editor import registry
from nebula_studio.editor.identity import NodeIdAllocator
from nebula_studio.models import (
    EdgeDef,
    EdgeRemoveChange,
    NodeChange,
    NodeDef,
    NodePositionChange,
    NodeRemoveChange,
    NodeSelectChange,
    NodeType,
    Position,
    TypedConfig,
    Viewport,
)

logger = logging.getLogger(__name__)


class GraphSession:
    """Mutable nodes, edges, viewport and selection for one nebula being edited."""

    def __init__(self, name: str = "Untitled Nebula") -> None:
        self.name = name
        self._nodes: dict[str, NodeDef] = {}
        self._edges: dict[str, EdgeDef] = {}
        self._viewport: Viewport | None = None
        self._selected_node_id: str | None = None
        self.allocator = NodeIdAllocator()

    # ==================== Reads ====================

    @property
    def nodes(self) -> list[NodeDef]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[EdgeDef]:
        return list(self._edges.values())

    @property
    def viewport(self) -> Viewport:
        """The last viewport set on the session, or the default one."""
        return self._viewport or Viewport()

    @property
    def viewport_was_set(self) -> bool:
        return self._viewport is not None

    @property
    def selected_node_id(self) -> str | None:
        return self._selected_node_id

    @property
    def selected_node(self) -> NodeDef | None:
        if self._selected_node_id is None:
            return None
        return self._nodes.get(self._selected_node_id)

    def get_node(self, node_id: str) -> NodeDef | None:
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> EdgeDef | None:
        return self._edges.get(edge_id)

    def incident_edges(self, node_id: str) -> list[EdgeDef]:
        """Edges whose source or target is ``node_id``."""
        return [e for e in self._edges.values() if node_id in (e.source, e.target)]

    # ==================== Loading ====================

    def load(
        self,
        nodes: Iterable[NodeDef],
        edges: Iterable[EdgeDef],
        viewport: Viewport | None = None,
    ) -> None:
        """Replace the graph with loaded nodes/edges and seed the id allocator.

        Must run before the first ``add_node``; the allocator refuses to be
        re-seeded once it has handed out an id.
        """
        loaded_nodes = {node.id: node.model_copy(deep=True) for node in nodes}
        self.allocator.seed(loaded_nodes.keys())
        self._nodes = loaded_nodes
        self._edges = {edge.id: edge.model_copy() for edge in edges}
        self._viewport = viewport.model_copy() if viewport else None
        self._selected_node_id = None

    # ==================== Nodes ====================

    def add_node(self, node_type: NodeType | str, position: Position) -> NodeDef:
        """Add a node with the type's default configuration and select it."""
        node_id = self.allocator.next(node_type)
        node = registry.create_node(node_type, node_id, position)
        self._nodes[node_id] = node
        self._selected_node_id = node_id
        logger.debug(f"Added node {node_id} at ({position.x}, {position.y})")
        return node

    def drop_node(self, type_tag: str | None, position: Position) -> NodeDef | None:
        """Handle a palette drop carrying a node type tag; an empty tag is ignored."""
        if not type_tag:
            return None
        return self.add_node(type_tag, position)

    def update_node_data(
        self, node_id: str, new_data: TypedConfig | Mapping[str, Any]
    ) -> NodeDef | None:
        """Replace the full data record of a node.

        A mapping is validated against the node's own configuration model.
        The node's type never changes through this path.

        Raises:
            TypeError: If ``new_data`` is a configuration of a different node type.
        """
        node = self._nodes.get(node_id)
        if node is None:
            return None

        model = registry.config_model(node.type)
        if isinstance(new_data, BaseModel):
            if not isinstance(new_data, model):
                raise TypeError(
                    f"Cannot store {type(new_data).__name__} on {node.type} node {node_id}"
                )
            node.data = new_data.model_copy(deep=True)
        else:
            node.data = model.model_validate(dict(new_data))
        return node

    def move_node(self, node_id: str, position: Position) -> NodeDef | None:
        node = self._nodes.get(node_id)
        if node is None:
            return None
        node.position = position.model_copy()
        return node

    def delete_node(self, node_id: str) -> list[EdgeDef]:
        """Remove a node together with every edge touching it.

        Returns:
            The removed edges (empty when the node does not exist).
        """
        if self._nodes.pop(node_id, None) is None:
            return []

        removed = self.incident_edges(node_id)
        for edge in removed:
            del self._edges[edge.id]
        if self._selected_node_id == node_id:
            self._selected_node_id = None

        logger.debug(f"Deleted node {node_id} and {len(removed)} incident edge(s)")
        return removed

    # ==================== Edges ====================

    def connect(
        self,
        source: str,
        target: str,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> EdgeDef | None:
        """Create a new edge between two existing nodes.

        Duplicate connections are allowed and each gets its own id.
        """
        if source not in self._nodes or target not in self._nodes:
            return None

        edge = EdgeDef(
            id=self._generate_edge_id(),
            source=source,
            target=target,
            source_handle=source_handle,
            target_handle=target_handle,
        )
        self._edges[edge.id] = edge
        return edge

    def disconnect(self, edge_id: str) -> bool:
        """Remove a single edge. Returns True if it existed."""
        return self._edges.pop(edge_id, None) is not None

    def _generate_edge_id(self) -> str:
        edge_id = f"edge-{uuid.uuid4().hex[:8]}"
        while edge_id in self._edges:
            edge_id = f"edge-{uuid.uuid4().hex[:8]}"
        return edge_id

    # ==================== Selection, Viewport, Name ====================

    def select(self, node_id: str | None) -> str | None:
        """Move the single-selection cursor. Selecting an unknown node is ignored."""
        if node_id is None or node_id in self._nodes:
            self._selected_node_id = node_id
        return self._selected_node_id

    def set_viewport(self, viewport: Viewport) -> None:
        self._viewport = viewport.model_copy()

    def rename(self, name: str) -> None:
        self.name = name

    # ==================== Canvas Change Events ====================

    def apply_node_changes(self, changes: Iterable[NodeChange]) -> None:
        """Apply position, removal and selection notifications from the canvas."""
        for change in changes:
            if isinstance(change, NodePositionChange):
                self.move_node(change.id, change.position)
            elif isinstance(change, NodeRemoveChange):
                self.delete_node(change.id)
            elif isinstance(change, NodeSelectChange):
                if change.selected:
                    self.select(change.id)
                elif self._selected_node_id == change.id:
                    self.select(None)

    def apply_edge_changes(self, changes: Iterable[EdgeRemoveChange]) -> None:
        """Apply edge removal notifications from the canvas."""
        for change in changes:
            self.disconnect(change.id)
