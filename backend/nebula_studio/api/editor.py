"""Editor session API routes.

These endpoints are the boundary used by the canvas renderer and the node
configuration form. Every mutating call returns the full session state so the
client can re-render from it. Calls addressing a node or edge that is not in
the session leave the state unchanged.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field, ValidationError

from nebula_studio.db import NebulaStoreError, nebula_store
from nebula_studio.editor import EditorSession, binder, codec, get_session_manager
from nebula_studio.models import (
    EdgeRemoveChange,
    NodeChange,
    NodeType,
    Position,
    SessionState,
    Viewport,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class AddNodeRequest(BaseModel):
    """Add a node from the palette."""

    type: NodeType
    position: Position = Field(default_factory=Position)


class DropNodeRequest(BaseModel):
    """A palette item dropped on the canvas."""

    type_tag: str | None = None
    position: Position = Field(default_factory=Position)


class FieldUpdateRequest(BaseModel):
    """A single field edit from the configuration form."""

    field: str
    value: Any = None


class ConnectRequest(BaseModel):
    """A completed connect gesture between two handles."""

    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")
    target_handle: str | None = Field(default=None, alias="targetHandle")

    model_config = {"populate_by_name": True}


class SelectRequest(BaseModel):
    """Select a node, or clear the selection with null."""

    node_id: str | None = None


class RenameRequest(BaseModel):
    name: str


class NodeChangesRequest(BaseModel):
    changes: list[NodeChange]


class EdgeChangesRequest(BaseModel):
    changes: list[EdgeRemoveChange]


class SaveResponse(BaseModel):
    """Result of saving a session back to its nebula."""

    saved: bool
    nebula_id: str
    node_count: int
    edge_count: int
    run_path: str | None = None


def _get_session(session_id: str) -> EditorSession:
    session = get_session_manager().get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Editor session not found")
    return session


# ==================== Session Lifecycle ====================


@router.post("/nebulas/{nebula_id}/sessions")
async def open_session(nebula_id: str) -> SessionState:
    """Load a nebula into a new editing session."""
    definition = await nebula_store.load(nebula_id)
    if definition is None:
        raise HTTPException(status_code=404, detail="Nebula not found")
    session = get_session_manager().open_session(definition, nebula_id=nebula_id)
    return session.state()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> SessionState:
    """Get the current state of an editing session."""
    return _get_session(session_id).state()


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str) -> dict[str, bool]:
    """Discard an editing session. Unsaved changes are lost."""
    if not get_session_manager().close_session(session_id):
        raise HTTPException(status_code=404, detail="Editor session not found")
    return {"closed": True}


@router.post("/sessions/{session_id}/save")
async def save_session(
    session_id: str,
    run: bool = Query(False, description="Hand the nebula to the run engine after saving"),
) -> SaveResponse:
    """Persist a snapshot of the session to its nebula.

    The session stays editable while the save is in flight; edits made
    meanwhile are not part of this snapshot. A failed save leaves the
    session untouched so it can be retried.
    """
    session = _get_session(session_id)
    if session.nebula_id is None:
        raise HTTPException(status_code=400, detail="Session is not bound to a nebula")

    definition = codec.encode(session.graph)
    try:
        saved = await nebula_store.save(session.nebula_id, definition)
    except NebulaStoreError as e:
        logger.error(f"Save failed for session {session_id}: {e}")
        raise HTTPException(status_code=503, detail=f"Save failed: {e}")
    if not saved:
        raise HTTPException(status_code=404, detail="Nebula not found")

    return SaveResponse(
        saved=True,
        nebula_id=session.nebula_id,
        node_count=len(definition.nodes),
        edge_count=len(definition.edges),
        run_path=f"/nebulas/{session.nebula_id}/run" if run else None,
    )


# ==================== Nodes ====================


@router.post("/sessions/{session_id}/nodes")
async def add_node(session_id: str, request: AddNodeRequest) -> SessionState:
    """Add a node with the type's default configuration and select it."""
    session = _get_session(session_id)
    session.graph.add_node(request.type, request.position)
    return session.state()


@router.post("/sessions/{session_id}/drop")
async def drop_node(session_id: str, request: DropNodeRequest) -> SessionState:
    """Handle a palette item dropped on the canvas."""
    session = _get_session(session_id)
    try:
        session.graph.drop_node(request.type_tag, request.position)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown node type: {request.type_tag}")
    return session.state()


@router.put("/sessions/{session_id}/nodes/{node_id}/data")
async def replace_node_data(session_id: str, node_id: str, data: dict[str, Any]) -> SessionState:
    """Replace a node's full configuration."""
    session = _get_session(session_id)
    try:
        session.graph.update_node_data(node_id, data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return session.state()


@router.patch("/sessions/{session_id}/nodes/{node_id}/fields")
async def update_node_field(
    session_id: str, node_id: str, request: FieldUpdateRequest
) -> SessionState:
    """Apply a single form field edit to a node."""
    session = _get_session(session_id)
    binder.bind(session.graph, node_id, request.field, request.value)
    return session.state()


@router.delete("/sessions/{session_id}/nodes/{node_id}")
async def delete_node(session_id: str, node_id: str) -> SessionState:
    """Delete a node and every edge touching it."""
    session = _get_session(session_id)
    session.graph.delete_node(node_id)
    return session.state()


@router.post("/sessions/{session_id}/node-changes")
async def apply_node_changes(session_id: str, request: NodeChangesRequest) -> SessionState:
    """Apply position, removal and selection changes reported by the canvas."""
    session = _get_session(session_id)
    session.graph.apply_node_changes(request.changes)
    return session.state()


# ==================== Edges ====================


@router.post("/sessions/{session_id}/edges")
async def connect(session_id: str, request: ConnectRequest) -> SessionState:
    """Connect two nodes."""
    session = _get_session(session_id)
    session.graph.connect(
        request.source, request.target, request.source_handle, request.target_handle
    )
    return session.state()


@router.delete("/sessions/{session_id}/edges/{edge_id}")
async def disconnect(session_id: str, edge_id: str) -> SessionState:
    """Remove an edge."""
    session = _get_session(session_id)
    session.graph.disconnect(edge_id)
    return session.state()


@router.post("/sessions/{session_id}/edge-changes")
async def apply_edge_changes(session_id: str, request: EdgeChangesRequest) -> SessionState:
    """Apply edge removals reported by the canvas."""
    session = _get_session(session_id)
    session.graph.apply_edge_changes(request.changes)
    return session.state()


# ==================== Selection, Viewport, Name ====================


@router.post("/sessions/{session_id}/select")
async def select_node(session_id: str, request: SelectRequest) -> SessionState:
    """Select a node (node click) or clear the selection (pane click)."""
    session = _get_session(session_id)
    session.graph.select(request.node_id)
    return session.state()


@router.put("/sessions/{session_id}/viewport")
async def set_viewport(session_id: str, viewport: Viewport) -> SessionState:
    """Record the canvas pan/zoom."""
    session = _get_session(session_id)
    session.graph.set_viewport(viewport)
    return session.state()


@router.put("/sessions/{session_id}/name")
async def rename(session_id: str, request: RenameRequest) -> SessionState:
    """Rename the nebula being edited."""
    session = _get_session(session_id)
    session.graph.rename(request.name)
    return session.state()
