"""DefinitionCodec - converts between persisted definitions and editing sessions.

Round trip: ``decode(encode(s))`` is structurally equal to ``s`` apart from
the selection, which is editor-only state and never persisted.
"""

from typing import Any

from nebula_studio.editor.session import GraphSession
from nebula_studio.models import WorkflowDefinition


def decode(definition: WorkflowDefinition) -> GraphSession:
    """Build an editing session holding a copy of ``definition``'s graph.

    The session's id allocator is seeded from the loaded node ids here,
    before anything can be added to the session.
    """
    session = GraphSession(name=definition.name)
    session.load(definition.nodes, definition.edges, definition.viewport)
    return session


def encode(session: GraphSession) -> WorkflowDefinition:
    """Snapshot a session as a persistable definition.

    The viewport is included only if one was loaded or set on the session.
    """
    return WorkflowDefinition(
        name=session.name,
        nodes=[node.model_copy(deep=True) for node in session.nodes],
        edges=[edge.model_copy() for edge in session.edges],
        viewport=session.viewport.model_copy() if session.viewport_was_set else None,
    )


def to_payload(definition: WorkflowDefinition) -> dict[str, Any]:
    """JSON-ready form of a definition with camelCase handle keys and unset fields omitted."""
    return definition.model_dump(mode="json", by_alias=True, exclude_none=True)
