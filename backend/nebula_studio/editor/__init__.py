"""Nebula editor core: node registry, id allocation, sessions, codec and form binding."""

from nebula_studio.editor import binder, codec, registry
from nebula_studio.editor.identity import NodeIdAllocator
from nebula_studio.editor.manager import (
    EditorSession,
    EditorSessionManager,
    get_session_manager,
    init_session_manager,
    shutdown_session_manager,
)
from nebula_studio.editor.session import GraphSession

__all__ = [
    "binder",
    "codec",
    "registry",
    "NodeIdAllocator",
    "GraphSession",
    "EditorSession",
    "EditorSessionManager",
    "get_session_manager",
    "init_session_manager",
    "shutdown_session_manager",
]
