"""EditorSessionManager handles editing-session lifecycle and storage."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from nebula_studio.editor import codec
from nebula_studio.editor.session import GraphSession
from nebula_studio.models import SessionState, WorkflowDefinition

logger = logging.getLogger(__name__)

# Singleton manager instance
_manager: "EditorSessionManager | None" = None


@dataclass
class EditorSession:
    """An open editing session for one nebula."""

    session_id: str
    nebula_id: str | None
    graph: GraphSession
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)

    def state(self) -> SessionState:
        """Snapshot for the canvas renderer."""
        return SessionState(
            session_id=self.session_id,
            nebula_id=self.nebula_id,
            name=self.graph.name,
            nodes=self.graph.nodes,
            edges=self.graph.edges,
            viewport=self.graph.viewport,
            selected_node_id=self.graph.selected_node_id,
        )


class EditorSessionManager:
    """Manages editing session lifecycle.

    Responsibilities:
    - Open sessions by decoding a loaded definition
    - Store active sessions (in-memory)
    - Cleanup idle sessions
    - Get/close sessions by ID
    """

    def __init__(self, session_timeout_minutes: int = 60):
        """Initialize the session manager.

        Args:
            session_timeout_minutes: How long idle sessions live before cleanup.
        """
        self._sessions: dict[str, EditorSession] = {}
        self._session_timeout = timedelta(minutes=session_timeout_minutes)
        self._cleanup_task: asyncio.Task | None = None

    @property
    def active_session_count(self) -> int:
        """Number of active sessions."""
        return len(self._sessions)

    def open_session(
        self, definition: WorkflowDefinition, nebula_id: str | None = None
    ) -> EditorSession:
        """Decode a definition into a new editing session.

        Args:
            definition: The definition loaded from the store.
            nebula_id: The stored nebula the session edits.

        Returns:
            The new EditorSession.
        """
        session = EditorSession(
            session_id=str(uuid.uuid4()),
            nebula_id=nebula_id,
            graph=codec.decode(definition),
        )
        self._sessions[session.session_id] = session
        logger.info(
            f"Opened editor session {session.session_id} for nebula {nebula_id} "
            f"(total sessions: {len(self._sessions)})"
        )
        return session

    def get_session(self, session_id: str) -> EditorSession | None:
        """Get a session by ID, refreshing its last activity."""
        session = self._sessions.get(session_id)
        if session:
            session.last_activity = datetime.now()
        return session

    def get_sessions_for_nebula(self, nebula_id: str) -> list[EditorSession]:
        """Get all open sessions editing a nebula."""
        return [s for s in self._sessions.values() if s.nebula_id == nebula_id]

    def close_session(self, session_id: str) -> bool:
        """Discard a session. Unsaved changes are lost.

        Returns:
            True if the session was found and closed, False otherwise.
        """
        session = self._sessions.pop(session_id, None)
        if session:
            logger.info(f"Closed editor session {session_id}")
            return True
        return False

    def close_nebula_sessions(self, nebula_id: str) -> int:
        """Close all sessions editing a nebula.

        Returns:
            Number of sessions closed.
        """
        session_ids = [sid for sid, s in self._sessions.items() if s.nebula_id == nebula_id]
        for session_id in session_ids:
            self.close_session(session_id)
        return len(session_ids)

    def cleanup_expired(self, now: datetime | None = None) -> int:
        """Close sessions that have been idle too long.

        Returns:
            Number of sessions cleaned up.
        """
        now = now or datetime.now()
        expired_ids = [
            sid
            for sid, s in self._sessions.items()
            if now - s.last_activity > self._session_timeout
        ]

        for session_id in expired_ids:
            logger.info(f"Cleaning up idle editor session {session_id}")
            self.close_session(session_id)

        return len(expired_ids)

    async def start_cleanup_task(self) -> None:
        """Start the background cleanup task."""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info("Started editor session cleanup background task")

    async def stop_cleanup_task(self) -> None:
        """Stop the background cleanup task."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.info("Stopped editor session cleanup background task")

    async def _cleanup_loop(self) -> None:
        """Background loop that closes idle sessions."""
        while True:
            try:
                await asyncio.sleep(60)  # Check every minute
                self.cleanup_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception(f"Error in editor session cleanup task: {e}")

    async def shutdown(self) -> None:
        """Stop background work and drop all sessions."""
        await self.stop_cleanup_task()
        for session_id in list(self._sessions.keys()):
            self.close_session(session_id)
        logger.info("Editor session manager shutdown complete")

    def get_stats(self) -> dict[str, Any]:
        """Get manager statistics."""
        return {
            "active_sessions": len(self._sessions),
            "cleanup_task_running": self._cleanup_task is not None,
        }


def get_session_manager() -> EditorSessionManager:
    """Get the singleton session manager instance."""
    global _manager
    if _manager is None:
        _manager = EditorSessionManager()
    return _manager


async def init_session_manager(session_timeout_minutes: int = 60) -> EditorSessionManager:
    """Initialize the session manager and start background tasks."""
    global _manager
    _manager = EditorSessionManager(session_timeout_minutes=session_timeout_minutes)
    await _manager.start_cleanup_task()
    return _manager


async def shutdown_session_manager() -> None:
    """Shutdown the session manager."""
    global _manager
    if _manager:
        await _manager.shutdown()
        _manager = None
