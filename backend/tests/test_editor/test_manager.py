"""Tests for the editor session manager."""

from datetime import datetime, timedelta

from nebula_studio.editor import manager
from nebula_studio.editor.manager import EditorSessionManager
from nebula_studio.models import Position


class TestEditorSessionManager:
    """Tests for session lifecycle."""

    def test_open_session(self, sample_definition):
        mgr = EditorSessionManager()
        session = mgr.open_session(sample_definition, nebula_id="neb-1")

        assert mgr.get_session(session.session_id) is session
        assert session.nebula_id == "neb-1"
        assert len(session.graph.nodes) == 4
        assert mgr.active_session_count == 1

    def test_sessions_on_same_nebula_are_isolated(self, sample_definition):
        mgr = EditorSessionManager()
        first = mgr.open_session(sample_definition, nebula_id="neb-1")
        second = mgr.open_session(sample_definition, nebula_id="neb-1")

        first.graph.add_node("output", Position())

        assert first.session_id != second.session_id
        assert len(second.graph.nodes) == 4
        assert len(mgr.get_sessions_for_nebula("neb-1")) == 2

    def test_close_session(self, sample_definition):
        mgr = EditorSessionManager()
        session = mgr.open_session(sample_definition)

        assert mgr.close_session(session.session_id) is True
        assert mgr.get_session(session.session_id) is None
        assert mgr.close_session(session.session_id) is False

    def test_close_nebula_sessions(self, sample_definition):
        mgr = EditorSessionManager()
        mgr.open_session(sample_definition, nebula_id="neb-1")
        mgr.open_session(sample_definition, nebula_id="neb-1")
        keep = mgr.open_session(sample_definition, nebula_id="neb-2")

        assert mgr.close_nebula_sessions("neb-1") == 2
        assert mgr.active_session_count == 1
        assert mgr.get_session(keep.session_id) is keep

    def test_cleanup_expired(self, sample_definition):
        mgr = EditorSessionManager(session_timeout_minutes=10)
        stale = mgr.open_session(sample_definition)
        fresh = mgr.open_session(sample_definition)
        stale.last_activity = datetime.now() - timedelta(minutes=30)

        assert mgr.cleanup_expired() == 1
        assert mgr.get_session(stale.session_id) is None
        assert mgr.get_session(fresh.session_id) is fresh

    def test_get_session_refreshes_activity(self, sample_definition):
        mgr = EditorSessionManager(session_timeout_minutes=10)
        session = mgr.open_session(sample_definition)
        session.last_activity = datetime.now() - timedelta(minutes=30)

        mgr.get_session(session.session_id)

        assert mgr.cleanup_expired() == 0

    def test_state_snapshot(self, sample_definition):
        mgr = EditorSessionManager()
        session = mgr.open_session(sample_definition, nebula_id="neb-1")
        session.graph.select("output-4")

        state = session.state()

        assert state.session_id == session.session_id
        assert state.name == "Sample"
        assert state.selected_node_id == "output-4"
        assert [e.id for e in state.edges] == ["e1", "e2", "e3"]


class TestManagerSingleton:
    async def test_init_and_shutdown(self, sample_definition):
        mgr = await manager.init_session_manager(session_timeout_minutes=5)

        assert manager.get_session_manager() is mgr
        assert mgr.get_stats() == {"active_sessions": 0, "cleanup_task_running": True}

        mgr.open_session(sample_definition)
        await manager.shutdown_session_manager()

        assert mgr.active_session_count == 0
        assert mgr.get_stats()["cleanup_task_running"] is False
        assert manager.get_session_manager() is not mgr

    def test_lazy_default(self):
        assert manager.get_session_manager() is manager.get_session_manager()
