"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from nebula_studio.db.database import close_database, init_database
from nebula_studio.editor import manager
from nebula_studio.main import app
from nebula_studio.models import WorkflowDefinition


@pytest.fixture(autouse=True)
async def setup_test_db():
    """Set up a test database for each test."""
    # Create a temporary database file
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    # Initialize the database
    await init_database(db_path)

    yield

    # Clean up
    await close_database()
    os.unlink(db_path)


@pytest.fixture(autouse=True)
def fresh_session_manager():
    """Give each test its own editor session manager."""
    manager._manager = None
    yield
    manager._manager = None


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def sample_definition() -> WorkflowDefinition:
    """A small nebula: two inputs feeding an AI step that feeds an output."""
    return WorkflowDefinition.model_validate(
        {
            "name": "Sample",
            "nodes": [
                {
                    "id": "input-topic",
                    "type": "user-input",
                    "position": {"x": 50, "y": 80},
                    "data": {"label": "Topic", "input_type": "text", "required": True},
                },
                {
                    "id": "source-pages",
                    "type": "data-source",
                    "position": {"x": 50, "y": 360},
                    "data": {"label": "Pages", "source_type": "pages", "filters": {"limit": 30}},
                },
                {
                    "id": "ai-process-3",
                    "type": "ai-process",
                    "position": {"x": 400, "y": 180},
                    "data": {
                        "label": "Write",
                        "prompt_template": "Write about {{input-topic}} using {{source-pages}}",
                        "temperature": 0.7,
                        "max_tokens": 4000,
                    },
                },
                {
                    "id": "output-4",
                    "type": "output",
                    "position": {"x": 700, "y": 180},
                    "data": {"label": "Article", "format": "markdown"},
                },
            ],
            "edges": [
                {"id": "e1", "source": "input-topic", "target": "ai-process-3"},
                {"id": "e2", "source": "source-pages", "target": "ai-process-3"},
                {
                    "id": "e3",
                    "source": "ai-process-3",
                    "target": "output-4",
                    "sourceHandle": "out",
                    "targetHandle": "in",
                },
            ],
            "viewport": {"x": -10, "y": 20, "zoom": 1.5},
        }
    )
