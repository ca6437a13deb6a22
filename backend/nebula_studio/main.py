"""FastAPI application entry point."""

import logging
import os
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nebula_studio.db import nebula_store
from nebula_studio.db.database import close_database, init_database
from nebula_studio.editor import init_session_manager, shutdown_session_manager

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown."""
    from nebula_studio.api.templates import load_templates

    # Startup
    db_path = os.getenv("DATABASE_PATH", "./data/nebula.db")
    await init_database(db_path)

    if os.getenv("SEED_TEMPLATES", "true").lower() == "true":
        await nebula_store.seed_templates(load_templates())

    timeout = int(os.getenv("EDITOR_SESSION_TIMEOUT_MINUTES", "60"))
    await init_session_manager(session_timeout_minutes=timeout)

    yield

    # Shutdown
    await shutdown_session_manager()
    await close_database()


app = FastAPI(
    title="Nebula Studio",
    description="Compose, edit and persist nebula workflow graphs",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware - allow any localhost port for local dashboards
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^http://localhost(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers after app is created to avoid circular imports
from nebula_studio.api import editor, nebulas, templates  # noqa: E402

app.include_router(nebulas.router, prefix="/api/v1", tags=["nebulas"])
app.include_router(editor.router, prefix="/api/v1", tags=["editor"])
app.include_router(templates.router, prefix="/api/v1", tags=["templates"])
