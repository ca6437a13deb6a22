"""Nebula API routes."""

from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, ValidationError

from nebula_studio.db import NebulaStoreError, nebula_store
from nebula_studio.editor import get_session_manager
from nebula_studio.models import Nebula, NebulaCreate, NebulaSummary, NebulaUpdate

router = APIRouter()


class DuplicateRequest(BaseModel):
    """Request to copy a nebula, optionally overriding its metadata."""

    name: str | None = None
    description: str | None = None
    icon: str | None = None


def _store_unavailable(e: NebulaStoreError) -> HTTPException:
    return HTTPException(status_code=503, detail=f"Nebula store unavailable: {e}")


@router.get("/nebulas")
async def list_nebulas(
    templates: bool | None = Query(None, description="Only templates (true) or only user nebulas (false)"),
) -> list[NebulaSummary]:
    """List nebulas, most recently updated first."""
    if templates is None:
        return await nebula_store.list_all()
    if templates:
        return await nebula_store.list_templates()
    return await nebula_store.list_user_nebulas()


@router.post("/nebulas")
async def create_nebula(nebula: NebulaCreate) -> Nebula:
    """Create a new nebula."""
    try:
        return await nebula_store.create(nebula)
    except NebulaStoreError as e:
        raise _store_unavailable(e)


@router.get("/nebulas/{nebula_id}")
async def get_nebula(nebula_id: str) -> Nebula:
    """Get a nebula by ID."""
    nebula = await nebula_store.get(nebula_id)
    if nebula is None:
        raise HTTPException(status_code=404, detail="Nebula not found")
    return nebula


@router.patch("/nebulas/{nebula_id}")
async def update_nebula(nebula_id: str, update: NebulaUpdate) -> Nebula:
    """Update a nebula's metadata or graph."""
    try:
        nebula = await nebula_store.update(nebula_id, update)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except NebulaStoreError as e:
        raise _store_unavailable(e)
    if nebula is None:
        raise HTTPException(status_code=404, detail="Nebula not found")
    return nebula


@router.post("/nebulas/{nebula_id}/duplicate")
async def duplicate_nebula(nebula_id: str, request: DuplicateRequest | None = None) -> Nebula:
    """Copy a nebula (typically a template) into a new user nebula."""
    overrides: dict[str, Any] = request.model_dump(exclude_none=True) if request else {}
    try:
        nebula = await nebula_store.duplicate(nebula_id, overrides)
    except NebulaStoreError as e:
        raise _store_unavailable(e)
    if nebula is None:
        raise HTTPException(status_code=404, detail="Nebula not found")
    return nebula


@router.delete("/nebulas/{nebula_id}")
async def delete_nebula(nebula_id: str) -> dict[str, bool]:
    """Delete a nebula and close any sessions editing it."""
    try:
        deleted = await nebula_store.delete(nebula_id)
    except NebulaStoreError as e:
        raise _store_unavailable(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Nebula not found")
    get_session_manager().close_nebula_sessions(nebula_id)
    return {"deleted": True}
