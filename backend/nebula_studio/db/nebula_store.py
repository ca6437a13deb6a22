"""NebulaStore - persistence repository for nebula definitions."""

import json
import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

import aiosqlite

from nebula_studio.db.database import get_db
from nebula_studio.models import (
    Nebula,
    NebulaCreate,
    NebulaSummary,
    NebulaUpdate,
    WorkflowDefinition,
)

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, description, icon, graph_json, is_template, template_id, created_at, updated_at"


class NebulaStoreError(Exception):
    """A write to the nebula store failed."""

    def __init__(self, message: str, nebula_id: str | None = None):
        super().__init__(message)
        self.nebula_id = nebula_id


def _generate_id() -> str:
    """Generate a unique ID."""
    return str(uuid.uuid4())


def _now() -> str:
    """Get current timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def _graph_json(definition: WorkflowDefinition) -> str:
    """Serialize the graph part of a definition (everything but the name)."""
    return json.dumps(
        definition.model_dump(
            mode="json", by_alias=True, exclude_none=True, include={"nodes", "edges", "viewport"}
        )
    )


def _row_to_nebula(row: aiosqlite.Row) -> Nebula:
    graph = json.loads(row["graph_json"])
    return Nebula(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        icon=row["icon"],
        nodes=graph.get("nodes", []),
        edges=graph.get("edges", []),
        viewport=graph.get("viewport"),
        is_template=bool(row["is_template"]),
        template_id=row["template_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_summary(row: aiosqlite.Row) -> NebulaSummary:
    graph = json.loads(row["graph_json"])
    return NebulaSummary(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        icon=row["icon"],
        is_template=bool(row["is_template"]),
        template_id=row["template_id"],
        node_count=len(graph.get("nodes", [])),
        edge_count=len(graph.get("edges", [])),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class NebulaStore:
    """Storage abstraction for nebula definitions."""

    async def _write(self, sql: str, params: Sequence[Any], nebula_id: str | None = None) -> int:
        """Execute and commit a write, returning the affected row count."""
        db = await get_db()
        try:
            cursor = await db.execute(sql, params)
            await db.commit()
        except aiosqlite.Error as e:
            logger.exception(f"Nebula store write failed for {nebula_id}: {e}")
            raise NebulaStoreError(f"Failed to write nebula: {e}", nebula_id=nebula_id) from e
        return cursor.rowcount

    # ==================== Create ====================

    async def create(self, nebula: NebulaCreate) -> Nebula:
        """Create a new nebula."""
        nebula_id = _generate_id()
        now = _now()
        definition = WorkflowDefinition(
            name=nebula.name, nodes=nebula.nodes, edges=nebula.edges, viewport=nebula.viewport
        )

        await self._write(
            f"""
            INSERT INTO nebulas ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                nebula_id,
                nebula.name,
                nebula.description,
                nebula.icon,
                _graph_json(definition),
                int(nebula.is_template),
                nebula.template_id,
                now,
                now,
            ),
            nebula_id,
        )
        logger.info(f"Nebula created: {nebula.name} ({nebula_id})")

        return Nebula(
            id=nebula_id,
            name=nebula.name,
            description=nebula.description,
            icon=nebula.icon,
            nodes=definition.nodes,
            edges=definition.edges,
            viewport=definition.viewport,
            is_template=nebula.is_template,
            template_id=nebula.template_id,
            created_at=now,
            updated_at=now,
        )

    # ==================== Read ====================

    async def get(self, nebula_id: str) -> Nebula | None:
        """Get a nebula by ID."""
        db = await get_db()
        cursor = await db.execute(f"SELECT {_COLUMNS} FROM nebulas WHERE id = ?", (nebula_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return _row_to_nebula(row)

    async def load(self, nebula_id: str) -> WorkflowDefinition | None:
        """Load the workflow definition of a nebula."""
        nebula = await self.get(nebula_id)
        if nebula is None:
            return None
        return nebula.definition()

    async def _list(self, where: str = "", params: Sequence[Any] = ()) -> list[NebulaSummary]:
        db = await get_db()
        cursor = await db.execute(
            f"SELECT {_COLUMNS} FROM nebulas {where} ORDER BY updated_at DESC, rowid DESC",
            params,
        )
        rows = await cursor.fetchall()
        return [_row_to_summary(row) for row in rows]

    async def list_all(self) -> list[NebulaSummary]:
        """List all nebulas, most recently updated first."""
        return await self._list()

    async def list_user_nebulas(self) -> list[NebulaSummary]:
        """List user-created (non-template) nebulas."""
        return await self._list("WHERE is_template = 0")

    async def list_templates(self) -> list[NebulaSummary]:
        """List template nebulas."""
        return await self._list("WHERE is_template = 1")

    async def count(self) -> int:
        db = await get_db()
        cursor = await db.execute("SELECT COUNT(*) FROM nebulas")
        row = await cursor.fetchone()
        return row[0]

    async def count_user_nebulas(self) -> int:
        db = await get_db()
        cursor = await db.execute("SELECT COUNT(*) FROM nebulas WHERE is_template = 0")
        row = await cursor.fetchone()
        return row[0]

    # ==================== Update ====================

    async def update(self, nebula_id: str, update: NebulaUpdate) -> Nebula | None:
        """Apply a partial update to a nebula.

        The merged graph is re-validated, so an update cannot leave dangling
        edges or duplicate node ids behind. Fields left out of the request keep
        their stored value; an explicit null viewport clears it.
        """
        existing = await self.get(nebula_id)
        if existing is None:
            return None

        definition = WorkflowDefinition(
            name=update.name if update.name is not None else existing.name,
            nodes=update.nodes if update.nodes is not None else existing.nodes,
            edges=update.edges if update.edges is not None else existing.edges,
            viewport=update.viewport if "viewport" in update.model_fields_set else existing.viewport,
        )
        description = update.description if update.description is not None else existing.description
        icon = update.icon if update.icon is not None else existing.icon
        now = _now()

        await self._write(
            """
            UPDATE nebulas
            SET name = ?, description = ?, icon = ?, graph_json = ?, updated_at = ?
            WHERE id = ?
            """,
            (definition.name, description, icon, _graph_json(definition), now, nebula_id),
            nebula_id,
        )

        return existing.model_copy(
            update={
                "name": definition.name,
                "description": description,
                "icon": icon,
                "nodes": definition.nodes,
                "edges": definition.edges,
                "viewport": definition.viewport,
                "updated_at": now,
            }
        )

    async def save(self, nebula_id: str, definition: WorkflowDefinition) -> bool:
        """Replace a nebula's name and graph with an encoded editing session.

        Returns:
            False if the nebula no longer exists.

        Raises:
            NebulaStoreError: If the write fails.
        """
        rowcount = await self._write(
            "UPDATE nebulas SET name = ?, graph_json = ?, updated_at = ? WHERE id = ?",
            (definition.name, _graph_json(definition), _now(), nebula_id),
            nebula_id,
        )
        if rowcount > 0:
            logger.info(
                f"Nebula saved: {definition.name} ({nebula_id}) with "
                f"{len(definition.nodes)} node(s), {len(definition.edges)} edge(s)"
            )
        return rowcount > 0

    async def duplicate(
        self, nebula_id: str, overrides: dict[str, Any] | None = None
    ) -> Nebula | None:
        """Copy a nebula as a user nebula that remembers where it came from."""
        source = await self.get(nebula_id)
        if source is None:
            return None

        data = source.model_dump(exclude={"id", "created_at", "updated_at"})
        data.update(is_template=False, template_id=source.id)
        data.update(overrides or {})
        return await self.create(NebulaCreate.model_validate(data))

    # ==================== Delete ====================

    async def delete(self, nebula_id: str) -> bool:
        """Delete a nebula."""
        rowcount = await self._write("DELETE FROM nebulas WHERE id = ?", (nebula_id,), nebula_id)
        if rowcount > 0:
            logger.info(f"Nebula deleted: {nebula_id}")
        return rowcount > 0

    # ==================== Templates ====================

    async def seed_templates(self, templates: Sequence[NebulaCreate]) -> int:
        """Insert the built-in templates unless templates already exist.

        Duplicate templates (same name) left behind by earlier runs are
        removed first.

        Returns:
            Number of templates inserted.
        """
        existing = await self.list_templates()
        seen: set[str] = set()
        for template in sorted(existing, key=lambda t: t.created_at):
            if template.name in seen:
                await self.delete(template.id)
            else:
                seen.add(template.name)

        if existing:
            return 0

        for template in templates:
            await self.create(template.model_copy(update={"is_template": True}))
        logger.info(f"Seeded {len(templates)} nebula template(s)")
        return len(templates)


# Default store instance
nebula_store = NebulaStore()
