"""Template and node-type API routes."""

import json
from pathlib import Path

from fastapi import APIRouter, HTTPException

from nebula_studio.editor import registry
from nebula_studio.models import NebulaCreate, NodeType, NodeTypeSchema, PaletteItem

router = APIRouter()

TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"


def _template_file(template_id: str) -> Path:
    return TEMPLATES_DIR / f"{template_id}.nebula.json"


def _template_ids() -> list[str]:
    if not TEMPLATES_DIR.exists():
        return []
    return [f.name.removesuffix(".nebula.json") for f in sorted(TEMPLATES_DIR.glob("*.nebula.json"))]


def load_template(template_id: str) -> NebulaCreate | None:
    """Load one template definition, or None if it does not exist."""
    template_file = _template_file(template_id)
    if not template_file.exists():
        return None

    with open(template_file, encoding="utf-8") as f:
        data = json.load(f)
    return NebulaCreate.model_validate({**data, "is_template": True})


def load_templates_by_id() -> dict[str, NebulaCreate]:
    """Load every template in the templates directory, keyed by id in file-name order."""
    templates = {}
    for template_id in _template_ids():
        template = load_template(template_id)
        if template is not None:
            templates[template_id] = template
    return templates


def load_templates() -> list[NebulaCreate]:
    """Load every template in the templates directory, ordered by file name."""
    return list(load_templates_by_id().values())


@router.get("/templates")
async def list_templates() -> list[dict]:
    """List all available nebula templates."""
    return [
        {
            "id": template_id,
            "name": template.name,
            "description": template.description,
            "icon": template.icon,
            "node_count": len(template.nodes),
            "edge_count": len(template.edges),
        }
        for template_id, template in load_templates_by_id().items()
    ]


@router.get("/templates/{template_id}")
async def get_template(template_id: str) -> NebulaCreate:
    """Get a specific template definition."""
    template = load_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template '{template_id}' not found")
    return template


# ==================== Node Types ====================


@router.get("/node-types")
async def list_node_types() -> list[PaletteItem]:
    """The node palette."""
    return registry.palette()


@router.get("/node-types/{node_type}/schema")
async def get_node_type_schema(node_type: NodeType) -> NodeTypeSchema:
    """Editable fields and default configuration of a node type."""
    return NodeTypeSchema(
        type=node_type,
        fields=registry.field_schema(node_type),
        defaults=registry.default_data(node_type).model_dump(mode="json"),
    )
