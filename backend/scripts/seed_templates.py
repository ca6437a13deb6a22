#!/usr/bin/env python3
"""
Seed script for the built-in nebula templates.

Loads every ``templates/*.nebula.json`` file and stores it as a template
nebula. With ``--reset`` existing templates are deleted first so edited
template files replace the stored copies.

Run with: uv run python scripts/seed_templates.py [--reset]
"""

import argparse
import asyncio
import os
import sys

# Add the backend directory to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from nebula_studio.api.templates import load_templates  # noqa: E402
from nebula_studio.db.database import close_database, init_database  # noqa: E402
from nebula_studio.db.nebula_store import NebulaStore  # noqa: E402


async def seed(reset: bool) -> None:
    """Seed the database with the template nebulas."""
    db_path = os.getenv("DATABASE_PATH", "./data/nebula.db")
    print(f"Using database: {db_path}")

    await init_database(db_path)
    store = NebulaStore()

    try:
        if reset:
            for template in await store.list_templates():
                print(f"Deleting existing template: {template.name} ({template.id})")
                await store.delete(template.id)

        templates = load_templates()
        inserted = await store.seed_templates(templates)
        if inserted:
            print(f"Seeded {inserted} template(s):")
            for template in templates:
                print(f"  - {template.name} ({len(template.nodes)} nodes, {len(template.edges)} edges)")
        else:
            print("Templates already present; nothing to do. Use --reset to replace them.")
    finally:
        await close_database()


def main():
    parser = argparse.ArgumentParser(description="Seed the built-in nebula templates")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete stored templates before seeding",
    )
    args = parser.parse_args()
    asyncio.run(seed(args.reset))


if __name__ == "__main__":
    main()
