"""Database module."""

from nebula_studio.db.database import close_database, get_db, init_database
from nebula_studio.db.nebula_store import NebulaStore, NebulaStoreError, nebula_store

__all__ = [
    "get_db",
    "init_database",
    "close_database",
    "nebula_store",
    "NebulaStore",
    "NebulaStoreError",
]
