"""
Process-wide database handle.

The app lifespan calls connect_db() once; routers call get_database() per
request. Tests point connect_db() at a temporary file.
"""

import logging
from typing import Optional

from noteflow.config import get_settings
from noteflow.sqlite_db import SQLiteDatabase

logger = logging.getLogger(__name__)

_database: Optional[SQLiteDatabase] = None


async def connect_db(db_path: Optional[str] = None) -> SQLiteDatabase:
    """Open the SQLite file (created on first use).

    Args:
        db_path: Overrides the configured location.
    """
    global _database

    path = db_path or str(get_settings().sqlite_path)
    database = SQLiteDatabase(path)
    await database.connect()
    _database = database
    return database


async def close_db() -> None:
    global _database
    if _database is not None:
        await _database.close()
        _database = None


def get_database() -> SQLiteDatabase:
    if _database is None:
        raise RuntimeError("Database not initialized. Call connect_db() first.")
    return _database
