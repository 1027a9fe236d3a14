"""
Ownership checks for records referenced by other records.

Before a note is linked to a notebook or tags, or a task to a note, the
referenced rows must belong to the caller. A reference to someone else's
row is rejected exactly like a reference to a row that doesn't exist.
"""

import logging
from typing import Iterable, List, Optional

from fastapi import HTTPException

from noteflow.sqlite_db import SQLiteDatabase

logger = logging.getLogger(__name__)


async def ensure_notebook_owned(db: SQLiteDatabase, user_id: str,
                                notebook_id: Optional[str]) -> None:
    """Reject a notebook link the caller does not own. None unlinks."""
    if notebook_id is None:
        return
    count = await db.notebooks.count_documents({"_id": notebook_id, "userId": user_id})
    if not count:
        logger.info(f"Rejected notebook link {notebook_id} for user {user_id}")
        raise HTTPException(status_code=400, detail="Notebook not found")


async def ensure_tags_owned(db: SQLiteDatabase, user_id: str,
                            tag_ids: Iterable[str]) -> List[str]:
    """Reject tag links the caller does not own.

    Returns:
        The tag ids with duplicates removed, first occurrence order kept.
    """
    unique = list(dict.fromkeys(tag_ids))
    if not unique:
        return unique
    count = await db.tags.count_documents({"_id": {"$in": unique}, "userId": user_id})
    if count != len(unique):
        logger.info(f"Rejected tag links {unique} for user {user_id}")
        raise HTTPException(status_code=400, detail="Tag not found")
    return unique


async def ensure_note_owned(db: SQLiteDatabase, user_id: str,
                            note_id: Optional[str]) -> None:
    """Reject a note link the caller does not own. None unlinks."""
    if note_id is None:
        return
    count = await db.notes.count_documents({"_id": note_id, "userId": user_id})
    if not count:
        raise HTTPException(status_code=400, detail="Note not found")
