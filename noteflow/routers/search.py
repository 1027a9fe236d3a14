"""
Search router.
Case-insensitive substring search over the titles and plain text of the
user's notes. Trashed notes are never returned.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from noteflow.database import get_database
from noteflow.routers.auth import get_current_user
from noteflow.routers.notes import _doc_to_response
from noteflow.models.note import NoteResponse
from noteflow.utils.validators import SEARCH_QUERY_MAX_LENGTH

logger = logging.getLogger(__name__)
router = APIRouter()

MAX_RESULTS = 20


@router.get("", response_model=List[NoteResponse])
async def search_notes(
    q: Optional[str] = Query(None, description="Text to look for"),
    current_user: dict = Depends(get_current_user),
) -> List[NoteResponse]:
    """
    Search notes by title or plain text.

    An empty or overlong query returns no results rather than an error.
    """
    if not q or len(q) > SEARCH_QUERY_MAX_LENGTH:
        return []

    db = get_database()
    cursor = (
        db.notes.find({
            "userId": current_user["id"],
            "isTrashed": False,
            "$or": [
                {"title": {"$search": q}},
                {"plainText": {"$search": q}},
            ],
        })
        .sort("updatedAt", -1)
        .limit(MAX_RESULTS)
    )

    return [_doc_to_response(doc) async for doc in cursor]
