"""
Notes router.
Handles CRUD operations and the trash lifecycle for the user's notes.

Every query is scoped to the caller's userId, so a note owned by someone
else behaves exactly like a note that doesn't exist (404). Notebook and
tag links are checked for ownership before anything is written.

Trash is a soft delete: is_trashed plus a server-side trashed_at stamp.
Restore clears both. DELETE removes the note permanently.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from noteflow.database import get_database
from noteflow.routers.auth import get_current_user
from noteflow.models.note import NoteCreate, NoteResponse, NoteUpdate
from noteflow.ownership import ensure_notebook_owned, ensure_tags_owned
from noteflow.utils.validators import validate_note_fields

logger = logging.getLogger(__name__)
router = APIRouter()

# Request field → stored document field
_UPDATABLE_FIELDS = {
    "title": "title",
    "content": "content",
    "plain_text": "plainText",
    "notebook_id": "notebookId",
    "tag_ids": "tagIds",
    "is_pinned": "isPinned",
    "is_favorite": "isFavorite",
}


def _doc_to_response(doc: dict) -> NoteResponse:
    """Convert a stored document to a NoteResponse.

    Args:
        doc: Raw document with camelCase fields.

    Returns:
        NoteResponse with snake_case fields.
    """
    return NoteResponse(
        id=str(doc["_id"]),
        user_id=doc["userId"],
        title=doc["title"],
        content=doc.get("content", ""),
        plain_text=doc.get("plainText", ""),
        notebook_id=doc.get("notebookId"),
        tag_ids=doc.get("tagIds", []),
        is_pinned=doc.get("isPinned", False),
        is_favorite=doc.get("isFavorite", False),
        is_trashed=doc.get("isTrashed", False),
        trashed_at=doc.get("trashedAt"),
        created_at=doc["createdAt"],
        updated_at=doc["updatedAt"],
    )


def _check_fields(title=None, content=None, plain_text=None) -> None:
    ok, message = validate_note_fields(title, content, plain_text)
    if not ok:
        raise HTTPException(status_code=400, detail=message)


async def _set_trashed(note_id: str, user_id: str, trashed: bool) -> NoteResponse:
    db = get_database()
    now = datetime.utcnow()
    result = await db.notes.find_one_and_update(
        {"_id": note_id, "userId": user_id},
        {"$set": {
            "isTrashed": trashed,
            "trashedAt": now if trashed else None,
            "updatedAt": now,
        }},
        return_document=True,
    )
    if not result:
        raise HTTPException(status_code=404, detail="Note not found")
    logger.info(f"Note {note_id} {'moved to trash' if trashed else 'restored'}")
    return _doc_to_response(result)


@router.post("", response_model=NoteResponse, status_code=201)
async def create_note(
    data: NoteCreate,
    current_user: dict = Depends(get_current_user),
) -> NoteResponse:
    """Create a new note, optionally linked to a notebook and tags."""
    db = get_database()
    user_id = current_user["id"]

    _check_fields(data.title, data.content, data.plain_text)
    await ensure_notebook_owned(db, user_id, data.notebook_id)
    tag_ids = await ensure_tags_owned(db, user_id, data.tag_ids)

    now = datetime.utcnow()
    note_doc = {
        "userId": user_id,
        "title": data.title.strip() or "Untitled",
        "content": data.content,
        "plainText": data.plain_text,
        "notebookId": data.notebook_id,
        "tagIds": tag_ids,
        "isPinned": False,
        "isFavorite": False,
        "isTrashed": False,
        "trashedAt": None,
        "createdAt": now,
        "updatedAt": now,
    }

    result = await db.notes.insert_one(note_doc)
    note_doc["_id"] = result.inserted_id
    logger.debug(f"Created note {result.inserted_id} for user {user_id}")

    return _doc_to_response(note_doc)


@router.get("", response_model=List[NoteResponse])
async def list_notes(
    current_user: dict = Depends(get_current_user),
    notebook_id: Optional[str] = Query(None, description="Filter by notebook ID"),
    tag_id: Optional[str] = Query(None, description="Filter by tag ID"),
    trashed: bool = Query(False, description="List trashed notes instead"),
    limit: int = Query(100, ge=1, le=500),
    skip: int = Query(0, ge=0),
) -> List[NoteResponse]:
    """
    List user's notes with optional filters.

    Pinned notes come first, then notes sorted by update time.
    """
    db = get_database()

    query: dict = {"userId": current_user["id"], "isTrashed": trashed}
    if notebook_id:
        query["notebookId"] = notebook_id
    if tag_id:
        query["tagIds"] = {"$all": [tag_id]}

    cursor = (
        db.notes.find(query)
        .sort([("isPinned", -1), ("updatedAt", -1)])
        .skip(skip)
        .limit(limit)
    )

    return [_doc_to_response(doc) async for doc in cursor]


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
) -> NoteResponse:
    """Get a specific note by ID, including its tag IDs."""
    db = get_database()

    doc = await db.notes.find_one({"_id": note_id, "userId": current_user["id"]})
    if not doc:
        raise HTTPException(status_code=404, detail="Note not found")

    return _doc_to_response(doc)


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: str,
    data: NoteUpdate,
    current_user: dict = Depends(get_current_user),
) -> NoteResponse:
    """Apply a partial update to a note.

    Only allow-listed fields present in the request are written. Setting
    is_trashed stamps or clears trashed_at on the server.
    """
    db = get_database()
    user_id = current_user["id"]
    changes = data.model_dump(exclude_unset=True)

    _check_fields(changes.get("title"), changes.get("content"), changes.get("plain_text"))

    existing = await db.notes.find_one({"_id": note_id, "userId": user_id})
    if not existing:
        raise HTTPException(status_code=404, detail="Note not found")

    if "notebook_id" in changes:
        await ensure_notebook_owned(db, user_id, changes["notebook_id"])
    if "tag_ids" in changes:
        changes["tag_ids"] = await ensure_tags_owned(db, user_id, changes["tag_ids"] or [])
    if "title" in changes:
        changes["title"] = (changes["title"] or "").strip() or "Untitled"

    now = datetime.utcnow()
    update_doc: dict = {"updatedAt": now}
    for field, stored in _UPDATABLE_FIELDS.items():
        if field in changes:
            value = changes[field]
            # Only the notebook link may be cleared with null
            if value is None and field != "notebook_id":
                continue
            update_doc[stored] = value

    if changes.get("is_trashed") is not None:
        update_doc["isTrashed"] = changes["is_trashed"]
        update_doc["trashedAt"] = now if changes["is_trashed"] else None

    result = await db.notes.find_one_and_update(
        {"_id": note_id, "userId": user_id},
        {"$set": update_doc},
        return_document=True,
    )
    if not result:
        raise HTTPException(status_code=404, detail="Note not found")

    return _doc_to_response(result)


@router.post("/{note_id}/trash", response_model=NoteResponse)
async def trash_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
) -> NoteResponse:
    """Move a note to the trash."""
    return await _set_trashed(note_id, current_user["id"], True)


@router.post("/{note_id}/restore", response_model=NoteResponse)
async def restore_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
) -> NoteResponse:
    """Restore a note from the trash."""
    return await _set_trashed(note_id, current_user["id"], False)


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    current_user: dict = Depends(get_current_user),
) -> dict:
    """
    Permanently delete a note. Tasks linked to it are kept but unlinked.
    """
    db = get_database()
    user_id = current_user["id"]

    result = await db.notes.delete_one({"_id": note_id, "userId": user_id})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Note not found")

    await db.tasks.update_many(
        {"userId": user_id, "noteId": note_id},
        {"$set": {"noteId": None}},
    )
    logger.info(f"Permanently deleted note {note_id}")

    return {"message": "Note deleted"}
