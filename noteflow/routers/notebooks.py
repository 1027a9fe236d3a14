"""
Notebooks router.
Handles CRUD for notebooks. Deleting a notebook unlinks its notes
instead of deleting them.
"""

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, HTTPException, Depends

from noteflow.database import get_database
from noteflow.routers.auth import get_current_user
from noteflow.models.notebook import (
    DEFAULT_NOTEBOOK_COLOR,
    NotebookCreate,
    NotebookResponse,
    NotebookUpdate,
)
from noteflow.utils.validators import NOTEBOOK_NAME_MAX_LENGTH, is_hex_color, validate_name

logger = logging.getLogger(__name__)
router = APIRouter()


async def _to_response(db, doc: dict) -> NotebookResponse:
    note_count = await db.notes.count_documents({
        "userId": doc["userId"],
        "notebookId": str(doc["_id"]),
        "isTrashed": False,
    })
    return NotebookResponse(
        id=str(doc["_id"]),
        name=doc["name"],
        color=doc.get("color", DEFAULT_NOTEBOOK_COLOR),
        is_default=doc.get("isDefault", False),
        note_count=note_count,
        created_at=doc["createdAt"],
        updated_at=doc["updatedAt"],
    )


@router.get("", response_model=List[NotebookResponse])
async def list_notebooks(
    current_user: dict = Depends(get_current_user),
) -> List[NotebookResponse]:
    """List notebooks by name, each with its count of non-trashed notes."""
    db = get_database()
    cursor = db.notebooks.find({"userId": current_user["id"]}).sort("name")
    return [await _to_response(db, doc) async for doc in cursor]


@router.post("", response_model=NotebookResponse, status_code=201)
async def create_notebook(
    data: NotebookCreate,
    current_user: dict = Depends(get_current_user),
) -> NotebookResponse:
    """Create a notebook. Invalid colors fall back to the default."""
    db = get_database()

    ok, message = validate_name(data.name, NOTEBOOK_NAME_MAX_LENGTH)
    if not ok:
        raise HTTPException(status_code=400, detail=message)

    now = datetime.utcnow()
    doc = {
        "userId": current_user["id"],
        "name": data.name.strip(),
        "color": data.color if is_hex_color(data.color) else DEFAULT_NOTEBOOK_COLOR,
        "isDefault": False,
        "createdAt": now,
        "updatedAt": now,
    }
    result = await db.notebooks.insert_one(doc)
    doc["_id"] = result.inserted_id

    return await _to_response(db, doc)


@router.patch("/{notebook_id}", response_model=NotebookResponse)
async def update_notebook(
    notebook_id: str,
    data: NotebookUpdate,
    current_user: dict = Depends(get_current_user),
) -> NotebookResponse:
    """Update a notebook's name, color or default flag."""
    db = get_database()
    update_doc: dict = {"updatedAt": datetime.utcnow()}

    if data.name is not None:
        ok, message = validate_name(data.name, NOTEBOOK_NAME_MAX_LENGTH)
        if not ok:
            raise HTTPException(status_code=400, detail=message)
        update_doc["name"] = data.name.strip()
    if data.color is not None:
        if not is_hex_color(data.color):
            raise HTTPException(status_code=400, detail="Invalid color format")
        update_doc["color"] = data.color
    if data.is_default is not None:
        update_doc["isDefault"] = data.is_default

    result = await db.notebooks.find_one_and_update(
        {"_id": notebook_id, "userId": current_user["id"]},
        {"$set": update_doc},
        return_document=True,
    )
    if not result:
        raise HTTPException(status_code=404, detail="Notebook not found")

    return await _to_response(db, result)


@router.delete("/{notebook_id}")
async def delete_notebook(
    notebook_id: str,
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Delete a notebook. Its notes stay, without a notebook."""
    db = get_database()
    user_id = current_user["id"]

    result = await db.notebooks.delete_one({"_id": notebook_id, "userId": user_id})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Notebook not found")

    unlinked = await db.notes.update_many(
        {"userId": user_id, "notebookId": notebook_id},
        {"$set": {"notebookId": None}},
    )
    logger.info(f"Deleted notebook {notebook_id}, unlinked {unlinked.modified_count} note(s)")

    return {"message": "Notebook deleted"}
