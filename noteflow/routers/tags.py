"""
Tags router.
Tags are per-user labels; notes carry a list of tag IDs.
"""

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, HTTPException, Depends

from noteflow.database import get_database
from noteflow.routers.auth import get_current_user
from noteflow.models.tag import TagCreate, TagResponse
from noteflow.utils.validators import TAG_NAME_MAX_LENGTH, validate_name

logger = logging.getLogger(__name__)
router = APIRouter()


async def _to_response(db, doc: dict) -> TagResponse:
    note_count = await db.notes.count_documents({
        "userId": doc["userId"],
        "tagIds": {"$all": [str(doc["_id"])]},
    })
    return TagResponse(
        id=str(doc["_id"]),
        name=doc["name"],
        note_count=note_count,
        created_at=doc["createdAt"],
    )


@router.get("", response_model=List[TagResponse])
async def list_tags(
    current_user: dict = Depends(get_current_user),
) -> List[TagResponse]:
    """List tags by name with the number of notes carrying each."""
    db = get_database()
    cursor = db.tags.find({"userId": current_user["id"]}).sort("name")
    return [await _to_response(db, doc) async for doc in cursor]


@router.post("", response_model=TagResponse, status_code=201)
async def create_tag(
    data: TagCreate,
    current_user: dict = Depends(get_current_user),
) -> TagResponse:
    """Create a tag."""
    db = get_database()

    ok, message = validate_name(data.name, TAG_NAME_MAX_LENGTH)
    if not ok:
        raise HTTPException(status_code=400, detail=message)

    doc = {
        "userId": current_user["id"],
        "name": data.name.strip(),
        "createdAt": datetime.utcnow(),
    }
    result = await db.tags.insert_one(doc)
    doc["_id"] = result.inserted_id

    return TagResponse(id=result.inserted_id, name=doc["name"], created_at=doc["createdAt"])


@router.delete("/{tag_id}")
async def delete_tag(
    tag_id: str,
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Delete a tag and remove it from every note that carries it."""
    db = get_database()
    user_id = current_user["id"]

    result = await db.tags.delete_one({"_id": tag_id, "userId": user_id})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Tag not found")

    await db.notes.update_many(
        {"userId": user_id, "tagIds": {"$all": [tag_id]}},
        {"$pull": {"tagIds": tag_id}},
    )

    return {"message": "Tag deleted"}
