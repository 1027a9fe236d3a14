"""
Scratch pad router.
One free-form text pad per user, created on first write.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Depends

from noteflow.database import get_database
from noteflow.routers.auth import get_current_user
from noteflow.models.scratch_pad import ScratchPadResponse, ScratchPadUpdate
from noteflow.utils.validators import SCRATCH_PAD_MAX_LENGTH

logger = logging.getLogger(__name__)
router = APIRouter()


def _doc_to_response(doc: dict) -> ScratchPadResponse:
    return ScratchPadResponse(
        id=str(doc["_id"]),
        content=doc.get("content", ""),
        updated_at=doc.get("updatedAt"),
    )


@router.get("", response_model=ScratchPadResponse)
async def get_scratch_pad(
    current_user: dict = Depends(get_current_user),
) -> ScratchPadResponse:
    """Get the caller's scratch pad, or an empty one if never written."""
    db = get_database()
    doc = await db.scratchPads.find_one({"userId": current_user["id"]})
    if not doc:
        return ScratchPadResponse()
    return _doc_to_response(doc)


@router.put("", response_model=ScratchPadResponse)
async def put_scratch_pad(
    data: ScratchPadUpdate,
    current_user: dict = Depends(get_current_user),
) -> ScratchPadResponse:
    """Replace the scratch pad content."""
    if len(data.content) > SCRATCH_PAD_MAX_LENGTH:
        raise HTTPException(status_code=400, detail="Content is too long")

    db = get_database()
    query = {"userId": current_user["id"]}
    await db.scratchPads.update_one(
        query,
        {"$set": {"content": data.content, "updatedAt": datetime.utcnow()}},
        upsert=True,
    )
    doc = await db.scratchPads.find_one(query)
    return _doc_to_response(doc)
