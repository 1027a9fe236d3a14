"""
Tasks router.
Simple to-do items, optionally linked to one of the user's notes.
"""

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, HTTPException, Depends

from noteflow.database import get_database
from noteflow.routers.auth import get_current_user
from noteflow.models.task import TaskCreate, TaskResponse, TaskUpdate
from noteflow.ownership import ensure_note_owned
from noteflow.utils.validators import validate_task_title

logger = logging.getLogger(__name__)
router = APIRouter()

_UPDATABLE_FIELDS = {
    "title": "title",
    "is_completed": "isCompleted",
    "note_id": "noteId",
    "due_date": "dueDate",
}


def _doc_to_response(doc: dict) -> TaskResponse:
    return TaskResponse(
        id=str(doc["_id"]),
        title=doc["title"],
        is_completed=doc.get("isCompleted", False),
        note_id=doc.get("noteId"),
        due_date=doc.get("dueDate"),
        created_at=doc["createdAt"],
        updated_at=doc["updatedAt"],
    )


@router.get("", response_model=List[TaskResponse])
async def list_tasks(
    current_user: dict = Depends(get_current_user),
) -> List[TaskResponse]:
    """List tasks: open ones first, newest first within each group."""
    db = get_database()
    cursor = db.tasks.find({"userId": current_user["id"]}).sort(
        [("isCompleted", 1), ("createdAt", -1)]
    )
    return [_doc_to_response(doc) async for doc in cursor]


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    data: TaskCreate,
    current_user: dict = Depends(get_current_user),
) -> TaskResponse:
    """Create a task."""
    db = get_database()
    user_id = current_user["id"]

    ok, message = validate_task_title(data.title)
    if not ok:
        raise HTTPException(status_code=400, detail=message)
    await ensure_note_owned(db, user_id, data.note_id)

    now = datetime.utcnow()
    doc = {
        "userId": user_id,
        "title": data.title.strip(),
        "isCompleted": False,
        "noteId": data.note_id,
        "dueDate": data.due_date,
        "createdAt": now,
        "updatedAt": now,
    }
    result = await db.tasks.insert_one(doc)
    doc["_id"] = result.inserted_id

    return _doc_to_response(doc)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    current_user: dict = Depends(get_current_user),
) -> TaskResponse:
    """Update a task. Only allow-listed fields present in the request apply."""
    db = get_database()
    user_id = current_user["id"]
    changes = data.model_dump(exclude_unset=True)

    if "title" in changes:
        ok, message = validate_task_title(changes["title"])
        if not ok:
            raise HTTPException(status_code=400, detail=message)
        changes["title"] = changes["title"].strip()
    if "note_id" in changes:
        await ensure_note_owned(db, user_id, changes["note_id"])

    update_doc: dict = {"updatedAt": datetime.utcnow()}
    for field, stored in _UPDATABLE_FIELDS.items():
        if field in changes:
            if changes[field] is None and field == "is_completed":
                continue
            update_doc[stored] = changes[field]

    result = await db.tasks.find_one_and_update(
        {"_id": task_id, "userId": user_id},
        {"$set": update_doc},
        return_document=True,
    )
    if not result:
        raise HTTPException(status_code=404, detail="Task not found")

    return _doc_to_response(result)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    current_user: dict = Depends(get_current_user),
) -> dict:
    """Delete a task."""
    db = get_database()
    result = await db.tasks.delete_one({"_id": task_id, "userId": current_user["id"]})
    if not result.deleted_count:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Task deleted"}
