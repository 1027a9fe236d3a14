"""
Task model definitions.
Tasks are simple to-do items, optionally linked to a note.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class TaskCreate(BaseModel):
    """Schema for creating a task."""
    title: str
    note_id: Optional[str] = None
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    """Schema for updating a task. Only fields present are applied."""
    title: Optional[str] = None
    is_completed: Optional[bool] = None
    note_id: Optional[str] = None
    due_date: Optional[datetime] = None


class TaskResponse(BaseModel):
    """Task data returned in API responses."""
    id: str
    title: str
    is_completed: bool = False
    note_id: Optional[str] = None
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
