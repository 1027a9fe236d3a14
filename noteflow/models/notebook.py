"""
Notebook model definitions.
Notebooks group notes; a note belongs to at most one notebook.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

DEFAULT_NOTEBOOK_COLOR = "#4CAF50"


class NotebookCreate(BaseModel):
    """Schema for creating a notebook."""
    name: str
    color: Optional[str] = None


class NotebookUpdate(BaseModel):
    """Schema for updating a notebook. Unknown fields are dropped."""
    name: Optional[str] = None
    color: Optional[str] = None
    is_default: Optional[bool] = None


class NotebookResponse(BaseModel):
    """Notebook data returned in API responses."""
    id: str
    name: str
    color: str = DEFAULT_NOTEBOOK_COLOR
    is_default: bool = False
    note_count: int = 0
    created_at: datetime
    updated_at: datetime
