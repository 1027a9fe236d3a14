"""
Note model definitions.

A note holds rich-text content (HTML produced by the editor) plus a
plain-text rendition used for search and previews. Notes can be linked
to one notebook and any number of tags, and move through a
trash/restore/delete lifecycle.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel


class NoteCreate(BaseModel):
    """Schema for creating a new note."""
    title: str = "Untitled"
    content: str = ""
    plain_text: str = ""
    notebook_id: Optional[str] = None
    tag_ids: List[str] = []


class NoteUpdate(BaseModel):
    """Schema for a partial note update.

    Only fields present in the request are applied, so an explicit
    ``notebook_id: null`` unlinks the notebook while an absent one
    leaves it alone. ``tag_ids`` replaces the whole tag set.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    plain_text: Optional[str] = None
    notebook_id: Optional[str] = None
    tag_ids: Optional[List[str]] = None
    is_pinned: Optional[bool] = None
    is_favorite: Optional[bool] = None
    is_trashed: Optional[bool] = None


class NoteResponse(BaseModel):
    """Note data returned in API responses."""
    id: str
    user_id: str
    title: str
    content: str
    plain_text: str
    notebook_id: Optional[str] = None
    tag_ids: List[str] = []
    is_pinned: bool = False
    is_favorite: bool = False
    is_trashed: bool = False
    trashed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
