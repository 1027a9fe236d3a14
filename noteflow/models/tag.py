"""
Tag model definitions.
"""

from datetime import datetime
from pydantic import BaseModel


class TagCreate(BaseModel):
    """Schema for creating a tag."""
    name: str


class TagResponse(BaseModel):
    """Tag data returned in API responses."""
    id: str
    name: str
    note_count: int = 0
    created_at: datetime
