"""
Scratch pad model definitions.
Each user has at most one scratch pad of free-form text.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ScratchPadUpdate(BaseModel):
    """Schema for replacing the scratch pad content."""
    content: str = ""


class ScratchPadResponse(BaseModel):
    """Scratch pad returned in API responses."""
    id: Optional[str] = None
    content: str = ""
    updated_at: Optional[datetime] = None
