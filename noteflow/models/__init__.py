"""
Pydantic models package.
Each module contains models for a specific domain.
"""

from noteflow.models.user import UserCreate, UserLogin, UserResponse, TokenResponse
from noteflow.models.note import NoteCreate, NoteUpdate, NoteResponse
from noteflow.models.notebook import NotebookCreate, NotebookUpdate, NotebookResponse
from noteflow.models.tag import TagCreate, TagResponse
from noteflow.models.task import TaskCreate, TaskUpdate, TaskResponse
from noteflow.models.scratch_pad import ScratchPadUpdate, ScratchPadResponse

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "TokenResponse",
    "NoteCreate", "NoteUpdate", "NoteResponse",
    "NotebookCreate", "NotebookUpdate", "NotebookResponse",
    "TagCreate", "TagResponse",
    "TaskCreate", "TaskUpdate", "TaskResponse",
    "ScratchPadUpdate", "ScratchPadResponse",
]
