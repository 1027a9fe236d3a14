"""
API routers package.
Each router handles a specific domain of endpoints.
"""

from noteflow.routers import auth, notes, notebooks, tags, tasks, scratch_pad, search

__all__ = [
    "auth",
    "notes",
    "notebooks",
    "tags",
    "tasks",
    "scratch_pad",
    "search",
]
