"""
NoteFlow: personal notes with notebooks, tags, tasks and a scratch pad.
"""

__version__ = "1.0.0"
