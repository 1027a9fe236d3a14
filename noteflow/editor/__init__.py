"""
Editor-side components: save reconciliation, autosave and trash helpers.
"""

from noteflow.editor.debounce import Debouncer
from noteflow.editor.http_client import HttpNotePersistence
from noteflow.editor.persistence import NotePersistence, PersistenceError
from noteflow.editor.reconciler import SavePhase, SaveReconciler, SaveState, SaveStatus
from noteflow.editor.scratch_pad import ScratchPadAutosave
from noteflow.editor.surface import EditorSurface
from noteflow.editor.trash import EmptyTrashResult, delete_notes, empty_trash

__all__ = [
    "Debouncer",
    "HttpNotePersistence",
    "NotePersistence",
    "PersistenceError",
    "SavePhase",
    "SaveReconciler",
    "SaveState",
    "SaveStatus",
    "ScratchPadAutosave",
    "EditorSurface",
    "EmptyTrashResult",
    "delete_notes",
    "empty_trash",
]
