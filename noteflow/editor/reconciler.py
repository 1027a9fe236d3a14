"""
Save reconciliation for one open note-editing session.

Turns the stream of editor events (content edits, title blur, notebook
and tag changes, manual saves) into a short, ordered sequence of
create/update calls while keeping the saved/saving indicator accurate.

Rules:
  - Content edits land in the session state immediately and re-arm a
    debounce timer; only the last edit of a burst triggers a save.
  - A save always sends the drafts as they are when it is dispatched.
  - At most one content save is in flight. A save requested meanwhile is
    dropped; once the in-flight save completes, anything newer than what it
    carried re-arms the timer, so no edit is lost. A failed save with
    nothing newer behind it is not retried until the next edit.
  - A new note is created by its first successful save and is updated
    from then on. A failed create leaves it new; the next save creates again.
  - Title, notebook and tag changes on an existing note are saved right
    away on their own. One made while a content save is out also marks the
    drafts dirty, since that save carries the old value. On a new note they
    only change the draft and ride along with the first create.

Typical usage:
    reconciler = SaveReconciler(HttpNotePersistence(url, token))
    reconciler.attach(surface)
    ...
    reconciler.close()
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional, Set, Tuple

from noteflow.config import get_settings
from noteflow.editor.debounce import Debouncer
from noteflow.editor.persistence import NotePersistence, PersistenceError
from noteflow.editor.surface import EditorSurface
from noteflow.models.note import NoteCreate, NoteResponse, NoteUpdate

logger = logging.getLogger(__name__)


class SavePhase(str, Enum):
    """Whether the note has a durable identifier yet."""
    NEW = "new"
    EXISTING = "existing"


class SaveStatus(str, Enum):
    """What the editor's save indicator shows."""
    SAVED = "saved"
    UNSAVED = "unsaved"
    SAVING = "saving"
    ERROR = "error"


StatusListener = Callable[[SaveStatus], None]


@dataclass
class SaveState:
    """Client-held drafts and save bookkeeping for one editing session.

    ``revision`` counts draft changes that still need a full save;
    ``saved_revision`` is the revision carried by the last successful one.
    """
    phase: SavePhase = SavePhase.NEW
    note_id: Optional[str] = None
    pending_html: str = ""
    pending_text: str = ""
    title_draft: str = ""
    notebook_draft: Optional[str] = None
    tag_ids_draft: List[str] = field(default_factory=list)
    save_in_flight: bool = False
    revision: int = 0
    saved_revision: int = 0

    @property
    def pending_content(self) -> Tuple[str, str]:
        return self.pending_html, self.pending_text

    @property
    def dirty(self) -> bool:
        return self.revision != self.saved_revision

    def title_to_store(self) -> str:
        return self.title_draft.strip() or "Untitled"

    def to_create(self) -> NoteCreate:
        return NoteCreate(
            title=self.title_to_store(),
            content=self.pending_html,
            plain_text=self.pending_text,
            notebook_id=self.notebook_draft,
            tag_ids=list(self.tag_ids_draft),
        )

    def to_update(self) -> NoteUpdate:
        return NoteUpdate(
            title=self.title_to_store(),
            content=self.pending_html,
            plain_text=self.pending_text,
            notebook_id=self.notebook_draft,
            tag_ids=list(self.tag_ids_draft),
        )


class SaveReconciler:
    """
    Owns "is this note persisted" for one editing session.

    Args:
        persistence: Endpoint used for create/update calls.
        note: Stored record when editing an existing note; None for a
            fresh "new note" session.
        delay: Quiet period in seconds; defaults to the configured
            autosave delay.
    """

    def __init__(
        self,
        persistence: NotePersistence,
        note: Optional[NoteResponse] = None,
        delay: Optional[float] = None,
    ):
        self.persistence = persistence
        self.state = SaveState()
        self.note = note
        self.status = SaveStatus.SAVED
        self.last_error: Optional[PersistenceError] = None

        if note is not None:
            self.state.phase = SavePhase.EXISTING
            self.state.note_id = note.id
            self.state.pending_html = note.content
            self.state.pending_text = note.plain_text
            self.state.title_draft = note.title
            self.state.notebook_draft = note.notebook_id
            self.state.tag_ids_draft = list(note.tag_ids)

        if delay is None:
            delay = get_settings().autosave_delay_seconds
        self._debouncer = Debouncer(self._on_timer, delay)
        self._status_listeners: List[StatusListener] = []
        self._tasks: Set[asyncio.Task] = set()
        self._detach: Optional[Callable[[], None]] = None
        self._closed = False

    # ============================================================
    # Read-only views
    # ============================================================
    @property
    def phase(self) -> SavePhase:
        return self.state.phase

    @property
    def note_id(self) -> Optional[str]:
        return self.state.note_id

    @property
    def timer_pending(self) -> bool:
        return self._debouncer.pending

    # ============================================================
    # Wiring
    # ============================================================
    def attach(self, surface: EditorSurface) -> None:
        """Subscribe to the editor's content changes."""
        self._detach = surface.add_listener(self.on_content_change)

    def add_status_listener(self, listener: StatusListener) -> Callable[[], None]:
        """Register a listener for save indicator changes.

        Returns:
            A callable that removes the listener again.
        """
        self._status_listeners.append(listener)
        return lambda: self._status_listeners.remove(listener)

    # ============================================================
    # Editor events
    # ============================================================
    def on_content_change(self, html: str, text: str) -> None:
        """Record the latest editor output and restart the quiet period."""
        if self._closed:
            return
        self.state.pending_html = html
        self.state.pending_text = text
        self.state.revision += 1
        self._set_status(SaveStatus.UNSAVED)
        self._debouncer.trigger()

    def on_title_blur(self, title: str) -> None:
        """Save a changed title right away (or keep it as a draft while new)."""
        if self._closed:
            return
        changed = title != self.state.title_draft
        self.state.title_draft = title
        if self.state.phase is SavePhase.NEW:
            if changed:
                self._draft_changed()
            return
        stored = self.state.title_to_store()
        if self.note is None or stored != self.note.title:
            self._send_fields(NoteUpdate(title=stored))

    def on_notebook_select(self, notebook_id: Optional[str]) -> None:
        """Link the note to a notebook, or unlink it with None."""
        if self._closed:
            return
        self.state.notebook_draft = notebook_id or None
        if self.state.phase is SavePhase.NEW:
            self._draft_changed()
            return
        self._send_fields(NoteUpdate(notebook_id=self.state.notebook_draft))

    def on_tags_change(self, tag_ids: Iterable[str]) -> None:
        """Replace the note's tag set."""
        if self._closed:
            return
        self.state.tag_ids_draft = list(dict.fromkeys(tag_ids))
        if self.state.phase is SavePhase.NEW:
            self._draft_changed()
            return
        self._send_fields(NoteUpdate(tag_ids=list(self.state.tag_ids_draft)))

    async def save_now(self) -> None:
        """Manual save: cancel the pending timer and save immediately."""
        if self._closed:
            return
        self._debouncer.cancel()
        await self._save()

    def close(self) -> None:
        """End the session. A pending timer is cancelled; an in-flight
        request is left to finish on its own."""
        self._closed = True
        self._debouncer.cancel()
        if self._detach is not None:
            self._detach()
            self._detach = None

    async def wait_idle(self) -> None:
        """Wait for every save started so far (and any they start) to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ============================================================
    # Internals
    # ============================================================
    def _draft_changed(self) -> None:
        # Picked up by the first create, or by a re-armed timer if a
        # create is already on its way
        self.state.revision += 1
        self._set_status(SaveStatus.UNSAVED)

    def _send_fields(self, changes: NoteUpdate) -> None:
        if self.state.save_in_flight:
            # The full save already out carries the old value and may land
            # after this one, so a follow-up full save must go too
            self.state.revision += 1
        self._spawn(self._save_fields(changes))

    def _on_timer(self) -> None:
        if not self._closed:
            self._spawn(self._save())

    def _spawn(self, coro: Awaitable[None]) -> None:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _set_status(self, status: SaveStatus) -> None:
        if status is self.status:
            return
        self.status = status
        for listener in list(self._status_listeners):
            listener(status)

    async def _save(self) -> None:
        state = self.state
        if state.save_in_flight:
            logger.debug(f"Save already in flight for note {state.note_id or '(new)'}; deferring")
            return

        state.save_in_flight = True
        dispatched = state.revision
        self._set_status(SaveStatus.SAVING)
        try:
            if state.phase is SavePhase.NEW:
                note = await self.persistence.create_note(state.to_create())
                state.note_id = note.id
                state.phase = SavePhase.EXISTING
                logger.info(f"Created note {note.id}")
            else:
                note = await self.persistence.update_note(state.note_id, state.to_update())
                logger.debug(f"Saved note {note.id} (revision {dispatched})")
        except PersistenceError as e:
            self._report_failure(e)
            # Edits whose timer fired during this request still need sending
            if state.revision != dispatched and not self._debouncer.pending and not self._closed:
                self._debouncer.trigger()
            return
        finally:
            state.save_in_flight = False

        self.note = note
        self.last_error = None
        state.saved_revision = dispatched

        if state.dirty:
            # Edits arrived while the request was out
            self._set_status(SaveStatus.UNSAVED)
            if not self._debouncer.pending and not self._closed:
                self._debouncer.trigger()
        else:
            self._set_status(SaveStatus.SAVED)

    async def _save_fields(self, changes: NoteUpdate) -> None:
        try:
            note = await self.persistence.update_note(self.state.note_id, changes)
        except PersistenceError as e:
            self._report_failure(e)
            return
        self.note = note
        logger.debug(f"Saved {sorted(changes.model_fields_set)} on note {note.id}")
        state = self.state
        if not state.dirty and not state.save_in_flight and not self._debouncer.pending:
            self.last_error = None
            self._set_status(SaveStatus.SAVED)

    def _report_failure(self, error: PersistenceError) -> None:
        self.last_error = error
        if error.is_not_found:
            logger.warning(f"Note {self.state.note_id} no longer exists: {error.detail}")
        elif error.is_validation:
            logger.warning(f"Note save rejected: {error.detail}")
        else:
            logger.warning(f"Note save failed, keeping draft: {error.detail}")
        self._set_status(SaveStatus.ERROR)
