"""
Abstract persistence contract consumed by the editor-side components.
Any transport (HTTP, in-process, test double) must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from noteflow.models.note import NoteCreate, NoteResponse, NoteUpdate


class PersistenceError(Exception):
    """A create/update/delete call that did not succeed.

    Attributes:
        detail: Human-readable message, shown to the user as-is.
        status_code: HTTP status of the rejection, or None when the
            request never got an answer (connection refused, timeout).
    """

    def __init__(self, detail: str, status_code: Optional[int] = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    @property
    def is_validation(self) -> bool:
        """Rejected input (bad field, length exceeded, foreign reference)."""
        return self.status_code in (400, 422)

    @property
    def is_not_found(self) -> bool:
        """The addressed note is gone or belongs to someone else."""
        return self.status_code == 404

    @property
    def is_transient(self) -> bool:
        """Network or server failure; the same request may succeed later."""
        return self.status_code is None or self.status_code >= 500

    def __repr__(self) -> str:
        return f"PersistenceError({self.detail!r}, status_code={self.status_code})"


class NotePersistence(ABC):
    """
    Abstract base class for note persistence endpoints.

    Each implementation must:
    1. Create a note from a full draft and return the stored record
    2. Apply a partial update to an existing note
    3. Support the trash lifecycle (trash, restore, permanent delete)
    4. Raise PersistenceError for every failure
    """

    @abstractmethod
    async def create_note(self, draft: NoteCreate) -> NoteResponse:
        """
        Create a note.

        Args:
            draft: Title, content, plain text, notebook and tag links.

        Returns:
            The stored note, including its generated identifier.
        """
        pass

    @abstractmethod
    async def update_note(self, note_id: str, changes: NoteUpdate) -> NoteResponse:
        """
        Apply the fields set on ``changes`` to an existing note.

        Returns:
            The stored note after the update.
        """
        pass

    @abstractmethod
    async def list_notes(self, trashed: bool = False) -> List[NoteResponse]:
        """List the caller's notes, either live or trashed."""
        pass

    @abstractmethod
    async def trash_note(self, note_id: str) -> NoteResponse:
        """Soft-delete a note."""
        pass

    @abstractmethod
    async def restore_note(self, note_id: str) -> NoteResponse:
        """Bring a trashed note back."""
        pass

    @abstractmethod
    async def delete_note(self, note_id: str) -> None:
        """Permanently delete a note."""
        pass
