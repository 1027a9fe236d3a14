"""
Client-side bulk operations on the trash.

Emptying the trash issues one permanent delete per trashed note. The
deletes are independent: a failure leaves that note in the trash and
does not stop the others. There is no all-or-nothing guarantee.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from noteflow.editor.persistence import NotePersistence, PersistenceError

logger = logging.getLogger(__name__)


@dataclass
class EmptyTrashResult:
    """Outcome of a bulk permanent delete."""
    deleted: List[str] = field(default_factory=list)
    failed: Dict[str, PersistenceError] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failed


async def delete_notes(persistence: NotePersistence,
                       note_ids: Iterable[str]) -> EmptyTrashResult:
    """Permanently delete each note, collecting per-note failures."""
    note_ids = list(note_ids)
    outcomes = await asyncio.gather(
        *(persistence.delete_note(note_id) for note_id in note_ids),
        return_exceptions=True,
    )

    result = EmptyTrashResult()
    for note_id, outcome in zip(note_ids, outcomes):
        if isinstance(outcome, PersistenceError):
            logger.warning(f"Could not delete note {note_id}: {outcome.detail}")
            result.failed[note_id] = outcome
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            result.deleted.append(note_id)

    logger.info(f"Deleted {len(result.deleted)} note(s), {len(result.failed)} failed")
    return result


async def empty_trash(persistence: NotePersistence) -> EmptyTrashResult:
    """Permanently delete every note currently in the trash."""
    trashed = await persistence.list_notes(trashed=True)
    return await delete_notes(persistence, [note.id for note in trashed])
