"""
Debounced autosave for the scratch pad.
"""

import asyncio
import logging
from typing import Optional, Set

from noteflow.config import get_settings
from noteflow.editor.debounce import Debouncer
from noteflow.editor.http_client import HttpNotePersistence
from noteflow.editor.persistence import PersistenceError

logger = logging.getLogger(__name__)


class ScratchPadAutosave:
    """Keeps the scratch pad text and PUTs it once typing pauses."""

    def __init__(self, client: HttpNotePersistence, delay: Optional[float] = None):
        self.client = client
        self.content = ""
        self.last_error: Optional[PersistenceError] = None
        if delay is None:
            delay = get_settings().scratch_pad_delay_seconds
        self._debouncer = Debouncer(self._on_timer, delay)
        self._tasks: Set[asyncio.Task] = set()

    async def load(self) -> str:
        pad = await self.client.get_scratch_pad()
        self.content = pad.content
        return self.content

    def on_change(self, content: str) -> None:
        self.content = content
        self._debouncer.trigger()

    async def flush(self) -> None:
        """Save right away if a save is pending."""
        if self._debouncer.pending:
            self._debouncer.cancel()
            await self._save()

    def close(self) -> None:
        self._debouncer.cancel()

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_timer(self) -> None:
        task = asyncio.ensure_future(self._save())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _save(self) -> None:
        try:
            await self.client.put_scratch_pad(self.content)
        except PersistenceError as e:
            self.last_error = e
            logger.warning(f"Scratch pad save failed: {e.detail}")
            return
        self.last_error = None
