"""
Debounced deferred calls on the running asyncio loop.
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Debounced call using loop.call_later.

    Every trigger() restarts the quiet period, so a burst of triggers
    results in a single call once the burst settles.
    """

    def __init__(self, callback: Callable[[], None], delay: float):
        self._callback = callback
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        """True while a call is scheduled."""
        return self._handle is not None

    def trigger(self) -> None:
        """Schedule the call after the quiet period. Resets if called again."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Cancel any pending call."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()
