"""
Listener registry between the rich-text editor and whoever persists it.

The editor is opaque: on every document mutation it calls emit() with the
current HTML and its plain-text rendition. It does no debouncing,
validation or saving of its own.
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

ContentListener = Callable[[str, str], None]


class EditorSurface:
    """Fans editor content changes out to registered listeners."""

    def __init__(self) -> None:
        self._listeners: List[ContentListener] = []

    def add_listener(self, listener: ContentListener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)
        return lambda: self.remove_listener(listener)

    def remove_listener(self, listener: ContentListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, html: str, text: str) -> None:
        """Report the editor's current content to every listener."""
        for listener in list(self._listeners):
            listener(html, text)
