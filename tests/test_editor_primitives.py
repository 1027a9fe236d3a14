"""
Tests for the Debouncer and EditorSurface building blocks.
"""

import asyncio

from noteflow.editor import Debouncer, EditorSurface


class TestDebouncer:
    """Test deferred calls."""

    async def test_fires_once_after_burst(self):
        calls = []
        debouncer = Debouncer(lambda: calls.append(1), 0.05)

        for _ in range(5):
            debouncer.trigger()
            await asyncio.sleep(0.01)
        assert debouncer.pending

        await asyncio.sleep(0.1)

        assert calls == [1]
        assert not debouncer.pending

    async def test_cancel(self):
        calls = []
        debouncer = Debouncer(lambda: calls.append(1), 0.02)

        debouncer.trigger()
        debouncer.cancel()
        await asyncio.sleep(0.05)

        assert calls == []
        assert not debouncer.pending

    def test_cancel_without_trigger(self):
        debouncer = Debouncer(lambda: None, 0.02)

        debouncer.cancel()

        assert not debouncer.pending


class TestEditorSurface:
    """Test listener fan-out."""

    def test_emit_reaches_all_listeners(self):
        surface = EditorSurface()
        first, second = [], []
        surface.add_listener(lambda html, text: first.append((html, text)))
        surface.add_listener(lambda html, text: second.append(text))

        surface.emit("<p>hi</p>", "hi")

        assert first == [("<p>hi</p>", "hi")]
        assert second == ["hi"]

    def test_unsubscribe(self):
        surface = EditorSurface()
        seen = []
        unsubscribe = surface.add_listener(lambda html, text: seen.append(text))

        unsubscribe()
        surface.emit("<p>hi</p>", "hi")

        assert seen == []

    def test_remove_unknown_listener_is_noop(self):
        surface = EditorSurface()

        surface.remove_listener(lambda html, text: None)
