"""Transcript change notification."""

from __future__ import annotations

from typing import Callable

from loguru import logger

TranscriptListener = Callable[[str], None]


class TranscriptNotifier:
    """
    Listener registry for "this transcript changed" events.

    Listeners are observers: an exception in one is logged and never reaches
    the writer that triggered the event.
    """

    def __init__(self) -> None:
        self._listeners: list[TranscriptListener] = []

    def subscribe(self, listener: TranscriptListener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, session_file: str) -> None:
        if not session_file:
            return
        for listener in list(self._listeners):
            try:
                listener(session_file)
            except Exception as e:
                name = getattr(listener, "__name__", repr(listener))
                logger.error(f"Transcript listener {name} failed for {session_file}: {e}")
