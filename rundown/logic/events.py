"""Change notification constants and notifier.

The service calls ``notify_changed(parent_id, kind)`` once after every
successful structural mutation. External realtime/UI layers subscribe to
receive those calls; nothing here knows about transports.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque, Dict, List, Protocol
import logging

logger = logging.getLogger(__name__)

PROJECTS_CHANGED = "projects.changed"
ITEMS_CHANGED = "items.changed"
ELEMENTS_CHANGED = "elements.changed"

# Oldest buffered notifications are dropped past this many
EVENT_BUFFER_LIMIT = 1000

Subscriber = Callable[[str, str], None]


class ChangeNotifier(Protocol):
    def notify_changed(self, parent_id: str, kind: str) -> None:
        ...


class BufferedChangeNotifier:
    """Logs each change, buffers it in memory and fans it out to subscribers."""

    def __init__(self, buffer_limit: int = EVENT_BUFFER_LIMIT) -> None:
        self._buffer: Deque[Dict[str, Any]] = deque(maxlen=buffer_limit)
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def notify_changed(self, parent_id: str, kind: str) -> None:
        logger.info("change_notify kind=%s parent_id=%s", kind, parent_id)
        self._buffer.append({"kind": kind, "parent_id": parent_id})
        for callback in list(self._subscribers):
            try:
                callback(parent_id, kind)
            except Exception:
                # Subscriber errors never fail a committed mutation
                logger.error("change_notify subscriber failed kind=%s parent_id=%s", kind, parent_id, exc_info=True)

    def get_buffered_events(self, clear: bool = True) -> List[Dict[str, Any]]:
        """Return buffered notifications; optionally clear the buffer."""
        events = list(self._buffer)
        if clear:
            self._buffer.clear()
        return events


__all__ = [
    "PROJECTS_CHANGED",
    "ITEMS_CHANGED",
    "ELEMENTS_CHANGED",
    "EVENT_BUFFER_LIMIT",
    "ChangeNotifier",
    "BufferedChangeNotifier",
]
