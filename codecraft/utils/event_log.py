"""Thread-safe event log for game signals exposed via the API."""

from __future__ import annotations

import itertools
import threading
from collections import deque
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class GameEvent:
    """A single entry in the session's event feed.

    Categories: ``message``, ``level_completed``, ``course_completed``,
    ``translation_fault``, ``level_selected``.
    """

    seq: int
    category: str
    message: str
    level_id: int | None = None
    metadata: dict = field(default_factory=dict)


class EventLog:
    """Bounded event log. Writers append; readers copy a slice.

    Every event gets a monotonically increasing sequence number so pollers
    can ask for everything after the last one they saw.
    """

    __slots__ = ("_buffer", "_lock", "_seq")

    def __init__(self, maxlen: int = 1000) -> None:
        self._buffer: deque[GameEvent] = deque(maxlen=maxlen)
        self._lock = threading.Lock()
        self._seq = itertools.count(1)

    def append(self, category: str, message: str, level_id: int | None = None, **metadata) -> GameEvent:
        with self._lock:
            event = GameEvent(next(self._seq), category, message, level_id, metadata)
            self._buffer.append(event)
        return event

    def since(self, seq: int) -> list[GameEvent]:
        """Return all events with sequence number > *seq*."""
        with self._lock:
            return [e for e in self._buffer if e.seq > seq]

    def latest(self, count: int = 50) -> list[GameEvent]:
        with self._lock:
            items = list(self._buffer)
        return items[-count:]

    def categories(self) -> list[str]:
        with self._lock:
            return [e.category for e in self._buffer]

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()
