"""
Announcement events and the announcement queue.

Navigation commands and live regions both produce AnnouncementEvents. Every
event passes through one AnnouncementQueue per session, which hands events
to subscribers one at a time.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Politeness(Enum):
    """Live region politeness levels."""

    OFF = "off"
    POLITE = "polite"
    ASSERTIVE = "assertive"

    @classmethod
    def parse(cls, value: str | None) -> Politeness | None:
        """Parse an ``aria-live`` value; None for missing or unknown values."""
        if value is None:
            return None
        value = value.strip().lower()
        for politeness in cls:
            if politeness.value == value:
                return politeness
        return None


class EventSource(Enum):
    """Where an announcement came from."""

    NAVIGATION = "navigation"
    LIVE_REGION = "live-region"


class EventKind(Enum):
    """What an announcement describes."""

    NODE = "node"
    LANDMARK_ENTER = "landmark-enter"
    LANDMARK_EXIT = "landmark-exit"
    ACTIVATE = "activate"
    MODE_CHANGE = "mode-change"
    DOCUMENT_LOAD = "document-load"
    LIVE = "live"


@dataclass(frozen=True)
class AnnouncementEvent:
    """An immutable announcement.

    Attributes:
        text: What would be spoken
        source: Navigation or live region
        politeness: Live region politeness (None for navigation events)
        sequence_number: Monotonic per session, shared by all sources
        kind: What the announcement describes
        node_id: The node announced, if any
    """

    text: str
    source: EventSource
    politeness: Politeness | None
    sequence_number: int
    kind: EventKind = EventKind.NODE
    node_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence_number,
            "source": self.source.value,
            "kind": self.kind.value,
            "politeness": self.politeness.value if self.politeness else None,
            "node_id": self.node_id,
            "text": self.text,
        }


class SequenceCounter:
    """Thread-safe monotonic counter for event sequence numbers."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


AnnouncementListener = Callable[[AnnouncementEvent], None]


class AnnouncementQueue:
    """Ordered, single-consumer delivery of announcements.

    Live region events wait in the queue until delivered. An assertive event
    goes to the front of the queue and is delivered next.
    Navigation events are published straight away. Once delivered, an event
    keeps its place in the delivery history.

    Args:
        history_limit: Number of delivered events to keep (None keeps all)
    """

    def __init__(self, history_limit: int | None = None) -> None:
        self._pending: deque[AnnouncementEvent] = deque()
        self._delivered: deque[AnnouncementEvent] = deque(maxlen=history_limit)
        self._listeners: list[AnnouncementListener] = []
        self._lock = threading.Lock()
        self._delivery_lock = threading.RLock()

    def subscribe(self, listener: AnnouncementListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def enqueue(self, event: AnnouncementEvent) -> None:
        """Queue a live region event according to its politeness."""
        with self._lock:
            if event.politeness is Politeness.ASSERTIVE:
                self._pending.appendleft(event)
            else:
                self._pending.append(event)
        logger.debug("Queued %s event #%d", event.politeness, event.sequence_number)

    def publish(self, events: list[AnnouncementEvent]) -> None:
        """Deliver events immediately, in order."""
        with self._delivery_lock:
            for event in events:
                self._deliver(event)

    def deliver_next(self) -> AnnouncementEvent | None:
        """Deliver the event at the head of the queue, if any."""
        with self._delivery_lock:
            with self._lock:
                if not self._pending:
                    return None
                event = self._pending.popleft()
            self._deliver(event)
            return event

    def drain(self) -> list[AnnouncementEvent]:
        """Deliver every queued event in order."""
        delivered = []
        with self._delivery_lock:
            while True:
                event = self.deliver_next()
                if event is None:
                    break
                delivered.append(event)
        return delivered

    def clear(self) -> None:
        """Drop queued, undelivered events."""
        with self._lock:
            self._pending.clear()

    @property
    def pending(self) -> tuple[AnnouncementEvent, ...]:
        with self._lock:
            return tuple(self._pending)

    @property
    def delivered(self) -> tuple[AnnouncementEvent, ...]:
        with self._lock:
            return tuple(self._delivered)

    def _deliver(self, event: AnnouncementEvent) -> None:
        with self._lock:
            self._delivered.append(event)
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
