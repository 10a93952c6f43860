"""
Tests for announcement events and the announcement queue.

These tests verify:
- Politeness parsing
- Event serialization
- Queue ordering: assertive events ahead of polite ones, FIFO otherwise
- Immediate publishing, delivery history and its limit
- Subscribers and unsubscribing
"""

import threading

from virtual_screen_reader.announcements import (
    AnnouncementEvent,
    AnnouncementQueue,
    EventKind,
    EventSource,
    Politeness,
    SequenceCounter,
)


def live_event(text: str, politeness: Politeness, number: int) -> AnnouncementEvent:
    return AnnouncementEvent(
        text=text,
        source=EventSource.LIVE_REGION,
        politeness=politeness,
        sequence_number=number,
        kind=EventKind.LIVE,
        node_id="region",
    )


def nav_event(text: str, number: int) -> AnnouncementEvent:
    return AnnouncementEvent(
        text=text, source=EventSource.NAVIGATION, politeness=None, sequence_number=number
    )


class TestPoliteness:
    """Tests for Politeness.parse."""

    def test_known_values(self) -> None:
        """Test parsing of valid values, ignoring case and whitespace."""
        assert Politeness.parse("polite") is Politeness.POLITE
        assert Politeness.parse(" ASSERTIVE ") is Politeness.ASSERTIVE
        assert Politeness.parse("off") is Politeness.OFF

    def test_unknown_values(self) -> None:
        """Test that missing and unknown values parse to None."""
        assert Politeness.parse(None) is None
        assert Politeness.parse("rude") is None


class TestAnnouncementEvent:
    """Tests for AnnouncementEvent."""

    def test_to_dict(self) -> None:
        """Test the dictionary form of an event."""
        event = live_event("Saved", Politeness.POLITE, 7)
        assert event.to_dict() == {
            "sequence": 7,
            "source": "live-region",
            "kind": "live",
            "politeness": "polite",
            "node_id": "region",
            "text": "Saved",
        }

    def test_navigation_event_has_no_politeness(self) -> None:
        """Test that navigation events serialize politeness as None."""
        assert nav_event("link, Home", 1).to_dict()["politeness"] is None


class TestSequenceCounter:
    """Tests for SequenceCounter."""

    def test_monotonic(self) -> None:
        """Test that numbers increase by one."""
        counter = SequenceCounter()
        assert [counter.next() for _ in range(3)] == [1, 2, 3]

    def test_unique_across_threads(self) -> None:
        """Test that concurrent callers never get the same number."""
        counter = SequenceCounter()
        numbers: list[int] = []
        lock = threading.Lock()

        def _take() -> None:
            for _ in range(100):
                value = counter.next()
                with lock:
                    numbers.append(value)

        threads = [threading.Thread(target=_take) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(numbers) == list(range(1, 401))


class TestAnnouncementQueue:
    """Tests for AnnouncementQueue ordering and delivery."""

    def test_polite_events_fifo(self) -> None:
        """Test that polite events are delivered in arrival order."""
        queue = AnnouncementQueue()
        queue.enqueue(live_event("one", Politeness.POLITE, 1))
        queue.enqueue(live_event("two", Politeness.POLITE, 2))

        assert [e.text for e in queue.drain()] == ["one", "two"]

    def test_assertive_overtakes_polite(self) -> None:
        """Test that an assertive event goes ahead of queued polite ones."""
        queue = AnnouncementQueue()
        queue.enqueue(live_event("Saved", Politeness.POLITE, 1))
        queue.enqueue(live_event("Synced", Politeness.POLITE, 2))
        queue.enqueue(live_event("Error", Politeness.ASSERTIVE, 3))

        assert [e.text for e in queue.drain()] == ["Error", "Saved", "Synced"]

    def test_latest_assertive_event_delivered_next(self) -> None:
        """Test that a new assertive event goes ahead of earlier assertive ones."""
        queue = AnnouncementQueue()
        queue.enqueue(live_event("Saved", Politeness.POLITE, 1))
        queue.enqueue(live_event("Err1", Politeness.ASSERTIVE, 2))
        queue.enqueue(live_event("Err2", Politeness.ASSERTIVE, 3))

        assert queue.deliver_next().text == "Err2"
        assert [e.text for e in queue.drain()] == ["Err1", "Saved"]

    def test_delivered_events_not_reordered(self) -> None:
        """Test that an assertive event never moves ahead of delivered ones."""
        queue = AnnouncementQueue()
        queue.enqueue(live_event("Saved", Politeness.POLITE, 1))
        queue.deliver_next()
        queue.enqueue(live_event("Synced", Politeness.POLITE, 2))
        queue.enqueue(live_event("Error", Politeness.ASSERTIVE, 3))
        queue.drain()

        assert [e.text for e in queue.delivered] == ["Saved", "Error", "Synced"]

    def test_deliver_next(self) -> None:
        """Test delivering one event at a time."""
        queue = AnnouncementQueue()
        queue.enqueue(live_event("one", Politeness.POLITE, 1))
        queue.enqueue(live_event("two", Politeness.POLITE, 2))

        assert queue.deliver_next().text == "one"
        assert len(queue) == 1
        assert [e.text for e in queue.pending] == ["two"]
        assert queue.deliver_next().text == "two"
        assert queue.deliver_next() is None

    def test_publish_is_immediate(self) -> None:
        """Test that published events skip the queue."""
        queue = AnnouncementQueue()
        queue.enqueue(live_event("waiting", Politeness.POLITE, 1))
        queue.publish([nav_event("link, Home", 2)])

        assert [e.text for e in queue.delivered] == ["link, Home"]
        assert [e.text for e in queue.pending] == ["waiting"]

    def test_delivery_history_order(self) -> None:
        """Test that history keeps delivery order."""
        queue = AnnouncementQueue()
        queue.publish([nav_event("a", 1)])
        queue.enqueue(live_event("b", Politeness.POLITE, 2))
        queue.drain()
        queue.publish([nav_event("c", 3)])

        assert [e.text for e in queue.delivered] == ["a", "b", "c"]

    def test_history_limit(self) -> None:
        """Test that only the most recent events are kept."""
        queue = AnnouncementQueue(history_limit=2)
        queue.publish([nav_event(str(i), i) for i in range(1, 5)])

        assert [e.text for e in queue.delivered] == ["3", "4"]

    def test_clear_drops_pending_only(self) -> None:
        """Test that clear leaves history alone."""
        queue = AnnouncementQueue()
        queue.publish([nav_event("said", 1)])
        queue.enqueue(live_event("unsaid", Politeness.POLITE, 2))
        queue.clear()

        assert queue.pending == ()
        assert [e.text for e in queue.delivered] == ["said"]


class TestSubscribers:
    """Tests for subscribing to delivered events."""

    def test_listener_called_in_order(self) -> None:
        """Test that listeners see every delivered event in order."""
        queue = AnnouncementQueue()
        heard: list[str] = []
        queue.subscribe(lambda event: heard.append(event.text))

        queue.publish([nav_event("a", 1)])
        queue.enqueue(live_event("b", Politeness.POLITE, 2))
        queue.enqueue(live_event("c", Politeness.ASSERTIVE, 3))
        queue.drain()

        assert heard == ["a", "c", "b"]

    def test_unsubscribe(self) -> None:
        """Test that an unsubscribed listener is no longer called."""
        queue = AnnouncementQueue()
        heard: list[str] = []
        unsubscribe = queue.subscribe(lambda event: heard.append(event.text))

        queue.publish([nav_event("a", 1)])
        unsubscribe()
        unsubscribe()
        queue.publish([nav_event("b", 2)])

        assert heard == ["a"]

    def test_queued_events_not_delivered_until_drained(self) -> None:
        """Test that listeners are not called on enqueue."""
        queue = AnnouncementQueue()
        heard: list[str] = []
        queue.subscribe(lambda event: heard.append(event.text))

        queue.enqueue(live_event("later", Politeness.POLITE, 1))
        assert heard == []
        queue.deliver_next()
        assert heard == ["later"]
