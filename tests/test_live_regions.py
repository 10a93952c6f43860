"""
Tests for the LiveRegionSimulator class.

These tests verify:
- Which regions are watched and their politeness, atomic and relevant defaults
- Atomic and non-atomic announcement text
- Ordering of polite and assertive announcements
- Suppression: off regions, irrelevant kinds, busy and hidden regions
- Removal announcements read from the previous snapshot
- Change notification parsing
"""

import pytest

from virtual_screen_reader.accessibility import AccessibilityTree, build_tree
from virtual_screen_reader.announcements import (
    AnnouncementQueue,
    EventKind,
    EventSource,
    Politeness,
)
from virtual_screen_reader.config import SimulatorConfig
from virtual_screen_reader.errors import CommandRejectedError
from virtual_screen_reader.live import (
    ChangeKind,
    ChangeNotification,
    LiveRegionSimulator,
    compute_watches,
    parse_relevant,
)
from virtual_screen_reader.raw import from_html

PAGE = """
<div id="log" role="log"><p id="m1">Saved</p><p id="m2">Synced</p></div>
<div id="alert" role="alert">Error</div>
<div id="status" role="status">3 items <b>saved</b></div>
<div id="timer" role="timer">10</div>
<p id="plain">Not live</p>
"""


def build(markup: str) -> AccessibilityTree:
    return build_tree(from_html(markup))


def change(root: str, kind: ChangeKind, *affected: str) -> ChangeNotification:
    return ChangeNotification(root, kind, affected or (root,))


@pytest.fixture
def simulator() -> LiveRegionSimulator:
    return LiveRegionSimulator(build(PAGE))


class TestWatches:
    """Tests for live region discovery."""

    def test_role_defaults(self) -> None:
        """Test politeness and atomic defaults from live region roles."""
        watches = compute_watches(build(PAGE))

        assert watches["log"].politeness is Politeness.POLITE
        assert watches["log"].atomic is False
        assert watches["alert"].politeness is Politeness.ASSERTIVE
        assert watches["alert"].atomic is True
        assert watches["status"].politeness is Politeness.POLITE
        assert watches["status"].atomic is True
        assert watches["timer"].politeness is Politeness.OFF
        assert "plain" not in watches

    def test_explicit_attributes_win(self) -> None:
        """Test that aria-live and aria-atomic override role defaults."""
        watches = compute_watches(
            build('<div id="s" role="status" aria-live="assertive" aria-atomic="false">x</div>')
        )
        assert watches["s"].politeness is Politeness.ASSERTIVE
        assert watches["s"].atomic is False

    def test_aria_live_without_role(self) -> None:
        """Test a plain element made live with aria-live."""
        watches = compute_watches(build('<div id="d" aria-live="polite">x</div>'))
        assert watches["d"].politeness is Politeness.POLITE
        assert watches["d"].atomic is False

    def test_unknown_aria_live_ignored(self) -> None:
        """Test that an unknown aria-live value does not make a region."""
        assert compute_watches(build('<div id="d" aria-live="rude">x</div>')) == {}

    def test_hidden_regions_not_watched(self) -> None:
        """Test that hidden live regions are not watched."""
        assert compute_watches(build('<div role="alert" hidden>x</div>')) == {}

    def test_parse_relevant(self) -> None:
        """Test aria-relevant parsing."""
        assert parse_relevant(None) == frozenset({"additions", "text"})
        assert parse_relevant("all") == frozenset({"additions", "removals", "text", "attributes"})
        assert parse_relevant("removals text") == frozenset({"removals", "text"})
        assert parse_relevant("bogus") == frozenset({"additions", "text"})


class TestAnnouncementText:
    """Tests for what live regions say."""

    def test_atomic_region_reads_everything(self, simulator) -> None:
        """Test that an atomic region reads its whole content."""
        event = simulator.notify(change("status", ChangeKind.TEXT))

        assert event.text == "3 items saved"
        assert event.politeness is Politeness.POLITE
        assert event.source is EventSource.LIVE_REGION
        assert event.kind is EventKind.LIVE
        assert event.node_id == "status"

    def test_non_atomic_region_reads_change(self, simulator) -> None:
        """Test that a log reads only the added node."""
        event = simulator.notify(change("log", ChangeKind.ADDITION, "m2"))
        assert event.text == "Synced"

    def test_change_below_region(self, simulator) -> None:
        """Test that changes are attributed to the enclosing region."""
        event = simulator.notify(change("m1", ChangeKind.TEXT))
        assert event.node_id == "log"
        assert event.text == "Saved"

    def test_affected_nodes_in_document_order(self, simulator) -> None:
        """Test that several affected nodes are read in document order."""
        event = simulator.notify(change("log", ChangeKind.ADDITION, "m2", "m1"))
        assert event.text == "Saved Synced"

    def test_atomic_override(self) -> None:
        """Test that aria-atomic on a log reads the whole log."""
        simulator = LiveRegionSimulator(
            build(
                '<div id="log" role="log" aria-atomic="true">'
                '<p id="a">One</p><p id="b">Two</p></div>'
            )
        )
        event = simulator.notify(change("log", ChangeKind.ADDITION, "b"))
        assert event.text == "One Two"

    def test_attribute_change_reads_region(self) -> None:
        """Test that an attribute change reads the whole region."""
        simulator = LiveRegionSimulator(
            build(
                '<div id="r" role="log" aria-relevant="attributes">'
                '<span id="s">Hello</span> world</div>'
            )
        )
        event = simulator.notify(change("r", ChangeKind.ATTRIBUTE, "s"))
        assert event.text == "Hello world"

    def test_nodes_outside_region_skipped(self) -> None:
        """Test that affected nodes outside the region are not read."""
        simulator = LiveRegionSimulator(
            build(
                '<div id="r" role="log"><p id="a">In</p></div>'
                '<p id="o">Outside secret</p>'
            )
        )
        assert simulator.notify(change("r", ChangeKind.ADDITION, "a", "o")).text == "In"
        assert simulator.notify(change("r", ChangeKind.ADDITION, "o")) is None

    def test_stale_ids_skipped(self, simulator) -> None:
        """Test that unknown affected ids contribute nothing."""
        assert simulator.notify(change("log", ChangeKind.ADDITION, "gone")) is None
        assert simulator.notify(change("log", ChangeKind.ADDITION, "gone", "m1")).text == "Saved"


class TestSuppression:
    """Tests for changes that are not announced."""

    def test_not_in_region(self, simulator) -> None:
        """Test that changes outside live regions are ignored."""
        assert simulator.notify(change("plain", ChangeKind.TEXT)) is None
        assert simulator.notify(change("unknown", ChangeKind.TEXT)) is None

    def test_off_region(self, simulator) -> None:
        """Test that timers are silent by default."""
        assert simulator.notify(change("timer", ChangeKind.TEXT)) is None

    def test_irrelevant_kind(self, simulator) -> None:
        """Test that removals are ignored by default."""
        assert simulator.notify(change("log", ChangeKind.REMOVAL, "m1")) is None
        assert simulator.notify(change("log", ChangeKind.ATTRIBUTE, "m1")) is None

    def test_busy_region(self) -> None:
        """Test that busy regions stay silent."""
        simulator = LiveRegionSimulator(build('<div id="s" role="status" aria-busy="true">x</div>'))
        assert simulator.notify(change("s", ChangeKind.TEXT)) is None

    def test_nothing_queued_when_suppressed(self, simulator) -> None:
        """Test that suppressed changes leave the queue empty."""
        simulator.notify(change("timer", ChangeKind.TEXT))
        assert len(simulator.queue) == 0


class TestRemovals:
    """Tests for removal announcements."""

    def test_removal_reads_previous_snapshot(self) -> None:
        """Test that removed nodes are read from the tree before the change."""
        before = build(
            '<div id="log" role="log" aria-relevant="removals"><p id="m1">Gone</p></div>'
        )
        after = build('<div id="log" role="log" aria-relevant="removals"></div>')
        simulator = LiveRegionSimulator(before)

        simulator.rebind(after)
        event = simulator.notify(change("log", ChangeKind.REMOVAL, "m1"))

        assert event.text == "Gone"

    def test_region_for_removed_node(self) -> None:
        """Test that a removed node still finds its region."""
        before = build('<div id="log" role="log"><p id="m1">Gone</p></div>')
        after = build('<div id="log" role="log"></div>')
        simulator = LiveRegionSimulator(before)
        simulator.rebind(after)

        assert simulator.region_for("m1").node_id == "log"


class TestQueueing:
    """Tests for how live events reach the queue."""

    def test_assertive_before_polite(self, simulator) -> None:
        """Test that an alert overtakes queued log entries."""
        simulator.notify(change("log", ChangeKind.ADDITION, "m1"))
        simulator.notify(change("log", ChangeKind.ADDITION, "m2"))
        simulator.notify(change("alert", ChangeKind.TEXT))

        assert [e.text for e in simulator.queue.drain()] == ["Error", "Saved", "Synced"]

    def test_shared_queue(self) -> None:
        """Test that a simulator can share a queue."""
        queue = AnnouncementQueue()
        simulator = LiveRegionSimulator(build(PAGE), queue=queue)
        simulator.notify(change("status", ChangeKind.TEXT))

        assert [e.text for e in queue.pending] == ["3 items saved"]

    def test_auto_deliver(self) -> None:
        """Test that auto_deliver delivers events as they are queued."""
        simulator = LiveRegionSimulator(build(PAGE), config=SimulatorConfig(auto_deliver=True))
        simulator.notify(change("alert", ChangeKind.TEXT))

        assert len(simulator.queue) == 0
        assert [e.text for e in simulator.queue.delivered] == ["Error"]

    def test_sequence_numbers_increase(self, simulator) -> None:
        """Test that queued events are numbered in notification order."""
        first = simulator.notify(change("log", ChangeKind.ADDITION, "m1"))
        second = simulator.notify(change("alert", ChangeKind.TEXT))
        assert second.sequence_number > first.sequence_number


class TestChangeNotification:
    """Tests for ChangeNotification."""

    def test_relevant_spelling_accepted(self) -> None:
        """Test that aria-relevant tokens can be used as kinds."""
        assert ChangeNotification("log", "additions").kind is ChangeKind.ADDITION
        assert ChangeNotification("log", "text").kind is ChangeKind.TEXT

    def test_unknown_kind_rejected(self) -> None:
        """Test that unknown kinds are rejected with their original spelling."""
        with pytest.raises(CommandRejectedError, match="unknown change kind 'bogus'"):
            ChangeNotification("log", "bogus")

    def test_attribute_spelling_accepted(self) -> None:
        """Test both spellings of the attribute kind."""
        assert ChangeNotification("log", "attribute").kind is ChangeKind.ATTRIBUTE
        assert ChangeNotification("log", "attributes").kind is ChangeKind.ATTRIBUTE

    def test_affected_ids_frozen(self) -> None:
        """Test that affected ids are stored as a tuple."""
        notification = ChangeNotification("log", ChangeKind.ADDITION, ["a", "b"])
        assert notification.affected_node_ids == ("a", "b")

    def test_relevant_tokens(self) -> None:
        """Test the aria-relevant token of each kind."""
        assert [kind.relevant_token for kind in ChangeKind] == [
            "additions",
            "removals",
            "text",
            "attributes",
        ]
