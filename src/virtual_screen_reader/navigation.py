"""
Cursor navigation over the flattened reading order.

The NavigationEngine owns the virtual cursor and the Browse/Focus mode. Each
command runs to completion under a lock and returns the announcement events
it produced, in order.

Example:
    >>> from virtual_screen_reader.raw import from_html
    >>> from virtual_screen_reader.accessibility import build_tree
    >>> engine = NavigationEngine(build_tree(from_html("<h1>A</h1><p>B</p>")))
    >>> [e.text for e in engine.next()]
    ['B']
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .accessibility.tree import AccessibilityTree
from .accessibility.types import AccessibilityNode, FlattenedSequence
from .announcements import AnnouncementEvent, EventKind, EventSource, SequenceCounter
from .announcer import AnnouncementFormatter
from .config import SimulatorConfig
from .constants import (
    FORM_CONTROL_ROLES,
    GRAPHIC_ROLES,
    LIST_ROLES,
    TABLE_ROLES,
    TEXT_INPUT_ROLES,
)
from .errors import CommandRejectedError, UnknownFilterError
from .fuzzy import closest_names

logger = logging.getLogger(__name__)

NodePredicate = Callable[[AccessibilityNode], bool]


class NavigationMode(Enum):
    """Browse mode reads the document; focus mode passes keys to the page."""

    BROWSE = "browse"
    FOCUS = "focus"


@dataclass
class NavigationState:
    """Cursor position and mode.

    Attributes:
        cursor_index: Index into the reading order (None if it is empty)
        mode: Current navigation mode
        node_id: Id of the node under the cursor
    """

    cursor_index: int | None = None
    mode: NavigationMode = NavigationMode.BROWSE
    node_id: str | None = None


# =============================================================================
# Navigation filters
# =============================================================================


def _heading_level(level: int) -> NodePredicate:
    return lambda node: node.role == "heading" and node.level == level


NAVIGATION_FILTERS: dict[str, NodePredicate] = {
    "heading": lambda node: node.role == "heading",
    **{f"heading{level}": _heading_level(level) for level in range(1, 7)},
    "link": lambda node: node.role == "link",
    "button": lambda node: node.role == "button",
    "landmark": lambda node: node.is_landmark,
    "form-control": lambda node: node.role in FORM_CONTROL_ROLES,
    "table": lambda node: node.role in TABLE_ROLES,
    "list": lambda node: node.role in LIST_ROLES,
    "listitem": lambda node: node.role == "listitem",
    "graphic": lambda node: node.role in GRAPHIC_ROLES,
    "region": lambda node: node.role == "region",
    "checkbox": lambda node: node.role == "checkbox",
    "radio": lambda node: node.role == "radio",
    "combobox": lambda node: node.role == "combobox",
    "edit": lambda node: node.role in TEXT_INPUT_ROLES,
    "separator": lambda node: node.role == "separator",
}

_FILTER_KEYS = {name.replace("-", ""): name for name in NAVIGATION_FILTERS}


def resolve_filter(filter_name: str | NodePredicate) -> NodePredicate:
    """Look up a named filter; callables are returned unchanged.

    Names are matched ignoring case, hyphens and underscores, so
    ``form-control``, ``form_control`` and ``formControl`` are equivalent.

    Raises:
        CommandRejectedError: If the filter is neither a name nor a callable
        UnknownFilterError: If the name is not a known filter
    """
    if callable(filter_name):
        return filter_name
    if not isinstance(filter_name, str):
        raise CommandRejectedError(
            "next_of_type",
            f"filter must be a name or a callable, got {type(filter_name).__name__}",
        )
    key = filter_name.strip().lower().replace("-", "").replace("_", "")
    canonical = _FILTER_KEYS.get(key)
    if canonical is None:
        available = list(NAVIGATION_FILTERS)
        raise UnknownFilterError(filter_name, available, closest_names(filter_name, available))
    return NAVIGATION_FILTERS[canonical]


# =============================================================================
# Engine
# =============================================================================


class NavigationEngine:
    """Virtual cursor over a tree's reading order.

    Args:
        tree: Initial tree snapshot
        config: Announcement options
        counter: Sequence number source shared with other event producers
        state: Initial state (a fresh one at the first node by default)
    """

    def __init__(
        self,
        tree: AccessibilityTree,
        config: SimulatorConfig | None = None,
        counter: SequenceCounter | None = None,
        state: NavigationState | None = None,
    ) -> None:
        self.config = config if config is not None else SimulatorConfig()
        self.counter = counter if counter is not None else SequenceCounter()
        self._lock = threading.RLock()
        self._tree = tree
        self._formatter = AnnouncementFormatter(tree, self.config)
        self.state = state if state is not None else NavigationState()
        if state is None and len(tree.sequence) > 0:
            self.state.cursor_index = 0
            self.state.node_id = tree.sequence[0].id

    @property
    def tree(self) -> AccessibilityTree:
        return self._tree

    @property
    def mode(self) -> NavigationMode:
        return self.state.mode

    @property
    def current_node(self) -> AccessibilityNode | None:
        index = self.state.cursor_index
        if index is None:
            return None
        return self._tree.sequence[index]

    # =========================================================================
    # Commands
    # =========================================================================

    def next(self) -> list[AnnouncementEvent]:
        """Move to the next node; no-op at the end."""
        with self._lock:
            index = self.state.cursor_index
            if index is None or index + 1 >= len(self._tree.sequence):
                return []
            return self._move_to(index + 1)

    def previous(self) -> list[AnnouncementEvent]:
        """Move to the previous node; no-op at the start."""
        with self._lock:
            index = self.state.cursor_index
            if index is None or index == 0:
                return []
            return self._move_to(index - 1)

    def first(self) -> list[AnnouncementEvent]:
        """Move to the first node."""
        with self._lock:
            if len(self._tree.sequence) == 0:
                return []
            return self._move_to(0)

    def last(self) -> list[AnnouncementEvent]:
        """Move to the last node."""
        with self._lock:
            if len(self._tree.sequence) == 0:
                return []
            return self._move_to(len(self._tree.sequence) - 1)

    def next_of_type(self, filter_name: str | NodePredicate) -> list[AnnouncementEvent]:
        """Move to the next node matching a filter; no-op when none follows.

        Raises:
            UnknownFilterError: If the filter name is unknown
        """
        predicate = resolve_filter(filter_name)
        with self._lock:
            index = self.state.cursor_index
            if index is None:
                return []
            sequence = self._tree.sequence
            for i in range(index + 1, len(sequence)):
                if predicate(sequence[i]):
                    return self._move_to(i)
            logger.debug("No next node matching %s", filter_name)
            return []

    def previous_of_type(self, filter_name: str | NodePredicate) -> list[AnnouncementEvent]:
        """Move to the previous node matching a filter; no-op when none precedes.

        Raises:
            UnknownFilterError: If the filter name is unknown
        """
        predicate = resolve_filter(filter_name)
        with self._lock:
            index = self.state.cursor_index
            if index is None:
                return []
            sequence = self._tree.sequence
            for i in range(index - 1, -1, -1):
                if predicate(sequence[i]):
                    return self._move_to(i)
            logger.debug("No previous node matching %s", filter_name)
            return []

    def move_to(self, node_id: str) -> list[AnnouncementEvent]:
        """Move the cursor to a specific node, e.g. after a focus change.

        Raises:
            CommandRejectedError: If the node is not in the reading order
        """
        with self._lock:
            index = self._tree.sequence.index_of(node_id)
            if index is None:
                raise CommandRejectedError("move_to", f"node '{node_id}' is not navigable")
            return self._move_to(index)

    def current(self) -> list[AnnouncementEvent]:
        """Announce the node under the cursor again."""
        with self._lock:
            node = self.current_node
            if node is None:
                return []
            return [self._event(self._formatter.describe(node), EventKind.NODE, node.id)]

    def start(self) -> list[AnnouncementEvent]:
        """Announce the initial position, including the landmark it is in."""
        with self._lock:
            node = self.current_node
            if node is None:
                return []
            return self._announce_arrival(None, node)

    def activate(self) -> list[AnnouncementEvent]:
        """Signal that the node under the cursor should be invoked.

        The engine does not perform the action; the host reacts to the
        returned ACTIVATE event.
        """
        with self._lock:
            node = self.current_node
            if node is None:
                return []
            return [self._event(self._formatter.activation(node), EventKind.ACTIVATE, node.id)]

    def toggle_mode(self) -> list[AnnouncementEvent]:
        """Switch between browse and focus mode."""
        with self._lock:
            if self.state.mode is NavigationMode.BROWSE:
                self.state.mode = NavigationMode.FOCUS
                text = "Focus mode"
            else:
                self.state.mode = NavigationMode.BROWSE
                text = "Browse mode"
            node = self.current_node
            return [self._event(text, EventKind.MODE_CHANGE, node.id if node else None)]

    # =========================================================================
    # Rebuild
    # =========================================================================

    def rebind(self, tree: AccessibilityTree) -> None:
        """Swap in a rebuilt tree and relocate the cursor.

        The cursor stays on the same node id when it survives; otherwise it
        moves to the next surviving node in the old order, then the previous
        one, and finally is clamped to the new bounds.
        """
        with self._lock:
            old_sequence = self._tree.sequence
            old_index = self.state.cursor_index
            new_sequence = tree.sequence

            self._tree = tree
            self._formatter = AnnouncementFormatter(tree, self.config)

            if len(new_sequence) == 0:
                self.state.cursor_index = None
                self.state.node_id = None
                return

            new_index = None
            if old_index is not None and self.state.node_id is not None:
                new_index = new_sequence.index_of(self.state.node_id)
                if new_index is None:
                    new_index = _surviving_index(old_sequence, old_index, new_sequence)
                    logger.debug(
                        "Cursor node %s removed, relocated to index %s",
                        self.state.node_id,
                        new_index,
                    )
            if new_index is None:
                new_index = min(old_index or 0, len(new_sequence) - 1)

            self.state.cursor_index = new_index
            self.state.node_id = new_sequence[new_index].id

    # =========================================================================
    # Internals
    # =========================================================================

    def _move_to(self, index: int) -> list[AnnouncementEvent]:
        previous = self.current_node
        node = self._tree.sequence[index]
        self.state.cursor_index = index
        self.state.node_id = node.id
        return self._announce_arrival(previous, node)

    def _announce_arrival(
        self, previous: AccessibilityNode | None, node: AccessibilityNode
    ) -> list[AnnouncementEvent]:
        events: list[AnnouncementEvent] = []
        entered = None

        if self.config.announce_landmarks:
            old_landmark = self._tree.nearest_landmark(previous)
            new_landmark = self._tree.nearest_landmark(node)
            old_id = old_landmark.id if old_landmark else None
            new_id = new_landmark.id if new_landmark else None
            if new_landmark is not None and new_id != old_id:
                entered = new_landmark
                events.append(
                    self._event(
                        self._formatter.entering_landmark(new_landmark),
                        EventKind.LANDMARK_ENTER,
                        new_landmark.id,
                    )
                )
            elif new_landmark is None and old_landmark is not None:
                events.append(
                    self._event(
                        self._formatter.exiting_landmark(old_landmark),
                        EventKind.LANDMARK_EXIT,
                        old_landmark.id,
                    )
                )

        # A landmark that was just entered is not read a second time
        if entered is not node:
            events.append(self._event(self._formatter.describe(node), EventKind.NODE, node.id))
        return events

    def _event(self, text: str, kind: EventKind, node_id: str | None) -> AnnouncementEvent:
        return AnnouncementEvent(
            text=text,
            source=EventSource.NAVIGATION,
            politeness=None,
            sequence_number=self.counter.next(),
            kind=kind,
            node_id=node_id,
        )


def _surviving_index(
    old_sequence: FlattenedSequence, old_index: int, new_sequence: FlattenedSequence
) -> int | None:
    """Index in the new sequence of the nearest surviving node after, then before."""
    for i in range(old_index + 1, len(old_sequence)):
        index = new_sequence.index_of(old_sequence[i].id)
        if index is not None:
            return index
    for i in range(min(old_index, len(old_sequence)) - 1, -1, -1):
        index = new_sequence.index_of(old_sequence[i].id)
        if index is not None:
            return index
    return None
