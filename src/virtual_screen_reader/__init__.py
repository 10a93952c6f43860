"""
virtual_screen_reader - Simulate what a screen reader announces for a document.

This package builds the accessibility tree a screen reader perceives from a
raw element tree, walks it with a virtual cursor the way a screen reader user
would, turns live region updates into queued announcements, and searches the
tree. It is meant for testing the accessibility of web content without
driving a real assistive technology.

Example:
    >>> from virtual_screen_reader import ScreenReaderSession, from_html
    >>> session = ScreenReaderSession(from_html("<main><h1>Welcome</h1></main>"))
    >>> [event.text for event in session.history]
    ['Document loaded, 2 elements', 'entering main landmark']
    >>> [event.text for event in session.next()]
    ['heading level 1, Welcome']
"""

__version__ = "0.1.0"
__all__ = [
    "ScreenReaderSession",
    "SimulatorConfig",
    "load_config",
    # Raw input
    "RawElement",
    "element",
    "from_html",
    "from_mapping",
    "load_raw_tree",
    # Accessibility tree
    "AccessibilityNode",
    "AccessibilityTree",
    "FlattenedSequence",
    "NodeProperties",
    "NodeRelationships",
    "NodeStates",
    "Outline",
    "OutlineEntry",
    "OutlineKind",
    "TablePosition",
    "build_tree",
    # Navigation and announcements
    "NavigationEngine",
    "NavigationMode",
    "NavigationState",
    "AnnouncementEvent",
    "AnnouncementFormatter",
    "AnnouncementQueue",
    "EventKind",
    "EventSource",
    "Politeness",
    # Live regions
    "ChangeKind",
    "ChangeNotification",
    "LiveRegionSimulator",
    "LiveRegionWatch",
    # Search
    "CancellationToken",
    "SearchEngine",
    "SearchResult",
    "SearchResults",
    # Recording
    "ReplayResult",
    "SessionRecorder",
    "SessionRecording",
    "replay",
    # Errors
    "ScreenReaderError",
    "CommandRejectedError",
    "UnknownFilterError",
    "RawTreeError",
    "ConfigError",
    "RecordingError",
]

from .accessibility import (
    AccessibilityNode,
    AccessibilityTree,
    FlattenedSequence,
    NodeProperties,
    NodeRelationships,
    NodeStates,
    Outline,
    OutlineEntry,
    OutlineKind,
    TablePosition,
    build_tree,
)
from .announcements import (
    AnnouncementEvent,
    AnnouncementQueue,
    EventKind,
    EventSource,
    Politeness,
)
from .announcer import AnnouncementFormatter
from .config import SimulatorConfig, load_config
from .errors import (
    CommandRejectedError,
    ConfigError,
    RawTreeError,
    RecordingError,
    ScreenReaderError,
    UnknownFilterError,
)
from .live import ChangeKind, ChangeNotification, LiveRegionSimulator, LiveRegionWatch
from .navigation import NavigationEngine, NavigationMode, NavigationState
from .raw import RawElement, element, from_html, from_mapping, load_raw_tree
from .recorder import ReplayResult, SessionRecorder, SessionRecording, replay
from .search import CancellationToken, SearchEngine, SearchResult, SearchResults
from .session import ScreenReaderSession
