"""
Screen reader sessions.

A ScreenReaderSession ties one document to a navigation engine, a live region
simulator and an announcement queue. Sessions are independent objects: two
sessions never share a cursor, a queue or sequence numbers.

Example:
    >>> from virtual_screen_reader import ScreenReaderSession, from_html
    >>> session = ScreenReaderSession(from_html("<nav><a href='/'>Home</a></nav>"))
    >>> spoken = []
    >>> unsubscribe = session.subscribe(lambda event: spoken.append(event.text))
    >>> events = session.execute("next:link")
    >>> unsubscribe()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from .accessibility.tree import AccessibilityTree, build_tree
from .accessibility.types import AccessibilityNode
from .announcements import (
    AnnouncementEvent,
    AnnouncementListener,
    AnnouncementQueue,
    EventKind,
    EventSource,
    SequenceCounter,
)
from .announcer import AnnouncementFormatter
from .config import SimulatorConfig
from .errors import CommandRejectedError, UnknownFilterError
from .fuzzy import closest_names
from .live import ChangeNotification, LiveRegionSimulator
from .navigation import NavigationEngine, NavigationMode, NavigationState, NodePredicate
from .raw import RawElement
from .search import SearchEngine

logger = logging.getLogger(__name__)

ActivationHandler = Callable[[AccessibilityNode], None]
CommandListener = Callable[[str], None]

# Commands that take no argument
_PLAIN_COMMANDS = ("next", "previous", "first", "last", "current", "activate", "toggle-mode")
# Commands written as "name:argument"
_ARGUMENT_COMMANDS = ("next", "previous", "move-to")


class ScreenReaderSession:
    """One simulated screen reader reading one document.

    Navigation events are delivered to subscribers as soon as a command
    runs. Live region events wait in the queue until ``deliver_next`` or
    ``drain`` is called, unless ``config.auto_deliver`` is set.

    Args:
        raw: Document to load straight away
        config: Session options
    """

    def __init__(
        self,
        raw: RawElement | None = None,
        config: SimulatorConfig | None = None,
    ) -> None:
        self.config = config if config is not None else SimulatorConfig()
        self.counter = SequenceCounter()
        self.queue = AnnouncementQueue(self.config.history_limit)
        self._lock = threading.RLock()
        self._engine: NavigationEngine | None = None
        self._live: LiveRegionSimulator | None = None
        self._activate_handlers: list[ActivationHandler] = []
        self._command_listeners: list[CommandListener] = []

        if raw is not None:
            self.load(raw)

    # =========================================================================
    # Document lifecycle
    # =========================================================================

    @property
    def loaded(self) -> bool:
        return self._engine is not None

    @property
    def tree(self) -> AccessibilityTree:
        return self._require_engine("tree").tree

    @property
    def state(self) -> NavigationState:
        return self._require_engine("state").state

    @property
    def mode(self) -> NavigationMode:
        return self._require_engine("mode").mode

    @property
    def current_node(self) -> AccessibilityNode | None:
        return self._require_engine("current_node").current_node

    @property
    def search(self) -> SearchEngine:
        """A search engine over the current snapshot."""
        return SearchEngine(self.tree)

    def load(self, raw: RawElement) -> list[AnnouncementEvent]:
        """Load a new document and place the cursor on its first node.

        Pending live region events of a previous document are dropped.
        """
        tree = build_tree(raw)
        with self._lock:
            self.queue.clear()
            self._engine = NavigationEngine(tree, self.config, self.counter)
            self._live = LiveRegionSimulator(tree, self.queue, self.counter, self.config)

            events: list[AnnouncementEvent] = []
            if self.config.announce_document_load:
                formatter = AnnouncementFormatter(tree, self.config)
                events.append(
                    AnnouncementEvent(
                        text=formatter.document_loaded(),
                        source=EventSource.NAVIGATION,
                        politeness=None,
                        sequence_number=self.counter.next(),
                        kind=EventKind.DOCUMENT_LOAD,
                    )
                )
                events.extend(self._engine.start())
            self.queue.publish(events)

        logger.debug("Loaded document with %d navigable nodes", len(tree.sequence))
        return events

    def rebuild(
        self, raw: RawElement, changes: Iterable[ChangeNotification] = ()
    ) -> list[AnnouncementEvent]:
        """Swap in a rebuilt snapshot, then process the changes that caused it.

        The new tree is built before any lock is taken. The cursor is
        relocated when its node disappeared.

        Returns:
            Live region events queued for the changes
        """
        engine = self._require_engine("rebuild")
        live = self._live
        tree = build_tree(raw)
        with self._lock:
            engine.rebind(tree)
            if live is not None:
                live.rebind(tree)

        queued = []
        for change in changes:
            event = self.notify(change)
            if event is not None:
                queued.append(event)
        return queued

    def notify(self, change: ChangeNotification) -> AnnouncementEvent | None:
        """Report a change inside the current snapshot."""
        live = self._live
        if live is None:
            raise CommandRejectedError("notify", "no document is loaded")
        return live.notify(change)

    # =========================================================================
    # Commands
    # =========================================================================

    def next(self) -> list[AnnouncementEvent]:
        return self._run(lambda engine: engine.next())

    def previous(self) -> list[AnnouncementEvent]:
        return self._run(lambda engine: engine.previous())

    def first(self) -> list[AnnouncementEvent]:
        return self._run(lambda engine: engine.first())

    def last(self) -> list[AnnouncementEvent]:
        return self._run(lambda engine: engine.last())

    def next_of_type(self, filter_name: str | NodePredicate) -> list[AnnouncementEvent]:
        return self._run(lambda engine: engine.next_of_type(filter_name))

    def previous_of_type(self, filter_name: str | NodePredicate) -> list[AnnouncementEvent]:
        return self._run(lambda engine: engine.previous_of_type(filter_name))

    def move_to(self, node_id: str) -> list[AnnouncementEvent]:
        return self._run(lambda engine: engine.move_to(node_id))

    def current(self) -> list[AnnouncementEvent]:
        return self._run(lambda engine: engine.current())

    def toggle_mode(self) -> list[AnnouncementEvent]:
        return self._run(lambda engine: engine.toggle_mode())

    def activate(self) -> list[AnnouncementEvent]:
        """Announce the activation and call the registered activation handlers."""
        with self._lock:
            node = self._require_engine("activate").current_node
            events = self._run(lambda engine: engine.activate())
        if node is not None:
            for handler in list(self._activate_handlers):
                handler(node)
        return events

    def execute(self, command: str) -> list[AnnouncementEvent]:
        """Run a command written as text.

        Accepted forms are ``next``, ``previous``, ``first``, ``last``,
        ``current``, ``activate``, ``toggle-mode``, ``next:<filter>``,
        ``previous:<filter>`` and ``move-to:<node id>``.

        Raises:
            CommandRejectedError: If the command is unknown or malformed
        """
        name, _, argument = command.strip().partition(":")
        name = name.strip().lower().replace("_", "-")
        argument = argument.strip()

        if argument:
            if name == "next":
                events = self.next_of_type(argument)
            elif name == "previous":
                events = self.previous_of_type(argument)
            elif name == "move-to":
                events = self.move_to(argument)
            else:
                raise self._unknown_command(command, name, _ARGUMENT_COMMANDS)
        elif name in _PLAIN_COMMANDS:
            handler = getattr(self, name.replace("-", "_"))
            events = handler()
        elif name in _ARGUMENT_COMMANDS:
            raise CommandRejectedError(name, "an argument is required, e.g. 'next:heading'")
        else:
            raise self._unknown_command(command, name, _PLAIN_COMMANDS)

        for listener in list(self._command_listeners):
            listener(command)
        return events

    # =========================================================================
    # Delivery
    # =========================================================================

    def subscribe(self, listener: AnnouncementListener) -> Callable[[], None]:
        """Receive every delivered event; returns an unsubscribe function."""
        return self.queue.subscribe(listener)

    def on_activate(self, handler: ActivationHandler) -> Callable[[], None]:
        """Call a handler with the node under the cursor on activation."""
        self._activate_handlers.append(handler)

        def _remove() -> None:
            if handler in self._activate_handlers:
                self._activate_handlers.remove(handler)

        return _remove

    def on_command(self, listener: CommandListener) -> Callable[[], None]:
        """Call a listener with each successfully executed command string."""
        self._command_listeners.append(listener)

        def _remove() -> None:
            if listener in self._command_listeners:
                self._command_listeners.remove(listener)

        return _remove

    def deliver_next(self) -> AnnouncementEvent | None:
        return self.queue.deliver_next()

    def drain(self) -> list[AnnouncementEvent]:
        return self.queue.drain()

    @property
    def history(self) -> tuple[AnnouncementEvent, ...]:
        """Delivered events, oldest first."""
        return self.queue.delivered

    # =========================================================================
    # Internals
    # =========================================================================

    def _run(
        self, command: Callable[[NavigationEngine], list[AnnouncementEvent]]
    ) -> list[AnnouncementEvent]:
        with self._lock:
            engine = self._require_engine("navigation")
            events = command(engine)
            self.queue.publish(events)
            return events

    def _require_engine(self, command: str) -> NavigationEngine:
        if self._engine is None:
            raise CommandRejectedError(command, "no document is loaded")
        return self._engine

    @staticmethod
    def _unknown_command(
        command: str, name: str, available: tuple[str, ...]
    ) -> UnknownFilterError:
        return UnknownFilterError(
            command,
            list(available),
            closest_names(name, list(available)),
            kind="command",
            command="execute",
        )

    def __repr__(self) -> str:
        if self._engine is None:
            return "<ScreenReaderSession (empty)>"
        return (
            f"<ScreenReaderSession nodes={len(self._engine.tree.sequence)} "
            f"cursor={self._engine.state.cursor_index} mode={self._engine.mode.value}>"
        )
