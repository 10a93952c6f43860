"""
Live region simulation.

Hosts report document changes as ChangeNotifications. The simulator finds
the live region that watches the changed subtree, decides whether and what
to announce, and queues the announcement with the region's politeness.

Example:
    >>> simulator = LiveRegionSimulator(tree)
    >>> simulator.notify(ChangeNotification("status", ChangeKind.TEXT, ["status"]))
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum

from .accessibility.tree import AccessibilityTree
from .accessibility.types import AccessibilityNode
from .announcements import (
    AnnouncementEvent,
    AnnouncementQueue,
    EventKind,
    EventSource,
    Politeness,
    SequenceCounter,
)
from .config import SimulatorConfig
from .constants import DEFAULT_RELEVANT, LIVE_ROLE_DEFAULTS, RELEVANT_TOKENS
from .errors import CommandRejectedError

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    """Kinds of document change."""

    ADDITION = "addition"
    REMOVAL = "removal"
    TEXT = "text"
    ATTRIBUTE = "attribute"

    @property
    def relevant_token(self) -> str:
        """The ``aria-relevant`` token that covers this kind."""
        return {
            ChangeKind.ADDITION: "additions",
            ChangeKind.REMOVAL: "removals",
            ChangeKind.TEXT: "text",
            ChangeKind.ATTRIBUTE: "attributes",
        }[self]


@dataclass(frozen=True)
class ChangeNotification:
    """A change reported by the host.

    Attributes:
        subtree_root_id: Id of the node whose subtree changed
        kind: What changed
        affected_node_ids: Ids of the added, removed or changed nodes
        attribute: Name of the changed attribute, for attribute changes
    """

    subtree_root_id: str
    kind: ChangeKind
    affected_node_ids: tuple[str, ...] = field(default_factory=tuple)
    attribute: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ChangeKind):
            object.__setattr__(self, "kind", _parse_kind(self.kind))
        object.__setattr__(self, "affected_node_ids", tuple(self.affected_node_ids))


def _parse_kind(value: object) -> ChangeKind:
    # Accepts enum values and aria-relevant spellings such as "additions"
    normalized = str(value).strip().lower()
    for kind in ChangeKind:
        if normalized in (kind.value, kind.relevant_token):
            return kind
    raise CommandRejectedError(
        "notify",
        f"unknown change kind '{value}' "
        f"(expected one of {', '.join(kind.value for kind in ChangeKind)})",
    )


@dataclass(frozen=True)
class LiveRegionWatch:
    """A watched live region.

    Attributes:
        node_id: Id of the live region node
        politeness: How urgently changes are announced
        atomic: Announce the whole region instead of the changed part
        relevant: Change kinds that are announced
    """

    node_id: str
    politeness: Politeness
    atomic: bool = False
    relevant: frozenset[str] = DEFAULT_RELEVANT


def compute_watches(tree: AccessibilityTree) -> dict[str, LiveRegionWatch]:
    """Find every visible live region of a tree."""
    watches: dict[str, LiveRegionWatch] = {}
    for node in tree.iter_visible():
        watch = _watch_for(node)
        if watch is not None:
            watches[node.id] = watch
    return watches


def _watch_for(node: AccessibilityNode) -> LiveRegionWatch | None:
    attrs = node.attributes
    defaults = LIVE_ROLE_DEFAULTS.get(node.role)

    politeness = Politeness.parse(attrs.get("aria-live"))
    if politeness is None and "aria-live" in attrs:
        logger.debug("Unknown aria-live value '%s' on %s", attrs["aria-live"], node.id)
    if politeness is None:
        if defaults is None:
            return None
        politeness = Politeness(defaults[0])

    atomic_value = attrs.get("aria-atomic", "").strip().lower()
    if atomic_value in ("true", "false"):
        atomic = atomic_value == "true"
    else:
        atomic = defaults[1] if defaults is not None else False

    return LiveRegionWatch(
        node_id=node.id,
        politeness=politeness,
        atomic=atomic,
        relevant=parse_relevant(attrs.get("aria-relevant")),
    )


def parse_relevant(value: str | None) -> frozenset[str]:
    """Parse ``aria-relevant``; ``all`` expands to every kind."""
    if value is None:
        return DEFAULT_RELEVANT
    tokens = set(value.lower().split())
    if "all" in tokens:
        return frozenset(RELEVANT_TOKENS)
    tokens &= set(RELEVANT_TOKENS)
    return frozenset(tokens) if tokens else DEFAULT_RELEVANT


class LiveRegionSimulator:
    """Turns change notifications into queued live region announcements.

    Args:
        tree: Current tree snapshot
        queue: Queue shared with navigation events
        counter: Sequence number source shared with navigation
        config: Delivery options
    """

    def __init__(
        self,
        tree: AccessibilityTree,
        queue: AnnouncementQueue | None = None,
        counter: SequenceCounter | None = None,
        config: SimulatorConfig | None = None,
    ) -> None:
        self.config = config if config is not None else SimulatorConfig()
        self.queue = queue if queue is not None else AnnouncementQueue(self.config.history_limit)
        self.counter = counter if counter is not None else SequenceCounter()
        self._lock = threading.Lock()
        self._tree = tree
        self._previous_tree: AccessibilityTree | None = None
        self._watches = compute_watches(tree)

    @property
    def watches(self) -> dict[str, LiveRegionWatch]:
        return dict(self._watches)

    def rebind(self, tree: AccessibilityTree) -> None:
        """Swap in a rebuilt tree and recompute the watched regions."""
        with self._lock:
            self._previous_tree = self._tree
            self._tree = tree
            self._watches = compute_watches(tree)

    def region_for(self, node_id: str) -> LiveRegionWatch | None:
        """The nearest watched region containing a node (inclusive)."""
        node = self._tree.find(node_id)
        if node is None and self._previous_tree is not None:
            node = self._previous_tree.find(node_id)
        current = node
        while current is not None:
            watch = self._watches.get(current.id)
            if watch is not None:
                return watch
            current = current.parent
        return None

    def notify(self, change: ChangeNotification) -> AnnouncementEvent | None:
        """Handle one change notification.

        Returns:
            The queued event, or None when the change is not announced
        """
        with self._lock:
            event = self._process(change)
        if event is None:
            return None

        self.queue.enqueue(event)
        if self.config.auto_deliver:
            self.queue.drain()
        return event

    def _process(self, change: ChangeNotification) -> AnnouncementEvent | None:
        watch = self.region_for(change.subtree_root_id)
        if watch is None:
            logger.debug("Change under %s is not in a live region", change.subtree_root_id)
            return None
        if watch.politeness is Politeness.OFF:
            return None
        if change.kind.relevant_token not in watch.relevant:
            logger.debug("Ignoring %s change in %s", change.kind.value, watch.node_id)
            return None

        region = self._tree.find(watch.node_id)
        if region is None or region.hidden:
            return None
        if region.states.busy:
            logger.debug("Live region %s is busy", region.id)
            return None

        if watch.atomic or change.kind is ChangeKind.ATTRIBUTE:
            text = _node_text(self._tree, region)
        else:
            text = self._changed_text(change, region.id)
        if not text:
            return None

        return AnnouncementEvent(
            text=text,
            source=EventSource.LIVE_REGION,
            politeness=watch.politeness,
            sequence_number=self.counter.next(),
            kind=EventKind.LIVE,
            node_id=region.id,
        )

    def _changed_text(self, change: ChangeNotification, region_id: str) -> str:
        tree = self._tree
        if change.kind is ChangeKind.REMOVAL and self._previous_tree is not None:
            tree = self._previous_tree

        nodes = []
        for node_id in change.affected_node_ids:
            node = tree.find(node_id)
            if node is None:
                logger.debug("Stale node id %s in change notification", node_id)
                continue
            if not _within(node, region_id):
                logger.debug("Node %s is outside live region %s", node_id, region_id)
                continue
            if not node.hidden:
                nodes.append(node)

        nodes.sort(key=lambda n: tree.document_order(n.id))
        texts = [_node_text(tree, node) for node in nodes]
        return " ".join(t for t in texts if t)


def _node_text(tree: AccessibilityTree, node: AccessibilityNode) -> str:
    return tree.content_text(node) or node.name


def _within(node: AccessibilityNode, region_id: str) -> bool:
    return node.id == region_id or any(a.id == region_id for a in node.ancestors())
