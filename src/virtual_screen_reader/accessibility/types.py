"""
Type definitions for the accessibility tree.

This module contains the node structure produced by the tree builder and the
flattened reading order derived from it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, fields
from typing import Any

from ..constants import LANDMARK_ROLES, NAMED_LANDMARK_ROLES


@dataclass
class NodeStates:
    """Boolean and enumerated state flags of a node.

    Tri-state values use the string ``"mixed"``. ``invalid`` may be
    ``"grammar"`` or ``"spelling"``, and ``current`` may be one of ``"page"``,
    ``"step"``, ``"location"``, ``"date"`` or ``"time"``. ``None`` means the
    state does not apply to the node.
    """

    checked: bool | str | None = None
    disabled: bool = False
    expanded: bool | None = None
    selected: bool | None = None
    pressed: bool | str | None = None
    required: bool = False
    invalid: bool | str = False
    readonly: bool = False
    current: bool | str = False
    busy: bool = False
    grabbed: bool | None = None
    visited: bool = False

    def as_dict(self) -> dict[str, Any]:
        """Return only the states that are set."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value == f.default:
                continue
            result[f.name] = value
        return result


@dataclass
class NodeProperties:
    """Structural properties of a node."""

    level: int | None = None
    pos_in_set: int | None = None
    set_size: int | None = None
    value_min: float | None = None
    value_max: float | None = None
    value_now: float | None = None
    value_text: str | None = None
    orientation: str | None = None
    multiselectable: bool = False
    multiline: bool = False
    autocomplete: str | None = None
    has_popup: str | None = None
    modal: bool = False
    sort: str | None = None
    placeholder: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return only the properties that are set."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value == f.default:
                continue
            result[f.name] = value
        return result


@dataclass
class NodeRelationships:
    """Resolved id references to other nodes.

    Every list holds node ids that resolved at build time; unresolved
    references are dropped.
    """

    controls: list[str] = field(default_factory=list)
    labelled_by: list[str] = field(default_factory=list)
    described_by: list[str] = field(default_factory=list)
    error_message: list[str] = field(default_factory=list)
    owns: list[str] = field(default_factory=list)
    active_descendant: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, list[str]]:
        return {f.name: list(getattr(self, f.name)) for f in fields(self) if getattr(self, f.name)}


@dataclass
class AccessibilityNode:
    """A node in the accessibility tree.

    Attributes:
        id: Stable host-assigned identifier
        role: Resolved role name
        name: Accessible name
        description: Accessible description
        value: Current value for widgets that have one
        states: State flags
        properties: Structural properties
        relationships: Resolved references to other nodes
        children: Child nodes in document order
        content: Text runs and child nodes in document order
        parent: The parent node (None for the root)
        hidden: True when excluded from the perceivable tree
        navigable: True when the node appears in the reading order
        text: Own text: direct text plus text of folded descendants
        tag: Source element name
        dom_id: The element's ``id`` attribute, if any
        attributes: Source attribute map
    """

    id: str
    role: str
    name: str = ""
    description: str = ""
    value: str | None = None
    states: NodeStates = field(default_factory=NodeStates)
    properties: NodeProperties = field(default_factory=NodeProperties)
    relationships: NodeRelationships = field(default_factory=NodeRelationships)
    children: list[AccessibilityNode] = field(default_factory=list, repr=False)
    content: list[str | AccessibilityNode] = field(
        default_factory=list, repr=False, compare=False
    )
    parent: AccessibilityNode | None = field(default=None, repr=False, compare=False)
    hidden: bool = False
    navigable: bool = False
    text: str = ""
    tag: str = ""
    dom_id: str | None = None
    attributes: dict[str, str] = field(default_factory=dict, repr=False, compare=False)

    @property
    def level(self) -> int | None:
        return self.properties.level

    @property
    def is_landmark(self) -> bool:
        """Whether this node counts as a landmark."""
        if self.role not in LANDMARK_ROLES:
            return False
        if self.role in NAMED_LANDMARK_ROLES:
            return bool(self.name)
        return True

    @property
    def display_text(self) -> str:
        """Name if present, otherwise own text."""
        return self.name or self.text

    def ancestors(self) -> Iterator[AccessibilityNode]:
        """Iterate from the parent up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def iter(self) -> Iterator[AccessibilityNode]:
        """Iterate over this node and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.iter()


class FlattenedSequence:
    """The reading order of a tree: navigable, visible nodes in pre-order.

    Immutable once built. Supports ``len``, iteration, indexing and
    id lookup.
    """

    def __init__(self, nodes: list[AccessibilityNode]) -> None:
        self._nodes = tuple(nodes)
        self._index = {node.id: i for i, node in enumerate(self._nodes)}

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(node.id for node in self._nodes)

    def index_of(self, node_id: str) -> int | None:
        """Position of a node id, or None if it is not in the sequence."""
        return self._index.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __getitem__(self, index: int) -> AccessibilityNode:
        return self._nodes[index]

    def __iter__(self) -> Iterator[AccessibilityNode]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"<FlattenedSequence: {len(self._nodes)} nodes>"
