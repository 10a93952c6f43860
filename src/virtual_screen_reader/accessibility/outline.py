"""
Document outlines: headings, landmarks and form controls.

Outlines are the lists a screen reader presents in its elements dialog. They
are built from a tree snapshot and never change it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from io import StringIO

from ..constants import FORM_CONTROL_ROLES, LANDMARK_NAMES
from ..errors import UnknownFilterError
from ..fuzzy import closest_names
from .tree import AccessibilityTree
from .types import AccessibilityNode


class OutlineKind(Enum):
    """Kinds of outline."""

    HEADINGS = "headings"
    LANDMARKS = "landmarks"
    FORM_CONTROLS = "form-controls"

    @classmethod
    def parse(cls, value: OutlineKind | str) -> OutlineKind:
        """Parse an outline kind, accepting ``form_controls`` spellings.

        Raises:
            UnknownFilterError: If the name is not an outline kind
        """
        if isinstance(value, OutlineKind):
            return value
        normalized = value.strip().lower().replace("_", "-")
        for kind in cls:
            if kind.value == normalized:
                return kind
        available = [kind.value for kind in cls]
        raise UnknownFilterError(
            value,
            available,
            closest_names(value, available),
            kind="outline kind",
            command="outline",
        )


@dataclass
class OutlineEntry:
    """One line of an outline.

    Attributes:
        node_id: Id of the node
        role: Role of the node
        name: Accessible name (or own text when unnamed)
        level: Heading level, for heading outlines
        depth: Nesting depth among entries of the same outline
        states: Set states, for form control outlines
    """

    node_id: str
    role: str
    name: str
    level: int | None = None
    depth: int = 0
    states: dict = field(default_factory=dict)


@dataclass
class Outline:
    """An ordered outline of one kind."""

    kind: OutlineKind
    entries: list[OutlineEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def node_ids(self) -> list[str]:
        return [entry.node_id for entry in self.entries]

    def to_text(self) -> str:
        """Indented plain-text listing."""
        lines = []
        for entry in self.entries:
            indent = "  " * entry.depth
            if self.kind is OutlineKind.HEADINGS:
                lines.append(f"{indent}{entry.level} {entry.name}")
            elif self.kind is OutlineKind.LANDMARKS:
                label = LANDMARK_NAMES.get(entry.role, entry.role)
                lines.append(f"{indent}{label} {entry.name}".rstrip())
            else:
                lines.append(f"{indent}{entry.role} {entry.name}".rstrip())
        return "\n".join(lines)

    def to_yaml(self) -> str:
        """Serialize the outline to YAML."""
        buffer = StringIO()
        buffer.write("outline:\n")
        buffer.write(f"  kind: {self.kind.value}\n")
        buffer.write(f"  count: {len(self.entries)}\n")
        buffer.write("  entries:\n")
        for entry in self.entries:
            name = entry.name.replace("\\", "\\\\").replace('"', '\\"')
            buffer.write(f"    - id: {entry.node_id}\n")
            buffer.write(f"      role: {entry.role}\n")
            buffer.write(f'      name: "{name}"\n')
            if entry.level is not None:
                buffer.write(f"      level: {entry.level}\n")
            if entry.depth:
                buffer.write(f"      depth: {entry.depth}\n")
            if entry.states:
                flags = ", ".join(
                    key if value is True else f"{key}={value}" for key, value in entry.states.items()
                )
                buffer.write(f"      states: [{flags}]\n")
        return buffer.getvalue()


def build_outline(tree: AccessibilityTree, kind: OutlineKind | str) -> Outline:
    """Build an outline of a tree.

    Args:
        tree: Tree snapshot
        kind: "headings", "landmarks" or "form-controls"

    Returns:
        Outline with entries in document order
    """
    kind = OutlineKind.parse(kind)
    builder = _OutlineBuilder(tree)
    if kind is OutlineKind.HEADINGS:
        return Outline(kind, builder.headings())
    if kind is OutlineKind.LANDMARKS:
        return Outline(kind, builder.landmarks())
    return Outline(kind, builder.form_controls())


class _OutlineBuilder:
    """Internal class that collects outline entries."""

    def __init__(self, tree: AccessibilityTree) -> None:
        self.tree = tree

    def headings(self) -> list[OutlineEntry]:
        entries = []
        for node in self.tree.iter_visible():
            if node.role != "heading":
                continue
            level = node.level or 2
            entries.append(
                OutlineEntry(
                    node_id=node.id,
                    role=node.role,
                    name=node.display_text,
                    level=level,
                    depth=level - 1,
                )
            )
        return entries

    def landmarks(self) -> list[OutlineEntry]:
        entries = []
        for node in self.tree.iter_visible():
            if not node.is_landmark:
                continue
            entries.append(
                OutlineEntry(
                    node_id=node.id,
                    role=node.role,
                    name=node.name,
                    depth=self._landmark_depth(node),
                )
            )
        return entries

    def form_controls(self) -> list[OutlineEntry]:
        entries = []
        for node in self.tree.iter_visible():
            if node.role not in FORM_CONTROL_ROLES:
                continue
            entries.append(
                OutlineEntry(
                    node_id=node.id,
                    role=node.role,
                    name=node.name,
                    states=node.states.as_dict(),
                )
            )
        return entries

    @staticmethod
    def _landmark_depth(node: AccessibilityNode) -> int:
        return sum(1 for ancestor in node.ancestors() if ancestor.is_landmark)
