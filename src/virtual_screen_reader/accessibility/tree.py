"""
AccessibilityTree built from raw element trees.

This module provides the AccessibilityTree class, which turns a raw element
tree into the semantic tree a screen reader perceives, with a flattened
reading order and YAML serialization support.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from io import StringIO

from ..constants import (
    CHILDREN_PRESENTATIONAL_ROLES,
    DISABLEABLE_TAGS,
    FORM_CONTROL_ROLES,
    HEADING_TAGS,
    LIVE_REGION_ROLES,
    NAME_FROM_CONTENT_ROLES,
    PRESENTATIONAL_ROLES,
    ROOT_ID,
    ROOT_ROLE,
    SET_CONTAINER_ROLES,
    SET_ITEM_ROLES,
    STRUCTURAL_ROLES,
    TABLE_ROLES,
    TEXT_INPUT_ROLES,
)
from ..fuzzy import normalize_whitespace
from ..raw import RawElement
from .naming import NameComputer, split_ids
from .roles import input_type, resolve_role
from .tables import TableModel, TablePosition, find_cell_and_table
from .types import (
    AccessibilityNode,
    FlattenedSequence,
    NodeRelationships,
)

logger = logging.getLogger(__name__)

# Text-level roles that only stand on their own when they carry direct text
_PHRASING_ROLES = frozenset(
    {"code", "deletion", "emphasis", "generic", "insertion", "strong", "term"}
)

# Roles whose own text is read as a block, absorbing phrasing descendants
_TEXT_BLOCK_ROLES = (
    frozenset({"blockquote", "caption", "definition", "note", "paragraph"})
    | LIVE_REGION_ROLES
    | NAME_FROM_CONTENT_ROLES
)

# Descendants folded into a name-from-content ancestor
_FOLDED_IN_CONTENT_ROLES = _PHRASING_ROLES | {"img", "paragraph"}

_RANGE_ROLES = frozenset({"meter", "progressbar", "scrollbar", "slider", "spinbutton"})

_DEFAULT_ORIENTATION = {
    "listbox": "vertical",
    "menu": "vertical",
    "menubar": "horizontal",
    "scrollbar": "vertical",
    "separator": "horizontal",
    "slider": "horizontal",
    "tablist": "horizontal",
    "toolbar": "horizontal",
    "tree": "vertical",
}

_POPUP_VALUES = frozenset({"dialog", "grid", "listbox", "menu", "tree"})
_CURRENT_VALUES = frozenset({"date", "location", "page", "step", "time"})


@dataclass
class TreeStats:
    """Statistics about a tree.

    Attributes:
        nodes: Number of nodes, root excluded
        visible: Number of visible nodes
        navigable: Number of nodes in the reading order
        headings: Number of visible headings
        links: Number of visible links
        landmarks: Number of visible landmarks
        tables: Number of visible tables and grids
        form_controls: Number of visible form controls
    """

    nodes: int = 0
    visible: int = 0
    navigable: int = 0
    headings: int = 0
    links: int = 0
    landmarks: int = 0
    tables: int = 0
    form_controls: int = 0


class AccessibilityTree:
    """The accessibility tree of one document snapshot.

    AccessibilityTree is immutable once built: rebuilding a document produces
    a new tree. It resolves node ids and ``id`` attributes, exposes the
    flattened reading order, and serializes to YAML with three verbosity
    levels: minimal, standard, and full.

    Attributes:
        root: Synthetic document root
        stats: Tree statistics

    Example:
        >>> from virtual_screen_reader.raw import from_html
        >>> tree = AccessibilityTree.from_raw(from_html("<h1>Title</h1>"))
        >>> [node.role for node in tree.sequence]
        ['heading']
    """

    def __init__(
        self,
        root: AccessibilityNode,
        by_id: dict[str, AccessibilityNode],
        by_dom_id: dict[str, AccessibilityNode],
        names: NameComputer,
        stats: TreeStats | None = None,
    ) -> None:
        """Initialize an AccessibilityTree.

        Args:
            root: Root node of the tree
            by_id: Node id index
            by_dom_id: ``id`` attribute index
            names: Name computer bound to this tree
            stats: Tree statistics
        """
        self.root = root
        self._by_id = by_id
        self._by_dom_id = by_dom_id
        self._names = names
        self.stats = stats if stats is not None else TreeStats()
        self._order = {node.id: i for i, node in enumerate(root.iter())}
        self._sequence: FlattenedSequence | None = None
        self._tables: dict[str, TableModel] = {}

    @classmethod
    def from_raw(cls, raw: RawElement) -> AccessibilityTree:
        """Build an accessibility tree from a raw element tree.

        Args:
            raw: Root of the raw element tree

        Returns:
            AccessibilityTree for the snapshot
        """
        builder = _TreeBuilder(raw)
        root = builder.build()
        return cls(
            root=root,
            by_id=builder.by_id,
            by_dom_id=builder.by_dom_id,
            names=builder.names,
            stats=builder.stats,
        )

    # =========================================================================
    # Lookup
    # =========================================================================

    @property
    def sequence(self) -> FlattenedSequence:
        """The flattened reading order."""
        if self._sequence is None:
            self._sequence = FlattenedSequence([n for n in self.root.iter() if n.navigable])
        return self._sequence

    def find(self, node_id: str) -> AccessibilityNode | None:
        """Find a node by id."""
        return self._by_id.get(node_id)

    def resolve_dom_id(self, dom_id: str) -> AccessibilityNode | None:
        """Find a node by its ``id`` attribute."""
        return self._by_dom_id.get(dom_id)

    def resolve_ids(self, node_ids: list[str]) -> list[AccessibilityNode]:
        """Resolve node ids, silently dropping unknown ones."""
        return [self._by_id[i] for i in node_ids if i in self._by_id]

    def document_order(self, node_id: str) -> int:
        """Pre-order position of a node over the whole tree (-1 if unknown)."""
        return self._order.get(node_id, -1)

    def iter_nodes(self) -> Iterator[AccessibilityNode]:
        """Iterate over all nodes in document order, root included."""
        yield from self.root.iter()

    def iter_visible(self) -> Iterator[AccessibilityNode]:
        """Iterate over visible nodes in document order, root excluded."""

        def _walk(node: AccessibilityNode) -> Iterator[AccessibilityNode]:
            for child in node.children:
                if child.hidden:
                    continue
                yield child
                yield from _walk(child)

        yield from _walk(self.root)

    def find_all(
        self,
        role: str | None = None,
        level: int | None = None,
        name_contains: str | None = None,
        navigable: bool | None = None,
    ) -> list[AccessibilityNode]:
        """Find all visible nodes matching criteria.

        Args:
            role: Filter by role
            level: Filter by heading level
            name_contains: Filter by case-insensitive name substring
            navigable: Filter by membership in the reading order

        Returns:
            List of matching nodes in document order
        """

        def _matches(node: AccessibilityNode) -> bool:
            if role is not None and node.role != role:
                return False
            if level is not None and node.level != level:
                return False
            if name_contains is not None and name_contains.lower() not in node.name.lower():
                return False
            if navigable is not None and node.navigable != navigable:
                return False
            return True

        return [node for node in self.iter_visible() if _matches(node)]

    # =========================================================================
    # Derived information
    # =========================================================================

    def nearest_landmark(self, node: AccessibilityNode | None) -> AccessibilityNode | None:
        """The node itself or its closest ancestor that is a landmark."""
        current = node
        while current is not None:
            if current.is_landmark:
                return current
            current = current.parent
        return None

    def table_model(self, table: AccessibilityNode) -> TableModel:
        """The grid model of a table node (cached)."""
        model = self._tables.get(table.id)
        if model is None:
            model = TableModel(table, self.resolve_dom_id)
            self._tables[table.id] = model
        return model

    def table_position(self, node: AccessibilityNode) -> TablePosition | None:
        """Position of the cell containing a node, if it is inside a table."""
        cell, table = find_cell_and_table(node)
        if cell is None or table is None:
            return None
        return self.table_model(table).position(cell)

    def content_text(self, node: AccessibilityNode) -> str:
        """Full visible text of a node's subtree."""
        return self._names.text(node, include_hidden=node.hidden)

    def resolve_active_descendant(self, node: AccessibilityNode) -> AccessibilityNode | None:
        """Follow the active descendant chain from a node."""
        visited = {node.id}
        current = node
        target = None
        while current.relationships.active_descendant:
            next_id = current.relationships.active_descendant[0]
            if next_id in visited:
                logger.debug("Active descendant cycle at %s", next_id)
                break
            visited.add(next_id)
            found = self.find(next_id)
            if found is None:
                break
            target = current = found
        return target

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_yaml(self, verbosity: str = "standard") -> str:
        """Serialize the tree to YAML.

        Args:
            verbosity: "minimal" (reading order only), "standard" (visible
                nodes with states) or "full" (everything, hidden included)

        Returns:
            YAML string
        """
        if verbosity not in ("minimal", "standard", "full"):
            raise ValueError(f"verbosity must be one of minimal, standard, full; got '{verbosity}'")
        return _YamlWriter(verbosity).write(self)

    def __len__(self) -> int:
        return len(self._by_id) - 1

    def __repr__(self) -> str:
        return (
            f"<AccessibilityTree: {self.stats.nodes} nodes, "
            f"{self.stats.navigable} navigable, {self.stats.landmarks} landmarks>"
        )


def build_tree(raw: RawElement) -> AccessibilityTree:
    """Build an accessibility tree from a raw element tree."""
    return AccessibilityTree.from_raw(raw)


# =============================================================================
# Tree building
# =============================================================================


class _TreeBuilder:
    """Internal class that builds an accessibility tree in passes.

    Passes: structure and visibility, roles, names, states and properties,
    set positions, then reading order and own text.
    """

    def __init__(self, raw: RawElement) -> None:
        self.raw = raw
        self.by_id: dict[str, AccessibilityNode] = {}
        self.by_dom_id: dict[str, AccessibilityNode] = {}
        self.labels_for: dict[str, list[AccessibilityNode]] = {}
        self.names = NameComputer(self.by_dom_id, self.labels_for)
        self.stats = TreeStats()
        self._generated = 0

    def build(self) -> AccessibilityNode:
        root = AccessibilityNode(id=ROOT_ID, role=ROOT_ROLE, tag="#document")
        self.by_id[ROOT_ID] = root

        child = self._build_structure(self.raw, root, parent_hidden=False)
        if child is not None:
            root.children.append(child)
            root.content.append(child)

        nodes = list(root.iter())[1:]

        for node in nodes:
            node.role = resolve_role(node, self.names.has_author_name)

        for node in nodes:
            node.name = self.names.name(node)
            node.description = self.names.description(node, node.name)

        for node in nodes:
            self._compute_states(node)
            self._compute_properties(node)
            self._compute_relationships(node)
            node.value = self._compute_value(node)

        self._compute_set_positions(nodes)

        for node in nodes:
            node.navigable = self._is_navigable(node)
        for node in reversed(nodes):
            node.text = self.names.text(node, include_hidden=node.hidden, skip_navigable=True)

        self._compute_stats(nodes)
        return root

    def _build_structure(
        self, raw: RawElement, parent: AccessibilityNode, parent_hidden: bool
    ) -> AccessibilityNode | None:
        if raw.is_text:
            return None

        attrs = dict(raw.attributes)
        hidden = (
            parent_hidden
            or not raw.rendered
            or attrs.get("aria-hidden", "").strip().lower() == "true"
        )
        node = AccessibilityNode(
            id=self._assign_id(raw),
            role="generic",
            tag=raw.tag,
            dom_id=attrs.get("id"),
            attributes=attrs,
            parent=parent,
            hidden=hidden,
        )
        node.states.visited = raw.visited
        self.by_id[node.id] = node

        if node.dom_id:
            if node.dom_id in self.by_dom_id:
                logger.debug("Duplicate id attribute '%s', keeping first", node.dom_id)
            else:
                self.by_dom_id[node.dom_id] = node
        if raw.tag == "label" and attrs.get("for"):
            self.labels_for.setdefault(attrs["for"], []).append(node)

        for raw_child in raw.children:
            if raw_child.is_text:
                node.content.append(raw_child.text or "")
                continue
            child = self._build_structure(raw_child, node, hidden)
            if child is not None:
                node.children.append(child)
                node.content.append(child)

        return node

    def _assign_id(self, raw: RawElement) -> str:
        node_id = raw.node_id
        if not node_id:
            node_id = f"n{self._generated}"
            self._generated += 1
        if node_id in self.by_id:
            base, suffix = node_id, 1
            while f"{base}~{suffix}" in self.by_id:
                suffix += 1
            logger.debug("Duplicate node id '%s', renamed to '%s~%d'", base, base, suffix)
            node_id = f"{base}~{suffix}"
        return node_id

    # =========================================================================
    # States and properties
    # =========================================================================

    def _compute_states(self, node: AccessibilityNode) -> None:
        attrs = node.attributes
        states = node.states
        role = node.role
        native_input = node.tag == "input"

        checked = _tristate(attrs.get("aria-checked"))
        if checked is None and native_input and input_type(node) in ("checkbox", "radio"):
            checked = "checked" in attrs
        if checked is None and role in (
            "checkbox",
            "menuitemcheckbox",
            "menuitemradio",
            "radio",
            "switch",
        ):
            checked = False
        states.checked = checked

        parent_disabled = node.parent is not None and node.parent.states.disabled
        states.disabled = (
            _bool_attr(attrs.get("aria-disabled"))
            or (node.tag in DISABLEABLE_TAGS and "disabled" in attrs)
            or parent_disabled
        )

        expanded = _bool_or_none(attrs.get("aria-expanded"))
        if expanded is None and node.tag == "summary" and node.parent is not None:
            if node.parent.tag == "details":
                expanded = "open" in node.parent.attributes
        if expanded is None and role == "combobox":
            expanded = False
        states.expanded = expanded

        selected = _bool_or_none(attrs.get("aria-selected"))
        if selected is None and node.tag == "option":
            selected = "selected" in attrs
        if selected is None and role in ("option", "tab"):
            selected = False
        states.selected = selected

        if role == "button":
            states.pressed = _tristate(attrs.get("aria-pressed"))

        states.required = _bool_attr(attrs.get("aria-required")) or (
            node.tag in ("input", "select", "textarea") and "required" in attrs
        )
        states.readonly = _bool_attr(attrs.get("aria-readonly")) or (
            node.tag in ("input", "textarea") and "readonly" in attrs
        )
        states.invalid = _token_state(attrs.get("aria-invalid"), frozenset({"grammar", "spelling"}))
        states.current = _token_state(attrs.get("aria-current"), _CURRENT_VALUES)
        states.busy = _bool_attr(attrs.get("aria-busy"))
        states.grabbed = _bool_or_none(attrs.get("aria-grabbed"))

    def _compute_properties(self, node: AccessibilityNode) -> None:
        attrs = node.attributes
        props = node.properties
        role = node.role

        level = _int_or_none(attrs.get("aria-level"), minimum=1)
        if role == "heading" and level is None:
            level = HEADING_TAGS.get(node.tag, 2)
        props.level = level

        props.pos_in_set = _int_or_none(attrs.get("aria-posinset"), minimum=1)
        props.set_size = _int_or_none(attrs.get("aria-setsize"), minimum=1)

        if role in _RANGE_ROLES:
            self._compute_range(node)

        orientation = attrs.get("aria-orientation", "").strip().lower()
        if orientation not in ("horizontal", "vertical"):
            orientation = _DEFAULT_ORIENTATION.get(role, "")
        props.orientation = orientation or None

        props.multiselectable = _bool_attr(attrs.get("aria-multiselectable")) or (
            node.tag == "select" and "multiple" in attrs
        )
        props.multiline = _bool_attr(attrs.get("aria-multiline")) or node.tag == "textarea"

        autocomplete = attrs.get("aria-autocomplete", "").strip().lower()
        props.autocomplete = autocomplete if autocomplete in ("both", "inline", "list") else None

        popup = attrs.get("aria-haspopup", "").strip().lower()
        if popup == "true":
            popup = "menu"
        if popup not in _POPUP_VALUES:
            popup = "listbox" if role == "combobox" else ""
        props.has_popup = popup or None

        props.modal = _bool_attr(attrs.get("aria-modal"))

        sort = attrs.get("aria-sort", "").strip().lower()
        props.sort = sort if sort in ("ascending", "descending", "other") else None

        if role in TEXT_INPUT_ROLES:
            placeholder = attrs.get("placeholder") or attrs.get("aria-placeholder")
            props.placeholder = normalize_whitespace(placeholder) if placeholder else None

    def _compute_range(self, node: AccessibilityNode) -> None:
        attrs = node.attributes
        props = node.properties
        role = node.role
        native = node.tag in ("input", "meter", "progress")

        def _number(aria: str, html: str) -> float | None:
            value = _float_or_none(attrs.get(aria))
            if value is None and native:
                value = _float_or_none(attrs.get(html))
            return value

        props.value_min = _number("aria-valuemin", "min")
        props.value_max = _number("aria-valuemax", "max")
        props.value_now = _number("aria-valuenow", "value")
        text = attrs.get("aria-valuetext", "").strip()
        props.value_text = text or None

        if role in ("slider", "scrollbar"):
            if props.value_min is None:
                props.value_min = 0.0
            if props.value_max is None:
                props.value_max = 100.0
            if props.value_max < props.value_min:
                props.value_max = props.value_min
            if props.value_now is None:
                props.value_now = props.value_min + (props.value_max - props.value_min) / 2
            props.value_now = min(max(props.value_now, props.value_min), props.value_max)
        elif role == "progressbar":
            if props.value_min is None:
                props.value_min = 0.0
            if props.value_max is None:
                props.value_max = 1.0 if node.tag == "progress" else 100.0

    def _compute_relationships(self, node: AccessibilityNode) -> None:
        attrs = node.attributes
        rel = NodeRelationships(
            controls=self._resolve_refs(attrs.get("aria-controls")),
            labelled_by=self._resolve_refs(attrs.get("aria-labelledby")),
            described_by=self._resolve_refs(attrs.get("aria-describedby")),
            error_message=self._resolve_refs(attrs.get("aria-errormessage")),
            owns=self._resolve_refs(attrs.get("aria-owns")),
            active_descendant=self._resolve_refs(attrs.get("aria-activedescendant")),
        )
        node.relationships = rel

    def _resolve_refs(self, value: str | None) -> list[str]:
        ids = []
        for dom_id in split_ids(value):
            target = self.names.resolve(dom_id)
            if target is not None:
                ids.append(target.id)
        return ids

    def _compute_value(self, node: AccessibilityNode) -> str | None:
        role = node.role
        attrs = node.attributes

        if role in _RANGE_ROLES:
            props = node.properties
            if props.value_text:
                return props.value_text
            if props.value_now is None:
                return None
            return _format_number(props.value_now)

        if role in TEXT_INPUT_ROLES:
            if node.tag == "textarea":
                return normalize_whitespace(
                    "".join(part for part in node.content if isinstance(part, str))
                )
            if node.tag == "select":
                return self._selected_option_text(node)
            if node.tag == "input":
                return attrs.get("value", "")
            return self.names.text(node)
        return None

    def _selected_option_text(self, select: AccessibilityNode) -> str:
        options = [n for n in select.iter() if n.tag == "option" and not n.hidden]
        for option in options:
            if "selected" in option.attributes:
                return option.name
        return options[0].name if options else ""

    # =========================================================================
    # Set positions
    # =========================================================================

    def _compute_set_positions(self, nodes: list[AccessibilityNode]) -> None:
        for container in nodes:
            if container.hidden or container.role not in SET_CONTAINER_ROLES:
                continue
            items: list[AccessibilityNode] = []
            self._collect_set_items(container, container.role, {container.id}, items)
            self._assign_positions(items)

        radio_groups: dict[str, list[AccessibilityNode]] = {}
        for node in nodes:
            if (
                node.role == "radio"
                and not node.hidden
                and node.properties.pos_in_set is None
                and node.attributes.get("name")
            ):
                radio_groups.setdefault(node.attributes["name"], []).append(node)
        for group in radio_groups.values():
            self._assign_positions(group)

    def _collect_set_items(
        self,
        node: AccessibilityNode,
        container_role: str,
        visited: set[str],
        items: list[AccessibilityNode],
    ) -> None:
        for child in node.children:
            if child.hidden:
                continue
            if container_role in SET_ITEM_ROLES.get(child.role, ()):
                items.append(child)
            elif child.role not in SET_CONTAINER_ROLES:
                self._collect_set_items(child, container_role, visited, items)

        for owned_id in node.relationships.owns:
            if owned_id in visited:
                logger.debug("aria-owns cycle at %s", owned_id)
                continue
            visited.add(owned_id)
            owned = self.by_id.get(owned_id)
            if owned is None or owned.hidden:
                continue
            if container_role in SET_ITEM_ROLES.get(owned.role, ()):
                if all(owned is not item for item in items):
                    items.append(owned)
            elif owned.role not in SET_CONTAINER_ROLES:
                self._collect_set_items(owned, container_role, visited, items)

    def _assign_positions(self, items: list[AccessibilityNode]) -> None:
        for i, item in enumerate(items, start=1):
            if item.properties.pos_in_set is None:
                item.properties.pos_in_set = i
            if item.properties.set_size is None:
                item.properties.set_size = len(items)

    # =========================================================================
    # Reading order
    # =========================================================================

    def _is_navigable(self, node: AccessibilityNode) -> bool:
        if node.hidden or node.parent is None:
            return False
        role = node.role
        if role in PRESENTATIONAL_ROLES or role in STRUCTURAL_ROLES:
            return False

        for ancestor in node.ancestors():
            if ancestor.role in CHILDREN_PRESENTATIONAL_ROLES or ancestor.tag == "select":
                return False
            if ancestor.role in NAME_FROM_CONTENT_ROLES and role in _FOLDED_IN_CONTENT_ROLES:
                return False

        if role in _PHRASING_ROLES:
            if not _has_direct_text(node):
                return False
            if node.parent is not None and _has_direct_text(node.parent):
                return False
            return not any(a.role in _TEXT_BLOCK_ROLES for a in node.ancestors())
        return True

    def _compute_stats(self, nodes: list[AccessibilityNode]) -> None:
        stats = self.stats
        stats.nodes = len(nodes)
        for node in nodes:
            if node.hidden:
                continue
            stats.visible += 1
            if node.navigable:
                stats.navigable += 1
            if node.role == "heading":
                stats.headings += 1
            elif node.role == "link":
                stats.links += 1
            elif node.role in TABLE_ROLES:
                stats.tables += 1
            if node.is_landmark:
                stats.landmarks += 1
            if node.role in FORM_CONTROL_ROLES:
                stats.form_controls += 1


def _has_direct_text(node: AccessibilityNode) -> bool:
    return any(isinstance(part, str) and part.strip() for part in node.content)


# =============================================================================
# Attribute parsing
# =============================================================================


def _bool_attr(value: str | None) -> bool:
    return value is not None and value.strip().lower() == "true"


def _bool_or_none(value: str | None) -> bool | None:
    if value is None:
        return None
    value = value.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def _tristate(value: str | None) -> bool | str | None:
    if value is not None and value.strip().lower() == "mixed":
        return "mixed"
    return _bool_or_none(value)


def _token_state(value: str | None, tokens: frozenset[str]) -> bool | str:
    """Parse a true/false/token state; unknown non-empty values mean true."""
    if value is None:
        return False
    value = value.strip().lower()
    if value in ("", "false"):
        return False
    if value in tokens:
        return value
    return True


def _int_or_none(value: str | None, minimum: int) -> int | None:
    if value is None:
        return None
    try:
        number = int(value.strip())
    except ValueError:
        logger.debug("Malformed integer '%s', using default", value)
        return None
    return number if number >= minimum else None


def _float_or_none(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value.strip())
    except ValueError:
        logger.debug("Malformed number '%s', using default", value)
        return None


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return f"{value:g}"


# =============================================================================
# YAML output
# =============================================================================


class _YamlWriter:
    """Internal class for writing YAML output."""

    def __init__(self, verbosity: str) -> None:
        self.verbosity = verbosity
        self.buffer = StringIO()
        self._indent = 0

    def write(self, tree: AccessibilityTree) -> str:
        """Write the tree to YAML."""
        self.buffer = StringIO()
        self._write_header(tree)

        self._write_line("")
        self._write_line("content:")
        self._indent += 1

        if self.verbosity == "minimal":
            for node in tree.sequence:
                self._write_node_minimal(node)
        else:
            for child in tree.root.children:
                self._write_node(child)

        self._indent -= 1
        return self.buffer.getvalue()

    def _write_header(self, tree: AccessibilityTree) -> None:
        self._write_line("document:")
        self._indent += 1
        self._write_line(f"verbosity: {self.verbosity}")
        self._write_line("stats:")
        self._indent += 1
        stats = tree.stats
        self._write_line(f"nodes: {stats.nodes}")
        self._write_line(f"navigable: {stats.navigable}")
        self._write_line(f"headings: {stats.headings}")
        self._write_line(f"links: {stats.links}")
        self._write_line(f"landmarks: {stats.landmarks}")
        if stats.tables > 0:
            self._write_line(f"tables: {stats.tables}")
        if stats.form_controls > 0:
            self._write_line(f"form_controls: {stats.form_controls}")
        self._indent -= 2

    def _write_node_minimal(self, node: AccessibilityNode) -> None:
        """Format: - heading "Title" [id=h1] [level=1]"""
        text = self._escape_yaml_string(self._truncate_text(node.display_text, 60))
        line = f'- {node.role} "{text}" [id={node.id}]'
        if node.level is not None:
            line += f" [level={node.level}]"
        self._write_line(line)

    def _write_node(self, node: AccessibilityNode) -> None:
        if node.hidden and self.verbosity != "full":
            return

        # Containers that are only traversed are skipped in standard mode
        if self.verbosity == "standard" and not node.navigable and not node.name:
            for child in node.children:
                self._write_node(child)
            return

        self._write_line(f"- {node.role}:")
        self._indent += 1
        self._write_line(f"id: {node.id}")
        if node.name:
            self._write_line(f'name: "{self._escape_yaml_string(node.name)}"')
        if node.text and node.text != node.name:
            text = self._escape_yaml_string(self._truncate_text(node.text, 120))
            self._write_line(f'text: "{text}"')
        if node.value is not None:
            self._write_line(f'value: "{self._escape_yaml_string(node.value)}"')

        states = node.states.as_dict()
        if states:
            self._write_line(f"states: {self._format_flags(states)}")
        if node.level is not None:
            self._write_line(f"level: {node.level}")

        if self.verbosity == "full":
            if node.description:
                self._write_line(f'description: "{self._escape_yaml_string(node.description)}"')
            props = node.properties.as_dict()
            props.pop("level", None)
            if props:
                self._write_line(f"properties: {self._format_flags(props)}")
            for key, ids in node.relationships.as_dict().items():
                self._write_line(f"{key}: [{', '.join(ids)}]")
            if node.hidden:
                self._write_line("hidden: true")
            if not node.navigable:
                self._write_line("navigable: false")

        children = [c for c in node.children if self.verbosity == "full" or not c.hidden]
        if children:
            self._write_line("children:")
            self._indent += 1
            for child in children:
                self._write_node(child)
            self._indent -= 1

        self._indent -= 1

    def _format_flags(self, values: dict) -> str:
        parts = []
        for key, value in values.items():
            if value is True:
                parts.append(key)
            else:
                parts.append(f"{key}={str(value).lower() if isinstance(value, bool) else value}")
        return "[" + ", ".join(parts) + "]"

    def _write_line(self, text: str) -> None:
        """Write a line with current indentation."""
        indent = "  " * self._indent
        self.buffer.write(f"{indent}{text}\n")

    def _truncate_text(self, text: str, max_length: int) -> str:
        if len(text) <= max_length:
            return text
        return text[: max_length - 3] + "..."

    def _escape_yaml_string(self, text: str) -> str:
        """Escape special characters in a YAML string."""
        text = text.replace("\\", "\\\\")
        text = text.replace('"', '\\"')
        text = text.replace("\n", "\\n")
        text = text.replace("\t", "\\t")
        return text
