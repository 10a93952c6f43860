"""
Spoken text for nodes.

An announcement is assembled as role label, name, state phrases, position
information and relationship information, joined with ", ". Each role has a
fixed state order so the same node always reads the same way.
"""

from __future__ import annotations

from .accessibility.tree import AccessibilityTree
from .accessibility.types import AccessibilityNode
from .config import SimulatorConfig
from .constants import (
    LANDMARK_NAMES,
    LIST_ROLES,
    NAMED_LANDMARK_ROLES,
    ROLE_LABELS,
    TABLE_ROLES,
)

_CHECKABLE_ORDER = ("checked", "disabled", "required", "invalid")
_TEXT_ENTRY_ORDER = ("value", "required", "invalid", "readonly", "disabled")
_RANGE_ORDER = ("value", "orientation", "disabled")

STATE_ORDER: dict[str, tuple[str, ...]] = {
    "button": ("pressed", "has_popup", "expanded", "disabled"),
    "link": ("current", "visited", "disabled"),
    "heading": (),
    "checkbox": _CHECKABLE_ORDER,
    "radio": _CHECKABLE_ORDER,
    "switch": _CHECKABLE_ORDER,
    "menuitemcheckbox": ("checked", "disabled"),
    "menuitemradio": ("checked", "disabled"),
    "menuitem": ("has_popup", "expanded", "disabled"),
    "textbox": _TEXT_ENTRY_ORDER,
    "searchbox": _TEXT_ENTRY_ORDER,
    "spinbutton": _TEXT_ENTRY_ORDER,
    "combobox": ("value", "expanded", "required", "invalid", "disabled"),
    "listbox": ("multiselectable", "required", "invalid", "disabled"),
    "tab": ("selected", "disabled"),
    "listitem": ("selected", "current"),
    "option": ("selected", "checked", "disabled"),
    "treeitem": ("expanded", "selected", "disabled"),
    "slider": _RANGE_ORDER,
    "scrollbar": _RANGE_ORDER,
    "progressbar": ("value",),
    "meter": ("value",),
    "dialog": ("modal",),
    "alertdialog": ("modal",),
    "columnheader": ("sort",),
    "rowheader": ("sort",),
    "gridcell": ("selected", "readonly"),
}

DEFAULT_STATE_ORDER = (
    "expanded",
    "selected",
    "checked",
    "pressed",
    "current",
    "disabled",
    "required",
    "invalid",
    "readonly",
)

# Appended for every role
TRAILING_STATES = ("busy", "grabbed")

# Roles that always speak their selection state
_ALWAYS_SELECTABLE = frozenset({"tab"})


class AnnouncementFormatter:
    """Builds announcement text for the nodes of one tree.

    Args:
        tree: Tree the nodes belong to
        config: Which optional parts to include
    """

    def __init__(self, tree: AccessibilityTree, config: SimulatorConfig | None = None) -> None:
        self.tree = tree
        self.config = config if config is not None else SimulatorConfig()

    def describe(self, node: AccessibilityNode) -> str:
        """Full announcement for a node."""
        parts = [role_label(node), node.display_text]
        parts.extend(self.state_phrases(node))
        parts.extend(self.position_phrases(node))
        parts.extend(self.relationship_phrases(node))
        text = ", ".join(part for part in parts if part)
        return text or "blank"

    def brief(self, node: AccessibilityNode) -> str:
        """Role label and name only."""
        return ", ".join(part for part in (role_label(node), node.display_text) if part)

    # =========================================================================
    # Parts
    # =========================================================================

    def state_phrases(self, node: AccessibilityNode) -> list[str]:
        order = STATE_ORDER.get(node.role, DEFAULT_STATE_ORDER) + TRAILING_STATES
        phrases = []
        for key in order:
            phrase = _state_phrase(node, key)
            if phrase:
                phrases.append(phrase)
        return phrases

    def position_phrases(self, node: AccessibilityNode) -> list[str]:
        phrases = []
        props = node.properties

        if node.role == "treeitem" and props.level is not None:
            phrases.append(f"level {props.level}")

        if self.config.announce_set_positions and props.pos_in_set and props.set_size:
            if node.role == "tab":
                phrases.append(f"tab {props.pos_in_set} of {props.set_size}")
            elif node.role in ("listitem", "option"):
                phrases.append(f"item {props.pos_in_set} of {props.set_size}")
            else:
                phrases.append(f"{props.pos_in_set} of {props.set_size}")

        if node.role in LIST_ROLES:
            count = _count_list_items(node)
            phrases.append(f"{count} item" if count == 1 else f"{count} items")

        if node.role in TABLE_ROLES:
            model = self.tree.table_model(node)
            phrases.append(f"{model.row_count} rows, {model.column_count} columns")

        if self.config.announce_table_positions:
            position = self.tree.table_position(node)
            if position is not None:
                phrases.append(position.describe())

        return phrases

    def relationship_phrases(self, node: AccessibilityNode) -> list[str]:
        phrases = []

        active = self.tree.resolve_active_descendant(node)
        if active is not None and active.display_text:
            phrases.append(self.brief(active))

        if node.states.invalid:
            errors = [
                target.display_text or self.tree.content_text(target)
                for target in self.tree.resolve_ids(node.relationships.error_message)
            ]
            errors = [e for e in errors if e]
            if errors:
                phrases.append("error: " + " ".join(errors))

        if self.config.announce_descriptions and node.description:
            phrases.append(node.description)
        return phrases

    # =========================================================================
    # Other announcements
    # =========================================================================

    def entering_landmark(self, landmark: AccessibilityNode) -> str:
        """e.g. ``entering navigation landmark, Main``."""
        text = f"entering {LANDMARK_NAMES.get(landmark.role, landmark.role)} landmark"
        if landmark.name:
            text += f", {landmark.name}"
        return text

    def exiting_landmark(self, landmark: AccessibilityNode) -> str:
        return f"exiting {LANDMARK_NAMES.get(landmark.role, landmark.role)} landmark"

    def activation(self, node: AccessibilityNode) -> str:
        return f"Activating {self.brief(node) or 'blank'}"

    def document_loaded(self) -> str:
        count = len(self.tree.sequence)
        return f"Document loaded, {count} element" + ("" if count == 1 else "s")


def role_label(node: AccessibilityNode) -> str:
    """The spoken label for a node's role (empty for text roles)."""
    role = node.role
    if role == "heading":
        return f"heading level {node.level or 2}"
    if role == "textbox" and node.properties.multiline:
        return "edit multi line"
    if role == "textbox" and node.attributes.get("type", "").lower() == "password":
        return "protected edit"
    if role in NAMED_LANDMARK_ROLES and not node.name:
        return role
    return ROLE_LABELS.get(role, "")


def _state_phrase(node: AccessibilityNode, key: str) -> str | None:
    states = node.states
    props = node.properties
    role = node.role

    if key == "checked":
        value = states.checked
        if value is None:
            return None
        if role == "switch":
            return "on" if value is True else "off"
        if value == "mixed":
            return "partially checked"
        return "checked" if value else "not checked"
    if key == "pressed":
        value = states.pressed
        if value is None:
            return None
        if value == "mixed":
            return "half pressed"
        return "pressed" if value else "not pressed"
    if key == "expanded":
        if states.expanded is None:
            return None
        return "expanded" if states.expanded else "collapsed"
    if key == "selected":
        if states.selected:
            return "selected"
        if states.selected is False and role in _ALWAYS_SELECTABLE:
            return "not selected"
        return None
    if key == "current":
        if not states.current:
            return None
        return "current" if states.current is True else f"current {states.current}"
    if key == "invalid":
        if not states.invalid:
            return None
        if states.invalid is True:
            return "invalid entry"
        return f"{states.invalid} error"
    if key == "grabbed":
        if states.grabbed is None:
            return None
        return "grabbed" if states.grabbed else "not grabbed"
    if key == "value":
        if node.attributes.get("type", "").lower() == "password" and node.value:
            return "•" * len(node.value)
        if node.value:
            return node.value
        return "blank" if role in ("textbox", "searchbox") else None
    if key == "has_popup":
        return f"has popup {props.has_popup}" if props.has_popup else None
    if key == "orientation":
        if "aria-orientation" not in node.attributes:
            return None
        return props.orientation
    if key == "multiselectable":
        return "multi select" if props.multiselectable else None
    if key == "modal":
        return "modal" if props.modal else None
    if key == "sort":
        if props.sort is None:
            return None
        return "sorted" if props.sort == "other" else f"sorted {props.sort}"

    flags = {
        "disabled": "disabled",
        "required": "required",
        "readonly": "read only",
        "visited": "visited",
        "busy": "busy",
    }
    if key in flags and getattr(states, key):
        return flags[key]
    return None


def _count_list_items(node: AccessibilityNode) -> int:
    count = 0

    def _walk(current: AccessibilityNode) -> None:
        nonlocal count
        for child in current.children:
            if child.hidden:
                continue
            if child.role == "listitem":
                count += 1
            elif child.role not in LIST_ROLES:
                _walk(child)

    _walk(node)
    return count
