"""
Role resolution for accessibility nodes.

Explicit ``role`` attributes win when they name a known role the element is
allowed to take; otherwise the element's implicit role applies.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..constants import (
    ALLOWED_ROLES,
    HEADING_TAGS,
    IMPLICIT_ROLES,
    INPUT_TYPE_ROLES,
    KNOWN_ROLES,
    NATIVELY_FOCUSABLE_TAGS,
    PRESENTATIONAL_ROLES,
    SECTIONING_TAGS,
    TABLE_ROLES,
)
from .types import AccessibilityNode

logger = logging.getLogger(__name__)

# Roles that scope header/footer the same way sectioning elements do
_SECTIONING_ROLES = frozenset({"article", "complementary", "main", "navigation", "region"})

_TEXT_INPUT_TYPES = frozenset({"email", "search", "tel", "text", "url"})


def input_type(node: AccessibilityNode) -> str:
    """The normalized ``type`` of an input element."""
    return node.attributes.get("type", "text").strip().lower() or "text"


def resolve_role(
    node: AccessibilityNode,
    has_author_name: Callable[[AccessibilityNode], bool],
) -> str:
    """Resolve the role of a node whose ancestors already have roles.

    Args:
        node: Node to resolve
        has_author_name: Tells whether a node carries an author-supplied name
            (labelledby, aria-label or title)

    Returns:
        The resolved role name
    """
    role = explicit_role(node)
    if role is not None:
        return role

    role = implicit_role(node)
    if node.tag in ("section", "form") and not has_author_name(node):
        return "generic"
    return role


def explicit_role(node: AccessibilityNode) -> str | None:
    """The first valid, permitted token of the ``role`` attribute."""
    value = node.attributes.get("role", "")
    for token in value.lower().split():
        if token not in KNOWN_ROLES:
            logger.debug("Ignoring unknown role '%s' on %s", token, node.id)
            continue
        if not is_role_allowed(node, token):
            logger.debug("Role '%s' not permitted on <%s> %s", token, node.tag, node.id)
            continue
        if token in PRESENTATIONAL_ROLES and is_focusable(node):
            logger.debug("Ignoring presentational role on focusable %s", node.id)
            continue
        return token
    return None


def is_role_allowed(node: AccessibilityNode, role: str) -> bool:
    """Check a role against the element's permitted roles."""
    allowed = ALLOWED_ROLES.get(_allowed_roles_key(node))
    return allowed is None or role in allowed


def _allowed_roles_key(node: AccessibilityNode) -> str:
    tag = node.tag
    if tag == "a" and "href" in node.attributes:
        return "a[href]"
    if tag in HEADING_TAGS:
        return "h"
    if tag == "input":
        kind = input_type(node)
        if kind in ("checkbox", "radio"):
            return f"input[{kind}]"
        if kind in _TEXT_INPUT_TYPES:
            return "input[text]"
    if tag == "ol":
        return "ul"
    return tag


def is_focusable(node: AccessibilityNode) -> bool:
    """Whether the element takes keyboard focus."""
    if "tabindex" in node.attributes:
        return True
    if node.tag in ("a", "area") and "href" in node.attributes:
        return True
    if node.tag in NATIVELY_FOCUSABLE_TAGS:
        return "disabled" not in node.attributes
    return False


def implicit_role(node: AccessibilityNode) -> str:
    """The role an element has without a ``role`` attribute."""
    tag = node.tag
    attrs = node.attributes

    if tag in HEADING_TAGS:
        return "heading"
    if tag in ("a", "area"):
        return "link" if "href" in attrs else "generic"
    if tag == "header":
        return "generic" if _inside_sectioning(node) else "banner"
    if tag == "footer":
        return "generic" if _inside_sectioning(node) else "contentinfo"
    if tag == "section":
        return "region"
    if tag == "form":
        return "form"
    if tag == "img":
        if attrs.get("alt") == "":
            return "presentation"
        return "img"
    if tag == "input":
        return _input_role(node)
    if tag == "select":
        if "multiple" in attrs or _int_attr(attrs.get("size"), 1) > 1:
            return "listbox"
        return "combobox"
    if tag == "td":
        table = _nearest_table(node)
        if table is not None and table.role in ("grid", "treegrid"):
            return "gridcell"
        return "cell"
    if tag == "th":
        return _header_cell_role(node)

    return IMPLICIT_ROLES.get(tag, "generic")


def _input_role(node: AccessibilityNode) -> str:
    kind = input_type(node)
    if kind == "hidden":
        return "none"
    if "list" in node.attributes and kind in _TEXT_INPUT_TYPES:
        return "combobox"
    if kind == "file":
        return "button"
    return INPUT_TYPE_ROLES.get(kind, "textbox")


def _inside_sectioning(node: AccessibilityNode) -> bool:
    for ancestor in node.ancestors():
        if ancestor.tag in SECTIONING_TAGS or ancestor.role in _SECTIONING_ROLES:
            return True
    return False


def _nearest_table(node: AccessibilityNode) -> AccessibilityNode | None:
    for ancestor in node.ancestors():
        if ancestor.role in TABLE_ROLES:
            return ancestor
    return None


def _header_cell_role(node: AccessibilityNode) -> str:
    scope = node.attributes.get("scope", "").lower()
    if scope in ("row", "rowgroup"):
        return "rowheader"
    if scope in ("col", "colgroup"):
        return "columnheader"

    row = node.parent
    if row is None:
        return "columnheader"
    if row.parent is not None and row.parent.tag == "thead":
        return "columnheader"

    cells = [child for child in row.children if child.tag in ("td", "th")]
    if cells and cells[0] is node and any(cell.tag == "td" for cell in cells):
        return "rowheader"
    return "columnheader"


def _int_attr(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default
