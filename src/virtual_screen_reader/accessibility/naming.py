"""
Accessible name and description computation.

Names are resolved in precedence order, first non-empty result wins:

1. ``aria-labelledby`` targets, each computed recursively
2. ``aria-label``
3. Native labelling (``<label>``, ``alt``, ``<caption>``, ``<legend>``, ...)
4. Content text, for roles that take their name from content
5. ``placeholder``, then ``title``

Every computation carries its own set of visited node ids, so reference
cycles resolve to an empty branch instead of looping.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..constants import INLINE_TAGS, LABELABLE_TAGS, NAME_FROM_CONTENT_ROLES, TEXT_INPUT_ROLES
from ..fuzzy import normalize_whitespace
from .types import AccessibilityNode

logger = logging.getLogger(__name__)

# Elements named by a dedicated child element
_NAMING_CHILD_TAGS = {
    "fieldset": "legend",
    "figure": "figcaption",
    "svg": "title",
    "table": "caption",
}


def split_ids(value: str | None) -> list[str]:
    """Split an id reference list attribute."""
    if not value:
        return []
    return value.split()


class NameComputer:
    """Computes names, descriptions and text for the nodes of one tree.

    Args:
        by_dom_id: Map from ``id`` attribute to node (first occurrence wins)
        labels_for: Map from ``id`` attribute to the ``<label for>`` nodes
            pointing at it, in document order
    """

    def __init__(
        self,
        by_dom_id: Mapping[str, AccessibilityNode],
        labels_for: Mapping[str, list[AccessibilityNode]] | None = None,
    ) -> None:
        self.by_dom_id = by_dom_id
        self.labels_for = labels_for if labels_for is not None else {}

    def resolve(self, dom_id: str) -> AccessibilityNode | None:
        node = self.by_dom_id.get(dom_id)
        if node is None:
            logger.debug("Unresolved id reference '%s'", dom_id)
        return node

    # =========================================================================
    # Names
    # =========================================================================

    def name(
        self,
        node: AccessibilityNode,
        visited: set[str] | None = None,
        referenced: bool = False,
    ) -> str:
        """Compute the accessible name of a node.

        Args:
            node: Node to name
            visited: Node ids already on the current reference path
            referenced: True when reached through a labelledby/describedby
                reference, in which case content text is always allowed

        Returns:
            The name, or an empty string
        """
        visited = set() if visited is None else visited
        if node.id in visited:
            logger.debug("Reference cycle at %s, truncating", node.id)
            return ""
        visited.add(node.id)

        labelled = self.referenced_text(node.attributes.get("aria-labelledby"), visited)
        if labelled:
            return labelled

        label = node.attributes.get("aria-label", "").strip()
        if label:
            return label

        native = self._native_name(node, visited)
        if native:
            return native

        if referenced or node.role in NAME_FROM_CONTENT_ROLES:
            text = self.text(node, visited=visited, include_hidden=node.hidden)
            if text:
                return text

        if node.role in TEXT_INPUT_ROLES:
            placeholder = node.attributes.get("placeholder") or node.attributes.get(
                "aria-placeholder", ""
            )
            if placeholder.strip():
                return normalize_whitespace(placeholder)

        return normalize_whitespace(node.attributes.get("title", ""))

    def description(self, node: AccessibilityNode, name: str = "") -> str:
        """Compute the accessible description of a node."""
        described = self.referenced_text(node.attributes.get("aria-describedby"), {node.id})
        if described:
            return described

        description = node.attributes.get("aria-description", "").strip()
        if description:
            return description

        title = normalize_whitespace(node.attributes.get("title", ""))
        if title and title != name:
            return title
        return ""

    def referenced_text(self, id_list: str | None, visited: set[str]) -> str:
        """Join the names of the nodes an id reference list points at."""
        names = []
        for dom_id in split_ids(id_list):
            target = self.resolve(dom_id)
            if target is None:
                continue
            # Each branch gets its own copy of the path
            names.append(self.name(target, set(visited), referenced=True))
        return normalize_whitespace(" ".join(n for n in names if n))

    def has_author_name(self, node: AccessibilityNode) -> bool:
        """Whether the node has a labelledby, aria-label or title name."""
        if self.referenced_text(node.attributes.get("aria-labelledby"), {node.id}):
            return True
        if node.attributes.get("aria-label", "").strip():
            return True
        return bool(node.attributes.get("title", "").strip())

    def _native_name(self, node: AccessibilityNode, visited: set[str]) -> str:
        tag = node.tag
        attrs = node.attributes

        if tag == "input":
            kind = attrs.get("type", "text").lower()
            if kind in ("button", "submit", "reset"):
                default = {"submit": "Submit", "reset": "Reset"}.get(kind, "")
                return normalize_whitespace(attrs.get("value", default))
            if kind == "image":
                return normalize_whitespace(attrs.get("alt") or attrs.get("value") or "Submit")

        if tag in LABELABLE_TAGS:
            label_text = self._label_text(node, visited)
            if label_text:
                return label_text

        if tag in ("img", "area"):
            return normalize_whitespace(attrs.get("alt", ""))

        child_tag = _NAMING_CHILD_TAGS.get(tag)
        if child_tag is not None:
            for child in node.children:
                if child.tag == child_tag:
                    # svg <title> is never rendered but still names the graphic
                    include_hidden = child.hidden and tag == "svg"
                    return self.text(child, visited=visited, include_hidden=include_hidden)
        return ""

    def _label_text(self, node: AccessibilityNode, visited: set[str]) -> str:
        labels: list[AccessibilityNode] = []
        if node.dom_id:
            labels.extend(self.labels_for.get(node.dom_id, []))
        for ancestor in node.ancestors():
            if ancestor.tag == "label":
                if "for" not in ancestor.attributes and all(ancestor is not lb for lb in labels):
                    labels.append(ancestor)
                break

        texts = []
        for label in labels:
            if label.id in visited:
                continue
            texts.append(self.text(label, visited=visited, include_hidden=label.hidden))
        return normalize_whitespace(" ".join(t for t in texts if t))

    # =========================================================================
    # Text
    # =========================================================================

    def text(
        self,
        node: AccessibilityNode,
        visited: set[str] | None = None,
        include_hidden: bool = False,
        skip_navigable: bool = False,
    ) -> str:
        """Collect the text of a node's descendants.

        Child ``aria-label`` and image ``alt`` values stand in for the child's
        text; block-level children are separated by spaces.

        Args:
            node: Node whose content is collected
            visited: Node ids to leave out (the node being named)
            include_hidden: Include hidden descendants
            skip_navigable: Leave out descendants that are navigable on
                their own

        Returns:
            Whitespace-normalized text
        """
        visited = set() if visited is None else visited
        parts: list[str] = []
        for item in node.content:
            if isinstance(item, str):
                parts.append(item)
                continue
            if item.id in visited:
                continue
            if item.hidden and not include_hidden:
                continue
            if skip_navigable and item.navigable:
                parts.append(" ")
                continue

            text = self._embedded_text(item, visited, include_hidden, skip_navigable)
            if item.tag in INLINE_TAGS:
                parts.append(text)
            else:
                parts.append(f" {text} ")
        return normalize_whitespace("".join(parts))

    def _embedded_text(
        self,
        node: AccessibilityNode,
        visited: set[str],
        include_hidden: bool,
        skip_navigable: bool,
    ) -> str:
        label = node.attributes.get("aria-label", "").strip()
        if label:
            return label
        if node.tag in ("img", "area"):
            return normalize_whitespace(node.attributes.get("alt", ""))
        if node.tag == "br":
            return " "
        if node.tag == "input" and node.role in TEXT_INPUT_ROLES:
            return normalize_whitespace(node.attributes.get("value", ""))
        return self.text(
            node,
            visited=visited,
            include_hidden=include_hidden,
            skip_navigable=skip_navigable,
        )
