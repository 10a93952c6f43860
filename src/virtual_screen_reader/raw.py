"""
Raw element trees consumed by the tree builder.

A raw element tree is the host's view of a parsed document: element tags,
attribute maps, ordered children, and whether the element is rendered. This
module also provides thin front-end adapters that produce raw trees from
HTML markup (via lxml) and from YAML/JSON mappings (via PyYAML).

Example:
    >>> raw = from_html("<nav aria-label='Main'><a href='/'>Home</a></nav>")
    >>> raw.tag
    'body'
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from lxml import etree
from lxml import html as lxml_html

from .constants import NON_RENDERED_TAGS, TEXT_TAG
from .errors import RawTreeError

logger = logging.getLogger(__name__)


@dataclass
class RawElement:
    """An element (or text node) of a host document.

    Attributes:
        tag: Lowercase element name, or "#text" for text nodes
        attributes: Attribute map as authored
        children: Ordered child elements and text nodes
        rendered: False when the host's layout does not render the element
        text: Text content for text nodes
        node_id: Stable host-assigned identifier (generated when missing)
        visited: Host hint that a link target has been visited
    """

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[RawElement] = field(default_factory=list)
    rendered: bool = True
    text: str | None = None
    node_id: str | None = None
    visited: bool = False

    @classmethod
    def text_node(cls, text: str) -> RawElement:
        """Create a text node."""
        return cls(tag=TEXT_TAG, text=text)

    @property
    def is_text(self) -> bool:
        return self.tag == TEXT_TAG

    def iter(self) -> Iterator[RawElement]:
        """Iterate over this element and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.iter()


def element(
    tag: str,
    *children: RawElement | str,
    node_id: str | None = None,
    rendered: bool = True,
    visited: bool = False,
    **attributes: str,
) -> RawElement:
    """Build a raw element in code.

    Keyword attribute names use underscores for hyphens, and a trailing
    underscore is dropped so reserved words can be used (``for_="email"``).
    String children become text nodes.

    Example:
        >>> nav = element("nav", element("a", "Home", href="/"), aria_label="Main")
    """
    attrs = {key.rstrip("_").replace("_", "-"): str(value) for key, value in attributes.items()}
    kids = [RawElement.text_node(c) if isinstance(c, str) else c for c in children]
    return RawElement(
        tag=tag.lower(),
        attributes=attrs,
        children=kids,
        rendered=rendered,
        node_id=node_id,
        visited=visited,
    )


# =============================================================================
# HTML adapter
# =============================================================================


def from_html(markup: str) -> RawElement:
    """Convert HTML markup into a raw element tree rooted at ``<body>``.

    Renderedness is approximated from the ``hidden`` attribute, hidden inputs,
    inline ``display:none`` / ``visibility:hidden`` styles, closed
    ``<details>`` and ``<dialog>`` elements, and elements browsers never
    render. No stylesheet cascade is evaluated.

    Node ids come from the element's ``id`` attribute when it is unique in
    the document, otherwise from the element's position below ``<body>``.

    Args:
        markup: HTML document or fragment

    Returns:
        The raw ``body`` element
    """
    if not markup.strip():
        return RawElement(tag="body", node_id="body")

    try:
        document = lxml_html.document_fromstring(markup)
    except etree.ParserError as e:
        raise RawTreeError(f"Could not parse HTML: {e}") from e

    body = document.find("body")
    if body is None:
        body = document

    id_counts = Counter(el.get("id") for el in document.iter() if el.get("id"))
    unique_ids = {dom_id for dom_id, count in id_counts.items() if count == 1}

    return _convert_html_element(body, "body", unique_ids)


def _convert_html_element(
    el: etree._Element, path: str, unique_ids: set[str]
) -> RawElement:
    """Recursively convert an lxml element."""
    tag = el.tag.lower() if isinstance(el.tag, str) else str(el.tag)
    attributes = {str(k).lower(): str(v) for k, v in el.attrib.items()}
    dom_id = attributes.get("id")
    node_id = dom_id if dom_id in unique_ids else path

    raw = RawElement(
        tag=tag,
        attributes=attributes,
        rendered=_is_rendered(tag, attributes),
        node_id=node_id,
    )

    if el.text:
        raw.children.append(RawElement.text_node(el.text))

    index = 0
    for child in el:
        if isinstance(child.tag, str):
            kid = _convert_html_element(child, f"{path}.{index}", unique_ids)
            index += 1
            if tag == "details" and "open" not in attributes and kid.tag != "summary":
                kid.rendered = False
            raw.children.append(kid)
        # Comment and processing instruction tails still belong to the parent
        if child.tail:
            raw.children.append(RawElement.text_node(child.tail))

    return raw


def _is_rendered(tag: str, attributes: dict[str, str]) -> bool:
    if tag in NON_RENDERED_TAGS:
        return False
    if "hidden" in attributes:
        return False
    if tag == "input" and attributes.get("type", "").lower() == "hidden":
        return False
    if tag == "dialog" and "open" not in attributes:
        return False

    style = _parse_inline_style(attributes.get("style", ""))
    if style.get("display") == "none":
        return False
    if style.get("visibility") in ("hidden", "collapse"):
        return False
    return True


def _parse_inline_style(style: str) -> dict[str, str]:
    declarations: dict[str, str] = {}
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        prop, _, value = declaration.partition(":")
        value = value.replace("!important", "").strip().lower()
        declarations[prop.strip().lower()] = value
    return declarations


# =============================================================================
# Mapping adapter (YAML / JSON)
# =============================================================================


def from_mapping(data: Any) -> RawElement:
    """Convert a nested mapping into a raw element tree.

    Each element is a mapping with ``tag`` and optional ``attributes``,
    ``children``, ``rendered``, ``visited`` and ``id`` keys. A child that is a
    plain string (or a mapping with only a ``text`` key) is a text node.

    Raises:
        RawTreeError: If the mapping is malformed
    """
    errors: list[str] = []
    raw = _convert_mapping(data, "root", errors)
    if errors or raw is None:
        raise RawTreeError("Invalid raw element tree", errors)
    return raw


def _convert_mapping(data: Any, path: str, errors: list[str]) -> RawElement | None:
    if isinstance(data, str):
        return RawElement.text_node(data)

    if not isinstance(data, dict):
        errors.append(f"{path}: expected a mapping or string, got {type(data).__name__}")
        return None

    if "tag" not in data:
        if set(data) == {"text"}:
            return RawElement.text_node(str(data["text"]))
        errors.append(f"{path}: missing 'tag'")
        return None

    attributes = data.get("attributes") or {}
    if not isinstance(attributes, dict):
        errors.append(f"{path}: 'attributes' must be a mapping")
        attributes = {}

    children_data = data.get("children") or []
    if not isinstance(children_data, list):
        errors.append(f"{path}: 'children' must be a list")
        children_data = []

    node_id = data.get("id")
    raw = RawElement(
        tag=str(data["tag"]).lower(),
        attributes={str(k): _attribute_value(v) for k, v in attributes.items()},
        rendered=bool(data.get("rendered", True)),
        visited=bool(data.get("visited", False)),
        node_id=str(node_id) if node_id is not None else None,
    )

    for i, child_data in enumerate(children_data):
        child = _convert_mapping(child_data, f"{path}.children[{i}]", errors)
        if child is not None:
            raw.children.append(child)

    return raw


def _attribute_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return " ".join(str(v) for v in value)
    return str(value)


def load_raw_tree(path: str | Path) -> RawElement:
    """Load a raw element tree from an HTML, YAML or JSON file.

    Args:
        path: Path to a .html/.htm, .yaml/.yml or .json file

    Returns:
        The raw tree root

    Raises:
        RawTreeError: If the file cannot be parsed or has the wrong structure
    """
    path = Path(path)
    content = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix in (".html", ".htm", ".xhtml"):
        return from_html(content)

    try:
        if suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RawTreeError(f"Invalid YAML in {path.name}: {e}") from e
    except json.JSONDecodeError as e:
        raise RawTreeError(f"Invalid JSON in {path.name}: {e}") from e

    if data is None:
        raise RawTreeError(f"{path.name} is empty")

    logger.debug("Loaded raw tree from %s", path)
    return from_mapping(data)
