"""
Search over a tree snapshot.

SearchEngine answers text, role and attribute queries and builds outlines.
It only reads the tree it was given. Long text searches can be cancelled
cooperatively: the token is checked between nodes and a cancelled search
returns the matches found so far.

Example:
    >>> engine = SearchEngine(tree)
    >>> results = engine.text_search("billing")
    >>> results.node_ids
    ['billing-heading', 'street']
"""

from __future__ import annotations

import logging
import re
import threading
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, fields
from io import StringIO
from typing import Any

from .accessibility.outline import Outline, OutlineKind, build_outline
from .accessibility.tree import AccessibilityTree
from .accessibility.types import AccessibilityNode, NodeProperties, NodeStates
from .errors import CommandRejectedError, UnknownFilterError
from .fuzzy import closest_names, similarity

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("name", "description", "text")

_STATE_KEYS = tuple(f.name for f in fields(NodeStates))
_PROPERTY_KEYS = tuple(f.name for f in fields(NodeProperties))
_NODE_KEYS = ("role", "name", "value", "navigable")

AttributePredicate = Callable[[NodeStates, NodeProperties], bool]


class CancellationToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class SearchResult:
    """A single node that matched a text search.

    Attributes:
        node_id: Id of the matching node
        role: Role of the node
        text: The node's name, or own text when unnamed
        spans: Matches as (field, start, end) with end exclusive
        score: Similarity for fuzzy matches (1.0 for exact matches)
    """

    node_id: str
    role: str
    text: str
    spans: list[tuple[str, int, int]] = field(default_factory=list)
    score: float = 1.0


@dataclass
class SearchResults:
    """Results of a text search.

    Attributes:
        query: The search query
        results: Matching nodes in document order
        total_matches: Number of spans across all results
        cancelled: True when the search stopped early
        truncated: True when max_results cut the result list
    """

    query: str
    results: list[SearchResult]
    total_matches: int
    cancelled: bool = False
    truncated: bool = False

    @property
    def node_ids(self) -> list[str]:
        return [result.node_id for result in self.results]

    def __len__(self) -> int:
        return len(self.results)

    def to_yaml(self) -> str:
        """Serialize search results to YAML."""
        buffer = StringIO()
        query = self.query.replace("\\", "\\\\").replace('"', '\\"')
        buffer.write("search_results:\n")
        buffer.write(f'  query: "{query}"\n')
        buffer.write(f"  total_matches: {self.total_matches}\n")
        if self.cancelled:
            buffer.write("  cancelled: true\n")
        if self.truncated:
            buffer.write("  truncated: true\n")
        buffer.write("  results:\n")
        for result in self.results:
            text = result.text.replace("\\", "\\\\").replace('"', '\\"')
            buffer.write(f"    - id: {result.node_id}\n")
            buffer.write(f"      role: {result.role}\n")
            buffer.write(f'      text: "{text}"\n')
            spans = ", ".join(f"{name}[{start}:{end}]" for name, start, end in result.spans)
            if spans:
                buffer.write(f"      spans: [{spans}]\n")
            if result.score < 1.0:
                buffer.write(f"      score: {result.score:.2f}\n")
        return buffer.getvalue()


class SearchEngine:
    """Read-only queries over one tree snapshot.

    Args:
        tree: Tree to search
    """

    def __init__(self, tree: AccessibilityTree) -> None:
        self.tree = tree

    # =========================================================================
    # Text search
    # =========================================================================

    def text_search(
        self,
        query: str,
        cancel: CancellationToken | None = None,
        fuzzy: bool = False,
        threshold: float = 0.8,
        max_results: int | None = None,
    ) -> SearchResults:
        """Find nodes whose name, description or own text contains a query.

        Matching is case-insensitive and covers the reading order, in
        document order.

        Args:
            query: Text to look for
            cancel: Token checked between nodes
            fuzzy: Match approximately instead of by substring
            threshold: Minimum similarity for fuzzy matches (0.0 to 1.0)
            max_results: Stop after this many matching nodes

        Returns:
            SearchResults, partial and flagged when cancelled

        Raises:
            CommandRejectedError: If the query is empty or the threshold is
                out of range
        """
        if not query.strip():
            raise CommandRejectedError("text_search", "query must not be empty")
        if not 0 <= threshold <= 1:
            raise CommandRejectedError(
                "text_search", f"threshold must be between 0 and 1, got {threshold}"
            )

        pattern = re.compile(re.escape(query), re.IGNORECASE)
        results: list[SearchResult] = []
        total = 0
        cancelled = False
        truncated = False

        for node in self.tree.sequence:
            if cancel is not None and cancel.cancelled:
                logger.debug("Text search for '%s' cancelled", query)
                cancelled = True
                break

            if fuzzy:
                result = self._fuzzy_match(node, query, threshold)
            else:
                result = self._exact_match(node, pattern)
            if result is None:
                continue

            if max_results is not None and len(results) >= max_results:
                truncated = True
                break
            results.append(result)
            total += max(1, len(result.spans))

        return SearchResults(
            query=query,
            results=results,
            total_matches=total,
            cancelled=cancelled,
            truncated=truncated,
        )

    def _exact_match(
        self, node: AccessibilityNode, pattern: re.Pattern[str]
    ) -> SearchResult | None:
        spans: list[tuple[str, int, int]] = []
        for field_name, value in _searchable_fields(node):
            for match in pattern.finditer(value):
                spans.append((field_name, match.start(), match.end()))
        if not spans:
            return None
        return SearchResult(node_id=node.id, role=node.role, text=node.display_text, spans=spans)

    def _fuzzy_match(
        self, node: AccessibilityNode, query: str, threshold: float
    ) -> SearchResult | None:
        best = 0.0
        for _, value in _searchable_fields(node):
            best = max(best, similarity(value, query, "partial_ratio"))
        if best < threshold:
            return None
        return SearchResult(node_id=node.id, role=node.role, text=node.display_text, score=best)

    # =========================================================================
    # Structured queries
    # =========================================================================

    def role_filter(self, roles: str | Iterable[str]) -> list[AccessibilityNode]:
        """All visible nodes whose role is in a set, in document order."""
        wanted = {roles} if isinstance(roles, str) else set(roles)
        return [node for node in self.tree.iter_visible() if node.role in wanted]

    def attribute_query(
        self,
        predicate: AttributePredicate | None = None,
        **criteria: Any,
    ) -> list[AccessibilityNode]:
        """All visible nodes whose states and properties satisfy a query.

        Args:
            predicate: Called with (states, properties) for each node
            **criteria: Exact values for state, property or node fields,
                e.g. ``checked=True`` or ``level=2``

        Raises:
            UnknownFilterError: If a criterion names no known field
        """
        available = list(_STATE_KEYS + _PROPERTY_KEYS + _NODE_KEYS)
        for key in criteria:
            if key not in available:
                raise UnknownFilterError(
                    key,
                    available,
                    closest_names(key, available),
                    kind="attribute",
                    command="attribute_query",
                )

        def _matches(node: AccessibilityNode) -> bool:
            for key, expected in criteria.items():
                if key in _STATE_KEYS:
                    actual = getattr(node.states, key)
                elif key in _PROPERTY_KEYS:
                    actual = getattr(node.properties, key)
                else:
                    actual = getattr(node, key)
                if actual != expected:
                    return False
            if predicate is not None and not predicate(node.states, node.properties):
                return False
            return True

        return [node for node in self.tree.iter_visible() if _matches(node)]

    def outline(self, kind: OutlineKind | str) -> Outline:
        """Outline of headings, landmarks or form controls."""
        return build_outline(self.tree, kind)

    def role_statistics(self) -> dict[str, int]:
        """Count of visible nodes per role, most frequent first."""
        counts = Counter(node.role for node in self.tree.iter_visible())
        return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def _searchable_fields(node: AccessibilityNode) -> list[tuple[str, str]]:
    values = [("name", node.name), ("description", node.description)]
    if node.text and node.text != node.name:
        values.append(("text", node.text))
    return [(name, value) for name, value in values if value]
