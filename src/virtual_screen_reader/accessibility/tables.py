"""
Table grid model.

Lays the rows and cells of a table, grid or treegrid out on a grid the way
HTML tables are laid out (honouring colspan and rowspan), so any cell can
report its row/column position and its header cells.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..constants import CELL_ROLES, TABLE_ROLES
from .naming import split_ids
from .types import AccessibilityNode

logger = logging.getLogger(__name__)

_MAX_SPAN = 1000


@dataclass(frozen=True)
class TablePosition:
    """Position of a cell within its table.

    Attributes:
        table_id: Id of the table node
        cell_id: Id of the cell node
        row: 1-based row number
        row_count: Number of rows in the table
        column: 1-based column number
        column_count: Number of columns in the table
        headers: Header texts that apply to the cell
    """

    table_id: str
    cell_id: str
    row: int
    row_count: int
    column: int
    column_count: int
    headers: tuple[str, ...] = ()

    def describe(self) -> str:
        """Spoken form, e.g. ``Row 2 of 3, Column 2 of 3, B``."""
        text = f"Row {self.row} of {self.row_count}, Column {self.column} of {self.column_count}"
        if self.headers:
            text += ", " + ", ".join(self.headers)
        return text


class TableModel:
    """Grid layout of one table node.

    Args:
        table: The table, grid or treegrid node
        resolve_dom_id: Looks up nodes by ``id`` attribute, used for the
            ``headers`` attribute
    """

    def __init__(
        self,
        table: AccessibilityNode,
        resolve_dom_id: Callable[[str], AccessibilityNode | None],
    ) -> None:
        self.table = table
        self._resolve_dom_id = resolve_dom_id
        self.rows: list[AccessibilityNode] = []
        self._grid: dict[tuple[int, int], AccessibilityNode] = {}
        self._cell_origin: dict[str, tuple[int, int]] = {}
        self._row_of_cell: dict[str, AccessibilityNode] = {}
        self._build()

    def _build(self) -> None:
        self.rows = list(_collect(self.table, lambda n: n.role == "row"))

        for r, row in enumerate(self.rows):
            c = 0
            for cell in _collect(row, lambda n: n.role in CELL_ROLES):
                while (r, c) in self._grid:
                    c += 1
                colspan = _span(cell, "colspan")
                rowspan = _span(cell, "rowspan")
                if rowspan == 0:
                    rowspan = len(self.rows) - r
                for dr in range(rowspan):
                    for dc in range(colspan):
                        self._grid[(r + dr, c + dc)] = cell
                self._cell_origin[cell.id] = (r, c)
                self._row_of_cell[cell.id] = row
                c += colspan

    @property
    def row_count(self) -> int:
        explicit = _positive_int(self.table.attributes.get("aria-rowcount"))
        return explicit or len(self.rows)

    @property
    def column_count(self) -> int:
        explicit = _positive_int(self.table.attributes.get("aria-colcount"))
        if explicit:
            return explicit
        return max((c + 1 for _, c in self._grid), default=0)

    def position(self, cell: AccessibilityNode) -> TablePosition | None:
        """Position of a cell, or None if the cell is not in this table."""
        origin = self._cell_origin.get(cell.id)
        if origin is None:
            return None
        r, c = origin
        row = self._row_of_cell[cell.id]

        row_number = _positive_int(row.attributes.get("aria-rowindex")) or r + 1
        column_number = _positive_int(cell.attributes.get("aria-colindex")) or c + 1

        return TablePosition(
            table_id=self.table.id,
            cell_id=cell.id,
            row=row_number,
            row_count=max(self.row_count, row_number),
            column=column_number,
            column_count=max(self.column_count, column_number),
            headers=tuple(self.headers(cell)),
        )

    def headers(self, cell: AccessibilityNode) -> list[str]:
        """Header texts for a cell.

        Cells listed in the ``headers`` attribute win; otherwise column
        headers in the same column followed by row headers in the same row.
        """
        explicit = []
        for dom_id in split_ids(cell.attributes.get("headers")):
            header = self._resolve_dom_id(dom_id)
            if header is not None and header is not cell:
                explicit.append(header)
        if explicit:
            return _header_texts(explicit)

        origin = self._cell_origin.get(cell.id)
        if origin is None:
            return []
        r, c = origin
        row_total = max((row for row, _ in self._grid), default=-1) + 1
        col_total = max((col for _, col in self._grid), default=-1) + 1

        found: list[AccessibilityNode] = []
        for r2 in range(row_total):
            header = self._grid.get((r2, c))
            if header is not None and header is not cell and header.role == "columnheader":
                found.append(header)
        for c2 in range(col_total):
            header = self._grid.get((r, c2))
            if header is not None and header is not cell and header.role == "rowheader":
                found.append(header)
        return _header_texts(found)


def find_cell_and_table(
    node: AccessibilityNode,
) -> tuple[AccessibilityNode | None, AccessibilityNode | None]:
    """Nearest cell (inclusive) and the table that contains it."""
    cell = None
    current: AccessibilityNode | None = node
    while current is not None:
        if current.role in TABLE_ROLES:
            return cell, current
        if cell is None and current.role in CELL_ROLES:
            cell = current
        current = current.parent
    return cell, None


def _collect(
    root: AccessibilityNode, match: Callable[[AccessibilityNode], bool]
) -> list[AccessibilityNode]:
    """Visible descendants matching ``match``, without entering matches or nested tables."""
    found: list[AccessibilityNode] = []

    def _walk(node: AccessibilityNode) -> None:
        for child in node.children:
            if child.hidden:
                continue
            if match(child):
                found.append(child)
            elif child.role not in TABLE_ROLES:
                _walk(child)

    _walk(root)
    return found


def _header_texts(headers: list[AccessibilityNode]) -> list[str]:
    texts: list[str] = []
    seen: set[str] = set()
    for header in headers:
        if header.id in seen:
            continue
        seen.add(header.id)
        text = header.display_text
        if text:
            texts.append(text)
    return texts


def _span(cell: AccessibilityNode, attribute: str) -> int:
    value = cell.attributes.get(attribute) or cell.attributes.get(f"aria-{attribute}")
    if value is None:
        return 1
    try:
        span = int(value.strip())
    except ValueError:
        logger.debug("Malformed %s '%s' on %s", attribute, value, cell.id)
        return 1
    if span < 0:
        return 1
    if span == 0 and attribute == "colspan":
        return 1
    return min(span, _MAX_SPAN)


def _positive_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        number = int(value.strip())
    except ValueError:
        return None
    return number if number > 0 else None
