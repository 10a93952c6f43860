"""
Accessibility tree layer.

This module builds the tree a screen reader perceives from a raw element
tree: roles, accessible names and descriptions, states, relationships,
table geometry and the flattened reading order.
"""

from .naming import NameComputer
from .outline import Outline, OutlineEntry, OutlineKind, build_outline
from .tables import TableModel, TablePosition
from .tree import AccessibilityTree, TreeStats, build_tree
from .types import (
    AccessibilityNode,
    FlattenedSequence,
    NodeProperties,
    NodeRelationships,
    NodeStates,
)

__all__ = [
    "AccessibilityNode",
    "AccessibilityTree",
    "FlattenedSequence",
    "NameComputer",
    "NodeProperties",
    "NodeRelationships",
    "NodeStates",
    "Outline",
    "OutlineEntry",
    "OutlineKind",
    "TableModel",
    "TablePosition",
    "TreeStats",
    "build_outline",
    "build_tree",
]
