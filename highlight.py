"""
Highlight resolution for positioned nodes and cells.

Precedence (first match wins)
    nodes : MERGE_TARGET → TARGET → INNER / LEAF
    cells : TO_MERGE → TO_DELETE → NONE
"""

from enum import Enum
from typing import Any, Optional

from snapshot import NodeKind, NodeRef, Snapshot, merge_pair


class HighlightKind(Enum):
    NONE = "none"
    INNER = "inner"
    LEAF = "leaf"
    TARGET = "target"
    MERGE_TARGET = "merge_target"
    TO_DELETE = "to_delete"
    TO_MERGE = "to_merge"


class HighlightResolver:
    """
    Resolves the visual state of nodes and cells for one snapshot.

    The merge pair is resolved once up front, so a malformed
    ``to_merge`` marker fails before anything is positioned.

    Args:
        snapshot (Snapshot): Snapshot whose pending markers apply.
    """

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot
        self.merge_nodes = merge_pair(snapshot)

    def node(self, ref: NodeRef) -> HighlightKind:
        if ref in self.merge_nodes:
            return HighlightKind.MERGE_TARGET
        if self.snapshot.target is not None and self.snapshot.target == ref:
            return HighlightKind.TARGET
        if ref.kind is NodeKind.INNER:
            return HighlightKind.INNER
        return HighlightKind.LEAF

    def cell(self, key: Any, owner: Optional[NodeRef] = None,
             slot: Optional[int] = None) -> HighlightKind:
        """
        Args:
            key:   Key value held by the cell.
            owner: Node the cell belongs to (None for the staged insert).
            slot:  Index of the cell within ``owner``'s keys.
        """
        marker = self.snapshot.to_merge
        if (marker is not None and owner is not None
                and owner == marker.parent_node and slot == marker.key_idx):
            return HighlightKind.TO_MERGE
        # Matched by value: every cell holding this key lights up.
        if self.snapshot.to_delete is not None and key == self.snapshot.to_delete:
            return HighlightKind.TO_DELETE
        return HighlightKind.NONE
