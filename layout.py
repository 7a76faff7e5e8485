"""
╔══════════════════════════════════════════════════════════════════╗
║            B-Tree Debugger — LAYOUT ENGINE                       ║
║                                                                  ║
║  Turns a Snapshot into absolute canvas coordinates.              ║
║                                                                  ║
║  Cascade layout                                                  ║
║  ──────────────                                                  ║
║    [ 10 | 20 ]                 ← node row at y                   ║
║            [ 3 | 7 ]           ← child 0 at start_x + 2·cell_w   ║
║                    ...         ← child 0's subtree               ║
║            [ 12 | 15 ]         ← child 1 starts below child 0's  ║
║                                  whole subtree                   ║
║                                                                  ║
║  Every child column starts 2 cell widths right of its parent's   ║
║  first cell, and each subtree gets the rows below the previous   ║
║  sibling's subtree, so siblings never overlap vertically.        ║
╚══════════════════════════════════════════════════════════════════╝
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from highlight import HighlightKind, HighlightResolver
from snapshot import NodeRef, Snapshot, resolve

log = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════
#  CONFIGURATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LayoutConfig:
    """
    Pixel geometry shared by layout, rendering and hit-testing.

    Attributes:
        cell_width, cell_height (float): Size of one key square.
        cell_padding      (float): Gap between cells of one node.
        row_padding       (float): Gap between a node row and the next.
        node_border_factor(float): Horizontal growth of node backgrounds.
        node_height_factor(float): Node background height in cell heights.
        staging_x, staging_y (float): Center of the pending-insert cell.
        origin_x          (float): First cell center of the root node.
        origin_y  (float | None) : Root row; defaults to one row below staging.
        split_origin_x    (float): First cell center of a pending split child.
    """

    cell_width: float = 50
    cell_height: float = 50
    cell_padding: float = 10
    row_padding: float = 50
    node_border_factor: float = 1.1
    node_height_factor: float = 1.5
    staging_x: float = 50
    staging_y: float = 50
    origin_x: float = 50
    origin_y: Optional[float] = None
    split_origin_x: float = 800

    @property
    def half_cell_width(self) -> float:
        return self.cell_width / 2

    @property
    def half_cell_height(self) -> float:
        return self.cell_height / 2

    @property
    def row_step(self) -> float:
        return self.cell_height + self.row_padding

    @property
    def root_y(self) -> float:
        if self.origin_y is not None:
            return self.origin_y
        return self.staging_y + self.row_step

    def node_width(self, node_capacity: int) -> float:
        """Width of a full key strip for ``node_capacity`` keys."""
        return (node_capacity * self.cell_width
                + (node_capacity - 1) * self.cell_padding)


# ══════════════════════════════════════════════════════════════
#  LAYOUT RECORDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PositionedNode:
    x: float                 # left edge of the first cell
    y: float                 # row center
    ref: NodeRef
    highlight: HighlightKind


@dataclass
class PositionedCell:
    """
    A key square centered at ``(x, y)``.

    ``owner``/``slot`` identify the node and key index the cell came
    from; both are None for the staged insert key.
    """

    x: float
    y: float
    key: Any
    highlight: HighlightKind = HighlightKind.NONE
    owner: Optional[NodeRef] = None
    slot: Optional[int] = None

    def contains(self, x: float, y: float, config: LayoutConfig) -> bool:
        return (self.x - config.half_cell_width <= x <= self.x + config.half_cell_width
                and self.y - config.half_cell_height <= y <= self.y + config.half_cell_height)


@dataclass
class Layout:
    nodes: List[PositionedNode] = field(default_factory=list)
    cells: List[PositionedCell] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.nodes and not self.cells


# ══════════════════════════════════════════════════════════════
#  ENGINE
# ══════════════════════════════════════════════════════════════

class LayoutEngine:
    """
    Depth-first cascade layout of one snapshot.

    Args:
        snapshot (Snapshot):     Tree to position.
        config   (LayoutConfig): Pixel geometry.
    """

    def __init__(self, snapshot: Snapshot, config: LayoutConfig):
        self.snapshot = snapshot
        self.config = config
        self.highlights = HighlightResolver(snapshot)
        self.layout = Layout()

    def run(self) -> Layout:
        snap, cfg = self.snapshot, self.config

        # ── 1. staged key, not yet part of any node ──
        if snap.to_insert is not None:
            self.layout.cells.append(PositionedCell(
                cfg.staging_x, cfg.staging_y, snap.to_insert,
                self.highlights.cell(snap.to_insert)))

        # ── 2. main tree ──
        bottom = self.visit(cfg.origin_x, cfg.root_y, snap.root_node)

        # ── 3. sibling created by a pending split, side by side ──
        if snap.to_insert_child is not None:
            bottom = max(bottom, self.visit(cfg.split_origin_x, cfg.root_y,
                                            snap.to_insert_child))

        log.debug("layout: %d nodes, %d cells, bottom y=%s",
                  len(self.layout.nodes), len(self.layout.cells), bottom)
        return self.layout

    def visit(self, x: float, y: float, ref: NodeRef) -> float:
        """
        Position ``ref`` and its subtree.

        Args:
            x: Center of the node's first cell.
            y: Row center.
            ref: Node to lay out.

        Returns:
            The first free row below the subtree.
        """
        cfg = self.config
        record = resolve(ref, self.snapshot)
        start_x = x

        self.layout.nodes.append(PositionedNode(
            x - cfg.half_cell_width, y, ref, self.highlights.node(ref)))

        for slot, key in enumerate(record.keys):
            self.layout.cells.append(PositionedCell(
                x, y, key, self.highlights.cell(key, ref, slot), ref, slot))
            x += cfg.cell_width + cfg.cell_padding

        x = start_x + cfg.cell_width * 2
        y += cfg.row_step
        if record.children is None:
            return y
        for child in record.children:
            y = self.visit(x, y, child)
        return y


def build_layout(snapshot: Snapshot, config: Optional[LayoutConfig] = None) -> Layout:
    """Lay out ``snapshot`` from scratch. Pure in (snapshot, config)."""
    return LayoutEngine(snapshot, config or LayoutConfig()).run()


def layout_extent(layout: Layout, node_capacity: int, config: LayoutConfig):
    """
    Bounding box of everything the layout will draw.

    Returns:
        tuple[float, float]: (max_x, max_y) in canvas pixels.
    """
    max_x = max_y = 0.0
    node_w = config.node_width(max(node_capacity, 1)) * config.node_border_factor
    node_h = config.cell_height * config.node_height_factor
    for n in layout.nodes:
        max_x = max(max_x, n.x + node_w)
        max_y = max(max_y, n.y + node_h / 2)
    for c in layout.cells:
        max_x = max(max_x, c.x + config.half_cell_width)
        max_y = max(max_y, c.y + config.half_cell_height)
    return max_x, max_y
