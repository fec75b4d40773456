"""
Hierarchical layout engine for flowchart diagrams.

Places nodes in rows by depth:
1. Root detection (nodes without incoming edges)
2. Level assignment by longest path from the roots (Kahn's algorithm)
3. Grouping of nodes into one row per level
4. Row placement: fixed vertical step per level, nodes spread evenly
   across the canvas width

The engine never mutates the rectangles it is given. It returns a
:class:`HierarchicalLayout` value and the caller decides whether to write
the new positions back into its diagram.

Cyclic input cannot satisfy the level invariant. Nodes on a cycle, or only
reachable through one, are reported in ``cyclic`` and placed on an extra
row below the deepest level instead of being silently leveled.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from diagram_geometry.geometry import bounding_box_of_rects
from diagram_geometry.layout import resolve_connection_points
from diagram_geometry.models import AnchorPair, BoundingBox, Edge, Rect

logger = logging.getLogger("diagram-geometry.layout")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class LayoutEngineConfig:
    """Configuration for the hierarchical layout engine (units: inches)."""
    margin: float = 0.5            # Left/right margin and top offset of level 0
    level_spacing: float = 1.5     # Vertical distance between consecutive levels

    # Default canvas: a 10 x 7.5 in slide
    canvas_width: float = 10.0
    canvas_height: float = 7.5


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class LevelAssignment:
    """Depth of every orderable node, plus the nodes no order exists for."""
    levels: dict[str, int] = field(default_factory=dict)
    cyclic: list[str] = field(default_factory=list)

    @property
    def depth(self) -> int:
        """Number of levels (0 when nothing was leveled)."""
        return max(self.levels.values()) + 1 if self.levels else 0


@dataclass
class LaidOutConnection:
    """An edge between two laid-out nodes with its resolved anchors."""
    source: str
    target: str
    label: str
    anchors: AnchorPair

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceId": self.source,
            "targetId": self.target,
            "label": self.label,
            **self.anchors.to_dict(),
        }


@dataclass
class HierarchicalLayout:
    """New node rectangles keyed by node id, and how they were derived."""
    positions: dict[str, Rect] = field(default_factory=dict)
    levels: dict[str, int] = field(default_factory=dict)
    cyclic: list[str] = field(default_factory=list)
    connections: list[LaidOutConnection] = field(default_factory=list)
    canvas_width: float = 0.0
    canvas_height: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.positions

    def rows(self) -> list[list[str]]:
        """Node ids grouped by level, top row first."""
        grouped: dict[int, list[str]] = defaultdict(list)
        for node_id, level in self.levels.items():
            grouped[level].append(node_id)
        return [grouped[level] for level in sorted(grouped)]

    def bounds(self) -> BoundingBox:
        return bounding_box_of_rects(self.positions.values())

    @property
    def fits_canvas(self) -> bool:
        """True if every node lies within ``[0, canvas_width] x [0, canvas_height]``."""
        if self.is_empty:
            return True
        box = self.bounds()
        return (
            box.min_x >= 0 and box.min_y >= 0
            and box.max_x <= self.canvas_width
            and box.max_y <= self.canvas_height
        )

    def to_dict(self, precision: Optional[int] = None) -> dict[str, Any]:
        return {
            "nodes": {
                node_id: {k: v for k, v in rect.to_dict(precision).items() if k != "id"}
                for node_id, rect in self.positions.items()
            },
            "levels": dict(self.levels),
            "cyclicNodes": list(self.cyclic),
            "connections": [c.to_dict() for c in self.connections],
            "fitsCanvas": self.fits_canvas,
        }


# ---------------------------------------------------------------------------
# Level assignment
# ---------------------------------------------------------------------------

def find_root_nodes(node_ids: Iterable[str], edges: Iterable[Edge]) -> list[str]:
    """Return the nodes that have no incoming edge, in input order."""
    ids = list(dict.fromkeys(node_ids))
    known = set(ids)
    has_incoming = {e.target for e in edges if e.source in known and e.target in known}
    return [n for n in ids if n not in has_incoming]


def assign_levels(node_ids: Iterable[str], edges: Iterable[Edge]) -> LevelAssignment:
    """Assign each node its longest-path depth from the roots.

    Roots get level 0 and every other node gets ``max(level(source)) + 1``.
    Processing follows Kahn's topological order, so a node is leveled only
    once all of its sources are; whatever is left when the queue drains sits
    on or behind a cycle and is returned in ``cyclic``.

    Edges that name unknown nodes are ignored.
    """
    ids = list(dict.fromkeys(node_ids))
    known = set(ids)

    children: dict[str, list[str]] = defaultdict(list)
    pending: dict[str, int] = {n: 0 for n in ids}
    for edge in edges:
        if edge.source not in known or edge.target not in known:
            logger.debug("Ignoring edge %s -> %s with unknown endpoint", edge.source, edge.target)
            continue
        children[edge.source].append(edge.target)
        pending[edge.target] += 1

    levels: dict[str, int] = {}
    queue: deque[str] = deque(n for n in ids if pending[n] == 0)
    for root in queue:
        levels[root] = 0

    while queue:
        node = queue.popleft()
        for child in children[node]:
            levels[child] = max(levels.get(child, 0), levels[node] + 1)
            pending[child] -= 1
            if pending[child] == 0:
                queue.append(child)

    cyclic = [n for n in ids if pending[n] > 0]
    for n in cyclic:
        # Partial levels from acyclic predecessors are meaningless here
        levels.pop(n, None)

    ordered = {n: levels[n] for n in ids if n in levels}
    return LevelAssignment(levels=ordered, cyclic=cyclic)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

def _place_row(
    row: Sequence[Rect],
    y: float,
    canvas_width: float,
    margin: float,
) -> list[Rect]:
    """Spread one row of nodes across the canvas width.

    Several nodes run from the left margin to the right margin with equal
    gaps; the gap goes negative (nodes overlap) when the row is wider than
    the canvas. A lone node is centered.
    """
    if len(row) == 1:
        only = row[0]
        return [only.moved_to((canvas_width - only.width) / 2, y)]

    total_width = sum(r.width for r in row)
    spacing = (canvas_width - total_width - 2 * margin) / (len(row) - 1)

    placed: list[Rect] = []
    x = margin
    for rect in row:
        placed.append(rect.moved_to(x, y))
        x += rect.width + spacing
    return placed


def compute_hierarchical_layout(
    nodes: Sequence[Rect],
    edges: Iterable[Edge],
    canvas_width: Optional[float] = None,
    canvas_height: Optional[float] = None,
    config: Optional[LayoutEngineConfig] = None,
) -> HierarchicalLayout:
    """Lay out *nodes* in levels derived from *edges*.

    Level ``n`` sits at ``y = margin + n * level_spacing``. A row of several
    nodes starts at the left margin with equal gaps between nodes. A row
    holding a single node is centered instead, at
    ``x = (canvas_width - width) / 2``.

    Args:
        nodes: Node rectangles; each needs a unique ``id``. Only their
            sizes matter, incoming positions are replaced.
        edges: Directed edges between node ids.
        canvas_width: Width to spread rows over (config default if None).
        canvas_height: Canvas height, used to report whether the result fits.
        config: Spacing constants.

    Returns:
        A :class:`HierarchicalLayout`; empty when there are no nodes.
    """
    cfg = config or LayoutEngineConfig()
    width = cfg.canvas_width if canvas_width is None else canvas_width
    height = cfg.canvas_height if canvas_height is None else canvas_height

    result = HierarchicalLayout(canvas_width=width, canvas_height=height)
    if not nodes:
        return result

    edge_list = list(edges)
    by_id = {n.id: n for n in nodes}
    assignment = assign_levels(by_id, edge_list)

    levels = dict(assignment.levels)
    if assignment.cyclic:
        extra_level = assignment.depth
        logger.warning(
            "Cyclic edges: %d node(s) cannot be leveled, placing them on level %d: %s",
            len(assignment.cyclic), extra_level, ", ".join(assignment.cyclic),
        )
        for node_id in assignment.cyclic:
            levels[node_id] = extra_level

    rows: dict[int, list[Rect]] = defaultdict(list)
    for node_id, rect in by_id.items():
        rows[levels[node_id]].append(rect)

    positions: dict[str, Rect] = {}
    for level in sorted(rows):
        y = cfg.margin + level * cfg.level_spacing
        for rect in _place_row(rows[level], y, width, cfg.margin):
            positions[rect.id] = rect

    result.positions = {node_id: positions[node_id] for node_id in by_id}
    result.levels = {node_id: levels[node_id] for node_id in by_id}
    result.cyclic = assignment.cyclic
    result.connections = [
        LaidOutConnection(
            source=e.source,
            target=e.target,
            label=e.label,
            anchors=resolve_connection_points(positions[e.source], positions[e.target]),
        )
        for e in edge_list
        if e.source in positions and e.target in positions
    ]

    logger.debug(
        "Hierarchical layout: %d node(s) in %d level(s), canvas %.2f x %.2f",
        len(positions), len(rows), width, height,
    )
    return result
