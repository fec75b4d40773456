"""
Connection anchors and bounding-box queries for diagram elements.

These are the read-only helpers used by inspection tools and by the path
router:
- Dominant-axis anchor selection between two rectangles
- Bounding boxes of nodes and connectors (with or without a custom path)
- Centering a set of rectangles inside a container
- Pairwise overlap detection
"""

from __future__ import annotations

from typing import Sequence

from diagram_geometry.geometry import (
    bounding_box_of_points,
    bounding_box_of_rects,
    check_overlap,
)
from diagram_geometry.models import (
    AnchorPair,
    Connector,
    Element,
    ElementBounds,
    Point,
    Rect,
)


# ---------------------------------------------------------------------------
# Connection anchors
# ---------------------------------------------------------------------------

def resolve_connection_points(source: Rect, target: Rect) -> AnchorPair:
    """Choose where a connector leaves *source* and enters *target*.

    Compares the center-to-center vector:
    - Horizontal dominant (``|dx| > |dy|``): anchors sit on the facing
      vertical edges, at each rectangle's vertical center.
    - Otherwise, ties and coincident rectangles included: anchors sit on the
      facing horizontal edges, at each rectangle's horizontal center.

    Both points lie exactly on their rectangle's boundary.
    """
    dx = target.cx - source.cx
    dy = target.cy - source.cy

    if abs(dx) > abs(dy):
        if dx > 0:
            return AnchorPair(Point(source.right, source.cy), Point(target.x, target.cy))
        return AnchorPair(Point(source.x, source.cy), Point(target.right, target.cy))

    if dy > 0:
        return AnchorPair(Point(source.cx, source.bottom), Point(target.cx, target.y))
    return AnchorPair(Point(source.cx, source.y), Point(target.cx, target.bottom))


# ---------------------------------------------------------------------------
# Bounding-box queries
# ---------------------------------------------------------------------------

def bounding_box_of_node(rect: Rect) -> ElementBounds:
    return ElementBounds.from_box(rect.bounds())


def bounding_box_of_connector(connector: Connector) -> ElementBounds:
    """Box over a connector's custom path, or over its two anchors when it has none."""
    if connector.has_custom_path:
        points: Sequence[Point] = connector.path or ()
    else:
        anchors = resolve_connection_points(connector.source, connector.target)
        points = (anchors.start, anchors.end)
    return ElementBounds.from_box(bounding_box_of_points(points))


def bounding_box_of(element: Element) -> ElementBounds:
    """Bounding box of a node (:class:`Rect`) or a :class:`Connector`."""
    if isinstance(element, Connector):
        return bounding_box_of_connector(element)
    if isinstance(element, Rect):
        return bounding_box_of_node(element)
    raise TypeError(f"Unsupported element type: {type(element).__name__}")


# ---------------------------------------------------------------------------
# Whole-set helpers
# ---------------------------------------------------------------------------

def center_layout(
    rects: Sequence[Rect],
    container_width: float,
    container_height: float,
) -> list[Rect]:
    """Translate *rects* so their union box is centered in the container.

    Relative positions are preserved; a new list is returned.
    """
    if not rects:
        return []
    box = bounding_box_of_rects(rects)
    offset_x = (container_width - box.width) / 2 - box.min_x
    offset_y = (container_height - box.height) / 2 - box.min_y
    return [r.moved_to(r.x + offset_x, r.y + offset_y) for r in rects]


def find_overlapping_nodes(rects: Sequence[Rect]) -> list[tuple[str, str]]:
    """Return id pairs of rectangles whose boxes overlap (touching included)."""
    overlaps: list[tuple[str, str]] = []
    for i, a in enumerate(rects):
        box_a = a.bounds()
        for b in rects[i + 1:]:
            if check_overlap(box_a, b.bounds()):
                overlaps.append((a.id, b.id))
    return overlaps
