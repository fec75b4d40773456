"""
Geometry primitives used by the layout engine and the path router.

Pure functions over :class:`Point`, :class:`Rect` and :class:`BoundingBox`:
containment, segment/segment and segment/box intersection, box unions,
overlap tests and quadratic bezier sampling.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from diagram_geometry.models import BoundingBox, Point, Rect


# Below this magnitude two segments are treated as parallel.
PARALLEL_EPSILON = 1e-10


# ---------------------------------------------------------------------------
# Containment / intersection
# ---------------------------------------------------------------------------

def point_in_box(point: Point, box: BoundingBox) -> bool:
    """Check if *point* lies inside *box*, boundary included."""
    return (
        box.min_x <= point.x <= box.max_x
        and box.min_y <= point.y <= box.max_y
    )


def lines_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Check if segment p1-p2 crosses segment p3-p4.

    Parallel and collinear segments never intersect, even when they
    overlap; callers that care about touching boxes rely on the endpoint
    containment test in :func:`line_intersects_box` instead.
    """
    denominator = (p1.x - p2.x) * (p3.y - p4.y) - (p1.y - p2.y) * (p3.x - p4.x)
    if abs(denominator) < PARALLEL_EPSILON:
        return False

    t = ((p1.x - p3.x) * (p3.y - p4.y) - (p1.y - p3.y) * (p3.x - p4.x)) / denominator
    u = -((p1.x - p2.x) * (p1.y - p3.y) - (p1.y - p2.y) * (p1.x - p3.x)) / denominator
    return 0 <= t <= 1 and 0 <= u <= 1


def box_edges(box: BoundingBox) -> list[tuple[Point, Point]]:
    """Return the four edges of *box* as (start, end) pairs: top, right, bottom, left."""
    top_left = Point(box.min_x, box.min_y)
    top_right = Point(box.max_x, box.min_y)
    bottom_right = Point(box.max_x, box.max_y)
    bottom_left = Point(box.min_x, box.max_y)
    return [
        (top_left, top_right),
        (top_right, bottom_right),
        (bottom_right, bottom_left),
        (bottom_left, top_left),
    ]


def line_intersects_box(start: Point, end: Point, box: BoundingBox) -> bool:
    """Check if segment start-end touches *box*.

    True when either endpoint is inside the box or the segment crosses
    one of its edges.
    """
    if point_in_box(start, box) or point_in_box(end, box):
        return True
    return any(lines_intersect(start, end, a, b) for a, b in box_edges(box))


# ---------------------------------------------------------------------------
# Boxes
# ---------------------------------------------------------------------------

def bounding_box_of_points(points: Iterable[Point]) -> BoundingBox:
    """Min/max reduction over *points*; no points gives the zero box."""
    pts = list(points)
    if not pts:
        return BoundingBox.empty()
    return BoundingBox(
        min(p.x for p in pts),
        min(p.y for p in pts),
        max(p.x for p in pts),
        max(p.y for p in pts),
    )


def bounding_box_of_rects(rects: Iterable[Rect]) -> BoundingBox:
    """Union box of a set of rectangles; no rectangles gives the zero box."""
    items = list(rects)
    if not items:
        return BoundingBox.empty()
    return BoundingBox(
        min(r.x for r in items),
        min(r.y for r in items),
        max(r.right for r in items),
        max(r.bottom for r in items),
    )


def check_overlap(a: BoundingBox, b: BoundingBox) -> bool:
    """Check if two boxes overlap.

    Boxes that only share an edge or a corner count as overlapping; only a
    strict gap on some axis separates them.
    """
    return not (
        a.max_x < b.min_x
        or b.max_x < a.min_x
        or a.max_y < b.min_y
        or b.max_y < a.min_y
    )


def padded_box(rect: Rect, padding: float) -> BoundingBox:
    """Obstacle box: *rect* grown by *padding* on every side."""
    return rect.bounds().expanded(padding)


def path_hits_obstacles(
    path: Sequence[Point],
    obstacles: Sequence[Rect],
    padding: float,
) -> bool:
    """Check if any segment of *path* touches any padded obstacle box."""
    if not obstacles:
        return False
    boxes = [padded_box(obs, padding) for obs in obstacles]
    for i in range(len(path) - 1):
        for box in boxes:
            if line_intersects_box(path[i], path[i + 1], box):
                return True
    return False


def first_blocking_obstacle(
    start: Point,
    end: Point,
    obstacles: Sequence[Rect],
    padding: float,
) -> Rect | None:
    """Return the first obstacle (in input order) whose padded box the segment touches."""
    for obs in obstacles:
        if line_intersects_box(start, end, padded_box(obs, padding)):
            return obs
    return None


# ---------------------------------------------------------------------------
# Bezier curves
# ---------------------------------------------------------------------------

def quadratic_bezier(p0: Point, p1: Point, p2: Point, t: float) -> Point:
    """Evaluate B(t) = (1-t)^2 P0 + 2(1-t)t P1 + t^2 P2."""
    a = (1 - t) * (1 - t)
    b = 2 * (1 - t) * t
    c = t * t
    return Point(
        a * p0.x + b * p1.x + c * p2.x,
        a * p0.y + b * p1.y + c * p2.y,
    )


def bezier_points(p0: Point, p1: Point, p2: Point, segments: int = 8) -> list[Point]:
    """Sample a quadratic bezier into ``segments + 1`` evenly spaced points."""
    return [quadratic_bezier(p0, p1, p2, i / segments) for i in range(segments + 1)]
