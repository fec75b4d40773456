"""
Connector path routing with obstacle avoidance.

Produces the ordered point list of a connector between two node
rectangles in one of three styles:

- straight:   ``[start, end]``, optionally bent once around the first
              blocking obstacle
- orthogonal: an L-shape along the dominant axis, then the other L, then
              5-point detours through an offset midpoint
- curved:     a sampled quadratic bezier, then its mirror image, then the
              orthogonal router

Every style starts from :func:`resolve_connection_points` and tests
candidates against the other nodes' padded boxes. Alternatives are tried
in a fixed order and the first obstacle-free one wins; when none is clear
the router degrades to a defined candidate instead of failing, and says so
in ``reasoning``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from diagram_geometry.geometry import (
    bezier_points,
    first_blocking_obstacle,
    padded_box,
    path_hits_obstacles,
)
from diagram_geometry.layout import resolve_connection_points
from diagram_geometry.models import Point, Rect

logger = logging.getLogger("diagram-geometry.routing")


# ---------------------------------------------------------------------------
# Styles, strategies and options
# ---------------------------------------------------------------------------

class RoutingStyle(str, Enum):
    STRAIGHT = "straight"
    ORTHOGONAL = "orthogonal"
    CURVED = "curved"


class RouteStrategy(str, Enum):
    """Which branch of a style's fallback chain produced the path."""
    DIRECT = "direct"                # first choice, nothing in the way
    DETOUR = "detour"                # straight path bent around an obstacle
    ALTERNATE = "alternate"          # the other L-shape
    MULTI_SEGMENT = "multi_segment"  # 5-point orthogonal detour
    MIRRORED = "mirrored"            # curve bent the other way
    FALLBACK = "fallback"            # curved request answered by a clear orthogonal path
    BLOCKED = "blocked"              # nothing clear, best effort returned


def normalize_routing_style(value: Any) -> RoutingStyle:
    """Map *value* to a :class:`RoutingStyle`; anything unknown is orthogonal."""
    if isinstance(value, RoutingStyle):
        return value
    if isinstance(value, str):
        try:
            return RoutingStyle(value.strip().lower())
        except ValueError:
            pass
    return RoutingStyle.ORTHOGONAL


# Clearance kept between a straight-path detour point and the padded box
DETOUR_CLEARANCE = 0.1

# Midpoint offsets tried, in order, by the multi-segment orthogonal detour
MULTI_SEGMENT_OFFSETS: tuple[tuple[float, float], ...] = (
    (0.5, 0.0),
    (-0.5, 0.0),
    (0.0, 0.5),
    (0.0, -0.5),
)


@dataclass(frozen=True)
class RoutingOptions:
    """Tuning knobs for :func:`route_path` (units: inches)."""
    avoid_obstacles: bool = True
    curve_radius: float = 0.2          # Perpendicular offset of the bezier control point
    min_segment_length: float = 0.3    # Accepted and reported; no candidate depends on it
    padding: float = 0.1               # Clearance added around every obstacle
    bezier_segments: int = 8           # Curve samples = segments + 1

    CURVE_RADIUS_RANGE = (0.1, 1.0)
    MIN_SEGMENT_FLOOR = 0.1
    PADDING_RANGE = (0.05, 0.5)

    @classmethod
    def create(
        cls,
        avoid_obstacles: Optional[bool] = None,
        curve_radius: Optional[float] = None,
        min_segment_length: Optional[float] = None,
        padding: Optional[float] = None,
    ) -> RoutingOptions:
        """Build options from possibly-missing values, applying defaults and clamps."""
        defaults = cls()
        return cls(
            avoid_obstacles=defaults.avoid_obstacles if avoid_obstacles is None else avoid_obstacles,
            curve_radius=defaults.curve_radius if curve_radius is None else curve_radius,
            min_segment_length=(
                defaults.min_segment_length if min_segment_length is None else min_segment_length
            ),
            padding=defaults.padding if padding is None else padding,
        ).clamped()

    def clamped(self) -> RoutingOptions:
        lo, hi = self.CURVE_RADIUS_RANGE
        pad_lo, pad_hi = self.PADDING_RANGE
        return RoutingOptions(
            avoid_obstacles=bool(self.avoid_obstacles),
            curve_radius=min(hi, max(lo, self.curve_radius)),
            min_segment_length=max(self.MIN_SEGMENT_FLOOR, self.min_segment_length),
            padding=min(pad_hi, max(pad_lo, self.padding)),
            bezier_segments=max(1, self.bezier_segments),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "avoidObstacles": data["avoid_obstacles"],
            "curveRadius": data["curve_radius"],
            "minSegmentLength": data["min_segment_length"],
            "padding": data["padding"],
        }


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class RouteResult:
    """A routed connector path and how it was obtained."""
    path_points: list[Point]
    reasoning: str
    style: RoutingStyle
    start_point: Point
    end_point: Point
    strategy: RouteStrategy
    obstacles_considered: int = 0

    @property
    def avoided_obstacles(self) -> bool:
        return self.strategy is not RouteStrategy.BLOCKED

    def to_dict(self, precision: Optional[int] = None) -> dict[str, Any]:
        return {
            "pathPoints": [p.to_dict(precision) for p in self.path_points],
            "style": self.style.value,
            "reasoning": self.reasoning,
            "strategy": self.strategy.value,
            "startPoint": self.start_point.to_dict(precision),
            "endPoint": self.end_point.to_dict(precision),
            "obstaclesConsidered": self.obstacles_considered,
        }


@dataclass(frozen=True)
class _Route:
    path: list[Point]
    strategy: RouteStrategy
    reasoning: str


@dataclass(frozen=True)
class _Candidate:
    strategy: RouteStrategy
    reasoning: str
    build: Callable[[], list[Point]]


def _first_clear(
    candidates: Sequence[_Candidate],
    obstacles: Sequence[Rect],
    padding: float,
) -> tuple[Optional[_Route], Optional[_Route]]:
    """Evaluate *candidates* in order.

    Returns ``(clear, last)``: the first obstacle-free route (or None) and
    the last route that was attempted.
    """
    last: Optional[_Route] = None
    for candidate in candidates:
        route = _Route(candidate.build(), candidate.strategy, candidate.reasoning)
        if not path_hits_obstacles(route.path, obstacles, padding):
            return route, route
        last = route
    return None, last


# ---------------------------------------------------------------------------
# Straight
# ---------------------------------------------------------------------------

def _simple_detour(start: Point, end: Point, obstacle: Rect, padding: float) -> list[Point]:
    """Bend a straight path once, just past the padded box of *obstacle*.

    Horizontal movement goes over or under the box, vertical movement to
    its left or right, whichever deviates less from the two endpoints
    (ties go under / right).
    """
    box = padded_box(obstacle, padding)
    dx = end.x - start.x
    dy = end.y - start.y

    if abs(dx) > abs(dy):
        mid_x = start.x + dx * 0.5
        over = Point(mid_x, box.min_y - DETOUR_CLEARANCE)
        under = Point(mid_x, box.max_y + DETOUR_CLEARANCE)
        over_cost = abs(over.y - start.y) + abs(over.y - end.y)
        under_cost = abs(under.y - start.y) + abs(under.y - end.y)
        bend = over if over_cost < under_cost else under
    else:
        mid_y = start.y + dy * 0.5
        left = Point(box.min_x - DETOUR_CLEARANCE, mid_y)
        right = Point(box.max_x + DETOUR_CLEARANCE, mid_y)
        left_cost = abs(left.x - start.x) + abs(left.x - end.x)
        right_cost = abs(right.x - start.x) + abs(right.x - end.x)
        bend = left if left_cost < right_cost else right
    return [start, bend, end]


def _route_straight(
    start: Point,
    end: Point,
    obstacles: Sequence[Rect],
    options: RoutingOptions,
) -> _Route:
    direct = _Route([start, end], RouteStrategy.DIRECT, "Direct straight line path")
    if not options.avoid_obstacles or not path_hits_obstacles(direct.path, obstacles, options.padding):
        return direct

    blocker = first_blocking_obstacle(start, end, obstacles, options.padding)
    if blocker is None:
        return direct

    clear, _ = _first_clear(
        [_Candidate(
            RouteStrategy.DETOUR,
            "Straight path with obstacle avoidance detour",
            lambda: _simple_detour(start, end, blocker, options.padding),
        )],
        obstacles,
        options.padding,
    )
    if clear is not None:
        return clear
    return _Route(
        direct.path,
        RouteStrategy.BLOCKED,
        "Direct straight line path (obstacle avoidance failed)",
    )


# ---------------------------------------------------------------------------
# Orthogonal
# ---------------------------------------------------------------------------

def _multi_segment_path(start: Point, end: Point, offset: tuple[float, float]) -> list[Point]:
    mid_x = start.x + (end.x - start.x) * 0.5 + offset[0]
    mid_y = start.y + (end.y - start.y) * 0.5 + offset[1]
    return [
        start,
        Point(mid_x, start.y),
        Point(mid_x, mid_y),
        Point(mid_x, end.y),
        end,
    ]


def _orthogonal_candidates(start: Point, end: Point) -> list[_Candidate]:
    horizontal = ("horizontal then vertical", [start, Point(end.x, start.y), end])
    vertical = ("vertical then horizontal", [start, Point(start.x, end.y), end])

    # Same dominant-axis rule as the anchor resolver: ties go vertical
    if abs(end.x - start.x) > abs(end.y - start.y):
        primary, alternate = horizontal, vertical
    else:
        primary, alternate = vertical, horizontal

    candidates = [
        _Candidate(RouteStrategy.DIRECT, f"Orthogonal path ({primary[0]})",
                   lambda: primary[1]),
        _Candidate(RouteStrategy.ALTERNATE,
                   f"Orthogonal path ({alternate[0]}) - avoiding obstacles",
                   lambda: alternate[1]),
    ]
    for offset in MULTI_SEGMENT_OFFSETS:
        candidates.append(_Candidate(
            RouteStrategy.MULTI_SEGMENT,
            "Multi-segment orthogonal path avoiding obstacles",
            lambda offset=offset: _multi_segment_path(start, end, offset),
        ))
    return candidates


def _route_orthogonal(
    start: Point,
    end: Point,
    obstacles: Sequence[Rect],
    options: RoutingOptions,
) -> _Route:
    candidates = _orthogonal_candidates(start, end)
    if not options.avoid_obstacles or not obstacles:
        first = candidates[0]
        return _Route(first.build(), first.strategy, first.reasoning)

    clear, last = _first_clear(candidates, obstacles, options.padding)
    if clear is not None:
        return clear
    return _Route(
        last.path,
        RouteStrategy.BLOCKED,
        "Multi-segment orthogonal path - obstacle avoidance failed, keeping last attempt",
    )


# ---------------------------------------------------------------------------
# Curved
# ---------------------------------------------------------------------------

def _curve_control_points(start: Point, end: Point, radius: float) -> tuple[Point, Point]:
    """Return the control point bent to the left of start->end and its mirror."""
    dx = end.x - start.x
    dy = end.y - start.y
    mid = Point(start.x + dx * 0.5, start.y + dy * 0.5)
    distance = math.hypot(dx, dy)
    if distance == 0:
        return mid, mid
    perp_x = -dy / distance * radius
    perp_y = dx / distance * radius
    return (
        Point(mid.x + perp_x, mid.y + perp_y),
        Point(mid.x - perp_x, mid.y - perp_y),
    )


def _route_curved(
    start: Point,
    end: Point,
    obstacles: Sequence[Rect],
    options: RoutingOptions,
) -> _Route:
    control, mirrored = _curve_control_points(start, end, options.curve_radius)
    segments = options.bezier_segments
    candidates = [
        _Candidate(RouteStrategy.DIRECT, "Smooth curved path with bezier control points",
                   lambda: bezier_points(start, control, end, segments)),
        _Candidate(RouteStrategy.MIRRORED, "Curved path (reverse direction) avoiding obstacles",
                   lambda: bezier_points(start, mirrored, end, segments)),
    ]
    if not options.avoid_obstacles or not obstacles:
        first = candidates[0]
        return _Route(first.build(), first.strategy, first.reasoning)

    clear, _ = _first_clear(candidates, obstacles, options.padding)
    if clear is not None:
        return clear

    orthogonal = _route_orthogonal(start, end, obstacles, options)
    # FALLBACK only when the orthogonal path is clear
    strategy = (
        RouteStrategy.BLOCKED
        if orthogonal.strategy is RouteStrategy.BLOCKED
        else RouteStrategy.FALLBACK
    )
    return _Route(
        orthogonal.path,
        strategy,
        f"Fallback to orthogonal path - curved path blocked by obstacles ({orthogonal.reasoning})",
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

_ROUTERS = {
    RoutingStyle.STRAIGHT: _route_straight,
    RoutingStyle.ORTHOGONAL: _route_orthogonal,
    RoutingStyle.CURVED: _route_curved,
}


def route_path(
    source: Rect,
    target: Rect,
    obstacles: Sequence[Rect] = (),
    style: Any = RoutingStyle.ORTHOGONAL,
    options: Optional[RoutingOptions] = None,
) -> RouteResult:
    """Route a connector from *source* to *target*.

    Args:
        source: Source node rectangle.
        target: Target node rectangle.
        obstacles: Other node rectangles. Entries equal to, or sharing a
            non-empty id with, the source or target are skipped.
        style: ``straight``, ``orthogonal`` or ``curved``; anything else
            routes orthogonally.
        options: Routing options; out-of-range values are clamped.

    Returns:
        A :class:`RouteResult`. Never raises for an unroutable request: the
        best available candidate is returned with ``strategy`` set to
        ``blocked`` and an explanatory ``reasoning``. A curve answered by
        a clear orthogonal path is reported as ``fallback``.
    """
    opts = (options or RoutingOptions()).clamped()
    routing_style = normalize_routing_style(style)
    anchors = resolve_connection_points(source, target)

    endpoint_ids = {i for i in (source.id, target.id) if i}
    relevant = [
        obs for obs in obstacles
        if obs != source and obs != target and not (obs.id and obs.id in endpoint_ids)
    ]

    route = _ROUTERS[routing_style](anchors.start, anchors.end, relevant, opts)
    logger.debug(
        "Routed %s connector %s -> %s via %s (%d points, %d obstacle(s))",
        routing_style.value, source.id or "?", target.id or "?",
        route.strategy.value, len(route.path), len(relevant),
    )
    return RouteResult(
        path_points=route.path,
        reasoning=route.reasoning,
        style=routing_style,
        start_point=anchors.start,
        end_point=anchors.end,
        strategy=route.strategy,
        obstacles_considered=len(relevant),
    )
