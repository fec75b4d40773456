"""
Value types shared by the geometry, layout and routing modules.

All coordinates are real-valued and unit-agnostic (the surrounding system
uses inches). Every type here is a transient value: the engine builds them
per call and never mutates the caller's instances.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional, Union


# ---------------------------------------------------------------------------
# Points and boxes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Point:
    """A 2-D coordinate."""
    x: float
    y: float

    def to_dict(self, precision: Optional[int] = None) -> dict[str, float]:
        if precision is None:
            return {"x": self.x, "y": self.y}
        return {"x": round(self.x, precision), "y": round(self.y, precision)}


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box given by its extremes (degenerate boxes allowed)."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def empty(cls) -> BoundingBox:
        return cls(0.0, 0.0, 0.0, 0.0)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point(self.min_x + self.width / 2, self.min_y + self.height / 2)

    def expanded(self, padding: float) -> BoundingBox:
        """Return a copy grown by *padding* on every side."""
        return BoundingBox(
            self.min_x - padding,
            self.min_y - padding,
            self.max_x + padding,
            self.max_y + padding,
        )


@dataclass(frozen=True)
class Rect:
    """A node rectangle: top-left position plus size.

    ``id`` is optional and only used to tell a connector's own endpoints
    apart from obstacles and to key layout results.
    """
    x: float
    y: float
    width: float
    height: float
    id: str = ""

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def cx(self) -> float:
        return self.x + self.width / 2

    @property
    def cy(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> Point:
        return Point(self.cx, self.cy)

    @property
    def top_left(self) -> Point:
        return Point(self.x, self.y)

    @property
    def bottom_right(self) -> Point:
        return Point(self.right, self.bottom)

    def bounds(self) -> BoundingBox:
        return BoundingBox(self.x, self.y, self.right, self.bottom)

    def moved_to(self, x: float, y: float) -> Rect:
        """Return a copy at a new position; size and id are kept."""
        return replace(self, x=x, y=y)

    def to_dict(self, precision: Optional[int] = None) -> dict[str, Any]:
        x, y = self.x, self.y
        if precision is not None:
            x, y = round(x, precision), round(y, precision)
        result: dict[str, Any] = {"x": x, "y": y, "width": self.width, "height": self.height}
        if self.id:
            result = {"id": self.id, **result}
        return result


# ---------------------------------------------------------------------------
# Graph / connector values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Edge:
    """Directed edge used for level assignment only."""
    source: str
    target: str
    label: str = ""


@dataclass(frozen=True)
class AnchorPair:
    """Where a connector attaches to its source and target rectangles."""
    start: Point
    end: Point

    def to_dict(self, precision: Optional[int] = None) -> dict[str, Any]:
        return {
            "startPoint": self.start.to_dict(precision),
            "endPoint": self.end.to_dict(precision),
        }


@dataclass(frozen=True)
class Connector:
    """A connection between two rectangles, optionally with a custom path."""
    source: Rect
    target: Rect
    path: Optional[tuple[Point, ...]] = None

    @property
    def has_custom_path(self) -> bool:
        return bool(self.path)


@dataclass(frozen=True)
class ElementBounds:
    """Result of a bounding-box query on a node or connector."""
    top_left: Point
    bottom_right: Point
    center: Point
    width: float
    height: float

    @classmethod
    def from_box(cls, box: BoundingBox) -> ElementBounds:
        return cls(
            top_left=Point(box.min_x, box.min_y),
            bottom_right=Point(box.max_x, box.max_y),
            center=box.center,
            width=box.width,
            height=box.height,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "topLeft": self.top_left.to_dict(),
            "bottomRight": self.bottom_right.to_dict(),
            "center": self.center.to_dict(),
            "width": self.width,
            "height": self.height,
        }


Element = Union[Rect, Connector]
