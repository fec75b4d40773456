"""Tests for the geometry value types."""

import dataclasses

import pytest

from diagram_geometry.models import (
    AnchorPair,
    BoundingBox,
    Connector,
    ElementBounds,
    Point,
    Rect,
)


def test_point_to_dict() -> None:
    assert Point(1.23456, 2).to_dict() == {"x": 1.23456, "y": 2}
    assert Point(1.23456, 2.00049).to_dict(precision=3) == {"x": 1.235, "y": 2.0}


def test_point_is_immutable() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        Point(0, 0).x = 1  # type: ignore[misc]


class TestRect:
    def test_edges_and_center(self) -> None:
        r = Rect(1, 2, 4, 2)
        assert (r.right, r.bottom) == (5, 4)
        assert r.center == Point(3, 3)
        assert r.top_left == Point(1, 2)
        assert r.bottom_right == Point(5, 4)

    def test_bounds(self) -> None:
        assert Rect(1, 2, 4, 2).bounds() == BoundingBox(1, 2, 5, 4)

    def test_moved_to_returns_copy(self) -> None:
        r = Rect(1, 2, 4, 2, id="n1")
        moved = r.moved_to(7, 8)
        assert moved == Rect(7, 8, 4, 2, id="n1")
        assert r.x == 1

    def test_to_dict(self) -> None:
        assert Rect(1, 2, 3, 4).to_dict() == {"x": 1, "y": 2, "width": 3, "height": 4}
        assert Rect(1.00049, 2, 3, 4, id="n").to_dict(precision=3) == {
            "id": "n", "x": 1.0, "y": 2, "width": 3, "height": 4,
        }


class TestBoundingBox:
    def test_dimensions(self) -> None:
        box = BoundingBox(1, 1, 4, 3)
        assert box.width == 3
        assert box.height == 2
        assert box.center == Point(2.5, 2)

    def test_empty(self) -> None:
        box = BoundingBox.empty()
        assert (box.width, box.height) == (0, 0)

    def test_expanded(self) -> None:
        assert BoundingBox(1, 1, 2, 2).expanded(0.5) == BoundingBox(0.5, 0.5, 2.5, 2.5)


def test_anchor_pair_to_dict() -> None:
    pair = AnchorPair(Point(2, 1.5), Point(5, 1.5))
    assert pair.to_dict() == {"startPoint": {"x": 2, "y": 1.5}, "endPoint": {"x": 5, "y": 1.5}}


def test_connector_custom_path() -> None:
    a, b = Rect(0, 0, 1, 1), Rect(3, 0, 1, 1)
    assert not Connector(a, b).has_custom_path
    assert Connector(a, b, (Point(1, 0.5), Point(3, 0.5))).has_custom_path


def test_element_bounds_from_box() -> None:
    bounds = ElementBounds.from_box(BoundingBox(2, 1.5, 5, 1.5))
    assert bounds.top_left == Point(2, 1.5)
    assert bounds.bottom_right == Point(5, 1.5)
    assert bounds.center == Point(3.5, 1.5)
    assert (bounds.width, bounds.height) == (3, 0)
