"""Tests for input validation."""

import math

import pytest

from diagram_geometry.models import Edge, Point, Rect
from diagram_geometry.validation import (
    ValidationError,
    _INSPECT_ACTIONS,
    _LAYOUT_ACTIONS,
    find_node,
    validate_action,
    validate_bool,
    validate_canvas_size,
    validate_dict,
    validate_edge_dict,
    validate_element_type,
    validate_list,
    validate_node_dict,
    validate_nodes,
    validate_non_empty_string,
    validate_number,
    validate_path_points,
    validate_point_dict,
    validate_positive_number,
)


# ===================================================================
# Primitive validators
# ===================================================================

class TestPrimitives:
    def test_non_empty_string(self) -> None:
        assert validate_non_empty_string("  abc ", "f") == "abc"
        for bad in ("", "   ", None, 5):
            with pytest.raises(ValidationError):
                validate_non_empty_string(bad, "f")

    def test_number(self) -> None:
        assert validate_number(3, "n") == 3.0
        assert validate_number(2.5, "n", min_val=0, max_val=5) == 2.5

    @pytest.mark.parametrize("bad", ["1", None, True, math.nan, math.inf, -math.inf])
    def test_number_rejects(self, bad) -> None:
        with pytest.raises(ValidationError):
            validate_number(bad, "n")

    def test_number_range(self) -> None:
        with pytest.raises(ValidationError, match=">= 0"):
            validate_number(-1, "n", min_val=0)
        with pytest.raises(ValidationError, match="<= 5"):
            validate_number(6, "n", max_val=5)

    def test_positive_number(self) -> None:
        assert validate_positive_number(0.1, "w") == 0.1
        with pytest.raises(ValidationError, match="> 0"):
            validate_positive_number(0, "w")

    def test_bool(self) -> None:
        assert validate_bool(False, "b") is False
        with pytest.raises(ValidationError):
            validate_bool("true", "b")

    def test_list_and_dict(self) -> None:
        assert validate_list([1], "l", min_length=1) == [1]
        with pytest.raises(ValidationError, match="at least 2"):
            validate_list([1], "l", min_length=2)
        with pytest.raises(ValidationError):
            validate_list("abc", "l")
        assert validate_dict({}, "d") == {}
        with pytest.raises(ValidationError):
            validate_dict([], "d")

    def test_error_message_attribute(self) -> None:
        with pytest.raises(ValidationError) as info:
            validate_bool(1, "flag")
        assert info.value.message == "'flag' must be a boolean, got int."


class TestActions:
    def test_action_normalized(self) -> None:
        assert validate_action(" Hierarchical ", "layout", _LAYOUT_ACTIONS) == "hierarchical"
        assert validate_action("OVERLAPS", "inspect", _INSPECT_ACTIONS) == "overlaps"

    def test_unknown_action_lists_choices(self) -> None:
        with pytest.raises(ValidationError, match="center, hierarchical"):
            validate_action("grid", "layout", _LAYOUT_ACTIONS)

    def test_missing_action(self) -> None:
        with pytest.raises(ValidationError, match="requires an 'action'"):
            validate_action("", "inspect", _INSPECT_ACTIONS)

    def test_element_type(self) -> None:
        assert validate_element_type("Connector") == "connector"
        with pytest.raises(ValidationError):
            validate_element_type("edge")


# ===================================================================
# Geometry validators
# ===================================================================

class TestNodes:
    def test_node(self) -> None:
        rect = validate_node_dict({"id": "n1", "x": 1, "y": 2, "width": 3, "height": 4}, 0)
        assert rect == Rect(1, 2, 3, 4, id="n1")

    def test_missing_key(self) -> None:
        with pytest.raises(ValidationError, match="missing required key 'height'"):
            validate_node_dict({"id": "n1", "x": 1, "y": 2, "width": 3}, 0)

    @pytest.mark.parametrize("key,value", [
        ("width", 0),
        ("height", -1),
        ("x", math.nan),
        ("y", "2"),
        ("id", ""),
    ])
    def test_bad_values(self, key: str, value) -> None:
        node = {"id": "n1", "x": 1, "y": 2, "width": 3, "height": 4}
        node[key] = value
        with pytest.raises(ValidationError):
            validate_node_dict(node, 0)

    def test_node_must_be_dict(self) -> None:
        with pytest.raises(ValidationError) as info:
            validate_nodes([["n1", 0, 0, 1, 1]])
        assert info.value.message == "'nodes[0]' must be a dict/object, got list."

    def test_duplicate_ids(self) -> None:
        node = {"id": "n1", "x": 0, "y": 0, "width": 1, "height": 1}
        with pytest.raises(ValidationError, match="Duplicate node id 'n1'"):
            validate_nodes([node, dict(node)])

    def test_min_length(self) -> None:
        with pytest.raises(ValidationError):
            validate_nodes([], min_length=1)

    def test_find_node(self) -> None:
        rects = [Rect(0, 0, 1, 1, id="a")]
        assert find_node(rects, "a", "source_id") is rects[0]
        with pytest.raises(ValidationError, match="node 'b' not found"):
            find_node(rects, "b", "source_id")


class TestEdgesAndPoints:
    def test_edge(self) -> None:
        edge = validate_edge_dict({"source": "a", "target": "b", "label": "yes"}, 0, {"a", "b"})
        assert edge == Edge("a", "b", "yes")

    def test_edge_unknown_node(self) -> None:
        with pytest.raises(ValidationError, match="node 'c' not found"):
            validate_edge_dict({"source": "a", "target": "c"}, 1, {"a", "b"})

    def test_edge_and_point_must_be_dicts(self) -> None:
        with pytest.raises(ValidationError, match=r"'edges\[2\]' must be a dict/object, got str"):
            validate_edge_dict("a->b", 2, {"a", "b"})
        with pytest.raises(ValidationError, match=r"'path_points\[0\]' must be a dict/object"):
            validate_path_points([(0, 0), (1, 1)])

    def test_edge_bad_label(self) -> None:
        with pytest.raises(ValidationError):
            validate_edge_dict({"source": "a", "target": "b", "label": 3}, 0, {"a", "b"})

    def test_point(self) -> None:
        assert validate_point_dict({"x": 1, "y": 2.5}, "p") == Point(1.0, 2.5)
        with pytest.raises(ValidationError, match="missing required key 'y'"):
            validate_point_dict({"x": 1}, "p")

    def test_path_points(self) -> None:
        path = validate_path_points([{"x": 0, "y": 0}, {"x": 1, "y": 1}])
        assert path == [Point(0, 0), Point(1, 1)]
        with pytest.raises(ValidationError, match="at least 2"):
            validate_path_points([{"x": 0, "y": 0}])
        with pytest.raises(ValidationError, match=r"path_points\[1\]\.x"):
            validate_path_points([{"x": 0, "y": 0}, {"x": math.inf, "y": 1}])

    def test_canvas_size(self) -> None:
        assert validate_canvas_size(10, 7.5) == (10.0, 7.5)
        with pytest.raises(ValidationError, match="canvas_height"):
            validate_canvas_size(10, 0)
