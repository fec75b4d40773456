"""
Input validation for diagram-geometry MCP tool parameters.

The geometry engine assumes well-formed rectangles and points; this module
is where malformed caller input (non-finite coordinates, non-positive
sizes, unknown node ids) is rejected with a clear message.
"""

from __future__ import annotations

import math
from typing import Any

from diagram_geometry.models import Edge, Point, Rect


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_non_empty_string(value: Any, field_name: str) -> str:
    """Ensure *value* is a non-empty string after stripping whitespace."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"'{field_name}' must be a non-empty string.")
    return value.strip()


def validate_number(
    value: Any,
    field_name: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    """Validate a finite numeric value and optional range."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    val = float(value)
    if not math.isfinite(val):
        raise ValidationError(f"'{field_name}' must be a finite number, got {val}.")
    if min_val is not None and val < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {val}."
        )
    if max_val is not None and val > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {val}."
        )
    return val


def validate_positive_number(value: Any, field_name: str) -> float:
    """Validate a finite number strictly greater than zero."""
    val = validate_number(value, field_name)
    if val <= 0:
        raise ValidationError(f"'{field_name}' must be > 0, got {val}.")
    return val


def validate_bool(value: Any, field_name: str) -> bool:
    """Ensure *value* is a boolean."""
    if not isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a boolean, got {type(value).__name__}."
        )
    return value


def validate_list(value: Any, field_name: str, *, min_length: int = 0) -> list:
    """Ensure *value* is a list with at least *min_length* items."""
    if not isinstance(value, list):
        raise ValidationError(
            f"'{field_name}' must be a list, got {type(value).__name__}."
        )
    if len(value) < min_length:
        raise ValidationError(
            f"'{field_name}' must have at least {min_length} item(s), got {len(value)}."
        )
    return value


def validate_dict(value: Any, field_name: str) -> dict:
    """Ensure *value* is a dict."""
    if not isinstance(value, dict):
        raise ValidationError(
            f"'{field_name}' must be a dict/object, got {type(value).__name__}."
        )
    return value


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

_LAYOUT_ACTIONS = {"HIERARCHICAL", "CENTER"}
_INSPECT_ACTIONS = {"CONNECTOR_POINTS", "BOUNDING_BOX", "OVERLAPS"}
_ELEMENT_TYPES = {"NODE", "CONNECTOR"}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate the action parameter for a tool."""
    if not isinstance(value, str) or not value.strip():
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"'{tool_name}' requires an 'action' parameter. Valid actions: {choices}."
        )
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return value.strip().lower()


def validate_element_type(value: Any) -> str:
    """Validate a bounding-box element type: 'node' or 'connector'."""
    if not isinstance(value, str) or value.strip().upper() not in _ELEMENT_TYPES:
        raise ValidationError(
            f"'element_type' must be one of [connector, node], got '{value}'."
        )
    return value.strip().lower()


# ---------------------------------------------------------------------------
# Geometry validators
# ---------------------------------------------------------------------------

def validate_point_dict(p: Any, field_name: str) -> Point:
    """Validate a ``{"x": .., "y": ..}`` dict and return a :class:`Point`."""
    validate_dict(p, field_name)
    for key in ("x", "y"):
        if key not in p:
            raise ValidationError(f"'{field_name}' missing required key '{key}'.")
    return Point(
        validate_number(p["x"], f"{field_name}.x"),
        validate_number(p["y"], f"{field_name}.y"),
    )


def validate_path_points(value: Any, field_name: str = "path_points") -> list[Point]:
    """Validate a connector path: a list of at least two finite points."""
    items = validate_list(value, field_name, min_length=2)
    return [validate_point_dict(p, f"{field_name}[{i}]") for i, p in enumerate(items)]


def validate_node_dict(n: Any, index: int) -> Rect:
    """Validate a single node dict from the nodes list and return its :class:`Rect`."""
    validate_dict(n, f"nodes[{index}]")
    for key in ("id", "x", "y", "width", "height"):
        if key not in n:
            raise ValidationError(f"Node at index {index} missing required key '{key}'.")
    node_id = validate_non_empty_string(n["id"], f"nodes[{index}].id")
    return Rect(
        x=validate_number(n["x"], f"nodes[{index}].x"),
        y=validate_number(n["y"], f"nodes[{index}].y"),
        width=validate_positive_number(n["width"], f"nodes[{index}].width"),
        height=validate_positive_number(n["height"], f"nodes[{index}].height"),
        id=node_id,
    )


def validate_nodes(value: Any, *, min_length: int = 0) -> list[Rect]:
    """Validate a list of node dicts; ids must be unique."""
    items = validate_list(value, "nodes", min_length=min_length)
    rects = [validate_node_dict(n, i) for i, n in enumerate(items)]
    seen: set[str] = set()
    for rect in rects:
        if rect.id in seen:
            raise ValidationError(f"Duplicate node id '{rect.id}' in 'nodes'.")
        seen.add(rect.id)
    return rects


def validate_edge_dict(e: Any, index: int, node_ids: set[str]) -> Edge:
    """Validate a single edge dict; both endpoints must be known node ids."""
    validate_dict(e, f"edges[{index}]")
    for key in ("source", "target"):
        if key not in e:
            raise ValidationError(f"Edge at index {index} missing required key '{key}'.")
    source = validate_non_empty_string(e["source"], f"edges[{index}].source")
    target = validate_non_empty_string(e["target"], f"edges[{index}].target")
    for endpoint in (source, target):
        if endpoint not in node_ids:
            raise ValidationError(f"Edge at index {index}: node '{endpoint}' not found.")
    label = e.get("label", "")
    if not isinstance(label, str):
        raise ValidationError(f"Edge at index {index}: 'label' must be a string.")
    return Edge(source, target, label)


def validate_canvas_size(width: Any, height: Any) -> tuple[float, float]:
    """Validate canvas dimensions (both strictly positive)."""
    return (
        validate_positive_number(width, "canvas_width"),
        validate_positive_number(height, "canvas_height"),
    )


def find_node(nodes: list[Rect], node_id: str, field_name: str) -> Rect:
    """Return the node with *node_id* or raise a :class:`ValidationError`."""
    for rect in nodes:
        if rect.id == node_id:
            return rect
    raise ValidationError(f"'{field_name}': node '{node_id}' not found.")
