"""
Diagram Geometry MCP Server - flowchart layout and connector routing via
Model Context Protocol.

Exposes 3 stateless tools. Each call carries the node rectangles it works
on ({id, x, y, width, height}, units: inches); nothing is stored between
calls and no input is modified.

Tools:
  1. layout   - hierarchical placement of nodes, centering on a canvas
  2. route    - connector path suggestion: straight, orthogonal, curved
                with obstacle avoidance
  3. inspect  - read-only: connector anchor points, bounding boxes, overlaps
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from diagram_geometry.layout import (
    bounding_box_of,
    center_layout,
    find_overlapping_nodes,
    resolve_connection_points,
)
from diagram_geometry.layout_engine import compute_hierarchical_layout
from diagram_geometry.models import Connector, Element, Rect
from diagram_geometry.routing import RoutingOptions, normalize_routing_style, route_path
from diagram_geometry.validation import (
    ValidationError,
    find_node,
    validate_action,
    validate_bool,
    validate_canvas_size,
    validate_edge_dict,
    validate_element_type,
    validate_list,
    validate_nodes,
    validate_non_empty_string,
    validate_number,
    validate_path_points,
    _INSPECT_ACTIONS,
    _LAYOUT_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging - suppress routine FastMCP INFO messages that clients show
# as warnings (they go to stderr).
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("diagram-geometry")

# Coordinates returned to callers are rounded to this many decimals
OUTPUT_PRECISION = 3

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "diagram-geometry",
    instructions=(
        "MCP server for flowchart geometry: automatic hierarchical layout,\n"
        "connector path routing around other nodes, and bounding-box checks.\n\n"
        "=== 3 TOOLS - use the 'action' parameter where present ===\n\n"
        "1. layout(action, nodes, edges, ...) - hierarchical, center.\n"
        "2. route(source_id, target_id, nodes, routing_style, ...) - suggest\n"
        "   a connector path (straight, orthogonal, curved).\n"
        "3. inspect(action, nodes, ...) - connector_points, bounding_box,\n"
        "   overlaps.\n\n"
        "=== RULES ===\n"
        "- Every call is stateless: pass ALL nodes as {id, x, y, width, height}.\n"
        "- Coordinates are in inches; (x, y) is the top-left corner.\n"
        "- Default canvas is a 10 x 7.5 in slide.\n"
        "- route never fails for crowded diagrams: read 'strategy' and\n"
        "  'reasoning' to see whether obstacles were actually avoided.\n"
    ),
)


def _parse_nodes(nodes: list[dict[str, Any]] | None, *, min_length: int = 0) -> list[Rect]:
    return validate_nodes(nodes if nodes is not None else [], min_length=min_length)


# ===================================================================
# TOOL 1: layout - positioning
# ===================================================================

@mcp.tool()
def layout(
    action: str,
    nodes: list[dict[str, Any]] | None = None,
    edges: list[dict[str, Any]] | None = None,
    canvas_width: float = 10.0,
    canvas_height: float = 7.5,
) -> str:
    """Compute node positions.

    Actions:
      hierarchical - Place nodes in rows by depth from the root nodes.
                     Params: nodes, edges (list of {source, target, label?}),
                     canvas_width, canvas_height.
                     Returns new {x, y, width, height} per node id, the level
                     of every node, nodes that could not be leveled because
                     of cycles, and the anchor points of every edge.
      center       - Move all nodes together so they are centered on the
                     canvas. Params: nodes, canvas_width, canvas_height.

    Args:
        action: One of: hierarchical, center.
        nodes: List of {id, x, y, width, height}.
        edges: List of {source, target, label?} using node ids.
        canvas_width: Canvas width in inches.
        canvas_height: Canvas height in inches.

    Returns:
        JSON with the computed positions. Inputs are not modified.
    """
    try:
        action = validate_action(action, "layout", _LAYOUT_ACTIONS)
        rects = _parse_nodes(nodes)
        width, height = validate_canvas_size(canvas_width, canvas_height)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "hierarchical":
        try:
            raw_edges = validate_list(edges if edges is not None else [], "edges")
            node_ids = {r.id for r in rects}
            edge_list = [validate_edge_dict(e, i, node_ids) for i, e in enumerate(raw_edges)]
        except ValidationError as exc:
            return f"Error: {exc.message}"
        result = compute_hierarchical_layout(rects, edge_list, width, height)
        return json.dumps(result.to_dict(OUTPUT_PRECISION), indent=2)

    elif action == "center":
        centered = center_layout(rects, width, height)
        return json.dumps(
            {r.id: {k: v for k, v in r.to_dict(OUTPUT_PRECISION).items() if k != "id"}
             for r in centered},
            indent=2,
        )

    else:
        return f"Error: unknown layout action '{action}'. Use: hierarchical, center."


# ===================================================================
# TOOL 2: route - connector paths
# ===================================================================

@mcp.tool()
def route(
    source_id: str,
    target_id: str,
    nodes: list[dict[str, Any]] | None = None,
    routing_style: str = "orthogonal",
    avoid_obstacles: bool = True,
    curve_radius: float = 0.2,
    min_segment_length: float = 0.3,
    padding: float = 0.1,
) -> str:
    """Suggest path points for a connector between two nodes.

    All nodes other than the source and target are obstacles.

    Styles:
      straight   - direct line, bent once around the first blocking node.
      orthogonal - L-shaped path, the other L, then multi-segment detours.
      curved     - quadratic bezier (9 points), its mirror image, then
                   falls back to orthogonal.
    Unknown styles route orthogonally.

    Args:
        source_id: Id of the source node.
        target_id: Id of the target node.
        nodes: List of {id, x, y, width, height}, source and target included.
        routing_style: straight, orthogonal or curved.
        avoid_obstacles: Route around the other nodes.
        curve_radius: Curve bulge in inches (clamped to 0.1..1.0).
        min_segment_length: Minimum orthogonal segment length (floor 0.1).
        padding: Clearance around obstacles in inches (clamped to 0.05..0.5).

    Returns:
        JSON with pathPoints (rounded to 3 decimals) and routingInfo
        (style, strategy, reasoning, start/end points, options used).
    """
    try:
        source_id = validate_non_empty_string(source_id, "source_id")
        target_id = validate_non_empty_string(target_id, "target_id")
        rects = _parse_nodes(nodes, min_length=1)
        source = find_node(rects, source_id, "source_id")
        target = find_node(rects, target_id, "target_id")
        options = RoutingOptions.create(
            avoid_obstacles=validate_bool(avoid_obstacles, "avoid_obstacles"),
            curve_radius=validate_number(curve_radius, "curve_radius"),
            min_segment_length=validate_number(min_segment_length, "min_segment_length"),
            padding=validate_number(padding, "padding"),
        )
    except ValidationError as exc:
        return f"Error: {exc.message}"

    style = normalize_routing_style(routing_style)
    if style.value != str(routing_style).strip().lower():
        logger.warning("Unknown routing style '%s', using %s", routing_style, style.value)

    result = route_path(source, target, rects, style, options)
    data = result.to_dict(OUTPUT_PRECISION)
    payload = {
        "pathPoints": data["pathPoints"],
        "routingInfo": {
            "style": data["style"],
            "strategy": data["strategy"],
            "reasoning": data["reasoning"],
            "startPoint": data["startPoint"],
            "endPoint": data["endPoint"],
            "obstaclesConsidered": data["obstaclesConsidered"],
            "optionsUsed": options.to_dict(),
        },
        "usage": (
            "Store pathPoints as the connector's custom path; pass them back as "
            "inspect(action='bounding_box', element_type='connector', path_points=...)."
        ),
    }
    return json.dumps(payload, indent=2)


# ===================================================================
# TOOL 3: inspect - read-only queries
# ===================================================================

@mcp.tool()
def inspect(
    action: str,
    nodes: list[dict[str, Any]] | None = None,
    element_type: str = "node",
    element_id: str = "",
    source_id: str = "",
    target_id: str = "",
    path_points: list[dict[str, float]] | None = None,
) -> str:
    """Read-only geometry queries.

    Actions:
      connector_points - Anchor points where a connector leaves the source
                         and enters the target. Params: nodes, source_id,
                         target_id.
      bounding_box     - Bounding box of a node (element_type='node',
                         element_id) or a connector (element_type='connector',
                         source_id, target_id, optional path_points).
      overlaps         - Pairs of nodes whose boxes overlap (touching
                         counts). Params: nodes.

    Args:
        action: One of: connector_points, bounding_box, overlaps.
        nodes: List of {id, x, y, width, height}.
        element_type: node or connector (bounding_box only).
        element_id: Node id (bounding_box of a node).
        source_id: Connector source node id.
        target_id: Connector target node id.
        path_points: Custom connector path, at least 2 {x, y} points.

    Returns:
        JSON data or formatted text.
    """
    try:
        action = validate_action(action, "inspect", _INSPECT_ACTIONS)
        rects = _parse_nodes(nodes)
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "connector_points":
        try:
            source = find_node(rects, validate_non_empty_string(source_id, "source_id"), "source_id")
            target = find_node(rects, validate_non_empty_string(target_id, "target_id"), "target_id")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        anchors = resolve_connection_points(source, target)
        return json.dumps({
            "sourceNodeId": source.id,
            "targetNodeId": target.id,
            **anchors.to_dict(),
        }, indent=2)

    elif action == "bounding_box":
        try:
            kind = validate_element_type(element_type)
            element: Element
            if kind == "node":
                element = find_node(
                    rects, validate_non_empty_string(element_id, "element_id"), "element_id",
                )
            else:
                source = find_node(rects, validate_non_empty_string(source_id, "source_id"), "source_id")
                target = find_node(rects, validate_non_empty_string(target_id, "target_id"), "target_id")
                path = validate_path_points(path_points) if path_points else None
                element = Connector(source, target, tuple(path) if path else None)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return json.dumps(bounding_box_of(element).to_dict(), indent=2)

    elif action == "overlaps":
        overlaps = find_overlapping_nodes(rects)
        if not overlaps:
            return "No overlaps found. Diagram is clean!"
        return json.dumps([{"node_a": a, "node_b": b} for a, b in overlaps], indent=2)

    else:
        return f"Error: unknown inspect action '{action}'. Use: connector_points, bounding_box, overlaps."


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
