"""
Connector routing module for org-chart layout.

Handles orthogonal routing of connectors between boxes:
- Endpoint resolution from bindings (where a connector meets a box)
- Elbow path generation (standard elbow and jogged spine)
- Arrowhead orientation and stroke geometry
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Tuple

from .models import (
    ArrowheadType,
    ConnectorBinding,
    Direction,
    ElbowConnector,
    Point,
    Shape,
    Side,
    connection_point,
    index_shapes,
)

logger = logging.getLogger(__name__)

# How far a jogged spine drops below the parent before running sideways
VERTICAL_DROP = 20.0

# Distance between the spine and the side of the child it enters
SPINE_OFFSET = 20.0

# Arrowhead outlines, pointing along +x with the tip at the origin
ARROW_STROKE = [Point(-10.0, -5.0), Point(0.0, 0.0), Point(-10.0, 5.0)]
BAR_STROKE = [Point(0.0, -6.0), Point(0.0, 6.0)]

# (cos, sin) for the quantized rotations; y grows downwards
_ROTATIONS = {0: (1, 0), 90: (0, 1), 180: (-1, 0), 270: (0, -1)}


def direction_for_side(side: Side) -> Direction:
    """Connectors leaving a top or bottom side start vertically."""
    if side in (Side.TOP, Side.BOTTOM):
        return Direction.VERTICAL
    return Direction.HORIZONTAL


def resolve_connector(connector: ElbowConnector, shapes_by_id: Mapping[str, Shape]) -> ElbowConnector:
    """
    Recompute a connector's endpoints and start direction from its bindings.

    A binding whose shape is missing leaves that end where it is.

    Args:
        connector: Connector to resolve.
        shapes_by_id: Current shapes by id.

    Returns:
        An updated copy of the connector.
    """
    start_point = connector.start_point
    end_point = connector.end_point
    start_direction = connector.start_direction

    if connector.start_binding:
        bound = shapes_by_id.get(connector.start_binding.shape_id)
        if bound is not None:
            start_point = connection_point(bound, connector.start_binding.side)
            start_direction = direction_for_side(connector.start_binding.side)
        else:
            logger.debug("Connector %s start bound to missing shape", connector.id)

    if connector.end_binding:
        bound = shapes_by_id.get(connector.end_binding.shape_id)
        if bound is not None:
            end_point = connection_point(bound, connector.end_binding.side)
        else:
            logger.debug("Connector %s end bound to missing shape", connector.id)

    if not connector.start_binding:
        dx = abs(end_point.x - start_point.x)
        dy = abs(end_point.y - start_point.y)
        start_direction = Direction.VERTICAL if dy > dx else Direction.HORIZONTAL

    return replace(
        connector,
        start_point=start_point,
        end_point=end_point,
        start_direction=start_direction,
        x=min(start_point.x, end_point.x),
        y=min(start_point.y, end_point.y),
    )


def resolve_connectors(shapes: Iterable[Shape]) -> List[Shape]:
    """
    Resolve every connector in a shape collection.

    Non-connector shapes are returned unchanged, in their original order.
    """
    shapes = list(shapes)
    shapes_by_id = index_shapes(shapes)
    return [
        resolve_connector(shape, shapes_by_id) if isinstance(shape, ElbowConnector) else shape
        for shape in shapes
    ]


# Alias under the name editor code calls it by
update_all_connectors = resolve_connectors


def is_jogged(connector: ElbowConnector) -> bool:
    """A vertical start entering the side of its child draws as a spine."""
    return (
        connector.start_direction == Direction.VERTICAL
        and connector.end_binding is not None
        and connector.end_binding.side in (Side.LEFT, Side.RIGHT)
    )


def connector_path(connector: ElbowConnector) -> List[Point]:
    """
    Return the waypoints of a connector's orthogonal path.

    Standard elbows bend twice through the midpoint row (vertical start) or
    midpoint column (horizontal start). Jogged spines drop a fixed distance
    below the start, run to a spine beside the child, drop to the child's row
    and run in to the child.
    """
    start = connector.start_point
    end = connector.end_point

    if is_jogged(connector):
        if connector.end_binding.side == Side.LEFT:
            spine_x = end.x - SPINE_OFFSET
        else:
            spine_x = end.x + SPINE_OFFSET
        jog_y = start.y + VERTICAL_DROP
        return [
            start,
            Point(start.x, jog_y),
            Point(spine_x, jog_y),
            Point(spine_x, end.y),
            end,
        ]

    if connector.start_direction == Direction.VERTICAL:
        mid_y = (start.y + end.y) / 2
        return [start, Point(start.x, mid_y), Point(end.x, mid_y), end]

    mid_x = (start.x + end.x) / 2
    return [start, Point(mid_x, start.y), Point(mid_x, end.y), end]


def _heading(from_point: Point, to_point: Point) -> int:
    """Quantized rotation of travel from one point to the next."""
    dx = to_point.x - from_point.x
    dy = to_point.y - from_point.y
    if abs(dx) >= abs(dy):
        return 0 if dx > 0 else 180
    return 90 if dy > 0 else 270


def _segments(path: List[Point]) -> List[Tuple[Point, Point]]:
    return [(a, b) for a, b in zip(path, path[1:]) if a != b]


def arrowhead_rotation(connector: ElbowConnector, end: str = "end") -> int:
    """
    Return the rotation in degrees (0, 90, 180 or 270) of an arrowhead.

    End arrowheads point along the direction the path arrives from; start
    arrowheads point away from the direction the path leaves in.

    Args:
        connector: A resolved connector.
        end: "start" or "end".
    """
    if end not in ("start", "end"):
        raise ValueError("end must be 'start' or 'end'")

    segments = _segments(connector_path(connector))
    if not segments:
        # Zero-length connector: keep the axis of the start direction
        horizontal = connector.start_direction == Direction.HORIZONTAL
        if end == "start":
            return 0 if horizontal else 90
        return 180 if horizontal else 270

    if end == "start":
        first, second = segments[0]
        return (_heading(first, second) + 180) % 360
    first, second = segments[-1]
    return _heading(first, second)


def arrowhead_strokes(kind: ArrowheadType, tip: Point, rotation: int) -> List[List[Point]]:
    """
    Return the polylines that draw an arrowhead.

    "arrow" is a two-stroke chevron, "bar" a tick across the line, "none"
    draws nothing.
    """
    kind = ArrowheadType(kind)
    if kind == ArrowheadType.ARROW:
        outline = ARROW_STROKE
    elif kind == ArrowheadType.BAR:
        outline = BAR_STROKE
    else:
        return []

    cos, sin = _ROTATIONS[rotation % 360]
    return [
        [
            Point(tip.x + p.x * cos - p.y * sin, tip.y + p.x * sin + p.y * cos)
            for p in outline
        ]
    ]


def connector_arrowheads(connector: ElbowConnector) -> List[List[Point]]:
    """Return the arrowhead polylines for both ends of a connector."""
    strokes: List[List[Point]] = []
    strokes.extend(
        arrowhead_strokes(
            connector.start_arrowhead,
            connector.start_point,
            arrowhead_rotation(connector, "start"),
        )
    )
    strokes.extend(
        arrowhead_strokes(
            connector.end_arrowhead,
            connector.end_point,
            arrowhead_rotation(connector, "end"),
        )
    )
    return strokes


def rebind_connectors(shapes: Iterable[Shape], id_map: Dict[str, str]) -> List[Shape]:
    """
    Point connector bindings at new shape ids.

    Used when a group of shapes is duplicated: bindings to a copied shape
    follow the copy, bindings to anything else are kept.
    """
    result: List[Shape] = []
    for shape in shapes:
        if not isinstance(shape, ElbowConnector):
            result.append(shape)
            continue

        start_binding = shape.start_binding
        end_binding = shape.end_binding
        if start_binding and start_binding.shape_id in id_map:
            start_binding = ConnectorBinding(id_map[start_binding.shape_id], start_binding.side)
        if end_binding and end_binding.shape_id in id_map:
            end_binding = ConnectorBinding(id_map[end_binding.shape_id], end_binding.side)

        result.append(replace(shape, start_binding=start_binding, end_binding=end_binding))
    return result
