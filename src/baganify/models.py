"""
Data models for org-chart layout.

This module contains the shape family the layout engine works on, the
connector binding types, and the layout parameters. Shapes are frozen
dataclasses: the engine never mutates a shape in place, it returns updated
copies built with ``dataclasses.replace``.

Classes:
    Point: An (x, y) coordinate.
    ConnectorBinding: Anchors a connector end to a side of a shape.
    Rectangle, Ellipse: Boxes that take part in the hierarchy.
    Triangle, Text: Decorative shapes passed through by layout.
    ElbowConnector: A directed orthogonal line, optionally bound at each end.
    LayoutParams: Spacing parameters for tree layout.
"""

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple, Union


class Side(str, Enum):
    """Where on a shape a connector end is anchored."""

    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"
    CENTER = "center"


class ChildLayout(str, Enum):
    """How a box arranges its children."""

    HORIZONTAL = "horizontal"  # classic tree row
    VERTICAL = "vertical"  # stacked list hanging off a spine


class Direction(str, Enum):
    """Axis of the first segment of an elbow connector."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class ArrowheadType(str, Enum):
    """Decoration drawn at a connector end."""

    NONE = "none"
    ARROW = "arrow"
    BAR = "bar"


DEFAULT_FILL = "#ffffff"
DEFAULT_STROKE = "#000000"
DEFAULT_STROKE_WIDTH = 1.0
CONNECTOR_STROKE_WIDTH = 1.25


def create_id() -> str:
    """Return a short random shape identifier."""
    return uuid.uuid4().hex[:9]


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class ConnectorBinding:
    """
    Anchor of one connector end.

    Attributes:
        shape_id: Identifier of the bound shape.
        side: Side of the shape the end attaches to.
    """

    shape_id: str
    side: Side = Side.CENTER


@dataclass(frozen=True)
class Rectangle:
    """
    A rectangular box.

    Attributes:
        level: Depth in the chart, recomputed by every layout pass.
        child_layout: Arrangement of this box's children.
        stacked: Draw a second outline behind the box (several people/items).
    """

    id: str = field(default_factory=create_id)
    x: float = 0.0
    y: float = 0.0
    width: float = 140.0
    height: float = 50.0
    fill: str = DEFAULT_FILL
    stroke: str = DEFAULT_STROKE
    stroke_width: float = DEFAULT_STROKE_WIDTH
    rotation: float = 0.0
    corner_radius: float = 0.0
    label: str = ""
    label_font_size: int = 12
    label_color: str = "#000000"
    level: int = 0
    child_layout: ChildLayout = ChildLayout.HORIZONTAL
    stacked: bool = False


@dataclass(frozen=True)
class Ellipse:
    """An elliptical box. Lays out exactly like a Rectangle."""

    id: str = field(default_factory=create_id)
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 80.0
    fill: str = DEFAULT_FILL
    stroke: str = DEFAULT_STROKE
    stroke_width: float = DEFAULT_STROKE_WIDTH
    rotation: float = 0.0
    level: int = 0
    child_layout: ChildLayout = ChildLayout.HORIZONTAL
    stacked: bool = False


@dataclass(frozen=True)
class Triangle:
    id: str = field(default_factory=create_id)
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 90.0
    fill: str = DEFAULT_FILL
    stroke: str = DEFAULT_STROKE
    stroke_width: float = DEFAULT_STROKE_WIDTH
    rotation: float = 0.0


@dataclass(frozen=True)
class Text:
    id: str = field(default_factory=create_id)
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 30.0
    text: str = "Text"
    font_size: int = 20
    font_family: str = "sans-serif"
    text_align: str = "center"
    # Text is painted with its fill colour
    fill: str = DEFAULT_STROKE
    stroke: str = "none"
    stroke_width: float = 0.0
    rotation: float = 0.0


@dataclass(frozen=True)
class ElbowConnector:
    """
    A directed orthogonal connector.

    While an end is bound, its point is owned by the connector resolver and
    is recomputed from the bound shape on every layout pass.

    Attributes:
        x: Left edge of the connector's bounding box (hit testing).
        y: Top edge of the connector's bounding box (hit testing).
        start_direction: Axis of the first path segment.
        start_binding: Anchor of the start end, or None when free-floating.
        end_binding: Anchor of the end end, or None when free-floating.
    """

    id: str = field(default_factory=create_id)
    x: float = 0.0
    y: float = 0.0
    start_point: Point = Point(0.0, 0.0)
    end_point: Point = Point(0.0, 0.0)
    start_direction: Direction = Direction.HORIZONTAL
    start_binding: Optional[ConnectorBinding] = None
    end_binding: Optional[ConnectorBinding] = None
    start_arrowhead: ArrowheadType = ArrowheadType.NONE
    end_arrowhead: ArrowheadType = ArrowheadType.ARROW
    fill: str = "none"
    stroke: str = DEFAULT_STROKE
    stroke_width: float = DEFAULT_STROKE_WIDTH
    rotation: float = 0.0


Box = Union[Rectangle, Ellipse]
Shape = Union[Rectangle, Ellipse, Triangle, Text, ElbowConnector]

BOX_TYPES = (Rectangle, Ellipse)


def is_box(shape: Shape) -> bool:
    """Return True for shapes that take part in the hierarchy."""
    return isinstance(shape, BOX_TYPES)


@dataclass(frozen=True)
class LayoutParams:
    """
    Spacing used by tree layout. Owned by the caller.

    Attributes:
        level_height: Vertical gap between a box and its children's top edge.
        shape_gap: Gap between sibling subtrees and between forest trees.
        vertical_indent: Offset of a stacked child's left edge from the spine.
    """

    level_height: float = 40.0
    shape_gap: float = 20.0
    vertical_indent: float = 20.0

    def updated(self, **changes) -> "LayoutParams":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


DEFAULT_LAYOUT_PARAMS = LayoutParams()


# Factories


def create_rectangle(x: float = 0.0, y: float = 0.0, label: str = "", level: int = 0) -> Rectangle:
    return Rectangle(x=x, y=y, label=label, level=level)


def create_ellipse(x: float = 0.0, y: float = 0.0) -> Ellipse:
    return Ellipse(x=x, y=y)


def create_triangle(x: float = 0.0, y: float = 0.0) -> Triangle:
    return Triangle(x=x, y=y)


def create_text(x: float = 0.0, y: float = 0.0, text: str = "Text") -> Text:
    return Text(x=x, y=y, text=text)


def create_elbow_connector(
    start_x: float, start_y: float, end_x: float, end_y: float
) -> ElbowConnector:
    """Create a free-floating connector between two points."""
    return ElbowConnector(
        x=min(start_x, end_x),
        y=min(start_y, end_y),
        start_point=Point(start_x, start_y),
        end_point=Point(end_x, end_y),
    )


def create_bound_connector(
    start_shape_id: str,
    start_side: Side,
    end_shape_id: str,
    end_side: Side,
    start_point: Point = Point(0.0, 0.0),
    end_point: Point = Point(0.0, 0.0),
    **kwargs,
) -> ElbowConnector:
    """Create a connector bound at both ends. Extra fields go through kwargs."""
    return ElbowConnector(
        x=min(start_point.x, end_point.x),
        y=min(start_point.y, end_point.y),
        start_point=start_point,
        end_point=end_point,
        start_binding=ConnectorBinding(start_shape_id, Side(start_side)),
        end_binding=ConnectorBinding(end_shape_id, Side(end_side)),
        **kwargs,
    )


# Geometry


def _shape_size(shape: Shape) -> Tuple[float, float]:
    if isinstance(shape, ElbowConnector):
        return 0.0, 0.0
    return shape.width, shape.height


def shape_center(shape: Shape) -> Point:
    """Return the visual centre of a shape."""
    if isinstance(shape, ElbowConnector):
        return Point(
            (shape.start_point.x + shape.end_point.x) / 2,
            (shape.start_point.y + shape.end_point.y) / 2,
        )
    width, height = _shape_size(shape)
    return Point(shape.x + width / 2, shape.y + height / 2)


def connection_point(shape: Shape, side: Side) -> Point:
    """
    Return the point on a shape where a connector bound to ``side`` attaches.

    Side midpoints for boxed shapes; a connector target answers its own
    (x, y) regardless of side.
    """
    if isinstance(shape, ElbowConnector):
        return Point(shape.x, shape.y)

    width, height = _shape_size(shape)
    cx = shape.x + width / 2
    cy = shape.y + height / 2

    if side == Side.TOP:
        return Point(cx, shape.y)
    if side == Side.RIGHT:
        return Point(shape.x + width, cy)
    if side == Side.BOTTOM:
        return Point(cx, shape.y + height)
    if side == Side.LEFT:
        return Point(shape.x, cy)
    return Point(cx, cy)


def shape_bounds(shape: Shape) -> Tuple[float, float, float, float]:
    """Return (x, y, width, height) of a shape for hit testing."""
    if isinstance(shape, ElbowConnector):
        min_x = min(shape.start_point.x, shape.end_point.x)
        min_y = min(shape.start_point.y, shape.end_point.y)
        max_x = max(shape.start_point.x, shape.end_point.x)
        max_y = max(shape.start_point.y, shape.end_point.y)
        return min_x, min_y, max_x - min_x, max_y - min_y
    width, height = _shape_size(shape)
    return shape.x, shape.y, width, height


def bounds_intersect(rect: Tuple[float, float, float, float], shape: Shape) -> bool:
    """Check whether an (x, y, width, height) rectangle touches a shape."""
    rx, ry, rw, rh = rect
    sx, sy, sw, sh = shape_bounds(shape)
    return not (rx > sx + sw or rx + rw < sx or ry > sy + sh or ry + rh < sy)


def best_connection_sides(from_shape: Shape, to_shape: Shape) -> Tuple[Side, Side]:
    """Pick facing sides for connecting two shapes along their dominant axis."""
    start = shape_center(from_shape)
    end = shape_center(to_shape)
    dx = end.x - start.x
    dy = end.y - start.y

    if abs(dx) > abs(dy):
        if dx > 0:
            return Side.RIGHT, Side.LEFT
        return Side.LEFT, Side.RIGHT
    if dy > 0:
        return Side.BOTTOM, Side.TOP
    return Side.TOP, Side.BOTTOM


def shapes_bounding_box(
    shapes: Iterable[Shape], padding: float = 20.0
) -> Tuple[float, float, float, float]:
    """
    Return the padded (x, y, width, height) box around all shapes.

    An empty collection yields a default 800x600 frame at the origin.
    """
    shapes = list(shapes)
    if not shapes:
        return 0.0, 0.0, 800.0, 600.0

    min_x = min_y = float("inf")
    max_x = max_y = float("-inf")
    for shape in shapes:
        x, y, width, height = shape_bounds(shape)
        min_x = min(min_x, x)
        min_y = min(min_y, y)
        max_x = max(max_x, x + width)
        max_y = max(max_y, y + height)

    return (
        min_x - padding,
        min_y - padding,
        max_x - min_x + padding * 2,
        max_y - min_y + padding * 2,
    )


def index_shapes(shapes: Iterable[Shape]) -> Dict[str, Shape]:
    """Map shape ids to shapes; later duplicates win."""
    return {shape.id: shape for shape in shapes}
