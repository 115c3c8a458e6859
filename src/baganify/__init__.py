"""
Baganify - Org Chart Layout

A Python library that lays out org-chart boxes as a tidy forest and routes
the orthogonal connectors between them.

Example:
    >>> from baganify import Rectangle, create_bound_connector, layout_shapes
    >>> from baganify import resolve_connectors
    >>> shapes = [
    ...     Rectangle(id="ceo"),
    ...     Rectangle(id="cto"),
    ...     create_bound_connector("ceo", "bottom", "cto", "top"),
    ... ]
    >>> shapes = resolve_connectors(layout_shapes(shapes, 1200, 800))

Editor Example:
    >>> from baganify import ChartEditor
    >>> editor = ChartEditor()
    >>> root_id = editor.add_box_at_level(0)
    >>> child_id = editor.add_child(root_id)
"""

from .constraints import (
    can_stack_children,
    enforce_constraints,
    enforce_horizontal_parents,
    retarget_child_connectors,
    stack_violations,
)
from .editor import (
    ChartEditor,
    ChildLayoutError,
    EditorError,
    NotABoxError,
    ShapeNotFoundError,
)
from .graph import ShapeGraph, build_graph, has_grandchildren
from .layout import SubtreeSize, TreeLayout, layout_forest, layout_shapes
from .models import (
    DEFAULT_LAYOUT_PARAMS,
    ArrowheadType,
    ChildLayout,
    ConnectorBinding,
    Direction,
    ElbowConnector,
    Ellipse,
    LayoutParams,
    Point,
    Rectangle,
    Side,
    Text,
    Triangle,
    connection_point,
    create_bound_connector,
    create_elbow_connector,
    create_rectangle,
    is_box,
)
from .png_renderer import PNGRenderer, render_to_png
from .routing import (
    arrowhead_rotation,
    arrowhead_strokes,
    connector_arrowheads,
    connector_path,
    rebind_connectors,
    resolve_connectors,
    update_all_connectors,
)

__version__ = "0.1.0"

__all__ = [
    # Main API
    "layout_shapes",
    "resolve_connectors",
    "has_grandchildren",
    "enforce_constraints",
    # Editor
    "ChartEditor",
    "EditorError",
    "ShapeNotFoundError",
    "NotABoxError",
    "ChildLayoutError",
    # Models
    "Point",
    "Side",
    "ChildLayout",
    "Direction",
    "ArrowheadType",
    "ConnectorBinding",
    "Rectangle",
    "Ellipse",
    "Triangle",
    "Text",
    "ElbowConnector",
    "LayoutParams",
    "DEFAULT_LAYOUT_PARAMS",
    "connection_point",
    "create_rectangle",
    "create_bound_connector",
    "create_elbow_connector",
    "is_box",
    # Graph and layout
    "ShapeGraph",
    "build_graph",
    "TreeLayout",
    "SubtreeSize",
    "layout_forest",
    # Routing and constraints
    "connector_path",
    "arrowhead_rotation",
    "arrowhead_strokes",
    "connector_arrowheads",
    "rebind_connectors",
    "update_all_connectors",
    "enforce_horizontal_parents",
    "retarget_child_connectors",
    "stack_violations",
    "can_stack_children",
    # Rendering
    "PNGRenderer",
    "render_to_png",
]
