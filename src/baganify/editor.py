"""
Chart editor state container.

ChartEditor owns the single authoritative shape collection of a chart and
funnels every mutation through the layout engine: after each topology or
parameter change the boxes are laid out again and every connector is
re-resolved, so connector geometry is never stale.

Example:
    >>> editor = ChartEditor(canvas_width=1200, canvas_height=800)
    >>> root_id = editor.add_box_at_level(0)
    >>> child_id = editor.add_child(root_id)
    >>> editor.get_shape(child_id).level
    1
"""

import logging
from dataclasses import replace
from typing import List, Optional

from .constraints import enforce_constraints, retarget_child_connectors
from .graph import has_grandchildren
from .layout import layout_shapes
from .models import (
    CONNECTOR_STROKE_WIDTH,
    ArrowheadType,
    Box,
    ChildLayout,
    Direction,
    ElbowConnector,
    LayoutParams,
    Shape,
    Side,
    create_bound_connector,
    create_rectangle,
    is_box,
)
from .routing import resolve_connectors

logger = logging.getLogger(__name__)


class EditorError(Exception):
    """Base class for editor errors."""


class ShapeNotFoundError(EditorError, KeyError):
    """Raised when a shape id is not in the chart."""


class NotABoxError(EditorError):
    """Raised when a box-only operation is given another kind of shape."""


class ChildLayoutError(EditorError):
    """Raised when a box with grandchildren is switched to a vertical stack."""


def _tree_connector(parent_id: str, child_id: str, end_side: Side) -> ElbowConnector:
    return create_bound_connector(
        parent_id,
        Side.BOTTOM,
        child_id,
        end_side,
        start_direction=Direction.VERTICAL,
        start_arrowhead=ArrowheadType.NONE,
        end_arrowhead=ArrowheadType.NONE,
        stroke_width=CONNECTOR_STROKE_WIDTH,
    )


class ChartEditor:
    """
    Editable org chart.

    Attributes:
        canvas_width: Width the forest is centred on.
        canvas_height: Height the forest is centred on.
        layout_params: Spacing used for every layout pass.
    """

    def __init__(
        self,
        canvas_width: float = 1200,
        canvas_height: float = 800,
        layout_params: Optional[LayoutParams] = None,
        shapes: Optional[List[Shape]] = None,
    ):
        """
        Initialize the editor.

        Args:
            canvas_width: Canvas width, must not be negative.
            canvas_height: Canvas height, must not be negative.
            layout_params: Spacing parameters (defaults to LayoutParams()).
            shapes: Initial shapes; laid out immediately when given.
        """
        if canvas_width < 0 or canvas_height < 0:
            raise ValueError("canvas size must not be negative")

        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.layout_params = layout_params or LayoutParams()
        self._shapes: List[Shape] = list(shapes or [])
        if self._shapes:
            self.auto_layout()

    @property
    def shapes(self) -> List[Shape]:
        """Current shapes in z-order."""
        return list(self._shapes)

    def get_shape(self, shape_id: str) -> Shape:
        for shape in self._shapes:
            if shape.id == shape_id:
                return shape
        raise ShapeNotFoundError(shape_id)

    def _get_box(self, box_id: str) -> Box:
        shape = self.get_shape(box_id)
        if not is_box(shape):
            raise NotABoxError(f"{box_id} is a {type(shape).__name__}, not a box")
        return shape

    def _relayout(self, shapes: List[Shape]) -> None:
        laid_out = layout_shapes(
            shapes, self.canvas_width, self.canvas_height, self.layout_params
        )
        self._shapes = resolve_connectors(laid_out)

    def auto_layout(self) -> None:
        """Lay out the chart again with the current parameters."""
        self._relayout(self._shapes)

    @staticmethod
    def _enforce_for_connector(shape: Shape, shapes: List[Shape]) -> List[Shape]:
        # A connector bound at both ends may give its start box a deeper subtree
        if (
            isinstance(shape, ElbowConnector)
            and shape.start_binding is not None
            and shape.end_binding is not None
        ):
            return enforce_constraints(shape.start_binding.shape_id, shapes)
        return shapes

    def add_shape(self, shape: Shape) -> str:
        """Add an existing shape to the chart and return its id."""
        shapes = self._enforce_for_connector(shape, self._shapes + [shape])
        self._relayout(shapes)
        return shape.id

    def add_box_at_level(self, level: int) -> str:
        """
        Add a new box at the given level.

        The box is attached under the last box found one level up, if any.

        Returns:
            Id of the new box.
        """
        box = create_rectangle(level=level)
        parents = [s for s in self._shapes if is_box(s) and s.level == level - 1]

        shapes = self._shapes + [box]
        if parents:
            shapes.append(_tree_connector(parents[-1].id, box.id, Side.TOP))

        shapes = enforce_constraints(box.id, shapes)
        self._relayout(shapes)
        return box.id

    def add_child(self, box_id: str) -> str:
        """
        Add a new child under a box.

        Ancestors that were vertical stacks and now have grandchildren are
        switched to horizontal.

        Returns:
            Id of the new child.
        """
        parent = self._get_box(box_id)
        child = create_rectangle(level=parent.level + 1)
        end_side = Side.LEFT if parent.child_layout == ChildLayout.VERTICAL else Side.TOP

        shapes = self._shapes + [child, _tree_connector(parent.id, child.id, end_side)]
        shapes = enforce_constraints(child.id, shapes)
        self._relayout(shapes)
        logger.debug("Added child %s under %s", child.id, parent.id)
        return child.id

    def add_parent(self, box_id: str) -> str:
        """
        Add a new parent above a box.

        If the box already had a parent the new one replaces it.

        Returns:
            Id of the new parent.
        """
        box = self._get_box(box_id)
        parent = create_rectangle(level=box.level - 1)

        shapes = self._shapes + [parent, _tree_connector(parent.id, box.id, Side.TOP)]
        shapes = enforce_constraints(box.id, shapes)
        self._relayout(shapes)
        return parent.id

    def toggle_child_layout(self, box_id: str) -> ChildLayout:
        """
        Switch a box between a horizontal row and a vertical stack of children.

        Raises:
            ChildLayoutError: If the box would become a stack with grandchildren.

        Returns:
            The box's new child layout.
        """
        box = self._get_box(box_id)
        if box.child_layout == ChildLayout.VERTICAL:
            new_layout = ChildLayout.HORIZONTAL
        else:
            new_layout = ChildLayout.VERTICAL

        if new_layout == ChildLayout.VERTICAL and has_grandchildren(box_id, self._shapes):
            raise ChildLayoutError(f"{box_id} has grandchildren and cannot stack its children")

        shapes = [
            replace(shape, child_layout=new_layout) if shape.id == box_id else shape
            for shape in self._shapes
        ]
        shapes = retarget_child_connectors(box_id, new_layout, shapes)
        self._relayout(shapes)
        return new_layout

    def update_shape(self, shape_id: str, **changes) -> Shape:
        """
        Change fields of a shape and lay the chart out again.

        A changed ``child_layout`` re-targets the box's child connectors, and
        a rebound connector demotes stacks that gain grandchildren.

        Raises:
            ValueError: If the change would alter the shape's id.
            ChildLayoutError: If a box with grandchildren is set to stack.
        """
        if "id" in changes and changes["id"] != shape_id:
            raise ValueError("shape ids cannot be changed")

        shape = self.get_shape(shape_id)
        if (
            is_box(shape)
            and changes.get("child_layout") == ChildLayout.VERTICAL
            and has_grandchildren(shape_id, self._shapes)
        ):
            raise ChildLayoutError(f"{shape_id} has grandchildren and cannot stack its children")

        updated = replace(shape, **changes)
        shapes = [updated if s.id == shape_id else s for s in self._shapes]
        if is_box(updated) and "child_layout" in changes:
            shapes = retarget_child_connectors(shape_id, updated.child_layout, shapes)
        shapes = self._enforce_for_connector(updated, shapes)
        self._relayout(shapes)
        return self.get_shape(shape_id)

    def remove_shape(self, shape_id: str) -> None:
        """Remove a shape together with every connector bound to it."""
        self.get_shape(shape_id)

        def bound_to_removed(shape: Shape) -> bool:
            if not isinstance(shape, ElbowConnector):
                return False
            return any(
                binding is not None and binding.shape_id == shape_id
                for binding in (shape.start_binding, shape.end_binding)
            )

        remaining = [
            s for s in self._shapes if s.id != shape_id and not bound_to_removed(s)
        ]
        self._relayout(remaining)

    def clear(self) -> None:
        self._shapes = []

    def set_layout_params(self, **changes) -> LayoutParams:
        """Update some layout parameters and lay the chart out again."""
        self.layout_params = self.layout_params.updated(**changes)
        self.auto_layout()
        return self.layout_params

    def set_canvas_size(self, width: float, height: float) -> None:
        if width < 0 or height < 0:
            raise ValueError("canvas size must not be negative")
        self.canvas_width = width
        self.canvas_height = height
        self.auto_layout()
