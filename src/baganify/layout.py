"""
Tree layout for org charts.

Two passes over every tree of the forest:

1. ``measure`` (post-order) computes the width and height each subtree needs.
2. ``place`` (pre-order) centres each box in the width allotted to its
   subtree and hands out space to its children.

Children are laid out either as a horizontal row under the parent, or as a
vertical stack hanging off a spine through the parent's horizontal centre.
Trees are then composed side by side and the whole forest is centred on the
canvas. Layout never raises: cycles are cut where a box would be revisited,
and boxes no root reaches are passed through unchanged.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, List, Tuple

from .graph import ShapeGraph, build_graph
from .models import DEFAULT_LAYOUT_PARAMS, Box, ChildLayout, LayoutParams, Shape

logger = logging.getLogger(__name__)

# Smallest distance between the canvas top and the forest
TOP_MARGIN = 40.0


@dataclass(frozen=True)
class SubtreeSize:
    """Space needed by a box and all of its descendants."""

    width: float
    height: float


class TreeLayout:
    """
    Lays out the boxes of a ShapeGraph.

    Attributes:
        graph: The hierarchy to lay out.
        params: Spacing parameters.
        sizes: Subtree sizes filled in by ``measure``.
    """

    def __init__(self, graph: ShapeGraph, params: LayoutParams = DEFAULT_LAYOUT_PARAMS):
        self.graph = graph
        self.params = params
        self.sizes: Dict[str, SubtreeSize] = {}

    def _children(self, box_id: str, path: FrozenSet[str]) -> List[str]:
        # A child already on the path back to the root would close a cycle
        return [child for child in self.graph.children_of(box_id) if child not in path]

    def measure(self, box_id: str, path: FrozenSet[str] = frozenset()) -> SubtreeSize:
        """
        Compute the size of the subtree rooted at ``box_id``.

        Args:
            box_id: Root of the subtree.
            path: Ids of the boxes between the tree root and this box.

        Returns:
            The subtree's size, also recorded in ``self.sizes``.
        """
        box = self.graph.boxes[box_id]
        path = path | {box_id}
        children = self._children(box_id, path)

        if not children:
            size = SubtreeSize(box.width, box.height)
            self.sizes[box_id] = size
            return size

        child_sizes = [self.measure(child, path) for child in children]
        gaps = (len(child_sizes) - 1) * self.params.shape_gap

        if box.child_layout == ChildLayout.VERTICAL:
            # Twice the larger half-extent keeps the spine centred even though
            # the stack only grows to the right of it.
            right_extent = self.params.vertical_indent + max(s.width for s in child_sizes)
            width = 2 * max(box.width / 2, right_extent)
            height = (
                box.height
                + self.params.level_height / 2
                + sum(s.height for s in child_sizes)
                + gaps
            )
        else:
            width = max(box.width, sum(s.width for s in child_sizes) + gaps)
            height = box.height + self.params.level_height + max(s.height for s in child_sizes)

        size = SubtreeSize(width, height)
        self.sizes[box_id] = size
        return size

    def place(
        self,
        box_id: str,
        x: float,
        y: float,
        available_width: float,
        placed: FrozenSet[str] = frozenset(),
        depth: int = 0,
    ) -> List[Box]:
        """
        Position a subtree inside the horizontal band [x, x + available_width).

        Args:
            box_id: Root of the subtree to place.
            x: Left edge of the band.
            y: Top edge for the subtree root.
            available_width: Width allotted to the subtree.
            placed: Ids already positioned; they are never placed twice.
            depth: Tree depth of ``box_id``, stored as the box's level.

        Returns:
            The positioned boxes in pre-order.
        """
        if box_id in placed:
            return []

        box = self.graph.boxes[box_id]
        box_x = x + (available_width - box.width) / 2
        positioned = replace(box, x=box_x, y=y, level=depth)
        result = [positioned]
        placed = placed | {box_id}

        children = [child for child in self.graph.children_of(box_id) if child not in placed]
        if not children:
            return result

        child_y = y + box.height + self.params.level_height

        if box.child_layout == ChildLayout.VERTICAL:
            spine_x = box_x + box.width / 2
            for child in children:
                child_box = self.graph.boxes[child]
                size = self._size(child)
                # Shift the band so the child's own left edge lands on the indent
                band_x = spine_x + self.params.vertical_indent - (size.width - child_box.width) / 2
                placed_boxes = self.place(child, band_x, child_y, size.width, placed, depth + 1)
                result.extend(placed_boxes)
                placed = placed | {b.id for b in placed_boxes}
                child_y += size.height + self.params.shape_gap
            return result

        sizes = [self._size(child) for child in children]
        total_width = sum(s.width for s in sizes) + (len(sizes) - 1) * self.params.shape_gap
        child_x = x
        if total_width < available_width:
            child_x += (available_width - total_width) / 2

        for child, size in zip(children, sizes):
            placed_boxes = self.place(child, child_x, child_y, size.width, placed, depth + 1)
            result.extend(placed_boxes)
            placed = placed | {b.id for b in placed_boxes}
            child_x += size.width + self.params.shape_gap

        return result

    def _size(self, box_id: str) -> SubtreeSize:
        size = self.sizes.get(box_id)
        if size is None:
            box = self.graph.boxes[box_id]
            size = SubtreeSize(box.width, box.height)
        return size


def order_roots(graph: ShapeGraph) -> List[str]:
    """Order roots by current x, then id, so relayout keeps trees in place."""
    return sorted(graph.roots, key=lambda root: (graph.boxes[root].x, root))


def layout_forest(
    graph: ShapeGraph,
    canvas_width: float,
    canvas_height: float,
    params: LayoutParams = DEFAULT_LAYOUT_PARAMS,
) -> Tuple[Dict[str, Box], SubtreeSize]:
    """
    Lay out every tree of the graph side by side, centred on the canvas.

    Returns:
        Positioned boxes by id (unreached boxes are absent) and the size of
        the whole forest block.
    """
    if not graph.boxes:
        return {}, SubtreeSize(0.0, 0.0)

    engine = TreeLayout(graph, params)
    roots = order_roots(graph)
    tree_sizes = [engine.measure(root) for root in roots]

    total_width = sum(s.width for s in tree_sizes) + (len(tree_sizes) - 1) * params.shape_gap
    max_height = max(s.height for s in tree_sizes)

    start_x = (canvas_width - total_width) / 2
    start_y = max(TOP_MARGIN, (canvas_height - max_height) / 2)

    positioned: Dict[str, Box] = {}
    current_x = start_x
    for root, size in zip(roots, tree_sizes):
        placed = frozenset(positioned)
        for box in engine.place(root, current_x, start_y, size.width, placed):
            positioned[box.id] = box
        current_x += size.width + params.shape_gap

    return positioned, SubtreeSize(total_width, max_height)


def layout_shapes(
    shapes: Iterable[Shape],
    canvas_width: float,
    canvas_height: float,
    params: LayoutParams = DEFAULT_LAYOUT_PARAMS,
) -> List[Shape]:
    """
    Recompute the position and level of every reachable box.

    Connectors and other shapes pass through untouched; resolve connector
    geometry separately with ``routing.resolve_connectors``.

    Args:
        shapes: Full shape collection.
        canvas_width: Width of the canvas the forest is centred on.
        canvas_height: Height of the canvas the forest is centred on.
        params: Spacing parameters.

    Returns:
        A new list in the same order as ``shapes``.
    """
    shapes = list(shapes)
    graph = build_graph(shapes)
    if not graph.boxes:
        return shapes

    positioned, _ = layout_forest(graph, canvas_width, canvas_height, params)

    unreached = [box_id for box_id in graph.boxes if box_id not in positioned]
    if unreached:
        logger.debug("Boxes not reachable from any root left in place: %s", unreached)

    return [positioned.get(shape.id, shape) for shape in shapes]
