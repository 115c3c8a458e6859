"""
Structural constraints on the box hierarchy.

A box whose children are stacked vertically may not have grandchildren:
a stack is drawn as a single spine and cannot show a deeper level.
"""

import logging
from dataclasses import replace
from typing import Iterable, List

from .graph import build_graph
from .models import ChildLayout, ElbowConnector, Shape, Side, is_box

logger = logging.getLogger(__name__)


def child_end_side(child_layout: ChildLayout) -> Side:
    """Side of a child that its parent's connector should enter."""
    if child_layout == ChildLayout.VERTICAL:
        return Side.LEFT
    return Side.TOP


def retarget_child_connectors(
    parent_id: str, child_layout: ChildLayout, shapes: Iterable[Shape]
) -> List[Shape]:
    """Point the end of every connector leaving ``parent_id`` at the side
    matching ``child_layout``."""
    side = child_end_side(child_layout)
    result: List[Shape] = []
    for shape in shapes:
        if (
            isinstance(shape, ElbowConnector)
            and shape.start_binding is not None
            and shape.start_binding.shape_id == parent_id
            and shape.end_binding is not None
        ):
            shape = replace(shape, end_binding=replace(shape.end_binding, side=side))
        result.append(shape)
    return result


def enforce_constraints(changed_box_id: str, shapes: Iterable[Shape]) -> List[Shape]:
    """
    Demote vertical-stack ancestors that now have grandchildren.

    Walks from the box that gained depth up through its ancestors. Every
    vertical-stack box on the way with grandchildren is switched to
    horizontal, and its child connectors are re-targeted to the children's
    top side.

    Args:
        changed_box_id: Box whose subtree just got deeper (the new child or
            the box it was added under).
        shapes: Full shape collection.

    Returns:
        A new shape list; unchanged shapes are passed through.
    """
    shapes = list(shapes)
    graph = build_graph(shapes)
    if changed_box_id not in graph.boxes:
        return shapes

    demoted: List[str] = []
    for box_id in [changed_box_id] + graph.ancestors_of(changed_box_id):
        box = graph.boxes[box_id]
        if box.child_layout != ChildLayout.VERTICAL:
            continue
        if any(graph.children_of(child) for child in graph.children_of(box_id)):
            demoted.append(box_id)

    if not demoted:
        return shapes

    logger.debug("Demoting vertical stacks with grandchildren: %s", demoted)
    result = [
        replace(shape, child_layout=ChildLayout.HORIZONTAL)
        if is_box(shape) and shape.id in demoted
        else shape
        for shape in shapes
    ]
    for box_id in demoted:
        result = retarget_child_connectors(box_id, ChildLayout.HORIZONTAL, result)
    return result


# Alias under the name editor code calls it by
enforce_horizontal_parents = enforce_constraints


def stack_violations(shapes: Iterable[Shape]) -> List[str]:
    """Return ids of vertical-stack boxes that have grandchildren."""
    graph = build_graph(shapes)
    return [
        box_id
        for box_id, box in graph.boxes.items()
        if box.child_layout == ChildLayout.VERTICAL
        and any(graph.children_of(child) for child in graph.children_of(box_id))
    ]


def can_stack_children(box_id: str, shapes: Iterable[Shape]) -> bool:
    """Return True if the box could switch to a vertical stack."""
    graph = build_graph(shapes)
    if box_id not in graph.boxes:
        return False
    return not any(graph.children_of(child) for child in graph.children_of(box_id))
