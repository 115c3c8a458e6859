"""
Graph module for org-chart layout.

Derives the box hierarchy purely from connector bindings. A connector adds a
parent -> child edge only when both of its ends are bound to boxes that exist
in the shape collection; free-floating and half-bound connectors never take
part in the hierarchy.

Uses networkx for:
- Graph representation
- Root detection (boxes without an incoming edge)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import networkx as nx

from .models import Box, ElbowConnector, Shape, is_box

logger = logging.getLogger(__name__)


@dataclass
class ShapeGraph:
    """
    Hierarchy derived from the current connector set.

    Attributes:
        graph: Directed parent -> child graph over box ids.
        boxes: Boxes by id, in input order.
        roots: Ids of the trees' roots, in input order.
    """

    graph: nx.DiGraph = field(default_factory=nx.DiGraph)
    boxes: Dict[str, Box] = field(default_factory=dict)
    roots: List[str] = field(default_factory=list)

    @property
    def parent_map(self) -> Dict[str, str]:
        """Child id -> parent id."""
        return {child: parent for parent, child in self.graph.edges()}

    @property
    def children_map(self) -> Dict[str, List[str]]:
        """Parent id -> child ids, for boxes that have children."""
        return {
            node: list(self.graph.successors(node))
            for node in self.graph.nodes()
            if self.graph.out_degree(node) > 0
        }

    def parent_of(self, box_id: str) -> Optional[str]:
        if box_id not in self.graph:
            return None
        for parent in self.graph.predecessors(box_id):
            return parent
        return None

    def children_of(self, box_id: str) -> List[str]:
        if box_id not in self.graph:
            return []
        return list(self.graph.successors(box_id))

    def ancestors_of(self, box_id: str) -> List[str]:
        """Return the parent chain of a box, nearest first. Stops on cycles."""
        chain: List[str] = []
        seen = {box_id}
        parent = self.parent_of(box_id)
        while parent is not None and parent not in seen:
            chain.append(parent)
            seen.add(parent)
            parent = self.parent_of(parent)
        return chain


def build_graph(shapes: Iterable[Shape]) -> ShapeGraph:
    """
    Build the box hierarchy from a shape collection.

    Connectors are processed in input order. A child bound by more than one
    connector keeps only the last-processed parent.

    If every box has a parent (a fully cyclic graph) the first box is used as
    a synthetic root so that layout always has somewhere to start.

    Args:
        shapes: Full shape collection; non-box, non-connector shapes are ignored.

    Returns:
        ShapeGraph with the derived edges and roots.
    """
    shapes = list(shapes)
    result = ShapeGraph()

    for shape in shapes:
        if is_box(shape):
            result.boxes[shape.id] = shape
            result.graph.add_node(shape.id)

    for shape in shapes:
        if not isinstance(shape, ElbowConnector):
            continue
        if not (shape.start_binding and shape.end_binding):
            continue

        parent_id = shape.start_binding.shape_id
        child_id = shape.end_binding.shape_id
        if parent_id not in result.boxes or child_id not in result.boxes:
            logger.debug("Connector %s is not bound to two boxes; skipped", shape.id)
            continue

        previous = list(result.graph.predecessors(child_id))
        result.graph.remove_edges_from((p, child_id) for p in previous if p != parent_id)
        result.graph.add_edge(parent_id, child_id)

    result.roots = [
        box_id for box_id in result.boxes if result.graph.in_degree(box_id) == 0
    ]
    if not result.roots and result.boxes:
        synthetic = next(iter(result.boxes))
        logger.debug("No root box found; using %s as a synthetic root", synthetic)
        result.roots = [synthetic]

    return result


def has_grandchildren(box_id: str, shapes: Iterable[Shape]) -> bool:
    """Return True if any child of the box has children of its own."""
    graph = build_graph(shapes)
    return any(graph.children_of(child) for child in graph.children_of(box_id))
