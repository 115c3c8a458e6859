"""Unit tests for the ChartEditor."""

import pytest

from baganify.constraints import stack_violations
from baganify.editor import (
    ChartEditor,
    ChildLayoutError,
    EditorError,
    NotABoxError,
    ShapeNotFoundError,
)
from baganify.graph import build_graph
from baganify.models import (
    ArrowheadType,
    ChildLayout,
    ConnectorBinding,
    Direction,
    ElbowConnector,
    LayoutParams,
    Point,
    Rectangle,
    Side,
    Triangle,
    create_bound_connector,
)
from baganify.routing import is_jogged


def connector_between(editor, parent_id, child_id):
    for shape in editor.shapes:
        if (
            isinstance(shape, ElbowConnector)
            and shape.start_binding
            and shape.end_binding
            and shape.start_binding.shape_id == parent_id
            and shape.end_binding.shape_id == child_id
        ):
            return shape
    return None


class TestConstruction:
    """Tests for ChartEditor construction."""

    def test_empty(self, editor):
        """A new editor has no shapes and default spacing."""
        assert editor.shapes == []
        assert editor.layout_params == LayoutParams()

    def test_negative_canvas(self):
        """Negative canvas sizes are rejected."""
        with pytest.raises(ValueError):
            ChartEditor(canvas_width=-1)

    def test_initial_shapes_laid_out(self, two_level_tree):
        """Initial shapes are laid out and connectors resolved."""
        editor = ChartEditor(1200, 800, shapes=two_level_tree)
        root = editor.get_shape("R")
        assert (root.x, root.y) == (530, 330)
        assert editor.get_shape("R-C1").start_point == Point(600, 380)

    def test_shapes_is_a_copy(self, editor):
        """Changing the returned list does not touch the chart."""
        editor.add_box_at_level(0)
        editor.shapes.clear()
        assert len(editor.shapes) == 1


class TestAddBoxes:
    """Tests for adding boxes."""

    def test_add_shape(self, editor):
        """An added box is laid out at once."""
        box_id = editor.add_shape(Rectangle(id="a"))
        assert box_id == "a"
        box = editor.get_shape("a")
        assert (box.x, box.y) == (530, 375)

    def test_add_box_at_level_zero(self, editor):
        """A level 0 box is a new root."""
        box_id = editor.add_box_at_level(0)
        box = editor.get_shape(box_id)
        assert box.level == 0
        assert not any(isinstance(s, ElbowConnector) for s in editor.shapes)

    def test_add_box_at_level_attaches_to_last_parent(self, editor):
        """A level 1 box hangs under the last level 0 box."""
        first = editor.add_box_at_level(0)
        second = editor.add_box_at_level(0)
        child = editor.add_box_at_level(1)

        graph = build_graph(editor.shapes)
        assert graph.parent_of(child) in (first, second)
        assert editor.get_shape(child).level == 1

    def test_add_child(self, editor):
        """A child sits below its parent with a resolved tree connector."""
        root_id = editor.add_box_at_level(0)
        child_id = editor.add_child(root_id)

        root = editor.get_shape(root_id)
        child = editor.get_shape(child_id)
        assert (root.x, root.y) == (530, 330)
        assert (child.x, child.y) == (530, 420)
        assert child.level == 1

        conn = connector_between(editor, root_id, child_id)
        assert conn.end_binding.side == Side.TOP
        assert conn.start_point == Point(600, 380)
        assert conn.end_point == Point(600, 420)
        assert conn.start_direction == Direction.VERTICAL
        assert conn.start_arrowhead == ArrowheadType.NONE
        assert conn.end_arrowhead == ArrowheadType.NONE
        assert conn.stroke_width == 1.25

    def test_add_child_to_stack(self, editor):
        """Children of a stack are entered from the left, beside the spine."""
        root_id = editor.add_box_at_level(0)
        editor.toggle_child_layout(root_id)
        child_id = editor.add_child(root_id)

        root = editor.get_shape(root_id)
        child = editor.get_shape(child_id)
        conn = connector_between(editor, root_id, child_id)
        assert conn.end_binding.side == Side.LEFT
        assert child.x == root.x + root.width / 2 + 20
        assert conn.end_point == Point(child.x, child.y + child.height / 2)

    def test_levels_follow_depth(self, editor):
        """Levels are recomputed from tree depth."""
        a = editor.add_box_at_level(0)
        b = editor.add_child(a)
        c = editor.add_child(b)
        assert [editor.get_shape(i).level for i in (a, b, c)] == [0, 1, 2]

    def test_add_parent(self, editor):
        """A new parent becomes the root above the box."""
        box_id = editor.add_box_at_level(0)
        parent_id = editor.add_parent(box_id)

        graph = build_graph(editor.shapes)
        assert graph.roots == [parent_id]
        assert editor.get_shape(box_id).level == 1
        assert editor.get_shape(parent_id).level == 0

    def test_add_parent_replaces_old_parent(self, editor):
        """The newest parent wins."""
        old = editor.add_box_at_level(0)
        box_id = editor.add_child(old)
        new = editor.add_parent(box_id)

        graph = build_graph(editor.shapes)
        assert graph.parent_of(box_id) == new
        assert graph.children_of(old) == []

    def test_add_child_unknown(self, editor):
        """Unknown ids raise ShapeNotFoundError, which is also a KeyError."""
        with pytest.raises(ShapeNotFoundError):
            editor.add_child("ghost")
        with pytest.raises(KeyError):
            editor.add_child("ghost")

    def test_add_child_to_non_box(self, editor):
        """Only boxes can have children."""
        editor.add_shape(Triangle(id="t"))
        with pytest.raises(NotABoxError):
            editor.add_child("t")


class TestStackConstraint:
    """Tests for the no-grandchildren rule on stacks."""

    @pytest.fixture
    def chart(self, editor):
        """root -> A (vertical stack) -> B."""
        root = editor.add_box_at_level(0)
        a = editor.add_child(root)
        editor.toggle_child_layout(a)
        b = editor.add_child(a)
        return editor, root, a, b

    def test_stack_built(self, chart):
        editor, _, a, b = chart
        assert editor.get_shape(a).child_layout == ChildLayout.VERTICAL
        assert connector_between(editor, a, b).end_binding.side == Side.LEFT

    def test_grandchild_demotes_stack(self, chart):
        """Adding a child under B turns A into a horizontal row."""
        editor, _, a, b = chart
        editor.add_child(b)

        assert editor.get_shape(a).child_layout == ChildLayout.HORIZONTAL
        assert stack_violations(editor.shapes) == []
        assert connector_between(editor, a, b).end_binding.side == Side.TOP

    def test_toggle_refused_with_grandchildren(self, chart):
        """A box with grandchildren cannot become a stack."""
        editor, root, _, _ = chart
        with pytest.raises(ChildLayoutError):
            editor.toggle_child_layout(root)

    def test_update_refused_with_grandchildren(self, chart):
        editor, root, _, _ = chart
        with pytest.raises(ChildLayoutError):
            editor.update_shape(root, child_layout=ChildLayout.VERTICAL)

    def test_added_connector_demotes_stack(self, chart):
        """Binding a new box under B with add_shape turns A into a row."""
        editor, _, a, b = chart
        editor.add_shape(Rectangle(id="x"))
        editor.add_shape(create_bound_connector(b, Side.BOTTOM, "x", Side.TOP))

        assert editor.get_shape(a).child_layout == ChildLayout.HORIZONTAL
        assert stack_violations(editor.shapes) == []
        assert connector_between(editor, a, b).end_binding.side == Side.TOP

    def test_rebound_connector_demotes_stack(self, chart):
        """Moving a connector's start onto B turns A into a row."""
        editor, root, a, b = chart
        editor.add_shape(Rectangle(id="x"))
        editor.add_shape(create_bound_connector(root, Side.BOTTOM, "x", Side.TOP, id="link"))
        assert editor.get_shape(a).child_layout == ChildLayout.VERTICAL

        editor.update_shape("link", start_binding=ConnectorBinding(b, Side.BOTTOM))

        assert build_graph(editor.shapes).parent_of("x") == b
        assert editor.get_shape(a).child_layout == ChildLayout.HORIZONTAL
        assert stack_violations(editor.shapes) == []

    def test_errors_share_a_base(self):
        assert issubclass(ChildLayoutError, EditorError)
        assert issubclass(NotABoxError, EditorError)
        assert issubclass(ShapeNotFoundError, EditorError)


class TestToggleChildLayout:
    """Tests for toggle_child_layout."""

    def test_toggle_retargets_connectors(self, editor):
        """Toggling moves child connector ends between top and left."""
        root = editor.add_box_at_level(0)
        child = editor.add_child(root)

        assert editor.toggle_child_layout(root) == ChildLayout.VERTICAL
        assert connector_between(editor, root, child).end_binding.side == Side.LEFT

        assert editor.toggle_child_layout(root) == ChildLayout.HORIZONTAL
        assert connector_between(editor, root, child).end_binding.side == Side.TOP

    def test_update_shape_retargets_connectors(self, editor):
        """Setting child_layout through update_shape also moves connector ends."""
        root = editor.add_box_at_level(0)
        child = editor.add_child(root)

        editor.update_shape(root, child_layout=ChildLayout.VERTICAL)
        conn = connector_between(editor, root, child)
        assert conn.end_binding.side == Side.LEFT
        assert is_jogged(conn)

        editor.update_shape(root, child_layout=ChildLayout.HORIZONTAL)
        conn = connector_between(editor, root, child)
        assert conn.end_binding.side == Side.TOP
        assert not is_jogged(conn)


class TestUpdateAndRemove:
    """Tests for update_shape and remove_shape."""

    def test_update_label(self, editor):
        box_id = editor.add_box_at_level(0)
        updated = editor.update_shape(box_id, label="CEO")
        assert updated.label == "CEO"

    def test_update_size_relayouts(self, editor):
        """Resizing a box lays the chart out again."""
        box_id = editor.add_box_at_level(0)
        updated = editor.update_shape(box_id, width=300)
        assert updated.x == 450

    def test_update_id_rejected(self, editor):
        box_id = editor.add_box_at_level(0)
        with pytest.raises(ValueError):
            editor.update_shape(box_id, id="other")

    def test_remove_child(self, editor):
        """Removing a box removes its connectors."""
        root = editor.add_box_at_level(0)
        child = editor.add_child(root)
        editor.remove_shape(child)

        assert [s.id for s in editor.shapes] == [root]
        assert editor.get_shape(root).y == 375

    def test_remove_root_promotes_child(self, editor):
        """Children of a removed box become roots."""
        root = editor.add_box_at_level(0)
        child = editor.add_child(root)
        editor.remove_shape(root)

        assert editor.get_shape(child).level == 0
        assert build_graph(editor.shapes).roots == [child]

    def test_remove_unknown(self, editor):
        with pytest.raises(ShapeNotFoundError):
            editor.remove_shape("ghost")

    def test_clear(self, editor):
        editor.add_box_at_level(0)
        editor.clear()
        assert editor.shapes == []


class TestSettings:
    """Tests for layout parameters and canvas size."""

    def test_set_layout_params(self, editor):
        """New spacing is applied immediately."""
        root = editor.add_box_at_level(0)
        child = editor.add_child(root)

        params = editor.set_layout_params(level_height=100)

        assert params.level_height == 100
        assert params.shape_gap == 20
        assert editor.get_shape(child).y == editor.get_shape(root).y + 150

    def test_set_canvas_size(self, editor):
        """The forest is centred on the new canvas."""
        box_id = editor.add_box_at_level(0)
        editor.set_canvas_size(600, 400)
        box = editor.get_shape(box_id)
        assert (box.x, box.y) == (230, 175)

    def test_set_canvas_size_negative(self, editor):
        with pytest.raises(ValueError):
            editor.set_canvas_size(100, -5)

    def test_auto_layout_is_stable(self, editor):
        """Laying out an unchanged chart again changes nothing."""
        root = editor.add_box_at_level(0)
        editor.add_child(root)
        editor.add_child(root)
        before = editor.shapes
        editor.auto_layout()
        assert editor.shapes == before
