"""Pytest configuration and shared fixtures for baganify tests."""

import pytest

from baganify import (
    ChildLayout,
    ChartEditor,
    LayoutParams,
    Rectangle,
    Side,
    create_bound_connector,
)


@pytest.fixture
def params():
    """Default spacing: level height 40, gap 20, indent 20."""
    return LayoutParams(level_height=40, shape_gap=20, vertical_indent=20)


@pytest.fixture
def two_level_tree():
    """Root R with two children C1 and C2, all 140x50."""
    return [
        Rectangle(id="R"),
        Rectangle(id="C1"),
        Rectangle(id="C2"),
        create_bound_connector("R", Side.BOTTOM, "C1", Side.TOP, id="R-C1"),
        create_bound_connector("R", Side.BOTTOM, "C2", Side.TOP, id="R-C2"),
    ]


@pytest.fixture
def stack_tree():
    """root -> A (vertical stack) -> B."""
    return [
        Rectangle(id="root"),
        Rectangle(id="A", child_layout=ChildLayout.VERTICAL),
        Rectangle(id="B"),
        create_bound_connector("root", Side.BOTTOM, "A", Side.TOP, id="root-A"),
        create_bound_connector("A", Side.BOTTOM, "B", Side.LEFT, id="A-B"),
    ]


@pytest.fixture
def cycle_shapes():
    """Pure three-box cycle A -> B -> C -> A."""
    return [
        Rectangle(id="A"),
        Rectangle(id="B"),
        Rectangle(id="C"),
        create_bound_connector("A", Side.BOTTOM, "B", Side.TOP, id="A-B"),
        create_bound_connector("B", Side.BOTTOM, "C", Side.TOP, id="B-C"),
        create_bound_connector("C", Side.BOTTOM, "A", Side.TOP, id="C-A"),
    ]


@pytest.fixture
def editor():
    """Empty 1200x800 editor with default spacing."""
    return ChartEditor(canvas_width=1200, canvas_height=800)
