"""Tests for geometry helpers."""

from invader.entities import Body
from invader.utils import clamp, rect_collide, center_x


class TestRectCollide:
    """Strict axis-aligned overlap."""

    def test_overlapping_rects_collide(self):
        a = Body(x=0, y=0, width=10, height=10)
        b = Body(x=5, y=5, width=10, height=10)
        assert rect_collide(a, b)
        assert rect_collide(b, a)

    def test_contained_rect_collides(self):
        outer = Body(x=0, y=0, width=100, height=100)
        inner = Body(x=40, y=40, width=5, height=5)
        assert rect_collide(outer, inner)

    def test_touching_horizontal_edges_do_not_collide(self):
        a = Body(x=0, y=0, width=10, height=10)
        b = Body(x=10, y=0, width=10, height=10)
        assert not rect_collide(a, b)

    def test_touching_vertical_edges_do_not_collide(self):
        a = Body(x=0, y=0, width=10, height=10)
        b = Body(x=0, y=10, width=10, height=10)
        assert not rect_collide(a, b)

    def test_separate_rects_do_not_collide(self):
        a = Body(x=0, y=0, width=10, height=10)
        b = Body(x=50, y=50, width=10, height=10)
        assert not rect_collide(a, b)


def test_clamp():
    assert clamp(-1, 0, 5) == 0
    assert clamp(7, 0, 5) == 5
    assert clamp(3, 0, 5) == 3


def test_center_x():
    assert center_x(Body(x=10, y=0, width=40, height=5)) == 30
