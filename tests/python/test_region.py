from __future__ import annotations

import pytest
from pytest import approx

from particlelife.sim.core.region import Region


def test_contains_is_inclusive_of_every_edge():
    region = Region(10.0, 20.0, 30.0, 40.0)

    assert region.contains(10.0, 20.0)
    assert region.contains(40.0, 60.0)
    assert region.contains(25.0, 60.0)
    assert not region.contains(9.999, 30.0)
    assert not region.contains(25.0, 60.001)


def test_intersects_counts_touching_edges_and_rejects_strict_separation():
    region = Region(0.0, 0.0, 10.0, 10.0)

    assert region.intersects(Region(5.0, 5.0, 10.0, 10.0))
    assert region.intersects(Region(10.0, 0.0, 5.0, 5.0))
    assert region.intersects(Region(-5.0, -5.0, 30.0, 30.0))
    assert region.intersects(Region(2.0, 2.0, 1.0, 1.0))
    assert not region.intersects(Region(10.5, 0.0, 5.0, 5.0))
    assert not region.intersects(Region(0.0, -6.0, 5.0, 5.0))


def test_centered_builds_symmetric_window():
    window = Region.centered(100.0, 50.0, 7.5, 7.5)

    assert window == Region(92.5, 42.5, 15.0, 15.0)
    assert window.right == approx(107.5)
    assert window.bottom == approx(57.5)


@pytest.mark.parametrize(
    "parent",
    [
        Region(0.0, 0.0, 100.0, 100.0),
        Region(5.0, 5.0, 1195.0, 795.0),
        Region(-3.25, 17.5, 0.75, 9.125),
    ],
)
def test_quarter_tiles_parent_without_gaps_or_overlap(parent: Region):
    top_left, top_right, bottom_left, bottom_right = parent.quarter()

    for child in (top_left, top_right, bottom_left, bottom_right):
        assert child.width == approx(parent.width / 2)
        assert child.height == approx(parent.height / 2)

    assert (top_left.x, top_left.y) == (parent.x, parent.y)
    assert top_right.x == approx(top_left.right)
    assert bottom_left.y == approx(top_left.bottom)
    assert (bottom_right.x, bottom_right.y) == (top_right.x, bottom_left.y)
    assert top_right.right == approx(parent.right)
    assert bottom_left.bottom == approx(parent.bottom)

    total_area = sum(c.width * c.height for c in (top_left, top_right, bottom_left, bottom_right))
    assert total_area == approx(parent.width * parent.height)
