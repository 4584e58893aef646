from __future__ import annotations

import pytest

from ui_converter.geometry import GeometryError, LayoutRect, preserve_aspect_footprint, resolve_geometry


def test_full_parent_rect_maps_to_parent_size_at_origin():
    geometry = resolve_geometry(LayoutRect(0, 0, 200, 100), (200.0, 100.0), (10.0, 10.0), (30.0, 15.0))
    assert geometry.target_size == pytest.approx((30.0, 15.0))
    assert geometry.local_position == pytest.approx((0.0, 0.0))
    assert geometry.local_scale == pytest.approx((3.0, 1.5))


def test_top_half_flips_vertical_axis():
    geometry = resolve_geometry(LayoutRect(0, 0, 100, 50), (100.0, 100.0), (25.0, 10.0), (30.0, 30.0))
    assert geometry.target_size == pytest.approx((30.0, 15.0))
    assert geometry.local_position == pytest.approx((0.0, 0.25))


@pytest.mark.parametrize(
    "rect, parent, target_parent",
    [
        (LayoutRect(10, 20, 40, 10), (200.0, 80.0), (50.0, 20.0)),
        (LayoutRect(0, 0, 1, 1), (3.0, 7.0), (11.0, 13.0)),
        (LayoutRect(5, 5, 90, 45), (100.0, 50.0), (1.0, 0.5)),
    ],
)
def test_target_size_is_ratio_times_parent_size(rect, parent, target_parent):
    geometry = resolve_geometry(rect, parent, (1.0, 1.0), target_parent)
    assert geometry.target_size[0] == pytest.approx(rect.width / parent[0] * target_parent[0])
    assert geometry.target_size[1] == pytest.approx(rect.height / parent[1] * target_parent[1])


def test_edges_map_to_half_unit_positions():
    right = resolve_geometry(LayoutRect(100, 0, 0.0001, 100), (100.0, 100.0), (1.0, 1.0), (40.0, 40.0))
    bottom = resolve_geometry(LayoutRect(0, 100, 100, 0.0001), (100.0, 100.0), (1.0, 1.0), (40.0, 40.0))
    assert right.local_position[0] == pytest.approx(0.5, abs=1e-5)
    assert bottom.local_position[1] == pytest.approx(-0.5, abs=1e-5)


def test_native_size_only_changes_scale():
    small = resolve_geometry(LayoutRect(0, 0, 50, 50), (100.0, 100.0), (5.0, 5.0), (20.0, 20.0))
    large = resolve_geometry(LayoutRect(0, 0, 50, 50), (100.0, 100.0), (20.0, 20.0), (20.0, 20.0))
    assert small.target_size == large.target_size
    assert small.local_position == large.local_position
    assert small.local_scale == pytest.approx((2.0, 2.0))
    assert large.local_scale == pytest.approx((0.5, 0.5))


def test_zero_sized_parent_is_rejected():
    with pytest.raises(GeometryError):
        resolve_geometry(LayoutRect(0, 0, 10, 10), (0.0, 100.0), (1.0, 1.0), (30.0, 30.0))
    with pytest.raises(ValueError):
        resolve_geometry(LayoutRect(0, 0, 10, 10), (100.0, 100.0), (1.0, 1.0), (30.0, 0.0))


def test_preserve_aspect_footprint_uses_source_ratio():
    assert preserve_aspect_footprint(30.0, (400.0, 200.0)) == pytest.approx((30.0, 15.0))
    with pytest.raises(GeometryError):
        preserve_aspect_footprint(30.0, (0.0, 200.0))


def test_layout_rect_helpers():
    rect = LayoutRect(10, 20, 30, 40)
    assert rect.size == (30, 40)
    assert rect.center == (25.0, 40.0)
    assert not rect.is_empty()
    assert LayoutRect(0, 0, 0, 10).is_empty()
