from __future__ import annotations

import pytest

from calidrone import geometry
from calidrone.config import get_config
from calidrone.models import RenderVec3, Waypoint


def test_render_space_is_fixed_axis_permutation():
    vec = geometry.to_render_space(Waypoint(1.0, 2.0, 3.0))

    # right, up, forward
    assert vec == RenderVec3(2.0, 3.0, 1.0)


@pytest.mark.parametrize('point', [
    Waypoint(),
    Waypoint(1.0, -2.5, 3.25),
    Waypoint(-100.0, 0.0, 7.0),
    Waypoint(0.1, 0.2, 0.3),
])
def test_user_render_round_trip(point):
    assert geometry.to_user_space(geometry.to_render_space(point)) == point


def test_snap_to_grid_rounds_each_axis_and_lifts_ground_picks():
    snapped = geometry.snap_to_grid(RenderVec3(0.26, 0.1, -0.74), 0.5)

    assert snapped == RenderVec3(0.5, 1.0, -0.5)


def test_snap_to_grid_keeps_nonzero_height():
    snapped = geometry.snap_to_grid(RenderVec3(0.0, 2.3, 0.0), 0.5)

    assert snapped.y == 2.5


def test_snap_to_grid_uses_configured_defaults():
    config = get_config()
    config.set('grid_cell_size', 1.0)
    config.set('min_hover_height', 2.0)

    assert geometry.snap_to_grid(RenderVec3(1.4, 0.2, -0.6)) == RenderVec3(1.0, 2.0, -1.0)


def test_snap_to_grid_rejects_non_positive_cell():
    with pytest.raises(ValueError):
        geometry.snap_to_grid(RenderVec3(1.0, 1.0, 1.0), 0)


def test_pick_to_waypoint_converts_back_to_user_space():
    waypoint = geometry.pick_to_waypoint(RenderVec3(1.2, 0.0, 3.9))

    assert waypoint == Waypoint(x=4.0, y=1.0, z=1.0)


def test_bounding_box_of_empty_path_has_default_size():
    box = geometry.bounding_box([])

    assert box.size == 5.0
    assert box.center == RenderVec3(0.0, 0.0, 0.0)


def test_bounding_box_reports_largest_extent_in_render_space():
    box = geometry.bounding_box([Waypoint(0, 0, 0), Waypoint(4, 2, 1)])

    assert box.min == RenderVec3(0.0, 0.0, 0.0)
    assert box.max == RenderVec3(2.0, 1.0, 4.0)
    assert box.center == RenderVec3(1.0, 0.5, 2.0)
    assert box.size == 4.0


def test_framing_distance_has_a_floor():
    assert geometry.framing_distance(0.0) == 5.0
    assert geometry.framing_distance(2.0) == 5.0
    assert geometry.framing_distance(10.0) == 15.0


def test_path_distance_and_flight_time():
    points = [Waypoint(0, 0, 0), Waypoint(3, 4, 0), Waypoint(3, 4, 12)]

    assert geometry.path_distance(points) == pytest.approx(17.0)
    assert geometry.estimated_flight_time(points) == pytest.approx(3.4)
    assert geometry.estimated_flight_time(points, average_speed=0) == 0.0


def test_path_distance_of_single_point_is_zero():
    assert geometry.path_distance([Waypoint(1, 1, 1)]) == 0.0
