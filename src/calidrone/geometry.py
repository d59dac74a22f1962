"""
Conversions between user space and render space.

User space is right-handed with X forward, Y right and Z up. The renderer is
Y-up, and the two are related by a fixed axis permutation:

    render.x = user.y    (right)
    render.y = user.z    (up)
    render.z = user.x    (forward)

Every placement, line and pick goes through this module so that edit and
preview views agree.
"""

import math
from typing import Iterable, Optional

from .config import get_config
from .models import BoundingBox, RenderVec3, Waypoint


def to_render_space(waypoint: Waypoint) -> RenderVec3:
    return RenderVec3(waypoint.y, waypoint.z, waypoint.x)


def to_user_space(vec: RenderVec3) -> Waypoint:
    return Waypoint(x=vec[2], y=vec[0], z=vec[1])


def _snap(value: float, cell_size: float) -> float:
    snapped = math.floor(value / cell_size + 0.5) * cell_size
    # avoid -0.0 leaking into stored waypoints
    return snapped + 0.0


def snap_to_grid(vec: RenderVec3, cell_size: Optional[float] = None) -> RenderVec3:
    """Round each render axis to the nearest multiple of ``cell_size``.

    If the vertical axis snaps to 0 the minimum hover height is substituted,
    so a ground-plane pick never yields a waypoint at ground level.
    """
    config = get_config()
    if cell_size is None:
        cell_size = config.grid_cell_size
    if cell_size <= 0:
        raise ValueError(f"cell_size must be positive, got {cell_size}")

    x, y, z = (_snap(v, cell_size) for v in vec)
    if y == 0:
        y = config.min_hover_height
    return RenderVec3(x, y, z)


def pick_to_waypoint(vec: RenderVec3, cell_size: Optional[float] = None) -> Waypoint:
    """Turn a pointer pick on the ground plane into a placeable waypoint."""
    return to_user_space(snap_to_grid(RenderVec3(*vec), cell_size))


def bounding_box(points: Iterable[Waypoint]) -> BoundingBox:
    """Render-space bounds of a path; ``size`` is the largest extent."""
    rendered = [to_render_space(p) for p in points]
    if not rendered:
        origin = RenderVec3(0.0, 0.0, 0.0)
        return BoundingBox(min=origin, max=origin, center=origin, size=get_config().empty_bounds_size)

    mins = RenderVec3(*(min(v[i] for v in rendered) for i in range(3)))
    maxs = RenderVec3(*(max(v[i] for v in rendered) for i in range(3)))
    center = RenderVec3(*((mins[i] + maxs[i]) / 2 for i in range(3)))
    size = max(maxs[i] - mins[i] for i in range(3))
    return BoundingBox(min=mins, max=maxs, center=center, size=size)


def framing_distance(size: float) -> float:
    """Camera distance that keeps a box of ``size`` in view."""
    config = get_config()
    return max(size * config.framing_multiplier, config.min_framing_distance)


def path_distance(points: Iterable[Waypoint]) -> float:
    """Total straight-line distance visiting the points in flight order."""
    total = 0.0
    previous = None
    for point in points:
        if previous is not None:
            total += math.dist(previous.as_tuple(), point.as_tuple())
        previous = point
    return total


def estimated_flight_time(points: Iterable[Waypoint], average_speed: Optional[float] = None) -> float:
    """Seconds needed to fly the path at ``average_speed`` units per second."""
    speed = average_speed if average_speed is not None else get_config().average_speed
    if speed <= 0:
        return 0.0
    return path_distance(points) / speed


__all__ = [
    "to_render_space",
    "to_user_space",
    "snap_to_grid",
    "pick_to_waypoint",
    "bounding_box",
    "framing_distance",
    "path_distance",
    "estimated_flight_time",
]
