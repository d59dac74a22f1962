"""
Draft flight path editing.

The draft is an immutable ``DraftState``; every edit is a pure function
returning a new state, so a failed edit leaves the caller's state untouched.
``DraftPath`` holds the current state for the orchestration shell.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from ..errors import ValidationError
from ..geometry import pick_to_waypoint, to_render_space
from ..models import Path, RenderVec3, Waypoint, normalize_points

logger = logging.getLogger(__name__)

DEFAULT_PATH_NAME = "Untitled Path"

_EMPTY_INPUT: Tuple[str, str, str] = ('', '', '')


@dataclass(frozen=True)
class DraftState:
    """The single in-progress path.

    ``manual_input`` is the x/y/z text buffer of the manual-edit form; while a
    waypoint is selected it mirrors that waypoint's coordinates.
    """
    name: str = ''
    points: Tuple[Waypoint, ...] = ()
    selected_index: Optional[int] = None
    manual_input: Tuple[str, str, str] = field(default=_EMPTY_INPUT)

    def __post_init__(self):
        if self.selected_index is not None and not 0 <= self.selected_index < len(self.points):
            raise ValidationError(
                f"Selected index {self.selected_index} is out of range",
                details={'selected_index': self.selected_index, 'point_count': len(self.points)},
            )

    @property
    def has_selection(self) -> bool:
        return self.selected_index is not None


def _format_coordinate(value: float) -> str:
    # 2.0 -> "2", 2.5 -> "2.5"
    return f"{value:g}"


def _parse_coordinate(text: str) -> float:
    try:
        return float(text)
    except (TypeError, ValueError):
        return 0.0


def add_point(state: DraftState, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> DraftState:
    return replace(state, points=state.points + (Waypoint(float(x), float(y), float(z)),))


def add_point_from_pick(state: DraftState, vec: RenderVec3, cell_size: Optional[float] = None) -> DraftState:
    waypoint = pick_to_waypoint(vec, cell_size)
    return add_point(state, waypoint.x, waypoint.y, waypoint.z)


def undo(state: DraftState) -> DraftState:
    if not state.points:
        return state
    return replace(state, points=state.points[:-1], selected_index=None, manual_input=_EMPTY_INPUT)


def clear(state: DraftState) -> DraftState:
    return DraftState()


def rename(state: DraftState, name: str) -> DraftState:
    return replace(state, name=name or '')


def select(state: DraftState, index: int) -> DraftState:
    """Toggle selection of ``index``; selecting the current index deselects."""
    if state.selected_index == index:
        return replace(state, selected_index=None, manual_input=_EMPTY_INPUT)
    if not 0 <= index < len(state.points):
        raise ValidationError(
            f"No waypoint at index {index}",
            details={'index': index, 'point_count': len(state.points)},
        )
    point = state.points[index]
    return replace(
        state,
        selected_index=index,
        manual_input=(_format_coordinate(point.x), _format_coordinate(point.y), _format_coordinate(point.z)),
    )


def _require_selection(state: DraftState, operation: str) -> int:
    if state.selected_index is None:
        raise ValidationError(f"Select a waypoint before {operation}", details={'operation': operation})
    return state.selected_index


def update_selected(state: DraftState, x: float, y: float, z: float) -> DraftState:
    index = _require_selection(state, 'updating')
    points = list(state.points)
    points[index] = Waypoint(float(x), float(y), float(z))
    return replace(state, points=tuple(points), selected_index=None, manual_input=_EMPTY_INPUT)


def delete_selected(state: DraftState) -> DraftState:
    index = _require_selection(state, 'deleting')
    points = state.points[:index] + state.points[index + 1:]
    return replace(state, points=points, selected_index=None, manual_input=_EMPTY_INPUT)


def set_manual_input(state: DraftState, x: Optional[str] = None, y: Optional[str] = None,
                     z: Optional[str] = None) -> DraftState:
    current = state.manual_input
    updated = tuple(
        str(new) if new is not None else old
        for new, old in zip((x, y, z), current)
    )
    return replace(state, manual_input=updated)


def add_manual_point(state: DraftState) -> DraftState:
    """Append the manual-entry point; blank or unparsable fields read as 0."""
    x, y, z = (_parse_coordinate(v) for v in state.manual_input)
    return replace(add_point(state, x, y, z), manual_input=_EMPTY_INPUT)


def update_selected_from_input(state: DraftState) -> DraftState:
    _require_selection(state, 'updating')
    blank = [axis for axis, value in zip('xyz', state.manual_input) if not str(value).strip()]
    if blank:
        raise ValidationError("All three coordinates are required", details={'missing': blank})
    x, y, z = (_parse_coordinate(v) for v in state.manual_input)
    return update_selected(state, x, y, z)


def load_from_path(state: DraftState, path: Path) -> DraftState:
    return DraftState(points=normalize_points(path.points))


def load_points(state: DraftState, raw_points: Iterable[Any]) -> DraftState:
    """Replace the draft's points with a normalised copy of ``raw_points``."""
    return DraftState(points=normalize_points(raw_points))


def build_path(state: DraftState, path_id: str, created_at: float) -> Path:
    """Snapshot the draft as a Path. Raises ValidationError when empty."""
    if not state.points:
        raise ValidationError("At least one waypoint required", details={'point_count': 0})
    name = state.name.strip() or DEFAULT_PATH_NAME
    return Path(id=path_id, name=name, points=tuple(state.points), created_at=created_at)


class DraftPath:
    """Mutable holder for the current draft, applying the pure transitions."""

    def __init__(self, state: Optional[DraftState] = None):
        self._state = state or DraftState()

    @property
    def state(self) -> DraftState:
        return self._state

    @property
    def name(self) -> str:
        return self._state.name

    @property
    def points(self) -> Tuple[Waypoint, ...]:
        return self._state.points

    @property
    def selected_index(self) -> Optional[int]:
        return self._state.selected_index

    @property
    def manual_input(self) -> Dict[str, str]:
        return dict(zip('xyz', self._state.manual_input))

    def _apply(self, transition: Callable[..., DraftState], *args, **kwargs) -> DraftState:
        self._state = transition(self._state, *args, **kwargs)
        return self._state

    def add_point(self, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> DraftState:
        return self._apply(add_point, x, y, z)

    def add_point_from_pick(self, vec: RenderVec3, cell_size: Optional[float] = None) -> DraftState:
        return self._apply(add_point_from_pick, vec, cell_size)

    def undo(self) -> DraftState:
        return self._apply(undo)

    def clear(self) -> DraftState:
        return self._apply(clear)

    def rename(self, name: str) -> DraftState:
        return self._apply(rename, name)

    def select(self, index: int) -> DraftState:
        return self._apply(select, index)

    def update_selected(self, x: float, y: float, z: float) -> DraftState:
        return self._apply(update_selected, x, y, z)

    def delete_selected(self) -> DraftState:
        return self._apply(delete_selected)

    def set_manual_input(self, x: Optional[str] = None, y: Optional[str] = None,
                         z: Optional[str] = None) -> DraftState:
        return self._apply(set_manual_input, x, y, z)

    def add_manual_point(self) -> DraftState:
        return self._apply(add_manual_point)

    def update_selected_from_input(self) -> DraftState:
        return self._apply(update_selected_from_input)

    def load_from_path(self, path: Path) -> DraftState:
        return self._apply(load_from_path, path)

    def load_points(self, raw_points: Iterable[Any]) -> DraftState:
        return self._apply(load_points, raw_points)

    def save(self, catalog, path_id: str, created_at: float) -> Path:
        """Move the draft into ``catalog`` and reset it.

        Nothing changes if the draft is empty or the catalog rejects the path.
        """
        path = build_path(self._state, path_id, created_at)
        catalog.add(path)
        self._state = clear(self._state)
        logger.info("Saved path %s (%s) with %d waypoints", path.name, path.id, len(path.points))
        return path

    def render_points(self) -> Tuple[RenderVec3, ...]:
        return tuple(to_render_space(p) for p in self._state.points)

    def path_line(self) -> Tuple[RenderVec3, ...]:
        """Polyline vertices; empty until there are two points to join."""
        rendered = self.render_points()
        return rendered if len(rendered) >= 2 else ()
