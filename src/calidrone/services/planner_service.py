"""Service layer for path planning operations."""

from __future__ import annotations

from typing import Any, Dict

from .. import geometry
from ..models import RenderVec3
from ..schemas import (
    AddPointPayload,
    ManualInputPayload,
    PathIdPayload,
    PickPayload,
    RenamePayload,
    SelectPayload,
    UpdateSelectedPayload,
    parse_payload,
)


def _vec_to_list(vec) -> list:
    return [vec[0], vec[1], vec[2]]


class PlannerService:
    """Wrap the draft and path catalog for the view layer."""

    def __init__(self, shell) -> None:
        self._shell = shell

    @property
    def _draft(self):
        return self._shell.draft

    def _draft_response(self, **extra: Any) -> Dict[str, Any]:
        draft = self._draft
        response = {
            'success': True,
            'name': draft.name,
            'points': [p.to_dict() for p in draft.points],
            'selected_index': draft.selected_index,
            'manual_input': draft.manual_input,
        }
        response.update(extra)
        return response

    # ------------------------------------------------------------------
    # Draft editing
    def get_draft(self) -> Dict[str, Any]:
        return self._draft_response()

    def add_point(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(AddPointPayload, payload)
        self._draft.add_point(data.x, data.y, data.z)
        return self._draft_response()

    def add_point_from_pick(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(PickPayload, payload)
        self._draft.add_point_from_pick(RenderVec3(*data.point), data.cell_size)
        return self._draft_response(added=self._draft.points[-1].to_dict())

    def undo(self) -> Dict[str, Any]:
        self._draft.undo()
        return self._draft_response()

    def clear_draft(self) -> Dict[str, Any]:
        self._draft.clear()
        return self._draft_response()

    def rename_draft(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(RenamePayload, payload)
        self._draft.rename(data.name)
        return self._draft_response()

    def select_point(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(SelectPayload, payload)
        self._draft.select(data.index)
        return self._draft_response()

    def update_selected(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(UpdateSelectedPayload, payload)
        self._draft.update_selected(data.x, data.y, data.z)
        return self._draft_response()

    def delete_selected(self) -> Dict[str, Any]:
        self._draft.delete_selected()
        return self._draft_response()

    def set_manual_input(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(ManualInputPayload, payload)
        self._draft.set_manual_input(data.x, data.y, data.z)
        return self._draft_response()

    def add_manual_point(self) -> Dict[str, Any]:
        self._draft.add_manual_point()
        return self._draft_response()

    def update_selected_from_input(self) -> Dict[str, Any]:
        self._draft.update_selected_from_input()
        return self._draft_response()

    def get_preview(self) -> Dict[str, Any]:
        """Render-space data for the 3D view and the framing camera."""
        points = self._draft.points
        box = geometry.bounding_box(points)
        return {
            'success': True,
            'render_points': [_vec_to_list(v) for v in self._draft.render_points()],
            'path_line': [_vec_to_list(v) for v in self._draft.path_line()],
            'selected_index': self._draft.selected_index,
            'bounds': {
                'min': _vec_to_list(box.min),
                'max': _vec_to_list(box.max),
                'center': _vec_to_list(box.center),
                'size': box.size,
            },
            'framing_distance': geometry.framing_distance(box.size),
            'total_distance': geometry.path_distance(points),
            'estimated_flight_time': geometry.estimated_flight_time(points),
        }

    # ------------------------------------------------------------------
    # Catalog
    def save_path(self) -> Dict[str, Any]:
        path = self._shell.save_draft()
        return {'success': True, 'path': path.to_dict(), 'path_count': len(self._shell.paths)}

    def list_paths(self) -> Dict[str, Any]:
        paths = [path.to_dict() for path in self._shell.paths.list()]
        return {'success': True, 'paths': paths, 'count': len(paths)}

    def get_path(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(PathIdPayload, payload)
        path = self._shell.paths.get(data.path_id)
        return {
            'success': True,
            'path': path.to_dict(),
            'total_distance': geometry.path_distance(path.points),
            'estimated_flight_time': geometry.estimated_flight_time(path.points),
        }

    def delete_path(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(PathIdPayload, payload)
        removed = self._shell.delete_path(data.path_id)
        return {'success': True, 'removed': removed, 'path_id': data.path_id}

    def load_path(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(PathIdPayload, payload)
        self._shell.load_path_into_draft(data.path_id)
        return self._draft_response(loaded_path_id=data.path_id)


__all__ = ["PlannerService"]
