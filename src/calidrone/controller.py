"""Controller coordinating payload validation and service execution."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional

from .errors import CaliDroneError, IntegrityError, ValidationError, error_response
from .logging import get_logger
from .services import PlannerService, RecorderService
from .transport import OPERATIONS, normalize_transport_response

logger = get_logger(__name__, component='controller')

Payload = Optional[Dict[str, Any]]


class CaliDroneController:
    """Single entry point for the view layer; never raises."""

    def __init__(self, planner: PlannerService, recorder: RecorderService) -> None:
        self._planner = planner
        self._recorder = recorder

    @classmethod
    def for_shell(cls, shell) -> "CaliDroneController":
        return cls(PlannerService(shell), RecorderService(shell))

    # Planner -----------------------------------------------------------------
    def get_draft(self) -> Dict[str, Any]:
        return self._safe_call('get_draft', self._planner.get_draft, 'GET_DRAFT_FAILED')

    def add_point(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('add_point', lambda: self._planner.add_point(payload), 'ADD_POINT_FAILED')

    def add_point_from_pick(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('add_point_from_pick', lambda: self._planner.add_point_from_pick(payload), 'ADD_POINT_FAILED')

    def undo(self) -> Dict[str, Any]:
        return self._safe_call('undo', self._planner.undo, 'UNDO_FAILED')

    def clear_draft(self) -> Dict[str, Any]:
        return self._safe_call('clear_draft', self._planner.clear_draft, 'CLEAR_DRAFT_FAILED')

    def rename_draft(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('rename_draft', lambda: self._planner.rename_draft(payload), 'RENAME_DRAFT_FAILED')

    def select_point(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('select_point', lambda: self._planner.select_point(payload), 'SELECT_POINT_FAILED')

    def update_selected(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('update_selected', lambda: self._planner.update_selected(payload), 'UPDATE_SELECTED_FAILED')

    def delete_selected(self) -> Dict[str, Any]:
        return self._safe_call('delete_selected', self._planner.delete_selected, 'DELETE_SELECTED_FAILED')

    def set_manual_input(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('set_manual_input', lambda: self._planner.set_manual_input(payload), 'MANUAL_INPUT_FAILED')

    def add_manual_point(self) -> Dict[str, Any]:
        return self._safe_call('add_manual_point', self._planner.add_manual_point, 'ADD_POINT_FAILED')

    def update_selected_from_input(self) -> Dict[str, Any]:
        return self._safe_call('update_selected_from_input', self._planner.update_selected_from_input, 'UPDATE_SELECTED_FAILED')

    def get_preview(self) -> Dict[str, Any]:
        return self._safe_call('get_preview', self._planner.get_preview, 'PREVIEW_FAILED')

    def save_path(self) -> Dict[str, Any]:
        return self._safe_call('save_path', self._planner.save_path, 'SAVE_PATH_FAILED')

    def list_paths(self) -> Dict[str, Any]:
        return self._safe_call('list_paths', self._planner.list_paths, 'LIST_PATHS_FAILED')

    def get_path(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('get_path', lambda: self._planner.get_path(payload), 'GET_PATH_FAILED')

    def delete_path(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('delete_path', lambda: self._planner.delete_path(payload), 'DELETE_PATH_FAILED')

    def load_path(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('load_path', lambda: self._planner.load_path(payload), 'LOAD_PATH_FAILED')

    # Recorder ----------------------------------------------------------------
    def get_session(self) -> Dict[str, Any]:
        return self._safe_call('get_session', self._recorder.get_session, 'GET_SESSION_FAILED')

    async def start_recording(self) -> Dict[str, Any]:
        return await self._safe_call_async('start_recording', self._recorder.start_recording, 'START_RECORDING_FAILED')

    async def stop_recording(self) -> Dict[str, Any]:
        return await self._safe_call_async('stop_recording', self._recorder.stop_recording, 'STOP_RECORDING_FAILED')

    async def take_screenshot(self) -> Dict[str, Any]:
        return await self._safe_call_async('take_screenshot', self._recorder.take_screenshot, 'SCREENSHOT_FAILED')

    def set_feed_source(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('set_feed_source', lambda: self._recorder.set_feed_source(payload), 'SET_FEED_SOURCE_FAILED')

    def toggle_feed_source(self) -> Dict[str, Any]:
        return self._safe_call('toggle_feed_source', self._recorder.toggle_feed_source, 'SET_FEED_SOURCE_FAILED')

    def update_camera_settings(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('update_camera_settings', lambda: self._recorder.update_camera_settings(payload), 'CAMERA_SETTINGS_FAILED')

    def set_zoom(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('set_zoom', lambda: self._recorder.set_zoom(payload), 'SET_ZOOM_FAILED')

    def zoom_in(self) -> Dict[str, Any]:
        return self._safe_call('zoom_in', self._recorder.zoom_in, 'SET_ZOOM_FAILED')

    def zoom_out(self) -> Dict[str, Any]:
        return self._safe_call('zoom_out', self._recorder.zoom_out, 'SET_ZOOM_FAILED')

    def list_recordings(self) -> Dict[str, Any]:
        return self._safe_call('list_recordings', self._recorder.list_recordings, 'LIST_RECORDINGS_FAILED')

    def delete_recording(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('delete_recording', lambda: self._recorder.delete_recording(payload), 'DELETE_RECORDING_FAILED')

    def play_recording(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('play_recording', lambda: self._recorder.play_recording(payload), 'PLAY_RECORDING_FAILED')

    def close_player(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('close_player', lambda: self._recorder.close_player(payload), 'CLOSE_PLAYER_FAILED')

    def recordings_summary(self) -> Dict[str, Any]:
        return self._safe_call('recordings_summary', self._recorder.recordings_summary, 'RECORDINGS_SUMMARY_FAILED')

    def export_recordings(self, payload: Payload = None) -> Dict[str, Any]:
        return self._safe_call('export_recordings', lambda: self._recorder.export_recordings(payload), 'EXPORT_FAILED')

    # ------------------------------------------------------------------
    async def dispatch(self, operation: str, payload: Payload = None) -> Dict[str, Any]:
        """Run an operation by name as listed in the operation table."""
        contract = OPERATIONS.get(operation)
        if contract is None:
            return error_response('UNKNOWN_OPERATION', f"Unknown operation '{operation}'",
                                  details={'operation': operation})
        method = getattr(self, operation)
        args = (payload,) if contract.takes_payload else ()
        if contract.is_async:
            return await method(*args)
        return method(*args)

    def _handle_error(self, operation: str, exc: Exception, default_error_code: str) -> Dict[str, Any]:
        if isinstance(exc, ValidationError):
            logger.warning('validation_failed operation=%s error=%s', operation, exc.message)
            return exc.to_payload()
        if isinstance(exc, IntegrityError):
            logger.error('integrity_error operation=%s error=%s', operation, exc.message)
            return exc.to_payload()
        if isinstance(exc, CaliDroneError):
            logger.warning('calidrone_error operation=%s code=%s error=%s', operation, exc.code, exc.message)
            return exc.to_payload()
        logger.exception('controller_unhandled operation=%s error=%s', operation, exc)
        return error_response(default_error_code, str(exc))

    def _safe_call(self, operation: str, func: Callable[[], Dict[str, Any]], default_error_code: str) -> Dict[str, Any]:
        try:
            response = func()
        except Exception as exc:
            return self._handle_error(operation, exc, default_error_code)
        return normalize_transport_response(operation, response, default_error_code=default_error_code)

    async def _safe_call_async(self, operation: str, func: Callable[[], Awaitable[Dict[str, Any]]],
                               default_error_code: str) -> Dict[str, Any]:
        try:
            response = await func()
        except Exception as exc:
            return self._handle_error(operation, exc, default_error_code)
        return normalize_transport_response(operation, response, default_error_code=default_error_code)


__all__ = ["CaliDroneController"]
