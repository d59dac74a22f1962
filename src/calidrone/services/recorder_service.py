"""Service layer for camera recording operations."""

from __future__ import annotations

import base64
from typing import Any, Dict

from ..formatting import format_duration, format_file_size, format_timestamp
from ..models import RecordingArtifact
from ..schemas import (
    CameraSettingsPayload,
    ExportPayload,
    FeedSourcePayload,
    RecordingIdPayload,
    ZoomPayload,
    parse_payload,
)


def _artifact_summary(artifact: RecordingArtifact) -> Dict[str, Any]:
    summary = artifact.to_dict()
    summary.update({
        'duration_label': format_duration(artifact.duration_seconds),
        'size_label': format_file_size(artifact.size_bytes),
        'created_label': format_timestamp(artifact.created_at),
        'mime_type': artifact.format.mime_type,
    })
    return summary


class RecorderService:
    """Wrap the recording session and recording catalog for the view layer."""

    def __init__(self, shell) -> None:
        self._shell = shell

    @property
    def _session(self):
        return self._shell.session

    def _session_response(self, **extra: Any) -> Dict[str, Any]:
        response = {'success': True, 'session': self._session.snapshot()}
        response.update(extra)
        return response

    # ------------------------------------------------------------------
    # Session
    def get_session(self) -> Dict[str, Any]:
        snapshot = self._session.snapshot()
        snapshot['elapsed_label'] = format_duration(snapshot['elapsed_seconds'])
        return {'success': True, 'session': snapshot}

    async def start_recording(self) -> Dict[str, Any]:
        await self._session.start()
        return self._session_response()

    async def stop_recording(self) -> Dict[str, Any]:
        artifact = await self._session.stop()
        recording = _artifact_summary(artifact) if artifact is not None else None
        return self._session_response(recording=recording)

    async def take_screenshot(self) -> Dict[str, Any]:
        image = await self._session.take_screenshot()
        if image is None:
            return {'success': True, 'available': False}
        return {
            'success': True,
            'available': True,
            'mime_type': 'image/png',
            'image_base64': base64.b64encode(image).decode('ascii'),
        }

    def set_feed_source(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(FeedSourcePayload, payload)
        self._session.set_feed_source(data.feed_source)
        return self._session_response()

    def toggle_feed_source(self) -> Dict[str, Any]:
        self._session.toggle_feed_source()
        return self._session_response()

    def update_camera_settings(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(CameraSettingsPayload, payload)
        settings = self._session.update_settings(data.to_settings())
        return self._session_response(
            settings={**data.model_dump(mode='json'), 'bitrate': settings.bitrate},
        )

    def set_zoom(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(ZoomPayload, payload)
        return {'success': True, 'zoom': self._session.set_zoom(data.zoom)}

    def zoom_in(self) -> Dict[str, Any]:
        return {'success': True, 'zoom': self._session.zoom_in()}

    def zoom_out(self) -> Dict[str, Any]:
        return {'success': True, 'zoom': self._session.zoom_out()}

    # ------------------------------------------------------------------
    # Catalog
    def list_recordings(self) -> Dict[str, Any]:
        recordings = [_artifact_summary(a) for a in self._shell.recordings.list()]
        return {'success': True, 'recordings': recordings, 'count': len(recordings)}

    def delete_recording(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(RecordingIdPayload, payload)
        removed = self._shell.delete_recording(data.recording_id)
        return {'success': True, 'removed': removed, 'recording_id': data.recording_id}

    def play_recording(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(RecordingIdPayload, payload)
        artifact = self._shell.play_recording(data.recording_id)
        handle = artifact.playback_handle
        return {
            'success': True,
            'recording_id': artifact.id,
            'uri': handle.uri,
            'mime_type': artifact.format.mime_type,
            'open_players': handle.open_players,
        }

    def close_player(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(RecordingIdPayload, payload)
        handle = self._shell.close_player(data.recording_id)
        return {
            'success': True,
            'recording_id': data.recording_id,
            'closed': handle is not None,
            'released': handle.released if handle is not None else False,
        }

    def recordings_summary(self) -> Dict[str, Any]:
        totals = self._shell.recordings.aggregate()
        return {
            'success': True,
            **totals,
            'total_duration_label': format_duration(totals['total_duration_seconds']),
            'total_size_label': format_file_size(totals['total_size_bytes']),
        }

    def export_recordings(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(ExportPayload, payload)
        written = self._shell.export_recordings(data.directory, data.recording_id)
        return {'success': True, 'files': [str(p) for p in written], 'count': len(written)}


__all__ = ["RecorderService"]
