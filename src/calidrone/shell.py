"""
Orchestration state owner.

The shell holds the single draft, the path catalog, the recording catalog
and the recording session for the lifetime of the process. Finalised
recordings flow from the session into the recording catalog through an
artifact listener.
"""

from __future__ import annotations

import logging
from pathlib import Path as FsPath
from typing import Dict, List, Optional

from .config import CaliDroneConfig, get_config
from .logging import setup_logging
from .models import Path, PlaybackHandle, RecordingArtifact
from .planner import DraftPath, PathCatalog
from .recording import RecordingCatalog, RecordingSession, system_clock, uuid_factory
from .recording.clock import Clock, IdFactory, Scheduler
from .recording.devices import VideoDevice
from .recording.export import export_all, export_artifact
from .recording.opencv_device import OpenCVVideoDevice

logger = logging.getLogger(__name__)


class CaliDroneShell:
    """Owns the planner and recorder state the view layer operates on."""

    def __init__(
        self,
        device: Optional[VideoDevice] = None,
        *,
        clock: Clock = system_clock,
        id_factory: IdFactory = uuid_factory,
        scheduler: Optional[Scheduler] = None,
        config: Optional[CaliDroneConfig] = None,
    ):
        self._config = config or get_config()
        self._clock = clock
        self._id_factory = id_factory

        self.paths = PathCatalog()
        self.recordings = RecordingCatalog()
        self.draft = DraftPath()
        self.session = RecordingSession(
            device or OpenCVVideoDevice(self._config.camera_index),
            clock=clock,
            id_factory=id_factory,
            scheduler=scheduler,
            config=self._config,
        )
        self.session.add_artifact_listener(self._on_artifact)
        # recording id -> handle with at least one open player
        self._players: Dict[str, PlaybackHandle] = {}
        self._closed = False
        logger.info("Shell started")

    @property
    def config(self) -> CaliDroneConfig:
        return self._config

    def _on_artifact(self, artifact: RecordingArtifact) -> None:
        self.recordings.add(artifact)

    # Planner -------------------------------------------------------------
    def save_draft(self) -> Path:
        return self.draft.save(self.paths, self._id_factory(), self._clock())

    def load_path_into_draft(self, path_id: str) -> Path:
        path = self.paths.get(path_id)
        self.draft.load_from_path(path)
        logger.info("Loaded path %s into the editor", path_id)
        return path

    def delete_path(self, path_id: str) -> bool:
        return self.paths.remove(path_id)

    # Recorder ------------------------------------------------------------
    def delete_recording(self, recording_id: str) -> bool:
        return self.recordings.remove(recording_id)

    def play_recording(self, recording_id: str) -> RecordingArtifact:
        """Open a player on a recording; its handle stays alive until closed."""
        artifact = self.recordings.get(recording_id)
        artifact.playback_handle.open_player()
        self._players[recording_id] = artifact.playback_handle
        logger.info("Playing recording %s", recording_id)
        return artifact

    def close_player(self, recording_id: str) -> Optional[PlaybackHandle]:
        """Close one player on a recording. Returns None if none was open."""
        handle = self._players.get(recording_id)
        if handle is None:
            logger.debug("No open player for recording %s", recording_id)
            return None
        handle.close_player()
        if not handle.in_use:
            del self._players[recording_id]
        return handle

    def export_recordings(self, directory: Optional[str] = None,
                          recording_id: Optional[str] = None) -> List[FsPath]:
        target = directory or self._config.export_directory
        if recording_id:
            return [export_artifact(self.recordings.get(recording_id), target)]
        return export_all(self.recordings.list(), target)

    def shutdown(self) -> None:
        """Stop timers, release the camera and every playback handle."""
        if self._closed:
            return
        self.session.teardown()
        self.recordings.clear()
        for handle in self._players.values():
            while handle.in_use:
                handle.close_player()
        self._players.clear()
        self._closed = True
        logger.info("Shell shut down")


def create_app(device: Optional[VideoDevice] = None, **kwargs):
    """Configure logging and return a shell with a controller bound to it."""
    from .controller import CaliDroneController

    config = kwargs.get("config") or get_config()
    setup_logging("calidrone", level="DEBUG" if config.verbose_logging else None)
    shell = CaliDroneShell(device, **kwargs)
    return shell, CaliDroneController.for_shell(shell)


__all__ = ["CaliDroneShell", "create_app"]
