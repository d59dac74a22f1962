"""
In-memory collection of finalised recordings.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Tuple

from ..errors import IntegrityError, NotFoundError
from ..models import RecordingArtifact

logger = logging.getLogger(__name__)


class RecordingCatalog:
    """Recordings in insertion order; removing one releases its playback handle."""

    def __init__(self):
        self._artifacts: Dict[str, RecordingArtifact] = {}

    def add(self, artifact: RecordingArtifact) -> RecordingArtifact:
        if artifact.id in self._artifacts:
            logger.error("Duplicate recording id %s", artifact.id)
            raise IntegrityError(
                f"Recording {artifact.id} already exists",
                details={'recording_id': artifact.id},
            )
        self._artifacts[artifact.id] = artifact
        logger.info("Recording %s added (%d bytes)", artifact.id, artifact.size_bytes)
        return artifact

    def remove(self, recording_id: str) -> bool:
        """Drop a recording and release its handle. Absent ids are ignored.

        An open player keeps the handle alive until it closes.
        """
        artifact = self._artifacts.pop(recording_id, None)
        if artifact is None:
            logger.debug("Recording %s not in catalog; nothing removed", recording_id)
            return False
        artifact.playback_handle.release()
        logger.info("Recording %s removed", recording_id)
        return True

    def get(self, recording_id: str) -> RecordingArtifact:
        try:
            return self._artifacts[recording_id]
        except KeyError:
            raise NotFoundError(
                f"Recording {recording_id} not found",
                details={'recording_id': recording_id},
            ) from None

    def list(self) -> Tuple[RecordingArtifact, ...]:
        return tuple(self._artifacts.values())

    def aggregate(self) -> Dict[str, int]:
        count = 0
        total_duration = 0
        total_size = 0
        for artifact in self._artifacts.values():
            count += 1
            total_duration += artifact.duration_seconds
            total_size += artifact.size_bytes
        return {
            'count': count,
            'total_duration_seconds': total_duration,
            'total_size_bytes': total_size,
        }

    def clear(self) -> int:
        """Release every handle and empty the catalog.

        Handles still held by a player are released when it closes. Returns
        how many releases were done or deferred.
        """
        released = 0
        for artifact in self._artifacts.values():
            if artifact.playback_handle.release():
                released += 1
        self._artifacts.clear()
        logger.info("Recording catalog cleared (%d handle(s) released)", released)
        return released

    def __contains__(self, recording_id: object) -> bool:
        return recording_id in self._artifacts

    def __len__(self) -> int:
        return len(self._artifacts)

    def __iter__(self) -> Iterator[RecordingArtifact]:
        return iter(self.list())


__all__ = ["RecordingCatalog"]
