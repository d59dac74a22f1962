"""
Device capability collaborators for the recording session.

A device acquires a live video stream, encodes it into byte chunks until
stopped, grabs still frames and releases the stream. Any camera binding can
sit behind ``VideoDevice``; ``DemoVideoDevice`` is the no-camera stand-in.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from ..errors import CameraUnavailable
from ..models import VideoFormat

logger = logging.getLogger(__name__)

# Bytes produced by a synthetic (demo mode) recording.
DEMO_RECORDING_BYTES = b"mock video data"


class Encoder(Protocol):
    async def stop(self) -> List[bytes]:
        """Finish encoding and return the produced chunks in order."""
        ...

    def cancel(self) -> None:
        """Abandon encoding and discard anything produced so far."""
        ...


class VideoDevice(Protocol):
    async def acquire_video_stream(self, constraints: Dict[str, int]) -> Any:
        """Return an opaque stream or raise CameraUnavailable."""
        ...

    def start_encoder(self, stream: Any, video_format: VideoFormat, bitrate: int) -> Encoder: ...

    async def grab_frame(self, stream: Any) -> Optional[bytes]: ...

    def release_stream(self, stream: Any) -> None: ...


class DemoVideoDevice:
    """Device with no camera attached; live acquisition always fails."""

    def __init__(self, reason: str = "No camera device available"):
        self._reason = reason

    async def acquire_video_stream(self, constraints: Dict[str, int]) -> Any:
        logger.debug("Demo device refusing acquisition (%s)", constraints)
        raise CameraUnavailable(self._reason, details={'constraints': dict(constraints)})

    def start_encoder(self, stream: Any, video_format: VideoFormat, bitrate: int) -> Encoder:
        raise CameraUnavailable(self._reason)

    async def grab_frame(self, stream: Any) -> Optional[bytes]:
        return None

    def release_stream(self, stream: Any) -> None:
        return None


__all__ = [
    "DEMO_RECORDING_BYTES",
    "Encoder",
    "VideoDevice",
    "DemoVideoDevice",
]
