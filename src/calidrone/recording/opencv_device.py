"""
OpenCV-backed camera device.

Frames are read from ``cv2.VideoCapture`` off the event loop and written with
``cv2.VideoWriter`` into a temporary file; the file's bytes become the
recording buffer when the encoder stops.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import cv2

from ..errors import CameraUnavailable, RecordingFailed
from ..models import VideoFormat

logger = logging.getLogger(__name__)

FOURCC_BY_FORMAT = {
    VideoFormat.MP4: "mp4v",
    VideoFormat.MOV: "mp4v",
    VideoFormat.AVI: "XVID",
    VideoFormat.WEBM: "VP80",
}


@dataclass
class OpenCVStream:
    capture: Any
    width: int
    height: int
    fps: float


class OpenCVEncoder:
    """Pulls frames from a stream into a VideoWriter until stopped."""

    def __init__(self, stream: OpenCVStream, video_format: VideoFormat, bitrate: int):
        self._stream = stream
        self._format = video_format
        self._bitrate = bitrate
        fd, self._path = tempfile.mkstemp(prefix="calidrone_", suffix=f".{video_format.value}")
        os.close(fd)
        fourcc = cv2.VideoWriter_fourcc(*FOURCC_BY_FORMAT[video_format])
        self._writer = cv2.VideoWriter(self._path, fourcc, stream.fps, (stream.width, stream.height))
        if not self._writer.isOpened():
            os.unlink(self._path)
            raise RecordingFailed(
                f"Could not open {video_format.value} writer",
                details={'format': video_format.value},
            )
        # VideoWriter has no bitrate control; the value is advisory here
        logger.debug("Encoder %s started at %d bps (advisory)", self._path, bitrate)
        self._running = True
        self._frames = 0
        self._task = asyncio.get_running_loop().create_task(self._pump())

    async def _pump(self) -> None:
        capture = self._stream.capture
        size = (self._stream.width, self._stream.height)
        while self._running:
            ok, frame = await asyncio.to_thread(capture.read)
            if not ok:
                await asyncio.sleep(1.0 / max(self._stream.fps, 1.0))
                continue
            h, w = frame.shape[:2]
            if (w, h) != size:
                frame = cv2.resize(frame, size)
            self._writer.write(frame)
            self._frames += 1

    async def stop(self) -> List[bytes]:
        self._running = False
        try:
            await self._task
        finally:
            self._writer.release()
        try:
            with open(self._path, 'rb') as f:
                data = f.read()
        except OSError as exc:
            raise RecordingFailed("Could not read encoded video", details={'error': str(exc)}) from exc
        finally:
            try:
                os.unlink(self._path)
            except OSError:
                logger.warning("Could not remove temporary recording %s", self._path)
        logger.info("Encoder wrote %d frames (%d bytes)", self._frames, len(data))
        return [data]

    def cancel(self) -> None:
        self._running = False
        self._task.cancel()
        self._writer.release()
        try:
            os.unlink(self._path)
        except OSError:
            logger.warning("Could not remove temporary recording %s", self._path)


class OpenCVVideoDevice:
    """Camera at ``camera_index`` read through OpenCV."""

    def __init__(self, camera_index: int = 0):
        self._camera_index = camera_index

    def _open(self, constraints: Dict[str, int]) -> OpenCVStream:
        capture = cv2.VideoCapture(self._camera_index)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailable(
                f"Camera {self._camera_index} could not be opened",
                details={'camera_index': self._camera_index},
            )
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.get('width', 1920))
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.get('height', 1080))
        capture.set(cv2.CAP_PROP_FPS, constraints.get('framerate', 30))
        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH)) or constraints.get('width', 1920)
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT)) or constraints.get('height', 1080)
        fps = float(capture.get(cv2.CAP_PROP_FPS)) or float(constraints.get('framerate', 30))
        logger.info("Camera %s opened at %dx%d @ %.1f fps", self._camera_index, width, height, fps)
        return OpenCVStream(capture=capture, width=width, height=height, fps=fps)

    async def acquire_video_stream(self, constraints: Dict[str, int]) -> OpenCVStream:
        return await asyncio.to_thread(self._open, constraints)

    def start_encoder(self, stream: OpenCVStream, video_format: VideoFormat, bitrate: int) -> OpenCVEncoder:
        return OpenCVEncoder(stream, video_format, bitrate)

    async def grab_frame(self, stream: OpenCVStream) -> Optional[bytes]:
        ok, frame = await asyncio.to_thread(stream.capture.read)
        if not ok:
            return None
        encoded, buffer = cv2.imencode('.png', frame)
        return buffer.tobytes() if encoded else None

    def release_stream(self, stream: OpenCVStream) -> None:
        stream.capture.release()
        logger.debug("Camera %s released", self._camera_index)


__all__ = ["OpenCVVideoDevice", "OpenCVEncoder", "OpenCVStream"]
