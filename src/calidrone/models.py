"""
Data models for flight paths and camera recordings.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Waypoint:
    """A single flight waypoint in user space (X forward, Y right, Z up)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_raw(cls, raw: Any) -> "Waypoint":
        """Build a waypoint from a mapping, sequence or Waypoint.

        Missing or null coordinates read as 0; the raw value is not modified.
        """
        if isinstance(raw, Waypoint):
            return raw
        if isinstance(raw, Mapping):
            values = [raw.get(axis) for axis in ('x', 'y', 'z')]
        else:
            values = list(raw)[:3]
            values += [None] * (3 - len(values))
        return cls(*(float(v) if v is not None else 0.0 for v in values))

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'z': self.z}


def normalize_points(raw_points: Iterable[Any]) -> Tuple[Waypoint, ...]:
    """Read-time view of stored points with missing coordinates defaulted to 0."""
    return tuple(Waypoint.from_raw(p) for p in raw_points)


class RenderVec3(NamedTuple):
    """A point in the renderer's Y-up coordinate system."""
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in render space used to frame a path preview."""
    min: RenderVec3
    max: RenderVec3
    center: RenderVec3
    size: float


@dataclass(frozen=True)
class Path:
    """A saved, named flight path. The points tuple is never mutated."""
    id: str
    name: str
    points: Tuple[Waypoint, ...]
    created_at: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'points': [p.to_dict() for p in self.points],
            'created_at': self.created_at,
        }


class FeedSource(str, Enum):
    LIVE = "live"
    DEMO = "demo"


class SessionStatus(str, Enum):
    IDLE = "idle"
    ACQUIRING = "acquiring"
    RECORDING = "recording"
    STOPPED = "stopped"
    ERRORED = "errored"


class VideoFormat(str, Enum):
    MP4 = "mp4"
    AVI = "avi"
    MOV = "mov"
    WEBM = "webm"

    @property
    def mime_type(self) -> str:
        return f"video/{self.value}"


class VideoQuality(str, Enum):
    ULTRA = "ultra"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def bitrate(self) -> int:
        return QUALITY_BITRATES[self]


# Bits per second handed to the encoder for each quality level.
QUALITY_BITRATES: Dict[VideoQuality, int] = {
    VideoQuality.ULTRA: 8_000_000,
    VideoQuality.HIGH: 4_000_000,
    VideoQuality.MEDIUM: 2_000_000,
    VideoQuality.LOW: 1_000_000,
}


@dataclass(frozen=True)
class CameraSettings:
    """Encoder settings applied when a recording starts."""
    format: VideoFormat = VideoFormat.MP4
    quality: VideoQuality = VideoQuality.HIGH
    framerate: int = 30
    resolution: Tuple[int, int] = (1920, 1080)

    @classmethod
    def from_config(cls, config) -> "CameraSettings":
        width, height = (int(v) for v in config.default_resolution.split("x"))
        return cls(
            format=VideoFormat(config.default_format),
            quality=VideoQuality(config.default_quality),
            framerate=int(config.default_framerate),
            resolution=(width, height),
        )

    @property
    def bitrate(self) -> int:
        return self.quality.bitrate

    def constraints(self) -> Dict[str, int]:
        """Acquisition constraints handed to the device collaborator."""
        width, height = self.resolution
        return {'width': width, 'height': height, 'framerate': self.framerate}


class PlaybackHandle:
    """Releasable reference to an artifact's byte buffer.

    Release is guarded by a flag so that a handle reached through two
    different paths (explicit delete, catalog teardown) is released once.
    A release requested while players are open is deferred until the last
    player closes.
    """

    def __init__(self, uri: str, on_release=None):
        self.uri = uri
        self._on_release = on_release
        self._released = False
        self._release_pending = False
        self._open_players = 0

    @property
    def released(self) -> bool:
        return self._released

    @property
    def release_pending(self) -> bool:
        return self._release_pending

    @property
    def in_use(self) -> bool:
        return self._open_players > 0

    @property
    def open_players(self) -> int:
        return self._open_players

    def open_player(self) -> str:
        """Register an open player and return the uri it should play."""
        if self._released or self._release_pending:
            raise RuntimeError(f"Playback handle {self.uri} already released")
        self._open_players += 1
        return self.uri

    def close_player(self) -> bool:
        """Unregister a player. Returns True if this close released the handle."""
        if self._open_players == 0:
            return False
        self._open_players -= 1
        if self._open_players == 0 and self._release_pending:
            self._do_release()
            return True
        return False

    def release(self) -> bool:
        """Release the handle, or defer it while players are open.

        Returns False if a release was already done or requested.
        """
        if self._released or self._release_pending:
            return False
        if self._open_players:
            logger.info("Release of %s deferred, %d open player(s)", self.uri, self._open_players)
            self._release_pending = True
            return True
        self._do_release()
        return True

    def _do_release(self) -> None:
        self._release_pending = False
        self._released = True
        if self._on_release is not None:
            self._on_release(self)
        logger.debug("Released playback handle %s", self.uri)

    def __repr__(self) -> str:
        if self._released:
            state = "released"
        elif self._release_pending:
            state = "release pending"
        else:
            state = "live"
        return f"<PlaybackHandle {self.uri} ({state})>"


@dataclass
class RecordingArtifact:
    """A finalised recording: owned bytes, metadata and a playback handle."""
    id: str
    name: str
    binary_data: bytes
    playback_handle: PlaybackHandle
    duration_seconds: int
    format: VideoFormat
    quality: VideoQuality
    created_at: float
    thumbnail: Optional[bytes] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def size_bytes(self) -> int:
        return len(self.binary_data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'uri': self.playback_handle.uri,
            'size_bytes': self.size_bytes,
            'duration_seconds': self.duration_seconds,
            'format': self.format.value,
            'quality': self.quality.value,
            'created_at': self.created_at,
            'has_thumbnail': self.thumbnail is not None,
        }
