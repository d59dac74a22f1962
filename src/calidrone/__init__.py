"""Drone flight path planning and camera recording core."""

from .config import CaliDroneConfig, get_config
from .errors import (
    CaliDroneError,
    CameraUnavailable,
    IntegrityError,
    InvalidStateError,
    NotFoundError,
    RecordingFailed,
    ValidationError,
)
from .models import (
    CameraSettings,
    FeedSource,
    Path,
    PlaybackHandle,
    RecordingArtifact,
    RenderVec3,
    SessionStatus,
    VideoFormat,
    VideoQuality,
    Waypoint,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CaliDroneConfig",
    "get_config",
    "CaliDroneError",
    "CameraUnavailable",
    "IntegrityError",
    "InvalidStateError",
    "NotFoundError",
    "RecordingFailed",
    "ValidationError",
    "CameraSettings",
    "FeedSource",
    "Path",
    "PlaybackHandle",
    "RecordingArtifact",
    "RenderVec3",
    "SessionStatus",
    "VideoFormat",
    "VideoQuality",
    "Waypoint",
]
