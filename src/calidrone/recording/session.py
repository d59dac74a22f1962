"""
Recording session state machine.

    idle     --start()-->            acquiring   (live feed)
    idle     --start()-->            recording   (demo feed)
    acquiring --acquired-->          recording
    acquiring --CameraUnavailable--> errored     (feed forced to demo)
    errored  --start()-->            recording   (demo feed)
    recording --stop() / auto-stop--> stopped    (artifact produced)
    stopped  --start()-->            acquiring or recording, by feed source

Transitions that depend on the device are applied only once the awaited
device call resolves. A one second tick recomputes the elapsed time from the
clock while recording and is cancelled on every exit from ``recording``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Optional

from ..config import get_config
from ..errors import CameraUnavailable, ErrorKind, InvalidStateError, RecordingFailed
from ..formatting import format_timestamp
from ..models import (
    CameraSettings,
    FeedSource,
    PlaybackHandle,
    RecordingArtifact,
    SessionStatus,
)
from .clock import AsyncioScheduler, Clock, IdFactory, Scheduler, TimerHandle, system_clock, uuid_factory
from .devices import DEMO_RECORDING_BYTES, Encoder, VideoDevice

logger = logging.getLogger(__name__)

ArtifactListener = Callable[[RecordingArtifact], None]
TickListener = Callable[[int], None]

_BUSY = (SessionStatus.ACQUIRING, SessionStatus.RECORDING)


class RecordingSession:
    """Drives one camera feed through acquisition, recording and finalisation."""

    def __init__(
        self,
        device: VideoDevice,
        *,
        clock: Clock = system_clock,
        id_factory: IdFactory = uuid_factory,
        scheduler: Optional[Scheduler] = None,
        settings: Optional[CameraSettings] = None,
        feed_source: FeedSource = FeedSource.LIVE,
        config=None,
    ):
        self._device = device
        self._clock = clock
        self._id_factory = id_factory
        self._scheduler = scheduler or AsyncioScheduler()
        self._config = config or get_config()
        self._settings = settings or CameraSettings.from_config(self._config)

        self._feed_source = FeedSource(feed_source)
        self._status = SessionStatus.IDLE
        self._started_at: Optional[float] = None
        self._elapsed = 0
        self._last_error: Optional[ErrorKind] = None
        self._zoom = 1.0

        # what the in-flight recording was started with
        self._active_source: Optional[FeedSource] = None
        self._active_settings: Optional[CameraSettings] = None
        self._stream: Any = None
        self._encoder: Optional[Encoder] = None
        self._finalizing = False

        self._tick_handle: Optional[TimerHandle] = None
        self._auto_stop_handle: Optional[TimerHandle] = None

        self._last_artifact: Optional[RecordingArtifact] = None
        self._artifact_listeners: List[ArtifactListener] = []
        self._tick_listeners: List[TickListener] = []

    # ------------------------------------------------------------------
    # State accessors
    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def feed_source(self) -> FeedSource:
        return self._feed_source

    @property
    def started_at(self) -> Optional[float]:
        return self._started_at

    @property
    def elapsed_seconds(self) -> int:
        if self._status is SessionStatus.RECORDING and self._started_at is not None:
            return max(0, int(self._clock() - self._started_at))
        return 0

    @property
    def last_error(self) -> Optional[ErrorKind]:
        return self._last_error

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def settings(self) -> CameraSettings:
        return self._settings

    @property
    def last_artifact(self) -> Optional[RecordingArtifact]:
        """The most recent finalised recording, kept even if a listener rejected it."""
        return self._last_artifact

    @property
    def has_live_stream(self) -> bool:
        return self._stream is not None

    def snapshot(self) -> Dict[str, Any]:
        return {
            'status': self._status.value,
            'feed_source': self._feed_source.value,
            'started_at': self._started_at,
            'elapsed_seconds': self.elapsed_seconds,
            'last_error': self._last_error.value if self._last_error else None,
            'zoom': self._zoom,
            'format': self._settings.format.value,
            'quality': self._settings.quality.value,
        }

    def add_artifact_listener(self, listener: ArtifactListener) -> None:
        self._artifact_listeners.append(listener)

    def add_tick_listener(self, listener: TickListener) -> None:
        self._tick_listeners.append(listener)

    # ------------------------------------------------------------------
    # Configuration that does not drive the state machine
    def set_feed_source(self, source: FeedSource) -> FeedSource:
        source = FeedSource(source)
        if self._status in _BUSY:
            logger.warning("Feed source change to %s rejected while %s", source.value, self._status.value)
            raise InvalidStateError(
                f"Cannot change feed source while {self._status.value}",
                details={'status': self._status.value, 'feed_source': self._feed_source.value},
            )
        if source is not self._feed_source:
            logger.info("Feed source %s -> %s", self._feed_source.value, source.value)
        self._feed_source = source
        return source

    def toggle_feed_source(self) -> FeedSource:
        other = FeedSource.DEMO if self._feed_source is FeedSource.LIVE else FeedSource.LIVE
        return self.set_feed_source(other)

    def update_settings(self, settings: CameraSettings) -> CameraSettings:
        """Replace the encoder settings; they apply from the next start()."""
        self._settings = settings
        logger.debug("Camera settings now %s", settings)
        return settings

    def set_zoom(self, value: float) -> float:
        value = float(value)
        if not math.isfinite(value):
            logger.warning("Zoom %s ignored, keeping %s", value, self._zoom)
            return self._zoom
        self._zoom = min(max(value, self._config.zoom_min), self._config.zoom_max)
        return self._zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self._zoom + self._config.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self._zoom - self._config.zoom_step)

    # ------------------------------------------------------------------
    # State machine
    async def start(self) -> SessionStatus:
        if self._status in _BUSY:
            logger.warning("start() rejected while %s", self._status.value)
            raise InvalidStateError(
                f"Cannot start while {self._status.value}",
                details={'status': self._status.value},
            )

        settings = self._settings
        if self._feed_source is FeedSource.DEMO:
            self._begin_recording(FeedSource.DEMO, settings)
            return self._status

        self._status = SessionStatus.ACQUIRING
        logger.info("Acquiring live camera stream %s", settings.constraints())
        try:
            stream = await self._device.acquire_video_stream(settings.constraints())
        except CameraUnavailable as exc:
            self._fall_back_to_demo(exc)
            return self._status

        if self._status is not SessionStatus.ACQUIRING:
            # torn down while waiting on the device
            self._device.release_stream(stream)
            return self._status

        try:
            encoder = self._device.start_encoder(stream, settings.format, settings.bitrate)
        except CameraUnavailable as exc:
            self._device.release_stream(stream)
            self._fall_back_to_demo(exc)
            return self._status
        except RecordingFailed:
            self._device.release_stream(stream)
            self._status = SessionStatus.ERRORED
            self._last_error = ErrorKind.RECORDING_FAILED
            logger.error("Encoder could not be started")
            raise

        self._stream = stream
        self._encoder = encoder
        self._begin_recording(FeedSource.LIVE, settings)
        return self._status

    async def stop(self) -> Optional[RecordingArtifact]:
        """Finalise the in-flight recording. No-op unless recording."""
        if self._status is not SessionStatus.RECORDING or self._finalizing:
            logger.debug("stop() ignored while %s", self._status.value)
            return None

        self._finalizing = True
        self._cancel_timers()
        ended_at = self._clock()

        if self._active_source is FeedSource.DEMO:
            return self._complete([DEMO_RECORDING_BYTES], ended_at)

        try:
            chunks = await self._encoder.stop()
        except Exception as exc:
            self._fail_recording(exc)
            raise RecordingFailed("Recording could not be finalised", details={'error': str(exc)}) from exc

        if self._status is not SessionStatus.RECORDING:
            # torn down while the encoder was finishing
            self._finalizing = False
            return None
        return self._complete(chunks, ended_at)

    async def take_screenshot(self) -> Optional[bytes]:
        """Grab a still from the live stream; None when there is no stream."""
        if self._stream is None:
            logger.debug("Screenshot skipped, no live stream")
            return None
        frame = await self._device.grab_frame(self._stream)
        logger.info("Screenshot captured (%d bytes)", len(frame) if frame else 0)
        return frame

    def teardown(self) -> None:
        """Cancel timers, abandon any capture and release the device."""
        self._cancel_timers()
        if self._encoder is not None:
            self._encoder.cancel()
            self._encoder = None
        self._release_stream()
        self._status = SessionStatus.IDLE
        self._started_at = None
        self._elapsed = 0
        self._active_source = None
        self._active_settings = None
        self._finalizing = False
        logger.info("Recording session torn down")

    # ------------------------------------------------------------------
    # Internal helpers
    def _begin_recording(self, source: FeedSource, settings: CameraSettings) -> None:
        self._status = SessionStatus.RECORDING
        self._started_at = self._clock()
        self._elapsed = 0
        self._active_source = source
        self._active_settings = settings
        self._arm_tick()
        if source is FeedSource.DEMO:
            self._auto_stop_handle = self._scheduler.call_later(
                self._config.demo_auto_stop_seconds, self._on_auto_stop
            )
        logger.info("Recording started (%s, %s/%s)", source.value, settings.format.value, settings.quality.value)

    def _fall_back_to_demo(self, exc: CameraUnavailable) -> None:
        self._status = SessionStatus.ERRORED
        self._feed_source = FeedSource.DEMO
        self._last_error = ErrorKind.CAMERA_UNAVAILABLE
        logger.warning("Camera unavailable (%s); falling back to demo feed", exc.message)

    def _fail_recording(self, exc: BaseException) -> None:
        logger.error("Recording finalisation failed: %s", exc)
        self._encoder = None
        self._release_stream()
        self._status = SessionStatus.ERRORED
        self._last_error = ErrorKind.RECORDING_FAILED
        self._started_at = None
        self._elapsed = 0
        self._active_source = None
        self._active_settings = None
        self._finalizing = False

    def _complete(self, chunks: List[bytes], ended_at: float) -> RecordingArtifact:
        settings = self._active_settings or self._settings
        duration = max(0, int(ended_at - self._started_at))
        artifact_id = self._id_factory()
        artifact = RecordingArtifact(
            id=artifact_id,
            name=f"Recording {format_timestamp(ended_at)}",
            binary_data=b"".join(chunks),
            playback_handle=PlaybackHandle(f"memory://calidrone/recordings/{artifact_id}"),
            duration_seconds=duration,
            format=settings.format,
            quality=settings.quality,
            created_at=ended_at,
            metadata={'feed_source': self._active_source.value, 'framerate': settings.framerate},
        )

        self._encoder = None
        self._release_stream()
        self._status = SessionStatus.STOPPED
        self._started_at = None
        self._elapsed = 0
        self._active_source = None
        self._active_settings = None
        self._finalizing = False
        logger.info("Recording stopped: %s, %ds, %d bytes", artifact.id, duration, artifact.size_bytes)

        self._last_artifact = artifact
        for listener in list(self._artifact_listeners):
            try:
                listener(artifact)
            except Exception:
                logger.exception("Artifact listener failed for recording %s", artifact.id)
        return artifact

    def _arm_tick(self) -> None:
        self._tick_handle = self._scheduler.call_later(self._config.tick_interval_seconds, self._on_tick)

    def _on_tick(self) -> None:
        self._tick_handle = None
        if self._status is not SessionStatus.RECORDING or self._finalizing:
            return
        self._elapsed = self.elapsed_seconds
        for listener in list(self._tick_listeners):
            listener(self._elapsed)
        self._arm_tick()

    def _on_auto_stop(self) -> None:
        self._auto_stop_handle = None
        if self._status is not SessionStatus.RECORDING or self._finalizing:
            return
        if self._active_source is not FeedSource.DEMO:
            return
        logger.info("Demo recording reached %ds, stopping", self._config.demo_auto_stop_seconds)
        self._finalizing = True
        self._cancel_timers()
        self._complete([DEMO_RECORDING_BYTES], self._clock())

    def _cancel_timers(self) -> None:
        for attr in ('_tick_handle', '_auto_stop_handle'):
            handle = getattr(self, attr)
            if handle is not None:
                handle.cancel()
                setattr(self, attr, None)

    def _release_stream(self) -> None:
        if self._stream is not None:
            self._device.release_stream(self._stream)
            self._stream = None


__all__ = ["RecordingSession"]
