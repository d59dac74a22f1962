"""Shared fixtures: deterministic clock, scheduler, ids and scripted devices."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

_SRC = Path(__file__).resolve().parent.parent / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from calidrone.config import reset_config  # noqa: E402
from calidrone.errors import CameraUnavailable, RecordingFailed  # noqa: E402


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class _ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose timers fire only when ``advance`` moves the clock."""

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self.handles: List[_ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self._clock.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> List[_ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float, step: float = 1.0) -> None:
        """Move time forward in ``step`` increments, firing due timers in order."""
        target = self._clock.now + seconds
        while self._clock.now < target:
            self._clock.now = min(self._clock.now + step, target)
            while True:
                due = [h for h in self.pending if h.due <= self._clock.now]
                if not due:
                    break
                handle = min(due, key=lambda h: h.due)
                handle.cancelled = True
                handle.callback()


class SequentialIds:
    def __init__(self, prefix: str = "id") -> None:
        self._prefix = prefix
        self._counter = 0

    def __call__(self) -> str:
        self._counter += 1
        return f"{self._prefix}-{self._counter}"


class DummyStream:
    def __init__(self) -> None:
        self.released = 0


class DummyEncoder:
    def __init__(self, chunks: Optional[List[bytes]] = None, fail: bool = False) -> None:
        self.chunks = chunks if chunks is not None else [b"frame-1", b"frame-2"]
        self.fail = fail
        self.stopped = False
        self.cancelled = False

    async def stop(self) -> List[bytes]:
        self.stopped = True
        if self.fail:
            raise RuntimeError("encoder crashed")
        return list(self.chunks)

    def cancel(self) -> None:
        self.cancelled = True


class DummyDevice:
    """Scripted camera: succeeds unless told which step should fail."""

    def __init__(self, *, unavailable: bool = False, encoder_fail: bool = False,
                 frame: Optional[bytes] = b"\x89PNG-still") -> None:
        self.unavailable = unavailable
        self.encoder_fail = encoder_fail
        self.frame = frame
        self.acquired: List[Dict[str, Any]] = []
        self.streams: List[DummyStream] = []
        self.encoders: List[DummyEncoder] = []
        self.encoder_args: List[tuple] = []

    async def acquire_video_stream(self, constraints: Dict[str, int]) -> DummyStream:
        self.acquired.append(dict(constraints))
        if self.unavailable:
            raise CameraUnavailable("Permission denied")
        stream = DummyStream()
        self.streams.append(stream)
        return stream

    def start_encoder(self, stream, video_format, bitrate) -> DummyEncoder:
        self.encoder_args.append((video_format, bitrate))
        encoder = DummyEncoder(fail=self.encoder_fail)
        self.encoders.append(encoder)
        return encoder

    async def grab_frame(self, stream) -> Optional[bytes]:
        return self.frame

    def release_stream(self, stream: DummyStream) -> None:
        stream.released += 1


class BrokenEncoderDevice(DummyDevice):
    def start_encoder(self, stream, video_format, bitrate):
        raise RecordingFailed("writer unavailable")


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    for key in ("CALIDRONE_CONFIG_FILE", "CALIDRONE_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def device() -> DummyDevice:
    return DummyDevice()


@pytest.fixture
def unavailable_device() -> DummyDevice:
    return DummyDevice(unavailable=True)


@pytest.fixture
def failing_encoder_device() -> DummyDevice:
    return DummyDevice(encoder_fail=True)


@pytest.fixture
def broken_encoder_device() -> BrokenEncoderDevice:
    return BrokenEncoderDevice()


@pytest.fixture
def make_session(clock, scheduler, ids):
    from calidrone.recording.session import RecordingSession

    def _make(device, **kwargs):
        return RecordingSession(device, clock=clock, id_factory=ids, scheduler=scheduler, **kwargs)

    return _make


@pytest.fixture
def make_shell(clock, scheduler, ids):
    from calidrone.shell import CaliDroneShell

    shells = []

    def _make(device=None):
        shell = CaliDroneShell(device or DummyDevice(), clock=clock, id_factory=ids, scheduler=scheduler)
        shells.append(shell)
        return shell

    yield _make
    for shell in shells:
        shell.shutdown()
