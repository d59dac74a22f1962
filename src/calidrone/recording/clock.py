"""
Time, identity and timer collaborators injected into the recording core.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import Callable, Optional, Protocol

Clock = Callable[[], float]
IdFactory = Callable[[], str]


def system_clock() -> float:
    """Wall-clock seconds since the epoch."""
    return time.time()


def uuid_factory() -> str:
    return str(uuid.uuid4())


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs a callback once after ``delay`` seconds on the UI event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


__all__ = [
    "Clock",
    "IdFactory",
    "system_clock",
    "uuid_factory",
    "TimerHandle",
    "Scheduler",
    "AsyncioScheduler",
]
