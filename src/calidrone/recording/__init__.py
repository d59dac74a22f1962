from .catalog import RecordingCatalog
from .clock import AsyncioScheduler, system_clock, uuid_factory
from .devices import DEMO_RECORDING_BYTES, DemoVideoDevice
from .session import RecordingSession

__all__ = [
    "RecordingCatalog",
    "RecordingSession",
    "DemoVideoDevice",
    "DEMO_RECORDING_BYTES",
    "AsyncioScheduler",
    "system_clock",
    "uuid_factory",
]
