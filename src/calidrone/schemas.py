"""Request schema definitions for planner and recorder payloads."""

from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
from pydantic import conlist, field_validator

from .config import VALID_FRAMERATES, VALID_RESOLUTIONS
from .errors import ValidationError
from .models import CameraSettings, FeedSource, VideoFormat, VideoQuality

ModelT = TypeVar("ModelT", bound=BaseModel)


class AddPointPayload(BaseModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class UpdateSelectedPayload(BaseModel):
    x: float
    y: float
    z: float


class PickPayload(BaseModel):
    point: conlist(float, min_length=3, max_length=3)
    cell_size: Optional[float] = Field(default=None, gt=0)


class SelectPayload(BaseModel):
    index: int = Field(ge=0)


class ManualInputPayload(BaseModel):
    x: Optional[str] = None
    y: Optional[str] = None
    z: Optional[str] = None


class RenamePayload(BaseModel):
    name: str = Field(default="", max_length=200)


class PathIdPayload(BaseModel):
    path_id: str = Field(min_length=1)


class RecordingIdPayload(BaseModel):
    recording_id: str = Field(min_length=1)


class FeedSourcePayload(BaseModel):
    feed_source: FeedSource


class ZoomPayload(BaseModel):
    zoom: float = Field(allow_inf_nan=False)


class ExportPayload(BaseModel):
    directory: Optional[str] = None
    recording_id: Optional[str] = None


class CameraSettingsPayload(BaseModel):
    format: VideoFormat = VideoFormat.MP4
    quality: VideoQuality = VideoQuality.HIGH
    framerate: int = 30
    resolution: str = "1920x1080"

    @field_validator('framerate')
    @classmethod
    def _check_framerate(cls, value: int) -> int:
        if value not in VALID_FRAMERATES:
            raise ValueError(f"framerate must be one of {VALID_FRAMERATES}")
        return value

    @field_validator('resolution')
    @classmethod
    def _check_resolution(cls, value: str) -> str:
        if value not in VALID_RESOLUTIONS:
            raise ValueError(f"resolution must be one of {VALID_RESOLUTIONS}")
        return value

    def to_settings(self) -> CameraSettings:
        width, height = (int(v) for v in self.resolution.split('x'))
        return CameraSettings(
            format=self.format,
            quality=self.quality,
            framerate=self.framerate,
            resolution=(width, height),
        )


def parse_payload(model_cls: Type[ModelT], data: Optional[Dict[str, Any]]) -> ModelT:
    """Build ``model_cls`` from ``data``; failures become ValidationError."""
    try:
        return model_cls(**(data or {}))
    except PydanticValidationError as exc:
        fields = ['.'.join(str(part) for part in err['loc']) for err in exc.errors()]
        raise ValidationError(
            f"Invalid {model_cls.__name__}: {', '.join(fields) or 'payload'}",
            details={'fields': fields, 'errors': [err['msg'] for err in exc.errors()]},
        ) from exc


__all__ = [
    "AddPointPayload",
    "UpdateSelectedPayload",
    "PickPayload",
    "SelectPayload",
    "ManualInputPayload",
    "RenamePayload",
    "PathIdPayload",
    "RecordingIdPayload",
    "FeedSourcePayload",
    "ZoomPayload",
    "ExportPayload",
    "CameraSettingsPayload",
    "parse_payload",
]
