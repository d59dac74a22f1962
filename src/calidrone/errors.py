"""Domain-specific errors for the planner and camera core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


@dataclass
class ErrorPayload:
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": False,
            "error_code": self.code,
            "error": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


def error_response(code: str, message: str, *, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return ErrorPayload(code, message, details).to_dict()


class ErrorKind(str, Enum):
    """Last error recorded on a recording session."""

    CAMERA_UNAVAILABLE = "camera_unavailable"
    RECORDING_FAILED = "recording_failed"


class CaliDroneError(Exception):
    """Base exception for core failures."""

    code = "CALIDRONE_ERROR"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        return error_response(self.code, self.message, details=self.details)


class ValidationError(CaliDroneError):
    """User-correctable input problem; the operation made no change."""

    code = "VALIDATION_ERROR"


class IntegrityError(CaliDroneError):
    """Programmer error such as a duplicate catalog id."""

    code = "INTEGRITY_ERROR"


class CameraUnavailable(CaliDroneError):
    code = "CAMERA_UNAVAILABLE"


class InvalidStateError(CaliDroneError):
    """Operation not allowed in the current session state."""

    code = "INVALID_STATE"


class NotFoundError(CaliDroneError):
    code = "NOT_FOUND"


class RecordingFailed(CaliDroneError):
    code = "RECORDING_FAILED"


__all__ = [
    "ErrorKind",
    "CaliDroneError",
    "ValidationError",
    "IntegrityError",
    "CameraUnavailable",
    "InvalidStateError",
    "NotFoundError",
    "RecordingFailed",
    "error_response",
]
