"""Capture module - camera access, session state and the capture loop."""

from .camera import Camera
from .controller import CaptureController
from fixedcam.errors import (
    CaptureError,
    DeviceOpenError,
    FrameReadError,
    FrameWriteError,
    InvalidSettingsError,
)
from .frame import CapturedFrame
from .state import (
    SUPPORTED_RESOLUTIONS,
    CaptureState,
    Phase,
    SessionSettings,
)

__all__ = [
    "Camera",
    "CaptureController",
    "CaptureError",
    "CaptureState",
    "CapturedFrame",
    "DeviceOpenError",
    "FrameReadError",
    "FrameWriteError",
    "InvalidSettingsError",
    "Phase",
    "SUPPORTED_RESOLUTIONS",
    "SessionSettings",
]
