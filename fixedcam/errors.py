"""Exceptions shared by the capture and imaging packages."""

from __future__ import annotations

from pathlib import Path


class CaptureError(Exception):
    """Base class for capture failures."""


class InvalidSettingsError(CaptureError, ValueError):
    """Session settings rejected before the device is touched."""


class DeviceOpenError(CaptureError):
    def __init__(self, device_index: int, reason: str = "device unavailable"):
        self.device_index = device_index
        self.reason = reason
        super().__init__(f"Failed to open camera {device_index}: {reason}")


class FrameReadError(CaptureError):
    def __init__(self, device_index: int):
        self.device_index = device_index
        super().__init__(f"Camera {device_index} returned no frame")


class FrameWriteError(CaptureError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")
