"""Hardware stand-ins used by unit tests."""

from .camera_mocks import CameraFactory, FakeCamera

__all__ = ["CameraFactory", "FakeCamera"]
