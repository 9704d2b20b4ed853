"""Unit test fixtures for isolated, fast test execution.

Nothing here touches real hardware: controller tests run against
``FakeCamera`` and Camera tests against a mocked ``cv2`` module.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable
from unittest.mock import MagicMock

import numpy as np
import pytest

from tests.infrastructure.mocks import CameraFactory

FIXED_MOMENT = datetime(2024, 1, 1, 12, 0, 0)


# =============================================================================
# Camera Fixtures
# =============================================================================

@pytest.fixture
def camera_factory() -> CameraFactory:
    """Factory producing cameras that open and read successfully."""
    return CameraFactory()


@pytest.fixture
def make_camera_factory() -> Callable[..., CameraFactory]:
    """Build a factory with custom FakeCamera options (open_ok, failing_reads, ...)."""
    return CameraFactory


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock pinned to 2024-01-01 12:00:00."""
    return lambda: FIXED_MOMENT


# =============================================================================
# Mocked OpenCV
# =============================================================================

@pytest.fixture
def mock_cv2():
    """A MagicMock cv2 module with the constants Camera relies on."""
    mock = MagicMock()
    mock.CAP_PROP_FRAME_WIDTH = 3
    mock.CAP_PROP_FRAME_HEIGHT = 4
    mock.CAP_PROP_BUFFERSIZE = 38
    mock.CAP_MSMF = 1400
    return mock


@pytest.fixture
def mock_video_capture(mock_cv2):
    """VideoCapture mock that honours width/height set() calls."""
    mock_cap = MagicMock()
    mock_cap.isOpened.return_value = True

    props = {3: 0.0, 4: 0.0}

    def mock_set(prop_id, value):
        props[prop_id] = float(value)
        return True

    mock_cap.set.side_effect = mock_set
    mock_cap.get.side_effect = lambda prop_id: props.get(prop_id, 0.0)

    def mock_read():
        width, height = int(props[3]) or 640, int(props[4]) or 480
        return True, np.zeros((height, width, 3), dtype=np.uint8)

    mock_cap.read.side_effect = mock_read
    mock_cv2.VideoCapture.return_value = mock_cap
    return mock_cap
