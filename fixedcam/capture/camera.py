"""Camera access using OpenCV."""

import os
import sys

# MSMF hardware transforms make device open take several seconds on Windows.
# See: https://github.com/opencv/opencv/issues/17687
if sys.platform == "win32":
    os.environ.setdefault("OPENCV_VIDEOIO_MSMF_ENABLE_HW_TRANSFORMS", "0")

import logging
import time
from typing import Optional

import cv2
import numpy as np

from fixedcam.errors import FrameReadError

logger = logging.getLogger(__name__)


class Camera:
    """Single OpenCV capture device read one frame at a time.

    Unlike a streaming capture there is no reader thread: the owner calls
    :meth:`read` once per tick and the driver buffer is kept at one frame so
    each read returns a current image rather than a stale queued one.
    """

    def __init__(self, device_index: int, resolution: tuple[int, int]):
        """Initialize camera.

        Args:
            device_index: OpenCV device index
            resolution: Requested resolution (width, height)
        """
        self._device_index = device_index
        self._resolution = resolution
        self._cap: Optional[cv2.VideoCapture] = None
        self._actual_resolution = resolution

    def open(self) -> bool:
        """Open and configure the device. Returns True on success."""
        start_time = time.time()
        if sys.platform == "win32":
            self._cap = cv2.VideoCapture(self._device_index, cv2.CAP_MSMF)
        else:
            self._cap = cv2.VideoCapture(self._device_index)
        logger.debug("cv2.VideoCapture(%s) took %.2f seconds", self._device_index, time.time() - start_time)

        if not self._cap or not self._cap.isOpened():
            logger.error("Failed to open camera: %s", self._device_index)
            if self._cap is not None:
                self._cap.release()
            self._cap = None
            return False

        width, height = self._resolution
        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

        self._actual_resolution = (
            int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
        if self._actual_resolution != self._resolution:
            logger.warning(
                "Camera %s negotiated %dx%d instead of requested %dx%d",
                self._device_index,
                *self._actual_resolution,
                *self._resolution,
            )

        logger.info(
            "Camera opened: device=%s, resolution=%dx%d",
            self._device_index,
            *self._actual_resolution,
        )
        return True

    def read(self) -> np.ndarray:
        """Read one frame. Raises FrameReadError when the device gives nothing."""
        if self._cap is None:
            raise FrameReadError(self._device_index)
        ok, frame = self._cap.read()
        if not ok or frame is None or frame.size == 0:
            raise FrameReadError(self._device_index)
        return frame

    def close(self) -> None:
        """Release the device handle."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info("Camera %s closed", self._device_index)

    @property
    def device_index(self) -> int:
        return self._device_index

    @property
    def requested_resolution(self) -> tuple[int, int]:
        return self._resolution

    @property
    def resolution(self) -> tuple[int, int]:
        """Resolution reported by the driver after configuration."""
        return self._actual_resolution

    @property
    def is_open(self) -> bool:
        return self._cap is not None
